"""
Matrix persistence: the binary format and ASCII/CSV text files.

Binary layout (all integers and components big-endian):

    u16    length of the tag in bytes
    bytes  tag, 'double' or 'float' (complex kinds use their component tag)
    i32    columns
    i32    rows
    i32    number of stored components (2 per element for complex kinds)
    ...    components in column-major order, (re, im) pairs for complex kinds

The functions take the matrix class to build as an argument so that this
module does not depend on the matrix implementation.
"""

import logging
import re
import struct
from pathlib import Path

import numpy as np

from pymatrix.core.exceptions import MatrixFormatError


logger = logging.getLogger(__name__)

_HEADER = struct.Struct('>iii')
_TAG_LENGTH = struct.Struct('>H')
_WHITESPACE = re.compile(r'\s+')


def _big_endian(dtype: np.dtype) -> np.dtype:
    return np.dtype(dtype).newbyteorder('>')


def _read_exact(stream, n: int, path) -> bytes:
    chunk = stream.read(n)
    if len(chunk) != n:
        raise MatrixFormatError(f"unexpected end of file (wanted {n} bytes, got {len(chunk)})",
                                path=str(path))
    return chunk


def save(matrix, path) -> None:
    """Write ``matrix`` in the binary format."""
    kind = matrix.kind
    tag = kind.tag.encode('utf-8')
    components = matrix.data.view(kind.component_dtype)
    with open(path, 'wb') as stream:
        stream.write(_TAG_LENGTH.pack(len(tag)))
        stream.write(tag)
        stream.write(_HEADER.pack(matrix.columns, matrix.rows, components.shape[0]))
        stream.write(components.astype(_big_endian(kind.component_dtype)).tobytes())
    logger.debug("saved %s %dx%d to %s", kind.name, matrix.rows, matrix.columns, path)


def load(cls, path):
    """
    Read a matrix of class ``cls`` from the binary format.

    Raises:
        MatrixFormatError: On a tag of another type, a component count that
            does not match the dimensions, or a truncated file
    """
    kind = cls.kind
    with open(path, 'rb') as stream:
        (tag_length,) = _TAG_LENGTH.unpack(_read_exact(stream, _TAG_LENGTH.size, path))
        tag = _read_exact(stream, tag_length, path).decode('utf-8', errors='replace')
        if tag != kind.tag:
            raise MatrixFormatError(
                f"the matrix in {path} is not of the correct type: "
                f"expected {kind.tag!r}, found {tag!r}",
                path=str(path),
            )
        columns, rows, count = _HEADER.unpack(_read_exact(stream, _HEADER.size, path))
        expected = rows * columns * kind.components_per_element
        if rows < 0 or columns < 0 or count != expected:
            raise MatrixFormatError(
                f"{path}: {count} stored components do not form a {rows}x{columns} "
                f"{kind.name} matrix (expected {expected})",
                path=str(path),
            )
        width = kind.component_dtype.itemsize
        raw = _read_exact(stream, count * width, path)
    components = np.frombuffer(raw, dtype=_big_endian(kind.component_dtype))
    data = components.astype(kind.component_dtype).view(kind.dtype)
    return cls(rows, columns, data)


def _read_rows(cls, path, separator: re.Pattern):
    parse = complex if cls.kind.is_complex else float
    rows = []
    with open(path, 'r') as stream:
        for number, line in enumerate(stream, start=1):
            if not line.strip():
                continue
            fields = separator.split(line.strip())
            if rows and len(fields) != len(rows[0]):
                raise MatrixFormatError(
                    f"Number of elements changes in line {line.rstrip()!r}.",
                    path=str(path),
                    line=number,
                )
            try:
                rows.append([parse(field) for field in fields])
            except ValueError as e:
                raise MatrixFormatError(f"cannot parse line {line.rstrip()!r}",
                                        path=str(path), line=number) from e
    if not rows:
        return cls.empty()
    return cls.from_rows(rows)


def load_ascii(cls, path):
    """
    Read whitespace separated values, one matrix row per line.

    Raises:
        MatrixFormatError: If the number of values changes between lines
    """
    return _read_rows(cls, path, _WHITESPACE)


def load_csv(cls, path):
    """
    Read comma separated values, one matrix row per line.

    Raises:
        MatrixFormatError: If the number of values changes between lines
    """
    return _read_rows(cls, path, re.compile(r'\s*,\s*'))


def save_ascii(matrix, path) -> None:
    """Write one line per row, values separated by tabs."""
    grid = matrix.to_array2()
    Path(path).write_text(
        ''.join('\t'.join(repr(v.item()) for v in row) + '\n' for row in grid)
    )
