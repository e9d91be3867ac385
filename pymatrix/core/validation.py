"""
Shape contract checks for pymatrix.

These validators follow the "fail fast, fail loud" principle. They raise
SizeMismatchError immediately with the expected and actual sizes rather
than silently broadcasting or reallocating.

Design principles:
    - Each function validates ONE contract
    - Operand names included in all error messages
    - Work on anything with ``rows``, ``columns`` and ``length``
"""

from typing import Protocol

from pymatrix.core.exceptions import SizeMismatchError, ValidationError


class Shaped(Protocol):
    rows: int
    columns: int
    length: int


def _shape(m: Shaped) -> str:
    return f"{m.rows}x{m.columns}"


def check_same_size(a: Shaped, b: Shaped, name_a: str = "a", name_b: str = "b") -> None:
    """
    Require equal row and column counts.

    Raises:
        SizeMismatchError: If the shapes differ
    """
    if a.rows != b.rows or a.columns != b.columns:
        raise SizeMismatchError(
            f"{name_b}: matrices must have the same size, "
            f"{name_a} is {_shape(a)} but {name_b} is {_shape(b)}",
            expected=(a.rows, a.columns),
            actual=(b.rows, b.columns),
        )


def check_same_length(a: Shaped, b: Shaped, name_a: str = "a", name_b: str = "b") -> None:
    """
    Require equal element counts, whatever the shapes.

    A 3x3 and a 1x9 matrix have the same length and may be combined
    elementwise.

    Raises:
        SizeMismatchError: If the lengths differ
    """
    if a.length != b.length:
        raise SizeMismatchError(
            f"{name_b}: matrices must have the same length, "
            f"{name_a} has {a.length} elements but {name_b} has {b.length}",
            expected=a.length,
            actual=b.length,
        )


def check_multiplies_with(a: Shaped, b: Shaped, name_a: str = "a", name_b: str = "b") -> None:
    """
    Require ``a.columns == b.rows`` for the matrix product a @ b.

    Raises:
        SizeMismatchError: If the inner dimensions differ
    """
    if a.columns != b.rows:
        raise SizeMismatchError(
            f"{name_b}: number of columns of {name_a} ({_shape(a)}) must equal "
            f"number of rows of {name_b} ({_shape(b)})",
            expected=a.columns,
            actual=b.rows,
        )


def check_square(a: Shaped, name: str = "a") -> None:
    """
    Require a square matrix.

    Raises:
        SizeMismatchError: If rows != columns
    """
    if a.rows != a.columns:
        raise SizeMismatchError(
            f"{name}: matrix must be square, got {_shape(a)}",
            expected=(a.rows, a.rows),
            actual=(a.rows, a.columns),
        )


def check_length(a: Shaped, length: int, name: str = "a") -> None:
    """
    Require an exact element count.

    Raises:
        SizeMismatchError: If a.length != length
    """
    if a.length != length:
        raise SizeMismatchError(
            f"{name}: matrix does not have the necessary length "
            f"({a.length} != {length})",
            expected=length,
            actual=a.length,
        )


def check_rows(a: Shaped, rows: int, name: str = "a") -> None:
    """
    Require an exact row count.

    Raises:
        SizeMismatchError: If a.rows != rows
    """
    if a.rows != rows:
        raise SizeMismatchError(
            f"{name}: matrix does not have the necessary number of rows "
            f"({a.rows} != {rows})",
            expected=rows,
            actual=a.rows,
        )


def check_columns(a: Shaped, columns: int, name: str = "a") -> None:
    """
    Require an exact column count.

    Raises:
        SizeMismatchError: If a.columns != columns
    """
    if a.columns != columns:
        raise SizeMismatchError(
            f"{name}: matrix does not have the necessary number of columns "
            f"({a.columns} != {columns})",
            expected=columns,
            actual=a.columns,
        )


def check_dimensions(rows: int, columns: int) -> None:
    """
    Require non-negative integer dimensions.

    Raises:
        ValidationError: If either dimension is negative
    """
    if rows < 0 or columns < 0:
        raise ValidationError(
            f"dimensions must be non-negative, got {rows}x{columns}"
        )


def check_index(index: int, bound: int, name: str) -> None:
    """
    Require ``0 <= index < bound``.

    Raises:
        IndexError: If the index is out of range
    """
    if not 0 <= index < bound:
        raise IndexError(f"{name} {index} out of range [0, {bound})")


def check_real(a, operation: str) -> None:
    """
    Require a real scalar kind.

    Raises:
        ValidationError: If ``a`` holds complex elements
    """
    if a.kind.is_complex:
        raise ValidationError(
            f"{operation}: only real matrices are supported, got {a.kind.name}"
        )
