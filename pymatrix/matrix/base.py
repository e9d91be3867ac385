"""
Generic dense matrix over a scalar kind.

One implementation serves all four element types. Concrete classes
(DoubleMatrix, FloatMatrix, ComplexDoubleMatrix, ComplexFloatMatrix) only
bind ``kind`` and add the operations that make sense for real or complex
elements.

Storage is a contiguous 1-D numpy buffer in column-major order: element
(r, c) lives at ``r + rows * c``. Complex kinds store numpy complex
elements, which interleave real and imaginary components in memory.

Every binary operation comes in three forms:

    a.addi(b, result)   writes a + b into result and returns it
    a.addi(b)           same with result = a
    a.add(b)            allocates a fresh result

Mutating methods return the receiver so calls may be chained; the
returned object is always the matrix that was written.
"""

import numbers
from typing import Callable, Iterable, Sequence

import numpy as np
from numpy.typing import ArrayLike

from pymatrix.core.backends.precision import ScalarKind
from pymatrix.core.compute import blas
from pymatrix.core.compute.tolerances import select_tolerance
from pymatrix.core.exceptions import MatrixFormatError, SizeMismatchError, ValidationError
from pymatrix.core.validation import (
    check_columns,
    check_dimensions,
    check_index,
    check_length,
    check_multiplies_with,
    check_rows,
    check_same_length,
    check_square,
)
from pymatrix.matrix import io as matrix_io
from pymatrix.matrix._aliasing import Aliasing, prepare_result


_CLASSES: dict[ScalarKind, type["Matrix"]] = {}


def register(cls: type["Matrix"]) -> type["Matrix"]:
    """Class decorator recording the concrete matrix class of a kind."""
    _CLASSES[cls.kind] = cls
    return cls


def matrix_class(kind: ScalarKind) -> type["Matrix"]:
    """Concrete matrix class for a scalar kind."""
    return _CLASSES[kind]


# ═══════════════════════════════════════════════════════════════════════
# Elementwise kernels
# ═══════════════════════════════════════════════════════════════════════


def _rsubtract(a, b, out):
    return np.subtract(b, a, out=out)


def _rdivide(a, b, out):
    return np.divide(b, a, out=out)


def _logical_and(a, b, out):
    return np.logical_and(np.not_equal(a, 0), np.not_equal(b, 0), out=out)


def _logical_or(a, b, out):
    return np.logical_or(np.not_equal(a, 0), np.not_equal(b, 0), out=out)


def _logical_xor(a, b, out):
    return np.logical_xor(np.not_equal(a, 0), np.not_equal(b, 0), out=out)


_KERNELS: dict[str, Callable] = {
    'add': np.add,
    'sub': np.subtract,
    'rsub': _rsubtract,
    'mul': np.multiply,
    'div': np.divide,
    'rdiv': _rdivide,
    'lt': np.less,
    'gt': np.greater,
    'le': np.less_equal,
    'ge': np.greater_equal,
    'eq': np.equal,
    'ne': np.not_equal,
    'and': _logical_and,
    'or': _logical_or,
    'xor': _logical_xor,
    'min': np.minimum,
    'max': np.maximum,
}

# Arithmetic with a scalar left operand is rewritten as the mirrored
# operation on the right operand.
_MIRRORED = {
    'add': 'add',
    'mul': 'mul',
    'sub': 'rsub',
    'rsub': 'sub',
    'div': 'rdiv',
    'rdiv': 'div',
}


def _is_number(value) -> bool:
    return isinstance(value, (numbers.Number, np.generic))


class Matrix:
    """
    Dense column-major matrix.

    Args:
        rows: Number of rows
        columns: Number of columns
        data: Optional 1-D buffer of exactly ``rows * columns`` elements.
            A numpy array of the matrix's dtype is used as storage without
            copying (the matrix and the caller share it); any other
            sequence is copied.

    Raises:
        ValidationError: For negative dimensions or an unusable buffer
        SizeMismatchError: If the buffer length is not rows * columns
    """

    kind: ScalarKind

    __hash__ = None

    def __init__(self, rows: int = 0, columns: int = 0, data: ArrayLike | None = None):
        check_dimensions(rows, columns)
        length = rows * columns
        if data is None:
            data = self.kind.zeros(length)
        elif isinstance(data, np.ndarray):
            if data.ndim != 1:
                raise ValidationError(f"data: expected a 1-D buffer, got {data.ndim} dimensions")
            if data.dtype != self.kind.dtype:
                raise ValidationError(
                    f"data: expected dtype {self.kind.dtype}, got {data.dtype}"
                )
            if not data.flags.c_contiguous:
                raise ValidationError("data: buffer must be contiguous")
        else:
            data = np.array(data, dtype=self.kind.dtype).ravel()
        if data.shape[0] != length:
            raise SizeMismatchError(
                f"data: buffer of length {data.shape[0]} cannot hold a {rows}x{columns} matrix",
                expected=length,
                actual=data.shape[0],
            )
        self.rows = rows
        self.columns = columns
        self.length = length
        self.data = data

    # === Construction ===

    @classmethod
    def empty(cls):
        """The canonical 0x0 matrix."""
        return cls(0, 0)

    @classmethod
    def zeros(cls, rows: int, columns: int = 1):
        return cls(rows, columns)

    @classmethod
    def ones(cls, rows: int, columns: int = 1):
        return cls(rows, columns).fill(1)

    @classmethod
    def eye(cls, n: int):
        """n x n identity matrix."""
        m = cls(n, n)
        m.data[::n + 1] = 1
        return m

    @classmethod
    def scalar(cls, value):
        """1x1 matrix holding ``value``."""
        return cls(1, 1).fill(value)

    @classmethod
    def diag(cls, x: "Matrix", rows: int | None = None, columns: int | None = None):
        """
        Matrix with the elements of vector ``x`` on its diagonal.

        Args:
            x: Diagonal values
            rows: Rows of the result (default x.length)
            columns: Columns of the result (default x.length)

        Raises:
            ValidationError: If x is not of this class's kind
            SizeMismatchError: If x is longer than either dimension
        """
        if x.kind is not cls.kind:
            raise ValidationError(
                f"x: expected a {cls.kind.name} matrix, got a {x.kind.name} matrix"
            )
        rows = x.length if rows is None else rows
        columns = x.length if columns is None else columns
        if x.length > rows or x.length > columns:
            raise SizeMismatchError(
                f"x: diagonal of length {x.length} does not fit a {rows}x{columns} matrix",
                expected=min(rows, columns),
                actual=x.length,
            )
        m = cls(rows, columns)
        blas.routine(m.kind, 'copy')(x.length, x.data, 0, 1, m.data, 0, rows + 1)
        return m

    @classmethod
    def from_array(cls, values: ArrayLike):
        """
        Copy a 1-D (column vector) or 2-D array-like into a new matrix.

        Raises:
            ValidationError: If the values are ragged or have more than 2 dimensions
        """
        try:
            array = np.array(values, dtype=cls.kind.dtype)
        except ValueError as e:
            raise ValidationError(f"values: cannot build a matrix: {e}") from e
        if array.ndim == 0:
            array = array.reshape(1, 1)
        elif array.ndim == 1:
            array = array.reshape(-1, 1)
        elif array.ndim > 2:
            raise ValidationError(f"values: expected at most 2 dimensions, got {array.ndim}")
        return cls._from_grid(array)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence]):
        """
        Build a matrix from a list of rows.

        Example:
            >>> DoubleMatrix.from_rows([[1, 2, 3], [4, 5, 6]]).columns
            3
        """
        rows = [list(row) for row in rows]
        if not rows:
            return cls.empty()
        width = len(rows[0])
        for i, row in enumerate(rows):
            if len(row) != width:
                raise SizeMismatchError(
                    f"rows: row {i} has {len(row)} values, row 0 has {width}",
                    expected=width,
                    actual=len(row),
                )
        return cls._from_grid(np.array(rows, dtype=cls.kind.dtype).reshape(len(rows), width))

    @classmethod
    def value_of(cls, text: str):
        """
        Parse the literal syntax: ';' separates rows, whitespace separates columns.

        Example:
            >>> DoubleMatrix.value_of("1 2 3; 4 5 6").get(1, 0)
            4.0

        Raises:
            MatrixFormatError: If a value does not parse or rows differ in length
        """
        if not text.strip():
            return cls.empty()
        parse = complex if cls.kind.is_complex else float
        rows = []
        for number, line in enumerate(text.split(';')):
            try:
                values = [parse(token) for token in line.split()]
            except ValueError as e:
                raise MatrixFormatError(f"cannot parse row {number}: {line.strip()!r}",
                                        line=number) from e
            if rows and len(values) != len(rows[0]):
                raise MatrixFormatError(
                    f"number of elements changes in row {number}: {line.strip()!r}",
                    line=number,
                )
            rows.append(values)
        return cls.from_rows(rows)

    @classmethod
    def concat_horizontally(cls, a: "Matrix", b: "Matrix"):
        """[a, b]: b's columns follow a's."""
        check_rows(b, a.rows, "b")
        m = cls(a.rows, a.columns + b.columns)
        copy = blas.routine(m.kind, 'copy')
        copy(a.length, a.data, 0, 1, m.data, 0, 1)
        copy(b.length, b.data, 0, 1, m.data, a.length, 1)
        return m

    @classmethod
    def concat_vertically(cls, a: "Matrix", b: "Matrix"):
        """[a; b]: b's rows follow a's."""
        check_columns(b, a.columns, "b")
        m = cls(a.rows + b.rows, a.columns)
        copy = blas.routine(m.kind, 'copy')
        for c in range(a.columns):
            copy(a.rows, a.data, a.rows * c, 1, m.data, m.rows * c, 1)
            copy(b.rows, b.data, b.rows * c, 1, m.data, m.rows * c + a.rows, 1)
        return m

    @classmethod
    def _from_grid(cls, grid: np.ndarray):
        rows, columns = grid.shape
        return cls(rows, columns, np.array(grid, dtype=cls.kind.dtype, order='F').ravel(order='F'))

    def _new(self, rows: int, columns: int):
        return type(self)(rows, columns)

    def _grid(self) -> np.ndarray:
        # 2-D view sharing this matrix's buffer
        return self.data.reshape((self.rows, self.columns), order='F')

    # === Shape ===

    def is_empty(self) -> bool:
        return self.length == 0

    def is_scalar(self) -> bool:
        return self.length == 1

    def is_vector(self) -> bool:
        return self.rows == 1 or self.columns == 1

    def is_row_vector(self) -> bool:
        return self.rows == 1

    def is_column_vector(self) -> bool:
        return self.columns == 1

    def is_square(self) -> bool:
        return self.rows == self.columns

    def check_length(self, length: int) -> None:
        check_length(self, length, "matrix")

    def check_rows(self, rows: int) -> None:
        check_rows(self, rows, "matrix")

    def check_columns(self, columns: int) -> None:
        check_columns(self, columns, "matrix")

    def resize(self, rows: int, columns: int):
        """Reallocate a zero-filled buffer of the new shape. Contents are lost."""
        check_dimensions(rows, columns)
        self.rows = rows
        self.columns = columns
        self.length = rows * columns
        self.data = self.kind.zeros(self.length)
        return self

    def reshape(self, rows: int, columns: int):
        """
        Reinterpret the buffer as rows x columns without moving data.

        Raises:
            SizeMismatchError: If rows * columns != length
        """
        check_dimensions(rows, columns)
        if rows * columns != self.length:
            raise SizeMismatchError(
                f"reshape: {rows}x{columns} does not have {self.length} elements",
                expected=self.length,
                actual=rows * columns,
            )
        self.rows = rows
        self.columns = columns
        return self

    def transpose(self):
        return type(self)._from_grid(self._grid().T)

    def dup(self):
        """Independent copy."""
        return type(self)(self.rows, self.columns, self.data.copy())

    def copy(self, other: "Matrix"):
        """Overwrite this matrix with the contents (and shape) of ``other``."""
        if other is self:
            return self
        other = self._operand(other)
        if self.rows != other.rows or self.columns != other.columns:
            self.resize(other.rows, other.columns)
        blas.copy(other, self)
        return self

    def repmat(self, row_mult: int, column_mult: int):
        """Tile this matrix row_mult times vertically and column_mult times horizontally."""
        return type(self)._from_grid(np.tile(self._grid(), (row_mult, column_mult)))

    # === Element access ===

    def _linear(self, args: tuple) -> int:
        if len(args) == 1:
            check_index(args[0], self.length, "index")
            return args[0]
        if len(args) == 2:
            r, c = args
            check_index(r, self.rows, "row")
            check_index(c, self.columns, "column")
            return r + self.rows * c
        raise TypeError(f"expected a linear index or (row, column), got {len(args)} indices")

    def get(self, *index):
        """Element at a linear index or at (row, column)."""
        return self.data[self._linear(index)]

    def put(self, *args):
        """
        Set one element: ``put(i, value)`` or ``put(row, column, value)``.

        Returns:
            self
        """
        *index, value = args
        self.data[self._linear(tuple(index))] = self._coerce(value)
        return self

    def __getitem__(self, key):
        return self.get(*key) if isinstance(key, tuple) else self.get(key)

    def __setitem__(self, key, value):
        index = key if isinstance(key, tuple) else (key,)
        self.put(*index, value)

    def item(self):
        """The single element of a 1x1 matrix."""
        if not self.is_scalar():
            raise SizeMismatchError(
                f"item: matrix is {self.rows}x{self.columns}, not a scalar",
                expected=1,
                actual=self.length,
            )
        return self.data[0]

    def fill(self, value):
        self.data.fill(self._coerce(value))
        return self

    def get_row(self, r: int):
        check_index(r, self.rows, "row")
        result = self._new(1, self.columns)
        blas.routine(self.kind, 'copy')(self.columns, self.data, r, self.rows, result.data, 0, 1)
        return result

    def get_column(self, c: int):
        check_index(c, self.columns, "column")
        result = self._new(self.rows, 1)
        blas.routine(self.kind, 'copy')(self.rows, self.data, self.rows * c, 1, result.data, 0, 1)
        return result

    def put_row(self, r: int, v: "Matrix"):
        check_index(r, self.rows, "row")
        check_length(v, self.columns, "v")
        blas.routine(self.kind, 'copy')(self.columns, v.data, 0, 1, self.data, r, self.rows)
        return self

    def put_column(self, c: int, v: "Matrix"):
        check_index(c, self.columns, "column")
        check_length(v, self.rows, "v")
        blas.routine(self.kind, 'copy')(self.rows, v.data, 0, 1, self.data, self.rows * c, 1)
        return self

    def _selection(self, indices, bound: int, name: str) -> list[int]:
        if isinstance(indices, Matrix):
            indices = indices.find_indices()
        selected = [int(i) for i in indices]
        for i in selected:
            check_index(i, bound, name)
        return selected

    def get_rows(self, indices: Iterable[int] | "Matrix"):
        """
        Rows at the given indices, in that order.

        A matrix argument selects the rows where it is non-zero.
        """
        selected = self._selection(indices, self.rows, "row")
        return type(self)._from_grid(self._grid()[selected, :])

    def get_columns(self, indices: Iterable[int] | "Matrix"):
        """Columns at the given indices; a matrix argument selects where it is non-zero."""
        selected = self._selection(indices, self.columns, "column")
        return type(self)._from_grid(self._grid()[:, selected])

    def get_range(self, ra: int, rb: int, ca: int | None = None, cb: int | None = None):
        """
        Contiguous block.

        ``get_range(a, b)`` returns linear elements a..b-1 as a column vector;
        ``get_range(ra, rb, ca, cb)`` returns rows ra..rb-1 of columns ca..cb-1.
        """
        copy = blas.routine(self.kind, 'copy')
        if ca is None:
            if not 0 <= ra <= rb <= self.length:
                raise IndexError(f"range {ra}..{rb} outside [0, {self.length}]")
            result = self._new(rb - ra, 1)
            copy(rb - ra, self.data, ra, 1, result.data, 0, 1)
            return result
        if not 0 <= ra <= rb <= self.rows:
            raise IndexError(f"row range {ra}..{rb} outside [0, {self.rows}]")
        if not 0 <= ca <= cb <= self.columns:
            raise IndexError(f"column range {ca}..{cb} outside [0, {self.columns}]")
        result = self._new(rb - ra, cb - ca)
        for c in range(ca, cb):
            copy(rb - ra, self.data, ra + self.rows * c, 1, result.data, result.rows * (c - ca), 1)
        return result

    def diagonal(self):
        """Column vector holding the main diagonal of a square matrix."""
        check_square(self, "matrix")
        result = self._new(self.rows, 1)
        blas.routine(self.kind, 'copy')(self.rows, self.data, 0, self.rows + 1, result.data, 0, 1)
        return result

    def find_indices(self) -> np.ndarray:
        """Linear indices of the non-zero elements."""
        return np.flatnonzero(self.data)

    def selecti(self, where: "Matrix"):
        """Zero every element whose counterpart in ``where`` is zero."""
        self.check_length(where.length)
        self.data[where.data == 0] = 0
        return self

    def select(self, where: "Matrix"):
        return self.dup().selecti(where)

    def swap_rows(self, i: int, j: int):
        check_index(i, self.rows, "row")
        check_index(j, self.rows, "row")
        blas.routine(self.kind, 'swap')(self.columns, self.data, i, self.rows,
                                        self.data, j, self.rows)
        return self

    def swap_columns(self, i: int, j: int):
        check_index(i, self.columns, "column")
        check_index(j, self.columns, "column")
        blas.routine(self.kind, 'swap')(self.rows, self.data, self.rows * i, 1,
                                        self.data, self.rows * j, 1)
        return self

    # === Operand handling ===

    def _coerce(self, value):
        if isinstance(value, Matrix):
            value = value.item()
        if not self.kind.is_complex and np.iscomplexobj(value):
            raise ValidationError(f"value: cannot store complex {value!r} in a {self.kind.name} matrix")
        return self.kind.cast(value)

    def _operand(self, other) -> "Matrix":
        if not isinstance(other, Matrix):
            raise TypeError(f"expected a matrix or a number, got {type(other).__name__}")
        if other.kind is not self.kind:
            raise ValidationError(
                f"other: expected a {self.kind.name} matrix, got a {other.kind.name} matrix"
            )
        return other

    def _broadcast(self, op: str, value, result: "Matrix", lhs: "Matrix", rhs) -> "Matrix":
        # lhs/rhs are the operands as the caller wrote them; aliasing is
        # judged against those, not against the receiver of the broadcast.
        prepare_result(result, lhs, rhs if isinstance(rhs, Matrix) else None,
                       self.rows, self.columns)
        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            _KERNELS[op](self.data, value, out=result.data)
        return result

    def _binary(self, op: str, other, result: "Matrix | None", mirror: bool = False) -> "Matrix":
        """
        Resolve scalar broadcasting and aliasing, then run one elementwise operation.

        A scalar ``other`` (a number or a 1x1 matrix) is broadcast over this
        matrix. With ``mirror`` set, a scalar receiver is broadcast over
        ``other`` instead, using the mirrored operation.
        """
        if result is None:
            result = self
        if _is_number(other) or (isinstance(other, Matrix) and other.is_scalar()):
            return self._broadcast(op, self._coerce(other), result, self, other)
        other = self._operand(other)
        if mirror and self.is_scalar():
            return other._broadcast(_MIRRORED[op], self.item(), result, self, other)

        check_same_length(self, other, "self", "other")
        aliasing = prepare_result(result, self, other, self.rows, self.columns)
        if op == 'add':
            self._accumulate(1, other, result, aliasing)
        elif op == 'sub':
            self._accumulate(-1, other, result, aliasing)
        else:
            with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
                _KERNELS[op](self.data, other.data, out=result.data)
        return result

    def _accumulate(self, sign: int, other: "Matrix", result: "Matrix", aliasing: Aliasing) -> None:
        # result = self + sign * other without reading a buffer after overwriting it
        if aliasing is Aliasing.LHS:
            blas.axpy(sign, other, result)
        elif aliasing is Aliasing.RHS:
            if sign < 0:
                blas.scal(-1, result)
            blas.axpy(1, self, result)
        else:
            blas.copy(self, result)
            blas.axpy(sign, other, result)

    # === Arithmetic ===

    def addi(self, other, result=None):
        return self._binary('add', other, result, mirror=True)

    def add(self, other):
        return self.addi(other, self._new(self.rows, self.columns))

    def subi(self, other, result=None):
        return self._binary('sub', other, result, mirror=True)

    def sub(self, other):
        return self.subi(other, self._new(self.rows, self.columns))

    def rsubi(self, other, result=None):
        """result = other - self"""
        return self._binary('rsub', other, result, mirror=True)

    def rsub(self, other):
        return self.rsubi(other, self._new(self.rows, self.columns))

    def muli(self, other, result=None):
        """Elementwise product."""
        return self._binary('mul', other, result, mirror=True)

    def mul(self, other):
        return self.muli(other, self._new(self.rows, self.columns))

    def divi(self, other, result=None):
        """Elementwise quotient. Division by zero follows IEEE semantics."""
        return self._binary('div', other, result, mirror=True)

    def div(self, other):
        return self.divi(other, self._new(self.rows, self.columns))

    def rdivi(self, other, result=None):
        """result = other / self"""
        return self._binary('rdiv', other, result, mirror=True)

    def rdiv(self, other):
        return self.rdivi(other, self._new(self.rows, self.columns))

    def negi(self):
        np.negative(self.data, out=self.data)
        return self

    def neg(self):
        return self.dup().negi()

    def mmuli(self, other, result=None):
        """
        Matrix product.

        A scalar operand on either side degrades to elementwise scaling.
        When ``result`` is one of the operands the product is formed in a
        temporary and copied back, since gemm/gemv cannot write over their
        own inputs.

        Raises:
            SizeMismatchError: If self.columns != other.rows, or if result is
                an operand of the wrong shape
        """
        if result is None:
            result = self
        if _is_number(other) or (isinstance(other, Matrix) and other.is_scalar()):
            return self._broadcast('mul', self._coerce(other), result, self, other)
        other = self._operand(other)
        if self.is_scalar():
            return other._broadcast('mul', self.item(), result, self, other)

        check_multiplies_with(self, other, "self", "other")
        aliasing = prepare_result(result, self, other, self.rows, other.columns, exact_shape=True)
        target = result if aliasing is Aliasing.NEITHER else self._new(result.rows, result.columns)
        if other.columns == 1:
            blas.gemv(1, self, other, 0, target)
        else:
            blas.gemm(1, self, other, 0, target)
        if target is not result:
            blas.copy(target, result)
        return result

    def mmul(self, other):
        columns = other.columns if isinstance(other, Matrix) else self.columns
        return self.mmuli(other, self._new(self.rows, columns))

    # === Row and column vector operations ===

    def _row_vector_op(self, ufunc, x: "Matrix"):
        check_length(x, self.columns, "x")
        grid = self._grid()
        with np.errstate(divide='ignore', invalid='ignore'):
            ufunc(grid, x.data.reshape(1, self.columns), out=grid)
        return self

    def _column_vector_op(self, ufunc, x: "Matrix"):
        check_length(x, self.rows, "x")
        grid = self._grid()
        with np.errstate(divide='ignore', invalid='ignore'):
            ufunc(grid, x.data.reshape(self.rows, 1), out=grid)
        return self

    def addi_row_vector(self, x):
        """Add x[c] to every element of column c."""
        return self._row_vector_op(np.add, x)

    def add_row_vector(self, x):
        return self.dup().addi_row_vector(x)

    def subi_row_vector(self, x):
        return self._row_vector_op(np.subtract, x)

    def sub_row_vector(self, x):
        return self.dup().subi_row_vector(x)

    def muli_row_vector(self, x):
        return self._row_vector_op(np.multiply, x)

    def mul_row_vector(self, x):
        return self.dup().muli_row_vector(x)

    def divi_row_vector(self, x):
        return self._row_vector_op(np.divide, x)

    def div_row_vector(self, x):
        return self.dup().divi_row_vector(x)

    def addi_column_vector(self, x):
        """Add x[r] to every element of row r."""
        return self._column_vector_op(np.add, x)

    def add_column_vector(self, x):
        return self.dup().addi_column_vector(x)

    def subi_column_vector(self, x):
        return self._column_vector_op(np.subtract, x)

    def sub_column_vector(self, x):
        return self.dup().subi_column_vector(x)

    def muli_column_vector(self, x):
        return self._column_vector_op(np.multiply, x)

    def mul_column_vector(self, x):
        return self.dup().muli_column_vector(x)

    def divi_column_vector(self, x):
        return self._column_vector_op(np.divide, x)

    def div_column_vector(self, x):
        return self.dup().divi_column_vector(x)

    def mul_row(self, r: int, scale):
        """Scale row r in place."""
        check_index(r, self.rows, "row")
        blas.routine(self.kind, 'scal')(self.columns, scale, self.data, r, self.rows)
        return self

    def mul_column(self, c: int, scale):
        """Scale column c in place."""
        check_index(c, self.columns, "column")
        blas.routine(self.kind, 'scal')(self.rows, scale, self.data, self.rows * c, 1)
        return self

    def rank_one_update(self, x: "Matrix", y: "Matrix | None" = None, alpha=1.0):
        """
        A <- A + alpha * x y^T (y^H for complex kinds); y defaults to x.

        Raises:
            SizeMismatchError: If x.length != rows or y.length != columns
        """
        y = x if y is None else y
        if x.length != self.rows:
            raise SizeMismatchError(
                f"x: vector has wrong length ({x.length} != {self.rows})",
                expected=self.rows, actual=x.length,
            )
        if y.length != self.columns:
            raise SizeMismatchError(
                f"y: vector has wrong length ({y.length} != {self.columns})",
                expected=self.columns, actual=y.length,
            )
        if self.kind.is_complex:
            blas.gerc(alpha, x, y, self)
        else:
            blas.ger(alpha, x, y, self)
        return self

    # === Products, norms, distances ===

    def dot(self, other: "Matrix"):
        """Inner product; conjugates this matrix for complex kinds."""
        other = self._operand(other)
        if self.kind.is_complex:
            return blas.dotc(self, other)
        return blas.dot(self, other)

    def norm1(self) -> float:
        """Sum of magnitudes (|re| + |im| for complex kinds)."""
        return blas.asum(self)

    def norm2(self) -> float:
        """Euclidean norm of the elements (Frobenius norm)."""
        return blas.nrm2(self)

    def normmax(self) -> float:
        """Largest element magnitude, 0 for an empty matrix."""
        i = blas.iamax(self)
        return 0.0 if i < 0 else float(abs(self.data[i]))

    def squared_distance(self, other: "Matrix") -> float:
        other.check_length(self.length)
        d = np.abs(self.data - other.data)
        return float(np.dot(d, d))

    def distance2(self, other: "Matrix") -> float:
        return float(np.sqrt(self.squared_distance(other)))

    def distance1(self, other: "Matrix") -> float:
        other.check_length(self.length)
        return float(np.abs(self.data - other.data).sum())

    def project(self, other: "Matrix"):
        """Coefficient p such that p * self is the orthogonal projection of other on self."""
        other.check_length(self.length)
        return np.vdot(self.data, other.data) / np.vdot(self.data, self.data)

    # === Comparisons and logic ===

    def eqi(self, other, result=None):
        return self._binary('eq', other, result)

    def eq(self, other):
        return self.eqi(other, self._new(self.rows, self.columns))

    def nei(self, other, result=None):
        return self._binary('ne', other, result)

    def ne(self, other):
        return self.nei(other, self._new(self.rows, self.columns))

    def andi(self, other, result=None):
        """1 where both operands are non-zero."""
        return self._binary('and', other, result)

    def and_(self, other):
        return self.andi(other, self._new(self.rows, self.columns))

    def ori(self, other, result=None):
        return self._binary('or', other, result)

    def or_(self, other):
        return self.ori(other, self._new(self.rows, self.columns))

    def xori(self, other, result=None):
        return self._binary('xor', other, result)

    def xor(self, other):
        return self.xori(other, self._new(self.rows, self.columns))

    def noti(self):
        np.equal(self.data, 0, out=self.data)
        return self

    def not_(self):
        return self.dup().noti()

    def truthi(self):
        """1 where non-zero, 0 elsewhere."""
        np.not_equal(self.data, 0, out=self.data)
        return self

    def truth(self):
        return self.dup().truthi()

    def is_nani(self):
        np.isnan(self.data, out=self.data)
        return self

    def is_nan(self):
        return self.dup().is_nani()

    def is_infinitei(self):
        np.isinf(self.data, out=self.data)
        return self

    def is_infinite(self):
        return self.dup().is_infinitei()

    def is_lower_triangular(self) -> bool:
        """True if every element above the diagonal is zero."""
        return not np.triu(self._grid(), 1).any()

    def is_upper_triangular(self) -> bool:
        """True if every element below the diagonal is zero."""
        return not np.tril(self._grid(), -1).any()

    # === Aggregates ===

    def sum(self):
        """Sum of all elements, accumulated left to right in linear order."""
        if self.length == 0:
            return self.kind.cast(0)
        return np.add.accumulate(self.data)[-1]

    def prod(self):
        if self.length == 0:
            return self.kind.cast(1)
        return np.multiply.accumulate(self.data)[-1]

    def mean(self):
        with np.errstate(invalid='ignore', divide='ignore'):
            return self.sum() / self.kind.cast(self.length)

    def column_sums(self):
        """1 x columns vector of per-column sums."""
        if self.rows == 1:
            return self.dup()
        result = self._new(1, self.columns)
        if self.rows:
            result.data[:] = np.add.accumulate(self._grid(), axis=0)[-1, :]
        return result

    def row_sums(self):
        """rows x 1 vector of per-row sums."""
        if self.columns == 1:
            return self.dup()
        result = self._new(self.rows, 1)
        if self.columns:
            result.data[:] = np.add.accumulate(self._grid(), axis=1)[:, -1]
        return result

    def column_means(self):
        return self.column_sums().divi(self.rows)

    def row_means(self):
        return self.row_sums().divi(self.columns)

    # === Conversion ===

    def to_array(self) -> np.ndarray:
        """Flat copy in column-major order."""
        return self.data.copy()

    def to_array2(self) -> np.ndarray:
        """Copy as a (rows, columns) array."""
        return np.array(self._grid())

    def to_boolean_array(self) -> np.ndarray:
        return self.data != 0

    def _convert(self, kind: ScalarKind):
        cls = matrix_class(kind)
        if kind is self.kind:
            return self.dup()
        return cls(self.rows, self.columns, self.data.astype(kind.dtype))

    def _format(self, value) -> str:
        return f"{value:f}"

    def __str__(self) -> str:
        grid = self._grid()
        return "[" + "; ".join(
            ", ".join(self._format(v) for v in row) for row in grid
        ) + "]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rows}x{self.columns}) {self}"

    # === Equality ===

    def equals(self, other) -> bool:
        """Exact equality of kind, shape and elements (NaN equals NaN)."""
        if not isinstance(other, Matrix) or other.kind is not self.kind:
            return False
        if self.rows != other.rows or self.columns != other.columns:
            return False
        return bool(np.array_equal(self.data, other.data, equal_nan=True))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.equals(other)

    def compare(self, other, tolerance: float | None = None) -> bool:
        """
        Approximate equality.

        True if ``other`` has the same kind and shape and the largest
        absolute difference divided by the element count is below
        ``tolerance`` (default: the kind's absolute tolerance tier).
        """
        if not isinstance(other, Matrix) or other.kind is not self.kind:
            return False
        if self.rows != other.rows or self.columns != other.columns:
            return False
        if self.length == 0:
            return True
        if tolerance is None:
            tolerance = select_tolerance(self.kind).atol
        return float(np.abs(self.data - other.data).max()) / self.length < tolerance

    # === Persistence ===

    def save(self, path) -> None:
        """Write the binary format."""
        matrix_io.save(self, path)

    @classmethod
    def load(cls, path):
        """Read the binary format written by save()."""
        return matrix_io.load(cls, path)

    @classmethod
    def load_ascii(cls, path):
        """Whitespace separated values, one row per line."""
        return matrix_io.load_ascii(cls, path)

    @classmethod
    def load_csv(cls, path):
        """Comma separated values, one row per line."""
        return matrix_io.load_csv(cls, path)

    def save_ascii(self, path) -> None:
        matrix_io.save_ascii(self, path)

    # === Python operators ===

    def _operator(self, method, other):
        if not (_is_number(other) or isinstance(other, Matrix)):
            return NotImplemented
        return method(other)

    def __add__(self, other):
        return self._operator(self.add, other)

    def __radd__(self, other):
        return self._operator(self.add, other)

    def __iadd__(self, other):
        return self._operator(self.addi, other)

    def __sub__(self, other):
        return self._operator(self.sub, other)

    def __rsub__(self, other):
        return self._operator(self.rsub, other)

    def __isub__(self, other):
        return self._operator(self.subi, other)

    def __mul__(self, other):
        return self._operator(self.mul, other)

    def __rmul__(self, other):
        return self._operator(self.mul, other)

    def __imul__(self, other):
        return self._operator(self.muli, other)

    def __truediv__(self, other):
        return self._operator(self.div, other)

    def __rtruediv__(self, other):
        return self._operator(self.rdiv, other)

    def __itruediv__(self, other):
        return self._operator(self.divi, other)

    def __matmul__(self, other):
        return self._operator(self.mmul, other)

    def __imatmul__(self, other):
        return self._operator(self.mmuli, other)

    def __neg__(self):
        return self.neg()
