"""
Real matrices: DoubleMatrix and FloatMatrix.

Adds what needs an ordering on the elements: ordering comparisons,
min/max scans, sorting, plus random and evenly spaced construction.

Min/max scans skip NaN: an element replaces the current extremum only if
it is strictly smaller (larger), which NaN never is. The scan starts at
+inf (-inf), so an empty, all-NaN or all-(+/-)inf input yields +/-inf
and index -1. Ties keep the first index.
"""

import numpy as np

from pymatrix.core import rng
from pymatrix.core.backends.precision import FLOAT32, FLOAT64, complex_kind
from pymatrix.core.validation import check_dimensions
from pymatrix.matrix.base import Matrix, register


def _scan_min(values: np.ndarray) -> tuple[float, int]:
    candidates = values < np.inf
    if not candidates.any():
        return np.inf, -1
    i = int(np.argmin(np.where(candidates, values, np.inf)))
    return values[i], i


def _scan_max(values: np.ndarray) -> tuple[float, int]:
    candidates = values > -np.inf
    if not candidates.any():
        return -np.inf, -1
    i = int(np.argmax(np.where(candidates, values, -np.inf)))
    return values[i], i


class RealMatrix(Matrix):
    """Matrix over a real scalar kind."""

    # === Construction ===

    @classmethod
    def rand(cls, rows: int, columns: int = 1):
        """Uniform [0, 1) entries from the package generator."""
        check_dimensions(rows, columns)
        values = rng.generator().random(rows * columns)
        return cls(rows, columns, values.astype(cls.kind.dtype))

    @classmethod
    def randn(cls, rows: int, columns: int = 1):
        """Standard normal entries from the package generator."""
        check_dimensions(rows, columns)
        values = rng.generator().standard_normal(rows * columns)
        return cls(rows, columns, values.astype(cls.kind.dtype))

    @classmethod
    def linspace(cls, lower: float, upper: float, size: int):
        """Column vector of ``size`` evenly spaced values from lower to upper."""
        return cls(size, 1, np.linspace(lower, upper, size).astype(cls.kind.dtype))

    @classmethod
    def logspace(cls, lower: float, upper: float, size: int):
        """Column vector of 10**v for v evenly spaced from lower to upper."""
        return cls(size, 1, np.logspace(lower, upper, size).astype(cls.kind.dtype))

    # === Ordering comparisons ===

    def lti(self, other, result=None):
        return self._binary('lt', other, result)

    def lt(self, other):
        return self.lti(other, self._new(self.rows, self.columns))

    def gti(self, other, result=None):
        return self._binary('gt', other, result)

    def gt(self, other):
        return self.gti(other, self._new(self.rows, self.columns))

    def lei(self, other, result=None):
        return self._binary('le', other, result)

    def le(self, other):
        return self.lei(other, self._new(self.rows, self.columns))

    def gei(self, other, result=None):
        return self._binary('ge', other, result)

    def ge(self, other):
        return self.gei(other, self._new(self.rows, self.columns))

    # === Min and max ===

    def min(self):
        return _scan_min(self.data)[0]

    def argmin(self) -> int:
        return _scan_min(self.data)[1]

    def max(self):
        return _scan_max(self.data)[0]

    def argmax(self) -> int:
        return _scan_max(self.data)[1]

    def mini(self, other, result=None):
        """Elementwise minimum (NaN propagates)."""
        return self._binary('min', other, result)

    def min_of(self, other):
        return self.mini(other, self._new(self.rows, self.columns))

    def maxi(self, other, result=None):
        """Elementwise maximum (NaN propagates)."""
        return self._binary('max', other, result)

    def max_of(self, other):
        return self.maxi(other, self._new(self.rows, self.columns))

    def _per_column(self, scan, position: int):
        grid = self._grid()
        return [scan(grid[:, c])[position] for c in range(self.columns)]

    def _per_row(self, scan, position: int):
        grid = self._grid()
        return [scan(grid[r, :])[position] for r in range(self.rows)]

    def column_mins(self):
        return type(self)(1, self.columns, self._per_column(_scan_min, 0))

    def column_maxs(self):
        return type(self)(1, self.columns, self._per_column(_scan_max, 0))

    def column_argmins(self) -> np.ndarray:
        return np.array(self._per_column(_scan_min, 1), dtype=int)

    def column_argmaxs(self) -> np.ndarray:
        return np.array(self._per_column(_scan_max, 1), dtype=int)

    def row_mins(self):
        return type(self)(self.rows, 1, self._per_row(_scan_min, 0))

    def row_maxs(self):
        return type(self)(self.rows, 1, self._per_row(_scan_max, 0))

    def row_argmins(self) -> np.ndarray:
        return np.array(self._per_row(_scan_min, 1), dtype=int)

    def row_argmaxs(self) -> np.ndarray:
        return np.array(self._per_row(_scan_max, 1), dtype=int)

    # === Cumulative sums ===

    def cumulative_sumi(self):
        """Prefix sums in linear order, in place."""
        np.add.accumulate(self.data, out=self.data)
        return self

    def cumulative_sum(self):
        return self.dup().cumulative_sumi()

    def column_cumulative_sumi(self):
        grid = self._grid()
        np.add.accumulate(grid, axis=0, out=grid)
        return self

    def column_cumulative_sum(self):
        return self.dup().column_cumulative_sumi()

    def row_cumulative_sumi(self):
        grid = self._grid()
        np.add.accumulate(grid, axis=1, out=grid)
        return self

    def row_cumulative_sum(self):
        return self.dup().row_cumulative_sumi()

    # === Sorting ===
    # numpy ordering: NaN sorts after every other value. Tie order is
    # unspecified.

    def sorti(self):
        self.data.sort()
        return self

    def sort(self):
        return self.dup().sorti()

    def sorting_permutation(self) -> np.ndarray:
        """Indices p such that data[p] is sorted."""
        return np.argsort(self.data)

    def sort_columnsi(self):
        self._grid().sort(axis=0)
        return self

    def sort_columns(self):
        return self.dup().sort_columnsi()

    def sort_rowsi(self):
        self._grid().sort(axis=1)
        return self

    def sort_rows(self):
        return self.dup().sort_rowsi()

    def column_sorting_permutations(self) -> list[np.ndarray]:
        grid = self._grid()
        return [np.argsort(grid[:, c]) for c in range(self.columns)]

    def row_sorting_permutations(self) -> list[np.ndarray]:
        grid = self._grid()
        return [np.argsort(grid[r, :]) for r in range(self.rows)]

    # === Conversion ===

    def to_int_array(self) -> np.ndarray:
        """Elements rounded half up."""
        return np.floor(self.data + 0.5).astype(int)

    def to_complex(self):
        return self._convert(complex_kind(self.kind))


@register
class DoubleMatrix(RealMatrix):
    """Matrix of 64-bit floats."""
    kind = FLOAT64

    def to_float(self):
        return self._convert(FLOAT32)

    def to_double(self):
        return self.dup()


@register
class FloatMatrix(RealMatrix):
    """Matrix of 32-bit floats."""
    kind = FLOAT32

    def to_float(self):
        return self.dup()

    def to_double(self):
        return self._convert(FLOAT64)


__all__ = ['RealMatrix', 'DoubleMatrix', 'FloatMatrix']
