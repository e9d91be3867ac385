"""
Linear system solvers.

Each solver copies its inputs, so A and B are never modified, and
returns X with A X = B (or the least squares / minimum norm solution).
"""

import numpy as np

from pymatrix.core.compute import blas, lapack
from pymatrix.core.exceptions import ValidationError
from pymatrix.core.validation import check_real, check_rows, check_square
from pymatrix.matrix.base import Matrix


def _pivots(n: int) -> np.ndarray:
    return np.zeros(max(1, n), dtype=lapack.INDEX_DTYPE)


def _check_system(a: Matrix, b: Matrix) -> None:
    check_square(a, "a")
    check_rows(b, a.rows, "b")
    if b.kind != a.kind:
        raise ValidationError(f"b: expected a {a.kind.name} matrix, got {b.kind.name}")


def solve(a: Matrix, b: Matrix) -> Matrix:
    """
    Solve A X = B for square A by LU decomposition (gesv).

    Raises:
        SizeMismatchError: If A is not square or B has the wrong row count
        LapackSingularityError: If A is singular
    """
    _check_system(a, b)
    x = b.dup()
    blas.gesv(a.dup(), _pivots(a.rows), x)
    return x


def solve_symmetric(a: Matrix, b: Matrix) -> Matrix:
    """
    Solve A X = B for symmetric A (sysv); only the upper triangle is read.

    Raises:
        LapackSingularityError: If the factorization is singular
    """
    _check_system(a, b)
    check_real(a, "solve_symmetric")
    x = b.dup()
    blas.sysv('U', a.dup(), _pivots(a.rows), x)
    return x


def solve_positive(a: Matrix, b: Matrix) -> Matrix:
    """
    Solve A X = B for positive definite A by Cholesky decomposition (posv).

    Raises:
        LapackPositivityError: If A is not positive definite
    """
    _check_system(a, b)
    x = b.dup()
    blas.posv('U', a.dup(), x)
    return x


def solve_least_squares(a: Matrix, b: Matrix) -> Matrix:
    """
    Least squares solution of A X = B, minimum norm if underdetermined (gelsd).

    Works for any shape of A; the result has A.columns rows.

    Raises:
        SizeMismatchError: If B does not have A.rows rows
        LapackConvergenceError: If the SVD fails to converge
    """
    check_rows(b, a.rows, "b")
    check_real(a, "solve_least_squares")
    if b.kind != a.kind:
        raise ValidationError(f"b: expected a {a.kind.name} matrix, got {b.kind.name}")
    n = a.columns
    if b.rows < n:
        # gelsd writes the n solution rows over B, so B needs at least n rows
        x = type(b).concat_vertically(b, type(b).zeros(n - b.rows, b.columns))
    else:
        x = b.dup()
    blas.gelsd(a.dup(), x)
    if x.rows == n:
        return x
    return x.get_range(0, n, 0, b.columns)


def pinv(a: Matrix) -> Matrix:
    """Moore-Penrose pseudo-inverse, as the least squares solution of A X = I."""
    return solve_least_squares(a, type(a).eye(a.rows))


__all__ = ['solve', 'solve_symmetric', 'solve_positive', 'solve_least_squares', 'pinv']
