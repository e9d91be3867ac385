"""
Matrix decompositions: LU with partial pivoting, Cholesky and QR.

The input matrix is never modified; each function factorizes a copy.
"""

from dataclasses import dataclass

import numpy as np

from pymatrix.core.compute import blas, lapack
from pymatrix.core.validation import check_real, check_square
from pymatrix.matrix.base import Matrix
from pymatrix.permutations import permutation_matrix_from_pivot_indices


@dataclass(frozen=True)
class LUDecomposition:
    """
    Result of an LU decomposition, A = P L U.

    Attributes:
        l: Lower trapezoidal factor with unit diagonal (m x min(m, n))
        u: Upper trapezoidal factor (min(m, n) x n)
        p: Permutation matrix (m x m)
    """
    l: Matrix
    u: Matrix
    p: Matrix


@dataclass(frozen=True)
class QRDecomposition:
    """
    Result of a QR decomposition, A = Q R.

    Attributes:
        q: Orthogonal factor (m x m)
        r: Upper trapezoidal factor (m x n)
    """
    q: Matrix
    r: Matrix


def lu(a: Matrix) -> LUDecomposition:
    """
    LU decomposition with partial pivoting of an m x n matrix.

    A singular matrix still factorizes; U then has a zero on its diagonal.
    """
    factors = a.dup()
    k = min(a.rows, a.columns)
    ipiv = np.zeros(max(1, k), dtype=lapack.INDEX_DTYPE)
    blas.getrf(factors, ipiv)

    grid = factors._grid()
    lower = np.tril(grid[:, :k], -1)
    lower[:k, :k] += np.eye(k, dtype=a.kind.dtype)
    upper = np.triu(grid[:k, :])
    cls = type(a)
    p = permutation_matrix_from_pivot_indices(a.rows, ipiv[:k], cls)
    return LUDecomposition(l=cls._from_grid(lower), u=cls._from_grid(upper), p=p)


def cholesky(a: Matrix) -> Matrix:
    """
    Upper triangular U with A = U^H U.

    Raises:
        SizeMismatchError: If A is not square
        LapackPositivityError: If A is not positive definite
    """
    check_square(a, "a")
    factor = blas.potrf('U', a.dup())
    grid = factor._grid()
    grid[...] = np.triu(grid)
    return factor


def qr(a: Matrix) -> QRDecomposition:
    """
    QR decomposition of a real m x n matrix by Householder reflections.

    Q is the full m x m orthogonal factor, formed by applying the
    reflectors to the identity.
    """
    check_real(a, "qr")
    factors = a.dup()
    cls = type(a)
    tau = cls(min(a.rows, a.columns), 1)
    blas.geqrf(factors, tau)

    r = cls._from_grid(np.triu(factors._grid()))
    q = cls.eye(a.rows)
    blas.ormqr('L', 'N', factors, tau, q)
    return QRDecomposition(q=q, r=r)


__all__ = ['LUDecomposition', 'QRDecomposition', 'lu', 'cholesky', 'qr']
