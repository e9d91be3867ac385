"""
Singular value decomposition, A = U diag(S) V^H.

Works for every kind. Singular values are always returned as a real
column vector of the matching precision, in descending order.
"""

from pymatrix.core.backends.precision import real_kind
from pymatrix.core.compute import blas
from pymatrix.matrix.base import Matrix, matrix_class


def _singular_values(a: Matrix) -> Matrix:
    return matrix_class(real_kind(a.kind))(min(a.rows, a.columns), 1)


def _right_vectors(vt: Matrix) -> Matrix:
    return vt.hermitian() if vt.kind.is_complex else vt.transpose()


def full_svd(a: Matrix) -> tuple[Matrix, Matrix, Matrix]:
    """
    Full SVD of an m x n matrix.

    Returns:
        (U, S, V) with U m x m, S of length min(m, n) and V n x n
    """
    cls = type(a)
    s = _singular_values(a)
    u = cls(a.rows, a.rows)
    vt = cls(a.columns, a.columns)
    blas.gesvd('A', 'A', a.dup(), s, u, vt)
    return u, s, _right_vectors(vt)


def sparse_svd(a: Matrix) -> tuple[Matrix, Matrix, Matrix]:
    """
    Economy SVD: only the min(m, n) leading singular vectors.

    Returns:
        (U, S, V) with U m x k, S of length k and V n x k, k = min(m, n)
    """
    cls = type(a)
    k = min(a.rows, a.columns)
    s = _singular_values(a)
    u = cls(a.rows, k)
    vt = cls(k, a.columns)
    blas.gesvd('S', 'S', a.dup(), s, u, vt)
    return u, s, _right_vectors(vt)


def svd_values(a: Matrix) -> Matrix:
    """Singular values only."""
    cls = type(a)
    s = _singular_values(a)
    blas.gesvd('N', 'N', a.dup(), s, cls(1, 1), cls(1, 1))
    return s


__all__ = ['full_svd', 'sparse_svd', 'svd_values']
