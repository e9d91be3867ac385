"""
Matrix-level BLAS/LAPACK wrappers.

These functions take whole matrices instead of (buffer, offset, stride)
triples, dispatch to the active backend (BLAS) or to the call layer in
pymatrix.core.compute.lapack (LAPACK), and turn non-zero LAPACK status
codes into exceptions:

    info < 0              LapackArgumentError (a bug in the caller)
    gesv/getrf/sysv > 0   LapackSingularityError
    posv/potrf > 0        LapackPositivityError
    eigen/SVD/lstsq > 0   LapackConvergenceError

Matrices are treated as flat vectors with stride 1 by the level 1
routines, as column-major blocks with leading dimension ``rows`` by the
level 2/3 and LAPACK routines.
"""

from typing import Any, Callable

import numpy as np

from pymatrix.core.backends.precision import ScalarKind
from pymatrix.core.capabilities import routine_name
from pymatrix.core.compute import lapack
from pymatrix.core.config import get_backend
from pymatrix.core.exceptions import (
    LapackArgumentError,
    LapackConvergenceError,
    LapackPositivityError,
    LapackSingularityError,
    SizeMismatchError,
)
from pymatrix.core.validation import check_length, check_multiplies_with


def routine(kind: ScalarKind, family: str) -> Callable[..., Any]:
    """The active backend's implementation of ``family`` for a scalar kind."""
    return get_backend().routine(routine_name(family, kind.prefix))


def _ld(m) -> int:
    return max(1, m.rows)


def check_info(name: str, info: int) -> None:
    """Raise LapackArgumentError for a negative status."""
    if info < 0:
        raise LapackArgumentError(
            f"{name}: argument {-info} had an illegal value", name, info
        )


# ═══════════════════════════════════════════════════════════════════════
# BLAS level 1
# ═══════════════════════════════════════════════════════════════════════


def swap(x, y):
    """Exchange the contents of x and y; returns y."""
    check_length(y, x.length, "y")
    routine(x.kind, 'swap')(x.length, x.data, 0, 1, y.data, 0, 1)
    return y


def scal(alpha, x):
    """x <- alpha * x"""
    routine(x.kind, 'scal')(x.length, alpha, x.data, 0, 1)
    return x


def copy(x, y):
    """y <- x"""
    check_length(y, x.length, "y")
    routine(x.kind, 'copy')(x.length, x.data, 0, 1, y.data, 0, 1)
    return y


def axpy(alpha, x, y):
    """y <- alpha * x + y"""
    check_length(y, x.length, "y")
    routine(x.kind, 'axpy')(x.length, alpha, x.data, 0, 1, y.data, 0, 1)
    return y


def dot(x, y):
    """Real dot product x^T y."""
    check_length(y, x.length, "y")
    return routine(x.kind, 'dot')(x.length, x.data, 0, 1, y.data, 0, 1)


def dotc(x, y):
    """Conjugated dot product x^H y."""
    check_length(y, x.length, "y")
    return routine(x.kind, 'dotc')(x.length, x.data, 0, 1, y.data, 0, 1)


def dotu(x, y):
    """Unconjugated dot product x^T y for complex vectors."""
    check_length(y, x.length, "y")
    return routine(x.kind, 'dotu')(x.length, x.data, 0, 1, y.data, 0, 1)


def nrm2(x) -> float:
    """Euclidean norm."""
    return routine(x.kind, 'nrm2')(x.length, x.data, 0, 1)


def asum(x) -> float:
    """Sum of |re| + |im| over all elements."""
    return routine(x.kind, 'asum')(x.length, x.data, 0, 1)


def iamax(x) -> int:
    """0-based index of the element with the largest |re| + |im|, -1 if empty."""
    return routine(x.kind, 'iamax')(x.length, x.data, 0, 1)


# ═══════════════════════════════════════════════════════════════════════
# BLAS level 2 and 3
# ═══════════════════════════════════════════════════════════════════════


def gemv(alpha, a, x, beta, y):
    """y <- alpha * A x + beta * y"""
    check_length(x, a.columns, "x")
    check_length(y, a.rows, "y")
    routine(a.kind, 'gemv')('N', a.rows, a.columns, alpha, a.data, 0, _ld(a),
                            x.data, 0, 1, beta, y.data, 0, 1)
    return y


def _rank_one(family, alpha, x, y, a):
    check_length(x, a.rows, "x")
    check_length(y, a.columns, "y")
    routine(a.kind, family)(a.rows, a.columns, alpha, x.data, 0, 1, y.data, 0, 1,
                            a.data, 0, _ld(a))
    return a


def ger(alpha, x, y, a):
    """A <- alpha * x y^T + A"""
    return _rank_one('ger', alpha, x, y, a)


def geru(alpha, x, y, a):
    """A <- alpha * x y^T + A (complex, unconjugated)"""
    return _rank_one('geru', alpha, x, y, a)


def gerc(alpha, x, y, a):
    """A <- alpha * x y^H + A"""
    return _rank_one('gerc', alpha, x, y, a)


def gemm(alpha, a, b, beta, c):
    """C <- alpha * A B + beta * C"""
    check_multiplies_with(a, b, "a", "b")
    if c.rows != a.rows or c.columns != b.columns:
        raise SizeMismatchError(
            f"c: result must be {a.rows}x{b.columns}, got {c.rows}x{c.columns}",
            expected=(a.rows, b.columns),
            actual=(c.rows, c.columns),
        )
    routine(a.kind, 'gemm')('N', 'N', c.rows, c.columns, a.columns, alpha,
                            a.data, 0, _ld(a), b.data, 0, _ld(b), beta, c.data, 0, _ld(c))
    return c


# ═══════════════════════════════════════════════════════════════════════
# LAPACK
# ═══════════════════════════════════════════════════════════════════════


def gesv(a, ipiv: np.ndarray, b):
    """
    Solve A X = B in place: A receives its LU factors, B the solution.

    Raises:
        LapackSingularityError: If U has an exact zero on its diagonal
    """
    info = lapack.gesv(a.rows, b.columns, a.data, 0, _ld(a), ipiv, 0, b.data, 0, _ld(b))
    check_info('gesv', info)
    if info > 0:
        raise LapackSingularityError(
            f"gesv: linear equation cannot be solved because the matrix was singular "
            f"(U[{info - 1}, {info - 1}] is exactly zero)", 'gesv', info
        )
    return b


def getrf(a, ipiv: np.ndarray) -> int:
    """
    LU-factorize A in place.

    A singular factor is not an error here (the factorization completes);
    the status is returned so the caller can decide.
    """
    info = lapack.getrf(a.rows, a.columns, a.data, 0, _ld(a), ipiv, 0)
    check_info('getrf', info)
    return info


def potrf(uplo: str, a):
    """
    Cholesky-factorize A in place.

    Raises:
        LapackPositivityError: If a leading minor is not positive definite
    """
    info = lapack.potrf(uplo, a.rows, a.data, 0, _ld(a))
    check_info('potrf', info)
    if info > 0:
        raise LapackPositivityError(
            f"potrf: leading minor of order {info} is not positive definite",
            'potrf', info,
        )
    return a


def posv(uplo: str, a, b):
    """
    Solve A X = B for positive definite A in place.

    Raises:
        LapackPositivityError: If a leading minor is not positive definite
    """
    info = lapack.posv(uplo, a.rows, b.columns, a.data, 0, _ld(a), b.data, 0, _ld(b))
    check_info('posv', info)
    if info > 0:
        raise LapackPositivityError(
            f"posv: leading minor of order {info} of A is not positive definite",
            'posv', info,
        )
    return b


def sysv(uplo: str, a, ipiv: np.ndarray, b):
    """
    Solve A X = B for symmetric A in place.

    Raises:
        LapackSingularityError: If the block diagonal factor is singular
    """
    info = lapack.sysv(uplo, a.rows, b.columns, a.data, 0, _ld(a), ipiv, 0,
                       b.data, 0, _ld(b))
    check_info('sysv', info)
    if info > 0:
        raise LapackSingularityError(
            f"sysv: block diagonal matrix D (pivot {info}) is exactly singular",
            'sysv', info,
        )
    return b


def _converged(name: str, info: int) -> None:
    check_info(name, info)
    if info > 0:
        raise LapackConvergenceError(
            f"{name}: algorithm failed to converge (info={info})", name, info
        )


def syev(jobz: str, uplo: str, a, w) -> int:
    info = lapack.syev(jobz, uplo, a.rows, a.data, 0, _ld(a), w.data, 0)
    _converged('syev', info)
    return info


def syevd(jobz: str, uplo: str, a, w) -> int:
    info = lapack.syevd(jobz, uplo, a.rows, a.data, 0, _ld(a), w.data, 0)
    _converged('syevd', info)
    return info


def syevr(jobz: str, range_: str, uplo: str, a, vl: float, vu: float, il: int, iu: int,
          abstol: float, w, z, isuppz: np.ndarray | None = None) -> int:
    """
    Selected eigenpairs of symmetric A.

    Returns:
        The number of eigenvalues found
    """
    m = np.zeros(1, dtype=lapack.INDEX_DTYPE)
    if isuppz is None:
        isuppz = np.zeros(max(1, 2 * a.rows), dtype=lapack.INDEX_DTYPE)
    info = lapack.syevr(jobz, range_, uplo, a.rows, a.data, 0, _ld(a), vl, vu, il, iu,
                        abstol, m, 0, w.data, 0, z.data, 0, _ld(z), isuppz, 0)
    _converged('syevr', info)
    return int(m[0])


def geev(jobvl: str, jobvr: str, a, wr, wi, vl, vr) -> int:
    """
    Eigen-decomposition of a general matrix.

    For complex kinds pass the eigenvalue matrix as ``wr`` and None as ``wi``.
    """
    info = lapack.geev(jobvl, jobvr, a.rows, a.data, 0, _ld(a), wr.data, 0,
                       None if wi is None else wi.data, 0,
                       vl.data, 0, _ld(vl), vr.data, 0, _ld(vr))
    _converged('geev', info)
    return info


def _generalized_failure(name: str, jobz: str, info: int, n: int) -> None:
    check_info(name, info)
    if info == 0:
        return
    if info <= n:
        if jobz.upper() == 'N':
            raise LapackConvergenceError(
                f"{name}: {info} off-diagonal elements did not converge to zero", name, info
            )
        raise LapackConvergenceError(
            f"{name}: failed to converge while working on submatrix {info}", name, info
        )
    raise LapackPositivityError(
        f"{name}: leading minor of order {info - n} of B is not positive definite",
        name, info, order=info - n,
    )


def sygvd(itype: int, jobz: str, uplo: str, a, b, w) -> int:
    info = lapack.sygvd(itype, jobz, uplo, a.rows, a.data, 0, _ld(a), b.data, 0, _ld(b),
                        w.data, 0)
    _generalized_failure('sygvd', jobz, info, a.rows)
    return info


def sygvx(itype: int, jobz: str, range_: str, uplo: str, a, b, vl: float, vu: float,
          il: int, iu: int, abstol: float, w, z, ifail: np.ndarray | None = None) -> int:
    """
    Selected eigenpairs of the generalized problem.

    Returns:
        The number of eigenvalues found
    """
    m = np.zeros(1, dtype=lapack.INDEX_DTYPE)
    if ifail is None:
        ifail = np.zeros(max(1, a.rows), dtype=lapack.INDEX_DTYPE)
    info = lapack.sygvx(itype, jobz, range_, uplo, a.rows, a.data, 0, _ld(a),
                        b.data, 0, _ld(b), vl, vu, il, iu, abstol, m, 0,
                        w.data, 0, z.data, 0, _ld(z), ifail, 0)
    _generalized_failure('sygvx', jobz, info, a.rows)
    return int(m[0])


def gesvd(jobu: str, jobvt: str, a, s, u, vt) -> int:
    info = lapack.gesvd(jobu, jobvt, a.rows, a.columns, a.data, 0, _ld(a), s.data, 0,
                        u.data, 0, _ld(u), vt.data, 0, _ld(vt))
    _converged('gesvd', info)
    return info


def gelsd(a, b) -> int:
    """
    Minimum-norm least squares solution, written to the first A.columns rows of B.

    Returns:
        The effective rank of A

    Raises:
        SizeMismatchError: If B has fewer than max(A.rows, A.columns) rows
    """
    m, n = a.rows, a.columns
    if b.rows < max(m, n):
        raise SizeMismatchError(
            f"b: result matrix B too small to store the solution, needs at least "
            f"{max(m, n)} rows, has {b.rows}",
            expected=max(m, n),
            actual=b.rows,
        )
    s = np.zeros(max(1, min(m, n)), dtype=a.kind.component_dtype)
    rank = np.zeros(1, dtype=lapack.INDEX_DTYPE)
    info = lapack.gelsd(m, n, b.columns, a.data, 0, _ld(a), b.data, 0, _ld(b), s, 0,
                        -1.0, rank, 0)
    _converged('gelsd', info)
    return int(rank[0])


def geqrf(a, tau) -> int:
    info = lapack.geqrf(a.rows, a.columns, a.data, 0, _ld(a), tau.data, 0)
    check_info('geqrf', info)
    return info


def ormqr(side: str, trans: str, a, tau, c) -> int:
    info = lapack.ormqr(side, trans, c.rows, c.columns, tau.length, a.data, 0, _ld(a),
                        tau.data, 0, c.data, 0, _ld(c))
    check_info('ormqr', info)
    return info


def orgqr(n: int, k: int, a, tau) -> int:
    info = lapack.orgqr(a.rows, n, k, a.data, 0, _ld(a), tau.data, 0)
    check_info('orgqr', info)
    return info


__all__ = [
    'routine', 'check_info',
    'swap', 'scal', 'copy', 'axpy', 'dot', 'dotc', 'dotu', 'nrm2', 'asum', 'iamax',
    'gemv', 'ger', 'geru', 'gerc', 'gemm',
    'gesv', 'getrf', 'potrf', 'posv', 'sysv', 'syev', 'syevd', 'syevr', 'geev',
    'sygvd', 'sygvx', 'gesvd', 'gelsd', 'geqrf', 'ormqr', 'orgqr',
]
