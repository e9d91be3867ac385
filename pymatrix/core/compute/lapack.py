"""
LAPACK call layer.

Stateless functions taking (buffer, offset, leading-dimension) arguments
in LAPACK order and returning the routine's status code verbatim. The
scalar kind, and therefore the routine prefix, is taken from the dtype of
the first matrix buffer.

Routines that need caller-managed scratch memory go through
with_workspace(), which runs the two-call protocol:

    1. query: call the routine with length-1 dummy buffers and
       ``lwork = -1``; the backend writes the required length(s) into
       the first element of the dummy workspace array(s)
    2. check: a non-zero status from the query is returned unchanged
    3. allocate: workspace buffers of exactly the reported length(s)
    4. compute: call again with the real buffers and the workspace

Workspace buffers live for one call only. Nothing here raises on a
non-zero status; pymatrix.core.compute.blas decides what a status means.
"""

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np

from pymatrix.core.backends.precision import ScalarKind, kind_of
from pymatrix.core.config import get_backend


logger = logging.getLogger(__name__)

# lwork value asking a routine for its workspace size
WORKSPACE_QUERY = -1

INDEX_DTYPE = np.dtype(np.int32)


@dataclass
class Workspace:
    """Scratch buffers handed to one routine call."""
    work: np.ndarray
    lwork: int
    iwork: np.ndarray | None = None
    liwork: int = 0


def workspace_length(kind: ScalarKind, value) -> int:
    """
    Integer length from the floating value a workspace query reports.

    Single precision cannot represent every large integer, so the value
    is rounded up to the next representable float first.
    """
    value = np.asarray(value).real
    if kind.is_single:
        value = np.nextafter(np.float32(value), np.float32(np.inf))
    return max(1, int(value))


def with_workspace(
    routine: str,
    kind: ScalarKind,
    query: Callable[[Workspace], int],
    compute: Callable[[Workspace], int],
    integer_workspace: bool = False,
) -> int:
    """
    Run the query-then-compute workspace protocol.

    Args:
        routine: Prefixed routine name, for logging
        kind: Scalar kind of the workspace
        query: Calls the routine with dummy buffers and the given
            (query-sized) workspace; returns the status code
        compute: Calls the routine with real buffers and the allocated
            workspace; returns the status code
        integer_workspace: Whether the routine also reports an integer
            workspace length in ``iwork[0]``

    Returns:
        The status of the failed query, or the status of the compute call
    """
    probe = Workspace(work=kind.zeros(1), lwork=WORKSPACE_QUERY)
    if integer_workspace:
        probe.iwork = np.zeros(1, dtype=INDEX_DTYPE)
        probe.liwork = WORKSPACE_QUERY

    info = query(probe)
    if info != 0:
        logger.debug("%s: workspace query failed with info=%d", routine, info)
        return info

    lwork = workspace_length(kind, probe.work[0])
    workspace = Workspace(work=kind.zeros(lwork), lwork=lwork)
    if integer_workspace:
        liwork = max(1, int(probe.iwork[0]))
        workspace.iwork = np.zeros(liwork, dtype=INDEX_DTYPE)
        workspace.liwork = liwork
        logger.debug("%s: lwork=%d liwork=%d", routine, lwork, liwork)
    else:
        logger.debug("%s: lwork=%d", routine, lwork)

    info = compute(workspace)
    if info != 0:
        logger.debug("%s: returned info=%d", routine, info)
    return info


def _resolve(family: str, buffer: np.ndarray) -> tuple[ScalarKind, str, Callable]:
    kind = kind_of(buffer.dtype)
    name = kind.routine(family)
    return kind, name, get_backend().routine(name)


def _dummy(kind: ScalarKind) -> np.ndarray:
    return kind.zeros(1)


def _index_dummy() -> np.ndarray:
    return np.zeros(1, dtype=INDEX_DTYPE)


def _real_dummy(kind: ScalarKind) -> np.ndarray:
    return np.zeros(1, dtype=kind.component_dtype)


# ═══════════════════════════════════════════════════════════════════════
# Routines without workspace
# ═══════════════════════════════════════════════════════════════════════


def gesv(n, nrhs, a, a_off, lda, ipiv, ipiv_off, b, b_off, ldb) -> int:
    """Solve A X = B by LU with partial pivoting; ``ipiv`` receives 0-based pivots."""
    _, name, call = _resolve('gesv', a)
    info = call(n, nrhs, a, a_off, lda, ipiv, ipiv_off, b, b_off, ldb)
    if info != 0:
        logger.debug("%s: returned info=%d", name, info)
    return info


def getrf(m, n, a, a_off, lda, ipiv, ipiv_off) -> int:
    """LU factorization with partial pivoting."""
    _, name, call = _resolve('getrf', a)
    info = call(m, n, a, a_off, lda, ipiv, ipiv_off)
    if info != 0:
        logger.debug("%s: returned info=%d", name, info)
    return info


def potrf(uplo, n, a, a_off, lda) -> int:
    """Cholesky factorization of the triangle named by ``uplo``."""
    _, name, call = _resolve('potrf', a)
    info = call(uplo, n, a, a_off, lda)
    if info != 0:
        logger.debug("%s: returned info=%d", name, info)
    return info


def posv(uplo, n, nrhs, a, a_off, lda, b, b_off, ldb) -> int:
    """Solve A X = B for Hermitian positive definite A."""
    _, name, call = _resolve('posv', a)
    info = call(uplo, n, nrhs, a, a_off, lda, b, b_off, ldb)
    if info != 0:
        logger.debug("%s: returned info=%d", name, info)
    return info


# ═══════════════════════════════════════════════════════════════════════
# Routines with workspace
# ═══════════════════════════════════════════════════════════════════════


def sysv(uplo, n, nrhs, a, a_off, lda, ipiv, ipiv_off, b, b_off, ldb) -> int:
    """Solve A X = B for symmetric A (Bunch-Kaufman pivoting)."""
    kind, name, call = _resolve('sysv', a)
    return with_workspace(
        name, kind,
        lambda ws: call(uplo, n, nrhs, _dummy(kind), 0, lda, _index_dummy(), 0,
                        _dummy(kind), 0, ldb, ws.work, 0, ws.lwork),
        lambda ws: call(uplo, n, nrhs, a, a_off, lda, ipiv, ipiv_off,
                        b, b_off, ldb, ws.work, 0, ws.lwork),
    )


def syev(jobz, uplo, n, a, a_off, lda, w, w_off) -> int:
    """Eigenvalues (and vectors, jobz='V', overwriting A) of a symmetric matrix."""
    kind, name, call = _resolve('syev', a)
    return with_workspace(
        name, kind,
        lambda ws: call(jobz, uplo, n, _dummy(kind), 0, lda, _dummy(kind), 0,
                        ws.work, 0, ws.lwork),
        lambda ws: call(jobz, uplo, n, a, a_off, lda, w, w_off, ws.work, 0, ws.lwork),
    )


def syevd(jobz, uplo, n, a, a_off, lda, w, w_off) -> int:
    """Divide and conquer variant of syev."""
    kind, name, call = _resolve('syevd', a)
    return with_workspace(
        name, kind,
        lambda ws: call(jobz, uplo, n, _dummy(kind), 0, lda, _dummy(kind), 0,
                        ws.work, 0, ws.lwork, ws.iwork, 0, ws.liwork),
        lambda ws: call(jobz, uplo, n, a, a_off, lda, w, w_off,
                        ws.work, 0, ws.lwork, ws.iwork, 0, ws.liwork),
        integer_workspace=True,
    )


def syevr(jobz, range_, uplo, n, a, a_off, lda, vl, vu, il, iu, abstol,
          m, m_off, w, w_off, z, z_off, ldz, isuppz, isuppz_off) -> int:
    """
    Selected eigenvalues (and vectors) of a symmetric matrix (MRRR).

    ``range_`` is 'A' (all), 'V' (values in the half-open interval
    (vl, vu]) or 'I' (1-based indices il..iu). The number found is
    written to ``m[m_off]``.
    """
    kind, name, call = _resolve('syevr', a)
    return with_workspace(
        name, kind,
        lambda ws: call(jobz, range_, uplo, n, _dummy(kind), 0, lda, vl, vu, il, iu, abstol,
                        _index_dummy(), 0, _dummy(kind), 0, _dummy(kind), 0, ldz,
                        _index_dummy(), 0, ws.work, 0, ws.lwork, ws.iwork, 0, ws.liwork),
        lambda ws: call(jobz, range_, uplo, n, a, a_off, lda, vl, vu, il, iu, abstol,
                        m, m_off, w, w_off, z, z_off, ldz, isuppz, isuppz_off,
                        ws.work, 0, ws.lwork, ws.iwork, 0, ws.liwork),
        integer_workspace=True,
    )


def sygvd(itype, jobz, uplo, n, a, a_off, lda, b, b_off, ldb, w, w_off) -> int:
    """Generalized symmetric-definite eigenproblem, divide and conquer."""
    kind, name, call = _resolve('sygvd', a)
    return with_workspace(
        name, kind,
        lambda ws: call(itype, jobz, uplo, n, _dummy(kind), 0, lda, _dummy(kind), 0, ldb,
                        _dummy(kind), 0, ws.work, 0, ws.lwork, ws.iwork, 0, ws.liwork),
        lambda ws: call(itype, jobz, uplo, n, a, a_off, lda, b, b_off, ldb, w, w_off,
                        ws.work, 0, ws.lwork, ws.iwork, 0, ws.liwork),
        integer_workspace=True,
    )


def sygvx(itype, jobz, range_, uplo, n, a, a_off, lda, b, b_off, ldb,
          vl, vu, il, iu, abstol, m, m_off, w, w_off, z, z_off, ldz,
          ifail, ifail_off) -> int:
    """Selected eigenvalues (and vectors) of a generalized symmetric-definite problem."""
    kind, name, call = _resolve('sygvx', a)
    # LAPACK sizes this integer workspace by formula, not by query.
    iwork = np.zeros(max(1, 5 * n), dtype=INDEX_DTYPE)
    return with_workspace(
        name, kind,
        lambda ws: call(itype, jobz, range_, uplo, n, _dummy(kind), 0, lda,
                        _dummy(kind), 0, ldb, vl, vu, il, iu, abstol,
                        _index_dummy(), 0, _dummy(kind), 0, _dummy(kind), 0, ldz,
                        ws.work, 0, ws.lwork, _index_dummy(), 0, _index_dummy(), 0),
        lambda ws: call(itype, jobz, range_, uplo, n, a, a_off, lda, b, b_off, ldb,
                        vl, vu, il, iu, abstol, m, m_off, w, w_off, z, z_off, ldz,
                        ws.work, 0, ws.lwork, iwork, 0, ifail, ifail_off),
    )


def gesvd(jobu, jobvt, m, n, a, a_off, lda, s, s_off, u, u_off, ldu,
          vt, vt_off, ldvt) -> int:
    """Singular value decomposition; ``s`` is a real buffer of the component type."""
    kind, name, call = _resolve('gesvd', a)
    rwork = np.zeros(max(1, 5 * min(m, n)), dtype=kind.component_dtype) if kind.is_complex else None
    return with_workspace(
        name, kind,
        lambda ws: call(jobu, jobvt, m, n, _dummy(kind), 0, lda, _real_dummy(kind), 0,
                        _dummy(kind), 0, ldu, _dummy(kind), 0, ldvt,
                        ws.work, 0, ws.lwork, rwork, 0),
        lambda ws: call(jobu, jobvt, m, n, a, a_off, lda, s, s_off, u, u_off, ldu,
                        vt, vt_off, ldvt, ws.work, 0, ws.lwork, rwork, 0),
    )


def gelsd(m, n, nrhs, a, a_off, lda, b, b_off, ldb, s, s_off, rcond, rank, rank_off) -> int:
    """
    Minimum-norm least squares by divide and conquer SVD.

    B must have ``max(m, n)`` rows; the solution replaces its first ``n``
    rows. ``rcond < 0`` uses machine precision as the rank cutoff.
    """
    kind, name, call = _resolve('gelsd', a)
    return with_workspace(
        name, kind,
        lambda ws: call(m, n, nrhs, _dummy(kind), 0, lda, _dummy(kind), 0, ldb,
                        _real_dummy(kind), 0, rcond, _index_dummy(), 0,
                        ws.work, 0, ws.lwork, ws.iwork, 0),
        lambda ws: call(m, n, nrhs, a, a_off, lda, b, b_off, ldb, s, s_off, rcond,
                        rank, rank_off, ws.work, 0, ws.lwork, ws.iwork, 0),
        integer_workspace=True,
    )


def geqrf(m, n, a, a_off, lda, tau, tau_off) -> int:
    """Householder QR factorization; R above the diagonal, reflectors below."""
    kind, name, call = _resolve('geqrf', a)
    return with_workspace(
        name, kind,
        lambda ws: call(m, n, _dummy(kind), 0, lda, _dummy(kind), 0, ws.work, 0, ws.lwork),
        lambda ws: call(m, n, a, a_off, lda, tau, tau_off, ws.work, 0, ws.lwork),
    )


def ormqr(side, trans, m, n, k, a, a_off, lda, tau, tau_off, c, c_off, ldc) -> int:
    """Multiply C by Q or Q^T from a geqrf factorization."""
    kind, name, call = _resolve('ormqr', a)
    return with_workspace(
        name, kind,
        lambda ws: call(side, trans, m, n, k, _dummy(kind), 0, lda, _dummy(kind), 0,
                        _dummy(kind), 0, ldc, ws.work, 0, ws.lwork),
        lambda ws: call(side, trans, m, n, k, a, a_off, lda, tau, tau_off,
                        c, c_off, ldc, ws.work, 0, ws.lwork),
    )


def orgqr(m, n, k, a, a_off, lda, tau, tau_off) -> int:
    """Form the first n columns of Q from a geqrf factorization, in place."""
    kind, name, call = _resolve('orgqr', a)
    return with_workspace(
        name, kind,
        lambda ws: call(m, n, k, _dummy(kind), 0, lda, _dummy(kind), 0, ws.work, 0, ws.lwork),
        lambda ws: call(m, n, k, a, a_off, lda, tau, tau_off, ws.work, 0, ws.lwork),
    )


def geev(jobvl, jobvr, n, a, a_off, lda, wr, wr_off, wi, wi_off,
         vl, vl_off, ldvl, vr, vr_off, ldvr) -> int:
    """
    Eigenvalues and left/right eigenvectors of a general matrix.

    Real kinds split eigenvalues into ``wr``/``wi`` and pack conjugate
    eigenvector pairs into consecutive real columns; complex kinds write
    the eigenvalues to ``wr`` and ignore ``wi``.
    """
    kind, name, call = _resolve('geev', a)
    rwork = np.zeros(max(1, 2 * n), dtype=kind.component_dtype) if kind.is_complex else None
    wi_dummy = None if kind.is_complex else _dummy(kind)
    return with_workspace(
        name, kind,
        lambda ws: call(jobvl, jobvr, n, _dummy(kind), 0, lda, _dummy(kind), 0, wi_dummy, 0,
                        _dummy(kind), 0, ldvl, _dummy(kind), 0, ldvr,
                        ws.work, 0, ws.lwork, rwork, 0),
        lambda ws: call(jobvl, jobvr, n, a, a_off, lda, wr, wr_off, wi, wi_off,
                        vl, vl_off, ldvl, vr, vr_off, ldvr, ws.work, 0, ws.lwork, rwork, 0),
    )
