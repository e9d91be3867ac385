"""
Shared machinery for BLAS/LAPACK backends.

BackendBase implements the public routine surface once: argument
validation in LAPACK's own order (an illegal argument number ``k``
becomes status ``-k``), the ``lwork == -1`` workspace query, and the
translation of (buffer, offset, stride/leading-dimension) triples into
numpy views. Concrete backends only fill in the numeric kernels
(``_syev``, ``_gesvd``, ...) and, optionally, sharper workspace estimates
(``_syev_lwork``, ...). The default estimates are the documented LAPACK
minimums.

Views returned by vector_view/matrix_view share memory with the caller's
buffer, so kernels write their results straight into the caller's data.
"""

import functools
import math
from typing import Any, Callable

import numpy as np
from numpy.lib.stride_tricks import as_strided

from pymatrix.core.backends.precision import ScalarKind, kind_for_prefix
from pymatrix.core.capabilities import ROUTINES
from pymatrix.core.exceptions import BackendArgumentError, UnsupportedRoutineError


# LAPACK's SMLSIZ for the divide and conquer least squares solver
GELSD_SMLSIZ = 25


# ═══════════════════════════════════════════════════════════════════════
# Buffer views
# ═══════════════════════════════════════════════════════════════════════


def _check_buffer(routine: str, kind: ScalarKind, name: str, buffer: np.ndarray) -> None:
    if not isinstance(buffer, np.ndarray) or buffer.ndim != 1:
        raise BackendArgumentError(f"{name} must be a 1-D numpy buffer", routine, name)
    if buffer.dtype != kind.dtype:
        raise BackendArgumentError(
            f"{name} has dtype {buffer.dtype}, expected {kind.dtype}", routine, name
        )


def vector_view(
    routine: str,
    kind: ScalarKind,
    name: str,
    buffer: np.ndarray,
    offset: int,
    n: int,
    inc: int,
) -> np.ndarray:
    """
    Strided view of ``n`` elements starting at ``offset``.

    Raises:
        BackendArgumentError: On a negative count, a non-positive stride or
            an element range outside the buffer
    """
    _check_buffer(routine, kind, name, buffer)
    if n < 0:
        raise BackendArgumentError(f"n must be non-negative, got {n}", routine, 'n')
    if inc <= 0:
        raise BackendArgumentError(f"inc{name} must be positive, got {inc}", routine, 'inc' + name)
    if n == 0:
        return buffer[0:0]
    last = offset + (n - 1) * inc
    if offset < 0 or last >= buffer.shape[0]:
        raise BackendArgumentError(
            f"{name}: elements {offset}..{last} outside buffer of length {buffer.shape[0]}",
            routine, name,
        )
    return buffer[offset:last + 1:inc]


def matrix_view(
    routine: str,
    kind: ScalarKind,
    name: str,
    buffer: np.ndarray,
    offset: int,
    rows: int,
    columns: int,
    ld: int,
) -> np.ndarray:
    """
    2-D column-major view of a ``rows x columns`` block with leading dimension ``ld``.

    Raises:
        BackendArgumentError: If the block does not fit in the buffer
    """
    _check_buffer(routine, kind, name, buffer)
    if rows == 0 or columns == 0:
        return np.zeros((rows, columns), dtype=kind.dtype)
    end = offset + ld * (columns - 1) + rows
    if offset < 0 or end > buffer.shape[0]:
        raise BackendArgumentError(
            f"{name}: {rows}x{columns} block at offset {offset} with leading "
            f"dimension {ld} needs {end} elements, buffer has {buffer.shape[0]}",
            routine, name,
        )
    step = buffer.strides[0]
    return as_strided(buffer[offset:], shape=(rows, columns), strides=(step, ld * step))


def first_illegal(*checks: tuple[bool, int]) -> int:
    """
    LAPACK-style argument check.

    Args:
        checks: (condition, position) pairs in argument order

    Returns:
        ``-position`` of the first failing condition, or 0
    """
    for ok, position in checks:
        if not ok:
            return -position
    return 0


def _flag(value: str, allowed: str) -> bool:
    return isinstance(value, str) and len(value) == 1 and value.upper() in allowed


def _work_ok(lwork: int, minimum: int) -> bool:
    return lwork == -1 or lwork >= minimum


# ═══════════════════════════════════════════════════════════════════════
# LAPACK minimum workspace lengths
# ═══════════════════════════════════════════════════════════════════════


def syev_min_lwork(n: int) -> int:
    return max(1, 3 * n - 1)


def syevd_min_work(jobz: str, n: int) -> tuple[int, int]:
    """(lwork, liwork) minimums for syevd and sygvd."""
    if n <= 1:
        return 1, 1
    if jobz.upper() == 'V':
        return 1 + 6 * n + 2 * n * n, 3 + 5 * n
    return 2 * n + 1, 1


def syevr_min_work(n: int) -> tuple[int, int]:
    return max(1, 26 * n), max(1, 10 * n)


def sygvx_min_lwork(n: int) -> int:
    return max(1, 8 * n)


def gesvd_min_lwork(kind: ScalarKind, m: int, n: int) -> int:
    mn = min(m, n)
    if kind.is_complex:
        return max(1, 2 * mn + max(m, n))
    return max(1, 3 * mn + max(m, n), 5 * mn)


def gelsd_nlvl(m: int, n: int) -> int:
    minmn = min(m, n)
    if minmn == 0:
        return 0
    return max(0, int(math.log2(minmn / (GELSD_SMLSIZ + 1))) + 1)


def gelsd_min_work(m: int, n: int, nrhs: int) -> tuple[int, int]:
    minmn = min(m, n)
    nlvl = gelsd_nlvl(m, n)
    lwork = (12 * minmn + 2 * minmn * GELSD_SMLSIZ + 8 * minmn * nlvl
             + minmn * nrhs + (GELSD_SMLSIZ + 1) ** 2)
    liwork = max(1, 3 * minmn * nlvl + 11 * minmn)
    return max(1, lwork), liwork


def geqrf_min_lwork(n: int) -> int:
    return max(1, n)


def ormqr_min_lwork(side: str, m: int, n: int) -> int:
    return max(1, n) if side.upper() == 'L' else max(1, m)


def orgqr_min_lwork(n: int) -> int:
    return max(1, n)


def geev_min_lwork(kind: ScalarKind, jobvl: str, jobvr: str, n: int) -> int:
    if kind.is_complex:
        return max(1, 2 * n)
    if 'V' in (jobvl.upper(), jobvr.upper()):
        return max(1, 4 * n)
    return max(1, 3 * n)


# ═══════════════════════════════════════════════════════════════════════
# Backend base class
# ═══════════════════════════════════════════════════════════════════════


class BackendBase:
    """
    Routine surface shared by all backends.

    Public methods take the scalar kind first (bound by routine()), then
    the standard BLAS/LAPACK arguments with each array replaced by a
    (buffer, offset) pair followed by its stride or leading dimension.
    Pivot arrays are 0-based int32 buffers. In sysv pivots a 2x2 block
    interchange with row i is stored as ~i (that is -(i + 1)).
    """

    _name = 'base'

    @property
    def name(self) -> str:
        return self._name

    def supports(self, routine: str) -> bool:
        if not isinstance(routine, str):
            return False
        entry = ROUTINES.get(routine)
        return entry is not None and hasattr(self, entry[0])

    def routine(self, routine: str) -> Callable[..., Any]:
        if not self.supports(routine):
            raise UnsupportedRoutineError(self.name, routine)
        family, prefix = ROUTINES[routine]
        bound = functools.partial(getattr(self, family), kind_for_prefix(prefix))
        return functools.update_wrapper(bound, getattr(self, family))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    # ───────────────────────────────────────────────────────────────────
    # BLAS level 1
    # ───────────────────────────────────────────────────────────────────

    def copy(self, kind, n, x, x_off, incx, y, y_off, incy) -> None:
        xv = vector_view(kind.routine('copy'), kind, 'x', x, x_off, n, incx)
        yv = vector_view(kind.routine('copy'), kind, 'y', y, y_off, n, incy)
        if n:
            self._copy(kind, xv, yv, x, x_off, incx, y, y_off, incy)

    def swap(self, kind, n, x, x_off, incx, y, y_off, incy) -> None:
        xv = vector_view(kind.routine('swap'), kind, 'x', x, x_off, n, incx)
        yv = vector_view(kind.routine('swap'), kind, 'y', y, y_off, n, incy)
        if n:
            self._swap(kind, xv, yv, x, x_off, incx, y, y_off, incy)

    def axpy(self, kind, n, alpha, x, x_off, incx, y, y_off, incy) -> None:
        xv = vector_view(kind.routine('axpy'), kind, 'x', x, x_off, n, incx)
        yv = vector_view(kind.routine('axpy'), kind, 'y', y, y_off, n, incy)
        if n:
            self._axpy(kind, kind.cast(alpha), xv, yv, x, x_off, incx, y, y_off, incy)

    def scal(self, kind, n, alpha, x, x_off, incx) -> None:
        xv = vector_view(kind.routine('scal'), kind, 'x', x, x_off, n, incx)
        if n:
            self._scal(kind, kind.cast(alpha), xv, x, x_off, incx)

    def rscal(self, kind, n, alpha, x, x_off, incx) -> None:
        name = 'csscal' if kind.prefix == 'c' else 'zdscal'
        xv = vector_view(name, kind, 'x', x, x_off, n, incx)
        if n:
            self._rscal(kind, float(alpha), xv, x, x_off, incx)

    def dot(self, kind, n, x, x_off, incx, y, y_off, incy):
        xv = vector_view(kind.routine('dot'), kind, 'x', x, x_off, n, incx)
        yv = vector_view(kind.routine('dot'), kind, 'y', y, y_off, n, incy)
        if n == 0:
            return kind.cast(0)
        return self._dot(kind, False, xv, yv, x, x_off, incx, y, y_off, incy)

    def dotu(self, kind, n, x, x_off, incx, y, y_off, incy):
        xv = vector_view(kind.routine('dotu'), kind, 'x', x, x_off, n, incx)
        yv = vector_view(kind.routine('dotu'), kind, 'y', y, y_off, n, incy)
        if n == 0:
            return kind.cast(0)
        return self._dot(kind, False, xv, yv, x, x_off, incx, y, y_off, incy)

    def dotc(self, kind, n, x, x_off, incx, y, y_off, incy):
        xv = vector_view(kind.routine('dotc'), kind, 'x', x, x_off, n, incx)
        yv = vector_view(kind.routine('dotc'), kind, 'y', y, y_off, n, incy)
        if n == 0:
            return kind.cast(0)
        return self._dot(kind, True, xv, yv, x, x_off, incx, y, y_off, incy)

    def nrm2(self, kind, n, x, x_off, incx) -> float:
        xv = vector_view('nrm2', kind, 'x', x, x_off, n, incx)
        if n == 0:
            return 0.0
        return float(self._nrm2(kind, xv, x, x_off, incx))

    def asum(self, kind, n, x, x_off, incx) -> float:
        xv = vector_view('asum', kind, 'x', x, x_off, n, incx)
        if n == 0:
            return 0.0
        return float(self._asum(kind, xv, x, x_off, incx))

    def iamax(self, kind, n, x, x_off, incx) -> int:
        """0-based index of the first element with the largest |re| + |im|, -1 if n == 0."""
        xv = vector_view('iamax', kind, 'x', x, x_off, n, incx)
        if n == 0:
            return -1
        return int(self._iamax(kind, xv, x, x_off, incx))

    # ───────────────────────────────────────────────────────────────────
    # BLAS level 2 and 3
    # ───────────────────────────────────────────────────────────────────

    def gemv(self, kind, trans, m, n, alpha, a, a_off, lda,
             x, x_off, incx, beta, y, y_off, incy) -> None:
        routine = kind.routine('gemv')
        if not _flag(trans, 'NTC'):
            raise BackendArgumentError(f"illegal trans flag {trans!r}", routine, 'trans')
        if m < 0 or n < 0 or lda < max(1, m):
            raise BackendArgumentError(
                f"illegal dimensions m={m}, n={n}, lda={lda}", routine, 'm'
            )
        av = matrix_view(routine, kind, 'a', a, a_off, m, n, lda)
        nx, ny = (n, m) if trans.upper() == 'N' else (m, n)
        xv = vector_view(routine, kind, 'x', x, x_off, nx, incx)
        yv = vector_view(routine, kind, 'y', y, y_off, ny, incy)
        if ny:
            self._gemv(kind, trans.upper(), kind.cast(alpha), av, xv,
                       kind.cast(beta), yv, x, x_off, incx, y, y_off, incy)

    def _rank_one(self, family, kind, m, n, alpha, x, x_off, incx, y, y_off, incy, a, a_off, lda):
        routine = kind.routine(family)
        if m < 0 or n < 0 or lda < max(1, m):
            raise BackendArgumentError(
                f"illegal dimensions m={m}, n={n}, lda={lda}", routine, 'm'
            )
        xv = vector_view(routine, kind, 'x', x, x_off, m, incx)
        yv = vector_view(routine, kind, 'y', y, y_off, n, incy)
        av = matrix_view(routine, kind, 'a', a, a_off, m, n, lda)
        if m and n:
            self._ger(kind, family == 'gerc', kind.cast(alpha), xv, yv, av)

    def ger(self, kind, m, n, alpha, x, x_off, incx, y, y_off, incy, a, a_off, lda) -> None:
        self._rank_one('ger', kind, m, n, alpha, x, x_off, incx, y, y_off, incy, a, a_off, lda)

    def geru(self, kind, m, n, alpha, x, x_off, incx, y, y_off, incy, a, a_off, lda) -> None:
        self._rank_one('geru', kind, m, n, alpha, x, x_off, incx, y, y_off, incy, a, a_off, lda)

    def gerc(self, kind, m, n, alpha, x, x_off, incx, y, y_off, incy, a, a_off, lda) -> None:
        self._rank_one('gerc', kind, m, n, alpha, x, x_off, incx, y, y_off, incy, a, a_off, lda)

    def gemm(self, kind, transa, transb, m, n, k, alpha, a, a_off, lda,
             b, b_off, ldb, beta, c, c_off, ldc) -> None:
        routine = kind.routine('gemm')
        if not _flag(transa, 'NTC'):
            raise BackendArgumentError(f"illegal transa flag {transa!r}", routine, 'transa')
        if not _flag(transb, 'NTC'):
            raise BackendArgumentError(f"illegal transb flag {transb!r}", routine, 'transb')
        a_rows, a_cols = (m, k) if transa.upper() == 'N' else (k, m)
        b_rows, b_cols = (k, n) if transb.upper() == 'N' else (n, k)
        if min(m, n, k) < 0 or lda < max(1, a_rows) or ldb < max(1, b_rows) or ldc < max(1, m):
            raise BackendArgumentError(
                f"illegal dimensions m={m}, n={n}, k={k}, lda={lda}, ldb={ldb}, ldc={ldc}",
                routine, 'm',
            )
        av = matrix_view(routine, kind, 'a', a, a_off, a_rows, a_cols, lda)
        bv = matrix_view(routine, kind, 'b', b, b_off, b_rows, b_cols, ldb)
        cv = matrix_view(routine, kind, 'c', c, c_off, m, n, ldc)
        if m and n:
            self._gemm(kind, transa.upper(), transb.upper(), kind.cast(alpha), av, bv,
                       kind.cast(beta), cv)

    # ───────────────────────────────────────────────────────────────────
    # LAPACK without workspace
    # ───────────────────────────────────────────────────────────────────

    def gesv(self, kind, n, nrhs, a, a_off, lda, ipiv, ipiv_off, b, b_off, ldb) -> int:
        info = first_illegal((n >= 0, 1), (nrhs >= 0, 2), (lda >= max(1, n), 4),
                             (ldb >= max(1, n), 7))
        if info:
            return info
        routine = kind.routine('gesv')
        av = matrix_view(routine, kind, 'a', a, a_off, n, n, lda)
        bv = matrix_view(routine, kind, 'b', b, b_off, n, nrhs, ldb)
        pv = _pivot_view(routine, ipiv, ipiv_off, n)
        if n == 0:
            return 0
        return self._gesv(kind, av, pv, bv)

    def getrf(self, kind, m, n, a, a_off, lda, ipiv, ipiv_off) -> int:
        info = first_illegal((m >= 0, 1), (n >= 0, 2), (lda >= max(1, m), 4))
        if info:
            return info
        routine = kind.routine('getrf')
        av = matrix_view(routine, kind, 'a', a, a_off, m, n, lda)
        pv = _pivot_view(routine, ipiv, ipiv_off, min(m, n))
        if m == 0 or n == 0:
            return 0
        return self._getrf(kind, av, pv)

    def potrf(self, kind, uplo, n, a, a_off, lda) -> int:
        info = first_illegal((_flag(uplo, 'UL'), 1), (n >= 0, 2), (lda >= max(1, n), 4))
        if info:
            return info
        av = matrix_view(kind.routine('potrf'), kind, 'a', a, a_off, n, n, lda)
        if n == 0:
            return 0
        return self._potrf(kind, uplo.upper(), av)

    def posv(self, kind, uplo, n, nrhs, a, a_off, lda, b, b_off, ldb) -> int:
        info = first_illegal((_flag(uplo, 'UL'), 1), (n >= 0, 2), (nrhs >= 0, 3),
                             (lda >= max(1, n), 5), (ldb >= max(1, n), 7))
        if info:
            return info
        routine = kind.routine('posv')
        av = matrix_view(routine, kind, 'a', a, a_off, n, n, lda)
        bv = matrix_view(routine, kind, 'b', b, b_off, n, nrhs, ldb)
        if n == 0:
            return 0
        return self._posv(kind, uplo.upper(), av, bv)

    # ───────────────────────────────────────────────────────────────────
    # LAPACK with caller-managed workspace
    # ───────────────────────────────────────────────────────────────────

    def sysv(self, kind, uplo, n, nrhs, a, a_off, lda, ipiv, ipiv_off, b, b_off, ldb,
             work, work_off, lwork) -> int:
        info = first_illegal((_flag(uplo, 'UL'), 1), (n >= 0, 2), (nrhs >= 0, 3),
                             (lda >= max(1, n), 5), (ldb >= max(1, n), 8),
                             (_work_ok(lwork, 1), 10))
        if info:
            return info
        routine = kind.routine('sysv')
        if lwork == -1:
            return self._report(routine, kind, work, work_off, self._sysv_lwork(kind, uplo, n))
        _check_work(routine, kind, work, work_off, lwork)
        av = matrix_view(routine, kind, 'a', a, a_off, n, n, lda)
        bv = matrix_view(routine, kind, 'b', b, b_off, n, nrhs, ldb)
        pv = _pivot_view(routine, ipiv, ipiv_off, n)
        if n == 0:
            return 0
        return self._sysv(kind, uplo.upper(), av, pv, bv, lwork)

    def syev(self, kind, jobz, uplo, n, a, a_off, lda, w, w_off,
             work, work_off, lwork) -> int:
        info = first_illegal((_flag(jobz, 'NV'), 1), (_flag(uplo, 'UL'), 2), (n >= 0, 3),
                             (lda >= max(1, n), 5), (_work_ok(lwork, syev_min_lwork(n)), 8))
        if info:
            return info
        routine = kind.routine('syev')
        if lwork == -1:
            return self._report(routine, kind, work, work_off,
                                self._syev_lwork(kind, jobz.upper(), uplo.upper(), n))
        _check_work(routine, kind, work, work_off, lwork)
        av = matrix_view(routine, kind, 'a', a, a_off, n, n, lda)
        wv = vector_view(routine, kind, 'w', w, w_off, n, 1)
        if n == 0:
            return 0
        return self._syev(kind, jobz.upper(), uplo.upper(), av, wv, lwork)

    def syevd(self, kind, jobz, uplo, n, a, a_off, lda, w, w_off,
              work, work_off, lwork, iwork, iwork_off, liwork) -> int:
        min_lwork, min_liwork = syevd_min_work(jobz if _flag(jobz, 'NV') else 'N', n)
        info = first_illegal((_flag(jobz, 'NV'), 1), (_flag(uplo, 'UL'), 2), (n >= 0, 3),
                             (lda >= max(1, n), 5),
                             (_work_ok(lwork, min_lwork) or liwork == -1, 8),
                             (_work_ok(liwork, min_liwork) or lwork == -1, 10))
        if info:
            return info
        routine = kind.routine('syevd')
        if lwork == -1 or liwork == -1:
            size, isize = self._syevd_lwork(kind, jobz.upper(), uplo.upper(), n)
            _check_iwork(routine, iwork, iwork_off, 1)
            iwork[iwork_off] = isize
            return self._report(routine, kind, work, work_off, size)
        _check_work(routine, kind, work, work_off, lwork)
        _check_iwork(routine, iwork, iwork_off, liwork)
        av = matrix_view(routine, kind, 'a', a, a_off, n, n, lda)
        wv = vector_view(routine, kind, 'w', w, w_off, n, 1)
        if n == 0:
            return 0
        return self._syevd(kind, jobz.upper(), uplo.upper(), av, wv, lwork, liwork)

    def syevr(self, kind, jobz, range_, uplo, n, a, a_off, lda, vl, vu, il, iu, abstol,
              m, m_off, w, w_off, z, z_off, ldz, isuppz, isuppz_off,
              work, work_off, lwork, iwork, iwork_off, liwork) -> int:
        min_lwork, min_liwork = syevr_min_work(n)
        range_ok = _flag(range_, 'AVI')
        r = range_.upper() if range_ok else ''
        info = first_illegal(
            (_flag(jobz, 'NV'), 1), (range_ok, 2), (_flag(uplo, 'UL'), 3), (n >= 0, 4),
            (lda >= max(1, n), 6),
            (r != 'V' or n == 0 or vl < vu, 8),
            (r != 'I' or 1 <= il <= max(1, n) or (n == 0 and il == 1), 9),
            (r != 'I' or min(n, il) <= iu <= n, 10),
            (ldz >= 1 and (jobz.upper() != 'V' or ldz >= max(1, n)), 15),
            (_work_ok(lwork, min_lwork) or liwork == -1, 18),
            (_work_ok(liwork, min_liwork) or lwork == -1, 20),
        )
        if info:
            return info
        routine = kind.routine('syevr')
        if lwork == -1 or liwork == -1:
            size, isize = self._syevr_lwork(kind, uplo.upper(), n)
            _check_iwork(routine, iwork, iwork_off, 1)
            iwork[iwork_off] = isize
            return self._report(routine, kind, work, work_off, size)
        _check_work(routine, kind, work, work_off, lwork)
        _check_iwork(routine, iwork, iwork_off, liwork)
        av = matrix_view(routine, kind, 'a', a, a_off, n, n, lda)
        wv = vector_view(routine, kind, 'w', w, w_off, n, 1)
        zv = matrix_view(routine, kind, 'z', z, z_off, n if jobz.upper() == 'V' else 0,
                         _eigen_count(r, n, il, iu) if jobz.upper() == 'V' else 0, ldz)
        if n == 0:
            m[m_off] = 0
            return 0
        found, info = self._syevr(kind, jobz.upper(), r, uplo.upper(), av,
                                  vl, vu, il, iu, abstol, wv, zv)
        m[m_off] = found
        if isuppz is not None and found and jobz.upper() == 'V':
            _check_iwork(routine, isuppz, isuppz_off, 2 * found)
            isuppz[isuppz_off:isuppz_off + 2 * found] = _support(zv[:, :found], n)
        return info

    def sygvd(self, kind, itype, jobz, uplo, n, a, a_off, lda, b, b_off, ldb, w, w_off,
              work, work_off, lwork, iwork, iwork_off, liwork) -> int:
        min_lwork, min_liwork = syevd_min_work(jobz if _flag(jobz, 'NV') else 'N', n)
        info = first_illegal(
            (itype in (1, 2, 3), 1), (_flag(jobz, 'NV'), 2), (_flag(uplo, 'UL'), 3),
            (n >= 0, 4), (lda >= max(1, n), 6), (ldb >= max(1, n), 8),
            (_work_ok(lwork, min_lwork) or liwork == -1, 11),
            (_work_ok(liwork, min_liwork) or lwork == -1, 13),
        )
        if info:
            return info
        routine = kind.routine('sygvd')
        if lwork == -1 or liwork == -1:
            size, isize = self._sygvd_lwork(kind, jobz.upper(), n)
            _check_iwork(routine, iwork, iwork_off, 1)
            iwork[iwork_off] = isize
            return self._report(routine, kind, work, work_off, size)
        _check_work(routine, kind, work, work_off, lwork)
        _check_iwork(routine, iwork, iwork_off, liwork)
        av = matrix_view(routine, kind, 'a', a, a_off, n, n, lda)
        bv = matrix_view(routine, kind, 'b', b, b_off, n, n, ldb)
        wv = vector_view(routine, kind, 'w', w, w_off, n, 1)
        if n == 0:
            return 0
        return self._sygvd(kind, itype, jobz.upper(), uplo.upper(), av, bv, wv, lwork, liwork)

    def sygvx(self, kind, itype, jobz, range_, uplo, n, a, a_off, lda, b, b_off, ldb,
              vl, vu, il, iu, abstol, m, m_off, w, w_off, z, z_off, ldz,
              work, work_off, lwork, iwork, iwork_off, ifail, ifail_off) -> int:
        range_ok = _flag(range_, 'AVI')
        r = range_.upper() if range_ok else ''
        info = first_illegal(
            (itype in (1, 2, 3), 1), (_flag(jobz, 'NV'), 2), (range_ok, 3),
            (_flag(uplo, 'UL'), 4), (n >= 0, 5), (lda >= max(1, n), 7),
            (ldb >= max(1, n), 9),
            (r != 'V' or n == 0 or vl < vu, 11),
            (r != 'I' or 1 <= il <= max(1, n) or (n == 0 and il == 1), 12),
            (r != 'I' or min(n, il) <= iu <= n, 13),
            (ldz >= 1 and (jobz.upper() != 'V' or ldz >= max(1, n)), 18),
            (_work_ok(lwork, sygvx_min_lwork(n)), 20),
        )
        if info:
            return info
        routine = kind.routine('sygvx')
        if lwork == -1:
            return self._report(routine, kind, work, work_off,
                                self._sygvx_lwork(kind, uplo.upper(), n))
        _check_work(routine, kind, work, work_off, lwork)
        _check_iwork(routine, iwork, iwork_off, 5 * n)
        av = matrix_view(routine, kind, 'a', a, a_off, n, n, lda)
        bv = matrix_view(routine, kind, 'b', b, b_off, n, n, ldb)
        wv = vector_view(routine, kind, 'w', w, w_off, n, 1)
        zv = matrix_view(routine, kind, 'z', z, z_off, n if jobz.upper() == 'V' else 0,
                         _eigen_count(r, n, il, iu) if jobz.upper() == 'V' else 0, ldz)
        if n == 0:
            m[m_off] = 0
            return 0
        found, info = self._sygvx(kind, itype, jobz.upper(), r, uplo.upper(), av, bv,
                                  vl, vu, il, iu, abstol, wv, zv, lwork)
        m[m_off] = found
        if ifail is not None and jobz.upper() == 'V':
            _check_iwork(routine, ifail, ifail_off, n)
            ifail[ifail_off:ifail_off + n] = 0
        return info

    def gesvd(self, kind, jobu, jobvt, m, n, a, a_off, lda, s, s_off, u, u_off, ldu,
              vt, vt_off, ldvt, work, work_off, lwork, rwork=None, rwork_off=0) -> int:
        ju = jobu.upper() if _flag(jobu, 'ASN') else ''
        jv = jobvt.upper() if _flag(jobvt, 'ASN') else ''
        mn = min(m, n)
        info = first_illegal(
            (ju != '', 1), (jv != '', 2), (m >= 0, 3), (n >= 0, 4), (lda >= max(1, m), 6),
            (ldu >= 1 and (ju not in 'AS' or ldu >= m), 9),
            (ldvt >= 1 and (jv != 'A' or ldvt >= n) and (jv != 'S' or ldvt >= mn), 11),
            (_work_ok(lwork, gesvd_min_lwork(kind, m, n)), 13),
        )
        if info:
            return info
        routine = kind.routine('gesvd')
        if lwork == -1:
            return self._report(routine, kind, work, work_off,
                                self._gesvd_lwork(kind, ju, jv, m, n))
        _check_work(routine, kind, work, work_off, lwork)
        av = matrix_view(routine, kind, 'a', a, a_off, m, n, lda)
        sv = _real_view(routine, kind, 's', s, s_off, mn)
        u_cols = m if ju == 'A' else mn
        vt_rows = n if jv == 'A' else mn
        uv = matrix_view(routine, kind, 'u', u, u_off, m if ju != 'N' else 0,
                         u_cols if ju != 'N' else 0, ldu)
        vtv = matrix_view(routine, kind, 'vt', vt, vt_off, vt_rows if jv != 'N' else 0,
                          n if jv != 'N' else 0, ldvt)
        if m == 0 or n == 0:
            return 0
        return self._gesvd(kind, ju, jv, av, sv, uv, vtv, lwork)

    def gelsd(self, kind, m, n, nrhs, a, a_off, lda, b, b_off, ldb, s, s_off, rcond,
              rank, rank_off, work, work_off, lwork, iwork, iwork_off) -> int:
        min_lwork, min_liwork = gelsd_min_work(m, n, nrhs)
        info = first_illegal(
            (m >= 0, 1), (n >= 0, 2), (nrhs >= 0, 3), (lda >= max(1, m), 5),
            (ldb >= max(1, m, n), 7), (_work_ok(lwork, min_lwork), 12),
        )
        if info:
            return info
        routine = kind.routine('gelsd')
        if lwork == -1:
            size, isize = self._gelsd_lwork(kind, m, n, nrhs, rcond)
            _check_iwork(routine, iwork, iwork_off, 1)
            iwork[iwork_off] = isize
            return self._report(routine, kind, work, work_off, size)
        _check_work(routine, kind, work, work_off, lwork)
        _check_iwork(routine, iwork, iwork_off, min_liwork)
        av = matrix_view(routine, kind, 'a', a, a_off, m, n, lda)
        bv = matrix_view(routine, kind, 'b', b, b_off, max(m, n), nrhs, ldb)
        sv = _real_view(routine, kind, 's', s, s_off, min(m, n))
        if m == 0 or n == 0:
            rank[rank_off] = 0
            bv[:n] = 0
            return 0
        found, info = self._gelsd(kind, m, n, av, bv, sv, rcond, lwork)
        rank[rank_off] = found
        return info

    def geqrf(self, kind, m, n, a, a_off, lda, tau, tau_off, work, work_off, lwork) -> int:
        info = first_illegal((m >= 0, 1), (n >= 0, 2), (lda >= max(1, m), 4),
                             (_work_ok(lwork, geqrf_min_lwork(n)), 7))
        if info:
            return info
        routine = kind.routine('geqrf')
        if lwork == -1:
            return self._report(routine, kind, work, work_off, self._geqrf_lwork(kind, m, n))
        _check_work(routine, kind, work, work_off, lwork)
        av = matrix_view(routine, kind, 'a', a, a_off, m, n, lda)
        tv = vector_view(routine, kind, 'tau', tau, tau_off, min(m, n), 1)
        if m == 0 or n == 0:
            return 0
        return self._geqrf(kind, av, tv, lwork)

    def ormqr(self, kind, side, trans, m, n, k, a, a_off, lda, tau, tau_off,
              c, c_off, ldc, work, work_off, lwork) -> int:
        side_ok = _flag(side, 'LR')
        nq = m if side_ok and side.upper() == 'L' else n
        info = first_illegal(
            (side_ok, 1), (_flag(trans, 'NT'), 2), (m >= 0, 3), (n >= 0, 4),
            (0 <= k <= nq, 5), (lda >= max(1, nq), 7), (ldc >= max(1, m), 10),
            (_work_ok(lwork, ormqr_min_lwork(side, m, n)), 12),
        )
        if info:
            return info
        routine = kind.routine('ormqr')
        if lwork == -1:
            return self._report(routine, kind, work, work_off,
                                self._ormqr_lwork(kind, side.upper(), m, n))
        _check_work(routine, kind, work, work_off, lwork)
        av = matrix_view(routine, kind, 'a', a, a_off, nq, k, lda)
        tv = vector_view(routine, kind, 'tau', tau, tau_off, k, 1)
        cv = matrix_view(routine, kind, 'c', c, c_off, m, n, ldc)
        if m == 0 or n == 0 or k == 0:
            return 0
        return self._ormqr(kind, side.upper(), trans.upper(), av, tv, cv, lwork)

    def orgqr(self, kind, m, n, k, a, a_off, lda, tau, tau_off, work, work_off, lwork) -> int:
        info = first_illegal((m >= 0, 1), (0 <= n <= m, 2), (0 <= k <= n, 3),
                             (lda >= max(1, m), 5), (_work_ok(lwork, orgqr_min_lwork(n)), 8))
        if info:
            return info
        routine = kind.routine('orgqr')
        if lwork == -1:
            return self._report(routine, kind, work, work_off, self._orgqr_lwork(kind, m, n))
        _check_work(routine, kind, work, work_off, lwork)
        av = matrix_view(routine, kind, 'a', a, a_off, m, n, lda)
        tv = vector_view(routine, kind, 'tau', tau, tau_off, k, 1)
        if n == 0:
            return 0
        return self._orgqr(kind, av, tv, lwork)

    def geev(self, kind, jobvl, jobvr, n, a, a_off, lda, wr, wr_off, wi, wi_off,
             vl, vl_off, ldvl, vr, vr_off, ldvr, work, work_off, lwork,
             rwork=None, rwork_off=0) -> int:
        """
        General eigenproblem.

        For real kinds the eigenvalues are returned split into ``wr`` and
        ``wi`` and complex-conjugate eigenvector pairs are packed into two
        consecutive real columns. For complex kinds ``wr`` receives the
        complex eigenvalues and ``wi`` is ignored (pass None).
        """
        shift = -1 if kind.is_complex else 0
        jl = jobvl.upper() if _flag(jobvl, 'NV') else ''
        jr = jobvr.upper() if _flag(jobvr, 'NV') else ''
        info = first_illegal(
            (jl != '', 1), (jr != '', 2), (n >= 0, 3), (lda >= max(1, n), 5),
            (ldvl >= 1 and (jl != 'V' or ldvl >= n), 9 + shift),
            (ldvr >= 1 and (jr != 'V' or ldvr >= n), 11 + shift),
            (_work_ok(lwork, geev_min_lwork(kind, jl or 'N', jr or 'N', n)), 13 + shift),
        )
        if info:
            return info
        routine = kind.routine('geev')
        if lwork == -1:
            return self._report(routine, kind, work, work_off, self._geev_lwork(kind, jl, jr, n))
        _check_work(routine, kind, work, work_off, lwork)
        av = matrix_view(routine, kind, 'a', a, a_off, n, n, lda)
        wrv = vector_view(routine, kind, 'wr', wr, wr_off, n, 1)
        wiv = None if kind.is_complex else vector_view(routine, kind, 'wi', wi, wi_off, n, 1)
        vlv = matrix_view(routine, kind, 'vl', vl, vl_off, n if jl == 'V' else 0, n, ldvl)
        vrv = matrix_view(routine, kind, 'vr', vr, vr_off, n if jr == 'V' else 0, n, ldvr)
        if n == 0:
            return 0
        return self._geev(kind, jl, jr, av, wrv, wiv, vlv, vrv, lwork)

    # ───────────────────────────────────────────────────────────────────
    # Workspace estimates (LAPACK minimums unless a backend knows better)
    # ───────────────────────────────────────────────────────────────────

    def _report(self, routine: str, kind: ScalarKind, work, work_off, size: int) -> int:
        _check_work(routine, kind, work, work_off, 1)
        work[work_off] = size
        return 0

    def _sysv_lwork(self, kind, uplo, n):
        return 1

    def _syev_lwork(self, kind, jobz, uplo, n):
        return syev_min_lwork(n)

    def _syevd_lwork(self, kind, jobz, uplo, n):
        return syevd_min_work(jobz, n)

    def _syevr_lwork(self, kind, uplo, n):
        return syevr_min_work(n)

    def _sygvd_lwork(self, kind, jobz, n):
        return syevd_min_work(jobz, n)

    def _sygvx_lwork(self, kind, uplo, n):
        return sygvx_min_lwork(n)

    def _gesvd_lwork(self, kind, jobu, jobvt, m, n):
        return gesvd_min_lwork(kind, m, n)

    def _gelsd_lwork(self, kind, m, n, nrhs, rcond):
        return gelsd_min_work(m, n, nrhs)

    def _geqrf_lwork(self, kind, m, n):
        return geqrf_min_lwork(n)

    def _ormqr_lwork(self, kind, side, m, n):
        return ormqr_min_lwork(side, m, n)

    def _orgqr_lwork(self, kind, m, n):
        return orgqr_min_lwork(n)

    def _geev_lwork(self, kind, jobvl, jobvr, n):
        return geev_min_lwork(kind, jobvl, jobvr, n)


def _pivot_view(routine: str, ipiv: np.ndarray, offset: int, n: int) -> np.ndarray:
    _check_iwork(routine, ipiv, offset, n)
    return ipiv[offset:offset + n]


def _real_view(routine: str, kind: ScalarKind, name: str, buffer, offset: int, n: int):
    if not isinstance(buffer, np.ndarray) or buffer.dtype != kind.component_dtype:
        raise BackendArgumentError(
            f"{name} must be a {kind.component_dtype} buffer", routine, name
        )
    if offset < 0 or offset + n > buffer.shape[0]:
        raise BackendArgumentError(
            f"{name}: {n} elements at offset {offset} outside buffer of length {buffer.shape[0]}",
            routine, name,
        )
    return buffer[offset:offset + n]


def _check_work(routine: str, kind: ScalarKind, work, offset: int, lwork: int) -> None:
    if not isinstance(work, np.ndarray) or work.dtype != kind.dtype:
        raise BackendArgumentError(f"work must be a {kind.dtype} buffer", routine, 'work')
    if offset < 0 or work.shape[0] - offset < lwork:
        raise BackendArgumentError(
            f"work holds {work.shape[0] - offset} elements, lwork is {lwork}", routine, 'work'
        )


def _check_iwork(routine: str, iwork, offset: int, liwork: int) -> None:
    if not isinstance(iwork, np.ndarray) or iwork.dtype.kind != 'i':
        raise BackendArgumentError("integer buffer expected", routine, 'iwork')
    if offset < 0 or iwork.shape[0] - offset < liwork:
        raise BackendArgumentError(
            f"integer buffer holds {iwork.shape[0] - offset} elements, {liwork} needed",
            routine, 'iwork',
        )


def _eigen_count(range_: str, n: int, il: int, iu: int) -> int:
    """Upper bound on the eigenvector columns a range query may produce."""
    if range_ == 'I':
        return max(0, iu - il + 1)
    return n


def _support(z: np.ndarray, n: int) -> np.ndarray:
    """1-based first and last non-zero row of each eigenvector, interleaved."""
    out = np.empty(2 * z.shape[1], dtype=np.int32)
    for j in range(z.shape[1]):
        nonzero = np.flatnonzero(z[:, j])
        if nonzero.size:
            out[2 * j], out[2 * j + 1] = nonzero[0] + 1, nonzero[-1] + 1
        else:
            out[2 * j], out[2 * j + 1] = 1, n
    return out
