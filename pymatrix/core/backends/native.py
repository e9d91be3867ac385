"""
Native backend: BLAS/LAPACK through scipy's f2py bindings.

Level 1 BLAS routines take (buffer, offset, stride) directly, so they
operate on the caller's buffer in place. Level 2/3 BLAS and LAPACK
wrappers take 2-D arrays; the kernels hand scipy the views built by
BackendBase and copy the returned arrays back into them.

scipy allocates the scratch arrays of the LAPACK drivers itself from the
``lwork``/``liwork`` it is given, so the workspace buffers the call layer
allocates size the request but are not handed to the Fortran code.
Workspace queries use scipy's ``*_lwork`` helpers where they exist and
LAPACK's minimums otherwise.
"""

import numpy as np
from scipy.linalg import blas as _blas
from scipy.linalg import lapack as _lapack

from pymatrix.core.backends._base import BackendBase, gelsd_min_work
from pymatrix.core.capabilities import routine_name


_TRANS_CODES = {'N': 0, 'T': 1, 'C': 2}


def _blas_routine(kind, family):
    return getattr(_blas, routine_name(family, kind.prefix))


def _lapack_routine(kind, family):
    return getattr(_lapack, kind.routine(family))


def _store(target: np.ndarray, value) -> None:
    """Copy an f2py result into the caller's view unless f2py wrote in place."""
    if value is not target:
        target[...] = value


def _work_length(kind, value) -> int:
    """Integer workspace length from the floating value LAPACK reports."""
    value = np.asarray(value).real
    if kind.is_single:
        # Single precision can truncate large lengths; round up one ulp.
        value = np.nextafter(np.float32(value), np.float32(np.inf))
    return int(value)


class NativeBackend(BackendBase):
    """scipy.linalg.blas / scipy.linalg.lapack implementation of the routine set."""

    _name = 'native'

    # BLAS level 1

    def _copy(self, kind, xv, yv, x, x_off, incx, y, y_off, incy):
        n = xv.shape[0]
        _store(y, _blas_routine(kind, 'copy')(x, y, n, x_off, incx, y_off, incy))

    def _swap(self, kind, xv, yv, x, x_off, incx, y, y_off, incy):
        n = xv.shape[0]
        if x is y:
            # f2py would see two distinct arrays; swap through numpy instead.
            saved = xv.copy()
            xv[...] = yv
            yv[...] = saved
            return
        new_x, new_y = _blas_routine(kind, 'swap')(x, y, n, x_off, incx, y_off, incy)
        _store(x, new_x)
        _store(y, new_y)

    def _axpy(self, kind, alpha, xv, yv, x, x_off, incx, y, y_off, incy):
        n = xv.shape[0]
        _store(y, _blas_routine(kind, 'axpy')(x, y, n, alpha, x_off, incx, y_off, incy))

    def _scal(self, kind, alpha, xv, x, x_off, incx):
        n = xv.shape[0]
        _store(x, _blas_routine(kind, 'scal')(alpha, x, n, x_off, incx))

    def _rscal(self, kind, alpha, xv, x, x_off, incx):
        n = xv.shape[0]
        _store(x, _blas_routine(kind, 'rscal')(alpha, x, n, x_off, incx))

    def _dot(self, kind, conjugate, xv, yv, x, x_off, incx, y, y_off, incy):
        n = xv.shape[0]
        if kind.is_complex:
            family = 'dotc' if conjugate else 'dotu'
        else:
            family = 'dot'
        return kind.cast(_blas_routine(kind, family)(x, y, n, x_off, incx, y_off, incy))

    def _nrm2(self, kind, xv, x, x_off, incx):
        return _blas_routine(kind, 'nrm2')(x, xv.shape[0], x_off, incx)

    def _asum(self, kind, xv, x, x_off, incx):
        return _blas_routine(kind, 'asum')(x, xv.shape[0], x_off, incx)

    def _iamax(self, kind, xv, x, x_off, incx):
        # scipy already converts the Fortran index to 0-based
        return _blas_routine(kind, 'iamax')(x, xv.shape[0], x_off, incx)

    # BLAS level 2 and 3

    def _gemv(self, kind, trans, alpha, av, xv, beta, yv, x, x_off, incx, y, y_off, incy):
        gemv = _blas_routine(kind, 'gemv')
        result = gemv(alpha, av, x, beta, y, x_off, incx, y_off, incy, _TRANS_CODES[trans])
        _store(y, result)

    def _ger(self, kind, conjugate, alpha, xv, yv, av):
        if kind.is_complex:
            family = 'gerc' if conjugate else 'geru'
        else:
            family = 'ger'
        ger = _blas_routine(kind, family)
        av[...] = ger(alpha, np.ascontiguousarray(xv), np.ascontiguousarray(yv), 1, 1, av)

    def _gemm(self, kind, transa, transb, alpha, av, bv, beta, cv):
        gemm = _blas_routine(kind, 'gemm')
        cv[...] = gemm(alpha, av, bv, beta, cv, _TRANS_CODES[transa], _TRANS_CODES[transb])

    # LAPACK without workspace

    def _gesv(self, kind, av, pv, bv):
        lu, piv, x, info = _lapack_routine(kind, 'gesv')(av, bv)
        av[...] = lu
        pv[...] = piv
        if info == 0:
            bv[...] = x
        return int(info)

    def _getrf(self, kind, av, pv):
        lu, piv, info = _lapack_routine(kind, 'getrf')(av)
        av[...] = lu
        pv[...] = piv
        return int(info)

    def _potrf(self, kind, uplo, av):
        c, info = _lapack_routine(kind, 'potrf')(av, lower=uplo == 'L', clean=0)
        if info == 0:
            av[...] = c
        return int(info)

    def _posv(self, kind, uplo, av, bv):
        c, x, info = _lapack_routine(kind, 'posv')(av, bv, lower=uplo == 'L')
        if info == 0:
            av[...] = c
            bv[...] = x
        return int(info)

    # LAPACK with workspace

    def _sysv_lwork(self, kind, uplo, n):
        work, info = _lapack_routine(kind, 'sysv_lwork')(n, lower=uplo == 'L')
        return _work_length(kind, work)

    def _sysv(self, kind, uplo, av, pv, bv, lwork):
        sysv = _lapack_routine(kind, 'sysv')
        udut, ipiv, x, info = sysv(av, bv, lwork=lwork, lower=uplo == 'L')
        av[...] = udut
        # Fortran pivots: k > 0 becomes k - 1; -k (2x2 block) is already ~(k - 1).
        pv[...] = np.where(ipiv > 0, ipiv - 1, ipiv)
        if info == 0:
            bv[...] = x
        return int(info)

    def _syev_lwork(self, kind, jobz, uplo, n):
        work, info = _lapack_routine(kind, 'syev_lwork')(n, lower=uplo == 'L')
        return _work_length(kind, work)

    def _syev(self, kind, jobz, uplo, av, wv, lwork):
        syev = _lapack_routine(kind, 'syev')
        w, v, info = syev(av, compute_v=jobz == 'V', lower=uplo == 'L', lwork=lwork)
        if info == 0:
            wv[...] = w
            if jobz == 'V':
                av[...] = v
        return int(info)

    def _syevd_lwork(self, kind, jobz, uplo, n):
        syevd_lwork = _lapack_routine(kind, 'syevd_lwork')
        work, iwork, info = syevd_lwork(n, compute_v=jobz == 'V', lower=uplo == 'L')
        return _work_length(kind, work), int(iwork)

    def _syevd(self, kind, jobz, uplo, av, wv, lwork, liwork):
        syevd = _lapack_routine(kind, 'syevd')
        w, v, info = syevd(av, compute_v=jobz == 'V', lower=uplo == 'L',
                           lwork=lwork, liwork=liwork)
        if info == 0:
            wv[...] = w
            if jobz == 'V':
                av[...] = v
        return int(info)

    def _syevr_lwork(self, kind, uplo, n):
        work, iwork, info = _lapack_routine(kind, 'syevr_lwork')(n, lower=uplo == 'L')
        return _work_length(kind, work), int(iwork)

    def _syevr(self, kind, jobz, range_, uplo, av, vl, vu, il, iu, abstol, wv, zv):
        syevr = _lapack_routine(kind, 'syevr')
        kwargs = dict(compute_v=jobz == 'V', range=range_, lower=uplo == 'L', abstol=abstol)
        if range_ == 'V':
            kwargs.update(vl=vl, vu=vu)
        elif range_ == 'I':
            kwargs.update(il=il, iu=iu)
        w, z, found, isuppz, info = syevr(av, **kwargs)
        found = int(found)
        if info == 0:
            wv[:found] = w[:found]
            if jobz == 'V':
                zv[:, :found] = z[:, :found]
        return found, int(info)

    def _sygvd(self, kind, itype, jobz, uplo, av, bv, wv, lwork, liwork):
        sygvd = _lapack_routine(kind, 'sygvd')
        w, v, info = sygvd(av, bv, itype=itype, jobz=jobz, uplo=uplo,
                           lwork=lwork, liwork=liwork)
        if info == 0:
            wv[...] = w
            if jobz == 'V':
                av[...] = v
        return int(info)

    def _sygvx_lwork(self, kind, uplo, n):
        work, info = _lapack_routine(kind, 'sygvx_lwork')(n, uplo=uplo)
        return _work_length(kind, work)

    def _sygvx(self, kind, itype, jobz, range_, uplo, av, bv, vl, vu, il, iu, abstol, wv, zv,
               lwork):
        sygvx = _lapack_routine(kind, 'sygvx')
        kwargs = dict(itype=itype, jobz=jobz, range=range_, uplo=uplo, abstol=abstol,
                      lwork=lwork)
        if range_ == 'V':
            kwargs.update(vl=vl, vu=vu)
        elif range_ == 'I':
            kwargs.update(il=il, iu=iu)
        w, z, found, ifail, info = sygvx(av, bv, **kwargs)
        found = int(found)
        if info == 0:
            wv[:found] = w[:found]
            if jobz == 'V':
                zv[:, :found] = z[:, :found]
        return found, int(info)

    def _gesvd_flags(self, jobu, jobvt):
        compute_uv = jobu != 'N' or jobvt != 'N'
        return compute_uv, 'A' in (jobu, jobvt)

    def _gesvd_lwork(self, kind, jobu, jobvt, m, n):
        compute_uv, full = self._gesvd_flags(jobu, jobvt)
        work, info = _lapack_routine(kind, 'gesvd_lwork')(
            m, n, compute_uv=compute_uv, full_matrices=full
        )
        return _work_length(kind, work)

    def _gesvd(self, kind, jobu, jobvt, av, sv, uv, vtv, lwork):
        compute_uv, full = self._gesvd_flags(jobu, jobvt)
        gesvd = _lapack_routine(kind, 'gesvd')
        u, s, vt, info = gesvd(av, compute_uv=compute_uv, full_matrices=full, lwork=lwork)
        if info != 0:
            return int(info)
        sv[...] = s
        if jobu != 'N':
            uv[...] = u[:, :uv.shape[1]]
        if jobvt != 'N':
            vtv[...] = vt[:vtv.shape[0], :]
        return 0

    def _gelsd_lwork(self, kind, m, n, nrhs, rcond):
        work, iwork, info = _lapack_routine(kind, 'gelsd_lwork')(m, n, nrhs, rcond)
        return _work_length(kind, work), max(int(iwork), gelsd_min_work(m, n, nrhs)[1])

    def _gelsd(self, kind, m, n, av, bv, sv, rcond, lwork):
        gelsd = _lapack_routine(kind, 'gelsd')
        size_iwork = gelsd_min_work(m, n, bv.shape[1])[1]
        x, s, rank, info = gelsd(av, bv, lwork, size_iwork, rcond, False, False)
        if info == 0:
            bv[...] = x
            sv[...] = s
        return int(rank), int(info)

    def _geqrf_lwork(self, kind, m, n):
        work, info = _lapack_routine(kind, 'geqrf_lwork')(m, n)
        return _work_length(kind, work)

    def _geqrf(self, kind, av, tv, lwork):
        qr, tau, work, info = _lapack_routine(kind, 'geqrf')(av, lwork=lwork)
        av[...] = qr
        tv[...] = tau
        return int(info)

    def _ormqr(self, kind, side, trans, av, tv, cv, lwork):
        ormqr = _lapack_routine(kind, 'ormqr')
        cq, work, info = ormqr(side, trans, av, tv, cv, lwork)
        if info == 0:
            cv[...] = cq
        return int(info)

    def _orgqr(self, kind, av, tv, lwork):
        q, work, info = _lapack_routine(kind, 'orgqr')(av, tv, lwork=lwork)
        if info == 0:
            av[...] = q
        return int(info)

    def _geev_lwork(self, kind, jobvl, jobvr, n):
        geev_lwork = _lapack_routine(kind, 'geev_lwork')
        work, info = geev_lwork(n, compute_vl=jobvl == 'V', compute_vr=jobvr == 'V')
        return _work_length(kind, work)

    def _geev(self, kind, jobvl, jobvr, av, wrv, wiv, vlv, vrv, lwork):
        geev = _lapack_routine(kind, 'geev')
        flags = dict(compute_vl=jobvl == 'V', compute_vr=jobvr == 'V', lwork=lwork)
        if kind.is_complex:
            w, vl, vr, info = geev(av, **flags)
            if info == 0:
                wrv[...] = w
        else:
            wr, wi, vl, vr, info = geev(av, **flags)
            if info == 0:
                wrv[...] = wr
                wiv[...] = wi
        if info == 0:
            if jobvl == 'V':
                vlv[...] = vl
            if jobvr == 'V':
                vrv[...] = vr
        return int(info)
