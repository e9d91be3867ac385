"""
Reference backend: the BLAS/LAPACK routine set in plain numpy.

Every kernel works on the numpy views BackendBase hands it and writes its
results back through those views, so the observable contract (outputs
in the caller's buffers, status codes, workspace queries) is the same as
the native backend's. Factorizations that LAPACK exposes in a packed form
(LU with pivots, Householder QR, Cholesky) are implemented directly so
that their outputs can be consumed by the companion routines.

This backend reports LAPACK's documented minimum workspace lengths and
never needs more than that.
"""

import numpy as np
from numpy.linalg import LinAlgError

from pymatrix.core.backends._base import BackendBase


# ═══════════════════════════════════════════════════════════════════════
# Dense kernels
# ═══════════════════════════════════════════════════════════════════════


def _op(a: np.ndarray, trans: str) -> np.ndarray:
    if trans == 'N':
        return a
    if trans == 'T':
        return a.T
    return a.conj().T


def _hermitian(a: np.ndarray, uplo: str) -> np.ndarray:
    """Full Hermitian matrix from the triangle named by uplo."""
    t = np.triu(a) if uplo == 'U' else np.tril(a)
    return t + t.conj().T - np.diag(np.diag(t).real).astype(a.dtype)


def _lu_in_place(a: np.ndarray, piv: np.ndarray) -> int:
    """
    LU factorization with partial pivoting, overwriting ``a`` with L\\U.

    Returns:
        0, or the 1-based index of the first exactly zero pivot
    """
    m, n = a.shape
    info = 0
    for j in range(min(m, n)):
        p = j + int(np.argmax(np.abs(a[j:, j])))
        piv[j] = p
        if a[p, j] == 0:
            if info == 0:
                info = j + 1
            continue
        if p != j:
            a[[j, p], :] = a[[p, j], :]
        a[j + 1:, j] /= a[j, j]
        a[j + 1:, j + 1:] -= np.outer(a[j + 1:, j], a[j, j + 1:])
    return info


def _lu_solve(lu: np.ndarray, piv: np.ndarray, b: np.ndarray) -> None:
    n = lu.shape[0]
    for j in range(n):
        p = int(piv[j])
        if p != j:
            b[[j, p], :] = b[[p, j], :]
    for i in range(n):
        b[i] -= lu[i, :i] @ b[:i]
    for i in range(n - 1, -1, -1):
        b[i] = (b[i] - lu[i, i + 1:] @ b[i + 1:]) / lu[i, i]


def _cholesky_upper(s: np.ndarray) -> tuple[np.ndarray, int]:
    """
    Upper Cholesky factor U with U^H U = S, reading only the upper triangle.

    Returns:
        (U, info) where info is the order of the first leading minor that
        is not positive definite, or 0
    """
    n = s.shape[0]
    u = np.zeros_like(s)
    for j in range(n):
        d = s[j, j].real - np.vdot(u[:j, j], u[:j, j]).real
        if not d > 0:
            return u, j + 1
        u[j, j] = np.sqrt(d)
        if j + 1 < n:
            u[j, j + 1:] = (s[j, j + 1:] - u[:j, j].conj() @ u[:j, j + 1:]) / u[j, j]
    return u, 0


def _upper_source(a: np.ndarray, uplo: str) -> np.ndarray:
    return np.triu(a) if uplo == 'U' else np.tril(a).conj().T


def _store_triangle(a: np.ndarray, u: np.ndarray, uplo: str) -> None:
    n = a.shape[0]
    if uplo == 'U':
        rows, cols = np.triu_indices(n)
        a[rows, cols] = u[rows, cols]
    else:
        lower = u.conj().T
        rows, cols = np.tril_indices(n)
        a[rows, cols] = lower[rows, cols]


def _select_eigen(w: np.ndarray, range_: str, vl, vu, il, iu) -> np.ndarray:
    if range_ == 'V':
        return np.flatnonzero((w > vl) & (w <= vu))
    if range_ == 'I':
        return np.arange(il - 1, iu)
    return np.arange(w.shape[0])


def _householder(x: np.ndarray):
    """Elementary reflector H = I - tau v v^T with H x = beta e1 and v[0] = 1."""
    alpha = x[0]
    xnorm = np.linalg.norm(x[1:])
    if xnorm == 0:
        return alpha, 0.0, np.zeros(x.shape[0] - 1, dtype=x.dtype)
    beta = -np.copysign(np.hypot(alpha, xnorm), alpha)
    tau = (beta - alpha) / beta
    return beta, tau, x[1:] / (alpha - beta)


def _reflectors(a: np.ndarray, tau: np.ndarray) -> list:
    nq = a.shape[0]
    out = []
    for i in range(tau.shape[0]):
        v = np.zeros(nq - i, dtype=a.dtype)
        v[0] = 1
        v[1:] = a[i + 1:, i]
        out.append((i, v, tau[i]))
    return out


def _unit_columns(v: np.ndarray) -> np.ndarray:
    """Scale each column to unit 2-norm with its largest component real."""
    out = v.astype(np.complex128)
    for j in range(out.shape[1]):
        col = out[:, j]
        norm = np.linalg.norm(col)
        if norm == 0:
            continue
        k = int(np.argmax(np.abs(col)))
        out[:, j] = col / norm * (np.conj(col[k]) / abs(col[k]))
    return out


def _pack_real_pairs(target: np.ndarray, vectors: np.ndarray, w: np.ndarray) -> None:
    """Store complex-conjugate eigenvector pairs as (real, imag) column pairs."""
    n = w.shape[0]
    j = 0
    while j < n:
        if w[j].imag != 0 and j + 1 < n:
            target[:, j] = vectors[:, j].real
            target[:, j + 1] = vectors[:, j].imag
            j += 2
        else:
            target[:, j] = vectors[:, j].real
            j += 1


# ═══════════════════════════════════════════════════════════════════════
# Backend
# ═══════════════════════════════════════════════════════════════════════


class ReferenceBackend(BackendBase):
    """Pure numpy implementation of the routine set."""

    _name = 'reference'

    # BLAS level 1

    def _copy(self, kind, xv, yv, *buffers):
        yv[...] = xv

    def _swap(self, kind, xv, yv, *buffers):
        saved = xv.copy()
        xv[...] = yv
        yv[...] = saved

    def _axpy(self, kind, alpha, xv, yv, *buffers):
        yv += alpha * xv

    def _scal(self, kind, alpha, xv, *buffers):
        xv *= alpha

    def _rscal(self, kind, alpha, xv, *buffers):
        xv *= kind.component_dtype.type(alpha)

    def _dot(self, kind, conjugate, xv, yv, *buffers):
        if conjugate:
            return kind.cast(np.vdot(xv, yv))
        return kind.cast(np.dot(xv, yv))

    def _nrm2(self, kind, xv, *buffers):
        return np.linalg.norm(xv)

    def _asum(self, kind, xv, *buffers):
        if kind.is_complex:
            return np.abs(xv.real).sum() + np.abs(xv.imag).sum()
        return np.abs(xv).sum()

    def _iamax(self, kind, xv, *buffers):
        if kind.is_complex:
            return np.argmax(np.abs(xv.real) + np.abs(xv.imag))
        return np.argmax(np.abs(xv))

    # BLAS level 2 and 3

    def _gemv(self, kind, trans, alpha, av, xv, beta, yv, *buffers):
        product = alpha * (_op(av, trans) @ xv)
        if beta == 0:
            yv[...] = product
        else:
            yv[...] = beta * yv + product

    def _ger(self, kind, conjugate, alpha, xv, yv, av):
        av += alpha * np.outer(xv, yv.conj() if conjugate else yv)

    def _gemm(self, kind, transa, transb, alpha, av, bv, beta, cv):
        product = alpha * (_op(av, transa) @ _op(bv, transb))
        if beta == 0:
            cv[...] = product
        else:
            cv[...] = beta * cv + product

    # LAPACK without workspace

    def _gesv(self, kind, av, pv, bv):
        info = _lu_in_place(av, pv)
        if info:
            return info
        _lu_solve(av, pv, bv)
        return 0

    def _getrf(self, kind, av, pv):
        return _lu_in_place(av, pv)

    def _potrf(self, kind, uplo, av):
        u, info = _cholesky_upper(_upper_source(av, uplo))
        if info:
            return info
        _store_triangle(av, u, uplo)
        return 0

    def _posv(self, kind, uplo, av, bv):
        u, info = _cholesky_upper(_upper_source(av, uplo))
        if info:
            return info
        _store_triangle(av, u, uplo)
        bv[...] = np.linalg.solve(u, np.linalg.solve(u.conj().T, bv))
        return 0

    # LAPACK with workspace

    def _sysv(self, kind, uplo, av, pv, bv, lwork):
        # The factor left in A is backend specific; only the solution is portable.
        lu = _hermitian(av, uplo)
        info = _lu_in_place(lu, pv)
        if info:
            return info
        _lu_solve(lu, pv, bv)
        return 0

    def _eigh(self, av, uplo):
        return np.linalg.eigh(_hermitian(av, uplo))

    def _syev(self, kind, jobz, uplo, av, wv, lwork):
        try:
            w, v = self._eigh(av, uplo)
        except LinAlgError:
            return 1
        wv[...] = w
        if jobz == 'V':
            av[...] = v
        return 0

    def _syevd(self, kind, jobz, uplo, av, wv, lwork, liwork):
        return self._syev(kind, jobz, uplo, av, wv, lwork)

    def _syevr(self, kind, jobz, range_, uplo, av, vl, vu, il, iu, abstol, wv, zv):
        try:
            w, v = self._eigh(av, uplo)
        except LinAlgError:
            return 0, 1
        selected = _select_eigen(w, range_, vl, vu, il, iu)
        found = selected.shape[0]
        wv[:found] = w[selected]
        if jobz == 'V':
            zv[:, :found] = v[:, selected]
        return found, 0

    def _generalized(self, itype, uplo, av, bv):
        n = av.shape[0]
        u, info = _cholesky_upper(_upper_source(bv, uplo))
        if info:
            return None, None, n + info
        a_full = _hermitian(av, uplo)
        u_inv = np.linalg.inv(u)
        if itype == 1:
            c = u_inv.conj().T @ a_full @ u_inv
        else:
            c = u @ a_full @ u.conj().T
        try:
            w, y = np.linalg.eigh((c + c.conj().T) / 2)
        except LinAlgError:
            return None, None, 1
        x = u_inv @ y if itype in (1, 2) else u.conj().T @ y
        _store_triangle(bv, u, uplo)
        return w, x, 0

    def _sygvd(self, kind, itype, jobz, uplo, av, bv, wv, lwork, liwork):
        w, x, info = self._generalized(itype, uplo, av, bv)
        if info:
            return info
        wv[...] = w
        if jobz == 'V':
            av[...] = x
        return 0

    def _sygvx(self, kind, itype, jobz, range_, uplo, av, bv, vl, vu, il, iu, abstol, wv, zv,
               lwork):
        w, x, info = self._generalized(itype, uplo, av, bv)
        if info:
            return 0, info
        selected = _select_eigen(w, range_, vl, vu, il, iu)
        found = selected.shape[0]
        wv[:found] = w[selected]
        if jobz == 'V':
            zv[:, :found] = x[:, selected]
        return found, 0

    def _gesvd(self, kind, jobu, jobvt, av, sv, uv, vtv, lwork):
        try:
            if jobu == 'N' and jobvt == 'N':
                sv[...] = np.linalg.svd(av, compute_uv=False)
                return 0
            u, s, vh = np.linalg.svd(av, full_matrices='A' in (jobu, jobvt))
        except LinAlgError:
            return 1
        sv[...] = s
        if jobu != 'N':
            uv[...] = u[:, :uv.shape[1]]
        if jobvt != 'N':
            vtv[...] = vh[:vtv.shape[0], :]
        return 0

    def _gelsd(self, kind, m, n, av, bv, sv, rcond, lwork):
        cutoff = kind.epsilon if rcond < 0 else rcond
        try:
            x, _, rank, s = np.linalg.lstsq(av, bv[:m], rcond=cutoff)
        except LinAlgError:
            return 0, 1
        bv[:n] = x
        sv[...] = s
        return int(rank), 0

    def _geqrf(self, kind, av, tv, lwork):
        m, n = av.shape
        for j in range(min(m, n)):
            beta, tau, v = _householder(av[j:, j].copy())
            av[j, j] = beta
            av[j + 1:, j] = v
            tv[j] = tau
            if tau != 0 and j + 1 < n:
                full_v = np.concatenate((np.ones(1, dtype=av.dtype), v))
                block = av[j:, j + 1:]
                block -= tau * np.outer(full_v, full_v @ block)
        return 0

    def _ormqr(self, kind, side, trans, av, tv, cv, lwork):
        reflectors = _reflectors(av, tv)
        # Q = H(1) H(2) ... H(k)
        if (side == 'L') != (trans == 'T'):
            reflectors.reverse()
        for i, v, tau in reflectors:
            if side == 'L':
                block = cv[i:, :]
                block -= tau * np.outer(v, v @ block)
            else:
                block = cv[:, i:]
                block -= tau * np.outer(block @ v, v)
        return 0

    def _orgqr(self, kind, av, tv, lwork):
        m, n = av.shape
        reflectors = _reflectors(av[:, :tv.shape[0]], tv)
        q = np.eye(m, n, dtype=av.dtype)
        for i, v, tau in reversed(reflectors):
            block = q[i:, :]
            block -= tau * np.outer(v, v @ block)
        av[...] = q
        return 0

    def _geev(self, kind, jobvl, jobvr, av, wrv, wiv, vlv, vrv, lwork):
        try:
            w, v = np.linalg.eig(av)
            left = _unit_columns(np.linalg.inv(v).conj().T) if jobvl == 'V' else None
        except LinAlgError:
            return 1
        w = np.asarray(w, dtype=np.complex128)
        if kind.is_complex:
            wrv[...] = w
            if jobvr == 'V':
                vrv[...] = v
            if jobvl == 'V':
                vlv[...] = left
            return 0
        wrv[...] = w.real
        wiv[...] = w.imag
        if jobvr == 'V':
            _pack_real_pairs(vrv, np.asarray(v, dtype=np.complex128), w)
        if jobvl == 'V':
            _pack_real_pairs(vlv, left, w)
        return 0
