"""
Tests for the LAPACK call layer and its workspace protocol.

The call layer returns status codes verbatim; these tests drive it with
raw column-major buffers on both backends.
"""

import numpy as np
import pytest
import scipy.linalg

from pymatrix.core.backends.precision import COMPLEX128, FLOAT32, FLOAT64
from pymatrix.core.compute import lapack
from pymatrix.core.config import use_backend
from pymatrix.core.compute.lapack import INDEX_DTYPE, Workspace, with_workspace, workspace_length


def column_major(a: np.ndarray) -> np.ndarray:
    return np.asarray(a).ravel(order='F').copy()


TRIDIAGONAL = np.array([[2.0, -1.0, 0.0],
                        [-1.0, 2.0, -1.0],
                        [0.0, -1.0, 2.0]])


# ═══════════════════════════════════════════════════════════════════════
# Workspace protocol
# ═══════════════════════════════════════════════════════════════════════


class TestWorkspaceLength:

    def test_integral_value(self):
        assert workspace_length(FLOAT64, 12.0) == 12

    def test_at_least_one(self):
        assert workspace_length(FLOAT64, 0.0) == 1

    def test_complex_report_uses_real_part(self):
        assert workspace_length(COMPLEX128, 34 + 0j) == 34

    def test_single_precision_rounds_up(self):
        reported = np.float32(2 ** 24)
        assert workspace_length(FLOAT32, reported) > 2 ** 24


class TestWithWorkspace:

    def test_query_then_compute(self):
        seen = []

        def query(ws):
            seen.append(('query', ws.lwork, ws.work.shape[0]))
            ws.work[0] = 7.0
            return 0

        def compute(ws):
            seen.append(('compute', ws.lwork, ws.work.shape[0]))
            return 0

        assert with_workspace('dtest', FLOAT64, query, compute) == 0
        assert seen == [('query', -1, 1), ('compute', 7, 7)]

    def test_failed_query_skips_compute(self):
        def compute(ws):
            raise AssertionError("compute must not run")

        assert with_workspace('dtest', FLOAT64, lambda ws: -3, compute) == -3

    def test_integer_workspace(self):
        captured = {}

        def query(ws):
            assert ws.liwork == -1
            ws.work[0] = 5.0
            ws.iwork[0] = 9
            return 0

        def compute(ws: Workspace):
            captured['iwork'] = ws.iwork
            captured['liwork'] = ws.liwork
            return 0

        with_workspace('dtest', FLOAT64, query, compute, integer_workspace=True)
        assert captured['liwork'] == 9
        assert captured['iwork'].dtype == INDEX_DTYPE
        assert captured['iwork'].shape == (9,)

    def test_compute_status_returned(self):
        def query(ws):
            ws.work[0] = 1.0
            return 0

        assert with_workspace('dtest', FLOAT64, query, lambda ws: 2) == 2


class TestWorkspaceQuery:
    """lwork == -1 writes the required length into work[0] and computes nothing."""

    def test_syev_reports_size(self, backend):
        work = np.zeros(1)
        a = column_major(TRIDIAGONAL)
        w = np.zeros(3)
        info = backend.routine('dsyev')('N', 'U', 3, a, 0, 3, w, 0, work, 0, -1)
        assert info == 0
        assert work[0] >= 3 * 3 - 1
        np.testing.assert_array_equal(w, np.zeros(3))
        np.testing.assert_array_equal(a, column_major(TRIDIAGONAL))

    def test_too_small_workspace_rejected(self, backend):
        a = column_major(TRIDIAGONAL)
        info = backend.routine('dsyev')('N', 'U', 3, a, 0, 3, np.zeros(3), 0, np.zeros(2), 0, 2)
        assert info == -8


# ═══════════════════════════════════════════════════════════════════════
# Routines through the call layer
# ═══════════════════════════════════════════════════════════════════════


class TestSymmetricEigen:

    def test_syev_eigenvalues(self, backend):
        a = column_major(TRIDIAGONAL)
        w = np.zeros(3)
        info = lapack.syev('N', 'U', 3, a, 0, 3, w, 0)
        assert info == 0
        np.testing.assert_allclose(w, np.linalg.eigvalsh(TRIDIAGONAL), atol=1e-10)

    def test_syev_vectors_overwrite_a(self, backend):
        a = column_major(TRIDIAGONAL)
        w = np.zeros(3)
        assert lapack.syev('V', 'L', 3, a, 0, 3, w, 0) == 0
        v = a.reshape(3, 3, order='F')
        np.testing.assert_allclose(TRIDIAGONAL @ v, v * w, atol=1e-10)

    def test_syevd_matches_syev(self, backend, symmetric_matrix):
        a = column_major(symmetric_matrix)
        w = np.zeros(4)
        assert lapack.syevd('N', 'U', 4, a, 0, 4, w, 0) == 0
        np.testing.assert_allclose(w, np.linalg.eigvalsh(symmetric_matrix), atol=1e-10)

    def test_syevr_index_range(self, backend):
        a = column_major(TRIDIAGONAL)
        m = np.zeros(1, dtype=INDEX_DTYPE)
        w = np.zeros(3)
        z = np.zeros(9)
        isuppz = np.zeros(6, dtype=INDEX_DTYPE)
        info = lapack.syevr('V', 'I', 'U', 3, a, 0, 3, 0.0, 0.0, 2, 3, 1e-9,
                            m, 0, w, 0, z, 0, 3, isuppz, 0)
        assert info == 0
        assert m[0] == 2
        np.testing.assert_allclose(w[:2], np.linalg.eigvalsh(TRIDIAGONAL)[1:], atol=1e-10)

    def test_syevr_values_only(self, backend):
        a = column_major(TRIDIAGONAL)
        m = np.zeros(1, dtype=INDEX_DTYPE)
        w = np.zeros(3)
        isuppz = np.full(6, -7, dtype=INDEX_DTYPE)
        info = lapack.syevr('N', 'A', 'U', 3, a, 0, 3, 0.0, 0.0, 0, 0, 0.0,
                            m, 0, w, 0, np.zeros(1), 0, 1, isuppz, 0)
        assert info == 0
        assert m[0] == 3
        np.testing.assert_allclose(w, np.linalg.eigvalsh(TRIDIAGONAL), atol=1e-10)
        # support is only defined when vectors are computed
        np.testing.assert_array_equal(isuppz, np.full(6, -7))

    def test_illegal_flag_returned_verbatim(self, backend):
        a = column_major(TRIDIAGONAL)
        assert lapack.syev('X', 'U', 3, a, 0, 3, np.zeros(3), 0) == -1

    def test_illegal_leading_dimension(self, backend):
        a = column_major(TRIDIAGONAL)
        assert lapack.syev('N', 'U', 3, a, 0, 2, np.zeros(3), 0) == -5


class TestLinearSystems:

    def test_gesv(self, backend, rng):
        a = rng.standard_normal((3, 3)) + 3 * np.eye(3)
        b = rng.standard_normal((3, 2))
        ab, bb = column_major(a), column_major(b)
        ipiv = np.zeros(3, dtype=INDEX_DTYPE)
        assert lapack.gesv(3, 2, ab, 0, 3, ipiv, 0, bb, 0, 3) == 0
        np.testing.assert_allclose(bb.reshape(3, 2, order='F'), np.linalg.solve(a, b), atol=1e-10)

    def test_gesv_singular_reports_positive_info(self, backend):
        a = column_major(np.array([[1.0, 2.0], [2.0, 4.0]]))
        b = np.ones(2)
        info = lapack.gesv(2, 1, a, 0, 2, np.zeros(2, dtype=INDEX_DTYPE), 0, b, 0, 2)
        assert info == 2

    def test_gesv_bad_ldb(self, backend):
        info = lapack.gesv(2, 1, np.zeros(4), 0, 2, np.zeros(2, dtype=INDEX_DTYPE), 0,
                           np.zeros(2), 0, 1)
        assert info == -7

    def test_getrf_pivots_are_zero_based(self, backend):
        a = column_major(np.array([[1.0, 2.0], [3.0, 4.0]]))
        ipiv = np.full(2, -7, dtype=INDEX_DTYPE)
        assert lapack.getrf(2, 2, a, 0, 2, ipiv, 0) == 0
        np.testing.assert_array_equal(ipiv, [1, 1])

    def test_potrf_not_positive(self, backend):
        a = column_major(np.array([[1.0, 2.0], [2.0, 1.0]]))
        assert lapack.potrf('U', 2, a, 0, 2) == 2

    def test_posv(self, backend, spd_matrix):
        b = np.arange(4.0)
        a = column_major(spd_matrix)
        x = b.copy()
        assert lapack.posv('L', 4, 1, a, 0, 4, x, 0, 4) == 0
        np.testing.assert_allclose(x, np.linalg.solve(spd_matrix, b), atol=1e-10)

    def test_sysv(self, backend, symmetric_matrix):
        b = np.ones(4)
        x = b.copy()
        info = lapack.sysv('U', 4, 1, column_major(symmetric_matrix), 0, 4,
                           np.zeros(4, dtype=INDEX_DTYPE), 0, x, 0, 4)
        assert info == 0
        np.testing.assert_allclose(symmetric_matrix @ x, b, atol=1e-10)

    @pytest.mark.parametrize("a,expected", [
        ([[4.0, 1.0], [1.0, 3.0]], [0, 1]),
        ([[0.0, 1.0], [1.0, 0.0]], [-1, -1]),
    ])
    def test_sysv_native_pivots_are_zero_based(self, a, expected):
        a = np.array(a)
        b = np.array([1.0, 2.0])
        x = b.copy()
        ipiv = np.full(2, 7, dtype=INDEX_DTYPE)
        with use_backend('native'):
            info = lapack.sysv('U', 2, 1, column_major(a), 0, 2, ipiv, 0, x, 0, 2)
        assert info == 0
        np.testing.assert_array_equal(ipiv, expected)
        np.testing.assert_allclose(a @ x, b, atol=1e-12)

    def test_gelsd_overdetermined(self, backend, rng):
        a = rng.standard_normal((5, 2))
        b = rng.standard_normal(5)
        bb = b.copy()
        s = np.zeros(2)
        rank = np.zeros(1, dtype=INDEX_DTYPE)
        info = lapack.gelsd(5, 2, 1, column_major(a), 0, 5, bb, 0, 5, s, 0, -1.0, rank, 0)
        assert info == 0
        assert rank[0] == 2
        expected = np.linalg.lstsq(a, b, rcond=None)[0]
        np.testing.assert_allclose(bb[:2], expected, atol=1e-10)


class TestFactorizations:

    def test_geqrf_then_orgqr(self, backend, rng):
        a = rng.standard_normal((4, 3))
        factors = column_major(a)
        tau = np.zeros(3)
        assert lapack.geqrf(4, 3, factors, 0, 4, tau, 0) == 0
        r = np.triu(factors.reshape(4, 3, order='F')[:3, :])
        assert lapack.orgqr(4, 3, 3, factors, 0, 4, tau, 0) == 0
        q = factors.reshape(4, 3, order='F')
        np.testing.assert_allclose(q @ r, a, atol=1e-10)
        np.testing.assert_allclose(q.T @ q, np.eye(3), atol=1e-10)

    def test_gesvd_values(self, backend, rng):
        a = rng.standard_normal((4, 3))
        s = np.zeros(3)
        dummy = np.zeros(1)
        info = lapack.gesvd('N', 'N', 4, 3, column_major(a), 0, 4, s, 0, dummy, 0, 1, dummy, 0, 1)
        assert info == 0
        np.testing.assert_allclose(s, np.linalg.svd(a, compute_uv=False), atol=1e-10)

    def test_gesvd_complex_values_are_real(self, backend, rng):
        a = rng.standard_normal((3, 3)) + 1j * rng.standard_normal((3, 3))
        s = np.zeros(3)
        dummy = np.zeros(1, dtype=np.complex128)
        info = lapack.gesvd('N', 'N', 3, 3, column_major(a), 0, 3, s, 0, dummy, 0, 1, dummy, 0, 1)
        assert info == 0
        np.testing.assert_allclose(s, np.linalg.svd(a, compute_uv=False), atol=1e-10)

    def test_geev_real_split(self, backend):
        rotation = np.array([[0.0, -1.0], [1.0, 0.0]])
        wr, wi = np.zeros(2), np.zeros(2)
        dummy = np.zeros(1)
        info = lapack.geev('N', 'N', 2, column_major(rotation), 0, 2, wr, 0, wi, 0,
                           dummy, 0, 1, dummy, 0, 1)
        assert info == 0
        np.testing.assert_allclose(wr, [0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(sorted(wi), [-1.0, 1.0], atol=1e-12)

    def test_sygvd(self, backend, symmetric_matrix, spd_matrix):
        w = np.zeros(4)
        info = lapack.sygvd(1, 'N', 'U', 4, column_major(symmetric_matrix), 0, 4,
                            column_major(spd_matrix), 0, 4, w, 0)
        assert info == 0
        expected = scipy.linalg.eigh(symmetric_matrix, spd_matrix, eigvals_only=True)
        np.testing.assert_allclose(w, expected, atol=1e-10)

    def test_sygvd_b_not_positive(self, backend, symmetric_matrix):
        b = -np.eye(4)
        info = lapack.sygvd(1, 'N', 'U', 4, column_major(symmetric_matrix), 0, 4,
                            column_major(b), 0, 4, np.zeros(4), 0)
        assert info == 4 + 1
