"""
Tests for LU, Cholesky and QR decompositions.
"""

import numpy as np
import pytest

from pymatrix import ComplexDoubleMatrix, DoubleMatrix
from pymatrix.core.exceptions import LapackPositivityError, SizeMismatchError, ValidationError
from pymatrix.linalg import LUDecomposition, cholesky, lu, qr


class TestLU:

    @pytest.mark.parametrize("shape", [(4, 4), (5, 3), (3, 5)])
    def test_reconstructs(self, backend, rng, shape):
        a = rng.standard_normal(shape)
        result = lu(DoubleMatrix.from_array(a))
        k = min(shape)
        assert (result.l.rows, result.l.columns) == (shape[0], k)
        assert (result.u.rows, result.u.columns) == (k, shape[1])
        p, l, u = result.p.to_array2(), result.l.to_array2(), result.u.to_array2()
        np.testing.assert_allclose(p @ l @ u, a, atol=1e-12)

    def test_factor_structure(self, backend, rng):
        result = lu(DoubleMatrix.from_array(rng.standard_normal((3, 3))))
        l = result.l.to_array2()
        np.testing.assert_array_equal(np.diag(l), np.ones(3))
        assert result.l.is_lower_triangular()
        assert result.u.is_upper_triangular()
        p = result.p.to_array2()
        np.testing.assert_array_equal(p @ p.T, np.eye(3))

    def test_result_is_frozen(self):
        result = lu(DoubleMatrix.eye(2))
        assert isinstance(result, LUDecomposition)
        with pytest.raises(AttributeError):
            result.l = None

    def test_singular_still_factorizes(self, backend):
        result = lu(DoubleMatrix.from_rows([[1, 2], [2, 4]]))
        assert result.u.get(1, 1) == 0.0

    def test_pivoting(self, backend):
        a = DoubleMatrix.from_rows([[0, 1], [1, 0]])
        result = lu(a)
        assert result.p.equals(a)
        assert result.l.equals(DoubleMatrix.eye(2))


class TestCholesky:

    def test_reconstructs(self, backend, spd_matrix):
        u = cholesky(DoubleMatrix.from_array(spd_matrix))
        assert u.is_upper_triangular()
        np.testing.assert_allclose(u.transpose().mmul(u).to_array2(), spd_matrix, atol=1e-10)

    def test_complex_hermitian(self, backend):
        a = ComplexDoubleMatrix.from_rows([[4, 1j], [-1j, 3]])
        u = cholesky(a)
        assert u.hermitian().mmul(u).compare(a)

    def test_not_positive_definite(self, backend):
        with pytest.raises(LapackPositivityError, match="leading minor of order 1"):
            cholesky(DoubleMatrix.from_rows([[-1, 0], [0, 1]]))

    def test_not_square(self):
        with pytest.raises(SizeMismatchError):
            cholesky(DoubleMatrix.ones(2, 3))


class TestQR:

    @pytest.mark.parametrize("shape", [(4, 4), (5, 3), (3, 5)])
    def test_reconstructs(self, backend, rng, shape):
        a = rng.standard_normal(shape)
        result = qr(DoubleMatrix.from_array(a))
        q, r = result.q.to_array2(), result.r.to_array2()
        assert q.shape == (shape[0], shape[0])
        assert r.shape == shape
        np.testing.assert_allclose(q @ r, a, atol=1e-12)
        np.testing.assert_allclose(q.T @ q, np.eye(shape[0]), atol=1e-12)
        assert result.r.is_upper_triangular()

    def test_rejects_complex(self):
        with pytest.raises(ValidationError, match="only real"):
            qr(ComplexDoubleMatrix.eye(2))
