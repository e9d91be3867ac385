"""
Tests for the singular value decomposition.
"""

import numpy as np
import pytest

from pymatrix import ComplexDoubleMatrix, DoubleMatrix, FloatMatrix
from pymatrix.linalg import full_svd, sparse_svd, svd_values


def _reconstruct(u, s, v):
    u, v = u.to_array2(), v.to_array2()
    k = s.length
    return u[:, :k] @ np.diag(s.data) @ v[:, :k].conj().T


@pytest.mark.parametrize("shape", [(4, 4), (5, 3), (3, 5)])
def test_full_svd(backend, rng, shape):
    a = rng.standard_normal(shape)
    u, s, v = full_svd(DoubleMatrix.from_array(a))
    assert (u.rows, u.columns) == (shape[0], shape[0])
    assert (v.rows, v.columns) == (shape[1], shape[1])
    assert s.length == min(shape)
    np.testing.assert_allclose(_reconstruct(u, s, v), a, atol=1e-10)
    np.testing.assert_allclose(u.transpose().mmul(u).to_array2(), np.eye(shape[0]), atol=1e-10)


@pytest.mark.parametrize("shape", [(5, 3), (3, 5)])
def test_sparse_svd_shapes(backend, rng, shape):
    a = rng.standard_normal(shape)
    u, s, v = sparse_svd(DoubleMatrix.from_array(a))
    k = min(shape)
    assert (u.rows, u.columns) == (shape[0], k)
    assert (v.rows, v.columns) == (shape[1], k)
    np.testing.assert_allclose(_reconstruct(u, s, v), a, atol=1e-10)


def test_values_descending(backend, rng):
    a = rng.standard_normal((4, 3))
    s = svd_values(DoubleMatrix.from_array(a))
    np.testing.assert_allclose(s.data, np.linalg.svd(a, compute_uv=False), atol=1e-10)
    assert np.all(np.diff(s.data) <= 0)


def test_complex_values_are_real(backend, rng):
    a = rng.standard_normal((3, 3)) + 1j * rng.standard_normal((3, 3))
    matrix = ComplexDoubleMatrix.from_array(a)
    s = svd_values(matrix)
    assert isinstance(s, DoubleMatrix)
    u, s_full, v = full_svd(matrix)
    np.testing.assert_allclose(_reconstruct(u, s_full, v), a, atol=1e-10)


def test_single_precision(backend):
    s = svd_values(FloatMatrix.from_rows([[3, 0], [0, 4]]))
    assert isinstance(s, FloatMatrix)
    np.testing.assert_allclose(s.data, [4, 3], rtol=1e-6)
