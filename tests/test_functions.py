"""
Tests for elementwise functions, powers and the matrix exponential.
"""

import numpy as np
import pytest
import scipy.linalg

from pymatrix import ComplexDoubleMatrix, DoubleMatrix, FloatMatrix, functions
from pymatrix.core.exceptions import SizeMismatchError, ValidationError


class TestElementwise:

    @pytest.mark.parametrize("name,ufunc", [
        ("exp", np.exp), ("sin", np.sin), ("cos", np.cos), ("tanh", np.tanh),
        ("atan", np.arctan), ("abs", np.abs), ("signum", np.sign),
    ])
    def test_matches_numpy(self, rng, name, ufunc):
        values = rng.standard_normal((3, 2))
        result = getattr(functions, name)(DoubleMatrix.from_array(values))
        np.testing.assert_allclose(result.to_array2(), ufunc(values))

    def test_allocating_form_leaves_input(self):
        x = DoubleMatrix.from_rows([[4, 9]])
        assert functions.sqrt(x).equals(DoubleMatrix.from_rows([[2, 3]]))
        assert x.get(0) == 4.0

    def test_in_place_form(self):
        x = DoubleMatrix.from_rows([[4, 9]])
        assert functions.sqrti(x) is x
        assert x.equals(DoubleMatrix.from_rows([[2, 3]]))

    def test_ieee_results_without_warnings(self, recwarn):
        result = functions.log(DoubleMatrix.from_rows([[0, -1]]))
        assert result.get(0) == -np.inf
        assert np.isnan(result.get(1))
        assert np.isnan(functions.sqrt(DoubleMatrix.scalar(-1)).item())
        assert len(recwarn) == 0

    def test_single_precision_kept(self):
        assert functions.exp(FloatMatrix.ones(2)).data.dtype == np.float32

    def test_complex(self):
        z = ComplexDoubleMatrix.scalar(1j * np.pi)
        assert functions.exp(z).item() == pytest.approx(-1)

    def test_real_only_functions(self):
        with pytest.raises(ValidationError, match="floor"):
            functions.floor(ComplexDoubleMatrix.ones(2))

    def test_names(self):
        assert functions.exp.__name__ == "exp"
        assert functions.expi.__name__ == "expi"


class TestPow:

    def test_matrix_scalar(self):
        x = DoubleMatrix.from_rows([[2, 3]])
        assert functions.pow(x, 2).equals(DoubleMatrix.from_rows([[4, 9]]))
        assert x.get(0) == 2.0

    def test_scalar_matrix(self):
        e = DoubleMatrix.from_rows([[1, 3]])
        assert functions.powi(2, e) is e
        assert e.equals(DoubleMatrix.from_rows([[2, 8]]))

    def test_matrix_matrix(self):
        x = DoubleMatrix.from_rows([[2, 3]])
        e = DoubleMatrix.from_rows([[3, 2]])
        assert functions.pow(x, e).equals(DoubleMatrix.from_rows([[8, 9]]))

    def test_length_mismatch(self):
        with pytest.raises(SizeMismatchError):
            functions.pow(DoubleMatrix.ones(2), DoubleMatrix.ones(3))


class TestExpm:

    def test_zero_is_identity(self, backend):
        assert functions.expm(DoubleMatrix.zeros(3, 3)).compare(DoubleMatrix.eye(3))

    def test_diagonal(self, backend):
        result = functions.expm(DoubleMatrix.diag(DoubleMatrix.from_array([1, -2])))
        np.testing.assert_allclose(result.diagonal().data, np.exp([1, -2]), rtol=1e-10)

    def test_matches_scipy(self, backend, rng):
        values = 3 * rng.standard_normal((4, 4))
        result = functions.expm(DoubleMatrix.from_array(values))
        expected = scipy.linalg.expm(values)
        np.testing.assert_allclose(result.to_array2(), expected, rtol=1e-8,
                                   atol=1e-8 * np.abs(expected).max())

    def test_rotation_generator(self, backend):
        theta = 0.75
        result = functions.expm(DoubleMatrix.from_rows([[0, -theta], [theta, 0]]))
        expected = [[np.cos(theta), -np.sin(theta)], [np.sin(theta), np.cos(theta)]]
        np.testing.assert_allclose(result.to_array2(), expected, atol=1e-13)

    def test_requires_square(self):
        with pytest.raises(SizeMismatchError):
            functions.expm(DoubleMatrix.ones(2, 3))
