"""
Tests for the matrix-level wrappers and their status code translation.
"""

import numpy as np
import pytest

from pymatrix import DoubleMatrix, ComplexDoubleMatrix
from pymatrix.core.compute import blas
from pymatrix.core.compute.lapack import INDEX_DTYPE
from pymatrix.core.exceptions import (
    LapackArgumentError,
    LapackPositivityError,
    LapackSingularityError,
    SizeMismatchError,
)


# ═══════════════════════════════════════════════════════════════════════
# BLAS
# ═══════════════════════════════════════════════════════════════════════


class TestLevelOneWrappers:

    def test_axpy(self, backend):
        x = DoubleMatrix.from_rows([[1.0, 2.0]])
        y = DoubleMatrix.from_rows([[10.0, 20.0]])
        blas.axpy(3.0, x, y)
        np.testing.assert_array_equal(y.data, [13.0, 26.0])

    def test_length_checked(self, backend):
        with pytest.raises(SizeMismatchError, match="y"):
            blas.copy(DoubleMatrix.ones(3), DoubleMatrix.zeros(2))

    def test_complex_dot_products(self, backend):
        x = ComplexDoubleMatrix(2, 1, [1j, 1.0])
        y = ComplexDoubleMatrix(2, 1, [1j, 2.0])
        assert blas.dotc(x, y) == pytest.approx(3.0)
        assert blas.dotu(x, y) == pytest.approx(1.0)

    def test_iamax_empty(self, backend):
        assert blas.iamax(DoubleMatrix.empty()) == -1


class TestLevelThreeWrappers:

    def test_gemm_result_shape_checked(self, backend):
        with pytest.raises(SizeMismatchError, match="result must be 2x2"):
            blas.gemm(1.0, DoubleMatrix.ones(2, 3), DoubleMatrix.ones(3, 2), 0.0,
                      DoubleMatrix.zeros(3, 3))

    def test_gemm(self, backend, rng):
        a, b = rng.standard_normal((2, 3)), rng.standard_normal((3, 2))
        c = blas.gemm(1.0, DoubleMatrix.from_array(a), DoubleMatrix.from_array(b), 0.0,
                      DoubleMatrix.zeros(2, 2))
        np.testing.assert_allclose(c.to_array2(), a @ b, atol=1e-12)


# ═══════════════════════════════════════════════════════════════════════
# LAPACK status translation
# ═══════════════════════════════════════════════════════════════════════


class TestStatusTranslation:

    def test_singular_gesv(self, backend):
        a = DoubleMatrix.from_rows([[1.0, 2.0], [2.0, 4.0]])
        b = DoubleMatrix.ones(2)
        with pytest.raises(LapackSingularityError, match="singular") as excinfo:
            blas.gesv(a, np.zeros(2, dtype=INDEX_DTYPE), b)
        assert excinfo.value.info == 2
        assert excinfo.value.routine == 'gesv'

    def test_getrf_returns_status(self, backend):
        a = DoubleMatrix.zeros(2, 2)
        assert blas.getrf(a, np.zeros(2, dtype=INDEX_DTYPE)) == 1

    def test_potrf_not_positive(self, backend):
        a = DoubleMatrix.from_rows([[1.0, 2.0], [2.0, 1.0]])
        with pytest.raises(LapackPositivityError, match="order 2") as excinfo:
            blas.potrf('U', a)
        assert excinfo.value.order == 2

    def test_illegal_argument(self, backend):
        a = DoubleMatrix.eye(3)
        with pytest.raises(LapackArgumentError, match="argument 1") as excinfo:
            blas.syev('X', 'U', a, DoubleMatrix.zeros(3))
        assert excinfo.value.info == -1

    def test_generalized_b_not_positive(self, backend):
        a = DoubleMatrix.eye(2)
        b = DoubleMatrix.from_rows([[-1.0, 0.0], [0.0, 1.0]])
        with pytest.raises(LapackPositivityError, match="of B") as excinfo:
            blas.sygvd(1, 'N', 'U', a, b, DoubleMatrix.zeros(2))
        assert excinfo.value.info == 3
        assert excinfo.value.order == 1

    def test_gelsd_result_too_small(self, backend):
        with pytest.raises(SizeMismatchError, match="too small"):
            blas.gelsd(DoubleMatrix.ones(2, 4), DoubleMatrix.ones(2, 1))

    def test_syevr_returns_count(self, backend):
        a = DoubleMatrix.from_rows([[2.0, 0.0, 0.0], [0.0, 3.0, 0.0], [0.0, 0.0, 5.0]])
        w = DoubleMatrix.zeros(3)
        z = DoubleMatrix.zeros(3, 3)
        found = blas.syevr('V', 'V', 'U', a, 2.5, 10.0, 0, 0, 1e-9, w, z)
        assert found == 2
        np.testing.assert_allclose(w.data[:2], [3.0, 5.0], atol=1e-12)
