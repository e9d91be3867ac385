"""
Tests for centering, normalization and pairwise distances.
"""

import numpy as np
import pytest

from pymatrix import DoubleMatrix, geometry
from pymatrix.core.exceptions import SizeMismatchError


def test_pairwise_squared_distances(backend, rng):
    x = rng.standard_normal((3, 4))
    y = rng.standard_normal((3, 2))
    d = geometry.pairwise_squared_distances(DoubleMatrix.from_array(x),
                                            DoubleMatrix.from_array(y))
    assert (d.rows, d.columns) == (4, 2)
    expected = ((x[:, :, None] - y[:, None, :]) ** 2).sum(axis=0)
    np.testing.assert_allclose(d.to_array2(), expected, atol=1e-12)


def test_pairwise_requires_same_rows():
    with pytest.raises(SizeMismatchError):
        geometry.pairwise_squared_distances(DoubleMatrix.ones(3, 2), DoubleMatrix.ones(2, 2))


def test_center_in_place():
    x = DoubleMatrix.from_rows([[1, 2], [3, 6]])
    assert geometry.center(x) is x
    assert x.sum() == pytest.approx(0.0)


def test_center_rows_and_columns():
    values = np.array([[1.0, 3.0], [2.0, 8.0]])
    rows = geometry.center_rows(DoubleMatrix.from_array(values))
    np.testing.assert_allclose(rows.to_array2(), [[-1, 1], [-3, 3]])
    columns = geometry.center_columns(DoubleMatrix.from_array(values))
    np.testing.assert_allclose(columns.to_array2(), [[-0.5, -2.5], [0.5, 2.5]])


def test_normalize(backend):
    x = geometry.normalize(DoubleMatrix.from_rows([[3, 4]]))
    np.testing.assert_allclose(x.data, [0.6, 0.8])


def test_normalize_rows_and_columns(backend):
    rows = geometry.normalize_rows(DoubleMatrix.from_rows([[3, 4], [0, 2]]))
    np.testing.assert_allclose(rows.to_array2(), [[0.6, 0.8], [0, 1]])
    columns = geometry.normalize_columns(DoubleMatrix.from_rows([[3, 0], [4, 5]]))
    np.testing.assert_allclose(columns.to_array2(), [[0.6, 0], [0.8, 1]])
