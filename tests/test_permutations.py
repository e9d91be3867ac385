"""
Tests for random permutations, subsets and pivot permutation matrices.
"""

import numpy as np
import pytest

from pymatrix import DoubleMatrix, FloatMatrix, permutations
from pymatrix.core import rng as package_rng
from pymatrix.core.exceptions import ValidationError


class TestRandom:

    def test_permutation_contains_every_index(self, seeded):
        p = permutations.random_permutation(10)
        np.testing.assert_array_equal(np.sort(p), np.arange(10))

    def test_permutation_reproducible(self):
        package_rng.seed(3)
        first = permutations.random_permutation(20)
        package_rng.seed(3)
        second = permutations.random_permutation(20)
        package_rng.seed(None)
        np.testing.assert_array_equal(first, second)

    def test_empty_permutation(self):
        assert permutations.random_permutation(0).size == 0

    def test_negative_size(self):
        with pytest.raises(ValidationError):
            permutations.random_permutation(-1)

    def test_subset(self, seeded):
        s = permutations.random_subset(4, 10)
        assert s.size == 4
        assert np.all(np.diff(s) > 0)
        assert s.min() >= 0 and s.max() < 10

    def test_full_subset(self, seeded):
        np.testing.assert_array_equal(permutations.random_subset(5, 5), np.arange(5))

    @pytest.mark.parametrize("k,n", [(0, 5), (6, 5), (-1, 5)])
    def test_subset_bounds(self, k, n):
        with pytest.raises(ValidationError, match="0 < k <= n"):
            permutations.random_subset(k, n)


class TestPivotMatrix:

    def test_identity_pivots(self):
        p = permutations.permutation_matrix_from_pivot_indices(3, [0, 1, 2])
        assert p.equals(DoubleMatrix.eye(3))

    def test_exchanges_applied_in_order(self):
        # exchange rows 0<->2, then rows 1<->2
        p = permutations.permutation_matrix_from_pivot_indices(3, [2, 2, 2])
        a = np.arange(9.0).reshape(3, 3)
        swapped = a.copy()
        swapped[[0, 2]] = swapped[[2, 0]]
        swapped[[1, 2]] = swapped[[2, 1]]
        np.testing.assert_array_equal(p.to_array2() @ swapped, a)

    def test_result_class(self):
        p = permutations.permutation_matrix_from_pivot_indices(2, [1, 1], FloatMatrix)
        assert isinstance(p, FloatMatrix)
        np.testing.assert_array_equal(p.to_array2(), [[0, 1], [1, 0]])
