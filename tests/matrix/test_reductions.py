"""
Tests for aggregates, norms, min/max scans, comparisons and equality.
"""

import numpy as np
import pytest

from pymatrix import ComplexDoubleMatrix, DoubleMatrix, FloatMatrix

NAN = float('nan')
INF = float('inf')


def grid(rows):
    return DoubleMatrix.from_rows(rows)


# ═══════════════════════════════════════════════════════════════════════
# Aggregates
# ═══════════════════════════════════════════════════════════════════════


class TestAggregates:

    def test_sum_mean_prod(self):
        m = grid([[1, 2], [3, 4]])
        assert m.sum() == 10.0
        assert m.mean() == 2.5
        assert m.prod() == 24.0

    def test_empty_aggregates(self):
        m = DoubleMatrix.empty()
        assert m.sum() == 0.0
        assert m.prod() == 1.0
        assert np.isnan(m.mean())

    def test_column_and_row_sums(self):
        m = grid([[1, 2, 3], [4, 5, 6]])
        assert m.column_sums().equals(grid([[5, 7, 9]]))
        assert m.row_sums().equals(DoubleMatrix.from_array([6, 15]))

    def test_means(self):
        m = grid([[1, 2], [3, 4]])
        assert m.column_means().equals(grid([[2, 3]]))
        assert m.row_means().equals(DoubleMatrix.from_array([1.5, 3.5]))

    def test_cumulative_sums(self):
        m = grid([[1, 2], [3, 4]])
        np.testing.assert_array_equal(m.cumulative_sum().data, [1, 4, 6, 10])
        np.testing.assert_array_equal(m.column_cumulative_sum().to_array2(), [[1, 2], [4, 6]])
        np.testing.assert_array_equal(m.row_cumulative_sum().to_array2(), [[1, 3], [3, 7]])

    def test_complex_sum(self):
        assert ComplexDoubleMatrix.from_rows([[1j, 2]]).sum() == 2 + 1j


# ═══════════════════════════════════════════════════════════════════════
# Norms and distances
# ═══════════════════════════════════════════════════════════════════════


class TestNorms:

    def test_norms(self, backend):
        m = grid([[3, -4]])
        assert m.norm1() == pytest.approx(7.0)
        assert m.norm2() == pytest.approx(5.0)
        assert m.normmax() == pytest.approx(4.0)

    def test_normmax_empty(self, backend):
        assert DoubleMatrix.empty().normmax() == 0.0

    def test_complex_norms(self, backend):
        m = ComplexDoubleMatrix.from_rows([[3 + 4j, 1j]])
        assert m.norm1() == pytest.approx(8.0)
        assert m.norm2() == pytest.approx(np.sqrt(26.0))
        assert m.normmax() == pytest.approx(5.0)

    def test_distances(self):
        a, b = grid([[0, 0]]), grid([[3, 4]])
        assert a.squared_distance(b) == pytest.approx(25.0)
        assert a.distance2(b) == pytest.approx(5.0)
        assert a.distance1(b) == pytest.approx(7.0)

    def test_dot_and_project(self, backend):
        a, b = grid([[1, 0]]), grid([[3, 4]])
        assert a.dot(b) == pytest.approx(3.0)
        assert a.project(b) == pytest.approx(3.0)

    def test_complex_dot_conjugates_receiver(self, backend):
        a = ComplexDoubleMatrix.scalar(1j)
        assert a.dot(ComplexDoubleMatrix.scalar(1j)) == pytest.approx(1.0)


# ═══════════════════════════════════════════════════════════════════════
# Min and max
# ═══════════════════════════════════════════════════════════════════════


class TestMinMax:

    def test_min_max(self):
        m = grid([[3, -1], [7, 2]])
        assert m.min() == -1.0
        assert m.argmin() == 2
        assert m.max() == 7.0
        assert m.argmax() == 1

    def test_nan_skipped(self):
        m = grid([[NAN, 2, NAN, 1]])
        assert m.min() == 1.0
        assert m.argmin() == 3
        assert m.max() == 2.0
        assert m.argmax() == 1

    @pytest.mark.parametrize("rows", [[[NAN, NAN]], [[INF, INF]]])
    def test_no_candidate_for_min(self, rows):
        m = grid(rows)
        assert m.min() == INF
        assert m.argmin() == -1

    def test_all_negative_infinity_max(self):
        m = grid([[-INF, NAN]])
        assert m.max() == -INF
        assert m.argmax() == -1

    def test_empty(self):
        m = DoubleMatrix.empty()
        assert (m.min(), m.argmin()) == (INF, -1)
        assert (m.max(), m.argmax()) == (-INF, -1)

    def test_ties_keep_first(self):
        assert grid([[5, 1, 1]]).argmin() == 1

    def test_elementwise_min_max(self):
        a, b = grid([[1, 5]]), grid([[3, 2]])
        assert a.min_of(b).equals(grid([[1, 2]]))
        assert a.max_of(b).equals(grid([[3, 5]]))

    def test_column_and_row_scans(self):
        m = grid([[1, 9], [4, NAN]])
        assert m.column_mins().equals(grid([[1, 9]]))
        np.testing.assert_array_equal(m.column_argmaxs(), [1, 0])
        assert m.row_maxs().equals(DoubleMatrix.from_array([9, 4]))
        np.testing.assert_array_equal(m.row_argmins(), [0, 0])

    def test_single_precision(self):
        m = FloatMatrix.from_rows([[2.5, -1.5]])
        assert m.min() == np.float32(-1.5)


# ═══════════════════════════════════════════════════════════════════════
# Comparisons and logic
# ═══════════════════════════════════════════════════════════════════════


class TestComparisons:

    def test_ordering_yields_zero_one(self):
        m = grid([[1, 2, 3]])
        assert m.lt(2).equals(grid([[1, 0, 0]]))
        assert m.ge(2).equals(grid([[0, 1, 1]]))
        assert m.eq(grid([[1, 0, 3]])).equals(grid([[1, 0, 1]]))
        assert m.ne(2).equals(grid([[1, 0, 1]]))

    def test_logic(self):
        a, b = grid([[0, 2, 0, -1]]), grid([[0, 0, 3, 4]])
        assert a.and_(b).equals(grid([[0, 0, 0, 1]]))
        assert a.or_(b).equals(grid([[0, 1, 1, 1]]))
        assert a.xor(b).equals(grid([[0, 1, 1, 0]]))
        assert a.not_().equals(grid([[1, 0, 1, 0]]))
        assert a.truth().equals(grid([[0, 1, 0, 1]]))

    def test_nan_and_infinite_flags(self):
        m = grid([[NAN, INF, 1]])
        assert m.is_nan().equals(grid([[1, 0, 0]]))
        assert m.is_infinite().equals(grid([[0, 1, 0]]))

    def test_triangular(self):
        assert grid([[1, 0], [2, 3]]).is_lower_triangular()
        assert not grid([[1, 0], [2, 3]]).is_upper_triangular()


class TestEquality:

    def test_equals_treats_nan_as_equal(self):
        assert grid([[NAN, 1]]).equals(grid([[NAN, 1]]))

    def test_shape_matters(self):
        assert not DoubleMatrix.ones(2, 2).equals(DoubleMatrix.ones(1, 4))

    def test_kind_matters(self):
        assert not DoubleMatrix.ones(2).equals(FloatMatrix.ones(2))

    def test_operator(self):
        assert DoubleMatrix.eye(2) == DoubleMatrix.eye(2)
        assert DoubleMatrix.eye(2) != DoubleMatrix.zeros(2, 2)

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(DoubleMatrix.eye(2))

    def test_compare_tolerance(self):
        a = DoubleMatrix.ones(2, 2)
        b = a.add(1e-13)
        assert not a.equals(b)
        assert a.compare(b)
        assert not a.compare(a.add(1e-3))
        assert a.compare(a.add(1e-3), tolerance=1e-2)
