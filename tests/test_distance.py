"""
Tests for the distance and K-NN module.
"""

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from mlsims.datasets import make_moons
from mlsims.math.distance import (
    METRICS, cosine_similarity, decision_boundary, distance, distance_matrix,
    knn_classify, nearest_neighbors, vector_angle
)
from mlsims.math.points import Point
from mlsims.utils.general import InvalidInputError


TRAINING = [
    Point(0, 0, label='A', id='a1'),
    Point(1, 0, label='A', id='a2'),
    Point(0, 1, label='A', id='a3'),
    Point(5, 5, label='B', id='b1'),
    Point(6, 5, label='B', id='b2'),
    Point(5, 6, label='B', id='b3'),
]


class TestDistance:
    """Tests for the distance metrics."""

    def test_metrics(self):
        """Euclidean, Manhattan and order-3 Minkowski distances."""
        assert np.isclose(distance((0, 0), (3, 4), 'euclidean'), 5.0)
        assert np.isclose(distance((0, 0), (3, 4), 'manhattan'), 7.0)
        assert np.isclose(distance((0, 0), (3, 4), 'minkowski'), 91 ** (1 / 3))

    def test_properties(self):
        """Every metric is symmetric and zero on identical points."""
        a, b = (1.5, -2.0), (4.0, 3.5)
        for metric in METRICS:
            assert distance(a, a, metric) == 0.0
            assert np.isclose(distance(a, b, metric), distance(b, a, metric))
            assert distance(a, b, metric) > 0

    def test_unknown_metric(self):
        """An unknown metric is rejected."""
        with pytest.raises(InvalidInputError):
            distance((0, 0), (1, 1), 'chebyshev')


class TestDistanceMatrix:
    """Tests for distance_matrix."""

    def test_shape_and_symmetry(self):
        """The matrix is square, symmetric and zero on the diagonal."""
        matrix = distance_matrix(TRAINING)

        assert matrix.shape == (6, 6)
        assert list(matrix.index) == ['a1', 'a2', 'a3', 'b1', 'b2', 'b3']
        assert np.allclose(matrix.values, matrix.values.T)
        assert np.allclose(np.diag(matrix.values), 0.0)
        assert np.isclose(matrix.loc['a1', 'b1'], np.sqrt(50))

    def test_manhattan(self):
        """Metric selection reaches the matrix."""
        matrix = distance_matrix(TRAINING, 'manhattan')
        assert np.isclose(matrix.loc['a1', 'b1'], 10.0)

    def test_positions_as_ids(self):
        """Points without ids are keyed by position."""
        matrix = distance_matrix([(0, 0), (3, 4)])
        assert list(matrix.columns) == ['0', '1']
        assert np.isclose(matrix.loc['0', '1'], 5.0)

    def test_single_point(self):
        """One point gives a 1x1 zero matrix."""
        matrix = distance_matrix([(2, 3)])
        assert matrix.shape == (1, 1)
        assert matrix.values[0, 0] == 0.0


class TestKnn:
    """Tests for nearest_neighbors and knn_classify."""

    def test_nearest_neighbors_order(self):
        """Neighbors come back nearest first."""
        neighbors = nearest_neighbors((0.9, 0.1), TRAINING, 3)

        assert [point.id for point, _ in neighbors] == ['a2', 'a1', 'a3']
        distances = [dist for _, dist in neighbors]
        assert distances == sorted(distances)

    def test_classify(self):
        """Queries near a group take its label."""
        assert knn_classify((0.5, 0.5), TRAINING, 3) == 'A'
        assert knn_classify((5.5, 5.5), TRAINING, 3) == 'B'

    def test_k_one_self_classification(self):
        """With k = 1 every training point is classified as its own label."""
        training = make_moons(20, rng=4)
        for point in training:
            assert knn_classify(point, training, 1) == point.label

    def test_tie_goes_to_nearest(self):
        """A tied vote goes to the label of the closest voter."""
        training = [Point(0, 0, label='A'), Point(2, 0, label='B')]

        assert knn_classify((0.9, 0), training, 2) == 'A'
        assert knn_classify((1.1, 0), training, 2) == 'B'

    def test_all_metrics(self):
        """Classification works under every metric."""
        for metric in METRICS:
            assert knn_classify((0.2, 0.2), TRAINING, 3, metric) == 'A'

    @pytest.mark.parametrize("k", [0, -1, 7])
    def test_invalid_k(self, k):
        """k must lie within 1..n."""
        with pytest.raises(InvalidInputError):
            knn_classify((0, 0), TRAINING, k)

    def test_empty_training_set(self):
        """An empty training set is rejected."""
        with pytest.raises(InvalidInputError):
            knn_classify((0, 0), [], 1)


class TestDecisionBoundary:
    """Tests for decision_boundary."""

    def test_grid_size(self):
        """The grid has (grid_size + 1) ** 2 nodes."""
        boundary = decision_boundary(TRAINING, 3, grid_size=10)
        assert len(boundary) == 121

    def test_padding_and_labels(self):
        """The grid covers the padded bounding box and corners take the nearby label."""
        boundary = decision_boundary(TRAINING, 1, grid_size=4, padding=1.0)
        xs = [x for x, _, _ in boundary]
        ys = [y for _, y, _ in boundary]

        assert np.isclose(min(xs), -1.0) and np.isclose(max(xs), 7.0)
        assert np.isclose(min(ys), -1.0) and np.isclose(max(ys), 7.0)

        labels = {(round(x, 6), round(y, 6)): label for x, y, label in boundary}
        assert labels[(-1.0, -1.0)] == 'A'
        assert labels[(7.0, 7.0)] == 'B'

    def test_invalid_grid(self):
        """grid_size must be positive."""
        with pytest.raises(InvalidInputError):
            decision_boundary(TRAINING, 1, grid_size=0)


class TestVectors:
    """Tests for cosine_similarity and vector_angle."""

    def test_orthogonal(self):
        """Perpendicular vectors have similarity 0 and a right angle."""
        assert np.isclose(cosine_similarity((1, 0), (0, 1)), 0.0)
        assert np.isclose(vector_angle((1, 0), (0, 1)), 90.0)

    def test_parallel_and_opposite(self):
        """Parallel vectors give 1 and 0 degrees, opposite ones -1 and 180."""
        assert np.isclose(cosine_similarity((2, 2), (5, 5)), 1.0)
        assert np.isclose(vector_angle((2, 2), (5, 5)), 0.0, atol=1e-6)
        assert np.isclose(cosine_similarity((1, 0), (-3, 0)), -1.0)
        assert np.isclose(vector_angle((1, 0), (-3, 0)), 180.0)

    def test_zero_vector(self):
        """A zero-length vector gives 0 for both."""
        assert cosine_similarity((0, 0), (1, 2)) == 0.0
        assert vector_angle((0, 0), (1, 2)) == 0.0
