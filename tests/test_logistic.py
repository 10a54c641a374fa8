"""
Tests for the logistic regression module.
"""

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from mlsims.math.logistic import (
    PATIENCE, LogisticResult, fit_logistic, logistic_boundary, predict_logistic,
    predict_proba, sigmoid
)
from mlsims.math.points import Point
from mlsims.utils.general import InvalidInputError


# Two well separated groups of four
SEPARATED = ([Point(x, y, label=0) for x, y in ((0, 0), (1, 0), (0, 1), (1, 1))] +
             [Point(x, y, label=1) for x, y in ((4, 4), (5, 4), (4, 5), (5, 5))])


class TestSigmoid:
    """Tests for the sigmoid and the prediction helpers."""

    def test_values(self):
        assert sigmoid(0) == 0.5
        assert np.isclose(sigmoid(2.0) + sigmoid(-2.0), 1.0)
        assert np.allclose(sigmoid(np.array([-1000.0, 1000.0])), [0.0, 1.0])

    def test_predict(self):
        """Probability exactly 0.5 predicts 0."""
        coefficients = (-1.0, 1.0, 0.0)
        points = [(0, 0), (1, 0), (2, 0)]

        assert np.allclose(predict_proba(coefficients, points), [sigmoid(-1), 0.5, sigmoid(1)])
        assert predict_logistic(coefficients, points).tolist() == [0, 0, 1]

    def test_boundary(self):
        """The boundary follows w0 + w1*x + w2*y = 0 inside the data box."""
        data = np.array([[0.0, 0.0], [2.0, 2.0]])
        boundary = logistic_boundary((-2.0, 1.0, 1.0), data)
        xs, ys = np.array(boundary).T

        assert len(boundary) == 101
        assert np.allclose(xs + ys, 2.0)

    def test_boundary_flat(self):
        data = np.array([[0.0, 0.0], [2.0, 2.0]])
        assert logistic_boundary((1.0, 1.0, 1e-12), data) == []


class TestFit:
    """Tests for fit_logistic."""

    def test_separates_groups(self):
        result = fit_logistic(SEPARATED, learning_rate=0.1, iterations=1000)

        assert result.accuracy == 1.0
        assert result.predictions.tolist() == [0, 0, 0, 0, 1, 1, 1, 1]
        assert np.all(result.probabilities[4:] > 0.5)
        assert result.coefficients[0] < 0
        assert len(result.boundary) > 0

    def test_regularization_shrinks_weights(self):
        """The L2 penalty keeps the feature weights smaller."""
        free = fit_logistic(SEPARATED, learning_rate=0.1, iterations=500)
        penalized = fit_logistic(SEPARATED, learning_rate=0.1, iterations=500, regularization=1.0)

        assert np.linalg.norm(penalized.coefficients[1:]) < np.linalg.norm(free.coefficients[1:])

    def test_early_stop(self):
        """A fit whose cost never changes stops after the patience runs out."""
        points = [Point(1, 0, label=0), Point(1, 0, label=1)]
        result = fit_logistic(points, iterations=500)

        assert result.iterations == PATIENCE
        assert np.allclose(result.coefficients, 0.0)
        assert result.boundary == []

    def test_iteration_cap(self):
        result = fit_logistic(SEPARATED, iterations=5)
        assert result.iterations == 5

    def test_initial_coefficients(self):
        """Starting from a separating model keeps every prediction correct."""
        result = fit_logistic(SEPARATED, iterations=1, initial_coefficients=(-6.0, 1.0, 1.0))
        assert result.accuracy == 1.0

    @pytest.mark.parametrize("kwargs", [
        {'learning_rate': 0},
        {'iterations': 0},
        {'regularization': -1.0},
    ])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(InvalidInputError):
            fit_logistic(SEPARATED, **kwargs)

    def test_non_binary_labels(self):
        with pytest.raises(InvalidInputError):
            fit_logistic([Point(0, 0, label='yes'), Point(1, 1, label='no')])

    def test_empty(self):
        with pytest.raises(InvalidInputError):
            fit_logistic([])

    def test_to_dict(self):
        result = fit_logistic(SEPARATED, iterations=10)
        data = result.to_dict()

        assert isinstance(result, LogisticResult)
        assert len(data['coefficients']) == 3
        assert len(data['predictions']) == len(data['probabilities']) == 8
        assert data['iterations'] == 10
