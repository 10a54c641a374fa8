"""
Tests for the regularized regression module.
"""

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from mlsims.datasets import make_regression_data
from mlsims.math.regularization import (
    DEFAULT_LAMBDAS, PathStep, active_features, coefficient_path,
    evaluate_regularized, fit_regularized, predict_linear
)
from mlsims.utils.general import InvalidInputError


# Noise-free y = 2x + 3 on [0, 1]
UNIT_LINE = np.column_stack([np.linspace(0, 1, 11), 2 * np.linspace(0, 1, 11) + 3])


class TestFitRegularized:
    """Tests for fit_regularized."""

    def test_unpenalized_recovers_line(self):
        """With no penalty and enough steps the exact line is found."""
        coefficients = fit_regularized(UNIT_LINE, 'l2', lam=0.0, learning_rate=0.5, iterations=5000)
        assert np.allclose(coefficients, [2.0, 3.0], atol=1e-3)

    def test_l1_sparsity_vs_l2_shrinkage(self):
        """A strong L1 penalty zeroes the coefficients, L2 only shrinks them."""
        l1 = fit_regularized(UNIT_LINE, 'l1', lam=50)
        l2 = fit_regularized(UNIT_LINE, 'l2', lam=50)
        weak = fit_regularized(UNIT_LINE, 'l2', lam=0.001)

        assert np.all(l1 == 0.0)
        assert np.all(l2 != 0.0)
        assert np.all(np.abs(l2) < np.abs(weak))

    def test_elastic_net_extremes(self):
        """alpha = 1 is pure L1 and alpha = 0 is pure L2."""
        for lam in (0.1, 5.0):
            assert np.allclose(fit_regularized(UNIT_LINE, 'elasticnet', lam=lam, alpha=1.0),
                               fit_regularized(UNIT_LINE, 'l1', lam=lam))
            assert np.allclose(fit_regularized(UNIT_LINE, 'elasticnet', lam=lam, alpha=0.0),
                               fit_regularized(UNIT_LINE, 'l2', lam=lam))

    def test_accepts_point_lists(self):
        """Point lists and arrays give the same fit."""
        points = [(x, y) for x, y in UNIT_LINE]
        assert np.allclose(fit_regularized(points), fit_regularized(UNIT_LINE))

    def test_divergence(self):
        """A step size too large for the data is reported."""
        wide = np.column_stack([np.linspace(0, 10, 11), np.linspace(0, 10, 11)])
        with pytest.raises(InvalidInputError):
            fit_regularized(wide, 'l2', lam=0.0, learning_rate=1.0)

    @pytest.mark.parametrize("kwargs", [
        {'penalty': 'l3'},
        {'penalty': 'elasticnet', 'alpha': 1.5},
        {'penalty': 'elasticnet', 'alpha': -0.1},
        {'lam': -1.0},
        {'learning_rate': 0.0},
        {'iterations': 0},
    ])
    def test_invalid_arguments(self, kwargs):
        """Bad penalty settings are rejected."""
        with pytest.raises(InvalidInputError):
            fit_regularized(UNIT_LINE, **kwargs)

    def test_empty(self):
        """An empty dataset is rejected."""
        with pytest.raises(InvalidInputError):
            fit_regularized([])


class TestCoefficientPath:
    """Tests for coefficient_path."""

    def test_default_lambdas(self):
        """One cold-started fit per default lambda."""
        path = coefficient_path(UNIT_LINE, 'l2')

        assert [step.lam for step in path] == list(DEFAULT_LAMBDAS)
        for step in path:
            assert isinstance(step, PathStep)
            assert step.feature_names == ['x', 'intercept']
            assert np.allclose(step.coefficients, fit_regularized(UNIT_LINE, 'l2', step.lam))

    def test_l1_path_drops_features(self):
        """The strongest L1 penalty leaves no active coefficient."""
        path = coefficient_path(UNIT_LINE, 'l1', lambdas=[0.001, 10])

        assert active_features(path[0].coefficients) == ['x', 'intercept']
        assert active_features(path[-1].coefficients) == []

    def test_to_dict(self):
        """Path steps serialize lambda, coefficients and names."""
        step = PathStep(0.5, np.array([1.0, 2.0]))
        assert step.to_dict() == {'lambda': 0.5, 'coefficients': [1.0, 2.0], 'feature_names': ['x', 'intercept']}


class TestEvaluate:
    """Tests for evaluate_regularized."""

    def test_scores(self):
        """A mild penalty on linear data scores well on both splits."""
        points = make_regression_data(60, rng=0)
        result = evaluate_regularized(points, 'l2', lam=0.01, rng=1)

        assert result['training_score'] > 0.9
        assert result['validation_score'] > 0.8
        assert result['coefficient_count'] == len(result['selected_features'])
        assert len(result['coefficients']) == 2

    def test_reproducible(self):
        """The same seed gives the same split and scores."""
        points = make_regression_data(40, rng=3)

        first = evaluate_regularized(points, 'l1', lam=0.1, rng=5)
        second = evaluate_regularized(points, 'l1', lam=0.1, rng=5)
        assert first == second

    def test_too_few_points(self):
        """Both splits need at least two points."""
        with pytest.raises(InvalidInputError):
            evaluate_regularized([(0, 1), (1, 3), (2, 5)], rng=0)

    def test_invalid_fraction(self):
        """The validation fraction must lie strictly between 0 and 1."""
        with pytest.raises(InvalidInputError):
            evaluate_regularized(UNIT_LINE, validation_fraction=1.0)


class TestPredictLinear:
    """Tests for predict_linear."""

    def test_predict(self):
        assert np.allclose(predict_linear([2.0, 3.0], [0, 1, 2]), [3.0, 5.0, 7.0])
