"""
Tests for the gradient-descent linear regression module.
"""

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from mlsims.datasets import make_regression_data
from mlsims.math.linear import LinearFit, fit_linear_regression, standardize
from mlsims.utils.general import InvalidInputError


# Noise-free y = 2x + 3 on 0..9
LINE = [(x, 2 * x + 3) for x in range(10)]


class TestStandardize:
    """Tests for standardize."""

    def test_zero_mean_unit_std(self):
        scaled, mean, std = standardize(np.array([1.0, 2.0, 3.0, 4.0]))

        assert mean == 2.5
        assert np.isclose(std, np.sqrt(1.25))
        assert np.isclose(np.mean(scaled), 0.0)
        assert np.isclose(np.std(scaled), 1.0)


class TestFitLinearRegression:
    """Tests for fit_linear_regression."""

    def test_recovers_line(self):
        """Enough steps find the exact line."""
        fit = fit_linear_regression(LINE, learning_rate=0.1, iterations=1000)

        assert np.isclose(fit.slope, 2.0)
        assert np.isclose(fit.intercept, 3.0)
        assert np.isclose(fit.r_squared, 1.0)
        assert np.allclose(fit.residuals, 0.0, atol=1e-6)

    def test_few_steps_underfit(self):
        """The standardized slope after k steps is 1 - (1 - lr)^k of its target."""
        fit = fit_linear_regression(LINE, learning_rate=0.01, iterations=100)

        assert np.isclose(fit.slope, 2.0 * (1 - 0.99 ** 100))
        assert fit.r_squared < 1.0

    def test_line_passes_through_means(self):
        """With zero steps the fit is the flat line at the mean of y."""
        fit = fit_linear_regression(LINE, iterations=0)

        assert fit.slope == 0.0
        assert np.isclose(fit.intercept, 12.0)
        assert np.isclose(fit.r_squared, 0.0)

    def test_regularization_shrinks_slope(self):
        """An L2 strength of 1 halves the standardized slope."""
        fit = fit_linear_regression(LINE, learning_rate=0.1, iterations=2000, regularization=1.0)

        assert np.isclose(fit.slope, 1.0)
        assert np.isclose(fit.intercept, 7.5)

    def test_noisy_data(self):
        points = make_regression_data(n=100, rng=0)
        fit = fit_linear_regression(points, learning_rate=0.1, iterations=500)

        assert abs(fit.slope - 2.0) < 0.2
        assert fit.r_squared > 0.9
        assert np.allclose(fit.predictions + fit.residuals, [p.y for p in points])

    def test_flat_target(self):
        """Constant y is fit exactly by a horizontal line."""
        fit = fit_linear_regression([(0, 5), (1, 5), (2, 5)])

        assert fit.slope == 0.0
        assert fit.intercept == 5.0
        assert np.allclose(fit.residuals, 0.0)

    @pytest.mark.parametrize("points", [[], [(1, 2)], [(1, 2), (1, 3)]])
    def test_degenerate_points(self, points):
        with pytest.raises(InvalidInputError):
            fit_linear_regression(points)

    @pytest.mark.parametrize("kwargs", [
        {'learning_rate': 0},
        {'iterations': -1},
        {'regularization': -0.5},
    ])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(InvalidInputError):
            fit_linear_regression(LINE, **kwargs)

    def test_predict_and_to_dict(self):
        fit = fit_linear_regression(LINE, learning_rate=0.1, iterations=1000)
        data = fit.to_dict()

        assert isinstance(fit, LinearFit)
        assert np.isclose(fit.predict(20), 43.0)
        assert len(data['predictions']) == len(data['residuals']) == 10
