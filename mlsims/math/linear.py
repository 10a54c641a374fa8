"""
Simple linear regression by gradient descent for mlsims.

Both axes are standardized before descending so a single learning rate
works for any data scale; the fitted line is mapped back to the original
units afterwards.
"""

import logging
import numpy as np
from typing import Any, Dict, Sequence
from sklearn.metrics import r2_score

from mlsims.utils.general import InvalidInputError, as_xy_array, check_positive

# Set up logging
logger = logging.getLogger(__name__)


class LinearFit:
    """
    A fitted line with its residuals on the training points.
    """

    def __init__(self,
                slope: float,
                intercept: float,
                r_squared: float,
                predictions: np.ndarray,
                residuals: np.ndarray):
        self.slope = float(slope)
        self.intercept = float(intercept)
        self.r_squared = float(r_squared)
        self.predictions = np.asarray(predictions, dtype=float)
        self.residuals = np.asarray(residuals, dtype=float)

    def predict(self, x: Any) -> Any:
        return self.slope * np.asarray(x, dtype=float) + self.intercept

    def to_dict(self) -> Dict[str, Any]:
        return {
            'slope': self.slope,
            'intercept': self.intercept,
            'r_squared': self.r_squared,
            'predictions': self.predictions.tolist(),
            'residuals': self.residuals.tolist()
        }

    def __repr__(self) -> str:
        return f"LinearFit(slope={self.slope:.4f}, intercept={self.intercept:.4f}, r2={self.r_squared:.4f})"


def standardize(values: np.ndarray):
    """
    Scale values to zero mean and unit population standard deviation.

    Returns:
        Tuple of (scaled values, mean, std)
    """
    mean = float(np.mean(values))
    std = float(np.std(values))
    return (values - mean) / std, mean, std


def fit_linear_regression(points: Sequence[Any],
                          learning_rate: float = 0.01,
                          iterations: int = 100,
                          regularization: float = 0.0) -> LinearFit:
    """
    Fit y = slope * x + intercept by full-batch gradient descent.

    x and y are standardized, slope and intercept start at zero, and each
    step subtracts learning_rate times the mean squared-error gradient plus
    regularization times the current value. The standardized line is then
    converted back: slope * std_y / std_x, with the intercept chosen so the
    line passes through the means.

    Args:
        points: At least two points
        learning_rate: Step size, must be positive
        iterations: Number of steps, non-negative
        regularization: L2 strength on both parameters, non-negative

    Returns:
        LinearFit on the original scale
    """
    data = as_xy_array(points)
    n = data.shape[0]

    if n < 2:
        raise InvalidInputError(f"At least two points are required, got {n}")
    check_positive('learning_rate', learning_rate)
    if iterations is None or iterations < 0:
        raise InvalidInputError(f"iterations must be non-negative, got {iterations}")
    if regularization is None or regularization < 0:
        raise InvalidInputError(f"regularization must be non-negative, got {regularization}")

    x, y = data[:, 0], data[:, 1]
    if np.ptp(x) == 0:
        raise InvalidInputError("x values must not all be equal")

    if np.ptp(y) == 0:
        # A flat target is fit exactly by its mean
        slope, intercept = 0.0, float(y[0])
    else:
        xs, x_mean, x_std = standardize(x)
        ys, y_mean, y_std = standardize(y)

        w, b = 0.0, 0.0
        for _ in range(iterations):
            errors = w * xs + b - ys
            w_grad = float(np.mean(errors * xs)) + regularization * w
            b_grad = float(np.mean(errors)) + regularization * b
            w -= learning_rate * w_grad
            b -= learning_rate * b_grad

        slope = w * y_std / x_std
        intercept = y_mean + b * y_std - slope * x_mean

    predictions = slope * x + intercept
    residuals = y - predictions

    logger.debug(f"Linear fit after {iterations} steps: slope={slope:.4f}, intercept={intercept:.4f}")

    return LinearFit(slope, intercept, r2_score(y, predictions), predictions, residuals)
