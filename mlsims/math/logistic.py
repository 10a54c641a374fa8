"""
Logistic regression for mlsims.

Fits a two-feature logistic model p = sigmoid(w0 + w1*x + w2*y) by batch
gradient descent with a linearly decaying learning rate, an optional L2
penalty on the feature weights and early stopping once the cost settles.
"""

import logging
import numpy as np
from typing import Any, Dict, List, Optional, Sequence, Tuple
from scipy.special import expit

from mlsims.math.perceptron import binary_labels
from mlsims.utils.general import InvalidInputError, as_xy_array, check_positive

# Set up logging
logger = logging.getLogger(__name__)

# Cost changes smaller than this count as no change
COST_TOLERANCE = 1e-8

# Consecutive unchanged iterations before stopping early
PATIENCE = 100

# Boundary slopes flatter than this are treated as having no line
BOUNDARY_EPS = 1e-10


def sigmoid(z: Any) -> Any:
    """
    Logistic function 1 / (1 + e^-z), scalar or elementwise.
    """
    return expit(z)


class LogisticResult:
    """
    A fitted logistic model with its predictions on the training points.
    """

    def __init__(self,
                coefficients: np.ndarray,
                accuracy: float,
                predictions: np.ndarray,
                probabilities: np.ndarray,
                boundary: List[Tuple[float, float]],
                iterations: int):
        """
        Args:
            coefficients: (bias, w_x, w_y)
            accuracy: Fraction of training points classified correctly
            predictions: Predicted 0/1 labels, in input order
            probabilities: Predicted P(label = 1), in input order
            boundary: Sampled points on the 0.5 probability line
            iterations: Gradient steps taken before stopping
        """
        self.coefficients = np.asarray(coefficients, dtype=float)
        self.accuracy = float(accuracy)
        self.predictions = np.asarray(predictions, dtype=int)
        self.probabilities = np.asarray(probabilities, dtype=float)
        self.boundary = list(boundary)
        self.iterations = int(iterations)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'coefficients': self.coefficients.tolist(),
            'accuracy': self.accuracy,
            'predictions': self.predictions.tolist(),
            'probabilities': self.probabilities.tolist(),
            'boundary': [{'x': x, 'y': y} for x, y in self.boundary],
            'iterations': self.iterations
        }

    def __repr__(self) -> str:
        return (f"LogisticResult(coefficients={self.coefficients.tolist()}, "
                f"accuracy={self.accuracy:.3f}, iterations={self.iterations})")


def predict_proba(coefficients: Sequence[float], points: Sequence[Any]) -> np.ndarray:
    """
    P(label = 1) for each point under the given coefficients.
    """
    data = as_xy_array(points)
    w0, w1, w2 = coefficients
    return sigmoid(w0 + w1 * data[:, 0] + w2 * data[:, 1])


def predict_logistic(coefficients: Sequence[float], points: Sequence[Any]) -> np.ndarray:
    """
    0/1 labels, 1 where the probability is strictly above 0.5.
    """
    return (predict_proba(coefficients, points) > 0.5).astype(int)


def logistic_boundary(coefficients: Sequence[float],
                      data: np.ndarray,
                      n_steps: int = 100) -> List[Tuple[float, float]]:
    """
    Sample the 0.5 probability line across the data's bounding box.

    Args:
        coefficients: (bias, w_x, w_y)
        data: (n, 2) array whose extent bounds the line
        n_steps: Number of equal x steps between the data's x extremes

    Returns:
        List of (x, y) pairs; empty when w_y is close to zero or the data
        has no x spread
    """
    w0, w1, w2 = (float(c) for c in coefficients)
    x_min, y_min = np.min(data, axis=0)
    x_max, y_max = np.max(data, axis=0)

    if abs(w2) <= BOUNDARY_EPS or x_max == x_min:
        return []

    xs = np.linspace(x_min, x_max, n_steps + 1)
    ys = -(w0 + w1 * xs) / w2

    keep = (ys >= y_min) & (ys <= y_max)
    return [(float(x), float(y)) for x, y in zip(xs[keep], ys[keep])]


def fit_logistic(points: Sequence[Any],
                 learning_rate: float = 0.1,
                 iterations: int = 100,
                 regularization: float = 0.0,
                 initial_coefficients: Optional[Sequence[float]] = None) -> LogisticResult:
    """
    Fit a logistic model by batch gradient descent.

    Each step computes the mean gradient of the error p - label over the
    features (1, x, y), adds regularization * w to the two feature weights
    and moves against the gradient by learning_rate * (1 - step / iterations).
    The mean squared error serves as the stopping cost: after PATIENCE
    consecutive steps with a change below COST_TOLERANCE the fit stops early.

    Args:
        points: Points labeled 0 or 1
        learning_rate: Initial step size, must be positive
        iterations: Step cap, at least 1
        regularization: L2 strength on the feature weights, non-negative
        initial_coefficients: Starting (bias, w_x, w_y), zeros when omitted

    Returns:
        LogisticResult
    """
    points = list(points)
    if not points:
        raise InvalidInputError("Cannot fit a logistic model without points")
    check_positive('learning_rate', learning_rate)
    if iterations is None or iterations < 1:
        raise InvalidInputError(f"iterations must be at least 1, got {iterations}")
    if regularization is None or regularization < 0:
        raise InvalidInputError(f"regularization must be non-negative, got {regularization}")

    data = as_xy_array(points)
    labels = binary_labels(points)
    features = np.column_stack([np.ones(len(points)), data])

    if initial_coefficients is None:
        weights = np.zeros(3)
    else:
        weights = np.array(initial_coefficients, dtype=float)

    penalty_mask = np.array([0.0, 1.0, 1.0])
    prev_cost = np.inf
    patience = 0
    steps = iterations

    for step in range(iterations):
        errors = sigmoid(features @ weights) - labels
        gradients = features.T @ errors / len(points) + regularization * penalty_mask * weights
        cost = float(np.mean(errors ** 2))

        if abs(prev_cost - cost) < COST_TOLERANCE:
            patience += 1
            if patience >= PATIENCE:
                steps = step
                logger.debug(f"Logistic fit settled early at step {step}")
                break
        else:
            patience = 0
        prev_cost = cost

        weights = weights - learning_rate * (1 - step / iterations) * gradients

    probabilities = sigmoid(features @ weights)
    predictions = (probabilities > 0.5).astype(int)

    return LogisticResult(
        coefficients=weights,
        accuracy=float(np.mean(predictions == labels)),
        predictions=predictions,
        probabilities=probabilities,
        boundary=logistic_boundary(weights, data),
        iterations=steps
    )
