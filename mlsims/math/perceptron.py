"""
Perceptron learning for mlsims.

This module trains a single perceptron on labeled 2-D points with the
classic error-driven update rule and traces the separating line it learns.
Labels must be 0 or 1; the logic-gate datasets are the usual inputs.
"""

import logging
import numpy as np
from typing import Any, Dict, List, Optional, Sequence, Tuple

from mlsims.utils.general import InvalidInputError, as_xy_array, check_positive, point_label

# Set up logging
logger = logging.getLogger(__name__)


class PerceptronResult:
    """
    Outcome of a training run.

    Weights are ordered (bias, w_x, w_y). iterations counts the epochs run,
    including the final error-free epoch when the run converged.
    """

    def __init__(self,
                weights: np.ndarray,
                accuracy: float,
                iterations: int,
                converged: bool,
                boundary: List[Tuple[float, float]]):
        self.weights = np.asarray(weights, dtype=float)
        self.accuracy = float(accuracy)
        self.iterations = int(iterations)
        self.converged = bool(converged)
        self.boundary = list(boundary)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'weights': self.weights.tolist(),
            'accuracy': self.accuracy,
            'iterations': self.iterations,
            'converged': self.converged,
            'boundary': [{'x': x, 'y': y} for x, y in self.boundary]
        }

    def __repr__(self) -> str:
        return (f"PerceptronResult(weights={self.weights.tolist()}, accuracy={self.accuracy:.3f}, "
                f"iterations={self.iterations}, converged={self.converged})")


def binary_labels(points: Sequence[Any]) -> np.ndarray:
    """
    Labels of points as an int array, rejecting anything other than 0 or 1.
    """
    labels = [point_label(point) for point in points]
    for label in labels:
        if label not in (0, 1):
            raise InvalidInputError(f"Labels must be 0 or 1, got {label!r}")
    return np.array(labels, dtype=int)


def predict_perceptron(weights: Sequence[float], point: Any) -> int:
    """
    Classify one point: 1 when w0 + w1*x + w2*y is strictly positive, else 0.

    Args:
        weights: (bias, w_x, w_y)
        point: Point-like value

    Returns:
        0 or 1
    """
    w0, w1, w2 = weights
    x, y = as_xy_array([point])[0]
    return 1 if w0 + w1 * x + w2 * y > 0 else 0


def perceptron_accuracy(weights: Sequence[float], points: Sequence[Any]) -> float:
    """
    Fraction of labeled points the weights classify correctly; 0.0 when empty.
    """
    points = list(points)
    if not points:
        return 0.0

    labels = binary_labels(points)
    correct = sum(1 for point, label in zip(points, labels) if predict_perceptron(weights, point) == label)
    return correct / len(points)


def perceptron_boundary(weights: Sequence[float],
                        x_range: Tuple[float, float] = (-0.5, 1.5),
                        y_range: Tuple[float, float] = (-0.5, 1.5),
                        step: float = 0.01) -> List[Tuple[float, float]]:
    """
    Sample the line w0 + w1*x + w2*y = 0 across x_range.

    Args:
        weights: (bias, w_x, w_y)
        x_range: Inclusive x extent to sample
        y_range: Points with y outside this range are dropped
        step: Spacing between sampled x values

    Returns:
        List of (x, y) pairs; empty when w_y is zero (vertical or no line)
    """
    check_positive('step', step)
    w0, w1, w2 = (float(w) for w in weights)
    if w2 == 0:
        return []

    n_steps = int(np.floor((x_range[1] - x_range[0]) / step + 1e-9))
    xs = x_range[0] + step * np.arange(n_steps + 1)
    ys = -(w0 + w1 * xs) / w2

    keep = (ys >= y_range[0]) & (ys <= y_range[1])
    return [(float(x), float(y)) for x, y in zip(xs[keep], ys[keep])]


def train_perceptron(points: Sequence[Any],
                     learning_rate: float = 0.1,
                     max_iterations: int = 100,
                     x_range: Tuple[float, float] = (-0.5, 1.5),
                     y_range: Tuple[float, float] = (-0.5, 1.5),
                     initial_weights: Optional[Sequence[float]] = None) -> PerceptronResult:
    """
    Train a perceptron with the error-driven update rule.

    Weights start at zero. Each epoch visits the points in input order and,
    for every misclassified point with error e = label - prediction, adds
    learning_rate * e * (1, x, y) to the weights. Training stops after the
    first epoch without a mistake, or after max_iterations epochs.

    Args:
        points: Points labeled 0 or 1
        learning_rate: Step size, must be positive
        max_iterations: Epoch cap, at least 1
        x_range: x extent of the traced boundary
        y_range: y extent of the traced boundary
        initial_weights: Starting (bias, w_x, w_y), zeros when omitted

    Returns:
        PerceptronResult
    """
    points = list(points)
    if not points:
        raise InvalidInputError("Cannot train a perceptron without points")
    check_positive('learning_rate', learning_rate)
    if max_iterations is None or max_iterations < 1:
        raise InvalidInputError(f"max_iterations must be at least 1, got {max_iterations}")

    data = as_xy_array(points)
    labels = binary_labels(points)
    features = np.column_stack([np.ones(len(points)), data])

    weights = np.zeros(3) if initial_weights is None else np.array(initial_weights, dtype=float)

    converged = False
    iterations = max_iterations

    for epoch in range(max_iterations):
        errors = 0
        for row, label in zip(features, labels):
            prediction = 1 if np.dot(weights, row) > 0 else 0
            error = label - prediction
            if error != 0:
                weights = weights + learning_rate * error * row
                errors += 1

        if errors == 0:
            converged = True
            iterations = epoch + 1
            break

    logger.debug(f"Perceptron stopped after {iterations} epochs (converged={converged})")

    return PerceptronResult(
        weights=weights,
        accuracy=perceptron_accuracy(weights, points),
        iterations=iterations,
        converged=converged,
        boundary=perceptron_boundary(weights, x_range, y_range)
    )
