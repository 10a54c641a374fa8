"""
Regularized linear regression for mlsims.

This module fits y = w*x + b by batch gradient descent with an L1, L2 or
elastic-net penalty, traces the coefficients across a grid of penalty
strengths and scores a fit on a held-out split.
"""

import logging
import numpy as np
from typing import Any, Dict, List, Optional, Sequence, Union
from sklearn.metrics import r2_score
from sklearn.model_selection import train_test_split

from mlsims.utils.general import InvalidInputError, as_xy_array, resolve_rng

# Set up logging
logger = logging.getLogger(__name__)

PENALTIES = ('l1', 'l2', 'elasticnet')

DEFAULT_LAMBDAS = (0.001, 0.01, 0.1, 0.5, 1, 2, 5, 10)

FEATURE_NAMES = ('x', 'intercept')

# Coefficients with a smaller magnitude count as dropped
ACTIVE_THRESHOLD = 0.01


class PathStep:
    """
    Coefficients fitted at one penalty strength.
    """

    def __init__(self, lam: float, coefficients: np.ndarray, feature_names: Sequence[str] = FEATURE_NAMES):
        self.lam = float(lam)
        self.coefficients = np.asarray(coefficients, dtype=float)
        self.feature_names = list(feature_names)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lambda': self.lam,
            'coefficients': self.coefficients.tolist(),
            'feature_names': list(self.feature_names)
        }

    def __repr__(self) -> str:
        return f"PathStep(lambda={self.lam}, coefficients={self.coefficients.tolist()})"


def _check_penalty(penalty: str, lam: float, alpha: float) -> None:
    if penalty not in PENALTIES:
        raise InvalidInputError(f"Unknown penalty: {penalty} (expected one of {', '.join(PENALTIES)})")
    if lam < 0:
        raise InvalidInputError(f"lambda must be non-negative, got {lam}")
    if not 0.0 <= alpha <= 1.0:
        raise InvalidInputError(f"alpha must be within [0, 1], got {alpha}")


def _design_matrix(xs: np.ndarray) -> np.ndarray:
    return np.column_stack([xs, np.ones_like(xs)])


def _gradient_descent(X: np.ndarray,
                      y: np.ndarray,
                      penalty: str,
                      lam: float,
                      alpha: float,
                      learning_rate: float,
                      iterations: int) -> np.ndarray:
    """
    Run a fixed number of full-batch proximal gradient steps from zero.

    The squared-error gradient and any L2 share are applied as a plain step.
    The L1 share is applied afterwards as soft thresholding, which moves a
    coefficient toward zero by at most learning_rate * l1_weight and leaves it
    at exactly zero rather than letting it cross over.
    """
    n = X.shape[0]
    coefficients = np.zeros(X.shape[1])

    if penalty == 'l1':
        l1_weight, l2_weight = lam, 0.0
    elif penalty == 'l2':
        l1_weight, l2_weight = 0.0, lam
    else:
        l1_weight, l2_weight = alpha * lam, (1 - alpha) * lam

    with np.errstate(over='ignore', invalid='ignore'):
        for _ in range(iterations):
            gradient = X.T @ (X @ coefficients - y) / n
            gradient += 2 * l2_weight * coefficients
            coefficients = coefficients - learning_rate * gradient

            if l1_weight > 0:
                shrink = learning_rate * l1_weight
                coefficients = np.sign(coefficients) * np.maximum(np.abs(coefficients) - shrink, 0.0)

    return coefficients


def fit_regularized(points: Union[Sequence[Any], np.ndarray],
                   penalty: str = 'l2',
                   lam: float = 0.01,
                   alpha: float = 0.5,
                   learning_rate: float = 0.01,
                   iterations: int = 1000) -> np.ndarray:
    """
    Fit [w, b] for y = w*x + b with a penalized squared loss.

    Both coefficients, the intercept included, are penalized. Descent runs
    for the full iteration budget with no early stopping.

    Args:
        points: Points, (x, y) pairs or an (n, 2) array
        penalty: 'l1', 'l2' or 'elasticnet' (alpha * L1 + (1 - alpha) * L2)
        lam: Penalty strength, non-negative
        alpha: Elastic-net mixing weight in [0, 1]
        learning_rate: Step size
        iterations: Number of gradient steps

    Returns:
        Array [w, b]
    """
    _check_penalty(penalty, lam, alpha)
    if learning_rate <= 0:
        raise InvalidInputError(f"learning_rate must be positive, got {learning_rate}")
    if iterations < 1:
        raise InvalidInputError(f"iterations must be at least 1, got {iterations}")

    data = as_xy_array(points if isinstance(points, np.ndarray) else list(points))
    if data.shape[0] == 0:
        raise InvalidInputError("Cannot fit a regression to an empty dataset")

    X = _design_matrix(data[:, 0])
    coefficients = _gradient_descent(X, data[:, 1], penalty, lam, alpha, learning_rate, iterations)

    if not np.all(np.isfinite(coefficients)):
        raise InvalidInputError(
            f"Gradient descent diverged (penalty={penalty}, lambda={lam}, learning_rate={learning_rate}); "
            f"try a smaller learning rate"
        )

    logger.debug(f"Fitted {penalty} regression with lambda={lam}: w={coefficients[0]:.4f}, b={coefficients[1]:.4f}")

    return coefficients


def predict_linear(coefficients: Sequence[float], xs: Any) -> np.ndarray:
    """
    Evaluate w*x + b at each x.
    """
    w, b = coefficients
    return w * np.asarray(xs, dtype=float) + b


def coefficient_path(points: Union[Sequence[Any], np.ndarray],
                     penalty: str = 'l2',
                     lambdas: Sequence[float] = DEFAULT_LAMBDAS,
                     alpha: float = 0.5,
                     learning_rate: float = 0.01,
                     iterations: int = 1000) -> List[PathStep]:
    """
    Fit independently at every penalty strength.

    Each fit starts from zero coefficients.

    Args:
        points: Points to fit
        penalty: Penalty type
        lambdas: Penalty strengths, in the order to report them
        alpha: Elastic-net mixing weight
        learning_rate: Step size
        iterations: Steps per fit

    Returns:
        List of PathStep, one per lambda
    """
    if not isinstance(points, np.ndarray):
        points = list(points)

    return [
        PathStep(lam, fit_regularized(points, penalty, lam, alpha, learning_rate, iterations))
        for lam in lambdas
    ]


def active_features(coefficients: Sequence[float],
                    feature_names: Sequence[str] = FEATURE_NAMES) -> List[str]:
    """
    Names of the coefficients whose magnitude exceeds the active threshold.
    """
    return [name for name, coef in zip(feature_names, coefficients) if abs(coef) > ACTIVE_THRESHOLD]


def evaluate_regularized(points: Union[Sequence[Any], np.ndarray],
                         penalty: str = 'l2',
                         lam: float = 0.01,
                         alpha: float = 0.5,
                         validation_fraction: float = 0.3,
                         rng: Optional[Union[int, np.random.Generator]] = None,
                         learning_rate: float = 0.01,
                         iterations: int = 1000) -> Dict[str, Any]:
    """
    Fit on a random training split and score both splits with R².

    Args:
        points: Points to fit
        penalty: Penalty type
        lam: Penalty strength
        alpha: Elastic-net mixing weight
        validation_fraction: Share of points held out, in (0, 1)
        rng: numpy Generator or int seed for the split
        learning_rate: Step size
        iterations: Gradient steps

    Returns:
        Dictionary with coefficients, training_score, validation_score,
        coefficient_count and selected_features
    """
    _check_penalty(penalty, lam, alpha)
    if not 0.0 < validation_fraction < 1.0:
        raise InvalidInputError(f"validation_fraction must be within (0, 1), got {validation_fraction}")

    data = as_xy_array(points if isinstance(points, np.ndarray) else list(points))
    n = data.shape[0]
    n_validation = int(np.ceil(validation_fraction * n))
    if n - n_validation < 2 or n_validation < 2:
        raise InvalidInputError(
            f"Need at least two training and two validation points, got {n} points "
            f"with validation_fraction={validation_fraction}"
        )

    generator = resolve_rng(rng)
    train, validation = train_test_split(
        data,
        test_size=validation_fraction,
        random_state=int(generator.integers(2 ** 31 - 1))
    )

    coefficients = fit_regularized(train, penalty, lam, alpha, learning_rate, iterations)

    training_score = r2_score(train[:, 1], predict_linear(coefficients, train[:, 0]))
    validation_score = r2_score(validation[:, 1], predict_linear(coefficients, validation[:, 0]))
    selected = active_features(coefficients)

    logger.debug(f"{penalty} lambda={lam}: train R2={training_score:.4f}, validation R2={validation_score:.4f}")

    return {
        'coefficients': coefficients.tolist(),
        'training_score': float(training_score),
        'validation_score': float(validation_score),
        'coefficient_count': len(selected),
        'selected_features': selected
    }
