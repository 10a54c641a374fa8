"""
Distance and nearest-neighbor classification kernel for mlsims.

This module provides the distance metrics, pairwise distance matrix,
k-nearest-neighbor vote and decision-boundary grid used by the K-NN and
Euclidean distance pages.
"""

import logging
import math
import numpy as np
import pandas as pd
from typing import Any, Dict, List, Sequence, Tuple
from scipy.spatial.distance import pdist, squareform

from mlsims.utils.general import (
    InvalidInputError, as_xy, as_xy_array, bounding_box, check_k,
    majority_label, point_id, point_label
)

# Set up logging
logger = logging.getLogger(__name__)

MINKOWSKI_P = 3

# Metric name -> scipy pdist arguments
_PDIST_METRICS = {
    'euclidean': ('euclidean', {}),
    'manhattan': ('cityblock', {}),
    'minkowski': ('minkowski', {'p': MINKOWSKI_P}),
}

METRICS = tuple(_PDIST_METRICS)


def _check_metric(metric: str) -> None:
    if metric not in _PDIST_METRICS:
        raise InvalidInputError(f"Unknown distance metric: {metric} (expected one of {', '.join(METRICS)})")


def distance(a: Any, b: Any, metric: str = 'euclidean') -> float:
    """
    Distance between two points under the given metric.

    Args:
        a: First point
        b: Second point
        metric: 'euclidean', 'manhattan' or 'minkowski' (order 3)

    Returns:
        Non-negative distance
    """
    _check_metric(metric)

    delta = np.abs(np.subtract(as_xy(a), as_xy(b)))

    if metric == 'euclidean':
        return float(np.sqrt(np.sum(delta ** 2)))
    if metric == 'manhattan':
        return float(np.sum(delta))
    return float(np.sum(delta ** MINKOWSKI_P) ** (1.0 / MINKOWSKI_P))


def distance_matrix(points: Sequence[Any], metric: str = 'euclidean') -> pd.DataFrame:
    """
    Pairwise distances between all points.

    Args:
        points: Points to compare
        metric: Distance metric name

    Returns:
        Symmetric DataFrame indexed and columned by point id (or position
        for points without an id), zero on the diagonal
    """
    _check_metric(metric)

    points = list(points)
    ids = [point_id(point, str(i)) for i, point in enumerate(points)]
    data = as_xy_array(points)

    if data.shape[0] < 2:
        return pd.DataFrame(np.zeros((data.shape[0], data.shape[0])), index=ids, columns=ids)

    scipy_metric, kwargs = _PDIST_METRICS[metric]
    matrix = squareform(pdist(data, metric=scipy_metric, **kwargs))

    return pd.DataFrame(matrix, index=ids, columns=ids)


def nearest_neighbors(query: Any,
                     training_set: Sequence[Any],
                     k: int,
                     metric: str = 'euclidean') -> List[Tuple[Any, float]]:
    """
    The k training points closest to the query.

    Equal distances keep the training-set order.

    Args:
        query: Query point
        training_set: Candidate neighbors
        k: Number of neighbors, 1 <= k <= len(training_set)
        metric: Distance metric name

    Returns:
        List of (point, distance) pairs, nearest first
    """
    training_set = list(training_set)
    check_k(k, len(training_set), 'training points')
    _check_metric(metric)

    distances = [(point, distance(query, point, metric)) for point in training_set]
    distances.sort(key=lambda item: item[1])

    return distances[:k]


def knn_classify(query: Any,
                training_set: Sequence[Any],
                k: int,
                metric: str = 'euclidean') -> Any:
    """
    Classify a query point by majority vote among its k nearest neighbors.

    Ties between labels go to the label whose closest voter is nearest to
    the query (the first label seen in distance order).

    Args:
        query: Point to classify
        training_set: Labeled training points
        k: Number of voters, 1 <= k <= len(training_set)
        metric: Distance metric name

    Returns:
        The predicted label
    """
    neighbors = nearest_neighbors(query, training_set, k, metric)
    return majority_label(point_label(point) for point, _ in neighbors)


def decision_boundary(training_set: Sequence[Any],
                     k: int,
                     metric: str = 'euclidean',
                     grid_size: int = 15,
                     padding: float = 0.1) -> List[Tuple[float, float, Any]]:
    """
    Classify every node of a regular grid over the training data.

    The grid spans the bounding box of the training set widened by
    ``padding`` on every side, with grid_size steps per axis
    ((grid_size + 1) ** 2 nodes).

    Args:
        training_set: Labeled training points
        k: Number of voters
        metric: Distance metric name
        grid_size: Steps per axis
        padding: Margin added around the bounding box

    Returns:
        List of (x, y, predicted_label)
    """
    training_set = list(training_set)
    check_k(k, len(training_set), 'training points')
    if grid_size < 1:
        raise InvalidInputError(f"grid_size must be at least 1, got {grid_size}")

    data = as_xy_array(training_set)
    x_min, x_max, y_min, y_max = bounding_box(data, padding)

    x_step = (x_max - x_min) / grid_size
    y_step = (y_max - y_min) / grid_size

    boundary = []
    for i in range(grid_size + 1):
        for j in range(grid_size + 1):
            x = x_min + i * x_step
            y = y_min + j * y_step
            boundary.append((x, y, knn_classify((x, y), training_set, k, metric)))

    logger.debug(f"Evaluated decision boundary on {len(boundary)} grid nodes (k={k}, metric={metric})")

    return boundary


def cosine_similarity(a: Any, b: Any) -> float:
    """
    Cosine of the angle between two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        Similarity in [-1, 1]; 0.0 when either vector has zero length
    """
    va = np.array(as_xy(a))
    vb = np.array(as_xy(b))

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(va, vb) / (norm_a * norm_b))


def vector_angle(a: Any, b: Any) -> float:
    """
    Angle between two vectors in degrees.

    Returns:
        Angle in [0, 180]; 0.0 when either vector has zero length
    """
    if not np.any(as_xy(a)) or not np.any(as_xy(b)):
        return 0.0

    cos_angle = cosine_similarity(a, b)
    return math.degrees(math.acos(max(-1.0, min(1.0, cos_angle))))
