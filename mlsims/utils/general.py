"""
General utility functions for the mlsims package.

This module provides the small helpers shared by the numeric kernels:
input coercion, validation and label tallying.
"""

import numpy as np
from typing import Any, Dict, Hashable, Iterable, Mapping, Tuple


class InvalidInputError(ValueError):
    """
    Raised when a kernel is called with input it cannot work with
    (k out of range, empty dataset, non-positive stddev, unknown metric...).
    """


def _to_float(value: Any, what: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{what} must be numeric, got {value!r}") from exc


def as_xy(point: Any) -> Tuple[float, float]:
    """
    Extract an (x, y) pair from a point-like value.

    Accepts objects with ``x``/``y`` attributes, mappings with ``x``/``y``
    keys and plain two-element sequences.

    Args:
        point: Point-like value

    Returns:
        Tuple of (x, y) floats
    """
    if hasattr(point, 'x') and hasattr(point, 'y'):
        return _to_float(point.x, 'x'), _to_float(point.y, 'y')

    if isinstance(point, Mapping):
        try:
            x, y = point['x'], point['y']
        except KeyError as exc:
            raise InvalidInputError(f"Point mapping is missing key {exc}") from exc
        return _to_float(x, 'x'), _to_float(y, 'y')

    try:
        x, y = point
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Cannot interpret {point!r} as an (x, y) point") from exc

    return _to_float(x, 'x'), _to_float(y, 'y')


def as_xy_array(points: Iterable[Any]) -> np.ndarray:
    """
    Convert a collection of point-like values to an (n, 2) float array.

    Args:
        points: Points, (x, y) pairs or {"x", "y"} mappings

    Returns:
        Array of shape (n, 2)
    """
    if isinstance(points, np.ndarray):
        try:
            data = np.asarray(points, dtype=float)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError("Point array must be numeric") from exc
        if data.size == 0:
            return np.zeros((0, 2))
        if data.ndim != 2 or data.shape[1] != 2:
            raise InvalidInputError(f"Expected an (n, 2) array, got shape {data.shape}")
        return data

    pairs = [as_xy(point) for point in points]
    if not pairs:
        return np.zeros((0, 2))

    return np.array(pairs, dtype=float)


def point_label(point: Any) -> Any:
    """
    Get the label of a point-like value.

    Args:
        point: Object with a ``label`` attribute or mapping with a ``label`` key

    Returns:
        The label, or None when the point carries none
    """
    if isinstance(point, Mapping):
        return point.get('label')
    return getattr(point, 'label', None)


def point_id(point: Any, default: Any = None) -> Any:
    """
    Get the id of a point-like value, falling back to ``default``.
    """
    if isinstance(point, Mapping):
        pid = point.get('id')
    else:
        pid = getattr(point, 'id', None)
    return default if pid is None else pid


def feature_value(point: Any, feature: str) -> float:
    """
    Look up a named feature on a point-like value.

    Samples expose a ``features`` mapping, Points expose ``x`` and ``y``
    attributes and plain mappings are indexed directly.

    Args:
        point: Sample, Point or mapping
        feature: Feature name

    Returns:
        Feature value as float
    """
    features = point.get('features') if isinstance(point, Mapping) else getattr(point, 'features', None)

    if isinstance(features, Mapping) and feature in features:
        return _to_float(features[feature], f"Feature '{feature}'")

    if isinstance(point, Mapping):
        if feature in point:
            return _to_float(point[feature], f"Feature '{feature}'")
    elif hasattr(point, feature):
        return _to_float(getattr(point, feature), f"Feature '{feature}'")

    raise InvalidInputError(f"Point {point!r} has no feature '{feature}'")


def count_labels(labels: Iterable[Hashable]) -> Dict[Hashable, int]:
    """
    Tally labels, preserving first-seen order.

    Args:
        labels: Labels to count

    Returns:
        Dictionary of label -> count, in first-seen order
    """
    counts: Dict[Hashable, int] = {}
    for label in labels:
        counts[label] = counts.get(label, 0) + 1
    return counts


def majority_label(labels: Iterable[Hashable]) -> Any:
    """
    Most frequent label; ties go to the label seen first.

    Args:
        labels: Labels in a meaningful order (input order, or nearest first)

    Returns:
        The majority label
    """
    counts = count_labels(labels)
    if not counts:
        raise InvalidInputError("Cannot take the majority of an empty label set")

    best_label = None
    best_count = 0
    for label, count in counts.items():
        # Strict comparison keeps the first-seen label on ties
        if count > best_count:
            best_label = label
            best_count = count

    return best_label


def check_positive(name: str, value: float) -> None:
    """
    Raise InvalidInputError unless value > 0.
    """
    if value is None or not np.isfinite(value) or value <= 0:
        raise InvalidInputError(f"{name} must be positive, got {value}")


def check_k(k: int, population: int, what: str = "points") -> None:
    """
    Validate a neighbor or cluster count against a population size.

    Args:
        k: Requested count
        population: Number of available items
        what: Name of the items, for the error message
    """
    if population == 0:
        raise InvalidInputError(f"At least one of the {what} is required")
    if k < 1:
        raise InvalidInputError(f"k must be at least 1, got {k}")
    if k > population:
        raise InvalidInputError(f"k={k} exceeds the number of {what} ({population})")


def resolve_rng(rng: Any = None) -> np.random.Generator:
    """
    Turn a seed, a Generator or None into a numpy Generator.

    Args:
        rng: None, an int seed, or an existing numpy Generator

    Returns:
        numpy Generator
    """
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def bounding_box(data: np.ndarray, padding: float = 0.0) -> Tuple[float, float, float, float]:
    """
    Padded bounding box of an (n, 2) array.

    Returns:
        Tuple of (x_min, x_max, y_min, y_max)
    """
    x_min, y_min = np.min(data, axis=0)
    x_max, y_max = np.max(data, axis=0)
    return (float(x_min - padding), float(x_max + padding),
            float(y_min - padding), float(y_max + padding))
