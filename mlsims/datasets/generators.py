"""
Random dataset generators.

All generators draw from an injectable numpy Generator (or int seed), so a
given seed always reproduces the same dataset.
"""

import numpy as np
from typing import Any, List, Optional

from mlsims.math.points import Point
from mlsims.utils.general import InvalidInputError, resolve_rng


def _check_count(name: str, n: int) -> None:
    if n < 1:
        raise InvalidInputError(f"{name} must be at least 1, got {n}")


def make_moons(n: int = 50, rng: Any = None) -> List[Point]:
    """
    Two interleaved half circles, n points per class.

    Args:
        n: Points per moon
        rng: numpy Generator or int seed

    Returns:
        2n points labeled 0 (upper moon) and 1 (lower moon)
    """
    _check_count('n', n)
    generator = resolve_rng(rng)
    points = []

    for label, flip in ((0, 1.0), (1, -1.0)):
        for i in range(n):
            angle = (i / n) * np.pi
            radius = 0.3 + generator.random() * 0.2
            x = np.cos(angle) * radius + (generator.random() - 0.5) * 0.1
            y = np.sin(angle) * radius + (generator.random() - 0.5) * 0.1
            points.append(Point(flip * x + 0.5, flip * y + 0.5, label=label, id=f'moon-{label * n + i}'))

    return points


def make_circles(n: int = 40, rng: Any = None) -> List[Point]:
    """
    A filled inner disc (label 0) inside an outer ring (label 1).

    Args:
        n: Points per class
        rng: numpy Generator or int seed

    Returns:
        2n points centered on (0.5, 0.5)
    """
    _check_count('n', n)
    generator = resolve_rng(rng)
    points = []

    for label, name, inner_radius in ((0, 'inner', 0.0), (1, 'outer', 0.25)):
        for i in range(n):
            angle = generator.random() * 2 * np.pi
            radius = inner_radius + generator.random() * 0.15
            points.append(Point(
                np.cos(angle) * radius + 0.5,
                np.sin(angle) * radius + 0.5,
                label=label,
                id=f'circle-{name}-{i}'
            ))

    return points


def make_linear(n: int = 50, rng: Any = None) -> List[Point]:
    """
    Uniform points in the unit square split by the line x + y = 1.
    """
    _check_count('n', n)
    generator = resolve_rng(rng)
    points = []

    for i in range(n):
        x, y = generator.random(2)
        points.append(Point(x, y, label=1 if x + y > 1 else 0, id=f'linear-{i}'))

    return points


def make_blobs(rng: Any = None,
               n_clusters: Optional[int] = None,
               points_per_cluster: Optional[int] = None) -> List[Point]:
    """
    Randomly placed clusters, some circular and some rotated ellipses.

    Centers fall in [20, 80] on both axes and every point is clipped to
    [5, 95]. Each point is labeled with the cluster it was drawn from.

    Args:
        rng: numpy Generator or int seed
        n_clusters: Number of clusters, random in 2..4 when omitted
        points_per_cluster: Points per cluster, random in 8..22 when omitted

    Returns:
        List of points
    """
    generator = resolve_rng(rng)

    if n_clusters is None:
        n_clusters = int(generator.integers(2, 5))
    if points_per_cluster is None:
        points_per_cluster = int(generator.integers(8, 23))
    _check_count('n_clusters', n_clusters)
    _check_count('points_per_cluster', points_per_cluster)

    points = []
    for cluster in range(n_clusters):
        center_x, center_y = generator.random(2) * 60 + 20
        spread_x, spread_y = generator.random(2) * 15 + 5
        elliptical = generator.random() > 0.5
        rotation = generator.random() * 2 * np.pi

        for i in range(points_per_cluster):
            angle = generator.random() * 2 * np.pi

            if elliptical:
                radius = generator.random() * max(spread_x, spread_y)
                local_x = radius * np.cos(angle)
                local_y = radius * np.sin(angle) * (spread_y / spread_x)
                x = center_x + local_x * np.cos(rotation) - local_y * np.sin(rotation)
                y = center_y + local_x * np.sin(rotation) + local_y * np.cos(rotation)
            else:
                radius = generator.random() * min(spread_x, spread_y)
                x = center_x + radius * np.cos(angle)
                y = center_y + radius * np.sin(angle)

            x += (generator.random() - 0.5) * 3
            y += (generator.random() - 0.5) * 3

            points.append(Point(
                float(np.clip(x, 5, 95)),
                float(np.clip(y, 5, 95)),
                label=cluster,
                id=f'random_{cluster}_{i}'
            ))

    return points


def make_regression_data(n: int = 50,
                         rng: Any = None,
                         slope: float = 2.0,
                         intercept: float = 3.0,
                         noise: float = 2.0,
                         x_max: float = 10.0) -> List[Point]:
    """
    Noisy samples of the line y = slope * x + intercept.

    x is uniform on [0, x_max) and the noise is uniform on
    [-noise / 2, noise / 2).

    Args:
        n: Number of points
        rng: numpy Generator or int seed
        slope: True slope
        intercept: True intercept
        noise: Width of the uniform noise band
        x_max: Upper end of the x range

    Returns:
        List of points
    """
    _check_count('n', n)
    generator = resolve_rng(rng)

    xs = generator.random(n) * x_max
    ys = slope * xs + intercept + (generator.random(n) - 0.5) * noise

    return [Point(x, y, id=f'point_{i}') for i, (x, y) in enumerate(zip(xs, ys))]
