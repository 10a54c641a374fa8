"""
Normal-distribution kernel for mlsims.

This module provides Box-Muller sampling, the Gaussian density and the
nearest-rank percentile summary used by the normal distribution page.
"""

import logging
import math
import numpy as np
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple, Union

from mlsims.utils.general import InvalidInputError, check_positive, resolve_rng

# Set up logging
logger = logging.getLogger(__name__)

DEFAULT_RANKS = (0.05, 0.10, 0.25, 0.50, 0.75, 0.90, 0.95)


def sample_normal(mean: float,
                 stddev: float,
                 n: int,
                 rng: Optional[Union[int, np.random.Generator]] = None) -> np.ndarray:
    """
    Draw n samples from Normal(mean, stddev) with the Box-Muller transform.

    Each pair of uniforms (u1, u2) yields two standard normals
    z0 = sqrt(-2 ln u1) cos(2 pi u2) and z1 = sqrt(-2 ln u1) sin(2 pi u2),
    emitted in that order. u1 is drawn from (0, 1] so ln(u1) is defined.

    Args:
        mean: Distribution mean
        stddev: Distribution standard deviation, must be positive
        n: Number of samples, must be positive
        rng: numpy Generator or int seed for reproducible draws

    Returns:
        Array of n samples
    """
    check_positive('stddev', stddev)
    if n is None or int(n) != n or n <= 0:
        raise InvalidInputError(f"n must be a positive integer, got {n}")

    n = int(n)
    generator = resolve_rng(rng)
    n_pairs = (n + 1) // 2

    # Generator.random is [0, 1); flip it to (0, 1]
    u1 = 1.0 - generator.random(n_pairs)
    u2 = generator.random(n_pairs)

    radius = np.sqrt(-2.0 * np.log(u1))
    z0 = radius * np.cos(2.0 * np.pi * u2)
    z1 = radius * np.sin(2.0 * np.pi * u2)

    z = np.empty(2 * n_pairs)
    z[0::2] = z0
    z[1::2] = z1

    samples = mean + stddev * z[:n]

    logger.debug(f"Drew {n} normal samples (mean={mean}, stddev={stddev})")

    return samples


def normal_density(x: Any, mean: float, stddev: float) -> Any:
    """
    Gaussian probability density at x.

    Args:
        x: Scalar or array of evaluation points
        mean: Distribution mean
        stddev: Distribution standard deviation, must be positive

    Returns:
        Density value(s), float for scalar input
    """
    check_positive('stddev', stddev)

    coefficient = 1.0 / (stddev * math.sqrt(2.0 * math.pi))
    values = np.asarray(x, dtype=float)
    density = coefficient * np.exp(-((values - mean) ** 2) / (2.0 * stddev ** 2))

    if density.ndim == 0:
        return float(density)
    return density


def density_curve(mean: float,
                 stddev: float,
                 x_min: Optional[float] = None,
                 x_max: Optional[float] = None,
                 n_points: int = 200) -> Tuple[np.ndarray, np.ndarray]:
    """
    Evenly spaced (x, density) pairs for drawing the theoretical curve.

    Args:
        mean: Distribution mean
        stddev: Distribution standard deviation
        x_min: Left edge, defaults to mean - 4 stddev
        x_max: Right edge, defaults to mean + 4 stddev
        n_points: Number of evaluation points

    Returns:
        Tuple of (xs, densities)
    """
    check_positive('stddev', stddev)
    if n_points < 2:
        raise InvalidInputError(f"n_points must be at least 2, got {n_points}")

    if x_min is None:
        x_min = mean - 4 * stddev
    if x_max is None:
        x_max = mean + 4 * stddev
    if x_max <= x_min:
        raise InvalidInputError(f"x_max ({x_max}) must be greater than x_min ({x_min})")

    xs = np.linspace(x_min, x_max, n_points)
    return xs, normal_density(xs, mean, stddev)


def percentiles(samples: Iterable[float],
               ranks: Sequence[float] = DEFAULT_RANKS) -> Dict[float, float]:
    """
    Nearest-rank percentiles without interpolation.

    The samples are sorted ascending and rank p is read at index floor(p * n).
    A rank of exactly 1 maps to the largest sample.

    Args:
        samples: Sample values
        ranks: Ranks in [0, 1]

    Returns:
        Dictionary of rank -> sample value
    """
    ordered = np.sort(np.asarray(list(samples), dtype=float))
    n = ordered.shape[0]

    if n == 0:
        raise InvalidInputError("Cannot take percentiles of an empty sample")

    result = {}
    for rank in ranks:
        if not 0.0 <= rank <= 1.0:
            raise InvalidInputError(f"Percentile rank must be within [0, 1], got {rank}")
        index = min(int(math.floor(rank * n)), n - 1)
        result[rank] = float(ordered[index])

    return result


def histogram(samples: Iterable[float],
             bins: int = 30,
             value_range: Optional[Tuple[float, float]] = None) -> Dict[str, list]:
    """
    Bin samples for the histogram overlay.

    Args:
        samples: Sample values
        bins: Number of equal-width bins
        value_range: Optional (low, high) range of the bins

    Returns:
        Dictionary with 'counts' and 'edges' lists
    """
    values = np.asarray(list(samples), dtype=float)
    if values.size == 0:
        raise InvalidInputError("Cannot build a histogram of an empty sample")
    if bins < 1:
        raise InvalidInputError(f"bins must be at least 1, got {bins}")
    if value_range is not None and value_range[1] < value_range[0]:
        raise InvalidInputError(f"value_range must be (low, high), got {value_range}")

    counts, edges = np.histogram(values, bins=bins, range=value_range)
    return {'counts': counts.tolist(), 'edges': edges.tolist()}


def summarize(samples: Iterable[float],
             ranks: Sequence[float] = DEFAULT_RANKS) -> Dict[str, Any]:
    """
    Empirical summary of a sample.

    The standard deviation is the population one (divides by n), as shown
    next to the theoretical value on the page.

    Args:
        samples: Sample values
        ranks: Percentile ranks to include

    Returns:
        Dictionary with count, mean, stddev, min, max and percentiles
    """
    values = np.asarray(list(samples), dtype=float)
    if values.size == 0:
        raise InvalidInputError("Cannot summarize an empty sample")

    return {
        'count': int(values.size),
        'mean': float(np.mean(values)),
        'stddev': float(np.std(values)),
        'min': float(np.min(values)),
        'max': float(np.max(values)),
        'percentiles': percentiles(values, ranks)
    }
