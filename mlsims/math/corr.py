"""
Correlation kernel for mlsims.

This module provides the Pearson correlation coefficient and the
least-squares trend line used by the correlation vs. causation page.
"""

import logging
import numpy as np
from typing import Any, Iterable, Tuple

from mlsims.utils.general import as_xy_array

# Set up logging
logger = logging.getLogger(__name__)


class TrendLine:
    """
    A fitted line y = slope * x + intercept together with the r it came from.
    """

    def __init__(self, slope: float, intercept: float, r: float):
        self.slope = float(slope)
        self.intercept = float(intercept)
        self.r = float(r)

    def predict(self, x: Any) -> Any:
        """
        Evaluate the line at x (scalar or array).
        """
        return self.slope * np.asarray(x, dtype=float) + self.intercept

    def to_dict(self) -> dict:
        return {'slope': self.slope, 'intercept': self.intercept, 'r': self.r}

    def __repr__(self) -> str:
        return f"TrendLine(slope={self.slope:.4f}, intercept={self.intercept:.4f}, r={self.r:.4f})"


def pearson_correlation(points: Iterable[Any]) -> float:
    """
    Compute the Pearson correlation coefficient of a set of (x, y) points.

    Uses r = (nSxy - SxSy) / sqrt((nSxx - Sx^2)(nSyy - Sy^2)).

    Args:
        points: Points, (x, y) pairs or {"x", "y"} mappings

    Returns:
        Correlation coefficient in [-1, 1]; 0.0 for fewer than two points
        or when x or y has no variance
    """
    data = as_xy_array(points)
    n = data.shape[0]

    if n < 2:
        return 0.0

    x = data[:, 0]
    y = data[:, 1]

    # Constant columns give a zero denominator; rounding can hide that
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        return 0.0

    sum_x = np.sum(x)
    sum_y = np.sum(y)
    sum_xy = np.sum(x * y)
    sum_x2 = np.sum(x * x)
    sum_y2 = np.sum(y * y)

    numerator = n * sum_xy - sum_x * sum_y
    denominator_sq = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)

    if denominator_sq <= 0:
        return 0.0

    r = numerator / np.sqrt(denominator_sq)

    # Clip rounding noise just outside the valid range
    return float(np.clip(r, -1.0, 1.0))


def trend_line(points: Iterable[Any]) -> TrendLine:
    """
    Fit the trend line implied by the correlation coefficient.

    slope = r * (sd_y / sd_x), intercept = mean_y - slope * mean_x, with
    population standard deviations. A zero sd_x is treated as 1 so the
    slope stays finite.

    Args:
        points: Points, (x, y) pairs or {"x", "y"} mappings

    Returns:
        TrendLine
    """
    data = as_xy_array(points)

    if data.shape[0] == 0:
        return TrendLine(0.0, 0.0, 0.0)

    r = pearson_correlation(data)

    x = data[:, 0]
    y = data[:, 1]
    mean_x = np.mean(x)
    mean_y = np.mean(y)
    std_x = np.std(x)
    std_y = np.std(y)

    if std_x == 0:
        std_x = 1.0

    slope = r * (std_y / std_x)
    intercept = mean_y - slope * mean_x

    logger.debug(f"Trend line for {data.shape[0]} points: r={r:.4f}, slope={slope:.4f}")

    return TrendLine(slope, intercept, r)


def trend_line_points(line: TrendLine, x_min: float, x_max: float) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """
    End points of a trend line across an x range, for drawing.

    Args:
        line: Fitted trend line
        x_min: Left edge
        x_max: Right edge

    Returns:
        ((x_min, y_at_min), (x_max, y_at_max))
    """
    return ((float(x_min), float(line.predict(x_min))),
            (float(x_max), float(line.predict(x_max))))
