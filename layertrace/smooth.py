"""Coordinate smoothing to melt pixel stair-steps into slopes."""
import numpy as np

from layertrace.types import PointArray


def smooth_points(points: PointArray, iterations: int = 1) -> PointArray:
    """
    Smooth a closed point loop with a (1, 2, 1) / 4 weighted average.

    Each iteration replaces every point with (prev + 2 * current + next) / 4,
    wrapping around at both ends. Repeating the pass compounds the low-pass
    effect.

    Args:
        points: (N, 2) array of (x, y) points forming a closed loop
        iterations: Number of smoothing passes

    Returns:
        Smoothed (N, 2) float array; loops under 3 points are returned as-is
    """
    points = np.asarray(points, dtype=np.float64)
    if len(points) < 3:
        return points

    smoothed = points
    for _ in range(iterations):
        smoothed = (np.roll(smoothed, 1, axis=0) + 2.0 * smoothed + np.roll(smoothed, -1, axis=0)) / 4.0
    return smoothed
