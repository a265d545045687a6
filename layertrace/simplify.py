"""Path simplification using the Douglas-Peucker algorithm."""
import numpy as np

from layertrace.types import PointArray


def perpendicular_distance(points: PointArray, start: np.ndarray, end: np.ndarray) -> np.ndarray:
    """
    Distance of each point from the infinite line through start and end.

    Args:
        points: (N, 2) array of (x, y) points
        start: Line start (x, y)
        end: Line end (x, y)

    Returns:
        (N,) array of distances; all zeros when start and end coincide
    """
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length = np.hypot(dx, dy)
    if length == 0:
        return np.zeros(len(points))

    cross = dy * points[:, 0] - dx * points[:, 1] + end[0] * start[1] - end[1] * start[0]
    return np.abs(cross) / length


def simplify_path(points: PointArray, tolerance: float = 1.0) -> PointArray:
    """
    Reduce a point sequence with Douglas-Peucker simplification.

    Finds the point farthest from the chord between the run's endpoints.
    If it lies further than the tolerance, the run is split there and both
    halves are processed; otherwise the run collapses to its endpoints.
    Runs are kept on an explicit stack so very long contours cannot exhaust
    the call stack.

    Args:
        points: (N, 2) array of (x, y) points
        tolerance: Maximum allowed deviation in pixels

    Returns:
        Simplified points, always including the first and last point.
        Sequences under 3 points are returned unchanged.
    """
    points = np.asarray(points, dtype=np.float64)
    n_points = len(points)
    if n_points < 3:
        return points

    keep = np.zeros(n_points, dtype=bool)
    keep[0] = keep[-1] = True

    stack = [(0, n_points - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue

        distances = perpendicular_distance(points[first + 1:last], points[first], points[last])
        offset = int(np.argmax(distances))
        if distances[offset] > tolerance:
            split = first + 1 + offset
            keep[split] = True
            stack.append((split, last))
            stack.append((first, split))

    return points[keep]
