"""Contour tracing using Moore-neighbor boundary following."""
import logging
from typing import List, Optional, Tuple

import numpy as np
from scipy import ndimage

from layertrace.types import Contour, ContourError, Mask, PointArray

logger = logging.getLogger(__name__)

# Moore neighbourhood, clockwise from north:
#   7 0 1
#   6 P 2
#   5 4 3
DIRECTIONS = [
    (0, -1),   # 0: N
    (1, -1),   # 1: NE
    (1, 0),    # 2: E
    (1, 1),    # 3: SE
    (0, 1),    # 4: S
    (-1, 1),   # 5: SW
    (-1, 0),   # 6: W
    (-1, -1),  # 7: NW
]
WEST = 6

MAX_TRACE_STEPS = 10000

EIGHT_CONNECTED = np.ones((3, 3), dtype=bool)


def _walk_boundary(
    grid: bytes,
    stride: int,
    start: int,
    max_steps: int
) -> Tuple[List[int], bool]:
    """
    Follow a region boundary over a zero-padded, flattened mask.

    The walk starts as if it arrived from the west. At every step the 8
    neighbours are scanned clockwise from the backtrack direction; the first
    foreground neighbour becomes current and the backtrack direction becomes
    the one just counter-clockwise of it.

    The walk is fully determined by (pixel, backtrack), so reaching a state
    a second time means it is looping around a sub-boundary that never
    leads back to start. It stops there with each point of that loop kept
    once.

    Returns:
        Tuple of (flat indices visited, whether the walk closed on start)
    """
    offsets = [dy * stride + dx for dx, dy in DIRECTIONS]
    path = [start]
    current = start
    backtrack = WEST
    seen = {current * 8 + backtrack}
    steps = 0

    while True:
        steps += 1
        if steps > max_steps:
            logger.warning(
                f"Boundary walk exceeded {max_steps} steps, keeping partial contour "
                f"of {len(path)} points"
            )
            return path, False

        for i in range(8):
            direction = (backtrack + i) % 8
            candidate = current + offsets[direction]
            if grid[candidate]:
                break
        else:
            # Isolated pixel
            return path, False

        current = candidate
        backtrack = (direction + 7) % 8

        if current == start:
            path.append(current)
            return path, True

        state = current * 8 + backtrack
        if state in seen:
            logger.warning(
                f"Boundary walk entered a cycle after {len(path)} points, "
                "keeping partial contour"
            )
            return path, False
        seen.add(state)
        path.append(current)


def region_starts(mask: Mask) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Label 8-connected components and find where a row-major scan meets each.

    Labelling visits every pixel of a component at once, so each component
    is reported exactly once no matter how thin or self-touching it is.

    Returns:
        Tuple of (label image, flat index of each component's first pixel in
        row-major order, pixel count of each component), components sorted by
        first pixel
    """
    labels, n_components = ndimage.label(mask, structure=EIGHT_CONNECTED)
    if n_components == 0:
        empty = np.zeros(0, dtype=np.intp)
        return labels, empty, empty

    flat = labels.ravel()
    uniq, first_index = np.unique(flat, return_index=True)
    # Background (label 0) is absent when the mask is all foreground
    first_index = first_index[uniq > 0]
    sizes = np.bincount(flat, minlength=n_components + 1)[1:]

    order = np.argsort(first_index, kind="stable")
    return labels, first_index[order], sizes[order]


def trace_contours(mask: Mask, max_steps: Optional[int] = None) -> List[Contour]:
    """
    Find the outer boundary of every 8-connected region in a binary mask.

    Args:
        mask: Binary mask (H, W) with 1 for foreground pixels
        max_steps: Hard cap on boundary-walk steps per region. Defaults to
                   the larger of MAX_TRACE_STEPS and four times the region's
                   pixel count.

    Returns:
        List of contours in row-major order of their first pixel. Closed
        contours repeat their start point at the end; isolated pixels give a
        single-point contour. is_hole is always False.

    Raises:
        ContourError: If mask is not two-dimensional
    """
    mask = np.asarray(mask)
    if mask.ndim != 2:
        raise ContourError(f"Expected 2D mask, got {mask.ndim}D")
    height, width = mask.shape
    _, starts, sizes = region_starts(mask)

    padded = np.pad((mask != 0).astype(np.uint8), 1)
    grid = padded.tobytes()
    stride = width + 2

    contours = []
    for first, size in zip(starts, sizes):
        y, x = divmod(int(first), width)
        start = (y + 1) * stride + (x + 1)
        cap = max_steps if max_steps is not None else max(MAX_TRACE_STEPS, 4 * int(size))

        path, closed = _walk_boundary(grid, stride, start, cap)
        contours.append(Contour(points=_indices_to_points(path, stride), is_hole=False))

        if not closed and len(path) > 1:
            logger.debug(f"Open contour at ({x}, {y}) with {len(path)} points")

    logger.debug(f"Traced {len(contours)} contours in {width}x{height} mask")
    return contours


def _indices_to_points(path: List[int], stride: int) -> PointArray:
    indices = np.asarray(path, dtype=np.int64)
    ys, xs = np.divmod(indices, stride)
    return np.column_stack([xs - 1, ys - 1]).astype(np.float64)


def polygon_area(points: PointArray) -> float:
    """
    Area of a polygon using the shoelace formula.

    Args:
        points: (N, 2) array of (x, y) vertices; the polygon wraps around

    Returns:
        Absolute enclosed area
    """
    points = np.asarray(points, dtype=np.float64)
    if len(points) < 3:
        return 0.0
    x = points[:, 0]
    y = points[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y)) / 2.0)
