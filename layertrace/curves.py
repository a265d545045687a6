"""Cubic Bezier curve fitting with corner detection and clamped handles."""
import math
from typing import List, Optional, Tuple

import numpy as np

from layertrace.types import BezierCurve, Point, PointArray

Vec = Tuple[float, float]

DUPLICATE_THRESHOLD = 1.0  # Merge points closer than this (px)
MIN_SEGMENT_LENGTH = 0.1  # Skip segments shorter than this (px)
CORNER_DOT_THRESHOLD = 0.2  # Turns sharper than ~78 degrees are corners
CORNER_HANDLE_FACTOR = 0.1
SMOOTH_HANDLE_FACTOR = 0.33
MAX_HANDLE_FACTOR = 0.4  # Hard clamp against loops and spikes


def distance(a: Vec, b: Vec) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def safe_normalize(v: Vec) -> Vec:
    """Unit vector in the direction of v, or the zero vector if v is ~zero length."""
    length = math.hypot(v[0], v[1])
    if length < 1e-9:
        return (0.0, 0.0)
    return (v[0] / length, v[1] / length)


def filter_duplicates(points: List[Vec], threshold: float = DUPLICATE_THRESHOLD) -> List[Vec]:
    """
    Drop points lying within threshold of the previously kept point.

    If the input run is closed (first and last point equal) the filtered run
    is closed again on exactly the same start point.
    """
    if len(points) < 2:
        return list(points)

    result = [points[0]]
    for point in points[1:]:
        if distance(result[-1], point) > threshold:
            result.append(point)

    is_closed = len(points) > 2 and points[0] == points[-1]
    if is_closed and len(result) > 1 and result[-1] != result[0]:
        if distance(result[-1], result[0]) > threshold:
            result.append(result[0])
        else:
            result[-1] = result[0]
    return result


def is_corner(prev: Optional[Vec], curr: Vec, nxt: Optional[Vec]) -> bool:
    """
    Classify a joint as a corner.

    A joint is a corner when a neighbour is missing (open path endpoint),
    when either adjacent edge is degenerately short, or when the incoming
    and outgoing directions differ by more than ~78 degrees.
    """
    if prev is None or nxt is None:
        return True
    if distance(prev, curr) < MIN_SEGMENT_LENGTH or distance(curr, nxt) < MIN_SEGMENT_LENGTH:
        return True

    v1 = safe_normalize((curr[0] - prev[0], curr[1] - prev[1]))
    v2 = safe_normalize((nxt[0] - curr[0], nxt[1] - curr[1]))
    return v1[0] * v2[0] + v1[1] * v2[1] < CORNER_DOT_THRESHOLD


def handle_length(segment_length: float, corner: bool) -> float:
    factor = CORNER_HANDLE_FACTOR if corner else SMOOTH_HANDLE_FACTOR
    return min(segment_length * factor, segment_length * MAX_HANDLE_FACTOR)


def fit_curves(points: PointArray) -> List[BezierCurve]:
    """
    Convert a simplified point sequence into cubic Bezier segments.

    One curve is produced per consecutive point pair. Each endpoint is
    classified as a corner or a smooth joint: corners get a short handle
    along the chord, smooth joints a longer Catmull-Rom style tangent from
    their two neighbours. Handles never exceed 40% of the chord length.

    Args:
        points: (N, 2) array of (x, y) points; a closed run repeats its
                first point at the end

    Returns:
        List of BezierCurve; empty when fewer than 2 usable points remain
    """
    clean = filter_duplicates([(float(x), float(y)) for x, y in np.asarray(points)])

    curves = []
    n_points = len(clean)
    if n_points < 2:
        return curves

    is_closed = n_points > 2 and clean[0] == clean[-1]

    for i in range(n_points - 1):
        p0 = clean[i]
        p3 = clean[i + 1]

        chord = distance(p0, p3)
        if chord < MIN_SEGMENT_LENGTH:
            continue

        if i > 0:
            prev = clean[i - 1]
        else:
            prev = clean[-2] if is_closed else None

        if i + 2 < n_points:
            nxt = clean[i + 2]
        else:
            nxt = clean[1] if is_closed else None

        p0_corner = is_corner(prev, p0, p3)
        p3_corner = is_corner(p0, p3, nxt)

        if p0_corner:
            tangent1 = safe_normalize((p3[0] - p0[0], p3[1] - p0[1]))
        else:
            tangent1 = safe_normalize((p3[0] - prev[0], p3[1] - prev[1]))

        # Points backwards, from p3 towards p0
        if p3_corner:
            tangent2 = safe_normalize((p0[0] - p3[0], p0[1] - p3[1]))
        else:
            tangent2 = safe_normalize((p0[0] - nxt[0], p0[1] - nxt[1]))

        len1 = handle_length(chord, p0_corner)
        len2 = handle_length(chord, p3_corner)

        curves.append(BezierCurve(
            p0=Point(*p0),
            p1=Point(p0[0] + tangent1[0] * len1, p0[1] + tangent1[1] * len1),
            p2=Point(p3[0] + tangent2[0] * len2, p3[1] + tangent2[1] * len2),
            p3=Point(*p3),
        ))

    return curves
