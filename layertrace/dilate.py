"""Hybrid morphological dilation for closing seams between color layers.

Dilation runs in two phases:
1. Unconditional passes grow the mask everywhere, solidifying internal
   micro-gaps left by quantization noise.
2. Bounded passes only grow into pixels of the coverage mask, closing gaps
   between neighbouring color regions without bridging transparent space.
"""
import logging
from typing import Optional

import numpy as np
from scipy import ndimage

from layertrace.types import Mask

logger = logging.getLogger(__name__)

# 3x3 neighbourhood: self plus the 8 surrounding pixels
NEIGHBOURHOOD = np.ones((3, 3), dtype=bool)


def _dilate(mask: Mask, passes: int, coverage: Optional[Mask]) -> Mask:
    # scipy treats iterations < 1 as "repeat until stable", so zero passes
    # must short-circuit here
    if passes <= 0:
        return mask.copy()

    dilated = ndimage.binary_dilation(
        mask.astype(bool),
        structure=NEIGHBOURHOOD,
        iterations=passes,
        mask=None if coverage is None else coverage.astype(bool),
    )
    return dilated.astype(np.uint8)


def dilate_once(mask: Mask, coverage: Optional[Mask] = None) -> Mask:
    """
    Grow a mask by one pixel in all 8 directions.

    Args:
        mask: Binary mask (H, W)
        coverage: Optional coverage mask; when given, only pixels where
                  coverage is 1 may be switched on

    Returns:
        New dilated mask; the input is not modified
    """
    return _dilate(mask, 1, coverage)


def dilate_hybrid(
    mask: Mask,
    coverage: Mask,
    unconditional_passes: int = 1,
    bounded_passes: int = 1
) -> Mask:
    """
    Run unconditional passes, then coverage-bounded passes.

    The result is always a superset of the input mask, and the bounded
    passes never switch on a pixel outside the coverage mask.

    Args:
        mask: Binary mask for one color layer
        coverage: Mask of all visible pixels in the image
        unconditional_passes: Passes that ignore coverage
        bounded_passes: Passes restricted to coverage

    Returns:
        New dilated mask
    """
    result = _dilate(mask, unconditional_passes, None)
    result = _dilate(result, bounded_passes, coverage)

    before = int(mask.sum())
    after = int(result.sum())
    logger.debug(f"Dilation: {before} -> {after} pixels (+{after - before})")
    return result


def dilate_mask(mask: Mask, iterations: int = 1, coverage: Optional[Mask] = None) -> Mask:
    """Coverage-bounded dilation only (no unconditional passes)."""
    if coverage is None:
        return _dilate(mask, iterations, None)
    return dilate_hybrid(mask, coverage, unconditional_passes=0, bounded_passes=iterations)
