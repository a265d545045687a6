"""Binary mask construction for color layers."""
import numpy as np

from layertrace.types import Mask, PixelBuffer, PointArray


def layer_to_mask(points: PointArray, width: int, height: int) -> Mask:
    """
    Rasterize a layer's pixel coordinates into a binary mask.

    Args:
        points: (N, 2) array of (x, y) pixel coordinates
        width: Mask width
        height: Mask height

    Returns:
        (height, width) uint8 mask with 1 at every listed pixel
    """
    mask = np.zeros((height, width), dtype=np.uint8)
    if len(points) > 0:
        points = np.asarray(points, dtype=np.intp)
        mask[points[:, 1], points[:, 0]] = 1
    return mask


def coverage_mask(buffer: PixelBuffer, alpha_threshold: int = 20) -> Mask:
    """Mask of every pixel whose alpha exceeds the visibility threshold."""
    return (buffer.alpha > alpha_threshold).astype(np.uint8)
