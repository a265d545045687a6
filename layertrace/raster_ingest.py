"""Raster image ingestion into RGBA pixel buffers."""
import math
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image
from PIL import ImageOps

from layertrace.types import PixelBuffer, VectorizationError


def resample_image(img: Image.Image, scale: float) -> Image.Image:
    """
    Resize an RGBA image by a scale factor.

    Upscaling uses bicubic interpolation so edges come out smooth rather than
    blocky. At 1x the image is untouched to keep raw pixel fidelity, and
    downscaling uses nearest neighbour (no smoothing).

    Args:
        img: RGBA image
        scale: Scale factor (> 0)

    Returns:
        Resized image of floor(w * scale) x floor(h * scale)
    """
    width = math.floor(img.width * scale)
    height = math.floor(img.height * scale)

    if width <= 0 or height <= 0:
        raise VectorizationError(
            f"Scale {scale} reduces {img.width}x{img.height} image to nothing"
        )

    if (width, height) == img.size:
        return img

    resample = Image.Resampling.BICUBIC if scale > 1 else Image.Resampling.NEAREST
    return img.resize((width, height), resample=resample)


def ingest(path: Union[str, Path], scale: float = 1.0) -> PixelBuffer:
    """
    Ingest a raster image file.

    Loads the image, applies EXIF orientation, converts it to RGBA and
    optionally upscales it.

    Args:
        path: Path to image file
        scale: Upscale factor applied after loading

    Returns:
        PixelBuffer with RGBA samples

    Raises:
        FileNotFoundError: If file doesn't exist
        VectorizationError: If file cannot be loaded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise VectorizationError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)

            if img.mode != 'RGBA':
                img = img.convert('RGBA')

            img = resample_image(img, scale)
            pixels = np.array(img, dtype=np.uint8)

    except (IOError, OSError) as e:
        raise VectorizationError(f"Failed to load image {path}: {e}") from e

    height, width = pixels.shape[:2]
    return PixelBuffer(width=width, height=height, pixels=pixels)


def ingest_from_array(image: np.ndarray) -> PixelBuffer:
    """
    Create a PixelBuffer from a numpy array.

    Args:
        image: uint8 image array (H, W), (H, W, 3) or (H, W, 4)

    Returns:
        PixelBuffer; missing alpha is treated as fully opaque
    """
    if image.ndim == 2:
        # Grayscale - convert to RGB
        image = np.stack([image] * 3, axis=-1)

    if image.ndim != 3:
        raise VectorizationError(f"Expected 3D array, got {image.ndim}D")

    if image.shape[2] == 3:
        alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
        image = np.concatenate([image.astype(np.uint8), alpha], axis=2)
    elif image.shape[2] != 4:
        raise VectorizationError(f"Expected 3 or 4 channels, got {image.shape[2]}")

    height, width = image.shape[:2]
    return PixelBuffer(width=width, height=height, pixels=image.astype(np.uint8))
