"""Pytest configuration and fixtures."""

import numpy as np
import pytest

from layertrace.types import PixelBuffer


def _buffer(pixels: np.ndarray) -> PixelBuffer:
    height, width = pixels.shape[:2]
    return PixelBuffer(width=width, height=height, pixels=pixels)


@pytest.fixture
def transparent_buffer():
    """10x10 fully transparent image."""
    return _buffer(np.zeros((10, 10, 4), dtype=np.uint8))


@pytest.fixture
def red_square_buffer():
    """20x20 transparent image with an opaque red 10x10 square at (5, 5)."""
    pixels = np.zeros((20, 20, 4), dtype=np.uint8)
    pixels[5:15, 5:15] = [255, 0, 0, 255]
    return _buffer(pixels)


@pytest.fixture
def two_color_buffer():
    """Opaque 30x30 blue image with a red 10x10 square in the middle."""
    pixels = np.zeros((30, 30, 4), dtype=np.uint8)
    pixels[:, :] = [0, 0, 255, 255]
    pixels[10:20, 10:20] = [255, 0, 0, 255]
    return _buffer(pixels)


@pytest.fixture
def opaque_buffer():
    """Opaque 12x10 image of a single green."""
    pixels = np.zeros((10, 12, 4), dtype=np.uint8)
    pixels[:, :] = [0, 128, 0, 255]
    return _buffer(pixels)


@pytest.fixture
def speck_buffer():
    """Opaque 30x30 blue image with a red 4x4 speck that dilation closes over."""
    pixels = np.zeros((30, 30, 4), dtype=np.uint8)
    pixels[:, :] = [0, 0, 255, 255]
    pixels[13:17, 13:17] = [255, 0, 0, 255]
    return _buffer(pixels)


@pytest.fixture
def noisy_buffer():
    """Opaque 16x16 image of random colors."""
    rng = np.random.RandomState(3)
    pixels = rng.randint(0, 256, size=(16, 16, 4)).astype(np.uint8)
    pixels[..., 3] = 255
    return _buffer(pixels)
