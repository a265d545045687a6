"""Core types for the layertrace vectorization pipeline."""
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import numpy as np

# Type aliases
Color = Tuple[int, int, int]
Mask = np.ndarray
PointArray = np.ndarray
RandomState = Union[None, int, np.random.RandomState]


class VectorizationError(Exception):
    """Base exception for vectorization errors."""
    pass


class PixelBufferError(VectorizationError):
    """Exception raised for malformed pixel buffers."""
    pass


class QuantizationError(VectorizationError):
    """Exception raised during color quantization."""
    pass


class ContourError(VectorizationError):
    """Exception raised during contour tracing."""
    pass


class SVGError(VectorizationError):
    """Exception raised during SVG generation."""
    pass


@dataclass(frozen=True)
class PixelBuffer:
    """Decoded RGBA image.

    Attributes:
        width: Image width in pixels
        height: Image height in pixels
        pixels: (height, width, 4) uint8 array of interleaved RGBA samples
    """
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise PixelBufferError(
                f"Pixel buffer must have positive dimensions, got {self.width}x{self.height}"
            )
        try:
            pixels = np.array(self.pixels, dtype=np.uint8, order="C")
        except (TypeError, ValueError) as e:
            raise PixelBufferError(f"Pixel data is not a uint8 array: {e}") from e
        if pixels.shape != (self.height, self.width, 4):
            raise PixelBufferError(
                f"Expected pixel array of shape {(self.height, self.width, 4)}, "
                f"got {pixels.shape}"
            )
        pixels.setflags(write=False)
        object.__setattr__(self, "pixels", pixels)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "PixelBuffer":
        """Build a buffer from width*height*4 row-major RGBA bytes."""
        expected = width * height * 4
        if len(data) != expected:
            raise PixelBufferError(f"Expected {expected} bytes of RGBA data, got {len(data)}")
        if expected == 0:
            raise PixelBufferError(f"Pixel buffer must have positive dimensions, got {width}x{height}")
        pixels = np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, 4)
        return cls(width=width, height=height, pixels=pixels)

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[..., :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[..., 3]


@dataclass
class Point:
    """2D point with float coordinates."""
    x: float
    y: float


@dataclass
class BezierCurve:
    """Cubic bezier curve segment."""
    p0: Point
    p1: Point  # Control point
    p2: Point  # Control point
    p3: Point


@dataclass
class Layer:
    """Pixels assigned to one quantized color."""
    color: Color
    points: PointArray  # (N, 2) int array of (x, y)

    @property
    def pixel_count(self) -> int:
        return len(self.points)


@dataclass
class Contour:
    """Boundary walk of one connected region."""
    points: PointArray  # (N, 2) float array of (x, y)
    is_hole: bool = False

    @property
    def is_closed(self) -> bool:
        return len(self.points) > 1 and bool(np.array_equal(self.points[0], self.points[-1]))


@dataclass
class Shape:
    """Filled vector shape ready for rendering."""
    curves: List[BezierCurve]
    fill_color: Color
    area: float = 0.0


@dataclass
class PipelineConfig:
    """Configuration for the layertrace pipeline."""

    # Decoding
    scale: float = 2.0

    # Color quantization
    n_colors: int = 16
    alpha_threshold: int = 20
    random_state: RandomState = None

    # Hybrid dilation
    unconditional_passes: int = 1  # Solidify internal micro-gaps
    bounded_passes: int = 1  # Close color gaps without bridging empty space

    # Contour tracing and filtering
    max_trace_steps: Optional[int] = None  # None = derived from image size
    min_area: float = 10.0

    # Point reduction
    smoothing_iterations: int = 1
    simplify_tolerance: float = 1.0

    # Execution
    workers: int = 1

    # SVG output
    precision: int = 2  # Decimal places for SVG coordinates

    def __post_init__(self):
        if self.n_colors < 1:
            raise ValueError(f"n_colors must be >= 1, got {self.n_colors}")
        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")
        if self.unconditional_passes < 0 or self.bounded_passes < 0:
            raise ValueError("Dilation pass counts must be >= 0")
        if self.smoothing_iterations < 0:
            raise ValueError(f"smoothing_iterations must be >= 0, got {self.smoothing_iterations}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
