"""layertrace: color-layer raster to vector tracing.

Quantizes an image into a few colors, closes seams between the color layers,
traces every region boundary and fits smooth cubic Bezier outlines, ordered
largest first for painter's-algorithm rendering.
"""
from layertrace.types import (
    BezierCurve,
    Contour,
    Layer,
    PipelineConfig,
    PixelBuffer,
    Point,
    Shape,
    VectorizationError,
)
from layertrace.pipeline import Pipeline, process_image, vectorize

__version__ = "0.1.0"
__all__ = [
    "BezierCurve",
    "Contour",
    "Layer",
    "PipelineConfig",
    "PixelBuffer",
    "Point",
    "Shape",
    "VectorizationError",
    "Pipeline",
    "process_image",
    "vectorize",
]
