"""Main pipeline orchestrator for layertrace."""
import logging
import time
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from layertrace.contour import polygon_area, trace_contours
from layertrace.curves import fit_curves
from layertrace.dilate import dilate_hybrid
from layertrace.mask import coverage_mask, layer_to_mask
from layertrace.quantize import quantize_image
from layertrace.raster_ingest import ingest
from layertrace.simplify import simplify_path
from layertrace.smooth import smooth_points
from layertrace.svg_export import save_svg, shapes_to_svg
from layertrace.types import (
    BezierCurve,
    Contour,
    Layer,
    Mask,
    PipelineConfig,
    PixelBuffer,
    Shape,
)

logger = logging.getLogger(__name__)


def contour_to_curves(
    contour: Contour,
    smoothing_iterations: int = 1,
    tolerance: float = 1.0
) -> List[BezierCurve]:
    """
    Smooth, simplify and curve-fit one traced contour.

    A closed contour is smoothed as a loop without its repeated end point,
    then closed again after simplification so the curve fitter sees a closed
    run. Simplifying with the end point attached would collapse the whole
    loop onto a zero-length chord.
    """
    points = contour.points
    closed = contour.is_closed
    if closed:
        points = points[:-1]

    smoothed = smooth_points(points, smoothing_iterations)
    simplified = simplify_path(smoothed, tolerance)

    if closed and len(simplified) > 1:
        simplified = np.vstack([simplified, simplified[:1]])

    return fit_curves(simplified)


def vectorize_layer(layer: Layer, coverage: Mask, config: PipelineConfig) -> List[Shape]:
    """
    Turn one color layer into shapes.

    Args:
        layer: Color layer from quantization
        coverage: Coverage mask of the whole image (read-only)
        config: Pipeline configuration

    Returns:
        Shapes for every contour at least config.min_area in size
    """
    height, width = coverage.shape
    mask = layer_to_mask(layer.points, width, height)
    dilated = dilate_hybrid(
        mask,
        coverage,
        unconditional_passes=config.unconditional_passes,
        bounded_passes=config.bounded_passes
    )

    contours = trace_contours(dilated, max_steps=config.max_trace_steps)

    shapes = []
    for contour in contours:
        area = polygon_area(contour.points)
        if area < config.min_area:
            continue
        curves = contour_to_curves(
            contour,
            smoothing_iterations=config.smoothing_iterations,
            tolerance=config.simplify_tolerance
        )
        shapes.append(Shape(curves=curves, fill_color=layer.color, area=area))

    r, g, b = layer.color
    logger.debug(
        f"Layer rgb({r},{g},{b}): {len(contours)} contours, {len(shapes)} kept"
    )
    return shapes


def _vectorize_layer_job(args: Tuple[Layer, Mask, PipelineConfig]) -> List[Shape]:
    """Process pool entry point."""
    return vectorize_layer(*args)


def sort_shapes(shapes: List[Shape]) -> List[Shape]:
    """Order shapes largest first so backgrounds are drawn before foregrounds (stable)."""
    return sorted(shapes, key=lambda shape: shape.area, reverse=True)


class Pipeline:
    """Raster-to-vector pipeline: quantize, dilate, trace, reduce, fit, order."""

    def __init__(self, config: Optional[PipelineConfig] = None):
        """
        Initialize pipeline with configuration.

        Args:
            config: Pipeline configuration. Uses defaults if None.
        """
        self.config = config or PipelineConfig()

    def run(self, buffer: PixelBuffer) -> List[Shape]:
        """
        Vectorize a decoded pixel buffer.

        Args:
            buffer: Source image

        Returns:
            Shapes from every color layer, largest area first. Empty when
            the image has no visible pixels.
        """
        config = self.config

        layers = quantize_image(
            buffer,
            config.n_colors,
            random_state=config.random_state,
            alpha_threshold=config.alpha_threshold
        )
        if not layers:
            return []

        coverage = coverage_mask(buffer, config.alpha_threshold)
        valid_pixels = int(coverage.sum())
        assigned = sum(layer.pixel_count for layer in layers)
        logger.info(
            f"Coverage mask: {valid_pixels} valid pixels, "
            f"{100.0 * assigned / valid_pixels:.1f}% assigned to layers"
        )

        if config.workers > 1 and len(layers) > 1:
            jobs = [(layer, coverage, config) for layer in layers]
            with ProcessPoolExecutor(max_workers=config.workers) as executor:
                per_layer = list(executor.map(_vectorize_layer_job, jobs))
        else:
            per_layer = [vectorize_layer(layer, coverage, config) for layer in layers]

        shapes = [shape for layer_shapes in per_layer for shape in layer_shapes]
        logger.info(f"Total shapes: {len(shapes)}")
        return sort_shapes(shapes)

    def process(
        self,
        input_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None
    ) -> str:
        """
        Load an image file, vectorize it and render SVG.

        Args:
            input_path: Path to input image
            output_path: Optional path to save SVG output

        Returns:
            SVG string

        Raises:
            FileNotFoundError: If input file doesn't exist
            VectorizationError: If the image cannot be loaded
        """
        start_time = time.time()

        buffer = ingest(input_path, scale=self.config.scale)
        logger.info(f"Image: {buffer.width}x{buffer.height} (scale {self.config.scale})")

        shapes = self.run(buffer)
        svg = shapes_to_svg(shapes, buffer.width, buffer.height, self.config.precision)

        if output_path:
            save_svg(svg, output_path)
            logger.info(f"Saved SVG to {output_path}")

        logger.info(f"Completed in {time.time() - start_time:.2f}s")
        return svg


def vectorize(buffer: PixelBuffer, config: Optional[PipelineConfig] = None) -> List[Shape]:
    """Vectorize a pixel buffer into an ordered shape list."""
    return Pipeline(config).run(buffer)


def process_image(
    image_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    config: Optional[PipelineConfig] = None,
) -> str:
    """
    Process an image file through the pipeline.

    Convenience function for one-off processing.

    Args:
        image_path: Path to input image (PNG/JPG)
        output_path: Optional path to save SVG output
        config: Optional configuration object

    Returns:
        SVG string

    Example:
        >>> svg = process_image("bird.png", "bird.svg")
        >>> svg = process_image("logo.png", config=PipelineConfig(n_colors=8))
    """
    return Pipeline(config).process(image_path, output_path)
