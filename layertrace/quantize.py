"""Color quantization module using a short K-means run over visible pixels."""
import logging
from typing import List

import numpy as np
from sklearn.metrics import pairwise_distances_chunked
from sklearn.utils import check_random_state

from layertrace.types import Layer, PixelBuffer, QuantizationError, RandomState

logger = logging.getLogger(__name__)

VISIBILITY_THRESHOLD = 20
KMEANS_ITERATIONS = 3
MAX_SEED_ATTEMPTS = 1000


def visible_pixel_indices(
    buffer: PixelBuffer,
    alpha_threshold: int = VISIBILITY_THRESHOLD
) -> np.ndarray:
    """
    Flat row-major indices of pixels whose alpha exceeds the threshold.

    Args:
        buffer: Source pixel buffer
        alpha_threshold: Alpha value a pixel must exceed to count as visible

    Returns:
        1D int array of indices into the flattened image
    """
    return np.flatnonzero(buffer.alpha.ravel() > alpha_threshold)


def init_centers(
    colors: np.ndarray,
    n_colors: int,
    rng: np.random.RandomState,
    max_attempts: int = MAX_SEED_ATTEMPTS
) -> np.ndarray:
    """
    Pick initial cluster centers from visible pixel colors.

    Exact-duplicate colors are rejected while attempts remain. If the image
    has fewer distinct colors than requested, the remaining centers are
    filled with random (possibly repeated) colors; those never win a pixel
    and get dropped after clustering.

    Args:
        colors: (N, 3) array of visible pixel colors
        n_colors: Number of centers to produce
        rng: Random source
        max_attempts: Upper bound on distinct-color sampling attempts

    Returns:
        (n_colors, 3) int64 array of centers
    """
    centers = []
    seen = set()
    attempts = 0

    while len(centers) < n_colors and attempts < max_attempts:
        attempts += 1
        color = tuple(int(c) for c in colors[rng.randint(len(colors))])
        if color not in seen:
            seen.add(color)
            centers.append(color)

    while len(centers) < n_colors:
        centers.append(tuple(int(c) for c in colors[rng.randint(len(colors))]))

    logger.debug(f"Initialized {len(centers)} color centers ({len(seen)} distinct)")
    return np.array(centers, dtype=np.int64)


def assign_pixels(colors: np.ndarray, centers: np.ndarray) -> np.ndarray:
    """Index of the nearest center for every color (ties go to the lower index)."""
    def nearest(distances, start):
        return np.argmin(distances, axis=1)

    chunks = pairwise_distances_chunked(
        colors.astype(np.float64),
        centers.astype(np.float64),
        reduce_func=nearest,
        metric="euclidean"
    )
    return np.concatenate(list(chunks))


def update_centers(colors: np.ndarray, labels: np.ndarray, centers: np.ndarray) -> np.ndarray:
    """Move each non-empty center to the floored mean of its members."""
    n_centers = len(centers)
    counts = np.bincount(labels, minlength=n_centers)
    sums = np.stack(
        [np.bincount(labels, weights=colors[:, ch], minlength=n_centers) for ch in range(3)],
        axis=1
    )

    updated = centers.copy()
    filled = counts > 0
    updated[filled] = np.floor(sums[filled] / counts[filled, None]).astype(np.int64)
    return updated


def quantize_image(
    buffer: PixelBuffer,
    n_colors: int,
    random_state: RandomState = None,
    alpha_threshold: int = VISIBILITY_THRESHOLD,
    iterations: int = KMEANS_ITERATIONS
) -> List[Layer]:
    """
    Split an image into color layers with K-means clustering.

    Only visible pixels take part, so a transparent background never seeds
    or joins a cluster. A fixed, small number of iterations is run instead
    of iterating to convergence.

    Args:
        buffer: Source pixel buffer
        n_colors: Target number of colors (>= 1)
        random_state: None, an int seed or a RandomState for reproducible seeding
        alpha_threshold: Alpha value a pixel must exceed to count as visible
        iterations: Number of assignment/update rounds

    Returns:
        List of at most n_colors layers; empty if no pixel is visible

    Raises:
        QuantizationError: If n_colors < 1
    """
    if n_colors < 1:
        raise QuantizationError(f"n_colors must be >= 1, got {n_colors}")

    total_pixels = buffer.width * buffer.height
    indices = visible_pixel_indices(buffer, alpha_threshold)
    logger.info(f"Found {len(indices)} visible pixels out of {total_pixels}")

    if len(indices) == 0:
        logger.warning("Image appears fully transparent, nothing to quantize")
        return []

    rng = check_random_state(random_state)
    colors = buffer.rgb.reshape(-1, 3)[indices].astype(np.int64)
    centers = init_centers(colors, n_colors, rng)

    labels = assign_pixels(colors, centers)
    for iteration in range(iterations):
        if iteration > 0:
            labels = assign_pixels(colors, centers)
        centers = update_centers(colors, labels, centers)

    xs = indices % buffer.width
    ys = indices // buffer.width
    counts = np.bincount(labels, minlength=n_colors)

    layers = []
    for c in range(n_colors):
        if counts[c] == 0:
            continue
        members = labels == c
        color = (int(centers[c, 0]), int(centers[c, 1]), int(centers[c, 2]))
        layers.append(Layer(color=color, points=np.column_stack([xs[members], ys[members]])))

    _log_layer_summary(layers, len(indices))
    return layers


def _log_layer_summary(layers: List[Layer], visible_count: int) -> None:
    """Log per-layer pixel counts and how much of the visible image they cover."""
    logger.info(f"Quantized to {len(layers)} distinct color layers")
    for i, layer in enumerate(layers):
        r, g, b = layer.color
        logger.debug(f"  Layer {i}: rgb({r},{g},{b}) - {layer.pixel_count} pixels")

    assigned = sum(layer.pixel_count for layer in layers)
    coverage = 100.0 * assigned / visible_count if visible_count else 0.0
    logger.info(f"Pixels assigned to layers: {assigned} ({coverage:.1f}% coverage)")
