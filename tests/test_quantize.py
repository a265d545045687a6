"""Tests for color quantization module."""
import numpy as np
import pytest

from layertrace.quantize import (
    assign_pixels,
    init_centers,
    quantize_image,
    update_centers,
    visible_pixel_indices,
)
from layertrace.types import PixelBuffer, QuantizationError


class TestQuantizeImage:
    """Test cases for quantize_image function."""

    def test_transparent_image_has_no_layers(self, transparent_buffer):
        """A fully transparent image is nothing to draw, not an error."""
        assert quantize_image(transparent_buffer, 4, random_state=0) == []

    def test_two_colors(self, two_color_buffer):
        layers = quantize_image(two_color_buffer, 2, random_state=0)

        assert len(layers) == 2
        by_color = {layer.color: layer for layer in layers}
        assert set(by_color) == {(255, 0, 0), (0, 0, 255)}
        assert by_color[(255, 0, 0)].pixel_count == 100
        assert by_color[(0, 0, 255)].pixel_count == 800

    def test_red_points_are_square_pixels(self, two_color_buffer):
        layers = quantize_image(two_color_buffer, 2, random_state=0)
        red = next(layer for layer in layers if layer.color == (255, 0, 0))

        xs, ys = red.points[:, 0], red.points[:, 1]
        assert xs.min() == 10 and xs.max() == 19
        assert ys.min() == 10 and ys.max() == 19

    def test_empty_clusters_are_dropped(self, two_color_buffer):
        """Asking for more colors than exist never yields empty layers."""
        layers = quantize_image(two_color_buffer, 6, random_state=1)

        assert len(layers) == 2
        assert all(layer.pixel_count > 0 for layer in layers)

    def test_never_more_than_k_layers(self, noisy_buffer):
        layers = quantize_image(noisy_buffer, 5, random_state=0)

        assert 1 <= len(layers) <= 5
        assert sum(layer.pixel_count for layer in layers) == 256

    def test_transparent_pixels_are_unassigned(self, red_square_buffer):
        layers = quantize_image(red_square_buffer, 3, random_state=0)

        assert len(layers) == 1
        assert layers[0].color == (255, 0, 0)
        assert layers[0].pixel_count == 100

    def test_faint_pixels_below_threshold_are_ignored(self):
        pixels = np.zeros((4, 4, 4), dtype=np.uint8)
        pixels[0, 0] = [10, 20, 30, 20]  # alpha not above threshold
        pixels[1, 1] = [10, 20, 30, 21]
        buffer = PixelBuffer(width=4, height=4, pixels=pixels)

        layers = quantize_image(buffer, 2, random_state=0)

        assert len(layers) == 1
        np.testing.assert_array_equal(layers[0].points, [[1, 1]])

    def test_seeded_runs_are_reproducible(self, noisy_buffer):
        first = quantize_image(noisy_buffer, 4, random_state=42)
        second = quantize_image(noisy_buffer, 4, random_state=42)

        assert [layer.color for layer in first] == [layer.color for layer in second]
        for a, b in zip(first, second):
            np.testing.assert_array_equal(a.points, b.points)

    def test_accepts_random_state_instance(self, two_color_buffer):
        layers = quantize_image(two_color_buffer, 2, random_state=np.random.RandomState(5))
        assert len(layers) == 2

    def test_invalid_color_count(self, two_color_buffer):
        with pytest.raises(QuantizationError):
            quantize_image(two_color_buffer, 0)


class TestKMeansSteps:
    """Test cases for the individual clustering steps."""

    def test_visible_pixel_indices(self, red_square_buffer):
        indices = visible_pixel_indices(red_square_buffer)

        assert len(indices) == 100
        assert indices[0] == 5 * 20 + 5

    def test_init_centers_prefers_distinct_colors(self):
        colors = np.array([[0, 0, 0]] * 50 + [[255, 255, 255]] * 50)
        centers = init_centers(colors, 2, np.random.RandomState(0))

        assert {tuple(c) for c in centers} == {(0, 0, 0), (255, 255, 255)}

    def test_init_centers_fills_with_repeats(self):
        colors = np.array([[7, 8, 9]] * 10)
        centers = init_centers(colors, 3, np.random.RandomState(0))

        assert centers.shape == (3, 3)
        assert np.all(centers == [7, 8, 9])

    def test_assign_ties_go_to_first_center(self):
        colors = np.array([[10, 10, 10]])
        centers = np.array([[10, 10, 10], [10, 10, 10]])

        assert assign_pixels(colors, centers)[0] == 0

    def test_update_centers_floors_means(self):
        colors = np.array([[0, 0, 0], [1, 3, 5], [200, 200, 200]])
        labels = np.array([0, 0, 1])
        centers = np.array([[9, 9, 9], [0, 0, 0], [50, 50, 50]])

        updated = update_centers(colors, labels, centers)

        np.testing.assert_array_equal(updated[0], [0, 1, 2])
        np.testing.assert_array_equal(updated[1], [200, 200, 200])
        # Empty cluster keeps its center
        np.testing.assert_array_equal(updated[2], [50, 50, 50])
