"""Tests for mask building and hybrid dilation."""
import numpy as np

from layertrace.dilate import dilate_hybrid, dilate_mask, dilate_once
from layertrace.mask import coverage_mask, layer_to_mask


class TestMasks:
    """Test cases for mask construction."""

    def test_layer_to_mask(self):
        points = np.array([[0, 0], [3, 1], [2, 2]])

        mask = layer_to_mask(points, width=4, height=3)

        assert mask.shape == (3, 4)
        assert mask.dtype == np.uint8
        assert mask.sum() == 3
        assert mask[1, 3] == 1 and mask[2, 2] == 1 and mask[0, 0] == 1

    def test_empty_layer(self):
        mask = layer_to_mask(np.zeros((0, 2), dtype=int), width=5, height=5)
        assert mask.sum() == 0

    def test_coverage_mask(self, red_square_buffer):
        coverage = coverage_mask(red_square_buffer)

        assert coverage.shape == (20, 20)
        assert coverage.sum() == 100
        assert set(np.unique(coverage)) <= {0, 1}


class TestDilation:
    """Test cases for hybrid dilation."""

    def test_single_pixel_grows_to_block(self):
        mask = np.zeros((5, 5), dtype=np.uint8)
        mask[2, 2] = 1

        dilated = dilate_once(mask)

        assert dilated.sum() == 9
        assert np.all(dilated[1:4, 1:4] == 1)

    def test_unconditional_ignores_coverage(self):
        mask = np.zeros((5, 5), dtype=np.uint8)
        mask[2, 2] = 1
        coverage = np.zeros((5, 5), dtype=np.uint8)

        dilated = dilate_hybrid(mask, coverage, unconditional_passes=1, bounded_passes=0)

        assert dilated.sum() == 9

    def test_bounded_pass_respects_coverage(self):
        mask = np.zeros((7, 7), dtype=np.uint8)
        mask[3, 3] = 1
        coverage = np.zeros((7, 7), dtype=np.uint8)
        coverage[:, :4] = 1

        dilated = dilate_hybrid(mask, coverage, unconditional_passes=0, bounded_passes=2)

        new_pixels = (dilated == 1) & (mask == 0)
        assert not np.any(new_pixels & (coverage == 0))
        assert np.all(dilated[1:6, 1:4] == 1)
        assert dilated[:, 4:].sum() == 0

    def test_passes_compose(self):
        mask = np.zeros((9, 9), dtype=np.uint8)
        mask[4, 4] = 1
        coverage = np.ones((9, 9), dtype=np.uint8)

        dilated = dilate_hybrid(mask, coverage, unconditional_passes=1, bounded_passes=1)

        assert dilated.sum() == 25

    def test_zero_passes_copy_input(self):
        mask = np.zeros((4, 4), dtype=np.uint8)
        mask[1, 1] = 1

        dilated = dilate_hybrid(mask, np.ones_like(mask), 0, 0)

        np.testing.assert_array_equal(dilated, mask)
        assert dilated is not mask

    def test_input_not_mutated(self):
        mask = np.zeros((5, 5), dtype=np.uint8)
        mask[2, 2] = 1
        original = mask.copy()

        dilate_hybrid(mask, np.ones_like(mask), 2, 2)

        np.testing.assert_array_equal(mask, original)

    def test_foreground_outside_coverage_is_kept(self):
        mask = np.zeros((5, 5), dtype=np.uint8)
        mask[0, 0] = 1
        coverage = np.zeros((5, 5), dtype=np.uint8)

        dilated = dilate_mask(mask, iterations=1, coverage=coverage)

        assert dilated[0, 0] == 1
        assert dilated.sum() == 1

    def test_dilate_mask_without_coverage(self):
        mask = np.zeros((7, 7), dtype=np.uint8)
        mask[3, 3] = 1

        assert dilate_mask(mask, iterations=2).sum() == 25

    def test_random_masks_grow_monotonically(self):
        rng = np.random.RandomState(0)
        for _ in range(20):
            mask = (rng.rand(12, 15) > 0.85).astype(np.uint8)
            coverage = (rng.rand(12, 15) > 0.3).astype(np.uint8)

            dilated = dilate_hybrid(mask, coverage, unconditional_passes=0, bounded_passes=2)

            assert np.all(dilated[mask == 1] == 1)
            assert set(np.unique(dilated)) <= {0, 1}
            grown = (dilated == 1) & (mask == 0)
            assert not np.any(grown & (coverage == 0))
