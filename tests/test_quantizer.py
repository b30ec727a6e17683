"""Tests for the hierarchical quantizer."""

import numpy as np
import pytest

from hierquant.pixel_source import ArrayPixelSource
from hierquant.quantizer import (
    HierarchicalQuantizer,
    mean_to_rgba,
    quantize,
    render_quantized,
)
from hierquant.linalg import Vec3x1
from hierquant.tree import iter_leaves, iter_nodes
from hierquant.types import (
    EXCLUDED_CLASS,
    EmptyClassError,
    FactorizationError,
    NoEligibleLeafError,
    QuantizerConfig,
)


class TestQuantize:
    """Test cases for quantize."""

    def test_single_color_is_image_mean(self, noisy_image):
        colors = quantize(noisy_image, 1)

        pixels = noisy_image.to_array()
        live = pixels[pixels[:, 3] != 0, :3] / 255.0
        assert colors == [mean_to_rgba(Vec3x1(live.mean(axis=0)))]

    def test_red_blue_2x2(self, red_blue_2x2):
        colors = quantize(red_blue_2x2, 2)

        assert len(colors) == 2
        assert set(colors) == {(255, 0, 0, 255), (0, 0, 255, 255)}

    def test_returns_requested_count(self, four_quadrants):
        for count in range(1, 5):
            assert len(quantize(four_quadrants, count)) == count

    def test_four_quadrants_ordered_by_population(self, four_quadrants):
        colors = quantize(four_quadrants, 4)

        assert colors == [
            (255, 0, 0, 255),
            (0, 0, 255, 255),
            (0, 255, 0, 255),
            (255, 255, 0, 255),
        ]

    def test_deterministic(self, noisy_image):
        first = quantize(noisy_image, 6)
        second = quantize(noisy_image, 6)
        assert first == second

    def test_fully_transparent_image(self):
        image = np.zeros((1, 1, 4), dtype=np.uint8)

        with pytest.raises(EmptyClassError):
            quantize(ArrayPixelSource(image), 1)

    def test_solid_image_too_many_colors(self, solid_image):
        with pytest.raises(NoEligibleLeafError):
            quantize(solid_image, 3)

    def test_solid_image_single_color(self, solid_image):
        assert quantize(solid_image, 1) == [(40, 120, 200, 255)]

    def test_two_colors_cannot_give_three(self, red_blue_2x2):
        with pytest.raises(NoEligibleLeafError):
            quantize(red_blue_2x2, 3)

    def test_count_validation(self, red_blue_2x2):
        with pytest.raises(ValueError, match="count must be >= 1"):
            quantize(red_blue_2x2, 0)

    def test_count_cap(self, red_blue_2x2):
        quantizer = HierarchicalQuantizer(QuantizerConfig(n_colors=2, max_colors=4))

        with pytest.raises(ValueError, match="count must be <= 4"):
            quantizer.quantize(red_blue_2x2, 5)

    def test_no_color_cap_by_default(self):
        rng = np.random.default_rng(11)
        image = rng.integers(0, 256, (64, 64, 3), dtype=np.uint8)

        assert QuantizerConfig().max_colors is None
        assert len(quantize(ArrayPixelSource(image), 80)) == 80

    def test_factorization_failure_aborts(self, four_quadrants, monkeypatch):
        from hierquant import linalg

        def failing_eigh(a):
            raise linalg.sla.LinAlgError("did not converge")

        monkeypatch.setattr(linalg.sla, "eigh", failing_eigh)

        with pytest.raises(FactorizationError):
            quantize(four_quadrants, 3)

    def test_default_count_from_config(self, four_quadrants):
        quantizer = HierarchicalQuantizer(QuantizerConfig(n_colors=3))
        assert len(quantizer.quantize(four_quadrants)) == 3


class TestQuantizationResult:
    """Test the tree and label map returned with the colors."""

    def test_labels_partition_live_pixels(self, noisy_image):
        result = HierarchicalQuantizer().quantize_with_details(noisy_image, 5)

        leaf_ids = {leaf.class_id for leaf in iter_leaves(result.root)}
        labels = result.class_map

        assert labels.shape == (24, 32)
        assert np.all(labels[:4, :4] == EXCLUDED_CLASS)
        live = labels[labels != EXCLUDED_CLASS]
        assert set(np.unique(live).tolist()) == leaf_ids
        assert sum(leaf.pixel_count for leaf in result.leaves) == 24 * 32 - 16

    def test_class_ids_unique(self, noisy_image):
        result = HierarchicalQuantizer().quantize_with_details(noisy_image, 6)

        ids = [node.class_id for node in iter_nodes(result.root)]
        assert len(ids) == len(set(ids)) == 11
        assert result.root.class_id == 1

    def test_palette_array(self, four_quadrants):
        result = HierarchicalQuantizer().quantize_with_details(four_quadrants, 2)

        assert result.palette.shape == (2, 3)
        assert result.palette.dtype == np.uint8

    def test_render_quantized(self, four_quadrants):
        result = HierarchicalQuantizer().quantize_with_details(four_quadrants, 4)

        image = render_quantized(result)

        assert image.shape == (40, 40, 4)
        assert tuple(image[0, 0]) == (255, 0, 0, 255)
        assert tuple(image[39, 39]) == (255, 255, 0, 255)


class TestMeanToRgba:
    """Test conversion of mean vectors to output colors."""

    def test_truncates(self):
        assert mean_to_rgba(Vec3x1([1.0, 0.5, 0.999])) == (255, 127, 254, 255)
