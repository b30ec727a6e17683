"""Pytest configuration and fixtures."""

import numpy as np
import pytest

from hierquant.pixel_source import ArrayPixelSource


@pytest.fixture
def red_blue_2x2():
    """2x2 image: red, red on top, blue, blue below."""
    image = np.zeros((2, 2, 3), dtype=np.uint8)
    image[0, :] = [255, 0, 0]
    image[1, :] = [0, 0, 255]
    return ArrayPixelSource(image)


@pytest.fixture
def four_quadrants():
    """40x40 image with red, green, blue and yellow quadrants of unequal size."""
    image = np.zeros((40, 40, 3), dtype=np.uint8)
    image[:25, :25] = [255, 0, 0]  # Red, 625 px
    image[:25, 25:] = [0, 255, 0]  # Green, 375 px
    image[25:, :30] = [0, 0, 255]  # Blue, 450 px
    image[25:, 30:] = [255, 255, 0]  # Yellow, 150 px
    return ArrayPixelSource(image)


@pytest.fixture
def solid_image():
    """10x10 image of a single color."""
    image = np.full((10, 10, 3), [40, 120, 200], dtype=np.uint8)
    return ArrayPixelSource(image)


@pytest.fixture
def noisy_image():
    """Random RGBA image with some fully transparent pixels."""
    rng = np.random.default_rng(7)
    image = rng.integers(0, 256, (24, 32, 4), dtype=np.uint8)
    image[..., 3] = 255
    image[:4, :4, 3] = 0
    return ArrayPixelSource(image)
