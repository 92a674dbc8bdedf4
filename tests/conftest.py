"""Shared fixtures for the raster engine tests."""

import numpy as np
import pytest

from raster_engine import ImageStore


def uniform(value, width=10, height=10):
    """Build a uniform gray (or colored) image."""
    if np.isscalar(value):
        value = (value, value, value)
    pixels = np.empty((height, width, 3), dtype=np.uint8)
    pixels[:, :] = value
    return ImageStore.from_array(pixels)


@pytest.fixture
def gradient_image() -> ImageStore:
    """Horizontal gradient, black to white, with a little color."""
    pixels = np.zeros((12, 16, 3), dtype=np.uint8)
    for x in range(16):
        pixels[:, x, 0] = x * 17
        pixels[:, x, 1] = 255 - x * 17
        pixels[:, x, 2] = (x * 37) % 256
    return ImageStore.from_array(pixels)


@pytest.fixture
def random_image() -> ImageStore:
    rng = np.random.default_rng(1234)
    return ImageStore.from_array(rng.integers(0, 256, size=(9, 11, 3), dtype=np.uint8))


@pytest.fixture
def two_regions_image() -> ImageStore:
    """
    White background with a red block (top-left) and a blue block
    (bottom-right) that do not touch, even diagonally.
    """
    pixels = np.full((10, 10, 3), 255, dtype=np.uint8)
    pixels[1:4, 1:4] = (200, 0, 0)
    pixels[6:9, 5:9] = (0, 0, 200)
    return ImageStore.from_array(pixels)
