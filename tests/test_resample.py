"""Tests for the resampling engine."""

import numpy as np
import pytest

from raster_engine import DegenerateGeometryError, ImageStore, ResizeAlgorithm, resize

ALGORITHMS = [ResizeAlgorithm.NEAREST_NEIGHBOR, ResizeAlgorithm.BILINEAR_INTERPOLATION]


@pytest.mark.parametrize("algorithm", ALGORITHMS + [None])
def test_same_size_returns_identical_copy(random_image, algorithm):
    resized = resize(random_image, random_image.width, random_image.height, algorithm)

    assert resized == random_image
    assert resized is not random_image
    assert resized.histogram == random_image.histogram


@pytest.mark.parametrize("algorithm", ALGORITHMS)
@pytest.mark.parametrize("width,height", [(0, 5), (5, 0), (0, 0)])
def test_zero_target_fails(random_image, algorithm, width, height):
    with pytest.raises(DegenerateGeometryError):
        resize(random_image, width, height, algorithm)


@pytest.mark.parametrize("algorithm", ALGORITHMS)
@pytest.mark.parametrize("width,height", [(4, 3), (23, 17), (11, 30), (1, 1)])
def test_target_dimensions_and_determinism(random_image, algorithm, width, height):
    first = resize(random_image, width, height, algorithm)
    second = resize(random_image, width, height, algorithm)

    assert (first.width, first.height) == (width, height)
    assert len(first.data) == 3 * width * height
    assert first == second


def test_default_algorithm_is_nearest_neighbor(random_image):
    assert resize(random_image, 20, 5) == resize(
        random_image, 20, 5, ResizeAlgorithm.NEAREST_NEIGHBOR)


def test_nearest_neighbor_upscale_duplicates_pixels():
    pixels = np.array([[[10, 20, 30], [40, 50, 60]]], dtype=np.uint8)
    img = ImageStore.from_array(pixels)

    resized = resize(img, 4, 2, ResizeAlgorithm.NEAREST_NEIGHBOR)

    expected = np.array([[[10, 20, 30], [10, 20, 30], [40, 50, 60], [40, 50, 60]]] * 2,
                        dtype=np.uint8)
    np.testing.assert_array_equal(resized.as_array(), expected)


def test_nearest_neighbor_downscale_picks_floor_source():
    pixels = np.arange(6 * 6 * 3, dtype=np.uint8).reshape(6, 6, 3)
    img = ImageStore.from_array(pixels)

    resized = resize(img, 3, 2, ResizeAlgorithm.NEAREST_NEIGHBOR)

    # x -> floor(x * 6 / 3), y -> floor(y * 6 / 2)
    np.testing.assert_array_equal(resized.as_array(), pixels[[0, 3]][:, [0, 2, 4]])


def test_bilinear_interpolates_between_neighbors():
    pixels = np.array([[[0, 0, 0], [100, 200, 50]]], dtype=np.uint8)
    img = ImageStore.from_array(pixels)

    resized = resize(img, 2, 1, ResizeAlgorithm.BILINEAR_INTERPOLATION)
    assert resized == img

    resized = resize(img, 4, 1, ResizeAlgorithm.BILINEAR_INTERPOLATION)

    # gx = x / 4 * 1 -> 0, 0.25, 0.5, 0.75; the row below is zero padding
    # and ty is always 0, so only the horizontal lerp matters
    expected = [[0, 0, 0], [25, 50, 13], [50, 100, 25], [75, 150, 38]]
    np.testing.assert_array_equal(resized.as_array()[0], np.array(expected, dtype=np.uint8))


def test_bilinear_zero_pads_single_column_source():
    img = ImageStore.from_array(np.full((1, 1, 3), 200, dtype=np.uint8))

    resized = resize(img, 3, 3, ResizeAlgorithm.BILINEAR_INTERPOLATION)

    # source size 1 maps every destination to g = 0 with no fractional part
    assert resized.as_array().tolist() == [[[200, 200, 200]] * 3] * 3


def test_bilinear_uniform_image_stays_uniform():
    img = ImageStore.from_array(np.full((8, 8, 3), 77, dtype=np.uint8))

    resized = resize(img, 13, 5, ResizeAlgorithm.BILINEAR_INTERPOLATION)

    assert resized.histogram == {(77, 77, 77): 65}
