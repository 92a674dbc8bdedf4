"""Tests for arithmetic, tonal and histogram operations."""

import math

import numpy as np
import pytest

from raster_engine import (Histogram, ImageStore, InvalidParameterError, OpType, combine,
                           gamma_transform, histogram_equalization, log_transform, negate)
from raster_engine.color import rgb_to_hsv
from raster_engine.operations import compromise_size, default_log_constant

from conftest import uniform


# ============================================================================
# Combine
# ============================================================================

def test_subtract_self_is_black(random_image):
    result = combine(random_image, random_image, OpType.SUBTRACT)

    assert result == ImageStore(random_image.width, random_image.height)
    assert result.background() == (0, 0, 0)


def test_add_is_commutative(random_image):
    other = ImageStore.from_array(np.ascontiguousarray(random_image.as_array()[::-1, ::-1]))

    assert combine(random_image, other, OpType.ADD) == combine(other, random_image, OpType.ADD)


@pytest.mark.parametrize("lhs,rhs,expected", [
    (2, 2, 4),
    (3, 4, 12),
    (4, 3, 12),
    (4, 4, 16),
    (0, 0, 0),
    (0, 255, 0),
    (1, 255, 255),
    (30, 30, 255),
])
def test_multiply_saturates(lhs, rhs, expected):
    result = combine(uniform(lhs), uniform(rhs), OpType.MULTIPLY)
    assert result == uniform(expected)


@pytest.mark.parametrize("lhs,rhs,op,expected", [
    (200, 100, OpType.ADD, 255),
    (100, 100, OpType.ADD, 200),
    (50, 100, OpType.SUBTRACT, 0),
    (100, 30, OpType.SUBTRACT, 70),
])
def test_add_subtract_saturate(lhs, rhs, op, expected):
    assert combine(uniform(lhs), uniform(rhs), op) == uniform(expected)


def test_combine_different_sizes_uses_compromise_size():
    lhs = uniform(100, width=10, height=4)
    rhs = uniform(50, width=6, height=9)

    assert compromise_size(lhs, rhs) == (8, 6)

    result = combine(lhs, rhs, OpType.ADD)

    assert (result.width, result.height) == (8, 6)


def test_combine_does_not_mutate_inputs(random_image, gradient_image):
    before_left = random_image.copy()
    before_right = gradient_image.copy()

    combine(random_image, gradient_image, OpType.MULTIPLY)

    assert random_image == before_left
    assert gradient_image == before_right


# ============================================================================
# Gamma and log transforms
# ============================================================================

def test_gamma_one_is_identity(random_image):
    assert gamma_transform(random_image, 1.0) == random_image


def test_gamma_ignores_c(random_image):
    assert gamma_transform(random_image, 2.2, c=5.0) == gamma_transform(random_image, 2.2)


def test_gamma_brightens_midtones():
    result = gamma_transform(uniform(64), 2.0)
    expected = round(255 * (64 / 255) ** 0.5)
    assert result == uniform(expected)


def test_gamma_keeps_extremes():
    pixels = np.array([[[0, 255, 0]]], dtype=np.uint8)
    for gamma in (0.3, 2.8, 5.0):
        result = gamma_transform(ImageStore.from_array(pixels), gamma)
        assert result.get_pixel(0, 0) == (0, 255, 0)


@pytest.mark.parametrize("gamma", [0, -1.5])
def test_gamma_must_be_positive(gamma):
    with pytest.raises(InvalidParameterError):
        gamma_transform(uniform(10), gamma)


def test_log_transform_default_constant_maps_extremes():
    pixels = np.array([[[0, 0, 0], [255, 255, 255]],
                       [[128, 128, 128], [64, 64, 64]]], dtype=np.uint8)
    img = ImageStore.from_array(pixels)

    assert default_log_constant(img) == pytest.approx(255 / math.log10(256))

    result = log_transform(img, None, None)

    assert result.get_pixel(0, 0) == (0, 0, 0)
    assert result.get_pixel(1, 0) == (255, 255, 255)
    c = 255 / math.log10(256)
    assert result.get_pixel(0, 1) == (round(c * math.log10(129)),) * 3
    assert result.get_pixel(1, 1) == (round(c * math.log10(65)),) * 3


def test_log_transform_default_uses_max_value_in_use():
    img = uniform(100)
    result = log_transform(img)
    # the brightest value present maps to full white
    assert result == uniform(255)


def test_log_transform_custom_constant_and_base_saturates():
    img = uniform(3)
    result = log_transform(img, c=200.0, base=2.0)
    # 200 * log2(4) = 400 -> saturates
    assert result == uniform(255)

    result = log_transform(img, c=20.0, base=2.0)
    assert result == uniform(40)


def test_log_transform_black_image_stays_black():
    img = uniform(0)
    assert log_transform(img) == img


@pytest.mark.parametrize("base", [0, -2, 1])
def test_log_transform_rejects_bad_base(base):
    with pytest.raises(InvalidParameterError):
        log_transform(uniform(5), base=base)


# ============================================================================
# Negation
# ============================================================================

def test_negate_against_max_value():
    pixels = np.array([[[0, 100, 200], [50, 50, 50]]], dtype=np.uint8)
    result = negate(ImageStore.from_array(pixels))

    assert result.as_array().tolist() == [[[200, 100, 0], [150, 150, 150]]]
    assert result.header.max_value == 200


def test_negate_twice_restores_full_range_image(gradient_image):
    assert gradient_image.max_value() == 255
    assert negate(negate(gradient_image)) == gradient_image


# ============================================================================
# Histogram equalization
# ============================================================================

def _values(image):
    return [rgb_to_hsv(image.pixel_at(i))[2] for i in range(image.width * image.height)]


def test_equalization_preserves_size_and_spreads_values(gradient_image):
    dark = ImageStore.from_array((gradient_image.as_array() // 4).astype(np.uint8))

    result = histogram_equalization(dark)

    assert (result.width, result.height) == (dark.width, dark.height)
    assert max(_values(result)) >= max(_values(dark))


def test_equalization_is_monotonic_and_idempotent_on_ordering(random_image):
    once = histogram_equalization(random_image)
    twice = histogram_equalization(once)

    original = _values(random_image)
    first = _values(once)
    second = _values(twice)

    for i in range(len(original)):
        for j in range(len(original)):
            if original[i] < original[j]:
                assert first[i] <= first[j] + 1e-9
            if first[i] < first[j]:
                assert second[i] <= second[j] + 1e-9


def test_equalization_keeps_hue():
    pixels = np.array([[[40, 0, 0], [0, 80, 0], [0, 0, 120], [60, 60, 0]]], dtype=np.uint8)
    img = ImageStore.from_array(pixels)

    result = histogram_equalization(img)

    for index in range(4):
        before = rgb_to_hsv(img.pixel_at(index))
        after = rgb_to_hsv(result.pixel_at(index))
        assert after[0] == pytest.approx(before[0], abs=1.0)


def test_equalization_uniform_image_keeps_brightest_key():
    img = uniform((0, 0, 200))
    result = histogram_equalization(img)
    # a single key maps to running_cdf (1.0) * max_key, i.e. itself
    assert result == img


def test_self_equalization_matches_explicit_histogram(random_image):
    own = histogram_equalization(random_image)
    explicit = histogram_equalization(random_image, Histogram.from_image(random_image))

    assert own == explicit


def test_equalization_against_external_histogram():
    reference = uniform(50)
    img = ImageStore.from_array(np.array([[[10, 10, 10], [50, 50, 50], [200, 200, 200]]],
                                         dtype=np.uint8))

    result = histogram_equalization(img, Histogram.from_image(reference))

    # keys below every reference key map to 0, keys at or above it to the
    # reference's single key
    assert result.get_pixel(0, 0) == (0, 0, 0)
    assert result.get_pixel(1, 0) == (50, 50, 50)
    assert result.get_pixel(2, 0) == (50, 50, 50)
