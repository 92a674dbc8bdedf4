"""
Per-pixel arithmetic and tonal operations.

Covers saturating combination of two images, gamma and logarithmic tonal
remapping, negation, and histogram equalization of the HSV value channel.
Every operation returns a new ImageStore and leaves its inputs untouched.
"""

from enum import Enum
from typing import Optional, Tuple
import logging
import math

import numpy as np

from .color import V_MULT, hsv_to_rgb, rgb_to_hsv, round_half_up
from .errors import InvalidParameterError
from .image import Header, ImageStore
from .resample import ResizeAlgorithm, resize
from .stats import EqualizationMap, Histogram

logger = logging.getLogger(__name__)


class OpType(Enum):
    """Pixel combination operator."""
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"


# ============================================================================
# Image combination
# ============================================================================

def compromise_size(lhs: ImageStore, rhs: ImageStore) -> Tuple[int, int]:
    """Dimensions halfway between two images (integer-truncated)."""
    if lhs.width == rhs.width and lhs.height == rhs.height:
        return lhs.width, lhs.height
    return (lhs.width + rhs.width) // 2, (lhs.height + rhs.height) // 2


def combine(lhs: ImageStore, rhs: ImageStore, op: OpType) -> ImageStore:
    """
    Combine two images channel by channel with saturating arithmetic.

    Operands of different sizes are both resampled bilinearly to the
    compromise size before combining.

    Args:
        lhs: Left operand
        rhs: Right operand
        op: Add, subtract or multiply

    Returns:
        New ImageStore at the common size

    Raises:
        DegenerateGeometryError: If a resample step would produce an empty image

    Example:
        >>> edges = combine(h_edges, v_edges, OpType.ADD)
    """
    width, height = compromise_size(lhs, rhs)

    if (lhs.width, lhs.height) != (rhs.width, rhs.height):
        logger.debug("Resampling operands %dx%d and %dx%d to %dx%d",
                     lhs.width, lhs.height, rhs.width, rhs.height, width, height)
        lhs = resize(lhs, width, height, ResizeAlgorithm.BILINEAR_INTERPOLATION)
        rhs = resize(rhs, width, height, ResizeAlgorithm.BILINEAR_INTERPOLATION)

    left = lhs.as_array().astype(np.int32)
    right = rhs.as_array().astype(np.int32)

    if op is OpType.ADD:
        result = left + right
    elif op is OpType.SUBTRACT:
        result = left - right
    elif op is OpType.MULTIPLY:
        result = left * right
    else:
        raise InvalidParameterError(f"Unknown operation: {op}")

    return ImageStore.from_array(np.clip(result, 0, 255).astype(np.uint8))


# ============================================================================
# Tonal transforms
# ============================================================================

def _apply_lut(image: ImageStore, lut: np.ndarray) -> ImageStore:
    return ImageStore.from_array(lut[image.as_array()])


def gamma_transform(image: ImageStore, gamma: float, c: Optional[float] = None) -> ImageStore:
    """
    Apply power-law correction ``255 * (x / 255) ** (1 / gamma)`` per channel.

    Args:
        image: Source image
        gamma: Gamma value, must be positive; 1.0 is the identity
        c: Accepted for interface compatibility; currently has no effect

    Returns:
        Gamma-corrected image
    """
    if gamma <= 0:
        raise InvalidParameterError(f"Gamma must be greater than 0, got {gamma}")

    correction = 1.0 / gamma
    lut = np.array([
        min(max(round_half_up(255.0 * (value / 255.0) ** correction), 0), 255)
        for value in range(256)
    ], dtype=np.uint8)

    logger.debug("Gamma transform (gamma=%.3f) on %dx%d", gamma, image.width, image.height)
    return _apply_lut(image, lut)


def default_log_constant(image: ImageStore) -> Optional[float]:
    """
    Scale factor mapping the brightest value in use to full white.

    Returns None for an image whose maximum channel value is 0.
    """
    denominator = math.log10(1.0 + image.max_value())
    if denominator == 0:
        return None
    return 255.0 / denominator


def log_transform(image: ImageStore, c: Optional[float] = None,
                  base: Optional[float] = None) -> ImageStore:
    """
    Apply ``c * log_base(x + 1)`` per channel.

    Args:
        image: Source image
        c: Scale factor, defaults to ``255 / log10(1 + max_value)``
        base: Logarithm base, defaults to 10

    Returns:
        Log-transformed image; black when the source is entirely black and
        no c was supplied
    """
    base = 10.0 if base is None else base
    if base <= 0 or base == 1:
        raise InvalidParameterError(f"Logarithm base must be positive and not 1, got {base}")

    if c is None:
        c = default_log_constant(image)
        if c is None:
            return ImageStore.from_array(np.zeros_like(image.as_array()))

    log_base = math.log(base)
    lut = np.array([
        min(max(round_half_up(c * math.log(value + 1.0) / log_base), 0), 255)
        for value in range(256)
    ], dtype=np.uint8)

    logger.debug("Log transform (c=%.3f, base=%.3f) on %dx%d",
                 c, base, image.width, image.height)
    return _apply_lut(image, lut)


def negate(image: ImageStore) -> ImageStore:
    """
    Invert every channel against the image's maximum value in use.

    The result's header declares the source maximum.
    """
    max_value = image.max_value()
    inverted = np.clip(max_value - image.as_array().astype(np.int16), 0, 255).astype(np.uint8)

    header = Header(image.width, image.height, max_value, image.header.format)
    return ImageStore.from_array(inverted, header=header)


# ============================================================================
# Histogram equalization
# ============================================================================

def histogram_equalization(image: ImageStore,
                           histogram: Optional[Histogram] = None) -> ImageStore:
    """
    Equalize the HSV value channel while keeping hue and saturation.

    Args:
        image: Source image
        histogram: Brightness histogram to equalize against. When None the
            image equalizes against its own distribution; a histogram taken
            from another image remaps this one toward that image's
            brightness distribution.

    Returns:
        Equalized image

    Example:
        >>> matched = histogram_equalization(dark, Histogram.from_image(reference))
    """
    pixels = image.as_array().reshape(-1, 3)
    colors, inverse, counts = np.unique(pixels, axis=0, return_inverse=True, return_counts=True)
    inverse = inverse.reshape(-1)

    hsv_colors = [rgb_to_hsv(tuple(int(ch) for ch in color)) for color in colors]

    if histogram is None:
        histogram = Histogram()
        for hsv, count in zip(hsv_colors, counts):
            histogram.add(hsv[2], int(count))

    mapping = EqualizationMap(histogram.equalize())

    equalized_colors = np.array([
        hsv_to_rgb(hue, saturation, mapping[Histogram.quantize(value)] / V_MULT)
        for hue, saturation, value in hsv_colors
    ], dtype=np.uint8)

    logger.debug("Histogram equalization over %d distinct colors", len(colors))
    result = equalized_colors[inverse].reshape(image.height, image.width, 3)
    return ImageStore.from_array(result)
