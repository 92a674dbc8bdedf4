"""
Color model for 8-bit RGB pixels.

Provides RGB <-> HSV conversion and the redmean perceptual color distance
used by connected-component labeling.
"""

import math
from typing import Sequence, Tuple

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)

# Quantization scale applied to the HSV value channel by histograms
V_MULT = 10000

# Redmean distance between black and white, used to normalize to [0, 1]
REDMEAN_MAX = 764.834

HSVPixel = Tuple[float, float, float]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


def redmean_distance(pixel_one: Sequence[int], pixel_two: Sequence[int]) -> float:
    """
    Compute the normalized redmean distance between two RGB pixels.

    Args:
        pixel_one: (r, g, b) triple with values 0-255
        pixel_two: (r, g, b) triple with values 0-255

    Returns:
        Distance in [0, 1]; 0 for identical pixels, ~1 for black vs white

    Example:
        >>> redmean_distance((0, 0, 0), (255, 255, 255))
        1.0
    """
    r_mean = 0.5 * (pixel_one[0] + pixel_two[0])

    d_r = pixel_one[0] - pixel_two[0]
    d_g = pixel_one[1] - pixel_two[1]
    d_b = pixel_one[2] - pixel_two[2]

    c_squared = (2.0 + r_mean / 256.0) * d_r * d_r
    c_squared += 4.0 * d_g * d_g
    c_squared += (2.0 + (255.0 - r_mean) / 256.0) * d_b * d_b

    return math.sqrt(c_squared) / REDMEAN_MAX


def rgb_to_hsv(pixel: Sequence[int]) -> HSVPixel:
    """
    Convert an 8-bit RGB pixel to HSV.

    Args:
        pixel: (r, g, b) triple with values 0-255

    Returns:
        (hue, saturation, value) with hue in [0, 360), saturation and
        value in [0, 1]
    """
    r = pixel[0] / 255.0
    g = pixel[1] / 255.0
    b = pixel[2] / 255.0

    c_max = max(r, g, b)
    c_min = min(r, g, b)
    delta = c_max - c_min

    if delta == 0:
        hue = 0.0
    elif c_max == r:
        hue = ((g - b) / delta) % 6.0
    elif c_max == g:
        hue = (b - r) / delta + 2.0
    else:
        hue = (r - g) / delta + 4.0

    hue = (hue * 60.0) % 360.0
    saturation = 0.0 if c_max == 0 else delta / c_max

    return hue, saturation, c_max


def hsv_to_rgb(hue: float, saturation: float, value: float) -> Tuple[int, int, int]:
    """
    Convert HSV back to an 8-bit RGB triple.

    The round trip through rgb_to_hsv is not bit-exact; channels may drift
    by a small amount because of 8-bit quantization.

    Args:
        hue: Hue in degrees
        saturation: Saturation in [0, 1]
        value: Value in [0, 1]

    Returns:
        (r, g, b) triple clamped to 0-255
    """
    sector = hue / 60.0
    hi = int(math.floor(sector)) % 6
    f = sector - math.floor(sector)

    value = value * 255.0
    v = _to_channel(value)
    p = _to_channel(value * (1.0 - saturation))
    q = _to_channel(value * (1.0 - f * saturation))
    t = _to_channel(value * (1.0 - (1.0 - f) * saturation))

    if hi == 0:
        return v, t, p
    elif hi == 1:
        return q, v, p
    elif hi == 2:
        return p, v, t
    elif hi == 3:
        return p, q, v
    elif hi == 4:
        return t, p, v
    return v, p, q


def _to_channel(value: float) -> int:
    return min(max(round_half_up(value), 0), 255)
