"""
Spatial filter engine.

Applies square correlation masks to an image with a configurable
out-of-bounds policy, and builds the Gaussian blur, unsharp mask and Sobel
edge filters on top of it.
"""

from typing import Sequence
import logging
import math

import cv2
import numpy as np

from .errors import InvalidParameterError
from .image import ImageStore, Padding
from .operations import OpType, combine

logger = logging.getLogger(__name__)

SOBEL_H = (
     1,  2,  1,
     0,  0,  0,
    -1, -2, -1,
)

SOBEL_H_REV = (
    -1, -2, -1,
     0,  0,  0,
     1,  2,  1,
)

SOBEL_V = (
    1, 0, -1,
    2, 0, -2,
    1, 0, -1,
)

SOBEL_V_REV = (
    -1, 0, 1,
    -2, 0, 2,
    -1, 0, 1,
)

_BORDER_MODES = {
    Padding.ZERO: cv2.BORDER_CONSTANT,
    Padding.REPEAT: cv2.BORDER_REPLICATE,
}


def _mask_to_kernel(mask: Sequence[float]) -> np.ndarray:
    values = np.asarray(mask, dtype=np.float64).reshape(-1)
    size = math.isqrt(values.size)
    if size * size != values.size or size % 2 == 0:
        raise InvalidParameterError(
            f"Mask must be square with an odd side length, got {values.size} weights")
    return values.reshape(size, size)


def _correlate(image: ImageStore, kernel: np.ndarray, padding: Padding) -> np.ndarray:
    """Per-channel sum of neighbor * weight, neighborhood and kernel row-major."""
    src = image.as_array().astype(np.float64)
    return cv2.filter2D(src, -1, kernel, borderType=_BORDER_MODES[padding])


def _validate_blur(sigma: float, kernel_size: int) -> None:
    if sigma <= 0:
        raise InvalidParameterError(f"Sigma value must be greater than 0, cannot be: {sigma:.3f}")
    if kernel_size % 2 == 0:
        raise InvalidParameterError(
            f"Cannot have a blur filter with an even kernel size of {kernel_size}. "
            "Kernel size must be odd.")
    if kernel_size < 3:
        raise InvalidParameterError("Cannot have a kernel size that is less than three")


def apply_mask(image: ImageStore, mask: Sequence[float],
               padding: Padding = Padding.ZERO) -> ImageStore:
    """
    Correlate an image with a square mask.

    Args:
        image: Source image
        mask: Flattened, row-major square mask with an odd side length
        padding: Policy for neighbors outside the image

    Returns:
        Filtered image; sums are rounded to the nearest integer and
        saturate at the 8-bit range
    """
    kernel = _mask_to_kernel(mask)
    filtered = _correlate(image, kernel, padding)
    result = np.clip(np.floor(filtered + 0.5), 0, 255).astype(np.uint8)
    return ImageStore.from_array(result)


def gaussian_kernel(kernel_size: int, sigma: float) -> np.ndarray:
    """
    Normalized 2-D Gaussian weights (sum 1) as a flat row-major array.
    """
    _validate_blur(sigma, kernel_size)
    column = cv2.getGaussianKernel(kernel_size, sigma, cv2.CV_64F)
    kernel = column @ column.T
    return (kernel / kernel.sum()).reshape(-1)


def origin_kernel(kernel_size: int) -> np.ndarray:
    """Identity mask: all weight on the center element."""
    kernel = np.zeros(kernel_size * kernel_size, dtype=np.float64)
    kernel[kernel.size // 2] = 1.0
    return kernel


def gaussian_blur(image: ImageStore, sigma: float, kernel_size: int,
                  padding: Padding = Padding.ZERO) -> ImageStore:
    """
    Blur with a normalized Gaussian kernel.

    Args:
        image: Source image
        sigma: Standard deviation, must be positive
        kernel_size: Odd side length, at least 3
        padding: Policy for neighbors outside the image

    Returns:
        Blurred image

    Example:
        >>> soft = gaussian_blur(img, 1.5, 5, Padding.REPEAT)
    """
    mask = gaussian_kernel(kernel_size, sigma)
    logger.debug("Gaussian blur (sigma=%.3f, size=%d) on %dx%d",
                 sigma, kernel_size, image.width, image.height)
    return apply_mask(image, mask, padding)


def unsharp_mask(image: ImageStore, sigma: float, kernel_size: int, scale: float,
                 padding: Padding = Padding.ZERO) -> ImageStore:
    """
    Sharpen as ``original + scale * (original - blurred)`` in a single mask.
    """
    blur = gaussian_kernel(kernel_size, sigma)
    origin = origin_kernel(kernel_size)
    sharpen = origin + (origin - blur) * scale

    logger.debug("Unsharp mask (sigma=%.3f, size=%d, scale=%.3f) on %dx%d",
                 sigma, kernel_size, scale, image.width, image.height)
    return apply_mask(image, sharpen, padding)


def apply_sobel(image: ImageStore, kernel: Sequence[int] = SOBEL_H,
                padding: Padding = Padding.REPEAT) -> ImageStore:
    """
    Apply a 3x3 gradient kernel, clamping every channel to [0, 255].
    """
    weights = _mask_to_kernel(kernel)
    if weights.shape != (3, 3):
        raise InvalidParameterError(f"Sobel kernel must be 3x3, got {weights.shape}")

    gradient = _correlate(image, weights, padding)
    return ImageStore.from_array(np.clip(np.rint(gradient), 0, 255).astype(np.uint8))


def edge_detect(image: ImageStore) -> ImageStore:
    """
    Sobel edge map: horizontal and vertical gradients added with saturation.
    """
    horizontal = apply_sobel(image, SOBEL_H, Padding.REPEAT)
    vertical = apply_sobel(image, SOBEL_V, Padding.REPEAT)
    return combine(horizontal, vertical, OpType.ADD)
