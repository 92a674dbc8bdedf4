"""
Image I/O boundary for the raster engine.

Converts between numpy arrays or image files and ImageStore objects while
enforcing the byte layout the engine expects: 3 * width * height bytes,
row-major from the top-left corner, RGB interleaved, samples <= 255.
"""

from pathlib import Path
from typing import Optional, Union
import logging

import cv2
import numpy as np

from .image import Header, ImageStore, PpmFormat

logger = logging.getLogger(__name__)


def from_array(img: np.ndarray, header: Optional[Header] = None) -> ImageStore:
    """
    Wrap an RGB array in a new ImageStore.

    Args:
        img: RGB image with shape (H, W, 3); uint8, or float in range [0, 1]
        header: Optional metadata to carry along

    Returns:
        ImageStore holding a copy of the pixels

    Raises:
        ValueError: If the array is not a valid 3-channel image

    Example:
        >>> store = from_array(np.zeros((4, 4, 3), dtype=np.uint8))
    """
    if not isinstance(img, np.ndarray):
        raise ValueError("Image must be a numpy array")

    if len(img.shape) != 3 or img.shape[2] != 3:
        raise ValueError("Image must have shape (H, W, 3)")

    if img.dtype != np.uint8:
        if img.dtype == np.float32 or img.dtype == np.float64:
            # Assume float images are in range [0, 1]
            img = (img * 255).clip(0, 255).astype(np.uint8)
        else:
            img = img.clip(0, 255).astype(np.uint8)

    return ImageStore.from_array(img, header=header)


def to_array(image: ImageStore) -> np.ndarray:
    """Copy of the pixels as an (H, W, 3) uint8 RGB array."""
    return np.array(image.as_array())


def read_image(path: Union[str, Path]) -> ImageStore:
    """
    Read an RGB image from file path.

    Args:
        path: Path to image file (any format OpenCV decodes, PPM included)

    Returns:
        ImageStore with a P6 header

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If image cannot be read or is not valid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    # Read image using OpenCV (BGR format)
    img_bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)

    if img_bgr is None:
        raise ValueError(f"Could not read image from: {path}")

    if img_bgr.dtype != np.uint8:
        raise ValueError(f"Only 8-bit images are supported, got {img_bgr.dtype}: {path}")

    img_rgb = cv2.cvtColor(img_bgr, cv2.COLOR_BGR2RGB)

    height, width = img_rgb.shape[:2]
    logger.debug("Read %dx%d image from %s", width, height, path)
    return ImageStore.from_array(img_rgb, header=Header(width, height, 255, PpmFormat.P6))


def save_image(image: ImageStore, path: Union[str, Path]) -> None:
    """
    Save an ImageStore to file path.

    The format follows the file extension (``.ppm`` writes binary P6).

    Raises:
        ValueError: If the image could not be encoded or written
    """
    path = Path(path)

    # Create output directory if it doesn't exist
    path.parent.mkdir(parents=True, exist_ok=True)

    img_bgr = cv2.cvtColor(to_array(image), cv2.COLOR_RGB2BGR)

    ext = path.suffix.lower()
    if ext == '.png':
        encode_params = [cv2.IMWRITE_PNG_COMPRESSION, 9]
    elif ext in ['.ppm', '.pgm', '.pbm', '.pnm']:
        encode_params = [cv2.IMWRITE_PXM_BINARY, 1]
    else:
        encode_params = []

    success = cv2.imwrite(str(path), img_bgr, encode_params)

    if not success:
        raise ValueError(f"Failed to save image to: {path}")

    logger.debug("Saved %dx%d image to %s", image.width, image.height, path)
