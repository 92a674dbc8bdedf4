"""
Raster Image Processing Engine

An in-memory 8-bit RGB image store with incremental color statistics, plus
arithmetic, tonal, histogram, spatial filtering, resampling and
connected-component labeling operations on it.
"""

import logging

__version__ = "1.0.0"

from .errors import RasterEngineError, InvalidParameterError, DegenerateGeometryError
from .image import ImageStore, Pixel, Header, PpmFormat, Padding
from .color import rgb_to_hsv, hsv_to_rgb, redmean_distance
from .stats import Histogram
from .resample import ResizeAlgorithm, resize
from .operations import (OpType, combine, gamma_transform, log_transform, negate,
                         histogram_equalization)
from .filters import apply_mask, gaussian_blur, unsharp_mask, apply_sobel, edge_detect
from .ccl import Connectivity, ccl, make_ccl_mask
from .io import read_image, save_image, from_array, to_array
from .config import DEFAULT_CONFIG, load_config
from .pipeline import run_operation, run_pipeline

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "RasterEngineError",
    "InvalidParameterError",
    "DegenerateGeometryError",
    "ImageStore",
    "Pixel",
    "Header",
    "PpmFormat",
    "Padding",
    "rgb_to_hsv",
    "hsv_to_rgb",
    "redmean_distance",
    "Histogram",
    "ResizeAlgorithm",
    "resize",
    "OpType",
    "combine",
    "gamma_transform",
    "log_transform",
    "negate",
    "histogram_equalization",
    "apply_mask",
    "gaussian_blur",
    "unsharp_mask",
    "apply_sobel",
    "edge_detect",
    "Connectivity",
    "ccl",
    "make_ccl_mask",
    "read_image",
    "save_image",
    "from_array",
    "to_array",
    "DEFAULT_CONFIG",
    "load_config",
    "run_operation",
    "run_pipeline",
]
