"""
Configuration-driven dispatch of engine operations.

Maps operation names to the engine entry points, reading each operation's
parameters from its configuration section.
"""

from enum import Enum
from typing import Any, Dict, Iterable, Optional, Type, Union
import logging

import numpy as np

from .ccl import Connectivity, make_ccl_mask
from .config import DEFAULT_CONFIG, merge_config
from .errors import InvalidParameterError
from .filters import edge_detect, gaussian_blur, unsharp_mask
from .image import ImageStore, Padding
from .operations import (OpType, combine, gamma_transform, histogram_equalization,
                         log_transform, negate)
from .resample import ResizeAlgorithm, resize
from .stats import Histogram

logger = logging.getLogger(__name__)

OPERATIONS = (
    'resize', 'combine', 'gamma', 'log', 'negate', 'equalize',
    'gaussian_blur', 'unsharp_mask', 'edge_detect', 'ccl',
)


def parse_enum(enum_cls: Type[Enum], value: Union[str, Enum]) -> Enum:
    """Accept an enum member or its name in any case."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls[str(value).upper()]
    except KeyError:
        names = ", ".join(m.name.lower() for m in enum_cls)
        raise InvalidParameterError(
            f"Unknown {enum_cls.__name__}: {value}. Supported: {names}") from None


def run_operation(image: ImageStore, name: str, cfg: Optional[Dict[str, Any]] = None,
                  operand: Optional[ImageStore] = None) -> ImageStore:
    """
    Run a single named operation.

    Args:
        image: Source image
        name: One of OPERATIONS
        cfg: Section for this operation; missing keys use DEFAULT_CONFIG
        operand: Second image for 'combine', or the reference image whose
            histogram 'equalize' should match

    Returns:
        New ImageStore

    Example:
        >>> out = run_operation(img, 'gaussian_blur', {'sigma': 2.0, 'kernel_size': 5})
    """
    if name not in OPERATIONS:
        raise InvalidParameterError(
            f"Unknown operation: {name}. Supported: {', '.join(OPERATIONS)}")

    cfg = merge_config(DEFAULT_CONFIG[name], cfg)
    logger.debug("Running %s on %dx%d", name, image.width, image.height)

    if name == 'resize':
        width = image.width if cfg.get('width') is None else cfg.get('width')
        height = image.height if cfg.get('height') is None else cfg.get('height')
        return resize(image, width, height, parse_enum(ResizeAlgorithm, cfg.get('algorithm')))
    elif name == 'combine':
        if operand is None:
            raise InvalidParameterError("Operation 'combine' requires a second image")
        return combine(image, operand, parse_enum(OpType, cfg.get('operator')))
    elif name == 'gamma':
        return gamma_transform(image, cfg.get('gamma'), cfg.get('c'))
    elif name == 'log':
        return log_transform(image, cfg.get('c'), cfg.get('base'))
    elif name == 'negate':
        return negate(image)
    elif name == 'equalize':
        histogram = Histogram.from_image(operand) if operand is not None else None
        return histogram_equalization(image, histogram)
    elif name == 'gaussian_blur':
        return gaussian_blur(image, cfg.get('sigma'), cfg.get('kernel_size'),
                             parse_enum(Padding, cfg.get('padding')))
    elif name == 'unsharp_mask':
        return unsharp_mask(image, cfg.get('sigma'), cfg.get('kernel_size'),
                            cfg.get('scale'), parse_enum(Padding, cfg.get('padding')))
    elif name == 'edge_detect':
        return edge_detect(image)
    else:
        seed = cfg.get('seed')
        rng = np.random.default_rng(seed)
        return make_ccl_mask(image, parse_enum(Connectivity, cfg.get('connectivity')),
                             cfg.get('tolerance'), rng)


def run_pipeline(image: ImageStore, steps: Iterable[Union[str, Dict[str, Any]]],
                 cfg: Optional[Dict[str, Any]] = None) -> ImageStore:
    """
    Apply a sequence of operations, feeding each result to the next.

    Args:
        image: Source image
        steps: Operation names, or dicts with an 'op' key plus parameter
            overrides (and an optional 'operand' image)
        cfg: Full configuration (as from load_config) supplying each
            operation's section

    Returns:
        Result of the last step; a copy of the input for an empty pipeline
    """
    cfg = merge_config(DEFAULT_CONFIG, cfg)
    result = image.copy()

    for step in steps:
        if isinstance(step, str):
            step = {'op': step}
        step = dict(step)
        name = step.pop('op', None)
        operand = step.pop('operand', None)
        if name is None:
            raise InvalidParameterError(f"Pipeline step is missing 'op': {step}")
        if name not in OPERATIONS:
            raise InvalidParameterError(
                f"Unknown operation: {name}. Supported: {', '.join(OPERATIONS)}")

        section = merge_config(cfg.get(name, {}), step)
        result = run_operation(result, name, section, operand=operand)

    return result
