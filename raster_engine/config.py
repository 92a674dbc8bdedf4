"""
Default parameters for the engine's configurable operations.

Each operation reads its own section with ``cfg.get(key, default)``; a JSON
file can override any subset of the defaults.
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    'resize': {
        'width': None,
        'height': None,
        'algorithm': 'nearest_neighbor',
    },
    'combine': {
        'operator': 'add',
    },
    'gamma': {
        'gamma': 1.0,
        'c': None,
    },
    'log': {
        'c': None,
        'base': 10.0,
    },
    'negate': {},
    'equalize': {},
    'gaussian_blur': {
        'sigma': 1.0,
        'kernel_size': 3,
        'padding': 'zero',
    },
    'unsharp_mask': {
        'sigma': 1.0,
        'kernel_size': 3,
        'scale': 1.0,
        'padding': 'zero',
    },
    'edge_detect': {},
    'ccl': {
        'connectivity': 'eight',
        'tolerance': 1.0,
        'seed': None,
    },
}


def merge_config(base: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Recursively merge ``overrides`` over a copy of ``base``.

    Example:
        >>> cfg = merge_config(DEFAULT_CONFIG, {'gamma': {'gamma': 2.2}})
        >>> cfg['gamma']['gamma']
        2.2
    """
    merged = deepcopy(base)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load a JSON configuration file merged over DEFAULT_CONFIG.

    Args:
        path: JSON file path; the defaults alone when None

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a JSON object
    """
    if path is None:
        return deepcopy(DEFAULT_CONFIG)

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, 'r', encoding='utf-8') as fh:
        overrides = json.load(fh)

    if not isinstance(overrides, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")

    return merge_config(DEFAULT_CONFIG, overrides)
