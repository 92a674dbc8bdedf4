"""
Connected-component labeling with tolerant color equivalence.

Two raster passes: the first assigns provisional labels and records which
labels touch, the second replaces each label with the smallest label of its
equivalence class. Pixels of the dominant (background) color stay
unlabeled.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple
import logging

import numpy as np

from .color import redmean_distance
from .errors import InvalidParameterError
from .image import ImageStore

logger = logging.getLogger(__name__)

UNLABELED = 0

NORTH = (0, -1)
NORTH_EAST = (1, -1)
EAST = (1, 0)
SOUTH_EAST = (1, 1)
SOUTH = (0, 1)
SOUTH_WEST = (-1, 1)
WEST = (-1, 0)
NORTH_WEST = (-1, -1)


class Connectivity(Enum):
    """
    Neighbor set examined for each pixel.

    FOUR and EIGHT look only at neighbors already visited in raster order.
    NOS looks in all eight directions and is experimental.
    """
    FOUR = 4
    EIGHT = 8
    NOS = 0


_SHIFTS = {
    Connectivity.FOUR: (WEST, NORTH),
    Connectivity.EIGHT: (WEST, NORTH_WEST, NORTH, NORTH_EAST),
    Connectivity.NOS: (NORTH, NORTH_EAST, EAST, SOUTH_EAST, SOUTH, SOUTH_WEST, WEST, NORTH_WEST),
}


class LabelEquivalence:
    """
    Disjoint-set forest over provisional labels.

    Unions always attach the larger root under the smaller one, so the root
    of every class is its smallest label.
    """

    def __init__(self):
        self._parent: Dict[int, int] = {}

    def make_label(self, label: int) -> None:
        self._parent[label] = label

    def find(self, label: int) -> int:
        root = label
        while self._parent[root] != root:
            root = self._parent[root]
        # path compression
        while self._parent[label] != root:
            self._parent[label], label = root, self._parent[label]
        return root

    def union(self, first: int, second: int) -> int:
        root_a = self.find(first)
        root_b = self.find(second)
        if root_a == root_b:
            return root_a
        if root_b < root_a:
            root_a, root_b = root_b, root_a
        self._parent[root_b] = root_a
        return root_a

    def __contains__(self, label: int) -> bool:
        return label in self._parent


def is_neighbor_equivalent(pixel, neighbor, tolerance: float) -> bool:
    """
    Exact match at tolerance >= 1, otherwise redmean distance <= 1 - tolerance.
    """
    if tolerance >= 1.0:
        return tuple(pixel) == tuple(neighbor)
    return redmean_distance(pixel, neighbor) <= 1.0 - tolerance


def _neighbors(x: int, y: int, width: int, height: int,
               connectivity: Connectivity) -> List[Tuple[int, int]]:
    valid = []
    for dx, dy in _SHIFTS[connectivity]:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height:
            valid.append((nx, ny))
    return valid


def ccl(image: ImageStore, connectivity: Connectivity = Connectivity.EIGHT,
        tolerance: float = 1.0) -> Tuple[np.ndarray, int]:
    """
    Label connected regions of equivalent color.

    Args:
        image: Source image
        connectivity: Neighbor rule
        tolerance: 1.0 requires exact color matches; lower values merge
            perceptually close colors

    Returns:
        Tuple of:
        - Flat label array (one entry per pixel, raster order); 0 marks
          background
        - Number of distinct canonical labels

    Example:
        >>> labels, count = ccl(img, Connectivity.FOUR, 1.0)
        >>> regions = labels.reshape(img.height, img.width)
    """
    if not 0.0 <= tolerance <= 1.0:
        raise InvalidParameterError(f"Tolerance must be within [0, 1], got {tolerance}")

    width, height = image.width, image.height
    pixels = [tuple(p) for p in image.as_array().reshape(-1, 3).tolist()]
    background = tuple(image.background())

    labels = np.full(width * height, UNLABELED, dtype=np.int64)
    equivalence = LabelEquivalence()
    next_label = UNLABELED + 1

    # first pass
    for y in range(height):
        for x in range(width):
            index = x + y * width
            pixel = pixels[index]
            if pixel == background:
                continue

            neighbor_labels = set()
            for nx, ny in _neighbors(x, y, width, height, connectivity):
                n_index = nx + ny * width
                neighbor_label = labels[n_index]
                if neighbor_label == UNLABELED:
                    continue
                if is_neighbor_equivalent(pixel, pixels[n_index], tolerance):
                    neighbor_labels.add(int(neighbor_label))

            if not neighbor_labels:
                equivalence.make_label(next_label)
                labels[index] = next_label
                next_label += 1
            else:
                smallest = min(neighbor_labels)
                labels[index] = smallest
                for label in neighbor_labels:
                    equivalence.union(smallest, label)

    # second pass
    canonical = set()
    for index in range(width * height):
        label = labels[index]
        if label != UNLABELED:
            root = equivalence.find(int(label))
            labels[index] = root
            canonical.add(root)

    logger.debug("CCL (%s, tolerance=%.3f) on %dx%d: %d provisional, %d canonical labels",
                 connectivity.name, tolerance, width, height, next_label - 1, len(canonical))
    return labels, len(canonical)


def make_ccl_mask(image: ImageStore, connectivity: Connectivity = Connectivity.EIGHT,
                  tolerance: float = 1.0,
                  rng: Optional[np.random.Generator] = None) -> ImageStore:
    """
    Render a false-color mask of the labeled regions.

    Background pixels keep the image's background color; every canonical
    label gets a pseudo-random color drawn from ``rng``.

    Args:
        image: Source image
        connectivity: Neighbor rule
        tolerance: Color equivalence tolerance in [0, 1]
        rng: Random generator; a fresh unseeded one when None

    Returns:
        Mask image of the same size, built without live statistics
    """
    if rng is None:
        rng = np.random.default_rng()

    labels, _ = ccl(image, connectivity, tolerance)

    palette = np.zeros((int(labels.max()) + 1, 3), dtype=np.uint8)
    palette[UNLABELED] = image.background()
    for label in np.unique(labels):
        if label != UNLABELED:
            palette[label] = rng.integers(0, 255, size=3, endpoint=True)

    colors = palette[labels].reshape(image.height, image.width, 3)
    return ImageStore.from_array(colors, keep_statistics=False)
