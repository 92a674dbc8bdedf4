"""
Brightness histogram used for histogram equalization.

Samples the HSV value channel of an image into quantized integer keys and
derives a cumulative-distribution equalization mapping from it. A histogram
captured from one image can be applied to another to match its brightness
distribution.
"""

from bisect import bisect_right
from typing import Dict, Iterable, Optional

from .color import V_MULT, rgb_to_hsv


class Histogram:
    """
    Ordered mapping from quantized brightness key to sample count.

    Keys are ``int(value * V_MULT)`` where value is the HSV value channel in
    [0, 1]. ``min_key`` and ``max_key`` track the extremes seen so far.

    Example:
        >>> hist = Histogram.from_image(img)
        >>> mapping = hist.equalize()
    """

    def __init__(self):
        self.data: Dict[int, float] = {}
        self.min_key: Optional[int] = None
        self.max_key: Optional[int] = None
        self.pixel_count = 0

    @classmethod
    def from_image(cls, image) -> "Histogram":
        """Build a histogram over the value channel of every pixel."""
        histogram = cls()
        for index in range(image.width * image.height):
            histogram.add(rgb_to_hsv(image.pixel_at(index))[2])
        return histogram

    @classmethod
    def from_values(cls, values: Iterable[float]) -> "Histogram":
        histogram = cls()
        for value in values:
            histogram.add(value)
        return histogram

    @staticmethod
    def quantize(value: float) -> int:
        """Trade precision for a compact integer bucket key."""
        return int(value * V_MULT)

    def add(self, value: float, count: int = 1) -> None:
        """Record ``count`` samples of the given value-channel reading."""
        key = self.quantize(value)

        if self.max_key is None or key > self.max_key:
            self.max_key = key
        if self.min_key is None or key < self.min_key:
            self.min_key = key

        self.data[key] = self.data.get(key, 0.0) + float(count)
        self.pixel_count += count

    def intensities(self):
        """Keys in ascending order."""
        return sorted(self.data)

    def equalize(self) -> Dict[int, float]:
        """
        Compute the CDF-based equalization mapping.

        Returns:
            Dictionary mapping each key (ascending) to
            ``running_cdf * max_key``
        """
        mapping: Dict[int, float] = {}
        if not self.pixel_count:
            return mapping

        running_cdf = 0.0
        for key in self.intensities():
            running_cdf += self.data[key] / self.pixel_count
            mapping[key] = running_cdf * self.max_key

        return mapping

    def __len__(self):
        return len(self.data)

    def __eq__(self, other):
        if not isinstance(other, Histogram):
            return NotImplemented
        return (self.data == other.data and self.pixel_count == other.pixel_count
                and self.min_key == other.min_key and self.max_key == other.max_key)


class EqualizationMap:
    """
    Lookup wrapper around an equalization mapping.

    Keys missing from the mapping (possible when the histogram came from a
    different image) take the value of the greatest known key below them,
    or 0 when there is none.
    """

    def __init__(self, mapping: Dict[int, float]):
        self._keys = sorted(mapping)
        self._values = [mapping[k] for k in self._keys]

    def __getitem__(self, key: int) -> float:
        position = bisect_right(self._keys, key)
        if position == 0:
            return 0.0
        return self._values[position - 1]
