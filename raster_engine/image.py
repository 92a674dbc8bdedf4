"""
Image store: the in-memory 8-bit RGB raster shared by every operation.

Holds a flat, row-major, top-left-origin buffer of 3 * width * height bytes
together with an incrementally maintained color histogram and per-channel
usage counts. Statistics are updated only through the set-pixel primitive,
so the dominant (background) color and the effective maximum channel value
can be answered without rescanning the buffer.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, NamedTuple, Optional, Sequence, Tuple
import logging

import numpy as np

from .errors import InvalidParameterError

logger = logging.getLogger(__name__)

PIXEL_SIZE = 3


class Pixel(NamedTuple):
    """One (r, g, b) triple of 8-bit channel values."""
    r: int
    g: int
    b: int


BLACK_PIXEL = Pixel(0, 0, 0)


class PpmFormat(Enum):
    """Format tag carried in the image header."""
    P1 = "P1"  # bitmap, ASCII
    P2 = "P2"  # grayscale, ASCII
    P3 = "P3"  # RGB, ASCII
    P4 = "P4"  # bitmap, binary
    P5 = "P5"  # grayscale, binary
    P6 = "P6"  # RGB, binary


class Padding(Enum):
    """Out-of-bounds policy for neighborhood reads."""
    ZERO = 0
    REPEAT = 1


@dataclass
class Header:
    """
    Metadata kept alongside the pixels for round-trip fidelity.

    Processing code never reads it; every algorithm assumes 8-bit,
    3-channel samples.
    """
    width: int
    height: int
    max_value: int = 255
    format: PpmFormat = field(default=PpmFormat.P6)

    def __post_init__(self):
        if not 0 <= self.max_value <= 255:
            raise InvalidParameterError(
                f"Declared max value must be within 0-255, got {self.max_value}")


def _validate_dimensions(width, height) -> Tuple[int, int]:
    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise InvalidParameterError(f"Image {name} must be an integer, got {value!r}")
        if value <= 0:
            raise InvalidParameterError(f"Image {name} must be positive, got {value}")
    return int(width), int(height)


def _as_pixel(pixel: Sequence[int]) -> Pixel:
    if len(pixel) != PIXEL_SIZE:
        raise InvalidParameterError(f"Pixel must have {PIXEL_SIZE} channels, got {len(pixel)}")
    r, g, b = (int(c) for c in pixel)
    for c in (r, g, b):
        if not 0 <= c <= 255:
            raise InvalidParameterError(f"Channel value out of range 0-255: {c}")
    return Pixel(r, g, b)


class ImageStore:
    """
    Fixed-size grid of RGB pixels with live color statistics.

    Args:
        width: Number of columns, must be positive
        height: Number of rows, must be positive
        keep_statistics: Maintain the histogram and channel-usage maps on
            every pixel write. Disable when every pixel is about to be
            overwritten and the statistics are never queried.

    Example:
        >>> img = ImageStore(2, 2)
        >>> img.set_pixel_at(1, 0, (255, 0, 0))
        >>> img.get_pixel(1, 0)
        Pixel(r=255, g=0, b=0)
    """

    def __init__(self, width: int, height: int, keep_statistics: bool = True):
        width, height = _validate_dimensions(width, height)

        self.header = Header(width, height)
        self._pixels = np.zeros(PIXEL_SIZE * width * height, dtype=np.uint8)
        self._histogram: Counter = Counter({BLACK_PIXEL: width * height})
        self._channel_usage: Counter = Counter()
        # channel usage only counts slots that have been written
        self._written = np.zeros(width * height, dtype=bool)
        self._keep_statistics = keep_statistics

    @classmethod
    def from_array(cls, pixels: np.ndarray, header: Optional[Header] = None,
                   keep_statistics: bool = True) -> "ImageStore":
        """
        Build a new store from an (H, W, 3) uint8 array.

        Statistics are computed from the whole buffer, exactly as if every
        pixel had been written once through set_pixel. keep_statistics only
        governs maintenance on later pixel writes.
        """
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] != PIXEL_SIZE:
            raise InvalidParameterError(f"Pixel array must have shape (H, W, 3), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise InvalidParameterError(f"Pixel array must be uint8, got {pixels.dtype}")

        height, width = pixels.shape[:2]
        image = cls(width, height, keep_statistics=keep_statistics)
        image._pixels = np.ascontiguousarray(pixels).reshape(-1).copy()
        image._written[:] = True
        if header is not None:
            image.header = Header(width, height, header.max_value, header.format)
        image._rebuild_statistics()

        return image

    # ------------------------------------------------------------------
    # Geometry and metadata
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self.header.width

    @property
    def height(self) -> int:
        return self.header.height

    @property
    def data(self) -> bytes:
        """Raw RGB-interleaved buffer, row-major from the top-left corner."""
        return self._pixels.tobytes()

    def as_array(self) -> np.ndarray:
        """Read-only (H, W, 3) view of the pixel buffer."""
        view = self._pixels.reshape(self.height, self.width, PIXEL_SIZE)
        view.flags.writeable = False
        return view

    def copy(self) -> "ImageStore":
        clone = ImageStore(self.width, self.height, keep_statistics=self._keep_statistics)
        clone.header = Header(self.width, self.height, self.header.max_value, self.header.format)
        clone._pixels = self._pixels.copy()
        clone._histogram = Counter(self._histogram)
        clone._channel_usage = Counter(self._channel_usage)
        clone._written = self._written.copy()
        return clone

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    @property
    def keep_statistics(self) -> bool:
        return self._keep_statistics

    @keep_statistics.setter
    def keep_statistics(self, enabled: bool) -> None:
        if enabled and not self._keep_statistics:
            # maps went stale while disabled
            self._rebuild_statistics()
        self._keep_statistics = enabled

    @property
    def histogram(self) -> Dict[Pixel, int]:
        """Snapshot of the pixel -> occurrence count map."""
        return dict(self._histogram)

    @property
    def channel_usage(self) -> Dict[int, int]:
        """Snapshot of the channel value -> slot count map."""
        return dict(self._channel_usage)

    def background(self) -> Pixel:
        """
        Return the dominant color of the image.

        Ties between equally frequent colors resolve to the
        lexicographically smallest pixel.
        """
        return min(self._histogram.items(), key=lambda item: (-item[1], item[0]))[0]

    def max_value(self) -> int:
        """Greatest channel value in use, or 255 before any pixel is written."""
        if not self._channel_usage:
            return 255
        return max(self._channel_usage)

    def _rebuild_statistics(self) -> None:
        flat = self._pixels.reshape(-1, PIXEL_SIZE)
        colors, counts = np.unique(flat, axis=0, return_counts=True)
        self._histogram = Counter({
            Pixel(int(c[0]), int(c[1]), int(c[2])): int(n) for c, n in zip(colors, counts)
        })
        usage = np.bincount(flat[self._written].reshape(-1), minlength=256)
        self._channel_usage = Counter({
            int(value): int(count) for value, count in enumerate(usage) if count
        })

    def _remove_from_statistics(self, pixel: Pixel, written: bool) -> None:
        count = self._histogram.get(pixel)
        if count is None:
            return
        if count == 1:
            del self._histogram[pixel]
        else:
            self._histogram[pixel] = count - 1

        if not written:
            return

        for channel in pixel:
            used = self._channel_usage.get(channel)
            if used is None:
                continue
            if used == 1:
                del self._channel_usage[channel]
            else:
                self._channel_usage[channel] = used - 1

    def _add_to_statistics(self, pixel: Pixel) -> None:
        self._histogram[pixel] += 1
        for channel in pixel:
            self._channel_usage[channel] += 1

    # ------------------------------------------------------------------
    # Pixel access
    # ------------------------------------------------------------------

    def set_pixel(self, index: int, pixel: Sequence[int]) -> None:
        """
        Write the pixel at a linear pixel index.

        This is the single mutation primitive; coordinate writes delegate
        here so the statistics invariant holds for every write.
        """
        if not 0 <= index < self.width * self.height:
            raise InvalidParameterError(
                f"Pixel index {index} out of bounds for {self.width}x{self.height} image")
        pixel = _as_pixel(pixel)
        offset = index * PIXEL_SIZE

        if self._keep_statistics:
            self._remove_from_statistics(self.pixel_at(index), bool(self._written[index]))

        self._pixels[offset:offset + PIXEL_SIZE] = pixel
        self._written[index] = True

        if self._keep_statistics:
            self._add_to_statistics(pixel)

    def set_pixel_at(self, x: int, y: int, pixel: Sequence[int]) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise InvalidParameterError(
                f"Coordinate ({x}, {y}) out of bounds for {self.width}x{self.height} image")
        self.set_pixel(x + y * self.width, pixel)

    def pixel_at(self, index: int) -> Pixel:
        """Pixel at a linear pixel index; the caller guarantees bounds."""
        offset = index * PIXEL_SIZE
        r, g, b = self._pixels[offset:offset + PIXEL_SIZE]
        return Pixel(int(r), int(g), int(b))

    def get_pixel(self, x: int, y: int) -> Optional[Pixel]:
        """Pixel at (x, y), or None when the coordinate is out of bounds."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        return self.pixel_at(x + y * self.width)

    def neighborhood(self, x: int, y: int, size: int,
                     padding: Padding = Padding.ZERO) -> Tuple[Pixel, ...]:
        """
        Centered size x size neighborhood of (x, y) in row-major order.

        Args:
            x, y: Center coordinate
            size: Odd side length
            padding: ZERO yields black outside the image, REPEAT clamps
                coordinates to the nearest edge pixel

        Returns:
            Tuple of size * size pixels, rows top to bottom
        """
        if size <= 0 or size % 2 == 0:
            raise InvalidParameterError(f"Neighborhood size must be odd and positive, got {size}")

        half = (size - 1) // 2
        matrix = []
        for ny in range(y - half, y + half + 1):
            for nx in range(x - half, x + half + 1):
                if padding is Padding.REPEAT:
                    cx = min(max(nx, 0), self.width - 1)
                    cy = min(max(ny, 0), self.height - 1)
                    matrix.append(self.pixel_at(cx + cy * self.width))
                else:
                    pixel = self.get_pixel(nx, ny)
                    matrix.append(BLACK_PIXEL if pixel is None else pixel)

        return tuple(matrix)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def __eq__(self, other):
        if not isinstance(other, ImageStore):
            return NotImplemented
        return (self.width == other.width and self.height == other.height
                and np.array_equal(self._pixels, other._pixels))

    __hash__ = None

    def __repr__(self):
        return f"ImageStore({self.width}x{self.height}, max_value={self.max_value()})"
