"""
Error types raised by the raster engine.

All errors derive from ValueError so callers that already guard image
helpers with ``except ValueError`` keep working.
"""


class RasterEngineError(ValueError):
    """Base class for engine failures."""


class InvalidParameterError(RasterEngineError):
    """A dimension, kernel, sigma or other parameter is out of range."""


class DegenerateGeometryError(RasterEngineError):
    """A geometric operation was asked to produce an empty image."""
