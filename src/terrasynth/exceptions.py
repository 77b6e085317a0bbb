"""Custom exceptions for height-field synthesis."""


class TerrainSynthError(Exception):
    """Base exception for terrain synthesis errors."""

    pass


class ConfigurationError(TerrainSynthError):
    """Raised when fBm parameters, a grid spec, or a band list is invalid."""

    pass


class BuildCancelledError(TerrainSynthError):
    """Raised when a height-field build is superseded by a newer request."""

    pass


class MapFormatError(TerrainSynthError, ValueError):
    """Raised when a saved height-field file is malformed."""

    pass
