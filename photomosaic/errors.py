"""Fatal error taxonomy.

Every failure aborts the run. Library code raises these; only the CLI maps
them to a process exit status via :attr:`MosaicError.exit_code`.
"""

from __future__ import annotations


class MosaicError(Exception):
    """Base class for all fatal mosaic errors."""

    exit_code: int = 3


class ConfigurationError(MosaicError):
    """The run cannot start with the given settings or inputs."""


class InsufficientThumbnailsError(ConfigurationError):
    """Fewer than two usable thumbnails are available for matching."""

    exit_code = 1


class MosaicIOError(MosaicError):
    """A file could not be read or written."""


class ImageReadError(MosaicIOError):
    """An image file could not be read."""


class TargetImageError(ImageReadError):
    """The target image could not be read."""

    exit_code = 2


class OutputWriteError(MosaicIOError):
    """The output image could not be written."""


class FormatError(MosaicError):
    """Bytes were read but could not be understood."""


class CorruptCacheError(FormatError):
    """The persisted signature cache is malformed."""


class ImageDecodeError(FormatError):
    """Image bytes could not be decoded."""
