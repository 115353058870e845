"""Exceptions raised while reading an OSM PBF extract."""


class OsmRestError(Exception):
    """Base class for all errors raised by this package."""


class DecodeError(OsmRestError):
    """The source file is truncated or its binary structure is malformed."""


class FileUnavailable(DecodeError):
    """The source file is missing or cannot be opened for reading."""
