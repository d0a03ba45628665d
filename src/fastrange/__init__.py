"""fastrange - stream a directory of media files by index, with byte-range support."""

__version__ = "0.1.0"

from .core.model import (                                              # re-export
    ByteRange, Resource, FastRangeError, ResourceNotFoundError,
    MalformedRangeError, RangeNotSatisfiableError, MediaIOError,
)
from .core.catalog import Catalog, list_files
from .core.ranges import parse_range_header, validate_ranges
from .config import ServerSettings
from .app import create_app


__all__ = [
    "create_app", "ServerSettings", "Catalog", "list_files",
    "parse_range_header", "validate_ranges",
    "ByteRange", "Resource", "FastRangeError", "ResourceNotFoundError",
    "MalformedRangeError", "RangeNotSatisfiableError", "MediaIOError",
]
