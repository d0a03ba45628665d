"""Parsing and validation of HTTP ``Range`` request headers (bytes unit only)."""

from __future__ import annotations
import logging
from typing import Sequence

from .model import (
    ByteRange, ClosedRange, OpenRange, RawRange, SuffixRange,
    MalformedRangeError, RangeNotSatisfiableError,
)

logger = logging.getLogger(__name__)

RANGE_UNIT = "bytes"


def _parse_int(text: str, header: str) -> int:
    # int() would also take signs, underscores and inner whitespace
    if not text.isascii() or not text.isdigit():
        raise MalformedRangeError(f"Invalid byte position {text!r} in {header!r}")
    return int(text)


def _parse_spec(spec: str, header: str) -> RawRange:
    first, sep, last = spec.partition("-")
    if not sep:
        raise MalformedRangeError(f"Missing '-' in range {spec!r}")
    first, last = first.strip(), last.strip()
    if not first and not last:
        raise MalformedRangeError(f"Empty range {spec!r}")
    if not first:
        return SuffixRange(_parse_int(last, header))
    start = _parse_int(first, header)
    if not last:
        return OpenRange(start)
    return ClosedRange(start, _parse_int(last, header))


def parse_range_header(header: str) -> list[RawRange]:
    """Parse a raw ``Range`` value such as ``bytes=0-499`` into RawRanges.

    The result is independent of any file: ranges may still be out of bounds
    or inverted, which is for :func:`validate_ranges` to decide. A
    comma-separated list is accepted here; empty list elements are skipped.

    Raises MalformedRangeError when the unit is not ``bytes``, the value is
    empty or any element is not a valid byte-range-spec.
    """
    unit, sep, value = header.strip().partition("=")
    if not sep:
        raise MalformedRangeError(f"Missing '=' in Range header {header!r}")
    if unit.strip().lower() != RANGE_UNIT:
        raise MalformedRangeError(f"Unsupported range unit {unit.strip()!r}")

    specs = [s.strip() for s in value.split(",")]
    specs = [s for s in specs if s]
    if not specs:
        raise MalformedRangeError(f"No ranges in Range header {header!r}")
    return [_parse_spec(s, header) for s in specs]


def resolve_range(raw: RawRange, length: int) -> ByteRange:
    """Bind one RawRange to a resource of ``length`` bytes."""
    if isinstance(raw, SuffixRange):
        if length == 0 or raw.length == 0:
            raise RangeNotSatisfiableError(f"Suffix range of {raw.length} bytes is not satisfiable", length)
        return ByteRange(max(0, length - raw.length), length - 1)

    if raw.start >= length:
        raise RangeNotSatisfiableError(f"Range start {raw.start} is beyond resource length {length}", length)
    if isinstance(raw, OpenRange):
        return ByteRange(raw.start, length - 1)
    if raw.end < raw.start:
        raise RangeNotSatisfiableError(f"Range end {raw.end} is before start {raw.start}", length)
    return ByteRange(raw.start, min(raw.end, length - 1))


def validate_ranges(ranges: Sequence[RawRange], length: int) -> ByteRange:
    """Return the single ByteRange to serve, or raise RangeNotSatisfiableError.

    Multi-range requests are rejected outright instead of being served as
    ``multipart/byteranges`` or degraded to their first range.
    """
    if not ranges:
        raise RangeNotSatisfiableError("No ranges requested", length)
    if len(ranges) > 1:
        raise RangeNotSatisfiableError(f"Multiple ranges are not supported ({len(ranges)} requested)", length)
    byte_range = resolve_range(ranges[0], length)
    logger.debug("Resolved %r against %d bytes to %d-%d", ranges[0], length, byte_range.start, byte_range.end)
    return byte_range
