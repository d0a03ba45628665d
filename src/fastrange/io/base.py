"""Shared constants and error mapping for the I/O layer."""

from ..core.model import (
    MalformedRangeError, RangeNotSatisfiableError, ResourceNotFoundError,
)


class RangeNotSupportedError(RuntimeError):
    """Raised when a window is requested but the server does not advertise byte ranges."""


DEFAULT_CHUNK_SIZE = 64 * 1024  # 64 KB


def total_from_content_range(value: str | None) -> int | None:
    """Return the complete length from ``bytes a-b/L`` or ``bytes */L``."""
    if not value or "/" not in value:
        return None
    total = value.rsplit("/", 1)[1].strip()
    return int(total) if total.isdigit() else None


def raise_for_status(status_code: int, index: int, headers) -> None:
    """Map a fastrange error status back onto the exception taxonomy."""
    if status_code < 400:
        return
    if status_code == 404:
        raise ResourceNotFoundError(index)
    if status_code == 400:
        raise MalformedRangeError(f"Server rejected the request for index {index} (400)")
    if status_code == 416:
        length = total_from_content_range(headers.get("content-range"))
        raise RangeNotSatisfiableError(f"Range not satisfiable for index {index}", length if length is not None else -1)
    raise IOError(f"Request for index {index} failed with status {status_code}")


def range_header(start: int, length: int | None) -> dict[str, str]:
    """Headers asking for `length` bytes at `start`; no Range for the whole file."""
    if start < 0:
        raise IOError("Start offset cannot be negative")
    if length is not None and length <= 0:
        raise IOError("Length must be positive")
    if length is None:
        return {} if start == 0 else {"Range": f"bytes={start}-"}
    return {"Range": f"bytes={start}-{start + length - 1}"}


def check_content_range(value: str | None, start: int) -> None:
    """Ensure a 206 answer starts where we asked."""
    if not value or not value.startswith("bytes "):
        raise IOError(f"Missing or invalid Content-Range in partial response: {value!r}")
    first = value[len("bytes "):].split("-", 1)[0]
    if not first.isdigit() or int(first) != start:
        raise IOError(f"Server returned range {value!r}, expected start {start}")
