from __future__ import annotations
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class ClosedRange:
    start: int
    end: int                   # inclusive, may exceed the resource length


@dataclass(frozen=True, slots=True)
class OpenRange:
    start: int                 # through end of resource


@dataclass(frozen=True, slots=True)
class SuffixRange:
    length: int                # last `length` bytes


RawRange = Union[ClosedRange, OpenRange, SuffixRange]


@dataclass(frozen=True, slots=True)
class ByteRange:
    """Inclusive byte window already checked against a resource length."""
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid byte range {self.start}-{self.end}")

    @property
    def length(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True, slots=True)
class Resource:
    index: int
    path: str
    length: int
    media_type: str


class FastRangeError(RuntimeError):
    """Base class for request-level errors."""
    pass


class ResourceNotFoundError(FastRangeError):
    """Raised when an index is outside the catalog."""

    def __init__(self, index: int, size: int | None = None):
        message = f"No file at index {index}"
        if size is not None:
            message += f" (catalog has {size} files)"
        super().__init__(message)
        self.index = index
        self.size = size


class MalformedRangeError(FastRangeError):
    """Raised when a Range header cannot be parsed."""
    pass


class RangeNotSatisfiableError(FastRangeError):
    """Raised when parsed ranges cannot be served against the resource length."""

    def __init__(self, message: str, length: int):
        super().__init__(message)
        self.length = length


class MediaIOError(OSError):
    """OS-level failure while opening, seeking or reading a media file."""

    def __init__(self, message: str, *, path: str, index: int | None = None, offset: int | None = None):
        super().__init__(message)
        self.path = path
        self.index = index
        self.offset = offset
