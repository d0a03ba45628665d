"""Local media files read off the event loop."""

import asyncio
import logging
import os
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Union

from ..core.model import MediaIOError
from .base import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)


class LocalFile:
    """One request's handle on a media file.

    The handle and its cursor belong to a single request; blocking calls are
    pushed to a worker thread with ``asyncio.to_thread``.
    """

    def __init__(self, file: BinaryIO, path: str, size: int, *, index: int | None = None):
        self._file = file
        self.path = path
        self.size = size
        self.index = index
        self.bytes_read = 0

    @property
    def closed(self) -> bool:
        return self._file.closed

    async def seek(self, offset: int) -> None:
        try:
            await asyncio.to_thread(self._file.seek, offset)
        except OSError as e:
            raise MediaIOError(f"Cannot seek {self.path}: {e}", path=self.path, index=self.index, offset=offset) from e

    async def iter_window(self, start: int, length: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Yield exactly `length` bytes from `start`, then close the file.

        The handle must already be positioned at `start` (see :meth:`seek`).
        """
        remaining = length
        offset = start
        try:
            while remaining > 0:
                try:
                    data = await asyncio.to_thread(self._file.read, min(chunk_size, remaining))
                except OSError as e:
                    raise MediaIOError(f"Cannot read {self.path}: {e}",
                                       path=self.path, index=self.index, offset=offset) from e
                if not data:
                    # Content-Length is already on the wire; abort rather than short-send
                    raise MediaIOError(f"{self.path} ended after {offset} bytes, expected {start + length}",
                                       path=self.path, index=self.index, offset=offset)
                remaining -= len(data)
                offset += len(data)
                self.bytes_read += len(data)
                yield data
        finally:
            self.close()

    def close(self) -> None:
        """Close the handle. Safe to call more than once and from a cancelled task."""
        if not self._file.closed:
            self._file.close()
            logger.debug("Closed %s after %d bytes", self.path, self.bytes_read)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _open_sync(path: str) -> tuple[BinaryIO, int]:
    f = open(path, "rb")
    try:
        size = os.fstat(f.fileno()).st_size
    except OSError:
        f.close()
        raise
    return f, size


async def open_local_file(path: Union[Path, str], *, index: int | None = None) -> LocalFile:
    """Open `path` for streaming; OS failures become MediaIOError."""
    path = str(path)
    try:
        f, size = await asyncio.to_thread(_open_sync, path)
    except OSError as e:
        raise MediaIOError(f"Cannot open {path}: {e}", path=path, index=index, offset=0) from e
    return LocalFile(f, path, size, index=index)
