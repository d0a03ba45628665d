"""Build 200/206 responses for an opened media file."""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict

from .core.model import ByteRange, Resource
from .core.util import content_range
from .io.base import DEFAULT_CHUNK_SIZE
from .io.local import LocalFile

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StreamResponse:
    status_code: int
    headers: Dict[str, str]
    source: LocalFile
    offset: int
    length: int
    chunk_size: int = DEFAULT_CHUNK_SIZE
    resource: Resource | None = field(default=None, repr=False)

    def body(self) -> AsyncIterator[bytes]:
        return self.source.iter_window(self.offset, self.length, self.chunk_size)

    def close(self) -> None:
        self.source.close()


async def build_stream_response(
    source: LocalFile,
    resource: Resource,
    byte_range: ByteRange | None = None,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> StreamResponse:
    """Position `source` and describe the response for it.

    Without a range the whole file is sent with 200; with one, the handle is
    seeked to its start and exactly ``byte_range.length`` bytes are sent with
    206. Seek failures raise MediaIOError before any header is produced.
    """
    headers = {
        "Content-Type": resource.media_type,
        "Accept-Ranges": "bytes",
    }
    if byte_range is None:
        headers["Content-Length"] = str(resource.length)
        return StreamResponse(200, headers, source, 0, resource.length, chunk_size, resource)

    await source.seek(byte_range.start)
    headers["Content-Length"] = str(byte_range.length)
    headers["Content-Range"] = content_range(byte_range, resource.length)
    logger.debug("Serving %s bytes %d-%d of %d", resource.path, byte_range.start, byte_range.end, resource.length)
    return StreamResponse(206, headers, source, byte_range.start, byte_range.length, chunk_size, resource)
