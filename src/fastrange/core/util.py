from __future__ import annotations
import os
from typing import Dict, Any, Iterable

from .model import ByteRange, Resource

FALLBACK_MEDIA_TYPE = "application/octet-stream"


def media_type_for(path: str) -> str:
    """`video/<ext>` with the extension taken verbatim from the file name."""
    name = os.path.basename(path)
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem or not ext:
        return FALLBACK_MEDIA_TYPE
    return f"video/{ext}"


def content_range(byte_range: ByteRange, length: int) -> str:
    return f"bytes {byte_range.start}-{byte_range.end}/{length}"


def unsatisfied_content_range(length: int) -> str:
    return f"bytes */{length}"


def resource_asdict(res: Resource, *, fields: Iterable[str] | None = None) -> Dict[str, Any]:
    """Return a JSON-serialisable dict optionally filtered."""
    payload = {"index": res.index, "path": res.path, "size": res.length, "media_type": res.media_type}
    if fields:
        wanted = set(fields)
        payload = {k: v for k, v in payload.items() if k in wanted}
    return payload
