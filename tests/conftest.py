"""Shared fixtures: a small media directory and an app serving it."""

import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from werkzeug import Request, Response

from fastrange import ServerSettings, create_app, list_files
from fastrange.core.model import MalformedRangeError, RangeNotSatisfiableError
from fastrange.core.ranges import parse_range_header, validate_ranges

CLIP_DATA = bytes(i % 251 for i in range(1000))  # 1000 bytes, no short period


def index_of(root: Path, name: str) -> int:
    """Index a file is served under; listing order is filesystem order."""
    for i, path in enumerate(list_files(root)):
        if os.path.basename(path) == name:
            return i
    raise LookupError(name)


@pytest.fixture
def media_dir(tmp_path):
    """videos/ with clip.mp4 (1000 bytes), intro.webm and season1/ep1.mkv."""
    root = tmp_path / "videos"
    root.mkdir()
    (root / "clip.mp4").write_bytes(CLIP_DATA)
    (root / "intro.webm").write_bytes(b"w" * 10)
    season = root / "season1"
    season.mkdir()
    (season / "ep1.mkv").write_bytes(b"k" * 50)
    return root


@pytest.fixture
def clip_index(media_dir):
    return index_of(media_dir, "clip.mp4")


@pytest.fixture
def client(media_dir):
    """TestClient over an app serving `media_dir` in rescan mode."""
    app = create_app(ServerSettings(media_root=media_dir, chunk_size=128))
    with TestClient(app) as c:
        yield c


def serve_bytes(data: bytes, request: Request) -> Response:
    """werkzeug handler answering like a fastrange server for one file."""
    headers = {"Accept-Ranges": "bytes", "Content-Type": "video/mp4"}
    range_value = request.headers.get("Range")
    if range_value is None:
        # werkzeug drops the body itself for HEAD
        return Response(data, status=200, headers=headers)
    try:
        byte_range = validate_ranges(parse_range_header(range_value), len(data))
    except MalformedRangeError:
        return Response("Range header is malformed", status=400)
    except RangeNotSatisfiableError:
        return Response("Range Not Satisfiable", status=416, headers={"Content-Range": f"bytes */{len(data)}"})
    headers["Content-Range"] = f"bytes {byte_range.start}-{byte_range.end}/{len(data)}"
    return Response(data[byte_range.start:byte_range.end + 1], status=206, headers=headers)
