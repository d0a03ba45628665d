"""Tests for building stream responses."""

import pytest

from fastrange.app import MediaStreamingResponse
from fastrange.core.model import ByteRange, Resource
from fastrange.io.local import open_local_file
from fastrange.responder import build_stream_response

from conftest import CLIP_DATA


async def _open_clip(media_dir):
    source = await open_local_file(media_dir / "clip.mp4", index=2)
    resource = Resource(2, str(media_dir / "clip.mp4"), source.size, "video/mp4")
    return source, resource


class TestBuildStreamResponse:
    """Test status, headers and body windows."""

    @pytest.mark.asyncio
    async def test_full_response(self, media_dir):
        source, resource = await _open_clip(media_dir)
        stream = await build_stream_response(source, resource)

        assert stream.status_code == 200
        assert stream.headers == {
            "Content-Type": "video/mp4",
            "Accept-Ranges": "bytes",
            "Content-Length": "1000",
        }
        assert b"".join([c async for c in stream.body()]) == CLIP_DATA

    @pytest.mark.asyncio
    async def test_partial_response(self, media_dir):
        source, resource = await _open_clip(media_dir)
        stream = await build_stream_response(source, resource, ByteRange(500, 999), chunk_size=64)

        assert stream.status_code == 206
        assert stream.headers["Content-Length"] == "500"
        assert stream.headers["Content-Range"] == "bytes 500-999/1000"
        assert stream.offset == 500
        assert b"".join([c async for c in stream.body()]) == CLIP_DATA[500:]
        assert source.closed

    @pytest.mark.asyncio
    async def test_partial_response_stops_at_range_end(self, media_dir):
        source, resource = await _open_clip(media_dir)
        stream = await build_stream_response(source, resource, ByteRange(10, 19))
        assert b"".join([c async for c in stream.body()]) == CLIP_DATA[10:20]

    @pytest.mark.asyncio
    async def test_close_without_streaming(self, media_dir):
        source, resource = await _open_clip(media_dir)
        stream = await build_stream_response(source, resource, ByteRange(0, 9))
        stream.close()
        assert source.closed


class TestMediaStreamingResponse:
    """Test handle release at the ASGI level."""

    @pytest.mark.asyncio
    async def test_handle_closed_when_client_disconnects(self, media_dir):
        source, resource = await _open_clip(media_dir)
        stream = await build_stream_response(source, resource, chunk_size=10)
        response = MediaStreamingResponse(stream)
        sent = []

        async def receive():
            return {"type": "http.disconnect"}

        async def send(message):
            sent.append(message)

        scope = {"type": "http", "method": "GET", "path": "/2", "headers": []}
        await response(scope, receive, send)

        assert source.closed

    @pytest.mark.asyncio
    async def test_headers_sent(self, media_dir):
        source, resource = await _open_clip(media_dir)
        stream = await build_stream_response(source, resource, ByteRange(0, 99))
        response = MediaStreamingResponse(stream)
        assert response.status_code == 206
        assert response.headers["content-type"] == "video/mp4"
        assert response.headers["content-length"] == "100"
        assert response.headers["content-range"] == "bytes 0-99/1000"
        stream.close()
