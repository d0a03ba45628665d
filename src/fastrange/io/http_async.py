"""Asynchronous fastrange client using httpx."""

import httpx
from typing import AsyncIterator, Optional

from .base import (
    DEFAULT_CHUNK_SIZE, RangeNotSupportedError,
    check_content_range, raise_for_status, range_header,
)


class AsyncMediaClient:
    """Asynchronous client for a fastrange server.

    Pass an existing ``httpx.AsyncClient`` to share a connection pool (or to
    talk to an in-process app through ``httpx.ASGITransport``); otherwise the
    client creates its own and closes it in :meth:`aclose`.
    """

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.bytes_fetched = 0
        self.requests_made = 0
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=60.0)

    def _url(self, index: int) -> str:
        return f"{self.base_url}/{index}"

    async def _request(self, method: str, url: str, retry_count: int = 0, **kwargs) -> httpx.Response:
        self.requests_made += 1
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            if retry_count == 0:
                # One automatic retry
                return await self._request(method, url, retry_count + 1, **kwargs)
            raise IOError(f"{method} {url} failed: {e}")

    async def list(self) -> list[str]:
        """Return the server's catalog listing."""
        response = await self._request("GET", f"{self.base_url}/")
        if response.status_code >= 400:
            raise IOError(f"Listing failed with status {response.status_code}")
        return [p for p in response.text.split(",") if p]

    async def stat(self, index: int) -> tuple[int, bool]:
        """Return (content length, accepts byte ranges) for `index` via HEAD."""
        response = await self._request("HEAD", self._url(index))
        raise_for_status(response.status_code, index, response.headers)
        length = int(response.headers.get("content-length", 0))
        accept_ranges = response.headers.get("accept-ranges", "").lower() == "bytes"
        return length, accept_ranges

    async def iter_fetch(self, index: int, start: int = 0, length: Optional[int] = None,
                         chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Stream the file (or one window of it) in chunks."""
        headers = range_header(start, length)
        self.requests_made += 1
        try:
            async with self._client.stream("GET", self._url(index), headers=headers) as response:
                raise_for_status(response.status_code, index, response.headers)
                if headers:
                    if response.status_code != 206:
                        raise RangeNotSupportedError(f"Server answered {response.status_code} to a range request")
                    check_content_range(response.headers.get("content-range"), start)
                async for chunk in response.aiter_bytes(chunk_size):
                    self.bytes_fetched += len(chunk)
                    yield chunk
        except httpx.RequestError as e:
            raise IOError(f"GET {self._url(index)} failed: {e}")

    async def fetch(self, index: int, start: int = 0, length: Optional[int] = None) -> bytes:
        """Return `length` bytes at `start` (the rest of the file when `length` is None)."""
        data = b"".join([chunk async for chunk in self.iter_fetch(index, start, length)])
        if length is not None and len(data) < length:
            raise IOError(f"Not enough data: requested {length} bytes at offset {start}, got {len(data)}")
        return data

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


async def open_media_client_async(base_url: str, client: Optional[httpx.AsyncClient] = None) -> AsyncMediaClient:
    """Create an asynchronous fastrange client."""
    return AsyncMediaClient(base_url, client)
