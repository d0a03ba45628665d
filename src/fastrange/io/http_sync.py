"""Synchronous fastrange client using requests."""

import requests
from typing import Iterator, Optional

from .base import (
    DEFAULT_CHUNK_SIZE, RangeNotSupportedError,
    check_content_range, raise_for_status, range_header,
)


# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


class MediaClient:
    """Synchronous client for a fastrange server."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.bytes_fetched = 0
        self.requests_made = 0
        self._session = session or _get_session()

    def _url(self, index: int) -> str:
        return f"{self.base_url}/{index}"

    def _request(self, method: str, url: str, retry_count: int = 0, **kwargs) -> requests.Response:
        self.requests_made += 1
        kwargs.setdefault("timeout", 30)
        try:
            return self._session.request(method, url, **kwargs)
        except requests.RequestException as e:
            if retry_count == 0:
                # One automatic retry
                return self._request(method, url, retry_count + 1, **kwargs)
            raise IOError(f"{method} {url} failed: {e}")

    def list(self) -> list[str]:
        """Return the server's catalog listing."""
        response = self._request("GET", f"{self.base_url}/")
        if response.status_code >= 400:
            raise IOError(f"Listing failed with status {response.status_code}")
        return [p for p in response.text.split(",") if p]

    def stat(self, index: int) -> tuple[int, bool]:
        """Return (content length, accepts byte ranges) for `index` via HEAD."""
        response = self._request("HEAD", self._url(index))
        raise_for_status(response.status_code, index, response.headers)
        length = int(response.headers.get("content-length", 0))
        accept_ranges = response.headers.get("accept-ranges", "").lower() == "bytes"
        return length, accept_ranges

    def _open(self, index: int, start: int, length: Optional[int]) -> requests.Response:
        headers = range_header(start, length)
        response = self._request("GET", self._url(index), headers=headers, stream=True, timeout=60)
        try:
            raise_for_status(response.status_code, index, response.headers)
            if headers:
                if response.status_code != 206:
                    raise RangeNotSupportedError(f"Server answered {response.status_code} to a range request")
                check_content_range(response.headers.get("content-range"), start)
        except BaseException:
            response.close()
            raise
        return response

    def iter_fetch(self, index: int, start: int = 0, length: Optional[int] = None,
                   chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """Stream the file (or one window of it) in chunks."""
        response = self._open(index, start, length)
        with response:
            for chunk in response.iter_content(chunk_size=chunk_size):
                self.bytes_fetched += len(chunk)
                yield chunk

    def fetch(self, index: int, start: int = 0, length: Optional[int] = None) -> bytes:
        """Return `length` bytes at `start` (the rest of the file when `length` is None)."""
        data = b"".join(self.iter_fetch(index, start, length))
        if length is not None and len(data) < length:
            raise IOError(f"Not enough data: requested {length} bytes at offset {start}, got {len(data)}")
        return data

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Session is shared, don't close it here
        pass


def open_media_client(base_url: str) -> MediaClient:
    """Create a synchronous fastrange client."""
    return MediaClient(base_url)
