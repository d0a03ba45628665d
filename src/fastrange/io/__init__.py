"""I/O layer for fastrange - local file streaming and HTTP clients."""

# Re-export these for import convenience
from .base import DEFAULT_CHUNK_SIZE, RangeNotSupportedError
from .local import LocalFile, open_local_file
from .http_sync import MediaClient, open_media_client
from .http_async import AsyncMediaClient, open_media_client_async


def open_client(base_url: str):
    """Factory function to create a synchronous client for `base_url`."""
    if not base_url.startswith(('http://', 'https://')):
        raise ValueError(f"Not an HTTP URL: {base_url}")
    return open_media_client(base_url)


async def open_client_async(base_url: str):
    """Factory function to create an asynchronous client for `base_url`."""
    if not base_url.startswith(('http://', 'https://')):
        raise ValueError(f"Not an HTTP URL: {base_url}")
    return await open_media_client_async(base_url)
