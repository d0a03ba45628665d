
"""CLI implementation for fastrange."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import BinaryIO, Optional

import typer
import uvicorn

from .app import create_app
from .config import ENV_PREFIX, ServerSettings
from .core.catalog import list_files
from .core.model import Resource
from .core.util import media_type_for, resource_asdict
from .io.base import DEFAULT_CHUNK_SIZE
from .io.http_async import AsyncMediaClient
from .io.http_sync import MediaClient

app = typer.Typer(add_completion=False, help="Stream a directory of media files by index over HTTP.")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


@app.command()
def serve(
    root: Path = typer.Option(Path("videos"), "--root", envvar=f"{ENV_PREFIX}MEDIA_ROOT", help="Media directory to serve"),
    host: str = typer.Option("127.0.0.1", "--host", envvar=f"{ENV_PREFIX}HOST", help="Address to bind"),
    port: int = typer.Option(3000, "--port", min=0, max=65535, envvar=f"{ENV_PREFIX}PORT", help="TCP port to bind"),
    chunk_size: int = typer.Option(DEFAULT_CHUNK_SIZE, "--chunk-size", min=1, envvar=f"{ENV_PREFIX}CHUNK_SIZE",
                                   help="Bytes read from disk per chunk"),
    snapshot: bool = typer.Option(False, "--snapshot", envvar=f"{ENV_PREFIX}SNAPSHOT",
                                  help="Freeze indices at startup (rebuild with POST /refresh)"),
    log_level: str = typer.Option("info", "--log-level", envvar=f"{ENV_PREFIX}LOG_LEVEL", help="Logging level"),
):
    """Run the HTTP server."""
    settings = ServerSettings(media_root=root, host=host, port=port, chunk_size=chunk_size,
                              snapshot=snapshot, log_level=log_level)
    configure_logging(settings.log_level)
    logging.getLogger(__name__).info("listening on %s:%d, serving %s", settings.host, settings.port, settings.media_root)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level)


@app.command("ls")
def list_catalog(
    root: Path = typer.Option(Path("videos"), "--root", envvar=f"{ENV_PREFIX}MEDIA_ROOT", help="Media directory to list"),
    fields: Optional[str] = typer.Option(None, "--fields", help="Comma-separated subset of keys to emit"),
    jsonl: bool = typer.Option(False, "--jsonl", help="Force JSON-lines output"),
):
    """Print the catalog with the index each file is served under."""
    sel_fields = set(fields.split(",")) if fields else None
    try:
        paths = list_files(root)
    except OSError as e:
        typer.echo(f"Cannot read {root}: {e}", err=True)
        raise typer.Exit(code=1)

    entries = []
    for index, path in enumerate(paths):
        try:
            size = Path(path).stat().st_size
        except OSError as e:
            typer.echo(f"Cannot stat {path}: {e}", err=True)
            raise typer.Exit(code=1)
        entries.append(resource_asdict(Resource(index, path, size, media_type_for(path)), fields=sel_fields))

    if jsonl:
        for obj in entries:
            sys.stdout.write(json.dumps(obj))
            sys.stdout.write("\n")
    else:
        json.dump(entries, sys.stdout, indent=2)
        sys.stdout.write("\n")


async def _download(url: str, index: int, start: int, length: Optional[int], sink: BinaryIO) -> int:
    async with AsyncMediaClient(url) as client:
        async for chunk in client.iter_fetch(index, start, length):
            sink.write(chunk)
        return client.bytes_fetched


def _download_sync(url: str, index: int, start: int, length: Optional[int], sink: BinaryIO) -> int:
    with MediaClient(url) as client:
        for chunk in client.iter_fetch(index, start, length):
            sink.write(chunk)
        return client.bytes_fetched


@app.command()
def fetch(
    url: str = typer.Argument(..., help="Base URL of a fastrange server"),
    index: int = typer.Argument(..., min=0, help="Index of the file to fetch"),
    start: int = typer.Option(0, "--start", min=0, help="First byte to fetch"),
    length: Optional[int] = typer.Option(None, "--length", min=1, help="Number of bytes (default: to end of file)"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    sync: bool = typer.Option(False, "--sync", help="Force synchronous I/O"),
):
    """Download a file, or one byte window of it, from a running server."""
    # open output sink
    sink = open(output, "wb") if output else typer.get_binary_stream("stdout")
    try:
        if sync:
            fetched = _download_sync(url, index, start, length, sink)
        else:
            fetched = asyncio.run(_download(url, index, start, length, sink))
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    finally:
        if output:
            sink.close()
        else:
            sink.flush()

    if length is not None and fetched < length:
        typer.echo(f"Short read: got {fetched} of {length} bytes", err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
