"""FastAPI application: catalog listing and indexed media streaming."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Path, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse, StreamingResponse

from . import __version__
from .config import ServerSettings
from .core.catalog import Catalog
from .core.model import (
    MalformedRangeError, MediaIOError, RangeNotSatisfiableError, Resource, ResourceNotFoundError,
)
from .core.ranges import parse_range_header, validate_ranges
from .core.util import media_type_for, unsatisfied_content_range
from .io.local import open_local_file
from .responder import StreamResponse, build_stream_response

logger = logging.getLogger(__name__)


class MediaStreamingResponse(StreamingResponse):
    """StreamingResponse that releases the file handle however the send ends.

    When the client disconnects Starlette cancels the send task; the handle is
    closed synchronously in ``finally`` so no await is needed under
    cancellation.
    """

    def __init__(self, stream: StreamResponse):
        super().__init__(stream.body(), status_code=stream.status_code, headers=stream.headers)
        self._stream = stream

    async def __call__(self, scope, receive, send):
        try:
            await super().__call__(scope, receive, send)
        finally:
            self._stream.close()


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ResourceNotFoundError)
    async def not_found(request: Request, exc: ResourceNotFoundError):
        logger.info("%s %s -> 404: %s", request.method, request.url.path, exc)
        return PlainTextResponse("Not Found", status_code=status.HTTP_404_NOT_FOUND)

    @app.exception_handler(MalformedRangeError)
    async def malformed_range(request: Request, exc: MalformedRangeError):
        logger.info("%s %s -> 400: %s", request.method, request.url.path, exc)
        return PlainTextResponse("Range header is malformed", status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(RangeNotSatisfiableError)
    async def not_satisfiable(request: Request, exc: RangeNotSatisfiableError):
        logger.info("%s %s -> 416: %s", request.method, request.url.path, exc)
        return PlainTextResponse(
            "Range Not Satisfiable",
            status_code=status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE,
            headers={"Content-Range": unsatisfied_content_range(exc.length), "Accept-Ranges": "bytes"},
        )

    @app.exception_handler(RequestValidationError)
    async def bad_index(request: Request, exc: RequestValidationError):
        logger.info("%s %s -> 400: invalid index", request.method, request.url.path)
        return PlainTextResponse("Index must be a non-negative integer", status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(OSError)
    async def io_failure(request: Request, exc: OSError):
        if isinstance(exc, MediaIOError):
            logger.error("I/O failure on %s (index=%s, offset=%s)", exc.path, exc.index, exc.offset, exc_info=exc)
        else:
            logger.error("I/O failure handling %s %s", request.method, request.url.path, exc_info=exc)
        return PlainTextResponse("Internal Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build the application for `settings` (defaults serve ./videos)."""
    settings = settings or ServerSettings()
    catalog = Catalog(settings.media_root, snapshot=settings.snapshot)

    app = FastAPI(title="fastrange", version=__version__)
    app.state.settings = settings
    app.state.catalog = catalog
    _register_error_handlers(app)

    @app.get("/", response_class=PlainTextResponse)
    def list_catalog() -> str:
        return ",".join(catalog.files())

    @app.post("/refresh", response_class=PlainTextResponse)
    def refresh_catalog() -> str:
        return str(catalog.refresh())

    @app.api_route("/{index}", methods=["GET", "HEAD"])
    async def get_media(request: Request, index: int = Path(ge=0)):
        logger.debug("id: %d", index)
        path = await run_in_threadpool(catalog.resolve, index)

        range_value = request.headers.get("range")
        raw_ranges = parse_range_header(range_value) if range_value is not None else None

        source = await open_local_file(path, index=index)
        try:
            resource = Resource(index, path, source.size, media_type_for(path))
            logger.debug("file type: %s", resource.media_type)
            byte_range = validate_ranges(raw_ranges, resource.length) if raw_ranges is not None else None
            stream = await build_stream_response(source, resource, byte_range, chunk_size=settings.chunk_size)
        except BaseException:
            source.close()
            raise

        if request.method == "HEAD":
            stream.close()
            return Response(status_code=stream.status_code, headers=stream.headers)
        return MediaStreamingResponse(stream)

    return app
