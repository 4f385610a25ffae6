"""
HTTP Server Module

This module exposes a CacheStore over HTTP with FastAPI:

    GET /{key}  -> 200 with the cached content, or 404
    PUT /{key}  -> 201, storing the request body

The store is handed to the application explicitly and kept on app.state;
the garbage collector is started and stopped with the application's
lifespan. HTCacheServer wraps the application in a uvicorn server.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..cache.reaper import Reaper
from ..cache.store import CacheStore
from ..config.settings import settings

logger = structlog.get_logger(__name__)
access_logger = structlog.get_logger("api")


def parse_ttl(raw: Optional[str]) -> Optional[int]:
    """
    Parse the X-TTL header value.

    Args:
        raw: Header value, or None if the header was not sent

    Returns:
        TTL in seconds, or None for no expiration

    Raises:
        HTTPException: 400 if the value is not an integer in 0..MAX_TTL
    """
    if raw is None:
        return None

    raw = raw.strip()
    if not (raw.isascii() and raw.isdigit()):
        raise HTTPException(status_code=400, detail=f"invalid {settings.TTL_HEADER} header")

    ttl = int(raw)
    if ttl > settings.MAX_TTL:
        raise HTTPException(status_code=400, detail=f"{settings.TTL_HEADER} too large")
    return ttl


def create_app(
        store: CacheStore = None,
        gc_interval: float = None,
        max_body_size: int = None,
) -> FastAPI:
    """
    Build the HTTP application around a store.

    Args:
        store: CacheStore instance (creates new one if not provided)
        gc_interval: Seconds between garbage collection runs
        max_body_size: Largest PUT body accepted, in bytes

    Returns:
        The FastAPI application
    """
    store = store if store is not None else CacheStore()
    reaper = Reaper(store, interval=gc_interval)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        reaper.start()
        try:
            yield
        finally:
            await reaper.stop()

    app = FastAPI(
        title="htcache",
        description="Simple and fast cache with HTTP interface",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.reaper = reaper
    app.state.max_body_size = max_body_size if max_body_size is not None else settings.MAX_BODY_SIZE

    @app.exception_handler(StarletteHTTPException)
    async def empty_not_found(request: Request, exc: StarletteHTTPException):
        """Unrouted paths answer like missing keys: 404 with no body."""
        if exc.status_code == 404:
            return Response(status_code=404)
        return await http_exception_handler(request, exc)

    @app.middleware("http")
    async def request_size_limit(request: Request, call_next):
        """Reject oversized bodies before they reach a handler."""
        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                length = int(content_length)
            except ValueError:
                return Response(status_code=400)
            if length > request.app.state.max_body_size:
                logger.warning("Payload too large", path=request.url.path, size=length)
                return Response(status_code=413)
        return await call_next(request)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        access_logger.info(
            "request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 3),
        )
        return response

    @app.get("/{key}")
    async def cache_get(key: str, request: Request) -> Response:
        store = request.app.state.store
        record = store.get(key)
        now = store.now()
        content = record.value(now) if record is not None else None
        if content is None:
            return Response(status_code=404)

        return Response(
            content=content,
            status_code=200,
            headers={
                "Content-Type": record.content_type or settings.DEFAULT_CONTENT_TYPE,
                "Age": str(record.age(now)),
            },
        )

    @app.put("/{key}", status_code=201)
    async def cache_put(
            key: str,
            request: Request,
            content_type: Optional[str] = Header(None),
            x_ttl: Optional[str] = Header(None),
    ) -> Response:
        body = await request.body()
        if len(body) > request.app.state.max_body_size:
            # Chunked uploads carry no Content-Length for the middleware to check
            logger.warning("Payload too large", path=request.url.path, size=len(body))
            return Response(status_code=413)

        try:
            content = body.decode("utf-8")
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail="invalid encoding")

        ttl = parse_ttl(x_ttl)
        try:
            request.app.state.store.set(key, content, ttl=ttl, content_type=content_type)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return Response(status_code=201)

    return app


class HTCacheServer:
    """
    uvicorn server hosting the HTCache application.

    Usage:
        server = HTCacheServer(host='127.0.0.1', port=3030)
        await server.start()  # Runs until stop() is called

    Attributes:
        host: Server bind address (e.g., '127.0.0.1')
        port: Server port number (e.g., 3030)
        store: The CacheStore shared by all requests and the garbage collector
        app: The FastAPI application
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            store: CacheStore = None,
            gc_interval: float = None,
    ):
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.store = store if store is not None else CacheStore()
        self.app = create_app(self.store, gc_interval=gc_interval)

        self._server: Optional[uvicorn.Server] = None

    async def start(self) -> None:
        """Serve until stop() is called or the task is cancelled."""
        if self._server is not None:
            return

        config = uvicorn.Config(
            self.app,
            host=self.host,
            port=self.port,
            log_config=None,
            access_log=False,
        )
        self._server = uvicorn.Server(config)
        logger.info("Serving", host=self.host, port=self.port)

        try:
            await self._server.serve()
        except asyncio.CancelledError:
            logger.debug("Server start cancelled")
        finally:
            self._server = None

    async def stop(self) -> None:
        """Ask uvicorn to shut down gracefully."""
        if self._server is None:
            return
        self._server.should_exit = True

    def is_running(self) -> bool:
        """Check if the server is accepting connections."""
        return self._server is not None and self._server.started

    def get_stats(self) -> dict:
        """Server and store statistics."""
        reaper = self.app.state.reaper
        return {
            "running": self.is_running(),
            "host": self.host,
            "port": self.port,
            "gc_sweeps": reaper.sweeps,
            "gc_failures": reaper.failures,
            "store_stats": self.store.get_stats(),
        }
