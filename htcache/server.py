#!/usr/bin/env python3
"""
HTCache Server Entry Point

This is the main entry point for starting the HTCache server.

Usage:
    python -m htcache.server                   # Default settings (127.0.0.1:3030)
    python -m htcache.server --port 8080       # Custom port
    python -m htcache.server --addr 0.0.0.0    # Custom bind address
    python -m htcache.server --ecs-logging     # Structured (JSON) log output
    python -m htcache.server --capacity 1024   # Custom capacity hint

Environment Variables:
    HTCACHE_HOST          - Server bind address
    HTCACHE_PORT          - Server port
    HTCACHE_CAPACITY      - Capacity hint for the store
    HTCACHE_GC_INTERVAL   - Seconds between garbage collection runs
    HTCACHE_ECS_LOGGING   - Enable structured logging (true/false)
    HTCACHE_DEBUG         - Enable debug logging (true/false)
"""

import argparse
import asyncio
import ipaddress
import logging
import sys
from typing import List, Optional

import structlog

from . import __version__
from .cache.store import CacheStore
from .config.settings import settings
from .network.http_server import HTCacheServer


def ip_address(value: str) -> str:
    """argparse type accepting an IPv4 or IPv6 address."""
    try:
        return str(ipaddress.ip_address(value))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid IP address: {value!r}")


def port_number(value: str) -> int:
    """argparse type accepting a TCP port."""
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}")
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return port


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="htcache",
        description="HTCache - Simple and fast cache with HTTP interface",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "-a", "--addr",
        type=ip_address,
        default=settings.HOST,
        help="Address to bind to",
    )

    parser.add_argument(
        "-p", "--port",
        type=port_number,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "--ecs-logging",
        action="store_true",
        default=settings.ECS_LOGGING,
        help="Enable ECS compatible (JSON) logging",
    )

    parser.add_argument(
        "--capacity",
        type=int,
        default=settings.CAPACITY,
        help="Capacity hint used when compacting the store",
    )

    parser.add_argument(
        "--gc-interval",
        type=float,
        default=settings.GC_INTERVAL,
        help="Seconds between garbage collection runs",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


def setup_logging(ecs_logging: bool = False, debug: bool = False) -> None:
    """
    Configure structlog on top of the standard logging module.

    Args:
        ecs_logging: Render one JSON document per line instead of console output
        debug: Lower the level to DEBUG
    """
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    if ecs_logging:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the server."""
    args = parse_args(argv)

    setup_logging(ecs_logging=args.ecs_logging, debug=args.debug)
    logger = structlog.get_logger(__name__)

    store = CacheStore(capacity_target=args.capacity)
    server = HTCacheServer(
        host=args.addr,
        port=args.port,
        store=store,
        gc_interval=args.gc_interval,
    )

    logger.info(
        "Starting HTCache server",
        version=__version__,
        host=args.addr,
        port=args.port,
        capacity=args.capacity,
        gc_interval=args.gc_interval,
        ecs_logging=args.ecs_logging,
    )

    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
