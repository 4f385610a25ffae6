"""HTTP interface for HTCache."""

from .http_server import HTCacheServer, create_app

__all__ = ["HTCacheServer", "create_app"]
