"""
HTCache Client

A thin httpx wrapper around the HTCache HTTP interface.

Usage:
    with HTCacheClient("http://localhost:3030") as client:
        client.set("document-4712", '{"id": 4712}', ttl=120,
                   content_type="application/json")
        cached = client.get("document-4712")
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import httpx

from .config.settings import settings


class HTCacheError(Exception):
    """Raised when the server answers with an unexpected status."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        super().__init__(f"unexpected status {status_code}: {message}".rstrip(": "))


@dataclass
class CachedValue:
    """A value read back from the cache."""

    content: bytes
    content_type: str
    age: int

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")


class HTCacheClient:
    """Synchronous client for an HTCache server."""

    def __init__(
            self,
            endpoint: str,
            timeout: float = 5.0,
            http_client: httpx.Client = None,
    ):
        """
        Args:
            endpoint: Base URL of the server, e.g. http://localhost:3030
            timeout: Request timeout in seconds
            http_client: Pre-configured httpx.Client to send requests with
        """
        self.endpoint = endpoint.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client if http_client is not None else httpx.Client(timeout=timeout)

    def _url(self, key: str) -> str:
        """
        Build the URL for a key.

        Keys are a single path segment: they must be non-empty and must not
        contain "/", which the server decodes before routing.

        Raises:
            ValueError: If the key cannot be addressed
        """
        if not key or "/" in key:
            raise ValueError(f"invalid key {key!r}: keys must be a non-empty path segment without '/'")
        return f"{self.endpoint}/{quote(key, safe='')}"

    def get(self, key: str) -> Optional[CachedValue]:
        """
        Fetch a key.

        Returns:
            The cached value, or None if the key is absent or expired
        """
        response = self._client.get(self._url(key))
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise HTCacheError(response.status_code, response.text)

        return CachedValue(
            content=response.content,
            content_type=response.headers.get("content-type", settings.DEFAULT_CONTENT_TYPE),
            age=int(response.headers.get("age", "0")),
        )

    def set(
            self,
            key: str,
            content,
            ttl: Optional[int] = None,
            content_type: Optional[str] = None,
    ) -> None:
        """
        Store a value, replacing any previous one.

        Args:
            key: The key to store
            content: str or bytes payload (str is sent as UTF-8)
            ttl: Time-to-live in seconds (None = never expires)
            content_type: Content type to store alongside the value
        """
        if isinstance(content, str):
            content = content.encode("utf-8")

        headers = {}
        if content_type is not None:
            headers["Content-Type"] = content_type
        if ttl is not None:
            headers[settings.TTL_HEADER] = str(ttl)

        response = self._client.put(self._url(key), content=content, headers=headers)
        if response.status_code != 201:
            raise HTCacheError(response.status_code, response.text)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
