"""
HTCache Configuration Settings

This module contains the configuration defaults for the HTCache server.
Every network and cache value can be overridden from the environment and,
for the server process, from the command line.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server configuration settings."""

    # Network settings
    HOST: str = os.environ.get("HTCACHE_HOST", "127.0.0.1")
    PORT: int = int(os.environ.get("HTCACHE_PORT", "3030"))

    # Cache settings
    CAPACITY: int = int(os.environ.get("HTCACHE_CAPACITY", "128"))
    DEFAULT_CONTENT_TYPE: str = "text/plain"

    # Request settings
    MAX_BODY_SIZE: int = 128 * 1024  # Bytes accepted in a single PUT
    TTL_HEADER: str = "X-TTL"
    MAX_TTL: int = 2 ** 32 - 1  # Largest TTL in seconds accepted by the store

    # Garbage collection settings
    GC_INTERVAL: float = float(os.environ.get("HTCACHE_GC_INTERVAL", "60"))

    # Logging settings
    ECS_LOGGING: bool = os.environ.get("HTCACHE_ECS_LOGGING", "false").lower() == "true"
    DEBUG: bool = os.environ.get("HTCACHE_DEBUG", "false").lower() == "true"


# Global settings instance
settings = Settings()
