"""Cache module for HTCache."""

from .reaper import Reaper
from .record import Record
from .store import CacheStore

__all__ = ["CacheStore", "Reaper", "Record"]
