"""Concrete KeyValueStorage backends."""

from .backends import JsonFileStorage, MemoryStorage, SqliteStorage, open_storage

__all__ = ["JsonFileStorage", "MemoryStorage", "SqliteStorage", "open_storage"]
