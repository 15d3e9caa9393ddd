# src/todo_store/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task store.

The store depends on Protocols instead of concrete implementations.
This keeps storage backends swappable and makes testing easier.
"""

from typing import Protocol


class KeyValueStorage(Protocol):
    """
    Synchronous string key-value storage.

    get() returns None for a missing key. Both methods may raise on I/O failure;
    callers (TaskStore) decide how to absorb that.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...

