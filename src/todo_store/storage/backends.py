# src/todo_store/storage/backends.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

BACKENDS = ("json", "sqlite", "memory")


class MemoryStorage:
    """Dict-backed storage. Nothing survives the process; used for tests and demos."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def __repr__(self) -> str:
        return f"MemoryStorage(keys={sorted(self._data)})"


class JsonFileStorage:
    """
    One JSON object file mapping key -> string value.

    Every set() rewrites the file via a temp file + os.replace, so readers never see a
    half-written document. The file is read fresh on each call (no cache).
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        data = json.loads(self._path.read_text("utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{self._path} does not hold a JSON object")
        return data

    def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError(f"value under {key!r} in {self._path} is not a string")
        return value

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(Exception):
            os.chmod(self._path, 0o600)
        logger.debug("JsonFileStorage set key=%s bytes=%d path=%s", key, len(value), self._path)

    def __repr__(self) -> str:
        return f"JsonFileStorage({str(self._path)!r})"


class SqliteStorage:
    """
    SQLite key-value table.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return None if row is None else str(row[0])
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO kv(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
            conn.commit()
        finally:
            conn.close()
        logger.debug("SqliteStorage set key=%s bytes=%d db=%s", key, len(value), self._db_path)

    def __repr__(self) -> str:
        return f"SqliteStorage({str(self._db_path)!r})"


def open_storage(backend: str, path: str | Path | None = None):
    """Build a storage backend by name ("json", "sqlite", "memory")."""
    name = (backend or "").strip().lower()
    if name == "memory":
        return MemoryStorage()
    if path is None:
        raise ValueError(f"storage backend {name!r} needs a path")
    if name == "json":
        return JsonFileStorage(path)
    if name == "sqlite":
        return SqliteStorage(path)
    raise ValueError(f"unknown storage backend {backend!r}; expected one of {', '.join(BACKENDS)}")
