# src/todo_store/config.py

"""Application config loaded from environment variables (+ optional .env).

Design goals:
- One AppConfig object for the whole app.
- Nothing is required: every value has a local default under .local/todo.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TODO"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


_DEFAULT_FILES = {
    "json": "todo.json",
    "sqlite": "todo.sqlite3",
}


@dataclass(frozen=True, slots=True)
class AppConfig:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage ----
    data_dir: Path
    storage_backend: str
    storage_path: Path | None

    @staticmethod
    def from_env() -> "AppConfig":
        app_name = _env(_k("APP_NAME"), "todo") or "todo"
        log_level = _env(_k("LOG_LEVEL"), "WARNING").strip().upper() or "WARNING"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todo"))

        backend = _env(_k("STORAGE_BACKEND"), "json").strip().lower() or "json"
        default_file = _DEFAULT_FILES.get(backend)
        storage_path: Path | None = None
        if default_file is not None:
            storage_path = _env_path(_k("STORAGE_PATH"), data_dir / default_file)

        return AppConfig(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_backend=backend,
            storage_path=storage_path,
        )


_CONFIG: AppConfig | None = None


def get_config() -> AppConfig:
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = AppConfig.from_env()
    return _CONFIG
