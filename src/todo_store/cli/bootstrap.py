# src/todo_store/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads config once,
- ensures the local (gitignored) data directory exists,
- picks the storage backend and wires it into a TaskStore.
"""

from __future__ import annotations

import logging

from ..config import get_config
from ..core.state import AppState
from ..storage.backends import open_storage
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(config) -> None:
    config.data_dir.mkdir(parents=True, exist_ok=True)
    if config.storage_path is not None:
        config.storage_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, config=None) -> AppState:
    """
    Create AppState from the provided config.

    Keeping config injectable makes the app easier to test and avoids hidden global reads.
    If config is None, falls back to get_config().
    """
    if config is None:
        config = get_config()

    _ensure_local_dirs(config)

    storage = open_storage(config.storage_backend, config.storage_path)
    logger.info("Storage backend=%s path=%s", config.storage_backend, config.storage_path)

    return AppState(config=config, store=TaskStore(storage))
