# src/todo_store/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Kept on the state so command handlers can read it.
    config: object
    store: TaskStore
