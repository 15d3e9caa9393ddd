# tests/conftest.py

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_store.core.state import AppState
from todo_store.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeStorage


@pytest.fixture()
def config(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal config object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="todo-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        storage_backend="memory",
        storage_path=None,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def slow_clock() -> FakeClock:
    """Clock that never advances: every call returns the same instant."""
    return FakeClock(step=timedelta(0))


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
def store(storage: FakeStorage, clock: FakeClock) -> TaskStore:
    return TaskStore(storage, clock=clock)


@pytest.fixture()
def state(config: SimpleNamespace, store: TaskStore) -> AppState:
    return AppState(config=config, store=store)
