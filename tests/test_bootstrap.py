# tests/test_bootstrap.py

from __future__ import annotations

import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_store.cli.bootstrap import create_initial_state
from todo_store.cli.main import main
from todo_store.config import AppConfig
from todo_store.storage.backends import JsonFileStorage, MemoryStorage


def test_create_initial_state_memory(config: SimpleNamespace) -> None:
    state = create_initial_state(config=config)
    assert isinstance(state.store.storage, MemoryStorage)
    assert state.store.list_tasks() == []


def test_create_initial_state_json_creates_dirs(tmp_path: Path) -> None:
    cfg = SimpleNamespace(
        app_name="t",
        log_level="INFO",
        data_dir=tmp_path / "data",
        storage_backend="json",
        storage_path=tmp_path / "data" / "sub" / "todo.json",
    )
    state = create_initial_state(config=cfg)
    assert isinstance(state.store.storage, JsonFileStorage)
    assert (tmp_path / "data" / "sub").is_dir()


def test_config_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TODO_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TODO_STORAGE_BACKEND", "SQLite")
    monkeypatch.delenv("TODO_STORAGE_PATH", raising=False)
    monkeypatch.setenv("TODO_LOG_LEVEL", "debug")

    cfg = AppConfig.from_env()
    assert cfg.storage_backend == "sqlite"
    assert cfg.storage_path == tmp_path / "todo.sqlite3"
    assert cfg.log_level == "DEBUG"


def test_config_memory_backend_has_no_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TODO_STORAGE_BACKEND", "memory")
    assert AppConfig.from_env().storage_path is None


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        if h not in saved_handlers:
            root.removeHandler(h)
            h.close()
    for h in saved_handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(saved_level)
    logging.captureWarnings(False)


@pytest.mark.usefixtures("restore_root_logging")
def test_main_runs_single_command(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cfg = AppConfig(
        app_name="t",
        log_level="WARNING",
        data_dir=tmp_path,
        storage_backend="json",
        storage_path=tmp_path / "todo.json",
    )
    monkeypatch.setattr("todo_store.cli.main.get_config", lambda: cfg)

    assert main(["add", "Buy", "milk"]) == 0
    assert main(["/list"]) == 0
    out = capsys.readouterr().out
    assert "Added:" in out
    assert "Buy milk" in out
    assert (tmp_path / "todo.log").exists()


@pytest.mark.usefixtures("restore_root_logging")
def test_main_returns_nonzero_when_command_crashes(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cfg = AppConfig(
        app_name="t",
        log_level="CRITICAL",
        data_dir=tmp_path,
        storage_backend="memory",
        storage_path=None,
    )
    monkeypatch.setattr("todo_store.cli.main.get_config", lambda: cfg)

    def boom(state, line):
        raise RuntimeError("boom")

    monkeypatch.setattr("todo_store.cli.main.command_registry.handle", boom)

    assert main(["stats"]) == 1
    assert "Internal error" in capsys.readouterr().err
