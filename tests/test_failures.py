# tests/test_failures.py

from __future__ import annotations

import json

from todo_store.tasks.outcome import Err, ErrorKind, Ok
from todo_store.tasks.task_models import TaskSettings
from todo_store.tasks.task_store import SETTINGS_KEY, TASKS_KEY, TaskStore

from .fakes import FakeClock, FakeStorage


def test_corrupted_tasks_key_lists_empty(clock: FakeClock) -> None:
    storage = FakeStorage({TASKS_KEY: "{not json"})
    store = TaskStore(storage, clock=clock)
    assert store.list_tasks() == []

    res = store.read_tasks()
    assert isinstance(res, Err)
    assert res.kind is ErrorKind.MALFORMED


def test_non_array_tasks_value_is_malformed(clock: FakeClock) -> None:
    storage = FakeStorage({TASKS_KEY: json.dumps({"id": 1})})
    store = TaskStore(storage, clock=clock)
    assert store.list_tasks() == []
    assert store.read_tasks().kind is ErrorKind.MALFORMED  # type: ignore[union-attr]


def test_mutations_refuse_to_overwrite_corrupted_list(clock: FakeClock) -> None:
    storage = FakeStorage({TASKS_KEY: "garbage"})
    store = TaskStore(storage, clock=clock)

    assert store.save_task({"name": "x"}) is None
    assert store.delete_task(1) is False
    assert store.delete_tasks([1]) is False
    assert store.clear_completed_tasks() is False
    assert store.update_task({"id": 1, "name": "y"}) is False
    assert storage.writes == []
    assert storage.data[TASKS_KEY] == "garbage"


def test_read_outcomes_distinguish_absent_and_io(storage: FakeStorage, clock: FakeClock) -> None:
    store = TaskStore(storage, clock=clock)
    absent = store.read_tasks()
    assert isinstance(absent, Err) and absent.kind is ErrorKind.ABSENT

    storage.fail_get = True
    io = store.read_tasks()
    assert isinstance(io, Err) and io.kind is ErrorKind.IO
    assert "unavailable" in io.detail

    storage.fail_get = False
    store.save_task({"name": "x"})
    ok = store.read_tasks()
    assert isinstance(ok, Ok) and ok.ok
    assert [t.name for t in ok.value] == ["x"]


def test_storage_read_failure_is_absorbed(storage: FakeStorage, clock: FakeClock) -> None:
    store = TaskStore(storage, clock=clock)
    saved = store.save_task({"name": "x"})
    assert saved

    storage.fail_get = True
    assert store.list_tasks() == []
    assert store.get_task_by_id(saved.id) is None
    assert store.save_task({"name": "y"}) is None
    assert store.update_task({"id": saved.id, "completed": True}) is False
    assert store.delete_task(saved.id) is False
    assert store.get_settings() is None


def test_storage_write_failure_is_absorbed(storage: FakeStorage, clock: FakeClock) -> None:
    store = TaskStore(storage, clock=clock)
    saved = store.save_task({"name": "x"})
    assert saved

    storage.fail_set = True
    assert store.save_task({"name": "y"}) is None
    assert store.update_task({"id": saved.id, "name": "z"}) is False
    assert store.delete_task(saved.id) is False
    assert store.delete_tasks([saved.id]) is False
    assert store.clear_completed_tasks() is False
    assert store.save_settings(TaskSettings(theme="dark")) is False

    storage.fail_set = False
    assert [t.name for t in store.list_tasks()] == ["x"]


def test_malformed_settings_returns_none(clock: FakeClock) -> None:
    storage = FakeStorage({SETTINGS_KEY: "[1, 2"})
    store = TaskStore(storage, clock=clock)
    assert store.get_settings() is None
    res = store.read_settings()
    assert isinstance(res, Err) and res.kind is ErrorKind.MALFORMED


def test_find_task_reports_why(store: TaskStore, storage: FakeStorage) -> None:
    missing = store.find_task(1)
    assert isinstance(missing, Err) and missing.kind is ErrorKind.NOT_FOUND

    saved = store.save_task({"name": "x"})
    assert saved
    found = store.find_task(str(saved.id))
    assert isinstance(found, Ok) and found.value == saved

    bad = store.find_task("abc")
    assert isinstance(bad, Err) and bad.kind is ErrorKind.INVALID_ID

    storage.fail_get = True
    io = store.find_task(saved.id)
    assert isinstance(io, Err) and io.kind is ErrorKind.IO


def test_apply_update_reports_why(store: TaskStore, storage: FakeStorage) -> None:
    assert store.apply_update({"id": 5}).kind is ErrorKind.NOT_FOUND  # type: ignore[union-attr]

    saved = store.save_task({"name": "x"})
    assert saved

    res = store.apply_update({"id": saved.id, "completed": True})
    assert isinstance(res, Ok)
    assert res.value.completed and res.value.completed_time is not None

    assert store.apply_update({"name": "no id"}).kind is ErrorKind.INVALID_ID  # type: ignore[union-attr]
    assert store.apply_update({"id": saved.id + 1}).kind is ErrorKind.NOT_FOUND  # type: ignore[union-attr]

    storage.fail_set = True
    failed = store.apply_update({"id": saved.id, "name": "y"})
    assert isinstance(failed, Err) and failed.kind is ErrorKind.IO


def test_apply_update_over_corrupted_list(clock: FakeClock) -> None:
    storage = FakeStorage({TASKS_KEY: "garbage"})
    store = TaskStore(storage, clock=clock)
    res = store.apply_update({"id": 1, "name": "y"})
    assert isinstance(res, Err) and res.kind is ErrorKind.MALFORMED
    assert storage.writes == []
