# src/todo_store/tasks/task_store.py

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from ..core.ports import KeyValueStorage
from .outcome import Err, ErrorKind, Ok, Outcome
from .task_models import (
    DEFAULT_PRIORITY,
    Task,
    TaskSettings,
    coerce_task_id,
    epoch_millis,
    iso_timestamp,
    parse_flag,
    parse_known_fields,
    parse_opt_text,
    parse_priority,
    parse_text,
)

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
SETTINGS_KEY = "settings"

# snake_case spellings accepted from Python callers; storage stays camelCase.
_KEY_ALIASES = {
    "create_time": "createTime",
    "update_time": "updateTime",
    "due_date": "dueDate",
    "completed_time": "completedTime",
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_record(data: Task | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(data, Task):
        return data.to_dict()
    if not isinstance(data, Mapping):
        raise TypeError(f"expected a Task or a mapping, got {type(data).__name__}")
    return {_KEY_ALIASES.get(k, k): v for k, v in data.items()}


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


class TaskStore:
    """
    Task list + settings persisted as JSON text in a key-value storage.

    Every mutation is a full read-modify-write of the `tasks` key; nothing is cached
    between calls. The public operations never raise: failures are logged and turned
    into False / None / []. read_tasks() and read_settings() expose the underlying
    Ok/Err result for callers that need to know why a read failed.

    Concurrency:
    - single logical writer assumed; two writers racing on the same storage may lose updates
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._storage = storage
        self._clock = clock or _utc_now
        logger.info("TaskStore ready storage=%r total=%s", storage, len(self.list_tasks()))

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage

    # ---- low-level helpers ----

    def _now(self) -> datetime:
        return self._clock()

    def read_tasks(self) -> Outcome[list[Task]]:
        try:
            raw = self._storage.get(TASKS_KEY)
        except Exception as e:
            logger.exception("Failed to read key=%s from storage.", TASKS_KEY)
            return Err(ErrorKind.IO, str(e))

        if not raw:
            return Err(ErrorKind.ABSENT)

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
            tasks = [Task.from_dict(item) for item in data]
        except Exception as e:
            logger.warning("Malformed task list under key=%s: %s", TASKS_KEY, e)
            return Err(ErrorKind.MALFORMED, str(e))

        return Ok(tasks)

    def read_settings(self) -> Outcome[TaskSettings]:
        try:
            raw = self._storage.get(SETTINGS_KEY)
        except Exception as e:
            logger.exception("Failed to read key=%s from storage.", SETTINGS_KEY)
            return Err(ErrorKind.IO, str(e))

        if not raw:
            return Err(ErrorKind.ABSENT)

        try:
            settings = TaskSettings.from_dict(json.loads(raw))
        except Exception as e:
            logger.warning("Malformed settings under key=%s: %s", SETTINGS_KEY, e)
            return Err(ErrorKind.MALFORMED, str(e))

        return Ok(settings)

    def _load_for_write(self) -> list[Task] | None:
        """
        Task list to mutate, or None when the stored list can't be trusted.

        An absent key is an empty list. A malformed or unreadable one is not: writing
        over it would silently destroy whatever is there.
        """
        res = self.read_tasks()
        if isinstance(res, Ok):
            return res.value
        if res.kind is ErrorKind.ABSENT:
            return []
        logger.error("Refusing to rewrite key=%s (%s): %s", TASKS_KEY, res.kind, res.detail)
        return None

    def _write_tasks(self, tasks: list[Task]) -> None:
        self._storage.set(TASKS_KEY, _dump([t.to_dict() for t in tasks]))

    def _next_id(self, tasks: list[Task], now: datetime) -> int:
        # Millisecond timestamp, bumped past the newest id if the clock hasn't moved.
        candidate = epoch_millis(now)
        if tasks:
            candidate = max(candidate, max(t.id for t in tasks) + 1)
        return candidate

    # ---- public API: tasks ----

    def list_tasks(self) -> list[Task]:
        try:
            res = self.read_tasks()
            return res.value if isinstance(res, Ok) else []
        except Exception:
            logger.exception("Failed to list tasks.")
            return []

    def save_task(self, data: Task | Mapping[str, Any]) -> Task | None:
        """
        Append a new task built from `data` (name, priority, dueDate, notes).

        Any id / completion / timestamp fields in `data` are ignored.
        Returns the stored Task, or None if nothing was written.
        """
        try:
            record = _as_record(data)
            tasks = self._load_for_write()
            if tasks is None:
                return None

            now = self._now()
            stamp = iso_timestamp(now)
            task = Task(
                id=self._next_id(tasks, now),
                name=parse_text(record.get("name")),
                completed=False,
                priority=parse_priority(record.get("priority") or DEFAULT_PRIORITY),
                create_time=stamp,
                update_time=stamp,
                due_date=parse_opt_text(record.get("dueDate") or None),
                completed_time=None,
                notes=parse_text(record.get("notes")),
            )
            tasks.append(task)
            self._write_tasks(tasks)
            logger.debug("Task saved id=%s priority=%s due=%s", task.id, task.priority, task.due_date)
            return task
        except Exception:
            logger.exception("Failed to save task.")
            return None

    def find_task(self, task_id: Any) -> Outcome[Task]:
        """
        Like get_task_by_id, but says why nothing came back: INVALID_ID, NOT_FOUND
        (also when no list was ever stored), or the read error itself.
        """
        try:
            wanted = coerce_task_id(task_id)
        except (TypeError, ValueError):
            logger.warning("find_task: invalid id %r", task_id)
            return Err(ErrorKind.INVALID_ID, repr(task_id))

        res = self.read_tasks()
        if isinstance(res, Err):
            return Err(ErrorKind.NOT_FOUND, f"id={wanted}") if res.kind is ErrorKind.ABSENT else res

        for task in res.value:
            if task.id == wanted:
                return Ok(task)
        return Err(ErrorKind.NOT_FOUND, f"id={wanted}")

    def get_task_by_id(self, task_id: Any) -> Task | None:
        try:
            res = self.find_task(task_id)
            return res.value if isinstance(res, Ok) else None
        except Exception:
            logger.exception("Failed to get task id=%r.", task_id)
            return None

    def apply_update(self, patch: Task | Mapping[str, Any]) -> Outcome[Task]:
        """
        Merge `patch` over the stored task with the same id and return the result.

        Keys in the patch override, everything else is kept. updateTime is always
        refreshed. completedTime follows the resulting `completed` flag: kept if the
        task was already completed, stamped now if it just became completed, cleared
        otherwise.

        Err kinds: INVALID_ID (no usable id in the patch), NOT_FOUND, MALFORMED / IO
        (stored list unreadable; nothing is written), IO (write failed).
        """
        try:
            record = _as_record(patch)
            task_id = coerce_task_id(record.get("id"))
        except (TypeError, ValueError) as e:
            logger.warning("apply_update: no usable id in patch %r", patch)
            return Err(ErrorKind.INVALID_ID, str(e))

        res = self.read_tasks()
        if isinstance(res, Err):
            if res.kind is ErrorKind.ABSENT:
                return Err(ErrorKind.NOT_FOUND, f"id={task_id}")
            logger.error("Refusing to rewrite key=%s (%s): %s", TASKS_KEY, res.kind, res.detail)
            return res
        tasks = res.value

        index = next((i for i, t in enumerate(tasks) if t.id == task_id), None)
        if index is None:
            logger.debug("apply_update: id=%s not found", task_id)
            return Err(ErrorKind.NOT_FOUND, f"id={task_id}")

        original = tasks[index]
        stamp = iso_timestamp(self._now())

        merged = original.to_dict()
        merged.update(parse_known_fields(record))
        merged["id"] = task_id
        merged["updateTime"] = stamp

        if parse_flag(merged.get("completed")):
            keep = original.completed and original.completed_time
            merged["completedTime"] = original.completed_time if keep else stamp
        else:
            merged["completedTime"] = None

        tasks[index] = Task.from_dict(merged)
        try:
            self._write_tasks(tasks)
        except Exception as e:
            logger.exception("Failed to write updated task id=%s.", task_id)
            return Err(ErrorKind.IO, str(e))

        logger.debug(
            "Task updated id=%s completed=%s fields=%s",
            task_id,
            tasks[index].completed,
            sorted(record),
        )
        return Ok(tasks[index])

    def update_task(self, patch: Task | Mapping[str, Any]) -> bool:
        try:
            return isinstance(self.apply_update(patch), Ok)
        except Exception:
            logger.exception("Failed to update task.")
            return False

    def delete_task(self, task_id: Any) -> bool:
        """Remove every task with this id. True on success, even if nothing matched."""
        try:
            wanted = coerce_task_id(task_id)
        except (TypeError, ValueError):
            logger.warning("delete_task: invalid id %r", task_id)
            return False

        try:
            tasks = self._load_for_write()
            if tasks is None:
                return False
            remaining = [t for t in tasks if t.id != wanted]
            self._write_tasks(remaining)
            logger.debug("delete_task id=%s removed=%d", wanted, len(tasks) - len(remaining))
            return True
        except Exception:
            logger.exception("Failed to delete task id=%s.", wanted)
            return False

    def delete_tasks(self, ids: Iterable[Any]) -> bool:
        """Remove every task whose id is in `ids`. Ids that aren't integers are skipped."""
        try:
            wanted: set[int] = set()
            for raw in ids:
                try:
                    wanted.add(coerce_task_id(raw))
                except (TypeError, ValueError):
                    logger.warning("delete_tasks: skipping invalid id %r", raw)

            tasks = self._load_for_write()
            if tasks is None:
                return False
            remaining = [t for t in tasks if t.id not in wanted]
            self._write_tasks(remaining)
            logger.debug("delete_tasks ids=%s removed=%d", sorted(wanted), len(tasks) - len(remaining))
            return True
        except Exception:
            logger.exception("Failed to delete tasks.")
            return False

    def clear_completed_tasks(self) -> bool:
        try:
            tasks = self._load_for_write()
            if tasks is None:
                return False
            active = [t for t in tasks if not t.completed]
            self._write_tasks(active)
            logger.debug("clear_completed_tasks removed=%d", len(tasks) - len(active))
            return True
        except Exception:
            logger.exception("Failed to clear completed tasks.")
            return False

    # ---- public API: settings ----

    def get_settings(self) -> TaskSettings | None:
        """
        Stored settings, defaults when none were ever saved, None on a read/parse error.

        Callers must not treat None like "absent": defaults come back as a real object.
        """
        try:
            res = self.read_settings()
            if isinstance(res, Ok):
                return res.value
            if res.kind is ErrorKind.ABSENT:
                return TaskSettings()
            return None
        except Exception:
            logger.exception("Failed to get settings.")
            return None

    def save_settings(self, settings: TaskSettings | Mapping[str, Any]) -> bool:
        try:
            if not isinstance(settings, TaskSettings):
                settings = TaskSettings.from_dict(dict(settings))
            self._storage.set(SETTINGS_KEY, _dump(settings.to_dict()))
            logger.debug("Settings saved %s", settings)
            return True
        except Exception:
            logger.exception("Failed to save settings.")
            return False
