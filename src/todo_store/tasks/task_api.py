# src/todo_store/tasks/task_api.py

from __future__ import annotations

import logging
from dataclasses import dataclass

from .task_models import Task, TaskSettings

logger = logging.getLogger(__name__)

# sortBy value -> (key, reverse). Unknown values fall back to createTime.
_SORTS = {
    "createTime": (lambda t: (t.create_time, t.id), False),
    "updateTime": (lambda t: (t.update_time, t.id), True),
    "priority": (lambda t: (t.priority, t.create_time, t.id), True),
    "dueDate": (lambda t: (t.due_date is None, t.due_date or "", t.id), False),
    "name": (lambda t: (t.name.casefold(), t.id), False),
}

SORT_KEYS = tuple(_SORTS)


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    completed: int

    @property
    def active(self) -> int:
        return self.total - self.completed


def visible_tasks(tasks: list[Task], settings: TaskSettings | None) -> list[Task]:
    """
    Apply display settings to a task list: hide completed tasks when showCompleted is
    off, then order by sortBy. Returns a new list; `tasks` is left untouched.
    """
    if settings is None:
        settings = TaskSettings()

    out = [t for t in tasks if settings.show_completed or not t.completed]

    sort = _SORTS.get(settings.sort_by)
    if sort is None:
        logger.debug("Unknown sortBy=%r, using createTime.", settings.sort_by)
        sort = _SORTS["createTime"]
    key, reverse = sort
    out.sort(key=key, reverse=reverse)
    return out


def task_stats(tasks: list[Task]) -> TaskStats:
    return TaskStats(total=len(tasks), completed=sum(1 for t in tasks if t.completed))
