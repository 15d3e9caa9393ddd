# src/todo_store/cli/commands.py

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable

from ..core.state import AppState
from ..tasks.outcome import Err, ErrorKind
from ..tasks.task_api import SORT_KEYS, task_stats, visible_tasks
from ..tasks.task_models import Task, TaskSettings

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console loop (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def format_task(task: Task) -> str:
    mark = "x" if task.completed else " "
    line = f"[{mark}] {task.id}  (p{task.priority}) {task.name}"
    if task.due_date:
        line += f"  due {task.due_date}"
    return line


def _parse_ids(args: list[str]) -> list[int] | None:
    try:
        return [int(a) for a in args]
    except ValueError:
        return None


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list      -> tasks filtered and sorted by settings
    /list all  -> every task in storage order
    """
    tasks = state.store.list_tasks()
    if not (args and args[0].lower() == "all"):
        tasks = visible_tasks(tasks, state.store.get_settings())
    if not tasks:
        return "No tasks."
    return "\n".join(format_task(t) for t in tasks)


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add Buy milk !2 @2024-06-01

    `!N` sets priority (default: settings.defaultPriority), `@DATE` sets the due date.
    """
    settings = state.store.get_settings() or TaskSettings()
    priority = settings.default_priority
    due: str | None = None
    words: list[str] = []

    for a in args:
        if a.startswith("!") and a[1:].isdigit():
            priority = int(a[1:])
        elif a.startswith("@") and len(a) > 1:
            due = a[1:]
        else:
            words.append(a)

    name = " ".join(words).strip()
    if not name:
        return "Usage: /add <name> [!priority] [@due-date]"

    task = state.store.save_task({"name": name, "priority": priority, "dueDate": due})
    if task is None:
        return "Could not save the task (see log)."
    return f"Added: {format_task(task)}"


def cmd_show(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /show <id>"
    task = state.store.get_task_by_id(args[0])
    if task is None:
        return f"No task with id {args[0]}."
    lines = [format_task(task), f"  created: {task.create_time}", f"  updated: {task.update_time}"]
    if task.completed_time:
        lines.append(f"  completed: {task.completed_time}")
    if task.notes:
        lines.append(f"  notes: {task.notes}")
    return "\n".join(lines)


def _set_completed(state: AppState, args: list[str], completed: bool) -> str:
    ids = _parse_ids(args)
    if not ids:
        return f"Usage: /{'done' if completed else 'undo'} <id> [<id> ...]"
    missing = [i for i in ids if not state.store.update_task({"id": i, "completed": completed})]
    if missing:
        return f"Not updated: {', '.join(str(i) for i in missing)}"
    return f"Marked {len(ids)} task(s) as {'done' if completed else 'not done'}."


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, True)


def cmd_undo(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, False)


_EDITABLE = {"name": "name", "priority": "priority", "due": "dueDate", "notes": "notes"}


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> field=value ...

    Fields: name, priority, due, notes. Values can't contain spaces except for the
    last pair, which takes the rest of the line (/edit 1 notes=call back tomorrow).
    """
    if len(args) < 2:
        return "Usage: /edit <id> name=... | priority=N | due=DATE | notes=..."

    patch: dict[str, object] = {"id": args[0]}
    current: str | None = None
    for a in args[1:]:
        field, sep, value = a.partition("=")
        if sep and field.lower() in _EDITABLE:
            current = _EDITABLE[field.lower()]
            patch[current] = value
        elif current is not None:
            patch[current] = f"{patch[current]} {a}"
        else:
            return f"Unknown field in {a!r}. Editable: {', '.join(_EDITABLE)}"

    if "priority" in patch:
        try:
            patch["priority"] = int(str(patch["priority"]))
        except ValueError:
            return "priority must be an integer."
    if patch.get("dueDate") == "":
        patch["dueDate"] = None

    res = state.store.apply_update(patch)
    if isinstance(res, Err):
        if res.kind in (ErrorKind.NOT_FOUND, ErrorKind.INVALID_ID):
            return f"No task with id {args[0]}."
        return "Could not update the task (see log)."
    return f"Updated task {res.value.id}."


def cmd_rm(state: AppState, args: list[str]) -> str:
    ids = _parse_ids(args)
    if not ids:
        return "Usage: /rm <id> [<id> ...]"
    ok = state.store.delete_task(ids[0]) if len(ids) == 1 else state.store.delete_tasks(ids)
    return f"Removed {len(ids)} id(s)." if ok else "Could not delete (see log)."


def cmd_clear(state: AppState, args: list[str]) -> str:
    before = task_stats(state.store.list_tasks())
    if not state.store.clear_completed_tasks():
        return "Could not clear completed tasks (see log)."
    return f"Cleared {before.completed} completed task(s)."


def cmd_settings(state: AppState, args: list[str]) -> str:
    settings = state.store.get_settings()
    if settings is None:
        return "Settings could not be read (see log)."
    return "Settings:\n" + "\n".join(f"  {k}: {v}" for k, v in settings.to_dict().items())


_SETTING_FIELDS = {
    "defaultpriority": "default_priority",
    "showcompleted": "show_completed",
    "sortby": "sort_by",
    "theme": "theme",
}


def cmd_set(state: AppState, args: list[str]) -> str:
    """
    /set defaultPriority 2
    /set showCompleted off
    /set sortBy priority
    /set theme dark
    """
    if len(args) != 2:
        return "Usage: /set <defaultPriority|showCompleted|sortBy|theme> <value>"

    field = _SETTING_FIELDS.get(args[0].lower())
    if field is None:
        return f"Unknown setting {args[0]!r}."

    raw = args[1]
    value: object
    if field == "default_priority":
        if not raw.lstrip("-").isdigit():
            return "defaultPriority must be an integer."
        value = int(raw)
    elif field == "show_completed":
        value = raw.strip().lower() in {"1", "true", "yes", "y", "on"}
    elif field == "sort_by":
        if raw not in SORT_KEYS:
            return f"sortBy must be one of: {', '.join(SORT_KEYS)}"
        value = raw
    else:
        value = raw

    current = state.store.get_settings()
    if current is None:
        return "Settings could not be read (see log)."
    if not state.store.save_settings(dataclasses.replace(current, **{field: value})):
        return "Could not save settings (see log)."
    return f"{args[0]} = {value}"


def cmd_stats(state: AppState, args: list[str]) -> str:
    s = task_stats(state.store.list_tasks())
    return f"Tasks: {s.total} total, {s.active} active, {s.completed} completed."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="List tasks: /list | /list all.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add <name> [!priority] [@due].")
registry.register("show", cmd_show, help_text="Show one task: /show <id>.")
registry.register("done", cmd_done, help_text="Mark tasks completed: /done <id> ...")
registry.register("undo", cmd_undo, help_text="Mark tasks not completed: /undo <id> ...")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> field=value ...")
registry.register("rm", cmd_rm, help_text="Delete tasks: /rm <id> ...", aliases=["del"])
registry.register("clear", cmd_clear, help_text="Delete all completed tasks.")
registry.register("settings", cmd_settings, help_text="Show settings.")
registry.register("set", cmd_set, help_text="Change a setting: /set <name> <value>.")
registry.register("stats", cmd_stats, help_text="Count tasks.")
