# src/todo_store/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

DEFAULT_PRIORITY = 1

# Persisted key names (camelCase, shared with the UI layer).
_TASK_KEYS = (
    "id",
    "name",
    "completed",
    "priority",
    "createTime",
    "updateTime",
    "dueDate",
    "completedTime",
    "notes",
)


def iso_timestamp(dt: datetime) -> str:
    """UTC, millisecond precision, 'Z' suffix: 2024-05-01T09:30:00.000Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def coerce_task_id(raw: Any) -> int:
    """
    Coerce an id coming from a caller (int, numeric str, float) into int.

    Raises ValueError/TypeError for anything else; bools are rejected explicitly.
    """
    if isinstance(raw, bool):
        raise TypeError("bool is not a task id")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValueError(f"non-integral task id: {raw!r}")
        return int(raw)
    if isinstance(raw, str):
        return int(raw.strip())
    raise TypeError(f"unsupported task id type: {type(raw).__name__}")


_TRUE_WORDS = {"1", "true", "yes", "y", "on"}


def parse_flag(raw: Any) -> bool:
    """Strict bool: True/False as-is, "true"/"false"-style strings, non-zero numbers."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return raw.strip().lower() in _TRUE_WORDS
    if isinstance(raw, (int, float)):
        return raw != 0
    return False


def parse_priority(raw: Any) -> int | float:
    """Numbers pass through unchanged; numeric strings are converted; anything else is the default."""
    if isinstance(raw, bool) or raw is None:
        return DEFAULT_PRIORITY
    if isinstance(raw, (int, float)):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            return DEFAULT_PRIORITY
    return DEFAULT_PRIORITY


def parse_text(raw: Any) -> str:
    if raw is None:
        return ""
    return raw if isinstance(raw, str) else str(raw)


def parse_opt_text(raw: Any) -> str | None:
    if raw is None:
        return None
    return raw if isinstance(raw, str) else str(raw)


# persisted key -> (attribute, parser). Parsers never raise.
_TASK_FIELDS = {
    "name": ("name", parse_text),
    "completed": ("completed", parse_flag),
    "priority": ("priority", parse_priority),
    "createTime": ("create_time", parse_text),
    "updateTime": ("update_time", parse_text),
    "dueDate": ("due_date", parse_opt_text),
    "completedTime": ("completed_time", parse_opt_text),
    "notes": ("notes", parse_text),
}


@dataclass(slots=True)
class Task:
    id: int
    name: str
    completed: bool = False
    priority: int | float = DEFAULT_PRIORITY
    create_time: str = ""
    update_time: str = ""
    due_date: str | None = None
    completed_time: str | None = None
    notes: str = ""

    # Keys we don't model but must keep on round-trip.
    extra: dict[str, Any] = field(default_factory=dict)

    # Known fields exactly as they were stored (None for tasks built in code).
    stored: dict[str, Any] | None = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """
        Persisted form. For a task read from storage, a field whose attribute still
        matches what was read is written back with its stored value (or left out if it
        was missing), so records nobody changed are rewritten byte-for-byte.
        """
        out: dict[str, Any] = dict(self.extra)
        out["id"] = self.id
        for key, (attr, parse) in _TASK_FIELDS.items():
            value = getattr(self, attr)
            if self.stored is None:
                out[key] = value
            elif key in self.stored:
                raw = self.stored[key]
                out[key] = raw if parse(raw) == value else value
            elif value != parse(None):
                out[key] = value
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        """Lenient parse: only a missing or unusable id is an error."""
        if not isinstance(raw, dict):
            raise ValueError(f"task record must be an object, got {type(raw).__name__}")
        if "id" not in raw:
            raise ValueError("task record has no id")
        values = {attr: parse(raw.get(key)) for key, (attr, parse) in _TASK_FIELDS.items()}
        return cls(
            id=coerce_task_id(raw["id"]),
            extra={k: v for k, v in raw.items() if k not in _TASK_KEYS},
            stored={k: raw[k] for k in _TASK_FIELDS if k in raw},
            **values,
        )


_SETTINGS_KEYS = ("defaultPriority", "showCompleted", "sortBy", "theme")


@dataclass(frozen=True, slots=True)
class TaskSettings:
    default_priority: int | float = DEFAULT_PRIORITY
    show_completed: bool = True
    sort_by: str = "createTime"
    theme: str = "light"

    # Preferences added by the UI that we don't model.
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out.update(
            {
                "defaultPriority": self.default_priority,
                "showCompleted": self.show_completed,
                "sortBy": self.sort_by,
                "theme": self.theme,
            }
        )
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> TaskSettings:
        if not isinstance(raw, dict):
            raise ValueError(f"settings record must be an object, got {type(raw).__name__}")
        d = cls()
        return cls(
            default_priority=parse_priority(raw.get("defaultPriority", d.default_priority)),
            show_completed=parse_flag(raw.get("showCompleted", d.show_completed)),
            sort_by=parse_text(raw.get("sortBy", d.sort_by)),
            theme=parse_text(raw.get("theme", d.theme)),
            extra={k: v for k, v in raw.items() if k not in _SETTINGS_KEYS},
        )


def parse_known_fields(record: dict[str, Any]) -> dict[str, Any]:
    """Run the known task fields of a caller's patch through their parsers; other keys pass as-is."""
    return {k: (_TASK_FIELDS[k][1](v) if k in _TASK_FIELDS else v) for k, v in record.items()}
