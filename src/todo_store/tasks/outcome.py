# src/todo_store/tasks/outcome.py

"""
Explicit read results.

Reads return Ok(value) or Err(kind, detail) so callers can tell a missing key from a
malformed payload from a storage failure. The fail-soft TaskStore API is built on top.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(StrEnum):
    ABSENT = "absent"
    MALFORMED = "malformed"
    IO = "io"
    NOT_FOUND = "not_found"
    INVALID_ID = "invalid_id"


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    kind: ErrorKind
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False


Outcome = Ok[T] | Err
