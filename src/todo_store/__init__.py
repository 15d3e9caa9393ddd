"""Local persistence for a task-list application."""

from .tasks.task_models import Task, TaskSettings
from .tasks.task_store import TaskStore

__all__ = ["Task", "TaskSettings", "TaskStore"]
__version__ = "0.1.0"
