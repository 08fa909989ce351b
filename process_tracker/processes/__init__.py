"""Process tracking module."""

from .contracts import (
    AppState,
    Process,
    ProcessNotFoundError,
    ProcessStatus,
    Task,
    TaskDraft,
    TaskIndexError,
)
from .store import ProcessStore

__all__ = [
    "AppState",
    "Process",
    "ProcessNotFoundError",
    "ProcessStatus",
    "Task",
    "TaskDraft",
    "TaskIndexError",
    "ProcessStore",
]
