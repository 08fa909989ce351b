from .server import ProcessTrackerMCPServer, main
from .processes import AppState, Process, ProcessStatus, ProcessStore, Task, TaskDraft
from .wizard import ProcessWizard

__all__ = [
    "ProcessTrackerMCPServer",
    "ProcessStore",
    "ProcessWizard",
    "AppState",
    "Process",
    "ProcessStatus",
    "Task",
    "TaskDraft",
    "main"
]
