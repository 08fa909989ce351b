"""Data contracts for process tracking."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ProcessStatus(Enum):
    """Status of a tracked process."""
    OPEN = "Abierto"
    CLOSED = "Cerrado"


class ProcessNotFoundError(KeyError):
    """Raised when a process id is not in the store."""

    def __init__(self, process_id: str) -> None:
        super().__init__(process_id)
        self.process_id = process_id

    def __str__(self) -> str:
        return f"Process not found: {self.process_id}"


class TaskIndexError(IndexError):
    """Raised when a task index does not point into a process's tasks."""


def new_process_id() -> str:
    return f"proc-{uuid.uuid4().hex[:8]}"


def new_task_id() -> str:
    return f"task-{uuid.uuid4().hex[:8]}"


def format_instant(value: datetime) -> str:
    """Serialize an aware datetime as an ISO instant ending in Z."""
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_instant(value: str) -> datetime:
    """Parse an ISO instant; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class TaskDraft:
    """A task as entered in the wizard, before it gets an id."""
    name: str = ""
    assignee: str = ""
    follow_up_date: str = ""
    comments: str = ""

    @property
    def is_complete_entry(self) -> bool:
        """True when name, assignee and follow-up date are all filled in."""
        return bool(self.name and self.assignee and self.follow_up_date)


@dataclass
class Task:
    """One step of a process."""
    id: str
    name: str
    assignee: str
    follow_up_date: str
    comments: str = ""
    is_complete: bool = False

    def to_draft(self) -> TaskDraft:
        return TaskDraft(
            name=self.name,
            assignee=self.assignee,
            follow_up_date=self.follow_up_date,
            comments=self.comments,
        )

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON storage."""
        return {
            "id": self.id,
            "name": self.name,
            "assignee": self.assignee,
            "followUpDate": self.follow_up_date,
            "isComplete": self.is_complete,
            "comments": self.comments,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Deserialize from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            assignee=data.get("assignee", ""),
            follow_up_date=data.get("followUpDate", ""),
            comments=data.get("comments") or "",
            is_complete=bool(data.get("isComplete", False)),
        )


@dataclass
class Process:
    """A named, ordered checklist of tasks tracked from creation to closure."""
    id: str
    name: str
    tasks: list[Task]
    status: ProcessStatus
    created_at: datetime
    updated_at: datetime
    current_task_index: int = 0
    closed_at: datetime | None = None

    @property
    def current_task(self) -> Task | None:
        """Task awaiting completion, or None when the index is out of range."""
        if 0 <= self.current_task_index < len(self.tasks):
            return self.tasks[self.current_task_index]
        return None

    @property
    def is_on_last_task(self) -> bool:
        return self.current_task_index == len(self.tasks) - 1

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON storage."""
        return {
            "id": self.id,
            "name": self.name,
            "tasks": [task.to_dict() for task in self.tasks],
            "currentTaskIndex": self.current_task_index,
            "status": self.status.value,
            "createdAt": format_instant(self.created_at),
            "updatedAt": format_instant(self.updated_at),
            "closedAt": format_instant(self.closed_at) if self.closed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Process":
        """Deserialize from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            tasks=[Task.from_dict(t) for t in data.get("tasks", [])],
            current_task_index=int(data.get("currentTaskIndex", 0)),
            status=ProcessStatus(data.get("status", ProcessStatus.OPEN.value)),
            created_at=parse_instant(data["createdAt"]),
            updated_at=parse_instant(data.get("updatedAt") or data["createdAt"]),
            closed_at=parse_instant(data["closedAt"]) if data.get("closedAt") else None,
        )


@dataclass
class AppState:
    """The persisted unit: every process plus the two suggestion pools."""
    processes: list[Process] = field(default_factory=list)
    task_options: list[str] = field(default_factory=list)
    assignee_options: list[str] = field(default_factory=list)

    def find(self, process_id: str) -> Process:
        for process in self.processes:
            if process.id == process_id:
                return process
        raise ProcessNotFoundError(process_id)

    def to_dict(self) -> dict:
        """Serialize to the stored document shape."""
        return {
            "processes": [p.to_dict() for p in self.processes],
            "taskOptions": list(self.task_options),
            "assigneeOptions": list(self.assignee_options),
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "AppState":
        """Deserialize; missing keys become empty collections."""
        data = data or {}
        return cls(
            processes=[Process.from_dict(p) for p in data.get("processes") or []],
            task_options=list(data.get("taskOptions") or []),
            assignee_options=list(data.get("assigneeOptions") or []),
        )
