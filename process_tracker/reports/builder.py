"""Derived per-process report rows."""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..processes.contracts import Process
from .formatters import format_duration

_DAY = timedelta(days=1)


@dataclass
class ProcessReport:
    """Aggregated view of one process at report time."""
    process: Process
    duration_days: int
    involved: list[str]

    @property
    def duration(self) -> str:
        return format_duration(self.duration_days)

    @property
    def involved_text(self) -> str:
        return ", ".join(self.involved)

    def to_dict(self) -> dict:
        data = self.process.to_dict()
        data.update({
            "durationDays": self.duration_days,
            "duration": self.duration,
            "involved": self.involved_text,
        })
        return data


def duration_days(process: Process, now: datetime) -> int:
    """Whole days, rounded up, from creation to closure (or to ``now`` while open)."""
    end = process.closed_at if process.closed_at else now
    elapsed = abs(end - process.created_at)
    return math.ceil(elapsed / _DAY)


def involved_assignees(process: Process) -> list[str]:
    """Distinct assignees in first-seen order."""
    return list(dict.fromkeys(task.assignee for task in process.tasks))


def build_reports(processes: list[Process], now: datetime) -> list[ProcessReport]:
    """One report per process, most recently created first."""
    reports = [
        ProcessReport(
            process=p,
            duration_days=duration_days(p, now),
            involved=involved_assignees(p),
        )
        for p in processes
    ]
    reports.sort(key=lambda r: r.process.created_at, reverse=True)
    return reports

