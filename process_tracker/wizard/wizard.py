"""Staged creation/edit form for processes."""

from collections.abc import Sequence
from dataclasses import replace
from datetime import date

from ..processes.contracts import Process, TaskDraft

MISSING_TASK_FIELDS = "Por favor, completa el nombre de la tarea, el responsable y la fecha."
MISSING_PROCESS_NAME = "Por favor, dale un nombre al proceso."
NO_TASKS = "Debes agregar al menos una tarea para guardar el proceso."


class WizardValidationError(ValueError):
    """Draft rejected; nothing was appended or submitted."""


class ProcessWizard:
    """Accumulates a process name and ordered task drafts.

    The in-progress task lives in ``current`` until ``add_task`` appends it.
    When bound to a ``process_id`` the wizard edits that process on submit,
    otherwise it creates a new one.
    """

    def __init__(
        self,
        name: str = "",
        tasks: Sequence[TaskDraft] = (),
        process_id: str | None = None,
        today: date | None = None,
    ) -> None:
        self.name = name
        self.tasks: list[TaskDraft] = [replace(t) for t in tasks]
        self.process_id = process_id
        self._today = today
        self.current = self._blank_draft()

    @classmethod
    def for_process(cls, process: Process, today: date | None = None) -> "ProcessWizard":
        """Pre-fill from an existing process (the reopen path)."""
        return cls(
            name=process.name,
            tasks=[task.to_draft() for task in process.tasks],
            process_id=process.id,
            today=today,
        )

    @property
    def is_editing(self) -> bool:
        return self.process_id is not None

    def set_name(self, name: str) -> None:
        self.name = name

    def update_current(self, **fields: str) -> None:
        """Edit fields of the in-progress task draft."""
        self.current = replace(self.current, **fields)

    def add_task(self) -> TaskDraft:
        """Append the in-progress draft and start a blank one."""
        if not self.current.is_complete_entry:
            raise WizardValidationError(MISSING_TASK_FIELDS)
        added = self.current
        self.tasks.append(added)
        self.current = self._blank_draft()
        return added

    def build_payload(self) -> tuple[str, list[TaskDraft]]:
        """Return ``(name, tasks)`` ready for create/edit. Does not mutate the draft."""
        if not self.name:
            raise WizardValidationError(MISSING_PROCESS_NAME)

        final_tasks = [replace(t) for t in self.tasks]
        if self.current.is_complete_entry:
            final_tasks.append(replace(self.current))
        elif not final_tasks:
            raise WizardValidationError(NO_TASKS)

        return self.name, final_tasks

    def to_dict(self) -> dict:
        return {
            "processId": self.process_id,
            "name": self.name,
            "tasks": [
                {
                    "name": t.name,
                    "assignee": t.assignee,
                    "followUpDate": t.follow_up_date,
                    "comments": t.comments,
                }
                for t in self.tasks
            ],
        }

    def _blank_draft(self) -> TaskDraft:
        today = self._today or date.today()
        return TaskDraft(follow_up_date=today.isoformat())
