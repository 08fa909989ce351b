"""In-memory process store: the single owner of all tracker mutations."""

import copy
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

from ..persistence.contracts import PersistenceAdapter, PersistenceError
from .contracts import (
    AppState,
    Process,
    ProcessStatus,
    Task,
    TaskDraft,
    TaskIndexError,
    new_process_id,
    new_task_id,
)

if TYPE_CHECKING:
    from ..wizard import ProcessWizard

logger = logging.getLogger(__name__)

SAVE_ERROR_MESSAGE = (
    "Error: No se pudieron guardar los cambios. "
    "Por favor, revisa tu conexión o la configuración de la API."
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProcessStore:
    """Holds the AppState and applies create/edit/complete/close.

    Each mutation updates memory first, then writes the whole state through
    the adapter. A failed write is reported through ``on_save_error`` and the
    in-memory change is kept.
    """

    def __init__(
        self,
        adapter: PersistenceAdapter | None = None,
        state: AppState | None = None,
        clock: Callable[[], datetime] = _utcnow,
        on_save_error: Callable[[str], None] | None = None,
    ) -> None:
        self._adapter = adapter
        self._state = state or AppState()
        self._clock = clock
        self.on_save_error = on_save_error

    @classmethod
    def load(
        cls,
        adapter: PersistenceAdapter,
        clock: Callable[[], datetime] = _utcnow,
        on_save_error: Callable[[str], None] | None = None,
    ) -> "ProcessStore":
        """Build a store from the adapter's stored state. Load errors propagate."""
        state = adapter.load()
        logger.info(f"Loaded {len(state.processes)} processes")
        return cls(adapter=adapter, state=state, clock=clock, on_save_error=on_save_error)

    # -------------------- queries --------------------
    @property
    def processes(self) -> list[Process]:
        return copy.deepcopy(self._state.processes)

    @property
    def task_options(self) -> list[str]:
        return list(self._state.task_options)

    @property
    def assignee_options(self) -> list[str]:
        return list(self._state.assignee_options)

    @property
    def state(self) -> AppState:
        return copy.deepcopy(self._state)

    def get_process(self, process_id: str) -> Process:
        return copy.deepcopy(self._state.find(process_id))

    # -------------------- mutations --------------------
    def create_process(self, name: str, tasks: list[TaskDraft]) -> Process:
        now = self._clock()
        process = Process(
            id=new_process_id(),
            name=name,
            tasks=[
                Task(
                    id=new_task_id(),
                    name=draft.name,
                    assignee=draft.assignee,
                    follow_up_date=draft.follow_up_date,
                    comments=draft.comments,
                )
                for draft in tasks
            ],
            current_task_index=0,
            status=ProcessStatus.OPEN,
            created_at=now,
            updated_at=now,
        )
        self._state.processes.append(process)
        self._grow_options(tasks)
        logger.info(f"Created process {process.id} with {len(process.tasks)} tasks")
        self._persist()
        return copy.deepcopy(process)

    def edit_process(self, process_id: str, name: str, tasks: list[TaskDraft]) -> Process:
        """Replace name and tasks, keeping ids and completion flags by position.

        Always reopens. The current task index is left as it was, even when
        the new list is shorter.
        """
        process = self._state.find(process_id)
        old_tasks = process.tasks
        new_tasks = []
        for index, draft in enumerate(tasks):
            previous = old_tasks[index] if index < len(old_tasks) else None
            new_tasks.append(Task(
                id=previous.id if previous else new_task_id(),
                name=draft.name,
                assignee=draft.assignee,
                follow_up_date=draft.follow_up_date,
                comments=draft.comments,
                is_complete=previous.is_complete if previous else False,
            ))

        process.name = name
        process.tasks = new_tasks
        process.status = ProcessStatus.OPEN
        process.closed_at = None
        process.updated_at = self._clock()
        self._grow_options(tasks)
        logger.info(f"Edited process {process.id}: {len(new_tasks)} tasks, reopened")
        self._persist()
        return copy.deepcopy(process)

    def complete_task(self, process_id: str, task_index: int) -> Process:
        """Mark a task done; the last task closes the process."""
        process = self._state.find(process_id)
        if not 0 <= task_index < len(process.tasks):
            raise TaskIndexError(
                f"Task index {task_index} out of range for process {process_id} "
                f"({len(process.tasks)} tasks)"
            )

        now = self._clock()
        process.tasks[task_index].is_complete = True
        if task_index == len(process.tasks) - 1:
            process.status = ProcessStatus.CLOSED
            process.closed_at = now
            logger.info(f"Process {process.id} closed by completing its last task")
        else:
            process.current_task_index += 1
            logger.info(f"Process {process.id} advanced to task {process.current_task_index}")
        process.updated_at = now
        self._persist()
        return copy.deepcopy(process)

    def close_process(self, process_id: str) -> Process:
        """Force-close regardless of task completion."""
        process = self._state.find(process_id)
        now = self._clock()
        process.status = ProcessStatus.CLOSED
        process.closed_at = now
        process.updated_at = now
        logger.info(f"Process {process.id} closed manually")
        self._persist()
        return copy.deepcopy(process)

    def reopen_process(self, process_id: str) -> "ProcessWizard":
        """Wizard pre-filled with the process; submitting it edits (and reopens) it."""
        from ..wizard import ProcessWizard

        return ProcessWizard.for_process(self._state.find(process_id), today=self._clock().date())

    def submit_wizard(self, wizard: "ProcessWizard") -> Process:
        """Validate the wizard draft and route it to edit or create."""
        name, tasks = wizard.build_payload()
        if wizard.is_editing:
            return self.edit_process(wizard.process_id, name, tasks)
        return self.create_process(name, tasks)

    # -------------------- internals --------------------
    def _grow_options(self, tasks: list[TaskDraft]) -> None:
        for draft in tasks:
            if draft.name and draft.name not in self._state.task_options:
                self._state.task_options.append(draft.name)
            if draft.assignee and draft.assignee not in self._state.assignee_options:
                self._state.assignee_options.append(draft.assignee)

    def _persist(self) -> None:
        if self._adapter is None:
            return
        try:
            self._adapter.save(self._state)
        except PersistenceError as e:
            logger.error(f"Failed to persist state: {e}")
            if self.on_save_error:
                self.on_save_error(SAVE_ERROR_MESSAGE)
