"""Local storage backend: three independent JSON slots on disk."""

import json
import logging
from pathlib import Path

from ..processes.contracts import AppState, Process
from .contracts import PersistenceAdapter, PersistenceError

logger = logging.getLogger(__name__)


class LocalStorageAdapter(PersistenceAdapter):
    """Keeps processes and both option pools in separate JSON files."""

    DEFAULT_DIR = Path.home() / ".process_tracker" / "data"

    PROCESSES_SLOT = "processes"
    TASK_OPTIONS_SLOT = "taskOptions"
    ASSIGNEE_OPTIONS_SLOT = "assigneeOptions"

    def __init__(self, storage_dir: Path | None = None) -> None:
        self.storage_dir = Path(storage_dir) if storage_dir else self.DEFAULT_DIR

    def slot_path(self, slot: str) -> Path:
        return self.storage_dir / f"{slot}.json"

    def load(self) -> AppState:
        """Read all three slots; a missing slot is an empty list."""
        raw_processes = self._read_slot(self.PROCESSES_SLOT)
        try:
            processes = [Process.from_dict(p) for p in raw_processes]
        except (KeyError, ValueError, TypeError) as e:
            raise PersistenceError(f"Stored processes are malformed: {e}") from e
        return AppState(
            processes=processes,
            task_options=[str(o) for o in self._read_slot(self.TASK_OPTIONS_SLOT)],
            assignee_options=[str(o) for o in self._read_slot(self.ASSIGNEE_OPTIONS_SLOT)],
        )

    def save(self, state: AppState) -> None:
        """Rewrite every slot."""
        data = state.to_dict()
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            self._write_slot(self.PROCESSES_SLOT, data["processes"])
            self._write_slot(self.TASK_OPTIONS_SLOT, data["taskOptions"])
            self._write_slot(self.ASSIGNEE_OPTIONS_SLOT, data["assigneeOptions"])
        except OSError as e:
            logger.warning(f"LocalStorage: write to {self.storage_dir} failed: {e}")
            raise PersistenceError(f"Could not write to {self.storage_dir}: {e}") from e

    def _read_slot(self, slot: str) -> list:
        path = self.slot_path(slot)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Could not read {path.name}: {e}") from e
        if data is None:
            return []
        if not isinstance(data, list):
            raise PersistenceError(f"Slot {path.name} does not hold a list")
        return data

    def _write_slot(self, slot: str, value: list) -> None:
        path = self.slot_path(slot)
        path.write_text(json.dumps(value, indent=2, ensure_ascii=False), encoding="utf-8")
