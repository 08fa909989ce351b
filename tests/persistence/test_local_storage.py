"""Tests for LocalStorageAdapter's three JSON slots."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from process_tracker.persistence import LocalStorageAdapter, PersistenceError
from process_tracker.processes import ProcessStatus, ProcessStore, TaskDraft


@pytest.fixture
def adapter(tmp_path: Path) -> LocalStorageAdapter:
    return LocalStorageAdapter(tmp_path / "data")


@pytest.fixture
def clock():
    return lambda: datetime(2024, 3, 1, 15, 0, tzinfo=timezone.utc)


class TestLocalStorage:

    def test_missing_slots_load_empty(self, adapter: LocalStorageAdapter) -> None:
        state = adapter.load()

        assert state.processes == []
        assert state.task_options == []
        assert state.assignee_options == []

    def test_store_writes_three_slots(self, adapter: LocalStorageAdapter, clock) -> None:
        store = ProcessStore(adapter=adapter, clock=clock)
        store.create_process("Alta cliente", [TaskDraft("Llamar", "Ana", "2024-03-02")])

        processes = json.loads(adapter.slot_path("processes").read_text(encoding="utf-8"))
        task_options = json.loads(adapter.slot_path("taskOptions").read_text(encoding="utf-8"))
        assignee_options = json.loads(adapter.slot_path("assigneeOptions").read_text(encoding="utf-8"))

        assert processes[0]["name"] == "Alta cliente"
        assert processes[0]["status"] == "Abierto"
        assert task_options == ["Llamar"]
        assert assignee_options == ["Ana"]

    def test_state_survives_restart(self, adapter: LocalStorageAdapter, clock) -> None:
        store = ProcessStore(adapter=adapter, clock=clock)
        process = store.create_process("Alta cliente", [
            TaskDraft("Llamar", "Ana", "2024-03-02"),
            TaskDraft("Firmar", "Luis", "2024-03-05", 'dice "ok"'),
        ])
        store.complete_task(process.id, 0)

        reloaded = ProcessStore.load(LocalStorageAdapter(adapter.storage_dir), clock=clock)

        restored = reloaded.get_process(process.id)
        assert restored.current_task_index == 1
        assert restored.tasks[0].is_complete is True
        assert restored.tasks[1].comments == 'dice "ok"'
        assert restored.status == ProcessStatus.OPEN
        assert restored.created_at == clock()

    def test_slots_are_independent(self, adapter: LocalStorageAdapter) -> None:
        adapter.storage_dir.mkdir(parents=True)
        adapter.slot_path("assigneeOptions").write_text('["Ana"]', encoding="utf-8")

        state = adapter.load()

        assert state.processes == []
        assert state.assignee_options == ["Ana"]

    def test_corrupt_slot_raises(self, adapter: LocalStorageAdapter) -> None:
        adapter.storage_dir.mkdir(parents=True)
        adapter.slot_path("processes").write_text("{not json", encoding="utf-8")

        with pytest.raises(PersistenceError):
            adapter.load()

    def test_non_list_slot_raises(self, adapter: LocalStorageAdapter) -> None:
        adapter.storage_dir.mkdir(parents=True)
        adapter.slot_path("taskOptions").write_text('{"a": 1}', encoding="utf-8")

        with pytest.raises(PersistenceError):
            adapter.load()

    def test_unwritable_location_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        adapter = LocalStorageAdapter(blocker / "data")
        notices: list[str] = []
        store = ProcessStore(adapter=adapter, on_save_error=notices.append)

        store.create_process("P", [TaskDraft("T", "Ana", "2024-01-01")])

        assert len(notices) == 1
        assert len(store.processes) == 1
        with pytest.raises(PersistenceError):
            adapter.save(store.state)
