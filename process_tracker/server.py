import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from .config import TrackerConfig
from .gate import PasswordGate
from .persistence import PersistenceError
from .presentation import render_board, render_card
from .processes import ProcessNotFoundError, ProcessStore, TaskIndexError
from .reports import EXPORT_FILENAME, build_reports, export_csv, write_export
from .wizard import ProcessWizard

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

LOCKED_MESSAGE = "Tracker is locked. Call unlock with the shared password first."

_TASK_ITEM_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Task name"},
        "assignee": {"type": "string", "description": "Responsible person"},
        "followUpDate": {"type": "string", "description": "Follow-up date, YYYY-MM-DD"},
        "comments": {"type": "string", "description": "Optional notes"},
    },
    "required": ["name", "assignee", "followUpDate"],
}

_PROCESS_ID_SCHEMA = {"type": "string", "description": "Process id (e.g. proc-1a2b3c4d)"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _text(payload: dict | list | str) -> list[TextContent]:
    if isinstance(payload, str):
        return [TextContent(type="text", text=payload)]
    return [TextContent(type="text", text=json.dumps(payload, indent=2, ensure_ascii=False))]


def _required(arguments: dict, key: str):
    value = arguments.get(key)
    if value in (None, ""):
        raise ValueError(f"Missing argument: {key}")
    return value


def _as_index(value) -> int:
    if isinstance(value, bool):
        raise ValueError(f"task_index must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"task_index must be an integer, got {value!r}") from None


class ProcessTrackerMCPServer:

    def __init__(
        self,
        config: TrackerConfig | None = None,
        store: ProcessStore | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._config = config or TrackerConfig()
        self._server = Server("process-tracker")
        self._gate = PasswordGate(self._config.password)
        self._clock = clock
        self._warnings: list[str] = []
        self._store = store
        self.load_error: str | None = None
        if store is not None:
            store.on_save_error = self._warnings.append
        self._register_handlers()

    def _register_handlers(self):
        self._server.list_tools()(self._list_tools)
        self._server.call_tool()(self._call_tool)

    async def _list_tools(self) -> list[Tool]:
        return [
            Tool(
                name="unlock",
                description="Unlock the tracker with the shared password (only when a password is configured).",
                inputSchema={
                    "type": "object",
                    "properties": {"password": {"type": "string", "description": "Shared password"}},
                    "required": ["password"]
                }
            ),
            Tool(
                name="list_processes",
                description="List every process as a card showing its current task and status.",
                inputSchema={"type": "object", "properties": {}}
            ),
            Tool(
                name="get_process",
                description="Get one process with all of its tasks.",
                inputSchema={
                    "type": "object",
                    "properties": {"process_id": _PROCESS_ID_SCHEMA},
                    "required": ["process_id"]
                }
            ),
            Tool(
                name="create_process",
                description=(
                    "Create a process from a name and an ordered list of tasks. "
                    "Every task needs name, assignee and followUpDate."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "name": {"type": "string", "description": "Process name"},
                        "tasks": {"type": "array", "items": _TASK_ITEM_SCHEMA},
                    },
                    "required": ["name", "tasks"]
                }
            ),
            Tool(
                name="edit_process",
                description=(
                    "Replace a process's name and tasks. Existing task positions keep their "
                    "completion state. Always leaves the process open."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "process_id": _PROCESS_ID_SCHEMA,
                        "name": {"type": "string", "description": "Process name"},
                        "tasks": {"type": "array", "items": _TASK_ITEM_SCHEMA},
                    },
                    "required": ["process_id", "name", "tasks"]
                }
            ),
            Tool(
                name="reopen_process",
                description=(
                    "Return a process's name and tasks pre-filled for editing. "
                    "Pass submit=true to reopen it unchanged."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "process_id": _PROCESS_ID_SCHEMA,
                        "submit": {"type": "boolean", "description": "Save the pre-filled form now (default: false)"},
                    },
                    "required": ["process_id"]
                }
            ),
            Tool(
                name="complete_task",
                description="Complete a task (default: the current one). Completing the last task closes the process.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "process_id": _PROCESS_ID_SCHEMA,
                        "task_index": {"type": "integer", "description": "0-based task index (default: current)"},
                    },
                    "required": ["process_id"]
                }
            ),
            Tool(
                name="close_process",
                description="Close a process now, whether or not its tasks are complete.",
                inputSchema={
                    "type": "object",
                    "properties": {"process_id": _PROCESS_ID_SCHEMA},
                    "required": ["process_id"]
                }
            ),
            Tool(
                name="get_report",
                description="Process history, most recent first, with duration and people involved.",
                inputSchema={"type": "object", "properties": {}}
            ),
            Tool(
                name="export_report",
                description=f"Export the report as CSV ({EXPORT_FILENAME}), optionally writing it to a directory.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "directory": {"type": "string", "description": "Directory to write the file into (optional)"}
                    }
                }
            ),
            Tool(
                name="get_options",
                description="Previously used task names and assignees, for suggestions.",
                inputSchema={"type": "object", "properties": {}}
            ),
            Tool(
                name="health_check",
                description="Check server health status.",
                inputSchema={"type": "object", "properties": {}}
            ),
        ]

    async def _call_tool(self, name: str, arguments: dict) -> list[TextContent]:
        handlers = {
            "unlock": self._handle_unlock,
            "list_processes": self._handle_list_processes,
            "get_process": self._handle_get_process,
            "create_process": self._handle_create_process,
            "edit_process": self._handle_edit_process,
            "reopen_process": self._handle_reopen_process,
            "complete_task": self._handle_complete_task,
            "close_process": self._handle_close_process,
            "get_report": self._handle_get_report,
            "export_report": self._handle_export_report,
            "get_options": self._handle_get_options,
            "health_check": self._handle_health_check,
        }
        handler = handlers.get(name)
        if handler is None:
            return _text(f"Unknown tool: {name}")
        return handler(arguments or {})

    # -------------------- store access --------------------
    def _get_store(self) -> ProcessStore | None:
        """Load the store on first use. A failed load is remembered, not retried."""
        if self._store is not None or self.load_error is not None:
            return self._store
        try:
            self._store = ProcessStore.load(
                self._config.build_adapter(),
                clock=self._clock,
                on_save_error=self._warnings.append,
            )
        except PersistenceError as e:
            logger.error(f"Failed to load processes: {e}")
            self.load_error = str(e)
        return self._store

    def _guard(self) -> list[TextContent] | None:
        """Response to return instead of data, if the tracker is locked or failed to load."""
        if not self._gate.is_unlocked:
            return _text({"status": "locked", "message": LOCKED_MESSAGE})
        if self._get_store() is None:
            return _text({"status": "error", "message": self.load_error})
        return None

    def _respond(self, payload: dict) -> list[TextContent]:
        if self._warnings:
            payload["warnings"] = list(self._warnings)
            self._warnings.clear()
        return _text(payload)

    def _run_action(self, action: Callable[[], dict]) -> list[TextContent]:
        if blocked := self._guard():
            return blocked
        try:
            payload = action()
        except (ValueError, ProcessNotFoundError, TaskIndexError) as e:
            return _text({"status": "error", "message": str(e)})
        return self._respond(payload)

    @staticmethod
    def _build_wizard(arguments: dict, process_id: str | None = None) -> ProcessWizard:
        wizard = ProcessWizard(name=arguments.get("name", ""), process_id=process_id)
        for item in arguments.get("tasks", []):
            wizard.update_current(
                name=item.get("name", ""),
                assignee=item.get("assignee", ""),
                follow_up_date=item.get("followUpDate", ""),
                comments=item.get("comments", "") or "",
            )
            wizard.add_task()
        return wizard

    # -------------------- handlers --------------------
    def _handle_unlock(self, arguments: dict) -> list[TextContent]:
        if self._gate.unlock(arguments.get("password", "")):
            return _text({"status": "ok"})
        return _text({"status": "error", "message": "Contraseña incorrecta."})

    def _handle_list_processes(self, arguments: dict) -> list[TextContent]:
        if blocked := self._guard():
            return blocked
        processes = self._store.processes
        return self._respond({
            "board": render_board(processes),
            "processes": [p.to_dict() for p in processes],
        })

    def _handle_get_process(self, arguments: dict) -> list[TextContent]:
        def action() -> dict:
            process = self._store.get_process(_required(arguments, "process_id"))
            return {"card": render_card(process), "process": process.to_dict()}
        return self._run_action(action)

    def _handle_create_process(self, arguments: dict) -> list[TextContent]:
        def action() -> dict:
            process = self._store.submit_wizard(self._build_wizard(arguments))
            return {"status": "created", "process": process.to_dict()}
        return self._run_action(action)

    def _handle_edit_process(self, arguments: dict) -> list[TextContent]:
        def action() -> dict:
            process_id = _required(arguments, "process_id")
            self._store.get_process(process_id)
            process = self._store.submit_wizard(self._build_wizard(arguments, process_id))
            return {"status": "updated", "process": process.to_dict()}
        return self._run_action(action)

    def _handle_reopen_process(self, arguments: dict) -> list[TextContent]:
        def action() -> dict:
            wizard = self._store.reopen_process(_required(arguments, "process_id"))
            if arguments.get("submit", False):
                process = self._store.submit_wizard(wizard)
                return {"status": "reopened", "process": process.to_dict()}
            return {"status": "editing", "form": wizard.to_dict()}
        return self._run_action(action)

    def _handle_complete_task(self, arguments: dict) -> list[TextContent]:
        def action() -> dict:
            process_id = _required(arguments, "process_id")
            task_index = arguments.get("task_index")
            if task_index is None:
                task_index = self._store.get_process(process_id).current_task_index
            process = self._store.complete_task(process_id, _as_index(task_index))
            return {"status": process.status.value, "process": process.to_dict()}
        return self._run_action(action)

    def _handle_close_process(self, arguments: dict) -> list[TextContent]:
        def action() -> dict:
            process = self._store.close_process(_required(arguments, "process_id"))
            return {"status": process.status.value, "process": process.to_dict()}
        return self._run_action(action)

    def _handle_get_report(self, arguments: dict) -> list[TextContent]:
        if blocked := self._guard():
            return blocked
        reports = build_reports(self._store.processes, self._clock())
        return self._respond({"reports": [r.to_dict() for r in reports]})

    def _handle_export_report(self, arguments: dict) -> list[TextContent]:
        if blocked := self._guard():
            return blocked
        processes = self._store.processes
        now = self._clock()
        result = {"filename": EXPORT_FILENAME, "csv": export_csv(processes, now)}
        if directory := arguments.get("directory"):
            result["path"] = str(write_export(Path(directory), processes, now))
        return self._respond(result)

    def _handle_get_options(self, arguments: dict) -> list[TextContent]:
        if blocked := self._guard():
            return blocked
        return self._respond({
            "taskOptions": self._store.task_options,
            "assigneeOptions": self._store.assignee_options,
        })

    def _handle_health_check(self, arguments: dict) -> list[TextContent]:
        """Returns server status."""
        result = {
            "status": "ok",
            "timestamp": datetime.now().isoformat(),
            "version": VERSION,
            "backend": self._config.backend,
            "locked": not self._gate.is_unlocked,
        }
        return _text(result)

    async def run(self):
        async with stdio_server() as (read_stream, write_stream):
            await self._server.run(read_stream, write_stream, self._server.create_initialization_options())


def main():
    config = TrackerConfig.load()
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    server = ProcessTrackerMCPServer(config)
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
