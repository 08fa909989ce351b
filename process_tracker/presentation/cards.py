"""Plain-text process cards."""

from ..processes.contracts import Process, ProcessStatus
from ..reports.formatters import format_date

EMPTY_BOARD = "No hay procesos."


def action_label(process: Process) -> str | None:
    """Label of the action the card offers, if any."""
    if process.status == ProcessStatus.CLOSED:
        return "Reabrir Proceso"
    if process.current_task is None:
        return None
    return "Completar y Cerrar Proceso" if process.is_on_last_task else "Completar Tarea"


def render_card(process: Process) -> str:
    lines = [f"{process.name} [{process.status.value}]"]

    task = process.current_task
    if process.status == ProcessStatus.OPEN and task:
        lines.append(f"  Tarea actual ({process.current_task_index + 1}/{len(process.tasks)}): {task.name}")
        lines.append(f"  Responsable: {task.assignee}")
        lines.append(f"  Fecha de Seguimiento: {format_date(task.follow_up_date)}")
        if task.comments:
            lines.append(f"  Comentarios: {task.comments}")

    label = action_label(process)
    if label:
        lines.append(f"  > {label}")

    lines.append(
        f"  Creado: {format_date(process.created_at)} | "
        f"Última Actualización: {format_date(process.updated_at)}"
    )
    return "\n".join(lines)


def render_board(processes: list[Process]) -> str:
    if not processes:
        return EMPTY_BOARD
    return "\n\n".join(render_card(p) for p in processes)
