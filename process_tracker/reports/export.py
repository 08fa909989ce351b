"""CSV export of process history, one row per task."""

import csv
import io
import logging
from datetime import datetime
from pathlib import Path

from ..processes.contracts import Process
from .builder import duration_days
from .formatters import format_date, format_duration

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "reporte_procesos.csv"

HEADERS = [
    "Nombre del Proceso",
    "Fecha de Inicio del Proceso",
    "Fecha de Última Actualización",
    "Duración Total (días)",
    "Número de Paso",
    "Nombre de la Tarea",
    "Responsable",
    "Fecha de Seguimiento de la Tarea",
    "Comentarios",
]


def export_rows(processes: list[Process], now: datetime) -> list[list]:
    """Rows in store order; a process without tasks contributes none."""
    rows = []
    for process in processes:
        duration = format_duration(duration_days(process, now))
        created = format_date(process.created_at)
        updated = format_date(process.updated_at)
        for step, task in enumerate(process.tasks, start=1):
            rows.append([
                process.name,
                created,
                updated,
                duration,
                step,
                task.name,
                task.assignee,
                format_date(task.follow_up_date),
                task.comments,
            ])
    return rows


def export_csv(processes: list[Process], now: datetime) -> str:
    """Comma-separated text with CRLF line endings; text fields quoted."""
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\r\n").writerow(HEADERS)
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\r\n")
    writer.writerows(export_rows(processes, now))
    return buffer.getvalue()


def write_export(directory: Path, processes: list[Process], now: datetime) -> Path:
    """Write ``reporte_procesos.csv`` into ``directory`` and return its path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / EXPORT_FILENAME
    path.write_text(export_csv(processes, now), encoding="utf-8-sig", newline="")
    logger.info(f"Exported {len(processes)} processes to {path}")
    return path
