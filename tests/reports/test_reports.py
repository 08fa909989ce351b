"""Tests for report aggregation, date formatting and CSV export."""

import csv
import io
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

from process_tracker.processes import Process, ProcessStatus, Task
from process_tracker.reports import (
    EXPORT_FILENAME,
    HEADERS,
    build_reports,
    duration_days,
    export_csv,
    format_date,
    format_duration,
    involved_assignees,
    write_export,
)


T0 = datetime(2024, 1, 5, 9, 0, tzinfo=timezone.utc)


def make_process(
    name: str = "Onboarding",
    tasks: list[Task] | None = None,
    created_at: datetime = T0,
    closed_at: datetime | None = None,
) -> Process:
    return Process(
        id=f"proc-{name.lower()}",
        name=name,
        tasks=tasks if tasks is not None else [],
        status=ProcessStatus.CLOSED if closed_at else ProcessStatus.OPEN,
        created_at=created_at,
        updated_at=closed_at or created_at,
        closed_at=closed_at,
    )


@pytest.fixture
def onboarding() -> Process:
    return make_process(
        tasks=[
            Task("task-1", "Welcome email", "Ana", "2024-01-01"),
            Task("task-2", "Kickoff call", "Luis", "2024-01-05", 'say "hola", then agenda'),
            Task("task-3", "Review", "Ana", "2024-01-09"),
        ],
        closed_at=T0 + timedelta(hours=36),
    )


class TestDuration:

    def test_closed_process_rounds_up(self, onboarding: Process) -> None:
        assert duration_days(onboarding, now=T0 + timedelta(days=30)) == 2

    def test_open_process_measured_against_now(self) -> None:
        process = make_process()

        assert duration_days(process, now=T0) == 0
        assert duration_days(process, now=T0 + timedelta(minutes=1)) == 1
        assert duration_days(process, now=T0 + timedelta(days=3)) == 3
        assert duration_days(process, now=T0 + timedelta(days=3, seconds=1)) == 4

    def test_open_duration_non_decreasing(self) -> None:
        process = make_process()
        values = [duration_days(process, T0 + timedelta(hours=h)) for h in range(0, 100, 7)]

        assert values == sorted(values)

    def test_duration_strings(self) -> None:
        assert format_duration(1) == "1 día"
        assert format_duration(0) == "0 días"
        assert format_duration(2) == "2 días"


class TestBuildReports:

    def test_involved_is_first_seen_distinct(self, onboarding: Process) -> None:
        assert involved_assignees(onboarding) == ["Ana", "Luis"]

    def test_sorted_newest_first(self) -> None:
        older = make_process("Older", created_at=T0)
        newer = make_process("Newer", created_at=T0 + timedelta(days=1))

        reports = build_reports([older, newer], now=T0 + timedelta(days=2))

        assert [r.process.name for r in reports] == ["Newer", "Older"]

    def test_report_dict(self, onboarding: Process) -> None:
        report = build_reports([onboarding], now=T0)[0]

        data = report.to_dict()
        assert data["duration"] == "2 días"
        assert data["durationDays"] == 2
        assert data["involved"] == "Ana, Luis"
        assert data["status"] == "Cerrado"


class TestFormatDate:

    def test_iso_date(self) -> None:
        assert format_date("2024-01-05") == "5 de enero de 2024"

    def test_instant_uses_utc_calendar_day(self) -> None:
        assert format_date("2024-12-31T23:30:00.000Z") == "31 de diciembre de 2024"

    def test_datetime_and_date(self) -> None:
        assert format_date(datetime(2024, 9, 1, tzinfo=timezone.utc)) == "1 de septiembre de 2024"
        assert format_date(date(2023, 2, 14)) == "14 de febrero de 2023"

    def test_unparseable_passes_through(self) -> None:
        assert format_date("pronto") == "pronto"


class TestExport:

    def test_header_line(self) -> None:
        text = export_csv([], now=T0)

        assert text == ",".join(HEADERS) + "\r\n"

    def test_one_row_per_task(self, onboarding: Process) -> None:
        rows = list(csv.reader(io.StringIO(export_csv([onboarding], now=T0))))

        assert len(rows) == 4
        assert rows[1] == [
            "Onboarding",
            "5 de enero de 2024",
            "6 de enero de 2024",
            "2 días",
            "1",
            "Welcome email",
            "Ana",
            "1 de enero de 2024",
            "",
        ]
        assert [r[4] for r in rows[1:]] == ["1", "2", "3"]

    def test_quotes_doubled_in_comments(self, onboarding: Process) -> None:
        text = export_csv([onboarding], now=T0)

        assert '"say ""hola"", then agenda"' in text
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[2][8] == 'say "hola", then agenda'

    def test_zero_task_process_has_no_rows(self, onboarding: Process) -> None:
        rows = list(csv.reader(io.StringIO(export_csv([make_process("Empty"), onboarding], now=T0))))

        assert {r[0] for r in rows[1:]} == {"Onboarding"}

    def test_rows_follow_store_order(self) -> None:
        first = make_process("First", tasks=[Task("t1", "A", "Ana", "2024-01-01")], created_at=T0)
        second = make_process("Second", tasks=[Task("t2", "B", "Ana", "2024-01-01")], created_at=T0 + timedelta(days=1))

        rows = list(csv.reader(io.StringIO(export_csv([first, second], now=T0 + timedelta(days=2)))))

        assert [r[0] for r in rows[1:]] == ["First", "Second"]

    def test_write_export_file(self, tmp_path: Path, onboarding: Process) -> None:
        path = write_export(tmp_path / "out", [onboarding], now=T0)

        assert path.name == EXPORT_FILENAME
        raw = path.read_bytes()
        assert raw.startswith(b"\xef\xbb\xbf")
        content = raw.decode("utf-8-sig")
        assert content.startswith("Nombre del Proceso,")
        assert content.count("\r\n") == 4
