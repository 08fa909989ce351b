"""Spanish long-form date and duration strings used by cards and reports."""

from datetime import date, datetime, timezone

MONTHS_ES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)


def _to_date(value: str | date | datetime) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return _to_date(datetime.fromisoformat(text.replace("Z", "+00:00")))


def format_date(value: str | date | datetime) -> str:
    """Render as e.g. ``5 de enero de 2024``. Unparseable strings pass through."""
    try:
        day = _to_date(value)
    except ValueError:
        return str(value)
    return f"{day.day} de {MONTHS_ES[day.month - 1]} de {day.year}"


def format_duration(days: int) -> str:
    return f"{days} día" if days == 1 else f"{days} días"
