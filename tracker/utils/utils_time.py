import re
from datetime import UTC, date, datetime

from tracker.core.exceptions import InvalidDateError

_WIRE_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def utcnow() -> datetime:
    return datetime.now(UTC)


def to_rfc3339(value: datetime) -> str:
    """
    Format a timestamp as RFC3339.

    SQLite hands back naive datetimes even for timezone-aware columns; those are UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")


def parse_wire_date(value: str, field: str) -> date:
    """
    Parse a YYYY-MM-DD wire date.

    Raises:
        InvalidDateError: If the value is not a calendar date in that exact layout
    """
    if not isinstance(value, str) or not _WIRE_DATE.fullmatch(value):
        raise InvalidDateError(field)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidDateError(field) from None
