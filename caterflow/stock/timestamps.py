"""Timestamp normalization for chronological stock ordering."""

from __future__ import annotations

from datetime import date, datetime, time, timezone


def stock_normalize_timestamp(value: datetime | date | str) -> datetime:
    """Normalize a count or transaction date to an offset-aware UTC datetime.

    Date-only values resolve to midnight UTC. Naive datetimes are read as UTC.

    Args:
        value: Datetime, date, or ISO-8601 string.

    Returns:
        datetime: Offset-aware UTC timestamp.

    Raises:
        ValueError: Raised when value is blank, malformed, or of an unsupported type.
    """

    if isinstance(value, str):
        if not value.strip():
            raise ValueError("timestamp must be a non-empty string")
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as error:
            raise ValueError(f"invalid timestamp={value}") from error

    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    raise ValueError(f"unsupported timestamp type={type(value).__name__}")


__all__ = ["stock_normalize_timestamp"]
