from __future__ import annotations

from datetime import UTC, datetime


def as_utc(value: datetime) -> datetime:
    """Label naive datetimes read back from SQLite as UTC (no conversion)."""
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
