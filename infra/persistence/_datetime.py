from __future__ import annotations

from datetime import datetime, timezone


def dt_to_iso(dt: datetime | None) -> str | None:
    """UTC ISO-8601 text with fixed precision, so stored values sort as times."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def iso_to_dt(value: str | None) -> datetime | None:
    if value is None or value == "":
        return None
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
