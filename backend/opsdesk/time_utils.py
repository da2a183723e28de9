from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def resolve_zone(tz_name: Optional[str]) -> ZoneInfo:
    """Unknown or blank zone names fall back to UTC."""
    try:
        return ZoneInfo(tz_name or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def period_start(period: str, tz_name: Optional[str] = None, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Start of a reporting period as a UTC-naive datetime.

    - "today": local midnight
    - "week":  local midnight on Monday
    - "month": local midnight on the first of the month
    - "all":   None (no lower bound)

    Local time is the workspace timezone. `now` is UTC-naive when given.
    """
    if period == "all":
        return None

    zone = resolve_zone(tz_name)
    current = now if now is not None else utcnow()
    local_now = current.replace(tzinfo=timezone.utc).astimezone(zone)
    local_midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == "today":
        start = local_midnight
    elif period == "week":
        start = local_midnight - timedelta(days=local_midnight.weekday())
    elif period == "month":
        start = local_midnight.replace(day=1)
    else:
        raise ValueError(f"unknown period: {period}")

    # Rebuild from wall-clock fields so DST shifts inside the period are honored
    start = datetime(start.year, start.month, start.day, tzinfo=zone)
    return start.astimezone(timezone.utc).replace(tzinfo=None)
