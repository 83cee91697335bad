from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock pinned to one instant; `advance` moves it forward."""

    def __init__(self, instant: datetime):
        self._instant = as_utc(instant)

    def now(self) -> datetime:
        return self._instant

    def advance(self, **delta) -> datetime:
        self._instant = self._instant + timedelta(**delta)
        return self._instant


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive values as UTC (SQLite drops tzinfo) and convert aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_zone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone name. Raises ValueError when unknown."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name}") from exc


def to_local(value: datetime, zone_name: str) -> datetime:
    return as_utc(value).astimezone(get_zone(zone_name))


def format_in_timezone(value: datetime, zone_name: str) -> str:
    """Human-readable local time, e.g. 'Oct 20, 2026 03:00 PM (UTC)'."""
    local = to_local(value, zone_name)
    return f"{local.strftime('%b %d, %Y %I:%M %p')} ({zone_name})"
