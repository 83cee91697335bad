# app/services/time_validator.py
"""
Session time rules.

Pure checks on a candidate [start, end) range: timezone normalization, how
far ahead a session may be booked, and duration bounds. "now" is always
passed in so results are deterministic.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Optional, Tuple

from app.utils.clock import get_zone


# =====================================
# CONFIGURATION CONSTANTS
# =====================================

class SchedulingPolicy:
    """Scheduling policy configuration."""
    MIN_DURATION = 30        # minutes
    MAX_DURATION = 180       # minutes
    BUFFER_TIME = 15         # minutes kept free around every session
    MAX_FUTURE_DAYS = 90     # how far ahead a session may be booked


PAST_DATE = "PAST_DATE"
TOO_FAR_FUTURE = "TOO_FAR_FUTURE"
INVALID_DURATION = "INVALID_DURATION"
INVALID_TIMEZONE = "INVALID_TIMEZONE"


@dataclass(frozen=True)
class TimeValidationResult:
    is_valid: bool
    error: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> "TimeValidationResult":
        return cls(is_valid=True)

    @classmethod
    def fail(cls, error: str, message: str) -> "TimeValidationResult":
        return cls(is_valid=False, error=error, message=message)


def normalize_instant(value: datetime, timezone: str) -> datetime:
    """
    Convert a booking instant to aware UTC.

    Naive values are wall-clock times in `timezone`; aware values keep their
    own offset. Raises ValueError for an unknown timezone.
    """
    zone = get_zone(timezone)
    if value.tzinfo is None:
        value = value.replace(tzinfo=zone)
    return value.astimezone(dt_timezone.utc)


def duration_minutes(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60


def normalize_range(start: datetime, end: datetime, timezone: str) -> Tuple[datetime, datetime]:
    return normalize_instant(start, timezone), normalize_instant(end, timezone)


def validate_session_time(
    start_time: datetime,
    end_time: datetime,
    timezone: str,
    now: datetime,
) -> TimeValidationResult:
    """
    Validate a proposed session time. First failing rule wins.

    Args:
        start_time: Proposed start (naive values are read in `timezone`)
        end_time: Proposed end
        timezone: IANA timezone the session is booked in
        now: Current instant (aware)

    Returns:
        TimeValidationResult; `error` is one of PAST_DATE, TOO_FAR_FUTURE,
        INVALID_DURATION or INVALID_TIMEZONE when invalid
    """
    try:
        start, end = normalize_range(start_time, end_time, timezone)
    except ValueError as exc:
        return TimeValidationResult.fail(INVALID_TIMEZONE, str(exc))

    now = now.astimezone(dt_timezone.utc)
    max_future = now + timedelta(days=SchedulingPolicy.MAX_FUTURE_DAYS)

    if start < now:
        return TimeValidationResult.fail(
            PAST_DATE,
            "Session cannot be scheduled in the past",
        )

    if start > max_future:
        return TimeValidationResult.fail(
            TOO_FAR_FUTURE,
            f"Sessions can only be scheduled up to {SchedulingPolicy.MAX_FUTURE_DAYS} days in advance",
        )

    duration = duration_minutes(start, end)
    if duration < SchedulingPolicy.MIN_DURATION or duration > SchedulingPolicy.MAX_DURATION:
        return TimeValidationResult.fail(
            INVALID_DURATION,
            f"Session duration must be between {SchedulingPolicy.MIN_DURATION} "
            f"and {SchedulingPolicy.MAX_DURATION} minutes",
        )

    return TimeValidationResult.ok()
