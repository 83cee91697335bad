from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from app.services.time_validator import SchedulingPolicy
from app.utils.clock import as_utc


@dataclass(frozen=True)
class SchedulingConflict:
    session_id: int
    scope: str  # "mentor" or "student"
    reason: str


def buffered_window(start: datetime, end: datetime, buffer_minutes: int = SchedulingPolicy.BUFFER_TIME):
    buffer = timedelta(minutes=buffer_minutes)
    return start - buffer, end + buffer


def ranges_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and a_end > b_start


class ConflictDetector:
    """Finds SCHEDULED sessions of either party that collide with a candidate range."""

    def __init__(self, store, buffer_minutes: int = SchedulingPolicy.BUFFER_TIME):
        self.store = store
        self.buffer_minutes = buffer_minutes

    def find_conflict(
        self,
        start_time: datetime,
        end_time: datetime,
        mentor_id: int,
        student_id: int,
        exclude_session_id: Optional[int] = None,
    ) -> Optional[SchedulingConflict]:
        """
        Return the first conflicting session, or None.

        The candidate is widened by the buffer on both sides; an existing
        session conflicts when it overlaps that widened window and shares the
        mentor or the student.
        """
        window_start, window_end = buffered_window(start_time, end_time, self.buffer_minutes)
        candidates = self.store.find_sessions_overlapping(
            mentor_id,
            student_id,
            window_start,
            window_end,
            exclude_session_id,
        )

        for existing in candidates:
            if not ranges_overlap(
                as_utc(existing.start_time), as_utc(existing.end_time), window_start, window_end
            ):
                continue
            scope = "mentor" if existing.mentor_id == mentor_id else "student"
            reason = f"This time slot conflicts with another session of the {scope}"
            return SchedulingConflict(session_id=existing.id, scope=scope, reason=reason)
        return None
