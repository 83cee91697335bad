from datetime import datetime
from typing import Tuple

from app.utils.clock import to_local


def local_day_and_clock(instant: datetime, timezone: str) -> Tuple[int, str]:
    """Day of week (0 = Sunday) and 'HH:MM' of an instant in `timezone`."""
    local = to_local(instant, timezone)
    # datetime.weekday() is Monday = 0; slots use Sunday = 0.
    day_of_week = (local.weekday() + 1) % 7
    return day_of_week, local.strftime("%H:%M")


class AvailabilityMatcher:
    """
    Checks a candidate start against a mentor's weekly recurring slots.

    Only the start instant is matched: a session may begin inside a slot and
    run past the slot's end. Bounds are inclusive.
    """

    def __init__(self, store):
        self.store = store

    def is_available(self, mentor_id: int, candidate_start: datetime, timezone: str) -> bool:
        day_of_week, clock = local_day_and_clock(candidate_start, timezone)
        slots = self.store.find_availability(mentor_id, day_of_week)
        return any(slot.start_time <= clock <= slot.end_time for slot in slots)
