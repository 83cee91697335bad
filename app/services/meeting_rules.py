"""Location / meeting-type pairing rules shared by sessions and availability slots."""

from typing import Optional

from app.models.session import MeetingType, SessionLocation


ONLINE_MEETING_TYPES = frozenset({MeetingType.VIDEO, MeetingType.AUDIO})


def is_meeting_type_compatible(location, meeting_type) -> bool:
    location = SessionLocation(location)
    meeting_type = MeetingType(meeting_type)
    if location == SessionLocation.IN_PERSON:
        return meeting_type == MeetingType.IN_PERSON
    return meeting_type in ONLINE_MEETING_TYPES


def meeting_details_error(location, meeting_type, venue: Optional[str]) -> Optional[tuple]:
    """
    Return (kind, message) for the first broken rule, or None.

    Kinds are INVALID_MEETING_TYPE and VENUE_REQUIRED.
    """
    if not is_meeting_type_compatible(location, meeting_type):
        return "INVALID_MEETING_TYPE", "Invalid meeting type for selected location"
    if SessionLocation(location) == SessionLocation.IN_PERSON and not (venue or "").strip():
        return "VENUE_REQUIRED", "Venue is required for in-person meetings"
    return None
