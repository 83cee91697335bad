# app/models/__init__.py
# Import models in dependency order
from .user import User, UserRole
from .session import MentorshipSession, SessionStatus, SessionLocation, MeetingType
from .availability import Availability
from .mentorship_request import MentorshipRequest, RequestStatus
from .notification import Notification

__all__ = [
    "User",
    "UserRole",
    "MentorshipSession",
    "SessionStatus",
    "SessionLocation",
    "MeetingType",
    "Availability",
    "MentorshipRequest",
    "RequestStatus",
    "Notification",
]
