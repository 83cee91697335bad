# app/schemas/__init__.py

# User schemas
from .user import UserSummary

# Auth schemas
from .auth import Token, TokenData, LoginRequest, RegisterRequest

# Scheduling schemas
from .session import SessionCreate, SessionUpdate, SessionComplete, SessionResponse
from .availability import AvailabilityCreate, AvailabilityResponse
from .mentorship_request import (
    MentorshipRequestCreate,
    MentorshipRequestRespond,
    MentorshipRequestResponse,
)

__all__ = [
    "UserSummary",
    "Token",
    "TokenData",
    "LoginRequest",
    "RegisterRequest",
    "SessionCreate",
    "SessionUpdate",
    "SessionComplete",
    "SessionResponse",
    "AvailabilityCreate",
    "AvailabilityResponse",
    "MentorshipRequestCreate",
    "MentorshipRequestRespond",
    "MentorshipRequestResponse",
]
