from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from urllib.parse import urlparse

from app.models.session import SessionStatus, SessionLocation, MeetingType
from app.services.meeting_rules import meeting_details_error
from app.schemas.user import UserSummary
from app.utils.clock import as_utc


REQUIRED_SESSION_FIELDS = ("title", "start_time", "end_time", "status", "location", "meeting_type")


def _check_meeting_link(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    parsed = urlparse(v)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Invalid meeting link")
    return v


def _check_optional_text(v: Optional[str]) -> Optional[str]:
    if v is not None and v.strip() == "":
        return None
    return v.strip() if v else v


# ======================
# SESSION REQUEST MODELS
# ======================

class SessionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    agenda: Optional[str] = None
    mentor_id: int
    start_time: datetime
    end_time: datetime
    # IANA name the booking was made in; naive times are read in this zone.
    timezone: Optional[str] = None
    location: SessionLocation
    meeting_type: MeetingType
    meeting_link: Optional[str] = None
    venue: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v.strip() == "":
            raise ValueError("Title is required")
        return v.strip()

    @field_validator("meeting_link")
    @classmethod
    def validate_meeting_link(cls, v):
        return _check_meeting_link(v)

    @field_validator("venue", "description", "agenda")
    @classmethod
    def blank_to_none(cls, v):
        return _check_optional_text(v)

    @model_validator(mode="after")
    def validate_meeting_details(self):
        error = meeting_details_error(self.location, self.meeting_type, self.venue)
        if error:
            raise ValueError(error[1])
        return self


class SessionUpdate(BaseModel):
    """Partial update; only fields that were sent are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    agenda: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[SessionStatus] = None
    notes: Optional[str] = None
    feedback: Optional[str] = None
    student_feedback: Optional[str] = None
    mentor_rating: Optional[int] = Field(None, ge=1, le=5)
    student_rating: Optional[int] = Field(None, ge=1, le=5)
    location: Optional[SessionLocation] = None
    meeting_type: Optional[MeetingType] = None
    meeting_link: Optional[str] = None
    venue: Optional[str] = None

    @field_validator("meeting_link")
    @classmethod
    def validate_meeting_link(cls, v):
        return _check_meeting_link(v)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is not None and v.strip() == "":
            raise ValueError("Title cannot be empty")
        return v.strip() if v else v

    def to_patch(self) -> Dict[str, Any]:
        patch = self.model_dump(exclude_unset=True)
        # Explicit nulls on required columns mean "leave as is".
        for key in REQUIRED_SESSION_FIELDS:
            if key in patch and patch[key] is None:
                del patch[key]
        return patch


class SessionComplete(BaseModel):
    notes: Optional[str] = None
    feedback: Optional[str] = None
    student_rating: Optional[int] = Field(None, ge=1, le=5)


# ======================
# SESSION RESPONSE MODELS
# ======================

class SessionResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    agenda: Optional[str] = None
    student_id: int
    mentor_id: int
    start_time: datetime
    end_time: datetime
    timezone: str
    duration: int
    status: SessionStatus
    location: SessionLocation
    meeting_type: MeetingType
    meeting_link: Optional[str] = None
    venue: Optional[str] = None
    notes: Optional[str] = None
    feedback: Optional[str] = None
    student_feedback: Optional[str] = None
    mentor_rating: Optional[int] = None
    student_rating: Optional[int] = None
    reminders_sent: List[Dict[str, Any]] = []
    last_modified_by: Optional[int] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    student: Optional[UserSummary] = None
    mentor: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("start_time", "end_time", "completed_at", "cancelled_at")
    @classmethod
    def stored_instants_are_utc(cls, v):
        return as_utc(v)
