from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime
import re

from app.models.session import SessionLocation, MeetingType
from app.services.meeting_rules import meeting_details_error

CLOCK_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def normalize_clock(value: str) -> str:
    """'9:05' -> '09:05'. Slot bounds are compared as strings, so padding matters."""
    match = CLOCK_RE.match((value or "").strip())
    if not match:
        raise ValueError("Invalid time format, expected HH:MM")
    return f"{int(match.group(1)):02d}:{match.group(2)}"


class AvailabilityCreate(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: str
    end_time: str
    location: SessionLocation
    meeting_type: MeetingType
    meeting_link: Optional[str] = None
    venue: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_clock(cls, v):
        return normalize_clock(v)

    @model_validator(mode="after")
    def validate_slot(self):
        error = meeting_details_error(self.location, self.meeting_type, self.venue)
        if error:
            raise ValueError(error[1])
        if self.start_time >= self.end_time:
            # Slots that wrap past midnight cannot be matched; split them per day.
            raise ValueError("Availability end time must be after start time (overnight slots are not supported)")
        return self


class AvailabilityResponse(BaseModel):
    id: int
    mentor_id: int
    day_of_week: int
    start_time: str
    end_time: str
    location: SessionLocation
    meeting_type: MeetingType
    meeting_link: Optional[str] = None
    venue: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
