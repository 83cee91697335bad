from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Literal, Optional
from datetime import datetime

from app.models.mentorship_request import RequestStatus
from app.schemas.user import UserSummary


class MentorshipRequestCreate(BaseModel):
    alumni_id: int
    message: str = Field(..., min_length=1, max_length=1000)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v):
        if v.strip() == "":
            raise ValueError("Message is required")
        return v.strip()


class MentorshipRequestRespond(BaseModel):
    status: Literal["ACCEPTED", "REJECTED"]


class MentorshipRequestResponse(BaseModel):
    id: int
    student_id: int
    alumni_id: int
    message: str
    status: RequestStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    student: Optional[UserSummary] = None
    alumni: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)
