# app/api/mentorship_request.py
"""
Mentorship Request API
Students request mentorship from alumni; alumni accept or reject.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models.mentorship_request import RequestStatus
from app.models.user import User
from app.schemas.mentorship_request import (
    MentorshipRequestCreate,
    MentorshipRequestRespond,
    MentorshipRequestResponse,
)
from app.services import mentorship_request_service
from app.services.exceptions import SchedulingError
from app.utils.security import get_current_user

router = APIRouter(prefix="/mentorship-requests", tags=["mentorship-requests"])


@router.post("/", response_model=MentorshipRequestResponse, status_code=201)
def create_mentorship_request(
    payload: MentorshipRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return mentorship_request_service.create_request(
            db, current_user, payload.alumni_id, payload.message
        )
    except SchedulingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/", response_model=List[MentorshipRequestResponse])
def list_mentorship_requests(
    status: Optional[RequestStatus] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return mentorship_request_service.list_requests(db, current_user, status)


@router.patch("/{request_id}", response_model=MentorshipRequestResponse)
def respond_to_mentorship_request(
    request_id: int,
    payload: MentorshipRequestRespond,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return mentorship_request_service.respond_to_request(
            db, current_user, request_id, payload.status
        )
    except SchedulingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
