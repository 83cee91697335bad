# app/api/session.py
"""
Session Scheduling API
Book, list, reschedule, cancel and complete mentorship sessions.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Optional, List
from datetime import datetime

from app.crud import session as session_crud
from app.database import get_db
from app.models.session import MentorshipSession, SessionStatus
from app.models.user import User
from app.schemas.session import SessionComplete, SessionCreate, SessionResponse, SessionUpdate
from app.services.exceptions import SchedulingError
from app.services.scheduling_service import Actor, SessionScheduler, build_scheduler
from app.utils.clock import as_utc
from app.utils.security import get_current_user

router = APIRouter(prefix="/sessions", tags=["sessions"])


# ======================
# HELPER FUNCTIONS
# ======================
def get_session_scheduler(db: Session = Depends(get_db)) -> SessionScheduler:
    return build_scheduler(db)


def _to_http_exception(exc: SchedulingError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


def _to_response(session: MentorshipSession, viewer_id: int) -> SessionResponse:
    """Serialize a session; mentor-private notes are hidden from the student."""
    response = SessionResponse.model_validate(session)
    if session.mentor_id != viewer_id:
        response = response.model_copy(update={"notes": None})
    return response


# ======================
# SESSION LISTING
# ======================
@router.get("/", response_model=List[SessionResponse])
def get_sessions(
    status: Optional[SessionStatus] = None,
    start_from: Optional[datetime] = None,
    start_to: Optional[datetime] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Sessions where the current user is student or mentor, latest first."""
    sessions = session_crud.list_sessions_for_user(
        db,
        current_user.id,
        status=status,
        start_from=as_utc(start_from),
        start_to=as_utc(start_to),
    )
    return [_to_response(s, current_user.id) for s in sessions]


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    scheduler: SessionScheduler = Depends(get_session_scheduler)
):
    try:
        session = scheduler.get_session_for_actor(Actor.from_user(current_user), session_id)
    except SchedulingError as e:
        raise _to_http_exception(e)
    return _to_response(session, current_user.id)


# ======================
# CREATE SESSION
# ======================
@router.post("/", response_model=SessionResponse, status_code=201)
def create_session(
    payload: SessionCreate,
    current_user: User = Depends(get_current_user),
    scheduler: SessionScheduler = Depends(get_session_scheduler)
):
    """
    Book a session with a mentor.

    Requires an accepted mentorship request. The start must fall inside one
    of the mentor's availability slots and neither party may have another
    scheduled session within the buffer.
    """
    try:
        session = scheduler.create_session(
            Actor.from_user(current_user),
            payload.model_dump(),
        )
    except SchedulingError as e:
        raise _to_http_exception(e)
    return _to_response(session, current_user.id)


# ======================
# UPDATE SESSION
# ======================
@router.patch("/{session_id}", response_model=SessionResponse)
def update_session(
    session_id: int,
    payload: SessionUpdate,
    current_user: User = Depends(get_current_user),
    scheduler: SessionScheduler = Depends(get_session_scheduler)
):
    """Partial update; what may change depends on role and session status."""
    try:
        session = scheduler.update_session(
            Actor.from_user(current_user),
            session_id,
            payload.to_patch(),
        )
    except SchedulingError as e:
        raise _to_http_exception(e)
    return _to_response(session, current_user.id)


@router.patch("/{session_id}/cancel", response_model=SessionResponse)
def cancel_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    scheduler: SessionScheduler = Depends(get_session_scheduler)
):
    try:
        session = scheduler.cancel_session(Actor.from_user(current_user), session_id)
    except SchedulingError as e:
        raise _to_http_exception(e)
    return _to_response(session, current_user.id)


@router.patch("/{session_id}/complete", response_model=SessionResponse)
def complete_session(
    session_id: int,
    payload: SessionComplete,
    current_user: User = Depends(get_current_user),
    scheduler: SessionScheduler = Depends(get_session_scheduler)
):
    """Mentor marks a session completed; notes and feedback are required."""
    try:
        session = scheduler.complete_session(
            Actor.from_user(current_user),
            session_id,
            notes=payload.notes,
            feedback=payload.feedback,
            student_rating=payload.student_rating,
        )
    except SchedulingError as e:
        raise _to_http_exception(e)
    return _to_response(session, current_user.id)
