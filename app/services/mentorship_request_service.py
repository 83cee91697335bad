# app/services/mentorship_request_service.py
"""
Mentorship Request Service
Students ask an alumni for mentorship; the alumni accepts or rejects once.
An ACCEPTED request is what allows the student to book sessions with that mentor.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app import models
from app.crud import mentorship_request as request_crud
from app.crud import user as user_crud
from app.models.mentorship_request import MentorshipRequest, RequestStatus
from app.services.exceptions import (
    DuplicateRequestError,
    NotFoundError,
    PermissionDeniedError,
    SchedulingValidationError,
)

logger = logging.getLogger(__name__)


# ======================
# REQUEST SUBMISSION
# ======================

def create_request(
    db: Session,
    student: models.User,
    alumni_id: int,
    message: str,
) -> MentorshipRequest:
    """
    Submit a mentorship request to an alumni.

    Args:
        db: Database session
        student: Requesting user (must be a student)
        alumni_id: Target mentor
        message: Introduction shown to the mentor

    Returns:
        The PENDING request

    Raises:
        PermissionDeniedError: Caller is not a student
        NotFoundError: No alumni with that id
        DuplicateRequestError: A PENDING or ACCEPTED request for this pair already exists
    """
    if not student.is_student:
        raise PermissionDeniedError("Only students can send mentorship requests")

    alumni = user_crud.get_user(db, alumni_id)
    if not alumni or not alumni.is_alumni:
        raise NotFoundError("Mentor not found")

    existing = request_crud.find_request(db, student.id, alumni_id, RequestStatus.PENDING)
    if existing:
        raise DuplicateRequestError("A pending request already exists with this mentor")
    if request_crud.find_accepted_request(db, student.id, alumni_id):
        raise DuplicateRequestError("You are already connected with this mentor")

    try:
        request = request_crud.create_request(db, student.id, alumni_id, message)
        db.commit()
        db.refresh(request)
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Mentorship request %s created (student_id=%s, alumni_id=%s)",
        request.id,
        student.id,
        alumni_id,
    )
    return request


# ======================
# RESPONSE
# ======================

def respond_to_request(
    db: Session,
    alumni: models.User,
    request_id: int,
    status: str,
) -> MentorshipRequest:
    """
    Accept or reject a pending request addressed to the caller.

    Raises:
        PermissionDeniedError: Caller is not an alumni
        SchedulingValidationError: Status is not ACCEPTED or REJECTED
        NotFoundError: Request missing, not the caller's, or already answered
    """
    if not alumni.is_alumni:
        raise PermissionDeniedError("Only alumni can respond to mentorship requests")

    try:
        new_status = RequestStatus(status)
    except ValueError:
        raise SchedulingValidationError("Invalid status", kind="INVALID_UPDATE")
    if new_status == RequestStatus.PENDING:
        raise SchedulingValidationError("Invalid status", kind="INVALID_UPDATE")

    request = request_crud.get_pending_request_for_alumni(db, request_id, alumni.id)
    if not request:
        raise NotFoundError("Request not found")

    try:
        request.status = new_status
        db.commit()
        db.refresh(request)
    except Exception:
        db.rollback()
        raise

    logger.info("Mentorship request %s %s by alumni %s", request.id, new_status.value, alumni.id)
    return request


# ======================
# LISTING
# ======================

def list_requests(
    db: Session,
    user: models.User,
    status: Optional[RequestStatus] = None,
) -> List[MentorshipRequest]:
    """Requests where the user is the student or the alumni, newest first."""
    return request_crud.list_requests_for_user(db, user.id, status)
