"""Mentorship request CRUD"""

from sqlalchemy.orm import Session
from typing import List, Optional

from app.models.mentorship_request import MentorshipRequest, RequestStatus


def create_request(db: Session, student_id: int, alumni_id: int, message: str) -> MentorshipRequest:
    request = MentorshipRequest(
        student_id=student_id,
        alumni_id=alumni_id,
        message=message,
        status=RequestStatus.PENDING,
    )
    db.add(request)
    db.flush()
    return request


def find_request(
    db: Session,
    student_id: int,
    alumni_id: int,
    status: RequestStatus,
) -> Optional[MentorshipRequest]:
    return db.query(MentorshipRequest).filter(
        MentorshipRequest.student_id == student_id,
        MentorshipRequest.alumni_id == alumni_id,
        MentorshipRequest.status == status,
    ).first()


def find_accepted_request(db: Session, student_id: int, alumni_id: int) -> Optional[MentorshipRequest]:
    return find_request(db, student_id, alumni_id, RequestStatus.ACCEPTED)


def get_pending_request_for_alumni(db: Session, request_id: int, alumni_id: int) -> Optional[MentorshipRequest]:
    return db.query(MentorshipRequest).filter(
        MentorshipRequest.id == request_id,
        MentorshipRequest.alumni_id == alumni_id,
        MentorshipRequest.status == RequestStatus.PENDING,
    ).first()


def list_requests_for_user(
    db: Session,
    user_id: int,
    status: Optional[RequestStatus] = None,
) -> List[MentorshipRequest]:
    query = db.query(MentorshipRequest).filter(
        (MentorshipRequest.student_id == user_id) |
        (MentorshipRequest.alumni_id == user_id)
    )
    if status:
        query = query.filter(MentorshipRequest.status == status)
    return query.order_by(MentorshipRequest.created_at.desc(), MentorshipRequest.id.desc()).all()
