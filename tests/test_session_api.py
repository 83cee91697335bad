from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Skip suite when FastAPI dependency is not present in local environment.
pytest.importorskip("fastapi")

from fastapi import HTTPException
from app.api.session import (
    cancel_session,
    complete_session,
    create_session,
    get_session,
    get_sessions,
    update_session,
)
from app.crud.session import SessionStore
from app.database import Base
from app.models.availability import Availability
from app.models.mentorship_request import MentorshipRequest, RequestStatus
from app.models.session import SessionStatus
from app.models.user import User
from app.schemas.session import SessionComplete, SessionCreate, SessionUpdate
from app.services.scheduling_service import SessionScheduler
from app.utils.clock import FixedClock

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
TUESDAY_1500 = datetime(2026, 10, 20, 15, 0, tzinfo=timezone.utc)


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def notify(self, user_id, kind, session, *, actor_id=None, reminder_lead=None):
        self.sent.append((user_id, kind))


@pytest.fixture
def db_session():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _create_user(db, email: str, role: str, name: str) -> User:
    user = User(name=name, email=email, password_hash="hash", role=role, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def parties(db_session):
    mentor = _create_user(db_session, "mentor@test.edu", "alumni", "Mentor")
    student = _create_user(db_session, "student@test.edu", "student", "Student")
    db_session.add(MentorshipRequest(
        student_id=student.id,
        alumni_id=mentor.id,
        message="Please mentor me",
        status=RequestStatus.ACCEPTED,
    ))
    db_session.add(Availability(
        mentor_id=mentor.id,
        day_of_week=2,
        start_time="14:00",
        end_time="16:00",
        location="ONLINE",
        meeting_type="VIDEO",
    ))
    db_session.commit()
    return mentor, student


@pytest.fixture
def scheduler(db_session):
    return SessionScheduler(SessionStore(db_session), RecordingNotifier(), clock=FixedClock(NOW))


def _create_payload(mentor_id: int, start: datetime = TUESDAY_1500) -> SessionCreate:
    return SessionCreate(
        title="Interview prep",
        mentor_id=mentor_id,
        start_time=start,
        end_time=start + timedelta(minutes=30),
        location="ONLINE",
        meeting_type="VIDEO",
        meeting_link="https://meet.example.com/prep",
    )


def test_create_and_list_sessions(db_session, parties, scheduler):
    mentor, student = parties

    created = create_session(
        payload=_create_payload(mentor.id),
        current_user=student,
        scheduler=scheduler,
    )
    assert created.status == SessionStatus.SCHEDULED
    assert created.duration == 30
    assert created.start_time == TUESDAY_1500
    assert created.mentor.name == "Mentor"

    for user in (student, mentor):
        listed = get_sessions(status=None, start_from=None, start_to=None, current_user=user, db=db_session)
        assert [s.id for s in listed] == [created.id]

    cancelled_only = get_sessions(
        status=SessionStatus.CANCELLED, start_from=None, start_to=None, current_user=student, db=db_session
    )
    assert cancelled_only == []

    window = get_sessions(
        status=None,
        start_from=TUESDAY_1500 + timedelta(minutes=1),
        start_to=None,
        current_user=student,
        db=db_session,
    )
    assert window == []


def test_create_conflict_maps_to_409(db_session, parties, scheduler):
    mentor, student = parties
    create_session(payload=_create_payload(mentor.id), current_user=student, scheduler=scheduler)

    with pytest.raises(HTTPException) as exc_info:
        create_session(
            payload=_create_payload(mentor.id, TUESDAY_1500 + timedelta(minutes=10)),
            current_user=student,
            scheduler=scheduler,
        )
    assert exc_info.value.status_code == 409
    assert exc_info.value.detail["error"] == "SCHEDULING_CONFLICT"


def test_create_without_request_maps_to_403(db_session, parties, scheduler):
    mentor, _ = parties
    stranger = _create_user(db_session, "stranger@test.edu", "student", "Stranger")

    with pytest.raises(HTTPException) as exc_info:
        create_session(payload=_create_payload(mentor.id), current_user=stranger, scheduler=scheduler)
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == {
        "error": "NO_ACCEPTED_REQUEST",
        "message": "You must have an accepted mentorship request to schedule a session",
    }


def test_create_outside_availability_maps_to_400(db_session, parties, scheduler):
    mentor, student = parties
    with pytest.raises(HTTPException) as exc_info:
        create_session(
            payload=_create_payload(mentor.id, TUESDAY_1500 + timedelta(hours=3)),
            current_user=student,
            scheduler=scheduler,
        )
    assert exc_info.value.status_code == 400
    assert exc_info.value.detail["error"] == "NOT_AVAILABLE"


def test_get_session_hides_from_outsiders(db_session, parties, scheduler):
    mentor, student = parties
    created = create_session(payload=_create_payload(mentor.id), current_user=student, scheduler=scheduler)
    outsider = _create_user(db_session, "outsider@test.edu", "student", "Outsider")

    with pytest.raises(HTTPException) as exc_info:
        get_session(session_id=created.id, current_user=outsider, scheduler=scheduler)
    assert exc_info.value.status_code == 404

    assert get_session(session_id=created.id, current_user=mentor, scheduler=scheduler).id == created.id


def test_mentor_notes_are_hidden_from_student(db_session, parties, scheduler):
    mentor, student = parties
    created = create_session(payload=_create_payload(mentor.id), current_user=student, scheduler=scheduler)

    completed = complete_session(
        session_id=created.id,
        payload=SessionComplete(notes="Needs work on system design", feedback="Great progress"),
        current_user=mentor,
        scheduler=scheduler,
    )
    assert completed.status == SessionStatus.COMPLETED
    assert completed.notes == "Needs work on system design"

    student_view = get_session(session_id=created.id, current_user=student, scheduler=scheduler)
    assert student_view.notes is None
    assert student_view.feedback == "Great progress"


def test_student_update_permissions(db_session, parties, scheduler):
    mentor, student = parties
    created = create_session(payload=_create_payload(mentor.id), current_user=student, scheduler=scheduler)

    with pytest.raises(HTTPException) as exc_info:
        update_session(
            session_id=created.id,
            payload=SessionUpdate(start_time=TUESDAY_1500 + timedelta(minutes=30)),
            current_user=student,
            scheduler=scheduler,
        )
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail["error"] == "UNAUTHORIZED"

    with pytest.raises(HTTPException) as exc_info:
        update_session(
            session_id=created.id,
            payload=SessionUpdate(),
            current_user=student,
            scheduler=scheduler,
        )
    assert exc_info.value.status_code == 400


def test_mentor_updates_details(db_session, parties, scheduler):
    mentor, student = parties
    created = create_session(payload=_create_payload(mentor.id), current_user=student, scheduler=scheduler)

    updated = update_session(
        session_id=created.id,
        payload=SessionUpdate(title="  Mock interview  ", agenda="1. Behavioural\n2. Coding"),
        current_user=mentor,
        scheduler=scheduler,
    )
    assert updated.title == "Mock interview"
    assert updated.agenda.startswith("1. Behavioural")
    assert updated.last_modified_by == mentor.id


def test_cancel_then_cancel_again(db_session, parties, scheduler):
    mentor, student = parties
    created = create_session(payload=_create_payload(mentor.id), current_user=student, scheduler=scheduler)

    cancelled = cancel_session(session_id=created.id, current_user=student, scheduler=scheduler)
    assert cancelled.status == SessionStatus.CANCELLED
    assert cancelled.cancelled_at == NOW

    with pytest.raises(HTTPException) as exc_info:
        cancel_session(session_id=created.id, current_user=mentor, scheduler=scheduler)
    assert exc_info.value.status_code == 403


def test_update_payload_drops_explicit_nulls_on_required_fields():
    patch = SessionUpdate(title=None, start_time=None, notes=None).to_patch()
    assert patch == {"notes": None}
