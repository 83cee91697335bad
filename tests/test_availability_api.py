from __future__ import annotations

import pytest
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Skip suite when FastAPI dependency is not present in local environment.
pytest.importorskip("fastapi")

from fastapi import HTTPException
from app.api.availability import create_availability, delete_availability, list_availability
from app.database import Base
from app.models.user import User
from app.schemas.availability import AvailabilityCreate


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


def _create_user(db, email: str, role: str) -> User:
    user = User(name=email.split("@")[0], email=email, password_hash="hash", role=role, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _slot(**overrides) -> AvailabilityCreate:
    fields = dict(
        day_of_week=2,
        start_time="14:00",
        end_time="16:00",
        location="ONLINE",
        meeting_type="VIDEO",
        meeting_link="https://meet.example.com/office-hours",
    )
    fields.update(overrides)
    return AvailabilityCreate(**fields)


def test_alumni_manage_slots(db_session):
    mentor = _create_user(db_session, "mentor@test.edu", "alumni")
    student = _create_user(db_session, "student@test.edu", "student")

    tuesday = create_availability(payload=_slot(), current_user=mentor, db=db_session)
    monday = create_availability(
        payload=_slot(day_of_week=1, start_time="9:00", end_time="10:30"),
        current_user=mentor,
        db=db_session,
    )
    assert monday.start_time == "09:00"

    listed = list_availability(mentor_id=mentor.id, current_user=student, db=db_session)
    assert [slot.id for slot in listed] == [monday.id, tuesday.id]

    deleted = delete_availability(slot_id=monday.id, current_user=mentor, db=db_session)
    assert deleted["id"] == monday.id
    listed = list_availability(mentor_id=mentor.id, current_user=student, db=db_session)
    assert [slot.id for slot in listed] == [tuesday.id]


def test_students_cannot_publish_slots(db_session):
    student = _create_user(db_session, "student@test.edu", "student")
    with pytest.raises(HTTPException) as exc_info:
        create_availability(payload=_slot(), current_user=student, db=db_session)
    assert exc_info.value.status_code == 403


def test_cannot_delete_someone_elses_slot(db_session):
    owner = _create_user(db_session, "owner@test.edu", "alumni")
    other = _create_user(db_session, "other@test.edu", "alumni")
    slot = create_availability(payload=_slot(), current_user=owner, db=db_session)

    with pytest.raises(HTTPException) as exc_info:
        delete_availability(slot_id=slot.id, current_user=other, db=db_session)
    assert exc_info.value.status_code == 404


def test_listing_unknown_mentor_is_404(db_session):
    student = _create_user(db_session, "student@test.edu", "student")
    with pytest.raises(HTTPException) as exc_info:
        list_availability(mentor_id=student.id, current_user=student, db=db_session)
    assert exc_info.value.status_code == 404


@pytest.mark.parametrize(
    "overrides",
    [
        {"start_time": "22:00", "end_time": "01:00"},
        {"start_time": "10:00", "end_time": "10:00"},
        {"start_time": "25:00"},
        {"day_of_week": 7},
        {"location": "IN_PERSON", "meeting_type": "VIDEO"},
        {"location": "ONLINE", "meeting_type": "IN_PERSON"},
        {"location": "IN_PERSON", "meeting_type": "IN_PERSON", "venue": "  "},
    ],
)
def test_invalid_slots_are_rejected(overrides):
    with pytest.raises(ValidationError):
        _slot(**overrides)


def test_in_person_slot_with_venue_is_valid():
    slot = _slot(location="IN_PERSON", meeting_type="IN_PERSON", venue="Library, room 2", meeting_link=None)
    assert slot.venue == "Library, room 2"
