"""Availability slot CRUD"""

from sqlalchemy.orm import Session
from typing import List, Optional

from app.models.availability import Availability


def create_slot(db: Session, mentor_id: int, **fields) -> Availability:
    slot = Availability(mentor_id=mentor_id, **fields)
    db.add(slot)
    db.flush()
    return slot


def list_slots_for_mentor(db: Session, mentor_id: int) -> List[Availability]:
    return (
        db.query(Availability)
        .filter(Availability.mentor_id == mentor_id)
        .order_by(Availability.day_of_week.asc(), Availability.start_time.asc())
        .all()
    )


def find_slots_for_day(db: Session, mentor_id: int, day_of_week: int) -> List[Availability]:
    return (
        db.query(Availability)
        .filter(
            Availability.mentor_id == mentor_id,
            Availability.day_of_week == day_of_week,
        )
        .order_by(Availability.start_time.asc())
        .all()
    )


def get_slot_for_owner(db: Session, slot_id: int, mentor_id: int) -> Optional[Availability]:
    return db.query(Availability).filter(
        Availability.id == slot_id,
        Availability.mentor_id == mentor_id,
    ).first()


def delete_slot(db: Session, slot: Availability) -> None:
    db.delete(slot)
    db.flush()
