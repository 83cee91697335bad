# app/api/availability.py
"""
Mentor Availability API
Alumni publish weekly recurring slots that students can book into.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List

from app.crud import availability as availability_crud
from app.crud import user as user_crud
from app.database import get_db
from app.models.user import User
from app.schemas.availability import AvailabilityCreate, AvailabilityResponse
from app.utils.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["availability"])


def _require_alumni(current_user: User) -> None:
    if not current_user.is_alumni:
        raise HTTPException(
            status_code=403,
            detail={"error": "UNAUTHORIZED", "message": "Only alumni can manage availability"},
        )


@router.post("/", response_model=AvailabilityResponse, status_code=201)
def create_availability(
    payload: AvailabilityCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _require_alumni(current_user)
    try:
        slot = availability_crud.create_slot(db, current_user.id, **payload.model_dump())
        db.commit()
        db.refresh(slot)
    except Exception:
        db.rollback()
        raise
    logger.info(
        "Availability slot %s created (mentor_id=%s, day=%s, %s-%s)",
        slot.id,
        current_user.id,
        slot.day_of_week,
        slot.start_time,
        slot.end_time,
    )
    return slot


@router.get("/", response_model=List[AvailabilityResponse])
def list_availability(
    mentor_id: int = Query(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """A mentor's weekly slots ordered by day then start time."""
    mentor = user_crud.get_user(db, mentor_id)
    if not mentor or not mentor.is_alumni:
        raise HTTPException(
            status_code=404,
            detail={"error": "NOT_FOUND", "message": "Mentor not found"},
        )
    return availability_crud.list_slots_for_mentor(db, mentor_id)


@router.delete("/{slot_id}")
def delete_availability(
    slot_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _require_alumni(current_user)
    slot = availability_crud.get_slot_for_owner(db, slot_id, current_user.id)
    if not slot:
        raise HTTPException(
            status_code=404,
            detail={"error": "NOT_FOUND", "message": "Availability slot not found"},
        )
    try:
        availability_crud.delete_slot(db, slot)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return {"message": "Availability slot deleted", "id": slot_id}
