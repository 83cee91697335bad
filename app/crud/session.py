# app/crud/session.py
"""
Mentorship Session persistence

Query helpers plus SessionStore, the persistence collaborator handed to the
scheduler and the reminder sweep. Callers pass UTC datetimes.
"""

from sqlalchemy.orm import Session
from typing import Any, Dict, Iterable, List, Optional
from datetime import datetime

from app import models
from app.crud import availability as availability_crud
from app.crud import mentorship_request as request_crud
from app.models.session import MentorshipSession, SessionStatus


def get_session(db: Session, session_id: int) -> Optional[MentorshipSession]:
    return db.query(MentorshipSession).filter(MentorshipSession.id == session_id).first()


def list_sessions_for_user(
    db: Session,
    user_id: int,
    status: Optional[SessionStatus] = None,
    start_from: Optional[datetime] = None,
    start_to: Optional[datetime] = None,
) -> List[MentorshipSession]:
    query = db.query(MentorshipSession).filter(
        (MentorshipSession.student_id == user_id) |
        (MentorshipSession.mentor_id == user_id)
    )
    if status:
        query = query.filter(MentorshipSession.status == status)
    if start_from:
        query = query.filter(MentorshipSession.start_time >= start_from)
    if start_to:
        query = query.filter(MentorshipSession.start_time <= start_to)
    return query.order_by(MentorshipSession.start_time.desc()).all()


def find_overlapping_sessions(
    db: Session,
    mentor_id: int,
    student_id: int,
    window_start: datetime,
    window_end: datetime,
    exclude_session_id: Optional[int] = None,
) -> List[MentorshipSession]:
    """SCHEDULED sessions of either party whose range overlaps the window."""
    query = db.query(MentorshipSession).filter(
        MentorshipSession.status == SessionStatus.SCHEDULED,
        MentorshipSession.start_time < window_end,
        MentorshipSession.end_time > window_start,
        (MentorshipSession.mentor_id == mentor_id) |
        (MentorshipSession.student_id == student_id),
    )
    if exclude_session_id is not None:
        query = query.filter(MentorshipSession.id != exclude_session_id)
    return query.order_by(MentorshipSession.start_time.asc()).all()


def find_upcoming_scheduled(db: Session, now: datetime) -> List[MentorshipSession]:
    return (
        db.query(MentorshipSession)
        .filter(
            MentorshipSession.status == SessionStatus.SCHEDULED,
            MentorshipSession.start_time > now,
        )
        .order_by(MentorshipSession.start_time.asc())
        .all()
    )


class SessionStore:
    """SQLAlchemy-backed persistence for the scheduling engine."""

    def __init__(self, db: Session):
        self.db = db

    # ---- reads ----

    def get_session(self, session_id: int) -> Optional[MentorshipSession]:
        return get_session(self.db, session_id)

    def get_session_for_update(self, session_id: int) -> Optional[MentorshipSession]:
        """Fresh copy of the session row, locked until the next commit or rollback."""
        return (
            self.db.query(MentorshipSession)
            .filter(MentorshipSession.id == session_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def find_sessions_overlapping(
        self,
        mentor_id: int,
        student_id: int,
        window_start: datetime,
        window_end: datetime,
        exclude_session_id: Optional[int] = None,
    ) -> List[MentorshipSession]:
        return find_overlapping_sessions(
            self.db, mentor_id, student_id, window_start, window_end, exclude_session_id
        )

    def find_availability(self, mentor_id: int, day_of_week: int):
        return availability_crud.find_slots_for_day(self.db, mentor_id, day_of_week)

    def find_accepted_request(self, student_id: int, mentor_id: int):
        return request_crud.find_accepted_request(self.db, student_id, mentor_id)

    def find_upcoming_scheduled(self, now: datetime) -> List[MentorshipSession]:
        return find_upcoming_scheduled(self.db, now)

    # ---- writes ----

    def lock_participants(self, user_ids: Iterable[int]) -> None:
        """
        Row-lock the users involved in a booking so concurrent create/update
        calls for the same mentor or student serialize. Ascending id order
        keeps two bookings from deadlocking. No-op on SQLite.
        """
        ids = sorted(set(user_ids))
        (
            self.db.query(models.User.id)
            .filter(models.User.id.in_(ids))
            .order_by(models.User.id.asc())
            .with_for_update()
            .all()
        )

    def create_session(self, data: Dict[str, Any]) -> MentorshipSession:
        session = MentorshipSession(**data)
        self.db.add(session)
        self.db.flush()
        return session

    def update_session(self, session: MentorshipSession, patch: Dict[str, Any]) -> MentorshipSession:
        for key, value in patch.items():
            setattr(session, key, value)
        self.db.flush()
        return session

    def claim_reminder(self, session_id: int, lead: str, now: datetime, skipped: bool = False) -> bool:
        """
        Record that the `lead` reminder for a session is being sent.

        Re-reads the row under a lock so two sweeps cannot both claim the
        same lead. Returns False when it was already claimed or the session
        is no longer scheduled. `skipped` marks a lead that is claimed
        without being sent.
        """
        session = self.get_session_for_update(session_id)
        if session is None or session.status != SessionStatus.SCHEDULED:
            self.db.commit()
            return False

        sent = list(session.reminders_sent or [])
        if any(entry.get("lead") == lead for entry in sent):
            self.db.commit()
            return False

        entry = {"lead": lead, "sent_at": now.isoformat()}
        if skipped:
            entry["skipped"] = True
        sent.append(entry)
        # Reassign so the JSON column is flagged dirty.
        session.reminders_sent = sent
        self.db.commit()
        return True

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
