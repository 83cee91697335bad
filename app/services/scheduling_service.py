# app/services/scheduling_service.py
"""
Session Scheduling Service

Books mentorship sessions and applies every later change to them.

A booking flows: accepted-request check -> time rules -> mentor
availability -> conflict detection -> persist -> notify. Updates go through
the lifecycle permission table; changes to time or place re-run the same
checks with the session itself excluded from conflict detection.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from app import models
from app.models.session import MentorshipSession, SessionStatus
from app.models.user import UserRole
from app.services import session_lifecycle as lifecycle
from app.services.availability_matcher import AvailabilityMatcher
from app.services.conflict_detector import ConflictDetector
from app.services.exceptions import (
    NotAvailableError,
    NotFoundError,
    PermissionDeniedError,
    SchedulingConflictError,
    SchedulingError,
    SchedulingValidationError,
)
from app.services.meeting_rules import meeting_details_error
from app.services.notification_service import NotificationKind, notify_participants
from app.services.time_validator import duration_minutes, normalize_range, validate_session_time
from app.utils.clock import SystemClock, as_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """Authenticated caller as supplied by the request layer."""
    user_id: int
    role: str

    @classmethod
    def from_user(cls, user: models.User) -> "Actor":
        return cls(user_id=user.id, role=(user.role or "").lower())


class SessionScheduler:
    def __init__(self, store, notifier, clock=None, default_timezone: str = "UTC"):
        self.store = store
        self.notifier = notifier
        self.clock = clock or SystemClock()
        self.default_timezone = default_timezone
        self.availability = AvailabilityMatcher(store)
        self.conflicts = ConflictDetector(store)

    # ======================
    # CHECKS
    # ======================

    def _check_meeting_details(self, location, meeting_type, venue) -> None:
        error = meeting_details_error(location, meeting_type, venue)
        if error:
            kind, message = error
            raise SchedulingValidationError(message, kind=kind)

    def _check_slot(
        self,
        start_time: datetime,
        end_time: datetime,
        timezone: str,
        mentor_id: int,
        student_id: int,
        now: datetime,
        exclude_session_id: Optional[int] = None,
    ) -> Tuple[datetime, datetime]:
        """
        Run time rules, availability and conflict detection in that order.

        Returns:
            (start, end) normalized to UTC

        Raises:
            SchedulingValidationError: Time rules failed (kind names the rule)
            NotAvailableError: Start falls outside every availability slot
            SchedulingConflictError: Overlaps another scheduled session (with buffer)
        """
        result = validate_session_time(start_time, end_time, timezone, now)
        if not result.is_valid:
            raise SchedulingValidationError(result.message, kind=result.error)

        start_utc, end_utc = normalize_range(start_time, end_time, timezone)

        if not self.availability.is_available(mentor_id, start_utc, timezone):
            raise NotAvailableError("The mentor is not available at this time")

        conflict = self.conflicts.find_conflict(
            start_utc,
            end_utc,
            mentor_id,
            student_id,
            exclude_session_id,
        )
        if conflict:
            raise SchedulingConflictError(conflict.reason, conflict=conflict)

        return start_utc, end_utc

    # ======================
    # CREATE
    # ======================

    def create_session(self, actor: Actor, data: Dict[str, Any]) -> MentorshipSession:
        """
        Book a new session for the calling student.

        Args:
            actor: Calling user; must be a student
            data: SessionCreate fields (mentor_id, title, start_time, end_time, ...)

        Returns:
            The persisted SCHEDULED session

        Raises:
            PermissionDeniedError: Caller is not a student, or has no accepted request with the mentor
            SchedulingValidationError, NotAvailableError, SchedulingConflictError: Slot rejected
        """
        if actor.role != UserRole.STUDENT.value:
            raise PermissionDeniedError("Only students can schedule sessions")

        mentor_id = data["mentor_id"]
        if not self.store.find_accepted_request(actor.user_id, mentor_id):
            raise PermissionDeniedError(
                "You must have an accepted mentorship request to schedule a session",
                kind="NO_ACCEPTED_REQUEST",
            )

        timezone = data.get("timezone") or self.default_timezone
        self._check_meeting_details(data["location"], data["meeting_type"], data.get("venue"))
        now = self.clock.now()

        try:
            self.store.lock_participants([actor.user_id, mentor_id])
            start_utc, end_utc = self._check_slot(
                data["start_time"],
                data["end_time"],
                timezone,
                mentor_id,
                actor.user_id,
                now,
            )
            session = self.store.create_session({
                "title": data["title"],
                "description": data.get("description"),
                "agenda": data.get("agenda"),
                "student_id": actor.user_id,
                "mentor_id": mentor_id,
                "start_time": start_utc,
                "end_time": end_utc,
                "timezone": timezone,
                "duration": int(round(duration_minutes(start_utc, end_utc))),
                "status": SessionStatus.SCHEDULED,
                "location": data["location"],
                "meeting_type": data["meeting_type"],
                "meeting_link": data.get("meeting_link"),
                "venue": data.get("venue"),
                "reminders_sent": [],
                "last_modified_by": actor.user_id,
            })
            self.store.commit()
        except SchedulingError as exc:
            self.store.rollback()
            logger.info(
                "Session booking rejected (student_id=%s, mentor_id=%s): %s %s",
                actor.user_id,
                mentor_id,
                exc.kind,
                exc.message,
            )
            raise
        except Exception:
            self.store.rollback()
            raise

        logger.info(
            "Session %s scheduled (student_id=%s, mentor_id=%s, start=%s)",
            session.id,
            actor.user_id,
            mentor_id,
            start_utc.isoformat(),
        )
        notify_participants(
            self.notifier,
            NotificationKind.SESSION_SCHEDULED,
            session,
            exclude_user_id=actor.user_id,
            actor_id=actor.user_id,
        )
        return session

    # ======================
    # READ
    # ======================

    def get_session_for_actor(self, actor: Actor, session_id: int, for_update: bool = False) -> MentorshipSession:
        if for_update:
            session = self.store.get_session_for_update(session_id)
        else:
            session = self.store.get_session(session_id)
        if not session or lifecycle.participant_role(session, actor.user_id) is None:
            raise NotFoundError("Session not found")
        return session

    # ======================
    # UPDATE
    # ======================

    def _rescheduled_fields(
        self,
        session: MentorshipSession,
        patch: Dict[str, Any],
        now: datetime,
    ) -> Dict[str, Any]:
        """Merge new time/place values over the stored ones and re-validate them."""
        location = patch.get("location") or session.location
        meeting_type = patch.get("meeting_type") or session.meeting_type
        venue = patch["venue"] if "venue" in patch else session.venue
        self._check_meeting_details(location, meeting_type, venue)

        start_time = patch.get("start_time") or as_utc(session.start_time)
        end_time = patch.get("end_time") or as_utc(session.end_time)

        self.store.lock_participants(session.participant_ids())
        start_utc, end_utc = self._check_slot(
            start_time,
            end_time,
            session.timezone,
            session.mentor_id,
            session.student_id,
            now,
            exclude_session_id=session.id,
        )
        fields = {
            "start_time": start_utc,
            "end_time": end_utc,
            "duration": int(round(duration_minutes(start_utc, end_utc))),
        }
        # Reminder tags belong to the old start time.
        if start_utc != as_utc(session.start_time):
            fields["reminders_sent"] = []
        return fields

    def update_session(self, actor: Actor, session_id: int, patch: Dict[str, Any]) -> MentorshipSession:
        """
        Apply a partial update on behalf of a participant.

        Raises:
            NotFoundError: Session missing or caller is not a participant
            PermissionDeniedError: Change not allowed for the caller's role in the current status
            SchedulingValidationError: Empty/mixed patch, missing completion details, or bad time/place
            NotAvailableError, SchedulingConflictError: New time rejected
        """
        patch = dict(patch)
        now = self.clock.now()

        # Row stays locked from the status check until commit or rollback.
        try:
            session = self.get_session_for_actor(actor, session_id, for_update=True)
            role = lifecycle.participant_role(session, actor.user_id)
            changes = lifecycle.authorize_changes(role, session, patch)

            if lifecycle.Change.COMPLETE in changes:
                lifecycle.check_completion(session, patch)

            previous_status = SessionStatus(session.status)

            if lifecycle.Change.RESCHEDULE in changes:
                patch.update(self._rescheduled_fields(session, patch, now))
            data = lifecycle.build_update_data(patch, changes, actor.user_id, now)
            self.store.update_session(session, data)
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise

        logger.info(
            "Session %s updated by user %s (%s)",
            session.id,
            actor.user_id,
            ", ".join(sorted(change.value for change in changes)),
        )

        kind = lifecycle.notification_for(changes, patch, previous_status)
        if kind:
            notify_participants(
                self.notifier,
                kind,
                session,
                exclude_user_id=actor.user_id,
                actor_id=actor.user_id,
            )
        return session

    def cancel_session(self, actor: Actor, session_id: int) -> MentorshipSession:
        return self.update_session(actor, session_id, {"status": SessionStatus.CANCELLED})

    def complete_session(
        self,
        actor: Actor,
        session_id: int,
        notes: Optional[str] = None,
        feedback: Optional[str] = None,
        student_rating: Optional[int] = None,
    ) -> MentorshipSession:
        patch: Dict[str, Any] = {"status": SessionStatus.COMPLETED}
        if notes is not None:
            patch["notes"] = notes
        if feedback is not None:
            patch["feedback"] = feedback
        if student_rating is not None:
            patch["student_rating"] = student_rating
        return self.update_session(actor, session_id, patch)


def build_scheduler(db, clock=None) -> SessionScheduler:
    """Scheduler wired to the SQLAlchemy store and the in-app/email notifier."""
    from app.config import settings
    from app.crud.session import SessionStore
    from app.services.notification_service import NotificationService

    return SessionScheduler(
        SessionStore(db),
        NotificationService(db),
        clock=clock,
        default_timezone=settings.DEFAULT_TIMEZONE,
    )
