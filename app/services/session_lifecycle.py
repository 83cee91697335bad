# app/services/session_lifecycle.py
"""
Session lifecycle rules.

A session starts SCHEDULED and ends COMPLETED or CANCELLED; both are
terminal. Which fields a participant may change is decided by one table
keyed by (role, current status) listing the permitted kinds of change.
"""

import enum
from datetime import datetime
from typing import Any, Dict, FrozenSet, Optional, Set

from app.models.session import MentorshipSession, SessionStatus
from app.services.exceptions import PermissionDeniedError, SchedulingValidationError
from app.services.notification_service import NotificationKind


class ParticipantRole(str, enum.Enum):
    STUDENT = "student"
    MENTOR = "mentor"


class Change(str, enum.Enum):
    CANCEL = "cancel"
    COMPLETE = "complete"
    REOPEN = "reopen"
    RESCHEDULE = "reschedule"
    DETAILS = "details"
    MENTOR_NOTES = "mentor_notes"
    STUDENT_FEEDBACK = "student_feedback"


RESCHEDULE_FIELDS = frozenset({"start_time", "end_time", "location", "meeting_type", "meeting_link", "venue"})
DETAIL_FIELDS = frozenset({"title", "description", "agenda"})
MENTOR_NOTE_FIELDS = frozenset({"notes", "feedback", "student_rating"})
STUDENT_FEEDBACK_FIELDS = frozenset({"student_feedback", "mentor_rating"})

# Fields the mentor writes that the student gets to see.
MENTOR_FEEDBACK_FIELDS = frozenset({"feedback", "student_rating"})

_FIELD_CHANGES = (
    (RESCHEDULE_FIELDS, Change.RESCHEDULE),
    (DETAIL_FIELDS, Change.DETAILS),
    (MENTOR_NOTE_FIELDS, Change.MENTOR_NOTES),
    (STUDENT_FEEDBACK_FIELDS, Change.STUDENT_FEEDBACK),
)

_STATUS_CHANGES = {
    SessionStatus.CANCELLED: Change.CANCEL,
    SessionStatus.COMPLETED: Change.COMPLETE,
    SessionStatus.SCHEDULED: Change.REOPEN,
}

# (role, current status) -> changes that role may request. Anything not
# listed, including every change on a CANCELLED session, is refused.
PERMISSIONS: Dict[tuple, FrozenSet[Change]] = {
    (ParticipantRole.MENTOR, SessionStatus.SCHEDULED): frozenset({
        Change.CANCEL,
        Change.COMPLETE,
        Change.RESCHEDULE,
        Change.DETAILS,
        Change.MENTOR_NOTES,
    }),
    (ParticipantRole.MENTOR, SessionStatus.COMPLETED): frozenset({Change.MENTOR_NOTES}),
    (ParticipantRole.STUDENT, SessionStatus.SCHEDULED): frozenset({Change.CANCEL}),
    (ParticipantRole.STUDENT, SessionStatus.COMPLETED): frozenset({Change.STUDENT_FEEDBACK}),
}


def participant_role(session: MentorshipSession, user_id: int) -> Optional[ParticipantRole]:
    if session.mentor_id == user_id:
        return ParticipantRole.MENTOR
    if session.student_id == user_id:
        return ParticipantRole.STUDENT
    return None


def classify_changes(patch: Dict[str, Any]) -> Set[Change]:
    changes = set()
    if patch.get("status") is not None:
        changes.add(_STATUS_CHANGES[SessionStatus(patch["status"])])
    for fields, change in _FIELD_CHANGES:
        if fields.intersection(patch):
            changes.add(change)
    return changes


def allowed_changes(role: ParticipantRole, status: SessionStatus) -> FrozenSet[Change]:
    return PERMISSIONS.get((role, SessionStatus(status)), frozenset())


def authorize_changes(
    role: ParticipantRole,
    session: MentorshipSession,
    patch: Dict[str, Any],
) -> Set[Change]:
    """
    Check a patch against the permission table.

    Returns:
        The set of requested changes

    Raises:
        SchedulingValidationError: Empty patch, or a status change mixed with a reschedule
        PermissionDeniedError: Any requested change the role may not make in this status
    """
    changes = classify_changes(patch)
    if not changes:
        raise SchedulingValidationError("No changes supplied", kind="INVALID_UPDATE")

    status_changes = changes & {Change.CANCEL, Change.COMPLETE, Change.REOPEN}
    if status_changes and Change.RESCHEDULE in changes:
        raise SchedulingValidationError(
            "A status change cannot be combined with new time or location details",
            kind="INVALID_UPDATE",
        )

    denied = changes - allowed_changes(role, session.status)
    if denied:
        names = ", ".join(sorted(change.value for change in denied))
        raise PermissionDeniedError(
            f"A {role.value} cannot make these changes to a {SessionStatus(session.status).value} session: {names}",
            kind="UNAUTHORIZED",
        )
    return changes


def check_completion(session: MentorshipSession, patch: Dict[str, Any]) -> None:
    notes = patch.get("notes", session.notes)
    feedback = patch.get("feedback", session.feedback)
    if not (notes or "").strip() or not (feedback or "").strip():
        raise SchedulingValidationError(
            "Notes and feedback are required to complete a session",
            kind="COMPLETION_DETAILS_REQUIRED",
        )


def build_update_data(
    patch: Dict[str, Any],
    changes: Set[Change],
    actor_id: int,
    now: datetime,
) -> Dict[str, Any]:
    """Column values to write for an authorized patch, including bookkeeping fields."""
    data = {key: value for key, value in patch.items() if key != "status"}
    data["last_modified_by"] = actor_id

    if Change.CANCEL in changes:
        data["status"] = SessionStatus.CANCELLED
        data["cancelled_at"] = now
    elif Change.COMPLETE in changes:
        data["status"] = SessionStatus.COMPLETED
        data["completed_at"] = now
    return data


def notification_for(
    changes: Set[Change],
    patch: Dict[str, Any],
    previous_status: SessionStatus,
) -> Optional[NotificationKind]:
    """Which event an applied update announces to the other participant, if any."""
    if Change.CANCEL in changes:
        return NotificationKind.SESSION_CANCELLED
    if Change.COMPLETE in changes:
        return NotificationKind.SESSION_COMPLETED
    if Change.STUDENT_FEEDBACK in changes:
        return NotificationKind.FEEDBACK_RECEIVED
    if SessionStatus(previous_status) == SessionStatus.COMPLETED:
        # Post-session mentor edits: private notes alone are not announced.
        if MENTOR_FEEDBACK_FIELDS.intersection(patch):
            return NotificationKind.FEEDBACK_RECEIVED
        return None
    return NotificationKind.SESSION_UPDATED
