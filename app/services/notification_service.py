from __future__ import annotations

import enum
import logging
import threading
from typing import List, Optional

from sqlalchemy.orm import Session

from app import models
from app.models.notification import Notification
from app.utils.clock import format_in_timezone
from app.utils.email import is_email_enabled, send_email

logger = logging.getLogger(__name__)


class NotificationKind(str, enum.Enum):
    SESSION_SCHEDULED = "session_scheduled"
    SESSION_UPDATED = "session_updated"
    SESSION_CANCELLED = "session_cancelled"
    SESSION_COMPLETED = "session_completed"
    SESSION_REMINDER = "session_reminder"
    FEEDBACK_RECEIVED = "feedback_received"


EMAIL_SUBJECT_BY_EVENT = {
    NotificationKind.SESSION_SCHEDULED.value: "New mentorship session scheduled",
    NotificationKind.SESSION_UPDATED.value: "Mentorship session updated",
    NotificationKind.SESSION_CANCELLED.value: "Mentorship session cancelled",
    NotificationKind.SESSION_COMPLETED.value: "Mentorship session completed",
    NotificationKind.SESSION_REMINDER.value: "Upcoming mentorship session reminder",
    NotificationKind.FEEDBACK_RECEIVED.value: "New feedback received",
}

REMINDER_PHRASES = {
    "24h": "is scheduled for tomorrow at",
    "1h": "starts in 1 hour at",
    "15m": "starts in 15 minutes at",
}

MAX_MESSAGE_LENGTH = 500


# ======================
# INBOX
# ======================

def list_user_notifications(
    db: Session,
    *,
    user_id: int,
    unread_only: bool = False,
    limit: int = 50,
) -> List[Notification]:
    query = db.query(Notification).filter(Notification.recipient_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()


def mark_notification_read(
    db: Session,
    *,
    user_id: int,
    notification_id: int,
) -> Optional[Notification]:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.recipient_id == user_id,
    ).first()
    if not notification:
        return None
    notification.is_read = True
    db.commit()
    return notification


def mark_all_notifications_read(db: Session, *, user_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.recipient_id == user_id,
        Notification.is_read.is_(False),
    ).update({"is_read": True}, synchronize_session=False)
    db.commit()
    return int(updated)


def get_unread_count(db: Session, *, user_id: int) -> int:
    return db.query(Notification).filter(
        Notification.recipient_id == user_id,
        Notification.is_read.is_(False),
    ).count()


def create_notification(
    db: Session,
    *,
    recipient_id: int,
    actor_id: Optional[int],
    session_id: Optional[int],
    event_type: str,
    message: str,
) -> Notification:
    notification = Notification(
        recipient_id=recipient_id,
        actor_id=actor_id,
        session_id=session_id,
        event_type=event_type,
        message=message[:MAX_MESSAGE_LENGTH],
    )
    db.add(notification)
    db.flush()
    return notification


# ======================
# MESSAGE TEMPLATES
# ======================

def render_message(
    kind: NotificationKind,
    session: models.MentorshipSession,
    reminder_lead: Optional[str] = None,
) -> str:
    """Message body for a session event; times are shown in the session's timezone."""
    when = format_in_timezone(session.start_time, session.timezone)
    title = session.title

    if kind == NotificationKind.SESSION_SCHEDULED:
        return f'Your mentorship session "{title}" has been scheduled for {when}.'
    if kind == NotificationKind.SESSION_UPDATED:
        return f'Your mentorship session "{title}" has been updated. Time: {when}.'
    if kind == NotificationKind.SESSION_CANCELLED:
        return f'Your mentorship session "{title}" scheduled for {when} has been cancelled.'
    if kind == NotificationKind.SESSION_COMPLETED:
        return (
            f'Your mentorship session "{title}" has been marked as completed. '
            "Please provide your feedback."
        )
    if kind == NotificationKind.SESSION_REMINDER:
        phrase = REMINDER_PHRASES.get(reminder_lead, "is scheduled for")
        return f'Reminder: your mentorship session "{title}" {phrase} {when}.'
    if kind == NotificationKind.FEEDBACK_RECEIVED:
        return f'New feedback has been received for your session "{title}".'
    raise ValueError(f"Unknown notification kind: {kind}")


# ======================
# EMAIL
# ======================

def _send_notification_email(to_email: str, subject: str, body_text: str, *, notification_id: Optional[int], recipient_id: Optional[int]) -> None:
    """Send SMTP mail in a background thread so API latency stays low."""
    sent = send_email(
        to_email=to_email,
        subject=subject,
        body_text=body_text,
    )
    if not sent:
        logger.info(
            "Notification email not sent (recipient_id=%s, notification_id=%s)",
            recipient_id,
            notification_id,
        )


def dispatch_email_for_notification(db: Session, notification: Notification) -> bool:
    """
    Best-effort email delivery for a committed notification.
    This function never raises and should not impact request success.
    """
    try:
        if not is_email_enabled():
            return False

        recipient = db.query(models.User).filter(
            models.User.id == notification.recipient_id
        ).first()
        if not recipient or not recipient.email:
            return False

        subject = EMAIL_SUBJECT_BY_EVENT.get(
            notification.event_type,
            "New notification from MentorLink",
        )
        recipient_name = (recipient.name or "there").strip() or "there"
        body_text = (
            f"Hi {recipient_name},\n\n"
            f"{notification.message}\n\n"
            f"Session ID: {notification.session_id or 'N/A'}\n\n"
            "Open MentorLink to view details."
        )

        worker = threading.Thread(
            target=_send_notification_email,
            args=(
                recipient.email,
                subject,
                body_text,
            ),
            kwargs={
                "notification_id": getattr(notification, "id", None),
                "recipient_id": notification.recipient_id,
            },
            daemon=True,
        )
        worker.start()
        return True
    except Exception as exc:
        logger.warning(
            "Notification email dispatch failed (notification_id=%s): %s",
            getattr(notification, "id", None),
            exc,
        )
        return False


# ======================
# NOTIFICATION SINK
# ======================

class NotificationService:
    """
    Notification sink used by the scheduler and the reminder sweep.

    Stores an in-app notification and hands it to email. Delivery is
    fire-and-forget: failures are logged and never reach the caller.
    """

    def __init__(self, db: Session):
        self.db = db

    def notify(
        self,
        user_id: int,
        kind: NotificationKind,
        session: models.MentorshipSession,
        *,
        actor_id: Optional[int] = None,
        reminder_lead: Optional[str] = None,
    ) -> Optional[Notification]:
        try:
            notification = create_notification(
                self.db,
                recipient_id=user_id,
                actor_id=actor_id,
                session_id=session.id,
                event_type=NotificationKind(kind).value,
                message=render_message(kind, session, reminder_lead),
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.warning(
                "Notification not stored (recipient_id=%s, kind=%s, session_id=%s)",
                user_id,
                kind,
                getattr(session, "id", None),
                exc_info=True,
            )
            return None

        dispatch_email_for_notification(self.db, notification)
        return notification


def notify_participants(
    notifier,
    kind: NotificationKind,
    session: models.MentorshipSession,
    *,
    exclude_user_id: Optional[int] = None,
    actor_id: Optional[int] = None,
    reminder_lead: Optional[str] = None,
) -> int:
    """Fan a session event out to student and mentor, skipping `exclude_user_id`."""
    notified = 0
    for user_id in (session.student_id, session.mentor_id):
        if user_id == exclude_user_id:
            continue
        try:
            notifier.notify(
                user_id,
                kind,
                session,
                actor_id=actor_id,
                reminder_lead=reminder_lead,
            )
            notified += 1
        except Exception:
            logger.warning(
                "Notifier raised for recipient_id=%s kind=%s", user_id, kind, exc_info=True
            )
    return notified
