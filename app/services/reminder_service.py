# app/services/reminder_service.py
"""
Session Reminder Service

Periodic sweep that reminds both participants of upcoming sessions at fixed
lead times. Each (session, lead) pair is sent at most once: the lead tag is
claimed on the session row before any notification goes out.
Rescheduling clears the tags, so the new start time gets its own reminders.
"""

import logging
from datetime import datetime, timedelta
from typing import Tuple

from app.models.session import MentorshipSession
from app.services.notification_service import NotificationKind, notify_participants
from app.utils.clock import as_utc

logger = logging.getLogger(__name__)


# (tag, minutes before start)
REMINDER_LEADS: Tuple[Tuple[str, int], ...] = (
    ("24h", 24 * 60),
    ("1h", 60),
    ("15m", 15),
)


def sent_leads(session: MentorshipSession) -> set:
    return {entry.get("lead") for entry in (session.reminders_sent or [])}


def due_leads(session: MentorshipSession, now: datetime):
    """Lead tags whose send time has passed and that were not sent yet."""
    start = as_utc(session.start_time)
    already_sent = sent_leads(session)
    return [
        tag
        for tag, minutes in REMINDER_LEADS
        if tag not in already_sent and start - timedelta(minutes=minutes) <= now
    ]


class ReminderScheduler:
    def __init__(self, store, notifier):
        self.store = store
        self.notifier = notifier

    def sweep(self, now: datetime) -> int:
        """
        Send every reminder that is due at `now`.

        When several leads are overdue (e.g. a session booked an hour ahead,
        or a sweep that was down), only the nearest one is sent; the earlier
        leads are claimed as skipped.

        Returns:
            Number of notifications delivered
        """
        now = as_utc(now)
        delivered = 0

        for session in self.store.find_upcoming_scheduled(now):
            due = due_leads(session, now)
            if not due:
                continue
            lead, stale = due[-1], due[:-1]
            if not self.store.claim_reminder(session.id, lead, now):
                continue
            for tag in stale:
                self.store.claim_reminder(session.id, tag, now, skipped=True)
                logger.info("Reminder %s skipped for session %s", tag, session.id)

            delivered += notify_participants(
                self.notifier,
                NotificationKind.SESSION_REMINDER,
                session,
                reminder_lead=lead,
            )
            logger.info("Reminder %s sent for session %s", lead, session.id)

        if delivered:
            logger.info("Reminder sweep delivered %s notification(s)", delivered)
        return delivered
