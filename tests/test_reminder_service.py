from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.crud.session import SessionStore
from app.database import Base
from app.models.session import MentorshipSession, SessionStatus
from app.models.user import User
from app.services.notification_service import NotificationKind
from app.services.reminder_service import ReminderScheduler, due_leads
from app.utils.clock import FixedClock

START = datetime(2026, 10, 20, 15, 0, tzinfo=timezone.utc)


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def notify(self, user_id, kind, session, *, actor_id=None, reminder_lead=None):
        self.sent.append((user_id, kind, session.id, reminder_lead))


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


def _create_session(db, start=START, status=SessionStatus.SCHEDULED, reminders_sent=None) -> MentorshipSession:
    student = _create_user(db, f"student{db.query(User).count()}@test.edu", "student")
    mentor = _create_user(db, f"mentor{db.query(User).count()}@test.edu", "alumni")
    session = MentorshipSession(
        student_id=student.id,
        mentor_id=mentor.id,
        title="Reminder test",
        start_time=start,
        end_time=start + timedelta(minutes=30),
        timezone="UTC",
        duration=30,
        status=status,
        location="ONLINE",
        meeting_type="VIDEO",
        reminders_sent=reminders_sent or [],
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def _sweeper(db, notifier):
    return ReminderScheduler(SessionStore(db), notifier)


def _leads(notifier):
    return [entry[3] for entry in notifier.sent]


def test_nothing_due_far_ahead(db_session):
    _create_session(db_session)
    notifier = RecordingNotifier()
    assert _sweeper(db_session, notifier).sweep(START - timedelta(days=2)) == 0
    assert notifier.sent == []


def test_day_ahead_reminder_goes_to_both_participants(db_session):
    session = _create_session(db_session)
    notifier = RecordingNotifier()

    delivered = _sweeper(db_session, notifier).sweep(START - timedelta(hours=24))

    assert delivered == 2
    assert sorted(entry[0] for entry in notifier.sent) == sorted([session.student_id, session.mentor_id])
    assert all(entry[1] == NotificationKind.SESSION_REMINDER for entry in notifier.sent)
    assert _leads(notifier) == ["24h", "24h"]


def test_hour_reminder_is_sent_once(db_session):
    session = _create_session(db_session, reminders_sent=[{"lead": "24h", "sent_at": "2026-10-19T15:00:00+00:00"}])
    notifier = RecordingNotifier()
    clock = FixedClock(START - timedelta(minutes=61))
    sweeper = _sweeper(db_session, notifier)

    assert sweeper.sweep(clock.now()) == 0

    clock.advance(minutes=1)
    assert sweeper.sweep(clock.now()) == 2
    assert _leads(notifier) == ["1h", "1h"]

    clock.advance(minutes=1)
    assert sweeper.sweep(clock.now()) == 0
    assert len(notifier.sent) == 2

    db_session.expire_all()
    tags = [entry["lead"] for entry in db_session.get(MentorshipSession, session.id).reminders_sent]
    assert tags == ["24h", "1h"]


def test_repeated_sweeps_are_idempotent(db_session):
    session = _create_session(db_session)
    notifier = RecordingNotifier()
    now = START - timedelta(minutes=10)

    first = _sweeper(db_session, notifier).sweep(now)
    second = _sweeper(db_session, notifier).sweep(now)

    # All three leads are overdue at T-10; only the nearest one goes out.
    assert first == 2
    assert second == 0
    assert _leads(notifier) == ["15m", "15m"]

    db_session.expire_all()
    entries = db_session.get(MentorshipSession, session.id).reminders_sent
    assert sorted(entry["lead"] for entry in entries) == ["15m", "1h", "24h"]
    assert sorted(entry["lead"] for entry in entries if entry.get("skipped")) == ["1h", "24h"]


def test_late_booking_gets_nearest_reminder_then_the_rest(db_session):
    _create_session(db_session)
    notifier = RecordingNotifier()
    clock = FixedClock(START - timedelta(minutes=45))
    sweeper = _sweeper(db_session, notifier)

    assert sweeper.sweep(clock.now()) == 2
    assert _leads(notifier) == ["1h", "1h"]

    clock.advance(minutes=29)
    assert sweeper.sweep(clock.now()) == 0

    clock.advance(minutes=1)
    assert sweeper.sweep(clock.now()) == 2
    assert _leads(notifier) == ["1h", "1h", "15m", "15m"]


def test_started_and_inactive_sessions_are_skipped(db_session):
    _create_session(db_session, start=START)
    _create_session(db_session, start=START + timedelta(hours=1), status=SessionStatus.CANCELLED)
    _create_session(db_session, start=START + timedelta(hours=1), status=SessionStatus.COMPLETED)
    notifier = RecordingNotifier()

    assert _sweeper(db_session, notifier).sweep(START) == 0
    assert notifier.sent == []


def test_claim_reminder_is_at_most_once(db_session):
    session = _create_session(db_session)
    store = SessionStore(db_session)
    now = START - timedelta(minutes=15)

    assert store.claim_reminder(session.id, "15m", now) is True
    assert store.claim_reminder(session.id, "15m", now) is False
    assert store.claim_reminder(session.id, "1h", now, skipped=True) is True
    assert store.claim_reminder(session.id, "1h", now) is False


def test_claim_reminder_refuses_cancelled_session(db_session):
    session = _create_session(db_session, status=SessionStatus.CANCELLED)
    assert SessionStore(db_session).claim_reminder(session.id, "1h", START) is False


def test_due_leads_skips_sent_tags():
    session = SimpleNamespace(
        start_time=START,
        reminders_sent=[{"lead": "24h", "sent_at": "2026-10-19T15:00:00+00:00"}],
    )
    assert due_leads(session, START - timedelta(minutes=60)) == ["1h"]
    assert due_leads(session, START - timedelta(minutes=15)) == ["1h", "15m"]
    assert due_leads(session, START - timedelta(hours=30)) == []
