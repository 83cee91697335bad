from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.database import Base
from app.models.notification import Notification
from app.models.session import MentorshipSession
from app.models.user import User
from app.scripts import run_reminder_sweep as script
from app.services import notification_service

START = datetime(2026, 10, 20, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def session_factory(monkeypatch):
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine)
    monkeypatch.setattr(script, "SessionLocal", factory)
    monkeypatch.setattr(notification_service, "is_email_enabled", lambda: False)
    return factory


def _seed(factory):
    db = factory()
    try:
        student = User(name="S", email="s@test.edu", password_hash="h", role="student", is_active=True)
        mentor = User(name="M", email="m@test.edu", password_hash="h", role="alumni", is_active=True)
        db.add_all([student, mentor])
        db.flush()
        db.add(MentorshipSession(
            student_id=student.id,
            mentor_id=mentor.id,
            title="Sweep",
            start_time=START,
            end_time=START + timedelta(minutes=30),
            timezone="UTC",
            duration=30,
            location="ONLINE",
            meeting_type="AUDIO",
            reminders_sent=[],
        ))
        db.commit()
    finally:
        db.close()


def test_sweep_at_given_instant(session_factory, capsys):
    _seed(session_factory)

    # 24h lead is overdue; only the 1h lead goes out and the 24h one is skipped.
    assert script.run_reminder_sweep(["--now", "2026-10-20T14:00:00Z"]) == 0
    assert "2 notification(s) sent" in capsys.readouterr().out

    # Replaying the same instant sends nothing new.
    assert script.run_reminder_sweep(["--now", "2026-10-20T14:00:00+00:00"]) == 0
    assert "0 notification(s) sent" in capsys.readouterr().out

    db = session_factory()
    try:
        assert db.query(Notification).filter(Notification.event_type == "session_reminder").count() == 2
    finally:
        db.close()


def test_invalid_now_is_rejected(session_factory):
    with pytest.raises(SystemExit):
        script.run_reminder_sweep(["--now", "tomorrow"])
