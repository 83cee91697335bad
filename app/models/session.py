# app/models/session.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    TIMESTAMP,
    Enum,
    JSON,
    CheckConstraint,
    Index,
    func,
)
from sqlalchemy.orm import relationship
from app.database import Base
import enum


class SessionStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class SessionLocation(str, enum.Enum):
    ONLINE = "ONLINE"
    IN_PERSON = "IN_PERSON"


class MeetingType(str, enum.Enum):
    VIDEO = "VIDEO"
    AUDIO = "AUDIO"
    IN_PERSON = "IN_PERSON"


class MentorshipSession(Base):
    __tablename__ = "mentorship_sessions"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    mentor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text)
    agenda = Column(Text)

    # Instants are stored in UTC; timezone is the one the session was booked in.
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    timezone = Column(String(64), nullable=False, default="UTC")
    duration = Column(Integer, nullable=False)  # minutes

    status = Column(Enum(SessionStatus), default=SessionStatus.SCHEDULED, nullable=False, index=True)

    location = Column(Enum(SessionLocation), nullable=False)
    meeting_type = Column(Enum(MeetingType), nullable=False)
    meeting_link = Column(String(500))
    venue = Column(String(255))

    # Post-session content
    notes = Column(Text)  # mentor-private
    feedback = Column(Text)
    student_feedback = Column(Text)
    mentor_rating = Column(Integer)
    student_rating = Column(Integer)

    # [{"lead": "1h", "sent_at": "2026-10-18T14:00:00+00:00"}, ...]
    reminders_sent = Column(JSON, nullable=False, default=list)
    last_modified_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    completed_at = Column(DateTime(timezone=True))
    cancelled_at = Column(DateTime(timezone=True))
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "mentor_rating IS NULL OR (mentor_rating >= 1 AND mentor_rating <= 5)",
            name="check_mentor_rating_range",
        ),
        CheckConstraint(
            "student_rating IS NULL OR (student_rating >= 1 AND student_rating <= 5)",
            name="check_student_rating_range",
        ),
        Index("ix_mentorship_sessions_mentor_window", "mentor_id", "status", "start_time"),
        Index("ix_mentorship_sessions_student_window", "student_id", "status", "start_time"),
    )

    # Relationships
    student = relationship("User", foreign_keys=[student_id], back_populates="student_sessions")
    mentor = relationship("User", foreign_keys=[mentor_id], back_populates="mentor_sessions")

    def participant_ids(self):
        return [self.student_id, self.mentor_id]
