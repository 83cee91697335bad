from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP, func
from sqlalchemy.orm import relationship
from app.database import Base
import enum


class UserRole(str, enum.Enum):
    STUDENT = "student"
    ALUMNI = "alumni"


# ---------------- USER (AUTH TABLE) ----------------
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    # Explicit foreign_keys: both session parties point at users.id
    student_sessions = relationship(
        "MentorshipSession",
        foreign_keys="MentorshipSession.student_id",
        back_populates="student",
    )
    mentor_sessions = relationship(
        "MentorshipSession",
        foreign_keys="MentorshipSession.mentor_id",
        back_populates="mentor",
    )
    availability_slots = relationship(
        "Availability",
        back_populates="mentor",
        cascade="all, delete-orphan",
    )

    @property
    def is_student(self) -> bool:
        return (self.role or "").lower() == UserRole.STUDENT.value

    @property
    def is_alumni(self) -> bool:
        return (self.role or "").lower() == UserRole.ALUMNI.value
