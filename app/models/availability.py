from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, Enum, CheckConstraint, func
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.session import SessionLocation, MeetingType


class Availability(Base):
    """Weekly recurring slot in which a mentor accepts bookings."""

    __tablename__ = "availability_slots"

    id = Column(Integer, primary_key=True, index=True)
    mentor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(String(5), nullable=False)  # "HH:MM", mentor's local clock
    end_time = Column(String(5), nullable=False)
    location = Column(Enum(SessionLocation), nullable=False)
    meeting_type = Column(Enum(MeetingType), nullable=False)
    meeting_link = Column(String(500))
    venue = Column(String(255))
    created_at = Column(TIMESTAMP, server_default=func.now())

    __table_args__ = (
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="check_day_of_week_range"),
    )

    mentor = relationship("User", back_populates="availability_slots")
