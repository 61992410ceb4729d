from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Boolean,
    Text,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .enums import EventCategory, EventStatus, EventReminderType


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    location = Column(String)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    category = Column(String, default=EventCategory.GENERAL.value, nullable=False)
    status = Column(String, default=EventStatus.SCHEDULED.value, nullable=False)
    is_all_day = Column(Boolean, default=False)
    is_private = Column(Boolean, default=False)

    household_id = Column(
        Integer, ForeignKey("households.id", ondelete="CASCADE"), nullable=False
    )
    created_by_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    chore_id = Column(
        Integer, ForeignKey("chores.id", ondelete="CASCADE"), nullable=True
    )
    recurrence_rule_id = Column(
        Integer, ForeignKey("recurrence_rules.id", ondelete="SET NULL"), nullable=True
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    household = relationship("Household", back_populates="events")
    created_by = relationship("User", foreign_keys=[created_by_id])
    chore = relationship("Chore", back_populates="events")
    recurrence_rule = relationship("RecurrenceRule")
    reminders = relationship(
        "EventReminder", back_populates="event", cascade="all, delete-orphan"
    )
    history = relationship(
        "CalendarEventHistory",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="CalendarEventHistory.id",
    )

    __table_args__ = (
        Index("idx_event_household_start", "household_id", "start_time"),
        Index("idx_event_chore", "chore_id"),
    )


class EventReminder(Base):
    __tablename__ = "event_reminders"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    time = Column(DateTime(timezone=True), nullable=False)
    type = Column(String, default=EventReminderType.PUSH_NOTIFICATION.value)
    sent_at = Column(DateTime(timezone=True), nullable=True)

    event = relationship("Event", back_populates="reminders")


class CalendarEventHistory(Base):
    """Append-only audit log of calendar event actions"""

    __tablename__ = "calendar_event_history"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    action = Column(String, nullable=False)
    changed_by_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="history")
