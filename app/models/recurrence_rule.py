from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from ..database import Base
from .enums import RecurrenceFrequency


class RecurrenceRule(Base):
    """Reusable recurrence definition shared by chores and events"""

    __tablename__ = "recurrence_rules"

    id = Column(Integer, primary_key=True, index=True)
    frequency = Column(String, default=RecurrenceFrequency.WEEKLY.value, nullable=False)
    interval = Column(Integer, default=1, nullable=False)
    by_weekday = Column(JSON, default=list)
    by_month_day = Column(JSON, default=list)
    by_set_pos = Column(Integer, nullable=True)
    count = Column(Integer, nullable=True)
    until = Column(DateTime(timezone=True), nullable=True)
    custom_rule_string = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
