from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Household(Base):
    __tablename__ = "households"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    currency = Column(String, default="USD")
    timezone = Column(String, default="UTC")
    language = Column(String, default="en")
    icon = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    members = relationship("HouseholdMember", back_populates="household")
    chores = relationship("Chore", back_populates="household")
    expenses = relationship("Expense", back_populates="household")
    events = relationship("Event", back_populates="household")
    threads = relationship("Thread", back_populates="household")
    notification_settings = relationship(
        "NotificationSettings", back_populates="household"
    )
