from sqlalchemy import (
    Index,
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Boolean,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .enums import NotificationType


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, default=NotificationType.OTHER.value, nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False)

    # Entity that triggered the notification, if any
    related_entity_type = Column(String)
    related_entity_id = Column(Integer)

    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    read_at = Column(DateTime(timezone=True))

    user = relationship("User", back_populates="notifications", foreign_keys=[user_id])

    __table_args__ = (
        Index("idx_notification_user_read", "user_id", "is_read"),
    )


class NotificationSettings(Base):
    """Delivery preferences scoped to a user or to a whole household"""

    __tablename__ = "notification_settings"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )
    household_id = Column(
        Integer,
        ForeignKey("households.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )

    message_notif = Column(Boolean, default=True)
    mention_notif = Column(Boolean, default=True)
    reaction_notif = Column(Boolean, default=True)
    chore_notif = Column(Boolean, default=True)
    finance_notif = Column(Boolean, default=True)
    event_notif = Column(Boolean, default=True)
    reminder_notif = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User")
    household = relationship("Household", back_populates="notification_settings")
