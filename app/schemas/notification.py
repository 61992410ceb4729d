from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from app.models.enums import NotificationType


class NotificationCreate(BaseModel):
    user_id: int
    type: NotificationType = NotificationType.OTHER
    message: str = Field(..., min_length=1, max_length=1000)


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    type: NotificationType
    message: str
    is_read: bool
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[int] = None
    created_at: Optional[datetime] = None
    read_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NotificationSettingsUpdate(BaseModel):
    message_notif: Optional[bool] = None
    mention_notif: Optional[bool] = None
    reaction_notif: Optional[bool] = None
    chore_notif: Optional[bool] = None
    finance_notif: Optional[bool] = None
    event_notif: Optional[bool] = None
    reminder_notif: Optional[bool] = None


class NotificationSettingsResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    household_id: Optional[int] = None
    message_notif: bool
    mention_notif: bool
    reaction_notif: bool
    chore_notif: bool
    finance_notif: bool
    event_notif: bool
    reminder_notif: bool

    class Config:
        from_attributes = True
