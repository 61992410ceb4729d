from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime
from app.models.enums import (
    EventCategory,
    EventStatus,
    EventReminderType,
    CalendarEventAction,
)


class EventReminderCreate(BaseModel):
    time: datetime
    type: EventReminderType = EventReminderType.PUSH_NOTIFICATION


class EventReminderResponse(BaseModel):
    id: int
    event_id: int
    time: datetime
    type: EventReminderType
    sent_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EventBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=300)
    start_time: datetime
    end_time: datetime
    is_all_day: bool = False
    is_private: bool = False
    recurrence_rule_id: Optional[int] = None

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_time < self.start_time:
            raise ValueError("End time must be after start time")
        return self


class EventCreate(EventBase):
    category: EventCategory = EventCategory.GENERAL
    status: EventStatus = EventStatus.SCHEDULED
    reminders: List[EventReminderCreate] = []


class ChoreEventCreate(EventBase):
    status: EventStatus = EventStatus.SCHEDULED
    reminders: List[EventReminderCreate] = []


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=300)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    is_all_day: Optional[bool] = None
    is_private: Optional[bool] = None
    category: Optional[EventCategory] = None
    status: Optional[EventStatus] = None
    recurrence_rule_id: Optional[int] = None


class EventStatusUpdate(BaseModel):
    status: EventStatus


class EventReschedule(BaseModel):
    start_time: datetime
    end_time: datetime

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_time < self.start_time:
            raise ValueError("End time must be after start time")
        return self


class CalendarEventHistoryResponse(BaseModel):
    id: int
    action: CalendarEventAction
    changed_by_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EventResponse(BaseModel):
    id: int
    household_id: int
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: datetime
    end_time: datetime
    is_all_day: bool
    is_private: bool
    category: EventCategory
    status: EventStatus
    chore_id: Optional[int] = None
    recurrence_rule_id: Optional[int] = None
    created_by_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    reminders: List[EventReminderResponse] = []
    history: List[CalendarEventHistoryResponse] = []

    class Config:
        from_attributes = True
