from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from app.models.enums import RecurrenceFrequency


class RecurrenceRuleBase(BaseModel):
    frequency: RecurrenceFrequency
    interval: int = Field(1, ge=1)
    by_weekday: List[int] = []
    by_month_day: List[int] = []
    by_set_pos: Optional[int] = None
    count: Optional[int] = Field(None, ge=1)
    until: Optional[datetime] = None
    custom_rule_string: Optional[str] = None

    @field_validator("by_weekday")
    @classmethod
    def valid_weekdays(cls, v):
        if any(day < 0 or day > 6 for day in v):
            raise ValueError("Weekdays must be between 0 (Monday) and 6 (Sunday)")
        return v

    @field_validator("by_month_day")
    @classmethod
    def valid_month_days(cls, v):
        if any(day == 0 or day < -31 or day > 31 for day in v):
            raise ValueError("Month days must be between 1 and 31, or -31 and -1")
        return v


class RecurrenceRuleCreate(RecurrenceRuleBase):
    pass


class RecurrenceRuleUpdate(BaseModel):
    frequency: Optional[RecurrenceFrequency] = None
    interval: Optional[int] = Field(None, ge=1)
    by_weekday: Optional[List[int]] = None
    by_month_day: Optional[List[int]] = None
    by_set_pos: Optional[int] = None
    count: Optional[int] = Field(None, ge=1)
    until: Optional[datetime] = None
    custom_rule_string: Optional[str] = None


class RecurrenceRuleResponse(RecurrenceRuleBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
