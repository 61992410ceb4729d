from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from app.models.enums import PollType, PollStatus


class PollOptionCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=200)
    order: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class PollCreate(BaseModel):
    question: str = Field(..., min_length=1, max_length=200)
    poll_type: PollType = PollType.SINGLE_CHOICE
    max_choices: Optional[int] = Field(None, ge=1)
    max_rank: Optional[int] = Field(None, ge=1)
    end_date: Optional[datetime] = None
    event_id: Optional[int] = None
    options: List[PollOptionCreate] = Field(..., min_length=2, max_length=20)

    @field_validator("options")
    @classmethod
    def validate_options(cls, v):
        texts = [option.text.strip() for option in v]
        if len(set(texts)) != len(texts):
            raise ValueError("Poll options must be unique")
        return v


class PollUpdate(BaseModel):
    question: Optional[str] = Field(None, min_length=1, max_length=200)
    status: Optional[PollStatus] = None
    end_date: Optional[datetime] = None
    selected_option_id: Optional[int] = None


class PollVoteCreate(BaseModel):
    option_id: int
    rank: Optional[int] = Field(None, ge=1)
    availability: Optional[bool] = None


class PollVoteResponse(BaseModel):
    id: int
    poll_id: int
    option_id: int
    user_id: int
    rank: Optional[int] = None
    availability: Optional[bool] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PollOptionResponse(BaseModel):
    id: int
    text: str
    order: int
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    votes: List[PollVoteResponse] = []

    class Config:
        from_attributes = True


class PollResponse(BaseModel):
    id: int
    message_id: int
    question: str
    poll_type: PollType
    max_choices: Optional[int] = None
    max_rank: Optional[int] = None
    end_date: Optional[datetime] = None
    status: PollStatus
    event_id: Optional[int] = None
    selected_option_id: Optional[int] = None
    created_at: Optional[datetime] = None
    options: List[PollOptionResponse] = []

    class Config:
        from_attributes = True


class PollOptionTally(BaseModel):
    option_id: int
    text: str
    vote_count: int
    voter_ids: List[int]


class PollAnalytics(BaseModel):
    poll_id: int
    total_votes: int
    unique_voters: int
    options: List[PollOptionTally]
