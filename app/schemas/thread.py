from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from .common import UserSummary
from .message import MessageCreate, MessageResponse


class ThreadCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    participant_user_ids: List[int] = []
    initial_message: Optional[MessageCreate] = None


class ParticipantChanges(BaseModel):
    add: List[int] = []
    remove: List[int] = []


class ThreadUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    participants: Optional[ParticipantChanges] = None


class ThreadInvite(BaseModel):
    user_ids: List[int] = Field(..., min_length=1)


class ThreadParticipantResponse(BaseModel):
    id: int
    user_id: int
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class ThreadResponse(BaseModel):
    id: int
    household_id: int
    author_id: Optional[int] = None
    title: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    participants: List[ThreadParticipantResponse] = []

    class Config:
        from_attributes = True


class ThreadWithMessagesResponse(ThreadResponse):
    messages: List[MessageResponse] = []
