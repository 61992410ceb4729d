from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime
from app.models.enums import ReactionType
from .common import UserSummary
from .poll import PollResponse


class AttachmentCreate(BaseModel):
    url: str = Field(..., min_length=1)
    file_type: str
    file_size: Optional[int] = Field(None, ge=0)


class AttachmentResponse(BaseModel):
    id: int
    message_id: int
    url: str
    file_type: str
    file_size: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReactionCreate(BaseModel):
    type: ReactionType
    emoji: Optional[str] = Field(None, max_length=16)


class ReactionResponse(BaseModel):
    id: int
    message_id: int
    user_id: int
    type: ReactionType
    emoji: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReactionAnalytics(BaseModel):
    total: int
    by_type: Dict[ReactionType, int]


class MentionCreate(BaseModel):
    user_id: int


class MentionResponse(BaseModel):
    id: int
    message_id: int
    user_id: int
    mentioned_at: Optional[datetime] = None
    read_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    attachments: List[AttachmentCreate] = []
    mention_user_ids: List[int] = []


class MessageUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class MessageReadResponse(BaseModel):
    message_id: int
    user_id: int
    read_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageReadStatus(BaseModel):
    message_id: int
    read_by: List[MessageReadResponse]
    unread_by: List[int]


class MessageResponse(BaseModel):
    id: int
    thread_id: int
    author_id: Optional[int] = None
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: Optional[UserSummary] = None
    attachments: List[AttachmentResponse] = []
    reactions: List[ReactionResponse] = []
    mentions: List[MentionResponse] = []
    poll: Optional[PollResponse] = None

    class Config:
        from_attributes = True
