from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from app.models.enums import (
    ChorePriority,
    ChoreStatus,
    SubtaskStatus,
    ChoreAction,
    ChoreSwapRequestStatus,
)
from .common import UserSummary


class SubtaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    status: SubtaskStatus = SubtaskStatus.PENDING


class SubtaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[SubtaskStatus] = None


class SubtaskResponse(BaseModel):
    id: int
    chore_id: int
    title: str
    description: Optional[str] = None
    status: SubtaskStatus

    class Config:
        from_attributes = True


class ChoreBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    due_date: Optional[datetime] = None
    priority: ChorePriority = ChorePriority.MEDIUM
    recurrence_rule_id: Optional[int] = None


class ChoreCreate(ChoreBase):
    status: ChoreStatus = ChoreStatus.PENDING
    assigned_user_ids: List[int] = []
    subtasks: List[SubtaskCreate] = []

    @field_validator("assigned_user_ids")
    @classmethod
    def unique_assignees(cls, v):
        if len(set(v)) != len(v):
            raise ValueError("A user can only be assigned once")
        return v


class ChoreUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    due_date: Optional[datetime] = None
    priority: Optional[ChorePriority] = None
    status: Optional[ChoreStatus] = None
    recurrence_rule_id: Optional[int] = None
    # None keeps the current set, a list replaces it
    assigned_user_ids: Optional[List[int]] = None
    subtasks: Optional[List[SubtaskCreate]] = None


class ChoreAssignmentResponse(BaseModel):
    id: int
    user_id: int
    assigned_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class ChoreHistoryResponse(BaseModel):
    id: int
    chore_id: int
    action: ChoreAction
    changed_by_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChoreResponse(ChoreBase):
    id: int
    household_id: int
    status: ChoreStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    assignments: List[ChoreAssignmentResponse] = []
    subtasks: List[SubtaskResponse] = []

    class Config:
        from_attributes = True


class ChoreSwapRequestCreate(BaseModel):
    target_user_id: int


class ChoreSwapApproval(BaseModel):
    swap_request_id: int
    approved: bool


class ChoreSwapRequestResponse(BaseModel):
    id: int
    chore_id: int
    requesting_user_id: int
    target_user_id: int
    status: ChoreSwapRequestStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
