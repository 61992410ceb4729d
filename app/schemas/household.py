from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from app.models.enums import HouseholdRole, HouseholdMemberStatus
from .common import UserSummary


class HouseholdBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    currency: str = Field("USD", min_length=3, max_length=3)
    timezone: str = "UTC"
    language: str = "en"
    icon: Optional[str] = None


class HouseholdCreate(HouseholdBase):
    pass


class HouseholdUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    timezone: Optional[str] = None
    language: Optional[str] = None
    icon: Optional[str] = None


class HouseholdMemberResponse(BaseModel):
    id: int
    user_id: int
    household_id: int
    role: HouseholdRole
    is_invited: bool
    is_accepted: bool
    is_rejected: bool
    is_selected: bool
    joined_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class HouseholdResponse(HouseholdBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    members: List[HouseholdMemberResponse] = []

    class Config:
        from_attributes = True


class AddMemberRequest(BaseModel):
    email: str = Field(..., pattern=r"^[^@]+@[^@]+\.[^@]+$")
    role: HouseholdRole = HouseholdRole.MEMBER


class HouseholdInvitation(BaseModel):
    email: str = Field(..., pattern=r"^[^@]+@[^@]+\.[^@]+$")


class MemberStatusUpdate(BaseModel):
    status: HouseholdMemberStatus


class MemberRoleUpdate(BaseModel):
    role: HouseholdRole


class MemberSelectionUpdate(BaseModel):
    is_selected: bool


class HouseholdSummary(BaseModel):
    id: int
    name: str
    icon: Optional[str] = None

    class Config:
        from_attributes = True


class PendingInvitationResponse(BaseModel):
    id: int
    household_id: int
    role: HouseholdRole
    household: HouseholdSummary

    class Config:
        from_attributes = True
