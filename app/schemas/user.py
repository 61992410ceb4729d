from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class UserUpdate(BaseModel):
    """Update user profile information"""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    profile_image_url: Optional[str] = None
    active_household_id: Optional[int] = None


class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    profile_image_url: Optional[str] = None
    active_household_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
