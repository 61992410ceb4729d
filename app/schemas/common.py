from typing import Optional
from ..utils.constants import AppConstants
from pydantic import BaseModel, Field


class PaginationInfo(BaseModel):
    """Pagination information"""

    page: Optional[int] = None
    page_size: int
    total_items: Optional[int] = None
    has_more: bool
    next_cursor: Optional[int] = None


class PaginationParams(BaseModel):
    """Page-number pagination query parameters"""

    page: int = Field(default=AppConstants.DEFAULT_PAGE, ge=1)
    page_size: int = Field(
        default=AppConstants.DEFAULT_PAGE_SIZE, ge=1, le=AppConstants.MAX_PAGE_SIZE
    )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    def info(self, total_items: int) -> PaginationInfo:
        return PaginationInfo(
            page=self.page,
            page_size=self.page_size,
            total_items=total_items,
            has_more=self.offset + self.page_size < total_items,
        )


class CursorParams(BaseModel):
    """Cursor pagination, the cursor is the last id seen"""

    cursor: Optional[int] = None
    limit: int = Field(
        default=AppConstants.THREAD_PAGE_SIZE, ge=1, le=AppConstants.MAX_PAGE_SIZE
    )


class UserSummary(BaseModel):
    id: int
    name: str
    email: str
    profile_image_url: Optional[str] = None

    class Config:
        from_attributes = True
