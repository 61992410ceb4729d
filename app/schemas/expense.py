from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from app.models.enums import ExpenseCategory, ExpenseAction, TransactionStatus
from .common import UserSummary


class ExpenseSplitInput(BaseModel):
    user_id: Optional[int] = None
    amount: Optional[float] = None


class ExpenseSplitResponse(BaseModel):
    id: int
    user_id: int
    amount: float
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class ExpenseBase(BaseModel):
    description: str = Field(..., min_length=1, max_length=200)
    amount: float = Field(..., gt=0)
    category: ExpenseCategory = ExpenseCategory.OTHER
    due_date: Optional[datetime] = None
    paid_by_id: Optional[int] = None


class ExpenseCreate(ExpenseBase):
    splits: List[ExpenseSplitInput] = []

    @field_validator("amount")
    @classmethod
    def round_amount(cls, v):
        return round(v, 2)


class ExpenseUpdate(BaseModel):
    description: Optional[str] = Field(None, min_length=1, max_length=200)
    amount: Optional[float] = Field(None, gt=0)
    category: Optional[ExpenseCategory] = None
    due_date: Optional[datetime] = None
    paid_by_id: Optional[int] = None
    # None keeps the current splits, a list replaces them
    splits: Optional[List[ExpenseSplitInput]] = None


class ExpenseHistoryResponse(BaseModel):
    id: int
    action: ExpenseAction
    changed_by_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReceiptCreate(BaseModel):
    url: str = Field(..., min_length=1)
    file_type: str
    file_size: Optional[int] = Field(None, ge=0)


class ReceiptResponse(BaseModel):
    id: int
    expense_id: int
    url: str
    file_type: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExpenseResponse(ExpenseBase):
    id: int
    household_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    splits: List[ExpenseSplitResponse] = []
    receipts: List[ReceiptResponse] = []

    class Config:
        from_attributes = True


class TransactionCreate(BaseModel):
    expense_id: int
    from_user_id: int
    to_user_id: int
    amount: float = Field(..., gt=0)
    status: TransactionStatus = TransactionStatus.PENDING


class TransactionStatusUpdate(BaseModel):
    status: TransactionStatus


class TransactionResponse(BaseModel):
    id: int
    expense_id: int
    from_user_id: int
    to_user_id: int
    amount: float
    status: TransactionStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
