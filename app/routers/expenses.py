from fastapi import APIRouter, Depends, Query, Response, status
from typing import Optional
from ..services.expense_service import ExpenseService
from ..schemas.common import PaginationParams
from ..schemas.expense import ExpenseCreate, ExpenseUpdate, ReceiptCreate
from ..models.enums import ExpenseCategory
from ..dependencies.permissions import get_current_user
from ..dependencies.services import get_expense_service
from ..utils.router_helpers import handle_service_errors
from ..models.user import User

router = APIRouter(tags=["expenses"])


@router.get("/")
@handle_service_errors
async def get_expenses(
    household_id: int,
    pagination: PaginationParams = Depends(),
    category: Optional[ExpenseCategory] = Query(None),
    current_user: User = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
):
    """Get household expenses with optional category filter and pagination"""
    return expense_service.get_expenses(
        household_id, current_user.id, pagination=pagination, category=category
    )


@router.post("/", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_expense(
    household_id: int,
    expense_data: ExpenseCreate,
    current_user: User = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
):
    return expense_service.create_expense(household_id, expense_data, current_user.id)


@router.get("/{expense_id}")
@handle_service_errors
async def get_expense(
    household_id: int,
    expense_id: int,
    current_user: User = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
):
    return expense_service.get_expense(household_id, expense_id, current_user.id)


@router.patch("/{expense_id}")
@handle_service_errors
async def update_expense(
    household_id: int,
    expense_id: int,
    expense_update: ExpenseUpdate,
    current_user: User = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
):
    return expense_service.update_expense(
        household_id, expense_id, expense_update, current_user.id
    )


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def delete_expense(
    household_id: int,
    expense_id: int,
    current_user: User = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
):
    expense_service.delete_expense(household_id, expense_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{expense_id}/history")
@handle_service_errors
async def get_expense_history(
    household_id: int,
    expense_id: int,
    current_user: User = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
):
    return expense_service.get_expense_history(household_id, expense_id, current_user.id)


# Receipts
@router.get("/{expense_id}/receipts")
@handle_service_errors
async def get_receipts(
    household_id: int,
    expense_id: int,
    current_user: User = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
):
    return expense_service.get_receipts(household_id, expense_id, current_user.id)


@router.post("/{expense_id}/receipts", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def upload_receipt(
    household_id: int,
    expense_id: int,
    receipt_data: ReceiptCreate,
    current_user: User = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
):
    """Attach a receipt already stored elsewhere, referenced by URL"""
    return expense_service.upload_receipt(
        household_id, expense_id, receipt_data, current_user.id
    )


@router.get("/{expense_id}/receipts/{receipt_id}")
@handle_service_errors
async def get_receipt(
    household_id: int,
    expense_id: int,
    receipt_id: int,
    current_user: User = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
):
    return expense_service.get_receipt(household_id, expense_id, receipt_id, current_user.id)


@router.delete("/{expense_id}/receipts/{receipt_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def delete_receipt(
    household_id: int,
    expense_id: int,
    receipt_id: int,
    current_user: User = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
):
    expense_service.delete_receipt(household_id, expense_id, receipt_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
