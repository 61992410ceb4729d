from fastapi import APIRouter, Depends, Query, Response, status
from typing import Optional
from ..services.transaction_service import TransactionService
from ..schemas.expense import TransactionCreate, TransactionStatusUpdate
from ..models.enums import TransactionStatus
from ..dependencies.permissions import get_current_user
from ..dependencies.services import get_transaction_service
from ..utils.router_helpers import handle_service_errors
from ..models.user import User

router = APIRouter(tags=["transactions"])


@router.get("/")
@handle_service_errors
async def get_transactions(
    household_id: int,
    status_filter: Optional[TransactionStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service),
):
    return transaction_service.get_transactions(
        household_id, current_user.id, status=status_filter
    )


@router.get("/balance")
@handle_service_errors
async def get_my_balance(
    household_id: int,
    current_user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service),
):
    """What the caller owes and is owed across pending transactions"""
    return transaction_service.get_user_balance(household_id, current_user.id)


@router.post("/", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_transaction(
    household_id: int,
    transaction_data: TransactionCreate,
    current_user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service),
):
    return transaction_service.create_transaction(
        household_id, transaction_data, current_user.id
    )


@router.patch("/{transaction_id}/status")
@handle_service_errors
async def update_transaction_status(
    household_id: int,
    transaction_id: int,
    status_update: TransactionStatusUpdate,
    current_user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service),
):
    return transaction_service.update_transaction_status(
        household_id, transaction_id, status_update, current_user.id
    )


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def delete_transaction(
    household_id: int,
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service),
):
    transaction_service.delete_transaction(household_id, transaction_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
