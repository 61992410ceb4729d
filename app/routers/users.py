from fastapi import APIRouter, Depends
from ..models.user import User
from ..schemas.user import UserUpdate
from ..services.user_service import UserService
from ..dependencies.permissions import get_current_user
from ..dependencies.services import get_user_service
from ..utils.router_helpers import handle_service_errors

router = APIRouter(tags=["users"])


@router.get("/me")
@handle_service_errors
async def get_my_profile(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    return user_service.get_profile(current_user.id)


@router.patch("/me")
@handle_service_errors
async def update_my_profile(
    user_update: UserUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    """Update name, avatar or active household"""
    return user_service.update_profile(current_user.id, user_update)
