from fastapi import APIRouter, Depends, Query, Response, status
from ..services.notification_service import NotificationService
from ..schemas.common import PaginationParams
from ..schemas.notification import NotificationCreate, NotificationSettingsUpdate
from ..dependencies.permissions import get_current_user
from ..dependencies.services import get_notification_service
from ..utils.router_helpers import handle_service_errors
from ..models.user import User

router = APIRouter(tags=["notifications"])


@router.get("/")
@handle_service_errors
async def get_user_notifications(
    pagination: PaginationParams = Depends(),
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """Get user's notifications, newest first"""
    return notification_service.get_notifications(
        current_user.id, pagination=pagination, unread_only=unread_only
    )


@router.post("/", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_notification(
    notification_data: NotificationCreate,
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return notification_service.create_notification(notification_data)


# Settings
@router.get("/settings")
@handle_service_errors
async def get_notification_settings(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return notification_service.get_user_settings(current_user.id)


@router.patch("/settings")
@handle_service_errors
async def update_notification_settings(
    settings_update: NotificationSettingsUpdate,
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return notification_service.update_user_settings(current_user.id, settings_update)


@router.get("/settings/households/{household_id}")
@handle_service_errors
async def get_household_notification_settings(
    household_id: int,
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return notification_service.get_household_settings(household_id, current_user.id)


@router.patch("/settings/households/{household_id}")
@handle_service_errors
async def update_household_notification_settings(
    household_id: int,
    settings_update: NotificationSettingsUpdate,
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """Household-wide defaults (admin only)"""
    return notification_service.update_household_settings(
        household_id, settings_update, current_user.id
    )


@router.patch("/{notification_id}/read")
@handle_service_errors
async def mark_notification_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return notification_service.mark_as_read(notification_id, current_user.id)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    notification_service.delete_notification(notification_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
