from fastapi import APIRouter, Depends, Response, status
from ..services.household_service import HouseholdService
from ..schemas.household import (
    HouseholdCreate,
    HouseholdUpdate,
    HouseholdInvitation,
    AddMemberRequest,
    MemberStatusUpdate,
    MemberRoleUpdate,
    MemberSelectionUpdate,
)
from ..dependencies.permissions import get_current_user
from ..dependencies.services import get_household_service
from ..utils.router_helpers import handle_service_errors
from ..models.user import User

router = APIRouter(tags=["households"])


@router.post("/", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_household(
    household_data: HouseholdCreate,
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    """Create a new household with current user as admin"""
    return household_service.create_household(household_data, current_user.id)


@router.get("/")
@handle_service_errors
async def get_my_households(
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    return household_service.get_user_households(current_user.id)


@router.get("/selected")
@handle_service_errors
async def get_selected_households(
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    return household_service.get_selected_households(current_user.id)


@router.get("/invitations")
@handle_service_errors
async def get_pending_invitations(
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    """Invitations waiting for the current user's answer"""
    return household_service.get_pending_invitations(current_user.id)


@router.get("/{household_id}")
@handle_service_errors
async def get_household(
    household_id: int,
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    return household_service.get_household(household_id, current_user.id)


@router.patch("/{household_id}")
@handle_service_errors
async def update_household(
    household_id: int,
    household_update: HouseholdUpdate,
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    """Update household settings (admin only)"""
    return household_service.update_household(
        household_id, household_update, current_user.id
    )


@router.delete("/{household_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def delete_household(
    household_id: int,
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    household_service.delete_household(household_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Members
@router.post("/{household_id}/members", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def add_member(
    household_id: int,
    member_data: AddMemberRequest,
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    return household_service.add_member(household_id, member_data, current_user.id)


@router.delete(
    "/{household_id}/members/{member_user_id}", status_code=status.HTTP_204_NO_CONTENT
)
@handle_service_errors
async def remove_member(
    household_id: int,
    member_user_id: int,
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    household_service.remove_member(household_id, member_user_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{household_id}/members/{member_user_id}/status")
@handle_service_errors
async def update_member_status(
    household_id: int,
    member_user_id: int,
    status_update: MemberStatusUpdate,
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    return household_service.update_member_status(
        household_id, member_user_id, status_update.status, current_user.id
    )


@router.patch("/{household_id}/members/{member_user_id}/role")
@handle_service_errors
async def update_member_role(
    household_id: int,
    member_user_id: int,
    role_update: MemberRoleUpdate,
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    return household_service.update_member_role(
        household_id, member_user_id, role_update.role, current_user.id
    )


@router.patch("/{household_id}/members/{member_user_id}/selection")
@handle_service_errors
async def update_member_selection(
    household_id: int,
    member_user_id: int,
    selection: MemberSelectionUpdate,
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    return household_service.update_member_selection(
        household_id, member_user_id, selection.is_selected, current_user.id
    )


# Invitations
@router.post("/{household_id}/invitations", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def send_invitation(
    household_id: int,
    invitation: HouseholdInvitation,
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    return household_service.send_invitation(
        household_id, invitation.email, current_user.id
    )


@router.post("/{household_id}/invitations/accept")
@handle_service_errors
async def accept_invitation(
    household_id: int,
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    return household_service.accept_invitation(household_id, current_user.id)


@router.post("/{household_id}/invitations/reject", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def reject_invitation(
    household_id: int,
    current_user: User = Depends(get_current_user),
    household_service: HouseholdService = Depends(get_household_service),
):
    household_service.reject_invitation(household_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
