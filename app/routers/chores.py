from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from ..services.chore_service import ChoreService
from ..services.subtask_service import SubtaskService
from ..services.event_service import EventService
from ..schemas.chore import (
    ChoreCreate,
    ChoreUpdate,
    SubtaskCreate,
    SubtaskUpdate,
    ChoreSwapRequestCreate,
    ChoreSwapApproval,
)
from ..schemas.event import ChoreEventCreate, EventReschedule, EventUpdate
from ..dependencies.permissions import get_current_user
from ..dependencies.services import (
    get_chore_service,
    get_subtask_service,
    get_event_service,
)
from ..utils.router_helpers import handle_service_errors
from ..models.user import User

router = APIRouter(tags=["chores"])


@router.get("/")
@handle_service_errors
async def get_chores(
    household_id: int,
    current_user: User = Depends(get_current_user),
    chore_service: ChoreService = Depends(get_chore_service),
):
    return chore_service.get_chores(household_id, current_user.id)


@router.post("/", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_chore(
    household_id: int,
    chore_data: ChoreCreate,
    current_user: User = Depends(get_current_user),
    chore_service: ChoreService = Depends(get_chore_service),
):
    """Create a chore with assignees and subtasks (admin only)"""
    return chore_service.create_chore(household_id, chore_data, current_user.id)


@router.get("/{chore_id}")
@handle_service_errors
async def get_chore(
    household_id: int,
    chore_id: int,
    current_user: User = Depends(get_current_user),
    chore_service: ChoreService = Depends(get_chore_service),
):
    return chore_service.get_chore(household_id, chore_id, current_user.id)


@router.patch("/{chore_id}")
@handle_service_errors
async def update_chore(
    household_id: int,
    chore_id: int,
    chore_update: ChoreUpdate,
    current_user: User = Depends(get_current_user),
    chore_service: ChoreService = Depends(get_chore_service),
):
    return chore_service.update_chore(household_id, chore_id, chore_update, current_user.id)


@router.delete("/{chore_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def delete_chore(
    household_id: int,
    chore_id: int,
    current_user: User = Depends(get_current_user),
    chore_service: ChoreService = Depends(get_chore_service),
):
    chore_service.delete_chore(household_id, chore_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{chore_id}/history")
@handle_service_errors
async def get_chore_history(
    household_id: int,
    chore_id: int,
    current_user: User = Depends(get_current_user),
    chore_service: ChoreService = Depends(get_chore_service),
):
    return chore_service.get_chore_history(household_id, chore_id, current_user.id)


# Swaps
@router.post("/{chore_id}/swap-request", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def request_swap(
    household_id: int,
    chore_id: int,
    swap_data: ChoreSwapRequestCreate,
    current_user: User = Depends(get_current_user),
    chore_service: ChoreService = Depends(get_chore_service),
):
    return chore_service.request_swap(
        household_id, chore_id, swap_data.target_user_id, current_user.id
    )


@router.patch("/{chore_id}/swap-approve")
@handle_service_errors
async def approve_swap(
    household_id: int,
    chore_id: int,
    approval: ChoreSwapApproval,
    current_user: User = Depends(get_current_user),
    chore_service: ChoreService = Depends(get_chore_service),
):
    return chore_service.approve_swap(
        household_id,
        chore_id,
        approval.swap_request_id,
        approval.approved,
        current_user.id,
    )


# Subtasks
@router.get("/{chore_id}/subtasks")
@handle_service_errors
async def get_subtasks(
    household_id: int,
    chore_id: int,
    current_user: User = Depends(get_current_user),
    subtask_service: SubtaskService = Depends(get_subtask_service),
):
    return subtask_service.get_subtasks(household_id, chore_id, current_user.id)


@router.post("/{chore_id}/subtasks", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def add_subtask(
    household_id: int,
    chore_id: int,
    subtask_data: SubtaskCreate,
    current_user: User = Depends(get_current_user),
    subtask_service: SubtaskService = Depends(get_subtask_service),
):
    return subtask_service.add_subtask(household_id, chore_id, subtask_data, current_user.id)


@router.get("/{chore_id}/subtasks/{subtask_id}")
@handle_service_errors
async def get_subtask(
    household_id: int,
    chore_id: int,
    subtask_id: int,
    current_user: User = Depends(get_current_user),
    subtask_service: SubtaskService = Depends(get_subtask_service),
):
    return subtask_service.get_subtask(household_id, chore_id, subtask_id, current_user.id)


@router.patch("/{chore_id}/subtasks/{subtask_id}")
@handle_service_errors
async def update_subtask(
    household_id: int,
    chore_id: int,
    subtask_id: int,
    subtask_update: SubtaskUpdate,
    current_user: User = Depends(get_current_user),
    subtask_service: SubtaskService = Depends(get_subtask_service),
):
    """Completing the last open subtask completes the chore"""
    return subtask_service.update_subtask(
        household_id, chore_id, subtask_id, subtask_update, current_user.id
    )


@router.delete("/{chore_id}/subtasks/{subtask_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def delete_subtask(
    household_id: int,
    chore_id: int,
    subtask_id: int,
    current_user: User = Depends(get_current_user),
    subtask_service: SubtaskService = Depends(get_subtask_service),
):
    subtask_service.delete_subtask(household_id, chore_id, subtask_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Chore events
@router.get("/{chore_id}/events")
@handle_service_errors
async def get_chore_events(
    household_id: int,
    chore_id: int,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    return event_service.get_chore_events(household_id, chore_id, current_user.id)


@router.post("/{chore_id}/events", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_chore_event(
    household_id: int,
    chore_id: int,
    event_data: ChoreEventCreate,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    return event_service.create_chore_event(household_id, chore_id, event_data, current_user.id)


@router.get("/{chore_id}/events/upcoming")
@handle_service_errors
async def get_upcoming_chore_events(
    household_id: int,
    chore_id: int,
    limit: Optional[int] = Query(None, ge=1),
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    """Scheduled events of a chore, soonest first"""
    return event_service.get_upcoming_chore_events(
        household_id, chore_id, current_user.id, limit=limit
    )


@router.get("/{chore_id}/events/{event_id}")
@handle_service_errors
async def get_chore_event(
    household_id: int,
    chore_id: int,
    event_id: int,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    return event_service.get_chore_event(household_id, chore_id, event_id, current_user.id)


@router.patch("/{chore_id}/events/{event_id}")
@handle_service_errors
async def update_chore_event(
    household_id: int,
    chore_id: int,
    event_id: int,
    event_update: EventUpdate,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    return event_service.update_event(
        household_id, event_id, event_update, current_user.id, chore_id=chore_id
    )


@router.delete("/{chore_id}/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def delete_chore_event(
    household_id: int,
    chore_id: int,
    event_id: int,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    event_service.delete_event(household_id, event_id, current_user.id, chore_id=chore_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{chore_id}/events/{event_id}/complete")
@handle_service_errors
async def complete_chore_event(
    household_id: int,
    chore_id: int,
    event_id: int,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    return event_service.complete_chore_event(household_id, chore_id, event_id, current_user.id)


@router.post("/{chore_id}/events/{event_id}/reschedule")
@handle_service_errors
async def reschedule_chore_event(
    household_id: int,
    chore_id: int,
    event_id: int,
    reschedule: EventReschedule,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    return event_service.reschedule_chore_event(
        household_id, chore_id, event_id, reschedule, current_user.id
    )
