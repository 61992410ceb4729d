from fastapi import APIRouter, Depends, Query, Response, status
from typing import Optional
from datetime import date, datetime
from ..services.event_service import EventService
from ..schemas.event import (
    EventCreate,
    EventUpdate,
    EventStatusUpdate,
    EventReminderCreate,
)
from ..dependencies.permissions import get_current_user
from ..dependencies.services import get_event_service
from ..utils.router_helpers import handle_service_errors
from ..models.user import User

router = APIRouter(tags=["events"])


@router.get("/")
@handle_service_errors
async def get_events(
    household_id: int,
    start: Optional[datetime] = Query(None, description="Only events starting at or after this"),
    end: Optional[datetime] = Query(None, description="Only events starting before this"),
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    """Calendar events of the household, chore events excluded"""
    return event_service.get_events(household_id, current_user.id, start=start, end=end)


@router.post("/", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_event(
    household_id: int,
    event_data: EventCreate,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    return event_service.create_event(household_id, event_data, current_user.id)


@router.get("/date/{target_date}")
@handle_service_errors
async def get_events_by_date(
    household_id: int,
    target_date: date,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    return event_service.get_events_by_date(household_id, target_date, current_user.id)


@router.get("/{event_id}")
@handle_service_errors
async def get_event(
    household_id: int,
    event_id: int,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    return event_service.get_event(household_id, event_id, current_user.id)


@router.patch("/{event_id}")
@handle_service_errors
async def update_event(
    household_id: int,
    event_id: int,
    event_update: EventUpdate,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    return event_service.update_event(household_id, event_id, event_update, current_user.id)


@router.patch("/{event_id}/status")
@handle_service_errors
async def update_event_status(
    household_id: int,
    event_id: int,
    status_update: EventStatusUpdate,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    return event_service.update_event_status(
        household_id, event_id, status_update, current_user.id
    )


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def delete_event(
    household_id: int,
    event_id: int,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    event_service.delete_event(household_id, event_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Reminders
@router.post("/{event_id}/reminders", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def add_reminder(
    household_id: int,
    event_id: int,
    reminder_data: EventReminderCreate,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    return event_service.add_reminder(household_id, event_id, reminder_data, current_user.id)


@router.delete("/{event_id}/reminders/{reminder_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def remove_reminder(
    household_id: int,
    event_id: int,
    reminder_id: int,
    current_user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service),
):
    event_service.remove_reminder(household_id, event_id, reminder_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
