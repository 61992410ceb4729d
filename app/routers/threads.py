from fastapi import APIRouter, Depends, Response, status
from ..services.thread_service import ThreadService
from ..services.poll_service import PollService
from ..schemas.common import CursorParams
from ..schemas.thread import ThreadCreate, ThreadUpdate, ThreadInvite
from ..dependencies.permissions import get_current_user
from ..dependencies.services import get_thread_service, get_poll_service
from ..utils.router_helpers import handle_service_errors
from ..models.user import User

router = APIRouter(tags=["threads"])


@router.get("/")
@handle_service_errors
async def get_threads(
    household_id: int,
    params: CursorParams = Depends(),
    current_user: User = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
):
    """Threads newest first; pass `cursor` from the previous page to continue"""
    return thread_service.get_threads(household_id, current_user.id, params)


@router.post("/", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_thread(
    household_id: int,
    thread_data: ThreadCreate,
    current_user: User = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
):
    return thread_service.create_thread(household_id, thread_data, current_user.id)


@router.get("/{thread_id}")
@handle_service_errors
async def get_thread(
    household_id: int,
    thread_id: int,
    current_user: User = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
):
    return thread_service.get_thread(household_id, thread_id, current_user.id)


@router.patch("/{thread_id}")
@handle_service_errors
async def update_thread(
    household_id: int,
    thread_id: int,
    thread_update: ThreadUpdate,
    current_user: User = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
):
    return thread_service.update_thread(household_id, thread_id, thread_update, current_user.id)


@router.delete("/{thread_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def delete_thread(
    household_id: int,
    thread_id: int,
    current_user: User = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
):
    thread_service.delete_thread(household_id, thread_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{thread_id}/invite")
@handle_service_errors
async def invite_users(
    household_id: int,
    thread_id: int,
    invite: ThreadInvite,
    current_user: User = Depends(get_current_user),
    thread_service: ThreadService = Depends(get_thread_service),
):
    return thread_service.invite_users(household_id, thread_id, invite, current_user.id)


@router.get("/{thread_id}/polls")
@handle_service_errors
async def get_thread_polls(
    household_id: int,
    thread_id: int,
    current_user: User = Depends(get_current_user),
    poll_service: PollService = Depends(get_poll_service),
):
    return poll_service.get_thread_polls(household_id, thread_id, current_user.id)
