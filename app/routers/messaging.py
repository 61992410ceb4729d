from fastapi import APIRouter, Depends, Query
from typing import Optional
from ..services.reaction_service import ReactionService
from ..services.mention_service import MentionService
from ..models.enums import ReactionType
from ..dependencies.permissions import get_current_user
from ..dependencies.services import get_reaction_service, get_mention_service
from ..utils.router_helpers import handle_service_errors
from ..models.user import User

router = APIRouter(tags=["messaging"])


@router.get("/reactions/analytics")
@handle_service_errors
async def get_reaction_analytics(
    household_id: int,
    message_id: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    reaction_service: ReactionService = Depends(get_reaction_service),
):
    """Reaction counts per type for the household, or for one message"""
    return reaction_service.get_reaction_analytics(
        household_id, current_user.id, message_id=message_id
    )


@router.get("/reactions/by-type/{reaction_type}")
@handle_service_errors
async def get_reactions_by_type(
    household_id: int,
    reaction_type: ReactionType,
    message_id: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    reaction_service: ReactionService = Depends(get_reaction_service),
):
    return reaction_service.get_reactions_by_type(
        household_id, reaction_type, current_user.id, message_id=message_id
    )


@router.get("/mentions")
@handle_service_errors
async def get_my_mentions(
    household_id: int,
    include_read: bool = Query(False),
    current_user: User = Depends(get_current_user),
    mention_service: MentionService = Depends(get_mention_service),
):
    return mention_service.get_user_mentions(
        household_id, current_user.id, include_read=include_read
    )


@router.get("/mentions/unread-count")
@handle_service_errors
async def get_unread_mentions_count(
    household_id: int,
    current_user: User = Depends(get_current_user),
    mention_service: MentionService = Depends(get_mention_service),
):
    return mention_service.get_unread_mentions_count(household_id, current_user.id)


@router.patch("/mentions/{mention_id}/read")
@handle_service_errors
async def mark_mention_read(
    household_id: int,
    mention_id: int,
    current_user: User = Depends(get_current_user),
    mention_service: MentionService = Depends(get_mention_service),
):
    return mention_service.mark_mention_read(household_id, mention_id, current_user.id)
