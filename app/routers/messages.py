from fastapi import APIRouter, Depends, Response, status
from ..services.message_service import MessageService
from ..services.attachment_service import AttachmentService
from ..services.reaction_service import ReactionService
from ..services.mention_service import MentionService
from ..services.poll_service import PollService
from ..schemas.common import CursorParams
from ..schemas.message import (
    MessageCreate,
    MessageUpdate,
    AttachmentCreate,
    ReactionCreate,
    MentionCreate,
)
from ..schemas.poll import PollCreate, PollUpdate, PollVoteCreate
from ..dependencies.permissions import get_current_user
from ..dependencies.services import (
    get_message_service,
    get_attachment_service,
    get_reaction_service,
    get_mention_service,
    get_poll_service,
)
from ..utils.router_helpers import handle_service_errors
from ..models.user import User

router = APIRouter(tags=["messages"])

NO_CONTENT = status.HTTP_204_NO_CONTENT


@router.get("/")
@handle_service_errors
async def get_messages(
    household_id: int,
    thread_id: int,
    params: CursorParams = Depends(),
    current_user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service),
):
    return message_service.get_messages(household_id, thread_id, current_user.id, params)


@router.post("/", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_message(
    household_id: int,
    thread_id: int,
    message_data: MessageCreate,
    current_user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service),
):
    return message_service.create_message(household_id, thread_id, message_data, current_user.id)


@router.patch("/{message_id}")
@handle_service_errors
async def update_message(
    household_id: int,
    thread_id: int,
    message_id: int,
    message_update: MessageUpdate,
    current_user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service),
):
    return message_service.update_message(
        household_id, thread_id, message_id, message_update, current_user.id
    )


@router.delete("/{message_id}", status_code=NO_CONTENT)
@handle_service_errors
async def delete_message(
    household_id: int,
    thread_id: int,
    message_id: int,
    current_user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service),
):
    message_service.delete_message(household_id, thread_id, message_id, current_user.id)
    return Response(status_code=NO_CONTENT)


@router.patch("/{message_id}/read")
@handle_service_errors
async def mark_message_read(
    household_id: int,
    thread_id: int,
    message_id: int,
    current_user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service),
):
    return message_service.mark_as_read(household_id, thread_id, message_id, current_user.id)


@router.get("/{message_id}/read-status")
@handle_service_errors
async def get_read_status(
    household_id: int,
    thread_id: int,
    message_id: int,
    current_user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service),
):
    return message_service.get_read_status(household_id, thread_id, message_id, current_user.id)


# Attachments
@router.get("/{message_id}/attachments")
@handle_service_errors
async def get_attachments(
    household_id: int,
    thread_id: int,
    message_id: int,
    current_user: User = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
):
    return attachment_service.get_attachments(household_id, thread_id, message_id, current_user.id)


@router.post("/{message_id}/attachments", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def add_attachment(
    household_id: int,
    thread_id: int,
    message_id: int,
    attachment_data: AttachmentCreate,
    current_user: User = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
):
    return attachment_service.add_attachment(
        household_id, thread_id, message_id, attachment_data, current_user.id
    )


@router.get("/{message_id}/attachments/{attachment_id}")
@handle_service_errors
async def get_attachment(
    household_id: int,
    thread_id: int,
    message_id: int,
    attachment_id: int,
    current_user: User = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
):
    return attachment_service.get_attachment(
        household_id, thread_id, message_id, attachment_id, current_user.id
    )


@router.delete("/{message_id}/attachments/{attachment_id}", status_code=NO_CONTENT)
@handle_service_errors
async def delete_attachment(
    household_id: int,
    thread_id: int,
    message_id: int,
    attachment_id: int,
    current_user: User = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
):
    attachment_service.delete_attachment(
        household_id, thread_id, message_id, attachment_id, current_user.id
    )
    return Response(status_code=NO_CONTENT)


# Reactions
@router.get("/{message_id}/reactions")
@handle_service_errors
async def get_reactions(
    household_id: int,
    thread_id: int,
    message_id: int,
    current_user: User = Depends(get_current_user),
    reaction_service: ReactionService = Depends(get_reaction_service),
):
    return reaction_service.get_reactions(
        household_id, message_id, current_user.id, thread_id=thread_id
    )


@router.post("/{message_id}/reactions", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def add_reaction(
    household_id: int,
    thread_id: int,
    message_id: int,
    reaction_data: ReactionCreate,
    current_user: User = Depends(get_current_user),
    reaction_service: ReactionService = Depends(get_reaction_service),
):
    return reaction_service.add_reaction(
        household_id, message_id, reaction_data, current_user.id, thread_id=thread_id
    )


@router.delete("/{message_id}/reactions/{reaction_id}", status_code=NO_CONTENT)
@handle_service_errors
async def remove_reaction(
    household_id: int,
    thread_id: int,
    message_id: int,
    reaction_id: int,
    current_user: User = Depends(get_current_user),
    reaction_service: ReactionService = Depends(get_reaction_service),
):
    """Only the user who reacted can remove the reaction"""
    reaction_service.remove_reaction(
        household_id, message_id, reaction_id, current_user.id, thread_id=thread_id
    )
    return Response(status_code=NO_CONTENT)


# Mentions
@router.get("/{message_id}/mentions")
@handle_service_errors
async def get_message_mentions(
    household_id: int,
    thread_id: int,
    message_id: int,
    current_user: User = Depends(get_current_user),
    mention_service: MentionService = Depends(get_mention_service),
):
    return mention_service.get_message_mentions(
        household_id, message_id, current_user.id, thread_id=thread_id
    )


@router.post("/{message_id}/mentions", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_mention(
    household_id: int,
    thread_id: int,
    message_id: int,
    mention_data: MentionCreate,
    current_user: User = Depends(get_current_user),
    mention_service: MentionService = Depends(get_mention_service),
):
    return mention_service.create_mention(
        household_id, message_id, mention_data, current_user.id, thread_id=thread_id
    )


@router.delete("/{message_id}/mentions/{mention_id}", status_code=NO_CONTENT)
@handle_service_errors
async def delete_mention(
    household_id: int,
    thread_id: int,
    message_id: int,
    mention_id: int,
    current_user: User = Depends(get_current_user),
    mention_service: MentionService = Depends(get_mention_service),
):
    mention_service.delete_mention(
        household_id, message_id, mention_id, current_user.id, thread_id=thread_id
    )
    return Response(status_code=NO_CONTENT)


# Polls
@router.get("/{message_id}/polls")
@handle_service_errors
async def get_message_polls(
    household_id: int,
    thread_id: int,
    message_id: int,
    current_user: User = Depends(get_current_user),
    poll_service: PollService = Depends(get_poll_service),
):
    return poll_service.get_message_polls(
        household_id, message_id, current_user.id, thread_id=thread_id
    )


@router.post("/{message_id}/polls", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_poll(
    household_id: int,
    thread_id: int,
    message_id: int,
    poll_data: PollCreate,
    current_user: User = Depends(get_current_user),
    poll_service: PollService = Depends(get_poll_service),
):
    return poll_service.create_poll(
        household_id, message_id, poll_data, current_user.id, thread_id=thread_id
    )


@router.get("/{message_id}/polls/{poll_id}")
@handle_service_errors
async def get_poll(
    household_id: int,
    thread_id: int,
    message_id: int,
    poll_id: int,
    current_user: User = Depends(get_current_user),
    poll_service: PollService = Depends(get_poll_service),
):
    return poll_service.get_poll(
        household_id, message_id, poll_id, current_user.id, thread_id=thread_id
    )


@router.patch("/{message_id}/polls/{poll_id}")
@handle_service_errors
async def update_poll(
    household_id: int,
    thread_id: int,
    message_id: int,
    poll_id: int,
    poll_update: PollUpdate,
    current_user: User = Depends(get_current_user),
    poll_service: PollService = Depends(get_poll_service),
):
    """Setting `selected_option_id` closes the poll"""
    return poll_service.update_poll(
        household_id, message_id, poll_id, poll_update, current_user.id, thread_id=thread_id
    )


@router.delete("/{message_id}/polls/{poll_id}", status_code=NO_CONTENT)
@handle_service_errors
async def delete_poll(
    household_id: int,
    thread_id: int,
    message_id: int,
    poll_id: int,
    current_user: User = Depends(get_current_user),
    poll_service: PollService = Depends(get_poll_service),
):
    poll_service.delete_poll(
        household_id, message_id, poll_id, current_user.id, thread_id=thread_id
    )
    return Response(status_code=NO_CONTENT)


@router.post("/{message_id}/polls/{poll_id}/vote", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def vote(
    household_id: int,
    thread_id: int,
    message_id: int,
    poll_id: int,
    vote_data: PollVoteCreate,
    current_user: User = Depends(get_current_user),
    poll_service: PollService = Depends(get_poll_service),
):
    return poll_service.vote(
        household_id, message_id, poll_id, vote_data, current_user.id, thread_id=thread_id
    )


@router.delete("/{message_id}/polls/{poll_id}/vote/{vote_id}", status_code=NO_CONTENT)
@handle_service_errors
async def remove_vote(
    household_id: int,
    thread_id: int,
    message_id: int,
    poll_id: int,
    vote_id: int,
    current_user: User = Depends(get_current_user),
    poll_service: PollService = Depends(get_poll_service),
):
    poll_service.remove_vote(
        household_id, message_id, poll_id, vote_id, current_user.id, thread_id=thread_id
    )
    return Response(status_code=NO_CONTENT)


@router.get("/{message_id}/polls/{poll_id}/analytics")
@handle_service_errors
async def get_poll_analytics(
    household_id: int,
    thread_id: int,
    message_id: int,
    poll_id: int,
    current_user: User = Depends(get_current_user),
    poll_service: PollService = Depends(get_poll_service),
):
    return poll_service.get_poll_analytics(
        household_id, message_id, poll_id, current_user.id, thread_id=thread_id
    )
