import logging
from sqlalchemy.orm import Session
from sqlalchemy import and_, select
from typing import Dict, List, Any
from ..models.household_membership import HouseholdMember
from ..models.poll import Poll, PollOption, PollVote
from ..models.thread import (
    Thread,
    Message,
    Attachment,
    Reaction,
    Mention,
    MessageRead,
)
from ..models.enums import ThreadAction
from ..schemas.common import CursorParams
from ..schemas.message import MessageResponse
from ..schemas.thread import (
    ThreadCreate,
    ThreadUpdate,
    ThreadInvite,
    ThreadResponse,
    ThreadWithMessagesResponse,
)
from ..utils.realtime import EventPublisher
from .base import UnauthorizedError, ADMIN_ONLY, wrap_response
from .message_service import MessageScopedService
from . import projections

logger = logging.getLogger(__name__)

NOT_HOUSEHOLD_MEMBERS = "Some users are not members of this household"


class ThreadService(MessageScopedService):
    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def get_threads(
        self, household_id: int, user_id: int, params: CursorParams = None
    ) -> Dict[str, Any]:
        """Threads newest first, paged backwards from the cursor"""
        self.verify_membership(household_id, user_id)

        query = (
            self.db.query(Thread)
            .filter(Thread.household_id == household_id)
            .options(*projections.THREAD_WITH_PARTICIPANTS)
        )
        threads, pagination = self.paginate_by_cursor(
            query, Thread.id, params or CursorParams(), descending=True
        )
        return wrap_response(
            [ThreadResponse.model_validate(t) for t in threads], pagination
        )

    def get_thread(self, household_id: int, thread_id: int, user_id: int) -> Dict[str, Any]:
        """Thread with participants and its live messages"""
        self.verify_membership(household_id, user_id)
        self._get_thread_or_raise(household_id, thread_id)
        return wrap_response(self._thread_with_messages(household_id, thread_id))

    def create_thread(
        self, household_id: int, thread_data: ThreadCreate, user_id: int
    ) -> Dict[str, Any]:
        """Create a thread, optionally with a first message.

        The author always takes part in the thread.
        """
        self.verify_membership(household_id, user_id)

        with self.transaction():
            participant_ids = list(dict.fromkeys([user_id, *thread_data.participant_user_ids]))
            participants = self._get_members_or_raise(household_id, participant_ids)

            thread = Thread(
                household_id=household_id,
                author_id=user_id,
                title=thread_data.title,
                participants=participants,
            )
            self.db.add(thread)
            self.db.flush()

            notifications = []
            initial = thread_data.initial_message
            if initial is not None:
                self._validate_members(
                    household_id,
                    initial.mention_user_ids,
                    "Mentioned users must be members of this household",
                )
                message = Message(thread_id=thread.id, author_id=user_id, content=initial.content)
                self.db.add(message)
                self.db.flush()
                self._add_attachments(message, initial.attachments)
                notifications = self._add_mentions(
                    message, thread, initial.mention_user_ids, user_id
                )

        logger.info(f"Thread {thread.id} created in household {household_id}")
        result = self._thread_with_messages(household_id, thread.id)
        self.emit_household_event(
            "thread_update",
            household_id,
            {"action": ThreadAction.CREATED, "thread": result},
        )
        self._emit_notifications(notifications)
        return wrap_response(result)

    def update_thread(
        self,
        household_id: int,
        thread_id: int,
        thread_update: ThreadUpdate,
        user_id: int,
    ) -> Dict[str, Any]:
        """Rename a thread and add or remove participants (author or admin)"""
        self.verify_membership(household_id, user_id)

        with self.transaction():
            thread = self._get_thread_or_raise(household_id, thread_id)
            self.verify_author_or_admin(household_id, user_id, thread.author_id)

            if "title" in thread_update.model_fields_set:
                thread.title = thread_update.title

            changes = thread_update.participants
            if changes is not None:
                if changes.add:
                    for member in self._get_members_or_raise(household_id, changes.add):
                        if member not in thread.participants:
                            thread.participants.append(member)
                if changes.remove:
                    removed = set(changes.remove)
                    thread.participants = [
                        p for p in thread.participants if p.user_id not in removed
                    ]

        result = self._thread_response(thread_id)
        self.emit_household_event(
            "thread_update",
            household_id,
            {"action": ThreadAction.UPDATED, "thread": result},
        )
        return wrap_response(result)

    def invite_users(
        self,
        household_id: int,
        thread_id: int,
        invite: ThreadInvite,
        user_id: int,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        with self.transaction():
            thread = self._get_thread_or_raise(household_id, thread_id)
            for member in self._get_members_or_raise(household_id, invite.user_ids):
                if member not in thread.participants:
                    thread.participants.append(member)

        result = self._thread_response(thread_id)
        self.emit_household_event(
            "thread_update",
            household_id,
            {
                "action": ThreadAction.USERS_INVITED,
                "thread": result,
                "invited_user_ids": invite.user_ids,
            },
        )
        return wrap_response(result)

    def delete_thread(self, household_id: int, thread_id: int, user_id: int) -> Dict[str, Any]:
        """Delete a thread with every message and message child row"""
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            thread = self._get_thread_or_raise(household_id, thread_id)
            message_ids = select(Message.id).where(Message.thread_id == thread.id)
            poll_ids = select(Poll.id).where(Poll.message_id.in_(message_ids))

            bulk = {"synchronize_session": False}

            self.db.query(PollVote).filter(PollVote.poll_id.in_(poll_ids)).delete(**bulk)
            self.db.query(PollOption).filter(PollOption.poll_id.in_(poll_ids)).delete(**bulk)
            self.db.query(Poll).filter(Poll.message_id.in_(message_ids)).delete(**bulk)
            for model in (Attachment, Reaction, Mention, MessageRead):
                self.db.query(model).filter(model.message_id.in_(message_ids)).delete(**bulk)
            self.db.query(Message).filter(Message.thread_id == thread.id).delete(**bulk)

            thread.participants = []
            self.db.delete(thread)

        self.emit_household_event(
            "thread_update",
            household_id,
            {"action": ThreadAction.DELETED, "thread_id": thread_id},
        )
        return wrap_response(None)

    # Private helpers
    def _get_members_or_raise(
        self, household_id: int, user_ids: List[int]
    ) -> List[HouseholdMember]:
        unique_ids = set(user_ids)
        members = (
            self.db.query(HouseholdMember)
            .filter(
                and_(
                    HouseholdMember.household_id == household_id,
                    HouseholdMember.user_id.in_(unique_ids),
                )
            )
            .all()
        )
        if len(members) != len(unique_ids):
            raise UnauthorizedError(NOT_HOUSEHOLD_MEMBERS)
        return members

    def _thread_response(self, thread_id: int) -> ThreadResponse:
        thread = (
            self.db.query(Thread)
            .options(*projections.THREAD_WITH_PARTICIPANTS)
            .filter(Thread.id == thread_id)
            .first()
        )
        return ThreadResponse.model_validate(thread)

    def _thread_with_messages(
        self, household_id: int, thread_id: int
    ) -> ThreadWithMessagesResponse:
        thread = self._thread_response(thread_id)
        messages = (
            self._message_query(household_id)
            .filter(Message.thread_id == thread_id)
            .options(*projections.MESSAGE_WITH_DETAILS)
            .order_by(Message.id)
            .all()
        )
        return ThreadWithMessagesResponse(
            **thread.model_dump(),
            messages=[MessageResponse.model_validate(m) for m in messages],
        )
