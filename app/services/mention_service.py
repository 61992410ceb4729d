from sqlalchemy.orm import Session
from sqlalchemy import and_, desc, exists
from typing import Dict, Any, Optional
from datetime import datetime
from ..models.thread import Thread, Message, Mention, MessageRead
from ..models.enums import MessageAction
from ..schemas.message import MentionCreate, MentionResponse
from ..utils.constants import ResponseMessages
from ..utils.realtime import EventPublisher
from .base import NotFoundError, UnauthorizedError, ValidationError, wrap_response
from .message_service import MessageScopedService


class MentionService(MessageScopedService):
    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def get_message_mentions(
        self, household_id: int, message_id: int, user_id: int, thread_id: Optional[int] = None
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        message = self._get_message_or_raise(household_id, message_id, thread_id)
        mentions = (
            self.db.query(Mention)
            .filter(Mention.message_id == message.id)
            .order_by(Mention.id)
            .all()
        )
        return wrap_response([MentionResponse.model_validate(m) for m in mentions])

    def get_user_mentions(
        self, household_id: int, user_id: int, include_read: bool = False
    ) -> Dict[str, Any]:
        """Mentions of the caller across the household, newest first"""
        self.verify_membership(household_id, user_id)

        query = self._user_mentions(household_id, user_id)
        if not include_read:
            query = query.filter(Mention.read_at.is_(None))
        mentions = query.order_by(desc(Mention.mentioned_at), desc(Mention.id)).all()
        return wrap_response([MentionResponse.model_validate(m) for m in mentions])

    def get_unread_mentions_count(self, household_id: int, user_id: int) -> Dict[str, Any]:
        """Mentions in messages the caller has not read yet"""
        self.verify_membership(household_id, user_id)

        message_read = exists().where(
            and_(MessageRead.message_id == Mention.message_id, MessageRead.user_id == user_id)
        )
        count = self._user_mentions(household_id, user_id).filter(~message_read).count()
        return wrap_response(count)

    def create_mention(
        self,
        household_id: int,
        message_id: int,
        mention_data: MentionCreate,
        user_id: int,
        thread_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        try:
            self.verify_membership(household_id, mention_data.user_id)
        except UnauthorizedError:
            raise ValidationError("Mentioned users must be members of this household")

        with self.transaction():
            message = self._get_message_or_raise(household_id, message_id, thread_id)
            notifications = self._add_mentions(
                message, message.thread, [mention_data.user_id], message.author_id or user_id
            )
            mention = (
                self.db.query(Mention)
                .filter(
                    and_(
                        Mention.message_id == message.id,
                        Mention.user_id == mention_data.user_id,
                    )
                )
                .order_by(desc(Mention.id))
                .first()
            )

        result = MentionResponse.model_validate(mention)
        self.emit_household_event(
            "mention_update",
            household_id,
            {
                "action": MessageAction.MENTIONED,
                "message_id": message_id,
                "mention": result,
            },
        )
        self._emit_notifications(notifications)
        return wrap_response(result)

    def mark_mention_read(
        self, household_id: int, mention_id: int, user_id: int
    ) -> Dict[str, Any]:
        """Only the mentioned user can mark a mention as read"""
        self.verify_membership(household_id, user_id)

        with self.transaction():
            mention = (
                self._user_mentions(household_id, user_id)
                .filter(Mention.id == mention_id)
                .first()
            )
            if not mention:
                raise NotFoundError(ResponseMessages.MENTION_NOT_FOUND)
            if mention.read_at is None:
                mention.read_at = datetime.utcnow()

        result = MentionResponse.model_validate(mention)
        self.emit_user_event(
            "mention_update",
            user_id,
            {"action": MessageAction.READ, "mention": result},
        )
        return wrap_response(result)

    def delete_mention(
        self,
        household_id: int,
        message_id: int,
        mention_id: int,
        user_id: int,
        thread_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """The message author or an admin may remove a mention"""
        self.verify_membership(household_id, user_id)

        with self.transaction():
            message = self._get_message_or_raise(household_id, message_id, thread_id)
            mention = (
                self.db.query(Mention)
                .filter(and_(Mention.id == mention_id, Mention.message_id == message.id))
                .first()
            )
            if not mention:
                raise NotFoundError(ResponseMessages.MENTION_NOT_FOUND)
            self.verify_author_or_admin(household_id, user_id, message.author_id)

            self.db.delete(mention)

        self.emit_household_event(
            "mention_update",
            household_id,
            {
                "action": MessageAction.MENTION_REMOVED,
                "message_id": message_id,
                "mention_id": mention_id,
            },
        )
        return wrap_response(None)

    def _user_mentions(self, household_id: int, user_id: int):
        return (
            self.db.query(Mention)
            .join(Message, Mention.message_id == Message.id)
            .join(Thread, Message.thread_id == Thread.id)
            .filter(
                and_(
                    Mention.user_id == user_id,
                    Thread.household_id == household_id,
                    Message.deleted_at.is_(None),
                )
            )
        )
