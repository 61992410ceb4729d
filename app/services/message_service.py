from sqlalchemy.orm import Session
from sqlalchemy import and_, func
from typing import Dict, List, Any
from datetime import datetime
from ..models.household_membership import HouseholdMember
from ..models.notification import Notification
from ..models.thread import Thread, Message, Attachment, Mention, MessageRead
from ..models.user import User
from ..models.enums import MessageAction, NotificationAction, NotificationType
from ..schemas.common import CursorParams
from ..schemas.message import (
    AttachmentCreate,
    MessageCreate,
    MessageUpdate,
    MessageResponse,
    MessageReadResponse,
    MessageReadStatus,
)
from ..schemas.notification import NotificationResponse
from ..utils.constants import ResponseMessages
from ..utils.realtime import EventPublisher
from ..utils.validation import ValidationHelpers
from .base import BaseService, NotFoundError, ValidationError, wrap_response
from . import projections


class MessageScopedService(BaseService):
    """Lookups shared by everything that hangs off a thread or a message"""

    def _get_thread_or_raise(self, household_id: int, thread_id: int) -> Thread:
        thread = (
            self.db.query(Thread)
            .filter(and_(Thread.id == thread_id, Thread.household_id == household_id))
            .first()
        )
        if not thread:
            raise NotFoundError(ResponseMessages.THREAD_NOT_FOUND)
        return thread

    def _message_query(self, household_id: int):
        return (
            self.db.query(Message)
            .join(Thread, Message.thread_id == Thread.id)
            .filter(and_(Thread.household_id == household_id, Message.deleted_at.is_(None)))
        )

    def _get_message_or_raise(
        self, household_id: int, message_id: int, thread_id: int = None
    ) -> Message:
        query = self._message_query(household_id).filter(Message.id == message_id)
        if thread_id is not None:
            query = query.filter(Message.thread_id == thread_id)
        message = query.first()
        if not message:
            raise NotFoundError(ResponseMessages.MESSAGE_NOT_FOUND)
        return message

    def _message_response(self, household_id: int, message_id: int) -> MessageResponse:
        message = (
            self._message_query(household_id)
            .options(*projections.MESSAGE_WITH_DETAILS)
            .filter(Message.id == message_id)
            .first()
        )
        if not message:
            raise NotFoundError(ResponseMessages.MESSAGE_NOT_FOUND)
        return MessageResponse.model_validate(message)

    def _validate_members(self, household_id: int, user_ids: List[int], error_message: str):
        unique_ids = set(user_ids)
        if not unique_ids:
            return
        member_count = (
            self.db.query(HouseholdMember)
            .filter(
                and_(
                    HouseholdMember.household_id == household_id,
                    HouseholdMember.user_id.in_(unique_ids),
                )
            )
            .count()
        )
        if member_count != len(unique_ids):
            raise ValidationError(error_message)

    def _add_attachments(self, message: Message, attachments: List[AttachmentCreate]):
        for attachment in attachments:
            file_check = ValidationHelpers.validate_file(
                attachment.file_type, attachment.file_size
            )
            if not file_check["valid"]:
                raise ValidationError(file_check["error"])
            self.db.add(
                Attachment(
                    message_id=message.id,
                    url=attachment.url,
                    file_type=attachment.file_type,
                    file_size=attachment.file_size,
                )
            )

    def _add_mentions(
        self, message: Message, thread: Thread, user_ids: List[int], author_id: int
    ) -> List[Notification]:
        """Create mention rows and a NEW_MESSAGE notification for each mentioned user"""
        author = self.db.get(User, author_id)
        author_name = author.name if author else "Someone"
        where = f'"{thread.title}"' if thread.title else "a message"

        notifications = []
        for mentioned_id in dict.fromkeys(user_ids):
            self.db.add(Mention(message_id=message.id, user_id=mentioned_id))
            notification = Notification(
                user_id=mentioned_id,
                type=NotificationType.NEW_MESSAGE.value,
                message=f"{author_name} mentioned you in {where}",
                related_entity_type="message",
                related_entity_id=message.id,
            )
            self.db.add(notification)
            notifications.append(notification)
        self.db.flush()
        return notifications

    def _emit_notifications(self, notifications: List[Notification]):
        for notification in notifications:
            self.emit_user_event(
                "notification_update",
                notification.user_id,
                {
                    "action": NotificationAction.CREATED,
                    "notification": NotificationResponse.model_validate(notification),
                },
            )


class MessageService(MessageScopedService):
    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def get_messages(
        self,
        household_id: int,
        thread_id: int,
        user_id: int,
        params: CursorParams = None,
    ) -> Dict[str, Any]:
        """Messages oldest first, paged forward from the cursor"""
        self.verify_membership(household_id, user_id)
        self._get_thread_or_raise(household_id, thread_id)

        query = self._message_query(household_id).filter(
            Message.thread_id == thread_id
        ).options(*projections.MESSAGE_WITH_DETAILS)
        messages, pagination = self.paginate_by_cursor(
            query, Message.id, params or CursorParams()
        )
        return wrap_response(
            [MessageResponse.model_validate(m) for m in messages], pagination
        )

    def create_message(
        self,
        household_id: int,
        thread_id: int,
        message_data: MessageCreate,
        user_id: int,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        with self.transaction():
            thread = self._get_thread_or_raise(household_id, thread_id)
            self._validate_members(
                household_id,
                message_data.mention_user_ids,
                "Mentioned users must be members of this household",
            )

            message = Message(
                thread_id=thread.id,
                author_id=user_id,
                content=message_data.content,
            )
            self.db.add(message)
            self.db.flush()

            self._add_attachments(message, message_data.attachments)
            notifications = self._add_mentions(
                message, thread, message_data.mention_user_ids, user_id
            )
            thread.updated_at = func.now()

        result = self._message_response(household_id, message.id)
        self.emit_household_event(
            "message_update",
            household_id,
            {"action": MessageAction.CREATED, "message": result},
        )
        self._emit_notifications(notifications)
        return wrap_response(result)

    def update_message(
        self,
        household_id: int,
        thread_id: int,
        message_id: int,
        message_update: MessageUpdate,
        user_id: int,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        with self.transaction():
            message = self._get_message_or_raise(household_id, message_id, thread_id)
            self.verify_author_or_admin(household_id, user_id, message.author_id)
            message.content = message_update.content

        result = self._message_response(household_id, message_id)
        self.emit_household_event(
            "message_update",
            household_id,
            {"action": MessageAction.UPDATED, "message": result},
        )
        return wrap_response(result)

    def delete_message(
        self, household_id: int, thread_id: int, message_id: int, user_id: int
    ) -> Dict[str, Any]:
        """Soft delete a message"""
        self.verify_membership(household_id, user_id)

        with self.transaction():
            message = self._get_message_or_raise(household_id, message_id, thread_id)
            self.verify_author_or_admin(household_id, user_id, message.author_id)
            message.deleted_at = datetime.utcnow()

        self.emit_household_event(
            "message_update",
            household_id,
            {
                "action": MessageAction.DELETED,
                "message_id": message_id,
                "thread_id": thread_id,
            },
        )
        return wrap_response(None)

    def mark_as_read(
        self, household_id: int, thread_id: int, message_id: int, user_id: int
    ) -> Dict[str, Any]:
        """Record that the user has read a message; repeated calls refresh read_at"""
        self.verify_membership(household_id, user_id)

        with self.transaction():
            message = self._get_message_or_raise(household_id, message_id, thread_id)
            read = (
                self.db.query(MessageRead)
                .filter(
                    and_(MessageRead.message_id == message.id, MessageRead.user_id == user_id)
                )
                .first()
            )
            if read:
                read.read_at = datetime.utcnow()
            else:
                read = MessageRead(
                    message_id=message.id, user_id=user_id, read_at=datetime.utcnow()
                )
                self.db.add(read)

        result = MessageReadResponse.model_validate(read)
        self.emit_household_event(
            "message_update",
            household_id,
            {"action": MessageAction.READ, "read": result},
        )
        return wrap_response(result)

    def get_read_status(
        self, household_id: int, thread_id: int, message_id: int, user_id: int
    ) -> Dict[str, Any]:
        """Who among the thread's participants has and has not read a message"""
        self.verify_membership(household_id, user_id)
        message = self._get_message_or_raise(household_id, message_id, thread_id)

        reads = (
            self.db.query(MessageRead)
            .filter(MessageRead.message_id == message.id)
            .order_by(MessageRead.read_at)
            .all()
        )
        read_user_ids = {r.user_id for r in reads}
        participant_ids = [p.user_id for p in message.thread.participants]

        return wrap_response(
            MessageReadStatus(
                message_id=message.id,
                read_by=[MessageReadResponse.model_validate(r) for r in reads],
                unread_by=[uid for uid in participant_ids if uid not in read_user_ids],
            )
        )
