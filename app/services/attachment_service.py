from sqlalchemy.orm import Session
from sqlalchemy import and_
from typing import Dict, Any
from ..models.thread import Attachment
from ..models.enums import MessageAction
from ..schemas.message import AttachmentCreate, AttachmentResponse
from ..utils.constants import ResponseMessages
from ..utils.realtime import EventPublisher
from .base import NotFoundError, wrap_response
from .message_service import MessageScopedService


class AttachmentService(MessageScopedService):
    """Message attachments; the file itself is stored elsewhere and referenced by URL"""

    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def get_attachments(
        self, household_id: int, thread_id: int, message_id: int, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        message = self._get_message_or_raise(household_id, message_id, thread_id)
        attachments = (
            self.db.query(Attachment)
            .filter(Attachment.message_id == message.id)
            .order_by(Attachment.id)
            .all()
        )
        return wrap_response([AttachmentResponse.model_validate(a) for a in attachments])

    def get_attachment(
        self,
        household_id: int,
        thread_id: int,
        message_id: int,
        attachment_id: int,
        user_id: int,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        attachment = self._get_attachment_or_raise(
            household_id, thread_id, message_id, attachment_id
        )
        return wrap_response(AttachmentResponse.model_validate(attachment))

    def add_attachment(
        self,
        household_id: int,
        thread_id: int,
        message_id: int,
        attachment_data: AttachmentCreate,
        user_id: int,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        with self.transaction():
            message = self._get_message_or_raise(household_id, message_id, thread_id)
            self.verify_author_or_admin(household_id, user_id, message.author_id)
            self._add_attachments(message, [attachment_data])
            self.db.flush()
            attachment = (
                self.db.query(Attachment)
                .filter(Attachment.message_id == message.id)
                .order_by(Attachment.id.desc())
                .first()
            )

        result = AttachmentResponse.model_validate(attachment)
        self.emit_household_event(
            "attachment_update",
            household_id,
            {"action": MessageAction.ATTACHMENT_ADDED, "attachment": result},
        )
        return wrap_response(result)

    def delete_attachment(
        self,
        household_id: int,
        thread_id: int,
        message_id: int,
        attachment_id: int,
        user_id: int,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        with self.transaction():
            attachment = self._get_attachment_or_raise(
                household_id, thread_id, message_id, attachment_id
            )
            self.verify_author_or_admin(household_id, user_id, attachment.message.author_id)
            self.db.delete(attachment)

        self.emit_household_event(
            "attachment_update",
            household_id,
            {
                "action": MessageAction.ATTACHMENT_REMOVED,
                "attachment_id": attachment_id,
                "message_id": message_id,
            },
        )
        return wrap_response(None)

    def _get_attachment_or_raise(
        self, household_id: int, thread_id: int, message_id: int, attachment_id: int
    ) -> Attachment:
        message = self._get_message_or_raise(household_id, message_id, thread_id)
        attachment = (
            self.db.query(Attachment)
            .filter(and_(Attachment.id == attachment_id, Attachment.message_id == message.id))
            .first()
        )
        if not attachment:
            raise NotFoundError(ResponseMessages.ATTACHMENT_NOT_FOUND)
        return attachment
