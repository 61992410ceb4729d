from sqlalchemy.orm import Session
from sqlalchemy import and_, func
from typing import Dict, Any, Optional
from ..models.thread import Thread, Message, Reaction
from ..models.enums import MessageAction, ReactionType
from ..schemas.message import ReactionCreate, ReactionResponse, ReactionAnalytics
from ..utils.constants import ResponseMessages
from ..utils.realtime import EventPublisher
from .base import NotFoundError, UnauthorizedError, ValidationError, wrap_response
from .message_service import MessageScopedService


class ReactionService(MessageScopedService):
    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def get_reactions(
        self, household_id: int, message_id: int, user_id: int, thread_id: Optional[int] = None
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        message = self._get_message_or_raise(household_id, message_id, thread_id)
        reactions = (
            self.db.query(Reaction)
            .filter(Reaction.message_id == message.id)
            .order_by(Reaction.id)
            .all()
        )
        return wrap_response([ReactionResponse.model_validate(r) for r in reactions])

    def add_reaction(
        self,
        household_id: int,
        message_id: int,
        reaction_data: ReactionCreate,
        user_id: int,
        thread_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """One reaction per user, message and type"""
        self.verify_membership(household_id, user_id)

        with self.transaction():
            message = self._get_message_or_raise(household_id, message_id, thread_id)
            existing = (
                self.db.query(Reaction)
                .filter(
                    and_(
                        Reaction.message_id == message.id,
                        Reaction.user_id == user_id,
                        Reaction.type == reaction_data.type.value,
                    )
                )
                .first()
            )
            if existing:
                raise ValidationError("User has already reacted with this reaction type")

            reaction = Reaction(
                message_id=message.id,
                user_id=user_id,
                type=reaction_data.type.value,
                emoji=reaction_data.emoji,
            )
            self.db.add(reaction)

        result = ReactionResponse.model_validate(reaction)
        self.emit_household_event(
            "reaction_update",
            household_id,
            {"action": MessageAction.REACTION_ADDED, "reaction": result},
        )
        return wrap_response(result)

    def remove_reaction(
        self,
        household_id: int,
        message_id: int,
        reaction_id: int,
        user_id: int,
        thread_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Only the user who reacted may take the reaction back, admins included"""
        self.verify_membership(household_id, user_id)

        with self.transaction():
            message = self._get_message_or_raise(household_id, message_id, thread_id)
            reaction = (
                self.db.query(Reaction)
                .filter(and_(Reaction.id == reaction_id, Reaction.message_id == message.id))
                .first()
            )
            if not reaction:
                raise NotFoundError(ResponseMessages.REACTION_NOT_FOUND)
            if reaction.user_id != user_id:
                raise UnauthorizedError("Cannot remove another user's reaction")

            self.db.delete(reaction)

        self.emit_household_event(
            "reaction_update",
            household_id,
            {
                "action": MessageAction.REACTION_REMOVED,
                "reaction_id": reaction_id,
                "message_id": message_id,
            },
        )
        return wrap_response(None)

    def get_reaction_analytics(
        self, household_id: int, user_id: int, message_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """Reaction counts per type for one message or the whole household"""
        self.verify_membership(household_id, user_id)

        query = self._household_reactions(household_id, message_id)
        counts = dict(
            query.with_entities(Reaction.type, func.count(Reaction.id))
            .group_by(Reaction.type)
            .all()
        )
        by_type = {reaction_type: counts.get(reaction_type.value, 0) for reaction_type in ReactionType}
        return wrap_response(ReactionAnalytics(total=sum(by_type.values()), by_type=by_type))

    def get_reactions_by_type(
        self,
        household_id: int,
        reaction_type: ReactionType,
        user_id: int,
        message_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        reactions = (
            self._household_reactions(household_id, message_id)
            .filter(Reaction.type == ReactionType(reaction_type).value)
            .order_by(Reaction.id)
            .all()
        )
        return wrap_response([ReactionResponse.model_validate(r) for r in reactions])

    def _household_reactions(self, household_id: int, message_id: Optional[int]):
        if message_id is not None:
            self._get_message_or_raise(household_id, message_id)

        query = (
            self.db.query(Reaction)
            .join(Message, Reaction.message_id == Message.id)
            .join(Thread, Message.thread_id == Thread.id)
            .filter(and_(Thread.household_id == household_id, Message.deleted_at.is_(None)))
        )
        if message_id is not None:
            query = query.filter(Reaction.message_id == message_id)
        return query
