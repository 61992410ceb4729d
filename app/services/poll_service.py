from sqlalchemy.orm import Session
from sqlalchemy import and_
from typing import Dict, Any, Optional
from datetime import datetime
from ..models.event import Event
from ..models.poll import Poll, PollOption, PollVote
from ..models.thread import Thread, Message
from ..models.enums import MessageAction, PollStatus, PollType
from ..schemas.poll import (
    PollCreate,
    PollUpdate,
    PollVoteCreate,
    PollResponse,
    PollVoteResponse,
    PollAnalytics,
    PollOptionTally,
)
from ..utils.constants import ResponseMessages
from ..utils.realtime import EventPublisher
from .base import (
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    wrap_response,
)
from .message_service import MessageScopedService
from . import projections


class VotingError(ValidationError):
    """Vote rejected by the poll's state or type"""

    pass


class PollService(MessageScopedService):
    """Polls attached to messages.

    A poll accepts votes only while OPEN. For every poll type except
    MULTIPLE_CHOICE a new vote replaces the voter's previous votes;
    MULTIPLE_CHOICE votes accumulate. Choosing a winning option closes
    the poll.
    """

    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def get_thread_polls(self, household_id: int, thread_id: int, user_id: int) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        self._get_thread_or_raise(household_id, thread_id)

        polls = (
            self._poll_query(household_id)
            .options(*projections.POLL_WITH_OPTIONS)
            .filter(Message.thread_id == thread_id)
            .order_by(Poll.id)
            .all()
        )
        return wrap_response([PollResponse.model_validate(p) for p in polls])

    def get_message_polls(
        self, household_id: int, message_id: int, user_id: int, thread_id: Optional[int] = None
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        self._get_message_or_raise(household_id, message_id, thread_id)

        polls = (
            self._poll_query(household_id, thread_id)
            .options(*projections.POLL_WITH_OPTIONS)
            .filter(Poll.message_id == message_id)
            .all()
        )
        return wrap_response([PollResponse.model_validate(p) for p in polls])

    def get_poll(
        self,
        household_id: int,
        message_id: int,
        poll_id: int,
        user_id: int,
        thread_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        return wrap_response(self._poll_response(household_id, message_id, poll_id, thread_id))

    def create_poll(
        self,
        household_id: int,
        message_id: int,
        poll_data: PollCreate,
        user_id: int,
        thread_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Only the author of the message can attach a poll to it"""
        self.verify_membership(household_id, user_id)

        with self.transaction():
            message = self._get_message_or_raise(household_id, message_id, thread_id)
            if message.author_id != user_id:
                raise UnauthorizedError("Only the message author can create polls")
            if message.poll is not None:
                raise ValidationError("Message already has a poll")
            if poll_data.event_id is not None:
                event = (
                    self.db.query(Event)
                    .filter(
                        and_(
                            Event.id == poll_data.event_id,
                            Event.household_id == household_id,
                            Event.deleted_at.is_(None),
                        )
                    )
                    .first()
                )
                if not event:
                    raise NotFoundError(ResponseMessages.EVENT_NOT_FOUND)

            poll = Poll(
                message_id=message.id,
                question=poll_data.question,
                poll_type=poll_data.poll_type.value,
                max_choices=poll_data.max_choices,
                max_rank=poll_data.max_rank,
                end_date=poll_data.end_date,
                event_id=poll_data.event_id,
                status=PollStatus.OPEN.value,
            )
            self.db.add(poll)
            self.db.flush()

            for index, option in enumerate(poll_data.options):
                self.db.add(
                    PollOption(
                        poll_id=poll.id,
                        text=option.text,
                        order=option.order if option.order is not None else index,
                        start_time=option.start_time,
                        end_time=option.end_time,
                    )
                )

        result = self._poll_response(household_id, message_id, poll.id, thread_id)
        self.emit_household_event(
            "poll_update",
            household_id,
            {"action": MessageAction.POLL_CREATED, "message_id": message_id, "poll": result},
        )
        return wrap_response(result)

    def update_poll(
        self,
        household_id: int,
        message_id: int,
        poll_id: int,
        poll_update: PollUpdate,
        user_id: int,
        thread_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        with self.transaction():
            poll = self._get_poll_or_raise(household_id, message_id, poll_id, thread_id)
            self.verify_author_or_admin(household_id, user_id, poll.message.author_id)

            changes = poll_update.model_dump(exclude_unset=True)
            if changes.get("selected_option_id") is not None:
                self._get_option_or_raise(poll, changes["selected_option_id"])
                poll.selected_option_id = changes.pop("selected_option_id")
                poll.status = PollStatus.CLOSED.value
                changes.pop("status", None)

            for field, value in changes.items():
                if value is None and field in ("question", "status"):
                    continue
                setattr(poll, field, value.value if hasattr(value, "value") else value)

        result = self._poll_response(household_id, message_id, poll_id, thread_id)
        self.emit_household_event(
            "poll_update",
            household_id,
            {"action": MessageAction.POLL_UPDATED, "message_id": message_id, "poll": result},
        )
        return wrap_response(result)

    def delete_poll(
        self,
        household_id: int,
        message_id: int,
        poll_id: int,
        user_id: int,
        thread_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Remove votes, then options, then the poll itself"""
        self.verify_membership(household_id, user_id)

        with self.transaction():
            poll = self._get_poll_or_raise(household_id, message_id, poll_id, thread_id)
            self.verify_author_or_admin(household_id, user_id, poll.message.author_id)

            bulk = {"synchronize_session": False}
            self.db.query(PollVote).filter(PollVote.poll_id == poll.id).delete(**bulk)
            self.db.query(PollOption).filter(PollOption.poll_id == poll.id).delete(**bulk)
            self.db.query(Poll).filter(Poll.id == poll.id).delete(**bulk)

        self.db.expire_all()
        self.emit_household_event(
            "poll_update",
            household_id,
            {"action": MessageAction.POLL_DELETED, "message_id": message_id, "poll_id": poll_id},
        )
        return wrap_response(None)

    def vote(
        self,
        household_id: int,
        message_id: int,
        poll_id: int,
        vote_data: PollVoteCreate,
        user_id: int,
        thread_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        with self.transaction():
            poll = self._get_poll_or_raise(household_id, message_id, poll_id, thread_id)
            if poll.status != PollStatus.OPEN.value or self._has_ended(poll):
                raise VotingError("Poll is not active")

            option = self._get_option_or_raise(poll, vote_data.option_id)
            poll_type = PollType(poll.poll_type)

            if poll_type == PollType.RANKED_CHOICE and vote_data.rank is not None:
                if poll.max_rank is not None and vote_data.rank > poll.max_rank:
                    raise VotingError(f"Rank cannot exceed {poll.max_rank}")

            previous = self.db.query(PollVote).filter(
                and_(PollVote.poll_id == poll.id, PollVote.user_id == user_id)
            )
            if poll_type == PollType.MULTIPLE_CHOICE:
                chosen = {v.option_id for v in previous.all()}
                if option.id in chosen:
                    raise VotingError("Already voted for this option")
                if poll.max_choices is not None and len(chosen) >= poll.max_choices:
                    raise VotingError(f"At most {poll.max_choices} choices allowed")
            else:
                previous.delete(synchronize_session=False)

            vote = PollVote(
                poll_id=poll.id,
                option_id=option.id,
                user_id=user_id,
                rank=vote_data.rank,
                availability=vote_data.availability,
            )
            self.db.add(vote)

        result = PollVoteResponse.model_validate(vote)
        self.emit_household_event(
            "poll_vote_update",
            household_id,
            {
                "action": MessageAction.POLL_VOTED,
                "message_id": message_id,
                "poll_id": poll_id,
                "vote": result,
            },
        )
        return wrap_response(result)

    def remove_vote(
        self,
        household_id: int,
        message_id: int,
        poll_id: int,
        vote_id: int,
        user_id: int,
        thread_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Voters can only withdraw their own votes"""
        self.verify_membership(household_id, user_id)

        with self.transaction():
            poll = self._get_poll_or_raise(household_id, message_id, poll_id, thread_id)
            vote = (
                self.db.query(PollVote)
                .filter(
                    and_(
                        PollVote.id == vote_id,
                        PollVote.poll_id == poll.id,
                        PollVote.user_id == user_id,
                    )
                )
                .first()
            )
            if not vote:
                raise NotFoundError(ResponseMessages.VOTE_NOT_FOUND)
            self.db.delete(vote)

        self.emit_household_event(
            "poll_vote_update",
            household_id,
            {
                "action": MessageAction.POLL_VOTE_REMOVED,
                "message_id": message_id,
                "poll_id": poll_id,
                "vote_id": vote_id,
            },
        )
        return wrap_response(None)

    def get_poll_analytics(
        self,
        household_id: int,
        message_id: int,
        poll_id: int,
        user_id: int,
        thread_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        poll = (
            self._poll_query(household_id, thread_id)
            .options(*projections.POLL_WITH_OPTIONS)
            .filter(and_(Poll.id == poll_id, Poll.message_id == message_id))
            .first()
        )
        if not poll:
            raise NotFoundError(ResponseMessages.POLL_NOT_FOUND)

        tallies = [
            PollOptionTally(
                option_id=option.id,
                text=option.text,
                vote_count=len(option.votes),
                voter_ids=sorted({v.user_id for v in option.votes}),
            )
            for option in poll.options
        ]
        voters = {v.user_id for option in poll.options for v in option.votes}
        return wrap_response(
            PollAnalytics(
                poll_id=poll.id,
                total_votes=sum(t.vote_count for t in tallies),
                unique_voters=len(voters),
                options=tallies,
            )
        )

    # Private helpers
    def _poll_query(self, household_id: int, thread_id: Optional[int] = None):
        query = (
            self.db.query(Poll)
            .join(Message, Poll.message_id == Message.id)
            .join(Thread, Message.thread_id == Thread.id)
            .filter(and_(Thread.household_id == household_id, Message.deleted_at.is_(None)))
        )
        if thread_id is not None:
            query = query.filter(Message.thread_id == thread_id)
        return query

    def _get_poll_or_raise(
        self, household_id: int, message_id: int, poll_id: int, thread_id: Optional[int] = None
    ) -> Poll:
        poll = (
            self._poll_query(household_id, thread_id)
            .filter(and_(Poll.id == poll_id, Poll.message_id == message_id))
            .first()
        )
        if not poll:
            raise NotFoundError(ResponseMessages.POLL_NOT_FOUND)
        return poll

    def _get_option_or_raise(self, poll: Poll, option_id: int) -> PollOption:
        option = (
            self.db.query(PollOption)
            .filter(and_(PollOption.id == option_id, PollOption.poll_id == poll.id))
            .first()
        )
        if not option:
            raise NotFoundError(ResponseMessages.POLL_OPTION_NOT_FOUND)
        return option

    def _poll_response(
        self, household_id: int, message_id: int, poll_id: int, thread_id: Optional[int] = None
    ) -> PollResponse:
        poll = (
            self._poll_query(household_id, thread_id)
            .options(*projections.POLL_WITH_OPTIONS)
            .filter(and_(Poll.id == poll_id, Poll.message_id == message_id))
            .first()
        )
        if not poll:
            raise NotFoundError(ResponseMessages.POLL_NOT_FOUND)
        return PollResponse.model_validate(poll)

    @staticmethod
    def _has_ended(poll: Poll) -> bool:
        if poll.end_date is None:
            return False
        end_date = poll.end_date
        if end_date.tzinfo is not None:
            end_date = end_date.replace(tzinfo=None)
        return end_date < datetime.utcnow()
