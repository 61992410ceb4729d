"""Tests for threads, messages, reactions, mentions, attachments and polls."""

import pytest

from app.models import Notification, PollVote
from app.models.enums import NotificationType, PollStatus, PollType, ReactionType
from app.schemas.common import CursorParams
from app.schemas.message import (
    AttachmentCreate,
    MentionCreate,
    MessageCreate,
    MessageUpdate,
    ReactionCreate,
)
from app.schemas.poll import PollCreate, PollOptionCreate, PollUpdate, PollVoteCreate
from app.schemas.thread import ThreadCreate, ThreadInvite
from app.services.attachment_service import AttachmentService
from app.services.base import NotFoundError, UnauthorizedError, ValidationError
from app.services.mention_service import MentionService
from app.services.message_service import MessageService
from app.services.poll_service import PollService, VotingError
from app.services.reaction_service import ReactionService
from app.services.thread_service import ThreadService


@pytest.fixture
def thread_id(db, household_id, admin, member):
    thread = ThreadService(db).create_thread(
        household_id,
        ThreadCreate(title="General", participant_user_ids=[member.id]),
        admin.id,
    )["data"]
    return thread.id


@pytest.fixture
def message_id(db, household_id, thread_id, admin):
    message = MessageService(db).create_message(
        household_id, thread_id, MessageCreate(content="Dinner tonight?"), admin.id
    )["data"]
    return message.id


def make_poll(db, household_id, message_id, user, poll_type=PollType.SINGLE_CHOICE):
    return PollService(db).create_poll(
        household_id,
        message_id,
        PollCreate(
            question="Pizza or tacos?",
            poll_type=poll_type,
            options=[PollOptionCreate(text="Pizza"), PollOptionCreate(text="Tacos")],
        ),
        user.id,
    )["data"]


class TestThreads:
    def test_author_is_always_a_participant(self, db, household_id, admin):
        thread = ThreadService(db).create_thread(
            household_id, ThreadCreate(title="Solo"), admin.id
        )["data"]
        assert [p.user_id for p in thread.participants] == [admin.id]

    def test_participants_must_be_members(self, db, household_id, admin, outsider):
        with pytest.raises(UnauthorizedError):
            ThreadService(db).create_thread(
                household_id,
                ThreadCreate(title="Leak", participant_user_ids=[outsider.id]),
                admin.id,
            )

    def test_initial_message_with_mention_notifies(self, db, household_id, admin, member, publisher):
        thread = ThreadService(db, publisher).create_thread(
            household_id,
            ThreadCreate(
                title="Rent",
                initial_message=MessageCreate(content="@Bob rent is due", mention_user_ids=[member.id]),
            ),
            admin.id,
        )["data"]

        assert thread.messages[0].mentions[0].user_id == member.id
        notification = db.query(Notification).filter(Notification.user_id == member.id).one()
        assert notification.type == NotificationType.NEW_MESSAGE.value
        assert publisher.names() == ["thread_update", "notification_update"]

    def test_cursor_pagination_newest_first(self, db, household_id, admin):
        service = ThreadService(db)
        ids = [
            service.create_thread(household_id, ThreadCreate(title=f"T{i}"), admin.id)["data"].id
            for i in range(3)
        ]

        first = service.get_threads(household_id, admin.id, CursorParams(limit=2))
        assert [t.id for t in first["data"]] == [ids[2], ids[1]]
        assert first["pagination"].has_more is True

        second = service.get_threads(
            household_id, admin.id, CursorParams(cursor=first["pagination"].next_cursor, limit=2)
        )
        assert [t.id for t in second["data"]] == [ids[0]]
        assert second["pagination"].has_more is False

    def test_invite_adds_participants(self, db, household_id, admin, member):
        service = ThreadService(db)
        thread = service.create_thread(household_id, ThreadCreate(title="Plans"), admin.id)["data"]
        updated = service.invite_users(
            household_id, thread.id, ThreadInvite(user_ids=[member.id]), admin.id
        )["data"]
        assert {p.user_id for p in updated.participants} == {admin.id, member.id}


class TestMessages:
    def test_only_author_or_admin_can_edit(self, db, household_id, thread_id, admin, member):
        service = MessageService(db)
        mine = service.create_message(
            household_id, thread_id, MessageCreate(content="from bob"), member.id
        )["data"]
        admins = service.create_message(
            household_id, thread_id, MessageCreate(content="from alice"), admin.id
        )["data"]

        with pytest.raises(UnauthorizedError):
            service.update_message(
                household_id, thread_id, admins.id, MessageUpdate(content="hijack"), member.id
            )
        edited = service.update_message(
            household_id, thread_id, mine.id, MessageUpdate(content="moderated"), admin.id
        )["data"]
        assert edited.content == "moderated"

    def test_deleted_message_disappears(self, db, household_id, thread_id, message_id, admin):
        service = MessageService(db)
        service.delete_message(household_id, thread_id, message_id, admin.id)
        assert service.get_messages(household_id, thread_id, admin.id)["data"] == []

    def test_read_status(self, db, household_id, thread_id, message_id, admin, member):
        service = MessageService(db)
        service.mark_as_read(household_id, thread_id, message_id, member.id)
        service.mark_as_read(household_id, thread_id, message_id, member.id)

        status = service.get_read_status(household_id, thread_id, message_id, admin.id)["data"]
        assert [r.user_id for r in status.read_by] == [member.id]
        assert status.unread_by == [admin.id]

    def test_attachment_type_is_checked(self, db, household_id, thread_id, message_id, admin):
        with pytest.raises(ValidationError):
            AttachmentService(db).add_attachment(
                household_id,
                thread_id,
                message_id,
                AttachmentCreate(url="https://files.example.com/a.exe", file_type="application/x-msdownload"),
                admin.id,
            )

    def test_attachment_size_limit(self, db, household_id, thread_id, message_id, admin):
        with pytest.raises(ValidationError):
            AttachmentService(db).add_attachment(
                household_id,
                thread_id,
                message_id,
                AttachmentCreate(
                    url="https://files.example.com/big.png",
                    file_type="image/png",
                    file_size=11 * 1024 * 1024,
                ),
                admin.id,
            )


class TestThreadScoping:
    def test_message_lookup_respects_thread(self, db, household_id, thread_id, message_id, admin):
        other = ThreadService(db).create_thread(
            household_id, ThreadCreate(title="Other"), admin.id
        )["data"]

        with pytest.raises(NotFoundError):
            ReactionService(db).add_reaction(
                household_id,
                message_id,
                ReactionCreate(type=ReactionType.LIKE),
                admin.id,
                thread_id=other.id,
            )
        with pytest.raises(NotFoundError):
            PollService(db).get_message_polls(household_id, message_id, admin.id, thread_id=other.id)


class TestReactions:
    def test_duplicate_reaction_rejected(self, db, household_id, message_id, member):
        service = ReactionService(db)
        service.add_reaction(household_id, message_id, ReactionCreate(type=ReactionType.LOVE), member.id)
        with pytest.raises(ValidationError):
            service.add_reaction(
                household_id, message_id, ReactionCreate(type=ReactionType.LOVE), member.id
            )

    def test_removal_is_author_only_even_for_admin(self, db, household_id, message_id, admin, member):
        service = ReactionService(db)
        reaction = service.add_reaction(
            household_id, message_id, ReactionCreate(type=ReactionType.HAHA), member.id
        )["data"]

        with pytest.raises(UnauthorizedError):
            service.remove_reaction(household_id, message_id, reaction.id, admin.id)
        service.remove_reaction(household_id, message_id, reaction.id, member.id)
        assert service.get_reactions(household_id, message_id, admin.id)["data"] == []

    def test_analytics_counts_per_type(self, db, household_id, message_id, admin, member):
        service = ReactionService(db)
        service.add_reaction(household_id, message_id, ReactionCreate(type=ReactionType.LIKE), admin.id)
        service.add_reaction(household_id, message_id, ReactionCreate(type=ReactionType.LIKE), member.id)
        service.add_reaction(household_id, message_id, ReactionCreate(type=ReactionType.WOW), member.id)

        analytics = service.get_reaction_analytics(household_id, admin.id)["data"]
        assert analytics.total == 3
        assert analytics.by_type[ReactionType.LIKE] == 2
        assert analytics.by_type[ReactionType.SAD] == 0

        wows = service.get_reactions_by_type(household_id, ReactionType.WOW, admin.id)["data"]
        assert [r.user_id for r in wows] == [member.id]


class TestMentions:
    def test_mention_and_unread_count(self, db, household_id, thread_id, message_id, member):
        service = MentionService(db)
        mention = service.create_mention(
            household_id, message_id, MentionCreate(user_id=member.id), member.id
        )["data"]
        assert service.get_unread_mentions_count(household_id, member.id)["data"] == 1

        MessageService(db).mark_as_read(household_id, thread_id, message_id, member.id)
        assert service.get_unread_mentions_count(household_id, member.id)["data"] == 0

        service.mark_mention_read(household_id, mention.id, member.id)
        assert service.get_user_mentions(household_id, member.id)["data"] == []
        assert len(service.get_user_mentions(household_id, member.id, include_read=True)["data"]) == 1

    def test_outsider_cannot_be_mentioned(self, db, household_id, message_id, admin, outsider):
        with pytest.raises(ValidationError):
            MentionService(db).create_mention(
                household_id, message_id, MentionCreate(user_id=outsider.id), admin.id
            )


class TestPolls:
    def test_single_choice_vote_replaces_previous(self, db, household_id, message_id, admin):
        poll = make_poll(db, household_id, message_id, admin)
        pizza, tacos = poll.options
        service = PollService(db)

        service.vote(household_id, message_id, poll.id, PollVoteCreate(option_id=pizza.id), admin.id)
        service.vote(household_id, message_id, poll.id, PollVoteCreate(option_id=tacos.id), admin.id)

        votes = db.query(PollVote).filter(PollVote.poll_id == poll.id).all()
        assert [(v.user_id, v.option_id) for v in votes] == [(admin.id, tacos.id)]

        analytics = service.get_poll_analytics(household_id, message_id, poll.id, admin.id)["data"]
        assert analytics.total_votes == 1
        counts = {o.text: o.vote_count for o in analytics.options}
        assert counts == {"Pizza": 0, "Tacos": 1}

    def test_multiple_choice_votes_accumulate(self, db, household_id, message_id, admin):
        poll = make_poll(db, household_id, message_id, admin, PollType.MULTIPLE_CHOICE)
        pizza, tacos = poll.options
        service = PollService(db)

        service.vote(household_id, message_id, poll.id, PollVoteCreate(option_id=pizza.id), admin.id)
        service.vote(household_id, message_id, poll.id, PollVoteCreate(option_id=tacos.id), admin.id)

        assert db.query(PollVote).filter(PollVote.poll_id == poll.id).count() == 2

    def test_selecting_an_option_closes_poll(self, db, household_id, message_id, admin, member):
        poll = make_poll(db, household_id, message_id, admin)
        service = PollService(db)

        closed = service.update_poll(
            household_id,
            message_id,
            poll.id,
            PollUpdate(selected_option_id=poll.options[0].id),
            admin.id,
        )["data"]
        assert closed.status == PollStatus.CLOSED

        with pytest.raises(VotingError):
            service.vote(
                household_id,
                message_id,
                poll.id,
                PollVoteCreate(option_id=poll.options[1].id),
                member.id,
            )

    def test_only_message_author_creates_poll(self, db, household_id, message_id, member):
        with pytest.raises(UnauthorizedError):
            make_poll(db, household_id, message_id, member)

    def test_remove_vote_only_own(self, db, household_id, message_id, admin, member):
        poll = make_poll(db, household_id, message_id, admin)
        service = PollService(db)
        vote = service.vote(
            household_id, message_id, poll.id, PollVoteCreate(option_id=poll.options[0].id), admin.id
        )["data"]

        with pytest.raises(NotFoundError):
            service.remove_vote(household_id, message_id, poll.id, vote.id, member.id)
        service.remove_vote(household_id, message_id, poll.id, vote.id, admin.id)
        assert db.query(PollVote).count() == 0

    def test_delete_poll_removes_votes_and_options(self, db, household_id, thread_id, message_id, admin):
        poll = make_poll(db, household_id, message_id, admin)
        service = PollService(db)
        service.vote(
            household_id, message_id, poll.id, PollVoteCreate(option_id=poll.options[0].id), admin.id
        )

        service.delete_poll(household_id, message_id, poll.id, admin.id)
        assert service.get_thread_polls(household_id, thread_id, admin.id)["data"] == []
        assert db.query(PollVote).count() == 0
