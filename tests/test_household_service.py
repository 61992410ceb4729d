"""Tests for HouseholdService: creation, membership rules and cascade delete."""

import pytest

from app.models import Chore, Expense, Household, HouseholdMember, Message, Thread
from app.models.thread import thread_participants
from app.models.user import User
from app.models.enums import HouseholdMemberStatus, HouseholdRole
from app.schemas.chore import ChoreCreate, SubtaskCreate
from app.schemas.expense import ExpenseCreate
from app.schemas.household import AddMemberRequest, HouseholdCreate, HouseholdUpdate
from app.schemas.message import MessageCreate
from app.schemas.thread import ThreadCreate
from app.services.base import NotFoundError, UnauthorizedError, ValidationError
from app.services.chore_service import ChoreService
from app.services.expense_service import ExpenseService
from app.services.household_service import HouseholdService
from app.services.thread_service import ThreadService


def member_count(db, household_id):
    return db.query(HouseholdMember).filter(HouseholdMember.household_id == household_id).count()


class TestCreateHousehold:
    def test_creator_becomes_single_admin(self, db, admin):
        service = HouseholdService(db)
        created = service.create_household(HouseholdCreate(name="Oak House"), admin.id)

        fetched = service.get_household(created["data"].id, admin.id)["data"]
        assert len(fetched.members) == 1
        assert fetched.members[0].user_id == admin.id
        assert fetched.members[0].role == HouseholdRole.ADMIN

    def test_creation_event_goes_to_creator_channel(self, db, admin, publisher):
        HouseholdService(db, publisher).create_household(HouseholdCreate(name="Oak"), admin.id)
        assert publisher.events[0][0] == f"user_{admin.id}"
        assert publisher.names() == ["household_update"]

    def test_unknown_creator_is_not_found(self, db):
        with pytest.raises(NotFoundError):
            HouseholdService(db).create_household(HouseholdCreate(name="Ghost"), 999)
        assert db.query(Household).count() == 0

    def test_user_households_lists_only_accepted(self, db, admin, member, make_household):
        first = make_household(admin, members=[member])
        make_household(admin, name="Second")

        households = HouseholdService(db).get_user_households(member.id)["data"]
        assert [h.id for h in households] == [first]


class TestMembershipGuard:
    def test_non_admin_update_changes_nothing(self, db, household_id, member, publisher):
        service = HouseholdService(db, publisher)
        with pytest.raises(UnauthorizedError):
            service.update_household(household_id, HouseholdUpdate(name="Renamed"), member.id)

        assert db.get(Household, household_id).name == "Maple House"
        assert publisher.events == []

    def test_outsider_cannot_read(self, db, household_id, outsider):
        with pytest.raises(UnauthorizedError):
            HouseholdService(db).get_household(household_id, outsider.id)


class TestRemoveMember:
    def test_removing_sole_admin_fails(self, db, household_id, admin, publisher):
        before = member_count(db, household_id)
        with pytest.raises(ValidationError):
            HouseholdService(db, publisher).remove_member(household_id, admin.id, admin.id)

        assert member_count(db, household_id) == before
        assert publisher.events == []

    def test_admin_removes_member(self, db, household_id, admin, member, publisher):
        HouseholdService(db, publisher).remove_member(household_id, member.id, admin.id)

        assert member_count(db, household_id) == 1
        assert publisher.names() == ["member_removed"]

    def test_removal_clears_participation_and_active_household(
        self, db, household_id, admin, member
    ):
        member.active_household_id = household_id
        db.commit()
        ThreadService(db).create_thread(
            household_id, ThreadCreate(title="General", participant_user_ids=[member.id]), admin.id
        )
        membership_id = (
            db.query(HouseholdMember.id)
            .filter(
                HouseholdMember.user_id == member.id,
                HouseholdMember.household_id == household_id,
            )
            .scalar()
        )

        HouseholdService(db).remove_member(household_id, member.id, admin.id)
        db.expire_all()

        remaining = db.query(thread_participants).filter(
            thread_participants.c.member_id == membership_id
        )
        assert remaining.count() == 0
        assert db.get(User, member.id).active_household_id is None

    def test_removing_unknown_member_is_not_found(self, db, household_id, admin, outsider):
        with pytest.raises(NotFoundError):
            HouseholdService(db).remove_member(household_id, outsider.id, admin.id)


class TestRolesAndStatus:
    def test_cannot_demote_last_admin(self, db, household_id, admin):
        with pytest.raises(ValidationError):
            HouseholdService(db).update_member_role(
                household_id, admin.id, HouseholdRole.MEMBER, admin.id
            )

    def test_promote_then_demote_original_admin(self, db, household_id, admin, member):
        service = HouseholdService(db)
        service.update_member_role(household_id, member.id, HouseholdRole.ADMIN, admin.id)
        result = service.update_member_role(household_id, admin.id, HouseholdRole.MEMBER, member.id)
        assert result["data"].role == HouseholdRole.MEMBER

    def test_member_rejects_own_membership(self, db, household_id, member):
        result = HouseholdService(db).update_member_status(
            household_id, member.id, HouseholdMemberStatus.REJECTED, member.id
        )
        assert result["data"].is_rejected is True
        assert result["data"].is_accepted is False

    def test_member_cannot_change_someone_elses_status(self, db, household_id, admin, member):
        with pytest.raises(UnauthorizedError):
            HouseholdService(db).update_member_status(
                household_id, admin.id, HouseholdMemberStatus.REJECTED, member.id
            )

    def test_selection_toggle_is_self_only(self, db, household_id, admin, member):
        service = HouseholdService(db)
        assert service.update_member_selection(household_id, member.id, True, member.id)[
            "data"
        ].is_selected
        with pytest.raises(UnauthorizedError):
            service.update_member_selection(household_id, member.id, False, admin.id)


class TestInvitations:
    def test_invite_accept_flow(self, db, household_id, admin, outsider, publisher):
        service = HouseholdService(db, publisher)
        invited = service.send_invitation(household_id, outsider.email, admin.id)["data"]
        assert invited.is_invited and not invited.is_accepted
        assert publisher.events[-1][0] == f"user_{outsider.id}"

        accepted = service.accept_invitation(household_id, outsider.id)["data"]
        assert accepted.is_accepted

    def test_pending_invitations_for_invitee(self, db, household_id, admin, outsider):
        service = HouseholdService(db)
        service.send_invitation(household_id, outsider.email, admin.id)

        pending = service.get_pending_invitations(outsider.id)["data"]
        assert [p.household_id for p in pending] == [household_id]
        assert pending[0].household.id == household_id
        assert pending[0].role == HouseholdRole.MEMBER

        service.accept_invitation(household_id, outsider.id)
        assert service.get_pending_invitations(outsider.id)["data"] == []

    def test_members_have_no_pending_invitations(self, db, household_id, member):
        assert HouseholdService(db).get_pending_invitations(member.id)["data"] == []

    def test_reject_removes_pending_invitation(self, db, household_id, admin, outsider):
        service = HouseholdService(db)
        service.send_invitation(household_id, outsider.email, admin.id)
        service.reject_invitation(household_id, outsider.id)

        assert member_count(db, household_id) == 2
        with pytest.raises(NotFoundError):
            service.accept_invitation(household_id, outsider.id)

    def test_cannot_invite_existing_member(self, db, household_id, admin, member):
        with pytest.raises(ValidationError):
            HouseholdService(db).send_invitation(household_id, member.email, admin.id)

    def test_add_member_by_email(self, db, household_id, admin, outsider):
        result = HouseholdService(db).add_member(
            household_id, AddMemberRequest(email=outsider.email), admin.id
        )
        assert result["data"].user_id == outsider.id
        assert result["data"].is_accepted


class TestDeleteHousehold:
    def test_delete_removes_everything_owned(self, db, household_id, admin, member, publisher):
        ChoreService(db).create_chore(
            household_id,
            ChoreCreate(
                title="Dishes",
                assigned_user_ids=[member.id],
                subtasks=[SubtaskCreate(title="Rinse")],
            ),
            admin.id,
        )
        ExpenseService(db).create_expense(
            household_id, ExpenseCreate(description="Groceries", amount=40.0), admin.id
        )
        ThreadService(db).create_thread(
            household_id,
            ThreadCreate(
                title="General",
                participant_user_ids=[member.id],
                initial_message=MessageCreate(content="hello", mention_user_ids=[member.id]),
            ),
            admin.id,
        )

        HouseholdService(db, publisher).delete_household(household_id, admin.id)

        assert db.query(Household).filter(Household.id == household_id).count() == 0
        assert member_count(db, household_id) == 0
        assert db.query(Chore).count() == 0
        assert db.query(Expense).count() == 0
        assert db.query(Thread).count() == 0
        assert db.query(Message).count() == 0
        assert publisher.names() == ["household_deleted"]

    def test_member_cannot_delete(self, db, household_id, member):
        with pytest.raises(UnauthorizedError):
            HouseholdService(db).delete_household(household_id, member.id)
        assert db.get(Household, household_id) is not None
