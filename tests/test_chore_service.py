"""Tests for chores, subtasks, swaps and recurring chore roll-over."""

from datetime import datetime, timedelta

import pytest

from app.models import Chore, ChoreHistory, Notification, RecurrenceRule
from app.models.enums import ChoreAction, ChoreStatus, SubtaskStatus
from app.schemas.chore import ChoreCreate, ChoreUpdate, SubtaskCreate, SubtaskUpdate
from app.services.base import NotFoundError, UnauthorizedError, ValidationError
from app.services.chore_service import ChoreService
from app.services.subtask_service import SubtaskService


def create_chore(db, household_id, admin, **fields):
    data = ChoreCreate(title=fields.pop("title", "Clean kitchen"), **fields)
    return ChoreService(db).create_chore(household_id, data, admin.id)["data"]


def history_actions(db, chore_id):
    rows = (
        db.query(ChoreHistory)
        .filter(ChoreHistory.chore_id == chore_id)
        .order_by(ChoreHistory.id)
        .all()
    )
    return [row.action for row in rows]


class TestCreateChore:
    def test_create_with_assignees_and_subtasks(self, db, household_id, admin, member, publisher):
        chore = ChoreService(db, publisher).create_chore(
            household_id,
            ChoreCreate(
                title="Laundry",
                assigned_user_ids=[member.id],
                subtasks=[SubtaskCreate(title="Wash"), SubtaskCreate(title="Fold")],
            ),
            admin.id,
        )["data"]

        assert [a.user_id for a in chore.assignments] == [member.id]
        assert [s.title for s in chore.subtasks] == ["Wash", "Fold"]
        assert history_actions(db, chore.id) == [ChoreAction.CREATED.value]
        assert "chore_update" in publisher.names()
        assert "notification_update" in publisher.names()

    def test_assignee_gets_notification(self, db, household_id, admin, member):
        create_chore(db, household_id, admin, assigned_user_ids=[member.id])
        assert db.query(Notification).filter(Notification.user_id == member.id).count() == 1

    def test_member_cannot_create(self, db, household_id, member, publisher):
        with pytest.raises(UnauthorizedError):
            ChoreService(db, publisher).create_chore(
                household_id, ChoreCreate(title="Sneaky"), member.id
            )
        assert db.query(Chore).count() == 0
        assert publisher.events == []

    def test_assignee_must_be_member(self, db, household_id, admin, outsider):
        with pytest.raises(ValidationError):
            create_chore(db, household_id, admin, assigned_user_ids=[outsider.id])
        assert db.query(Chore).count() == 0


class TestUpdateChore:
    def test_failed_update_leaves_no_trace(self, db, household_id, admin, outsider):
        chore = create_chore(db, household_id, admin)

        with pytest.raises(ValidationError):
            ChoreService(db).update_chore(
                household_id,
                chore.id,
                ChoreUpdate(title="Renamed", assigned_user_ids=[outsider.id]),
                admin.id,
            )

        assert db.query(Chore).filter(Chore.id == chore.id).one().title == "Clean kitchen"
        assert history_actions(db, chore.id) == [ChoreAction.CREATED.value]

    def test_assignee_may_update(self, db, household_id, admin, member):
        chore = create_chore(db, household_id, admin, assigned_user_ids=[member.id])
        updated = ChoreService(db).update_chore(
            household_id, chore.id, ChoreUpdate(status=ChoreStatus.IN_PROGRESS), member.id
        )["data"]
        assert updated.status == ChoreStatus.IN_PROGRESS

    def test_unassigned_member_may_not_update(self, db, household_id, admin, member):
        chore = create_chore(db, household_id, admin)
        with pytest.raises(UnauthorizedError):
            ChoreService(db).update_chore(
                household_id, chore.id, ChoreUpdate(title="Mine now"), member.id
            )

    def test_explicit_nulls_keep_required_fields(self, db, household_id, admin):
        chore = create_chore(db, household_id, admin, description="Wipe counters")
        updated = ChoreService(db).update_chore(
            household_id,
            chore.id,
            ChoreUpdate(title=None, priority=None, status=None, description=None),
            admin.id,
        )["data"]

        assert updated.title == "Clean kitchen"
        assert updated.status == ChoreStatus.PENDING
        assert updated.priority == chore.priority
        assert updated.description is None


class TestNotFoundParity:
    def test_missing_and_foreign_chore_look_the_same(
        self, db, make_user, make_household, household_id, admin
    ):
        stranger = make_user()
        other_household = make_household(stranger, name="Elsewhere")
        foreign = create_chore(db, other_household, stranger)

        service = ChoreService(db)
        with pytest.raises(NotFoundError) as missing:
            service.get_chore(household_id, 9999, admin.id)
        with pytest.raises(NotFoundError) as hidden:
            service.get_chore(household_id, foreign.id, admin.id)

        assert type(missing.value) is type(hidden.value)
        assert str(missing.value) == str(hidden.value)


class TestSubtaskCascade:
    def test_chore_completes_with_last_subtask(self, db, household_id, admin, member, publisher):
        chore = create_chore(
            db,
            household_id,
            admin,
            subtasks=[SubtaskCreate(title="One"), SubtaskCreate(title="Two")],
        )
        first, second = chore.subtasks
        service = SubtaskService(db, publisher)
        done = SubtaskUpdate(status=SubtaskStatus.COMPLETED)

        service.update_subtask(household_id, chore.id, first.id, done, member.id)
        assert db.query(Chore).filter(Chore.id == chore.id).one().status == ChoreStatus.PENDING.value

        service.update_subtask(household_id, chore.id, second.id, done, member.id)
        assert (
            db.query(Chore).filter(Chore.id == chore.id).one().status
            == ChoreStatus.COMPLETED.value
        )
        assert history_actions(db, chore.id).count(ChoreAction.COMPLETED.value) == 1
        assert publisher.names()[-1] == "chore_update"

    def test_non_status_update_records_updated(self, db, household_id, admin):
        chore = create_chore(db, household_id, admin, subtasks=[SubtaskCreate(title="One")])
        SubtaskService(db).update_subtask(
            household_id, chore.id, chore.subtasks[0].id, SubtaskUpdate(title="Uno"), admin.id
        )
        assert history_actions(db, chore.id)[-1] == ChoreAction.UPDATED.value

    def test_subtask_of_other_chore_is_not_found(self, db, household_id, admin):
        first = create_chore(db, household_id, admin, subtasks=[SubtaskCreate(title="A")])
        second = create_chore(db, household_id, admin, title="Other")
        with pytest.raises(NotFoundError):
            SubtaskService(db).get_subtask(
                household_id, second.id, first.subtasks[0].id, admin.id
            )


class TestDeleteChore:
    def test_soft_delete_hides_chore(self, db, household_id, admin):
        chore = create_chore(db, household_id, admin)
        service = ChoreService(db)
        service.delete_chore(household_id, chore.id, admin.id)

        assert service.get_chores(household_id, admin.id)["data"] == []
        assert db.query(Chore).filter(Chore.id == chore.id).one().deleted_at is not None
        assert history_actions(db, chore.id)[-1] == ChoreAction.DELETED.value


class TestSwaps:
    def test_swap_request_and_approval(self, db, household_id, admin, member):
        chore = create_chore(db, household_id, admin, assigned_user_ids=[admin.id])
        service = ChoreService(db)

        swap = service.request_swap(household_id, chore.id, member.id, admin.id)["data"]
        updated = service.approve_swap(household_id, chore.id, swap.id, True, member.id)["data"]

        assert [a.user_id for a in updated.assignments] == [member.id]
        assert ChoreAction.SWAPPED.value in history_actions(db, chore.id)

    def test_only_target_may_approve(self, db, household_id, admin, member):
        chore = create_chore(db, household_id, admin, assigned_user_ids=[admin.id])
        service = ChoreService(db)
        swap = service.request_swap(household_id, chore.id, member.id, admin.id)["data"]

        with pytest.raises(UnauthorizedError):
            service.approve_swap(household_id, chore.id, swap.id, True, admin.id)

    def test_swap_requires_assignment(self, db, household_id, admin, member):
        chore = create_chore(db, household_id, admin)
        with pytest.raises(UnauthorizedError):
            ChoreService(db).request_swap(household_id, chore.id, member.id, admin.id)


class TestRecurringChores:
    def test_completed_recurring_chore_rolls_over(self, db, household_id, admin, member):
        rule = RecurrenceRule(frequency="WEEKLY", interval=1)
        db.add(rule)
        db.commit()
        due = datetime(2026, 3, 2, 9, 0)
        chore = create_chore(
            db,
            household_id,
            admin,
            due_date=due,
            recurrence_rule_id=rule.id,
            assigned_user_ids=[member.id],
            subtasks=[SubtaskCreate(title="Sweep")],
            status=ChoreStatus.COMPLETED,
        )

        assert ChoreService(db).schedule_recurring_chores(now=due) == 1

        new_chore = db.query(Chore).filter(Chore.id != chore.id).one()
        assert new_chore.status == ChoreStatus.PENDING.value
        assert new_chore.due_date.replace(tzinfo=None) == due + timedelta(weeks=1)
        assert new_chore.recurrence_rule_id == rule.id
        assert new_chore.assigned_user_ids == [member.id]
        assert [s.title for s in new_chore.subtasks] == ["Sweep"]
        assert db.query(Chore).filter(Chore.id == chore.id).one().recurrence_rule_id is None

        # Already rolled over, nothing left to do
        assert ChoreService(db).schedule_recurring_chores(now=due) == 0

    def test_pending_recurring_chore_is_left_alone(self, db, household_id, admin):
        rule = RecurrenceRule(frequency="DAILY", interval=1)
        db.add(rule)
        db.commit()
        create_chore(db, household_id, admin, recurrence_rule_id=rule.id)

        assert ChoreService(db).schedule_recurring_chores() == 0
