"""Tests for notifications, settings and the reminder jobs."""

from datetime import datetime, timedelta

import pytest

from app.models import ChoreAssignment, EventReminder, Notification, NotificationSettings
from app.models.enums import EventStatus, NotificationType
from app.schemas.chore import ChoreCreate
from app.schemas.event import EventCreate, EventReminderCreate
from app.schemas.notification import NotificationCreate, NotificationSettingsUpdate
from app.schemas.user import UserUpdate
from app.services.base import NotFoundError, UnauthorizedError
from app.services.chore_service import ChoreService
from app.services.event_service import EventService
from app.services.notification_service import NotificationService
from app.services.user_service import UserService


def notifications_of(db, user, notification_type):
    return (
        db.query(Notification)
        .filter(Notification.user_id == user.id, Notification.type == notification_type.value)
        .all()
    )


class TestNotifications:
    def test_create_list_and_read(self, db, member, publisher):
        service = NotificationService(db, publisher)
        created = service.create_notification(
            NotificationCreate(user_id=member.id, message="Welcome home")
        )["data"]
        assert publisher.events[-1][0] == f"user_{member.id}"

        assert len(service.get_notifications(member.id, unread_only=True)["data"]) == 1
        service.mark_as_read(created.id, member.id)
        assert service.get_notifications(member.id, unread_only=True)["data"] == []

    def test_notification_of_another_user_is_not_found(self, db, admin, member):
        service = NotificationService(db)
        created = service.create_notification(
            NotificationCreate(user_id=member.id, message="Private")
        )["data"]

        with pytest.raises(NotFoundError):
            service.mark_as_read(created.id, admin.id)
        with pytest.raises(NotFoundError):
            service.delete_notification(created.id, admin.id)

    def test_unknown_user(self, db):
        with pytest.raises(NotFoundError):
            NotificationService(db).create_notification(
                NotificationCreate(user_id=404, message="Nobody")
            )


class TestSettings:
    def test_user_settings_created_on_first_read(self, db, member):
        service = NotificationService(db)
        settings = service.get_user_settings(member.id)["data"]
        assert settings.chore_notif is True

        updated = service.update_user_settings(
            member.id, NotificationSettingsUpdate(chore_notif=False)
        )["data"]
        assert updated.id == settings.id
        assert updated.chore_notif is False

    def test_household_settings_admin_only(self, db, household_id, admin, member):
        service = NotificationService(db)
        assert service.get_household_settings(household_id, member.id)["data"].household_id == household_id

        with pytest.raises(UnauthorizedError):
            service.update_household_settings(
                household_id, NotificationSettingsUpdate(event_notif=False), member.id
            )
        updated = service.update_household_settings(
            household_id, NotificationSettingsUpdate(event_notif=False), admin.id
        )["data"]
        assert updated.event_notif is False


class TestEventReminders:
    def test_due_reminder_notifies_members_once(self, db, household_id, admin, member):
        now = datetime(2026, 6, 1, 12, 0)
        EventService(db).create_event(
            household_id,
            EventCreate(
                title="BBQ",
                start_time=now + timedelta(hours=1),
                end_time=now + timedelta(hours=3),
                reminders=[EventReminderCreate(time=now - timedelta(minutes=5))],
            ),
            admin.id,
        )
        service = NotificationService(db)

        assert service.send_event_reminders(now) == 2
        assert db.query(EventReminder).one().sent_at is not None
        assert service.send_event_reminders(now) == 0
        assert len(notifications_of(db, member, NotificationType.EVENT_REMINDER)) == 1

    def test_cancelled_event_is_skipped(self, db, household_id, admin):
        now = datetime(2026, 6, 1, 12, 0)
        EventService(db).create_event(
            household_id,
            EventCreate(
                title="Cancelled",
                start_time=now + timedelta(hours=1),
                end_time=now + timedelta(hours=2),
                status=EventStatus.CANCELLED,
                reminders=[EventReminderCreate(time=now - timedelta(minutes=1))],
            ),
            admin.id,
        )
        assert NotificationService(db).send_event_reminders(now) == 0

    def test_opted_out_member_is_skipped(self, db, household_id, admin, member):
        db.add(NotificationSettings(user_id=member.id, event_notif=False))
        db.commit()
        now = datetime(2026, 6, 1, 12, 0)
        EventService(db).create_event(
            household_id,
            EventCreate(
                title="Movie night",
                start_time=now + timedelta(hours=1),
                end_time=now + timedelta(hours=2),
                reminders=[EventReminderCreate(time=now)],
            ),
            admin.id,
        )

        assert NotificationService(db).send_event_reminders(now) == 1
        assert notifications_of(db, member, NotificationType.EVENT_REMINDER) == []


class TestChoreDueReminders:
    def test_assignee_reminded_once_per_day(self, db, household_id, admin, member):
        now = datetime.utcnow()
        ChoreService(db).create_chore(
            household_id,
            ChoreCreate(
                title="Bins out",
                due_date=now + timedelta(hours=6),
                assigned_user_ids=[member.id],
            ),
            admin.id,
        )
        service = NotificationService(db)

        assert service.send_chore_due_reminders(now) == 1
        assert service.send_chore_due_reminders(now) == 0
        assert len(notifications_of(db, member, NotificationType.CHORE_DUE_SOON)) == 1

    def test_chore_outside_window_is_ignored(self, db, household_id, admin, member):
        now = datetime.utcnow()
        ChoreService(db).create_chore(
            household_id,
            ChoreCreate(
                title="Spring cleaning",
                due_date=now + timedelta(days=5),
                assigned_user_ids=[member.id],
            ),
            admin.id,
        )
        assert NotificationService(db).send_chore_due_reminders(now) == 0
        assert db.query(ChoreAssignment).count() == 1

    def test_run_all_reports_both_counts(self, db):
        assert NotificationService(db).run_all_reminder_checks() == {
            "event_reminders": 0,
            "chore_reminders": 0,
        }


class TestUserProfile:
    def test_update_profile_emits_on_user_channel(self, db, member, publisher):
        result = UserService(db, publisher).update_profile(member.id, UserUpdate(name="Robert"))
        assert result["data"].name == "Robert"
        assert publisher.events[-1][:2] == (f"user_{member.id}", "user_update")

    def test_active_household_requires_membership(self, db, household_id, outsider, member):
        service = UserService(db)
        with pytest.raises(UnauthorizedError):
            service.update_profile(outsider.id, UserUpdate(active_household_id=household_id))

        updated = service.update_profile(member.id, UserUpdate(active_household_id=household_id))
        assert updated["data"].active_household_id == household_id
