"""Tests for calendar events, chore events and reminders."""

from datetime import date, datetime, timedelta

import pytest

from app.models import CalendarEventHistory, Event, RecurrenceRule
from app.models.enums import CalendarEventAction, EventCategory, EventStatus
from app.schemas.chore import ChoreCreate
from app.schemas.event import (
    ChoreEventCreate,
    EventCreate,
    EventReminderCreate,
    EventReschedule,
    EventStatusUpdate,
    EventUpdate,
)
from app.services.base import NotFoundError, UnauthorizedError, ValidationError
from app.services.chore_service import ChoreService
from app.services.event_service import EventService

START = datetime(2026, 5, 10, 18, 0)


def new_event(**fields):
    return EventCreate(
        title=fields.pop("title", "House meeting"),
        start_time=fields.pop("start_time", START),
        end_time=fields.pop("end_time", START + timedelta(hours=1)),
        **fields,
    )


def history(db, event_id):
    rows = (
        db.query(CalendarEventHistory)
        .filter(CalendarEventHistory.event_id == event_id)
        .order_by(CalendarEventHistory.id)
        .all()
    )
    return [row.action for row in rows]


class TestEvents:
    def test_create_with_reminder(self, db, household_id, member, publisher):
        event = EventService(db, publisher).create_event(
            household_id,
            new_event(reminders=[EventReminderCreate(time=START - timedelta(hours=2))]),
            member.id,
        )["data"]

        assert event.created_by_id == member.id
        assert len(event.reminders) == 1
        assert history(db, event.id) == [CalendarEventAction.CREATED.value]
        assert publisher.names() == ["calendar_event_update"]

    def test_outsider_cannot_create(self, db, household_id, outsider):
        with pytest.raises(UnauthorizedError):
            EventService(db).create_event(household_id, new_event(), outsider.id)
        assert db.query(Event).count() == 0

    def test_failed_update_rolls_back_history(self, db, household_id, admin, publisher):
        service = EventService(db, publisher)
        event = service.create_event(household_id, new_event(), admin.id)["data"]
        publisher.clear()

        with pytest.raises(ValidationError):
            service.update_event(
                household_id,
                event.id,
                EventUpdate(title="Moved", end_time=START - timedelta(hours=3)),
                admin.id,
            )

        assert db.query(Event).filter(Event.id == event.id).one().title == "House meeting"
        assert history(db, event.id) == [CalendarEventAction.CREATED.value]
        assert publisher.events == []

    def test_status_and_rule_changes_are_recorded(self, db, household_id, admin):
        rule = RecurrenceRule(frequency="MONTHLY", interval=1)
        db.add(rule)
        db.commit()
        service = EventService(db)
        event = service.create_event(household_id, new_event(), admin.id)["data"]

        service.update_event(
            household_id,
            event.id,
            EventUpdate(status=EventStatus.CANCELLED, recurrence_rule_id=rule.id),
            admin.id,
        )

        assert history(db, event.id)[1:] == [
            CalendarEventAction.UPDATED.value,
            CalendarEventAction.STATUS_CHANGED.value,
            CalendarEventAction.RECURRENCE_CHANGED.value,
        ]

    def test_events_by_date(self, db, household_id, admin):
        service = EventService(db)
        service.create_event(household_id, new_event(), admin.id)
        service.create_event(
            household_id,
            new_event(title="Later", start_time=START + timedelta(days=1), end_time=START + timedelta(days=1, hours=1)),
            admin.id,
        )

        events = service.get_events_by_date(household_id, date(2026, 5, 10), admin.id)["data"]
        assert [e.title for e in events] == ["House meeting"]

    def test_delete_is_soft(self, db, household_id, admin):
        service = EventService(db)
        event = service.create_event(household_id, new_event(), admin.id)["data"]
        service.delete_event(household_id, event.id, admin.id)

        with pytest.raises(NotFoundError):
            service.get_event(household_id, event.id, admin.id)
        assert db.query(Event).filter(Event.id == event.id).one().deleted_at is not None

    def test_update_status(self, db, household_id, admin):
        service = EventService(db)
        event = service.create_event(household_id, new_event(), admin.id)["data"]
        updated = service.update_event_status(
            household_id, event.id, EventStatusUpdate(status=EventStatus.COMPLETED), admin.id
        )["data"]
        assert updated.status == EventStatus.COMPLETED

    def test_remove_reminder(self, db, household_id, admin):
        service = EventService(db)
        event = service.create_event(household_id, new_event(), admin.id)["data"]
        with_reminder = service.add_reminder(
            household_id, event.id, EventReminderCreate(time=START - timedelta(minutes=30)), admin.id
        )["data"]

        result = service.remove_reminder(
            household_id, event.id, with_reminder.reminders[0].id, admin.id
        )["data"]
        assert result.reminders == []

    def test_member_cannot_delete(self, db, household_id, admin, member, publisher):
        service = EventService(db, publisher)
        event = service.create_event(household_id, new_event(), member.id)["data"]
        publisher.clear()

        with pytest.raises(UnauthorizedError):
            service.delete_event(household_id, event.id, member.id)

        assert db.query(Event).filter(Event.id == event.id).one().deleted_at is None
        assert history(db, event.id) == [CalendarEventAction.CREATED.value]
        assert publisher.events == []

    def test_member_cannot_remove_reminder(self, db, household_id, admin, member):
        service = EventService(db)
        event = service.create_event(
            household_id,
            new_event(reminders=[EventReminderCreate(time=START - timedelta(hours=1))]),
            member.id,
        )["data"]

        with pytest.raises(UnauthorizedError):
            service.remove_reminder(household_id, event.id, event.reminders[0].id, member.id)
        assert len(service.get_event(household_id, event.id, member.id)["data"].reminders) == 1


class TestChoreEvents:
    def test_chore_event_is_scoped_to_its_chore(self, db, household_id, admin):
        service = ChoreService(db)
        chore = service.create_chore(household_id, ChoreCreate(title="Mow"), admin.id)["data"]
        other = service.create_chore(household_id, ChoreCreate(title="Rake"), admin.id)["data"]

        events = EventService(db)
        event = events.create_chore_event(
            household_id,
            chore.id,
            ChoreEventCreate(title="Mow lawn", start_time=START, end_time=START + timedelta(hours=1)),
            admin.id,
        )["data"]

        assert event.category == EventCategory.CHORE
        assert event.chore_id == chore.id
        with pytest.raises(NotFoundError):
            events.get_chore_event(household_id, other.id, event.id, admin.id)

    def test_deleting_chore_soft_deletes_its_events(self, db, household_id, admin):
        chore = ChoreService(db).create_chore(household_id, ChoreCreate(title="Mow"), admin.id)[
            "data"
        ]
        event = EventService(db).create_chore_event(
            household_id,
            chore.id,
            ChoreEventCreate(title="Mow lawn", start_time=START, end_time=START + timedelta(hours=1)),
            admin.id,
        )["data"]

        ChoreService(db).delete_chore(household_id, chore.id, admin.id)
        assert db.query(Event).filter(Event.id == event.id).one().deleted_at is not None


def chore_event(events, household_id, chore_id, user_id, start, status=EventStatus.SCHEDULED):
    return events.create_chore_event(
        household_id,
        chore_id,
        ChoreEventCreate(
            title="Mow lawn", start_time=start, end_time=start + timedelta(hours=1), status=status
        ),
        user_id,
    )["data"]


class TestChoreEventLifecycle:
    @pytest.fixture
    def chore(self, db, household_id, admin):
        return ChoreService(db).create_chore(household_id, ChoreCreate(title="Mow"), admin.id)[
            "data"
        ]

    def test_reschedule_moves_event(self, db, household_id, member, chore, publisher):
        events = EventService(db, publisher)
        event = chore_event(events, household_id, chore.id, member.id, START)
        publisher.clear()

        moved = events.reschedule_chore_event(
            household_id,
            chore.id,
            event.id,
            EventReschedule(start_time=START + timedelta(days=1), end_time=START + timedelta(days=1, hours=2)),
            member.id,
        )["data"]

        assert moved.start_time == START + timedelta(days=1)
        assert moved.end_time == START + timedelta(days=1, hours=2)
        assert history(db, event.id)[-1] == CalendarEventAction.UPDATED.value
        assert publisher.names() == ["event_update"]

    def test_reschedule_rejects_end_before_start(self):
        with pytest.raises(ValueError):
            EventReschedule(start_time=START, end_time=START - timedelta(hours=1))

    def test_reschedule_needs_matching_chore(self, db, household_id, admin, chore):
        other = ChoreService(db).create_chore(household_id, ChoreCreate(title="Rake"), admin.id)[
            "data"
        ]
        events = EventService(db)
        event = chore_event(events, household_id, chore.id, admin.id, START)

        with pytest.raises(NotFoundError):
            events.reschedule_chore_event(
                household_id,
                other.id,
                event.id,
                EventReschedule(start_time=START, end_time=START + timedelta(hours=3)),
                admin.id,
            )

    def test_complete_marks_event_completed(self, db, household_id, member, chore, publisher):
        events = EventService(db, publisher)
        event = chore_event(events, household_id, chore.id, member.id, START)

        done = events.complete_chore_event(household_id, chore.id, event.id, member.id)["data"]

        assert done.status == EventStatus.COMPLETED
        assert history(db, event.id)[-1] == CalendarEventAction.STATUS_CHANGED.value
        assert publisher.names()[-1] == "event_update"

    def test_upcoming_lists_scheduled_soonest_first(self, db, household_id, admin, chore):
        events = EventService(db)
        later = chore_event(events, household_id, chore.id, admin.id, START + timedelta(days=2))
        sooner = chore_event(events, household_id, chore.id, admin.id, START)
        chore_event(
            events, household_id, chore.id, admin.id, START + timedelta(days=1),
            status=EventStatus.CANCELLED,
        )
        finished = chore_event(events, household_id, chore.id, admin.id, START + timedelta(hours=3))
        events.complete_chore_event(household_id, chore.id, finished.id, admin.id)

        upcoming = events.get_upcoming_chore_events(household_id, chore.id, admin.id)["data"]
        assert [e.id for e in upcoming] == [sooner.id, later.id]

        first = events.get_upcoming_chore_events(household_id, chore.id, admin.id, limit=1)["data"]
        assert [e.id for e in first] == [sooner.id]

    def test_upcoming_requires_membership(self, db, household_id, outsider, chore):
        with pytest.raises(UnauthorizedError):
            EventService(db).get_upcoming_chore_events(household_id, chore.id, outsider.id)
