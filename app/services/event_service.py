from sqlalchemy.orm import Session
from sqlalchemy import and_
from typing import Dict, List, Any, Optional
from datetime import datetime, date
from ..models.chore import Chore
from ..models.event import Event, EventReminder, CalendarEventHistory
from ..models.recurrence_rule import RecurrenceRule
from ..models.enums import CalendarEventAction, EventCategory, EventStatus
from ..schemas.event import (
    EventCreate,
    ChoreEventCreate,
    EventUpdate,
    EventStatusUpdate,
    EventReminderCreate,
    EventReschedule,
    EventResponse,
)
from ..utils.constants import ResponseMessages
from ..utils.date_helpers import DateHelpers
from ..utils.realtime import EventPublisher
from .base import BaseService, NotFoundError, ValidationError, ADMIN_ONLY, wrap_response
from . import projections

CALENDAR_EVENT = "calendar_event_update"
CHORE_EVENT = "event_update"


class EventService(BaseService):
    """Calendar events, both household-wide and linked to a chore.

    Every mutation appends a CalendarEventHistory row inside the same
    transaction as the change it records. Deletes are soft.
    """

    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    # Calendar events
    def get_events(
        self,
        household_id: int,
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Household events, chore-linked events excluded"""
        self.verify_membership(household_id, user_id)

        query = self._event_query(household_id).filter(
            Event.category != EventCategory.CHORE.value
        )
        if start:
            query = query.filter(Event.start_time >= start)
        if end:
            query = query.filter(Event.start_time < end)

        events = (
            query.options(*projections.EVENT_WITH_DETAILS)
            .order_by(Event.start_time, Event.id)
            .all()
        )
        return wrap_response([EventResponse.model_validate(e) for e in events])

    def get_events_by_date(
        self, household_id: int, target_date: date, user_id: int
    ) -> Dict[str, Any]:
        """All non-deleted events starting on the given day"""
        self.verify_membership(household_id, user_id)

        start_of_day, end_of_day = DateHelpers.get_day_boundaries(target_date)
        events = (
            self._event_query(household_id)
            .options(*projections.EVENT_WITH_DETAILS)
            .filter(and_(Event.start_time >= start_of_day, Event.start_time < end_of_day))
            .order_by(Event.start_time, Event.id)
            .all()
        )
        return wrap_response([EventResponse.model_validate(e) for e in events])

    def get_event(self, household_id: int, event_id: int, user_id: int) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        return wrap_response(self._event_response(household_id, event_id))

    def create_event(
        self, household_id: int, event_data: EventCreate, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        with self.transaction():
            self._validate_recurrence_rule(event_data.recurrence_rule_id)
            event = self._build_event(household_id, event_data, user_id)
            event.category = event_data.category.value
            self._add_reminders(event, event_data.reminders)
            self._add_history(event.id, CalendarEventAction.CREATED, user_id)

        result = self._event_response(household_id, event.id)
        self.emit_household_event(
            CALENDAR_EVENT,
            household_id,
            {"action": CalendarEventAction.CREATED, "event": result},
        )
        return wrap_response(result)

    def update_event(
        self,
        household_id: int,
        event_id: int,
        event_update: EventUpdate,
        user_id: int,
        chore_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Apply a partial update.

        Changing the recurrence rule reference records RECURRENCE_CHANGED and
        changing the status records STATUS_CHANGED, in addition to UPDATED.
        """
        self.verify_membership(household_id, user_id)

        with self.transaction():
            event = self._get_event_or_raise(household_id, event_id, chore_id)
            changes = event_update.model_dump(exclude_unset=True)

            if "recurrence_rule_id" in changes:
                self._validate_recurrence_rule(changes["recurrence_rule_id"])
            if chore_id is not None:
                # Chore-linked events keep their category
                changes.pop("category", None)

            old_rule_id = event.recurrence_rule_id
            old_status = event.status
            for field, value in changes.items():
                if value is None and field not in ("description", "location", "recurrence_rule_id"):
                    continue
                setattr(event, field, value.value if hasattr(value, "value") else value)

            start_time = self._naive(event.start_time)
            end_time = self._naive(event.end_time)
            if end_time < start_time:
                raise ValidationError("End time must be after start time")

            self._add_history(event.id, CalendarEventAction.UPDATED, user_id)
            if event.status != old_status:
                self._add_history(event.id, CalendarEventAction.STATUS_CHANGED, user_id)
            if event.recurrence_rule_id != old_rule_id:
                self._add_history(event.id, CalendarEventAction.RECURRENCE_CHANGED, user_id)

        result = self._event_response(household_id, event_id)
        self.emit_household_event(
            CHORE_EVENT if chore_id is not None else CALENDAR_EVENT,
            household_id,
            {"action": CalendarEventAction.UPDATED, "event": result},
        )
        return wrap_response(result)

    def update_event_status(
        self,
        household_id: int,
        event_id: int,
        status_update: EventStatusUpdate,
        user_id: int,
        chore_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        with self.transaction():
            event = self._get_event_or_raise(household_id, event_id, chore_id)
            event.status = status_update.status.value
            self._add_history(event.id, CalendarEventAction.STATUS_CHANGED, user_id)

        result = self._event_response(household_id, event_id)
        self.emit_household_event(
            CHORE_EVENT if chore_id is not None else CALENDAR_EVENT,
            household_id,
            {"action": CalendarEventAction.STATUS_CHANGED, "event": result},
        )
        return wrap_response(result)

    def delete_event(
        self,
        household_id: int,
        event_id: int,
        user_id: int,
        chore_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            event = self._get_event_or_raise(household_id, event_id, chore_id)
            event.deleted_at = datetime.utcnow()
            self._add_history(event.id, CalendarEventAction.DELETED, user_id)

        self.emit_household_event(
            CHORE_EVENT if chore_id is not None else CALENDAR_EVENT,
            household_id,
            {"action": CalendarEventAction.DELETED, "event_id": event_id},
        )
        return wrap_response(None)

    # Reminders
    def add_reminder(
        self,
        household_id: int,
        event_id: int,
        reminder_data: EventReminderCreate,
        user_id: int,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        with self.transaction():
            event = self._get_event_or_raise(household_id, event_id)
            self._add_reminders(event, [reminder_data])
            self._add_history(event.id, CalendarEventAction.UPDATED, user_id)

        result = self._event_response(household_id, event_id)
        self.emit_household_event(
            CALENDAR_EVENT,
            household_id,
            {"action": CalendarEventAction.UPDATED, "event": result},
        )
        return wrap_response(result)

    def remove_reminder(
        self, household_id: int, event_id: int, reminder_id: int, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            event = self._get_event_or_raise(household_id, event_id)
            reminder = (
                self.db.query(EventReminder)
                .filter(
                    and_(EventReminder.id == reminder_id, EventReminder.event_id == event.id)
                )
                .first()
            )
            if not reminder:
                raise NotFoundError(ResponseMessages.REMINDER_NOT_FOUND)

            self.db.delete(reminder)
            self._add_history(event.id, CalendarEventAction.UPDATED, user_id)

        self.db.expire_all()
        result = self._event_response(household_id, event_id)
        self.emit_household_event(
            CALENDAR_EVENT,
            household_id,
            {"action": CalendarEventAction.UPDATED, "event": result},
        )
        return wrap_response(result)

    # Chore events
    def get_chore_events(self, household_id: int, chore_id: int, user_id: int) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        self._get_chore_or_raise(household_id, chore_id)

        events = (
            self._event_query(household_id)
            .options(*projections.EVENT_WITH_DETAILS)
            .filter(Event.chore_id == chore_id)
            .order_by(Event.start_time, Event.id)
            .all()
        )
        return wrap_response([EventResponse.model_validate(e) for e in events])

    def get_chore_event(
        self, household_id: int, chore_id: int, event_id: int, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        self._get_event_or_raise(household_id, event_id, chore_id)
        return wrap_response(self._event_response(household_id, event_id))

    def create_chore_event(
        self,
        household_id: int,
        chore_id: int,
        event_data: ChoreEventCreate,
        user_id: int,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        with self.transaction():
            chore = self._get_chore_or_raise(household_id, chore_id)
            self._validate_recurrence_rule(event_data.recurrence_rule_id)

            event = self._build_event(household_id, event_data, user_id)
            event.category = EventCategory.CHORE.value
            event.chore_id = chore.id
            self._add_reminders(event, event_data.reminders)
            self._add_history(event.id, CalendarEventAction.CREATED, user_id)

        result = self._event_response(household_id, event.id)
        self.emit_household_event(
            CHORE_EVENT,
            household_id,
            {"action": CalendarEventAction.CREATED, "event": result},
        )
        return wrap_response(result)

    def get_upcoming_chore_events(
        self,
        household_id: int,
        chore_id: int,
        user_id: int,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Scheduled events of a chore, soonest first"""
        self.verify_membership(household_id, user_id)
        self._get_chore_or_raise(household_id, chore_id)

        query = (
            self._event_query(household_id)
            .options(*projections.EVENT_WITH_DETAILS)
            .filter(
                and_(
                    Event.chore_id == chore_id,
                    Event.status == EventStatus.SCHEDULED.value,
                )
            )
            .order_by(Event.start_time, Event.id)
        )
        if limit:
            query = query.limit(limit)
        return wrap_response([EventResponse.model_validate(e) for e in query.all()])

    def reschedule_chore_event(
        self,
        household_id: int,
        chore_id: int,
        event_id: int,
        reschedule: EventReschedule,
        user_id: int,
    ) -> Dict[str, Any]:
        """Move a chore event to a new time slot"""
        self.verify_membership(household_id, user_id)

        with self.transaction():
            event = self._get_event_or_raise(household_id, event_id, chore_id)
            event.start_time = reschedule.start_time
            event.end_time = reschedule.end_time
            self._add_history(event.id, CalendarEventAction.UPDATED, user_id)

        result = self._event_response(household_id, event_id)
        self.emit_household_event(
            CHORE_EVENT,
            household_id,
            {"action": CalendarEventAction.UPDATED, "event": result},
        )
        return wrap_response(result)

    def complete_chore_event(
        self, household_id: int, chore_id: int, event_id: int, user_id: int
    ) -> Dict[str, Any]:
        return self.update_event_status(
            household_id,
            event_id,
            EventStatusUpdate(status=EventStatus.COMPLETED),
            user_id,
            chore_id=chore_id,
        )

    # Private helpers
    def _event_query(self, household_id: int):
        return self.db.query(Event).filter(
            and_(Event.household_id == household_id, Event.deleted_at.is_(None))
        )

    def _get_event_or_raise(
        self, household_id: int, event_id: int, chore_id: Optional[int] = None
    ) -> Event:
        query = self._event_query(household_id).filter(Event.id == event_id)
        if chore_id is not None:
            query = query.filter(Event.chore_id == chore_id)
        event = query.first()
        if not event:
            raise NotFoundError(ResponseMessages.EVENT_NOT_FOUND)
        return event

    def _event_response(self, household_id: int, event_id: int) -> EventResponse:
        event = (
            self._event_query(household_id)
            .options(*projections.EVENT_WITH_DETAILS)
            .filter(Event.id == event_id)
            .first()
        )
        if not event:
            raise NotFoundError(ResponseMessages.EVENT_NOT_FOUND)
        return EventResponse.model_validate(event)

    def _get_chore_or_raise(self, household_id: int, chore_id: int) -> Chore:
        chore = (
            self.db.query(Chore)
            .filter(
                and_(
                    Chore.id == chore_id,
                    Chore.household_id == household_id,
                    Chore.deleted_at.is_(None),
                )
            )
            .first()
        )
        if not chore:
            raise NotFoundError(ResponseMessages.CHORE_NOT_FOUND)
        return chore

    def _validate_recurrence_rule(self, recurrence_rule_id: Optional[int]):
        if recurrence_rule_id is None:
            return
        if not self.db.get(RecurrenceRule, recurrence_rule_id):
            raise NotFoundError(ResponseMessages.RECURRENCE_RULE_NOT_FOUND)

    def _build_event(self, household_id: int, event_data, user_id: int) -> Event:
        event = Event(
            household_id=household_id,
            created_by_id=user_id,
            title=event_data.title,
            description=event_data.description,
            location=event_data.location,
            start_time=event_data.start_time,
            end_time=event_data.end_time,
            is_all_day=event_data.is_all_day,
            is_private=event_data.is_private,
            status=event_data.status.value,
            recurrence_rule_id=event_data.recurrence_rule_id,
        )
        self.db.add(event)
        self.db.flush()
        return event

    def _add_reminders(self, event: Event, reminders: List[EventReminderCreate]):
        for reminder in reminders:
            self.db.add(
                EventReminder(event_id=event.id, time=reminder.time, type=reminder.type.value)
            )

    def _add_history(self, event_id: int, action: CalendarEventAction, user_id: int):
        self.db.add(
            CalendarEventHistory(event_id=event_id, action=action.value, changed_by_id=user_id)
        )

    @staticmethod
    def _naive(value: datetime) -> datetime:
        if value is not None and value.tzinfo is not None:
            return value.replace(tzinfo=None)
        return value
