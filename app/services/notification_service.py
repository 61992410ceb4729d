import logging
from sqlalchemy.orm import Session
from sqlalchemy import and_, desc
from typing import Dict, Any, Optional
from datetime import datetime, timedelta
from ..models.chore import Chore, ChoreAssignment
from ..models.event import Event, EventReminder
from ..models.notification import Notification, NotificationSettings
from ..models.user import User
from ..models.enums import ChoreStatus, EventStatus, NotificationAction, NotificationType
from ..schemas.common import PaginationParams
from ..schemas.notification import (
    NotificationCreate,
    NotificationResponse,
    NotificationSettingsUpdate,
    NotificationSettingsResponse,
)
from ..utils.constants import AppConstants, ResponseMessages
from ..utils.realtime import EventPublisher
from .base import BaseService, NotFoundError, ADMIN_ONLY, wrap_response

logger = logging.getLogger(__name__)


class NotificationService(BaseService):
    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def get_notifications(
        self,
        user_id: int,
        pagination: PaginationParams = None,
        unread_only: bool = False,
    ) -> Dict[str, Any]:
        """Paginated retrieval of user's notifications"""
        pagination = pagination or PaginationParams()

        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))

        total = query.count()
        notifications = (
            query.order_by(desc(Notification.created_at), desc(Notification.id))
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )
        return wrap_response(
            [NotificationResponse.model_validate(n) for n in notifications],
            pagination.info(total),
        )

    def create_notification(self, notification_data: NotificationCreate) -> Dict[str, Any]:
        """Create a notification for a user"""
        with self.transaction():
            if not self.db.get(User, notification_data.user_id):
                raise NotFoundError(ResponseMessages.USER_NOT_FOUND)

            notification = Notification(
                user_id=notification_data.user_id,
                type=notification_data.type.value,
                message=notification_data.message,
                is_read=False,
            )
            self.db.add(notification)

        result = self._emit_created(notification)
        return wrap_response(result)

    def mark_as_read(self, notification_id: int, user_id: int) -> Dict[str, Any]:
        with self.transaction():
            notification = self._get_notification_or_raise(notification_id, user_id)
            if not notification.is_read:
                notification.is_read = True
                notification.read_at = datetime.utcnow()

        result = NotificationResponse.model_validate(notification)
        self.emit_user_event(
            "notification_update",
            user_id,
            {"action": NotificationAction.READ, "notification": result},
        )
        return wrap_response(result)

    def delete_notification(self, notification_id: int, user_id: int) -> Dict[str, Any]:
        with self.transaction():
            notification = self._get_notification_or_raise(notification_id, user_id)
            self.db.delete(notification)

        self.emit_user_event(
            "notification_update",
            user_id,
            {"action": NotificationAction.DELETED, "notification_id": notification_id},
        )
        return wrap_response(None)

    # Settings
    def get_user_settings(self, user_id: int) -> Dict[str, Any]:
        with self.transaction():
            settings = self._get_or_create_settings(user_id=user_id)
        return wrap_response(NotificationSettingsResponse.model_validate(settings))

    def update_user_settings(
        self, user_id: int, settings_update: NotificationSettingsUpdate
    ) -> Dict[str, Any]:
        with self.transaction():
            settings = self._get_or_create_settings(user_id=user_id)
            self._apply_settings(settings, settings_update)

        result = NotificationSettingsResponse.model_validate(settings)
        self.emit_user_event(
            "notification_update",
            user_id,
            {"action": NotificationAction.SETTINGS_UPDATED, "settings": result},
        )
        return wrap_response(result)

    def get_household_settings(self, household_id: int, user_id: int) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        with self.transaction():
            settings = self._get_or_create_settings(household_id=household_id)
        return wrap_response(NotificationSettingsResponse.model_validate(settings))

    def update_household_settings(
        self,
        household_id: int,
        settings_update: NotificationSettingsUpdate,
        user_id: int,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            settings = self._get_or_create_settings(household_id=household_id)
            self._apply_settings(settings, settings_update)

        result = NotificationSettingsResponse.model_validate(settings)
        self.emit_household_event(
            "notification_update",
            household_id,
            {"action": NotificationAction.SETTINGS_UPDATED, "settings": result},
        )
        return wrap_response(result)

    # Reminder jobs
    def send_event_reminders(self, now: Optional[datetime] = None) -> int:
        """Turn due, unsent event reminders into EVENT_REMINDER notifications"""
        now = now or datetime.utcnow()

        due = (
            self.db.query(EventReminder)
            .join(Event, EventReminder.event_id == Event.id)
            .filter(
                and_(
                    EventReminder.sent_at.is_(None),
                    EventReminder.time <= now,
                    Event.deleted_at.is_(None),
                    Event.status == EventStatus.SCHEDULED.value,
                )
            )
            .all()
        )

        created = []
        with self.transaction():
            for reminder in due:
                event = reminder.event
                for member in event.household.members:
                    if not member.is_accepted:
                        continue
                    if not self._wants(member.user_id, "event_notif"):
                        continue
                    notification = Notification(
                        user_id=member.user_id,
                        type=NotificationType.EVENT_REMINDER.value,
                        message=f"Reminder: {event.title} starts at {event.start_time:%Y-%m-%d %H:%M}",
                        related_entity_type="event",
                        related_entity_id=event.id,
                    )
                    self.db.add(notification)
                    created.append(notification)
                reminder.sent_at = now
            self.db.flush()

        for notification in created:
            self._emit_created(notification)
        return len(created)

    def send_chore_due_reminders(self, now: Optional[datetime] = None) -> int:
        """Notify assignees of unfinished chores due within the reminder window.

        Each assignee gets at most one CHORE_DUE_SOON notification per chore
        per day.
        """
        now = now or datetime.utcnow()
        window_end = now + timedelta(hours=AppConstants.CHORE_DUE_SOON_HOURS)

        assignments = (
            self.db.query(ChoreAssignment)
            .join(Chore, ChoreAssignment.chore_id == Chore.id)
            .filter(
                and_(
                    Chore.deleted_at.is_(None),
                    Chore.status != ChoreStatus.COMPLETED.value,
                    Chore.due_date.isnot(None),
                    Chore.due_date >= now,
                    Chore.due_date <= window_end,
                )
            )
            .all()
        )

        created = []
        with self.transaction():
            for assignment in assignments:
                chore = assignment.chore
                if self._was_reminder_sent_recently(
                    assignment.user_id, NotificationType.CHORE_DUE_SOON, chore.id, now
                ):
                    continue
                if not self._wants(assignment.user_id, "chore_notif"):
                    continue
                notification = Notification(
                    user_id=assignment.user_id,
                    type=NotificationType.CHORE_DUE_SOON.value,
                    message=f'Chore "{chore.title}" is due {chore.due_date:%Y-%m-%d %H:%M}',
                    related_entity_type="chore",
                    related_entity_id=chore.id,
                )
                self.db.add(notification)
                created.append(notification)
            self.db.flush()

        for notification in created:
            self._emit_created(notification)
        return len(created)

    def run_all_reminder_checks(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """Run all reminder checks (called by background task)"""
        now = now or datetime.utcnow()
        results = {
            "event_reminders": self.send_event_reminders(now),
            "chore_reminders": self.send_chore_due_reminders(now),
        }
        logger.info(f"Reminder checks completed: {results}")
        return results

    # Private helpers
    def _get_notification_or_raise(self, notification_id: int, user_id: int) -> Notification:
        notification = (
            self.db.query(Notification)
            .filter(
                and_(Notification.id == notification_id, Notification.user_id == user_id)
            )
            .first()
        )
        if not notification:
            raise NotFoundError(ResponseMessages.NOTIFICATION_NOT_FOUND)
        return notification

    def _get_or_create_settings(
        self, user_id: Optional[int] = None, household_id: Optional[int] = None
    ) -> NotificationSettings:
        query = self.db.query(NotificationSettings)
        if user_id is not None:
            query = query.filter(
                and_(
                    NotificationSettings.user_id == user_id,
                    NotificationSettings.household_id.is_(None),
                )
            )
        else:
            query = query.filter(
                and_(
                    NotificationSettings.household_id == household_id,
                    NotificationSettings.user_id.is_(None),
                )
            )

        settings = query.first()
        if not settings:
            settings = NotificationSettings(user_id=user_id, household_id=household_id)
            self.db.add(settings)
            self.db.flush()
        return settings

    def _apply_settings(
        self, settings: NotificationSettings, settings_update: NotificationSettingsUpdate
    ):
        for field, value in settings_update.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(settings, field, value)

    def _wants(self, user_id: int, flag: str) -> bool:
        settings = (
            self.db.query(NotificationSettings)
            .filter(NotificationSettings.user_id == user_id)
            .first()
        )
        return settings is None or bool(getattr(settings, flag))

    def _was_reminder_sent_recently(
        self,
        user_id: int,
        notification_type: NotificationType,
        entity_id: int,
        now: datetime,
        hours: int = 24,
    ) -> bool:
        """Check if similar reminder was sent recently"""
        since_time = now - timedelta(hours=hours)

        recent_notification = (
            self.db.query(Notification)
            .filter(
                and_(
                    Notification.user_id == user_id,
                    Notification.type == notification_type.value,
                    Notification.related_entity_id == entity_id,
                    Notification.created_at >= since_time,
                )
            )
            .first()
        )
        return recent_notification is not None

    def _emit_created(self, notification: Notification) -> NotificationResponse:
        result = NotificationResponse.model_validate(notification)
        self.emit_user_event(
            "notification_update",
            notification.user_id,
            {"action": NotificationAction.CREATED, "notification": result},
        )
        return result
