from sqlalchemy.orm import Session
from sqlalchemy import and_
from typing import List, Dict, Any, Optional
from datetime import datetime
from ..models.chore import Chore, ChoreAssignment, ChoreHistory, ChoreSwapRequest, Subtask
from ..models.event import Event
from ..models.household_membership import HouseholdMember
from ..models.notification import Notification
from ..models.recurrence_rule import RecurrenceRule
from ..models.enums import (
    ChoreAction,
    ChoreStatus,
    ChoreSwapRequestStatus,
    NotificationType,
    NotificationAction,
)
from ..schemas.chore import (
    ChoreCreate,
    ChoreUpdate,
    ChoreResponse,
    ChoreSwapRequestResponse,
    ChoreHistoryResponse,
)
from ..schemas.notification import NotificationResponse
from ..utils.constants import ResponseMessages
from ..utils.date_helpers import DateHelpers
from ..utils.realtime import EventPublisher
from .base import (
    BaseService,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    ADMIN_ONLY,
    wrap_response,
)
from . import projections


class ChoreService(BaseService):
    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def get_chores(self, household_id: int, user_id: int) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        chores = (
            self._chore_query(household_id)
            .options(*projections.CHORE_WITH_ASSIGNEES)
            .order_by(Chore.due_date.is_(None), Chore.due_date, Chore.id)
            .all()
        )
        return wrap_response([ChoreResponse.model_validate(c) for c in chores])

    def get_chore(self, household_id: int, chore_id: int, user_id: int) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        return wrap_response(self._chore_response(household_id, chore_id))

    def create_chore(
        self, household_id: int, chore_data: ChoreCreate, user_id: int
    ) -> Dict[str, Any]:
        """Create chore with assignments, subtasks and a CREATED history entry"""
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            self._validate_assignees(household_id, chore_data.assigned_user_ids)
            self._validate_recurrence_rule(chore_data.recurrence_rule_id)

            chore = Chore(
                household_id=household_id,
                title=chore_data.title,
                description=chore_data.description,
                due_date=chore_data.due_date,
                priority=chore_data.priority.value,
                status=chore_data.status.value,
                recurrence_rule_id=chore_data.recurrence_rule_id,
            )
            self.db.add(chore)
            self.db.flush()

            for subtask in chore_data.subtasks:
                self.db.add(
                    Subtask(
                        chore_id=chore.id,
                        title=subtask.title,
                        description=subtask.description,
                        status=subtask.status.value,
                    )
                )

            notifications = self._assign_users(
                chore, chore_data.assigned_user_ids, user_id
            )
            self._add_history(chore.id, ChoreAction.CREATED, user_id)

        result = self._chore_response(household_id, chore.id)
        self.emit_household_event(
            "chore_update",
            household_id,
            {"action": ChoreAction.CREATED, "chore": result},
        )
        self._emit_notifications(notifications)
        return wrap_response(result)

    def update_chore(
        self, household_id: int, chore_id: int, chore_update: ChoreUpdate, user_id: int
    ) -> Dict[str, Any]:
        """Admins or assignees may update; assignment and subtask lists are replaced wholesale"""
        membership = self.verify_membership(household_id, user_id)

        with self.transaction():
            chore = self._get_chore_or_raise(household_id, chore_id)

            if not membership.is_admin and user_id not in chore.assigned_user_ids:
                raise UnauthorizedError(ResponseMessages.ACCESS_DENIED)

            changes = chore_update.model_dump(
                exclude_unset=True, exclude={"assigned_user_ids", "subtasks"}
            )
            if "recurrence_rule_id" in changes:
                self._validate_recurrence_rule(changes["recurrence_rule_id"])
            for field, value in changes.items():
                # title, priority and status are NOT NULL; an explicit null keeps them
                if value is None and field not in ("description", "due_date", "recurrence_rule_id"):
                    continue
                setattr(chore, field, value.value if hasattr(value, "value") else value)

            notifications = []
            if chore_update.assigned_user_ids is not None:
                self._validate_assignees(household_id, chore_update.assigned_user_ids)
                previous = set(chore.assigned_user_ids)
                self.db.query(ChoreAssignment).filter(
                    ChoreAssignment.chore_id == chore.id
                ).delete(synchronize_session=False)
                self.db.expire(chore, ["assignments"])
                notifications = self._assign_users(
                    chore,
                    chore_update.assigned_user_ids,
                    user_id,
                    skip_notify=previous,
                )

            if chore_update.subtasks is not None:
                self.db.query(Subtask).filter(Subtask.chore_id == chore.id).delete(
                    synchronize_session=False
                )
                self.db.expire(chore, ["subtasks"])
                for subtask in chore_update.subtasks:
                    self.db.add(
                        Subtask(
                            chore_id=chore.id,
                            title=subtask.title,
                            description=subtask.description,
                            status=subtask.status.value,
                        )
                    )

            self._add_history(chore.id, ChoreAction.UPDATED, user_id)

        result = self._chore_response(household_id, chore_id)
        self.emit_household_event(
            "chore_update",
            household_id,
            {"action": ChoreAction.UPDATED, "chore": result},
        )
        self._emit_notifications(notifications)
        return wrap_response(result)

    def delete_chore(self, household_id: int, chore_id: int, user_id: int) -> Dict[str, Any]:
        """Soft delete a chore, its pending swaps and its calendar events"""
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            chore = self._get_chore_or_raise(household_id, chore_id)
            now = datetime.utcnow()

            self.db.query(ChoreSwapRequest).filter(
                and_(
                    ChoreSwapRequest.chore_id == chore.id,
                    ChoreSwapRequest.status == ChoreSwapRequestStatus.PENDING.value,
                )
            ).update(
                {ChoreSwapRequest.status: ChoreSwapRequestStatus.REJECTED.value},
                synchronize_session=False,
            )
            self.db.query(Event).filter(
                and_(Event.chore_id == chore.id, Event.deleted_at.is_(None))
            ).update({Event.deleted_at: now}, synchronize_session=False)
            self.db.query(ChoreAssignment).filter(
                ChoreAssignment.chore_id == chore.id
            ).delete(synchronize_session=False)

            chore.deleted_at = now
            self._add_history(chore.id, ChoreAction.DELETED, user_id)

        self.emit_household_event(
            "chore_update",
            household_id,
            {"action": ChoreAction.DELETED, "chore_id": chore_id},
        )
        return wrap_response(None)

    def get_chore_history(
        self, household_id: int, chore_id: int, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        chore = self._get_chore_or_raise(household_id, chore_id)
        return wrap_response(
            [ChoreHistoryResponse.model_validate(h) for h in chore.history]
        )

    # Swaps
    def request_swap(
        self, household_id: int, chore_id: int, target_user_id: int, user_id: int
    ) -> Dict[str, Any]:
        """An assignee asks another member to take over the chore"""
        self.verify_membership(household_id, user_id)
        try:
            self.verify_membership(household_id, target_user_id)
        except UnauthorizedError:
            raise ValidationError("Target user is not a member of this household")

        if target_user_id == user_id:
            raise ValidationError("Cannot swap a chore with yourself")

        with self.transaction():
            chore = self._get_chore_or_raise(household_id, chore_id)
            if user_id not in chore.assigned_user_ids:
                raise UnauthorizedError("You are not assigned to this chore.")

            swap_request = ChoreSwapRequest(
                chore_id=chore.id,
                requesting_user_id=user_id,
                target_user_id=target_user_id,
                status=ChoreSwapRequestStatus.PENDING.value,
            )
            self.db.add(swap_request)
            self._add_history(chore.id, ChoreAction.UPDATED, user_id)

        result = ChoreSwapRequestResponse.model_validate(swap_request)
        self.emit_household_event(
            "chore_swap_request",
            household_id,
            {"action": ChoreAction.UPDATED, "swap_request": result},
        )
        return wrap_response(result)

    def approve_swap(
        self,
        household_id: int,
        chore_id: int,
        swap_request_id: int,
        approved: bool,
        user_id: int,
    ) -> Dict[str, Any]:
        """Only the target of the request may approve or reject it"""
        self.verify_membership(household_id, user_id)

        with self.transaction():
            chore = self._get_chore_or_raise(household_id, chore_id)
            swap_request = (
                self.db.query(ChoreSwapRequest)
                .filter(
                    and_(
                        ChoreSwapRequest.id == swap_request_id,
                        ChoreSwapRequest.chore_id == chore.id,
                    )
                )
                .first()
            )
            if not swap_request:
                raise NotFoundError(ResponseMessages.SWAP_REQUEST_NOT_FOUND)

            if swap_request.target_user_id != user_id:
                raise UnauthorizedError(ResponseMessages.ACCESS_DENIED)

            if swap_request.status != ChoreSwapRequestStatus.PENDING.value:
                raise ValidationError("Swap request has already been resolved")

            if approved:
                self.db.query(ChoreAssignment).filter(
                    and_(
                        ChoreAssignment.chore_id == chore.id,
                        ChoreAssignment.user_id.in_(
                            [swap_request.requesting_user_id, swap_request.target_user_id]
                        ),
                    )
                ).delete(synchronize_session=False)
                self.db.add(
                    ChoreAssignment(chore_id=chore.id, user_id=swap_request.target_user_id)
                )
                swap_request.status = ChoreSwapRequestStatus.APPROVED.value
                self._add_history(chore.id, ChoreAction.SWAPPED, user_id)
            else:
                swap_request.status = ChoreSwapRequestStatus.REJECTED.value

        self.db.expire_all()
        result = self._chore_response(household_id, chore_id)
        self.emit_household_event(
            "chore_update",
            household_id,
            {
                "action": ChoreAction.SWAPPED if approved else ChoreAction.UPDATED,
                "chore": result,
                "swap_request_id": swap_request_id,
                "approved": approved,
            },
        )
        return wrap_response(result)

    # Recurrence
    def schedule_recurring_chores(self, now: Optional[datetime] = None) -> int:
        """Roll completed recurring chores over to their next occurrence.

        The recurrence rule moves to the new instance so a completed chore
        is only rolled over once. Returns the number of chores created.
        """
        now = now or datetime.utcnow()
        completed = (
            self.db.query(Chore)
            .filter(
                and_(
                    Chore.recurrence_rule_id.isnot(None),
                    Chore.status == ChoreStatus.COMPLETED.value,
                    Chore.deleted_at.is_(None),
                )
            )
            .options(*projections.CHORE_WITH_ASSIGNEES)
            .all()
        )

        created = []
        with self.transaction():
            for chore in completed:
                rule = self.db.get(RecurrenceRule, chore.recurrence_rule_id)
                if rule is None:
                    continue

                next_due = DateHelpers.get_next_occurrence(
                    chore.due_date or now, rule.frequency, rule.interval
                )
                if rule.until and next_due > rule.until:
                    chore.recurrence_rule_id = None
                    continue

                next_chore = Chore(
                    household_id=chore.household_id,
                    title=chore.title,
                    description=chore.description,
                    priority=chore.priority,
                    status=ChoreStatus.PENDING.value,
                    due_date=next_due,
                    recurrence_rule_id=chore.recurrence_rule_id,
                )
                self.db.add(next_chore)
                self.db.flush()

                for subtask in chore.subtasks:
                    self.db.add(
                        Subtask(
                            chore_id=next_chore.id,
                            title=subtask.title,
                            description=subtask.description,
                        )
                    )
                for user_id in chore.assigned_user_ids:
                    self.db.add(ChoreAssignment(chore_id=next_chore.id, user_id=user_id))

                chore.recurrence_rule_id = None
                self._add_history(next_chore.id, ChoreAction.CREATED, None)
                created.append(next_chore)

        for chore in created:
            result = self._chore_response(chore.household_id, chore.id)
            self.emit_household_event(
                "chore_update",
                result.household_id,
                {"action": ChoreAction.CREATED, "chore": result},
            )
        return len(created)

    # Private helpers
    def _chore_query(self, household_id: int):
        return self.db.query(Chore).filter(
            and_(Chore.household_id == household_id, Chore.deleted_at.is_(None))
        )

    def _get_chore_or_raise(self, household_id: int, chore_id: int) -> Chore:
        chore = self._chore_query(household_id).filter(Chore.id == chore_id).first()
        if not chore:
            raise NotFoundError(ResponseMessages.CHORE_NOT_FOUND)
        return chore

    def _chore_response(self, household_id: int, chore_id: int) -> ChoreResponse:
        chore = (
            self._chore_query(household_id)
            .options(*projections.CHORE_WITH_ASSIGNEES)
            .filter(Chore.id == chore_id)
            .first()
        )
        if not chore:
            raise NotFoundError(ResponseMessages.CHORE_NOT_FOUND)
        return ChoreResponse.model_validate(chore)

    def _validate_assignees(self, household_id: int, user_ids: List[int]):
        if not user_ids:
            return
        member_count = (
            self.db.query(HouseholdMember)
            .filter(
                and_(
                    HouseholdMember.household_id == household_id,
                    HouseholdMember.user_id.in_(user_ids),
                )
            )
            .count()
        )
        if member_count != len(set(user_ids)):
            raise ValidationError("Assigned users must be members of this household")

    def _validate_recurrence_rule(self, recurrence_rule_id: Optional[int]):
        if recurrence_rule_id is None:
            return
        if not self.db.get(RecurrenceRule, recurrence_rule_id):
            raise NotFoundError(ResponseMessages.RECURRENCE_RULE_NOT_FOUND)

    def _assign_users(
        self, chore: Chore, user_ids: List[int], actor_id: int, skip_notify=()
    ) -> List[Notification]:
        notifications = []
        for assignee_id in user_ids:
            self.db.add(ChoreAssignment(chore_id=chore.id, user_id=assignee_id))
            if assignee_id == actor_id or assignee_id in skip_notify:
                continue
            notification = Notification(
                user_id=assignee_id,
                type=NotificationType.CHORE_ASSIGNED.value,
                message=f'You have been assigned the chore "{chore.title}"',
                related_entity_type="chore",
                related_entity_id=chore.id,
            )
            self.db.add(notification)
            notifications.append(notification)
        self.db.flush()
        return notifications

    def _emit_notifications(self, notifications: List[Notification]):
        for notification in notifications:
            self.emit_user_event(
                "notification_update",
                notification.user_id,
                {
                    "action": NotificationAction.CREATED,
                    "notification": NotificationResponse.model_validate(notification),
                },
            )

    def _add_history(self, chore_id: int, action: ChoreAction, user_id: Optional[int]):
        self.db.add(
            ChoreHistory(chore_id=chore_id, action=action.value, changed_by_id=user_id)
        )
