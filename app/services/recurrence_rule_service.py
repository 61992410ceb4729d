from sqlalchemy.orm import Session
from typing import Dict, Any
from ..models.chore import Chore
from ..models.event import Event
from ..models.recurrence_rule import RecurrenceRule
from ..models.enums import RecurrenceRuleAction
from ..schemas.recurrence_rule import (
    RecurrenceRuleCreate,
    RecurrenceRuleUpdate,
    RecurrenceRuleResponse,
)
from ..utils.constants import ResponseMessages
from ..utils.realtime import EventPublisher
from .base import BaseService, NotFoundError, ValidationError, wrap_response


class RecurrenceRuleService(BaseService):
    """Standalone, shareable recurrence rules.

    Rules are not owned by a household, so there is no membership guard;
    changes are announced on the acting user's channel.
    """

    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def get_recurrence_rules(self) -> Dict[str, Any]:
        rules = self.db.query(RecurrenceRule).order_by(RecurrenceRule.id).all()
        return wrap_response([RecurrenceRuleResponse.model_validate(r) for r in rules])

    def get_recurrence_rule(self, rule_id: int) -> Dict[str, Any]:
        return wrap_response(RecurrenceRuleResponse.model_validate(self._get_rule_or_raise(rule_id)))

    def create_recurrence_rule(
        self, rule_data: RecurrenceRuleCreate, user_id: int
    ) -> Dict[str, Any]:
        with self.transaction():
            rule = RecurrenceRule(
                frequency=rule_data.frequency.value,
                interval=rule_data.interval,
                by_weekday=rule_data.by_weekday,
                by_month_day=rule_data.by_month_day,
                by_set_pos=rule_data.by_set_pos,
                count=rule_data.count,
                until=rule_data.until,
                custom_rule_string=rule_data.custom_rule_string,
            )
            self.db.add(rule)

        result = RecurrenceRuleResponse.model_validate(rule)
        self.emit_user_event(
            "recurrence_rule_update",
            user_id,
            {"action": RecurrenceRuleAction.CREATED, "recurrence_rule": result},
        )
        return wrap_response(result)

    def update_recurrence_rule(
        self, rule_id: int, rule_update: RecurrenceRuleUpdate, user_id: int
    ) -> Dict[str, Any]:
        with self.transaction():
            rule = self._get_rule_or_raise(rule_id)
            for field, value in rule_update.model_dump(exclude_unset=True).items():
                if value is None and field in ("frequency", "interval"):
                    raise ValidationError(f"{field} cannot be empty")
                setattr(rule, field, value.value if hasattr(value, "value") else value)

        result = RecurrenceRuleResponse.model_validate(rule)
        self.emit_user_event(
            "recurrence_rule_update",
            user_id,
            {"action": RecurrenceRuleAction.UPDATED, "recurrence_rule": result},
        )
        return wrap_response(result)

    def delete_recurrence_rule(self, rule_id: int, user_id: int) -> Dict[str, Any]:
        """Delete a rule; chores and events referencing it lose the reference"""
        with self.transaction():
            rule = self._get_rule_or_raise(rule_id)
            for model in (Chore, Event):
                self.db.query(model).filter(model.recurrence_rule_id == rule.id).update(
                    {model.recurrence_rule_id: None}, synchronize_session=False
                )
            self.db.delete(rule)

        self.emit_user_event(
            "recurrence_rule_update",
            user_id,
            {"action": RecurrenceRuleAction.DELETED, "recurrence_rule_id": rule_id},
        )
        return wrap_response(None)

    def _get_rule_or_raise(self, rule_id: int) -> RecurrenceRule:
        rule = self.db.get(RecurrenceRule, rule_id)
        if not rule:
            raise NotFoundError(ResponseMessages.RECURRENCE_RULE_NOT_FOUND)
        return rule
