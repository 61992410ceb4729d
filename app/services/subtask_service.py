from sqlalchemy.orm import Session
from sqlalchemy import and_
from typing import Dict, Any
from ..models.chore import Chore, ChoreHistory, Subtask
from ..models.enums import ChoreAction, ChoreStatus, SubtaskStatus
from ..schemas.chore import SubtaskCreate, SubtaskUpdate, SubtaskResponse, ChoreResponse
from ..utils.constants import ResponseMessages
from ..utils.realtime import EventPublisher
from .base import BaseService, NotFoundError, ADMIN_ONLY, wrap_response
from . import projections


class SubtaskService(BaseService):
    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def get_subtasks(self, household_id: int, chore_id: int, user_id: int) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        chore = self._get_chore_or_raise(household_id, chore_id)
        return wrap_response([SubtaskResponse.model_validate(s) for s in chore.subtasks])

    def get_subtask(
        self, household_id: int, chore_id: int, subtask_id: int, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        subtask = self._get_subtask_or_raise(household_id, chore_id, subtask_id)
        return wrap_response(SubtaskResponse.model_validate(subtask))

    def add_subtask(
        self, household_id: int, chore_id: int, subtask_data: SubtaskCreate, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            chore = self._get_chore_or_raise(household_id, chore_id)
            subtask = Subtask(
                chore_id=chore.id,
                title=subtask_data.title,
                description=subtask_data.description,
                status=subtask_data.status.value,
            )
            self.db.add(subtask)
            self._add_history(chore.id, ChoreAction.UPDATED, user_id)

        result = SubtaskResponse.model_validate(subtask)
        self.emit_household_event(
            "subtask_update",
            household_id,
            {"action": ChoreAction.CREATED, "subtask": result},
        )
        return wrap_response(result)

    def update_subtask(
        self,
        household_id: int,
        chore_id: int,
        subtask_id: int,
        subtask_update: SubtaskUpdate,
        user_id: int,
    ) -> Dict[str, Any]:
        """Update a subtask and derive the parent chore's status from its siblings.

        The sibling check runs in the same transaction as the write, so two
        members completing the last two subtasks concurrently cannot both
        miss the transition. The chore moves to COMPLETED (with a COMPLETED
        history row) only on the update that completes the final subtask;
        every other update appends an UPDATED row.
        """
        self.verify_membership(household_id, user_id)

        with self.transaction():
            subtask = self._get_subtask_or_raise(household_id, chore_id, subtask_id)
            chore = subtask.chore

            for field, value in subtask_update.model_dump(exclude_unset=True).items():
                if value is None:
                    continue
                setattr(subtask, field, value.value if hasattr(value, "value") else value)
            self.db.flush()

            chore_completed = False
            if subtask_update.status is not None:
                statuses = [
                    status
                    for (status,) in self.db.query(Subtask.status)
                    .filter(Subtask.chore_id == chore.id)
                    .all()
                ]
                all_done = all(s == SubtaskStatus.COMPLETED.value for s in statuses)
                if all_done and chore.status != ChoreStatus.COMPLETED.value:
                    chore.status = ChoreStatus.COMPLETED.value
                    chore_completed = True

            self._add_history(
                chore.id,
                ChoreAction.COMPLETED if chore_completed else ChoreAction.UPDATED,
                user_id,
            )

        result = SubtaskResponse.model_validate(subtask)
        self.emit_household_event(
            "subtask_update",
            household_id,
            {"action": ChoreAction.UPDATED, "subtask": result},
        )
        if chore_completed:
            chore_result = self._chore_response(household_id, chore_id)
            self.emit_household_event(
                "chore_update",
                household_id,
                {"action": ChoreAction.COMPLETED, "chore": chore_result},
            )
        return wrap_response(result)

    def delete_subtask(
        self, household_id: int, chore_id: int, subtask_id: int, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            subtask = self._get_subtask_or_raise(household_id, chore_id, subtask_id)
            self.db.delete(subtask)
            self._add_history(chore_id, ChoreAction.UPDATED, user_id)

        self.emit_household_event(
            "subtask_update",
            household_id,
            {"action": ChoreAction.DELETED, "subtask_id": subtask_id, "chore_id": chore_id},
        )
        return wrap_response(None)

    # Private helpers
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

    def _get_subtask_or_raise(
        self, household_id: int, chore_id: int, subtask_id: int
    ) -> Subtask:
        subtask = (
            self.db.query(Subtask)
            .join(Chore, Subtask.chore_id == Chore.id)
            .filter(
                and_(
                    Subtask.id == subtask_id,
                    Subtask.chore_id == chore_id,
                    Chore.household_id == household_id,
                    Chore.deleted_at.is_(None),
                )
            )
            .first()
        )
        if not subtask:
            raise NotFoundError(ResponseMessages.SUBTASK_NOT_FOUND)
        return subtask

    def _chore_response(self, household_id: int, chore_id: int) -> ChoreResponse:
        chore = (
            self.db.query(Chore)
            .options(*projections.CHORE_WITH_ASSIGNEES)
            .filter(and_(Chore.id == chore_id, Chore.household_id == household_id))
            .first()
        )
        return ChoreResponse.model_validate(chore)

    def _add_history(self, chore_id: int, action: ChoreAction, user_id: int):
        self.db.add(
            ChoreHistory(chore_id=chore_id, action=action.value, changed_by_id=user_id)
        )
