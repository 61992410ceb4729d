from sqlalchemy.orm import Session
from sqlalchemy import and_
from typing import Dict, Any
from ..models.user import User
from ..models.household_membership import HouseholdMember
from ..models.enums import UserAction
from ..schemas.user import UserUpdate, UserResponse
from ..utils.constants import ResponseMessages
from ..utils.realtime import EventPublisher
from .base import BaseService, NotFoundError, UnauthorizedError, wrap_response


class UserService(BaseService):
    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def get_profile(self, user_id: int) -> Dict[str, Any]:
        return wrap_response(UserResponse.model_validate(self._get_user_or_raise(user_id)))

    def update_profile(self, user_id: int, user_update: UserUpdate) -> Dict[str, Any]:
        """Update profile fields; the active household must be one the user belongs to"""
        changes = user_update.model_dump(exclude_unset=True)

        with self.transaction():
            user = self._get_user_or_raise(user_id)

            household_id = changes.get("active_household_id")
            if household_id is not None:
                membership = (
                    self.db.query(HouseholdMember)
                    .filter(
                        and_(
                            HouseholdMember.user_id == user_id,
                            HouseholdMember.household_id == household_id,
                        )
                    )
                    .first()
                )
                if not membership:
                    raise UnauthorizedError(ResponseMessages.ACCESS_DENIED)

            for field, value in changes.items():
                if value is None and field == "name":
                    continue
                setattr(user, field, value)

        result = UserResponse.model_validate(user)
        self.emit_user_event(
            "user_update", user_id, {"action": UserAction.UPDATED, "user": result}
        )
        return wrap_response(result)

    def _get_user_or_raise(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError(ResponseMessages.USER_NOT_FOUND)
        return user
