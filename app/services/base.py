import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.enums import HouseholdRole
from ..models.household_membership import HouseholdMember
from ..schemas.common import PaginationInfo
from ..utils.constants import ResponseMessages
from ..utils.realtime import (
    EventPublisher,
    NullEventPublisher,
    household_channel,
    user_channel,
)

logger = logging.getLogger(__name__)


# Custom Exceptions shared by every service
class ServiceError(Exception):
    """Base exception for service errors"""

    pass


class NotFoundError(ServiceError):
    """Entity missing or not owned by the claimed household/parent"""

    pass


class UnauthorizedError(ServiceError):
    """Membership, role or authorship check failed"""

    pass


class ValidationError(ServiceError):
    """Malformed or logically inconsistent input"""

    pass


class ConflictError(ServiceError):
    """Unique constraint violated"""

    pass


ANY_ROLE = (HouseholdRole.ADMIN, HouseholdRole.MEMBER)
ADMIN_ONLY = (HouseholdRole.ADMIN,)


def wrap_response(data: Any, pagination: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Uniform service result envelope"""
    response = {"data": data}
    if pagination is not None:
        response["pagination"] = pagination
    return response


class BaseService:
    def __init__(self, db: Session, publisher: EventPublisher = None):
        self.db = db
        self.publisher = publisher or NullEventPublisher()

    # Guard
    def verify_membership(
        self,
        household_id: int,
        user_id: int,
        allowed_roles: Iterable[HouseholdRole] = ANY_ROLE,
    ) -> HouseholdMember:
        """Return the caller's membership row or raise UnauthorizedError"""
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

        allowed = {HouseholdRole(role).value for role in allowed_roles}
        if not membership or membership.role not in allowed:
            raise UnauthorizedError(ResponseMessages.ACCESS_DENIED)

        return membership

    def verify_author_or_admin(
        self, household_id: int, user_id: int, author_id: Optional[int]
    ) -> HouseholdMember:
        """Authors may act on their own content, everyone else needs ADMIN"""
        membership = self.verify_membership(household_id, user_id)
        if author_id != user_id and not membership.is_admin:
            raise UnauthorizedError(ResponseMessages.ACCESS_DENIED)
        return membership

    # Unit of work
    @contextmanager
    def transaction(self):
        """Commit everything done inside the block, or nothing at all"""
        try:
            yield self.db
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error, transaction rolled back: {e.orig}")
            raise ConflictError(ResponseMessages.DUPLICATE_RECORD) from e
        except Exception:
            self.db.rollback()
            raise

    # Domain events, only called once the unit of work has committed
    def emit_household_event(
        self, event: str, household_id: int, payload: Dict[str, Any]
    ) -> None:
        self._publish(household_channel(household_id), event, payload)

    def emit_user_event(self, event: str, user_id: int, payload: Dict[str, Any]) -> None:
        self._publish(user_channel(user_id), event, payload)

    def _publish(self, channel: str, event: str, payload: Dict[str, Any]) -> None:
        # Delivery is best effort; a committed mutation is never undone here
        try:
            self.publisher.emit(channel, event, payload)
        except Exception as e:
            logger.error(f"Failed to emit {event} to {channel}: {e}")

    # Pagination
    def paginate_by_cursor(self, query, id_column, params, descending: bool = False):
        """Keyset pagination on an id column, the cursor is the last id seen"""
        if params.cursor is not None:
            query = query.filter(
                id_column < params.cursor if descending else id_column > params.cursor
            )
        query = query.order_by(id_column.desc() if descending else id_column.asc())

        rows = query.limit(params.limit + 1).all()
        has_more = len(rows) > params.limit
        rows = rows[: params.limit]

        pagination = PaginationInfo(
            page_size=params.limit,
            has_more=has_more,
            next_cursor=rows[-1].id if has_more and rows else None,
        )
        return rows, pagination
