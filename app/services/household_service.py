from ..models.enums import HouseholdRole, HouseholdMemberStatus, HouseholdAction, NotificationType
from sqlalchemy.orm import Session
from sqlalchemy import and_, select
from typing import Dict, Any
from datetime import datetime
from ..models.household import Household
from ..models.user import User
from ..models.household_membership import HouseholdMember
from ..models.chore import Chore, ChoreAssignment, ChoreHistory, ChoreSwapRequest, Subtask
from ..models.expense import Expense, ExpenseSplit, ExpenseHistory, Receipt, Transaction
from ..models.event import Event, EventReminder, CalendarEventHistory
from ..models.thread import (
    Thread,
    thread_participants,
    Message,
    Attachment,
    Reaction,
    Mention,
    MessageRead,
)
from ..models.poll import Poll, PollOption, PollVote
from ..models.notification import Notification, NotificationSettings
from ..schemas.household import (
    HouseholdCreate,
    HouseholdUpdate,
    HouseholdResponse,
    HouseholdMemberResponse,
    PendingInvitationResponse,
    AddMemberRequest,
)
from ..utils.constants import ResponseMessages
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


class HouseholdService(BaseService):
    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def create_household(
        self, household_data: HouseholdCreate, creator_id: int
    ) -> Dict[str, Any]:
        """Create a new household with creator as admin"""
        self._get_user_or_raise(creator_id)

        with self.transaction():
            household = Household(**household_data.model_dump())
            self.db.add(household)
            self.db.flush()  # Get ID without committing

            self._create_membership(
                user_id=creator_id,
                household_id=household.id,
                role=HouseholdRole.ADMIN.value,
                is_accepted=True,
                is_selected=True,
            )
            self.db.add(NotificationSettings(household_id=household.id))

        result = self._household_response(household.id)
        self.emit_user_event(
            "household_update",
            creator_id,
            {"action": HouseholdAction.CREATED, "household": result},
        )
        return wrap_response(result)

    def get_household(self, household_id: int, user_id: int) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        return wrap_response(self._household_response(household_id))

    def update_household(
        self, household_id: int, household_update: HouseholdUpdate, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            household = self._get_household_or_raise(household_id)
            for field, value in household_update.model_dump(exclude_unset=True).items():
                setattr(household, field, value)

        result = self._household_response(household_id)
        self.emit_household_event(
            "household_update",
            household_id,
            {"action": HouseholdAction.UPDATED, "household": result},
        )
        return wrap_response(result)

    def delete_household(self, household_id: int, user_id: int) -> Dict[str, Any]:
        """Delete a household and everything it owns in one unit of work"""
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            self._get_household_or_raise(household_id)
            self._delete_household_graph(household_id)

        self.emit_household_event(
            "household_deleted",
            household_id,
            {"action": HouseholdAction.DELETED, "household_id": household_id},
        )
        return wrap_response(None)

    def get_user_households(self, user_id: int) -> Dict[str, Any]:
        """Households the user has joined"""
        households = (
            self.db.query(Household)
            .join(HouseholdMember, HouseholdMember.household_id == Household.id)
            .filter(
                and_(
                    HouseholdMember.user_id == user_id,
                    HouseholdMember.is_accepted == True,
                )
            )
            .options(*projections.HOUSEHOLD_WITH_MEMBERS)
            .order_by(Household.id)
            .all()
        )
        return wrap_response([HouseholdResponse.model_validate(h) for h in households])

    def get_selected_households(self, user_id: int) -> Dict[str, Any]:
        households = (
            self.db.query(Household)
            .join(HouseholdMember, HouseholdMember.household_id == Household.id)
            .filter(
                and_(
                    HouseholdMember.user_id == user_id,
                    HouseholdMember.is_selected == True,
                )
            )
            .options(*projections.HOUSEHOLD_WITH_MEMBERS)
            .order_by(Household.id)
            .all()
        )
        return wrap_response([HouseholdResponse.model_validate(h) for h in households])

    def get_pending_invitations(self, user_id: int) -> Dict[str, Any]:
        """Invitations the user has neither accepted nor rejected"""
        invitations = (
            self.db.query(HouseholdMember)
            .filter(
                and_(
                    HouseholdMember.user_id == user_id,
                    HouseholdMember.is_invited == True,
                    HouseholdMember.is_accepted == False,
                    HouseholdMember.is_rejected == False,
                )
            )
            .options(*projections.MEMBER_WITH_HOUSEHOLD)
            .order_by(HouseholdMember.id)
            .all()
        )
        return wrap_response(
            [PendingInvitationResponse.model_validate(m) for m in invitations]
        )

    # Membership management
    def add_member(
        self, household_id: int, member_data: AddMemberRequest, added_by: int
    ) -> Dict[str, Any]:
        """Add an existing user to the household by email (admin only)"""
        self.verify_membership(household_id, added_by, ADMIN_ONLY)

        with self.transaction():
            user = User.find_by_email(self.db, member_data.email)
            if not user:
                raise NotFoundError(ResponseMessages.USER_NOT_FOUND)

            if self._get_membership(user.id, household_id):
                raise ValidationError("User is already a member of this household")

            membership = self._create_membership(
                user_id=user.id,
                household_id=household_id,
                role=member_data.role.value,
                is_invited=True,
                is_accepted=True,
            )

        result = self._member_response(membership.id)
        self.emit_household_event(
            "member_added",
            household_id,
            {"action": HouseholdAction.MEMBER_ADDED, "member": result},
        )
        return wrap_response(result)

    def remove_member(
        self, household_id: int, member_user_id: int, removed_by: int
    ) -> Dict[str, Any]:
        """Remove member, refusing to leave the household without an admin"""
        self.verify_membership(household_id, removed_by, ADMIN_ONLY)

        with self.transaction():
            membership = self._get_membership(member_user_id, household_id)
            if not membership:
                raise NotFoundError(ResponseMessages.MEMBER_NOT_FOUND)

            if membership.is_admin and self._is_last_admin(household_id):
                raise ValidationError("Cannot remove the last ADMIN from household")

            if member_user_id == removed_by:
                raise ValidationError("Admins cannot remove themselves")

            self.db.query(User).filter(
                and_(User.id == member_user_id, User.active_household_id == household_id)
            ).update({User.active_household_id: None}, synchronize_session=False)
            # Thread participation rows go with the membership
            self.db.delete(membership)

        self.emit_household_event(
            "member_removed",
            household_id,
            {"action": HouseholdAction.MEMBER_REMOVED, "user_id": member_user_id},
        )
        return wrap_response(None)

    def update_member_status(
        self,
        household_id: int,
        member_user_id: int,
        status: HouseholdMemberStatus,
        updated_by: int,
    ) -> Dict[str, Any]:
        """Accept or reject a membership; the member or an admin may do this"""
        caller = self.verify_membership(household_id, updated_by)
        if member_user_id != updated_by and not caller.is_admin:
            raise UnauthorizedError(ResponseMessages.ACCESS_DENIED)

        with self.transaction():
            membership = self._get_membership(member_user_id, household_id)
            if not membership:
                raise NotFoundError(ResponseMessages.MEMBER_NOT_FOUND)

            accepted = status == HouseholdMemberStatus.ACCEPTED
            membership.is_accepted = accepted
            membership.is_rejected = not accepted
            if accepted:
                membership.joined_at = datetime.utcnow()

        result = self._member_response(membership.id)
        self.emit_household_event(
            "member_status_updated",
            household_id,
            {"action": HouseholdAction.MEMBER_STATUS_UPDATED, "member": result},
        )
        return wrap_response(result)

    def update_member_role(
        self,
        household_id: int,
        member_user_id: int,
        new_role: HouseholdRole,
        updated_by: int,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, updated_by, ADMIN_ONLY)

        with self.transaction():
            membership = self._get_membership(member_user_id, household_id)
            if not membership:
                raise NotFoundError(ResponseMessages.MEMBER_NOT_FOUND)

            if (
                membership.is_admin
                and new_role != HouseholdRole.ADMIN
                and self._is_last_admin(household_id)
            ):
                raise ValidationError("Cannot demote the last ADMIN of household")

            membership.role = HouseholdRole(new_role).value

        result = self._member_response(membership.id)
        self.emit_household_event(
            "member_role_updated",
            household_id,
            {"action": HouseholdAction.MEMBER_ROLE_UPDATED, "member": result},
        )
        return wrap_response(result)

    def update_member_selection(
        self, household_id: int, member_user_id: int, is_selected: bool, user_id: int
    ) -> Dict[str, Any]:
        """Toggle whether a household is shown in the user's selection"""
        membership = self.verify_membership(household_id, user_id)
        if member_user_id != user_id:
            raise UnauthorizedError(ResponseMessages.ACCESS_DENIED)

        with self.transaction():
            membership.is_selected = is_selected

        result = self._member_response(membership.id)
        self.emit_user_event(
            "member_selection_updated",
            user_id,
            {"action": HouseholdAction.MEMBER_SELECTION_UPDATED, "member": result},
        )
        return wrap_response(result)

    # Invitations
    def send_invitation(
        self, household_id: int, email: str, invited_by: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, invited_by, ADMIN_ONLY)

        with self.transaction():
            household = self._get_household_or_raise(household_id)
            user = User.find_by_email(self.db, email)
            if not user:
                raise NotFoundError(ResponseMessages.USER_NOT_FOUND)

            if self._get_membership(user.id, household_id):
                raise ValidationError("User is already a member of this household")

            membership = self._create_membership(
                user_id=user.id,
                household_id=household_id,
                role=HouseholdRole.MEMBER.value,
                is_invited=True,
            )
            self.db.add(
                Notification(
                    user_id=user.id,
                    type=NotificationType.OTHER.value,
                    message=f"You have been invited to join {household.name}",
                    related_entity_type="household",
                    related_entity_id=household_id,
                )
            )

        result = self._member_response(membership.id)
        self.emit_user_event(
            "household_invitation",
            user.id,
            {"action": HouseholdAction.INVITATION_SENT, "member": result},
        )
        return wrap_response(result)

    def accept_invitation(self, household_id: int, user_id: int) -> Dict[str, Any]:
        with self.transaction():
            membership = self._get_pending_invitation_or_raise(user_id, household_id)
            membership.is_accepted = True
            membership.is_rejected = False
            membership.joined_at = datetime.utcnow()

        result = self._member_response(membership.id)
        self.emit_household_event(
            "member_status_updated",
            household_id,
            {"action": HouseholdAction.INVITATION_ACCEPTED, "member": result},
        )
        return wrap_response(result)

    def reject_invitation(self, household_id: int, user_id: int) -> Dict[str, Any]:
        with self.transaction():
            membership = self._get_pending_invitation_or_raise(user_id, household_id)
            self.db.delete(membership)

        self.emit_household_event(
            "member_status_updated",
            household_id,
            {"action": HouseholdAction.INVITATION_REJECTED, "user_id": user_id},
        )
        return wrap_response(None)

    # Private helpers
    def _household_response(self, household_id: int) -> HouseholdResponse:
        household = (
            self.db.query(Household)
            .options(*projections.HOUSEHOLD_WITH_MEMBERS)
            .filter(Household.id == household_id)
            .first()
        )
        if not household:
            raise NotFoundError(ResponseMessages.HOUSEHOLD_NOT_FOUND)
        return HouseholdResponse.model_validate(household)

    def _member_response(self, membership_id: int) -> HouseholdMemberResponse:
        membership = (
            self.db.query(HouseholdMember)
            .options(*projections.MEMBER_WITH_USER)
            .filter(HouseholdMember.id == membership_id)
            .first()
        )
        return HouseholdMemberResponse.model_validate(membership)

    def _get_household_or_raise(self, household_id: int) -> Household:
        household = self.db.query(Household).filter(Household.id == household_id).first()
        if not household:
            raise NotFoundError(ResponseMessages.HOUSEHOLD_NOT_FOUND)
        return household

    def _get_user_or_raise(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError(ResponseMessages.USER_NOT_FOUND)
        return user

    def _get_membership(self, user_id: int, household_id: int) -> HouseholdMember:
        return (
            self.db.query(HouseholdMember)
            .filter(
                and_(
                    HouseholdMember.user_id == user_id,
                    HouseholdMember.household_id == household_id,
                )
            )
            .first()
        )

    def _get_pending_invitation_or_raise(
        self, user_id: int, household_id: int
    ) -> HouseholdMember:
        membership = self._get_membership(user_id, household_id)
        if not membership or not membership.is_invited or membership.is_accepted:
            raise NotFoundError("Invitation not found")
        return membership

    def _create_membership(
        self, user_id: int, household_id: int, role: str, **flags
    ) -> HouseholdMember:
        membership = HouseholdMember(
            user_id=user_id, household_id=household_id, role=role, **flags
        )
        self.db.add(membership)
        self.db.flush()
        return membership

    def _is_last_admin(self, household_id: int) -> bool:
        admin_count = (
            self.db.query(HouseholdMember)
            .filter(
                and_(
                    HouseholdMember.household_id == household_id,
                    HouseholdMember.role == HouseholdRole.ADMIN.value,
                )
            )
            .count()
        )
        return admin_count <= 1

    def _delete_household_graph(self, household_id: int):
        """Remove every row owned by the household, children before parents"""
        thread_ids = select(Thread.id).where(Thread.household_id == household_id)
        message_ids = select(Message.id).where(Message.thread_id.in_(thread_ids))
        poll_ids = select(Poll.id).where(Poll.message_id.in_(message_ids))
        chore_ids = select(Chore.id).where(Chore.household_id == household_id)
        event_ids = select(Event.id).where(Event.household_id == household_id)
        expense_ids = select(Expense.id).where(Expense.household_id == household_id)

        bulk = {"synchronize_session": False}

        # Messaging
        self.db.query(PollVote).filter(PollVote.poll_id.in_(poll_ids)).delete(**bulk)
        self.db.query(PollOption).filter(PollOption.poll_id.in_(poll_ids)).delete(**bulk)
        self.db.query(Poll).filter(Poll.message_id.in_(message_ids)).delete(**bulk)
        for model in (Attachment, Reaction, Mention, MessageRead):
            self.db.query(model).filter(model.message_id.in_(message_ids)).delete(**bulk)
        self.db.query(Message).filter(Message.thread_id.in_(thread_ids)).delete(**bulk)
        self.db.execute(
            thread_participants.delete().where(
                thread_participants.c.thread_id.in_(thread_ids)
            )
        )
        self.db.query(Thread).filter(Thread.household_id == household_id).delete(**bulk)

        # Calendar
        self.db.query(EventReminder).filter(EventReminder.event_id.in_(event_ids)).delete(**bulk)
        self.db.query(CalendarEventHistory).filter(
            CalendarEventHistory.event_id.in_(event_ids)
        ).delete(**bulk)
        self.db.query(Event).filter(Event.household_id == household_id).delete(**bulk)

        # Chores
        for model in (ChoreHistory, ChoreSwapRequest, ChoreAssignment, Subtask):
            self.db.query(model).filter(model.chore_id.in_(chore_ids)).delete(**bulk)
        self.db.query(Chore).filter(Chore.household_id == household_id).delete(**bulk)

        # Finance
        for model in (ExpenseSplit, ExpenseHistory, Receipt, Transaction):
            self.db.query(model).filter(model.expense_id.in_(expense_ids)).delete(**bulk)
        self.db.query(Expense).filter(Expense.household_id == household_id).delete(**bulk)

        # Membership
        self.db.query(NotificationSettings).filter(
            NotificationSettings.household_id == household_id
        ).delete(**bulk)
        self.db.query(User).filter(User.active_household_id == household_id).update(
            {User.active_household_id: None}, **bulk
        )
        self.db.query(HouseholdMember).filter(
            HouseholdMember.household_id == household_id
        ).delete(**bulk)
        self.db.query(Household).filter(Household.id == household_id).delete(**bulk)
