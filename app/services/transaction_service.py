from sqlalchemy.orm import Session
from sqlalchemy import and_, desc, or_
from typing import Dict, Any, Optional
from ..models.expense import Expense, Transaction
from ..models.household_membership import HouseholdMember
from ..models.enums import TransactionAction, TransactionStatus
from ..schemas.expense import TransactionCreate, TransactionStatusUpdate, TransactionResponse
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


class TransactionService(BaseService):
    """Settlements between members for household expenses"""

    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def get_transactions(
        self,
        household_id: int,
        user_id: int,
        status: Optional[TransactionStatus] = None,
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        query = self._transaction_query(household_id)
        if status:
            query = query.filter(Transaction.status == TransactionStatus(status).value)

        transactions = query.order_by(desc(Transaction.created_at), desc(Transaction.id)).all()
        return wrap_response([TransactionResponse.model_validate(t) for t in transactions])

    def create_transaction(
        self, household_id: int, transaction_data: TransactionCreate, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)

        if transaction_data.from_user_id == transaction_data.to_user_id:
            raise ValidationError("A transaction needs two different users")

        with self.transaction():
            expense = (
                self.db.query(Expense)
                .filter(
                    and_(
                        Expense.id == transaction_data.expense_id,
                        Expense.household_id == household_id,
                        Expense.deleted_at.is_(None),
                    )
                )
                .first()
            )
            if not expense:
                raise NotFoundError(ResponseMessages.EXPENSE_NOT_FOUND)

            party_ids = {transaction_data.from_user_id, transaction_data.to_user_id}
            member_count = (
                self.db.query(HouseholdMember)
                .filter(
                    and_(
                        HouseholdMember.household_id == household_id,
                        HouseholdMember.user_id.in_(party_ids),
                    )
                )
                .count()
            )
            if member_count != len(party_ids):
                raise ValidationError("Both users must be members of this household")

            transaction = Transaction(
                expense_id=expense.id,
                from_user_id=transaction_data.from_user_id,
                to_user_id=transaction_data.to_user_id,
                amount=transaction_data.amount,
                status=transaction_data.status.value,
            )
            self.db.add(transaction)

        result = TransactionResponse.model_validate(transaction)
        self.emit_household_event(
            "transaction_update",
            household_id,
            {"action": TransactionAction.CREATED, "transaction": result},
        )
        return wrap_response(result)

    def update_transaction_status(
        self,
        household_id: int,
        transaction_id: int,
        status_update: TransactionStatusUpdate,
        user_id: int,
    ) -> Dict[str, Any]:
        """Admins and either party to the transaction may change its status"""
        membership = self.verify_membership(household_id, user_id)

        with self.transaction():
            transaction = self._get_transaction_or_raise(household_id, transaction_id)
            parties = (transaction.from_user_id, transaction.to_user_id)
            if not membership.is_admin and user_id not in parties:
                raise UnauthorizedError(ResponseMessages.ACCESS_DENIED)

            transaction.status = status_update.status.value

        result = TransactionResponse.model_validate(transaction)
        self.emit_household_event(
            "transaction_update",
            household_id,
            {"action": TransactionAction.UPDATED, "transaction": result},
        )
        return wrap_response(result)

    def delete_transaction(
        self, household_id: int, transaction_id: int, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            transaction = self._get_transaction_or_raise(household_id, transaction_id)
            self.db.delete(transaction)

        self.emit_household_event(
            "transaction_update",
            household_id,
            {"action": TransactionAction.DELETED, "transaction_id": transaction_id},
        )
        return wrap_response(None)

    def get_user_balance(self, household_id: int, user_id: int) -> Dict[str, Any]:
        """Pending amounts the user owes and is owed in a household"""
        self.verify_membership(household_id, user_id)

        pending = (
            self._transaction_query(household_id)
            .filter(
                and_(
                    Transaction.status == TransactionStatus.PENDING.value,
                    or_(
                        Transaction.from_user_id == user_id,
                        Transaction.to_user_id == user_id,
                    ),
                )
            )
            .all()
        )
        owes = sum(t.amount for t in pending if t.from_user_id == user_id)
        owed = sum(t.amount for t in pending if t.to_user_id == user_id)
        return wrap_response(
            {
                "owes": round(owes, 2),
                "owed": round(owed, 2),
                "net": round(owed - owes, 2),
            }
        )

    # Private helpers
    def _transaction_query(self, household_id: int):
        return self.db.query(Transaction).join(
            Expense, Transaction.expense_id == Expense.id
        ).filter(Expense.household_id == household_id)

    def _get_transaction_or_raise(self, household_id: int, transaction_id: int) -> Transaction:
        transaction = (
            self._transaction_query(household_id)
            .filter(Transaction.id == transaction_id)
            .first()
        )
        if not transaction:
            raise NotFoundError(ResponseMessages.TRANSACTION_NOT_FOUND)
        return transaction
