from sqlalchemy.orm import Session
from sqlalchemy import and_, desc
from typing import Dict, List, Any, Optional
from datetime import datetime
from ..models.expense import Expense, ExpenseSplit, ExpenseHistory, Receipt
from ..models.household_membership import HouseholdMember
from ..models.enums import ExpenseAction, ExpenseCategory
from ..schemas.common import PaginationParams
from ..schemas.expense import (
    ExpenseCreate,
    ExpenseUpdate,
    ExpenseResponse,
    ExpenseSplitInput,
    ExpenseHistoryResponse,
    ReceiptCreate,
    ReceiptResponse,
)
from ..utils.constants import ResponseMessages
from ..utils.realtime import EventPublisher
from ..utils.validation import ValidationHelpers
from .base import BaseService, NotFoundError, ValidationError, ADMIN_ONLY, wrap_response
from . import projections


class ExpenseService(BaseService):
    def __init__(self, db: Session, publisher: EventPublisher = None):
        super().__init__(db, publisher)

    def get_expenses(
        self,
        household_id: int,
        user_id: int,
        pagination: PaginationParams = None,
        category: Optional[ExpenseCategory] = None,
    ) -> Dict[str, Any]:
        """Get household expenses with filtering and pagination"""
        self.verify_membership(household_id, user_id)
        pagination = pagination or PaginationParams()

        query = self._expense_query(household_id)
        if category:
            query = query.filter(Expense.category == ExpenseCategory(category).value)

        total_count = query.count()
        expenses = (
            query.options(*projections.EXPENSE_WITH_SPLITS)
            .order_by(desc(Expense.created_at), desc(Expense.id))
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )

        return wrap_response(
            [ExpenseResponse.model_validate(e) for e in expenses],
            pagination.info(total_count),
        )

    def get_expense(self, household_id: int, expense_id: int, user_id: int) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        return wrap_response(self._expense_response(household_id, expense_id))

    def create_expense(
        self, household_id: int, expense_data: ExpenseCreate, user_id: int
    ) -> Dict[str, Any]:
        """Create an expense together with its splits"""
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            paid_by_id = expense_data.paid_by_id or user_id
            self._validate_members(household_id, [paid_by_id])
            self._validate_splits(household_id, expense_data.splits, expense_data.amount)

            expense = Expense(
                household_id=household_id,
                description=expense_data.description,
                amount=expense_data.amount,
                category=expense_data.category.value,
                due_date=expense_data.due_date,
                paid_by_id=paid_by_id,
            )
            self.db.add(expense)
            self.db.flush()

            self._replace_splits(expense, expense_data.splits)
            self._add_history(expense.id, ExpenseAction.CREATED, user_id)
            if expense_data.splits:
                self._add_history(expense.id, ExpenseAction.SPLIT, user_id)

        result = self._expense_response(household_id, expense.id)
        self.emit_household_event(
            "expense_update",
            household_id,
            {"action": ExpenseAction.CREATED, "expense": result},
        )
        return wrap_response(result)

    def update_expense(
        self,
        household_id: int,
        expense_id: int,
        expense_update: ExpenseUpdate,
        user_id: int,
    ) -> Dict[str, Any]:
        """Update an expense; a provided split list replaces the existing splits"""
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            expense = self._get_expense_or_raise(household_id, expense_id)

            changes = expense_update.model_dump(exclude_unset=True, exclude={"splits"})
            if changes.get("paid_by_id") is not None:
                self._validate_members(household_id, [changes["paid_by_id"]])
            for field, value in changes.items():
                if value is None and field in ("description", "amount", "category"):
                    continue
                setattr(expense, field, value.value if hasattr(value, "value") else value)

            if expense_update.splits is not None:
                self._validate_splits(household_id, expense_update.splits, expense.amount)
                self._replace_splits(expense, expense_update.splits)
                self._add_history(expense.id, ExpenseAction.SPLIT, user_id)
            elif "amount" in changes:
                self.db.flush()
                current = [
                    ExpenseSplitInput(user_id=s.user_id, amount=s.amount)
                    for s in expense.splits
                ]
                self._validate_splits(household_id, current, expense.amount)

            self._add_history(expense.id, ExpenseAction.UPDATED, user_id)

        result = self._expense_response(household_id, expense_id)
        self.emit_household_event(
            "expense_update",
            household_id,
            {"action": ExpenseAction.UPDATED, "expense": result},
        )
        return wrap_response(result)

    def delete_expense(self, household_id: int, expense_id: int, user_id: int) -> Dict[str, Any]:
        """Soft delete an expense"""
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            expense = self._get_expense_or_raise(household_id, expense_id)
            expense.deleted_at = datetime.utcnow()
            self._add_history(expense.id, ExpenseAction.DELETED, user_id)

        self.emit_household_event(
            "expense_update",
            household_id,
            {"action": ExpenseAction.DELETED, "expense_id": expense_id},
        )
        return wrap_response(None)

    def get_expense_history(
        self, household_id: int, expense_id: int, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        expense = self._get_expense_or_raise(household_id, expense_id)
        return wrap_response(
            [ExpenseHistoryResponse.model_validate(h) for h in expense.history]
        )

    # Receipts
    def get_receipts(self, household_id: int, expense_id: int, user_id: int) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        expense = self._get_expense_or_raise(household_id, expense_id)
        return wrap_response([ReceiptResponse.model_validate(r) for r in expense.receipts])

    def get_receipt(
        self, household_id: int, expense_id: int, receipt_id: int, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id)
        receipt = self._get_receipt_or_raise(household_id, expense_id, receipt_id)
        return wrap_response(ReceiptResponse.model_validate(receipt))

    def upload_receipt(
        self,
        household_id: int,
        expense_id: int,
        receipt_data: ReceiptCreate,
        user_id: int,
    ) -> Dict[str, Any]:
        """Attach a receipt (already stored elsewhere) to an expense"""
        self.verify_membership(household_id, user_id)

        file_check = ValidationHelpers.validate_file(
            receipt_data.file_type, receipt_data.file_size
        )
        if not file_check["valid"]:
            raise ValidationError(file_check["error"])

        with self.transaction():
            expense = self._get_expense_or_raise(household_id, expense_id)
            receipt = Receipt(
                expense_id=expense.id,
                url=receipt_data.url,
                file_type=receipt_data.file_type,
            )
            self.db.add(receipt)
            self._add_history(expense.id, ExpenseAction.RECEIPT_UPLOADED, user_id)

        result = ReceiptResponse.model_validate(receipt)
        self.emit_household_event(
            "receipt_uploaded",
            household_id,
            {"action": ExpenseAction.RECEIPT_UPLOADED, "receipt": result},
        )
        return wrap_response(result)

    def delete_receipt(
        self, household_id: int, expense_id: int, receipt_id: int, user_id: int
    ) -> Dict[str, Any]:
        self.verify_membership(household_id, user_id, ADMIN_ONLY)

        with self.transaction():
            receipt = self._get_receipt_or_raise(household_id, expense_id, receipt_id)
            self.db.delete(receipt)
            self._add_history(expense_id, ExpenseAction.UPDATED, user_id)

        self.emit_household_event(
            "receipt_deleted",
            household_id,
            {
                "action": ExpenseAction.UPDATED,
                "receipt_id": receipt_id,
                "expense_id": expense_id,
            },
        )
        return wrap_response(None)

    # Private helpers
    def _expense_query(self, household_id: int):
        return self.db.query(Expense).filter(
            and_(Expense.household_id == household_id, Expense.deleted_at.is_(None))
        )

    def _get_expense_or_raise(self, household_id: int, expense_id: int) -> Expense:
        expense = self._expense_query(household_id).filter(Expense.id == expense_id).first()
        if not expense:
            raise NotFoundError(ResponseMessages.EXPENSE_NOT_FOUND)
        return expense

    def _get_receipt_or_raise(
        self, household_id: int, expense_id: int, receipt_id: int
    ) -> Receipt:
        receipt = (
            self.db.query(Receipt)
            .join(Expense, Receipt.expense_id == Expense.id)
            .filter(
                and_(
                    Receipt.id == receipt_id,
                    Receipt.expense_id == expense_id,
                    Expense.household_id == household_id,
                    Expense.deleted_at.is_(None),
                )
            )
            .first()
        )
        if not receipt:
            raise NotFoundError(ResponseMessages.RECEIPT_NOT_FOUND)
        return receipt

    def _expense_response(self, household_id: int, expense_id: int) -> ExpenseResponse:
        expense = (
            self._expense_query(household_id)
            .options(*projections.EXPENSE_WITH_SPLITS)
            .filter(Expense.id == expense_id)
            .first()
        )
        if not expense:
            raise NotFoundError(ResponseMessages.EXPENSE_NOT_FOUND)
        return ExpenseResponse.model_validate(expense)

    def _validate_members(self, household_id: int, user_ids: List[int]):
        unique_ids = set(user_ids)
        member_count = (
            self.db.query(HouseholdMember)
            .filter(
                and_(
                    HouseholdMember.household_id == household_id,
                    HouseholdMember.user_id.in_(unique_ids),
                )
            )
            .count()
        )
        if member_count != len(unique_ids):
            raise ValidationError("Users must be members of this household")

    def _validate_splits(
        self, household_id: int, splits: List[ExpenseSplitInput], total_amount: float
    ):
        if not splits:
            return
        result = ValidationHelpers.validate_splits(splits, total_amount)
        if not result["valid"]:
            raise ValidationError("; ".join(result["errors"]))
        self._validate_members(household_id, [s.user_id for s in splits])

    def _replace_splits(self, expense: Expense, splits: List[ExpenseSplitInput]):
        expense.splits = [
            ExpenseSplit(
                user_id=split.user_id,
                amount=ValidationHelpers.round_currency(split.amount),
            )
            for split in splits
        ]

    def _add_history(self, expense_id: int, action: ExpenseAction, user_id: int):
        self.db.add(
            ExpenseHistory(expense_id=expense_id, action=action.value, changed_by_id=user_id)
        )
