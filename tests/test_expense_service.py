"""Tests for expenses, splits, receipts and settlement transactions."""

import pytest

from app.models import Expense, ExpenseHistory
from app.models.enums import ExpenseAction, ExpenseCategory, TransactionStatus
from app.schemas.common import PaginationParams
from app.schemas.expense import (
    ExpenseCreate,
    ExpenseSplitInput,
    ExpenseUpdate,
    ReceiptCreate,
    TransactionCreate,
    TransactionStatusUpdate,
)
from app.services.base import NotFoundError, UnauthorizedError, ValidationError
from app.services.expense_service import ExpenseService
from app.services.transaction_service import TransactionService


def create_expense(db, household_id, admin, member, amount=90.0, **fields):
    data = ExpenseCreate(
        description=fields.pop("description", "Internet"),
        amount=amount,
        splits=[
            ExpenseSplitInput(user_id=admin.id, amount=amount / 2),
            ExpenseSplitInput(user_id=member.id, amount=amount / 2),
        ],
        **fields,
    )
    return ExpenseService(db).create_expense(household_id, data, admin.id)["data"]


class TestExpenses:
    def test_create_with_splits(self, db, household_id, admin, member):
        expense = create_expense(db, household_id, admin, member)

        assert expense.paid_by_id == admin.id
        assert sorted(s.amount for s in expense.splits) == [45.0, 45.0]
        actions = [h.action for h in db.query(ExpenseHistory).all()]
        assert actions == [ExpenseAction.CREATED.value, ExpenseAction.SPLIT.value]

    def test_splits_cannot_exceed_amount(self, db, household_id, admin, member):
        with pytest.raises(ValidationError):
            ExpenseService(db).create_expense(
                household_id,
                ExpenseCreate(
                    description="Rent",
                    amount=100.0,
                    splits=[
                        ExpenseSplitInput(user_id=admin.id, amount=80.0),
                        ExpenseSplitInput(user_id=member.id, amount=40.0),
                    ],
                ),
                admin.id,
            )
        assert db.query(Expense).count() == 0

    def test_member_cannot_delete(self, db, household_id, admin, member, publisher):
        expense = create_expense(db, household_id, admin, member)

        with pytest.raises(UnauthorizedError):
            ExpenseService(db, publisher).delete_expense(household_id, expense.id, member.id)

        assert db.query(Expense).filter(Expense.id == expense.id).one().deleted_at is None
        assert publisher.events == []

    def test_admin_soft_deletes(self, db, household_id, admin, member):
        expense = create_expense(db, household_id, admin, member)
        service = ExpenseService(db)
        service.delete_expense(household_id, expense.id, admin.id)

        with pytest.raises(NotFoundError):
            service.get_expense(household_id, expense.id, admin.id)
        with pytest.raises(NotFoundError):
            service.get_expense_history(household_id, expense.id, admin.id)

    def test_amount_update_revalidates_existing_splits(self, db, household_id, admin, member):
        expense = create_expense(db, household_id, admin, member)
        with pytest.raises(ValidationError):
            ExpenseService(db).update_expense(
                household_id, expense.id, ExpenseUpdate(amount=50.0), admin.id
            )
        assert db.query(Expense).filter(Expense.id == expense.id).one().amount == 90.0

    def test_list_filters_by_category_and_paginates(self, db, household_id, admin, member):
        create_expense(db, household_id, admin, member, category=ExpenseCategory.FOOD)
        create_expense(db, household_id, admin, member, category=ExpenseCategory.RENT)
        create_expense(db, household_id, admin, member, category=ExpenseCategory.FOOD)

        result = ExpenseService(db).get_expenses(
            household_id,
            member.id,
            PaginationParams(page=1, page_size=1),
            category=ExpenseCategory.FOOD,
        )
        assert len(result["data"]) == 1
        assert result["pagination"].total_items == 2
        assert result["pagination"].has_more is True


class TestReceipts:
    def test_upload_and_delete_receipt(self, db, household_id, admin, member, publisher):
        expense = create_expense(db, household_id, admin, member)
        service = ExpenseService(db, publisher)

        receipt = service.upload_receipt(
            household_id,
            expense.id,
            ReceiptCreate(url="https://files.example.com/r.png", file_type="image/png"),
            member.id,
        )["data"]
        assert [r.id for r in service.get_receipts(household_id, expense.id, admin.id)["data"]] == [
            receipt.id
        ]

        service.delete_receipt(household_id, expense.id, receipt.id, admin.id)
        assert publisher.names()[-2:] == ["receipt_uploaded", "receipt_deleted"]

    def test_rejects_unsupported_type(self, db, household_id, admin, member):
        expense = create_expense(db, household_id, admin, member)
        with pytest.raises(ValidationError):
            ExpenseService(db).upload_receipt(
                household_id,
                expense.id,
                ReceiptCreate(url="https://files.example.com/x.exe", file_type="application/x-msdownload"),
                admin.id,
            )


class TestTransactions:
    def test_balance_tracks_pending_transactions(self, db, household_id, admin, member):
        expense = create_expense(db, household_id, admin, member)
        service = TransactionService(db)
        transaction = service.create_transaction(
            household_id,
            TransactionCreate(
                expense_id=expense.id, from_user_id=member.id, to_user_id=admin.id, amount=45.0
            ),
            member.id,
        )["data"]

        assert service.get_user_balance(household_id, member.id)["data"] == {
            "owes": 45.0,
            "owed": 0,
            "net": -45.0,
        }

        service.update_transaction_status(
            household_id,
            transaction.id,
            TransactionStatusUpdate(status=TransactionStatus.COMPLETED),
            member.id,
        )
        assert service.get_user_balance(household_id, admin.id)["data"]["owed"] == 0

    def test_same_user_on_both_sides_is_rejected(self, db, household_id, admin, member):
        expense = create_expense(db, household_id, admin, member)
        with pytest.raises(ValidationError):
            TransactionService(db).create_transaction(
                household_id,
                TransactionCreate(
                    expense_id=expense.id, from_user_id=admin.id, to_user_id=admin.id, amount=5.0
                ),
                admin.id,
            )

    def test_third_party_member_cannot_change_status(
        self, db, household_id, admin, member, make_user
    ):
        from app.models import HouseholdMember

        bystander = make_user(name="Carol")
        db.add(HouseholdMember(user_id=bystander.id, household_id=household_id, is_accepted=True))
        db.commit()

        expense = create_expense(db, household_id, admin, member)
        service = TransactionService(db)
        transaction = service.create_transaction(
            household_id,
            TransactionCreate(
                expense_id=expense.id, from_user_id=member.id, to_user_id=admin.id, amount=45.0
            ),
            admin.id,
        )["data"]

        with pytest.raises(UnauthorizedError):
            service.update_transaction_status(
                household_id,
                transaction.id,
                TransactionStatusUpdate(status=TransactionStatus.COMPLETED),
                bystander.id,
            )
        assert service.get_transactions(
            household_id, admin.id, status=TransactionStatus.PENDING
        )["data"][0].id == transaction.id
