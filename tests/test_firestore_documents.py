"""Tests for Firestore document conversion (no Firestore connection needed)."""

from datetime import date, datetime
from decimal import Decimal

from src.models.budget import Budget, BudgetMode
from src.models.transaction import Expense, Income, IncomeFrequency
from src.services.storage.firestore import (
    budget_to_document,
    document_to_budget,
    document_to_expense,
    document_to_income,
    expense_to_document,
    income_to_document,
)


class TestExpenseDocuments:

    def test_uses_camel_case_fields(self):
        doc = expense_to_document(Expense(
            user_id="u1",
            category="Shopping",
            description="Shoes",
            amount=Decimal("59.99"),
            date=date(2024, 3, 5),
        ))
        assert doc == {
            "userId": "u1",
            "category": "Shopping",
            "description": "Shoes",
            "amount": 59.99,
            "date": "2024-03-05",
        }

    def test_reads_stored_document(self):
        expense = document_to_expense("doc1", {
            "userId": "u1",
            "category": "Shopping",
            "amount": 59.99,
            "date": "2024-03-05T10:00:00.000Z",
            "createdAt": datetime(2024, 3, 5, 10, 0),
        })
        assert expense.id == "doc1"
        assert expense.amount == Decimal("59.99")
        assert expense.date == date(2024, 3, 5)
        assert expense.description == ""
        assert expense.updated_at is None

    def test_extra_decimals_rounded_to_cents(self):
        """Amounts written by other clients may carry more than two decimals."""
        expense = document_to_expense("doc2", {
            "userId": "u1",
            "category": "Other",
            "amount": 10.555,
            "date": "2024-03-05",
        })
        assert expense.amount == Decimal("10.56")


class TestIncomeDocuments:

    def test_frequency_round_trip_value(self):
        doc = income_to_document(Income(
            user_id="u1",
            source="Freelance",
            amount=Decimal("400"),
            date=date(2024, 3, 2),
            frequency=IncomeFrequency.BI_WEEKLY,
        ))
        assert doc["frequency"] == "bi-weekly"

    def test_missing_frequency_defaults_to_monthly(self):
        income = document_to_income("i1", {
            "userId": "u1",
            "source": "Salary",
            "amount": 3000,
            "date": "2024-03-01",
        })
        assert income.frequency == IncomeFrequency.MONTHLY
        assert income.amount == Decimal("3000")

    def test_extra_decimals_rounded_to_cents(self):
        income = document_to_income("i2", {
            "userId": "u1",
            "source": "Salary",
            "amount": 3000.125,
            "date": "2024-03-01",
        })
        assert income.amount == Decimal("3000.13")


class TestBudgetDocuments:

    def test_budget_document(self):
        doc = budget_to_document(Budget(
            user_id="u1",
            month="2024-03",
            total_budget=Decimal("500"),
            category_budgets={"Food & Dining": Decimal("200")},
        ))
        assert doc["totalBudget"] == 500.0
        assert doc["categoryBudgets"] == {"Food & Dining": 200.0}
        assert doc["budgetMode"] == "category"

    def test_reads_legacy_budget_without_mode(self):
        budget = document_to_budget({
            "userId": "u1",
            "month": "2024-03",
            "totalBudget": 500,
            "categoryBudgets": {"Food & Dining": 200.5},
        })
        assert budget.budget_mode == BudgetMode.CATEGORY
        assert budget.category_budgets["Food & Dining"] == Decimal("200.5")
