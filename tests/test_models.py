"""
Tests for Budget Tracker models

Test strategy:
1. Unit tests for individual components (models, aggregator, forms)
2. Flow tests against the in-memory backend
3. No real API calls in tests (httpx.MockTransport for auth)
"""

import json

import pytest
from datetime import date
from decimal import Decimal

from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from src.models.budget import Budget, BudgetMode, BudgetSummary, budget_document_id
from src.models.transaction import (
    EXPENSE_CATEGORIES,
    INCOME_SOURCES,
    Expense,
    Income,
    IncomeFrequency,
    Transaction,
)
from src.models.user import AuthSession, UserProfile
from src.models.validation import ValidationIssue, ValidationResult


class TestTransactionModels:
    """Tests for expense and income models."""

    def test_expense_creation(self):
        """Test Expense model creation."""
        expense = Expense(
            user_id="u1",
            category="Food & Dining",
            description="Lunch",
            amount=Decimal("12.50"),
            date=date(2024, 3, 5),
        )
        assert expense.label == "Food & Dining"
        assert expense.month == "2024-03"
        assert expense.id is None

    def test_description_whitespace_stripped(self):
        expense = Expense(
            user_id="u1",
            category="Other",
            description="  Coffee  ",
            amount=Decimal("3"),
            date=date(2024, 3, 5),
        )
        assert expense.description == "Coffee"

    def test_base_transaction_is_abstract(self):
        """Only expenses and income have a label, so the base cannot be built."""
        with pytest.raises(TypeError):
            Transaction(user_id="u1", amount=Decimal("3"), date=date(2024, 3, 5))

    def test_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Expense(
                user_id="u1",
                category="Other",
                amount=Decimal("-1"),
                date=date(2024, 3, 5),
            )

    def test_rejects_sub_cent_amount(self):
        with pytest.raises(ValueError):
            Expense(
                user_id="u1",
                category="Other",
                amount=Decimal("1.005"),
                date=date(2024, 3, 5),
            )

    def test_income_defaults_to_monthly(self):
        income = Income(
            user_id="u1",
            source="Salary",
            amount=Decimal("3000"),
            date=date(2024, 3, 1),
        )
        assert income.frequency == IncomeFrequency.MONTHLY
        assert income.label == "Salary"

    def test_frequency_labels(self):
        assert IncomeFrequency.BI_WEEKLY.label == "Bi-Weekly"
        assert IncomeFrequency.ONE_TIME.label == "One Time"

    def test_predefined_labels(self):
        assert [c.name for c in EXPENSE_CATEGORIES][0] == "Food & Dining"
        assert len(EXPENSE_CATEGORIES) == 7
        assert "Salary" in [s.name for s in INCOME_SOURCES]


class TestBudgetModels:
    """Tests for budget models."""

    def test_budget_document_id(self):
        budget = Budget(user_id="u1", month="2024-03", total_budget=Decimal("500"))
        assert budget.document_id == "u1_2024-03"
        assert budget_document_id("u1", "2024-03") == "u1_2024-03"
        assert budget.budget_mode == BudgetMode.CATEGORY

    @pytest.mark.parametrize("month", ["2024-13", "2024-3", "24-03", "2024-00"])
    def test_rejects_bad_month_key(self, month):
        with pytest.raises(ValueError):
            Budget(user_id="u1", month=month, total_budget=Decimal("1"))

    def test_rejects_negative_category_budget(self):
        with pytest.raises(ValueError):
            Budget(
                user_id="u1",
                month="2024-03",
                total_budget=Decimal("10"),
                category_budgets={"Other": Decimal("-5")},
            )

    def test_summary_over_budget(self):
        summary = BudgetSummary(
            month="2024-03",
            total_budget=Decimal("100"),
            total_spent=Decimal("150"),
            remaining=Decimal("-50"),
            percentage_used=Decimal("150"),
        )
        assert summary.is_over_budget


class TestUserModels:
    def test_session_tokens_hidden_from_repr(self):
        session = AuthSession(uid="u1", email="a@b.c", id_token="secret-token")
        assert "secret-token" not in repr(session)

    def test_profile_requires_name(self):
        with pytest.raises(ValueError):
            UserProfile(uid="u1", name="   ")


class TestValidationModels:
    def test_first_error_skips_warnings(self):
        result = ValidationResult(form="expense", issues=[
            ValidationIssue(field="a", issue_type="x", message="warn", severity="warning"),
            ValidationIssue(field="b", issue_type="y", message="boom"),
        ])
        assert not result.is_valid
        assert result.error_count == 1
        assert result.first_error == "boom"

    def test_empty_result_is_valid(self):
        result = ValidationResult(form="sign_in")
        assert result.is_valid
        assert result.first_error is None


class TestAuditModels:
    """Tests for audit-related models."""

    def test_transaction_event_type(self):
        event = AuditEventBuilder.transaction_changed(
            kind="expense",
            action="added",
            user_id="u1",
            entry_id="e1",
            label="Food & Dining",
            amount="12.50",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.entity_id == "e1"
        assert event.details == {"label": "Food & Dining", "amount": "12.50"}

    def test_income_deleted_event(self):
        event = AuditEventBuilder.transaction_changed("income", "deleted", "u1", "i1")
        assert event.event_type == AuditEventType.INCOME_DELETED
        assert event.details == {}

    def test_auth_failed_is_warning(self):
        event = AuditEventBuilder.auth_failed(
            action="sign_in",
            email="a@b.c",
            error_code="INVALID_PASSWORD",
            error_message="Incorrect password.",
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.error_code == "INVALID_PASSWORD"
        assert event.user_id is None

    def test_to_document_serializes_details(self):
        event = AuditEventBuilder.budget_saved("u1", "2024-03", "500", "category")
        doc = event.to_document()
        assert doc["eventType"] == "budget_saved"
        assert doc["entityId"] == "u1_2024-03"
        assert json.loads(doc["detailsJson"])["total_budget"] == "500"

    def test_to_log_dict(self):
        event = AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            description="Storage error during add",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "storage_error"
        assert log_dict["correlation_id"] is None
