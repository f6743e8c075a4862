"""Tests for form validation and the budget form."""

import pytest
from decimal import Decimal

from src.models.budget import BudgetMode
from src.models.transaction import EXPENSE_CATEGORIES
from src.validation import FormValidator, build_budget, parse_amount


@pytest.fixture
def validator():
    return FormValidator(min_password_length=6)


class TestParseAmount:

    @pytest.mark.parametrize("text, expected", [
        ("12", Decimal("12.00")),
        ("12.5", Decimal("12.50")),
        (" 1,250.75 ", Decimal("1250.75")),
        ("$40", Decimal("40.00")),
        ("7.129", Decimal("7.13")),
    ])
    def test_parses(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", [None, "", "   ", "abc", "NaN", "Infinity", "1.2.3"])
    def test_unreadable_is_none(self, text):
        assert parse_amount(text) is None

    @pytest.mark.parametrize("text", ["1e30", "9" * 29])
    def test_too_large_to_round_is_none(self, text):
        """Amounts with more digits than cents can be kept for are unreadable."""
        assert parse_amount(text) is None


class TestSignInForm:

    def test_valid(self, validator):
        assert validator.validate_sign_in("a@b.com", "secret").is_valid

    def test_missing_email(self, validator):
        result = validator.validate_sign_in("  ", "secret")
        assert result.first_error == "Please enter your email"

    def test_email_without_at(self, validator):
        result = validator.validate_sign_in("ab.com", "secret")
        assert result.first_error == "Please enter a valid email address"

    def test_missing_password(self, validator):
        result = validator.validate_sign_in("a@b.com", "")
        assert result.first_error == "Please enter your password"


class TestSignUpForm:

    def test_valid(self, validator):
        result = validator.validate_sign_up("Ana", "ana@example.com", "secret1", "secret1")
        assert result.is_valid
        assert result.form == "sign_up"

    def test_name_checked_first(self, validator):
        result = validator.validate_sign_up("", "", "x", "y")
        assert result.first_error == "Please enter your name"
        assert result.error_count == 4

    def test_short_password(self, validator):
        result = validator.validate_sign_up("Ana", "ana@example.com", "12345", "12345")
        assert result.first_error == "Password must be at least 6 characters long"

    def test_password_mismatch(self, validator):
        result = validator.validate_sign_up("Ana", "ana@example.com", "secret1", "secret2")
        assert result.first_error == "Passwords do not match"

    def test_min_length_is_configurable(self):
        result = FormValidator(min_password_length=10).validate_sign_up("Ana", "a@b.c", "secret1", "secret1")
        assert result.first_error == "Password must be at least 10 characters long"


class TestTransactionForm:

    def test_valid(self, validator):
        result = validator.validate_transaction("expense", "Lunch", "12.50", "Food & Dining")
        assert result.is_valid

    def test_blank_description(self, validator):
        result = validator.validate_transaction("expense", " ", "12.50", "Food & Dining")
        assert result.first_error == "Please fill in all fields"

    def test_blank_amount(self, validator):
        result = validator.validate_transaction("income", "Salary", "", "Salary")
        assert result.first_error == "Please fill in all fields"

    @pytest.mark.parametrize("amount", ["abc", "0", "-5"])
    def test_invalid_amount(self, validator, amount):
        result = validator.validate_transaction("expense", "Lunch", amount, "Food & Dining")
        assert result.first_error == "Please enter a valid amount"

    @pytest.mark.parametrize("amount", ["1e30", "99999999999999999999999999999"])
    def test_oversized_amount(self, validator, amount):
        result = validator.validate_transaction("expense", "Lunch", amount, "Food & Dining")
        assert result.first_error == "Please enter a valid amount"


class TestBuildBudget:

    def test_category_mode_sums_categories(self):
        budget = build_budget(
            user_id="u1",
            month="2024-03",
            mode=BudgetMode.CATEGORY,
            category_texts={"Food & Dining": "200", "Shopping": "50.5", "Other": "abc"},
        )
        assert budget.total_budget == Decimal("250.50")
        assert budget.category_budgets["Food & Dining"] == Decimal("200")
        assert budget.category_budgets["Other"] == Decimal("0")
        assert set(budget.category_budgets) == {c.name for c in EXPENSE_CATEGORIES}

    def test_category_mode_ignores_typed_total(self):
        budget = build_budget("u1", "2024-03", BudgetMode.CATEGORY, total_text="999", category_texts={})
        assert budget.total_budget == Decimal("0")

    def test_total_mode_zeroes_categories(self):
        budget = build_budget(
            "u1",
            "2024-03",
            BudgetMode.TOTAL,
            total_text="1,500",
            category_texts={"Food & Dining": "200"},
        )
        assert budget.total_budget == Decimal("1500")
        assert budget.budget_mode == BudgetMode.TOTAL
        assert all(amount == 0 for amount in budget.category_budgets.values())

    def test_total_mode_blank_total_is_zero(self):
        budget = build_budget("u1", "2024-03", BudgetMode.TOTAL, total_text="")
        assert budget.total_budget == Decimal("0")

    def test_oversized_total_is_zero(self):
        budget = build_budget("u1", "2024-03", BudgetMode.TOTAL, total_text="1e30")
        assert budget.total_budget == Decimal("0")

    def test_negative_amounts_count_as_zero(self):
        budget = build_budget("u1", "2024-03", BudgetMode.CATEGORY, category_texts={"Other": "-20"})
        assert budget.category_budgets["Other"] == Decimal("0")
