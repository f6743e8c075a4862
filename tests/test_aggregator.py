"""
Tests for budget aggregation.

The aggregator is pure: every test builds its inputs in memory.
"""

import pytest
from datetime import date
from decimal import Decimal

from src.budgets.aggregator import (
    ON_TRACK_COLOR,
    OVER_BUDGET_COLOR,
    WARNING_COLOR,
    BudgetAggregator,
    filter_by_month,
    group_by_label,
    net_income,
    percentage,
    total_for_month,
    usage_color,
)
from src.models.budget import Budget
from src.models.transaction import EXPENSE_CATEGORIES, INCOME_SOURCES, Expense, Income


def expense(category: str, amount: str, day: date = date(2024, 3, 10)) -> Expense:
    return Expense(user_id="u1", category=category, amount=Decimal(amount), date=day)


def income(source: str, amount: str, day: date = date(2024, 3, 1)) -> Income:
    return Income(user_id="u1", source=source, amount=Decimal(amount), date=day)


@pytest.fixture
def aggregator():
    return BudgetAggregator()


@pytest.fixture
def march_budget():
    return Budget(
        user_id="u1",
        month="2024-03",
        total_budget=Decimal("500"),
        category_budgets={"Food & Dining": Decimal("200")},
    )


class TestSummarize:

    def test_worked_example(self, aggregator, march_budget):
        """Budget 500 with Food 200; expenses Food 50, Food 30, Other 20."""
        expenses = [
            expense("Food & Dining", "50"),
            expense("Food & Dining", "30"),
            expense("Other", "20"),
        ]
        summary = aggregator.summarize(march_budget, expenses, "2024-03")

        assert summary.total_spent == Decimal("100")
        assert summary.remaining == Decimal("400")
        assert summary.percentage_used == Decimal("20")

        food = summary.category_breakdown["Food & Dining"]
        assert food.budgeted == Decimal("200")
        assert food.spent == Decimal("80")
        assert food.remaining == Decimal("120")
        assert food.percentage_used == Decimal("40")

    def test_unbudgeted_categories_excluded_from_breakdown(self, aggregator, march_budget):
        summary = aggregator.summarize(march_budget, [expense("Shopping", "75")], "2024-03")
        assert set(summary.category_breakdown) == {"Food & Dining"}
        assert summary.total_spent == Decimal("75")

    def test_other_months_ignored(self, aggregator, march_budget):
        expenses = [
            expense("Food & Dining", "10", date(2024, 3, 1)),
            expense("Food & Dining", "20", date(2024, 3, 31)),
            expense("Food & Dining", "999", date(2024, 2, 29)),
            expense("Food & Dining", "999", date(2024, 4, 1)),
        ]
        summary = aggregator.summarize(march_budget, expenses, "2024-03")
        assert summary.total_spent == Decimal("30")
        assert summary.category_breakdown["Food & Dining"].spent == Decimal("30")

    def test_zero_budget_reports_zero_percent(self, aggregator):
        budget = Budget(
            user_id="u1",
            month="2024-03",
            total_budget=Decimal("0"),
            category_budgets={"Other": Decimal("0")},
        )
        summary = aggregator.summarize(budget, [expense("Other", "40")], "2024-03")
        assert summary.percentage_used == Decimal("0")
        assert summary.remaining == Decimal("-40")
        assert summary.category_breakdown["Other"].percentage_used == Decimal("0")

    def test_overspend_goes_negative(self, aggregator, march_budget):
        summary = aggregator.summarize(march_budget, [expense("Food & Dining", "620.55")], "2024-03")
        assert summary.remaining == Decimal("-120.55")
        assert summary.is_over_budget
        assert summary.category_breakdown["Food & Dining"].is_over_budget

    def test_remaining_is_exact(self, aggregator):
        budget = Budget(user_id="u1", month="2024-03", total_budget=Decimal("0.30"))
        expenses = [expense("Other", "0.10"), expense("Other", "0.20")]
        summary = aggregator.summarize(budget, expenses, "2024-03")
        assert summary.remaining == Decimal("0")

    def test_month_defaults_to_budget_month(self, aggregator, march_budget):
        summary = aggregator.summarize(march_budget, [expense("Other", "5")])
        assert summary.month == "2024-03"
        assert summary.total_spent == Decimal("5")

    def test_total_income(self, aggregator, march_budget):
        entries = [income("Salary", "3000"), income("Gifts", "50", date(2024, 2, 1))]
        summary = aggregator.summarize(march_budget, [], "2024-03", income=entries)
        assert summary.total_income == Decimal("3000")

    def test_idempotent(self, aggregator, march_budget):
        expenses = [expense("Food & Dining", "12.34"), expense("Other", "1")]
        first = aggregator.summarize(march_budget, expenses, "2024-03")
        second = aggregator.summarize(march_budget, expenses, "2024-03")
        assert first == second


class TestSpendingByCategory:

    def test_lists_every_spent_category_largest_first(self, aggregator):
        expenses = [
            expense("Other", "20"),
            expense("Shopping", "75"),
            expense("Shopping", "5"),
            expense("Healthcare", "0"),
            expense("Transportation", "20"),
            expense("Food & Dining", "999", date(2024, 4, 2)),
        ]
        spending = aggregator.spending_by_category(expenses, "2024-03")

        assert [s.category for s in spending] == ["Shopping", "Other", "Transportation"]
        assert spending[0].spent == Decimal("80")
        assert spending[0].count == 2

    def test_empty_month(self, aggregator):
        assert aggregator.spending_by_category([], "2024-03") == []


class TestListHelpers:

    def test_filter_by_month(self):
        entries = [expense("Other", "1", date(2024, 3, 31)), expense("Other", "1", date(2024, 4, 1))]
        assert len(filter_by_month(entries, "2024-03")) == 1

    def test_total_for_month(self):
        entries = [expense("Other", "10.10"), expense("Other", "0.90"), expense("Other", "5", date(2023, 3, 10))]
        assert total_for_month(entries, "2024-03") == Decimal("11.00")

    def test_percentage(self):
        assert percentage(Decimal("50"), Decimal("200")) == Decimal("25")
        assert percentage(Decimal("50"), Decimal("0")) == Decimal("0")

    def test_net_income_can_be_negative(self):
        result = net_income(
            [income("Salary", "100")],
            [expense("Other", "150")],
            "2024-03",
        )
        assert result == Decimal("-50")

    def test_group_by_label_follows_option_order(self):
        entries = [expense("Other", "5"), expense("Food & Dining", "7"), expense("Food & Dining", "3")]
        groups = group_by_label(entries, "2024-03", EXPENSE_CATEGORIES)

        assert [g.option.name for g in groups] == [c.name for c in EXPENSE_CATEGORIES]
        assert groups[0].total == Decimal("10")
        assert groups[0].count == 2
        assert groups[-1].total == Decimal("5")

    def test_group_by_label_without_empty(self):
        groups = group_by_label([income("Freelance", "400")], "2024-03", INCOME_SOURCES, include_empty=False)
        assert [g.option.name for g in groups] == ["Freelance"]


class TestUsageColor:

    @pytest.mark.parametrize("used, color", [
        (Decimal("0"), ON_TRACK_COLOR),
        (Decimal("79.9"), ON_TRACK_COLOR),
        (Decimal("80"), WARNING_COLOR),
        (Decimal("99.99"), WARNING_COLOR),
        (Decimal("100"), OVER_BUDGET_COLOR),
        (Decimal("250"), OVER_BUDGET_COLOR),
    ])
    def test_thresholds(self, used, color):
        assert usage_color(used) == color

    def test_custom_warning_level(self):
        assert usage_color(Decimal("60"), warning_percentage=50) == WARNING_COLOR
