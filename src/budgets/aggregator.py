"""
Budget Aggregation

DESIGN DECISION: Aggregation is DETERMINISTIC and side-effect free.
Screens fetch the budget and the transaction lists, then hand them to this
module. Nothing here touches storage, so the same inputs always produce
the same summary.

Two views are kept separate on purpose:
- summarize(): strict spend-vs-budget, breakdown limited to the budget's
  own categories.
- spending_by_category(): every category with non-zero spend in the month,
  whatever the budget says.
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Optional

from src.budgets.months import month_bounds
from src.models.budget import (
    Budget,
    BudgetSummary,
    CategorySpending,
    CategorySummary,
)
from src.models.transaction import (
    Expense,
    Income,
    LabelGroup,
    LabelOption,
    Transaction,
)


ZERO = Decimal("0")
HUNDRED = Decimal("100")


def filter_by_month(
    transactions: Iterable[Transaction],
    month: str,
) -> list[Transaction]:
    """Entries whose date falls between the first and last day of month."""
    first, last = month_bounds(month)
    return [t for t in transactions if first <= t.date <= last]


def sum_amounts(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def total_for_month(transactions: Iterable[Transaction], month: str) -> Decimal:
    return sum_amounts(filter_by_month(transactions, month))


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole * 100, or 0 when whole is not positive."""
    if whole > 0:
        return part / whole * HUNDRED
    return ZERO


def net_income(
    income: Iterable[Income],
    expenses: Iterable[Expense],
    month: str,
) -> Decimal:
    """Month's income total minus month's expense total (may be negative)."""
    return total_for_month(income, month) - total_for_month(expenses, month)


def group_by_label(
    transactions: Iterable[Transaction],
    month: str,
    options: Sequence[LabelOption],
    include_empty: bool = True,
) -> list[LabelGroup]:
    """
    Group one month's entries by category/source.

    Groups follow the order of options. Entries whose label is not one of
    the options are left out, matching what the list screens show.
    """
    grouped: dict[str, list[Transaction]] = {}
    for entry in filter_by_month(transactions, month):
        grouped.setdefault(entry.label, []).append(entry)

    groups = []
    for option in options:
        entries = grouped.get(option.name, [])
        if not entries and not include_empty:
            continue
        groups.append(LabelGroup(
            option=option,
            entries=entries,
            total=sum_amounts(entries),
        ))
    return groups


class BudgetAggregator:
    """
    Computes budget summaries from already-fetched data.

    GUARANTEES:
    - Only the target month's entries are counted
    - remaining is exact Decimal arithmetic (total_budget - total_spent)
    - No division by zero: a zero budget reports 0% used
    """

    def summarize(
        self,
        budget: Budget,
        expenses: Iterable[Expense],
        month: Optional[str] = None,
        income: Iterable[Income] = (),
    ) -> BudgetSummary:
        """
        Spend-vs-budget summary for one month.

        Args:
            budget: The month's stored budget
            expenses: Expense entries (any months; filtered here)
            month: Month key to summarize, defaults to the budget's month
            income: Income entries (any months; filtered here)

        Returns:
            BudgetSummary whose category_breakdown covers exactly the
            categories in budget.category_budgets
        """
        month = month or budget.month
        month_expenses = filter_by_month(expenses, month)

        total_spent = sum_amounts(month_expenses)
        total_income = total_for_month(income, month)

        breakdown = {}
        for category, budgeted in budget.category_budgets.items():
            spent = sum_amounts(e for e in month_expenses if e.label == category)
            breakdown[category] = CategorySummary(
                budgeted=budgeted,
                spent=spent,
                remaining=budgeted - spent,
                percentage_used=percentage(spent, budgeted),
            )

        return BudgetSummary(
            month=month,
            total_budget=budget.total_budget,
            total_spent=total_spent,
            total_income=total_income,
            remaining=budget.total_budget - total_spent,
            percentage_used=percentage(total_spent, budget.total_budget),
            category_breakdown=breakdown,
        )

    def spending_by_category(
        self,
        expenses: Iterable[Expense],
        month: str,
    ) -> list[CategorySpending]:
        """
        Every category with non-zero spend in the month, largest first.

        Unlike summarize(), this ignores any budget.
        """
        totals: dict[str, Decimal] = {}
        counts: dict[str, int] = {}
        for expense in filter_by_month(expenses, month):
            totals[expense.label] = totals.get(expense.label, ZERO) + expense.amount
            counts[expense.label] = counts.get(expense.label, 0) + 1

        spending = [
            CategorySpending(category=category, spent=spent, count=counts[category])
            for category, spent in totals.items()
            if spent > 0
        ]
        spending.sort(key=lambda s: (-s.spent, s.category))
        return spending


OVER_BUDGET_COLOR = "#ff6b6b"
WARNING_COLOR = "#feca57"
ON_TRACK_COLOR = "#4ecca3"


def usage_color(percentage_used: Decimal, warning_percentage: float = 80.0) -> str:
    """Progress-bar color: red at or over 100%, yellow from the warning level, else green."""
    if percentage_used >= HUNDRED:
        return OVER_BUDGET_COLOR
    if percentage_used >= Decimal(str(warning_percentage)):
        return WARNING_COLOR
    return ON_TRACK_COLOR
