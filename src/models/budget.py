"""
Budget Models for Budget Tracker

A Budget is a per-user, per-month spending ceiling, optionally broken down
by category. Summaries are derived from a budget plus the month's
transactions and are never persisted.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


MONTH_KEY_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class BudgetMode(str, Enum):
    """
    How the budget was entered.

    CATEGORY: the user set an amount per category, the total is their sum.
    TOTAL: the user set a single total, every category is zero.
    """
    CATEGORY = "category"
    TOTAL = "total"


class Budget(BaseModel):
    """A stored monthly budget. One per (user, month)."""

    user_id: str = Field(
        ...,
        min_length=1,
        description="Owner of this budget"
    )
    month: str = Field(
        ...,
        pattern=MONTH_KEY_PATTERN,
        description="Month key (YYYY-MM)"
    )
    total_budget: Decimal = Field(
        ...,
        ge=0,
        description="Spending ceiling for the whole month"
    )
    category_budgets: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Spending ceiling per category"
    )
    budget_mode: BudgetMode = Field(
        default=BudgetMode.CATEGORY,
        description="How the budget was entered"
    )

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('category_budgets')
    @classmethod
    def validate_category_amounts(cls, v: dict[str, Decimal]) -> dict[str, Decimal]:
        for category, amount in v.items():
            if amount < 0:
                raise ValueError(f"Budget for '{category}' cannot be negative")
        return v

    @property
    def document_id(self) -> str:
        """Storage key: one document per user and month."""
        return budget_document_id(self.user_id, self.month)


def budget_document_id(user_id: str, month: str) -> str:
    return f"{user_id}_{month}"


# =============================================================================
# DERIVED SUMMARIES
# =============================================================================

class CategorySummary(BaseModel):
    """Spend-vs-budget figures for one budgeted category."""

    budgeted: Decimal
    spent: Decimal
    remaining: Decimal
    percentage_used: Decimal

    @property
    def is_over_budget(self) -> bool:
        return self.spent > self.budgeted


class BudgetSummary(BaseModel):
    """
    Spend-vs-budget figures for one month.

    category_breakdown only contains categories present in the budget's
    category_budgets, even when other categories have expenses.
    """

    month: str = Field(..., pattern=MONTH_KEY_PATTERN)
    total_budget: Decimal
    total_spent: Decimal
    total_income: Decimal = Decimal("0")
    remaining: Decimal
    percentage_used: Decimal
    category_breakdown: dict[str, CategorySummary] = Field(default_factory=dict)

    @property
    def is_over_budget(self) -> bool:
        return self.remaining < 0


class CategorySpending(BaseModel):
    """Total spend of one category in a month, regardless of any budget."""

    category: str
    spent: Decimal
    count: int = Field(ge=0)
