"""
Transaction Models for Budget Tracker

Expenses and income entries are the two kinds of money movement a user
records. Both share the same shape (a label, an amount and a calendar day)
and are stored in separate per-user collections.

DESIGN DECISION: Labels (expense category / income source) are plain
strings rather than enums. The UI offers a predefined list, but budgets
and stored documents may carry labels outside it and those must still
load and aggregate.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# PREDEFINED LABELS - What the screens offer
# =============================================================================

class LabelOption(BaseModel):
    """A selectable category/source with its display decoration."""
    model_config = ConfigDict(frozen=True)

    name: str
    icon: str
    color: str


EXPENSE_CATEGORIES: tuple[LabelOption, ...] = (
    LabelOption(name="Food & Dining", icon="🍽️", color="#ff6b6b"),
    LabelOption(name="Transportation", icon="🚗", color="#4ecdc4"),
    LabelOption(name="Shopping", icon="🛍️", color="#45b7d1"),
    LabelOption(name="Entertainment", icon="🎬", color="#96ceb4"),
    LabelOption(name="Bills & Utilities", icon="💡", color="#feca57"),
    LabelOption(name="Healthcare", icon="🏥", color="#ff9ff3"),
    LabelOption(name="Other", icon="📝", color="#a8a8a8"),
)

INCOME_SOURCES: tuple[LabelOption, ...] = (
    LabelOption(name="Salary", icon="💼", color="#4ecca3"),
    LabelOption(name="Freelance", icon="💻", color="#45b7d1"),
    LabelOption(name="Business", icon="🏢", color="#96ceb4"),
    LabelOption(name="Investments", icon="📈", color="#feca57"),
    LabelOption(name="Rental", icon="🏠", color="#ff9ff3"),
    LabelOption(name="Gifts", icon="🎁", color="#ff6b6b"),
    LabelOption(name="Other", icon="💰", color="#a8a8a8"),
)


class IncomeFrequency(str, Enum):
    """How often an income entry recurs. Informational only."""
    ONE_TIME = "one-time"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title().replace("Bi Weekly", "Bi-Weekly")


# =============================================================================
# TRANSACTIONS
# =============================================================================

class Transaction(BaseModel, ABC):
    """
    Fields shared by expenses and income entries.

    A transaction belongs to exactly one user. `id` is assigned by the
    document store and is None until the entry has been saved.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = Field(
        default=None,
        description="Document ID assigned by storage"
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="Owner of this entry"
    )
    description: str = Field(
        default="",
        max_length=500,
        description="Free-text note"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Amount of money moved"
    )
    date: date

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    @abstractmethod
    def label(self) -> str:
        """The category or source this entry is bucketed under."""

    @property
    def month(self) -> str:
        """Month key ("YYYY-MM") of the entry date."""
        return self.date.strftime("%Y-%m")


class Expense(Transaction):
    """Money spent, bucketed by category."""

    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Expense category (e.g. 'Food & Dining')"
    )

    @property
    def label(self) -> str:
        return self.category


class Income(Transaction):
    """Money received, bucketed by source."""

    source: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Income source (e.g. 'Salary')"
    )
    frequency: IncomeFrequency = Field(
        default=IncomeFrequency.MONTHLY,
        description="How often this income recurs"
    )

    @property
    def label(self) -> str:
        return self.source


class LabelGroup(BaseModel):
    """One month's entries for a single category/source, with their total."""

    option: LabelOption
    entries: list[Transaction] = Field(default_factory=list)
    total: Decimal = Decimal("0")

    @property
    def count(self) -> int:
        return len(self.entries)
