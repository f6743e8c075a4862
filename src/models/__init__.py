"""
Data Models Package

This package contains all Pydantic models used in the Budget Tracker system.
All data flowing through the system must conform to these schemas.
"""

from src.models.transaction import (
    EXPENSE_CATEGORIES,
    INCOME_SOURCES,
    Expense,
    Income,
    IncomeFrequency,
    LabelGroup,
    LabelOption,
    Transaction,
)
from src.models.budget import (
    MONTH_KEY_PATTERN,
    Budget,
    BudgetMode,
    BudgetSummary,
    CategorySpending,
    CategorySummary,
    budget_document_id,
)
from src.models.user import AuthSession, UserProfile
from src.models.validation import ValidationIssue, ValidationResult
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "EXPENSE_CATEGORIES",
    "INCOME_SOURCES",
    "Expense",
    "Income",
    "IncomeFrequency",
    "LabelGroup",
    "LabelOption",
    "Transaction",
    # Budget models
    "MONTH_KEY_PATTERN",
    "Budget",
    "BudgetMode",
    "BudgetSummary",
    "CategorySpending",
    "CategorySummary",
    "budget_document_id",
    # User models
    "AuthSession",
    "UserProfile",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
