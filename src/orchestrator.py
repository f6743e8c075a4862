"""
Main Orchestrator for Budget Tracker

This module ties together all the components and defines the
per-screen flows for:
1. Expenses (validate → save/update/delete → list by month)
2. Income (same shape as expenses, plus net income)
3. Budgets (form → save; budget + expenses → summary)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is written for a signed-out user
- Nothing is written from a form that failed validation
- Every change is audited

Screens call these flows and turn the exceptions they raise into alerts.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from datetime import date
from decimal import Decimal
from typing import Generic, NamedTuple, Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from src.audit import AuditLogger, create_correlation_id
from src.auth import AuthGateway, NotAuthenticatedError
from src.budgets import (
    BudgetAggregator,
    group_by_label,
    month_bounds,
    net_income,
    total_for_month,
)
from src.config import get_settings
from src.models.budget import Budget, BudgetMode, BudgetSummary, CategorySpending
from src.models.transaction import (
    EXPENSE_CATEGORIES,
    INCOME_SOURCES,
    Expense,
    Income,
    IncomeFrequency,
    LabelGroup,
    LabelOption,
)
from src.models.validation import ValidationResult
from src.services.auth import AuthProviderInterface, FirebaseAuthProvider, InMemoryAuthProvider
from src.services.storage import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ExpenseStorageInterface,
    FirestoreAuditStorage,
    FirestoreBudgetStorage,
    FirestoreClient,
    FirestoreExpenseStorage,
    FirestoreIncomeStorage,
    FirestoreProfileStorage,
    IncomeStorageInterface,
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    InMemoryExpenseStorage,
    InMemoryIncomeStorage,
    InMemoryProfileStorage,
    NotFoundError,
    ProfileStorageInterface,
    StorageError,
    TransactionStorageInterface,
)
from src.services.storage.interface import T
from src.validation import FormValidator, build_budget, parse_amount


logger = structlog.get_logger(__name__)

NO_BUDGET_MESSAGE = "No budget found for this month"


class _TransactionFlow(ABC, Generic[T]):
    """
    Shared flow for the expense and income screens.

    Subclasses say which kind of entry they handle and how a validated
    form becomes an entry.
    """

    kind: str = ""
    plural: str = ""
    options: Sequence[LabelOption] = ()

    def __init__(
        self,
        storage: TransactionStorageInterface[T],
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._validator = validator or FormValidator()
        self._audit_logger = audit_logger

    @abstractmethod
    def _build(
        self,
        user_id: str,
        description: str,
        amount: Decimal,
        label: str,
        entry_date: date,
        **extra,
    ) -> T:
        ...

    def _require_user(self, user_id: Optional[str]) -> str:
        if not user_id:
            raise NotAuthenticatedError(f"You must be logged in to save {self.plural}")
        return user_id

    async def load(self, user_id: str) -> list[T]:
        """All of the user's entries, newest first."""
        try:
            return await self._storage.list_for_user(user_id)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation=f"list_{self.plural}",
                    error_message=str(e),
                    user_id=user_id,
                )
            raise

    async def load_month(self, user_id: str, month: str) -> list[T]:
        """The user's entries dated within one month, newest first."""
        first, last = month_bounds(month)
        return await self._storage.list_by_date_range(user_id, first, last)

    async def save(
        self,
        user_id: Optional[str],
        description: str,
        amount_text: str,
        label: str,
        entry_id: Optional[str] = None,
        entry_date: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
        **extra,
    ) -> tuple[Optional[T], ValidationResult]:
        """
        Validate the form and add (or, with entry_id, update) an entry.

        New entries are dated today unless entry_date is given. Updates
        keep the stored date unless entry_date is given.

        Returns:
            (saved_entry, validation_result); saved_entry is None when the
            form was rejected

        Raises:
            NotAuthenticatedError: If user_id is missing
            NotFoundError: If entry_id doesn't exist
            StorageError: If the write fails
        """
        user_id = self._require_user(user_id)
        correlation_id = correlation_id or create_correlation_id()

        result = self._validator.validate_transaction(
            form=self.kind,
            description=description,
            amount_text=amount_text,
            label=label,
        )
        if not result.is_valid:
            if self._audit_logger:
                await self._audit_logger.log_form_rejected(result, user_id=user_id)
            return None, result

        amount = parse_amount(amount_text)

        try:
            if entry_id is None:
                entry = self._build(
                    user_id,
                    description.strip(),
                    amount,
                    label,
                    entry_date or date.today(),
                    **extra,
                )
                entry_id = await self._storage.add(entry)
                action = "added"
            else:
                existing = await self._storage.get(entry_id)
                if existing is None or existing.user_id != user_id:
                    raise NotFoundError(f"{self.kind.capitalize()} not found: {entry_id}")
                entry = self._build(
                    user_id,
                    description.strip(),
                    amount,
                    label,
                    entry_date or existing.date,
                    **extra,
                )
                await self._storage.update(entry_id, entry)
                action = "updated"
        except StorageError as e:
            if self._audit_logger and not isinstance(e, NotFoundError):
                await self._audit_logger.log_storage_error(
                    operation=f"save_{self.kind}",
                    error_message=str(e),
                    user_id=user_id,
                    correlation_id=correlation_id,
                )
            raise

        saved = entry.model_copy(update={"id": entry_id})
        if self._audit_logger:
            await self._audit_logger.log_transaction_changed(
                kind=self.kind,
                action=action,
                user_id=user_id,
                entry_id=entry_id,
                label=saved.label,
                amount=saved.amount,
                correlation_id=correlation_id,
            )
        return saved, result

    async def delete(
        self,
        user_id: Optional[str],
        entry_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Delete one of the user's entries.

        Raises:
            NotAuthenticatedError: If user_id is missing
            NotFoundError: If the entry doesn't exist or belongs to someone else
            StorageError: If the delete fails
        """
        user_id = self._require_user(user_id)
        try:
            existing = await self._storage.get(entry_id)
            if existing is None or existing.user_id != user_id:
                raise NotFoundError(f"{self.kind.capitalize()} not found: {entry_id}")
            await self._storage.delete(entry_id)
        except StorageError as e:
            if self._audit_logger and not isinstance(e, NotFoundError):
                await self._audit_logger.log_storage_error(
                    operation=f"delete_{self.kind}",
                    error_message=str(e),
                    user_id=user_id,
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_transaction_changed(
                kind=self.kind,
                action="deleted",
                user_id=user_id,
                entry_id=entry_id,
                correlation_id=correlation_id,
            )

    def month_total(self, entries: Sequence[T], month: str) -> Decimal:
        return total_for_month(entries, month)

    def month_groups(
        self,
        entries: Sequence[T],
        month: str,
        include_empty: bool = True,
    ) -> list[LabelGroup]:
        return group_by_label(entries, month, self.options, include_empty=include_empty)


class ExpenseFlow(_TransactionFlow[Expense]):
    """Expenses screen: every category is listed, even when empty."""

    kind = "expense"
    plural = "expenses"
    options = EXPENSE_CATEGORIES

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(storage, validator, audit_logger)

    def _build(self, user_id, description, amount, label, entry_date, **extra) -> Expense:
        return Expense(
            user_id=user_id,
            description=description,
            amount=amount,
            category=label,
            date=entry_date,
        )


class IncomeFlow(_TransactionFlow[Income]):
    """Income screen: only sources with entries are listed."""

    kind = "income"
    plural = "income"
    options = INCOME_SOURCES

    def __init__(
        self,
        storage: IncomeStorageInterface,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(storage, validator, audit_logger)

    def _build(self, user_id, description, amount, label, entry_date, **extra) -> Income:
        return Income(
            user_id=user_id,
            description=description,
            amount=amount,
            source=label,
            frequency=extra.get("frequency") or IncomeFrequency.MONTHLY,
            date=entry_date,
        )

    def month_groups(
        self,
        entries: Sequence[Income],
        month: str,
        include_empty: bool = False,
    ) -> list[LabelGroup]:
        return super().month_groups(entries, month, include_empty=include_empty)

    @staticmethod
    def net_income(
        income: Sequence[Income],
        expenses: Sequence[Expense],
        month: str,
    ) -> Decimal:
        return net_income(income, expenses, month)


class BudgetFlow:
    """
    Budget screen.

    Flow:
    1. Load → the month's stored budget (if any) fills the form
    2. Save → form amounts become a Budget, stored per (user, month)
    3. Summarize → budget + month expenses → BudgetSummary
    """

    def __init__(
        self,
        budget_storage: BudgetStorageInterface,
        expense_storage: ExpenseStorageInterface,
        income_storage: Optional[IncomeStorageInterface] = None,
        aggregator: Optional[BudgetAggregator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._budgets = budget_storage
        self._expenses = expense_storage
        self._income = income_storage
        self._aggregator = aggregator or BudgetAggregator()
        self._audit_logger = audit_logger

    async def load_budget(self, user_id: str, month: str) -> Optional[Budget]:
        return await self._budgets.get_budget(user_id, month)

    async def list_budgets(self, user_id: str) -> list[Budget]:
        return await self._budgets.list_user_budgets(user_id)

    async def save_budget(
        self,
        user_id: Optional[str],
        month: str,
        mode: BudgetMode,
        total_text: Optional[str] = None,
        category_texts: Optional[Mapping[str, str]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Budget:
        """
        Build the budget from the form and store it.

        Raises:
            NotAuthenticatedError: If user_id is missing
            StorageError: If the write fails
        """
        if not user_id:
            raise NotAuthenticatedError("You must be logged in to save a budget")
        correlation_id = correlation_id or create_correlation_id()

        budget = build_budget(
            user_id=user_id,
            month=month,
            mode=mode,
            total_text=total_text,
            category_texts=category_texts,
        )
        try:
            await self._budgets.set_budget(budget)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation="save_budget",
                    error_message=str(e),
                    user_id=user_id,
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_budget_saved(
                user_id=user_id,
                month=month,
                total_budget=budget.total_budget,
                mode=budget.budget_mode.value,
                correlation_id=correlation_id,
            )
        return budget

    async def get_budget_summary(
        self,
        user_id: str,
        month: str,
        correlation_id: Optional[UUID] = None,
    ) -> BudgetSummary:
        """
        Spend-vs-budget summary for one month.

        Raises:
            NotFoundError: If no budget is stored for the month
            StorageError: If a read fails
        """
        correlation_id = correlation_id or create_correlation_id()
        first, last = month_bounds(month)

        try:
            budget = await self._budgets.get_budget(user_id, month)
            if budget is None:
                raise NotFoundError(NO_BUDGET_MESSAGE)
            expenses = await self._expenses.list_by_date_range(user_id, first, last)
            income = []
            if self._income is not None:
                income = await self._income.list_by_date_range(user_id, first, last)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_budget_summary_failed(
                    user_id=user_id,
                    month=month,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        summary = self._aggregator.summarize(budget, expenses, month=month, income=income)

        if self._audit_logger:
            await self._audit_logger.log_budget_summary(
                user_id=user_id,
                month=month,
                percentage_used=summary.percentage_used,
                correlation_id=correlation_id,
            )
        return summary

    async def spending_overview(self, user_id: str, month: str) -> list[CategorySpending]:
        """Every category with spend this month, budgeted or not."""
        first, last = month_bounds(month)
        expenses = await self._expenses.list_by_date_range(user_id, first, last)
        return self._aggregator.spending_by_category(expenses, month)


class AppComponents(NamedTuple):
    gateway: AuthGateway
    validator: FormValidator
    expense_flow: ExpenseFlow
    income_flow: IncomeFlow
    budget_flow: BudgetFlow
    firestore_client: Optional[FirestoreClient]


def create_app_components(
    use_storage: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to connect to Firebase.
                    Set to False (or USE_IN_MEMORY_BACKEND=true) to run
                    against the in-memory backend.

    Returns:
        AppComponents with the auth gateway and the screen flows.
        Each browser session wraps the gateway in its own SessionContext.
    """
    settings = get_settings()
    firestore_client = None

    provider: AuthProviderInterface
    profiles: ProfileStorageInterface
    expenses: ExpenseStorageInterface
    income: IncomeStorageInterface
    budgets: BudgetStorageInterface
    audit_storage: AuditStorageInterface

    if use_storage and not settings.app.use_in_memory_backend:
        try:
            firestore_client = FirestoreClient()
            firestore_client.connect()
            provider = FirebaseAuthProvider()
            profiles = FirestoreProfileStorage(firestore_client)
            expenses = FirestoreExpenseStorage(firestore_client)
            income = FirestoreIncomeStorage(firestore_client)
            budgets = FirestoreBudgetStorage(firestore_client)
            audit_storage = FirestoreAuditStorage(firestore_client)
        except (StorageError, ValidationError) as e:
            # Firebase not configured - continue in memory
            logger.warning("firebase_unavailable_using_memory", error=str(e))
            firestore_client = None
            use_storage = False

    if not use_storage or settings.app.use_in_memory_backend:
        provider = InMemoryAuthProvider()
        profiles = InMemoryProfileStorage()
        expenses = InMemoryExpenseStorage()
        income = InMemoryIncomeStorage()
        budgets = InMemoryBudgetStorage()
        audit_storage = InMemoryAuditStorage()

    audit_logger = AuditLogger(audit_storage)
    validator = FormValidator(settings.app.min_password_length)
    gateway = AuthGateway(provider, profiles, audit_logger)

    return AppComponents(
        gateway=gateway,
        validator=validator,
        expense_flow=ExpenseFlow(expenses, validator, audit_logger),
        income_flow=IncomeFlow(income, validator, audit_logger),
        budget_flow=BudgetFlow(budgets, expenses, income, audit_logger=audit_logger),
        firestore_client=firestore_client,
    )
