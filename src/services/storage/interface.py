"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep screens decoupled from the managed document store
2. Use in-memory storage for testing and offline runs
3. Swap Firestore for another backend later

The interface is intentionally simple - we're not building an ORM.
Just the per-user operations the screens need.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Generic, Optional, TypeVar

from src.models.audit import AuditEvent
from src.models.budget import Budget
from src.models.transaction import Expense, Income, Transaction
from src.models.user import UserProfile


T = TypeVar("T", bound=Transaction)


class TransactionStorageInterface(ABC, Generic[T]):
    """
    Abstract interface for a per-user transaction collection.

    Implemented once for expenses and once for income. All list methods
    return entries ordered by date, newest first.
    """

    @abstractmethod
    async def add(self, entry: T) -> str:
        """
        Save a new entry.

        Args:
            entry: The entry to save (its id is ignored)

        Returns:
            The document ID assigned by storage

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def update(self, entry_id: str, entry: T) -> None:
        """
        Replace the stored fields of an existing entry.

        Raises:
            NotFoundError: If the entry doesn't exist
            StorageError: If update fails
        """
        pass

    @abstractmethod
    async def delete(self, entry_id: str) -> None:
        """
        Delete an entry by ID.

        Raises:
            StorageError: If delete fails
        """
        pass

    @abstractmethod
    async def get(self, entry_id: str) -> Optional[T]:
        """Retrieve an entry by ID, or None if it doesn't exist."""
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[T]:
        """All entries of a user."""
        pass

    @abstractmethod
    async def list_by_label(self, user_id: str, label: str) -> list[T]:
        """A user's entries for one category (expenses) or source (income)."""
        pass

    @abstractmethod
    async def list_by_date_range(
        self,
        user_id: str,
        start: date,
        end: date,
    ) -> list[T]:
        """A user's entries dated between start and end, both inclusive."""
        pass


class ExpenseStorageInterface(TransactionStorageInterface[Expense]):
    """Storage for expense entries."""


class IncomeStorageInterface(TransactionStorageInterface[Income]):
    """Storage for income entries."""


class BudgetStorageInterface(ABC):
    """
    Abstract interface for monthly budgets.

    There is at most one budget per (user, month).
    """

    @abstractmethod
    async def set_budget(self, budget: Budget) -> None:
        """
        Create the month's budget, or update it if it already exists.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def get_budget(self, user_id: str, month: str) -> Optional[Budget]:
        """The user's budget for a month, or None if none was set."""
        pass

    @abstractmethod
    async def list_user_budgets(self, user_id: str) -> list[Budget]:
        """All budgets of a user, newest month first."""
        pass


class ProfileStorageInterface(ABC):
    """Abstract interface for user profile documents."""

    @abstractmethod
    async def save_profile(self, profile: UserProfile) -> None:
        """Create or overwrite the profile document."""
        pass

    @abstractmethod
    async def get_profile(self, uid: str) -> Optional[UserProfile]:
        """The user's profile, or None if it doesn't exist."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_for_user(
        self,
        user_id: str,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """A user's most recent audit events, newest first."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
