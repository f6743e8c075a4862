"""
In-Memory Storage Implementation

Dict-backed implementations of every storage interface. Used by the test
suite and by the app when USE_IN_MEMORY_BACKEND is set, so screens can be
exercised without Firebase credentials.

Behaviour mirrors the Firestore implementation: generated IDs, newest-first
ordering, update of a missing entry raises NotFoundError.
"""

from datetime import date, datetime
from typing import Generic, Optional
from uuid import uuid4

from src.models.audit import AuditEvent
from src.models.budget import Budget, budget_document_id
from src.models.transaction import Expense, Income
from src.models.user import UserProfile
from src.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ExpenseStorageInterface,
    IncomeStorageInterface,
    NotFoundError,
    ProfileStorageInterface,
    T,
    TransactionStorageInterface,
)


class _InMemoryTransactionStorage(TransactionStorageInterface[T], Generic[T]):
    """Shared implementation for expense and income collections."""

    def __init__(self):
        self._entries: dict[str, T] = {}

    @staticmethod
    def _newest_first(entries: list[T]) -> list[T]:
        return sorted(entries, key=lambda e: e.date, reverse=True)

    async def add(self, entry: T) -> str:
        entry_id = uuid4().hex
        now = datetime.utcnow()
        self._entries[entry_id] = entry.model_copy(
            update={"id": entry_id, "created_at": now, "updated_at": now}
        )
        return entry_id

    async def update(self, entry_id: str, entry: T) -> None:
        existing = self._entries.get(entry_id)
        if existing is None:
            raise NotFoundError(f"Entry not found: {entry_id}")
        self._entries[entry_id] = entry.model_copy(
            update={
                "id": entry_id,
                "created_at": existing.created_at,
                "updated_at": datetime.utcnow(),
            }
        )

    async def delete(self, entry_id: str) -> None:
        self._entries.pop(entry_id, None)

    async def get(self, entry_id: str) -> Optional[T]:
        return self._entries.get(entry_id)

    async def list_for_user(self, user_id: str) -> list[T]:
        return self._newest_first(
            [e for e in self._entries.values() if e.user_id == user_id]
        )

    async def list_by_label(self, user_id: str, label: str) -> list[T]:
        return [e for e in await self.list_for_user(user_id) if e.label == label]

    async def list_by_date_range(
        self,
        user_id: str,
        start: date,
        end: date,
    ) -> list[T]:
        return [
            e for e in await self.list_for_user(user_id)
            if start <= e.date <= end
        ]


class InMemoryExpenseStorage(_InMemoryTransactionStorage[Expense], ExpenseStorageInterface):
    """In-memory expense collection."""


class InMemoryIncomeStorage(_InMemoryTransactionStorage[Income], IncomeStorageInterface):
    """In-memory income collection."""


class InMemoryBudgetStorage(BudgetStorageInterface):
    """In-memory budgets keyed by '{user_id}_{month}'."""

    def __init__(self):
        self._budgets: dict[str, Budget] = {}

    async def set_budget(self, budget: Budget) -> None:
        key = budget.document_id
        now = datetime.utcnow()
        existing = self._budgets.get(key)
        created_at = existing.created_at if existing else now
        self._budgets[key] = budget.model_copy(
            update={"created_at": created_at, "updated_at": now}
        )

    async def get_budget(self, user_id: str, month: str) -> Optional[Budget]:
        return self._budgets.get(budget_document_id(user_id, month))

    async def list_user_budgets(self, user_id: str) -> list[Budget]:
        budgets = [b for b in self._budgets.values() if b.user_id == user_id]
        return sorted(budgets, key=lambda b: b.month, reverse=True)


class InMemoryProfileStorage(ProfileStorageInterface):
    """In-memory profile documents keyed by uid."""

    def __init__(self):
        self._profiles: dict[str, UserProfile] = {}

    async def save_profile(self, profile: UserProfile) -> None:
        self._profiles[profile.uid] = profile

    async def get_profile(self, uid: str) -> Optional[UserProfile]:
        return self._profiles.get(uid)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only in-memory audit log."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_for_user(
        self,
        user_id: str,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = [e for e in self.events if e.user_id == user_id]
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
