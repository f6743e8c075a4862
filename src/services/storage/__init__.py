"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Cloud Firestore is the production backend; the in-memory implementations
back the tests and offline runs.
"""

from src.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ConnectionError,
    ExpenseStorageInterface,
    IncomeStorageInterface,
    NotFoundError,
    ProfileStorageInterface,
    StorageError,
    TransactionStorageInterface,
)
from src.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    InMemoryExpenseStorage,
    InMemoryIncomeStorage,
    InMemoryProfileStorage,
)
from src.services.storage.firestore import (
    FirestoreAuditStorage,
    FirestoreBudgetStorage,
    FirestoreClient,
    FirestoreExpenseStorage,
    FirestoreIncomeStorage,
    FirestoreProfileStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "BudgetStorageInterface",
    "ExpenseStorageInterface",
    "IncomeStorageInterface",
    "ProfileStorageInterface",
    "TransactionStorageInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryBudgetStorage",
    "InMemoryExpenseStorage",
    "InMemoryIncomeStorage",
    "InMemoryProfileStorage",
    # Firestore implementation
    "FirestoreAuditStorage",
    "FirestoreBudgetStorage",
    "FirestoreClient",
    "FirestoreExpenseStorage",
    "FirestoreIncomeStorage",
    "FirestoreProfileStorage",
]
