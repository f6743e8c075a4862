"""Services package: the auth provider and document storage backends."""

from src.services.auth import (
    AuthError,
    AuthProviderInterface,
    FirebaseAuthProvider,
    InMemoryAuthProvider,
)
from src.services.storage import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ConnectionError,
    ExpenseStorageInterface,
    FirestoreClient,
    IncomeStorageInterface,
    NotFoundError,
    ProfileStorageInterface,
    StorageError,
)

__all__ = [
    # Auth
    "AuthError",
    "AuthProviderInterface",
    "FirebaseAuthProvider",
    "InMemoryAuthProvider",
    # Storage
    "AuditStorageInterface",
    "BudgetStorageInterface",
    "ConnectionError",
    "ExpenseStorageInterface",
    "FirestoreClient",
    "IncomeStorageInterface",
    "NotFoundError",
    "ProfileStorageInterface",
    "StorageError",
]
