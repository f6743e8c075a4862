"""
Cloud Firestore Storage Implementation

DESIGN DECISION: Firestore is the managed document store behind the app:
1. Per-user data lives in flat collections filtered by userId
2. No server to run - the backend is fully managed
3. The same Firebase project provides authentication

TRADEOFFS:
- Amounts are stored as floats (Firestore has no decimal type); they are
  converted back to Decimal via their string form on read
- Dates are stored as ISO "YYYY-MM-DD" strings so that range queries and
  ordering work lexicographically
- Queries combining userId with another filter and an order_by need a
  composite index in the Firebase console

Document field names are camelCase to stay compatible with data written
by the mobile client.
"""

import json
from abc import abstractmethod
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any, Generic, Optional

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from src.config import get_settings
from src.models.audit import AuditEvent, AuditEventType, AuditSeverity
from src.models.budget import Budget, BudgetMode, budget_document_id
from src.models.transaction import Expense, Income, IncomeFrequency
from src.models.user import UserProfile
from src.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ConnectionError,
    ExpenseStorageInterface,
    IncomeStorageInterface,
    NotFoundError,
    ProfileStorageInterface,
    StorageError,
    T,
    TransactionStorageInterface,
)


CENT = Decimal("0.01")

FIRESTORE_SCOPES = [
    "https://www.googleapis.com/auth/datastore",
    "https://www.googleapis.com/auth/cloud-platform",
]


def _to_decimal(value: Any) -> Decimal:
    """Stored amounts are unrounded floats; read them back as cents."""
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def _to_datetime(value: Any) -> Optional[datetime]:
    """Firestore timestamps arrive as datetime subclasses; strings are tolerated."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


class FirestoreClient:
    """
    Low-level Firestore client wrapper.

    Handles service-account authentication and hands out collection
    references by name.
    """

    def __init__(self):
        self._client: Optional[firestore.AsyncClient] = None
        self._firebase = get_settings().firebase
        self._collections = get_settings().firestore

    def connect(self) -> firestore.AsyncClient:
        """
        Establish the Firestore client.

        Uses service account credentials for authentication. A missing
        credentials file fails at once; only client creation is retried.
        """
        if self._client is None:
            if not Path(self._firebase.credentials_path).is_file():
                raise ConnectionError(
                    f"Firebase credentials file not found: {self._firebase.credentials_path}"
                )
            self._client = self._create_client()

        return self._client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _create_client(self) -> firestore.AsyncClient:
        try:
            credentials = Credentials.from_service_account_file(
                self._firebase.credentials_path,
                scopes=FIRESTORE_SCOPES,
            )
            return firestore.AsyncClient(
                project=self._firebase.project_id,
                credentials=credentials,
            )
        except Exception as e:
            raise ConnectionError(f"Failed to connect to Firestore: {e}")

    def collection(self, name: str) -> firestore.AsyncCollectionReference:
        return self.connect().collection(name)

    @property
    def users(self) -> firestore.AsyncCollectionReference:
        return self.collection(self._collections.users_collection)

    @property
    def expenses(self) -> firestore.AsyncCollectionReference:
        return self.collection(self._collections.expenses_collection)

    @property
    def income(self) -> firestore.AsyncCollectionReference:
        return self.collection(self._collections.income_collection)

    @property
    def budgets(self) -> firestore.AsyncCollectionReference:
        return self.collection(self._collections.budgets_collection)

    @property
    def audit_log(self) -> firestore.AsyncCollectionReference:
        return self.collection(self._collections.audit_collection)


class _FirestoreTransactionStorage(TransactionStorageInterface[T], Generic[T]):
    """
    Shared Firestore implementation for expense and income collections.

    Subclasses provide the collection, the label field name and the
    document <-> model conversion.
    """

    kind: str = "entry"
    label_field: str = "label"

    def __init__(self, client: Optional[FirestoreClient] = None):
        self._client = client or FirestoreClient()

    @abstractmethod
    def _collection(self) -> firestore.AsyncCollectionReference:
        ...

    @abstractmethod
    def _to_document(self, entry: T) -> dict:
        ...

    @abstractmethod
    def _from_document(self, doc_id: str, data: dict) -> T:
        ...

    def _user_query(self, user_id: str):
        return self._collection().where(filter=FieldFilter("userId", "==", user_id))

    async def _run(self, query) -> list[T]:
        entries = []
        async for snapshot in query.order_by(
            "date", direction=firestore.Query.DESCENDING
        ).stream():
            entries.append(self._from_document(snapshot.id, snapshot.to_dict()))
        return entries

    async def add(self, entry: T) -> str:
        try:
            data = self._to_document(entry)
            data["createdAt"] = firestore.SERVER_TIMESTAMP
            data["updatedAt"] = firestore.SERVER_TIMESTAMP
            _, doc_ref = await self._collection().add(data)
            return doc_ref.id
        except Exception as e:
            raise StorageError(f"Failed to add {self.kind}: {e}")

    async def update(self, entry_id: str, entry: T) -> None:
        try:
            data = self._to_document(entry)
            data["updatedAt"] = firestore.SERVER_TIMESTAMP
            await self._collection().document(entry_id).update(data)
        except google_exceptions.NotFound:
            raise NotFoundError(f"{self.kind.capitalize()} not found: {entry_id}")
        except Exception as e:
            raise StorageError(f"Failed to update {self.kind}: {e}")

    async def delete(self, entry_id: str) -> None:
        try:
            await self._collection().document(entry_id).delete()
        except Exception as e:
            raise StorageError(f"Failed to delete {self.kind}: {e}")

    async def get(self, entry_id: str) -> Optional[T]:
        try:
            snapshot = await self._collection().document(entry_id).get()
        except Exception as e:
            raise StorageError(f"Failed to get {self.kind}: {e}")
        if not snapshot.exists:
            return None
        return self._from_document(snapshot.id, snapshot.to_dict())

    async def list_for_user(self, user_id: str) -> list[T]:
        try:
            return await self._run(self._user_query(user_id))
        except Exception as e:
            raise StorageError(f"Failed to get {self.kind} entries: {e}")

    async def list_by_label(self, user_id: str, label: str) -> list[T]:
        try:
            query = self._user_query(user_id).where(
                filter=FieldFilter(self.label_field, "==", label)
            )
            return await self._run(query)
        except Exception as e:
            raise StorageError(f"Failed to get {self.kind} entries by {self.label_field}: {e}")

    async def list_by_date_range(
        self,
        user_id: str,
        start: date,
        end: date,
    ) -> list[T]:
        try:
            query = (
                self._user_query(user_id)
                .where(filter=FieldFilter("date", ">=", start.isoformat()))
                .where(filter=FieldFilter("date", "<=", end.isoformat()))
            )
            return await self._run(query)
        except Exception as e:
            raise StorageError(f"Failed to get {self.kind} entries by date range: {e}")


class FirestoreExpenseStorage(_FirestoreTransactionStorage[Expense], ExpenseStorageInterface):
    """Expenses stored in the 'expenses' collection."""

    kind = "expense"
    label_field = "category"

    def _collection(self) -> firestore.AsyncCollectionReference:
        return self._client.expenses

    def _to_document(self, entry: Expense) -> dict:
        return expense_to_document(entry)

    def _from_document(self, doc_id: str, data: dict) -> Expense:
        return document_to_expense(doc_id, data)


class FirestoreIncomeStorage(_FirestoreTransactionStorage[Income], IncomeStorageInterface):
    """Income entries stored in the 'income' collection."""

    kind = "income"
    label_field = "source"

    def _collection(self) -> firestore.AsyncCollectionReference:
        return self._client.income

    def _to_document(self, entry: Income) -> dict:
        return income_to_document(entry)

    def _from_document(self, doc_id: str, data: dict) -> Income:
        return document_to_income(doc_id, data)


class FirestoreBudgetStorage(BudgetStorageInterface):
    """
    Budgets stored in the 'budgets' collection.

    The document ID is '{userId}_{month}', so a month can only ever have
    one budget per user.
    """

    def __init__(self, client: Optional[FirestoreClient] = None):
        self._client = client or FirestoreClient()

    async def set_budget(self, budget: Budget) -> None:
        try:
            doc_ref = self._client.budgets.document(budget.document_id)
            existing = await doc_ref.get()
            data = budget_to_document(budget)
            data["updatedAt"] = firestore.SERVER_TIMESTAMP
            if existing.exists:
                await doc_ref.update(data)
            else:
                data["id"] = budget.document_id
                data["createdAt"] = firestore.SERVER_TIMESTAMP
                await doc_ref.set(data)
        except Exception as e:
            raise StorageError(f"Failed to set budget: {e}")

    async def get_budget(self, user_id: str, month: str) -> Optional[Budget]:
        try:
            snapshot = await self._client.budgets.document(
                budget_document_id(user_id, month)
            ).get()
        except Exception as e:
            raise StorageError(f"Failed to get budget: {e}")
        if not snapshot.exists:
            return None
        return document_to_budget(snapshot.to_dict())

    async def list_user_budgets(self, user_id: str) -> list[Budget]:
        try:
            query = self._client.budgets.where(filter=FieldFilter("userId", "==", user_id))
            budgets = [
                document_to_budget(snapshot.to_dict())
                async for snapshot in query.stream()
            ]
        except Exception as e:
            raise StorageError(f"Failed to get user budgets: {e}")
        return sorted(budgets, key=lambda b: b.month, reverse=True)


class FirestoreProfileStorage(ProfileStorageInterface):
    """Profiles stored as users/{uid}."""

    def __init__(self, client: Optional[FirestoreClient] = None):
        self._client = client or FirestoreClient()

    async def save_profile(self, profile: UserProfile) -> None:
        try:
            await self._client.users.document(profile.uid).set({
                "uid": profile.uid,
                "name": profile.name,
                "email": profile.email,
                "createdAt": profile.created_at,
            })
        except Exception as e:
            raise StorageError(f"Failed to save profile: {e}")

    async def get_profile(self, uid: str) -> Optional[UserProfile]:
        try:
            snapshot = await self._client.users.document(uid).get()
        except Exception as e:
            raise StorageError(f"Failed to get profile: {e}")
        if not snapshot.exists:
            return None
        data = snapshot.to_dict()
        return UserProfile(
            uid=data.get("uid") or uid,
            name=data.get("name") or "User",
            email=data.get("email") or "",
            created_at=_to_datetime(data.get("createdAt")) or datetime.utcnow(),
        )


class FirestoreAuditStorage(AuditStorageInterface):
    """
    Audit events stored in the 'audit_log' collection.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[FirestoreClient] = None):
        self._client = client or FirestoreClient()

    async def append_event(self, event: AuditEvent) -> bool:
        try:
            await self._client.audit_log.document(str(event.event_id)).set(
                event.to_document()
            )
            return True
        except Exception:
            # AuditLogger reports a False result in the local log
            return False

    async def get_events_for_user(
        self,
        user_id: str,
        limit: int = 100,
    ) -> list[AuditEvent]:
        try:
            query = (
                self._client.audit_log
                .where(filter=FieldFilter("userId", "==", user_id))
                .order_by("timestamp", direction=firestore.Query.DESCENDING)
                .limit(limit)
            )
            events = []
            async for snapshot in query.stream():
                data = snapshot.to_dict()
                events.append(AuditEvent(
                    event_id=data["eventId"],
                    timestamp=_to_datetime(data.get("timestamp")),
                    event_type=AuditEventType(data["eventType"]),
                    severity=AuditSeverity(data.get("severity", "info")),
                    user_id=data.get("userId"),
                    entity_type=data.get("entityType"),
                    entity_id=data.get("entityId"),
                    correlation_id=data.get("correlationId"),
                    description=data.get("description", ""),
                    details=json.loads(data["detailsJson"]) if data.get("detailsJson") else {},
                    error_code=data.get("errorCode"),
                    error_message=data.get("errorMessage"),
                    is_user_action=bool(data.get("isUserAction", False)),
                ))
            return events
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")


# =============================================================================
# DOCUMENT CONVERSION
# =============================================================================

def expense_to_document(expense: Expense) -> dict:
    """Convert an Expense to Firestore fields (timestamps excluded)."""
    return {
        "userId": expense.user_id,
        "category": expense.category,
        "description": expense.description,
        "amount": float(expense.amount),
        "date": expense.date.isoformat(),
    }


def document_to_expense(doc_id: str, data: dict) -> Expense:
    return Expense(
        id=doc_id,
        user_id=data["userId"],
        category=data["category"],
        description=data.get("description") or "",
        amount=_to_decimal(data.get("amount")),
        date=date.fromisoformat(str(data["date"])[:10]),
        created_at=_to_datetime(data.get("createdAt")),
        updated_at=_to_datetime(data.get("updatedAt")),
    )


def income_to_document(income: Income) -> dict:
    """Convert an Income entry to Firestore fields (timestamps excluded)."""
    return {
        "userId": income.user_id,
        "source": income.source,
        "description": income.description,
        "amount": float(income.amount),
        "date": income.date.isoformat(),
        "frequency": income.frequency.value,
    }


def document_to_income(doc_id: str, data: dict) -> Income:
    return Income(
        id=doc_id,
        user_id=data["userId"],
        source=data["source"],
        description=data.get("description") or "",
        amount=_to_decimal(data.get("amount")),
        date=date.fromisoformat(str(data["date"])[:10]),
        frequency=IncomeFrequency(data.get("frequency") or IncomeFrequency.MONTHLY.value),
        created_at=_to_datetime(data.get("createdAt")),
        updated_at=_to_datetime(data.get("updatedAt")),
    )


def budget_to_document(budget: Budget) -> dict:
    """Convert a Budget to Firestore fields (timestamps excluded)."""
    return {
        "userId": budget.user_id,
        "month": budget.month,
        "totalBudget": float(budget.total_budget),
        "categoryBudgets": {
            category: float(amount)
            for category, amount in budget.category_budgets.items()
        },
        "budgetMode": budget.budget_mode.value,
    }


def document_to_budget(data: dict) -> Budget:
    return Budget(
        user_id=data["userId"],
        month=data["month"],
        total_budget=_to_decimal(data.get("totalBudget")),
        category_budgets={
            category: _to_decimal(amount)
            for category, amount in (data.get("categoryBudgets") or {}).items()
        },
        budget_mode=BudgetMode(data.get("budgetMode") or BudgetMode.CATEGORY.value),
        created_at=_to_datetime(data.get("createdAt")),
        updated_at=_to_datetime(data.get("updatedAt")),
    )
