"""
Audit Models for Budget Tracker

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of account and data changes
2. Debugging information when a backend call fails
3. Ability to reconstruct what a user did and when

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
Amounts are recorded, tokens and passwords never are.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Authentication
    USER_SIGNED_UP = "user_signed_up"
    USER_SIGNED_IN = "user_signed_in"
    USER_SIGNED_OUT = "user_signed_out"
    AUTH_FAILED = "auth_failed"
    PROFILE_CREATED = "profile_created"

    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Income
    INCOME_ADDED = "income_added"
    INCOME_UPDATED = "income_updated"
    INCOME_DELETED = "income_deleted"

    # Budgets
    BUDGET_SAVED = "budget_saved"
    BUDGET_SUMMARY_COMPUTED = "budget_summary_computed"
    BUDGET_SUMMARY_FAILED = "budget_summary_failed"

    # Forms
    FORM_REJECTED = "form_rejected"

    # System events
    STORAGE_ERROR = "storage_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Who and what
    user_id: Optional[str] = Field(
        default=None,
        description="Account the event belongs to, if known"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'income', 'budget')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Document ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one screen action)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_document(self) -> dict:
        """
        Convert to a flat document for the audit collection.

        details are stored as a JSON string so arbitrary payloads never
        collide with document-store field restrictions.
        """
        return {
            "eventId": str(self.event_id),
            "timestamp": self.timestamp,
            "eventType": self.event_type.value,
            "severity": self.severity.value,
            "userId": self.user_id,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "correlationId": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "detailsJson": json.dumps(self.details, default=str) if self.details else "",
            "errorCode": self.error_code,
            "errorMessage": self.error_message,
            "isUserAction": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_signed_in(user_id, email)
        event = AuditEventBuilder.transaction_changed("expense", "added", ...)
    """

    @staticmethod
    def user_signed_up(user_id: str, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_UP,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description=f"Account created for {email}",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def user_signed_in(user_id: str, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_IN,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description=f"User signed in: {email}",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def user_signed_out(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_OUT,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="User signed out",
            is_user_action=True,
        )

    @staticmethod
    def auth_failed(
        action: str,
        email: str,
        error_code: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            description=f"{action.replace('_', ' ').capitalize()} failed for {email}",
            details={"action": action, "email": email},
            error_code=error_code,
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def profile_created(user_id: str, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_CREATED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description=f"Profile document created for {name}",
        )

    @staticmethod
    def transaction_changed(
        kind: str,
        action: str,
        user_id: str,
        entry_id: str,
        label: Optional[str] = None,
        amount: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        """
        Build an add/update/delete event for an expense or income entry.

        kind is "expense" or "income"; action is "added", "updated" or "deleted".
        """
        event_type = AuditEventType(f"{kind}_{action}")
        details = {}
        if label is not None:
            details["label"] = label
        if amount is not None:
            details["amount"] = amount
        return AuditEvent(
            event_type=event_type,
            user_id=user_id,
            entity_type=kind,
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} {action}" + (f": {label} {amount}" if label and amount else ""),
            details=details,
            is_user_action=True,
        )

    @staticmethod
    def budget_saved(
        user_id: str,
        month: str,
        total_budget: str,
        mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SAVED,
            user_id=user_id,
            entity_type="budget",
            entity_id=f"{user_id}_{month}",
            correlation_id=correlation_id,
            description=f"Budget for {month} saved: {total_budget}",
            details={
                "month": month,
                "total_budget": total_budget,
                "budget_mode": mode,
            },
            is_user_action=True,
        )

    @staticmethod
    def budget_summary_computed(
        user_id: str,
        month: str,
        percentage_used: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SUMMARY_COMPUTED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            entity_type="budget",
            entity_id=f"{user_id}_{month}",
            correlation_id=correlation_id,
            description=f"Budget summary for {month}: {percentage_used}% used",
            details={"month": month, "percentage_used": percentage_used},
        )

    @staticmethod
    def budget_summary_failed(
        user_id: str,
        month: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SUMMARY_FAILED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="budget",
            entity_id=f"{user_id}_{month}",
            correlation_id=correlation_id,
            description=f"Budget summary for {month} could not be computed",
            error_message=error_message,
            details={"month": month},
        )

    @staticmethod
    def form_rejected(
        form: str,
        issues: list[dict],
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FORM_REJECTED,
            severity=AuditSeverity.INFO,
            user_id=user_id,
            description=f"{form.replace('_', ' ').capitalize()} form rejected with {len(issues)} issues",
            details={"form": form, "issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
