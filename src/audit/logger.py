"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of account and money changes
2. Debugging capability when Firebase calls fail
3. A per-user history of what changed and when

The audit logger:
- Is async so it fits the storage calls it sits next to
- Gracefully handles failures (a failed audit write never fails the action)
- Supports correlation IDs to trace related events
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder
from src.models.validation import ValidationResult
from src.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(debug: bool = False) -> None:
    """
    Route stdlib logging (and therefore structlog) to stderr.

    filter_by_level drops anything below the root level, so this has to
    run once at startup for debug events to appear.
    """
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit collection (for persistence), when storage is given
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                stored = await self._storage.append_event(event)
                if not stored:
                    self._logger.warning(
                        "audit_storage_rejected",
                        event_id=str(event.event_id),
                    )
                return stored
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_signed_up(self, user_id: str, email: str) -> None:
        await self.log(AuditEventBuilder.user_signed_up(user_id, email))

    async def log_signed_in(self, user_id: str, email: str) -> None:
        await self.log(AuditEventBuilder.user_signed_in(user_id, email))

    async def log_signed_out(self, user_id: Optional[str]) -> None:
        await self.log(AuditEventBuilder.user_signed_out(user_id))

    async def log_auth_failed(
        self,
        action: str,
        email: str,
        error_code: str,
        error_message: str,
    ) -> None:
        """Log a rejected sign-in or sign-up."""
        event = AuditEventBuilder.auth_failed(
            action=action,
            email=email,
            error_code=error_code,
            error_message=error_message,
        )
        await self.log(event)

    async def log_profile_created(self, user_id: str, name: str) -> None:
        await self.log(AuditEventBuilder.profile_created(user_id, name))

    async def log_transaction_changed(
        self,
        kind: str,
        action: str,
        user_id: str,
        entry_id: str,
        label: Optional[str] = None,
        amount: Optional[Decimal] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an expense/income add, update or delete."""
        event = AuditEventBuilder.transaction_changed(
            kind=kind,
            action=action,
            user_id=user_id,
            entry_id=entry_id,
            label=label,
            amount=str(amount) if amount is not None else None,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_budget_saved(
        self,
        user_id: str,
        month: str,
        total_budget: Decimal,
        mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.budget_saved(
            user_id=user_id,
            month=month,
            total_budget=str(total_budget),
            mode=mode,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_budget_summary(
        self,
        user_id: str,
        month: str,
        percentage_used: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.budget_summary_computed(
            user_id=user_id,
            month=month,
            percentage_used=f"{percentage_used:.1f}",
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_budget_summary_failed(
        self,
        user_id: str,
        month: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.budget_summary_failed(
            user_id=user_id,
            month=month,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_form_rejected(
        self,
        result: ValidationResult,
        user_id: Optional[str] = None,
    ) -> None:
        """Log a form submission that failed validation."""
        event = AuditEventBuilder.form_rejected(
            form=result.form,
            issues=[issue.model_dump() for issue in result.issues],
            user_id=user_id,
        )
        await self.log(event)

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            user_id=user_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., saving an expense).
    Pass it through all subsequent operations.
    """
    return uuid4()
