"""Tests for the audit logger."""

import pytest
from decimal import Decimal

from src.audit import AuditLogger, create_correlation_id
from src.models.audit import AuditEventBuilder, AuditEventType, AuditSeverity
from src.models.validation import ValidationIssue, ValidationResult
from src.services.storage import AuditStorageInterface, InMemoryAuditStorage


class FailingAuditStorage(AuditStorageInterface):
    async def append_event(self, event):
        raise RuntimeError("audit collection unavailable")

    async def get_events_for_user(self, user_id, limit=100):
        return []


class TestAuditLogger:

    @pytest.mark.asyncio
    async def test_persists_events(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        correlation_id = create_correlation_id()

        await logger.log_transaction_changed(
            kind="expense",
            action="updated",
            user_id="u1",
            entry_id="e1",
            label="Shopping",
            amount=Decimal("59.99"),
            correlation_id=correlation_id,
        )

        event = storage.events[0]
        assert event.event_type == AuditEventType.EXPENSE_UPDATED
        assert event.details["amount"] == "59.99"
        assert event.correlation_id == correlation_id

    @pytest.mark.asyncio
    async def test_storage_failure_does_not_raise(self):
        logger = AuditLogger(FailingAuditStorage())
        assert await logger.log_signed_out("u1") is None

    @pytest.mark.asyncio
    async def test_log_returns_false_when_storage_fails(self):
        logger = AuditLogger(FailingAuditStorage())
        assert await logger.log(AuditEventBuilder.user_signed_out("u1")) is False

    @pytest.mark.asyncio
    async def test_local_only_logger(self):
        assert await AuditLogger().log(AuditEventBuilder.user_signed_in("u1", "a@b.c")) is True

    @pytest.mark.asyncio
    async def test_form_rejected_records_issues(self):
        storage = InMemoryAuditStorage()
        result = ValidationResult(form="expense", issues=[
            ValidationIssue(field="amount", issue_type="invalid_value", message="Please enter a valid amount"),
        ])

        await AuditLogger(storage).log_form_rejected(result, user_id="u1")

        event = storage.events[0]
        assert event.event_type == AuditEventType.FORM_REJECTED
        assert event.details["issues"][0]["field"] == "amount"

    @pytest.mark.asyncio
    async def test_events_for_user(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        await logger.log_signed_in("u1", "a@b.c")
        await logger.log_budget_saved("u1", "2024-03", Decimal("500"), "total")
        await logger.log_signed_in("u2", "c@d.e")

        events = await storage.get_events_for_user("u1")
        assert {e.event_type for e in events} == {
            AuditEventType.BUDGET_SAVED,
            AuditEventType.USER_SIGNED_IN,
        }
        assert events[0].timestamp >= events[1].timestamp

    @pytest.mark.asyncio
    async def test_summary_failure_is_warning(self):
        storage = InMemoryAuditStorage()
        await AuditLogger(storage).log_budget_summary_failed("u1", "2024-03", "No budget found for this month")
        assert storage.events[0].severity == AuditSeverity.WARNING
