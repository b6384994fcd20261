"""Tests for the JSON formatter and LogContext."""

import json
import logging
from decimal import Decimal
from uuid import uuid4

import pytest

from ledger_kernel.exceptions import UnbalancedEntryError
from ledger_kernel.logging_config import LogContext, StructuredFormatter, get_logger


def _format(record_extra=None, exc=None) -> dict:
    exc_info = (type(exc), exc, None) if exc is not None else None
    record = logging.LogRecord(
        "ledger_kernel.test", logging.INFO, __file__, 1, "something_happened", (), exc_info
    )
    for key, value in (record_extra or {}).items():
        setattr(record, key, value)
    return json.loads(StructuredFormatter().format(record))


class TestStructuredFormatter:
    def test_envelope(self):
        payload = _format()
        assert payload["message"] == "something_happened"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "ledger_kernel.test"
        assert "ts" in payload

    def test_extra_fields_become_keys(self):
        tenant_id = uuid4()
        payload = _format({"tenant_id": tenant_id, "total": Decimal("10.50")})
        assert payload["tenant_id"] == str(tenant_id)
        assert payload["total"] == "10.50"

    def test_exception_code_is_recorded(self):
        payload = _format(exc=UnbalancedEntryError(Decimal("1"), Decimal("2")))
        assert payload["exc_type"] == "UnbalancedEntryError"
        assert payload["exc_code"] == "UNBALANCED_ENTRY"


class TestLogContext:
    def test_bind_restores_previous_values(self):
        LogContext.set(tenant_id="outer")
        with LogContext.bind(tenant_id="inner", operation="create_invoice"):
            assert LogContext.get_all() == {
                "tenant_id": "inner",
                "operation": "create_invoice",
            }
        assert LogContext.get_all() == {"tenant_id": "outer"}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError):
            LogContext.set(user_id="u-1")

    def test_context_merged_into_records(self):
        with LogContext.bind(correlation_id="run-1"):
            payload = _format()
        assert payload["correlation_id"] == "run-1"

    def test_subledger_logs_carry_operation(self, captured_logs, create_invoice):
        create_invoice()
        records = [
            r for r in captured_logs() if r["message"] == "journal_entry_created"
        ]
        assert records[0]["operation"] == "create_invoice"
        assert "operation" not in LogContext.get_all()


class TestGetLogger:
    def test_namespaced(self):
        assert get_logger("services.journal").name == "ledger_kernel.services.journal"
