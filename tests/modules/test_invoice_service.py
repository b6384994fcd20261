"""
Tests for the invoice subledger.

Validates:
- Creation computes totals, numbers the invoice by clock date, starts SENT
- Revenue recognition entry: Dr AR / Cr Sales Revenue dated at invoice date
- Zero-total invoices carry no journal entry
- Validation and missing-account failures write nothing
- Status updates: cancellation guard, overrides, unknown status
- Lookups and filters are tenant-scoped
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from ledger_kernel.exceptions import (
    InvalidInvoiceLineError,
    InvalidStatusError,
    InvoiceNotFoundError,
    InvoicePaidCancellationError,
    MissingWellKnownAccountsError,
)
from ledger_kernel.models.journal import JournalEntry
from ledger_modules.ar.models import InvoiceLineInput, InvoiceStatus, PaymentMethod
from ledger_modules.ar.orm import InvoiceModel
from ledger_modules.ar.service import InvoiceService


def _count(session, model, tenant_id):
    return session.execute(
        select(func.count(model.id)).where(model.tenant_id == tenant_id)
    ).scalar_one()


class TestCreateInvoice:
    def test_totals_and_status(self, create_invoice):
        invoice = create_invoice([InvoiceLineInput("X", 2, Decimal("50"))])
        assert invoice.subtotal == Decimal("100.00")
        assert invoice.tax == Decimal("0.00")
        assert invoice.total == Decimal("100.00")
        assert invoice.status is InvoiceStatus.SENT
        assert invoice.paid_amount == Decimal("0")
        assert invoice.outstanding == Decimal("100.00")

    def test_number_keyed_by_clock_date(self, create_invoice):
        first = create_invoice(invoice_date=date(2023, 12, 20))
        second = create_invoice(invoice_date=date(2024, 3, 1))
        assert first.invoice_number == "INV-20240101-001"
        assert second.invoice_number == "INV-20240101-002"

    def test_number_follows_clock(self, create_invoice, deterministic_clock):
        create_invoice()
        deterministic_clock.advance(24 * 60 * 60)
        assert create_invoice().invoice_number == "INV-20240102-001"

    def test_lines_persisted(self, create_invoice):
        invoice = create_invoice([
            InvoiceLineInput("Hours", 10, Decimal("120.00")),
            InvoiceLineInput("Setup", 1, Decimal("250.00")),
        ])
        assert [(l.description, l.quantity, l.total) for l in invoice.lines] == [
            ("Hours", 10, Decimal("1200.00")),
            ("Setup", 1, Decimal("250.00")),
        ]
        assert invoice.total == Decimal("1450.00")

    def test_revenue_entry(self, create_invoice):
        invoice = create_invoice(
            [InvoiceLineInput("X", 2, Decimal("50"))], invoice_date=date(2024, 1, 10)
        )
        entry = invoice.journal_entry
        assert invoice.journal_entry_id == entry.id
        assert entry.entry_date == date(2024, 1, 10)
        assert entry.entry_number == "JE-20240110-001"
        assert entry.description == entry.reference == f"Invoice #{invoice.invoice_number}"

        debit, credit = entry.lines
        assert (debit.account_code, debit.debit, debit.credit) == ("1103", Decimal("100.00"), Decimal("0"))
        assert (credit.account_code, credit.debit, credit.credit) == ("4001", Decimal("0"), Decimal("100.00"))

    def test_zero_total_has_no_entry(self, session, tenant, create_invoice):
        invoice = create_invoice([InvoiceLineInput("Free sample", 3, Decimal("0"))])
        assert invoice.total == Decimal("0.00")
        assert invoice.journal_entry_id is None
        assert invoice.journal_entry is None
        assert _count(session, JournalEntry, tenant.id) == 0

    def test_customer_fields(self, tenant, invoice_service):
        invoice = invoice_service.create_invoice(
            tenant.id,
            customer_name="Umbrella",
            invoice_date=date(2024, 1, 2),
            due_date=date(2024, 1, 31),
            lines=[InvoiceLineInput("X", 1, Decimal("1"))],
            customer_id="CUST-9",
        )
        assert (invoice.customer_name, invoice.customer_id) == ("Umbrella", "CUST-9")
        assert invoice.due_date == date(2024, 1, 31)

    def test_invalid_lines_write_nothing(self, session, tenant, create_invoice):
        with pytest.raises(InvalidInvoiceLineError):
            create_invoice([InvoiceLineInput("X", 0, Decimal("10"))])
        assert _count(session, InvoiceModel, tenant.id) == 0

    def test_missing_well_known_accounts(self, session, bare_tenant, invoice_service):
        with pytest.raises(MissingWellKnownAccountsError) as exc_info:
            invoice_service.create_invoice(
                bare_tenant.id,
                customer_name="Nobody",
                invoice_date=date(2024, 1, 2),
                due_date=date(2024, 1, 31),
                lines=[InvoiceLineInput("X", 1, Decimal("10"))],
            )
        assert str(exc_info.value) == (
            "Chart of accounts incomplete. Ensure Accounts Receivable (1103), "
            "Sales Revenue (4001) exist."
        )
        assert _count(session, InvoiceModel, bare_tenant.id) == 0

    def test_entry_failure_rolls_back_invoice(self, session, tenant, create_invoice, monkeypatch):
        from ledger_kernel.services.journal_service import JournalService

        def _fail(*args, **kwargs):
            raise RuntimeError("ledger unavailable")

        monkeypatch.setattr(JournalService, "create_entry", _fail)
        with pytest.raises(RuntimeError):
            create_invoice()
        assert _count(session, InvoiceModel, tenant.id) == 0

    def test_logged(self, create_invoice, captured_logs):
        invoice = create_invoice()
        created = [r for r in captured_logs() if r["message"] == "invoice_created"]
        assert created[0]["invoice_number"] == invoice.invoice_number
        assert created[0]["total"] == "100.00"


class TestUpdateStatus:
    def test_cancel_unpaid(self, tenant, create_invoice, invoice_service):
        invoice = create_invoice()
        updated = invoice_service.update_status(tenant.id, invoice.id, InvoiceStatus.CANCELLED)
        assert updated.status is InvoiceStatus.CANCELLED
        assert invoice_service.get_invoice(tenant.id, invoice.id).status is InvoiceStatus.CANCELLED

    def test_cancel_paid_rejected(self, tenant, create_invoice, invoice_service, payment_service):
        invoice = create_invoice()
        payment_service.create_payment(
            tenant.id, invoice.id, Decimal("10"), date(2024, 1, 11), PaymentMethod.CASH
        )
        with pytest.raises(InvoicePaidCancellationError) as exc_info:
            invoice_service.update_status(tenant.id, invoice.id, "CANCELLED")
        assert str(exc_info.value) == "Cannot cancel invoice that has received payments"
        current = invoice_service.get_invoice(tenant.id, invoice.id)
        assert current.status is InvoiceStatus.PARTIALLY_PAID

    def test_override_accepted_and_logged(self, tenant, create_invoice, invoice_service, captured_logs):
        invoice = create_invoice()
        updated = invoice_service.update_status(tenant.id, invoice.id, "OVERDUE")
        assert updated.status is InvoiceStatus.OVERDUE
        overrides = [r for r in captured_logs() if r["message"] == "invoice_status_overridden"]
        assert overrides[0]["from_status"] == "SENT"
        assert overrides[0]["to_status"] == "OVERDUE"

    def test_unknown_status(self, tenant, create_invoice, invoice_service):
        invoice = create_invoice()
        with pytest.raises(InvalidStatusError):
            invoice_service.update_status(tenant.id, invoice.id, "ARCHIVED")

    def test_unknown_invoice(self, tenant, invoice_service):
        with pytest.raises(InvoiceNotFoundError):
            invoice_service.update_status(tenant.id, uuid4(), InvoiceStatus.PAID)


class TestReads:
    def test_get_invoice_detail(self, tenant, create_invoice, invoice_service):
        created = create_invoice()
        invoice = invoice_service.get_invoice(tenant.id, created.id)
        assert invoice.invoice_number == created.invoice_number
        assert len(invoice.lines) == 1
        assert invoice.payments == ()
        assert invoice.journal_entry.id == created.journal_entry_id

    def test_get_invoice_other_tenant(self, other_tenant, create_invoice, invoice_service):
        invoice = create_invoice()
        with pytest.raises(InvoiceNotFoundError):
            invoice_service.get_invoice(other_tenant.id, invoice.id)

    def test_find_newest_first(self, tenant, create_invoice, invoice_service):
        older = create_invoice(invoice_date=date(2024, 1, 5))
        newer = create_invoice(invoice_date=date(2024, 1, 20))
        page = invoice_service.find_invoices(tenant.id)
        assert [i.id for i in page.data] == [newer.id, older.id]
        assert page.total == 2

    def test_find_by_status(self, tenant, create_invoice, invoice_service):
        keep = create_invoice()
        dropped = create_invoice()
        invoice_service.update_status(tenant.id, dropped.id, InvoiceStatus.CANCELLED)
        page = invoice_service.find_invoices(tenant.id, status="SENT")
        assert [i.id for i in page.data] == [keep.id]

    def test_find_by_window(self, tenant, create_invoice, invoice_service):
        for day in (1, 15, 31):
            create_invoice(invoice_date=date(2024, 1, day))
        page = invoice_service.find_invoices(
            tenant.id, start_date=date(2024, 1, 15), end_date=date(2024, 1, 31)
        )
        assert sorted(i.invoice_date.day for i in page.data) == [15, 31]

    def test_find_invalid_status(self, tenant, invoice_service):
        with pytest.raises(InvalidStatusError):
            invoice_service.find_invoices(tenant.id, status="LOST")

    def test_find_is_tenant_scoped(self, other_tenant, create_invoice, invoice_service):
        create_invoice()
        assert invoice_service.find_invoices(other_tenant.id).total == 0

    def test_service_without_clock(self, session, config, tenant):
        service = InvoiceService(session, config=config)
        invoice = service.create_invoice(
            tenant.id,
            customer_name="Realtime",
            invoice_date=date(2024, 1, 2),
            due_date=date(2024, 1, 31),
            lines=[InvoiceLineInput("X", 1, Decimal("1"))],
        )
        assert invoice.invoice_number.startswith("INV-")
