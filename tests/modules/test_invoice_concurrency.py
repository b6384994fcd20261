"""
Tests for invoice updates arriving from more than one session.

Validates:
- A payment committed by another session is seen before the cap check
- Cancellation is refused once another session has recorded a payment
- Concurrent payments on PostgreSQL never exceed the invoice total, and
  the invoice's paid_amount matches what the ledger credited to AR
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.db.engine import get_session
from ledger_kernel.exceptions import (
    InvoicePaidCancellationError,
    PaymentExceedsOutstandingError,
)
from ledger_kernel.services.journal_service import JournalService
from ledger_modules.ar.models import InvoiceStatus, PaymentMethod
from ledger_modules.ar.service import InvoiceService, PaymentService

PAY_DATE = date(2024, 1, 20)


@pytest.fixture
def invoice(create_invoice):
    """A 100.00 invoice (2 x 50.00)."""
    return create_invoice()


@pytest.fixture
def pay_elsewhere(config, deterministic_clock):
    """Record a payment through a separate session and commit it."""

    def _pay(tenant_id, invoice_id, amount):
        other = get_session()
        try:
            return PaymentService(
                other, clock=deterministic_clock, config=config
            ).create_payment(tenant_id, invoice_id, amount, PAY_DATE, PaymentMethod.BANK)
        finally:
            other.close()

    return _pay


class TestStaleSessionState:
    def test_cap_uses_committed_paid_amount(
        self, tenant, invoice, pay_elsewhere, payment_service, invoice_service
    ):
        pay_elsewhere(tenant.id, invoice.id, Decimal("60"))

        with pytest.raises(PaymentExceedsOutstandingError) as exc_info:
            payment_service.create_payment(
                tenant.id, invoice.id, Decimal("60"), PAY_DATE, PaymentMethod.BANK
            )
        assert exc_info.value.outstanding == Decimal("40.00")

        reloaded = invoice_service.get_invoice(tenant.id, invoice.id)
        assert reloaded.paid_amount == Decimal("60.00")
        assert len(reloaded.payments) == 1

    def test_second_payment_accumulates(
        self, tenant, invoice, pay_elsewhere, payment_service
    ):
        pay_elsewhere(tenant.id, invoice.id, Decimal("60"))

        payment = payment_service.create_payment(
            tenant.id, invoice.id, Decimal("40"), PAY_DATE, PaymentMethod.CASH
        )
        assert payment.invoice.paid_amount == Decimal("100.00")
        assert payment.invoice.status is InvoiceStatus.PAID

    def test_cancel_sees_committed_payment(
        self, tenant, invoice, pay_elsewhere, invoice_service
    ):
        pay_elsewhere(tenant.id, invoice.id, Decimal("60"))

        with pytest.raises(InvoicePaidCancellationError):
            invoice_service.update_status(tenant.id, invoice.id, InvoiceStatus.CANCELLED)


@pytest.mark.postgres
class TestConcurrentPayments:
    def test_payments_serialize_on_invoice(
        self, engine, session, tenant, chart, invoice, config, deterministic_clock
    ):
        if engine.dialect.name != "postgresql":
            pytest.skip("row locks need PostgreSQL")

        workers = 4
        barrier = threading.Barrier(workers)

        def _attempt(_):
            sess = get_session()
            try:
                service = PaymentService(sess, clock=deterministic_clock, config=config)
                barrier.wait(timeout=10)
                service.create_payment(
                    tenant.id, invoice.id, Decimal("60"), PAY_DATE, PaymentMethod.BANK
                )
                return "paid"
            except PaymentExceedsOutstandingError:
                return "refused"
            finally:
                sess.close()

        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(_attempt, range(workers)))

        assert outcomes.count("paid") == 1
        assert outcomes.count("refused") == workers - 1

        session.expire_all()
        reloaded = InvoiceService(session, config=config).get_invoice(tenant.id, invoice.id)
        assert reloaded.paid_amount == Decimal("60.00")
        assert reloaded.status is InvoiceStatus.PARTIALLY_PAID

        ar_balance = JournalService(session, config).account_balance(
            chart["1103"].id, tenant.id
        )
        assert ar_balance == reloaded.total - reloaded.paid_amount
