"""
Invoice/Payment Subledger Service - Orchestrates receivables via the kernel.

Thin glue layer that:
1. Validates invoice lines and payment amounts (pure rules in ``models``)
2. Allocates INV numbers from the kernel's locked sequence counters
3. Calls JournalService to synthesize the balancing journal entries
4. Keeps invoice ``paid_amount`` / ``status`` in step with payments

All posting lives in the kernel.  These services own the transaction
boundary: each create / update commits on success and rolls back on any
failure, so an invoice never exists without its journal entry and a
payment never exists without both its entry and the invoice update.

Usage:
    service = InvoiceService(session, clock)
    invoice = service.create_invoice(
        tenant_id=tenant.id, customer_name="Acme",
        invoice_date=date(2024, 3, 1), due_date=date(2024, 3, 31),
        lines=[InvoiceLineInput("Consulting", 2, Decimal("150.00"))],
    )
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger_config import LedgerConfig, get_active_config
from ledger_kernel.db.types import round_money, to_decimal
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import AccountRef, LineInput, Page
from ledger_kernel.exceptions import (
    DocumentNumberConflictError,
    InvalidPaymentAmountError,
    InvalidPaymentMethodError,
    InvalidStatusError,
    InvoiceCancelledError,
    InvoiceNotFoundError,
    InvoicePaidCancellationError,
    MissingWellKnownAccountsError,
    PaymentExceedsOutstandingError,
    PaymentNotFoundError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.selectors.account_selector import AccountSelector
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.services.journal_service import JournalService, is_number_collision
from ledger_kernel.services.sequence_service import DocumentNumberService
from ledger_modules.ar.models import (
    InvoiceDTO,
    InvoiceLineInput,
    InvoiceStatus,
    PaymentDTO,
    PaymentMethod,
    calculate_totals,
    derive_status,
    line_total,
    validate_invoice_lines,
)
from ledger_modules.ar.orm import InvoiceLineModel, InvoiceModel, PaymentModel

logger = get_logger("modules.ar.service")


def coerce_status(value: InvoiceStatus | str) -> InvoiceStatus:
    try:
        return InvoiceStatus(value)
    except ValueError as exc:
        raise InvalidStatusError(str(value)) from exc


def coerce_method(value: PaymentMethod | str) -> PaymentMethod:
    try:
        return PaymentMethod(value)
    except ValueError as exc:
        raise InvalidPaymentMethodError(str(value)) from exc


class _SubledgerService:
    """Shared wiring for the invoice and payment services."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: LedgerConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or get_active_config()

        # Kernel writes share the session; we own the boundary
        self._journal = JournalService(session, self._config)
        self._accounts = AccountSelector(session)
        self._entries = JournalSelector(session)

    def _require_accounts(
        self, tenant_id: UUID, required: dict[str, str]
    ) -> dict[str, AccountRef]:
        """Resolve ``{label: code}`` to accounts or raise listing all of them."""
        found = self._accounts.find_by_codes(tenant_id, required.values())
        if any(code not in found for code in required.values()):
            raise MissingWellKnownAccountsError(required)
        return {label: found[code] for label, code in required.items()}

    def _load_invoice(
        self, tenant_id: UUID, invoice_id: UUID, for_update: bool = False
    ) -> InvoiceModel:
        """
        Fetch an invoice in the tenant.

        With ``for_update`` the row is locked until the transaction ends and
        its attributes are refreshed from the database, so paid_amount and
        status reflect every payment committed before the lock was granted.
        """
        query = select(InvoiceModel).where(
            InvoiceModel.tenant_id == tenant_id,
            InvoiceModel.id == invoice_id,
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        invoice = self._session.execute(query).scalar_one_or_none()
        if invoice is None:
            raise InvoiceNotFoundError(str(invoice_id))
        return invoice

    def _entry(self, tenant_id: UUID, entry_id: UUID | None):
        if entry_id is None:
            return None
        return self._entries.get_entry(tenant_id, entry_id)


class InvoiceService(_SubledgerService):
    """
    Customer invoices: creation with revenue recognition, status changes
    and lookups.

    Posting: Dr Accounts Receivable / Cr Sales Revenue for the invoice
    total, dated at the invoice date.
    """

    def generate_invoice_number(self, tenant_id: UUID) -> str:
        """INV-YYYYMMDD-NNN keyed by today's date (UTC) on the clock."""
        return DocumentNumberService(
            self._session, width=self._config.numbering.sequence_width
        ).next_number(
            tenant_id,
            self._config.numbering.invoice_prefix,
            self._clock.today(),
            InvoiceModel.invoice_number,
        )

    def create_invoice(
        self,
        tenant_id: UUID,
        customer_name: str,
        invoice_date: date,
        due_date: date,
        lines: Sequence[InvoiceLineInput],
        customer_id: str | None = None,
    ) -> InvoiceDTO:
        """
        Create an invoice and its revenue journal entry in one transaction.

        Raises:
            InvalidInvoiceLineError: no lines, or a bad quantity / price.
            MissingWellKnownAccountsError: AR or revenue account absent.
        """
        validate_invoice_lines(lines)
        totals = calculate_totals(lines)

        well_known = self._config.well_known_accounts
        accounts = self._require_accounts(
            tenant_id,
            {
                "Accounts Receivable": well_known.accounts_receivable,
                "Sales Revenue": well_known.sales_revenue,
            },
        )

        with LogContext.bind(tenant_id=tenant_id, operation="create_invoice"):
            try:
                invoice_number = self.generate_invoice_number(tenant_id)

                logger.info("invoice_create_started", extra={
                    "tenant_id": str(tenant_id),
                    "invoice_number": invoice_number,
                    "total": str(totals.total),
                })

                invoice = InvoiceModel(
                    tenant_id=tenant_id,
                    invoice_number=invoice_number,
                    customer_name=customer_name,
                    customer_id=customer_id,
                    invoice_date=invoice_date,
                    due_date=due_date,
                    subtotal=totals.subtotal,
                    tax=totals.tax,
                    total=totals.total,
                    paid_amount=round_money(Decimal("0")),
                    status=InvoiceStatus.SENT,
                )
                invoice.lines = [
                    InvoiceLineModel(
                        tenant_id=tenant_id,
                        line_seq=seq,
                        description=line.description,
                        quantity=line.quantity,
                        unit_price=to_decimal(line.unit_price),
                        total=line_total(line),
                    )
                    for seq, line in enumerate(lines)
                ]

                try:
                    with self._session.begin_nested():
                        self._session.add(invoice)
                        self._session.flush()
                except IntegrityError as exc:
                    if is_number_collision(
                        exc, "uq_invoice_tenant_number", "invoice_number"
                    ):
                        raise DocumentNumberConflictError(invoice_number) from exc
                    raise

                journal_entry = None
                if totals.total > 0:
                    text = f"Invoice #{invoice_number}"
                    journal_entry = self._journal.create_entry(
                        tenant_id,
                        invoice_date,
                        [
                            LineInput.debit_line(
                                accounts["Accounts Receivable"].id, totals.total, text
                            ),
                            LineInput.credit_line(
                                accounts["Sales Revenue"].id, totals.total, text
                            ),
                        ],
                        description=text,
                        reference=text,
                    )
                    invoice.journal_entry_id = journal_entry.id
                    self._session.flush()

                self._session.commit()
                logger.info("invoice_created", extra={
                    "tenant_id": str(tenant_id),
                    "invoice_id": str(invoice.id),
                    "invoice_number": invoice_number,
                    "total": str(totals.total),
                    "journal_entry_id": str(invoice.journal_entry_id)
                    if invoice.journal_entry_id else None,
                })
                return invoice.to_dto(journal_entry=journal_entry)

            except Exception:
                self._session.rollback()
                raise

    def update_status(
        self,
        tenant_id: UUID,
        invoice_id: UUID,
        status: InvoiceStatus | str,
    ) -> InvoiceDTO:
        """
        Set an invoice's status.

        Cancellation is refused once any payment has been received.  Other
        transitions are accepted as given and logged as overrides.

        Raises:
            InvalidStatusError: unknown status value.
            InvoiceNotFoundError: invoice not in the tenant.
            InvoicePaidCancellationError: cancelling a (partly) paid invoice.
        """
        new_status = coerce_status(status)
        try:
            invoice = self._load_invoice(tenant_id, invoice_id, for_update=True)
            old_status = invoice.status

            if new_status is InvoiceStatus.CANCELLED and invoice.paid_amount > 0:
                raise InvoicePaidCancellationError(
                    invoice.invoice_number, invoice.paid_amount
                )

            invoice.status = new_status
            self._session.flush()
            self._session.commit()

            event = (
                "invoice_cancelled"
                if new_status is InvoiceStatus.CANCELLED
                else "invoice_status_overridden"
            )
            logger.info(event, extra={
                "tenant_id": str(tenant_id),
                "invoice_id": str(invoice_id),
                "from_status": old_status.value,
                "to_status": new_status.value,
            })
            return invoice.to_dto(
                journal_entry=self._entry(tenant_id, invoice.journal_entry_id)
            )

        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Reads
    # =========================================================================

    def get_invoice(self, tenant_id: UUID, invoice_id: UUID) -> InvoiceDTO:
        invoice = self._load_invoice(tenant_id, invoice_id)
        return invoice.to_dto(
            journal_entry=self._entry(tenant_id, invoice.journal_entry_id)
        )

    def find_invoices(
        self,
        tenant_id: UUID,
        page: int = 1,
        limit: int = 10,
        status: InvoiceStatus | str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Page[InvoiceDTO]:
        """
        One page of invoices, newest invoice date first.

        The date window is inclusive and applies to ``invoice_date``.
        """
        page = max(page, 1)
        limit = max(limit, 1)

        conditions = [InvoiceModel.tenant_id == tenant_id]
        if status is not None:
            conditions.append(InvoiceModel.status == coerce_status(status))
        if start_date is not None:
            conditions.append(InvoiceModel.invoice_date >= start_date)
        if end_date is not None:
            conditions.append(InvoiceModel.invoice_date <= end_date)

        total = self._session.execute(
            select(func.count(InvoiceModel.id)).where(*conditions)
        ).scalar_one()

        invoices = self._session.execute(
            select(InvoiceModel)
            .where(*conditions)
            .order_by(InvoiceModel.invoice_date.desc(), InvoiceModel.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars()

        return Page(
            data=tuple(invoice.to_dto() for invoice in invoices),
            total=total,
            page=page,
            limit=limit,
        )


class PaymentService(_SubledgerService):
    """
    Payments received against invoices.

    Posting: Dr Cash (CASH) or Bank (BANK, CHEQUE) / Cr Accounts
    Receivable for the payment amount, dated at the payment date.
    """

    def cash_account_code(self, method: PaymentMethod) -> str:
        well_known = self._config.well_known_accounts
        if method is PaymentMethod.CASH:
            return well_known.cash
        return well_known.bank

    def create_payment(
        self,
        tenant_id: UUID,
        invoice_id: UUID,
        amount: Decimal | int | str,
        payment_date: date,
        method: PaymentMethod | str,
        reference: str | None = None,
    ) -> PaymentDTO:
        """
        Record a payment, post it and advance the invoice in one transaction.

        Raises:
            InvalidPaymentAmountError: amount <= 0.
            InvalidPaymentMethodError: unknown method.
            InvoiceNotFoundError: invoice not in the tenant.
            InvoiceCancelledError: invoice is cancelled.
            PaymentExceedsOutstandingError: amount > total - paid_amount.
            MissingWellKnownAccountsError: cash-side or AR account absent.
        """
        amount = round_money(to_decimal(amount))
        if amount <= 0:
            raise InvalidPaymentAmountError(amount)
        method = coerce_method(method)

        cash_label = "Cash" if method is PaymentMethod.CASH else "Bank"

        with LogContext.bind(tenant_id=tenant_id, operation="create_payment"):
            try:
                # Locked: concurrent payments on one invoice apply one at a time
                invoice = self._load_invoice(tenant_id, invoice_id, for_update=True)
                if invoice.status is InvoiceStatus.CANCELLED:
                    raise InvoiceCancelledError(invoice.invoice_number)

                outstanding = round_money(invoice.total - invoice.paid_amount)
                if amount > outstanding:
                    raise PaymentExceedsOutstandingError(amount, outstanding)

                accounts = self._require_accounts(
                    tenant_id,
                    {
                        cash_label: self.cash_account_code(method),
                        "Accounts Receivable": (
                            self._config.well_known_accounts.accounts_receivable
                        ),
                    },
                )

                logger.info("payment_record_started", extra={
                    "tenant_id": str(tenant_id),
                    "invoice_id": str(invoice_id),
                    "amount": str(amount),
                    "method": method.value,
                })

                payment = PaymentModel(
                    tenant_id=tenant_id,
                    invoice=invoice,
                    amount=amount,
                    payment_date=payment_date,
                    method=method,
                    reference=reference,
                )
                self._session.add(payment)
                self._session.flush()

                text = f"Payment for Invoice #{invoice.invoice_number}"
                journal_entry = self._journal.create_entry(
                    tenant_id,
                    payment_date,
                    [
                        LineInput.debit_line(accounts[cash_label].id, amount, text),
                        LineInput.credit_line(
                            accounts["Accounts Receivable"].id, amount, text
                        ),
                    ],
                    description=text,
                    reference=text,
                )
                payment.journal_entry_id = journal_entry.id

                new_paid = round_money(invoice.paid_amount + amount)
                invoice.paid_amount = new_paid
                invoice.status = derive_status(
                    new_paid, invoice.total, self._config.balance_tolerance
                )
                self._session.flush()

                self._session.commit()
                logger.info("payment_recorded", extra={
                    "tenant_id": str(tenant_id),
                    "payment_id": str(payment.id),
                    "invoice_id": str(invoice_id),
                    "amount": str(amount),
                    "paid_amount": str(new_paid),
                    "invoice_status": invoice.status.value,
                    "journal_entry_id": str(journal_entry.id),
                })
                return payment.to_dto(journal_entry=journal_entry)

            except Exception:
                self._session.rollback()
                raise

    # =========================================================================
    # Reads
    # =========================================================================

    def get_payment(self, tenant_id: UUID, payment_id: UUID) -> PaymentDTO:
        payment = self._session.execute(
            select(PaymentModel).where(
                PaymentModel.tenant_id == tenant_id,
                PaymentModel.id == payment_id,
            )
        ).scalar_one_or_none()
        if payment is None:
            raise PaymentNotFoundError(str(payment_id))
        return payment.to_dto(
            journal_entry=self._entry(tenant_id, payment.journal_entry_id)
        )

    def find_payments(
        self,
        tenant_id: UUID,
        invoice_id: UUID | None = None,
        method: PaymentMethod | str | None = None,
    ) -> list[PaymentDTO]:
        """Payments newest payment date first, optionally for one invoice or method."""
        query = select(PaymentModel).where(PaymentModel.tenant_id == tenant_id)
        if invoice_id is not None:
            query = query.where(PaymentModel.invoice_id == invoice_id)
        if method is not None:
            query = query.where(PaymentModel.method == coerce_method(method))
        query = query.order_by(
            PaymentModel.payment_date.desc(), PaymentModel.created_at.desc()
        )
        return [payment.to_dto() for payment in self._session.execute(query).scalars()]
