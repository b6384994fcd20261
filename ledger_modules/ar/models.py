"""
Invoice/Payment Domain Models (``ledger_modules.ar.models``).

Responsibility
--------------
Frozen dataclass value objects for the receivables subledger: invoice
line input, computed totals, and the invoice / payment views returned by
the services.  Also the two pure rules of the subledger, invoice totals
and status derivation from accumulated payments.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
``InvoiceService`` / ``PaymentService`` and returned to callers.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* ``subtotal``, ``tax`` and ``total`` are each rounded to cents.

Failure modes
-------------
* ``validate_invoice_lines`` raises ``InvalidInvoiceLineError``.
* Construction with invalid enum values raises ``ValueError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Sequence
from uuid import UUID

from ledger_kernel.db.types import BALANCE_TOLERANCE, ZERO, round_money, to_decimal
from ledger_kernel.domain.dtos import JournalEntryDTO
from ledger_kernel.exceptions import InvalidInvoiceLineError


class InvoiceStatus(str, Enum):
    """Invoice lifecycle states."""

    DRAFT = "DRAFT"
    SENT = "SENT"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    """How a payment was received; CASH settles to the cash account, the rest to bank."""

    CASH = "CASH"
    BANK = "BANK"
    CHEQUE = "CHEQUE"


@dataclass(frozen=True)
class InvoiceLineInput:
    """A line as submitted by the caller."""

    description: str
    quantity: int
    unit_price: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


@dataclass(frozen=True)
class InvoiceLineDTO:
    id: UUID
    description: str
    quantity: int
    unit_price: Decimal
    total: Decimal


@dataclass(frozen=True)
class PaymentSummary:
    """A payment as listed on its invoice."""

    id: UUID
    amount: Decimal
    payment_date: date
    method: PaymentMethod
    reference: str | None = None


@dataclass(frozen=True)
class InvoiceSummary:
    """The invoice fields shown alongside a payment."""

    id: UUID
    invoice_number: str
    customer_name: str
    total: Decimal
    paid_amount: Decimal
    status: InvoiceStatus


@dataclass(frozen=True)
class InvoiceDTO:
    """A customer invoice with its lines, payments and journal entry."""

    id: UUID
    tenant_id: UUID
    invoice_number: str
    customer_name: str
    customer_id: str | None
    invoice_date: date
    due_date: date
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    status: InvoiceStatus
    paid_amount: Decimal
    journal_entry_id: UUID | None
    created_at: datetime
    lines: tuple[InvoiceLineDTO, ...] = ()
    payments: tuple[PaymentSummary, ...] = ()
    journal_entry: JournalEntryDTO | None = None

    @property
    def outstanding(self) -> Decimal:
        return round_money(self.total - self.paid_amount)


@dataclass(frozen=True)
class PaymentDTO:
    """A recorded payment with the invoice it settles and its journal entry."""

    id: UUID
    tenant_id: UUID
    invoice_id: UUID
    amount: Decimal
    payment_date: date
    method: PaymentMethod
    reference: str | None
    journal_entry_id: UUID | None
    created_at: datetime
    invoice: InvoiceSummary | None = None
    journal_entry: JournalEntryDTO | None = None


def line_total(line: InvoiceLineInput) -> Decimal:
    return round_money(Decimal(line.quantity) * to_decimal(line.unit_price))


def calculate_totals(lines: Sequence[InvoiceLineInput]) -> InvoiceTotals:
    """
    ``subtotal = sum(quantity * unit_price)``, ``tax = 0``,
    ``total = subtotal + tax``; each rounded independently.
    """
    subtotal = round_money(
        sum(
            (Decimal(line.quantity) * to_decimal(line.unit_price) for line in lines),
            ZERO,
        )
    )
    tax = round_money(ZERO)
    return InvoiceTotals(subtotal=subtotal, tax=tax, total=round_money(subtotal + tax))


def validate_invoice_lines(lines: Sequence[InvoiceLineInput]) -> None:
    """
    Reject empty line lists, non-positive or non-integer quantities and
    negative or non-numeric unit prices.  Line numbers are 1-based.
    """
    if not lines:
        raise InvalidInvoiceLineError("At least one line is required")

    for index, line in enumerate(lines, start=1):
        quantity = line.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidInvoiceLineError("Quantity must be a whole number", index)
        if quantity <= 0:
            raise InvalidInvoiceLineError("Quantity must be greater than 0", index)
        try:
            unit_price = to_decimal(line.unit_price)
        except (TypeError, InvalidOperation) as exc:
            raise InvalidInvoiceLineError(
                "Unit price must be a decimal amount", index
            ) from exc
        if not unit_price.is_finite() or unit_price < 0:
            raise InvalidInvoiceLineError("Unit price must be >= 0", index)


def derive_status(
    paid_amount: Decimal,
    total: Decimal,
    tolerance: Decimal = BALANCE_TOLERANCE,
) -> InvoiceStatus:
    """Status implied by the amount paid so far."""
    if paid_amount >= total - tolerance:
        return InvoiceStatus.PAID
    if paid_amount > 0:
        return InvoiceStatus.PARTIALLY_PAID
    return InvoiceStatus.SENT
