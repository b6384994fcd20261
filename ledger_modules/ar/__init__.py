"""
Invoice/Payment Subledger (``ledger_modules.ar``).

Customer invoices and the payments received against them.  Every
invoice with a positive total and every payment synthesizes one balanced
journal entry through the kernel's ``JournalService``.
"""

from ledger_modules.ar.models import (
    InvoiceDTO,
    InvoiceLineDTO,
    InvoiceLineInput,
    InvoiceStatus,
    InvoiceSummary,
    InvoiceTotals,
    PaymentDTO,
    PaymentMethod,
    PaymentSummary,
    calculate_totals,
    derive_status,
)
from ledger_modules.ar.service import InvoiceService, PaymentService

__all__ = [
    "InvoiceDTO",
    "InvoiceLineDTO",
    "InvoiceLineInput",
    "InvoiceService",
    "InvoiceStatus",
    "InvoiceSummary",
    "InvoiceTotals",
    "PaymentDTO",
    "PaymentMethod",
    "PaymentService",
    "PaymentSummary",
    "calculate_totals",
    "derive_status",
]
