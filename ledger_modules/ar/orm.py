"""
Invoice/Payment ORM Models (``ledger_modules.ar.orm``).

Responsibility
--------------
SQLAlchemy persistence models for the receivables subledger.  Maps the
frozen views in ``models.py`` to database tables.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``ledger_kernel.db.base``
and sibling ``models.py``.  MUST NOT be imported by ``ledger_kernel``.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Date,
    Enum as SAEnum,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TenantScopedBase, UUIDString
from ledger_modules.ar.models import (
    InvoiceDTO,
    InvoiceLineDTO,
    InvoiceStatus,
    InvoiceSummary,
    PaymentDTO,
    PaymentMethod,
    PaymentSummary,
)


# ---------------------------------------------------------------------------
# 1. InvoiceModel
# ---------------------------------------------------------------------------


class InvoiceModel(TenantScopedBase):
    """
    ORM model for customer invoices.

    Lines and payments are stored in child tables via the ``lines`` and
    ``payments`` relationships.

    Guarantees:
        - invoice_number is unique per tenant (uq_invoice_tenant_number).
        - Monetary fields use Decimal (Numeric(38,9) via type_annotation_map).
        - journal_entry_id references the synthesized entry; it is NULL
          only for zero-total invoices.
    """

    __tablename__ = "invoices"

    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "invoice_number", name="uq_invoice_tenant_number"
        ),
        Index("idx_invoice_tenant_status", "tenant_id", "status"),
        Index("idx_invoice_tenant_date", "tenant_id", "invoice_date"),
    )

    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(nullable=False)
    tax: Mapped[Decimal] = mapped_column(nullable=False)
    total: Mapped[Decimal] = mapped_column(nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    status: Mapped[InvoiceStatus] = mapped_column(
        SAEnum(InvoiceStatus, native_enum=False, length=20),
        nullable=False,
        default=InvoiceStatus.SENT,
    )
    journal_entry_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("journal_entries.id"),
        nullable=True,
    )

    lines: Mapped[list["InvoiceLineModel"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="InvoiceLineModel.line_seq",
    )
    payments: Mapped[list["PaymentModel"]] = relationship(
        back_populates="invoice",
        lazy="selectin",
        order_by="PaymentModel.created_at",
    )

    def to_summary(self) -> InvoiceSummary:
        return InvoiceSummary(
            id=self.id,
            invoice_number=self.invoice_number,
            customer_name=self.customer_name,
            total=self.total,
            paid_amount=self.paid_amount,
            status=self.status,
        )

    def to_dto(self, journal_entry=None) -> InvoiceDTO:
        """Convert ORM model to frozen dataclass."""
        return InvoiceDTO(
            id=self.id,
            tenant_id=self.tenant_id,
            invoice_number=self.invoice_number,
            customer_name=self.customer_name,
            customer_id=self.customer_id,
            invoice_date=self.invoice_date,
            due_date=self.due_date,
            subtotal=self.subtotal,
            tax=self.tax,
            total=self.total,
            status=self.status,
            paid_amount=self.paid_amount,
            journal_entry_id=self.journal_entry_id,
            created_at=self.created_at,
            lines=tuple(line.to_dto() for line in self.lines),
            payments=tuple(payment.to_summary() for payment in self.payments),
            journal_entry=journal_entry,
        )

    def __repr__(self) -> str:
        return f"<InvoiceModel {self.invoice_number}: {self.status.value}>"


# ---------------------------------------------------------------------------
# 2. InvoiceLineModel
# ---------------------------------------------------------------------------


class InvoiceLineModel(TenantScopedBase):
    """
    ORM model for invoice line items.

    Guarantees:
        - invoice_id FK to invoices.id.
        - total == round(quantity * unit_price, 2), computed at creation.
    """

    __tablename__ = "invoice_lines"

    __table_args__ = (Index("idx_invoice_line_invoice", "invoice_id"),)

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("invoices.id"), nullable=False
    )
    line_seq: Mapped[int] = mapped_column(nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[int] = mapped_column(nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(nullable=False)
    total: Mapped[Decimal] = mapped_column(nullable=False)

    invoice: Mapped["InvoiceModel"] = relationship(back_populates="lines")

    def to_dto(self) -> InvoiceLineDTO:
        return InvoiceLineDTO(
            id=self.id,
            description=self.description,
            quantity=self.quantity,
            unit_price=self.unit_price,
            total=self.total,
        )

    def __repr__(self) -> str:
        return f"<InvoiceLineModel {self.description}: {self.total}>"


# ---------------------------------------------------------------------------
# 3. PaymentModel
# ---------------------------------------------------------------------------


class PaymentModel(TenantScopedBase):
    """
    ORM model for payments received against an invoice.

    Guarantees:
        - amount > 0 and never more than the invoice's outstanding balance
          at the time of recording.
        - journal_entry_id references the synthesized Dr Cash/Bank, Cr AR
          entry.
    """

    __tablename__ = "payments"

    __table_args__ = (
        Index("idx_payment_tenant_invoice", "tenant_id", "invoice_id"),
        Index("idx_payment_tenant_date", "tenant_id", "payment_date"),
    )

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("invoices.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(PaymentMethod, native_enum=False, length=20),
        nullable=False,
    )
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    journal_entry_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("journal_entries.id"),
        nullable=True,
    )

    invoice: Mapped["InvoiceModel"] = relationship(back_populates="payments")

    def to_summary(self) -> PaymentSummary:
        return PaymentSummary(
            id=self.id,
            amount=self.amount,
            payment_date=self.payment_date,
            method=self.method,
            reference=self.reference,
        )

    def to_dto(self, journal_entry=None) -> PaymentDTO:
        """Convert ORM model to frozen dataclass."""
        return PaymentDTO(
            id=self.id,
            tenant_id=self.tenant_id,
            invoice_id=self.invoice_id,
            amount=self.amount,
            payment_date=self.payment_date,
            method=self.method,
            reference=self.reference,
            journal_entry_id=self.journal_entry_id,
            created_at=self.created_at,
            invoice=self.invoice.to_summary() if self.invoice is not None else None,
            journal_entry=journal_entry,
        )

    def __repr__(self) -> str:
        return f"<PaymentModel {self.amount} on {self.payment_date}>"
