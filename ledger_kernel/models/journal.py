"""
Module: ledger_kernel.models.journal
Responsibility: ORM persistence for journal entries and their debit/credit
    lines.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - (tenant_id, entry_number) is unique (uq_journal_tenant_number).
    - Lines are owned by their entry (cascade delete-orphan) and ordered by
      line_seq.
    - The balance rule itself (>= 2 lines, one-sided lines, debits equal
      credits within 0.01) is enforced by domain.validation before any row
      is added; is_balanced is a read-side convenience.

Audit relevance:
    Entries and lines are append-only: no service updates or deletes them.
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TenantScopedBase, TrackedBase, UUIDString
from ledger_kernel.db.types import BALANCE_TOLERANCE

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account


class JournalEntry(TenantScopedBase):
    """
    A balanced, immutable double-entry posting.

    Contract:
        entry_number follows PREFIX-YYYYMMDD-NNN keyed by entry_date and is
        unique within the tenant.

    Non-goals:
        - No status, reversal or period workflow.  Entries never change
          after creation.
    """

    __tablename__ = "journal_entries"

    __table_args__ = (
        UniqueConstraint("tenant_id", "entry_number", name="uq_journal_tenant_number"),
        Index("idx_journal_tenant_date", "tenant_id", "entry_date"),
    )

    entry_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    entry_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    reference: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="JournalLine.line_seq",
    )

    def __repr__(self) -> str:
        return f"<JournalEntry {self.entry_number}>"

    @property
    def total_debits(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0"))

    @property
    def total_credits(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0"))

    @property
    def is_balanced(self) -> bool:
        """Check if debits equal credits within tolerance."""
        return abs(self.total_debits - self.total_credits) <= BALANCE_TOLERANCE


class JournalLine(TrackedBase):
    """
    One debit or credit against one account.

    Guarantees:
        - Exactly one of debit/credit is strictly positive; the other is 0.
    """

    __tablename__ = "journal_lines"

    __table_args__ = (
        Index("idx_line_entry", "journal_entry_id"),
        Index("idx_line_account", "account_id"),
    )

    journal_entry_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("journal_entries.id"),
        nullable=False,
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=False,
    )

    debit: Mapped[Decimal] = mapped_column(
        Numeric(38, 9),
        nullable=False,
        default=Decimal("0"),
    )

    credit: Mapped[Decimal] = mapped_column(
        Numeric(38, 9),
        nullable=False,
        default=Decimal("0"),
    )

    description: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    # Line sequence within entry (for deterministic ordering)
    line_seq: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    entry: Mapped["JournalEntry"] = relationship(
        back_populates="lines",
    )

    account: Mapped["Account"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<JournalLine dr={self.debit} cr={self.credit}>"
