"""
JournalService -- the ledger engine.

Responsibility:
    Validates and persists journal entries.  Every write to the general
    ledger, whether a manual entry or one synthesized by the invoice and
    payment subledger, goes through ``create_entry``.

Architecture position:
    Kernel > Services.  Flushes only; the caller owns the transaction.

Invariants enforced:
    - Balance: ``validate_lines`` runs before anything is added to the
      session (>= 2 one-sided lines, debits equal credits within 0.01).
    - Tenant isolation: every line's account must belong to the tenant.
    - Numbering: JE-YYYYMMDD-NNN keyed by the entry date, allocated from
      the locked per-tenant-per-day counter.
    - Immutability: there is no update or delete operation.

Failure modes:
    - JournalLineError subclasses / UnbalancedEntryError on invalid lines.
    - UnresolvedAccountsError listing account ids outside the tenant.
    - DocumentNumberConflictError if the number collides at flush.

Audit relevance:
    journal_entry_created is logged with the entry number and totals.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger_config import LedgerConfig, get_active_config
from ledger_kernel.db.types import to_decimal
from ledger_kernel.domain.dtos import JournalEntryDTO, LineInput, Page
from ledger_kernel.domain.validation import validate_lines
from ledger_kernel.exceptions import DocumentNumberConflictError, UnresolvedAccountsError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import JournalEntry, JournalLine
from ledger_kernel.selectors.account_selector import AccountSelector
from ledger_kernel.selectors.journal_selector import JournalSelector, entry_to_dto
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.sequence_service import DocumentNumberService

logger = get_logger("services.journal")


def is_number_collision(exc: IntegrityError, constraint: str, column: str) -> bool:
    """True if the IntegrityError came from a document-number unique key."""
    message = str(exc.orig)
    return constraint in message or column in message


class JournalService(BaseService[JournalEntry]):
    """
    Creates and reads journal entries.

    Contract:
        ``create_entry`` either flushes one complete, balanced entry with
        all of its lines or raises before adding anything.

    Non-goals:
        - Does NOT commit.
        - No status, posting, reversal or period workflow.
    """

    def __init__(self, session: Session, config: LedgerConfig | None = None):
        super().__init__(session)
        self._config = config or get_active_config()
        self._numbers = DocumentNumberService(
            session, width=self._config.numbering.sequence_width
        )
        self._accounts = AccountSelector(session)
        self._journal = JournalSelector(session)
        self._ledger = LedgerSelector(session)

    def validate_lines(self, lines: Sequence[LineInput]) -> tuple[Decimal, Decimal]:
        return validate_lines(lines, tolerance=self._config.balance_tolerance)

    def generate_entry_number(self, tenant_id: UUID, entry_date: date) -> str:
        return self._numbers.next_number(
            tenant_id,
            self._config.numbering.journal_entry_prefix,
            entry_date,
            JournalEntry.entry_number,
        )

    def create_entry(
        self,
        tenant_id: UUID,
        entry_date: date,
        lines: Sequence[LineInput],
        description: str | None = None,
        reference: str | None = None,
    ) -> JournalEntryDTO:
        """
        Validate and persist a journal entry.

        Args:
            tenant_id: Owning tenant.
            entry_date: Accounting date; also keys the entry number.
            lines: At least two one-sided, balanced lines.
            description: Optional entry description.
            reference: Optional external reference.

        Returns:
            The persisted entry with account code/name/type on each line.
        """
        total_debit, total_credit = self.validate_lines(lines)

        requested = list(dict.fromkeys(line.account_id for line in lines))
        resolved = self._accounts.find_by_ids(tenant_id, requested)
        unresolved = [str(a) for a in requested if a not in resolved]
        if unresolved:
            raise UnresolvedAccountsError(unresolved)

        entry_number = self.generate_entry_number(tenant_id, entry_date)

        entry = JournalEntry(
            tenant_id=tenant_id,
            entry_number=entry_number,
            entry_date=entry_date,
            description=description,
            reference=reference,
        )
        entry.lines = [
            JournalLine(
                account_id=line.account_id,
                debit=to_decimal(line.debit),
                credit=to_decimal(line.credit),
                description=line.description,
                line_seq=seq,
            )
            for seq, line in enumerate(lines)
        ]

        try:
            with self.session.begin_nested():
                self.session.add(entry)
                self.session.flush()
        except IntegrityError as exc:
            if is_number_collision(exc, "uq_journal_tenant_number", "entry_number"):
                raise DocumentNumberConflictError(entry_number) from exc
            raise

        logger.info(
            "journal_entry_created",
            extra={
                "tenant_id": str(tenant_id),
                "entry_id": str(entry.id),
                "entry_number": entry_number,
                "entry_date": entry_date.isoformat(),
                "line_count": len(lines),
                "total_debit": str(total_debit),
                "total_credit": str(total_credit),
            },
        )
        return entry_to_dto(entry)

    # =========================================================================
    # Reads
    # =========================================================================

    def find_entries(
        self,
        tenant_id: UUID,
        page: int = 1,
        limit: int = 10,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Page[JournalEntryDTO]:
        return self._journal.find_entries(tenant_id, page, limit, start_date, end_date)

    def get_entry(self, tenant_id: UUID, entry_id: UUID) -> JournalEntryDTO:
        return self._journal.get_entry(tenant_id, entry_id)

    def account_balance(
        self,
        account_id: UUID,
        tenant_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Decimal:
        """Raw debit-minus-credit balance of one account, rounded to cents."""
        return self._ledger.account_balance(account_id, tenant_id, start_date, end_date)
