"""
Module: ledger_kernel.selectors.journal_selector
Responsibility: Read-only query access to journal entries and their lines.
    Converts ORM models to frozen DTOs joined with account display data.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Read-only: No mutations performed on any queried data.
    - Lines are sorted by line_seq for deterministic ordering.
    - Listings order by entry date descending, then creation time
      descending.

Failure modes:
    - get_entry raises JournalEntryNotFoundError when the entry is absent
      in the tenant.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from ledger_kernel.domain.dtos import JournalEntryDTO, JournalLineDTO, Page
from ledger_kernel.exceptions import JournalEntryNotFoundError
from ledger_kernel.models.journal import JournalEntry, JournalLine
from ledger_kernel.selectors.base import BaseSelector


def entry_to_dto(entry: JournalEntry) -> JournalEntryDTO:
    """Convert an ORM entry (lines and their accounts loaded) to a DTO."""
    lines = tuple(
        JournalLineDTO(
            id=line.id,
            line_seq=line.line_seq,
            account_id=line.account_id,
            account_code=line.account.code,
            account_name=line.account.name,
            account_type=line.account.account_type,
            debit=line.debit,
            credit=line.credit,
            description=line.description,
        )
        for line in sorted(entry.lines, key=lambda x: x.line_seq)
    )
    return JournalEntryDTO(
        id=entry.id,
        tenant_id=entry.tenant_id,
        entry_number=entry.entry_number,
        entry_date=entry.entry_date,
        description=entry.description,
        reference=entry.reference,
        created_at=entry.created_at,
        lines=lines,
    )


class JournalSelector(BaseSelector[JournalEntry]):
    """
    Read-only journal entry queries.

    Non-goals:
        - This selector does NOT compute balances; use LedgerSelector.
    """

    def _load(self, tenant_id: UUID, entry_id: UUID) -> JournalEntry | None:
        return self.session.execute(
            select(JournalEntry)
            .options(selectinload(JournalEntry.lines).joinedload(JournalLine.account))
            .where(
                JournalEntry.tenant_id == tenant_id,
                JournalEntry.id == entry_id,
            )
        ).scalar_one_or_none()

    def get_entry(self, tenant_id: UUID, entry_id: UUID) -> JournalEntryDTO:
        entry = self._load(tenant_id, entry_id)
        if entry is None:
            raise JournalEntryNotFoundError(str(entry_id))
        return entry_to_dto(entry)

    def find_entries(
        self,
        tenant_id: UUID,
        page: int = 1,
        limit: int = 10,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Page[JournalEntryDTO]:
        """
        One page of a tenant's entries within an inclusive date window.

        Args:
            page: 1-based page number.
            limit: Page size.
            start_date: Earliest entry_date to include.
            end_date: Latest entry_date to include.
        """
        page = max(page, 1)
        limit = max(limit, 1)

        conditions = [JournalEntry.tenant_id == tenant_id]
        if start_date is not None:
            conditions.append(JournalEntry.entry_date >= start_date)
        if end_date is not None:
            conditions.append(JournalEntry.entry_date <= end_date)

        total = self.session.execute(
            select(func.count(JournalEntry.id)).where(*conditions)
        ).scalar_one()

        entries = self.session.execute(
            select(JournalEntry)
            .options(selectinload(JournalEntry.lines).joinedload(JournalLine.account))
            .where(*conditions)
            .order_by(JournalEntry.entry_date.desc(), JournalEntry.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars().all()

        return Page(
            data=tuple(entry_to_dto(e) for e in entries),
            total=total,
            page=page,
            limit=limit,
        )
