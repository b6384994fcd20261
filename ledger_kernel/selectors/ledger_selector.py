"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Balance computations derived from journal lines at query
    time.  There are NO stored balances.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Sums are computed over lines whose parent entry belongs to the tenant.
    - Date windows are inclusive on both ends and apply to the entry date.
    - account_balance is raw debit minus credit; natural-balance polarity
      is the caller's concern (see ledger_modules.reporting).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select

from ledger_kernel.db.types import ZERO, round_money
from ledger_kernel.exceptions import AccountNotFoundError
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import JournalEntry, JournalLine
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class AccountTotals:
    """Unrounded debit and credit sums for one account."""

    account_id: UUID
    debit_total: Decimal
    credit_total: Decimal


class LedgerSelector(BaseSelector[JournalLine]):
    """Aggregations over posted journal lines."""

    @staticmethod
    def _window(query, start_date: date | None, end_date: date | None):
        if start_date is not None:
            query = query.where(JournalEntry.entry_date >= start_date)
        if end_date is not None:
            query = query.where(JournalEntry.entry_date <= end_date)
        return query

    def account_totals(
        self,
        tenant_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[AccountTotals]:
        """
        Debit and credit sums per account over the tenant's lines.

        Only accounts with at least one line in the window appear.
        """
        query = (
            select(
                JournalLine.account_id,
                func.sum(JournalLine.debit).label("debit_total"),
                func.sum(JournalLine.credit).label("credit_total"),
            )
            .join(JournalEntry, JournalLine.journal_entry_id == JournalEntry.id)
            .where(JournalEntry.tenant_id == tenant_id)
            .group_by(JournalLine.account_id)
        )
        query = self._window(query, start_date, end_date)

        return [
            AccountTotals(
                account_id=row.account_id,
                debit_total=row.debit_total or ZERO,
                credit_total=row.credit_total or ZERO,
            )
            for row in self.session.execute(query).all()
        ]

    def account_balance(
        self,
        account_id: UUID,
        tenant_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Decimal:
        """
        Sum of debit minus credit for one account, rounded to cents.

        Raises:
            AccountNotFoundError: if the account is not in the tenant.
        """
        found = self.session.execute(
            select(Account.id).where(
                Account.tenant_id == tenant_id,
                Account.id == account_id,
            )
        ).scalar_one_or_none()
        if found is None:
            raise AccountNotFoundError(str(account_id))

        query = (
            select(
                func.coalesce(func.sum(JournalLine.debit), ZERO).label("debits"),
                func.coalesce(func.sum(JournalLine.credit), ZERO).label("credits"),
            )
            .join(JournalEntry, JournalLine.journal_entry_id == JournalEntry.id)
            .where(
                JournalEntry.tenant_id == tenant_id,
                JournalLine.account_id == account_id,
            )
        )
        query = self._window(query, start_date, end_date)

        row = self.session.execute(query).one()
        return round_money(Decimal(row.debits) - Decimal(row.credits))
