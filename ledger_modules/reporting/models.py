"""
Reporting Domain Models (``ledger_modules.reporting.models``).

Frozen report dataclasses.  All monetary fields are ``Decimal`` rounded
to cents.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ledger_kernel.models.account import AccountType


@dataclass(frozen=True)
class TrialBalanceRow:
    """One account's line in the trial balance."""

    account_code: str
    account_name: str
    account_type: AccountType
    indent_level: int
    debit: Decimal
    credit: Decimal
    balance: Decimal


@dataclass(frozen=True)
class TrialBalanceTotals:
    debit: Decimal
    credit: Decimal
    balanced: bool


@dataclass(frozen=True)
class TrialBalanceReport:
    """Trial balance for an optional inclusive date window."""

    start_date: date | None
    end_date: date | None
    accounts: tuple[TrialBalanceRow, ...]
    totals: TrialBalanceTotals

    @property
    def is_empty(self) -> bool:
        return not self.accounts
