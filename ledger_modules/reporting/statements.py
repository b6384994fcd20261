"""
Trial balance transformations (``ledger_modules.reporting.statements``).

Responsibility
--------------
Pure functions that turn per-account debit/credit sums into a
``TrialBalanceReport``: natural-balance polarity, hierarchy indentation,
rounding and grand totals.  No I/O; ``ReportingService`` feeds them from
the selectors.

Invariants enforced
-------------------
* Each account's summed debit and credit are rounded to cents before
  anything else uses them; grand totals add the rounded values.
* Rows are ordered by account code.
* ``balanced`` is ``|total debit - total credit| < 0.01``.
"""

from __future__ import annotations

import dataclasses
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping
from uuid import UUID

from ledger_kernel.db.types import BALANCE_TOLERANCE, ZERO, round_money
from ledger_kernel.domain.dtos import AccountRecord
from ledger_kernel.models.account import AccountType
from ledger_kernel.selectors.ledger_selector import AccountTotals
from ledger_modules.reporting.models import (
    TrialBalanceReport,
    TrialBalanceRow,
    TrialBalanceTotals,
)


def compute_natural_balance(
    debit_total: Decimal,
    credit_total: Decimal,
    account_type: AccountType,
) -> Decimal:
    """
    Compute balance adjusted for the account type's normal side.

    DEBIT-normal (ASSET, EXPENSE): balance = debit_total - credit_total
    CREDIT-normal (LIABILITY, EQUITY, REVENUE): balance = credit_total - debit_total
    """
    if AccountType(account_type).is_debit_normal:
        return debit_total - credit_total
    return credit_total - debit_total


def indent_level(
    account: AccountRecord,
    accounts: Mapping[UUID, AccountRecord],
) -> int:
    """
    Number of parent hops from ``account``, walking only through ``accounts``.

    A hop to a parent outside ``accounts`` is counted and ends the walk, so
    an account whose grandparent has no postings reports depth 1 even when
    its full depth is 2.
    """
    level = 0
    current = account.parent_id
    while current is not None:
        level += 1
        parent = accounts.get(current)
        current = parent.parent_id if parent is not None else None
    return level


def empty_trial_balance(
    start_date: date | None, end_date: date | None
) -> TrialBalanceReport:
    return TrialBalanceReport(
        start_date=start_date,
        end_date=end_date,
        accounts=(),
        totals=TrialBalanceTotals(debit=ZERO, credit=ZERO, balanced=True),
    )


def build_trial_balance(
    totals: Iterable[AccountTotals],
    accounts: Iterable[AccountRecord],
    start_date: date | None = None,
    end_date: date | None = None,
) -> TrialBalanceReport:
    """
    Assemble a trial balance from per-account sums and the matching accounts.

    Sums for accounts missing from ``accounts`` are ignored.
    """
    sums = {t.account_id: t for t in totals}
    if not sums:
        return empty_trial_balance(start_date, end_date)

    by_id = {a.id: a for a in accounts if a.id in sums}

    rows: list[TrialBalanceRow] = []
    total_debit = ZERO
    total_credit = ZERO
    for account in sorted(by_id.values(), key=lambda a: a.code):
        debit = round_money(sums[account.id].debit_total)
        credit = round_money(sums[account.id].credit_total)
        total_debit += debit
        total_credit += credit
        rows.append(
            TrialBalanceRow(
                account_code=account.code,
                account_name=account.name,
                account_type=account.account_type,
                indent_level=indent_level(account, by_id),
                debit=debit,
                credit=credit,
                balance=round_money(
                    compute_natural_balance(debit, credit, account.account_type)
                ),
            )
        )

    total_debit = round_money(total_debit)
    total_credit = round_money(total_credit)
    return TrialBalanceReport(
        start_date=start_date,
        end_date=end_date,
        accounts=tuple(rows),
        totals=TrialBalanceTotals(
            debit=total_debit,
            credit=total_credit,
            balanced=abs(total_debit - total_credit) < BALANCE_TOLERANCE,
        ),
    )


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to a plain dict for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - UUID -> str
    - date -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    return obj


def trial_balance_to_dict(report: TrialBalanceReport) -> dict:
    """Render a trial balance; an absent window bound renders as ``""``."""
    rendered = render_to_dict(report)
    rendered["start_date"] = rendered["start_date"] or ""
    rendered["end_date"] = rendered["end_date"] or ""
    return rendered
