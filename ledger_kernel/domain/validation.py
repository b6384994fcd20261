"""
Journal line validation -- the double-entry invariant.

Responsibility:
    Pure checks run before any journal entry is written.  Every entry
    accepted by the ledger has passed ``validate_lines``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - At least two lines.
    - Each line is one-sided: exactly one of debit/credit is strictly
      positive and the other is zero.
    - |sum(debit) - sum(credit)| <= tolerance (0.01 by default).

Failure modes:
    - InsufficientLinesError, NegativeAmountError, EmptyLineError,
      DoubleSidedLineError, UnbalancedEntryError.  Line numbers in messages
      are 1-based.  Checks run in that order and the first failure wins.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from ledger_kernel.db.types import BALANCE_TOLERANCE, ZERO, to_decimal
from ledger_kernel.domain.dtos import LineInput
from ledger_kernel.exceptions import (
    DoubleSidedLineError,
    EmptyLineError,
    InsufficientLinesError,
    NegativeAmountError,
    UnbalancedEntryError,
)

MIN_LINES = 2


def validate_lines(
    lines: Sequence[LineInput],
    tolerance: Decimal = BALANCE_TOLERANCE,
) -> tuple[Decimal, Decimal]:
    """
    Validate a proposed set of journal lines.

    Returns:
        (total_debits, total_credits) of the accepted lines.
    """
    if len(lines) < MIN_LINES:
        raise InsufficientLinesError(len(lines))

    total_debit = ZERO
    total_credit = ZERO
    for index, line in enumerate(lines, start=1):
        debit = to_decimal(line.debit)
        credit = to_decimal(line.credit)

        if debit < 0 or credit < 0:
            raise NegativeAmountError(index)
        if debit == 0 and credit == 0:
            raise EmptyLineError(index)
        if debit > 0 and credit > 0:
            raise DoubleSidedLineError(index)

        total_debit += debit
        total_credit += credit

    if abs(total_debit - total_credit) > tolerance:
        raise UnbalancedEntryError(total_debit, total_credit)

    return total_debit, total_credit
