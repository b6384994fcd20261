"""
Module: ledger_kernel.db.types
Responsibility: Annotated type aliases and utility functions for money
    columns.  Centralizes precision and rounding so that every model and
    service uses identical definitions.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - round_money() is the ONLY sanctioned rounding function for monetary
      values: 2 places, ROUND_HALF_UP (half away from zero on cents).
    - BALANCE_TOLERANCE is the single definition of "close enough" when
      comparing debit and credit totals.
    CRITICAL: No floats anywhere in the ledger.  All monetary amounts use
    Decimal.

Failure modes:
    - decimal.InvalidOperation on non-numeric input to to_decimal().
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated

from sqlalchemy import Numeric, String

# Monetary amount, stored with headroom; rounded to cents at boundaries
Money = Annotated[Decimal, Numeric(38, 9)]

# Short identifier strings (account codes, document numbers)
ShortCode = Annotated[str, String(50)]

# Free text descriptions
LongText = Annotated[str, String(500)]


MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP
BALANCE_TOLERANCE = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Decimal | int | str | None) -> Decimal:
    """
    Coerce an amount to Decimal, treating None as zero.

    Floats are rejected: they cannot represent cents exactly.
    """
    if value is None:
        return ZERO
    if isinstance(value, float):
        raise TypeError(f"Monetary amounts must not be float: {value!r}")
    if isinstance(value, Decimal):
        return value
    return Decimal(value)


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    Args:
        value: The value to round.
        decimal_places: Number of decimal places (default 2).
        rounding: Rounding mode (default ROUND_HALF_UP).

    Returns:
        Rounded Decimal value.
    """
    quantizer = Decimal(10) ** -decimal_places
    return value.quantize(quantizer, rounding=rounding)
