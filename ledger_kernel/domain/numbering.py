"""
Document numbers -- ``PREFIX-YYYYMMDD-NNN``.

Journal entry numbers (JE) and invoice numbers (INV) share this format:
a prefix, the calendar day, and a per-tenant per-day sequence zero-padded
to three digits.  Sequences above 999 widen naturally ("1000").
"""

from __future__ import annotations

from datetime import date

SEQUENCE_WIDTH = 3


def day_prefix(prefix: str, on_date: date) -> str:
    """``day_prefix("JE", date(2024, 3, 5))`` -> ``"JE-20240305-"``."""
    return f"{prefix}-{on_date.strftime('%Y%m%d')}-"


def format_document_number(
    prefix: str,
    on_date: date,
    sequence: int,
    width: int = SEQUENCE_WIDTH,
) -> str:
    if sequence < 1:
        raise ValueError(f"Document sequence must be >= 1, got {sequence}")
    return f"{day_prefix(prefix, on_date)}{sequence:0{width}d}"


def parse_sequence(document_number: str | None) -> int | None:
    """Trailing sequence of a document number, or None if it has none."""
    if not document_number:
        return None
    _, _, tail = document_number.rpartition("-")
    if not tail.isdigit():
        return None
    return int(tail)
