"""
Pure domain layer.

Data transfer objects and domain logic with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O (except SystemClock)
"""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.dtos import (
    AccountDetail,
    AccountRef,
    AccountTreeNode,
    JournalEntryDTO,
    JournalLineDTO,
    LineInput,
    Page,
)
from ledger_kernel.domain.hierarchy import build_account_tree
from ledger_kernel.domain.numbering import (
    day_prefix,
    format_document_number,
    parse_sequence,
)
from ledger_kernel.domain.validation import validate_lines

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "AccountDetail",
    "AccountRef",
    "AccountTreeNode",
    "JournalEntryDTO",
    "JournalLineDTO",
    "LineInput",
    "Page",
    "build_account_tree",
    "day_prefix",
    "format_document_number",
    "parse_sequence",
    "validate_lines",
]
