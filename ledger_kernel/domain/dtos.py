"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable data structures that cross the service boundary:
    journal line input, account records and tree nodes, rehydrated journal
    entries, and the generic Page envelope for paginated listings.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Free of ORM dependencies.  Selectors convert ORM rows into these DTOs;
    callers never receive ORM entities.

Invariants enforced:
    - All DTOs are frozen.
    - Monetary fields are Decimal, never float.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Generic, TypeVar
from uuid import UUID

from ledger_kernel.models.account import AccountType

T = TypeVar("T")


@dataclass(frozen=True)
class LineInput:
    """
    One requested journal line, as supplied by a caller.

    Missing amounts default to zero; validation decides whether the
    combination is acceptable.
    """

    account_id: UUID
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    description: str | None = None

    @classmethod
    def debit_line(
        cls, account_id: UUID, amount: Decimal, description: str | None = None
    ) -> LineInput:
        return cls(account_id=account_id, debit=amount, description=description)

    @classmethod
    def credit_line(
        cls, account_id: UUID, amount: Decimal, description: str | None = None
    ) -> LineInput:
        return cls(account_id=account_id, credit=amount, description=description)


@dataclass(frozen=True)
class AccountRef:
    """Account display data joined onto lines and tree nodes."""

    id: UUID
    code: str
    name: str
    account_type: AccountType


@dataclass(frozen=True)
class AccountRecord:
    """Flat account row: the input to tree building."""

    id: UUID
    code: str
    name: str
    account_type: AccountType
    parent_id: UUID | None
    is_active: bool = True


@dataclass(frozen=True)
class AccountTreeNode:
    """An account with its children, siblings in code order."""

    id: UUID
    code: str
    name: str
    account_type: AccountType
    parent_id: UUID | None
    is_active: bool
    children: tuple[AccountTreeNode, ...] = ()

    def walk(self):
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class AccountDetail:
    """Single account with its parent summary and direct children."""

    id: UUID
    code: str
    name: str
    account_type: AccountType
    is_active: bool
    parent: AccountRef | None
    children: tuple[AccountRef, ...]


@dataclass(frozen=True)
class JournalLineDTO:
    """A persisted journal line joined with its account's display data."""

    id: UUID
    line_seq: int
    account_id: UUID
    account_code: str
    account_name: str
    account_type: AccountType
    debit: Decimal
    credit: Decimal
    description: str | None = None


@dataclass(frozen=True)
class JournalEntryDTO:
    """A persisted journal entry with its ordered lines."""

    id: UUID
    tenant_id: UUID
    entry_number: str
    entry_date: date
    description: str | None
    reference: str | None
    created_at: datetime | None
    lines: tuple[JournalLineDTO, ...] = field(default_factory=tuple)

    @property
    def total_debits(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0"))

    @property
    def total_credits(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0"))


@dataclass(frozen=True)
class Page(Generic[T]):
    """
    One page of a listing.

    ``pages`` is the total page count for ``limit``-sized pages.
    """

    data: tuple[T, ...]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)
