"""
DocumentNumberService -- per-tenant, per-day document numbers via locked
counter rows.

Responsibility:
    Allocates ``PREFIX-YYYYMMDD-NNN`` numbers for journal entries (JE) and
    invoices (INV).  One counter row exists per (prefix, tenant, day) and is
    locked with ``SELECT ... FOR UPDATE`` while it is incremented, so two
    concurrent creations for the same tenant and day can never compute the
    same number.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Called by JournalService (entry numbers) and by the AR module's
    InvoiceService (invoice numbers).

Invariants enforced:
    - Format: prefix, calendar day, sequence zero-padded to the configured
      width; the sequence restarts at 1 for each new day.
    - Continuity: the first allocation for a (prefix, tenant, day) seeds the
      counter from the highest number already stored with that day prefix,
      so numbering continues across data written before the counter
      existed.
    - Transactional: the increment is only visible after the caller's
      transaction commits.  Rollback returns the number.

Failure modes:
    - IntegrityError: concurrent counter creation race (handled via
      savepoint rollback and retry).
"""

from datetime import date
from uuid import UUID

from sqlalchemy import BigInteger, String, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import InstrumentedAttribute, Mapped, Session, mapped_column

from ledger_kernel.db.base import Base
from ledger_kernel.domain.numbering import (
    SEQUENCE_WIDTH,
    day_prefix,
    format_document_number,
    parse_sequence,
)
from ledger_kernel.logging_config import get_logger

logger = get_logger("services.sequence")


class SequenceCounter(Base):
    """
    Sequence counter table.

    Each row represents a named sequence with its current value.
    Row-level locking ensures uniqueness under concurrency.
    """

    __tablename__ = "sequence_counters"

    # "<prefix>:<tenant_id>:<YYYYMMDD>"
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    current_value: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )


class DocumentNumberService:
    """
    Allocates document numbers from locked per-tenant-per-day counters.

    Contract:
        ``next_number`` returns a number one higher than any number
        previously allocated or stored for the same tenant, prefix and day.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.

    Usage:
        numbers = DocumentNumberService(session)
        entry_number = numbers.next_number(
            tenant_id, "JE", entry_date, JournalEntry.entry_number,
        )
    """

    def __init__(self, session: Session, width: int = SEQUENCE_WIDTH):
        self._session = session
        self._width = width

    @staticmethod
    def counter_name(prefix: str, tenant_id: UUID, on_date: date) -> str:
        return f"{prefix}:{tenant_id}:{on_date.strftime('%Y%m%d')}"

    def _lock_counter(self, name: str) -> SequenceCounter | None:
        return self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def highest_existing(
        self,
        tenant_id: UUID,
        prefix: str,
        on_date: date,
        number_column: InstrumentedAttribute,
    ) -> int:
        """
        Highest sequence already stored under the day prefix, or 0.

        ``number_column`` is the document-number column of a tenant-scoped
        model (e.g. ``JournalEntry.entry_number``).
        """
        model = number_column.class_
        stem = day_prefix(prefix, on_date)
        numbers = self._session.execute(
            select(number_column).where(
                model.tenant_id == tenant_id,
                number_column.like(f"{stem}%"),
            )
        ).scalars()
        return max((parse_sequence(n) or 0 for n in numbers), default=0)

    def next_number(
        self,
        tenant_id: UUID,
        prefix: str,
        on_date: date,
        number_column: InstrumentedAttribute,
    ) -> str:
        """
        Allocate the next document number for a tenant, prefix and day.

        The counter row is locked until the caller's transaction completes.

        Args:
            tenant_id: Owning tenant.
            prefix: Document prefix ("JE", "INV").
            on_date: Day the number is keyed by.
            number_column: Column holding existing numbers, scanned once to
                seed a new counter.

        Returns:
            The formatted document number.
        """
        name = self.counter_name(prefix, tenant_id, on_date)
        counter = self._lock_counter(name)

        if counter is None:
            seed = self.highest_existing(tenant_id, prefix, on_date, number_column)
            # Savepoint so a lost creation race does not roll back the caller's work
            savepoint = self._session.begin_nested()
            try:
                counter = SequenceCounter(name=name, current_value=seed)
                self._session.add(counter)
                self._session.flush()
                savepoint.commit()
            except IntegrityError:
                logger.debug(
                    "sequence_counter_race_retry",
                    extra={"sequence_name": name},
                )
                savepoint.rollback()
                counter = self._lock_counter(name)
                if counter is None:
                    raise

        counter.current_value += 1
        self._session.flush()

        number = format_document_number(
            prefix, on_date, counter.current_value, self._width
        )
        logger.debug(
            "sequence_allocated",
            extra={
                "sequence_name": name,
                "value": counter.current_value,
                "document_number": number,
            },
        )
        return number

    def current_value(self, tenant_id: UUID, prefix: str, on_date: date) -> int | None:
        """Current counter value without incrementing, or None if unused."""
        counter = self._session.execute(
            select(SequenceCounter).where(
                SequenceCounter.name == self.counter_name(prefix, tenant_id, on_date)
            )
        ).scalar_one_or_none()
        return counter.current_value if counter else None
