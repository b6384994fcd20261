"""
Reporting Module Service -- read-only ledger reports.

Combines the kernel's per-account sums (``LedgerSelector``) with the
chart (``AccountSelector``) and hands both to the pure transformations
in ``statements``.  Never writes; there is no transaction to own.

Usage:
    report = ReportingService(session).trial_balance(
        tenant_id, start_date=date(2024, 1, 1), end_date=date(2024, 12, 31),
    )
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_config import LedgerConfig, get_active_config
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.account_selector import AccountSelector
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_modules.reporting.models import TrialBalanceReport
from ledger_modules.reporting.statements import build_trial_balance

logger = get_logger("modules.reporting.service")


class ReportingService:
    """Trial balance over a tenant's posted journal lines."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: LedgerConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or get_active_config()
        self._ledger = LedgerSelector(session)
        self._accounts = AccountSelector(session)

    def trial_balance(
        self,
        tenant_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> TrialBalanceReport:
        """
        Per-account debit, credit and natural balance for the window.

        Only accounts with at least one line in the window appear.  Both
        bounds are inclusive and apply to the journal entry date.
        """
        totals = self._ledger.account_totals(tenant_id, start_date, end_date)
        records = self._accounts.find_records(
            tenant_id, [t.account_id for t in totals]
        )
        report = build_trial_balance(totals, records, start_date, end_date)

        logger.info("trial_balance_generated", extra={
            "tenant_id": str(tenant_id),
            "start_date": start_date.isoformat() if start_date else None,
            "end_date": end_date.isoformat() if end_date else None,
            "account_count": len(report.accounts),
            "total_debit": str(report.totals.debit),
            "total_credit": str(report.totals.credit),
            "balanced": report.totals.balanced,
            "generated_at": self._clock.now().isoformat(),
        })
        return report
