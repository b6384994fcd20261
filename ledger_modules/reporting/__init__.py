"""Reporting module: trial balance over posted journal lines."""

from ledger_modules.reporting.models import (
    TrialBalanceReport,
    TrialBalanceRow,
    TrialBalanceTotals,
)
from ledger_modules.reporting.service import ReportingService
from ledger_modules.reporting.statements import (
    build_trial_balance,
    compute_natural_balance,
    indent_level,
    render_to_dict,
    trial_balance_to_dict,
)

__all__ = [
    "ReportingService",
    "TrialBalanceReport",
    "TrialBalanceRow",
    "TrialBalanceTotals",
    "build_trial_balance",
    "compute_natural_balance",
    "indent_level",
    "render_to_dict",
    "trial_balance_to_dict",
]
