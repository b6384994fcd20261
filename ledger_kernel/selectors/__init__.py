"""Read-only selectors over tenant-scoped ledger data."""

from ledger_kernel.selectors.account_selector import AccountSelector
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.selectors.ledger_selector import AccountTotals, LedgerSelector

__all__ = [
    "AccountSelector",
    "AccountTotals",
    "JournalSelector",
    "LedgerSelector",
]
