"""Domain models for the ledger kernel."""

from ledger_kernel.models.account import Account, AccountType
from ledger_kernel.models.journal import JournalEntry, JournalLine
from ledger_kernel.models.tenant import Tenant, TenantModule

__all__ = [
    "Account",
    "AccountType",
    "JournalEntry",
    "JournalLine",
    "Tenant",
    "TenantModule",
]
