"""Kernel write services.  Each flushes within the caller's transaction."""

from ledger_kernel.services.account_service import AccountService
from ledger_kernel.services.journal_service import JournalService
from ledger_kernel.services.sequence_service import DocumentNumberService, SequenceCounter
from ledger_kernel.services.tenant_service import TenantService, slugify

__all__ = [
    "AccountService",
    "DocumentNumberService",
    "JournalService",
    "SequenceCounter",
    "TenantService",
    "slugify",
]
