"""
Ledger Kernel

Multi-tenant double-entry bookkeeping core:
- Hierarchical chart of accounts per tenant
- Balanced, immutable journal entries
- Atomic per-tenant document numbering
- Structured logging and typed errors
"""

__version__ = "0.1.0"
