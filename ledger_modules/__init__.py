"""
Ledger Modules.

Thin orchestration layers over the Ledger Kernel:
- ar: invoices and payments, each mirrored into the general ledger
- reporting: trial balance
"""
