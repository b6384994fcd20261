#!/usr/bin/env python3
"""
Seed a database with a demo company and a few business transactions.

Registers "Demo Company" (default modules + default chart), issues one
invoice, records a partial bank payment against it, and prints the
resulting trial balance as JSON.

Usage:
    python3 scripts/seed_demo.py
    python3 scripts/seed_demo.py --db-url sqlite:///demo.db --reset
"""

import argparse
import json
import logging
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

DEMO_COMPANY = "Demo Company"
INVOICE_DATE = date(2024, 1, 15)
DUE_DATE = date(2024, 2, 14)
PAYMENT_DATE = date(2024, 1, 31)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--db-url",
        help="Database URL (default: configuration / LEDGER_DATABASE_URL)",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop and recreate all tables first",
    )
    parser.add_argument("--verbose", action="store_true", help="Show ledger logs")
    args = parser.parse_args(argv)

    from ledger_config import get_active_config
    from ledger_kernel.db.engine import (
        drop_tables,
        init_engine_from_config,
        init_engine_from_url,
        session_scope,
    )
    from ledger_kernel.exceptions import LedgerError
    from ledger_kernel.logging_config import configure_logging
    from ledger_kernel.services.tenant_service import TenantService
    from ledger_modules._orm_registry import create_all_tables, import_all_orm_models
    from ledger_modules.ar import (
        InvoiceLineInput,
        InvoiceService,
        PaymentMethod,
        PaymentService,
    )
    from ledger_modules.reporting import ReportingService, trial_balance_to_dict

    configure_logging(level=logging.DEBUG if args.verbose else logging.WARNING)
    config = get_active_config()

    print()
    print("  [1/4] Connecting...")
    if args.db_url:
        init_engine_from_url(args.db_url)
    else:
        init_engine_from_config(config)

    if args.reset:
        import_all_orm_models()
        drop_tables()
    create_all_tables()

    try:
        print(f"  [2/4] Registering {DEMO_COMPANY!r}...")
        with session_scope() as session:
            tenant = TenantService(session, config).register_tenant(DEMO_COMPANY)

        print("  [3/4] Posting invoice and payment...")
        with session_scope() as session:
            invoice = InvoiceService(session, config=config).create_invoice(
                tenant.id,
                customer_name="Acme Trading",
                invoice_date=INVOICE_DATE,
                due_date=DUE_DATE,
                lines=[
                    InvoiceLineInput("Consulting hours", 10, Decimal("120.00")),
                    InvoiceLineInput("Setup fee", 1, Decimal("250.00")),
                ],
            )
            payment = PaymentService(session, config=config).create_payment(
                tenant.id,
                invoice.id,
                Decimal("800.00"),
                PAYMENT_DATE,
                PaymentMethod.BANK,
                reference="TRX-0001",
            )
        print(f"        {invoice.invoice_number}: total {invoice.total}")
        print(
            f"        payment {payment.amount} -> invoice "
            f"{payment.invoice.status.value}"
        )

        print("  [4/4] Trial balance:")
        with session_scope() as session:
            report = ReportingService(session, config=config).trial_balance(tenant.id)
    except LedgerError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(trial_balance_to_dict(report), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
