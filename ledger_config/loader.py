"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into typed
``ledger_config.schema`` dataclass instances.  The single public entry
point for runtime config is ``ledger_config.get_active_config()``.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* The default chart is ordered parents-first: each ``parent_code`` names
  an earlier row with the same account type.
* Every well-known account code exists in the default chart.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Structural violations  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import (
    ChartAccountDef,
    DatabaseConfig,
    LedgerConfig,
    ModuleDef,
    NumberingConfig,
    WellKnownAccounts,
)

ACCOUNT_TYPES = frozenset({"ASSET", "LIABILITY", "EQUITY", "REVENUE", "EXPENSE"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_chart_account(data: dict[str, Any]) -> ChartAccountDef:
    """Parse one default-chart row."""
    account_type = str(data["type"]).upper()
    if account_type not in ACCOUNT_TYPES:
        raise ValueError(f"Unknown account type {data['type']!r} for {data['code']}")
    parent = data.get("parent_code")
    return ChartAccountDef(
        code=str(data["code"]),
        name=data["name"],
        account_type=account_type,
        parent_code=str(parent) if parent is not None else None,
    )


def parse_well_known(data: dict[str, Any]) -> WellKnownAccounts:
    defaults = WellKnownAccounts()
    return WellKnownAccounts(
        cash=str(data.get("cash", defaults.cash)),
        bank=str(data.get("bank", defaults.bank)),
        accounts_receivable=str(
            data.get("accounts_receivable", defaults.accounts_receivable)
        ),
        sales_revenue=str(data.get("sales_revenue", defaults.sales_revenue)),
    )


def parse_numbering(data: dict[str, Any]) -> NumberingConfig:
    defaults = NumberingConfig()
    width = int(data.get("sequence_width", defaults.sequence_width))
    if width < 1:
        raise ValueError(f"sequence_width must be >= 1, got {width}")
    return NumberingConfig(
        journal_entry_prefix=data.get(
            "journal_entry_prefix", defaults.journal_entry_prefix
        ),
        invoice_prefix=data.get("invoice_prefix", defaults.invoice_prefix),
        sequence_width=width,
    )


def parse_module(data: dict[str, Any]) -> ModuleDef:
    return ModuleDef(
        code=data["code"],
        name=data["name"],
        description=data.get("description", ""),
        is_active=bool(data.get("is_active", True)),
    )


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    defaults = DatabaseConfig()
    return DatabaseConfig(
        url=data.get("url", defaults.url),
        echo=bool(data.get("echo", defaults.echo)),
        pool_size=int(data.get("pool_size", defaults.pool_size)),
        max_overflow=int(data.get("max_overflow", defaults.max_overflow)),
    )


def validate_chart(
    chart: tuple[ChartAccountDef, ...],
    well_known: WellKnownAccounts,
) -> None:
    """
    Check chart ordering and well-known coverage.

    Raises:
        ValueError: on a duplicate code, a forward or cross-type parent
            reference, or a well-known code absent from the chart.
    """
    seen: dict[str, ChartAccountDef] = {}
    for row in chart:
        if row.code in seen:
            raise ValueError(f"Duplicate chart code {row.code}")
        if row.parent_code is not None:
            parent = seen.get(row.parent_code)
            if parent is None:
                raise ValueError(
                    f"Chart row {row.code} references parent {row.parent_code} "
                    "which is not defined before it"
                )
            if parent.account_type != row.account_type:
                raise ValueError(
                    f"Chart row {row.code} ({row.account_type}) cannot sit under "
                    f"{parent.code} ({parent.account_type})"
                )
        seen[row.code] = row

    for role in ("cash", "bank", "accounts_receivable", "sales_revenue"):
        code = getattr(well_known, role)
        if code not in seen:
            raise ValueError(f"Well-known account {role}={code} is not in the default chart")


def parse_config(data: dict[str, Any]) -> LedgerConfig:
    """
    Parse a full configuration set from a dict.

    Raises:
        KeyError: if ``config_id`` or ``default_chart`` is missing.
        ValueError: if the chart fails validation.
    """
    chart = tuple(parse_chart_account(row) for row in data["default_chart"])
    well_known = parse_well_known(data.get("well_known_accounts") or {})
    validate_chart(chart, well_known)

    return LedgerConfig(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        default_chart=chart,
        well_known_accounts=well_known,
        numbering=parse_numbering(data.get("numbering") or {}),
        balance_tolerance=Decimal(str(data.get("balance_tolerance", "0.01"))),
        money_decimal_places=int(data.get("money_decimal_places", 2)),
        modules=tuple(parse_module(m) for m in data.get("modules") or ()),
        database=parse_database(data.get("database") or {}),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> LedgerConfig:
    """Load and parse a configuration set from a YAML file."""
    return parse_config(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
