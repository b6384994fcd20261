"""
Ledger configuration schema.

Typed, frozen view of a YAML configuration set.  The loader parses YAML
into these types; services receive a ``LedgerConfig`` by injection.
Account types are carried as plain strings here so that configuration has
no dependency on the kernel; the kernel converts them to ``AccountType``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class ChartAccountDef:
    """One row of the default chart of accounts."""

    code: str
    name: str
    account_type: str
    parent_code: str | None = None


@dataclass(frozen=True)
class WellKnownAccounts:
    """Account codes the subledger posts to automatically."""

    cash: str = "1101"
    bank: str = "1102"
    accounts_receivable: str = "1103"
    sales_revenue: str = "4001"


@dataclass(frozen=True)
class NumberingConfig:
    """Document number prefixes and sequence width."""

    journal_entry_prefix: str = "JE"
    invoice_prefix: str = "INV"
    sequence_width: int = 3


@dataclass(frozen=True)
class ModuleDef:
    """A module tenants can enable."""

    code: str
    name: str
    description: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings for init_engine_from_config()."""

    url: str = "sqlite:///ledger.db"
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 10


@dataclass(frozen=True)
class LedgerConfig:
    """A complete, validated configuration set."""

    config_id: str
    version: int
    default_chart: tuple[ChartAccountDef, ...]
    well_known_accounts: WellKnownAccounts = field(default_factory=WellKnownAccounts)
    numbering: NumberingConfig = field(default_factory=NumberingConfig)
    balance_tolerance: Decimal = Decimal("0.01")
    money_decimal_places: int = 2
    modules: tuple[ModuleDef, ...] = ()
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    checksum: str = ""

    def module(self, code: str) -> ModuleDef | None:
        for module in self.modules:
            if module.code == code:
                return module
        return None

    @property
    def default_module_codes(self) -> tuple[str, ...]:
        """Modules enabled for every newly registered tenant."""
        return tuple(m.code for m in self.modules if m.is_active)
