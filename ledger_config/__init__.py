"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Services never read YAML files or
    environment variables themselves.

Architecture position:
    Configuration -- the lowest layer.  Imports nothing from
    ``ledger_kernel`` or ``ledger_modules``; both of those receive a
    ``LedgerConfig`` by injection or call ``get_active_config()``.

Failure modes:
    - ``FileNotFoundError`` -- configuration file missing.
    - ``ValueError`` / ``KeyError`` -- schema or structural validation
      failures.

Audit relevance:
    Every load emits a ``ledger_config_loaded`` log entry with the
    config_id, version and checksum, tying postings back to the exact
    configuration that governed them.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path

from ledger_config.loader import load_config
from ledger_config.schema import (
    ChartAccountDef,
    DatabaseConfig,
    LedgerConfig,
    ModuleDef,
    NumberingConfig,
    WellKnownAccounts,
)

_logger = logging.getLogger("ledger_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

DATABASE_URL_ENV = "LEDGER_DATABASE_URL"

_cache: dict[Path, LedgerConfig] = {}


def get_active_config(config_path: Path | None = None) -> LedgerConfig:
    """The ONLY public configuration entrypoint.

    Loads (once per path) and returns the configuration set.  When
    ``LEDGER_DATABASE_URL`` is set it replaces ``database.url``.
    """
    path = (config_path or _DEFAULT_CONFIG_PATH).resolve()
    config = _cache.get(path)
    if config is None:
        config = load_config(path)
        _cache[path] = config
        _logger.info(
            "ledger_config_loaded",
            extra={
                "config_id": config.config_id,
                "version": config.version,
                "checksum": config.checksum,
                "chart_size": len(config.default_chart),
            },
        )

    override = os.environ.get(DATABASE_URL_ENV)
    if override:
        config = dataclasses.replace(
            config,
            database=dataclasses.replace(config.database, url=override),
        )
    return config


def clear_config_cache() -> None:
    """Forget loaded configuration sets. FOR TESTING ONLY."""
    _cache.clear()


__all__ = [
    "ChartAccountDef",
    "DatabaseConfig",
    "LedgerConfig",
    "ModuleDef",
    "NumberingConfig",
    "WellKnownAccounts",
    "clear_config_cache",
    "get_active_config",
]
