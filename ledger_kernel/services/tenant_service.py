"""
TenantService -- company registration and module enablement.

Responsibility:
    Registers tenants (slug uniqueness, default module enablement, default
    chart seeding) and manages which catalog modules each tenant has
    enabled.

Architecture position:
    Kernel > Services.  Flushes only; the caller owns the transaction, so
    a registration either creates the tenant together with its chart or
    nothing at all.

Invariants enforced:
    - Slugs are unique and non-empty.
    - A new tenant starts with every active catalog module enabled and the
      configured default chart.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_config import LedgerConfig, ModuleDef, get_active_config
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.exceptions import (
    DuplicateTenantSlugError,
    InvalidTenantNameError,
    ModuleUnavailableError,
    TenantModuleNotEnabledError,
    TenantNotFoundError,
    UnknownModuleError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.tenant import Tenant, TenantModule
from ledger_kernel.services.account_service import AccountService
from ledger_kernel.services.base import BaseService

logger = get_logger("services.tenant")

_NON_SLUG_CHARS = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile(r"-+")


def slugify(text: str) -> str:
    """``slugify("  Acme & Sons Ltd ")`` -> ``"acme-sons-ltd"``."""
    slug = text.lower().strip()
    slug = _NON_SLUG_CHARS.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    return _DASHES.sub("-", slug)


@dataclass(frozen=True)
class TenantInfo:
    id: UUID
    name: str
    slug: str


@dataclass(frozen=True)
class EnabledModule:
    code: str
    name: str
    description: str
    enabled_at: datetime | None


def _info(tenant: Tenant) -> TenantInfo:
    return TenantInfo(id=tenant.id, name=tenant.name, slug=tenant.slug)


class TenantService(BaseService[Tenant]):
    """
    Tenant registration and module management.

    Non-goals:
        - Users, passwords and tokens are outside the ledger.
    """

    def __init__(
        self,
        session: Session,
        config: LedgerConfig | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(session)
        self._config = config or get_active_config()
        self._clock = clock or SystemClock()
        self._accounts = AccountService(session, self._config)

    # =========================================================================
    # Tenants
    # =========================================================================

    def register_tenant(self, name: str) -> TenantInfo:
        """
        Register a company and bootstrap its ledger.

        Raises:
            InvalidTenantNameError: name slugifies to an empty string.
            DuplicateTenantSlugError: slug already registered.
        """
        slug = slugify(name)
        if not slug:
            raise InvalidTenantNameError(name)

        existing = self.session.execute(
            select(Tenant.id).where(Tenant.slug == slug)
        ).scalar_one_or_none()
        if existing is not None:
            raise DuplicateTenantSlugError(slug)

        tenant = Tenant(name=name, slug=slug)
        self.session.add(tenant)
        self.session.flush()

        for code in self._config.default_module_codes:
            self._upsert_module(tenant.id, code)
        self._accounts.seed_default_chart(tenant.id)

        logger.info(
            "tenant_registered",
            extra={
                "tenant_id": str(tenant.id),
                "slug": slug,
                "modules": list(self._config.default_module_codes),
            },
        )
        return _info(tenant)

    def get_tenant(self, tenant_id: UUID) -> TenantInfo:
        tenant = self.session.get(Tenant, tenant_id)
        if tenant is None:
            raise TenantNotFoundError(str(tenant_id))
        return _info(tenant)

    def get_by_slug(self, slug: str) -> TenantInfo:
        tenant = self.session.execute(
            select(Tenant).where(Tenant.slug == slug)
        ).scalar_one_or_none()
        if tenant is None:
            raise TenantNotFoundError(slug)
        return _info(tenant)

    # =========================================================================
    # Modules
    # =========================================================================

    def available_modules(self) -> list[ModuleDef]:
        return [m for m in self._config.modules if m.is_active]

    def _tenant_module(self, tenant_id: UUID, code: str) -> TenantModule | None:
        return self.session.execute(
            select(TenantModule).where(
                TenantModule.tenant_id == tenant_id,
                TenantModule.module_code == code,
            )
        ).scalar_one_or_none()

    def _upsert_module(self, tenant_id: UUID, code: str) -> TenantModule:
        row = self._tenant_module(tenant_id, code)
        now = self._clock.now()
        if row is None:
            row = TenantModule(
                tenant_id=tenant_id,
                module_code=code,
                is_enabled=True,
                enabled_at=now,
            )
            self.session.add(row)
        else:
            row.is_enabled = True
            row.enabled_at = now
        self.session.flush()
        return row

    def enabled_modules(self, tenant_id: UUID) -> list[EnabledModule]:
        rows = self.session.execute(
            select(TenantModule)
            .where(
                TenantModule.tenant_id == tenant_id,
                TenantModule.is_enabled.is_(True),
            )
            .order_by(TenantModule.module_code)
        ).scalars()

        enabled = []
        for row in rows:
            module = self._config.module(row.module_code)
            if module is None:
                continue
            enabled.append(
                EnabledModule(
                    code=module.code,
                    name=module.name,
                    description=module.description,
                    enabled_at=row.enabled_at,
                )
            )
        return enabled

    def enable_module(self, tenant_id: UUID, code: str) -> ModuleDef:
        """
        Raises:
            UnknownModuleError: code is not in the catalog.
            ModuleUnavailableError: catalog module is inactive.
        """
        module = self._config.module(code)
        if module is None:
            raise UnknownModuleError(code)
        if not module.is_active:
            raise ModuleUnavailableError(code)

        self._upsert_module(tenant_id, code)
        logger.info(
            "module_enabled",
            extra={"tenant_id": str(tenant_id), "module_code": code},
        )
        return module

    def disable_module(self, tenant_id: UUID, code: str) -> None:
        """
        Raises:
            TenantModuleNotEnabledError: the tenant never enabled the module.
        """
        row = self._tenant_module(tenant_id, code)
        if row is None:
            raise TenantModuleNotEnabledError(code)
        row.is_enabled = False
        self.session.flush()
        logger.info(
            "module_disabled",
            extra={"tenant_id": str(tenant_id), "module_code": code},
        )

    def require_module(self, tenant_id: UUID, code: str) -> None:
        """Guard for callers that serve a module's operations."""
        row = self._tenant_module(tenant_id, code)
        if row is None or not row.is_enabled:
            raise TenantModuleNotEnabledError(code)
