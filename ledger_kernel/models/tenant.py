"""
Module: ledger_kernel.models.tenant
Responsibility: ORM persistence for tenants (the isolation boundary) and
    the modules enabled for each tenant.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Tenant.slug is globally unique (uq_tenant_slug).
    - At most one TenantModule row per (tenant, module_code).
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString


class Tenant(TrackedBase):
    """
    A registered company.  Every ledger row is scoped to exactly one tenant.

    Non-goals:
        - Tenants are never deleted.
    """

    __tablename__ = "tenants"

    __table_args__ = (
        UniqueConstraint("slug", name="uq_tenant_slug"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # URL-safe identifier derived from the company name
    slug: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    modules: Mapped[list["TenantModule"]] = relationship(
        back_populates="tenant",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Tenant {self.slug}>"


class TenantModule(TrackedBase):
    """Enablement flag for one catalog module within one tenant."""

    __tablename__ = "tenant_modules"

    __table_args__ = (
        UniqueConstraint("tenant_id", "module_code", name="uq_tenant_module"),
    )

    tenant_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("tenants.id"),
        nullable=False,
    )

    module_code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    is_enabled: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    enabled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    tenant: Mapped["Tenant"] = relationship(
        back_populates="modules",
    )

    def __repr__(self) -> str:
        return f"<TenantModule {self.module_code} enabled={self.is_enabled}>"
