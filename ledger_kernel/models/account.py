"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for the per-tenant Chart of Accounts -- the
    target of every journal line.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - (tenant_id, code) is unique (uq_account_tenant_code).
    - code, account_type and parent_id are immutable after creation
      (AccountService exposes no way to change them).

Failure modes:
    - AccountNotFoundError when a lookup misses within the tenant.
    - AccountHasChildrenError / AccountReferencedError on removal of an
      account with dependents.

Audit relevance:
    Accounts are never hard-deleted.  Removal sets is_active=False so that
    historical journal lines keep resolving to their account.
"""

from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, Enum as SAEnum, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TenantScopedBase, UUIDString


class AccountType(str, Enum):
    """Types of accounts in the chart of accounts."""

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    @property
    def is_debit_normal(self) -> bool:
        """Assets and expenses carry their natural balance on the debit side."""
        return self in (AccountType.ASSET, AccountType.EXPENSE)


class Account(TenantScopedBase):
    """
    Chart of Accounts entry -- a single node in a tenant's ledger structure.

    Contract:
        Account.code is unique within the tenant.  A child account always
        has the same account_type as its parent.

    Guarantees:
        - parent_id, when set, references an account in the same tenant.
        - is_active defaults to True.

    Non-goals:
        - This model does NOT enforce the parent/child type rule or deletion
          protection; AccountService does.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_account_tenant_code"),
        Index("idx_account_tenant_type", "tenant_id", "account_type"),
        Index("idx_account_parent", "parent_id"),
    )

    # Account identifier (human-readable code)
    code: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(AccountType, native_enum=False, length=20),
        nullable=False,
    )

    # Whether the account is active for new postings
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Parent account for hierarchical chart of accounts
    parent_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Account {self.code}: {self.name}>"
