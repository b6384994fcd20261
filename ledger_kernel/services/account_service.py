"""
AccountService -- the per-tenant chart of accounts (write side).

Responsibility:
    Creates, renames, deactivates and soft-removes accounts, and seeds the
    default chart.  Reads (tree, detail, lookups) live in AccountSelector;
    this service exposes the commonly used ones for convenience.

Architecture position:
    Kernel > Services.  Flushes only; the caller owns the transaction.

Invariants enforced:
    - (tenant, code) unique -> DuplicateAccountCodeError.
    - Parent must exist in the tenant -> ParentAccountNotFoundError.
    - Child type equals parent type -> AccountTypeMismatchError.
    - code, type and parent are immutable after creation.
    - Accounts are never hard-deleted: remove_account deactivates, and only
      when the account has neither children nor journal lines.
    - The default chart is only seeded into an empty tenant
      -> ChartAlreadySeededError.

Audit relevance:
    account_created / account_updated / account_deactivated /
    chart_seeded are logged with tenant and account identifiers.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_config import LedgerConfig, get_active_config
from ledger_kernel.domain.dtos import AccountDetail, AccountRef, AccountTreeNode
from ledger_kernel.exceptions import (
    AccountHasChildrenError,
    AccountNotFoundError,
    AccountReferencedError,
    AccountTypeMismatchError,
    ChartAlreadySeededError,
    DuplicateAccountCodeError,
    ParentAccountNotFoundError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account, AccountType
from ledger_kernel.selectors.account_selector import AccountSelector, to_ref
from ledger_kernel.services.base import BaseService

logger = get_logger("services.account")


class AccountService(BaseService[Account]):
    """
    Write operations on a tenant's chart of accounts.

    Contract:
        Every method takes the tenant id explicitly.  An account id from
        another tenant behaves exactly like an unknown id.

    Non-goals:
        - Does NOT commit.
        - Does NOT allow changing code, type or parent.
    """

    def __init__(self, session: Session, config: LedgerConfig | None = None):
        super().__init__(session)
        self._config = config or get_active_config()
        self._selector = AccountSelector(session)

    # =========================================================================
    # Reads
    # =========================================================================

    def list_tree(
        self,
        tenant_id: UUID,
        account_type: AccountType | None = None,
    ) -> list[AccountTreeNode]:
        return self._selector.list_tree(tenant_id, account_type)

    def get_account(self, tenant_id: UUID, account_id: UUID) -> AccountDetail:
        return self._selector.get_account(tenant_id, account_id)

    # =========================================================================
    # Writes
    # =========================================================================

    def _load(self, tenant_id: UUID, account_id: UUID) -> Account:
        account = self.session.execute(
            select(Account).where(
                Account.tenant_id == tenant_id,
                Account.id == account_id,
            )
        ).scalar_one_or_none()
        if account is None:
            raise AccountNotFoundError(str(account_id))
        return account

    def create_account(
        self,
        tenant_id: UUID,
        code: str,
        name: str,
        account_type: AccountType,
        parent_id: UUID | None = None,
    ) -> AccountRef:
        """
        Create an account.

        Raises:
            DuplicateAccountCodeError: code already used in the tenant.
            ParentAccountNotFoundError: parent_id not in the tenant.
            AccountTypeMismatchError: parent has a different type.
        """
        account_type = AccountType(account_type)

        if self._selector.find_by_code(tenant_id, code) is not None:
            raise DuplicateAccountCodeError(code)

        if parent_id is not None:
            parent = self.session.execute(
                select(Account).where(
                    Account.tenant_id == tenant_id,
                    Account.id == parent_id,
                )
            ).scalar_one_or_none()
            if parent is None:
                raise ParentAccountNotFoundError(str(parent_id))
            if parent.account_type != account_type:
                raise AccountTypeMismatchError(
                    parent.account_type.value, account_type.value
                )

        account = Account(
            tenant_id=tenant_id,
            code=code,
            name=name,
            account_type=account_type,
            parent_id=parent_id,
            is_active=True,
        )
        self.session.add(account)
        self.session.flush()

        logger.info(
            "account_created",
            extra={
                "tenant_id": str(tenant_id),
                "account_id": str(account.id),
                "account_code": code,
                "account_type": account_type.value,
            },
        )
        return to_ref(account)

    def update_account(
        self,
        tenant_id: UUID,
        account_id: UUID,
        name: str | None = None,
        is_active: bool | None = None,
    ) -> AccountDetail:
        """Rename and/or (de)activate an account.  Nothing else is mutable."""
        account = self._load(tenant_id, account_id)
        if name is not None:
            account.name = name
        if is_active is not None:
            account.is_active = is_active
        self.session.flush()

        logger.info(
            "account_updated",
            extra={
                "tenant_id": str(tenant_id),
                "account_id": str(account_id),
                "name_changed": name is not None,
                "is_active": account.is_active,
            },
        )
        return self._selector.get_account(tenant_id, account_id)

    def remove_account(self, tenant_id: UUID, account_id: UUID) -> AccountRef:
        """
        Soft-delete an account by deactivating it.

        Raises:
            AccountHasChildrenError: the account has child accounts.
            AccountReferencedError: journal lines post to the account.
        """
        account = self._load(tenant_id, account_id)

        if self._selector.has_children(tenant_id, account_id):
            raise AccountHasChildrenError(str(account_id))
        if self._selector.is_referenced(account_id):
            raise AccountReferencedError(str(account_id))

        account.is_active = False
        self.session.flush()

        logger.info(
            "account_deactivated",
            extra={
                "tenant_id": str(tenant_id),
                "account_id": str(account_id),
                "account_code": account.code,
            },
        )
        return to_ref(account)

    def seed_default_chart(self, tenant_id: UUID) -> list[AccountRef]:
        """
        Insert the configured default chart into an empty tenant.

        Rows are inserted in configuration order; each row's parent is
        resolved by code from the rows already inserted.

        Raises:
            ChartAlreadySeededError: the tenant already has accounts.
        """
        if self._selector.count_accounts(tenant_id) > 0:
            raise ChartAlreadySeededError(str(tenant_id))

        id_by_code: dict[str, UUID] = {}
        created: list[Account] = []
        for row in self._config.default_chart:
            account = Account(
                tenant_id=tenant_id,
                code=row.code,
                name=row.name,
                account_type=AccountType(row.account_type),
                parent_id=id_by_code.get(row.parent_code) if row.parent_code else None,
                is_active=True,
            )
            self.session.add(account)
            # Flush per row so the generated id is available to children
            self.session.flush()
            id_by_code[row.code] = account.id
            created.append(account)

        logger.info(
            "chart_seeded",
            extra={
                "tenant_id": str(tenant_id),
                "account_count": len(created),
                "config_id": self._config.config_id,
            },
        )
        return [to_ref(a) for a in created]
