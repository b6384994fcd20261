"""
Module: ledger_kernel.selectors.account_selector
Responsibility: Read-only access to a tenant's chart of accounts: the
    account tree, single-account detail, and code lookups used by the
    subledger to resolve well-known accounts.
Architecture position: Kernel > Selectors.

Failure modes:
    - get_account raises AccountNotFoundError when the id is absent in the
      tenant.  Other lookups return None / empty collections.
"""

from __future__ import annotations

from typing import Iterable
from uuid import UUID

from sqlalchemy import exists, func, select

from ledger_kernel.domain.dtos import (
    AccountDetail,
    AccountRecord,
    AccountRef,
    AccountTreeNode,
)
from ledger_kernel.domain.hierarchy import build_account_tree
from ledger_kernel.exceptions import AccountNotFoundError
from ledger_kernel.models.account import Account, AccountType
from ledger_kernel.models.journal import JournalLine
from ledger_kernel.selectors.base import BaseSelector


def to_ref(account: Account) -> AccountRef:
    return AccountRef(
        id=account.id,
        code=account.code,
        name=account.name,
        account_type=account.account_type,
    )


def to_record(account: Account) -> AccountRecord:
    return AccountRecord(
        id=account.id,
        code=account.code,
        name=account.name,
        account_type=account.account_type,
        parent_id=account.parent_id,
        is_active=account.is_active,
    )


class AccountSelector(BaseSelector[Account]):
    """Queries over a tenant's chart of accounts."""

    def _find(self, tenant_id: UUID, account_id: UUID) -> Account | None:
        return self.session.execute(
            select(Account).where(
                Account.tenant_id == tenant_id,
                Account.id == account_id,
            )
        ).scalar_one_or_none()

    def list_accounts(
        self,
        tenant_id: UUID,
        account_type: AccountType | None = None,
    ) -> list[AccountRecord]:
        """All tenant accounts, optionally of one type, ordered by code."""
        query = select(Account).where(Account.tenant_id == tenant_id)
        if account_type is not None:
            query = query.where(Account.account_type == account_type)
        query = query.order_by(Account.code)
        return [to_record(a) for a in self.session.execute(query).scalars()]

    def list_tree(
        self,
        tenant_id: UUID,
        account_type: AccountType | None = None,
    ) -> list[AccountTreeNode]:
        """
        The tenant's chart as a forest.

        Roots are accounts without a parent; children are nested in code
        order.  With a type filter, only that type's accounts are
        considered.
        """
        return build_account_tree(self.list_accounts(tenant_id, account_type))

    def get_account(self, tenant_id: UUID, account_id: UUID) -> AccountDetail:
        account = self._find(tenant_id, account_id)
        if account is None:
            raise AccountNotFoundError(str(account_id))

        parent = None
        if account.parent_id is not None:
            parent_row = self._find(tenant_id, account.parent_id)
            if parent_row is not None:
                parent = to_ref(parent_row)

        children = self.session.execute(
            select(Account)
            .where(
                Account.tenant_id == tenant_id,
                Account.parent_id == account.id,
            )
            .order_by(Account.code)
        ).scalars()

        return AccountDetail(
            id=account.id,
            code=account.code,
            name=account.name,
            account_type=account.account_type,
            is_active=account.is_active,
            parent=parent,
            children=tuple(to_ref(c) for c in children),
        )

    def find_by_code(self, tenant_id: UUID, code: str) -> AccountRef | None:
        account = self.session.execute(
            select(Account).where(
                Account.tenant_id == tenant_id,
                Account.code == code,
            )
        ).scalar_one_or_none()
        return to_ref(account) if account is not None else None

    def find_by_codes(
        self, tenant_id: UUID, codes: Iterable[str]
    ) -> dict[str, AccountRef]:
        """Map of code -> account for whichever of ``codes`` exist."""
        rows = self.session.execute(
            select(Account).where(
                Account.tenant_id == tenant_id,
                Account.code.in_(list(codes)),
            )
        ).scalars()
        return {a.code: to_ref(a) for a in rows}

    def find_by_ids(
        self, tenant_id: UUID, account_ids: Iterable[UUID]
    ) -> dict[UUID, AccountRef]:
        """Map of id -> account for whichever of ``account_ids`` are in the tenant."""
        ids = list(account_ids)
        if not ids:
            return {}
        rows = self.session.execute(
            select(Account).where(
                Account.tenant_id == tenant_id,
                Account.id.in_(ids),
            )
        ).scalars()
        return {a.id: to_ref(a) for a in rows}

    def find_records(
        self, tenant_id: UUID, account_ids: Iterable[UUID]
    ) -> list[AccountRecord]:
        """Flat records (with parent_id) for the given ids, ordered by code."""
        ids = list(account_ids)
        if not ids:
            return []
        rows = self.session.execute(
            select(Account)
            .where(
                Account.tenant_id == tenant_id,
                Account.id.in_(ids),
            )
            .order_by(Account.code)
        ).scalars()
        return [to_record(a) for a in rows]

    def count_accounts(self, tenant_id: UUID) -> int:
        return self.session.execute(
            select(func.count(Account.id)).where(Account.tenant_id == tenant_id)
        ).scalar_one()

    def has_children(self, tenant_id: UUID, account_id: UUID) -> bool:
        return self.session.execute(
            select(
                exists().where(
                    Account.tenant_id == tenant_id,
                    Account.parent_id == account_id,
                )
            )
        ).scalar_one()

    def is_referenced(self, account_id: UUID) -> bool:
        """True if any journal line posts to the account."""
        return self.session.execute(
            select(exists().where(JournalLine.account_id == account_id))
        ).scalar_one()
