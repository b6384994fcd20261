"""
Account hierarchy -- pure tree assembly over a flat account set.

Accounts reference their parent by id only.  A tenant's accounts are loaded
once into a flat list and the forest is derived functionally; no persistent
object graph is built.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable
from uuid import UUID

from ledger_kernel.domain.dtos import AccountRecord, AccountTreeNode


def build_account_tree(
    accounts: Iterable[AccountRecord],
    parent_id: UUID | None = None,
) -> list[AccountTreeNode]:
    """
    Assemble a forest from a flat account list.

    The input is sorted by code first, so the same set of accounts yields the
    same forest whatever order it arrives in.  Siblings keep code order.
    Accounts whose parent is not reachable from ``parent_id`` (for example
    because a type filter excluded the parent) are not part of the result.
    """
    by_parent: dict[UUID | None, list[AccountRecord]] = defaultdict(list)
    for account in sorted(accounts, key=lambda a: a.code):
        by_parent[account.parent_id].append(account)

    def _build(pid: UUID | None) -> tuple[AccountTreeNode, ...]:
        return tuple(
            AccountTreeNode(
                id=a.id,
                code=a.code,
                name=a.name,
                account_type=a.account_type,
                parent_id=a.parent_id,
                is_active=a.is_active,
                children=_build(a.id),
            )
            for a in by_parent.get(pid, ())
        )

    return list(_build(parent_id))
