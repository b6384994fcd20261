"""
Tests for the ledger engine.

Validates:
- Accepted entries persist with numbered, account-enriched lines
- Validation runs before anything is written
- Account resolution is tenant-scoped and reports every unresolved id
- JE-YYYYMMDD-NNN numbering per tenant per entry date
- Listing, lookup and account balances
"""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from ledger_kernel.domain.dtos import LineInput
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    JournalEntryNotFoundError,
    UnbalancedEntryError,
    UnresolvedAccountsError,
)
from ledger_kernel.models.account import AccountType
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.selectors.account_selector import AccountSelector


@pytest.fixture
def post(session, tenant, chart, journal_service):
    """Post a two-line entry between two chart codes and commit."""

    def _post(amount="100.00", debit="1101", credit="3001", entry_date=date(2024, 1, 5), **kwargs):
        entry = journal_service.create_entry(
            tenant.id,
            entry_date,
            [
                LineInput.debit_line(chart[debit].id, Decimal(amount)),
                LineInput.credit_line(chart[credit].id, Decimal(amount)),
            ],
            **kwargs,
        )
        session.commit()
        return entry

    return _post


def _entry_count(session, tenant_id):
    return session.execute(
        select(func.count(JournalEntry.id)).where(JournalEntry.tenant_id == tenant_id)
    ).scalar_one()


class TestCreateEntry:
    def test_first_entry_of_the_day(self, session, tenant, chart, journal_service, deterministic_clock):
        today = deterministic_clock.today()
        entry = journal_service.create_entry(
            tenant.id,
            today,
            [
                LineInput(account_id=chart["1101"].id, debit=Decimal("100"), credit=Decimal("0")),
                LineInput(account_id=chart["3001"].id, debit=Decimal("0"), credit=Decimal("100")),
            ],
        )
        assert entry.entry_number == f"JE-{today:%Y%m%d}-001"
        assert entry.total_debits == entry.total_credits == Decimal("100")

    def test_lines_enriched_and_ordered(self, post):
        entry = post(description="Owner investment", reference="DEP-1")
        assert entry.description == "Owner investment"
        assert entry.reference == "DEP-1"
        assert [line.line_seq for line in entry.lines] == [0, 1]
        first, second = entry.lines
        assert (first.account_code, first.account_name) == ("1101", "Cash")
        assert first.account_type is AccountType.ASSET
        assert second.account_code == "3001"
        assert second.credit == Decimal("100.00")

    def test_sequence_continues(self, post):
        numbers = [post().entry_number for _ in range(3)]
        assert numbers == ["JE-20240105-001", "JE-20240105-002", "JE-20240105-003"]

    def test_sequence_resets_per_day(self, post):
        assert post(entry_date=date(2024, 1, 5)).entry_number == "JE-20240105-001"
        assert post(entry_date=date(2024, 1, 6)).entry_number == "JE-20240106-001"
        assert post(entry_date=date(2024, 1, 5)).entry_number == "JE-20240105-002"

    def test_sequence_per_tenant(self, session, post, other_tenant, journal_service, config):
        post()
        theirs = AccountSelector(session).find_by_codes(other_tenant.id, ["1101", "3001"])
        entry = journal_service.create_entry(
            other_tenant.id,
            date(2024, 1, 5),
            [
                LineInput.debit_line(theirs["1101"].id, Decimal("5")),
                LineInput.credit_line(theirs["3001"].id, Decimal("5")),
            ],
        )
        assert entry.entry_number == "JE-20240105-001"

    def test_unbalanced_writes_nothing(self, session, tenant, chart, journal_service):
        with pytest.raises(UnbalancedEntryError):
            journal_service.create_entry(
                tenant.id,
                date(2024, 1, 5),
                [
                    LineInput.debit_line(chart["1101"].id, Decimal("100")),
                    LineInput.credit_line(chart["3001"].id, Decimal("90")),
                ],
            )
        assert _entry_count(session, tenant.id) == 0

    def test_unresolved_accounts_listed(self, tenant, other_tenant, chart, session, journal_service):
        foreign = AccountSelector(session).find_by_code(other_tenant.id, "3001")
        missing = uuid4()
        with pytest.raises(UnresolvedAccountsError) as exc_info:
            journal_service.create_entry(
                tenant.id,
                date(2024, 1, 5),
                [
                    LineInput.debit_line(chart["1101"].id, Decimal("10")),
                    LineInput.credit_line(foreign.id, Decimal("5")),
                    LineInput.credit_line(missing, Decimal("5")),
                ],
            )
        assert exc_info.value.account_ids == [str(foreign.id), str(missing)]
        assert _entry_count(session, tenant.id) == 0

    def test_duplicate_account_ids_reported_once(self, tenant, chart, journal_service):
        missing = uuid4()
        with pytest.raises(UnresolvedAccountsError) as exc_info:
            journal_service.create_entry(
                tenant.id,
                date(2024, 1, 5),
                [
                    LineInput.debit_line(missing, Decimal("10")),
                    LineInput.credit_line(missing, Decimal("10")),
                ],
            )
        assert exc_info.value.account_ids == [str(missing)]

    def test_same_account_both_sides(self, post):
        entry = post(debit="1101", credit="1101")
        assert len(entry.lines) == 2

    def test_logged(self, post, captured_logs):
        entry = post()
        created = [r for r in captured_logs() if r["message"] == "journal_entry_created"]
        assert created[-1]["entry_number"] == entry.entry_number
        assert created[-1]["line_count"] == 2


class TestReads:
    def test_get_entry(self, tenant, post, journal_service):
        entry = post()
        loaded = journal_service.get_entry(tenant.id, entry.id)
        assert loaded.entry_number == entry.entry_number
        assert [l.account_code for l in loaded.lines] == ["1101", "3001"]
        assert loaded.total_debits == Decimal("100.00")

    def test_get_entry_other_tenant(self, other_tenant, post, journal_service):
        entry = post()
        with pytest.raises(JournalEntryNotFoundError):
            journal_service.get_entry(other_tenant.id, entry.id)

    def test_find_entries_newest_first(self, tenant, post, journal_service):
        first = post(entry_date=date(2024, 1, 5))
        second = post(entry_date=date(2024, 1, 5))
        third = post(entry_date=date(2024, 1, 7))
        page = journal_service.find_entries(tenant.id)
        assert [e.id for e in page.data] == [third.id, second.id, first.id]
        assert page.total == 3
        assert page.pages == 1

    def test_find_entries_paginates(self, tenant, post, journal_service):
        for offset in range(5):
            post(entry_date=date(2024, 1, 1) + timedelta(days=offset))
        page = journal_service.find_entries(tenant.id, page=2, limit=2)
        assert [e.entry_date for e in page.data] == [date(2024, 1, 3), date(2024, 1, 2)]
        assert (page.total, page.pages) == (5, 3)

    def test_find_entries_window_inclusive(self, tenant, post, journal_service):
        for day in (1, 5, 10):
            post(entry_date=date(2024, 1, day))
        page = journal_service.find_entries(
            tenant.id, start_date=date(2024, 1, 5), end_date=date(2024, 1, 10)
        )
        assert sorted(e.entry_date.day for e in page.data) == [5, 10]


class TestAccountBalance:
    def test_raw_debit_minus_credit(self, tenant, chart, post, journal_service):
        post(amount="100.00", debit="1101", credit="3001")
        post(amount="30.00", debit="5003", credit="1101")
        assert journal_service.account_balance(chart["1101"].id, tenant.id) == Decimal("70.00")
        assert journal_service.account_balance(chart["3001"].id, tenant.id) == Decimal("-100.00")

    def test_window(self, tenant, chart, post, journal_service):
        post(amount="100.00", entry_date=date(2024, 1, 5))
        post(amount="50.00", entry_date=date(2024, 2, 5))
        balance = journal_service.account_balance(
            chart["1101"].id, tenant.id, start_date=date(2024, 2, 1)
        )
        assert balance == Decimal("50.00")

    def test_no_activity(self, tenant, chart, journal_service):
        assert journal_service.account_balance(chart["1202"].id, tenant.id) == Decimal("0.00")

    def test_other_tenant_account(self, other_tenant, chart, journal_service):
        with pytest.raises(AccountNotFoundError):
            journal_service.account_balance(chart["1101"].id, other_tenant.id)
