"""Tests for document number formatting and parsing."""

from datetime import date

import pytest

from ledger_kernel.domain.numbering import (
    day_prefix,
    format_document_number,
    parse_sequence,
)


class TestFormatDocumentNumber:
    def test_journal_entry_number(self):
        assert format_document_number("JE", date(2024, 3, 5), 1) == "JE-20240305-001"

    def test_invoice_number(self):
        assert format_document_number("INV", date(2024, 12, 31), 42) == "INV-20241231-042"

    def test_sequence_widens_past_width(self):
        assert format_document_number("JE", date(2024, 1, 1), 1000) == "JE-20240101-1000"

    def test_custom_width(self):
        assert format_document_number("JE", date(2024, 1, 1), 7, width=5) == "JE-20240101-00007"

    @pytest.mark.parametrize("sequence", [0, -1])
    def test_sequence_must_be_positive(self, sequence):
        with pytest.raises(ValueError):
            format_document_number("JE", date(2024, 1, 1), sequence)


class TestParseSequence:
    def test_day_prefix(self):
        assert day_prefix("INV", date(2024, 7, 9)) == "INV-20240709-"

    @pytest.mark.parametrize(
        "number, expected",
        [
            ("JE-20240305-001", 1),
            ("JE-20240305-017", 17),
            ("INV-20240305-1000", 1000),
            ("JE-20240305-", None),
            ("JE-20240305-abc", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parse(self, number, expected):
        assert parse_sequence(number) == expected
