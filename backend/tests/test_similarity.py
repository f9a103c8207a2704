"""Tests for edit-distance similarity and invoice-number helpers."""
import pytest

from recon.utils.similarity import (
    extract_invoice_number,
    levenshtein_distance,
    normalize_invoice_number,
    similarity,
)


class TestLevenshtein:

    @pytest.mark.parametrize("a, b, expected", [
        ("", "", 0),
        ("abc", "", 3),
        ("kitten", "sitting", 3),
        ("flaw", "lawn", 2),
        ("same", "same", 0),
    ])
    def test_distance(self, a, b, expected):
        assert levenshtein_distance(a, b) == expected


class TestSimilarity:
    """Similarity is case- and whitespace-insensitive and bounded to [0, 1]."""

    def test_identical_after_normalization(self):
        assert similarity("  Steel Bolt M8 ", "steel bolt m8") == 1.0

    def test_both_empty(self):
        assert similarity("", None) == 1.0

    def test_one_empty(self):
        assert similarity("bolt", "") == 0.0

    def test_single_edit(self):
        assert similarity("steel bolt", "steel bolts") == pytest.approx(1 - 1 / 11)

    def test_symmetric(self):
        assert similarity("hex nut", "hex nuts m8") == similarity("hex nuts m8", "hex nut")


class TestInvoiceNumbers:

    def test_normalize_drops_punctuation_and_case(self):
        assert normalize_invoice_number("INV/2024-001") == "inv2024001"
        assert normalize_invoice_number(None) == ""

    def test_extract_dated_invoice_number(self):
        assert extract_invoice_number("NEFT ACME INV-2024-117 JAN") == "INV-2024-117"

    def test_extract_bill_number(self):
        assert extract_invoice_number("payment against BILL 88") == "BILL 88"

    def test_extract_nothing(self):
        assert extract_invoice_number("UTR1234567890") is None
        assert extract_invoice_number(None) is None
