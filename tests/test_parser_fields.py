"""
Test suite for merchant, line item and currency extraction.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from receipt_engine.config import Settings
from receipt_engine.services.parser import ReceiptParser


GROCERY_LINES = [
    "Apple 1.00",
    "Banana 2.00",
    "Sales Tax 0.50",
    "Cherry 3.00",
    "Dates 4.00",
    "Subtotal 9.00",
    "Eggs 5.00",
    "Flour 6.00",
    "Grapes 7.00",
    "TOTAL 10.00",
    "Honey 8.00",
    "Ice 9.00",
    "Jam 10.00",
    "Kale 11.00",
    "Lime 12.00",
]


class TestMerchant:
    """Merchant is the first mostly-alphabetic line near the top."""

    def test_skips_excluded_keywords(self):
        parser = ReceiptParser()
        lines = ["Receipt No. 12345", "Joe's Coffee Shop", "Date: 01/01/2024"]
        assert parser.extract_merchant(lines) == "Joe's Coffee Shop"

    def test_returns_line_verbatim(self):
        parser = ReceiptParser()
        assert parser.extract_merchant(["  SM SUPERMARKET  "]) == "SM SUPERMARKET"

    def test_none_when_every_line_is_excluded(self):
        parser = ReceiptParser()
        assert parser.extract_merchant(["Total 5.00", "Cash 10.00"]) is None

    def test_short_and_numeric_lines_rejected(self):
        parser = ReceiptParser()
        assert parser.extract_merchant(["ABC", "AB12", "Mart"]) == "Mart"

    def test_only_first_five_lines_considered(self):
        lines = ["12345", "#####", "99-99", "1234", "$$$$", "Real Shop"]
        assert ReceiptParser().extract_merchant(lines) is None

        parser = ReceiptParser(config=Settings(MERCHANT_SCAN_LINES=6))
        assert parser.extract_merchant(lines) == "Real Shop"


class TestItems:
    """Items are name + trailing price lines, filtered and capped."""

    def test_cap_and_filtering(self):
        parser = ReceiptParser()
        items = parser.extract_items(GROCERY_LINES)
        assert items == [
            "Apple - 1.00",
            "Banana - 2.00",
            "Cherry - 3.00",
            "Dates - 4.00",
            "Eggs - 5.00",
            "Flour - 6.00",
            "Grapes - 7.00",
            "Honey - 8.00",
            "Ice - 9.00",
            "Jam - 10.00",
        ]

    def test_short_names_rejected(self):
        parser = ReceiptParser()
        assert parser.extract_items(["ab 5.00", "x  3"]) == []

    def test_price_must_end_the_line(self):
        parser = ReceiptParser()
        assert parser.extract_items(["Coffee $3.00", "Muffin 2.50 ea"]) == []

    def test_price_kept_as_written(self):
        parser = ReceiptParser()
        assert parser.extract_items(["Television   1,299.99"]) == ["Television - 1,299.99"]

    def test_cap_is_configurable(self):
        parser = ReceiptParser(config=Settings(MAX_ITEMS=2))
        assert parser.extract_items(GROCERY_LINES) == ["Apple - 1.00", "Banana - 2.00"]

    def test_zero_cap_returns_no_items(self):
        parser = ReceiptParser(config=Settings(MAX_ITEMS=0))
        assert parser.extract_items(["Apple 1.00", "Pear 2.00"]) == []


class TestCurrency:
    """Currency is a hint taken from the most frequent symbol."""

    def test_most_frequent_symbol(self):
        parser = ReceiptParser()
        assert parser.extract_currency(["€5.00", "$3.00", "€2.00"]) == 'EUR'

    def test_tie_goes_to_first_seen(self):
        parser = ReceiptParser()
        assert parser.extract_currency(["₹100 ₱50"]) == 'INR'

    def test_no_symbol(self):
        parser = ReceiptParser()
        assert parser.extract_currency(["Total 5.00"]) is None
