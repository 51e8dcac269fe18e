"""
Tests for Invoice Extractor field extraction

This module contains unit tests for normalizers, field extractors and
record review checks.
Run with: pytest tests/ -v
"""

import pytest
from pathlib import Path
from datetime import date
from decimal import Decimal
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from invoice_extractor.parser.normalizers import (
    TextNormalizer,
    AmountNormalizer,
    CurrencyNormalizer,
)
from invoice_extractor.parser.field_mapper import (
    ValueExtractor,
    DateExtractor,
    AmountExtractor,
    CurrencyDetector,
)
from invoice_extractor.parser.validators import InvoiceRecordValidator
from invoice_extractor.models import ParsedInvoiceData, ExtractedAmount


DATE_PATTERNS = [
    r'(?:tarih[iı]?|date)\s*[:：]?\s*(\d{1,2})[./](\d{1,2})[./](\d{4})',
    r'\b(\d{1,2})[./](\d{1,2})[./](\d{4})\b',
]

TOTAL_PATTERNS = [
    r'toplam\s*[:：]?\s*([\d.,]*\d)',
    r'([\d.]*\d,\d{2})\s*tl',
]

CURRENCY_PATTERNS = [
    r'\d\s*(₺|tl|try|usd|eur|gbp|chf)(?![a-z])',
    r'(₺|\$|€|£)\s*\d',
]


class TestTextNormalizer:
    """Tests for OCR text normalization."""

    def test_collapse_spaces_and_tabs(self):
        assert TextNormalizer.normalize("Fatura   No:\t\tABC") == "Fatura No: ABC"

    def test_preserve_single_newlines(self):
        assert TextNormalizer.normalize("Fatura No: ABC\nTarih: 15.11.2023") == \
            "Fatura No: ABC\nTarih: 15.11.2023"

    def test_collapse_blank_lines(self):
        assert TextNormalizer.normalize("a\n\n\n  \t\nb") == "a\nb"

    def test_line_endings(self):
        assert TextNormalizer.normalize("a\r\nb\rc") == "a\nb\nc"

    def test_trim(self):
        assert TextNormalizer.normalize("  \n  Toplam  \n ") == "Toplam"

    def test_empty_input(self):
        assert TextNormalizer.normalize("") == ""
        assert TextNormalizer.normalize(None) == ""
        assert TextNormalizer.normalize(" \n\t\n ") == ""

    @pytest.mark.parametrize("text", [
        "  Hello   World  \n\n\n  Test  ",
        "a  b\r\n\r\nc",
        "x y\t\tz",
        "\n\n Toplam:\t1.234,56 TL \n\n\nKDV: 234,56 TL\n",
        "",
    ])
    def test_idempotent(self, text):
        once = TextNormalizer.normalize(text)
        assert TextNormalizer.normalize(once) == once


class TestAmountNormalizer:
    """Tests for locale amount parsing."""

    def setup_method(self):
        self.normalizer = AmountNormalizer()

    def test_thousands_and_decimals(self):
        assert self.normalizer.normalize("1.234,56") == Decimal("1234.56")

    def test_multiple_thousands_separators(self):
        assert self.normalizer.normalize("1.234.567,89") == Decimal("1234567.89")

    def test_without_thousands_separator(self):
        assert self.normalizer.normalize("500,75") == Decimal("500.75")

    def test_exact_decimal(self):
        value = self.normalizer.normalize("0,10")
        assert isinstance(value, Decimal)
        assert value + self.normalizer.normalize("0,20") == Decimal("0.30")

    def test_invalid(self):
        assert self.normalizer.normalize("abc") is None
        assert self.normalizer.normalize(",") is None
        assert self.normalizer.normalize("1,2,3") is None

    def test_empty_input(self):
        assert self.normalizer.normalize("") is None
        assert self.normalizer.normalize(None) is None


class TestCurrencyNormalizer:
    """Tests for currency code mapping."""

    def setup_method(self):
        self.normalizer = CurrencyNormalizer()

    def test_turkish_lira(self):
        assert self.normalizer.to_code("TL") == "TRY"
        assert self.normalizer.to_code("₺") == "TRY"
        assert self.normalizer.to_code("Try") == "TRY"

    def test_other_codes(self):
        assert self.normalizer.to_code("usd") == "USD"
        assert self.normalizer.to_code("EUR") == "EUR"
        assert self.normalizer.to_code("€") == "EUR"
        assert self.normalizer.to_code("gbp") == "GBP"
        assert self.normalizer.to_code("CHF") == "CHF"

    def test_unknown(self):
        assert self.normalizer.to_code("jpy") is None
        assert self.normalizer.to_code("") is None
        assert self.normalizer.to_code(None) is None


class TestValueExtractor:
    """Tests for first-match value extraction."""

    def setup_method(self):
        self.extractor = ValueExtractor([
            r'fatura\s*no\s*:\s*(\S+)',
            r'invoice\s*no\s*:\s*(\S+)',
        ])

    def test_pattern_order_wins_over_text_order(self):
        text = "Invoice No: INV-1\nFatura No: FT-2"
        assert self.extractor.extract(text) == "FT-2"

    def test_candidates_in_pattern_order(self):
        text = "Invoice No: INV-1\nFatura No: FT-2"
        assert list(self.extractor.candidates(text)) == ["FT-2", "INV-1"]

    def test_empty_capture_falls_through(self):
        extractor = ValueExtractor([r'ref:\s*(\w*)', r'id:\s*(\w+)'])
        assert extractor.extract("ref: -- id: X42") == "X42"

    def test_capture_is_trimmed(self):
        extractor = ValueExtractor([r'firma:([^\n]+)'])
        assert extractor.extract("Firma:   ACME LTD  \nx") == "ACME LTD"

    def test_not_found(self):
        assert self.extractor.extract("Tarih: 15.11.2023") is None
        assert self.extractor.extract("") is None


class TestDateExtractor:
    """Tests for day/month/year date extraction."""

    def setup_method(self):
        self.extractor = DateExtractor(DATE_PATTERNS)

    def test_dotted_format(self):
        assert self.extractor.extract("Tarih: 15.11.2023") == date(2023, 11, 15)

    def test_slash_format(self):
        assert self.extractor.extract("Tarih: 01/12/2023") == date(2023, 12, 1)

    def test_iso_format_not_supported(self):
        # Groups are read as day, month, year; ISO order is not reinterpreted
        assert self.extractor.extract("Tarih: 2023-11-15") is None

    def test_implausible_years(self):
        assert self.extractor.extract("Tarih: 15.11.1899") is None
        assert self.extractor.extract("Tarih: 15.11.2200") is None

    def test_year_bounds_inclusive(self):
        assert self.extractor.extract("01.01.2000") == date(2000, 1, 1)
        assert self.extractor.extract("31.12.2100") == date(2100, 12, 31)

    def test_invalid_calendar_date_skipped(self):
        assert self.extractor.extract("31.02.2023 sonra 01.03.2023") == date(2023, 3, 1)

    def test_labelled_pattern_preferred(self):
        text = "Sipariş 01.01.2022\nTarih: 15.11.2023"
        assert self.extractor.extract(text) == date(2023, 11, 15)

    def test_custom_year_range(self):
        extractor = DateExtractor(DATE_PATTERNS, min_year=1990, max_year=2030)
        assert extractor.extract("Tarih: 15.11.1995") == date(1995, 11, 15)

    def test_not_found(self):
        assert self.extractor.extract("Fatura No: ABC123") is None


class TestAmountExtractor:
    """Tests for largest-amount extraction."""

    def setup_method(self):
        self.extractor = AmountExtractor(TOTAL_PATTERNS)

    def test_turkish_format(self):
        result = self.extractor.extract("Toplam: 1.234,56 TL")
        assert result == ExtractedAmount(Decimal("1234.56"), "1.234,56")

    def test_tuple_unpacking(self):
        value, raw_text = self.extractor.extract("Toplam: 500,75 TL")
        assert value == Decimal("500.75")
        assert raw_text == "500,75"

    def test_largest_amount_across_patterns(self):
        text = "Ara Toplam: 1.000,00 TL\nKDV: 180,00 TL\nGenel Toplam: 1.180,00 TL"
        value, raw_text = self.extractor.extract(text)
        assert value == Decimal("1180.00")
        assert raw_text == "1.180,00"

    def test_first_seen_kept_on_tie(self):
        value, raw_text = self.extractor.extract("Toplam: 1.000\nÖdeme 1000,00 TL")
        assert value == Decimal("1000")
        assert raw_text == "1.000"

    def test_unparsable_match_skipped(self):
        extractor = AmountExtractor([r'toplam:\s*(\S+)'])
        assert extractor.extract("toplam: 1,2,3 toplam: 5,00").value == Decimal("5.00")

    def test_zero_is_absent(self):
        assert self.extractor.extract("Toplam: 0,00 TL") == ExtractedAmount(None, None)

    def test_not_found(self):
        result = self.extractor.extract("Fatura No: ABC123")
        assert result.value is None
        assert result.raw_text is None


class TestCurrencyDetector:
    """Tests for currency detection."""

    def setup_method(self):
        self.detector = CurrencyDetector(CURRENCY_PATTERNS)

    def test_tl_suffix(self):
        assert self.detector.detect("Toplam: 1.234,56 TL") == "TRY"

    def test_lira_symbol(self):
        assert self.detector.detect("Toplam: ₺1.234,56") == "TRY"

    def test_foreign_code(self):
        assert self.detector.detect("Total: 1.500,00 USD") == "USD"

    def test_default_when_missing(self):
        assert self.detector.detect("Fatura No: ABC2023000123456") == "TRY"
        detector = CurrencyDetector(CURRENCY_PATTERNS, default_currency="EUR")
        assert detector.detect("Fatura No: ABC2023000123456") == "EUR"

    def test_unknown_token_skipped(self):
        detector = CurrencyDetector([r'currency:\s*([a-z]{3})', r'\d\s*(usd|eur)'])
        assert detector.detect("Currency: JPY\nTotal: 100 EUR") == "EUR"

    def test_unknown_token_continues_within_pattern(self):
        detector = CurrencyDetector([r'(\w{3})\s*\d'])
        assert detector.detect("abc 1 usd 2") == "USD"


class TestInvoiceRecordValidator:
    """Tests for record review warnings."""

    def setup_method(self):
        self.validator = InvoiceRecordValidator()

    def test_complete_record(self):
        data = ParsedInvoiceData(
            invoice_number="ABC2023000123456",
            issuer_name="ÖRNEK TİCARET A.Ş.",
            issue_date=date(2023, 11, 15),
            total_amount=Decimal("1234.56"),
            tax_amount=Decimal("234.56"),
            currency_code="TRY",
        )
        assert self.validator.review(data) == []

    def test_missing_fields(self):
        missing = self.validator.missing_fields(ParsedInvoiceData())
        assert missing == ['invoice_number', 'total_amount', 'issuer_name', 'issue_date']

    def test_tax_not_smaller_than_total(self):
        data = ParsedInvoiceData(total_amount=Decimal("100"), tax_amount=Decimal("180"))
        warnings = self.validator.review(data)
        assert any("not smaller" in w for w in warnings)

    def test_negative_tax(self):
        data = ParsedInvoiceData(total_amount=Decimal("100"), tax_amount=Decimal("-10"))
        warnings = self.validator.review(data)
        assert any("negative" in w for w in warnings)

    def test_unusual_invoice_number_length(self):
        data = ParsedInvoiceData(invoice_number="ABC123", total_amount=Decimal("100"))
        warnings = self.validator.review(data)
        assert any("unusual length" in w for w in warnings)


class TestParsedInvoiceData:
    """Tests for the result record."""

    def test_valid_with_number_and_total(self):
        data = ParsedInvoiceData(invoice_number="ABC2023000123456", total_amount=Decimal("1"))
        assert data.is_valid

    def test_empty_number_is_invalid(self):
        assert not ParsedInvoiceData(invoice_number="", total_amount=Decimal("1")).is_valid

    def test_missing_total_is_invalid(self):
        assert not ParsedInvoiceData(invoice_number="ABC2023000123456").is_valid

    def test_amount_without_tax(self):
        data = ParsedInvoiceData(total_amount=Decimal("118.00"), tax_amount=Decimal("18.00"))
        assert data.amount_without_tax == Decimal("100.00")
        assert ParsedInvoiceData(total_amount=Decimal("1")).amount_without_tax is None

    def test_to_dict(self):
        data = ParsedInvoiceData(
            invoice_number="ABC2023000123456",
            issue_date=date(2023, 11, 15),
            total_amount=Decimal("1234.56"),
        )
        result = data.to_dict()
        assert result['issue_date'] == "2023-11-15"
        assert result['total_amount'] == "1234.56"
        assert result['tax_amount'] is None
        assert result['is_valid'] is True
