"""
Invoice Parsing Pipeline

Main orchestration module: raw OCR text in, ParsedInvoiceData out.

    raw text ──▶ TextNormalizer ──┬─▶ invoice number (first match, length filtered)
                                  ├─▶ issue date     (first valid date)
                                  ├─▶ total amount   (largest amount)
                                  ├─▶ tax amount     (largest tax amount)
                                  ├─▶ issuer name    (first match)
                                  └─▶ currency       (first known code, else default)

The six extractions are independent. A parser holds only compiled
patterns and settings, so one instance can be shared by any number of
threads.
"""

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TypeVar, Union

from loguru import logger

from .models import ExtractedAmount, ParsedInvoiceData
from .parser.field_mapper import AmountExtractor, CurrencyDetector, DateExtractor, ValueExtractor
from .parser.normalizers import TextNormalizer
from .parser.patterns import PatternConfig, PatternLoader

T = TypeVar('T')


@dataclass(frozen=True)
class ParserSettings:
    """Parser knobs that are not patterns."""

    # Used when no currency marker is recognized
    default_currency: str = 'TRY'

    # Invoice number candidates outside this range are stray tokens or text blobs
    invoice_number_min_length: int = 6
    invoice_number_max_length: int = 50

    # Plausible invoice years
    min_year: int = 2000
    max_year: int = 2100

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'default_currency': self.default_currency,
            'invoice_number_min_length': self.invoice_number_min_length,
            'invoice_number_max_length': self.invoice_number_max_length,
            'min_year': self.min_year,
            'max_year': self.max_year,
        }


class InvoiceParser:
    """
    Extracts invoice fields from OCR text using configured patterns.

    Usage:
        parser = InvoiceParser.from_file(Path("config/patterns.yaml"))
        data = parser.parse(ocr_text)
        if data.is_valid:
            print(data.invoice_number, data.total_amount)
    """

    def __init__(self, config: PatternConfig, settings: Optional[ParserSettings] = None):
        """
        Initialize the parser.

        Args:
            config: Validated pattern configuration
            settings: Parser settings (defaults apply when omitted)
        """
        self.config = config
        self.settings = settings or ParserSettings()

        self.invoice_number_extractor = ValueExtractor(config.invoice_number)
        self.issuer_name_extractor = ValueExtractor(config.issuer_name)
        self.date_extractor = DateExtractor(
            config.date,
            min_year=self.settings.min_year,
            max_year=self.settings.max_year,
        )
        self.total_extractor = AmountExtractor(config.total_amount)
        self.tax_extractor = AmountExtractor(config.tax_amount)
        self.currency_detector = CurrencyDetector(
            config.currency,
            default_currency=self.settings.default_currency,
        )

    @classmethod
    def from_file(
        cls,
        config_path: Optional[Union[str, Path]] = None,
        settings: Optional[ParserSettings] = None,
    ) -> 'InvoiceParser':
        """
        Build a parser from a YAML/JSON pattern file.

        Raises:
            PatternConfigError: If the pattern file cannot be loaded
        """
        return cls(PatternLoader.load(config_path), settings)

    def parse(self, raw_text: Optional[str]) -> ParsedInvoiceData:
        """
        Extract all fields from raw OCR text.

        Never raises for any input; fields that cannot be found are None.
        """
        text = TextNormalizer.normalize(raw_text)
        if not text:
            logger.warning("Empty text provided for invoice parsing")

        total = self._extract('total_amount', self.total_extractor.extract, text, ExtractedAmount())
        tax = self._extract('tax_amount', self.tax_extractor.extract, text, ExtractedAmount())

        data = ParsedInvoiceData(
            invoice_number=self._extract('invoice_number', self.extract_invoice_number, text),
            issuer_name=self._extract('issuer_name', self.issuer_name_extractor.extract, text),
            issue_date=self._extract('issue_date', self.date_extractor.extract, text),
            total_amount=total.value,
            tax_amount=tax.value,
            currency_code=self._extract(
                'currency_code',
                self.currency_detector.detect,
                text,
                self.settings.default_currency,
            ),
            raw_total_text=total.raw_text,
            raw_tax_text=tax.raw_text,
        )

        logger.debug(f"Parsed invoice: {data.to_dict()}")
        return data

    def extract_invoice_number(self, text: str) -> Optional[str]:
        """First invoice number candidate with a plausible length."""
        min_len = self.settings.invoice_number_min_length
        max_len = self.settings.invoice_number_max_length

        for candidate in self.invoice_number_extractor.candidates(text):
            if min_len <= len(candidate) <= max_len:
                return candidate
            logger.debug(f"Rejected invoice number candidate '{candidate}' (length {len(candidate)})")

        return None

    @staticmethod
    def _extract(name: str, func: Callable[[str], T], text: str, default=None) -> T:
        """Run one field extraction; a failure only loses that field."""
        try:
            value = func(text)
        except Exception as e:
            logger.warning(f"Extraction of '{name}' failed: {e}")
            return default

        if value is not None:
            logger.debug(f"Extracted {name}: {value!r}")
        return value


_default_parser: Optional[InvoiceParser] = None
_default_parser_lock = threading.Lock()


def get_default_parser() -> InvoiceParser:
    """
    Get the process-wide parser built from the bundled patterns.

    Built on first use and kept for the life of the process. A broken
    bundled configuration raises PatternConfigError on every call.
    """
    global _default_parser

    if _default_parser is None:
        with _default_parser_lock:
            if _default_parser is None:
                _default_parser = InvoiceParser.from_file()

    return _default_parser


def parse_invoice_text(text: str) -> ParsedInvoiceData:
    """
    Quick function to parse OCR text with the default parser.

    Args:
        text: Raw OCR text

    Returns:
        ParsedInvoiceData with extracted fields
    """
    return get_default_parser().parse(text)
