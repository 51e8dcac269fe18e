"""
Invoice Extractor

Extracts structured invoice fields from noisy OCR text.

Features:
- Pattern-driven extraction configured in YAML (no code changes for new layouts)
- Turkish number format handling with exact Decimal amounts
- Best-candidate selection for amounts, first-match priority for text fields
- Calendar and year plausibility checks for dates
- Partial results: every field is independently optional

Quick Start:
    from invoice_extractor import parse_invoice_text

    data = parse_invoice_text(ocr_text)
    print(data.invoice_number, data.total_amount, data.currency_code)
    print(data.is_valid)

    # Custom patterns and settings
    from invoice_extractor import InvoiceParser, ParserSettings

    parser = InvoiceParser.from_file(
        Path("my_patterns.yaml"),
        ParserSettings(default_currency="EUR"),
    )
    data = parser.parse(ocr_text)

CLI Usage:
    invoice-extractor parse scan.txt --json-report report.json
    invoice-extractor check-config my_patterns.yaml
"""

__version__ = '1.0.0'

# Main pipeline
from .pipeline import (
    InvoiceParser,
    ParserSettings,
    get_default_parser,
    parse_invoice_text,
)

# Results
from .models import (
    ParsedInvoiceData,
    ExtractedAmount,
)

# Errors
from .errors import (
    InvoiceExtractorError,
    PatternConfigError,
)

# Parser components
from .parser import (
    PatternConfig,
    PatternLoader,
    TextNormalizer,
    AmountNormalizer,
    CurrencyNormalizer,
    ValueExtractor,
    DateExtractor,
    AmountExtractor,
    CurrencyDetector,
    InvoiceRecordValidator,
)

__all__ = [
    # Version
    '__version__',

    # Main pipeline
    'InvoiceParser',
    'ParserSettings',
    'get_default_parser',
    'parse_invoice_text',

    # Results
    'ParsedInvoiceData',
    'ExtractedAmount',

    # Errors
    'InvoiceExtractorError',
    'PatternConfigError',

    # Parser components
    'PatternConfig',
    'PatternLoader',
    'TextNormalizer',
    'AmountNormalizer',
    'CurrencyNormalizer',
    'ValueExtractor',
    'DateExtractor',
    'AmountExtractor',
    'CurrencyDetector',
    'InvoiceRecordValidator',
]
