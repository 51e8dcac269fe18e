"""
Parser Package

This package turns normalized OCR text into typed invoice fields.
It includes:
- Pattern configuration loading and validation
- Text, amount and currency normalization
- Field extractors (value, date, amount, currency)
- Review checks for parsed records

Usage:
    from invoice_extractor.parser import PatternLoader, AmountExtractor, TextNormalizer

    config = PatternLoader.load(Path("config/patterns.yaml"))
    text = TextNormalizer.normalize(raw_ocr_text)
    total, raw_total = AmountExtractor(config.total_amount).extract(text)
"""

from .patterns import (
    PatternConfig,
    PatternLoader,
    DEFAULT_PATTERNS_PATH,
)

from .normalizers import (
    TextNormalizer,
    AmountNormalizer,
    CurrencyNormalizer,
)

from .field_mapper import (
    ValueExtractor,
    DateExtractor,
    AmountExtractor,
    CurrencyDetector,
)

from .validators import InvoiceRecordValidator

__all__ = [
    # Patterns
    'PatternConfig',
    'PatternLoader',
    'DEFAULT_PATTERNS_PATH',

    # Normalizers
    'TextNormalizer',
    'AmountNormalizer',
    'CurrencyNormalizer',

    # Field Mapper
    'ValueExtractor',
    'DateExtractor',
    'AmountExtractor',
    'CurrencyDetector',

    # Validators
    'InvoiceRecordValidator',
]
