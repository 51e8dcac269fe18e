"""
Normalizers Module

Turns messy OCR fragments into values the extractors can work with.

What normalization does:
- Raw OCR text → single-spaced lines without blank-line runs
- "1.234,56" → Decimal('1234.56')
- "₺", "TL", "try" → "TRY"

Amounts follow the Turkish convention used on e-archive invoices:
'.' groups thousands and ',' marks decimals. The conversion is exact
(Decimal) because amounts end up in bookkeeping.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from loguru import logger


class TextNormalizer:
    """Normalizes raw OCR text before pattern matching."""

    @staticmethod
    def normalize(text: Optional[str]) -> str:
        """
        Normalize whitespace in text.

        - Normalize line endings
        - Collapse runs of spaces and tabs (but preserve newlines)
        - Remove space at start/end of lines
        - Collapse blank-line runs to a single newline
        - Strip leading/trailing whitespace

        Idempotent: normalizing twice gives the same result.
        """
        if not text:
            return ""

        text = text.replace('\r\n', '\n').replace('\r', '\n')
        text = re.sub(r'[^\S\n]+', ' ', text)
        text = '\n'.join(line.strip() for line in text.split('\n'))
        text = re.sub(r'\n{2,}', '\n', text)

        return text.strip()


class AmountNormalizer:
    """Converts locale formatted amount literals to Decimal."""

    @staticmethod
    def canonicalize(raw: str) -> str:
        """'1.234,56' → '1234.56'. Dots are thousands separators, comma is decimal."""
        return raw.strip().replace('.', '').replace(',', '.')

    def normalize(self, raw: Optional[str]) -> Optional[Decimal]:
        """
        Parse an amount literal.

        Returns:
            Exact Decimal value, or None when the literal is not a finite number
        """
        if not raw:
            return None

        canonical = self.canonicalize(raw)
        try:
            value = Decimal(canonical)
        except InvalidOperation:
            logger.debug(f"Could not parse amount: {raw!r}")
            return None

        if not value.is_finite():
            return None

        return value


class CurrencyNormalizer:
    """Maps currency symbols and codes found in text to ISO 4217 codes."""

    SYMBOL_TO_CODE = {
        'tl': 'TRY',
        '₺': 'TRY',
        'try': 'TRY',
        'usd': 'USD',
        '$': 'USD',
        'eur': 'EUR',
        '€': 'EUR',
        'gbp': 'GBP',
        '£': 'GBP',
        'chf': 'CHF',
    }

    def to_code(self, token: Optional[str]) -> Optional[str]:
        """Return the ISO code for a symbol/code token, or None if unknown."""
        if not token:
            return None
        return self.SYMBOL_TO_CODE.get(token.strip().lower())
