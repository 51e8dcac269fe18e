"""
Field Mapper Module

Field extractors that map normalized OCR text to typed values. Each
extractor is generic over an ordered list of patterns and knows nothing
about the wording of a particular field; the wording lives in the
pattern configuration.

Selection strategies differ on purpose:
- Text fields (invoice number, issuer): first pattern that captures wins.
  Pattern order encodes preference, most specific first.
- Dates: first match, across patterns in order and then in text order,
  that is a real calendar date with a plausible year.
- Amounts: all matches of all patterns are pooled and the largest value
  wins. The grand total is normally the largest labelled amount on an
  invoice, so this finds it even when the label is garbled.

Known limitation: a larger currency-shaped number that is not the total
(an order reference formatted like money) beats the real total.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Iterator, Optional

from loguru import logger

from .normalizers import AmountNormalizer, CurrencyNormalizer
from .patterns import PATTERN_FLAGS
from ..models import ExtractedAmount


def compile_patterns(patterns: Iterable[str]) -> tuple[re.Pattern, ...]:
    """Compile configured patterns with the shared flags, keeping order."""
    return tuple(re.compile(p, PATTERN_FLAGS) for p in patterns)


class ValueExtractor:
    """
    Extracts a free-text value: the first non-empty capture wins.

    Usage:
        extractor = ValueExtractor(config.issuer_name)
        issuer = extractor.extract(text)
    """

    def __init__(self, patterns: Iterable[str]):
        self.patterns = compile_patterns(patterns)

    def candidates(self, text: str) -> Iterator[str]:
        """
        Yield non-empty captures in preference order.

        One candidate per pattern (its first match). Callers that need to
        filter values, like the invoice number length check, take the
        first candidate that passes.
        """
        for regex in self.patterns:
            match = regex.search(text)
            if not match:
                continue

            value = (match.group(1) or '').strip()
            if value:
                yield value

    def extract(self, text: str) -> Optional[str]:
        """Return the first non-empty capture, or None."""
        return next(self.candidates(text), None)


class DateExtractor:
    """
    Extracts a date from (day, month, year) capture groups.

    Patterns decide the separators and must capture the parts in day,
    month, year order; groups are never reordered here.
    """

    DATE_FORMAT = '%d.%m.%Y'

    def __init__(self, patterns: Iterable[str], min_year: int = 2000, max_year: int = 2100):
        self.patterns = compile_patterns(patterns)
        self.min_year = min_year
        self.max_year = max_year

    def extract(self, text: str) -> Optional[date]:
        """Return the first valid, plausible date, or None."""
        for regex in self.patterns:
            for match in regex.finditer(text):
                day, month, year = match.group(1, 2, 3)
                if not (day and month and year):
                    continue

                try:
                    parsed = datetime.strptime(f"{day}.{month}.{year}", self.DATE_FORMAT).date()
                except ValueError:
                    logger.debug(f"Rejected date candidate: {match.group(0)!r}")
                    continue

                # OCR misreads like 1023 or 2203 parse fine but are not invoice dates
                if not self.min_year <= parsed.year <= self.max_year:
                    logger.debug(f"Rejected implausible year: {parsed.year}")
                    continue

                return parsed

        return None


class AmountExtractor:
    """
    Extracts the largest amount matched by any pattern.

    Usage:
        extractor = AmountExtractor(config.total_amount)
        value, raw_text = extractor.extract(text)
    """

    def __init__(self, patterns: Iterable[str], normalizer: Optional[AmountNormalizer] = None):
        self.patterns = compile_patterns(patterns)
        self.normalizer = normalizer or AmountNormalizer()

    def extract(self, text: str) -> ExtractedAmount:
        """
        Pool every match of every pattern and keep the maximum.

        Returns:
            ExtractedAmount with the best positive value and its raw text,
            or an empty ExtractedAmount when nothing positive was found
        """
        best_value = Decimal(0)
        best_raw = None

        for regex in self.patterns:
            for match in regex.finditer(text):
                raw = match.group(1)
                value = self.normalizer.normalize(raw)
                if value is not None and value > best_value:
                    best_value = value
                    best_raw = raw

        if best_raw is None:
            return ExtractedAmount()

        return ExtractedAmount(best_value, best_raw)


class CurrencyDetector:
    """
    Detects the document currency. Always returns a code.

    Captured tokens that are not a known symbol or code are skipped and
    the search continues; if nothing maps, the default currency is used.
    """

    def __init__(
        self,
        patterns: Iterable[str],
        default_currency: str = 'TRY',
        normalizer: Optional[CurrencyNormalizer] = None,
    ):
        self.patterns = compile_patterns(patterns)
        self.default_currency = default_currency
        self.normalizer = normalizer or CurrencyNormalizer()

    def detect(self, text: str) -> str:
        for regex in self.patterns:
            for match in regex.finditer(text):
                code = self.normalizer.to_code(match.group(1))
                if code:
                    return code

        return self.default_currency
