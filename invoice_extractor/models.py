"""
Result types produced by the invoice parser.

Every field of ParsedInvoiceData is optional: OCR text rarely contains
everything, and a missing field is an expected outcome rather than an
error. Amounts are kept as Decimal so that currency values never pick up
binary floating point drift.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, NamedTuple, Optional


class ExtractedAmount(NamedTuple):
    """Best amount found by the amount extractor and the text it came from."""
    value: Optional[Decimal] = None
    raw_text: Optional[str] = None


@dataclass(frozen=True)
class ParsedInvoiceData:
    """
    Structured fields extracted from one OCR text.

    Built fresh for every parse call and never modified afterwards.
    """
    invoice_number: Optional[str] = None
    issuer_name: Optional[str] = None
    issue_date: Optional[date] = None
    total_amount: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    currency_code: Optional[str] = None
    raw_total_text: Optional[str] = None    # Literal match behind total_amount
    raw_tax_text: Optional[str] = None      # Literal match behind tax_amount

    @property
    def is_valid(self) -> bool:
        """An invoice number and a total are the minimum usable record."""
        return bool(self.invoice_number) and self.total_amount is not None

    @property
    def amount_without_tax(self) -> Optional[Decimal]:
        """Net amount, when both the total and the tax were found."""
        if self.total_amount is None or self.tax_amount is None:
            return None
        return self.total_amount - self.tax_amount

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON friendly dictionary."""
        return {
            'invoice_number': self.invoice_number,
            'issuer_name': self.issuer_name,
            'issue_date': self.issue_date.isoformat() if self.issue_date else None,
            'total_amount': str(self.total_amount) if self.total_amount is not None else None,
            'tax_amount': str(self.tax_amount) if self.tax_amount is not None else None,
            'currency_code': self.currency_code,
            'raw_total_text': self.raw_total_text,
            'raw_tax_text': self.raw_tax_text,
            'is_valid': self.is_valid,
        }
