"""
Validators Module

Review checks for parsed invoice records.

The parser never fails on bad input; it returns whatever it found. These
checks turn a parsed record into a list of human-readable warnings so a
correction screen can point the user at the fields worth a second look.
They do not change the record and do not affect ParsedInvoiceData.is_valid.

Checks:
1. Presence (invoice number, total, issuer)
2. Business rules (total positive, tax not negative)
3. Cross-field (tax smaller than total)
4. Format (e-archive invoice numbers are usually 16 characters)
"""

from dataclasses import dataclass

from loguru import logger

from ..models import ParsedInvoiceData


@dataclass
class InvoiceRecordValidator:
    """
    Produces review warnings for a ParsedInvoiceData.

    Usage:
        validator = InvoiceRecordValidator()
        for warning in validator.review(parsed):
            print(warning)
    """
    e_archive_min_length: int = 10
    e_archive_max_length: int = 20

    def missing_fields(self, data: ParsedInvoiceData) -> list[str]:
        """Names of fields a complete invoice record should have."""
        missing = []
        if not data.invoice_number:
            missing.append('invoice_number')
        if data.total_amount is None:
            missing.append('total_amount')
        if not data.issuer_name:
            missing.append('issuer_name')
        if data.issue_date is None:
            missing.append('issue_date')
        return missing

    def review(self, data: ParsedInvoiceData) -> list[str]:
        """
        Perform presence, business rule and cross-field checks.

        Returns:
            List of warning messages (empty when nothing looks wrong)
        """
        warnings = [f"Missing field: {name}" for name in self.missing_fields(data)]

        total = data.total_amount
        tax = data.tax_amount

        if total is not None and total <= 0:
            warnings.append(f"Total amount is not positive: {total}")

        if tax is not None and tax < 0:
            warnings.append(f"Tax amount is negative: {tax}")

        if total is not None and tax is not None and tax >= total:
            warnings.append(f"Tax amount {tax} is not smaller than total {total}")

        number = data.invoice_number
        if number and not self.e_archive_min_length <= len(number) <= self.e_archive_max_length:
            warnings.append(
                f"Invoice number '{number}' has unusual length {len(number)} "
                f"(expected {self.e_archive_min_length}-{self.e_archive_max_length})"
            )

        if warnings:
            logger.debug(f"Record review produced {len(warnings)} warning(s)")

        return warnings
