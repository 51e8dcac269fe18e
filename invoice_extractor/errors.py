"""
Exceptions raised by the invoice extractor.

Only configuration problems are errors. A field that cannot be extracted
is reported as ``None`` on the parsed record, never as an exception.
"""

from typing import Optional


class InvoiceExtractorError(Exception):
    """Base class for all invoice extractor errors."""


class PatternConfigError(InvoiceExtractorError):
    """
    Pattern configuration is missing, unreadable or malformed.

    Raised while constructing a parser. A parser without patterns cannot
    extract anything, so callers must surface this instead of carrying on.
    """

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)
