"""
Pattern Configuration Module

Extraction behaviour is driven by data, not code. Each field the parser
knows about has an ordered list of regular expressions in patterns.yaml:

    invoiceNumber:
      - 'fatura\\s*no\\s*[:：]?\\s*([A-Z0-9\\-/]+)'   # specific anchors first
      - '\\b([A-Z0-9]{3}20\\d{11})\\b'                 # broad fallbacks last

Supporting a new invoice layout means adding a pattern, not a branch.

The file must contain exactly six lists: invoiceNumber, date, totalAmount,
taxAmount, issuerName and currency. Value patterns need at least one
capture group; date patterns need exactly three (day, month, year). Any
problem with the file is a PatternConfigError, because a parser without
working patterns would silently extract nothing.
"""

import re
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import PatternConfigError


# Flags shared by every configured pattern. OCR output has unreliable casing.
PATTERN_FLAGS = re.IGNORECASE | re.MULTILINE

DEFAULT_PATTERNS_PATH = Path(__file__).resolve().parent.parent / 'config' / 'patterns.yaml'


def _compile(pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern, PATTERN_FLAGS)
    except (re.error, OverflowError, RecursionError) as e:
        raise ValueError(f"invalid regex {pattern!r}: {e}") from e


class PatternConfig(BaseModel):
    """
    Validated pattern groups, one ordered list per extracted field.

    Earlier patterns are more specific and win over later ones for text
    fields; amount fields pool all matches of their group.
    """
    model_config = ConfigDict(extra='forbid', frozen=True, populate_by_name=True)

    invoice_number: list[str] = Field(alias='invoiceNumber')
    date: list[str] = Field(alias='date')
    total_amount: list[str] = Field(alias='totalAmount')
    tax_amount: list[str] = Field(alias='taxAmount')
    issuer_name: list[str] = Field(alias='issuerName')
    currency: list[str] = Field(alias='currency')

    @field_validator('invoice_number', 'total_amount', 'tax_amount', 'issuer_name', 'currency')
    @classmethod
    def validate_value_patterns(cls, v):
        """Value patterns must compile and capture the value."""
        for pattern in v:
            if _compile(pattern).groups < 1:
                raise ValueError(f"pattern {pattern!r} has no capture group")
        return v

    @field_validator('date')
    @classmethod
    def validate_date_patterns(cls, v):
        """Date patterns capture day, month and year in that order."""
        for pattern in v:
            groups = _compile(pattern).groups
            if groups != 3:
                raise ValueError(
                    f"date pattern {pattern!r} needs 3 capture groups (day, month, year), "
                    f"found {groups}"
                )
        return v

    @classmethod
    def from_dict(cls, data: Any, source: Optional[str] = None) -> 'PatternConfig':
        """
        Validate an already parsed configuration object.

        Args:
            data: Mapping with the six pattern lists
            source: Where the data came from, used in error messages

        Raises:
            PatternConfigError: If the data does not have the expected shape
        """
        if not isinstance(data, dict):
            raise PatternConfigError(
                f"expected a mapping of pattern lists, got {type(data).__name__}",
                source=source,
            )

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            problems = '; '.join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            )
            logger.error(f"Invalid pattern configuration: {problems}")
            raise PatternConfigError(problems, source=source) from e

    def to_dict(self) -> dict[str, list[str]]:
        """Serialize back to the on-disk shape (camelCase keys)."""
        return self.model_dump(by_alias=True)


class PatternLoader:
    """
    Loads pattern configuration from YAML or JSON files.

    JSON is a subset of YAML, so both go through yaml.safe_load.
    """

    @staticmethod
    def load(config_path: Optional[Union[str, Path]] = None) -> PatternConfig:
        """
        Load and validate a pattern file.

        Args:
            config_path: Path to patterns file (default: bundled patterns.yaml)

        Returns:
            Validated PatternConfig

        Raises:
            PatternConfigError: If the file is missing, unreadable or malformed
        """
        path = Path(config_path) if config_path else DEFAULT_PATTERNS_PATH
        logger.info(f"Loading patterns from: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            logger.error(f"Failed to load patterns: {e}")
            raise PatternConfigError(f"cannot read pattern file: {e}", source=str(path)) from e

        config = PatternConfig.from_dict(data, source=str(path))
        logger.info(
            f"Loaded {sum(len(v) for v in config.to_dict().values())} patterns "
            f"for {len(PatternConfig.model_fields)} fields"
        )
        return config
