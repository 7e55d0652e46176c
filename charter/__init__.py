"""
Charter — governance-document validator.

Checks constitution-style Markdown documents for a well-formed Sync Impact
Report header, complete numbered principles, a governance section, and
consistent semantic-version bumps.
"""

from charter.errors import (
    CharterError,
    InvalidDate,
    InvalidVersion,
    MalformedHeader,
    NotFound,
    ReadError,
)
from charter.findings import Finding, FindingCode, Severity
from charter.pipeline import DocumentValidator, validate_history, validate_paths
from charter.report import DocumentReport, ValidationReport

__version__ = "1.0.0"

__all__ = [
    "CharterError",
    "InvalidDate",
    "InvalidVersion",
    "MalformedHeader",
    "NotFound",
    "ReadError",
    "Finding",
    "FindingCode",
    "Severity",
    "DocumentValidator",
    "validate_history",
    "validate_paths",
    "DocumentReport",
    "ValidationReport",
]
