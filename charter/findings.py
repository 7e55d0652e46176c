"""
Validation findings.

A Finding is a single result emitted by the structure validator or the
version rule checker. Findings are additive; nothing in the pipeline removes
or rewrites one once emitted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from charter.errors import CharterError

# ---------------------------------------------------------------------------
# Domain types
# ---------------------------------------------------------------------------

class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class FindingCode(str, Enum):
    NOT_FOUND = "NotFound"
    READ_ERROR = "ReadError"
    MALFORMED_HEADER = "MalformedHeader"
    INVALID_DATE = "InvalidDate"
    INVALID_VERSION = "InvalidVersion"
    INCOMPLETE_PRINCIPLE = "IncompletePrinciple"
    MISSING_GOVERNANCE = "MissingGovernance"
    VERSION_MISMATCH = "VersionMismatch"
    MISSING_PRINCIPLES = "MissingPrinciples"
    PRINCIPLE_ORDER = "PrincipleOrder"
    SECTION_ORDER = "SectionOrder"
    UNRESOLVED_PLACEHOLDER = "UnresolvedPlaceholder"
    NON_STANDARD_BUMP = "NonStandardBump"
    DATE_ORDER = "DateOrder"
    FOOTER_MISMATCH = "FooterMismatch"


DOCUMENT_PATH = "(document)"


@dataclass
class Finding:
    severity: Severity
    code: FindingCode
    message: str
    path: str = DOCUMENT_PATH      # e.g. "Core Principles > II. Test-First"
    line: Optional[int] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code.value,
            "message": self.message,
            "path": self.path,
            "line": self.line,
        }

    def format(self) -> str:
        where = self.path if self.line is None else f"{self.path} (line {self.line})"
        return f"[{self.severity.value.upper()}] {self.code.value}: {self.message} @ {where}"


def error(code: FindingCode, message: str, path: str = DOCUMENT_PATH,
          line: Optional[int] = None) -> Finding:
    return Finding(Severity.ERROR, code, message, path, line)


def warning(code: FindingCode, message: str, path: str = DOCUMENT_PATH,
            line: Optional[int] = None) -> Finding:
    return Finding(Severity.WARNING, code, message, path, line)


def from_exception(exc: CharterError, path: str = DOCUMENT_PATH) -> Finding:
    """Convert a raised parser/loader error into an error-severity finding."""
    return error(FindingCode(exc.code), exc.message, path)
