"""
Error kinds raised by the loader and parsers.

Each exception carries the finding code it maps to so the pipeline can turn
it into a report entry without a lookup table.
"""

from __future__ import annotations


class CharterError(Exception):
    code = "CharterError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(CharterError):
    code = "NotFound"

    def __init__(self, identifier: str):
        super().__init__(f"Document not found: {identifier}")
        self.identifier = identifier


class ReadError(CharterError):
    code = "ReadError"

    def __init__(self, identifier: str, reason: str):
        super().__init__(f"Cannot read document {identifier}: {reason}")
        self.identifier = identifier
        self.reason = reason


class MalformedHeader(CharterError):
    """Header block present but missing a required field or marker."""
    code = "MalformedHeader"

    def __init__(self, field: str, detail: str = ""):
        message = f"Sync Impact Report header is missing '{field}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.field = field


class InvalidDate(CharterError):
    code = "InvalidDate"

    def __init__(self, field: str, value: str):
        super().__init__(
            f"Invalid date for '{field}': '{value}' (expected YYYY-MM-DD)"
        )
        self.field = field
        self.value = value


class InvalidVersion(CharterError):
    code = "InvalidVersion"

    def __init__(self, value: str):
        super().__init__(
            f"Invalid semantic version '{value}' (expected MAJOR.MINOR.PATCH)"
        )
        self.value = value
