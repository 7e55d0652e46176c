"""
Charter SDK — Data Models
"""

from __future__ import annotations

from pydantic import BaseModel


class DocumentResult(BaseModel):
    """One document entry from a gateway report."""
    name: str
    passed: bool
    loaded: bool = True
    version: str | None = None
    findings: list[dict] = []

    def codes(self) -> list[str]:
        return [f.get("code", "") for f in self.findings]


class ValidationResult(BaseModel):
    """Result of a POST /validate or POST /history call."""
    passed: bool
    status_code: int
    documents: list[DocumentResult] = []
    error: str | None = None
    raw: dict               # full response body
