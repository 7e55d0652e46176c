"""
Validation reports.

One DocumentReport per document; a ValidationReport collects them in input
order and decides the process exit code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from charter.findings import Finding, Severity

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_LOAD_ERROR = 2


@dataclass
class DocumentReport:
    name: str
    findings: list[Finding] = field(default_factory=list)
    loaded: bool = True
    version: Optional[str] = None

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == Severity.WARNING]

    @property
    def passed(self) -> bool:
        return self.loaded and not self.errors

    def codes(self) -> list[str]:
        return [f.code.value for f in self.findings]

    def summary(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        header = f"[{status}] {self.name}"
        if self.version:
            header += f" (v{self.version})"
        lines = [header]
        if not self.loaded:
            lines.append("  document could not be loaded")
        for finding in self.findings:
            lines.append(f"  {finding.format()}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "passed": self.passed,
            "loaded": self.loaded,
            "version": self.version,
            "findings": [f.to_dict() for f in self.findings],
        }


@dataclass
class ValidationReport:
    documents: list[DocumentReport] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(d.passed for d in self.documents)

    @property
    def has_load_errors(self) -> bool:
        return any(not d.loaded for d in self.documents)

    def exit_code(self, strict: bool = False) -> int:
        """0 all pass, 1 error findings (or warnings when strict), 2 load failure."""
        if self.has_load_errors:
            return EXIT_LOAD_ERROR
        if not self.passed:
            return EXIT_FINDINGS
        if strict and any(d.warnings for d in self.documents):
            return EXIT_FINDINGS
        return EXIT_OK

    def summary(self) -> str:
        blocks = [d.summary() for d in self.documents]
        failed = sum(1 for d in self.documents if not d.passed)
        total = len(self.documents)
        blocks.append(f"RESULTS: {total - failed}/{total} passed, {failed}/{total} failed")
        return "\n".join(blocks)

    def to_dict(self) -> dict:
        return {
            "passed": self.passed,
            "documents": [d.to_dict() for d in self.documents],
        }
