"""
Version Rule Checker

Semantic-version handling for governance documents. A document's version
must never decrease across its revision history, and a declared change type
(MAJOR / MINOR / PATCH) must match the numeric delta:

    MAJOR  breaking governance change   -> (major + 1, 0, 0)
    MINOR  principle or section added   -> (major, minor + 1, 0)
    PATCH  clarification / wording      -> (major, minor, patch + 1)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, Optional, TYPE_CHECKING

from charter.errors import InvalidVersion
from charter.findings import Finding, FindingCode, error, warning

if TYPE_CHECKING:
    from charter.front_matter import FrontMatter

HEADER_PATH = "(header)"

# ---------------------------------------------------------------------------
# Domain types
# ---------------------------------------------------------------------------

class ChangeType(str, Enum):
    MAJOR = "MAJOR"
    MINOR = "MINOR"
    PATCH = "PATCH"

    @classmethod
    def find(cls, text: str) -> Optional["ChangeType"]:
        """Return the first MAJOR/MINOR/PATCH keyword in *text*, if any."""
        match = _CHANGE_TYPE_RE.search(text)
        if match is None:
            return None
        return cls(match.group(1).upper())


_CHANGE_TYPE_RE = re.compile(r"\b(MAJOR|MINOR|PATCH)\b", re.IGNORECASE)
_SEMVER_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


@dataclass(frozen=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, value: str) -> "SemVer":
        """Parse ``MAJOR.MINOR.PATCH``. Raises InvalidVersion."""
        match = _SEMVER_RE.match(value.strip()) if value else None
        if match is None:
            raise InvalidVersion(value)
        return cls(*(int(part) for part in match.groups()))

    def bump(self, change_type: ChangeType) -> "SemVer":
        if change_type == ChangeType.MAJOR:
            return SemVer(self.major + 1, 0, 0)
        if change_type == ChangeType.MINOR:
            return SemVer(self.major, self.minor + 1, 0)
        return SemVer(self.major, self.minor, self.patch + 1)

    def classify_bump(self, newer: "SemVer") -> Optional[ChangeType]:
        """Return the single canonical bump that takes self to *newer*, if any."""
        for change_type in ChangeType:
            if self.bump(change_type) == newer:
                return change_type
        return None

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class VersionRecord:
    version: SemVer
    change_type: Optional[ChangeType] = None
    ratified: Optional[date] = None
    last_amended: Optional[date] = None
    source: str = ""

    @classmethod
    def from_front_matter(cls, front_matter: "FrontMatter", source: str = "") -> "VersionRecord":
        """Build a record from parsed header fields. Raises InvalidVersion."""
        if not front_matter.version:
            raise InvalidVersion("")
        return cls(
            version=SemVer.parse(front_matter.version),
            change_type=front_matter.change_type,
            ratified=front_matter.ratified,
            last_amended=front_matter.last_amended,
            source=source,
        )


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def check_record(record: VersionRecord, path: str = HEADER_PATH) -> list[Finding]:
    """Internal consistency of a single record."""
    findings: list[Finding] = []
    if record.ratified and record.last_amended and record.ratified > record.last_amended:
        findings.append(error(
            FindingCode.DATE_ORDER,
            f"Last amended {record.last_amended.isoformat()} is before "
            f"ratification {record.ratified.isoformat()}",
            path,
        ))
    return findings


def check_version(
    current: VersionRecord,
    prior: Optional[VersionRecord] = None,
    path: str = HEADER_PATH,
) -> list[Finding]:
    """Compare *current* against an optional *prior* record of the same document.

    Without a prior record only well-formedness applies, and a VersionRecord
    cannot exist with a malformed version, so the result is empty.
    """
    findings: list[Finding] = []
    if prior is None:
        return findings

    old, new = prior.version, current.version
    delta = f"{old} -> {new}"

    if new < old:
        findings.append(error(
            FindingCode.VERSION_MISMATCH,
            f"Version regressed: {delta}",
            path,
        ))
    elif current.change_type is not None:
        expected = old.bump(current.change_type)
        if new != expected:
            findings.append(error(
                FindingCode.VERSION_MISMATCH,
                f"Declared {current.change_type.value} change expects {expected}, "
                f"found {delta}",
                path,
            ))
    elif new != old and old.classify_bump(new) is None:
        findings.append(warning(
            FindingCode.NON_STANDARD_BUMP,
            f"{delta} is not a single MAJOR, MINOR or PATCH increment",
            path,
        ))

    if prior.last_amended and current.last_amended and prior.last_amended > current.last_amended:
        findings.append(error(
            FindingCode.DATE_ORDER,
            f"Amended {current.last_amended.isoformat()} precedes the prior "
            f"amendment {prior.last_amended.isoformat()}",
            path,
        ))

    return findings


def order_lineage(records: Iterable[VersionRecord]) -> list[VersionRecord]:
    """Order by last-amended date when every record has one, else keep input order."""
    records = list(records)
    if records and all(r.last_amended is not None for r in records):
        return sorted(records, key=lambda r: r.last_amended)
    return records


def check_history(records: Iterable[VersionRecord]) -> list[Finding]:
    """Check every record and each adjacent pair of a document lineage."""
    ordered = order_lineage(records)
    findings: list[Finding] = []

    for record in ordered:
        findings.extend(check_record(record, record.source or HEADER_PATH))

    for earlier, later in zip(ordered, ordered[1:]):
        findings.extend(check_version(later, earlier, later.source or HEADER_PATH))

    return findings
