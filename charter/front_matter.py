"""
Front-Matter Parser

Extracts the Sync Impact Report header: an HTML comment whose first line is
the report marker, followed by ``Key: value`` lines.

    <!--
    Sync Impact Report
    Version change: 1.0.0 → 1.1.0 (MINOR: added Observability principle)
    Ratified: 2025-01-10
    Last amended: 2025-06-02
    -->

The header is optional. The version footer line

    **Version**: 1.1.0 | **Ratified**: 2025-01-10 | **Last Amended**: 2025-06-02

is parsed separately by parse_footer().
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from charter.config import DEFAULTS, ValidatorConfig
from charter.errors import InvalidDate, MalformedHeader
from charter.sections import CODE, TEXT, classify_lines, mask_code_spans
from charter.versioning import ChangeType

HEADER_START = "<!--"
HEADER_END = "-->"

# "Key: value", with optional bullet and emphasis around the key
_FIELD_RE = re.compile(
    r"^(?:[-*+]\s+)?[*_]{0,2}(?P<key>[A-Za-z][A-Za-z _-]*?)[*_]{0,2}\s*:\s*[*_]{0,2}\s*(?P<value>.*?)\s*$"
)
_VERSION_CHANGE_RE = re.compile(r"^(?P<old>\S+)\s*(?:→|->|=>)\s*(?P<new>\S+)(?P<rest>.*)$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TRAILING_NOTE_RE = re.compile(r"\s*\([^)]*\)\s*$")
_FOOTER_RE = re.compile(r"[*_]{2}\s*Version\s*[*_]{0,2}\s*:", re.IGNORECASE)

VERSION_KEYS = {"version", "version change", "current version", "new version"}
CHANGE_TYPE_KEYS = {"change type", "bump", "bump type", "version bump", "bump rationale"}
RATIFIED_KEYS = {"ratified", "ratification date", "ratified date", "ratified on"}
AMENDED_KEYS = {"last amended", "last amended date", "amended", "last amendment", "last amended on"}


# ---------------------------------------------------------------------------
# Domain types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FrontMatter:
    version: Optional[str] = None
    previous_version: Optional[str] = None
    change_type: Optional[ChangeType] = None
    ratified: Optional[date] = None
    last_amended: Optional[date] = None
    present: bool = False

    @classmethod
    def empty(cls) -> "FrontMatter":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.present

    def fields(self) -> dict:
        """The four round-trippable fields."""
        return {
            "version": self.version,
            "change_type": self.change_type.value if self.change_type else None,
            "ratified": self.ratified.isoformat() if self.ratified else None,
            "last_amended": self.last_amended.isoformat() if self.last_amended else None,
        }

    def to_dict(self) -> dict:
        return {
            **self.fields(),
            "previous_version": self.previous_version,
            "present": self.present,
        }


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _normalize_key(key: str) -> str:
    return " ".join(key.replace("_", " ").replace("-", " ").lower().split())


def parse_date(field_name: str, value: str, date_format: str = DEFAULTS.date_format) -> date:
    """Strict date parse. Raises InvalidDate."""
    candidate = _TRAILING_NOTE_RE.sub("", value).strip().strip("*_").strip()
    if date_format == "%Y-%m-%d" and not _DATE_RE.match(candidate):
        raise InvalidDate(field_name, value)
    try:
        return datetime.strptime(candidate, date_format).date()
    except ValueError:
        raise InvalidDate(field_name, value) from None


def _parse_fields(lines: list[str], config: ValidatorConfig) -> dict:
    """Read known header keys from *lines*; first occurrence wins."""
    found: dict = {}

    for line in lines:
        match = _FIELD_RE.match(line.strip())
        if not match:
            continue
        key = _normalize_key(match.group("key"))
        value = match.group("value").strip()
        if not value:
            continue

        if key in VERSION_KEYS and "version" not in found:
            change = _VERSION_CHANGE_RE.match(value)
            if change:
                found["previous_version"] = change.group("old")
                found["version"] = change.group("new").strip("*_")
                declared = ChangeType.find(change.group("rest"))
                if declared is not None:
                    found.setdefault("change_type", declared)
            else:
                found["version"] = value.split()[0].strip("*_")
                declared = ChangeType.find(value)
                if declared is not None:
                    found.setdefault("change_type", declared)

        elif key in CHANGE_TYPE_KEYS and "change_type_line" not in found:
            found["change_type_line"] = True
            declared = ChangeType.find(value)
            if declared is not None:
                # An explicit change-type line overrides an inline keyword
                found["change_type"] = declared

        elif key in RATIFIED_KEYS and "ratified" not in found:
            found["ratified"] = parse_date("ratified", value, config.date_format)

        elif key in AMENDED_KEYS and "last_amended" not in found:
            found["last_amended"] = parse_date("last_amended", value, config.date_format)

    found.pop("change_type_line", None)
    return found


# ---------------------------------------------------------------------------
# Header block
# ---------------------------------------------------------------------------

def find_header_block(text: str, config: ValidatorConfig = DEFAULTS) -> Optional[list[str]]:
    """Return the header body lines (marker excluded), or None when absent.

    Comments inside fenced code blocks or inline code spans are examples,
    not headers. Raises MalformedHeader if the marker comment is never
    closed.
    """
    marker = config.header_marker.lower()
    raw_lines = text.splitlines()
    visible = []
    for (kind, _), raw in zip(classify_lines(raw_lines), raw_lines):
        if kind == CODE:
            visible.append("")
        elif kind == TEXT:
            visible.append(mask_code_spans(raw))
        else:
            visible.append(raw)
    text = "\n".join(visible)
    pos = 0
    while True:
        start = text.find(HEADER_START, pos)
        if start == -1:
            return None
        end = text.find(HEADER_END, start + len(HEADER_START))
        body = text[start + len(HEADER_START): end if end != -1 else len(text)]
        lines = body.splitlines()
        first = next((line.strip() for line in lines if line.strip()), "")
        is_header = first.strip("=#-* ").lower().startswith(marker)

        if end == -1:
            if is_header:
                raise MalformedHeader("end marker", f"no closing '{HEADER_END}'")
            return None
        if is_header:
            index = next(i for i, line in enumerate(lines) if line.strip())
            return lines[index + 1:]
        pos = end + len(HEADER_END)


def parse_front_matter(text: str, config: ValidatorConfig = DEFAULTS) -> FrontMatter:
    """Parse the Sync Impact Report header.

    Returns an empty record when the header is absent. Raises
    MalformedHeader when a required field is missing and InvalidDate when a
    date does not match the configured format.
    """
    lines = find_header_block(text, config)
    if lines is None:
        return FrontMatter.empty()

    found = _parse_fields(lines, config)
    for required in config.required_header_fields:
        if found.get(required) is None:
            raise MalformedHeader(required)

    return FrontMatter(present=True, **found)


def render_front_matter(front_matter: FrontMatter, config: ValidatorConfig = DEFAULTS) -> str:
    """Write a header block that parse_front_matter() reads back unchanged."""
    lines = [HEADER_START, config.header_marker]
    if front_matter.version:
        if front_matter.previous_version:
            lines.append(
                f"Version change: {front_matter.previous_version} → {front_matter.version}"
            )
        else:
            lines.append(f"Version: {front_matter.version}")
    if front_matter.change_type:
        lines.append(f"Change type: {front_matter.change_type.value}")
    if front_matter.ratified:
        lines.append(f"Ratified: {front_matter.ratified.strftime(config.date_format)}")
    if front_matter.last_amended:
        lines.append(f"Last amended: {front_matter.last_amended.strftime(config.date_format)}")
    lines.append(HEADER_END)
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Footer line
# ---------------------------------------------------------------------------

def parse_footer(text: str, config: ValidatorConfig = DEFAULTS) -> Optional[FrontMatter]:
    """Parse the last ``**Version**: … | **Ratified**: …`` line outside code."""
    prose = [line for kind, line in classify_lines(text.splitlines()) if kind == TEXT]
    for line in reversed(prose):
        if _FOOTER_RE.search(line):
            found = _parse_fields([part.strip() for part in line.split("|")], config)
            found.pop("previous_version", None)
            found.pop("change_type", None)
            return FrontMatter(present=True, **found)
    return None
