"""
Structure Validator

Checks a document's section tree for the required governance layout:

  - a Core Principles section holding numbered principles,
  - a Rules list and a Rationale paragraph in every principle,
  - a Governance section with an amendment procedure and a versioning policy.

Validation is best-effort: every check runs and all findings are returned.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from charter.config import DEFAULTS, ValidatorConfig
from charter.findings import DOCUMENT_PATH, Finding, FindingCode, error, warning
from charter.sections import Section

_PRINCIPLE_RE = re.compile(
    r"^(?:[Pp]rinciple\s+)?(?P<ordinal>[IVXLCDM]+|\d+)\s*[.:)\-–—]\s*(?P<title>\S.*)$"
)
_ROMAN_RE = re.compile(r"^M{0,3}(CM|CD|D?C{0,3})(XC|XL|L?X{0,3})(IX|IV|V?I{0,3})$")
_ROMAN_VALUES = {"I": 1, "V": 5, "X": 10, "L": 50, "C": 100, "D": 500, "M": 1000}

_BULLET_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+(?P<text>\S.*)$")
_LABEL_RE = re.compile(
    r"^(?:[-*+]\s+)?[*_]{0,2}(?P<label>rules|rationale)"
    r"(?:\s*[*_]{0,2}\s*:|\s*:\s*[*_]{0,2})\s*(?P<rest>.*)$",
    re.IGNORECASE,
)
_BARE_LABEL_RE = re.compile(r"^[*_]{0,2}(?P<label>rules|rationale)[*_]{0,2}$", re.IGNORECASE)
_AMENDMENT_RE = re.compile(r"\bamend(?:ment|ments|ed|ing|s)?\b", re.IGNORECASE)
_VERSIONING_LABEL_RE = re.compile(
    r"^(?:[-*+]\s+)?[*_]{0,2}(?:semantic\s+)?versioning(?:\s+policy)?\s*[*_]{0,2}\s*(?::|$)",
    re.IGNORECASE,
)
_PLACEHOLDER_RE = re.compile(r"\[(?P<token>[A-Z][A-Z0-9_]{2,})\](?![(\[:])")
_CODE_SPAN_RE = re.compile(r"`[^`]*`")


# ---------------------------------------------------------------------------
# Domain types
# ---------------------------------------------------------------------------

@dataclass
class Principle:
    ordinal: str                  # as written: "II" or "2"
    number: int
    title: str
    rules: list[str] = field(default_factory=list)
    rationale: str = ""
    path: str = ""
    line: int = 0

    @property
    def missing_parts(self) -> list[str]:
        missing: list[str] = []
        if not self.rules:
            missing.append("rules")
        if not self.rationale:
            missing.append("rationale")
        return missing


# ---------------------------------------------------------------------------
# Principle extraction
# ---------------------------------------------------------------------------

def roman_to_int(value: str) -> Optional[int]:
    """Strict roman numeral conversion; None for malformed numerals."""
    if not value or not _ROMAN_RE.match(value):
        return None
    total = 0
    for current, following in zip(value, value[1:] + " "):
        amount = _ROMAN_VALUES[current]
        if following != " " and _ROMAN_VALUES[following] > amount:
            total -= amount
        else:
            total += amount
    return total


def parse_principle_heading(title: str) -> Optional[tuple[str, int, str]]:
    """Return (ordinal, number, title) for "II. Test-First" style headings."""
    cleaned = title.replace("**", "").replace("__", "").strip()
    match = _PRINCIPLE_RE.match(cleaned)
    if not match:
        return None
    ordinal = match.group("ordinal")
    number = int(ordinal) if ordinal.isdigit() else roman_to_int(ordinal)
    if not number:
        return None
    return ordinal, number, match.group("title").strip()


def _match_label(line: str) -> Optional[tuple[str, str]]:
    match = _LABEL_RE.match(line) or _BARE_LABEL_RE.match(line)
    if not match:
        return None
    rest = match.groupdict().get("rest") or ""
    return match.group("label").lower(), rest.lstrip("*_ ").strip()


def _bullets(section: Section) -> list[str]:
    items: list[str] = []
    for _, text in section.prose_lines():
        bullet = _BULLET_RE.match(text)
        if bullet:
            items.append(bullet.group("text").strip())
    return items


def extract_principle(section: Section) -> Optional[Principle]:
    """Build a Principle from a numbered section, or None if it is not one."""
    heading = parse_principle_heading(section.title)
    if heading is None:
        return None
    ordinal, number, title = heading

    rules: list[str] = []
    rationale_parts: list[str] = []
    region: Optional[str] = None        # None = before any label

    for _, text in section.prose_lines():
        stripped = text.strip()
        label = _match_label(stripped)
        if label:
            region, rest = label
            if rest:
                if region == "rationale":
                    rationale_parts.append(rest)
                else:
                    bullet = _BULLET_RE.match(rest)
                    rules.append(bullet.group("text") if bullet else rest)
            continue

        if region == "rationale":
            if stripped:
                rationale_parts.append(stripped)
            continue

        bullet = _BULLET_RE.match(text)
        if bullet:
            rules.append(bullet.group("text").strip())

    for child in section.children:
        if child.name == "rules":
            rules.extend(_bullets(child))
        elif child.name == "rationale":
            body = child.text()
            if body:
                rationale_parts.append(body)

    return Principle(
        ordinal=ordinal,
        number=number,
        title=title,
        rules=rules,
        rationale=" ".join(rationale_parts).strip(),
        path=section.path(),
        line=section.line,
    )


def collect_principles(core: Section) -> list[Principle]:
    principles: list[Principle] = []
    for child in core.children:
        principle = extract_principle(child)
        if principle is not None:
            principles.append(principle)
    return principles


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def _is_within(section: Section, ancestor: Section) -> bool:
    node = section.parent
    while node is not None:
        if node is ancestor:
            return True
        node = node.parent
    return False


def _first_match(candidates: list[Section]) -> Optional[Section]:
    """First candidate whose title is not principle-numbered, else the first one."""
    for section in candidates:
        if parse_principle_heading(section.title) is None:
            return section
    return candidates[0] if candidates else None


def find_core_section(root: Section, config: ValidatorConfig = DEFAULTS) -> Optional[Section]:
    return _first_match([
        s for s in list(root.walk())[1:] if config.is_core_title(s.name)
    ])


def find_governance_section(root: Section, config: ValidatorConfig = DEFAULTS) -> Optional[Section]:
    """The Governance section, ignoring principles that happen to be titled Governance."""
    core = find_core_section(root, config)
    return _first_match([
        s for s in list(root.walk())[1:]
        if s.name == config.governance_title and (core is None or not _is_within(s, core))
    ])


def check_principles(core: Optional[Section]) -> list[Finding]:
    findings: list[Finding] = []
    if core is None:
        findings.append(error(
            FindingCode.MISSING_PRINCIPLES,
            "No 'Core Principles' section found",
        ))
        return findings

    principles = collect_principles(core)
    if not principles:
        findings.append(error(
            FindingCode.MISSING_PRINCIPLES,
            f"'{core.title}' contains no numbered principles",
            core.path(),
            core.line,
        ))
        return findings

    for principle in principles:
        for part in principle.missing_parts:
            findings.append(error(
                FindingCode.INCOMPLETE_PRINCIPLE,
                f"Principle {principle.ordinal} ({principle.title}) has no {part}",
                principle.path,
                principle.line,
            ))

    numbers = [p.number for p in principles]
    expected = list(range(1, len(principles) + 1))
    if numbers != expected:
        findings.append(warning(
            FindingCode.PRINCIPLE_ORDER,
            "Principles are not numbered consecutively from 1: "
            + ", ".join(p.ordinal for p in principles),
            core.path(),
            core.line,
        ))

    return findings


def check_governance(governance: Optional[Section], config: ValidatorConfig = DEFAULTS) -> list[Finding]:
    findings: list[Finding] = []
    if governance is None:
        findings.append(error(
            FindingCode.MISSING_GOVERNANCE,
            "No 'Governance' section found",
        ))
        return findings

    subsections = list(governance.walk())[1:]
    prose = [text for s in governance.walk() for _, text in s.prose_lines()]

    has_amendment = (
        any(any(k in s.name for k in config.amendment_keywords) for s in subsections)
        or any(_AMENDMENT_RE.search(text) for text in prose)
    )
    has_versioning = (
        any(any(k in s.name for k in config.versioning_keywords) for s in subsections)
        or any(_VERSIONING_LABEL_RE.match(text.strip()) for text in prose)
    )

    if not has_amendment:
        findings.append(error(
            FindingCode.MISSING_GOVERNANCE,
            "Governance section has no amendment procedure",
            governance.path(),
            governance.line,
        ))
    if not has_versioning:
        findings.append(error(
            FindingCode.MISSING_GOVERNANCE,
            "Governance section has no versioning policy",
            governance.path(),
            governance.line,
        ))
    return findings


def find_placeholders(root: Section) -> list[Finding]:
    """One warning per distinct unresolved ``[ALL_CAPS]`` template token."""
    hits: list[tuple[int, str, str]] = []
    for section in root.walk():
        path = section.path() or DOCUMENT_PATH
        candidates = list(section.prose_lines())
        if section.level:
            candidates.insert(0, (section.line, section.title))
        for line, text in candidates:
            for match in _PLACEHOLDER_RE.finditer(_CODE_SPAN_RE.sub("", text)):
                hits.append((line, match.group("token"), path))

    findings: list[Finding] = []
    seen: set[str] = set()
    for line, token, path in sorted(hits, key=lambda h: h[0]):
        if token in seen:
            continue
        seen.add(token)
        findings.append(warning(
            FindingCode.UNRESOLVED_PLACEHOLDER,
            f"Unresolved template placeholder [{token}]",
            path,
            line,
        ))
    return findings


def validate_structure(root: Section, config: ValidatorConfig = DEFAULTS) -> list[Finding]:
    """Run every structural check and return findings in check order."""
    core = find_core_section(root, config)
    governance = find_governance_section(root, config)

    findings: list[Finding] = []
    findings.extend(check_principles(core))
    findings.extend(check_governance(governance, config))

    if core is not None and governance is not None and governance.line < core.line:
        findings.append(warning(
            FindingCode.SECTION_ORDER,
            f"'{governance.title}' appears before '{core.title}'",
            governance.path(),
            governance.line,
        ))

    if config.check_placeholders:
        findings.extend(find_placeholders(root))

    return findings
