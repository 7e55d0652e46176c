"""
Structure Validator Test Suite
Tests principle extraction, IncompletePrinciple / MissingGovernance
reporting, ordering warnings and placeholder detection.

Usage:  python tests/test_structure.py   (or: pytest tests/)
"""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from charter.config import DEFAULTS
from charter.findings import FindingCode, Severity
from charter.sections import parse_sections
from charter.structure import (
    extract_principle,
    find_governance_section,
    parse_principle_heading,
    roman_to_int,
    validate_structure,
)

passed = 0
failed = 0


def check(label: str, condition: bool, detail: str = ""):
    global passed, failed
    tag = "PASS" if condition else "FAIL"
    if condition:
        passed += 1
    else:
        failed += 1
    print(f"  [{tag}] {label}")
    if detail:
        print(f"         {detail}")
    assert condition, label


PRINCIPLE_ONE = """### I. Library-First

- Every feature MUST start as a standalone library.
- Libraries MUST be independently testable.

**Rationale**: Small units are easier to reason about.
"""

PRINCIPLE_TWO = """### II. Test-First

- Tests MUST be written before implementation.

**Rationale:** Red-green-refactor keeps scope honest.
"""

GOVERNANCE = """## Governance

Amendments require a pull request approved by two maintainers.

### Versioning Policy

- MAJOR: incompatible principle changes.
"""


def make_document(principles: str = PRINCIPLE_ONE + "\n" + PRINCIPLE_TWO,
                  governance: str = GOVERNANCE) -> str:
    return f"# Constitution\n\n## Core Principles\n\n{principles}\n{governance}"


def codes(findings) -> list[str]:
    return [f.code.value for f in findings]


# ---------------------------------------------------------------------------
# Principle extraction
# ---------------------------------------------------------------------------

def test_roman_numerals():
    check("IV -> 4", roman_to_int("IV") == 4)
    check("XII -> 12", roman_to_int("XII") == 12)
    check("IIII rejected", roman_to_int("IIII") is None)
    check("empty rejected", roman_to_int("") is None)


def test_principle_headings():
    check("roman heading", parse_principle_heading("III. Simplicity") == ("III", 3, "Simplicity"))
    check("integer heading", parse_principle_heading("2. Observability") == ("2", 2, "Observability"))
    check("Principle prefix", parse_principle_heading("Principle IV: CLI") == ("IV", 4, "CLI"))
    check("bold heading", parse_principle_heading("**I. Spec-First**") == ("I", 1, "Spec-First"))
    check("plain title rejected", parse_principle_heading("Development Workflow") is None)


def test_extract_rules_and_rationale():
    root = parse_sections(PRINCIPLE_ONE)
    principle = extract_principle(root.children[0])
    check("two rules", len(principle.rules) == 2, f"got {principle.rules}")
    check("rationale text", principle.rationale == "Small units are easier to reason about.",
          f"got {principle.rationale!r}")
    check("nothing missing", principle.missing_parts == [])


def test_extract_from_subheadings():
    text = (
        "### 1. Observability\n\n"
        "#### Rules\n\n- Log structured events.\n- Expose health checks.\n\n"
        "#### Rationale\n\nOperators need to see inside the system.\n"
    )
    principle = extract_principle(parse_sections(text).children[0])
    check("rules from sub-heading", principle.rules == ["Log structured events.", "Expose health checks."],
          f"got {principle.rules}")
    check("rationale from sub-heading", principle.rationale.startswith("Operators"))


def test_rules_label_and_multiline_rationale():
    text = (
        "### I. Simplicity\n\nPrefer the obvious design.\n\n"
        "Rules:\n1. YAGNI applies.\n2. No speculative layers.\n\n"
        "Rationale:\nComplexity compounds.\nEvery layer costs reviews.\n"
    )
    principle = extract_principle(parse_sections(text).children[0])
    check("numbered rules after label", principle.rules == ["YAGNI applies.", "No speculative layers."],
          f"got {principle.rules}")
    check("multi-line rationale joined",
          principle.rationale == "Complexity compounds. Every layer costs reviews.",
          f"got {principle.rationale!r}")


def test_bullets_in_code_are_not_rules():
    text = "### I. Tooling\n\n```yaml\n- not: a rule\n```\n\n**Rationale**: Because.\n"
    principle = extract_principle(parse_sections(text).children[0])
    check("fenced bullets ignored", principle.rules == [], f"got {principle.rules}")
    check("missing rules reported", principle.missing_parts == ["rules"])


# ---------------------------------------------------------------------------
# Document-level checks
# ---------------------------------------------------------------------------

def test_complete_document_has_no_findings():
    findings = validate_structure(parse_sections(make_document()))
    check("no findings", findings == [], f"got {codes(findings)}")


def test_empty_rationale_is_one_incomplete_principle():
    broken = "### II. Test-First\n\n- Tests MUST be written first.\n\n**Rationale**:\n"
    findings = validate_structure(parse_sections(make_document(PRINCIPLE_ONE + "\n" + broken)))
    check("exactly one finding", len(findings) == 1, f"got {codes(findings)}")
    finding = findings[0]
    check("code is IncompletePrinciple", finding.code == FindingCode.INCOMPLETE_PRINCIPLE)
    check("severity is error", finding.severity == Severity.ERROR)
    check("message names the ordinal and part", "II" in finding.message and "rationale" in finding.message,
          finding.message)
    check("path points at the principle", finding.path.endswith("II. Test-First"), finding.path)


def test_missing_governance_is_single_finding():
    findings = validate_structure(parse_sections(make_document(governance="")))
    check("exactly one finding", len(findings) == 1, f"got {codes(findings)}")
    check("code is MissingGovernance", findings[0].code == FindingCode.MISSING_GOVERNANCE)


def test_governance_without_parts():
    findings = validate_structure(parse_sections(make_document(governance="## Governance\n\nBe nice.\n")))
    check("two MissingGovernance findings", codes(findings) == ["MissingGovernance", "MissingGovernance"],
          f"got {codes(findings)}")
    check("amendment part named", "amendment" in findings[0].message)
    check("versioning part named", "versioning" in findings[1].message)


def test_versioning_label_in_prose():
    governance = (
        "## Governance\n\nAmendments are recorded in the Sync Impact Report.\n\n"
        "**Versioning Policy**: semantic versioning applies.\n"
    )
    findings = validate_structure(parse_sections(make_document(governance=governance)))
    check("label satisfies versioning policy", findings == [], f"got {codes(findings)}")


def test_principle_titled_governance():
    principle = (
        "### II. Governance\n\n- Decisions MUST be recorded.\n\n"
        "**Rationale**: Traceability.\n"
    )
    root = parse_sections(make_document(PRINCIPLE_ONE + "\n" + principle))
    findings = validate_structure(root)
    check("real Governance section used", findings == [], f"got {codes(findings)}")
    check("lookup skips the principle", find_governance_section(root).path() == "Constitution > Governance",
          find_governance_section(root).path())

    numbered = make_document(governance=GOVERNANCE.replace("## Governance", "## 5. Governance"))
    check("numbered top-level Governance still found",
          validate_structure(parse_sections(numbered)) == [])


def test_missing_core_principles():
    findings = validate_structure(parse_sections("# Constitution\n\n" + GOVERNANCE))
    check("MissingPrinciples reported", codes(findings) == ["MissingPrinciples"], f"got {codes(findings)}")


def test_core_principles_without_numbered_children():
    text = "# C\n\n## Core Principles\n\n### Be Kind\n\n- always\n\n" + GOVERNANCE
    findings = validate_structure(parse_sections(text))
    check("MissingPrinciples for unnumbered children", codes(findings) == ["MissingPrinciples"],
          f"got {codes(findings)}")


def test_principle_order_warning():
    three = PRINCIPLE_TWO.replace("### II.", "### III.")
    findings = validate_structure(parse_sections(make_document(PRINCIPLE_ONE + "\n" + three)))
    check("PrincipleOrder warning", codes(findings) == ["PrincipleOrder"], f"got {codes(findings)}")
    check("warning severity", findings[0].severity == Severity.WARNING)


def test_section_order_warning():
    text = f"# Constitution\n\n{GOVERNANCE}\n## Core Principles\n\n{PRINCIPLE_ONE}"
    findings = validate_structure(parse_sections(text))
    check("SectionOrder warning", codes(findings) == ["SectionOrder"], f"got {codes(findings)}")


def test_placeholders():
    text = make_document().replace("# Constitution", "# [PROJECT_NAME] Constitution")
    text += "\nOwner: [OWNER_NAME] and again [OWNER_NAME]. See `[NOT_ME]` and [LINK](http://x).\n"
    findings = validate_structure(parse_sections(text))
    check("one warning per distinct token",
          codes(findings) == ["UnresolvedPlaceholder", "UnresolvedPlaceholder"], f"got {codes(findings)}")
    check("heading token first", "[PROJECT_NAME]" in findings[0].message)

    quiet = validate_structure(parse_sections(text), replace(DEFAULTS, check_placeholders=False))
    check("scan can be disabled", quiet == [], f"got {codes(quiet)}")


def main() -> bool:
    print("=" * 60)
    print("STRUCTURE VALIDATOR TESTS")
    print("=" * 60)
    for name, fn in list(globals().items()):
        if name.startswith("test_") and callable(fn):
            print(f"\n--- {name} ---")
            try:
                fn()
            except AssertionError:
                pass
    print()
    print("=" * 60)
    total = passed + failed
    print(f"RESULTS: {passed}/{total} passed, {failed}/{total} failed")
    print("=" * 60)
    return failed == 0


if __name__ == "__main__":
    ok = main()
    sys.exit(0 if ok else 1)
