"""
Validator configuration.

Module-level defaults come from the environment so the CLI, the gateway and
the tests share one source of truth.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Environment defaults
# ---------------------------------------------------------------------------
DEFAULT_JOBS = int(os.environ.get("CHARTER_JOBS", "4"))
LOG_LEVEL = os.environ.get("CHARTER_LOG_LEVEL", "WARNING")
CHECK_PLACEHOLDERS = os.environ.get("CHARTER_CHECK_PLACEHOLDERS", "1") not in ("0", "false", "no")


@dataclass
class ValidatorConfig:
    """Tunable rules for a validation run."""
    core_section_titles: tuple[str, ...] = (
        "core principles",
        "principles",
        "guiding principles",
    )
    governance_title: str = "governance"
    header_marker: str = "Sync Impact Report"
    date_format: str = "%Y-%m-%d"
    required_header_fields: tuple[str, ...] = ("version",)
    check_placeholders: bool = CHECK_PLACEHOLDERS
    jobs: int = DEFAULT_JOBS
    # Sub-heading / label words accepted for the two governance parts
    amendment_keywords: tuple[str, ...] = ("amendment", "amendments", "amend", "amended")
    versioning_keywords: tuple[str, ...] = ("versioning", "version policy", "versioning policy")
    extra_core_titles: list[str] = field(default_factory=list)

    def is_core_title(self, title: str) -> bool:
        normalized = title.strip().lower()
        return normalized in self.core_section_titles or normalized in (
            t.lower() for t in self.extra_core_titles
        )


DEFAULTS = ValidatorConfig()
