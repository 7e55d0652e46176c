"""
Validation pipeline

Runs the per-document chain

    load -> parse header/footer -> build section tree -> structure checks
         -> version checks -> DocumentReport

Parser errors become findings so one run surfaces every issue. Only load
failures (NotFound, ReadError) skip a document, and they never affect the
other documents in the batch.
"""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Optional

from charter.config import DEFAULTS, ValidatorConfig
from charter.errors import InvalidDate, InvalidVersion, MalformedHeader, NotFound, ReadError
from charter.findings import Finding, FindingCode, Severity, error, from_exception, warning
from charter.front_matter import FrontMatter, parse_footer, parse_front_matter
from charter.loader import load_document
from charter.logging_utils import get_logger
from charter.report import DocumentReport, ValidationReport
from charter.sections import Section, parse_sections
from charter.structure import validate_structure
from charter.versioning import (
    HEADER_PATH,
    SemVer,
    VersionRecord,
    check_history,
    check_record,
    check_version,
)

logger = get_logger(__name__)

FOOTER_PATH = "(footer)"
PRIOR_PATH = "(prior)"

_HAS_DIGIT_RE = re.compile(r"\d")


# ---------------------------------------------------------------------------
# Domain types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GovernanceDocument:
    name: str
    text: str
    front_matter: FrontMatter
    footer: Optional[FrontMatter]
    root: Section


# ---------------------------------------------------------------------------
# DocumentValidator
# ---------------------------------------------------------------------------

class DocumentValidator:
    """
    Validates governance documents.

    Stateless apart from its configuration; one instance can be shared
    across worker threads.
    """

    def __init__(self, config: ValidatorConfig | None = None):
        self.config = config or DEFAULTS

    # ---------- Parsing ----------

    def parse(self, name: str, text: str) -> tuple[GovernanceDocument, list[Finding]]:
        """Parse *text* into a GovernanceDocument, collecting parser errors."""
        findings: list[Finding] = []

        try:
            front_matter = parse_front_matter(text, self.config)
        except (MalformedHeader, InvalidDate) as exc:
            findings.append(from_exception(exc, HEADER_PATH))
            front_matter = FrontMatter.empty()

        try:
            footer = parse_footer(text, self.config)
        except InvalidDate as exc:
            findings.append(from_exception(exc, FOOTER_PATH))
            footer = None

        root = parse_sections(text)
        logger.debug(
            "Parsed %s: header=%s footer=%s sections=%d",
            name, front_matter.present, footer is not None, sum(1 for _ in root.walk()) - 1,
        )
        document = GovernanceDocument(
            name=name,
            text=text,
            front_matter=front_matter,
            footer=footer,
            root=root,
        )
        return document, findings

    def version_record(
        self, document: GovernanceDocument, findings: list[Finding]
    ) -> Optional[VersionRecord]:
        """Merge header and footer into a VersionRecord, appending any findings."""
        header = document.front_matter
        footer = document.footer
        merged = header

        if footer is not None:
            if header.present:
                for label, ours, theirs in (
                    ("version", header.version, footer.version),
                    ("ratified", header.ratified, footer.ratified),
                    ("last amended", header.last_amended, footer.last_amended),
                ):
                    if ours and theirs and ours != theirs:
                        findings.append(warning(
                            FindingCode.FOOTER_MISMATCH,
                            f"Header {label} '{ours}' differs from footer '{theirs}'",
                            FOOTER_PATH,
                        ))
                merged = replace(
                    header,
                    ratified=header.ratified or footer.ratified,
                    last_amended=header.last_amended or footer.last_amended,
                )
            else:
                merged = footer

        if not merged.version:
            return None

        source_path = HEADER_PATH if header.present else FOOTER_PATH
        try:
            record = VersionRecord.from_front_matter(merged, document.name)
        except InvalidVersion as exc:
            findings.append(from_exception(exc, source_path))
            return None

        findings.extend(check_record(record, source_path))
        return record

    def _declared_prior(self, header: FrontMatter, findings: list[Finding]) -> Optional[SemVer]:
        """The "from" side of ``Version change: A -> B``; words like N/A are ignored."""
        previous = header.previous_version
        if not previous or not _HAS_DIGIT_RE.search(previous):
            return None
        try:
            return SemVer.parse(previous)
        except InvalidVersion as exc:
            findings.append(from_exception(exc, HEADER_PATH))
            return None

    # ---------- Single document ----------

    def validate_text(
        self,
        name: str,
        text: str,
        prior_text: Optional[str] = None,
    ) -> DocumentReport:
        """Validate one document held in memory."""
        document, findings = self.parse(name, text)

        findings.extend(validate_structure(document.root, self.config))

        record = self.version_record(document, findings)
        declared = self._declared_prior(document.front_matter, findings)

        prior: Optional[VersionRecord] = None
        if prior_text is not None:
            prior_document, prior_findings = self.parse(f"{name} {PRIOR_PATH}", prior_text)
            prior = self.version_record(prior_document, prior_findings)
            # prior-snapshot problems never fail the current document
            findings.extend(
                replace(
                    f,
                    severity=Severity.WARNING,
                    message=f"Prior snapshot: {f.message}",
                    path=PRIOR_PATH,
                )
                for f in prior_findings
            )
            if prior is None:
                logger.warning("Prior snapshot of %s has no usable version", name)

        if prior is None and declared is not None:
            prior = VersionRecord(version=declared, source=f"{name} {HEADER_PATH}")
        elif prior is not None and declared is not None and declared != prior.version:
            findings.append(warning(
                FindingCode.VERSION_MISMATCH,
                f"Header records a change from {declared} but the prior "
                f"snapshot is {prior.version}",
                HEADER_PATH,
            ))

        if record is not None and prior is not None:
            findings.extend(check_version(record, prior))

        report = DocumentReport(
            name=name,
            findings=findings,
            version=str(record.version) if record else None,
        )
        logger.info(
            "%s: %s (%d errors, %d warnings)",
            name, "pass" if report.passed else "fail",
            len(report.errors), len(report.warnings),
        )
        return report

    def validate_path(
        self,
        path: str | Path,
        prior_path: str | Path | None = None,
    ) -> DocumentReport:
        """Load and validate one document; load failures skip it."""
        name = str(path)
        try:
            text = load_document(path)
        except (NotFound, ReadError) as exc:
            logger.warning("Skipping %s: %s", name, exc.message)
            return DocumentReport(name=name, findings=[from_exception(exc)], loaded=False)

        prior_text: Optional[str] = None
        load_findings: list[Finding] = []
        if prior_path is not None:
            try:
                prior_text = load_document(prior_path)
            except (NotFound, ReadError) as exc:
                logger.warning("Prior snapshot %s unavailable: %s", prior_path, exc.message)
                load_findings.append(from_exception(exc, PRIOR_PATH))

        report = self.validate_text(name, text, prior_text)
        report.findings[:0] = load_findings
        return report

    # ---------- Batches ----------

    def validate_paths(
        self,
        paths: Iterable[str | Path],
        prior_dir: str | Path | None = None,
    ) -> ValidationReport:
        """Validate documents concurrently; reports keep input order."""
        paths = list(paths)
        if not paths:
            return ValidationReport()

        def _job(path: str | Path) -> DocumentReport:
            prior_path = None
            if prior_dir is not None:
                candidate = Path(prior_dir) / Path(path).name
                if candidate.is_file() and candidate.resolve() != Path(path).resolve():
                    prior_path = candidate
            return self.validate_path(path, prior_path)

        workers = max(1, min(self.config.jobs, len(paths)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            reports = list(pool.map(_job, paths))
        return ValidationReport(documents=reports)

    def validate_history_texts(self, snapshots: list[tuple[str, str]]) -> DocumentReport:
        """Check version monotonicity across snapshots of one document lineage."""
        findings: list[Finding] = []
        records: list[VersionRecord] = []

        for name, text in snapshots:
            document, snapshot_findings = self.parse(name, text)
            record = self.version_record(document, snapshot_findings)
            findings.extend(replace(f, path=f"{name} {f.path}") for f in snapshot_findings)
            if record is None:
                if not any(f.is_error for f in snapshot_findings):
                    findings.append(error(
                        FindingCode.INVALID_VERSION,
                        "Snapshot declares no version",
                        name,
                    ))
                continue
            records.append(record)

        findings.extend(check_history(records))
        latest = max((r.version for r in records), default=None)
        return DocumentReport(
            name="lineage: " + ", ".join(name for name, _ in snapshots),
            findings=findings,
            version=str(latest) if latest else None,
        )

    def validate_history(self, paths: Iterable[str | Path]) -> ValidationReport:
        reports: list[DocumentReport] = []
        snapshots: list[tuple[str, str]] = []
        for path in paths:
            try:
                snapshots.append((str(path), load_document(path)))
            except (NotFound, ReadError) as exc:
                logger.warning("Skipping snapshot %s: %s", path, exc.message)
                reports.append(DocumentReport(
                    name=str(path), findings=[from_exception(exc)], loaded=False,
                ))
        if snapshots:
            reports.append(self.validate_history_texts(snapshots))
        return ValidationReport(documents=reports)


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------

def validate_paths(
    paths: Iterable[str | Path],
    prior_dir: str | Path | None = None,
    config: ValidatorConfig | None = None,
) -> ValidationReport:
    return DocumentValidator(config).validate_paths(paths, prior_dir)


def validate_history(
    paths: Iterable[str | Path],
    config: ValidatorConfig | None = None,
) -> ValidationReport:
    return DocumentValidator(config).validate_history(paths)
