"""
Charter Validation Gateway

HTTP front-end for the governance-document validator. Documents are posted
as text, so the gateway never touches the filesystem; each request is a
stateless validation run.

Usage:  uvicorn main:app --port 8000
"""

from __future__ import annotations

import os
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from charter import __version__
from charter.config import DEFAULTS
from charter.logging_utils import get_logger
from charter.pipeline import DocumentValidator
from charter.report import ValidationReport

MAX_DOCUMENTS = int(os.environ.get("CHARTER_MAX_DOCUMENTS", "50"))

logger = get_logger("charter.gateway")

# ---------------------------------------------------------------------------
# App + shared services
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Charter Validation Gateway",
    version=__version__,
)

validator = DocumentValidator(DEFAULTS)

# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class DocumentIn(BaseModel):
    name: str
    text: str
    prior_text: Optional[str] = None


class ValidateRequest(BaseModel):
    documents: list[DocumentIn]


class SnapshotIn(BaseModel):
    name: str
    text: str


class HistoryRequest(BaseModel):
    snapshots: list[SnapshotIn]


class FindingOut(BaseModel):
    severity: str
    code: str
    message: str
    path: str
    line: Optional[int] = None


class DocumentOut(BaseModel):
    name: str
    passed: bool
    loaded: bool = True
    version: Optional[str] = None
    findings: list[FindingOut] = []


class ReportResponse(BaseModel):
    passed: bool
    documents: list[DocumentOut]


def _respond(report: ValidationReport) -> JSONResponse:
    """200 when every document passes, 422 when any has an error finding."""
    body = ReportResponse(**report.to_dict())
    if report.passed:
        return JSONResponse(status_code=200, content=body.model_dump())
    return JSONResponse(
        status_code=422,
        content={
            **body.model_dump(),
            "error": "Governance document validation failed.",
        },
    )


def _too_many(count: int) -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content={"error": f"At most {MAX_DOCUMENTS} documents per request (got {count})."},
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/health")
def health():
    return {"status": "operational", "service": "charter-gateway", "version": __version__}


@app.post("/validate")
def validate(request: ValidateRequest):
    """
    Validate posted documents.

    Each document may carry the text of its prior snapshot for version
    monotonicity checks. Documents are independent; one failing document
    does not affect the others.
    """
    if len(request.documents) > MAX_DOCUMENTS:
        return _too_many(len(request.documents))

    report = ValidationReport(documents=[
        validator.validate_text(doc.name, doc.text, doc.prior_text)
        for doc in request.documents
    ])
    logger.info(
        "POST /validate: %d documents, passed=%s", len(report.documents), report.passed,
    )
    return _respond(report)


@app.post("/history")
def history(request: HistoryRequest):
    """Check version monotonicity across snapshots of one document lineage."""
    if len(request.snapshots) > MAX_DOCUMENTS:
        return _too_many(len(request.snapshots))
    if not request.snapshots:
        return JSONResponse(status_code=400, content={"error": "No snapshots supplied."})

    lineage = validator.validate_history_texts(
        [(snap.name, snap.text) for snap in request.snapshots]
    )
    return _respond(ValidationReport(documents=[lineage]))
