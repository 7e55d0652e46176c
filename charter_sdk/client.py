"""
Charter SDK — Client
Thin synchronous wrapper over the Charter validation gateway.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from charter_sdk.models import DocumentResult, ValidationResult


class CharterClient:
    """
    Client for the Charter validation gateway.

    Posts governance documents (as text) for validation and returns the
    per-document findings.
    """

    def __init__(
        self,
        gateway_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            gateway_url: Base URL of the gateway (e.g. "http://localhost:8000")
            timeout: HTTP request timeout in seconds
            client: Pre-built httpx.Client (e.g. a FastAPI TestClient)
        """
        self.gateway_url = gateway_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)

    def _result(self, resp: httpx.Response) -> ValidationResult:
        body = resp.json()
        return ValidationResult(
            passed=bool(body.get("passed", False)),
            status_code=resp.status_code,
            documents=[DocumentResult(**doc) for doc in body.get("documents", [])],
            error=body.get("error"),
            raw=body,
        )

    def validate(self, documents: list[dict[str, Any]]) -> ValidationResult:
        """
        Submit documents for validation via POST /validate.

        Args:
            documents: dicts with "name", "text" and optional "prior_text"

        Returns:
            ValidationResult; ``passed`` is False when any document has an
            error finding.
        """
        resp = self._client.post(
            f"{self.gateway_url}/validate",
            json={"documents": documents},
        )
        return self._result(resp)

    def validate_text(
        self, name: str, text: str, prior_text: Optional[str] = None,
    ) -> DocumentResult:
        """Validate a single document and return its entry."""
        doc: dict[str, Any] = {"name": name, "text": text}
        if prior_text is not None:
            doc["prior_text"] = prior_text
        result = self.validate([doc])
        if not result.documents:
            raise RuntimeError(f"Gateway returned no report: {result.raw}")
        return result.documents[0]

    def history(self, snapshots: list[tuple[str, str]]) -> ValidationResult:
        """Check a document lineage via POST /history."""
        resp = self._client.post(
            f"{self.gateway_url}/history",
            json={"snapshots": [{"name": n, "text": t} for n, t in snapshots]},
        )
        return self._result(resp)

    def health(self) -> dict:
        """Check gateway health via GET /health."""
        resp = self._client.get(f"{self.gateway_url}/health")
        return resp.json()

    def close(self) -> None:
        self._client.close()
