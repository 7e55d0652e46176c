"""
Validation Gateway Test Suite
Posts documents to the FastAPI app in-process and verifies HTTP status
codes and response structure.

Usage:  python tests/test_gateway.py   (or: pytest tests/)
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient

from main import MAX_DOCUMENTS, app

client = TestClient(app)

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


CONSTITUTION = (ROOT / "CONSTITUTION.md").read_text(encoding="utf-8")
NO_GOVERNANCE = CONSTITUTION.split("## Development Workflow")[0]


def test_health():
    resp = client.get("/health")
    check("HTTP 200", resp.status_code == 200)
    check("operational", resp.json().get("status") == "operational")


def test_validate_passing():
    resp = client.post("/validate", json={"documents": [{"name": "c.md", "text": CONSTITUTION}]})
    body = resp.json()
    check("HTTP 200", resp.status_code == 200, f"got {resp.status_code}: {body}")
    check("passed true", body["passed"] is True)
    doc = body["documents"][0]
    check("document name echoed", doc["name"] == "c.md")
    check("version reported", doc["version"] == "1.2.0")
    check("no findings", doc["findings"] == [])


def test_validate_failing_is_422():
    resp = client.post("/validate", json={"documents": [
        {"name": "good.md", "text": CONSTITUTION},
        {"name": "bad.md", "text": NO_GOVERNANCE},
    ]})
    body = resp.json()
    check("HTTP 422", resp.status_code == 422, f"got {resp.status_code}")
    check("error message present", "error" in body)
    check("good document still passes", body["documents"][0]["passed"] is True)
    bad = body["documents"][1]
    check("bad document fails", bad["passed"] is False)
    check("MissingGovernance reported", [f["code"] for f in bad["findings"]] == ["MissingGovernance"],
          f"got {bad['findings']}")
    check("finding carries severity", bad["findings"][0]["severity"] == "error")


def test_validate_with_prior_text():
    prior = CONSTITUTION.replace("1.2.0", "1.3.0")
    resp = client.post("/validate", json={"documents": [
        {"name": "c.md", "text": CONSTITUTION, "prior_text": prior},
    ]})
    codes = [f["code"] for f in resp.json()["documents"][0]["findings"]]
    check("regression against prior -> 422", resp.status_code == 422, f"got {resp.status_code}")
    check("VersionMismatch present", "VersionMismatch" in codes, f"got {codes}")


def test_history_endpoint():
    older = CONSTITUTION.replace("1.2.0", "1.1.0").replace("2025-09-15", "2025-04-01")
    resp = client.post("/history", json={"snapshots": [
        {"name": "v2", "text": CONSTITUTION},
        {"name": "v1", "text": older},
    ]})
    check("clean history -> 200", resp.status_code == 200, f"got {resp.status_code}: {resp.json()}")

    empty = client.post("/history", json={"snapshots": []})
    check("no snapshots -> 400", empty.status_code == 400)


def test_request_limits_and_schema():
    docs = [{"name": f"d{i}.md", "text": ""} for i in range(MAX_DOCUMENTS + 1)]
    check("too many documents -> 413", client.post("/validate", json={"documents": docs}).status_code == 413)
    check("malformed body -> 422", client.post("/validate", json={"docs": []}).status_code == 422)


def main() -> bool:
    print("=" * 60)
    print("VALIDATION GATEWAY TESTS")
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
