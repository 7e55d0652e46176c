"""
Document Loader Test Suite
Tests NotFound / ReadError behaviour and UTF-8 decoding.

Usage:  python tests/test_loader.py   (or: pytest tests/)
"""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from charter.errors import NotFound, ReadError
from charter.loader import load_document

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


def test_reads_utf8_text():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "doc.md"
        path.write_text("# Verfassung → Grundsätze\n", encoding="utf-8")
        check("text returned unchanged", load_document(path) == "# Verfassung → Grundsätze\n")
        check("str identifiers accepted", load_document(str(path)).startswith("# Verfassung"))


def test_strips_bom():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "bom.md"
        path.write_bytes(b"\xef\xbb\xbf# Title\n")
        check("BOM removed", load_document(path) == "# Title\n")


def test_missing_file_is_not_found():
    with tempfile.TemporaryDirectory() as tmp:
        missing = Path(tmp) / "absent.md"
        try:
            load_document(missing)
            check("NotFound raised", False)
        except NotFound as exc:
            check("NotFound raised", True)
            check("identifier recorded", exc.identifier == str(missing))


def test_directory_is_not_found():
    with tempfile.TemporaryDirectory() as tmp:
        try:
            load_document(tmp)
            check("directory -> NotFound", False)
        except NotFound:
            check("directory -> NotFound", True)


def test_binary_is_read_error():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "blob.md"
        path.write_bytes(b"\xff\xfe\x00\x81binary")
        try:
            load_document(path)
            check("ReadError raised", False)
        except ReadError as exc:
            check("ReadError raised", True)
            check("code is ReadError", exc.code == "ReadError")
            check("reason mentions UTF-8", "UTF-8" in exc.reason, exc.reason)


def main() -> bool:
    print("=" * 60)
    print("DOCUMENT LOADER TESTS")
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
