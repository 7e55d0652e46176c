"""
Document Loader

Resolves a document identifier (a filesystem path) to its full text.
No parsing happens here beyond UTF-8 decoding.
"""

from __future__ import annotations

from pathlib import Path

from charter.errors import NotFound, ReadError

_BOM = "\ufeff"


def resolve(identifier: str | Path) -> Path:
    """Return the file path for *identifier*. Raises NotFound."""
    path = Path(identifier).expanduser()
    if not path.is_file():
        raise NotFound(str(identifier))
    return path


def load_document(identifier: str | Path) -> str:
    """Read a document as UTF-8 text.

    Raises NotFound if the identifier does not resolve to a file and
    ReadError if it cannot be read or decoded.
    """
    path = resolve(identifier)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ReadError(str(identifier), exc.strerror or str(exc)) from exc

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ReadError(str(identifier), f"not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc

    if text.startswith(_BOM):
        text = text[len(_BOM):]
    return text
