"""
Markdown section tree.

Builds a tree of Sections from ATX headings. Headings inside fenced code
blocks and HTML comments are not headings; those regions stay in the body of
the enclosing section but are excluded from prose_lines().
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

TEXT = "text"
CODE = "code"
COMMENT = "comment"

PATH_SEPARATOR = " > "

_FENCE_RE = re.compile(r"^\s{0,3}(`{3,}|~{3,})")
_HEADING_RE = re.compile(r"^\s{0,3}(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")
_INLINE_COMMENT_RE = re.compile(r"<!--.*?-->")
_CODE_SPAN_RE = re.compile(r"`[^`\n]*`")
# "1. ", "II. ", "§3 " prefixes in section titles
_TITLE_NUMBER_RE = re.compile(r"^(?:§\s*)?(?:\d+(?:\.\d+)*[.:)]?|[IVXLCDM]+[.:)])\s+")


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------

def _closes_fence(line: str, fence: str) -> bool:
    stripped = line.strip()
    return (
        stripped.startswith(fence[0] * len(fence))
        and set(stripped) == {fence[0]}
    )


def mask_code_spans(line: str) -> str:
    """Blank out inline `code` spans, keeping column positions."""
    return _CODE_SPAN_RE.sub(lambda m: " " * len(m.group()), line)


def classify_lines(lines: list[str]) -> list[tuple[str, str]]:
    """Tag each line as TEXT, CODE or COMMENT.

    TEXT lines have inline ``<!-- ... -->`` comments removed. Comment markers
    inside inline code spans are literal text.
    """
    out: list[tuple[str, str]] = []
    fence: Optional[str] = None
    in_comment = False

    for raw in lines:
        if fence is not None:
            out.append((CODE, raw))
            if _closes_fence(raw, fence):
                fence = None
            continue

        line = raw
        if in_comment:
            end = line.find("-->")
            if end == -1:
                out.append((COMMENT, raw))
                continue
            in_comment = False
            line = line[end + 3:]
            if not line.strip():
                out.append((COMMENT, ""))
                continue
        else:
            fence_match = _FENCE_RE.match(line)
            if fence_match:
                fence = fence_match.group(1)
                out.append((CODE, raw))
                continue

        masked = mask_code_spans(line)
        for match in reversed(list(_INLINE_COMMENT_RE.finditer(masked))):
            line = line[:match.start()] + line[match.end():]
            masked = masked[:match.start()] + masked[match.end():]
        start = masked.find("<!--")
        if start != -1:
            in_comment = True
            line = line[:start]
            out.append((TEXT if line.strip() else COMMENT, line))
            continue

        out.append((TEXT, line))

    return out


def normalize_title(title: str) -> str:
    """Lower-case a heading title without emphasis, numbering or trailing colon."""
    cleaned = title.replace("**", "").replace("__", "").strip().strip("*_").strip()
    cleaned = _TITLE_NUMBER_RE.sub("", cleaned)
    return cleaned.rstrip(":").strip().lower()


# ---------------------------------------------------------------------------
# Section tree
# ---------------------------------------------------------------------------

@dataclass
class Section:
    title: str
    level: int                     # 0 for the document root
    line: int = 0                  # 1-based heading line, 0 for the root
    body: list[str] = field(default_factory=list)
    children: list["Section"] = field(default_factory=list)
    parent: Optional["Section"] = field(default=None, repr=False, compare=False)

    @property
    def body_line(self) -> int:
        return self.line + 1 if self.level else 1

    @property
    def name(self) -> str:
        return normalize_title(self.title)

    def path(self) -> str:
        titles: list[str] = []
        node: Optional[Section] = self
        while node is not None and node.level > 0:
            titles.append(node.title)
            node = node.parent
        return PATH_SEPARATOR.join(reversed(titles))

    def walk(self) -> Iterator["Section"]:
        """Pre-order traversal including self."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, predicate: Callable[["Section"], bool]) -> Optional["Section"]:
        for section in self.walk():
            if section is not self and predicate(section):
                return section
        return None

    def prose_lines(self) -> list[tuple[int, str]]:
        """(line number, text) for body lines outside code and comments."""
        start = self.body_line
        return [
            (start + i, text)
            for i, (kind, text) in enumerate(classify_lines(self.body))
            if kind == TEXT
        ]

    def text(self) -> str:
        return "\n".join(line for _, line in self.prose_lines()).strip()


def parse_sections(text: str) -> Section:
    """Parse Markdown text into a Section tree rooted at a level-0 section."""
    root = Section(title="", level=0)
    stack: list[Section] = [root]
    lines = text.splitlines()

    for idx, (kind, line) in enumerate(classify_lines(lines)):
        if kind == TEXT:
            match = _HEADING_RE.match(line)
            if match:
                level = len(match.group(1))
                while stack[-1].level >= level:
                    stack.pop()
                parent = stack[-1]
                section = Section(
                    title=match.group(2).strip(),
                    level=level,
                    line=idx + 1,
                    parent=parent,
                )
                parent.children.append(section)
                stack.append(section)
                continue
        stack[-1].body.append(lines[idx])

    return root
