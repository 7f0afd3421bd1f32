from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from markdown_it.token import Token

from .utils import safe_filename_token, short_hash

# Level of a card that does not start with a heading; shallower than h1.
NO_HEADING_LEVEL = 0

_HASHTAG_RE = re.compile(r"(?<![\w#&/])#([A-Za-z][\w:-]*)")


def heading_level_of(token: Token) -> int:
    """Heading depth of a heading_open token (h1 -> 1), else NO_HEADING_LEVEL."""
    if token.type != "heading_open":
        return NO_HEADING_LEVEL
    tag = token.tag or ""
    if len(tag) == 2 and tag[0] == "h" and tag[1].isdigit():
        return int(tag[1])
    return NO_HEADING_LEVEL


def inline_text(token: Token) -> str:
    """Plain text of an inline token (markup stripped)."""
    if not token.children:
        return token.content
    parts: list[str] = []
    for child in token.children:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
        elif child.type == "image":
            parts.append(child.content)
    return "".join(parts)


def tag_text(token: Token) -> str:
    """Prose of an inline token for tag lookup: text children only, no code."""
    if not token.children:
        return token.content
    return " ".join(child.content for child in token.children if child.type == "text")


@dataclass
class Card:
    index: int
    front: list[Token] = field(default_factory=list)
    back: list[Token] = field(default_factory=list)
    parent: int | None = None  # index of the parent card

    @property
    def heading_level(self) -> int:
        if not self.front:
            return NO_HEADING_LEVEL
        return heading_level_of(self.front[0])

    @property
    def heading_str(self) -> str:
        if self.heading_level == NO_HEADING_LEVEL:
            return ""
        for tok in self.front[1:]:
            if tok.type == "heading_close":
                break
            if tok.type == "inline":
                return inline_text(tok).strip()
        return ""

    @property
    def tags(self) -> set[str]:
        found: set[str] = set()
        for tok in [*self.front, *self.back]:
            if tok.type != "inline":
                continue
            for m in _HASHTAG_RE.finditer(tag_text(tok)):
                found.add(m.group(1))
        return found


@dataclass(frozen=True)
class Image:
    """A local media file referenced by the document.

    file_path is normalized and '/'-separated; equality only looks at it.
    """

    file_path: str
    filtered_path: str = field(init=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "filtered_path", filtered_media_name(self.file_path))


def filtered_media_name(file_path: str) -> str:
    """Flat, ASCII-safe media name; distinct paths give distinct names."""
    p = PurePosixPath(file_path)
    stem = safe_filename_token(p.stem, max_len=40)
    # hash the full path so same-named files in different folders differ
    ext = safe_filename_token(p.suffix, max_len=10) if p.suffix else ""
    name = f"{stem}_{short_hash(file_path)}"
    return f"{name}.{ext}" if ext else name
