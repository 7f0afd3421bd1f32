from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator
from urllib.parse import unquote

from markdown_it.token import Token

from .errors import MalformedTokenError
from .types import Image


def is_remote_source(src: str) -> bool:
    return "://" in src or src.lower().startswith("data:")


def image_source(token: Token) -> str:
    src = token.attrGet("src")
    if src is None or not str(src).strip():
        raise MalformedTokenError(token.type, "src")
    return str(src)


def resolve_image_path(src: str, document_dir: str | Path) -> str:
    # markdown-it percent-encodes link targets (spaces -> %20)
    joined = os.path.normpath(os.path.join(str(document_dir), unquote(src)))
    return joined.replace(os.sep, "/").replace("\\", "/")


def iter_image_tokens(tokens: Iterable[Token]) -> Iterator[Token]:
    """Depth-first walk yielding image tokens, descending into inline children."""
    for token in tokens:
        if token.type == "image":
            yield token
        elif token.type == "inline" and token.children:
            yield from iter_image_tokens(token.children)


def extract_images(
    tokens: Iterable[Token],
    document_dir: str | Path,
    issues: list[str] | None = None,
) -> list[Image]:
    """Collect local images and point their tokens at the packaged media name.

    Rules:
    - remote sources (scheme://..., data:) are left untouched and not collected
    - image tokens without a src are skipped (reported in issues)
    - every local token gets src = Image.filtered_path
    - result is unique by file_path, in first-seen order
    """
    seen: dict[str, Image] = {}
    for token in iter_image_tokens(tokens):
        try:
            src = image_source(token)
        except MalformedTokenError as e:
            if issues is not None:
                issues.append(f"image_skipped: {e}")
            continue

        if is_remote_source(src):
            continue

        file_path = resolve_image_path(src, document_dir)
        if not file_path:
            continue

        image = seen.setdefault(file_path, Image(file_path))
        token.attrSet("src", image.filtered_path)

    return list(seen.values())
