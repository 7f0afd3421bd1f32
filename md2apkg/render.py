from __future__ import annotations

import html
from importlib import resources
from typing import Mapping

from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from .markup import render_tokens
from .types import Card


def ancestors(card: Card, cards_by_index: Mapping[int, Card]) -> list[Card]:
    """Parent chain of a card, root first. Parents removed by filtering still count."""
    chain: list[Card] = []
    parent = card.parent
    while parent is not None and parent in cards_by_index:
        chain.append(cards_by_index[parent])
        parent = cards_by_index[parent].parent
    chain.reverse()
    return chain


def render_card(card: Card, cards_by_index: Mapping[int, Card]) -> tuple[str, str]:
    """Returns (front_html, back_html)."""
    front = render_tokens(card.front)
    crumbs = [c.heading_str for c in ancestors(card, cards_by_index) if c.heading_str]
    if crumbs:
        trail = " &rsaquo; ".join(html.escape(c) for c in crumbs)
        front = f'<div class="breadcrumbs">{trail}</div>\n{front}'
    return front, render_tokens(card.back)


def load_css(code_style: str) -> str:
    """Pygments style for code blocks + the bundled card stylesheet."""
    try:
        formatter = HtmlFormatter(style=code_style)
    except ClassNotFound as e:
        raise ValueError(f"unknown code style: {code_style}") from e
    css = formatter.get_style_defs(".highlight")
    css += "\n" + resources.files("md2apkg").joinpath("style.css").read_text(encoding="utf-8")
    return css
