from __future__ import annotations

from typing import Sequence

from .config import DeckOptions
from .types import Card

IGNORE_MARKER = "<!-- md2apkg ignore-card -->"


def has_ignore_marker(card: Card) -> bool:
    return any(t.type == "inline" and IGNORE_MARKER in t.content.strip() for t in card.back)


def filter_cards(cards: Sequence[Card], options: DeckOptions) -> list[Card]:
    """Remove unwanted cards.

    Rules (applied in this order):
    - empty back => drop, unless options.include_empty
    - ignore-card marker anywhere in the back => drop
    - heading level listed in options.ignore_levels => drop
    """
    out = list(cards)
    if not options.include_empty:
        out = [c for c in out if c.back]
    out = [c for c in out if not has_ignore_marker(c)]
    return [c for c in out if c.heading_level not in options.ignore_levels]
