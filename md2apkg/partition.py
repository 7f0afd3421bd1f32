from __future__ import annotations

from enum import Enum
from typing import Iterable, Sequence

from markdown_it.token import Token

from .types import Card

SPLIT_MARKER = "<!-- md2apkg split -->"
SPLIT_SHORTHAND = "%"


class Side(Enum):
    FRONT = "front"
    BACK = "back"


def is_split_marker(token: Token) -> bool:
    if token.type != "inline":
        return False
    text = token.content.strip()
    return text == SPLIT_SHORTHAND or SPLIT_MARKER in text


def resolve_parent(finished: Sequence[Card], card: Card) -> Card | None:
    """Nearest earlier card with a strictly shallower heading, or None (root)."""
    level = card.heading_level
    for candidate in reversed(finished):
        if candidate.heading_level < level:
            return candidate
    return None


class CardPartitioner:
    """Front/back state machine over a markdown-it token stream.

    FRONT: tokens go to the current card's front; heading_close switches to BACK.
    BACK: tokens go to the back; heading_open closes the card and starts a new
    one in FRONT. Split markers seen in BACK move the back onto the front.
    """

    def __init__(self) -> None:
        self.cards: list[Card] = []
        self.state = Side.FRONT
        self.current = Card(index=0)
        self._drop_paragraph_close = False

    def feed(self, token: Token) -> None:
        if token.type == "heading_open" and self.state is Side.BACK:
            self._finish_card()

        if self.state is Side.FRONT:
            self.current.front.append(token)
            if token.type == "heading_close":
                self.state = Side.BACK
            return

        if self._drop_paragraph_close:
            self._drop_paragraph_close = False
            if token.type == "paragraph_close":
                return

        self.current.back.append(token)
        if is_split_marker(token):
            self._split()

    def finish(self) -> list[Card]:
        if self.current.front or self.current.back:
            self._finish_card()
        return self.cards

    def _split(self) -> None:
        back = self.current.back
        back.pop()
        # a marker on its own line comes wrapped in a paragraph
        if back and back[-1].type == "paragraph_open":
            back.pop()
            self._drop_paragraph_close = True
        self.current.front.extend(back)
        self.current.back = []

    def _finish_card(self) -> None:
        parent = resolve_parent(self.cards, self.current)
        if parent is not None:
            self.current.parent = parent.index
        self.cards.append(self.current)
        self.current = Card(index=len(self.cards))
        self.state = Side.FRONT
        self._drop_paragraph_close = False


def partition(tokens: Iterable[Token]) -> list[Card]:
    """Split a token stream into cards, one per heading.

    Content before the first heading forms a card of its own (level 0, all
    front). The card in progress at the end of the stream is kept.
    """
    partitioner = CardPartitioner()
    for token in tokens:
        partitioner.feed(token)
    return partitioner.finish()
