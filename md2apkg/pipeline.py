from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .config import DeckOptions
from .errors import EmptyResultError
from .exporters.apkg import export_apkg
from .filtering import filter_cards
from .images import extract_images
from .markup import tokens_from_markdown
from .partition import partition
from .render import load_css


@dataclass
class ConvertStats:
    cards_found: int = 0
    cards_exported: int = 0
    images: int = 0
    images_skipped: int = 0
    tags: int = 0
    deck_name: str | None = None
    out_path: str | None = None
    warnings: list[str] = field(default_factory=list)


def default_output_path(input_path: str | Path) -> Path:
    return Path(input_path).with_suffix(".apkg")


def convert(
    input_path: str | Path,
    out_path: str | Path | None = None,
    options: DeckOptions | None = None,
) -> ConvertStats:
    """Convert a markdown file into an Anki deck.

    Steps:
    - tokenize the document (all tokens in memory before partitioning)
    - collect local images (rewrites image src to packaged names)
    - partition into cards, then filter
    - deck name: options.deck_name, else the first card's heading, else the file stem
    - empty result => EmptyResultError, nothing written
    """
    options = options or DeckOptions()
    input_path = Path(input_path)
    out_path = Path(out_path) if out_path is not None else default_output_path(input_path)

    if not input_path.is_file():
        raise FileNotFoundError(f"input file not found: {input_path}")

    stats = ConvertStats()

    tokens = tokens_from_markdown(input_path.read_text(encoding="utf-8"))
    images = extract_images(tokens, input_path.parent, issues=stats.warnings)

    all_cards = partition(tokens)
    stats.cards_found = len(all_cards)

    deck_name = options.deck_name
    if not deck_name and all_cards:
        deck_name = all_cards[0].heading_str
    deck_name = deck_name or input_path.stem
    stats.deck_name = deck_name

    cards = filter_cards(all_cards, options)
    if not cards:
        raise EmptyResultError(
            f"attempting to generate an empty deck ({stats.cards_found} cards found, all filtered)"
        )

    # resolve the stylesheet before anything touches out_path
    css = load_css(options.code_style)

    export = export_apkg(
        cards=cards,
        cards_by_index={c.index: c for c in all_cards},
        images=images,
        out_path=out_path,
        deck_name=deck_name,
        css=css,
    )

    stats.cards_exported = export.cards_exported
    stats.images = export.media_added
    stats.images_skipped = export.media_skipped
    stats.tags = len(export.tags)
    stats.out_path = str(out_path)
    stats.warnings.extend(export.warnings)
    return stats
