from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Sequence

import genanki

from ..render import render_card
from ..types import Card, Image
from ..utils import stable_int_id


@dataclass
class ApkgExportStats:
    cards_exported: int = 0
    media_added: int = 0
    media_skipped: int = 0
    tags: set[str] = field(default_factory=set)
    warnings: list[str] = field(default_factory=list)


def build_model(deck_name: str, css: str) -> genanki.Model:
    return genanki.Model(
        stable_int_id(f"md2apkg:model:{deck_name}"),
        "md2apkg_basic",
        fields=[
            {"name": "Front"},
            {"name": "Back"},
        ],
        templates=[
            {
                "name": "Card 1",
                "qfmt": "{{Front}}",
                "afmt": "{{FrontSide}}<hr id=answer>{{Back}}",
            }
        ],
        css=css,
    )


def export_apkg(
    *,
    cards: Sequence[Card],
    cards_by_index: Mapping[int, Card],
    images: Sequence[Image],
    out_path: str | Path,
    deck_name: str,
    css: str = "",
) -> ApkgExportStats:
    """Write cards and their media as an Anki .apkg.

    Rules:
    - One Basic note per card (Front/Back html), in document order
    - Note tags = card tags, sorted
    - Media are embedded under Image.filtered_path
    - Missing/unreadable media file => skip + warning; the card is kept
    - Deck/model ids derive from deck_name, so re-exports update in place
    """
    out_path = Path(out_path)
    stats = ApkgExportStats()

    model = build_model(deck_name, css)
    deck = genanki.Deck(stable_int_id(f"md2apkg:deck:{deck_name}"), deck_name)

    for card in cards:
        front_html, back_html = render_card(card, cards_by_index)
        tags = sorted(card.tags)
        note = genanki.Note(model=model, fields=[front_html, back_html], tags=tags)
        deck.add_note(note)
        stats.tags.update(tags)
        stats.cards_exported += 1

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(prefix="md2apkg_media_") as media_tmp:
        media_files: list[str] = []
        for image in images:
            dst = Path(media_tmp) / image.filtered_path
            try:
                shutil.copyfile(image.file_path, dst)
            except OSError as e:
                stats.media_skipped += 1
                stats.warnings.append(f"image_import_failed: {image.file_path}: {e}")
                continue
            media_files.append(str(dst))
            stats.media_added += 1

        pkg = genanki.Package(deck)
        pkg.media_files = media_files
        pkg.write_to_file(str(out_path))

    return stats
