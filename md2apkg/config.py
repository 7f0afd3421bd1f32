from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from .utils import load_json


@dataclass(frozen=True)
class DeckOptions:
    include_empty: bool = False
    ignore_levels: frozenset[int] = field(default_factory=frozenset)
    deck_name: str | None = None
    code_style: str = "default"

    def merged(self, **overrides: Any) -> "DeckOptions":
        """Copy with every override that is not None applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "ignore_levels" in changes:
            changes["ignore_levels"] = frozenset(int(v) for v in changes["ignore_levels"])
        return replace(self, **changes)


def load_config(config_path: str | Path) -> DeckOptions:
    data = load_json(config_path)
    if not isinstance(data, dict):
        raise ValueError(f"config must be a JSON object: {config_path}")
    deck_name = data.get("deck_name")
    return DeckOptions(
        include_empty=bool(data.get("include_empty", False)),
        ignore_levels=frozenset(int(v) for v in data.get("ignore_levels", [])),
        deck_name=str(deck_name) if deck_name else None,
        code_style=str(data.get("code_style", "default")),
    )
