from __future__ import annotations

import hashlib
import json
import re
from pathlib import Path
from typing import Any


def short_hash(text: str, length: int = 8) -> str:
    return hashlib.sha1(text.encode("utf-8"), usedforsecurity=False).hexdigest()[:length]


def stable_int_id(s: str) -> int:
    # genanki ids must be int; keep stable across runs.
    digest = hashlib.sha1(s.encode("utf-8")).digest()
    n = int.from_bytes(digest[:8], "big", signed=False)
    return n % (2**31 - 1)


def safe_filename_token(text: str, max_len: int = 50) -> str:
    text = text.strip().lower()
    text = re.sub(r"[^a-z0-9_-]+", "_", text)
    text = re.sub(r"_+", "_", text).strip("_")
    return text[:max_len] or "file"



def load_json(path: str | Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
