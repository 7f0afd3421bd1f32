from __future__ import annotations

import json
import re
import sqlite3
import tempfile
import zipfile
from html import unescape
from pathlib import Path
from typing import Any

from .images import is_remote_source

_IMG_RE = re.compile(r"<img[^>]+src=[\"']([^\"']+)[\"']", flags=re.IGNORECASE)


def _read_media_mapping(z: zipfile.ZipFile, errors: list[str]) -> dict[str, str] | None:
    media_raw = z.read("media")
    try:
        media_map = json.loads(media_raw.decode("utf-8", errors="replace"))
    except ValueError as e:
        errors.append(f"apkg_media_mapping_invalid_json: {e}")
        return None

    if not isinstance(media_map, dict):
        errors.append("apkg_media_mapping_not_object")
        return None

    return {str(k): str(v) for k, v in media_map.items() if k is not None and v is not None and str(k)}


def _read_note_fields(z: zipfile.ZipFile, errors: list[str]) -> list[str] | None:
    col_bytes = z.read("collection.anki2")
    with tempfile.TemporaryDirectory(prefix="apkg_collection_") as tmp:
        tmp_path = Path(tmp) / "collection.anki2"
        tmp_path.write_bytes(col_bytes)
        try:
            conn = sqlite3.connect(tmp_path)
            try:
                rows = conn.execute("SELECT flds FROM notes").fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            errors.append(f"apkg_sqlite_read_failed: {e}")
            return None
    return [str(flds) for (flds,) in rows]


def validate_apkg(apkg_path: str | Path) -> tuple[bool, dict[str, Any]]:
    """Validate an Anki .apkg file.

    Rules:
    - File exists and is a valid zip
    - Contains collection.anki2 and the media mapping file
    - Every local <img src> in the notes is listed in the media mapping,
      and the numbered blob for it exists in the zip
    - Duplicate filenames in the mapping are a warning, not an error
    """
    apkg_path = Path(apkg_path)

    errors: list[str] = []
    warnings: list[str] = []
    referenced: set[str] = set()
    notes = 0

    if not apkg_path.is_file():
        errors.append(f"apkg_missing: {apkg_path}")
        return False, {"notes": 0, "referenced_filenames": [], "warnings": warnings, "errors": errors}

    try:
        with zipfile.ZipFile(apkg_path, "r") as z:
            names = set(z.namelist())
            if "collection.anki2" not in names:
                errors.append("apkg_missing_collection.anki2")
            if "media" not in names:
                errors.append("apkg_missing_media_mapping")

            media_map = _read_media_mapping(z, errors) if "media" in names else None
            fields = _read_note_fields(z, errors) if "collection.anki2" in names else None

            name_to_indices: dict[str, list[str]] = {}
            for idx, fn in (media_map or {}).items():
                name_to_indices.setdefault(fn, []).append(idx)
            dupes = {fn: idxs for fn, idxs in name_to_indices.items() if len(idxs) > 1}
            if dupes:
                sample = list(dupes.items())[:10]
                details = "; ".join([f"{fn}=>{idxs}" for fn, idxs in sample])
                warnings.append(f"apkg_media_mapping_duplicate_filenames: {details}")

            for flds in fields or []:
                notes += 1
                for m in _IMG_RE.finditer(flds):
                    src = unescape(m.group(1)).strip()
                    if src and not is_remote_source(src):
                        referenced.add(Path(src).name)

            if media_map is not None:
                missing_in_mapping: list[str] = []
                missing_blob: list[str] = []
                for fn in sorted(referenced):
                    idxs = name_to_indices.get(fn) or []
                    if not idxs:
                        missing_in_mapping.append(fn)
                    elif not any(idx in names for idx in idxs):
                        missing_blob.append(f"{fn} (indices={idxs})")

                if missing_in_mapping:
                    errors.append("apkg_missing_media_mapping_filenames: " + ", ".join(missing_in_mapping[:50]))
                if missing_blob:
                    errors.append("apkg_missing_media_blobs: " + ", ".join(missing_blob[:50]))
    except zipfile.BadZipFile:
        errors.append("apkg_invalid_zip")

    return not errors, {
        "notes": notes,
        "referenced_filenames": sorted(referenced),
        "warnings": warnings,
        "errors": errors,
    }
