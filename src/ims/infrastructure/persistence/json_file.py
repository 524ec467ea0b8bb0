"""Shared file helpers for the JSON-backed repositories.

Each repository owns one file holding a JSON list of records. Writes go
to a sibling temp file first and are moved into place, so a crash never
leaves a half-written list behind.
"""

from __future__ import annotations

import json
import os
from datetime import date, datetime
from pathlib import Path


class JsonFile:

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    def load(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def persist(self, records: list[dict]) -> None:
        tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")


# --- Value encoding -----------------------------------------------------------


def dt(raw: str | None) -> datetime | None:
    return None if raw is None else datetime.fromisoformat(raw)


def dt_str(value: datetime | date | None) -> str | None:
    return None if value is None else value.isoformat()
