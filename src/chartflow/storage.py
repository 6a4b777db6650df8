"""Saved chart history, kept as one JSON collection under a fixed key.

Reads never raise: a missing, corrupt or unreadable file is an empty
history. Writes go through a temp file + rename.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from .models import SavedChartRecord

logger = logging.getLogger(__name__)

STORAGE_KEY = "chartflow_history"


class ChartStore:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
            logger.warning("Ignoring unreadable chart history %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    def list(self) -> list[SavedChartRecord]:
        """Saved charts, most recently created first."""
        items = self._load().get(STORAGE_KEY, [])
        if not isinstance(items, list):
            logger.warning("Chart history in %s is not a list; ignoring it", self.path)
            return []
        records = []
        for item in items:
            try:
                records.append(SavedChartRecord.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed saved chart: %s", exc)
        return records

    def _write(self, records: list[SavedChartRecord]) -> None:
        data = self._load()
        data[STORAGE_KEY] = [r.to_dict() for r in records]
        self._save(data)

    def upsert(self, record: SavedChartRecord) -> None:
        """Replace the record with the same id in place, or add it at the front."""
        records = self.list()
        for i, existing in enumerate(records):
            if existing.id == record.id:
                records[i] = record
                break
        else:
            records.insert(0, record)
        self._write(records)
        logger.debug("Saved chart %s (%s)", record.id, record.title)

    def get(self, chart_id: str) -> SavedChartRecord | None:
        return next((r for r in self.list() if r.id == chart_id), None)

    def delete(self, chart_id: str) -> list[SavedChartRecord]:
        records = [r for r in self.list() if r.id != chart_id]
        self._write(records)
        return records

    def clear(self) -> None:
        data = self._load()
        if data.pop(STORAGE_KEY, None) is not None:
            self._save(data)
