"""
CSV audit log of past analyses, plus the recommendation view built from it.
"""

from __future__ import annotations

import csv
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .models import AnalysisResult

FIELDNAMES = [
    "id",
    "created_at",
    "user_id",
    "command",
    "product_name",
    "product_type",
    "score",
    "band",
    "positive_ingredients",
    "negative_ingredients",
    "verdict",
    "healthier_alternative",
]

JSON_FIELDS = ("positive_ingredients", "negative_ingredients", "healthier_alternative")


class HistoryStore:
    def __init__(self, path: str = "db/history/history.csv"):
        self.path = Path(path)
        self._lock = threading.Lock()
        self.log = logging.getLogger(self.__class__.__name__)

    def append(
        self,
        result: AnalysisResult,
        user_id: Optional[str] = None,
        command: str = "cli",
    ) -> int:
        """Persist one analysis and return its numeric id. IO errors propagate."""
        payload = result.to_dict()
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            row_id = self._next_id()
            row = {
                "id": row_id,
                "created_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
                "user_id": user_id or "",
                "command": command,
                "product_name": payload["product_name"],
                "product_type": payload["product_type"],
                "score": payload["score"],
                "band": payload["band"],
                "verdict": payload["verdict"],
            }
            for key in JSON_FIELDS:
                row[key] = json.dumps(payload[key], ensure_ascii=False)

            write_header = not self.path.exists()
            with self.path.open("a", newline="", encoding="utf-8") as fh:
                writer = csv.DictWriter(fh, fieldnames=FIELDNAMES)
                if write_header:
                    writer.writeheader()
                writer.writerow(row)
        self.log.info("Saved analysis %d for %r", row_id, payload["product_name"])
        return row_id

    def rows(self, user_id: Optional[str] = None) -> List[Dict[str, object]]:
        """Stored analyses, newest first, optionally restricted to one user."""
        if not self.path.exists():
            return []
        records: List[Dict[str, object]] = []
        with self.path.open("r", newline="", encoding="utf-8") as fh:
            for row in csv.DictReader(fh):
                if user_id is not None and row.get("user_id") != user_id:
                    continue
                records.append(self._decode(row))
        records.sort(key=lambda r: r["id"], reverse=True)
        return records

    def recommendations(self, user_id: Optional[str] = None) -> List[Dict[str, object]]:
        """Past low-scoring products that came with a healthier alternative."""
        return [
            {
                "id": row["id"],
                "created_at": row["created_at"],
                "product_name": row["product_name"],
                "score": row["score"],
                "alternative": row["healthier_alternative"],
            }
            for row in self.rows(user_id=user_id)
            if row["healthier_alternative"]
        ]

    def _next_id(self) -> int:
        if not self.path.exists():
            return 1
        last_id = 0
        with self.path.open("r", newline="", encoding="utf-8") as fh:
            for row in csv.DictReader(fh):
                try:
                    last_id = max(last_id, int(row.get("id", 0)))
                except ValueError:
                    continue
        return last_id + 1

    @staticmethod
    def _decode(row: Dict[str, str]) -> Dict[str, object]:
        record: Dict[str, object] = dict(row)
        record["id"] = int(row["id"])
        record["score"] = int(row["score"]) if row.get("score") else None
        for key in JSON_FIELDS:
            text = row.get(key) or ""
            record[key] = json.loads(text) if text else None
        return record
