"""Persisted set of locally completed item ids.

Completing an item hides it immediately, well before the backend sync lands
in Airtable. The hidden ids survive restarts in a small JSON file:

    {"completed_actionable_ids": ["rec123", "rec456"]}

The file is read once at startup and rewritten on every change. A missing or
malformed file reads as an empty set.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

STATE_KEY = "completed_actionable_ids"


class CompletedIdsFile:
    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> frozenset[str]:
        if not self.path.exists():
            return frozenset()

        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return frozenset()

        ids = data.get(STATE_KEY) if isinstance(data, dict) else None
        if not isinstance(ids, list):
            logger.warning(f"Ignoring malformed state file {self.path}")
            return frozenset()
        return frozenset(i for i in ids if isinstance(i, str))

    def save(self, ids: frozenset[str]) -> None:
        self.path.write_text(json.dumps({STATE_KEY: sorted(ids)}, indent=2) + "\n")

