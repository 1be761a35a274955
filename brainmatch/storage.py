# brainmatch/storage.py
"""
Persistence of the "resumable" flag.

A store holds at most one SavedGame: the deck of the last game that was
completed naturally. Its presence is what makes resume() possible.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SavedGame:
    deck: tuple

    def to_dict(self) -> dict:
        return {"resumable": True, "deck": list(self.deck)}


class MemoryStore:
    """Keeps the saved game for the lifetime of the process."""

    def __init__(self, saved: Optional[SavedGame] = None):
        self._saved = saved

    def load(self) -> Optional[SavedGame]:
        return self._saved

    def save(self, saved: SavedGame) -> None:
        self._saved = saved

    def clear(self) -> None:
        self._saved = None


class JsonFileStore:
    """
    Keeps the saved game in a JSON file so it survives a restart.

    File format: {"resumable": true, "deck": ["A", "A", ...]}
    A missing, unreadable or malformed file means "nothing saved".
    """

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Optional[SavedGame]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return None

        if not isinstance(data, dict) or data.get("resumable") is not True:
            return None
        deck = data.get("deck")
        if not isinstance(deck, list) or not deck:
            logger.warning(f"Ignoring state file {self.path}: missing deck")
            return None
        return SavedGame(deck=tuple(deck))

    def save(self, saved: SavedGame) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(saved.to_dict(), f, ensure_ascii=False)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logger.info(f"Saved completed game to {self.path}")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


def open_store(path: Optional[str]):
    """JsonFileStore when a path is given, MemoryStore otherwise."""
    if path:
        return JsonFileStore(path)
    return MemoryStore()
