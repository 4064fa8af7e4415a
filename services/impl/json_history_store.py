"""
JSON History Store Implementation.

Append-only scan history persisted as a JSON document. Entries live
under the fixed key "scanHistory"; other keys in the document are kept
untouched so the file can be shared with other settings.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from services.interfaces.history_store_interface import HistoryEntry, IHistoryStore


logger = logging.getLogger(__name__)


class JsonHistoryStore(IHistoryStore):
    """
    History store backed by a JSON file (or memory only when path is None).
    """

    STORAGE_KEY = "scanHistory"

    def __init__(self, path: Optional[str] = None, maxEntries: int = 0):
        """
        Initialize JsonHistoryStore.

        Args:
            path: JSON file path. None keeps history in memory only.
            maxEntries: Keep at most this many newest entries (0 = unlimited).
        """
        self._path = Path(path) if path else None
        self._maxEntries = maxEntries
        self._lock = threading.Lock()
        self._document: Dict[str, Any] = {}
        self._entries: List[HistoryEntry] = []

        if self._path is not None:
            self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return

        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in history file {self._path}: {e}")
            return

        if not isinstance(document, dict):
            logger.error(f"History file {self._path} is not a JSON object, ignoring")
            return

        self._document = document
        self._entries = [
            HistoryEntry.fromDict(item)
            for item in document.get(self.STORAGE_KEY, [])
            if isinstance(item, dict) and "id" in item
        ]
        logger.info(f"Loaded {len(self._entries)} history entries from {self._path}")

    def _save(self, entries: List[HistoryEntry]) -> None:
        """
        Write entries to disk via a temporary file.

        The in-memory document is only updated once the file has been
        replaced; on OSError the temporary file is removed and the
        error propagates.
        """
        if self._path is None:
            return

        document = dict(self._document)
        document[self.STORAGE_KEY] = [entry.toDict() for entry in entries]
        self._path.parent.mkdir(parents=True, exist_ok=True)

        tmpPath = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            with open(tmpPath, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(tmpPath, self._path)
        except OSError:
            tmpPath.unlink(missing_ok=True)
            raise
        self._document = document

    def append(self, entry: HistoryEntry) -> None:
        with self._lock:
            entries = self._entries + [entry]
            if self._maxEntries > 0 and len(entries) > self._maxEntries:
                entries = entries[-self._maxEntries:]
            self._save(entries)
            self._entries = entries
        logger.debug(f"History entry appended: {entry.id} ({entry.type})")

    def list(self) -> List[HistoryEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._save([])
            self._entries = []
        logger.info("History cleared")
