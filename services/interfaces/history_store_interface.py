"""
History Store Interface Module.

Defines the append-only scan history collaborator. The pipeline only
ever calls append(), and only for successful scans.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass(frozen=True)
class HistoryEntry:
    """
    One persisted scan.

    Attributes:
        id: Task identifier of the scan.
        type: Payload classification (url, text, ...).
        data: Decoded payload.
        timestamp: ISO-8601 time of the scan.
    """
    id: str
    type: str
    data: str
    timestamp: str

    def toDict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "data": self.data,
            "timestamp": self.timestamp,
        }

    @classmethod
    def fromDict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            id=str(data["id"]),
            type=str(data.get("type", "")),
            data=str(data.get("data", "")),
            timestamp=str(data.get("timestamp", "")),
        )


class IHistoryStore(ABC):
    """
    Interface for scan history storage.
    """

    @abstractmethod
    def append(self, entry: HistoryEntry) -> None:
        """
        Append an entry to the history.

        Args:
            entry: Entry to append.
        """
        pass

    @abstractmethod
    def list(self) -> List[HistoryEntry]:
        """
        Get all entries, oldest first.

        Returns:
            List of history entries.
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries."""
        pass
