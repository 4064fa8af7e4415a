"""
Notifier Interface Module.

Defines how user-visible notices are presented. The concrete notifier
belongs to the front end (CLI logger, dialog, toast); the result sink
only depends on this abstraction.
"""

from abc import ABC, abstractmethod

from core.scan.scan_outcome import ScanOutcome


class INotifier(ABC):
    """
    Interface for user-visible notices.
    """

    @abstractmethod
    def showResult(self, outcome: ScanOutcome) -> None:
        """
        Present a decoded payload and its classification.

        Args:
            outcome: SUCCEEDED outcome.
        """
        pass

    @abstractmethod
    def showNotice(self, title: str, message: str) -> None:
        """
        Present a neutral notice (no code found, timed out).

        Args:
            title: Short title.
            message: Notice body.
        """
        pass

    @abstractmethod
    def showError(self, title: str, message: str) -> None:
        """
        Present an error notice with a human-readable cause.

        Args:
            title: Short title.
            message: Error body.
        """
        pass
