"""
Logging Notifier Implementation.

Presents user-visible notices through the logging module. Used by the
command-line front end, where the log stream is the user's screen.
"""

import logging
from typing import Optional

from core.qr.payload_classifier import isLinkEligible
from core.scan.scan_outcome import ScanOutcome
from services.interfaces.notifier_interface import INotifier


class LoggingNotifier(INotifier):
    """
    Notifier writing notices to a logger.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("notifier")

    def showResult(self, outcome: ScanOutcome) -> None:
        linkHint = " (link)" if outcome.codeType and isLinkEligible(outcome.codeType) else ""
        self._logger.info(
            f"Scanned from Image! [{outcome.codeType}{linkHint}] Data: {outcome.payload}"
        )

    def showNotice(self, title: str, message: str) -> None:
        self._logger.info(f"{title}: {message}")

    def showError(self, title: str, message: str) -> None:
        self._logger.error(f"{title}: {message}")
