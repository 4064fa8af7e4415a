"""
Result Sink Implementation.

Delivers the single terminal outcome of a scan task to the user and the
caller. Delivery is idempotent per task: only the first deliver() for a
task id has any effect.

Outcome mapping:
    SUCCEEDED  -> show result, append history
    NOT_FOUND  -> neutral "no code found" notice
    FAILED     -> error notice with human-readable cause
    CANCELLED  -> silent
    TIMED_OUT  -> timeout notice recommending a smaller/clearer image
"""

import logging
import threading
from collections import OrderedDict
from datetime import datetime
from typing import Callable, Optional

from core.scan.scan_outcome import ScanOutcome, ScanStatus
from core.scan.scan_task import ScanTask
from services.interfaces.history_store_interface import HistoryEntry, IHistoryStore
from services.interfaces.notifier_interface import INotifier
from services.live_scan_gate import LiveScanGate


logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[ScanOutcome], None]

NOT_FOUND_TITLE = "No QR Code Found"
NOT_FOUND_MESSAGE = "Could not detect a QR code in this image."
TIMEOUT_TITLE = "Scan Timed Out"
TIMEOUT_MESSAGE = (
    "Scanning took too long. Try a smaller or clearer image."
)
ERROR_TITLE = "Error"

# Delivered task ids remembered for duplicate detection
DEFAULT_MAX_TRACKED = 1024


class ResultSink:
    """
    Exactly-once delivery of terminal scan outcomes.
    """

    def __init__(
        self,
        notifier: INotifier,
        historyStore: Optional[IHistoryStore] = None,
        liveScanGate: Optional[LiveScanGate] = None,
        maxTracked: int = DEFAULT_MAX_TRACKED
    ):
        """
        Initialize ResultSink.

        Args:
            notifier: Presents user-visible notices.
            historyStore: Receives an entry for every successful scan.
            liveScanGate: Suspended while a result is on screen.
            maxTracked: Number of most recent task ids kept for duplicate
                detection. Older ids are forgotten.
        """
        self._notifier = notifier
        self._historyStore = historyStore
        self._liveScanGate = liveScanGate
        self._maxTracked = max(1, maxTracked)
        self._delivered: "OrderedDict[str, None]" = OrderedDict()
        self._lock = threading.Lock()

    def deliver(self, task: ScanTask, callback: Optional[OutcomeCallback] = None) -> bool:
        """
        Deliver a terminal task.

        Args:
            task: Terminal scan task.
            callback: Receives the ScanOutcome once.

        Returns:
            True if this call delivered, False if the task was already delivered.

        Raises:
            ValueError: If the task is not terminal.
        """
        if not task.isTerminal:
            raise ValueError(f"Cannot deliver non-terminal task {task.id} ({task.state.value})")

        with self._lock:
            if task.id in self._delivered:
                logger.debug(f"[{task.id}] Duplicate delivery ignored")
                return False
            self._delivered[task.id] = None
            while len(self._delivered) > self._maxTracked:
                self._delivered.popitem(last=False)

        outcome = ScanOutcome.fromTask(task)
        self._present(outcome)

        if callback is not None:
            try:
                callback(outcome)
            except Exception:
                logger.exception(f"[{task.id}] Outcome callback raised")

        logger.info(
            f"[{task.id}] Delivered {outcome.status.value} "
            f"({outcome.processingTimeMs:.2f}ms)"
        )
        return True

    def isDelivered(self, taskId: str) -> bool:
        with self._lock:
            return taskId in self._delivered

    def acknowledge(self) -> None:
        """The user dismissed the shown result; resume live scanning."""
        if self._liveScanGate is not None:
            self._liveScanGate.resume()

    def _present(self, outcome: ScanOutcome) -> None:
        if outcome.status == ScanStatus.CANCELLED:
            return

        if self._liveScanGate is not None:
            self._liveScanGate.suspend()

        if outcome.status == ScanStatus.SUCCEEDED:
            self._notifier.showResult(outcome)
            self._recordHistory(outcome)
        elif outcome.status == ScanStatus.NOT_FOUND:
            self._notifier.showNotice(NOT_FOUND_TITLE, NOT_FOUND_MESSAGE)
        elif outcome.status == ScanStatus.FAILED:
            self._notifier.showError(
                ERROR_TITLE,
                f"Failed to scan image. {outcome.errorReason or 'Unknown error'}"
            )
        elif outcome.status == ScanStatus.TIMED_OUT:
            self._notifier.showNotice(TIMEOUT_TITLE, TIMEOUT_MESSAGE)

    def _recordHistory(self, outcome: ScanOutcome) -> None:
        if self._historyStore is None:
            return

        entry = HistoryEntry(
            id=outcome.taskId,
            type=outcome.codeType or "",
            data=outcome.payload or "",
            timestamp=datetime.now().isoformat()
        )
        try:
            self._historyStore.append(entry)
        except OSError as e:
            logger.error(f"[{outcome.taskId}] Failed to record history: {e}")
