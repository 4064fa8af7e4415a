"""
Live Scan Gate

Gates consumption of the continuous camera stream. While a result from
either the camera or the image pipeline is on screen, further camera
detections are ignored so the same physical code does not re-trigger.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CameraScanEvent:
    """
    Detection emitted by the live camera stream.

    Attributes:
        type: Barcode type reported by the camera (e.g., "qr").
        data: Decoded payload.
    """
    type: str
    data: str


class LiveScanGate:
    """
    One-shot gate over camera detection events.

    The first event offered while open is forwarded and closes the gate;
    resume() re-opens it once the user dismissed the result.
    """

    def __init__(self, handler: Optional[Callable[[CameraScanEvent], None]] = None):
        """
        Initialize LiveScanGate.

        Args:
            handler: Called with each forwarded event.
        """
        self._handler = handler
        self._suspended = False
        self._lock = threading.Lock()
        self._droppedCount = 0

    def setHandler(self, handler: Optional[Callable[[CameraScanEvent], None]]) -> None:
        self._handler = handler

    def offer(self, event: CameraScanEvent) -> bool:
        """
        Offer a camera event.

        Returns:
            True if the event was forwarded, False if the gate was suspended.
        """
        with self._lock:
            if self._suspended:
                self._droppedCount += 1
                return False
            self._suspended = True

        logger.debug(f"Camera detection forwarded: {event.type}")
        if self._handler is not None:
            self._handler(event)
        return True

    def suspend(self) -> None:
        """Ignore camera events until resume()."""
        with self._lock:
            self._suspended = True

    def resume(self) -> None:
        """Accept camera events again."""
        with self._lock:
            self._suspended = False
            dropped, self._droppedCount = self._droppedCount, 0
        if dropped:
            logger.debug(f"Gate resumed after ignoring {dropped} camera event(s)")

    def isSuspended(self) -> bool:
        return self._suspended
