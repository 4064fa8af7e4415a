"""
Scan Task Module.

A ScanTask is one attempt to decode a code from a single image. It owns
the state machine and the only state mutated by more than one actor
(stage runner, user cancel, timeout timer).

State machine:
    CREATED -> NORMALIZING -> DECODING -> DETECTING -> SUCCEEDED | NOT_FOUND
    any non-terminal -> FAILED | CANCELLED | TIMED_OUT

Every transition goes through the task lock. Terminal transitions are a
check-and-set: the first claimant wins, later claimants get False.
"""

import threading
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from core.interfaces.image_source_interface import ImageSource
from core.scan.cancel_token import CancelToken


class ScanState(str, Enum):
    CREATED = "CREATED"
    NORMALIZING = "NORMALIZING"
    DECODING = "DECODING"
    DETECTING = "DETECTING"
    SUCCEEDED = "SUCCEEDED"
    NOT_FOUND = "NOT_FOUND"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    TIMED_OUT = "TIMED_OUT"


TERMINAL_STATES: FrozenSet[ScanState] = frozenset({
    ScanState.SUCCEEDED,
    ScanState.NOT_FOUND,
    ScanState.FAILED,
    ScanState.CANCELLED,
    ScanState.TIMED_OUT,
})

# States that carry a ScanResult
RESULT_STATES: FrozenSet[ScanState] = frozenset({
    ScanState.SUCCEEDED,
    ScanState.NOT_FOUND,
    ScanState.FAILED,
})

# Forward stage transitions; anything not listed is illegal
_STAGE_TRANSITIONS: Dict[ScanState, ScanState] = {
    ScanState.CREATED: ScanState.NORMALIZING,
    ScanState.NORMALIZING: ScanState.DECODING,
    ScanState.DECODING: ScanState.DETECTING,
}

# Terminal states reachable only from a specific state
_COMPLETION_SOURCES: Dict[ScanState, Tuple[ScanState, ...]] = {
    ScanState.SUCCEEDED: (ScanState.DETECTING,),
    ScanState.NOT_FOUND: (ScanState.DETECTING,),
}


class IllegalTransitionError(Exception):
    """Raised when a transition violates the state machine."""


@dataclass
class ScanResult:
    """
    Result carried by SUCCEEDED, NOT_FOUND and FAILED tasks.

    Attributes:
        payload: Decoded text (SUCCEEDED only).
        codeType: Payload classification (url, text, ...).
        symbology: Barcode symbology reported by the detector.
        errorKind: Error classification (FAILED only).
        errorReason: Human-readable error cause (FAILED only).
    """
    payload: Optional[str] = None
    codeType: Optional[str] = None
    symbology: Optional[str] = None
    errorKind: Optional[str] = None
    errorReason: Optional[str] = None


class ScanTask:
    """
    Unit of work for one decode attempt.
    """

    def __init__(
        self,
        source: ImageSource,
        timeoutSeconds: float,
        taskId: Optional[str] = None,
        cancelToken: Optional[CancelToken] = None
    ):
        """
        Create a task in CREATED state.

        Args:
            source: Image to scan.
            timeoutSeconds: Time limit; deadline = now + timeoutSeconds.
            taskId: Optional identifier (random hex by default).
            cancelToken: Optional shared token (a new one by default).
        """
        if timeoutSeconds <= 0:
            raise ValueError(f"timeoutSeconds must be positive, got {timeoutSeconds}")

        self.id = taskId or uuid.uuid4().hex
        self.source = source
        self.cancelToken = cancelToken or CancelToken()
        self.timeoutSeconds = timeoutSeconds
        self.createdAt = time.monotonic()
        self.deadline = self.createdAt + timeoutSeconds
        self.finishedAt: Optional[float] = None
        self.stageTimings: Dict[str, float] = {}

        self._state = ScanState.CREATED
        self._result: Optional[ScanResult] = None
        self._lock = threading.Lock()

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def result(self) -> Optional[ScanResult]:
        return self._result

    @property
    def isTerminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def remainingSeconds(self) -> float:
        """Seconds left before the deadline (never negative)."""
        return max(0.0, self.deadline - time.monotonic())

    def elapsedMs(self) -> float:
        """Milliseconds since creation (until finish once terminal)."""
        end = self.finishedAt if self.finishedAt is not None else time.monotonic()
        return (end - self.createdAt) * 1000

    def advance(self, nextState: ScanState) -> bool:
        """
        Move to the next pipeline stage.

        Returns:
            True if the stage was entered, False if the task is already
            terminal (a racing cancel/timeout won).

        Raises:
            IllegalTransitionError: If nextState is not the next stage.
        """
        with self._lock:
            if self._state in TERMINAL_STATES:
                return False
            if _STAGE_TRANSITIONS.get(self._state) != nextState:
                raise IllegalTransitionError(
                    f"Illegal transition {self._state.value} -> {nextState.value}"
                )
            self._state = nextState
            return True

    def tryFinish(self, terminalState: ScanState, result: Optional[ScanResult] = None) -> bool:
        """
        Atomically claim a terminal state.

        Args:
            terminalState: Terminal state to enter.
            result: Result for SUCCEEDED / NOT_FOUND / FAILED.

        Returns:
            True if this call won the race, False if the task was
            already terminal.

        Raises:
            IllegalTransitionError: If terminalState is not terminal, or is a
                completion state claimed outside the detecting stage.
        """
        if terminalState not in TERMINAL_STATES:
            raise IllegalTransitionError(f"{terminalState.value} is not a terminal state")

        with self._lock:
            if self._state in TERMINAL_STATES:
                return False

            allowedFrom = _COMPLETION_SOURCES.get(terminalState)
            if allowedFrom is not None and self._state not in allowedFrom:
                raise IllegalTransitionError(
                    f"Illegal transition {self._state.value} -> {terminalState.value}"
                )

            self._state = terminalState
            self._result = result if terminalState in RESULT_STATES else None
            self.finishedAt = time.monotonic()
            return True

    def recordStageTime(self, stage: str, processingTimeMs: float) -> None:
        self.stageTimings[stage] = processingTimeMs

    def __repr__(self) -> str:
        return f"ScanTask(id={self.id}, state={self._state.value})"
