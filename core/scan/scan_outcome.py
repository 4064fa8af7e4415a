"""
Scan Outcome Module.

The record delivered to the caller once per scan task.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

from core.scan.scan_task import ScanState, ScanTask


class ScanStatus(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    NOT_FOUND = "NOT_FOUND"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    TIMED_OUT = "TIMED_OUT"


@dataclass(frozen=True)
class ScanOutcome:
    """
    Terminal outcome of a scan.

    Attributes:
        taskId: Task identifier.
        status: Terminal status.
        payload: Decoded text (SUCCEEDED only).
        codeType: Payload classification (SUCCEEDED only).
        errorReason: Human-readable cause (FAILED only).
        errorKind: Error classification (FAILED only).
        processingTimeMs: Time from task creation to terminal state.
    """
    taskId: str
    status: ScanStatus
    payload: Optional[str] = None
    codeType: Optional[str] = None
    errorReason: Optional[str] = None
    errorKind: Optional[str] = None
    processingTimeMs: float = 0.0

    @classmethod
    def fromTask(cls, task: ScanTask) -> "ScanOutcome":
        """
        Build the outcome of a terminal task.

        Raises:
            ValueError: If the task is not terminal.
        """
        if not task.isTerminal:
            raise ValueError(f"Task {task.id} is not terminal ({task.state.value})")

        status = ScanStatus(task.state.value)
        result = task.result
        outcome = cls(
            taskId=task.id,
            status=status,
            processingTimeMs=round(task.elapsedMs(), 2)
        )

        if result is None:
            return outcome

        if task.state == ScanState.SUCCEEDED:
            return cls(
                taskId=task.id,
                status=status,
                payload=result.payload,
                codeType=result.codeType,
                processingTimeMs=outcome.processingTimeMs
            )

        if task.state == ScanState.FAILED:
            return cls(
                taskId=task.id,
                status=status,
                errorReason=result.errorReason,
                errorKind=result.errorKind,
                processingTimeMs=outcome.processingTimeMs
            )

        return outcome

    def toDict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict, dropping empty fields."""
        data = asdict(self)
        data["status"] = self.status.value
        return {k: v for k, v in data.items() if v is not None}
