"""Scan task model: states, cancellation token and outcome record."""

from core.scan.cancel_token import CancelToken
from core.scan.scan_task import (
    IllegalTransitionError,
    ScanResult,
    ScanState,
    ScanTask,
    TERMINAL_STATES
)
from core.scan.scan_outcome import ScanOutcome, ScanStatus

__all__ = [
    'CancelToken',
    'IllegalTransitionError',
    'ScanResult',
    'ScanState',
    'ScanTask',
    'TERMINAL_STATES',
    'ScanOutcome',
    'ScanStatus'
]
