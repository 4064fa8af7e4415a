"""
Scan Error Module.

Defines the error taxonomy for the scan pipeline.
Every error carries a machine-readable kind and a human-readable reason
so the orchestrator can map it to a FAILED outcome without inspecting
the exception type.

"No code found", cancellation and timeout are NOT errors; they are
terminal states of a ScanTask.
"""

from typing import Optional


class ScanError(Exception):
    """
    Base class for all scan pipeline errors.

    Attributes:
        kind: Error classification (e.g., "decode_error").
        reason: Human-readable cause, safe to show to the user.
    """

    KIND = "scan_error"

    def __init__(self, reason: str, kind: Optional[str] = None):
        super().__init__(reason)
        self.reason = reason
        self.kind = kind or self.KIND


class PermissionDeniedError(ScanError):
    """Source acquisition was refused. Raised before any task exists."""

    KIND = "permission_denied"


class NormalizationError(ScanError):
    """Source could not be read or re-encoded (corrupt file, bad color space)."""

    KIND = "normalization_error"


class DecodeError(ScanError):
    """
    No supported container format decoded the bytes.

    Attributes:
        detail: "unknown_format" when no format signature matched,
                "corrupt_data" when a format matched but decoding failed.
    """

    KIND = "decode_error"
    UNKNOWN_FORMAT = "unknown_format"
    CORRUPT_DATA = "corrupt_data"

    def __init__(self, reason: str, detail: str = CORRUPT_DATA):
        super().__init__(reason)
        self.detail = detail


class DetectionError(ScanError):
    """The detector library faulted while scanning pixels."""

    KIND = "detection_error"


class ScanInProgressError(Exception):
    """A scan was requested while another one is still active."""

    def __init__(self, activeTaskId: str):
        super().__init__(f"Scan already in progress: {activeTaskId}")
        self.activeTaskId = activeTaskId
