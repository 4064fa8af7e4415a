"""
QR Detection Service Interface Module.

Defines the interface for QR code detection operations (Step 3 of the pipeline).
Responsible for locating and decoding one QR code in a pixel buffer.

Follows:
- SRP: Only handles QR detection operations
- DIP: Depends on IQrDetector abstraction from core layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from core.interfaces.format_decoder_interface import PixelBuffer
from core.interfaces.qr_detector_interface import QrDetectionResult


@dataclass
class QrDetectionServiceResult:
    """
    Result of the QR detection service.

    Attributes:
        qrData: QR detection result with decoded data (None = not found).
        taskId: Task identifier for debug output.
        success: Whether a QR code was found.
        processingTimeMs: Time taken for QR detection.
    """
    qrData: Optional[QrDetectionResult]
    taskId: str
    success: bool
    processingTimeMs: float = 0.0


class IQrDetectionService(ABC):
    """
    Interface for QR detection operations (Step 3).

    "Not found" is reported as success=False with no error;
    only backend faults raise.
    """

    @abstractmethod
    def detectQr(
        self,
        pixelBuffer: PixelBuffer,
        taskId: str
    ) -> QrDetectionServiceResult:
        """
        Detect and decode QR code from a pixel buffer.

        Args:
            pixelBuffer: Decoded RGBA pixels.
            taskId: Task identifier for debug output.

        Returns:
            QrDetectionServiceResult: QR detection result with metadata.

        Raises:
            DetectionError: If the detector backend faults.
        """
        pass
