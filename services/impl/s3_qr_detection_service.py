"""
S3 QR Detection Service Implementation.

Step 3 of the pipeline: QR code detection and decoding.
Creates and manages QR detector from core layer using factory pattern.

Follows:
- SRP: Only handles QR detection operations
- DIP: Depends on IQrDetector abstraction (interface)
- OCP: Extends without modifying existing code
- Factory Pattern: Uses createQrDetector() for backend selection
"""

import time
from typing import Optional

from core.interfaces.format_decoder_interface import PixelBuffer
from core.interfaces.qr_detector_interface import IQrDetector, QrDetectionResult
from core.qr import createQrDetector
from services.interfaces.base_service_interface import BaseService
from services.interfaces.qr_detection_service_interface import (
    IQrDetectionService,
    QrDetectionServiceResult
)


class S3QrDetectionService(IQrDetectionService, BaseService):
    """
    Step 3: QR Detection Service Implementation.

    Supports multiple backends (ZXing, pyzbar) via factory pattern,
    or an injected detector.
    """

    SERVICE_NAME = "s3_qr_detection"

    def __init__(
        self,
        # Backend selection
        backend: str = "zxing",

        # ZXing params (prefixed with 'zxing')
        zxingTryRotate: bool = True,
        zxingTryDownscale: bool = True,

        # Pre-built detector (skips the factory)
        detector: Optional[IQrDetector] = None,

        # Debug settings
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False
    ):
        """
        Initialize S3QrDetectionService.

        Args:
            backend: QR detection backend ("zxing" or "pyzbar").
            zxingTryRotate: (ZXing) Try rotated barcodes (90/270 degrees).
            zxingTryDownscale: (ZXing) Try downscaled versions for better detection.
            detector: Detector instance to use instead of the factory.
            debugBasePath: Base path for debug output.
            debugEnabled: Whether to save debug output.
        """
        BaseService.__init__(
            self,
            serviceName=self.SERVICE_NAME,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        self._qrDetector: IQrDetector = detector or createQrDetector(
            backend=backend,
            zxingTryRotate=zxingTryRotate,
            zxingTryDownscale=zxingTryDownscale
        )
        self._backend = backend if detector is None else type(detector).__name__

        self._logger.info(f"S3QrDetectionService initialized (backend={self._backend})")

    def detectQr(
        self,
        pixelBuffer: PixelBuffer,
        taskId: str
    ) -> QrDetectionServiceResult:
        """
        Detect and decode QR code from a pixel buffer.

        Debug output saving is NOT included in timing.
        """
        startTime = time.time()

        qrResult = self._qrDetector.detect(pixelBuffer.pixels)
        processingTimeMs = self._measureTime(startTime)

        if qrResult is None:
            self._logger.info(
                f"[{taskId}] No QR code detected "
                f"({pixelBuffer.width}x{pixelBuffer.height}, time={processingTimeMs:.2f}ms)"
            )
            return QrDetectionServiceResult(
                qrData=None,
                taskId=taskId,
                success=False,
                processingTimeMs=processingTimeMs
            )

        self._saveDebugOutput(taskId, qrResult)

        self._logTiming(taskId, processingTimeMs)
        self._logger.info(
            f"[{taskId}] QR detected: {qrResult.text} "
            f"(type={qrResult.codeType}, time={processingTimeMs:.2f}ms)"
        )

        return QrDetectionServiceResult(
            qrData=qrResult,
            taskId=taskId,
            success=True,
            processingTimeMs=processingTimeMs
        )

    def getBackend(self) -> str:
        """Get current QR detection backend."""
        return self._backend

    def _saveDebugOutput(
        self,
        taskId: str,
        qrResult: QrDetectionResult
    ) -> None:
        """Save debug output for QR detection step."""
        if not self._debugEnabled:
            return

        data = {
            "taskId": taskId,
            "text": qrResult.text,
            "symbology": qrResult.symbology,
            "codeType": qrResult.codeType,
            "polygon": qrResult.polygon,
            "rect": qrResult.rect,
            "confidence": qrResult.confidence,
            "backend": self._backend
        }
        self._saveDebugJson(taskId, data, "qr")
