"""
Pyzbar QR Detector Implementation.

This module provides QR code detection using the pyzbar library.
Follows the Single Responsibility Principle (SRP) and
Dependency Inversion Principle (DIP) from SOLID.
"""

import logging
from typing import Optional, List

import numpy as np
from pyzbar.pyzbar import decode, ZBarSymbol, Decoded

from core.errors import DetectionError
from core.interfaces.qr_detector_interface import IQrDetector, QrDetectionResult
from core.qr.payload_classifier import classifyPayload
from core.qr.zxing_qr_detector import toGray


class PyzbarQrDetector(IQrDetector):
    """
    QR code detector using pyzbar library.
    """

    def __init__(
        self,
        symbolTypes: Optional[List[ZBarSymbol]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize PyzbarQrDetector.

        Args:
            symbolTypes: List of barcode types to detect (default: QRCODE only)
            logger: Logger instance for debug output
        """
        self._symbolTypes = symbolTypes or [ZBarSymbol.QRCODE]
        self._logger = logger or logging.getLogger(__name__)

    def detect(self, image: np.ndarray) -> Optional[QrDetectionResult]:
        try:
            results: List[Decoded] = decode(toGray(image), symbols=self._symbolTypes)
        except Exception as e:
            raise DetectionError(f"QR detection failed: {e}") from e

        if not results:
            self._logger.debug("No QR code detected in image")
            return None

        # Take the first QR code found
        qr = results[0]
        text = qr.data.decode('utf-8', errors='replace')

        self._logger.debug(f"QR code detected: {text}")

        return QrDetectionResult(
            text=text,
            symbology=qr.type,
            polygon=[(p.x, p.y) for p in qr.polygon],
            rect=(qr.rect.left, qr.rect.top, qr.rect.width, qr.rect.height),
            confidence=1.0,  # zbar quality is an unscaled scan count, not a score
            codeType=classifyPayload(text)
        )
