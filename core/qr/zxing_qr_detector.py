"""
ZXing QR Code Detector Implementation.

This module provides QR code detection using the zxing-cpp library.
zxing-cpp is a high-performance C++ implementation with Python bindings.

Follows the Single Responsibility Principle (SRP) from SOLID.
"""

import logging
from typing import Optional

import cv2
import numpy as np

from core.errors import DetectionError
from core.interfaces.qr_detector_interface import IQrDetector, QrDetectionResult
from core.qr.payload_classifier import classifyPayload


class ZxingQrDetector(IQrDetector):
    """
    QR code detector using zxing-cpp library.

    Returns the first valid QR code found in the image together with
    its payload classification.
    """

    def __init__(
        self,
        tryRotate: bool = True,
        tryDownscale: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize ZxingQrDetector.

        Args:
            tryRotate: Try rotated barcodes (90/270 degrees)
            tryDownscale: Try downscaled versions for better detection
            logger: Logger instance for debug output
        """
        self._tryRotate = tryRotate
        self._tryDownscale = tryDownscale
        self._logger = logger or logging.getLogger(__name__)
        self._zxingcpp = None

        self._logger.info(
            f"ZxingQrDetector initialized "
            f"(tryRotate={tryRotate}, tryDownscale={tryDownscale})"
        )

    def _ensureZxing(self) -> None:
        """Lazily import zxing-cpp module."""
        if self._zxingcpp is None:
            try:
                import zxingcpp
                self._zxingcpp = zxingcpp
                self._logger.info("zxing-cpp module loaded successfully")
            except ImportError as e:
                self._logger.error(
                    f"Failed to import zxing-cpp. "
                    f"Please install: pip install zxing-cpp. Error: {e}"
                )
                raise

    def detect(self, image: np.ndarray) -> Optional[QrDetectionResult]:
        """
        Detect and decode QR code in image.

        Args:
            image: Input image (RGBA, RGB or grayscale)

        Returns:
            QrDetectionResult if a QR code was found, None otherwise
        """
        self._ensureZxing()

        grayImage = toGray(image)

        try:
            barcodes = self._zxingcpp.read_barcodes(
                grayImage,
                formats=self._zxingcpp.BarcodeFormat.QRCode,
                try_rotate=self._tryRotate,
                try_downscale=self._tryDownscale
            )
        except Exception as e:
            raise DetectionError(f"QR detection failed: {e}") from e

        for barcode in barcodes:
            if not barcode.valid:
                continue

            qrText = barcode.text
            self._logger.debug(f"QR code detected: {qrText}")

            # Extract polygon (4 corners)
            position = barcode.position
            polygon = [
                (position.top_left.x, position.top_left.y),
                (position.top_right.x, position.top_right.y),
                (position.bottom_right.x, position.bottom_right.y),
                (position.bottom_left.x, position.bottom_left.y)
            ]

            xs = [p[0] for p in polygon]
            ys = [p[1] for p in polygon]
            rect = (min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))

            return QrDetectionResult(
                text=qrText,
                symbology=barcode.format.name,
                polygon=polygon,
                rect=rect,
                confidence=1.0,  # zxing-cpp doesn't provide confidence score
                codeType=classifyPayload(qrText)
            )

        self._logger.debug("No valid QR code detected")
        return None


def toGray(image: np.ndarray) -> np.ndarray:
    """Convert an RGBA / RGB / grayscale array to single-channel grayscale."""
    if image.ndim == 2:
        return image
    channels = image.shape[2]
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
    return image[:, :, 0]
