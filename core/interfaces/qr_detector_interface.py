"""
QR Detector Interface Module.

This module defines the interface and data classes for QR code detection.
Follows the Interface Segregation Principle (ISP) from SOLID.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, List, Tuple
import numpy as np


@dataclass
class QrDetectionResult:
    """
    Result of QR code detection.

    Attributes:
        text: Full decoded payload (e.g., "https://example.com")
        symbology: Barcode symbology reported by the backend (e.g., "QRCode")
        polygon: Four corners of QR code [(x,y), ...]
        rect: Bounding rectangle (left, top, width, height)
        confidence: Detection confidence score (0-1)
        codeType: Payload classification (url, email, phone, wifi, text, ...)
    """
    text: str
    symbology: str = "QRCode"
    polygon: List[Tuple[int, int]] = field(default_factory=list)
    rect: Tuple[int, int, int, int] = (0, 0, 0, 0)
    confidence: float = 1.0
    codeType: str = ""


class IQrDetector(ABC):
    """
    Interface for QR code detector.

    Implementations locate and decode one QR code in a pixel buffer.
    Detection is a pure function of the pixels: the same input always
    yields the same result.
    """

    @abstractmethod
    def detect(self, image: np.ndarray) -> Optional[QrDetectionResult]:
        """
        Detect QR code in an image.

        Args:
            image: Input image (RGBA, RGB or grayscale numpy array)

        Returns:
            QrDetectionResult if QR code found, None otherwise.
            "Not found" is an expected outcome, not an error.

        Raises:
            DetectionError: If the backend library faults.
        """
        pass
