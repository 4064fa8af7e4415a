"""QR Detection module."""

from core.qr.zxing_qr_detector import ZxingQrDetector
from core.qr.qr_detector_factory import (
    createQrDetector,
    getSupportedQrBackends
)
from core.qr.payload_classifier import classifyPayload, isLinkEligible

__all__ = [
    'ZxingQrDetector',
    'createQrDetector',
    'getSupportedQrBackends',
    'classifyPayload',
    'isLinkEligible'
]
