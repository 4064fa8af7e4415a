# Core module for QR Image Scanner
# Contains interfaces and implementations for decoding, normalization and QR detection

from core.codec.container_format import ContainerFormat, inferFormat
from core.codec.format_decoder import FormatDecoder
from core.codec.image_normalizer import ImageNormalizer
from core.errors import (
    DecodeError,
    DetectionError,
    NormalizationError,
    PermissionDeniedError,
    ScanError,
    ScanInProgressError
)
from core.interfaces.format_decoder_interface import IFormatDecoder, PixelBuffer
from core.interfaces.image_normalizer_interface import IImageNormalizer, NormalizedImage
from core.interfaces.image_source_interface import IImageSourceProvider, ImageSource
from core.interfaces.qr_detector_interface import IQrDetector, QrDetectionResult

__all__ = [
    "ContainerFormat",
    "inferFormat",
    "FormatDecoder",
    "ImageNormalizer",
    "DecodeError",
    "DetectionError",
    "NormalizationError",
    "PermissionDeniedError",
    "ScanError",
    "ScanInProgressError",
    "IFormatDecoder",
    "PixelBuffer",
    "IImageNormalizer",
    "NormalizedImage",
    "IImageSourceProvider",
    "ImageSource",
    "IQrDetector",
    "QrDetectionResult",
]
