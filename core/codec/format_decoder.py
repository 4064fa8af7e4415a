"""
Format Decoder Implementation.

Decodes JPEG / PNG container bytes into an RGBA pixel buffer using OpenCV.

Format selection:
1. Declared format, else format inferred from the URI extension / magic bytes
2. Remaining formats from the configurable fallback order

A format is only attempted when the bytes carry its signature, so the
fallback is best-effort: it recovers mislabeled files (PNG saved as .jpg),
not arbitrary malformed input.
"""

import logging
from typing import List, Optional, Sequence

import cv2
import numpy as np

from core.codec.container_format import (
    ContainerFormat,
    buildAttemptOrder,
    inferFormat
)
from core.errors import DecodeError
from core.interfaces.format_decoder_interface import IFormatDecoder, PixelBuffer


DEFAULT_FALLBACK_ORDER = [ContainerFormat.PNG, ContainerFormat.JPEG]


class FormatDecoder(IFormatDecoder):
    """
    OpenCV-backed container decoder with an ordered format fallback.
    """

    def __init__(
        self,
        fallbackOrder: Optional[Sequence[ContainerFormat]] = None,
        allowFallback: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize FormatDecoder.

        Args:
            fallbackOrder: Formats to try after the preferred one, in order.
            allowFallback: If False, only the preferred format is attempted.
            logger: Logger instance for debug output.
        """
        self._fallbackOrder: List[ContainerFormat] = list(
            fallbackOrder or DEFAULT_FALLBACK_ORDER
        )
        self._allowFallback = allowFallback
        self._logger = logger or logging.getLogger(__name__)

    @property
    def fallbackOrder(self) -> List[ContainerFormat]:
        """Get the configured fallback order."""
        return list(self._fallbackOrder)

    def attemptOrder(
        self,
        containerFormat: Optional[ContainerFormat] = None,
        uri: Optional[str] = None,
        data: Optional[bytes] = None
    ) -> List[ContainerFormat]:
        """
        Get the formats that decode() would try, in order.

        Args:
            containerFormat: Declared format, if any.
            uri: Source URI for extension-based inference.
            data: Raw bytes for signature-based inference.
        """
        preferred = containerFormat or inferFormat(uri, data)
        if not self._allowFallback and preferred is not None:
            return [preferred]
        return buildAttemptOrder(preferred, self._fallbackOrder)

    def decode(
        self,
        data: bytes,
        containerFormat: Optional[ContainerFormat] = None,
        uri: Optional[str] = None
    ) -> PixelBuffer:
        if not data:
            raise DecodeError("Image data is empty", DecodeError.CORRUPT_DATA)

        attempts = self.attemptOrder(containerFormat, uri, data)
        anySignatureMatched = False

        for fmt in attempts:
            if not fmt.matches(data):
                self._logger.debug(f"Skip {fmt.value}: signature mismatch")
                continue

            anySignatureMatched = True

            if not fmt.isComplete(data):
                self._logger.warning(f"{fmt.value} stream is truncated")
                continue

            pixels = self._decodeAs(data)
            if pixels is None:
                self._logger.warning(f"{fmt.value} decode failed, trying next format")
                continue

            height, width = pixels.shape[:2]
            self._logger.debug(f"Decoded as {fmt.value}: {width}x{height}")
            return PixelBuffer(
                pixels=pixels,
                width=width,
                height=height,
                containerFormat=fmt
            )

        if not anySignatureMatched:
            tried = ", ".join(fmt.value for fmt in attempts)
            raise DecodeError(
                f"Unknown image format (tried: {tried})",
                DecodeError.UNKNOWN_FORMAT
            )

        raise DecodeError(
            "Image data is corrupt or truncated",
            DecodeError.CORRUPT_DATA
        )

    def _decodeAs(self, data: bytes) -> Optional[np.ndarray]:
        """
        Decode bytes with OpenCV and convert to RGBA.

        Returns:
            RGBA array, or None if OpenCV rejects the data.
        """
        buffer = np.frombuffer(data, dtype=np.uint8)
        try:
            image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
        except cv2.error as e:
            self._logger.debug(f"cv2.imdecode raised: {e}")
            return None

        if image is None or image.size == 0:
            return None

        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
