"""
Image Normalizer Implementation.

Produces the canonical image used for decoding: resized to a fixed target
width (aspect ratio preserved) and re-encoded to a single container format.

Decoder and detector cost both scale with pixel count, so normalizing
first bounds worst-case scan latency regardless of how many megapixels
the original photo has.
"""

import logging
import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

import cv2
import numpy as np

from core.codec.container_format import ContainerFormat, inferFormat
from core.codec.format_decoder import FormatDecoder
from core.errors import NormalizationError
from core.interfaces.format_decoder_interface import IFormatDecoder
from core.interfaces.image_normalizer_interface import (
    IImageNormalizer,
    NormalizedImage
)
from core.interfaces.image_source_interface import ImageSource


class ImageNormalizer(IImageNormalizer):
    """
    OpenCV-backed image normalizer.

    Pipeline:
    1. Read source bytes (in-memory data, else file path / file:// URI)
    2. Decode through the format decoder (DecodeError propagates as-is)
    3. Scale to target width, maintaining aspect ratio
    4. Encode to the canonical container format
    """

    DEFAULT_TARGET_WIDTH = 500

    def __init__(
        self,
        enabled: bool = True,
        targetWidth: int = DEFAULT_TARGET_WIDTH,
        canonicalFormat: ContainerFormat = ContainerFormat.PNG,
        jpegQuality: int = 90,
        decoder: Optional[IFormatDecoder] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize ImageNormalizer.

        Args:
            enabled: If False, source bytes are passed through untouched.
            targetWidth: Canonical width in pixels.
            canonicalFormat: Container format of the canonical image.
            jpegQuality: JPEG quality when the canonical format is JPEG.
            decoder: Decoder used to read the source image.
            logger: Logger instance for debug output.
        """
        if targetWidth <= 0:
            raise ValueError(f"targetWidth must be positive, got {targetWidth}")

        self._enabled = enabled
        self._targetWidth = targetWidth
        self._canonicalFormat = canonicalFormat
        self._jpegQuality = jpegQuality
        self._logger = logger or logging.getLogger(__name__)
        self._decoder = decoder or FormatDecoder(logger=self._logger)

    @property
    def targetWidth(self) -> int:
        """Get target width for scaling."""
        return self._targetWidth

    @property
    def canonicalFormat(self) -> ContainerFormat:
        """Get canonical container format."""
        return self._canonicalFormat

    def isEnabled(self) -> bool:
        """Check if normalization is enabled."""
        return self._enabled

    def normalize(self, source: ImageSource) -> NormalizedImage:
        data = readSourceBytes(source)

        if not self._enabled:
            fmt = source.declaredFormat or inferFormat(source.uri, data)
            self._logger.debug("Normalization disabled, passing source through")
            return NormalizedImage(data=data, containerFormat=fmt, width=0, height=0)

        pixelBuffer = self._decoder.decode(data, source.declaredFormat, source.uri)
        image = cv2.cvtColor(pixelBuffer.pixels, cv2.COLOR_RGBA2BGR)

        scaled = self._applyScale(image)
        height, width = scaled.shape[:2]

        encoded = self._encode(scaled)
        self._logger.debug(
            f"Normalized {pixelBuffer.width}x{pixelBuffer.height} -> {width}x{height} "
            f"({self._canonicalFormat.value}, {len(encoded)} bytes)"
        )

        return NormalizedImage(
            data=encoded,
            containerFormat=self._canonicalFormat,
            width=width,
            height=height,
            originalWidth=pixelBuffer.width,
            originalHeight=pixelBuffer.height
        )

    def _applyScale(self, image: np.ndarray) -> np.ndarray:
        """
        Scale image to target width, maintaining aspect ratio.

        Output height is round(H * T / W), never less than one pixel.
        """
        h, w = image.shape[:2]
        if w == self._targetWidth:
            return image

        scaleFactor = self._targetWidth / w
        newW = self._targetWidth
        newH = max(1, int(round(h * scaleFactor)))

        if scaleFactor > 1.0:
            interpolation = cv2.INTER_CUBIC  # Better for enlarging
        else:
            interpolation = cv2.INTER_AREA   # Better for shrinking

        try:
            return cv2.resize(image, (newW, newH), interpolation=interpolation)
        except cv2.error as e:
            raise NormalizationError(f"Image could not be resized: {e}") from e

    def _encode(self, image: np.ndarray) -> bytes:
        if self._canonicalFormat == ContainerFormat.JPEG:
            params = [cv2.IMWRITE_JPEG_QUALITY, self._jpegQuality]
        else:
            params = [cv2.IMWRITE_PNG_COMPRESSION, 3]

        try:
            ok, buffer = cv2.imencode(self._canonicalFormat.encodeExtension, image, params)
        except cv2.error as e:
            raise NormalizationError(f"Image could not be re-encoded: {e}") from e

        if not ok:
            raise NormalizationError(
                f"Image could not be re-encoded as {self._canonicalFormat.value}"
            )
        return buffer.tobytes()


def sourcePath(uri: str) -> Path:
    """Convert a plain path or file:// URI to a filesystem path."""
    if uri.startswith("file://"):
        return Path(url2pathname(urlparse(uri).path))
    return Path(uri)


def readSourceBytes(source: ImageSource) -> bytes:
    """
    Read the bytes behind an image source.

    Raises:
        NormalizationError: If the file is missing, unreadable or empty.
    """
    if source.data is not None:
        data = source.data
    else:
        path = sourcePath(source.uri)
        try:
            data = path.read_bytes()
        except OSError as e:
            reason = os.strerror(e.errno) if e.errno else str(e)
            raise NormalizationError(f"Could not read image file '{path}': {reason}") from e

    if not data:
        raise NormalizationError("Image source is empty")
    return data
