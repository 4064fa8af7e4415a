"""
Image Normalizer Interface Module

Defines the abstract interface for producing a bounded-resolution,
single-format canonical image from an arbitrary picked image.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from core.codec.container_format import ContainerFormat
from core.interfaces.image_source_interface import ImageSource


@dataclass
class NormalizedImage:
    """
    Canonical image produced by the normalizer.

    Attributes:
        data: Encoded canonical image bytes.
        containerFormat: Format of data (None when passed through unknown).
        width: Canonical width (target width unless normalization is bypassed).
        height: Canonical height, aspect ratio preserved.
        originalWidth: Width of the source image.
        originalHeight: Height of the source image.
    """
    data: bytes
    containerFormat: Optional[ContainerFormat]
    width: int
    height: int
    originalWidth: int = 0
    originalHeight: int = 0

    def __repr__(self) -> str:
        fmt = self.containerFormat.value if self.containerFormat else None
        return (
            f"NormalizedImage({self.originalWidth}x{self.originalHeight} -> "
            f"{self.width}x{self.height}, format={fmt}, "
            f"bytes={len(self.data)})"
        )


class IImageNormalizer(ABC):
    """
    Abstract interface for image normalization.

    Bounds decoder and detector cost (both scale with pixel count)
    independently of the original photo resolution.
    """

    @abstractmethod
    def normalize(self, source: ImageSource) -> NormalizedImage:
        """
        Resize and re-encode a source image.

        Args:
            source: Image reference (URI and/or bytes).

        Returns:
            NormalizedImage: Canonical image bytes with dimensions.

        Raises:
            NormalizationError: If the source cannot be read or is rejected.
        """
        pass
