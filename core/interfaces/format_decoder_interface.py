"""
Format Decoder Interface Module

Defines the abstract interface for turning container bytes (JPEG, PNG)
into a normalized RGBA pixel buffer.
Follows ISP: Only contains decoding-related methods.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from core.codec.container_format import ContainerFormat


@dataclass
class PixelBuffer:
    """
    Decoded image in canonical pixel layout.

    Attributes:
        pixels: RGBA image, shape (height, width, 4), dtype uint8.
        width: Image width in pixels.
        height: Image height in pixels.
        containerFormat: Format the bytes were successfully decoded as.
    """
    pixels: np.ndarray
    width: int
    height: int
    containerFormat: ContainerFormat

    def __repr__(self) -> str:
        return (
            f"PixelBuffer({self.width}x{self.height}, "
            f"format={self.containerFormat.value})"
        )


class IFormatDecoder(ABC):
    """
    Abstract interface for container format decoding.

    Implementations try the declared/inferred format first and may fall
    back to the other known formats before giving up.
    """

    @abstractmethod
    def decode(
        self,
        data: bytes,
        containerFormat: Optional[ContainerFormat] = None,
        uri: Optional[str] = None
    ) -> PixelBuffer:
        """
        Decode container bytes to an RGBA pixel buffer.

        Args:
            data: Raw container bytes.
            containerFormat: Declared format, if known.
            uri: Source path/URI used to infer the format from its extension.

        Returns:
            PixelBuffer: Decoded pixels.

        Raises:
            DecodeError: If no supported format decodes the bytes.
        """
        pass
