"""
Decoding Service Interface Module.

Defines the interface for the decoding stage (Step 2 of the pipeline).
Responsible for turning canonical image bytes into an RGBA pixel buffer.

Follows:
- SRP: Only handles container decoding
- DIP: Depends on IFormatDecoder abstraction from core layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from core.interfaces.format_decoder_interface import PixelBuffer
from core.interfaces.image_normalizer_interface import NormalizedImage


@dataclass
class DecodingServiceResult:
    """
    Result of the decoding service.

    Attributes:
        pixelBuffer: Decoded RGBA pixels.
        taskId: Task identifier for debug output.
        processingTimeMs: Time taken for decoding.
    """
    pixelBuffer: PixelBuffer
    taskId: str
    processingTimeMs: float = 0.0


class IDecodingService(ABC):
    """
    Interface for decoding operations (Step 2).
    """

    @abstractmethod
    def decode(
        self,
        image: NormalizedImage,
        taskId: str,
        uri: Optional[str] = None
    ) -> DecodingServiceResult:
        """
        Decode a canonical image.

        Args:
            image: Output of the normalization stage.
            taskId: Task identifier for logging and debug output.
            uri: Original source URI, used for format inference.

        Returns:
            DecodingServiceResult with the pixel buffer.

        Raises:
            DecodeError: If no supported format decodes the bytes.
        """
        pass
