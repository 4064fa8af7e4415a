"""
Normalization Service Interface Module.

Defines the interface for the normalization stage (Step 1 of the pipeline).
Responsible for producing the bounded-resolution canonical image.

Follows:
- SRP: Only handles normalization operations
- DIP: Depends on IImageNormalizer abstraction from core layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from core.interfaces.image_normalizer_interface import NormalizedImage
from core.interfaces.image_source_interface import ImageSource


@dataclass
class NormalizationServiceResult:
    """
    Result of the normalization service.

    Attributes:
        image: Canonical image.
        taskId: Task identifier for debug output.
        processingTimeMs: Time taken for normalization.
    """
    image: NormalizedImage
    taskId: str
    processingTimeMs: float = 0.0


class INormalizationService(ABC):
    """
    Interface for normalization operations (Step 1).
    """

    @abstractmethod
    def normalize(self, source: ImageSource, taskId: str) -> NormalizationServiceResult:
        """
        Normalize a source image.

        Args:
            source: Picked image reference.
            taskId: Task identifier for logging and debug output.

        Returns:
            NormalizationServiceResult with the canonical image.

        Raises:
            NormalizationError: If the source cannot be read or re-encoded.
        """
        pass
