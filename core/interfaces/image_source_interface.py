"""
Image Source Interface Module

Defines the image reference handed to the pipeline and the interface
for acquiring one from an external picker.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from core.codec.container_format import ContainerFormat


@dataclass(frozen=True)
class ImageSource:
    """
    Reference to an input image.

    Attributes:
        uri: File path or file:// URI of the image.
        data: In-memory image bytes.
        declaredFormat: Container format declared by the picker, if any.
    """
    uri: Optional[str] = None
    data: Optional[bytes] = None
    declaredFormat: Optional[ContainerFormat] = None

    def __post_init__(self):
        if self.uri is None and self.data is None:
            raise ValueError("ImageSource requires a uri or data")

    def __repr__(self) -> str:
        size = len(self.data) if self.data is not None else None
        fmt = self.declaredFormat.value if self.declaredFormat else None
        return f"ImageSource(uri={self.uri!r}, bytes={size}, format={fmt})"


class IImageSourceProvider(ABC):
    """
    Abstract interface for acquiring an image source.

    Acquisition happens before a scan task exists, so a refusal is
    surfaced immediately as PermissionDeniedError.
    """

    @abstractmethod
    def acquire(
        self,
        location: str,
        declaredFormat: Optional[ContainerFormat] = None
    ) -> ImageSource:
        """
        Acquire an image reference.

        Args:
            location: Path or URI chosen by the user.
            declaredFormat: Optional declared container format.

        Returns:
            ImageSource for the pipeline.

        Raises:
            PermissionDeniedError: If access to the source is refused.
        """
        pass
