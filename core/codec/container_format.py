"""
Container Format Module.

Tagged variant over the image container formats the pipeline understands.
Each format knows its magic-byte signature, file extensions and the
OpenCV encoder extension, so fallback policy can be expressed as an
ordered list of formats instead of nested try/except chains.
"""

from enum import Enum
from pathlib import PurePosixPath
from typing import List, Optional, Sequence
from urllib.parse import urlparse


class ContainerFormat(Enum):
    """Supported image container formats."""

    JPEG = "jpeg"
    PNG = "png"

    @property
    def signature(self) -> bytes:
        """Magic bytes every file of this format starts with."""
        return _SIGNATURES[self]

    @property
    def extensions(self) -> List[str]:
        """Lower-case file extensions (with dot) for this format."""
        return _EXTENSIONS[self]

    @property
    def encodeExtension(self) -> str:
        """Extension passed to cv2.imencode."""
        return _EXTENSIONS[self][0]

    @property
    def trailer(self) -> bytes:
        """Marker that must appear after the signature in a complete stream."""
        return _TRAILERS[self]

    def matches(self, data: bytes) -> bool:
        """Check whether data carries this format's signature."""
        return bool(data) and data.startswith(self.signature)

    def isComplete(self, data: bytes) -> bool:
        """Check whether a matching stream also carries its end marker."""
        return self.matches(data) and data.rfind(self.trailer) >= len(self.signature)

    @classmethod
    def parse(cls, value: str) -> "ContainerFormat":
        """
        Parse a format name ("png", "jpeg", "jpg", ".png").

        Raises:
            ValueError: If the name is not a supported format.
        """
        name = value.lower().strip().lstrip(".")
        if name == "jpg":
            name = "jpeg"
        for fmt in cls:
            if fmt.value == name:
                return fmt
        raise ValueError(
            f"Unsupported container format: '{value}'. "
            f"Supported: {[f.value for f in cls]}"
        )


_SIGNATURES = {
    ContainerFormat.JPEG: b"\xff\xd8\xff",
    ContainerFormat.PNG: b"\x89PNG\r\n\x1a\n",
}

# End of image (JPEG EOI marker) / final PNG chunk type
_TRAILERS = {
    ContainerFormat.JPEG: b"\xff\xd9",
    ContainerFormat.PNG: b"IEND",
}

_EXTENSIONS = {
    ContainerFormat.JPEG: [".jpg", ".jpeg", ".jpe", ".jfif"],
    ContainerFormat.PNG: [".png"],
}


def formatFromUri(uri: Optional[str]) -> Optional[ContainerFormat]:
    """
    Infer format from the file extension of a path or URI.

    Returns:
        ContainerFormat, or None if the extension is unknown or missing.
    """
    if not uri:
        return None

    path = urlparse(uri).path if "://" in uri else uri
    suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower()
    for fmt in ContainerFormat:
        if suffix in fmt.extensions:
            return fmt
    return None


def formatFromBytes(data: Optional[bytes]) -> Optional[ContainerFormat]:
    """Sniff format from magic bytes."""
    if not data:
        return None
    for fmt in ContainerFormat:
        if fmt.matches(data):
            return fmt
    return None


def inferFormat(
    uri: Optional[str] = None,
    data: Optional[bytes] = None
) -> Optional[ContainerFormat]:
    """
    Infer a container format: file extension first, then magic bytes.

    Args:
        uri: Source path or URI.
        data: Raw image bytes.

    Returns:
        Inferred format, or None.
    """
    return formatFromUri(uri) or formatFromBytes(data)


def buildAttemptOrder(
    preferred: Optional[ContainerFormat],
    fallbackOrder: Sequence[ContainerFormat]
) -> List[ContainerFormat]:
    """
    Build the ordered list of formats to try.

    The preferred format (declared or inferred) comes first, followed by
    the remaining formats of the fallback order without duplicates.
    """
    order: List[ContainerFormat] = []
    if preferred is not None:
        order.append(preferred)
    for fmt in fallbackOrder:
        if fmt not in order:
            order.append(fmt)
    return order
