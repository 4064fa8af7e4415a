"""
File Image Source Implementation.

Acquires an image reference from the local filesystem, standing in for
the platform image picker. Refusals happen here, before any scan task
is created.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from core.codec.container_format import ContainerFormat
from core.codec.image_normalizer import sourcePath
from core.errors import PermissionDeniedError
from core.interfaces.image_source_interface import IImageSourceProvider, ImageSource


logger = logging.getLogger(__name__)


class FileImageSource(IImageSourceProvider):
    """
    Filesystem-backed image source provider.

    Access is refused when the file exists but is not readable, or when
    allowed roots are configured and the path lies outside all of them.
    A missing file is not refused here; reading it fails in the
    normalization stage like any other unreadable source.
    """

    def __init__(self, allowedRoots: Optional[Sequence[str]] = None):
        """
        Initialize FileImageSource.

        Args:
            allowedRoots: Directories images may be read from (empty = anywhere).
        """
        self._allowedRoots: List[Path] = [
            Path(root).expanduser().resolve() for root in (allowedRoots or [])
        ]

    def acquire(
        self,
        location: str,
        declaredFormat: Optional[ContainerFormat] = None
    ) -> ImageSource:
        path = sourcePath(location).expanduser()
        resolved = path.resolve()

        if self._allowedRoots and not any(
            resolved == root or root in resolved.parents for root in self._allowedRoots
        ):
            logger.warning(f"Access outside allowed roots refused: {resolved}")
            raise PermissionDeniedError(
                f"Access to '{path}' is not permitted"
            )

        if resolved.exists() and not os.access(resolved, os.R_OK):
            logger.warning(f"Image not readable: {resolved}")
            raise PermissionDeniedError(
                f"Permission denied reading '{path}'"
            )

        return ImageSource(uri=str(path), declaredFormat=declaredFormat)
