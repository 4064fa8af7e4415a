"""
S1 Normalization Service Implementation.

Step 1 of the pipeline: bound the resolution of the picked image and
re-encode it to the canonical container format.
Creates and manages ImageNormalizer from core layer.

Follows:
- SRP: Only handles normalization operations
- DIP: Depends on IImageNormalizer abstraction (interface)
"""

import time
from typing import Optional, Sequence

from core.codec.container_format import ContainerFormat
from core.codec.format_decoder import FormatDecoder
from core.codec.image_normalizer import ImageNormalizer
from core.interfaces.image_normalizer_interface import IImageNormalizer
from core.interfaces.image_source_interface import ImageSource
from services.interfaces.base_service_interface import BaseService
from services.interfaces.normalization_service_interface import (
    INormalizationService,
    NormalizationServiceResult
)


class S1NormalizationService(INormalizationService, BaseService):
    """
    Step 1: Normalization Service Implementation.

    Resizes the picked image to a fixed width and re-encodes it, so the
    decoding and detection stages never see tens of megapixels.
    """

    SERVICE_NAME = "s1_normalization"

    def __init__(
        self,
        enabled: bool = True,
        targetWidth: int = 500,
        canonicalFormat: ContainerFormat = ContainerFormat.PNG,
        jpegQuality: int = 90,
        fallbackOrder: Optional[Sequence[ContainerFormat]] = None,
        allowFallback: bool = True,
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False
    ):
        """
        Initialize S1NormalizationService.

        Args:
            enabled: If False, source bytes bypass normalization.
            targetWidth: Canonical width in pixels.
            canonicalFormat: Canonical container format.
            jpegQuality: JPEG quality for canonical JPEG output.
            fallbackOrder: Format order used when reading the source image.
            allowFallback: If False, only the declared/inferred format is tried.
            debugBasePath: Base path for debug output.
            debugEnabled: Whether to save debug output.
        """
        BaseService.__init__(
            self,
            serviceName=self.SERVICE_NAME,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        self._normalizer: IImageNormalizer = ImageNormalizer(
            enabled=enabled,
            targetWidth=targetWidth,
            canonicalFormat=canonicalFormat,
            jpegQuality=jpegQuality,
            decoder=FormatDecoder(
                fallbackOrder=fallbackOrder,
                allowFallback=allowFallback,
                logger=self._logger
            ),
            logger=self._logger
        )

        self._logger.info(
            f"S1NormalizationService initialized "
            f"(enabled={enabled}, targetWidth={targetWidth}, "
            f"format={canonicalFormat.value})"
        )

    def normalize(self, source: ImageSource, taskId: str) -> NormalizationServiceResult:
        """
        Normalize a source image.

        Debug image saving is NOT included in timing.
        """
        startTime = time.time()

        image = self._normalizer.normalize(source)
        processingTimeMs = self._measureTime(startTime)

        if image.containerFormat is not None:
            self._saveDebugBytes(
                taskId,
                image.data,
                image.containerFormat.encodeExtension,
                "normalized"
            )

        self._logTiming(taskId, processingTimeMs)
        self._logger.debug(f"[{taskId}] {image}")

        return NormalizationServiceResult(
            image=image,
            taskId=taskId,
            processingTimeMs=processingTimeMs
        )
