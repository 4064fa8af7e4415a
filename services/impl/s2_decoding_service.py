"""
S2 Decoding Service Implementation.

Step 2 of the pipeline: decode canonical image bytes to RGBA pixels.
Creates and manages FormatDecoder from core layer.

Follows:
- SRP: Only handles container decoding
- DIP: Depends on IFormatDecoder abstraction (interface)
"""

import time
from typing import Optional, Sequence

from core.codec.container_format import ContainerFormat
from core.codec.format_decoder import FormatDecoder
from core.interfaces.format_decoder_interface import IFormatDecoder
from core.interfaces.image_normalizer_interface import NormalizedImage
from services.interfaces.base_service_interface import BaseService
from services.interfaces.decoding_service_interface import (
    DecodingServiceResult,
    IDecodingService
)


class S2DecodingService(IDecodingService, BaseService):
    """
    Step 2: Decoding Service Implementation.

    Decodes under the canonical format first and falls back through
    the configured format order (legacy paths may bypass normalization).
    """

    SERVICE_NAME = "s2_decoding"

    def __init__(
        self,
        fallbackOrder: Optional[Sequence[ContainerFormat]] = None,
        allowFallback: bool = True,
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False
    ):
        """
        Initialize S2DecodingService.

        Args:
            fallbackOrder: Ordered formats to try after the preferred one.
            allowFallback: If False, only the preferred format is tried.
            debugBasePath: Base path for debug output.
            debugEnabled: Whether to save debug output.
        """
        BaseService.__init__(
            self,
            serviceName=self.SERVICE_NAME,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        self._decoder: IFormatDecoder = FormatDecoder(
            fallbackOrder=fallbackOrder,
            allowFallback=allowFallback,
            logger=self._logger
        )

        self._logger.info(
            f"S2DecodingService initialized "
            f"(fallbackOrder={[f.value for f in self._decoder.fallbackOrder]}, "
            f"allowFallback={allowFallback})"
        )

    def decode(
        self,
        image: NormalizedImage,
        taskId: str,
        uri: Optional[str] = None
    ) -> DecodingServiceResult:
        startTime = time.time()

        pixelBuffer = self._decoder.decode(image.data, image.containerFormat, uri)
        processingTimeMs = self._measureTime(startTime)

        self._saveDebugJson(taskId, {
            "taskId": taskId,
            "declaredFormat": image.containerFormat.value if image.containerFormat else None,
            "decodedFormat": pixelBuffer.containerFormat.value,
            "width": pixelBuffer.width,
            "height": pixelBuffer.height,
        }, "decoded")

        self._logTiming(taskId, processingTimeMs)

        return DecodingServiceResult(
            pixelBuffer=pixelBuffer,
            taskId=taskId,
            processingTimeMs=processingTimeMs
        )
