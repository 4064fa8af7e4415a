"""
Services Interfaces Package.

Exports all service interfaces for the QR Image Scanner pipeline.
"""

from services.interfaces.base_service_interface import (
    IBaseService,
    BaseService
)

from services.interfaces.config_service_interface import IConfigService

from services.interfaces.normalization_service_interface import (
    NormalizationServiceResult,
    INormalizationService
)

from services.interfaces.decoding_service_interface import (
    DecodingServiceResult,
    IDecodingService
)

from services.interfaces.qr_detection_service_interface import (
    QrDetectionServiceResult,
    IQrDetectionService
)

from services.interfaces.history_store_interface import (
    HistoryEntry,
    IHistoryStore
)

from services.interfaces.notifier_interface import INotifier


__all__ = [
    # Base
    "IBaseService",
    "BaseService",
    # Config
    "IConfigService",
    # Step 1: Normalization
    "NormalizationServiceResult",
    "INormalizationService",
    # Step 2: Decoding
    "DecodingServiceResult",
    "IDecodingService",
    # Step 3: QR Detection
    "QrDetectionServiceResult",
    "IQrDetectionService",
    # Collaborators
    "HistoryEntry",
    "IHistoryStore",
    "INotifier",
]
