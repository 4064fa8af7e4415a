"""
Services Implementation Package.

Exports all service implementations for the QR Image Scanner pipeline.
"""

from services.impl.config_service import ConfigService
from services.impl.file_image_source import FileImageSource
from services.impl.json_history_store import JsonHistoryStore
from services.impl.logging_notifier import LoggingNotifier
from services.impl.result_sink import ResultSink
from services.impl.s1_normalization_service import S1NormalizationService
from services.impl.s2_decoding_service import S2DecodingService
from services.impl.s3_qr_detection_service import S3QrDetectionService


__all__ = [
    "ConfigService",
    "FileImageSource",
    "JsonHistoryStore",
    "LoggingNotifier",
    "ResultSink",
    "S1NormalizationService",
    "S2DecodingService",
    "S3QrDetectionService",
]
