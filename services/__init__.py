# Services module for QR Image Scanner
# Contains business logic services

# Pipeline services are in services/impl/
# Import them directly from there:
# from services.impl.s1_normalization_service import S1NormalizationService
# from services.pipeline_orchestrator import PipelineOrchestrator
# etc.

__all__ = []
