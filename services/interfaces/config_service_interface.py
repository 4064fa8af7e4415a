"""
Config Service Interface Module.

Read-only view of the scanner settings consumed by the orchestrator when it
wires the pipeline: scan timeout, per-stage parameters, history storage and
the directories images may be picked from. Only the debug flag can change
at runtime.
"""

from abc import ABC, abstractmethod
from typing import Any, List

from core.codec.container_format import ContainerFormat


class IConfigService(ABC):
    """
    Scanner configuration, one getter per setting.

    Implementations resolve missing keys to the documented defaults so
    callers never see None for a known setting.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """
        Raw lookup by dot-notation key, e.g. "s2_decoding.allowFallback".
        """
        pass

    # Debug

    @abstractmethod
    def getDebugBasePath(self) -> str:
        pass

    @abstractmethod
    def isDebugEnabled(self) -> bool:
        pass

    @abstractmethod
    def setDebugEnabled(self, enabled: bool) -> None:
        pass

    # Pipeline

    @abstractmethod
    def getTimeoutSeconds(self) -> float:
        """Default time limit of one scan (default 10s)."""
        pass

    # S1 normalization

    @abstractmethod
    def isNormalizationEnabled(self) -> bool:
        pass

    @abstractmethod
    def getTargetWidth(self) -> int:
        """Canonical image width in pixels (default 500)."""
        pass

    @abstractmethod
    def getCanonicalFormat(self) -> ContainerFormat:
        pass

    @abstractmethod
    def getJpegQuality(self) -> int:
        pass

    # S2 decoding

    @abstractmethod
    def getFallbackOrder(self) -> List[ContainerFormat]:
        """Formats tried after the declared/inferred one."""
        pass

    @abstractmethod
    def isDecodeFallbackEnabled(self) -> bool:
        """If False, only the declared/inferred format is attempted."""
        pass

    # S3 QR detection

    @abstractmethod
    def getQrBackend(self) -> str:
        """Detector backend name ("zxing" or "pyzbar")."""
        pass

    @abstractmethod
    def isQrTryRotate(self) -> bool:
        pass

    @abstractmethod
    def isQrTryDownscale(self) -> bool:
        pass

    # History / source

    @abstractmethod
    def getHistoryPath(self) -> str:
        pass

    @abstractmethod
    def getHistoryMaxEntries(self) -> int:
        """Newest entries kept in history (0 = unlimited)."""
        pass

    @abstractmethod
    def getAllowedRoots(self) -> List[str]:
        """Directories images may be read from (empty = anywhere)."""
        pass
