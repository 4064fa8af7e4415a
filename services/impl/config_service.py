"""
Config Service Implementation.

Centralized configuration management for the scan pipeline.
Loads configuration from application_config.json organized by service.

Follows:
- SRP: Only handles configuration management
- DIP: Provides configuration to other services via interface
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List


from core.codec.container_format import ContainerFormat
from services.interfaces.config_service_interface import IConfigService


logger = logging.getLogger(__name__)


class ConfigService(IConfigService):
    """
    Implementation of IConfigService.

    Loads and manages application configuration from application_config.json.
    Configuration is organized by service section (s1_normalization, ...).
    """

    def __init__(self, configPath: str = "config/application_config.json"):
        """
        Initialize ConfigService.

        Args:
            configPath: Path to the configuration file.
        """
        self._config: Dict[str, Any] = {}
        self._configPath = Path(configPath)
        self._debugEnabled = False

        # Load config (required)
        if not self.loadConfig(configPath):
            raise RuntimeError(f"Failed to load configuration from: {configPath}")

    @classmethod
    def fromDict(cls, config: Dict[str, Any]) -> "ConfigService":
        """
        Create a ConfigService from an in-memory dictionary.

        Args:
            config: Configuration dictionary with the same layout as the file.
        """
        service = cls.__new__(cls)
        service._config = dict(config)
        service._configPath = Path("<memory>")
        service._debugEnabled = bool(service.get("debug.enabled", False))
        return service

    def loadConfig(self, configPath: str) -> bool:
        """Load configuration from JSON file."""
        try:
            path = Path(configPath)
            if not path.exists():
                logger.error(f"Config file not found: {configPath}")
                return False

            with open(path, 'r', encoding='utf-8') as f:
                self._config = json.load(f)

            # Initialize debug state from config
            self._debugEnabled = self.get("debug.enabled", False)

            logger.info(f"Configuration loaded from: {path.absolute()}")
            return True

        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in config file: {e}")
            return False
        except OSError as e:
            logger.error(f"Failed to load config: {e}")
            return False

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Generic Config Access
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key with dot notation support.

        Examples:
            get("pipeline.timeoutSeconds") -> 10
            get("s1_normalization.targetWidth") -> 500
            get("s3_qr_detection.backend") -> "zxing"
        """
        value = self._config
        for part in key.split('.'):
            if not isinstance(value, dict):
                return default
            value = value.get(part)
            if value is None:
                return default
        return value

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Debug Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getDebugBasePath(self) -> str:
        """Get base path for debug output."""
        return self.get("debug.basePath", "output/debug")

    def isDebugEnabled(self) -> bool:
        """Check if debug mode is enabled."""
        return self._debugEnabled

    def setDebugEnabled(self, enabled: bool) -> None:
        """Enable or disable debug mode at runtime."""
        self._debugEnabled = enabled
        logger.info(f"Debug mode {'enabled' if enabled else 'disabled'}")

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Pipeline Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getTimeoutSeconds(self) -> float:
        """Get scan timeout in seconds."""
        return float(self.get("pipeline.timeoutSeconds", 10.0))

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # S1 Normalization Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def isNormalizationEnabled(self) -> bool:
        """Check if normalization is enabled."""
        return self.get("s1_normalization.enabled", True)

    def getTargetWidth(self) -> int:
        """Get canonical image width."""
        return int(self.get("s1_normalization.targetWidth", 500))

    def getCanonicalFormat(self) -> ContainerFormat:
        """Get canonical container format."""
        return ContainerFormat.parse(self.get("s1_normalization.canonicalFormat", "png"))

    def getJpegQuality(self) -> int:
        """Get JPEG quality for canonical JPEG output."""
        return int(self.get("s1_normalization.jpegQuality", 90))

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # S2 Decoding Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getFallbackOrder(self) -> List[ContainerFormat]:
        """Get ordered list of formats the decoder falls back to."""
        names = self.get("s2_decoding.fallbackOrder", ["png", "jpeg"])
        return [ContainerFormat.parse(name) for name in names]

    def isDecodeFallbackEnabled(self) -> bool:
        """Check if format fallback is enabled."""
        return self.get("s2_decoding.allowFallback", True)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # S3 QR Detection Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getQrBackend(self) -> str:
        """Get QR detection backend."""
        return self.get("s3_qr_detection.backend", "zxing")

    def isQrTryRotate(self) -> bool:
        """Check if QR try rotate is enabled."""
        return self.get("s3_qr_detection.tryRotate", True)

    def isQrTryDownscale(self) -> bool:
        """Check if QR try downscale is enabled."""
        return self.get("s3_qr_detection.tryDownscale", True)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # History Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getHistoryPath(self) -> str:
        """Get path of the JSON history file."""
        return self.get("history.path", "output/history.json")

    def getHistoryMaxEntries(self) -> int:
        """Get maximum number of history entries kept (0 = unlimited)."""
        return int(self.get("history.maxEntries", 0))

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Source Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getAllowedRoots(self) -> List[str]:
        """Get directories images may be read from (empty = anywhere)."""
        return list(self.get("source.allowedRoots", []))
