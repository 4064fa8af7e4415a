"""
Base Service Interface Module.

Defines the base interface for all pipeline stage services.
All services should inherit from IBaseService to ensure consistent behavior.

Follows:
- ISP (Interface Segregation Principle): Minimal base interface
- DIP (Dependency Inversion Principle): High-level modules depend on abstractions
"""

from abc import ABC, abstractmethod
from typing import Optional, Any, Dict
from pathlib import Path
import logging
import json
import time


class IBaseService(ABC):
    """
    Base interface for all pipeline services.

    Provides common functionality for:
    - Debug output management
    - Logging configuration
    - Timing measurement
    """

    @abstractmethod
    def setDebugEnabled(self, enabled: bool) -> None:
        """
        Enable or disable debug output.

        Args:
            enabled: True to enable debug output, False to disable.
        """
        pass

    @abstractmethod
    def isDebugEnabled(self) -> bool:
        """
        Check if debug output is enabled.

        Returns:
            bool: True if debug is enabled.
        """
        pass


class BaseService(IBaseService):
    """
    Base implementation for all pipeline services.

    Provides common functionality that can be inherited by concrete services.
    This is not an interface but a helper base class.
    """

    def __init__(
        self,
        serviceName: str,
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False
    ):
        """
        Initialize BaseService.

        Args:
            serviceName: Name of the service (e.g., "s1_normalization").
            debugBasePath: Base path for debug output.
            debugEnabled: Whether debug output is enabled.
        """
        self._debugBasePath = Path(debugBasePath) / serviceName
        self._debugEnabled = debugEnabled
        self._logger = logging.getLogger(serviceName)

        # Ensure debug directory exists if enabled
        if debugEnabled:
            self._ensureDebugDirectory()

    def setDebugEnabled(self, enabled: bool) -> None:
        """Enable or disable debug output."""
        self._debugEnabled = enabled
        if enabled:
            self._ensureDebugDirectory()
        self._logger.info(f"Debug {'enabled' if enabled else 'disabled'}")

    def isDebugEnabled(self) -> bool:
        """Check if debug is enabled."""
        return self._debugEnabled

    def _ensureDebugDirectory(self) -> None:
        """Create debug directory if it doesn't exist."""
        self._debugBasePath.mkdir(parents=True, exist_ok=True)

    def _saveDebugBytes(
        self,
        taskId: str,
        data: bytes,
        extension: str,
        prefix: str = ""
    ) -> Optional[str]:
        """
        Save already-encoded debug image bytes with consistent naming.

        Args:
            taskId: Task identifier for naming.
            data: Encoded image bytes.
            extension: File extension including the dot (e.g., ".png").
            prefix: Optional prefix for filename.

        Returns:
            Saved file path, or None if debug is disabled or failed.
        """
        if not self._debugEnabled or not data:
            return None

        try:
            filename = f"{prefix}_{taskId}{extension}" if prefix else f"{taskId}{extension}"
            filepath = self._debugBasePath / filename
            filepath.write_bytes(data)
            self._logger.debug(f"Saved debug image: {filepath}")
            return str(filepath)
        except OSError as e:
            self._logger.warning(f"Failed to save debug image: {e}")
            return None

    def _saveDebugJson(self, taskId: str, data: Dict, prefix: str = "") -> Optional[str]:
        """
        Save debug JSON with consistent naming.

        Args:
            taskId: Task identifier for naming.
            data: Data to save as JSON.
            prefix: Optional prefix for filename.

        Returns:
            Saved file path, or None if debug is disabled or failed.
        """
        if not self._debugEnabled:
            return None

        try:
            filename = f"{prefix}_{taskId}.json" if prefix else f"{taskId}.json"
            filepath = self._debugBasePath / filename
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
            self._logger.debug(f"Saved debug JSON: {filepath}")
            return str(filepath)
        except (OSError, TypeError) as e:
            self._logger.warning(f"Failed to save debug JSON: {e}")
            return None

    def _logTiming(self, taskId: str, processingTimeMs: float) -> None:
        """
        Log processing time to console.

        Args:
            taskId: Task identifier.
            processingTimeMs: Processing time in milliseconds.
        """
        self._logger.info(f"[{taskId}] Processing time: {processingTimeMs:.2f}ms")

    def _measureTime(self, startTime: float) -> float:
        """
        Calculate elapsed time in milliseconds.

        Args:
            startTime: Start time from time.time().

        Returns:
            Elapsed time in milliseconds.
        """
        return (time.time() - startTime) * 1000
