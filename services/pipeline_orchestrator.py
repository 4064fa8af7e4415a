"""
Pipeline Orchestrator Module.

Orchestrates the 3-step image scan pipeline.
Creates ConfigService and initializes all services with proper parameters.

Pipeline Steps:
1. S1 Normalization: Bound resolution, re-encode to the canonical format
2. S2 Decoding: Decode canonical bytes to RGBA pixels
3. S3 QR Detection: Locate and decode one QR code

Each scan runs on its own worker thread, raced by a deadline timer and
by user cancellation. Whichever of the three claims the task's terminal
state first wins; the result sink is reached exactly once per task.

Follows:
- SRP: Only handles pipeline orchestration
- DIP: Services receive parameters, not dependencies
"""

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional

from core.codec.container_format import ContainerFormat
from core.errors import ScanError, ScanInProgressError
from core.interfaces.image_source_interface import IImageSourceProvider, ImageSource
from core.scan.scan_outcome import ScanOutcome
from core.scan.scan_task import ScanResult, ScanState, ScanTask
from services.impl.config_service import ConfigService
from services.impl.file_image_source import FileImageSource
from services.impl.json_history_store import JsonHistoryStore
from services.impl.logging_notifier import LoggingNotifier
from services.impl.result_sink import ResultSink
from services.impl.s1_normalization_service import S1NormalizationService
from services.impl.s2_decoding_service import S2DecodingService
from services.impl.s3_qr_detection_service import S3QrDetectionService
from services.interfaces.config_service_interface import IConfigService
from services.interfaces.decoding_service_interface import IDecodingService
from services.interfaces.history_store_interface import IHistoryStore
from services.interfaces.normalization_service_interface import INormalizationService
from services.interfaces.notifier_interface import INotifier
from services.interfaces.qr_detection_service_interface import IQrDetectionService
from services.live_scan_gate import LiveScanGate


OutcomeCallback = Callable[[ScanOutcome], None]

INTERNAL_ERROR_KIND = "internal_error"

# Timing keys, one per pipeline step
TIMING_NORMALIZATION = "s1_normalization"
TIMING_DECODING = "s2_decoding"
TIMING_QR_DETECTION = "s3_qr_detection"
TIMING_TOTAL = "total_pipeline"


class ScanHandle:
    """
    Caller-side view of one running scan.

    Exposes the zero-argument cancel action and a way to wait for the
    single outcome.
    """

    def __init__(
        self,
        task: ScanTask,
        orchestrator: "PipelineOrchestrator",
        onOutcome: Optional[OutcomeCallback] = None
    ):
        self._task = task
        self._orchestrator = orchestrator
        self._onOutcome = onOutcome
        self._outcome: Optional[ScanOutcome] = None
        self._done = threading.Event()
        self._timer: Optional[threading.Timer] = None
        self._worker: Optional[threading.Thread] = None

    @property
    def taskId(self) -> str:
        return self._task.id

    @property
    def task(self) -> ScanTask:
        return self._task

    @property
    def outcome(self) -> Optional[ScanOutcome]:
        """Outcome once delivered, else None."""
        return self._outcome

    @property
    def onOutcome(self) -> Optional[OutcomeCallback]:
        return self._onOutcome

    def isDone(self) -> bool:
        return self._done.is_set()

    def cancel(self) -> bool:
        """
        Cancel this scan.

        Returns:
            True if the cancel won the race, False if the scan had
            already reached a terminal state.
        """
        return self._orchestrator.cancelTask(self)

    def wait(self, timeout: Optional[float] = None) -> Optional[ScanOutcome]:
        """
        Block until the outcome has been delivered.

        Args:
            timeout: Maximum seconds to wait (None = until delivered).

        Returns:
            The outcome, or None if timeout elapsed first.
        """
        self._done.wait(timeout)
        return self._outcome

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the worker thread itself to exit."""
        if self._worker is not None:
            self._worker.join(timeout)

    def _arm(self, timer: threading.Timer, worker: threading.Thread) -> None:
        self._timer = timer
        self._worker = worker

    def _disarmTimer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()

    def _resolve(self, outcome: ScanOutcome) -> None:
        self._outcome = outcome
        self._done.set()

    def __repr__(self) -> str:
        return f"ScanHandle(task={self._task!r})"


class PipelineOrchestrator:
    """
    Orchestrates the complete image scan pipeline.

    Responsibilities:
    - Initialize ConfigService
    - Create all pipeline services with parameters from config
    - Run at most one scan at a time, bounded by a timeout
    - Deliver exactly one outcome per scan through the result sink
    """

    def __init__(
        self,
        configPath: str = "config/application_config.json",
        configService: Optional[IConfigService] = None,
        normalizationService: Optional[INormalizationService] = None,
        decodingService: Optional[IDecodingService] = None,
        qrDetectionService: Optional[IQrDetectionService] = None,
        notifier: Optional[INotifier] = None,
        historyStore: Optional[IHistoryStore] = None,
        liveScanGate: Optional[LiveScanGate] = None,
        imageSource: Optional[IImageSourceProvider] = None
    ):
        """
        Initialize the pipeline orchestrator.

        Any collaborator left as None is built from configuration.

        Args:
            configPath: Path to the application configuration file.
            configService: Pre-loaded configuration (skips configPath).
            normalizationService: Step 1 service.
            decodingService: Step 2 service.
            qrDetectionService: Step 3 service.
            notifier: Presents user-visible notices.
            historyStore: Receives successful scans.
            liveScanGate: Camera stream gate suspended while a result is shown.
            imageSource: Resolves user-picked locations to image sources.
        """
        self._logger = logging.getLogger(__name__)

        # Step 1: Initialize ConfigService (reads from JSON)
        self._configService = configService or ConfigService(configPath)
        self._logger.info("ConfigService initialized")

        self._timeoutSeconds = self._configService.getTimeoutSeconds()

        # Step 2: Initialize pipeline services with parameters from config
        self._initializeServices(normalizationService, decodingService, qrDetectionService)

        # Step 3: Initialize collaborators around the result sink
        self._notifier = notifier or LoggingNotifier()
        self._historyStore = historyStore or JsonHistoryStore(
            path=self._configService.getHistoryPath(),
            maxEntries=self._configService.getHistoryMaxEntries()
        )
        self._liveScanGate = liveScanGate or LiveScanGate()
        self._imageSource = imageSource or FileImageSource(
            allowedRoots=self._configService.getAllowedRoots()
        )
        self._resultSink = ResultSink(
            notifier=self._notifier,
            historyStore=self._historyStore,
            liveScanGate=self._liveScanGate
        )

        self._lock = threading.Lock()
        self._activeHandle: Optional[ScanHandle] = None

        self._logger.info(
            f"PipelineOrchestrator initialized successfully "
            f"(timeout={self._timeoutSeconds}s)"
        )

    def _initializeServices(
        self,
        normalizationService: Optional[INormalizationService],
        decodingService: Optional[IDecodingService],
        qrDetectionService: Optional[IQrDetectionService]
    ) -> None:
        """
        Initialize all pipeline services with parameters from config.

        Following DIP: Services receive parameters, not IConfigService.
        Each service creates its core components internally.
        """
        debugBasePath = self._configService.getDebugBasePath()
        debugEnabled = self._configService.isDebugEnabled()
        fallbackOrder = self._configService.getFallbackOrder()

        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # S1 Normalization Service
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        self._s1NormalizationService = normalizationService or S1NormalizationService(
            enabled=self._configService.isNormalizationEnabled(),
            targetWidth=self._configService.getTargetWidth(),
            canonicalFormat=self._configService.getCanonicalFormat(),
            jpegQuality=self._configService.getJpegQuality(),
            fallbackOrder=fallbackOrder,
            allowFallback=self._configService.isDecodeFallbackEnabled(),
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )
        self._logger.info("S1NormalizationService initialized")

        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # S2 Decoding Service
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        self._s2DecodingService = decodingService or S2DecodingService(
            fallbackOrder=fallbackOrder,
            allowFallback=self._configService.isDecodeFallbackEnabled(),
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )
        self._logger.info("S2DecodingService initialized")

        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        # S3 QR Detection Service
        # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
        self._s3QrDetectionService = qrDetectionService or S3QrDetectionService(
            backend=self._configService.getQrBackend(),
            zxingTryRotate=self._configService.isQrTryRotate(),
            zxingTryDownscale=self._configService.isQrTryDownscale(),
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )
        self._logger.info("S3QrDetectionService initialized")

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Service Getters (For External Access)
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    @property
    def configService(self) -> IConfigService:
        """Get the configuration service."""
        return self._configService

    @property
    def normalizationService(self) -> INormalizationService:
        """Get Step 1: Normalization service."""
        return self._s1NormalizationService

    @property
    def decodingService(self) -> IDecodingService:
        """Get Step 2: Decoding service."""
        return self._s2DecodingService

    @property
    def qrDetectionService(self) -> IQrDetectionService:
        """Get Step 3: QR detection service."""
        return self._s3QrDetectionService

    @property
    def resultSink(self) -> ResultSink:
        return self._resultSink

    @property
    def historyStore(self) -> IHistoryStore:
        return self._historyStore

    @property
    def liveScanGate(self) -> LiveScanGate:
        return self._liveScanGate

    @property
    def timeoutSeconds(self) -> float:
        return self._timeoutSeconds

    @property
    def activeTask(self) -> Optional[ScanTask]:
        """The non-terminal task, if any."""
        with self._lock:
            handle = self._activeHandle
        if handle is None or handle.task.isTerminal:
            return None
        return handle.task

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Scan Control
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def acquire(
        self,
        location: str,
        declaredFormat: Optional[ContainerFormat] = None
    ) -> ImageSource:
        """
        Resolve a user-picked location to an image source.

        Raises:
            PermissionDeniedError: If access is refused (no task is created).
        """
        return self._imageSource.acquire(location, declaredFormat)

    def isBusy(self) -> bool:
        """Check if a scan is currently active."""
        return self.activeTask is not None

    def run(
        self,
        source: ImageSource,
        timeoutSeconds: Optional[float] = None,
        onOutcome: Optional[OutcomeCallback] = None,
        cancelPrevious: bool = False
    ) -> ScanHandle:
        """
        Start a scan in the background.

        Args:
            source: Image to scan.
            timeoutSeconds: Time limit in seconds (config default when None).
            onOutcome: Called once with the outcome (not for duplicates).
            cancelPrevious: Cancel an active scan instead of refusing.

        Returns:
            ScanHandle for cancelling and waiting.

        Raises:
            ScanInProgressError: If a scan is active and cancelPrevious is False.
        """
        timeout = self._timeoutSeconds if timeoutSeconds is None else timeoutSeconds
        task = ScanTask(source, timeout)
        handle = ScanHandle(task, self, onOutcome)

        with self._lock:
            previous = self._activeHandle
            previousActive = previous is not None and not previous.task.isTerminal
            if previousActive and not cancelPrevious:
                raise ScanInProgressError(previous.taskId)
            self._activeHandle = handle

        if previousActive:
            self._logger.info(f"[{previous.taskId}] Cancelled by new scan {task.id}")
            self.cancelTask(previous)

        timer = threading.Timer(timeout, self._onDeadline, args=(handle,))
        timer.daemon = True
        worker = threading.Thread(
            target=self._runPipeline,
            args=(handle,),
            name=f"scan-{task.id[:8]}",
            daemon=True
        )
        handle._arm(timer, worker)

        self._logger.info(f"[{task.id}] Scan started (timeout={timeout}s, source={source})")
        timer.start()
        worker.start()
        return handle

    def scan(
        self,
        source: ImageSource,
        timeoutSeconds: Optional[float] = None,
        cancelPrevious: bool = False
    ) -> ScanOutcome:
        """Run a scan and block until its outcome is delivered."""
        handle = self.run(source, timeoutSeconds, cancelPrevious=cancelPrevious)
        return handle.wait()

    def cancel(self) -> bool:
        """
        Cancel the active scan (explicit user action).

        Returns:
            True if a scan was cancelled.
        """
        with self._lock:
            handle = self._activeHandle
        if handle is None:
            return False
        return self.cancelTask(handle)

    def cancelTask(self, handle: ScanHandle) -> bool:
        """Cancel a specific scan; no-op once it is terminal."""
        if not self._claimTerminal(handle, ScanState.CANCELLED):
            return False
        self._logger.info(f"[{handle.taskId}] Scan cancelled")
        return True

    def acknowledge(self) -> None:
        """The user dismissed the shown result."""
        self._resultSink.acknowledge()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Pipeline Execution
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _runPipeline(self, handle: ScanHandle) -> None:
        """Worker body: S1 -> S2 -> S3 with a cancel check at each boundary."""
        task = handle.task
        try:
            if not self._enterStage(handle, ScanState.NORMALIZING):
                return
            s1Result = self._s1NormalizationService.normalize(task.source, task.id)
            task.recordStageTime(TIMING_NORMALIZATION, s1Result.processingTimeMs)

            if not self._enterStage(handle, ScanState.DECODING):
                return
            s2Result = self._s2DecodingService.decode(s1Result.image, task.id, task.source.uri)
            task.recordStageTime(TIMING_DECODING, s2Result.processingTimeMs)

            if not self._enterStage(handle, ScanState.DETECTING):
                return
            s3Result = self._s3QrDetectionService.detectQr(s2Result.pixelBuffer, task.id)
            task.recordStageTime(TIMING_QR_DETECTION, s3Result.processingTimeMs)

            if s3Result.success and s3Result.qrData is not None:
                qrData = s3Result.qrData
                state = ScanState.SUCCEEDED
                result = ScanResult(
                    payload=qrData.text,
                    codeType=qrData.codeType,
                    symbology=qrData.symbology
                )
            else:
                state = ScanState.NOT_FOUND
                result = ScanResult()

        except ScanError as e:
            self._logger.warning(f"[{task.id}] Scan failed ({e.kind}): {e.reason}")
            state = ScanState.FAILED
            result = ScanResult(errorKind=e.kind, errorReason=e.reason)

        except Exception as e:
            self._logger.exception(f"[{task.id}] Unexpected pipeline error")
            state = ScanState.FAILED
            result = ScanResult(
                errorKind=INTERNAL_ERROR_KIND,
                errorReason=f"Unexpected error: {e}"
            )

        if not self._claimTerminal(handle, state, result):
            self._logger.debug(
                f"[{task.id}] Late {state.value} discarded, task already {task.state.value}"
            )

    def _enterStage(self, handle: ScanHandle, stage: ScanState) -> bool:
        """
        Cancellation check before a stage.

        Returns:
            True if the stage was entered, False if the scan is over.
        """
        task = handle.task
        if task.cancelToken.isCancelled():
            self._claimTerminal(handle, ScanState.CANCELLED)
            return False

        # Timer thread may lag behind the deadline
        if task.remainingSeconds() <= 0:
            self._claimTerminal(handle, ScanState.TIMED_OUT)
            return False

        if not task.advance(stage):
            self._logger.debug(f"[{task.id}] Not entering {stage.value}, task is {task.state.value}")
            return False

        self._logger.debug(f"[{task.id}] -> {stage.value}")
        return True

    def _onDeadline(self, handle: ScanHandle) -> None:
        if self._claimTerminal(handle, ScanState.TIMED_OUT):
            self._logger.warning(
                f"[{handle.taskId}] Scan timed out after {handle.task.timeoutSeconds}s"
            )

    def _claimTerminal(
        self,
        handle: ScanHandle,
        state: ScanState,
        result: Optional[ScanResult] = None
    ) -> bool:
        """
        Claim a terminal state for the task and deliver it.

        Only the first claimant for a task gets True; everything after
        the claim runs exactly once per task.
        """
        task = handle.task
        if not task.tryFinish(state, result):
            return False

        # Stages still running observe the token at their next boundary
        task.cancelToken.cancel()
        handle._disarmTimer()

        with self._lock:
            if self._activeHandle is handle:
                self._activeHandle = None

        self._savePipelineTiming(task)

        try:
            self._resultSink.deliver(task, handle.onOutcome)
        except Exception:
            self._logger.exception(f"[{task.id}] Result delivery failed")
        finally:
            handle._resolve(ScanOutcome.fromTask(task))
        return True

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Debug Control
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def setDebugEnabled(self, enabled: bool) -> None:
        """
        Enable or disable debug mode for all services.

        Args:
            enabled: True to enable debug output for all services.
        """
        self._configService.setDebugEnabled(enabled)

        for service in (
            self._s1NormalizationService,
            self._s2DecodingService,
            self._s3QrDetectionService
        ):
            if hasattr(service, "setDebugEnabled"):
                service.setDebugEnabled(enabled)

        self._logger.info(f"Debug mode {'enabled' if enabled else 'disabled'} for all services")

    def isDebugEnabled(self) -> bool:
        """Check if debug mode is enabled."""
        return self._configService.isDebugEnabled()

    def getDebugBasePath(self) -> str:
        """Get the debug base path from config."""
        return self._configService.getDebugBasePath()

    def _savePipelineTiming(self, task: ScanTask) -> Optional[str]:
        """
        Save pipeline timing information to JSON file.

        Only saves when debug is enabled. Timing is saved to
        output/debug/timing/timing_{taskId}.json with same naming
        convention as other debug outputs.

        Returns:
            Saved file path, or None if debug disabled or failed.
        """
        if not self.isDebugEnabled():
            return None

        timing: Dict[str, float] = dict(task.stageTimings)
        timing[TIMING_TOTAL] = round(task.elapsedMs(), 2)

        try:
            timingPath = Path(self.getDebugBasePath()) / "timing"
            timingPath.mkdir(parents=True, exist_ok=True)

            timingData = {
                "taskId": task.id,
                "timestamp": datetime.now().isoformat(),
                "state": task.state.value,
                "timing_ms": timing
            }

            filepath = timingPath / f"timing_{task.id}.json"
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(timingData, f, indent=2, ensure_ascii=False)

            self._logger.debug(f"Pipeline timing saved: {filepath}")
            return str(filepath)

        except OSError as e:
            self._logger.error(f"Failed to save pipeline timing: {e}")
            return None

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Lifecycle Management
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def shutdown(self, joinTimeout: Optional[float] = 1.0) -> None:
        """
        Cancel any active scan and release resources.

        Call this when the application is closing.

        Args:
            joinTimeout: Seconds to wait for the worker thread to exit.
        """
        self._logger.info("Shutting down PipelineOrchestrator...")

        with self._lock:
            handle = self._activeHandle

        if handle is not None:
            self.cancelTask(handle)
            handle.join(joinTimeout)

        self._logger.info("PipelineOrchestrator shutdown complete")
