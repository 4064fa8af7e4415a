"""Shared fixtures: synthetic images and controllable pipeline fakes."""

import threading
from typing import List, Optional

import cv2
import numpy as np
import pytest

from core.codec.container_format import ContainerFormat
from core.interfaces.format_decoder_interface import PixelBuffer
from core.interfaces.image_normalizer_interface import NormalizedImage
from core.interfaces.qr_detector_interface import QrDetectionResult
from core.qr.payload_classifier import classifyPayload
from core.scan.scan_task import ScanResult, ScanState, ScanTask
from core.interfaces.image_source_interface import ImageSource
from services.impl.config_service import ConfigService
from services.impl.json_history_store import JsonHistoryStore
from services.interfaces.decoding_service_interface import (
    DecodingServiceResult,
    IDecodingService
)
from services.interfaces.normalization_service_interface import (
    INormalizationService,
    NormalizationServiceResult
)
from services.interfaces.notifier_interface import INotifier
from services.interfaces.qr_detection_service_interface import (
    IQrDetectionService,
    QrDetectionServiceResult
)
from services.live_scan_gate import LiveScanGate
from services.pipeline_orchestrator import PipelineOrchestrator


# Upper bound for any wait in tests so a broken race never hangs the run
WAIT_SECONDS = 5.0

TEST_CONFIG = {
    "debug": {"enabled": False, "basePath": "output/debug"},
    "pipeline": {"timeoutSeconds": 5},
    "s1_normalization": {"enabled": True, "targetWidth": 500, "canonicalFormat": "png"},
    "s2_decoding": {"fallbackOrder": ["png", "jpeg"], "allowFallback": True},
    "s3_qr_detection": {"backend": "zxing", "tryRotate": True, "tryDownscale": True},
    "history": {"path": None, "maxEntries": 0},
    "source": {"allowedRoots": []},
}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Synthetic images
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def encodeImage(image: np.ndarray, containerFormat: ContainerFormat) -> bytes:
    ok, buffer = cv2.imencode(containerFormat.encodeExtension, image)
    assert ok
    return buffer.tobytes()


def noiseImage(width: int, height: int, seed: int = 7) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)


def blankWall(width: int = 1200, height: int = 900) -> np.ndarray:
    """Flat painted wall with a little sensor noise."""
    rng = np.random.default_rng(3)
    wall = np.full((height, width, 3), (182, 176, 170), dtype=np.int16)
    wall += rng.integers(-4, 5, size=wall.shape, dtype=np.int16)
    return np.clip(wall, 0, 255).astype(np.uint8)


def qrImage(text: str, size: int = 500) -> np.ndarray:
    """BGR image of exactly size x size holding one QR code with quiet zone."""
    modules = cv2.QRCodeEncoder.create().encode(text)
    modules = cv2.copyMakeBorder(modules, 4, 4, 4, 4, cv2.BORDER_CONSTANT, value=255)
    scale = max(1, size // modules.shape[0])
    scaled = cv2.resize(
        modules,
        (modules.shape[1] * scale, modules.shape[0] * scale),
        interpolation=cv2.INTER_NEAREST
    )
    padBottom = size - scaled.shape[0]
    padRight = size - scaled.shape[1]
    padded = cv2.copyMakeBorder(
        scaled, 0, padBottom, 0, padRight, cv2.BORDER_CONSTANT, value=255
    )
    return cv2.cvtColor(padded, cv2.COLOR_GRAY2BGR)


@pytest.fixture
def qrPngPath(tmp_path):
    path = tmp_path / "qr.png"
    path.write_bytes(encodeImage(qrImage("https://example.com"), ContainerFormat.PNG))
    return path


@pytest.fixture
def wallJpegPath(tmp_path):
    path = tmp_path / "wall.jpg"
    path.write_bytes(encodeImage(blankWall(), ContainerFormat.JPEG))
    return path


@pytest.fixture
def truncatedJpegPath(tmp_path):
    data = encodeImage(noiseImage(640, 480), ContainerFormat.JPEG)
    path = tmp_path / "truncated.jpg"
    path.write_bytes(data[:len(data) // 2])
    return path


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Collaborator fakes
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class RecordingNotifier(INotifier):
    def __init__(self):
        self.calls: List[tuple] = []
        self._lock = threading.Lock()

    def showResult(self, outcome):
        with self._lock:
            self.calls.append(("result", outcome))

    def showNotice(self, title, message):
        with self._lock:
            self.calls.append(("notice", title, message))

    def showError(self, title, message):
        with self._lock:
            self.calls.append(("error", title, message))

    def kinds(self) -> List[str]:
        with self._lock:
            return [call[0] for call in self.calls]


class StageControl:
    """
    Controls a fake stage: records entry, optionally blocks until
    released, then returns or raises.
    """

    def __init__(self, blocking: bool = False, error: Optional[Exception] = None):
        self.entered = threading.Event()
        self.release = threading.Event()
        self.finished = threading.Event()
        self.calls = 0
        self.error = error
        if not blocking:
            self.release.set()

    def run(self) -> None:
        self.calls += 1
        self.entered.set()
        self.release.wait(WAIT_SECONDS)
        self.finished.set()
        if self.error is not None:
            raise self.error


class FakeNormalizationService(INormalizationService):
    def __init__(self, control: Optional[StageControl] = None):
        self.control = control or StageControl()

    def normalize(self, source, taskId):
        self.control.run()
        image = NormalizedImage(
            data=b"canonical",
            containerFormat=ContainerFormat.PNG,
            width=4,
            height=4
        )
        return NormalizationServiceResult(image=image, taskId=taskId, processingTimeMs=1.0)


class FakeDecodingService(IDecodingService):
    def __init__(self, control: Optional[StageControl] = None):
        self.control = control or StageControl()

    def decode(self, image, taskId, uri=None):
        self.control.run()
        pixelBuffer = PixelBuffer(
            pixels=np.zeros((4, 4, 4), dtype=np.uint8),
            width=4,
            height=4,
            containerFormat=ContainerFormat.PNG
        )
        return DecodingServiceResult(pixelBuffer=pixelBuffer, taskId=taskId, processingTimeMs=1.0)


class FakeQrDetectionService(IQrDetectionService):
    def __init__(self, text: Optional[str] = "https://example.com",
                 control: Optional[StageControl] = None):
        self.text = text
        self.control = control or StageControl()

    def detectQr(self, pixelBuffer, taskId):
        self.control.run()
        if self.text is None:
            return QrDetectionServiceResult(qrData=None, taskId=taskId, success=False)
        qrData = QrDetectionResult(text=self.text, codeType=classifyPayload(self.text))
        return QrDetectionServiceResult(qrData=qrData, taskId=taskId, success=True)


class FakeQrDetector:
    """IQrDetector stand-in for S3QrDetectionService(detector=...)."""

    def __init__(self, text: Optional[str] = None, control: Optional[StageControl] = None):
        self.text = text
        self.control = control or StageControl()

    def detect(self, image):
        self.control.run()
        if self.text is None:
            return None
        return QrDetectionResult(text=self.text, codeType=classifyPayload(self.text))


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Builders
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def finishedTask(state: ScanState, result: Optional[ScanResult] = None) -> ScanTask:
    """Build a task already in the given terminal state."""
    task = ScanTask(ImageSource(data=b"x"), timeoutSeconds=5)
    if state in (ScanState.SUCCEEDED, ScanState.NOT_FOUND):
        task.advance(ScanState.NORMALIZING)
        task.advance(ScanState.DECODING)
        task.advance(ScanState.DETECTING)
    assert task.tryFinish(state, result)
    return task


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def historyStore():
    return JsonHistoryStore()


@pytest.fixture
def configService():
    return ConfigService.fromDict(TEST_CONFIG)


@pytest.fixture
def makeOrchestrator(configService, notifier, historyStore):
    """Factory building an orchestrator around fakes; shut down at teardown."""
    created: List[PipelineOrchestrator] = []

    def build(
        normalizationService=None,
        decodingService=None,
        qrDetectionService=None,
        liveScanGate=None,
        config=None
    ) -> PipelineOrchestrator:
        orchestrator = PipelineOrchestrator(
            configService=ConfigService.fromDict(config) if config else configService,
            normalizationService=normalizationService or FakeNormalizationService(),
            decodingService=decodingService or FakeDecodingService(),
            qrDetectionService=qrDetectionService or FakeQrDetectionService(),
            notifier=notifier,
            historyStore=historyStore,
            liveScanGate=liveScanGate or LiveScanGate()
        )
        created.append(orchestrator)
        return orchestrator

    yield build

    for orchestrator in created:
        orchestrator.shutdown(joinTimeout=0)
