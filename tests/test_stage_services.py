import json

import numpy as np
import pytest

from conftest import (
    FakeQrDetector,
    StageControl,
    blankWall,
    encodeImage,
    noiseImage,
    qrImage
)
from core.codec.container_format import ContainerFormat
from core.errors import DecodeError, DetectionError
from core.interfaces.format_decoder_interface import PixelBuffer
from core.interfaces.image_normalizer_interface import NormalizedImage
from core.interfaces.image_source_interface import ImageSource
from core.qr.qr_detector_factory import createQrDetector
from services.impl.s1_normalization_service import S1NormalizationService
from services.impl.s2_decoding_service import S2DecodingService
from services.impl.s3_qr_detection_service import S3QrDetectionService


def test_s1_normalizes_and_saves_debug_image(tmp_path):
    service = S1NormalizationService(debugBasePath=str(tmp_path), debugEnabled=True)
    source = ImageSource(data=encodeImage(noiseImage(1000, 800), ContainerFormat.JPEG))

    result = service.normalize(source, "task1")

    assert result.taskId == "task1"
    assert (result.image.width, result.image.height) == (500, 400)
    assert result.processingTimeMs >= 0
    saved = tmp_path / "s1_normalization" / "normalized_task1.png"
    assert saved.read_bytes() == result.image.data


def test_s1_writes_nothing_when_debug_disabled(tmp_path):
    service = S1NormalizationService(debugBasePath=str(tmp_path))
    service.normalize(ImageSource(data=encodeImage(noiseImage(50, 50), ContainerFormat.PNG)), "t")
    assert not (tmp_path / "s1_normalization").exists()


def test_s2_decodes_normalized_image(tmp_path):
    s1 = S1NormalizationService()
    s2 = S2DecodingService(debugBasePath=str(tmp_path), debugEnabled=True)
    image = s1.normalize(ImageSource(data=encodeImage(noiseImage(600, 300), ContainerFormat.PNG)), "t").image

    result = s2.decode(image, "t")

    assert (result.pixelBuffer.width, result.pixelBuffer.height) == (500, 250)
    debug = json.loads((tmp_path / "s2_decoding" / "decoded_t.json").read_text())
    assert debug["decodedFormat"] == "png"


def test_s2_raises_decode_error_for_garbage():

    with pytest.raises(DecodeError):
        S2DecodingService().decode(NormalizedImage(b"garbage", None, 0, 0), "t")


def test_s3_reports_not_found_without_error():
    service = S3QrDetectionService(detector=FakeQrDetector(text=None))
    buffer = PixelBuffer(np.zeros((4, 4, 4), np.uint8), 4, 4, ContainerFormat.PNG)

    result = service.detectQr(buffer, "t")

    assert not result.success
    assert result.qrData is None
    assert service.getBackend() == "FakeQrDetector"


def test_s3_returns_classified_payload(tmp_path):
    service = S3QrDetectionService(
        detector=FakeQrDetector(text="tel:+1555"),
        debugBasePath=str(tmp_path),
        debugEnabled=True
    )
    buffer = PixelBuffer(np.zeros((4, 4, 4), np.uint8), 4, 4, ContainerFormat.PNG)

    result = service.detectQr(buffer, "t")

    assert result.success
    assert result.qrData.codeType == "phone"
    debug = json.loads((tmp_path / "s3_qr_detection" / "qr_t.json").read_text())
    assert debug["text"] == "tel:+1555"


def test_s3_lets_detector_faults_propagate():
    control = StageControl(error=DetectionError("backend crashed"))
    service = S3QrDetectionService(detector=FakeQrDetector(control=control))
    buffer = PixelBuffer(np.zeros((4, 4, 4), np.uint8), 4, 4, ContainerFormat.PNG)

    with pytest.raises(DetectionError):
        service.detectQr(buffer, "t")


def test_unknown_backend_is_rejected():
    with pytest.raises(ValueError):
        S3QrDetectionService(backend="wechat")


def test_s1_fallback_recovers_mislabeled_source():
    pngBytes = encodeImage(noiseImage(200, 100), ContainerFormat.PNG)
    source = ImageSource(data=pngBytes, declaredFormat=ContainerFormat.JPEG)

    result = S1NormalizationService().normalize(source, "t")

    assert (result.image.width, result.image.height) == (500, 250)


def test_s1_respects_disabled_fallback():
    pngBytes = encodeImage(noiseImage(200, 100), ContainerFormat.PNG)
    source = ImageSource(data=pngBytes, declaredFormat=ContainerFormat.JPEG)
    service = S1NormalizationService(allowFallback=False)

    with pytest.raises(DecodeError) as excinfo:
        service.normalize(source, "t")

    assert excinfo.value.detail == DecodeError.UNKNOWN_FORMAT


def test_pyzbar_backend_decodes_qr_code():
    pytest.importorskip("pyzbar.pyzbar")
    detector = createQrDetector("pyzbar")

    result = detector.detect(qrImage("https://example.com"))

    assert result is not None
    assert result.text == "https://example.com"
    assert result.codeType == "url"
    assert result.symbology == "QRCODE"
    assert result.confidence == 1.0
    assert len(result.polygon) >= 4
    left, top, width, height = result.rect
    assert width > 0 and height > 0


def test_pyzbar_backend_finds_nothing_on_blank_wall():
    pytest.importorskip("pyzbar.pyzbar")
    detector = createQrDetector("pyzbar")

    assert detector.detect(blankWall()) is None


def test_pyzbar_backend_wraps_library_faults(monkeypatch):
    pytest.importorskip("pyzbar.pyzbar")
    import core.qr.pyzbar_qr_detector as pyzbarModule

    def brokenDecode(image, symbols=None):
        raise RuntimeError("zbar crashed")

    monkeypatch.setattr(pyzbarModule, "decode", brokenDecode)

    with pytest.raises(DetectionError):
        createQrDetector("pyzbar").detect(qrImage("x"))
