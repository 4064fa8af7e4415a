import numpy as np
import pytest

from conftest import encodeImage, noiseImage
from core.codec.container_format import ContainerFormat
from core.codec.format_decoder import FormatDecoder
from core.errors import DecodeError


@pytest.fixture
def decoder():
    return FormatDecoder()


@pytest.fixture
def pngBytes():
    return encodeImage(noiseImage(64, 48), ContainerFormat.PNG)


@pytest.fixture
def jpegBytes():
    return encodeImage(noiseImage(64, 48), ContainerFormat.JPEG)


def test_png_decodes_to_rgba(decoder, pngBytes):
    buffer = decoder.decode(pngBytes, ContainerFormat.PNG)

    assert (buffer.width, buffer.height) == (64, 48)
    assert buffer.pixels.shape == (48, 64, 4)
    assert buffer.pixels.dtype == np.uint8
    assert np.all(buffer.pixels[:, :, 3] == 255)
    assert buffer.containerFormat == ContainerFormat.PNG


def test_png_pixels_are_rgb_ordered(decoder):
    bgr = np.zeros((2, 2, 3), dtype=np.uint8)
    bgr[:, :] = (255, 0, 0)  # pure blue in OpenCV order
    buffer = decoder.decode(encodeImage(bgr, ContainerFormat.PNG))
    assert tuple(buffer.pixels[0, 0]) == (0, 0, 255, 255)


def test_jpeg_decodes(decoder, jpegBytes):
    buffer = decoder.decode(jpegBytes, ContainerFormat.JPEG)
    assert (buffer.width, buffer.height) == (64, 48)
    assert buffer.containerFormat == ContainerFormat.JPEG


def test_decoding_is_deterministic(decoder, jpegBytes):
    first = decoder.decode(jpegBytes, ContainerFormat.JPEG)
    second = decoder.decode(jpegBytes, ContainerFormat.JPEG)

    assert (first.width, first.height) == (second.width, second.height)
    assert np.array_equal(first.pixels, second.pixels)


def test_mislabeled_png_falls_back(decoder, pngBytes):
    buffer = decoder.decode(pngBytes, ContainerFormat.JPEG, uri="photo.jpg")
    assert buffer.containerFormat == ContainerFormat.PNG


def test_format_inferred_from_bytes_without_hints(decoder, jpegBytes):
    assert decoder.decode(jpegBytes).containerFormat == ContainerFormat.JPEG


def test_fallback_can_be_disabled(pngBytes):
    decoder = FormatDecoder(allowFallback=False)
    with pytest.raises(DecodeError) as info:
        decoder.decode(pngBytes, ContainerFormat.JPEG)
    assert info.value.detail == DecodeError.UNKNOWN_FORMAT


def test_attempt_order_follows_configuration():
    decoder = FormatDecoder(fallbackOrder=[ContainerFormat.JPEG, ContainerFormat.PNG])
    assert decoder.attemptOrder() == [ContainerFormat.JPEG, ContainerFormat.PNG]
    assert decoder.attemptOrder(uri="scan.png") == [ContainerFormat.PNG, ContainerFormat.JPEG]


def test_unknown_format_is_distinguished(decoder):
    with pytest.raises(DecodeError) as info:
        decoder.decode(b"GIF89a" + b"\x00" * 64)
    assert info.value.detail == DecodeError.UNKNOWN_FORMAT
    assert info.value.kind == "decode_error"


def test_truncated_jpeg_is_corrupt(decoder):
    data = encodeImage(noiseImage(320, 240), ContainerFormat.JPEG)
    with pytest.raises(DecodeError) as info:
        decoder.decode(data[:len(data) // 2], uri="photo.jpg")
    assert info.value.detail == DecodeError.CORRUPT_DATA


def test_truncated_png_is_corrupt(decoder, pngBytes):
    with pytest.raises(DecodeError) as info:
        decoder.decode(pngBytes[:len(pngBytes) // 2])
    assert info.value.detail == DecodeError.CORRUPT_DATA


def test_empty_data_is_corrupt(decoder):
    with pytest.raises(DecodeError) as info:
        decoder.decode(b"")
    assert info.value.detail == DecodeError.CORRUPT_DATA
