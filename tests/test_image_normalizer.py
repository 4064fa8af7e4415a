import cv2
import numpy as np
import pytest

from conftest import encodeImage, noiseImage
from core.codec.container_format import ContainerFormat
from core.codec.image_normalizer import ImageNormalizer, readSourceBytes, sourcePath
from core.errors import DecodeError, NormalizationError
from core.interfaces.image_source_interface import ImageSource


def decodedSize(data: bytes):
    image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    return image.shape[1], image.shape[0]


@pytest.mark.parametrize("width,height", [
    (1000, 750),
    (333, 1000),
    (250, 100),
    (500, 500),
    (1999, 3),
])
def test_output_keeps_aspect_ratio(width, height):
    normalizer = ImageNormalizer(targetWidth=500)
    source = ImageSource(data=encodeImage(noiseImage(width, height), ContainerFormat.PNG))

    image = normalizer.normalize(source)

    expected = max(1, round(height * 500 / width))
    assert image.width == 500
    assert abs(image.height - expected) <= 1
    assert decodedSize(image.data) == (image.width, image.height)
    assert (image.originalWidth, image.originalHeight) == (width, height)


def test_output_uses_canonical_format():
    source = ImageSource(data=encodeImage(noiseImage(800, 600), ContainerFormat.PNG))

    image = ImageNormalizer(canonicalFormat=ContainerFormat.JPEG).normalize(source)

    assert image.containerFormat == ContainerFormat.JPEG
    assert ContainerFormat.JPEG.matches(image.data)


def test_reads_file_uri(tmp_path):
    path = tmp_path / "in.jpg"
    path.write_bytes(encodeImage(noiseImage(1000, 500), ContainerFormat.JPEG))

    image = ImageNormalizer().normalize(ImageSource(uri=path.as_uri()))

    assert (image.width, image.height) == (500, 250)
    assert ContainerFormat.PNG.matches(image.data)


def test_disabled_normalizer_passes_bytes_through():
    data = encodeImage(noiseImage(40, 30), ContainerFormat.JPEG)

    image = ImageNormalizer(enabled=False).normalize(ImageSource(data=data))

    assert image.data == data
    assert image.containerFormat == ContainerFormat.JPEG


def test_missing_file_is_normalization_error(tmp_path):
    with pytest.raises(NormalizationError, match="Could not read"):
        ImageNormalizer().normalize(ImageSource(uri=str(tmp_path / "missing.png")))


def test_empty_source_is_normalization_error():
    with pytest.raises(NormalizationError):
        readSourceBytes(ImageSource(data=b""))


def test_undecodable_source_surfaces_decode_error():
    with pytest.raises(DecodeError):
        ImageNormalizer().normalize(ImageSource(data=b"definitely not an image"))


def test_target_width_must_be_positive():
    with pytest.raises(ValueError):
        ImageNormalizer(targetWidth=0)


def test_source_path_handles_plain_paths_and_file_uris(tmp_path):
    path = tmp_path / "a b.png"
    assert sourcePath(str(path)) == path
    assert sourcePath(path.as_uri()) == path
