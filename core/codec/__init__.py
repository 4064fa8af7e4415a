"""Image codec module: container formats, decoding and normalization."""

from core.codec.container_format import ContainerFormat, inferFormat
from core.codec.format_decoder import FormatDecoder
from core.codec.image_normalizer import ImageNormalizer

__all__ = [
    'ContainerFormat',
    'inferFormat',
    'FormatDecoder',
    'ImageNormalizer'
]
