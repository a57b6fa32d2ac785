"""Conversion of fragment data between representations."""

from fragstore.conversion._codec import PILLOW_FORMATS, ImageCodec, PillowImageCodec
from fragstore.conversion._engine import TEXT_CONVERTERS, ConversionEngine, ConvertedData, Converter

__all__ = [
    "PILLOW_FORMATS",
    "TEXT_CONVERTERS",
    "ConversionEngine",
    "ConvertedData",
    "Converter",
    "ImageCodec",
    "PillowImageCodec",
]
