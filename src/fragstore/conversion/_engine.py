"""ConversionEngine: dispatch table over (source, target) base type pairs."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import partial
from types import MappingProxyType

from fragstore.conversion._codec import ImageCodec, PillowImageCodec
from fragstore.conversion._data import csv_to_json, json_to_text, json_to_yaml, yaml_to_json, yaml_to_text
from fragstore.conversion._text import html_to_text, markdown_to_html, markdown_to_text, passthrough, text_to_html
from fragstore.errors import ConversionError, UnsupportedConversionError
from fragstore.log import get_logger
from fragstore.mediatypes import (
    APPLICATION_JSON,
    APPLICATION_YAML,
    IMAGE_TYPES,
    SUPPORTED_TYPES,
    TEXT_CSV,
    TEXT_HTML,
    TEXT_MARKDOWN,
    TEXT_PLAIN,
    base_type,
    formats_for,
)

Converter = Callable[[bytes], bytes]

TEXT_CONVERTERS: Mapping[tuple[str, str], Converter] = MappingProxyType(
    {
        (TEXT_PLAIN, TEXT_MARKDOWN): passthrough,
        (TEXT_PLAIN, TEXT_HTML): text_to_html,
        (TEXT_MARKDOWN, TEXT_PLAIN): markdown_to_text,
        (TEXT_MARKDOWN, TEXT_HTML): markdown_to_html,
        (TEXT_HTML, TEXT_PLAIN): html_to_text,
        (TEXT_CSV, TEXT_PLAIN): passthrough,
        (TEXT_CSV, APPLICATION_JSON): csv_to_json,
        (APPLICATION_JSON, TEXT_PLAIN): json_to_text,
        (APPLICATION_JSON, APPLICATION_YAML): json_to_yaml,
        (APPLICATION_YAML, TEXT_PLAIN): yaml_to_text,
        (APPLICATION_YAML, APPLICATION_JSON): yaml_to_json,
    }
)


@dataclass(frozen=True, slots=True)
class ConvertedData:
    """Output of a conversion: the bytes and the Content-Type they are in."""

    data: bytes
    content_type: str


class ConversionEngine:
    """Convert fragment data between the base types the legality matrix allows.

    Identity conversions pass data through. Every other legal pair is served
    by a converter in the dispatch table; image pairs are delegated to an
    ImageCodec.
    """

    def __init__(
        self,
        *,
        image_codec: ImageCodec | None = None,
        converters: Mapping[tuple[str, str], Converter] | None = None,
    ) -> None:
        """Initialize with an optional image codec and converter table."""
        self._image_codec: ImageCodec = image_codec if image_codec is not None else PillowImageCodec()
        table = TEXT_CONVERTERS if converters is None else converters
        self._converters: dict[tuple[str, str], Converter] = dict(table)
        for source in IMAGE_TYPES:
            for target in IMAGE_TYPES:
                if source != target:
                    self._converters.setdefault((source, target), partial(self._image_codec.encode, target=target))
        self._log = get_logger("conversion")

    @property
    def image_codec(self) -> ImageCodec:
        """Return the codec used for image conversions."""
        return self._image_codec

    def register(self, source: str, target: str, converter: Converter) -> None:
        """Install or replace the converter for one pair.

        The pair must already be legal for ``source``.
        """
        source_type = base_type(source)
        target_type = base_type(target)
        if target_type not in formats_for(source_type):
            raise UnsupportedConversionError(source_type, target_type)
        self._converters[(source_type, target_type)] = converter

    def supports(self, source: str, target: str) -> bool:
        """Return whether ``source`` data can be converted into ``target``."""
        try:
            source_type = base_type(source)
            target_type = base_type(target)
        except ValueError:
            return False
        if source_type not in SUPPORTED_TYPES or target_type not in formats_for(source_type):
            return False
        return source_type == target_type or (source_type, target_type) in self._converters

    def convert(self, source: str, data: bytes, target: str) -> ConvertedData:
        """Convert ``data`` of type ``source`` into ``target``.

        Raise UnsupportedConversionError for a pair outside the legality
        matrix, and ConversionError when the data cannot be converted.
        """
        if not self.supports(source, target):
            raise UnsupportedConversionError(source, target)
        source_type = base_type(source)
        target_type = base_type(target)
        if source_type == target_type:
            return ConvertedData(data=bytes(data), content_type=target_type)

        converter = self._converters[(source_type, target_type)]
        try:
            output = converter(bytes(data))
        except ConversionError:
            raise
        except (ValueError, RecursionError) as exc:
            self._log.warning("conversion_failed", source=source_type, target=target_type, error=str(exc))
            raise ConversionError(source_type, target_type, str(exc)) from exc

        self._log.debug("converted", source=source_type, target=target_type, size=len(output))
        return ConvertedData(data=output, content_type=target_type)
