"""Tests for ConversionEngine dispatch and legality enforcement."""

from __future__ import annotations

import io
import json

import pytest
import yaml
from PIL import Image

from fragstore.conversion import TEXT_CONVERTERS, ConversionEngine
from fragstore.errors import ConversionError, UnsupportedConversionError
from fragstore.mediatypes import CONVERSIONS, IMAGE_TYPES, SUPPORTED_TYPES, formats_for

_DEEPLY_NESTED = b"[" * 100_000 + b"]" * 100_000


class RecordingCodec:
    """ImageCodec fake that records requests."""

    def __init__(self, *, fail: bool = False) -> None:
        self.calls: list[tuple[bytes, str]] = []
        self.fail = fail

    def encode(self, data: bytes, target: str) -> bytes:
        self.calls.append((data, target))
        if self.fail:
            msg = "codec exploded"
            raise ValueError(msg)
        return f"encoded:{target}".encode()


def _png() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (2, 2), (0, 128, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_every_legal_pair_has_a_converter() -> None:
    engine = ConversionEngine(image_codec=RecordingCodec())
    for source in SUPPORTED_TYPES:
        for target in formats_for(source):
            assert engine.supports(source, target), (source, target)


def test_text_converter_table_matches_legality_matrix() -> None:
    for source, target in TEXT_CONVERTERS:
        assert target in CONVERSIONS[source]


@pytest.mark.parametrize("media_type", sorted(SUPPORTED_TYPES))
def test_identity_passes_bytes_through(media_type: str) -> None:
    engine = ConversionEngine(image_codec=RecordingCodec())
    result = engine.convert(media_type, b"\x00raw", media_type)
    assert result.data == b"\x00raw"
    assert result.content_type == media_type


def test_identity_ignores_parameters() -> None:
    result = ConversionEngine().convert("text/plain; charset=utf-8", b"x", "text/plain")
    assert result.content_type == "text/plain"


def test_markdown_to_html() -> None:
    result = ConversionEngine().convert("text/markdown", b"# Hi", "text/html")
    assert b"<h1>Hi</h1>" in result.data
    assert result.content_type == "text/html"


def test_csv_to_json() -> None:
    result = ConversionEngine().convert("text/csv", b"a,b\n1,2\n3,4", "application/json")
    assert json.loads(result.data) == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]
    assert result.content_type == "application/json"


def test_json_to_yaml() -> None:
    result = ConversionEngine().convert("application/json", b'{"x":1}', "application/yaml")
    assert yaml.safe_load(result.data) == {"x": 1}
    assert result.content_type == "application/yaml"


def test_csv_to_plain_is_passthrough() -> None:
    result = ConversionEngine().convert("text/csv", b"a,b\n1,2", "text/plain")
    assert result.data == b"a,b\n1,2"
    assert result.content_type == "text/plain"


@pytest.mark.parametrize(
    ("source", "target"),
    [
        pytest.param("text/html", "text/markdown", id="html-markdown"),
        pytest.param("application/json", "text/csv", id="json-csv"),
        pytest.param("text/plain", "image/png", id="text-image"),
        pytest.param("image/png", "text/plain", id="image-text"),
        pytest.param("application/xml", "application/xml", id="unsupported-source"),
        pytest.param("text/plain", "not a type", id="malformed-target"),
    ],
)
def test_illegal_pairs_are_rejected(source: str, target: str) -> None:
    engine = ConversionEngine(image_codec=RecordingCodec())
    assert engine.supports(source, target) is False
    with pytest.raises(UnsupportedConversionError):
        engine.convert(source, b"data", target)


@pytest.mark.parametrize(
    ("source", "target"),
    [
        pytest.param("application/json", "text/plain", id="json-plain"),
        pytest.param("application/json", "application/yaml", id="json-yaml"),
        pytest.param("application/yaml", "application/json", id="yaml-json"),
    ],
)
def test_malformed_source_raises_conversion_error(source: str, target: str) -> None:
    with pytest.raises(ConversionError) as exc_info:
        ConversionEngine().convert(source, b"{[: nope", target)
    assert exc_info.value.source == source
    assert exc_info.value.target == target


@pytest.mark.parametrize(
    ("source", "target"),
    [
        pytest.param("application/json", "text/plain", id="json-plain"),
        pytest.param("application/json", "application/yaml", id="json-yaml"),
        pytest.param("application/yaml", "application/json", id="yaml-json"),
        pytest.param("application/yaml", "text/plain", id="yaml-plain"),
    ],
)
def test_overly_deep_nesting_raises_conversion_error(source: str, target: str) -> None:
    with pytest.raises(ConversionError):
        ConversionEngine().convert(source, _DEEPLY_NESTED, target)


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        pytest.param(b"2020-01-01: launch\n", {"2020-01-01": "launch"}, id="date-key"),
        pytest.param(b"? !!binary aGk=\n: x\n", {"b'hi'": "x"}, id="binary-key"),
    ],
)
@pytest.mark.parametrize("target", ["application/json", "text/plain"])
def test_yaml_with_non_string_keys_converts(data: bytes, expected: object, target: str) -> None:
    result = ConversionEngine().convert("application/yaml", data, target)
    assert json.loads(result.data) == expected
    assert result.content_type == target


@pytest.mark.parametrize("target", [t for t in IMAGE_TYPES if t != "image/png"])
def test_image_pairs_dispatch_to_codec(target: str) -> None:
    codec = RecordingCodec()
    result = ConversionEngine(image_codec=codec).convert("image/png", b"png-bytes", target)
    assert codec.calls == [(b"png-bytes", target)]
    assert result.data == f"encoded:{target}".encode()
    assert result.content_type == target


def test_codec_failures_become_conversion_errors() -> None:
    engine = ConversionEngine(image_codec=RecordingCodec(fail=True))
    with pytest.raises(ConversionError, match="codec exploded"):
        engine.convert("image/gif", b"gif", "image/png")


def test_default_codec_is_pillow() -> None:
    result = ConversionEngine().convert("image/png", _png(), "image/webp")
    with Image.open(io.BytesIO(result.data)) as image:
        assert image.format == "WEBP"
    assert result.content_type == "image/webp"


def test_register_replaces_converter() -> None:
    engine = ConversionEngine()
    engine.register("text/markdown", "text/html", lambda data: b"<custom/>")
    assert engine.convert("text/markdown", b"# Hi", "text/html").data == b"<custom/>"


def test_register_rejects_illegal_pair() -> None:
    engine = ConversionEngine()
    with pytest.raises(UnsupportedConversionError):
        engine.register("text/html", "application/json", lambda data: data)


def test_custom_table_without_entry_is_unsupported() -> None:
    engine = ConversionEngine(image_codec=RecordingCodec(), converters={})
    assert engine.supports("text/markdown", "text/html") is False
    assert engine.supports("text/markdown", "text/markdown") is True
    assert engine.supports("image/png", "image/gif") is True
