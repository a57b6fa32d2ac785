"""Content-Type parsing and the fragment conversion legality matrix."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

TEXT_PLAIN = "text/plain"
TEXT_MARKDOWN = "text/markdown"
TEXT_HTML = "text/html"
TEXT_CSV = "text/csv"
APPLICATION_JSON = "application/json"
APPLICATION_YAML = "application/yaml"

IMAGE_TYPES: tuple[str, ...] = ("image/png", "image/jpeg", "image/webp", "image/gif", "image/avif")

SUPPORTED_TYPES: frozenset[str] = frozenset(
    {
        TEXT_PLAIN,
        TEXT_MARKDOWN,
        TEXT_HTML,
        TEXT_CSV,
        APPLICATION_JSON,
        APPLICATION_YAML,
        *IMAGE_TYPES,
    }
)

# Targets each base type may be converted into, in addition to itself.
CONVERSIONS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        TEXT_PLAIN: (TEXT_MARKDOWN, TEXT_HTML),
        TEXT_MARKDOWN: (TEXT_PLAIN, TEXT_HTML),
        TEXT_HTML: (TEXT_PLAIN,),
        TEXT_CSV: (TEXT_PLAIN, APPLICATION_JSON),
        APPLICATION_JSON: (TEXT_PLAIN, APPLICATION_YAML),
        APPLICATION_YAML: (TEXT_PLAIN, APPLICATION_JSON),
        **{image_type: IMAGE_TYPES for image_type in IMAGE_TYPES},
    }
)

EXTENSIONS: Mapping[str, str] = MappingProxyType(
    {
        "txt": TEXT_PLAIN,
        "md": TEXT_MARKDOWN,
        "html": TEXT_HTML,
        "csv": TEXT_CSV,
        "json": APPLICATION_JSON,
        "yaml": APPLICATION_YAML,
        "yml": APPLICATION_YAML,
        "png": "image/png",
        "jpg": "image/jpeg",
        "jpeg": "image/jpeg",
        "webp": "image/webp",
        "gif": "image/gif",
        "avif": "image/avif",
    }
)

# RFC 7231 token / quoted-string grammar.
_TOKEN = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"
_TYPE_RE = re.compile(rf"{_TOKEN}/{_TOKEN}")
_PARAM_RE = re.compile(rf';[ \t]*({_TOKEN})[ \t]*=[ \t]*("(?:[^"\\]|\\.)*"|{_TOKEN})[ \t]*')
_QUOTED_PAIR_RE = re.compile(r"\\(.)")


@dataclass(frozen=True, slots=True)
class MediaType:
    """A parsed Content-Type: lower-cased ``type/subtype`` plus its parameters."""

    type: str
    parameters: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        """Freeze the parameter mapping."""
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @property
    def charset(self) -> str | None:
        """Return the ``charset`` parameter, if present."""
        return self.parameters.get("charset")


def parse_media_type(value: str) -> MediaType:
    """Parse a Content-Type header value.

    Raise ``ValueError`` when the value is not a well-formed media type.
    """
    if not isinstance(value, str):
        msg = "Content-Type must be a string."
        raise TypeError(msg)

    index = value.find(";")
    base = (value if index == -1 else value[:index]).strip()
    if not _TYPE_RE.fullmatch(base):
        msg = f"Invalid media type: {value!r}"
        raise ValueError(msg)

    parameters: dict[str, str] = {}
    if index != -1:
        position = index
        trimmed = value.rstrip()
        while position < len(trimmed):
            match = _PARAM_RE.match(trimmed, position)
            if match is None:
                msg = f"Invalid parameter format in {value!r}"
                raise ValueError(msg)
            raw = match.group(2)
            if raw.startswith('"'):
                raw = _QUOTED_PAIR_RE.sub(r"\1", raw[1:-1])
            parameters[match.group(1).lower()] = raw
            position = match.end()

    return MediaType(type=base.lower(), parameters=parameters)


def base_type(value: str) -> str:
    """Return ``type/subtype`` for a Content-Type value, parameters stripped."""
    return parse_media_type(value).type


def is_supported_type(value: object) -> bool:
    """Return whether a Content-Type value has a supported base type."""
    if not isinstance(value, str) or not value:
        return False
    try:
        return base_type(value) in SUPPORTED_TYPES
    except ValueError:
        return False


def formats_for(value: str) -> tuple[str, ...]:
    """Return the base types a fragment of this type may be converted into.

    The fragment's own base type is always the first entry.
    """
    source = base_type(value)
    formats = [source]
    for target in CONVERSIONS.get(source, ()):
        if target not in formats:
            formats.append(target)
    return tuple(formats)


def media_type_for_extension(extension: str) -> str | None:
    """Map a file extension such as ``md`` or ``.JPG`` to its media type."""
    return EXTENSIONS.get(extension.lower().lstrip("."))
