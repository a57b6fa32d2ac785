"""Fragment: metadata for one stored content item."""

from __future__ import annotations

import json
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime

from fragstore.errors import TypeMismatchError, UnsupportedTypeError, ValidationError
from fragstore.mediatypes import MediaType, base_type, formats_for, is_supported_type, parse_media_type
from fragstore.serde import (
    as_str_object_dict,
    format_timestamp,
    optional_string,
    optional_timestamp,
    require_size,
    require_string,
    to_utc,
    utc_now,
)


def new_fragment_id() -> str:
    """Return a fresh random fragment ID."""
    return str(uuid.uuid4())


@dataclass(frozen=True, slots=True)
class Fragment:
    """Immutable fragment metadata.

    ``id``, ``owner_id``, ``type`` and ``created`` never change once a
    fragment exists. Writing new data produces a new Fragment via
    :meth:`with_data` with a recomputed ``size`` and refreshed ``updated``.
    When ``updated`` is not given it starts equal to ``created``.
    """

    owner_id: str
    type: str
    size: int = 0
    id: str = field(default_factory=new_fragment_id)
    created: datetime = field(default_factory=utc_now)
    updated: datetime = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        """Validate fields and normalize timestamps to UTC."""
        require_string(self.owner_id, field_name="owner_id")
        require_string(self.id, field_name="id")
        if not isinstance(self.type, str) or not self.type:
            msg = "type is required."
            raise ValidationError(msg)
        if not is_supported_type(self.type):
            raise UnsupportedTypeError(self.type)
        require_size(self.size, field_name="size")
        if self.updated is None:
            object.__setattr__(self, "updated", self.created)
        for name in ("created", "updated"):
            value = getattr(self, name)
            if not isinstance(value, datetime):
                msg = f"{name} must be a datetime."
                raise ValidationError(msg)
            object.__setattr__(self, name, to_utc(value))

    @property
    def media_type(self) -> MediaType:
        """Return the parsed Content-Type, including parameters."""
        return parse_media_type(self.type)

    @property
    def mime_type(self) -> str:
        """Return the base type without parameters: ``text/html; charset=utf-8`` -> ``text/html``."""
        return base_type(self.type)

    @property
    def is_text(self) -> bool:
        """Return whether this fragment is a ``text/*`` type."""
        return self.mime_type.startswith("text/")

    @property
    def formats(self) -> tuple[str, ...]:
        """Return the base types this fragment can be converted into, itself first."""
        return formats_for(self.type)

    def with_data(self, data: bytes) -> Fragment:
        """Return a copy describing ``data`` as the fragment's new content."""
        if not isinstance(data, (bytes, bytearray, memoryview)):
            msg = "data must be bytes."
            raise ValidationError(msg)
        return replace(self, size=len(data), updated=utc_now())

    def check_type(self, content_type: str) -> None:
        """Raise TypeMismatchError unless ``content_type`` has this fragment's base type."""
        if not is_supported_type(content_type):
            raise UnsupportedTypeError(content_type)
        incoming = base_type(content_type)
        if incoming != self.mime_type:
            raise TypeMismatchError(self.mime_type, incoming)

    def to_dict(self) -> dict[str, object]:
        """Serialize the fragment to a plain dictionary."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "created": format_timestamp(self.created),
            "updated": format_timestamp(self.updated),
            "type": self.type,
            "size": self.size,
        }

    @classmethod
    def from_dict(cls, value: Mapping[str, object]) -> Fragment:
        """Deserialize a fragment from a plain dictionary.

        Missing ``id``/``created``/``updated`` values are generated.
        """
        data = as_str_object_dict(value, field_name="Fragment")
        kwargs: dict[str, object] = {
            "owner_id": data.get("owner_id"),
            "type": data.get("type"),
            "size": data.get("size", 0),
        }
        fragment_id = optional_string(data.get("id"), field_name="Fragment.id")
        if fragment_id is not None:
            kwargs["id"] = fragment_id
        created = optional_timestamp(data.get("created"), field_name="Fragment.created")
        if created is not None:
            kwargs["created"] = created
        updated = optional_timestamp(data.get("updated"), field_name="Fragment.updated")
        if updated is not None:
            kwargs["updated"] = updated
        return cls(**kwargs)  # type: ignore[arg-type]

    def to_record(self) -> str:
        """Serialize the fragment as the JSON record kept by a MetadataStore."""
        return json.dumps(self.to_dict(), ensure_ascii=False, sort_keys=True)

    @classmethod
    def from_record(cls, record: str | bytes) -> Fragment:
        """Deserialize a fragment from a MetadataStore JSON record."""
        try:
            payload = json.loads(record)
        except (TypeError, ValueError) as exc:
            msg = "Fragment record is not valid JSON."
            raise ValidationError(msg) from exc
        return cls.from_dict(as_str_object_dict(payload, field_name="Fragment record"))
