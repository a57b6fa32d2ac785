"""MetadataStore and BlobStore: protocols for fragment storage backends."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


def storage_key(owner_id: str, fragment_id: str) -> str:
    """Return the ``<owner_id>/<fragment_id>`` key used by flat key-value backends."""
    return f"{owner_id}/{fragment_id}"


@runtime_checkable
class MetadataStore(Protocol):
    """Structured-record storage keyed by ``(owner_id, fragment_id)``.

    Records are opaque serialized strings; stores never interpret them.
    """

    def put(self, owner_id: str, fragment_id: str, record: str) -> None:
        """Store or overwrite one record."""
        ...

    def get(self, owner_id: str, fragment_id: str) -> str | None:
        """Return one record, or ``None`` when absent."""
        ...

    def has(self, owner_id: str, fragment_id: str) -> bool:
        """Check whether a record exists."""
        ...

    def query(self, owner_id: str) -> tuple[str, ...]:
        """Return every record stored for ``owner_id``, in no particular order."""
        ...

    def delete(self, owner_id: str, fragment_id: str) -> None:
        """Remove one record. Raise NotFoundError when absent."""
        ...


@runtime_checkable
class BlobStore(Protocol):
    """Raw byte storage keyed by ``(owner_id, fragment_id)``."""

    def put(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        """Store or overwrite one payload."""
        ...

    def get(self, owner_id: str, fragment_id: str) -> bytes:
        """Return one payload. Raise NotFoundError when absent."""
        ...

    def has(self, owner_id: str, fragment_id: str) -> bool:
        """Check whether a payload exists."""
        ...

    def delete(self, owner_id: str, fragment_id: str) -> bool:
        """Remove one payload. Return ``False`` when nothing was stored."""
        ...
