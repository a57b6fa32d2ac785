"""In-memory stores for development and testing."""

from __future__ import annotations

import threading

from fragstore.errors import NotFoundError


class _KeyedDict:
    """Two-level ``owner_id -> fragment_id -> value`` mapping guarded by a lock."""

    def __init__(self) -> None:
        self._buckets: dict[str, dict[str, object]] = {}
        self._lock = threading.Lock()

    def put(self, owner_id: str, fragment_id: str, value: object) -> None:
        with self._lock:
            self._buckets.setdefault(owner_id, {})[fragment_id] = value

    def get(self, owner_id: str, fragment_id: str) -> object | None:
        with self._lock:
            return self._buckets.get(owner_id, {}).get(fragment_id)

    def values(self, owner_id: str) -> tuple[object, ...]:
        with self._lock:
            return tuple(self._buckets.get(owner_id, {}).values())

    def pop(self, owner_id: str, fragment_id: str) -> object | None:
        with self._lock:
            bucket = self._buckets.get(owner_id)
            if bucket is None:
                return None
            value = bucket.pop(fragment_id, None)
            if not bucket:
                del self._buckets[owner_id]
            return value


class InMemoryMetadataStore:
    """In-memory metadata store. Records are kept as their serialized strings."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._records = _KeyedDict()

    def put(self, owner_id: str, fragment_id: str, record: str) -> None:
        """Store or overwrite one record."""
        self._records.put(owner_id, fragment_id, record)

    def get(self, owner_id: str, fragment_id: str) -> str | None:
        """Return one record, or ``None`` when absent."""
        record = self._records.get(owner_id, fragment_id)
        return None if record is None else str(record)

    def has(self, owner_id: str, fragment_id: str) -> bool:
        """Check whether a record exists."""
        return self._records.get(owner_id, fragment_id) is not None

    def query(self, owner_id: str) -> tuple[str, ...]:
        """Return every record stored for ``owner_id``."""
        return tuple(str(record) for record in self._records.values(owner_id))

    def delete(self, owner_id: str, fragment_id: str) -> None:
        """Remove one record. Raise NotFoundError when absent."""
        if self._records.pop(owner_id, fragment_id) is None:
            raise NotFoundError(owner_id, fragment_id)


class InMemoryBlobStore:
    """In-memory blob store."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._blobs = _KeyedDict()

    def put(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        """Store a copy of ``data``."""
        self._blobs.put(owner_id, fragment_id, bytes(data))

    def get(self, owner_id: str, fragment_id: str) -> bytes:
        """Return one payload. Raise NotFoundError when absent."""
        data = self._blobs.get(owner_id, fragment_id)
        if data is None:
            raise NotFoundError(owner_id, fragment_id)
        return bytes(data)  # type: ignore[arg-type]

    def has(self, owner_id: str, fragment_id: str) -> bool:
        """Check whether a payload exists."""
        return self._blobs.get(owner_id, fragment_id) is not None

    def delete(self, owner_id: str, fragment_id: str) -> bool:
        """Remove one payload. Return ``False`` when nothing was stored."""
        return self._blobs.pop(owner_id, fragment_id) is not None
