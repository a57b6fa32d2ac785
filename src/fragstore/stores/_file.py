"""File-system stores: one directory per owner under a root directory."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from urllib.parse import quote

from fragstore.errors import NotFoundError, StoreError

_BLOB_SUFFIX = ".blob"
_META_SUFFIX = ".meta.json"


def _path_segment(value: str) -> str:
    """Encode an opaque ID as a single, reversible path segment."""
    if not value:
        msg = "Storage keys must be non-empty."
        raise StoreError(msg)
    # Dots are encoded so "." and ".." cannot name a real directory.
    return quote(value, safe="").replace(".", "%2E")


class _FileStore:
    """Shared path handling for file-system stores."""

    _suffix = ""

    def __init__(self, root: str | Path) -> None:
        """Initialize with a root directory, creating it if needed."""
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        """Return the root directory path."""
        return self._root

    def _owner_dir(self, owner_id: str) -> Path:
        """Resolve an owner's directory and ensure it stays under the store root."""
        root = self._root.resolve()
        candidate = (self._root / _path_segment(owner_id)).resolve()
        try:
            candidate.relative_to(root)
        except ValueError as exc:
            msg = f"Owner ID {owner_id!r} resolves outside store root."
            raise StoreError(msg) from exc
        return candidate

    def _path(self, owner_id: str, fragment_id: str) -> Path:
        """Resolve the file path for one key."""
        return self._owner_dir(owner_id) / f"{_path_segment(fragment_id)}{self._suffix}"

    def _write(self, path: Path, payload: bytes) -> None:
        """Replace ``path`` with ``payload`` in one rename."""
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_name(f".{uuid.uuid4().hex}.tmp")
        try:
            temp_path.write_bytes(payload)
            os.replace(temp_path, path)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            msg = f"Unable to write {path.name}"
            raise StoreError(msg) from exc

    def has(self, owner_id: str, fragment_id: str) -> bool:
        """Check whether a file exists for the key."""
        return self._path(owner_id, fragment_id).is_file()


class FileMetadataStore(_FileStore):
    """File-system metadata store.

    Store each record as ``<root>/<owner>/<id>.meta.json``.
    """

    _suffix = _META_SUFFIX

    def put(self, owner_id: str, fragment_id: str, record: str) -> None:
        """Store or overwrite one record."""
        self._write(self._path(owner_id, fragment_id), record.encode("utf-8"))

    def get(self, owner_id: str, fragment_id: str) -> str | None:
        """Return one record, or ``None`` when absent."""
        path = self._path(owner_id, fragment_id)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            msg = f"Unable to read metadata for {fragment_id}"
            raise StoreError(msg) from exc

    def query(self, owner_id: str) -> tuple[str, ...]:
        """Return every record stored for ``owner_id``."""
        owner_dir = self._owner_dir(owner_id)
        if not owner_dir.is_dir():
            return ()
        records: list[str] = []
        for meta_path in owner_dir.glob(f"*{_META_SUFFIX}"):
            try:
                records.append(meta_path.read_text(encoding="utf-8"))
            except FileNotFoundError:
                # Deleted between listing and reading.
                continue
            except OSError as exc:
                msg = f"Unable to read metadata file {meta_path.name}"
                raise StoreError(msg) from exc
        return tuple(records)

    def delete(self, owner_id: str, fragment_id: str) -> None:
        """Remove one record. Raise NotFoundError when absent."""
        path = self._path(owner_id, fragment_id)
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise NotFoundError(owner_id, fragment_id) from exc
        except OSError as exc:
            msg = f"Unable to delete metadata for {fragment_id}"
            raise StoreError(msg) from exc


class FileBlobStore(_FileStore):
    """File-system blob store.

    Store each payload as ``<root>/<owner>/<id>.blob``.
    """

    _suffix = _BLOB_SUFFIX

    def put(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        """Store or overwrite one payload."""
        self._write(self._path(owner_id, fragment_id), bytes(data))

    def get(self, owner_id: str, fragment_id: str) -> bytes:
        """Return one payload. Raise NotFoundError when absent."""
        path = self._path(owner_id, fragment_id)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise NotFoundError(owner_id, fragment_id) from exc
        except OSError as exc:
            msg = f"Unable to read data for {fragment_id}"
            raise StoreError(msg) from exc

    def delete(self, owner_id: str, fragment_id: str) -> bool:
        """Remove one payload. Return ``False`` when nothing was stored."""
        path = self._path(owner_id, fragment_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            msg = f"Unable to delete data for {fragment_id}"
            raise StoreError(msg) from exc
        return True
