"""FragmentRepository: fragment lifecycle over a MetadataStore and a BlobStore."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal, overload

from fragstore.conversion import ConversionEngine, ConvertedData
from fragstore.errors import (
    FragmentIntegrityError,
    NotFoundError,
    StoreError,
    UnsupportedConversionError,
    ValidationError,
)
from fragstore.fragment import Fragment
from fragstore.log import get_logger
from fragstore.mediatypes import base_type, media_type_for_extension

if TYPE_CHECKING:
    from fragstore.stores import BlobStore, MetadataStore


def _as_bytes(data: object) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        msg = "data must be bytes."
        raise ValidationError(msg)
    return bytes(data)


def _require_key(owner_id: object, fragment_id: object) -> None:
    if not isinstance(owner_id, str) or not owner_id or not isinstance(fragment_id, str) or not fragment_id:
        msg = "owner_id and fragment_id are required."
        raise ValidationError(msg)


class FragmentRepository:
    """Create, read, update, list, delete and convert fragments.

    Every write touches metadata before data, so a failure part-way leaves
    at worst an unreferenced payload, never a record without data. Create
    and update undo their metadata write when the data write fails. Delete
    commits once the metadata record is gone; a failure to remove the
    payload afterwards is logged and otherwise ignored.
    """

    def __init__(
        self,
        metadata: MetadataStore,
        blobs: BlobStore,
        *,
        engine: ConversionEngine | None = None,
    ) -> None:
        """Initialize with a store pair and an optional conversion engine."""
        self._metadata = metadata
        self._blobs = blobs
        self._engine = engine if engine is not None else ConversionEngine()
        self._log = get_logger("repository")

    @property
    def metadata(self) -> MetadataStore:
        """Return the metadata store."""
        return self._metadata

    @property
    def blobs(self) -> BlobStore:
        """Return the blob store."""
        return self._blobs

    @property
    def engine(self) -> ConversionEngine:
        """Return the conversion engine."""
        return self._engine

    def _load(self, record: str, *, fragment_id: str | None = None) -> Fragment:
        """Rebuild a Fragment from a stored record."""
        try:
            return Fragment.from_record(record)
        except ValidationError as exc:
            msg = f"Corrupt metadata record{f' for {fragment_id}' if fragment_id else ''}: {exc}"
            raise StoreError(msg) from exc

    def _restore_metadata(self, owner_id: str, fragment_id: str, previous: Fragment | None) -> None:
        """Undo a metadata write whose data write failed."""
        try:
            if previous is None:
                self._metadata.delete(owner_id, fragment_id)
            else:
                self._metadata.put(owner_id, fragment_id, previous.to_record())
        except (NotFoundError, StoreError) as exc:
            self._log.error("metadata_rollback_failed", owner_id=owner_id, fragment_id=fragment_id, error=str(exc))

    def create_fragment(self, owner_id: str, content_type: str, data: bytes) -> Fragment:
        """Store ``data`` as a new fragment and return its metadata."""
        payload = _as_bytes(data)
        fragment = Fragment(owner_id=owner_id, type=content_type, size=len(payload))

        self._metadata.put(owner_id, fragment.id, fragment.to_record())
        try:
            self._blobs.put(owner_id, fragment.id, payload)
        except StoreError as exc:
            self._log.warning("create_rolled_back", owner_id=owner_id, fragment_id=fragment.id, error=str(exc))
            self._restore_metadata(owner_id, fragment.id, None)
            raise

        self._log.debug("fragment_created", owner_id=owner_id, fragment_id=fragment.id, type=fragment.type)
        return fragment

    def get_fragment(self, owner_id: str, fragment_id: str) -> Fragment:
        """Return a fragment's metadata. Raise NotFoundError when absent."""
        _require_key(owner_id, fragment_id)
        record = self._metadata.get(owner_id, fragment_id)
        if record is None:
            raise NotFoundError(owner_id, fragment_id)
        return self._load(record, fragment_id=fragment_id)

    def read_data(self, owner_id: str, fragment_id: str) -> bytes:
        """Return a fragment's stored bytes without consulting its metadata."""
        _require_key(owner_id, fragment_id)
        return self._blobs.get(owner_id, fragment_id)

    def get_fragment_data(self, owner_id: str, fragment_id: str) -> bytes:
        """Return a fragment's bytes after checking them against its metadata.

        Raise NotFoundError when the fragment does not exist and
        FragmentIntegrityError when the stored length disagrees with ``size``.
        """
        fragment = self.get_fragment(owner_id, fragment_id)
        data = self._blobs.get(owner_id, fragment_id)
        if len(data) != fragment.size:
            self._log.error(
                "fragment_size_mismatch",
                owner_id=owner_id,
                fragment_id=fragment_id,
                expected=fragment.size,
                actual=len(data),
            )
            raise FragmentIntegrityError(fragment_id, fragment.size, len(data))
        return data

    def update_fragment_data(
        self,
        owner_id: str,
        fragment_id: str,
        data: bytes,
        *,
        content_type: str | None = None,
    ) -> Fragment:
        """Replace an existing fragment's bytes and return the refreshed metadata.

        When ``content_type`` is given its base type must match the stored
        one, otherwise TypeMismatchError is raised and nothing is written.
        """
        payload = _as_bytes(data)
        current = self.get_fragment(owner_id, fragment_id)
        if content_type is not None:
            current.check_type(content_type)
        updated = current.with_data(payload)

        self._metadata.put(owner_id, fragment_id, updated.to_record())
        try:
            self._blobs.put(owner_id, fragment_id, payload)
        except StoreError as exc:
            self._log.warning("update_rolled_back", owner_id=owner_id, fragment_id=fragment_id, error=str(exc))
            self._restore_metadata(owner_id, fragment_id, current)
            raise

        self._log.debug("fragment_updated", owner_id=owner_id, fragment_id=fragment_id, size=updated.size)
        return updated

    @overload
    def list_fragments(self, owner_id: str, *, expand: Literal[True]) -> tuple[Fragment, ...]: ...

    @overload
    def list_fragments(self, owner_id: str, *, expand: Literal[False] = ...) -> tuple[str, ...]: ...

    def list_fragments(self, owner_id: str, *, expand: bool = False) -> tuple[Fragment, ...] | tuple[str, ...]:
        """Return an owner's fragments, or only their IDs when ``expand`` is false.

        Results are ordered by creation time, then ID.
        """
        if not isinstance(owner_id, str) or not owner_id:
            msg = "owner_id is required."
            raise ValidationError(msg)
        fragments = sorted(
            (self._load(record) for record in self._metadata.query(owner_id)),
            key=lambda fragment: (fragment.created, fragment.id),
        )
        if expand:
            return tuple(fragments)
        return tuple(fragment.id for fragment in fragments)

    def delete_fragment(self, owner_id: str, fragment_id: str) -> None:
        """Delete a fragment. Raise NotFoundError when it does not exist."""
        _require_key(owner_id, fragment_id)
        if not self._metadata.has(owner_id, fragment_id):
            raise NotFoundError(owner_id, fragment_id)
        self._metadata.delete(owner_id, fragment_id)

        try:
            removed = self._blobs.delete(owner_id, fragment_id)
        except NotFoundError:
            removed = False
        except StoreError as exc:
            self._log.warning("blob_delete_failed", owner_id=owner_id, fragment_id=fragment_id, error=str(exc))
            return
        if not removed:
            self._log.debug("blob_already_absent", owner_id=owner_id, fragment_id=fragment_id)
        self._log.debug("fragment_deleted", owner_id=owner_id, fragment_id=fragment_id)

    def convert(self, fragment: Fragment, target: str) -> ConvertedData:
        """Return a fragment's data converted to ``target``.

        ``target`` is a media type (``text/html``) or a file extension
        (``html``, ``.md``). Raise UnsupportedConversionError when the target
        is not among ``fragment.formats``.
        """
        target_type = self._resolve_target(fragment, target)
        if target_type not in fragment.formats:
            raise UnsupportedConversionError(fragment.mime_type, target_type)
        data = self.get_fragment_data(fragment.owner_id, fragment.id)
        return self._engine.convert(fragment.type, data, target_type)

    @staticmethod
    def _resolve_target(fragment: Fragment, target: str) -> str:
        """Turn a media type or file extension into a base type."""
        if "/" in target:
            try:
                return base_type(target)
            except ValueError as exc:
                raise UnsupportedConversionError(fragment.mime_type, target) from exc
        target_type = media_type_for_extension(target)
        if target_type is None:
            raise UnsupportedConversionError(fragment.mime_type, target)
        return target_type
