"""fragstore: owner-scoped fragment storage with content-type driven conversion."""

import importlib.metadata as importlib_metadata

from fragstore.config import Settings, build_repository, configure, get_settings
from fragstore.conversion import ConversionEngine, ConvertedData, ImageCodec, PillowImageCodec
from fragstore.errors import (
    ConversionError,
    FragmentIntegrityError,
    FragstoreError,
    NotFoundError,
    StoreError,
    TypeMismatchError,
    UnsupportedConversionError,
    UnsupportedTypeError,
    ValidationError,
)
from fragstore.fragment import Fragment
from fragstore.log import configure_logging
from fragstore.mediatypes import (
    SUPPORTED_TYPES,
    MediaType,
    formats_for,
    is_supported_type,
    media_type_for_extension,
    parse_media_type,
)
from fragstore.repository import FragmentRepository
from fragstore.stores import (
    BlobStore,
    DynamoDBMetadataStore,
    FileBlobStore,
    FileMetadataStore,
    InMemoryBlobStore,
    InMemoryMetadataStore,
    MetadataStore,
    S3BlobStore,
)


def _detect_version() -> str:
    """Return installed package version or a local fallback when metadata is unavailable."""
    try:
        return importlib_metadata.version("fragstore")
    except importlib_metadata.PackageNotFoundError:
        return "0.0.0+unknown"


__version__ = _detect_version()

__all__ = [
    "SUPPORTED_TYPES",
    "BlobStore",
    "ConversionEngine",
    "ConversionError",
    "ConvertedData",
    "DynamoDBMetadataStore",
    "FileBlobStore",
    "FileMetadataStore",
    "Fragment",
    "FragmentIntegrityError",
    "FragmentRepository",
    "FragstoreError",
    "ImageCodec",
    "InMemoryBlobStore",
    "InMemoryMetadataStore",
    "MediaType",
    "MetadataStore",
    "NotFoundError",
    "PillowImageCodec",
    "S3BlobStore",
    "Settings",
    "StoreError",
    "TypeMismatchError",
    "UnsupportedConversionError",
    "UnsupportedTypeError",
    "ValidationError",
    "build_repository",
    "configure",
    "configure_logging",
    "formats_for",
    "get_settings",
    "is_supported_type",
    "media_type_for_extension",
    "parse_media_type",
]
