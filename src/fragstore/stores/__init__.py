"""MetadataStore and BlobStore backends for fragstore."""

from fragstore.stores._aws import DynamoDBMetadataStore, S3BlobStore
from fragstore.stores._file import FileBlobStore, FileMetadataStore
from fragstore.stores._memory import InMemoryBlobStore, InMemoryMetadataStore
from fragstore.stores._store import BlobStore, MetadataStore, storage_key

__all__ = [
    "BlobStore",
    "DynamoDBMetadataStore",
    "FileBlobStore",
    "FileMetadataStore",
    "InMemoryBlobStore",
    "InMemoryMetadataStore",
    "MetadataStore",
    "S3BlobStore",
    "storage_key",
]
