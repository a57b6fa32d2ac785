"""Environment-based settings and store wiring for fragstore.

Usage:
    from fragstore.config import configure
    repository = configure()
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from fragstore.log import configure_logging
from fragstore.repository import FragmentRepository
from fragstore.stores import (
    DynamoDBMetadataStore,
    FileBlobStore,
    FileMetadataStore,
    InMemoryBlobStore,
    InMemoryMetadataStore,
    S3BlobStore,
)

Backend = Literal["memory", "file", "aws"]
_BACKENDS: frozenset[str] = frozenset({"memory", "file", "aws"})


@dataclass(frozen=True)
class Settings:
    """Immutable settings loaded from environment."""

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Storage
    backend: Backend = "memory"
    data_dir: Path = Path("data")

    # AWS
    aws_region: str | None = None
    s3_bucket: str | None = None
    s3_endpoint_url: str | None = None
    dynamodb_table: str | None = None
    dynamodb_endpoint_url: str | None = None


def get_settings() -> Settings:
    """Load settings from environment variables.

    Environment variables (all optional):
        FRAGSTORE_LOG_LEVEL: Logging level (default: INFO)
        FRAGSTORE_LOG_JSON: Render logs as JSON (default: true)
        FRAGSTORE_BACKEND: memory, file or aws (default: memory)
        FRAGSTORE_DATA_DIR: Root directory for the file backend (default: data)
        AWS_REGION: Region for the aws backend
        AWS_S3_BUCKET_NAME: Bucket holding fragment data
        AWS_S3_ENDPOINT_URL: S3 endpoint override, e.g. a local emulator
        AWS_DYNAMODB_TABLE_NAME: Table holding fragment metadata
        AWS_DYNAMODB_ENDPOINT_URL: DynamoDB endpoint override
    """
    def _bool(key: str, default: bool = False) -> bool:
        val = os.environ.get(key, "").lower()
        if val in ("1", "true", "yes"):
            return True
        if val in ("0", "false", "no"):
            return False
        return default

    def _optional(key: str) -> str | None:
        return os.environ.get(key) or None

    backend = os.environ.get("FRAGSTORE_BACKEND", "memory").lower()
    if backend not in _BACKENDS:
        msg = f"FRAGSTORE_BACKEND must be one of {', '.join(sorted(_BACKENDS))}, got {backend!r}."
        raise ValueError(msg)

    return Settings(
        log_level=os.environ.get("FRAGSTORE_LOG_LEVEL", "INFO").upper(),
        log_json=_bool("FRAGSTORE_LOG_JSON", True),
        backend=backend,  # type: ignore[arg-type]
        data_dir=Path(os.environ.get("FRAGSTORE_DATA_DIR", "data")),
        aws_region=_optional("AWS_REGION"),
        s3_bucket=_optional("AWS_S3_BUCKET_NAME"),
        s3_endpoint_url=_optional("AWS_S3_ENDPOINT_URL"),
        dynamodb_table=_optional("AWS_DYNAMODB_TABLE_NAME"),
        dynamodb_endpoint_url=_optional("AWS_DYNAMODB_ENDPOINT_URL"),
    )


def build_repository(settings: Settings) -> FragmentRepository:
    """Construct the store pair selected by ``settings`` and wrap it in a repository."""
    if settings.backend == "memory":
        return FragmentRepository(InMemoryMetadataStore(), InMemoryBlobStore())

    if settings.backend == "file":
        return FragmentRepository(
            FileMetadataStore(settings.data_dir / "metadata"),
            FileBlobStore(settings.data_dir / "data"),
        )

    if not settings.s3_bucket or not settings.dynamodb_table:
        msg = "The aws backend requires AWS_S3_BUCKET_NAME and AWS_DYNAMODB_TABLE_NAME."
        raise ValueError(msg)
    return FragmentRepository(
        DynamoDBMetadataStore(
            settings.dynamodb_table,
            region_name=settings.aws_region,
            endpoint_url=settings.dynamodb_endpoint_url,
        ),
        S3BlobStore(
            settings.s3_bucket,
            region_name=settings.aws_region,
            endpoint_url=settings.s3_endpoint_url,
        ),
    )


def configure(settings: Settings | None = None) -> FragmentRepository:
    """Set up logging and storage for a process.

    Loads settings from the environment when none are given, applies the
    log level and renderer, then builds the repository.
    """
    if settings is None:
        settings = get_settings()
    configure_logging(json_output=settings.log_json, level=settings.log_level)
    return build_repository(settings)
