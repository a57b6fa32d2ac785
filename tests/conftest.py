"""Shared fixtures: in-process AWS client fakes and a repository per backend."""

from __future__ import annotations

import io
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from botocore.exceptions import ClientError

from fragstore.repository import FragmentRepository
from fragstore.stores import (
    DynamoDBMetadataStore,
    FileBlobStore,
    FileMetadataStore,
    InMemoryBlobStore,
    InMemoryMetadataStore,
    S3BlobStore,
)


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class FakeDynamoDBClient:
    """Subset of the low-level DynamoDB client used by DynamoDBMetadataStore."""

    def __init__(self, *, page_size: int = 2) -> None:
        self.items: dict[tuple[str, str], dict[str, dict[str, str]]] = {}
        self.page_size = page_size
        self.query_calls = 0
        self.failures: dict[str, str] = {}

    def _maybe_fail(self, operation: str) -> None:
        code = self.failures.get(operation)
        if code is not None:
            raise client_error(code, operation)

    @staticmethod
    def _key(key: dict[str, dict[str, str]]) -> tuple[str, str]:
        return key["ownerId"]["S"], key["id"]["S"]

    def put_item(self, *, TableName: str, Item: dict[str, dict[str, str]]) -> dict[str, object]:
        self._maybe_fail("PutItem")
        self.items[self._key(Item)] = dict(Item)
        return {}

    def get_item(
        self,
        *,
        TableName: str,
        Key: dict[str, dict[str, str]],
        ConsistentRead: bool = False,
    ) -> dict[str, object]:
        self._maybe_fail("GetItem")
        item = self.items.get(self._key(Key))
        return {"Item": item} if item is not None else {}

    def query(
        self,
        *,
        TableName: str,
        KeyConditionExpression: str,
        ExpressionAttributeValues: dict[str, dict[str, str]],
        ProjectionExpression: str | None = None,
        ExclusiveStartKey: dict[str, dict[str, str]] | None = None,
    ) -> dict[str, object]:
        self._maybe_fail("Query")
        self.query_calls += 1
        owner_id = ExpressionAttributeValues[":ownerId"]["S"]
        keys = sorted(key for key in self.items if key[0] == owner_id)
        start = 0
        if ExclusiveStartKey is not None:
            start = keys.index(self._key(ExclusiveStartKey)) + 1
        page = keys[start : start + self.page_size]
        response: dict[str, object] = {
            "Items": [{name: value for name, value in self.items[key].items() if name == "fragment"} for key in page]
        }
        if start + self.page_size < len(keys):
            response["LastEvaluatedKey"] = {"ownerId": {"S": owner_id}, "id": {"S": page[-1][1]}}
        return response

    def delete_item(
        self,
        *,
        TableName: str,
        Key: dict[str, dict[str, str]],
        ConditionExpression: str | None = None,
        ExpressionAttributeNames: dict[str, str] | None = None,
    ) -> dict[str, object]:
        self._maybe_fail("DeleteItem")
        key = self._key(Key)
        if key not in self.items:
            raise client_error("ConditionalCheckFailedException", "DeleteItem")
        del self.items[key]
        return {}


class FakeS3Client:
    """Subset of the S3 client used by S3BlobStore."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.failures: dict[str, str] = {}

    def _maybe_fail(self, operation: str) -> None:
        code = self.failures.get(operation)
        if code is not None:
            raise client_error(code, operation)

    def put_object(self, *, Bucket: str, Key: str, Body: bytes) -> dict[str, object]:
        self._maybe_fail("PutObject")
        self.objects[(Bucket, Key)] = bytes(Body)
        return {}

    def get_object(self, *, Bucket: str, Key: str) -> dict[str, object]:
        self._maybe_fail("GetObject")
        if (Bucket, Key) not in self.objects:
            raise client_error("NoSuchKey", "GetObject")
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)])}

    def head_object(self, *, Bucket: str, Key: str) -> dict[str, object]:
        self._maybe_fail("HeadObject")
        if (Bucket, Key) not in self.objects:
            raise client_error("404", "HeadObject")
        return {"ContentLength": len(self.objects[(Bucket, Key)])}

    def delete_object(self, *, Bucket: str, Key: str) -> dict[str, object]:
        self._maybe_fail("DeleteObject")
        self.objects.pop((Bucket, Key), None)
        return {}


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Undo any logging configuration a test applied."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


@pytest.fixture
def dynamodb_client() -> FakeDynamoDBClient:
    return FakeDynamoDBClient()


@pytest.fixture
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture(params=["memory", "file", "aws"])
def repository(
    request: pytest.FixtureRequest,
    tmp_path: Path,
    dynamodb_client: FakeDynamoDBClient,
    s3_client: FakeS3Client,
) -> FragmentRepository:
    """A repository over each backend pair; every repository test runs against all of them."""
    if request.param == "memory":
        return FragmentRepository(InMemoryMetadataStore(), InMemoryBlobStore())
    if request.param == "file":
        return FragmentRepository(FileMetadataStore(tmp_path / "metadata"), FileBlobStore(tmp_path / "data"))
    return FragmentRepository(
        DynamoDBMetadataStore("fragments", client=dynamodb_client),
        S3BlobStore("fragments-bucket", client=s3_client),
    )
