"""Tests for the DynamoDB and S3 stores against in-process client fakes."""

from __future__ import annotations

from typing import Any

import pytest
from botocore.exceptions import EndpointConnectionError

import fragstore.stores._aws as aws_module
from fragstore.errors import NotFoundError, StoreError
from fragstore.stores import DynamoDBMetadataStore, S3BlobStore, storage_key

# =============================================================================
# DynamoDBMetadataStore
# =============================================================================


def test_dynamodb_item_layout(dynamodb_client: Any) -> None:
    store = DynamoDBMetadataStore("fragments", client=dynamodb_client)
    store.put("owner", "frag", '{"id": "frag"}')
    assert dynamodb_client.items[("owner", "frag")] == {
        "ownerId": {"S": "owner"},
        "id": {"S": "frag"},
        "fragment": {"S": '{"id": "frag"}'},
    }
    assert store.table_name == "fragments"


def test_dynamodb_query_follows_pagination(dynamodb_client: Any) -> None:
    store = DynamoDBMetadataStore("fragments", client=dynamodb_client)
    for index in range(5):
        store.put("owner", f"id-{index}", f"record-{index}")

    assert sorted(store.query("owner")) == [f"record-{index}" for index in range(5)]
    assert dynamodb_client.query_calls == 3


def test_dynamodb_get_item_without_record_raises_store_error(dynamodb_client: Any) -> None:
    store = DynamoDBMetadataStore("fragments", client=dynamodb_client)
    dynamodb_client.items[("owner", "frag")] = {"ownerId": {"S": "owner"}, "id": {"S": "frag"}}

    with pytest.raises(StoreError, match="Corrupt metadata record for frag"):
        store.get("owner", "frag")


def test_dynamodb_query_item_without_record_raises_store_error(dynamodb_client: Any) -> None:
    store = DynamoDBMetadataStore("fragments", client=dynamodb_client)
    store.put("owner", "good", "record")
    dynamodb_client.items[("owner", "bad")] = {"ownerId": {"S": "owner"}, "id": {"S": "bad"}}

    with pytest.raises(StoreError, match="Corrupt metadata record for owner owner"):
        store.query("owner")


def test_dynamodb_conditional_delete_maps_to_not_found(dynamodb_client: Any) -> None:
    store = DynamoDBMetadataStore("fragments", client=dynamodb_client)
    with pytest.raises(NotFoundError):
        store.delete("owner", "missing")


@pytest.mark.parametrize(
    ("operation", "call"),
    [
        pytest.param("PutItem", lambda store: store.put("o", "i", "r"), id="put"),
        pytest.param("GetItem", lambda store: store.get("o", "i"), id="get"),
        pytest.param("Query", lambda store: store.query("o"), id="query"),
        pytest.param("DeleteItem", lambda store: store.delete("o", "i"), id="delete"),
    ],
)
def test_dynamodb_client_errors_become_store_errors(dynamodb_client: Any, operation: str, call: Any) -> None:
    store = DynamoDBMetadataStore("fragments", client=dynamodb_client)
    dynamodb_client.failures[operation] = "ProvisionedThroughputExceededException"
    with pytest.raises(StoreError) as exc_info:
        call(store)
    assert exc_info.value.__cause__ is not None


def test_dynamodb_connection_errors_become_store_errors() -> None:
    class _Unreachable:
        def get_item(self, **_: object) -> None:
            raise EndpointConnectionError(endpoint_url="http://localhost:4566")

    store = DynamoDBMetadataStore("fragments", client=_Unreachable())
    with pytest.raises(StoreError):
        store.get("owner", "frag")


# =============================================================================
# S3BlobStore
# =============================================================================


def test_s3_object_key_layout(s3_client: Any) -> None:
    store = S3BlobStore("bucket", client=s3_client)
    store.put("owner", "frag", b"data")
    assert s3_client.objects == {("bucket", "owner/frag"): b"data"}
    assert storage_key("owner", "frag") == "owner/frag"
    assert store.bucket == "bucket"


@pytest.mark.parametrize("code", ["NoSuchKey", "404", "NotFound"])
def test_s3_missing_object_codes_map_to_not_found(s3_client: Any, code: str) -> None:
    store = S3BlobStore("bucket", client=s3_client)
    s3_client.failures["GetObject"] = code
    with pytest.raises(NotFoundError):
        store.get("owner", "frag")


def test_s3_other_read_errors_become_store_errors(s3_client: Any) -> None:
    store = S3BlobStore("bucket", client=s3_client)
    s3_client.failures["GetObject"] = "AccessDenied"
    with pytest.raises(StoreError) as exc_info:
        store.get("owner", "frag")
    assert not isinstance(exc_info.value, NotFoundError)


def test_s3_upload_errors_become_store_errors(s3_client: Any) -> None:
    store = S3BlobStore("bucket", client=s3_client)
    s3_client.failures["PutObject"] = "SlowDown"
    with pytest.raises(StoreError):
        store.put("owner", "frag", b"data")


def test_s3_delete_errors_become_store_errors(s3_client: Any) -> None:
    store = S3BlobStore("bucket", client=s3_client)
    store.put("owner", "frag", b"data")
    s3_client.failures["DeleteObject"] = "InternalError"
    with pytest.raises(StoreError):
        store.delete("owner", "frag")


def test_s3_head_errors_other_than_missing_raise(s3_client: Any) -> None:
    store = S3BlobStore("bucket", client=s3_client)
    s3_client.failures["HeadObject"] = "403"
    with pytest.raises(StoreError):
        store.has("owner", "frag")


def test_default_clients_are_created_lazily(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[tuple[str, str | None, str | None]] = []

    def _fake_client(service: str, *, region_name: str | None, endpoint_url: str | None) -> object:
        created.append((service, region_name, endpoint_url))
        return object()

    monkeypatch.setattr(aws_module, "_default_client", _fake_client)
    DynamoDBMetadataStore("fragments", region_name="us-east-1")
    S3BlobStore("bucket", endpoint_url="http://localhost:4566")

    assert created == [("dynamodb", "us-east-1", None), ("s3", None, "http://localhost:4566")]
