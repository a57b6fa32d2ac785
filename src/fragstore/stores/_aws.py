"""AWS stores: DynamoDB for metadata records, S3 for payloads.

Both stores accept a pre-built ``boto3`` client, which keeps them usable
against emulators and in-process fakes. When no client is given one is
created from the default credential chain.
"""

from __future__ import annotations

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from fragstore.errors import NotFoundError, StoreError
from fragstore.stores._store import storage_key

_S3_MISSING_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def _error_code(exc: ClientError) -> str:
    """Return the service error code carried by a ClientError."""
    return str(exc.response.get("Error", {}).get("Code", ""))


def _record_of(item: dict[str, Any], context: str) -> str:
    """Return the record string held in an item's ``fragment`` attribute."""
    try:
        return str(item["fragment"]["S"])
    except (KeyError, TypeError) as exc:
        msg = f"Corrupt metadata record for {context}: missing fragment attribute"
        raise StoreError(msg) from exc


def _default_client(service: str, *, region_name: str | None, endpoint_url: str | None) -> Any:
    import boto3

    return boto3.client(service, region_name=region_name, endpoint_url=endpoint_url)


class DynamoDBMetadataStore:
    """Metadata store backed by a DynamoDB table.

    The table uses ``ownerId`` as partition key and ``id`` as sort key.
    Each record is kept verbatim in the string attribute ``fragment``.
    """

    def __init__(
        self,
        table_name: str,
        *,
        client: Any | None = None,
        region_name: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        """Initialize with a table name and an optional low-level DynamoDB client."""
        self._table_name = table_name
        self._client = client or _default_client("dynamodb", region_name=region_name, endpoint_url=endpoint_url)

    @property
    def table_name(self) -> str:
        """Return the DynamoDB table name."""
        return self._table_name

    @staticmethod
    def _key(owner_id: str, fragment_id: str) -> dict[str, dict[str, str]]:
        return {"ownerId": {"S": owner_id}, "id": {"S": fragment_id}}

    def put(self, owner_id: str, fragment_id: str, record: str) -> None:
        """Store or overwrite one record."""
        item = {**self._key(owner_id, fragment_id), "fragment": {"S": record}}
        try:
            self._client.put_item(TableName=self._table_name, Item=item)
        except (ClientError, BotoCoreError) as exc:
            msg = f"Unable to write metadata for {fragment_id}"
            raise StoreError(msg) from exc

    def get(self, owner_id: str, fragment_id: str) -> str | None:
        """Return one record, or ``None`` when absent."""
        try:
            response = self._client.get_item(
                TableName=self._table_name,
                Key=self._key(owner_id, fragment_id),
                ConsistentRead=True,
            )
        except (ClientError, BotoCoreError) as exc:
            msg = f"Unable to read metadata for {fragment_id}"
            raise StoreError(msg) from exc
        item = response.get("Item")
        if not item:
            return None
        return _record_of(item, fragment_id)

    def has(self, owner_id: str, fragment_id: str) -> bool:
        """Check whether a record exists."""
        return self.get(owner_id, fragment_id) is not None

    def query(self, owner_id: str) -> tuple[str, ...]:
        """Return every record stored for ``owner_id``, following pagination."""
        params: dict[str, Any] = {
            "TableName": self._table_name,
            "KeyConditionExpression": "ownerId = :ownerId",
            "ExpressionAttributeValues": {":ownerId": {"S": owner_id}},
            "ProjectionExpression": "fragment",
        }
        records: list[str] = []
        while True:
            try:
                response = self._client.query(**params)
            except (ClientError, BotoCoreError) as exc:
                msg = f"Unable to query metadata for owner {owner_id}"
                raise StoreError(msg) from exc
            records.extend(_record_of(item, f"owner {owner_id}") for item in response.get("Items", ()))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return tuple(records)
            params["ExclusiveStartKey"] = last_key

    def delete(self, owner_id: str, fragment_id: str) -> None:
        """Remove one record. Raise NotFoundError when absent."""
        try:
            self._client.delete_item(
                TableName=self._table_name,
                Key=self._key(owner_id, fragment_id),
                ConditionExpression="attribute_exists(#id)",
                ExpressionAttributeNames={"#id": "id"},
            )
        except ClientError as exc:
            if _error_code(exc) == "ConditionalCheckFailedException":
                raise NotFoundError(owner_id, fragment_id) from exc
            msg = f"Unable to delete metadata for {fragment_id}"
            raise StoreError(msg) from exc
        except BotoCoreError as exc:
            msg = f"Unable to delete metadata for {fragment_id}"
            raise StoreError(msg) from exc


class S3BlobStore:
    """Blob store backed by an S3 bucket, one object per fragment at ``<owner>/<id>``."""

    def __init__(
        self,
        bucket: str,
        *,
        client: Any | None = None,
        region_name: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        """Initialize with a bucket name and an optional S3 client."""
        self._bucket = bucket
        self._client = client or _default_client("s3", region_name=region_name, endpoint_url=endpoint_url)

    @property
    def bucket(self) -> str:
        """Return the S3 bucket name."""
        return self._bucket

    def put(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        """Upload one payload."""
        try:
            self._client.put_object(Bucket=self._bucket, Key=storage_key(owner_id, fragment_id), Body=bytes(data))
        except (ClientError, BotoCoreError) as exc:
            msg = f"Unable to upload data for {fragment_id}"
            raise StoreError(msg) from exc

    def get(self, owner_id: str, fragment_id: str) -> bytes:
        """Download one payload. Raise NotFoundError when the object does not exist."""
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=storage_key(owner_id, fragment_id))
            return bytes(response["Body"].read())
        except ClientError as exc:
            if _error_code(exc) in _S3_MISSING_CODES:
                raise NotFoundError(owner_id, fragment_id) from exc
            msg = f"Unable to read data for {fragment_id}"
            raise StoreError(msg) from exc
        except BotoCoreError as exc:
            msg = f"Unable to read data for {fragment_id}"
            raise StoreError(msg) from exc

    def has(self, owner_id: str, fragment_id: str) -> bool:
        """Check whether the object exists."""
        try:
            self._client.head_object(Bucket=self._bucket, Key=storage_key(owner_id, fragment_id))
        except ClientError as exc:
            if _error_code(exc) in _S3_MISSING_CODES:
                return False
            msg = f"Unable to inspect data for {fragment_id}"
            raise StoreError(msg) from exc
        except BotoCoreError as exc:
            msg = f"Unable to inspect data for {fragment_id}"
            raise StoreError(msg) from exc
        return True

    def delete(self, owner_id: str, fragment_id: str) -> bool:
        """Delete one object.

        S3 deletes are idempotent and do not report whether an object
        existed, so this checks first and returns ``False`` for a missing key.
        """
        if not self.has(owner_id, fragment_id):
            return False
        try:
            self._client.delete_object(Bucket=self._bucket, Key=storage_key(owner_id, fragment_id))
        except ClientError as exc:
            if _error_code(exc) in _S3_MISSING_CODES:
                return False
            msg = f"Unable to delete data for {fragment_id}"
            raise StoreError(msg) from exc
        except BotoCoreError as exc:
            msg = f"Unable to delete data for {fragment_id}"
            raise StoreError(msg) from exc
        return True
