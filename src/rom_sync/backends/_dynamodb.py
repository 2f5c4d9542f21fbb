"""DynamoDB-backed metadata index using boto3."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from rom_sync._errors import BackendFailure, PermissionDenied, SyncError
from rom_sync._index import MetadataIndex
from rom_sync._models import FileKind, MetadataRecord

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rom_sync._config import MetadataIndexConfig
    from rom_sync._types import Clock

log = logging.getLogger(__name__)

HASH_KEY = "file-identifier"

# Table becomes usable within 5 minutes or init fails.
_WAITER_CONFIG = {"Delay": 5, "MaxAttempts": 60}

_ACCESS_DENIED_CODES = frozenset({"AccessDeniedException", "UnrecognizedClientException"})


def record_to_item(record: MetadataRecord) -> dict[str, dict[str, str]]:
    """Serialize a record into a DynamoDB attribute map."""
    return {
        HASH_KEY: {"S": record.identity},
        "s3location": {"S": record.location},
        "originalFileName": {"S": record.original_name},
        "fileDir": {"S": record.directory},
        "username": {"S": record.owner},
        "fileType": {"S": record.kind.value},
        "lastModifiedTime": {"N": str(record.last_modified_ms)},
        "createdAt": {"N": str(record.created_ms)},
    }


def item_to_record(item: dict[str, dict[str, str]]) -> MetadataRecord:
    """Deserialize a DynamoDB attribute map; missing attributes default to empty/zero."""

    def _s(name: str) -> str:
        return item.get(name, {}).get("S", "")

    def _n(name: str) -> int:
        return int(item.get(name, {}).get("N", "0"))

    try:
        kind = FileKind(_s("fileType"))
    except ValueError:
        kind = FileKind.OTHER
    return MetadataRecord(
        identity=_s(HASH_KEY),
        location=_s("s3location"),
        original_name=_s("originalFileName"),
        directory=_s("fileDir"),
        owner=_s("username"),
        kind=kind,
        last_modified_ms=_n("lastModifiedTime"),
        created_ms=_n("createdAt"),
    )


class DynamoDBMetadataIndex(MetadataIndex):
    """Metadata index stored in a DynamoDB table keyed by ``file-identifier``.

    :param table_name: Table name (required when enabled).
    :param owner: Owner namespace used to derive identities.
    :param enabled: Whether the index performs any I/O.
    :param create_missing_resources: Create the table in :meth:`init` if missing.
    :param endpoint_url: Custom endpoint URL (e.g. localstack).
    :param key: AWS access key ID.
    :param secret: AWS secret access key.
    :param region_name: AWS region name.
    :param clock: Source of "now" for timestamps.
    """

    def __init__(
        self,
        table_name: str,
        owner: str,
        *,
        enabled: bool = True,
        create_missing_resources: bool = False,
        endpoint_url: str | None = None,
        key: str | None = None,
        secret: str | None = None,
        region_name: str | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(owner, enabled=enabled, clock=clock)
        if enabled and (not table_name or not table_name.strip()):
            raise ValueError("table_name must be a non-empty string")
        self._table_name = table_name
        self._create_missing = create_missing_resources
        self._endpoint_url = endpoint_url
        self._key = key
        self._secret = secret
        self._region_name = region_name
        self._client_instance: Any = None

    @classmethod
    def from_config(
        cls,
        config: MetadataIndexConfig,
        owner: str,
        *,
        endpoint_url: str | None = None,
        region_name: str | None = None,
    ) -> DynamoDBMetadataIndex:
        return cls(
            config.table_name,
            owner,
            enabled=config.enabled,
            create_missing_resources=config.create_missing_resources,
            endpoint_url=endpoint_url,
            region_name=region_name,
        )

    @property
    def name(self) -> str:
        return "dynamodb"

    @property
    def table_name(self) -> str:
        return self._table_name

    def __repr__(self) -> str:
        return f"DynamoDBMetadataIndex(table_name={self._table_name!r}, owner={self.owner!r})"

    # region: lazy client

    @property
    def _client(self) -> Any:
        if self._client_instance is None:
            import boto3
            from botocore.config import Config

            opts: dict[str, Any] = {"config": Config(retries={"max_attempts": 1, "mode": "standard"})}
            if self._endpoint_url is not None:
                opts["endpoint_url"] = self._endpoint_url
            if self._key is not None:
                opts["aws_access_key_id"] = self._key
            if self._secret is not None:
                opts["aws_secret_access_key"] = self._secret
            if self._region_name is not None:
                opts["region_name"] = self._region_name
            with self._errors():
                self._client_instance = boto3.client("dynamodb", **opts)
        return self._client_instance

    # endregion

    # region: error mapping

    @contextmanager
    def _errors(self, identity: str | None = None, action: str = "") -> Iterator[None]:
        """Map botocore exceptions to rom_sync errors."""
        from botocore.exceptions import BotoCoreError, ClientError

        prefix = f"{action}: " if action else ""
        try:
            yield
        except SyncError:
            raise
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code in _ACCESS_DENIED_CODES:
                raise PermissionDenied(f"{prefix}{exc}", path=identity, backend=self.name) from None
            raise BackendFailure(f"{prefix}{exc}", path=identity, backend=self.name) from None
        except BotoCoreError as exc:
            raise BackendFailure(f"{prefix}{exc}", path=identity, backend=self.name) from None

    # endregion

    # region: primitives

    def _init(self) -> None:
        if self._table_exists():
            log.info("DynamoDB table exists: %s", self._table_name)
            return
        if not self._create_missing:
            raise BackendFailure(
                f"Table does not exist and creating missing resources is disabled: {self._table_name}",
                path=self._table_name,
                backend=self.name,
            )
        self._create_table()

    def _table_exists(self) -> bool:
        client = self._client
        with self._errors(self._table_name, "failed to describe table"):
            try:
                client.describe_table(TableName=self._table_name)
            except client.exceptions.ResourceNotFoundException:
                return False
        return True

    def _create_table(self) -> None:
        client = self._client
        with self._errors(self._table_name, "failed to create table"):
            client.create_table(
                TableName=self._table_name,
                AttributeDefinitions=[{"AttributeName": HASH_KEY, "AttributeType": "S"}],
                KeySchema=[{"AttributeName": HASH_KEY, "KeyType": "HASH"}],
                BillingMode="PAY_PER_REQUEST",
            )
        with self._errors(self._table_name, "failed to wait for table to be active"):
            from botocore.exceptions import WaiterError

            try:
                client.get_waiter("table_exists").wait(TableName=self._table_name, WaiterConfig=_WAITER_CONFIG)
            except WaiterError as exc:
                raise BackendFailure(
                    f"Table did not become active: {exc}", path=self._table_name, backend=self.name
                ) from None
        log.info("Successfully created DynamoDB table %s", self._table_name)

    def _get(self, identity: str) -> MetadataRecord | None:
        with self._errors(identity, "failed to get file metadata"):
            result = self._client.get_item(
                TableName=self._table_name,
                Key={HASH_KEY: {"S": identity}},
            )
        item = result.get("Item")
        if not item:
            return None
        try:
            return item_to_record(item)
        except (KeyError, ValueError) as exc:
            raise BackendFailure(
                f"failed to unmarshal file metadata: {exc}", path=identity, backend=self.name
            ) from None

    def _put(self, record: MetadataRecord) -> None:
        with self._errors(record.identity, "failed to store file metadata"):
            self._client.put_item(TableName=self._table_name, Item=record_to_item(record))
        log.info("Stored file metadata %s -> %s", record.identity, record.location)

    # endregion

    def close(self) -> None:
        if self._client_instance is not None:
            self._client_instance.close()
            self._client_instance = None
