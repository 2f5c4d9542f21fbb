"""S3-compatible object store using s3fs."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, BinaryIO

from rom_sync._backend import ObjectBackend
from rom_sync._errors import BackendFailure, NotFound, PermissionDenied, SyncError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rom_sync._config import S3Config
    from rom_sync._index import MetadataIndex


class S3Backend(ObjectBackend):
    """S3-compatible object store using s3fs.

    Objects are addressed path-style, so custom endpoints (localstack, MinIO)
    work without DNS tricks. The filesystem makes a single attempt per call.

    :param bucket: S3 bucket name (required, non-empty).
    :param owner: Owner namespace, injected as a key segment.
    :param endpoint_url: Custom endpoint URL.
    :param key: AWS access key ID.
    :param secret: AWS secret access key.
    :param region_name: AWS region name.
    :param client_options: Additional options passed to s3fs.
    """

    def __init__(
        self,
        bucket: str,
        owner: str,
        *,
        enabled: bool = True,
        create_missing_resources: bool = False,
        index: MetadataIndex | None = None,
        endpoint_url: str | None = None,
        key: str | None = None,
        secret: str | None = None,
        region_name: str | None = None,
        client_options: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(owner, enabled=enabled, create_missing_resources=create_missing_resources, index=index)
        if enabled and (not bucket or not bucket.strip()):
            raise ValueError("bucket must be a non-empty string")
        self._bucket = bucket
        self._endpoint_url = endpoint_url
        self._key = key
        self._secret = secret
        self._region_name = region_name
        self._client_options = client_options or {}
        self._fs_instance: Any = None

    @classmethod
    def from_config(cls, config: S3Config, owner: str, *, index: MetadataIndex | None = None) -> S3Backend:
        return cls(
            config.bucket,
            owner,
            enabled=config.enabled,
            create_missing_resources=config.create_missing_resources,
            index=index,
            endpoint_url=config.resolved_endpoint(),
            region_name=config.region_name,
        )

    @property
    def name(self) -> str:
        return "s3"

    @property
    def container(self) -> str:
        return self._bucket

    def __repr__(self) -> str:
        return f"S3Backend(bucket={self._bucket!r}, owner={self.owner!r})"

    # region: lazy filesystem

    @property
    def _fs(self) -> Any:
        if self._fs_instance is None:
            import s3fs  # type: ignore[import-untyped]

            opts: dict[str, Any] = dict(self._client_options)
            if self._endpoint_url is not None:
                opts["endpoint_url"] = self._endpoint_url
            if self._key is not None:
                opts["key"] = self._key
            if self._secret is not None:
                opts["secret"] = self._secret
            if self._region_name is not None:
                client_kwargs: dict[str, Any] = opts.setdefault("client_kwargs", {})
                client_kwargs["region_name"] = self._region_name
            config_kwargs: dict[str, Any] = opts.setdefault("config_kwargs", {})
            config_kwargs.setdefault("s3", {"addressing_style": "path"})
            opts.setdefault("anon", False)
            # skip_instance_cache: the retry override below must not leak into other instances
            opts.setdefault("skip_instance_cache", True)
            fs = s3fs.S3FileSystem(**opts)
            fs.retries = 1
            self._fs_instance = fs
        return self._fs_instance

    # endregion

    # region: path helpers

    def _s3_path(self, key: str) -> str:
        return f"{self._bucket}/{key}"

    # endregion

    # region: error mapping

    @contextmanager
    def _errors(self, path: str = "") -> Iterator[None]:
        """Map s3fs/botocore exceptions to rom_sync errors."""
        try:
            yield
        except SyncError:
            raise
        except FileNotFoundError:
            raise NotFound(f"Not found: {path}", path=path, backend=self.name) from None
        except PermissionError:
            raise PermissionDenied(f"Permission denied: {path}", path=path, backend=self.name) from None
        except Exception as exc:
            raise self._classify_error(exc, path) from None

    def _classify_error(self, exc: Exception, path: str) -> SyncError:
        """Classify an unknown exception into a rom_sync error type."""
        msg = str(exc).lower()
        if "404" in msg or "nosuchkey" in msg or "nosuchbucket" in msg or "not found" in msg:
            return NotFound(f"Not found: {path}", path=path, backend=self.name)
        if "403" in msg or "accessdenied" in msg or "access denied" in msg:
            return PermissionDenied(f"Permission denied: {path}", path=path, backend=self.name)
        return BackendFailure(str(exc), path=path, backend=self.name)

    # endregion

    # region: container

    def _container_exists(self) -> bool:
        with self._errors(self._bucket):
            try:
                self._fs.call_s3("head_bucket", Bucket=self._bucket)
            except FileNotFoundError:
                return False
            return True

    def _create_container(self) -> None:
        params: dict[str, Any] = {"Bucket": self._bucket}
        if self._region_name and self._region_name != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": self._region_name}
        with self._errors(self._bucket):
            self._fs.call_s3("create_bucket", **params)
            self._fs.invalidate_cache()

    # endregion

    # region: objects

    def _upload(self, key: str, content: BinaryIO) -> None:
        with self._errors(key):
            self._fs.pipe_file(self._s3_path(key), content.read())

    def _download(self, key: str, destination: str) -> None:
        with self._errors(key):
            self._fs.get_file(self._s3_path(key), destination)

    def _head(self, key: str) -> datetime | None:
        with self._errors(key):
            try:
                info = self._fs.info(self._s3_path(key), refresh=True)
            except FileNotFoundError:
                return None
        if info.get("type") != "file":
            return None
        modified = info.get("LastModified", info.get("last_modified"))
        if isinstance(modified, str):
            if not modified:
                return None
            modified = datetime.fromisoformat(modified)
        if modified is None:
            return None
        if modified.tzinfo is None:
            modified = modified.replace(tzinfo=timezone.utc)
        return modified

    # endregion

    # region: lifecycle

    def close(self) -> None:
        if self._fs_instance is not None:
            self._fs_instance.clear_instance_cache()
            self._fs_instance = None
        if self.index is not None:
            self.index.close()

    # endregion
