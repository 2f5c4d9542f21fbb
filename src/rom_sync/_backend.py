"""Storage backend abstract base classes — the core contract."""

from __future__ import annotations

import abc
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from rom_sync._errors import BackendFailure, BackendNotImplemented, MetadataWriteFailure, SyncError
from rom_sync._identity import file_identity, identity_of
from rom_sync._keys import fallback_key, object_key, split_bucket
from rom_sync._models import FileKind, LocalFile

if TYPE_CHECKING:
    from collections.abc import Iterable
    from types import TracebackType

    from rom_sync._index import MetadataIndex
    from rom_sync._models import RetrieveRequest

log = logging.getLogger(__name__)


class StorageBackend(abc.ABC):
    """Abstract base class for all storage backends.

    Backend-native exceptions must never leak; they are mapped to
    ``rom_sync`` errors.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Unique identifier for this backend type (e.g. ``'s3'``, ``'local'``)."""

    @abc.abstractmethod
    def init(self) -> None:
        """Validate (and optionally create) the backing container.

        :raises BackendFailure: If the container is missing and may not be created.
        """

    @abc.abstractmethod
    def store(self, bucket: str, file: LocalFile) -> None:
        """Upload ``file`` under the time bucket ``bucket``."""

    def store_all(self, bucket: str, files: Iterable[LocalFile]) -> None:
        """Upload files one by one, stopping at the first failure."""
        for file in files:
            self.store(bucket, file)

    @abc.abstractmethod
    def retrieve(self, request: RetrieveRequest) -> LocalFile:
        """Download ``request.to_retrieve`` into ``request.destination``.

        :raises NotFound: If the remote object does not exist.
        """

    @abc.abstractmethod
    def get_last_modified(self, bucket: str, file: LocalFile) -> datetime | None:
        """Remote modification time of ``file``, or ``None`` if it is absent."""

    def close(self) -> None:  # noqa: B027
        """Release resources. Default is a no-op."""

    def __enter__(self) -> StorageBackend:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class ObjectBackend(StorageBackend):
    """Key/value object store with an optional metadata index.

    Implements the key layout, the disabled-backend contract and the index
    bookkeeping once; subclasses provide the raw object primitives.

    :param owner: Owner namespace, injected as a key segment.
    :param enabled: If ``False``, writes are no-ops and lookups raise
        :class:`BackendNotImplemented`.
    :param create_missing_resources: Create the container in :meth:`init` if missing.
    :param index: Optional metadata index updated after each upload.
    """

    def __init__(
        self,
        owner: str,
        *,
        enabled: bool = True,
        create_missing_resources: bool = False,
        index: MetadataIndex | None = None,
    ) -> None:
        self._owner = owner
        self._enabled = enabled
        self._create_missing = create_missing_resources
        self._index = index

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def index(self) -> MetadataIndex | None:
        return self._index

    # region: primitives

    @property
    @abc.abstractmethod
    def container(self) -> str:
        """Name of the container (bucket, directory) holding the objects."""

    @abc.abstractmethod
    def _container_exists(self) -> bool: ...

    @abc.abstractmethod
    def _create_container(self) -> None: ...

    @abc.abstractmethod
    def _upload(self, key: str, content: BinaryIO) -> None: ...

    @abc.abstractmethod
    def _download(self, key: str, destination: str) -> None:
        """Write the object to ``destination``; raise ``NotFound`` before touching it if missing."""

    @abc.abstractmethod
    def _head(self, key: str) -> datetime | None:
        """Metadata-only probe; ``None`` if the object does not exist."""

    # endregion

    def init(self) -> None:
        if not self._enabled:
            return
        if self._container_exists():
            log.info("Container exists: %s", self.container)
        elif self._create_missing:
            self._create_container()
            log.info("Successfully created container %s", self.container)
        else:
            raise BackendFailure(
                f"Container does not exist and creating missing resources is disabled: {self.container}",
                path=self.container,
                backend=self.name,
            )
        if self._index is not None:
            self._index.init()

    def store(self, bucket: str, file: LocalFile) -> None:
        if not self._enabled:
            return
        key = object_key(bucket, self._owner, file.dir, file.name)
        try:
            fh = open(file.absolute, "rb")  # noqa: SIM115
        except OSError as exc:
            raise BackendFailure(f"Failed to open file: {exc}", path=file.absolute, backend=self.name) from exc
        log.info("Uploading %s to %s/%s", file.absolute, self.container, key)
        with fh:
            try:
                self._upload(key, fh)
            except SyncError as exc:
                raise BackendFailure(f"Failed to upload: {exc}", path=key, backend=self.name) from exc

        if self._index is not None:
            try:
                self._index.upsert(identity_of(self._owner, file), key, file)
            except MetadataWriteFailure as exc:
                # object bytes are already written; the index is best effort
                log.error("Failed to store file metadata for %s: %s", key, exc)

    def retrieve(self, request: RetrieveRequest) -> LocalFile:
        if not self._enabled:
            raise BackendNotImplemented("Backend is disabled", backend=self.name)
        wanted = request.to_retrieve
        key = self._resolve_key(wanted)

        destination = request.destination.absolute
        log.info("Downloading %s/%s to %s", self.container, key, destination)
        Path(destination).parent.mkdir(parents=True, exist_ok=True)
        self._download(key, destination)

        # keep the requested name, not the destination's (which may be a temp file)
        return LocalFile(
            dir=request.destination.dir,
            absolute=destination,
            name=wanted.name,
            last_modified=datetime.now(tz=timezone.utc),
            kind=FileKind.from_name(wanted.name),
        )

    def get_last_modified(self, bucket: str, file: LocalFile) -> datetime | None:
        if not self._enabled:
            raise BackendNotImplemented("Backend is disabled", backend=self.name)
        key = object_key(bucket, self._owner, file.dir, file.name)

        if self._index is not None and self._index.enabled:
            try:
                record = self._index.get_by_file(file)
            except SyncError as exc:
                log.warning("Metadata lookup failed for %s, probing object store: %s", key, exc)
                record = None
            if record is not None and record.last_modified_ms > 0:
                return record.last_modified

        return self._head(key)

    def _resolve_key(self, wanted: LocalFile) -> str:
        """Key of the requested object: index location first, naming convention second."""
        if self._index is not None and self._index.enabled:
            _, logical_dir = split_bucket(wanted.dir)
            record = self._index.get(file_identity(self._owner, logical_dir, wanted.name))
            if record is not None and record.location:
                log.info("Found object location in metadata index: %s", record.location)
                return record.location
            log.warning("File %s not found in metadata index, falling back to key construction", wanted.name)
        return fallback_key(self._owner, wanted.dir, wanted.name)
