"""Metadata index mapping file identities to their last known object key."""

from __future__ import annotations

import abc
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from rom_sync._errors import BackendNotImplemented, MetadataWriteFailure, SyncError
from rom_sync._identity import identity_of
from rom_sync._models import MetadataRecord, to_millis

if TYPE_CHECKING:
    from rom_sync._models import LocalFile
    from rom_sync._types import Clock


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class MetadataIndex(abc.ABC):
    """Abstract base class for metadata indexes.

    Subclasses implement the storage primitives; the upsert policy lives
    here. ``created`` is written once per identity and carried forward on
    every later upsert, ``last_modified`` is refreshed each time.

    The read-then-write upsert is not atomic: two processes syncing the same
    identity at once can both see "no record" and both write ``created``.

    A disabled index ignores writes and raises :class:`BackendNotImplemented`
    on reads, so callers never mistake it for a miss.

    :param owner: Owner namespace used to derive identities.
    :param enabled: Whether the index performs any I/O.
    :param clock: Source of "now" for timestamps.
    """

    def __init__(self, owner: str, *, enabled: bool = True, clock: Clock | None = None) -> None:
        self._owner = owner
        self._enabled = enabled
        self._clock = clock or _utcnow

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Identifier of this index type (e.g. ``'dynamodb'``)."""

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def owner(self) -> str:
        return self._owner

    def init(self) -> None:
        """Make sure the backing resources exist and are usable."""
        if not self._enabled:
            return
        self._init()

    def upsert(self, identity: str, location: str, file: LocalFile) -> MetadataRecord | None:
        """Record ``location`` as the current key of ``identity``.

        :returns: The written record, or ``None`` when disabled.
        """
        if not self._enabled:
            return None
        now = to_millis(self._clock())
        try:
            existing = self._get(identity)
            record = MetadataRecord(
                identity=identity,
                location=location,
                original_name=file.name,
                directory=file.dir,
                owner=self._owner,
                kind=file.kind,
                last_modified_ms=now,
                created_ms=existing.created_ms if existing is not None else now,
            )
            self._put(record)
        except MetadataWriteFailure:
            raise
        except SyncError as exc:
            raise MetadataWriteFailure(f"Failed to store file metadata: {exc}", path=identity, backend=self.name) from exc
        return record

    def get(self, identity: str) -> MetadataRecord | None:
        """Look up a record; ``None`` if the identity is unknown.

        :raises BackendNotImplemented: If the index is disabled.
        """
        if not self._enabled:
            raise BackendNotImplemented("Metadata index is disabled", path=identity, backend=self.name)
        return self._get(identity)

    def get_by_file(self, file: LocalFile) -> MetadataRecord | None:
        """Derive the identity of ``file`` and look it up."""
        return self.get(identity_of(self._owner, file))

    def close(self) -> None:  # noqa: B027
        """Release resources. Default is a no-op."""

    @abc.abstractmethod
    def _init(self) -> None: ...

    @abc.abstractmethod
    def _get(self, identity: str) -> MetadataRecord | None: ...

    @abc.abstractmethod
    def _put(self, record: MetadataRecord) -> None: ...


class InMemoryMetadataIndex(MetadataIndex):
    """Process-local index backed by a dict."""

    def __init__(self, owner: str, *, enabled: bool = True, clock: Clock | None = None) -> None:
        super().__init__(owner, enabled=enabled, clock=clock)
        self._records: dict[str, MetadataRecord] = {}

    @property
    def name(self) -> str:
        return "memory"

    def __len__(self) -> int:
        return len(self._records)

    def _init(self) -> None:
        pass

    def _get(self, identity: str) -> MetadataRecord | None:
        return self._records.get(identity)

    def _put(self, record: MetadataRecord) -> None:
        self._records[record.identity] = record
