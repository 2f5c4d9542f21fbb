"""Syncer — two-way reconciliation of a local tree against a storage backend."""

from __future__ import annotations

import dataclasses
import enum
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from rom_sync._catalog import FileCatalog
from rom_sync._errors import SyncError
from rom_sync._keys import time_bucket
from rom_sync._models import FileKind, LocalFile, RetrieveRequest
from rom_sync._registry import create_backend

if TYPE_CHECKING:
    from collections.abc import Iterable
    from types import TracebackType

    from rom_sync._backend import StorageBackend
    from rom_sync._config import SyncConfig
    from rom_sync._types import Clock

log = logging.getLogger(__name__)


class SyncAction(enum.Enum):
    """What to do with one file."""

    UPLOAD = "upload"
    DOWNLOAD = "download"


def decide(local: datetime, remote: datetime | None) -> SyncAction:
    """Pick the direction for one file.

    Upload when the remote copy is absent or strictly older; otherwise
    download. Equal timestamps download, treating the remote copy as the
    source of truth.
    """
    if remote is None or local > remote:
        return SyncAction.UPLOAD
    return SyncAction.DOWNLOAD


@dataclasses.dataclass
class SyncReport:
    """Outcome of one sync pass.

    :param bucket: Time bucket shared by every upload of the pass.
    :param uploaded: Files pushed to the backend.
    :param downloaded: Files overwritten from the backend.
    """

    bucket: str
    uploaded: list[LocalFile] = dataclasses.field(default_factory=list)
    downloaded: list[LocalFile] = dataclasses.field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.uploaded) + len(self.downloaded)


class Syncer:
    """Reconciles the files under ``roms_folder`` with a storage backend.

    Files are processed one at a time, one kind at a time. The first failure
    aborts the pass and propagates; files already handled are not rolled back.
    No state is kept between passes.

    :param config: Sync settings (owner, local root, enabled kinds).
    :param backend: An initialized storage backend.
    :param clock: Source of wall-clock time for the time bucket.
    """

    def __init__(self, config: SyncConfig, backend: StorageBackend, *, clock: Clock | None = None) -> None:
        self._config = config
        self._backend = backend
        self._clock = clock or datetime.now

    @classmethod
    def from_config(cls, config: SyncConfig, *, clock: Clock | None = None) -> Syncer:
        """Create and initialize the enabled backend, then wrap it.

        :raises ConfigError: If no backend is enabled.
        """
        backend = create_backend(config)
        backend.init()
        return cls(config, backend, clock=clock)

    def __repr__(self) -> str:
        return f"Syncer(backend={self._backend.name!r}, roms_folder={self._config.roms_folder!r})"

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    def close(self) -> None:
        self._backend.close()

    def __enter__(self) -> Syncer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def sync(self, kinds: Iterable[FileKind] | None = None) -> SyncReport:
        """Run one reconciliation pass.

        :param kinds: Kinds to reconcile, in order. Defaults to the kinds enabled in config.
        :raises ScanFailure: If the local tree cannot be scanned.
        """
        bucket = time_bucket(self._clock())
        report = SyncReport(bucket=bucket)

        root = self._config.roms_folder
        log.info("Looking for files in %s", root)
        catalog = FileCatalog(root)
        if not catalog.all_files():
            log.warning("No files found in %s", root)

        selected = list(kinds) if kinds is not None else self._config.sync.enabled_kinds()
        log.info("Syncs enabled: %s", ", ".join(k.value for k in selected) or "none")
        for kind in selected:
            self.sync_kind(catalog, kind, bucket, report)
        log.info(
            "Sync finished: %d uploaded, %d downloaded", len(report.uploaded), len(report.downloaded)
        )
        return report

    def sync_kind(self, catalog: FileCatalog, kind: FileKind, bucket: str, report: SyncReport) -> None:
        """Reconcile every file of one kind."""
        files = catalog.matching(kind)
        if not files:
            log.warning("No matching %s files", kind.value)
            return
        log.info("Found %d matching %s files", len(files), kind.value)
        for file in files:
            action = self.sync_file(file, bucket)
            if action is SyncAction.UPLOAD:
                report.uploaded.append(file)
            else:
                report.downloaded.append(file)

    def sync_file(self, file: LocalFile, bucket: str) -> SyncAction:
        """Look up the remote timestamp of one file and push or pull it."""
        try:
            remote = self._backend.get_last_modified(bucket, file)
        except SyncError:
            log.error("Failed to get remote last modified time for %s", file.name)
            raise

        action = decide(file.last_modified, remote)
        if action is SyncAction.UPLOAD:
            log.info(
                "Local file is newer or remote file doesn't exist, uploading %s (local=%s, remote=%s)",
                file.name,
                file.last_modified.isoformat(),
                remote.isoformat() if remote else None,
            )
            self._backend.store(bucket, file)
        else:
            log.info(
                "Remote file is newer, downloading to replace %s (local=%s, remote=%s)",
                file.name,
                file.last_modified.isoformat(),
                remote.isoformat() if remote else None,
            )
            to_retrieve = dataclasses.replace(file, dir=f"{bucket}/{file.dir}")
            self._backend.retrieve(RetrieveRequest(to_retrieve=to_retrieve, destination=file))
        return action
