"""Backends that exist only as configuration: every operation raises BackendNotImplemented."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

from rom_sync._backend import StorageBackend
from rom_sync._errors import BackendNotImplemented

if TYPE_CHECKING:
    from datetime import datetime

    from rom_sync._config import DriveConfig, SFTPConfig
    from rom_sync._models import LocalFile, RetrieveRequest


class _UnimplementedBackend(StorageBackend):
    """Fails every I/O operation uniformly instead of pretending to succeed."""

    def _unsupported(self, operation: str) -> NoReturn:
        raise BackendNotImplemented(f"Backend '{self.name}' does not implement {operation}", backend=self.name)

    def init(self) -> None:
        self._unsupported("init")

    def store(self, bucket: str, file: LocalFile) -> None:
        self._unsupported("store")

    def store_all(self, bucket: str, files: object) -> None:
        self._unsupported("store_all")

    def retrieve(self, request: RetrieveRequest) -> LocalFile:
        self._unsupported("retrieve")

    def get_last_modified(self, bucket: str, file: LocalFile) -> datetime | None:
        self._unsupported("get_last_modified")


class SFTPBackend(_UnimplementedBackend):
    """Secure-shell file transfer backend (not implemented).

    :param config: Connection settings, kept for when the backend is implemented.
    """

    def __init__(self, config: SFTPConfig) -> None:
        self._config = config

    @classmethod
    def from_config(cls, config: SFTPConfig, owner: str) -> SFTPBackend:  # noqa: ARG003
        return cls(config)

    @property
    def name(self) -> str:
        return "sftp"

    def __repr__(self) -> str:
        return f"SFTPBackend(host={self._config.host!r}, port={self._config.port})"


class DriveBackend(_UnimplementedBackend):
    """Consumer cloud-drive backend (not implemented)."""

    def __init__(self, config: DriveConfig) -> None:
        self._config = config

    @classmethod
    def from_config(cls, config: DriveConfig, owner: str) -> DriveBackend:  # noqa: ARG003
        return cls(config)

    @property
    def name(self) -> str:
        return "gdrive"

    def __repr__(self) -> str:
        return f"DriveBackend(folder={self._config.folder!r})"
