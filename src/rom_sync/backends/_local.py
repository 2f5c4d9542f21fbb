"""Local filesystem object store (stdlib only)."""

from __future__ import annotations

import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from rom_sync._backend import ObjectBackend
from rom_sync._errors import BackendFailure, InvalidPath, NotFound, PermissionDenied

if TYPE_CHECKING:
    from rom_sync._config import LocalStoreConfig
    from rom_sync._index import MetadataIndex


class LocalBackend(ObjectBackend):
    """A directory on the local filesystem acting as the object container.

    Useful for NAS mounts and as a network-free stand-in for S3. Object keys
    map to paths under ``root``; an object's modification time is the time it
    was written.

    :param root: Directory holding the objects.
    :param owner: Owner namespace, injected as a key segment.
    """

    def __init__(
        self,
        root: str,
        owner: str,
        *,
        enabled: bool = True,
        create_missing_resources: bool = False,
        index: MetadataIndex | None = None,
    ) -> None:
        super().__init__(owner, enabled=enabled, create_missing_resources=create_missing_resources, index=index)
        if enabled and (not root or not root.strip()):
            raise ValueError("root must be a non-empty string")
        self._root = Path(root).absolute()

    @classmethod
    def from_config(cls, config: LocalStoreConfig, owner: str, *, index: MetadataIndex | None = None) -> LocalBackend:
        return cls(
            config.root,
            owner,
            enabled=config.enabled,
            create_missing_resources=config.create_missing_resources,
            index=index,
        )

    @property
    def name(self) -> str:
        return "local"

    @property
    def container(self) -> str:
        return str(self._root)

    def __repr__(self) -> str:
        return f"LocalBackend(root={str(self._root)!r}, owner={self.owner!r})"

    # region: path safety
    def _resolve(self, key: str) -> Path:
        """Resolve a key to an absolute path within root.

        :raises InvalidPath: If the resolved path escapes the root.
        """
        resolved = (self._root / key).resolve()
        try:
            resolved.relative_to(self._root.resolve())
        except ValueError:
            raise InvalidPath(f"Key escapes root directory: {key}", path=key, backend=self.name) from None
        return resolved

    # endregion

    # region: container
    def _container_exists(self) -> bool:
        return self._root.is_dir()

    def _create_container(self) -> None:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            raise PermissionDenied(f"Permission denied: {self._root}", path=str(self._root), backend=self.name) from None
        except OSError as exc:
            raise BackendFailure(str(exc), path=str(self._root), backend=self.name) from None

    # endregion

    # region: objects
    def _upload(self, key: str, content: BinaryIO) -> None:
        full = self._resolve(key)
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            with open(full, "wb") as out:
                shutil.copyfileobj(content, out)
        except PermissionError:
            raise PermissionDenied(f"Permission denied: {key}", path=key, backend=self.name) from None
        except OSError as exc:
            raise BackendFailure(str(exc), path=key, backend=self.name) from None

    def _download(self, key: str, destination: str) -> None:
        full = self._resolve(key)
        if not full.is_file():
            raise NotFound(f"Object not found: {key}", path=key, backend=self.name)
        try:
            shutil.copyfile(full, destination)
        except PermissionError:
            raise PermissionDenied(f"Permission denied: {key}", path=key, backend=self.name) from None
        except OSError as exc:
            raise BackendFailure(str(exc), path=key, backend=self.name) from None

    def _head(self, key: str) -> datetime | None:
        full = self._resolve(key)
        try:
            st = full.stat()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise BackendFailure(str(exc), path=key, backend=self.name) from None
        if not full.is_file():
            return None
        return datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)

    # endregion
