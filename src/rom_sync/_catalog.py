"""Recursive scan of a local directory tree."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from rom_sync._errors import ScanFailure
from rom_sync._models import FileKind, LocalFile

if TYPE_CHECKING:
    from rom_sync._types import PathLike

log = logging.getLogger(__name__)


class FileCatalog:
    """Files found under a root directory, classified by kind.

    The tree is scanned on construction and again on every :meth:`rescan`.

    :param root: Directory to scan.
    :raises ScanFailure: If the tree cannot be walked.
    """

    def __init__(self, root: PathLike) -> None:
        self._root = Path(root).absolute()
        self._files: list[LocalFile] = []
        self.rescan()

    def __repr__(self) -> str:
        return f"FileCatalog(root={str(self._root)!r}, files={len(self._files)})"

    @property
    def name(self) -> str:
        return self._root.name

    @property
    def root(self) -> str:
        return str(self._root)

    def rescan(self) -> None:
        """Walk the tree again and replace the cached file list."""
        if not self._root.is_dir():
            raise ScanFailure(f"Failed to scan directory {self.name}: not a directory", path=str(self._root))

        def _raise(exc: OSError) -> None:
            raise exc

        files: list[LocalFile] = []
        try:
            for dirpath, dirnames, filenames in os.walk(self._root, onerror=_raise):
                dirnames.sort()
                for sub in dirnames:
                    log.debug("Found sub-directory %s", sub)
                for filename in sorted(filenames):
                    path = Path(dirpath) / filename
                    if path.is_symlink() and not path.exists():
                        log.warning("Skipping broken link %s", path)
                        continue
                    files.append(LocalFile.from_path(path, root=self._root))
        except OSError as exc:
            raise ScanFailure(f"Failed to scan directory {self.name}: {exc}", path=str(self._root)) from exc
        self._files = files

    def all_files(self) -> list[LocalFile]:
        """Every file found by the latest scan."""
        return list(self._files)

    def matching(self, kind: FileKind) -> list[LocalFile]:
        """Files of one kind, in scan order."""
        return [f for f in self._files if f.kind is kind]
