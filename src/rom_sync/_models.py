"""Immutable file, request and metadata models."""

from __future__ import annotations

import dataclasses
import enum
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rom_sync._types import PathLike


class FileKind(enum.Enum):
    """Classification of a local file, derived from its extension."""

    ROM = "rom"
    SAVE = "save"
    STATE = "state"
    OTHER = "other"

    @classmethod
    def from_name(cls, name: str) -> FileKind:
        """Classify a file name by its suffix; unknown suffixes are ``OTHER``."""
        _, dot, suffix = name.rpartition(".")
        if not dot:
            return cls.OTHER
        return SUFFIX_TO_KIND.get(suffix.lower(), cls.OTHER)


SUFFIX_TO_KIND: dict[str, FileKind] = {
    # roms
    "gb": FileKind.ROM,
    "gbc": FileKind.ROM,
    "gba": FileKind.ROM,
    "smc": FileKind.ROM,
    "z64": FileKind.ROM,
    "nes": FileKind.ROM,
    # saves
    "srm": FileKind.SAVE,
    "sav": FileKind.SAVE,
    "rtc": FileKind.SAVE,
    # states
    "state": FileKind.STATE,
    "state1": FileKind.STATE,
    "state2": FileKind.STATE,
    "state3": FileKind.STATE,
    "state4": FileKind.STATE,
}


@dataclasses.dataclass(frozen=True)
class LocalFile:
    """Immutable snapshot of a local file taken during a directory scan.

    :param dir: Logical directory, the POSIX parent path relative to the scan root.
    :param absolute: Absolute path on the local filesystem.
    :param name: File name (final path component).
    :param last_modified: Last modification time (timezone-aware).
    :param kind: Classification derived from the file name.
    """

    dir: str
    absolute: str
    name: str
    last_modified: datetime
    kind: FileKind = FileKind.OTHER

    @classmethod
    def from_path(cls, path: PathLike, *, root: PathLike, last_modified: datetime | None = None) -> LocalFile:
        """Build a file record for ``path`` relative to ``root``.

        The modification time is read from the filesystem unless given.
        """
        full = Path(path).absolute()
        rel_parent = full.parent.relative_to(Path(root).absolute()).as_posix()
        if last_modified is None:
            last_modified = datetime.fromtimestamp(os.stat(full).st_mtime, tz=timezone.utc)
        return cls(
            dir="" if rel_parent == "." else rel_parent,
            absolute=str(full),
            name=full.name,
            last_modified=last_modified,
            kind=FileKind.from_name(full.name),
        )

    def is_older_than(self, other: LocalFile) -> bool:
        return self.last_modified < other.last_modified


@dataclasses.dataclass(frozen=True)
class RetrieveRequest:
    """Describes a download.

    :param to_retrieve: The remote file to fetch. Its ``dir`` may carry the
        time bucket as a prefix (``{bucket}/{logical-dir}``).
    :param destination: The local file to overwrite with the remote content.
    """

    to_retrieve: LocalFile
    destination: LocalFile


@dataclasses.dataclass(frozen=True)
class MetadataRecord:
    """Last known object-store location and timestamps of one file identity.

    :param identity: ``{owner}#{logical-dir}#{normalized-name}``.
    :param location: Object key the file was last uploaded to.
    :param original_name: File name as it was found locally.
    :param directory: Logical directory of the file.
    :param owner: Account namespace.
    :param kind: File classification.
    :param last_modified_ms: Epoch millis of the latest upsert.
    :param created_ms: Epoch millis of the first upsert.
    """

    identity: str
    location: str
    original_name: str
    directory: str
    owner: str
    kind: FileKind
    last_modified_ms: int
    created_ms: int

    @property
    def last_modified(self) -> datetime:
        return _from_millis(self.last_modified_ms)

    @property
    def created(self) -> datetime:
        return _from_millis(self.created_ms)


def to_millis(value: datetime) -> int:
    """Convert a datetime to epoch milliseconds."""
    return int(value.timestamp() * 1000)


def _from_millis(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
