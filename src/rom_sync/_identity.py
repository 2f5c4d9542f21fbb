"""Case- and whitespace-insensitive identities of synced files."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rom_sync._models import LocalFile

IDENTITY_SEPARATOR = "#"


def normalize_name(name: str) -> str:
    """Replace spaces with underscores and lowercase."""
    return name.replace(" ", "_").lower()


def file_identity(owner: str, directory: str, name: str) -> str:
    """Build ``{owner}#{directory}#{normalized-name}``.

    Names that differ only by letter case or by space-vs-underscore map to
    the same identity.
    """
    return IDENTITY_SEPARATOR.join((owner, directory, normalize_name(name)))


def identity_of(owner: str, file: LocalFile) -> str:
    """Identity of a scanned file."""
    return file_identity(owner, file.dir, file.name)
