"""Configuration model — immutable data containers describing storage and sync settings."""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from rom_sync._errors import ConfigError, InvalidUsername
from rom_sync._models import FileKind

if TYPE_CHECKING:
    from rom_sync._types import PathLike

log = logging.getLogger(__name__)

DEFAULT_USERNAME = "DEFAULT_USERNAME_CHANGE_THIS_VALUE"
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 1024
_USERNAME_EXTRA_CHARS = frozenset("-_.")

EXAMPLE_FILENAME = "config.example.yaml"


@dataclasses.dataclass(frozen=True)
class MetadataIndexConfig:
    """Describes the optional metadata index attached to an object store.

    :param table_name: Name of the backing table.
    :param enabled: Whether the index is used at all.
    :param create_missing_resources: Create the table when it is missing.
    """

    table_name: str = ""
    enabled: bool = False
    create_missing_resources: bool = False


@dataclasses.dataclass(frozen=True)
class S3Config:
    """Describes the S3 object store.

    :param bucket: Target bucket name.
    :param enabled: Whether the backend performs any I/O.
    :param create_missing_resources: Create the bucket when it is missing.
    :param metadata_index: Nested metadata index configuration.
    :param endpoint_url: Custom endpoint (e.g. localstack, MinIO). Falls back to ``$AWS_ENDPOINT``.
    :param region_name: AWS region name; the default credential chain decides when unset.
    """

    bucket: str = ""
    enabled: bool = False
    create_missing_resources: bool = False
    metadata_index: MetadataIndexConfig = dataclasses.field(default_factory=MetadataIndexConfig)
    endpoint_url: str | None = None
    region_name: str | None = None

    def resolved_endpoint(self) -> str | None:
        return self.endpoint_url or os.environ.get("AWS_ENDPOINT") or None


@dataclasses.dataclass(frozen=True)
class LocalStoreConfig:
    """Describes a directory used as object store (e.g. a NAS mount).

    :param root: Directory acting as the container.
    :param enabled: Whether the backend performs any I/O.
    :param create_missing_resources: Create the directory when it is missing.
    """

    root: str = ""
    enabled: bool = False
    create_missing_resources: bool = False


@dataclasses.dataclass(frozen=True)
class SFTPConfig:
    """Describes the secure-shell file transfer backend (not implemented)."""

    enabled: bool = False
    host: str = ""
    port: int = 22
    username: str = ""
    remote_path: str = "/"


@dataclasses.dataclass(frozen=True)
class DriveConfig:
    """Describes the consumer cloud-drive backend (not implemented)."""

    enabled: bool = False
    folder: str = ""


@dataclasses.dataclass(frozen=True)
class StorageConfig:
    """All storage backends. The first enabled one is used."""

    s3: S3Config = dataclasses.field(default_factory=S3Config)
    local: LocalStoreConfig = dataclasses.field(default_factory=LocalStoreConfig)
    sftp: SFTPConfig = dataclasses.field(default_factory=SFTPConfig)
    gdrive: DriveConfig = dataclasses.field(default_factory=DriveConfig)


@dataclasses.dataclass(frozen=True)
class KindsConfig:
    """Which file kinds a sync pass reconciles."""

    roms: bool = False
    saves: bool = True
    states: bool = True
    other: bool = False

    def enabled_kinds(self) -> list[FileKind]:
        """Enabled kinds in processing order."""
        flags = (
            (self.roms, FileKind.ROM),
            (self.saves, FileKind.SAVE),
            (self.states, FileKind.STATE),
            (self.other, FileKind.OTHER),
        )
        return [kind for enabled, kind in flags if enabled]


@dataclasses.dataclass(frozen=True)
class SyncConfig:
    """Top-level configuration container.

    :param username: Owner namespace for keys and identities.
    :param roms_folder: Local directory tree to synchronize.
    :param storage: Storage backends.
    :param sync: File kinds to reconcile.
    """

    username: str = DEFAULT_USERNAME
    roms_folder: str = ""
    storage: StorageConfig = dataclasses.field(default_factory=StorageConfig)
    sync: KindsConfig = dataclasses.field(default_factory=KindsConfig)

    def validate(self) -> None:
        """Validate required fields and the owner name.

        :raises InvalidUsername: If the username is unacceptable.
        :raises ConfigError: If ``roms_folder`` is empty.
        """
        validate_username(self.username)
        if not self.roms_folder:
            raise ConfigError("roms_folder is required")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SyncConfig:
        """Construct from a plain dict (e.g. parsed YAML).

        Keys are snake_case; the camelCase spellings of older config files
        (``romsFolder``, ``createMissingResources``, ``dynamoDB``, ``tableName``)
        are accepted as well.
        """
        storage = _section(data, "storage")
        s3 = _section(storage, "s3")
        index = _section(s3, "metadata_index", "dynamodb", "dynamoDB")
        local = _section(storage, "local")
        sftp = _section(storage, "sftp")
        gdrive = _section(storage, "gdrive", "googleDrive")
        kinds = _section(data, "sync")

        return cls(
            username=str(_get(data, DEFAULT_USERNAME, "username")),
            roms_folder=str(_get(data, "", "roms_folder", "romsFolder")),
            storage=StorageConfig(
                s3=S3Config(
                    bucket=str(_get(s3, "", "bucket")),
                    enabled=bool(_get(s3, False, "enabled")),
                    create_missing_resources=bool(_get(s3, False, "create_missing_resources", "createMissingResources")),
                    metadata_index=MetadataIndexConfig(
                        table_name=str(_get(index, "", "table_name", "tableName")),
                        enabled=bool(_get(index, False, "enabled")),
                        create_missing_resources=bool(
                            _get(index, False, "create_missing_resources", "createMissingResources")
                        ),
                    ),
                    endpoint_url=_get(s3, None, "endpoint_url", "endpoint"),
                    region_name=_get(s3, None, "region_name", "region"),
                ),
                local=LocalStoreConfig(
                    root=str(_get(local, "", "root")),
                    enabled=bool(_get(local, False, "enabled")),
                    create_missing_resources=bool(
                        _get(local, False, "create_missing_resources", "createMissingResources")
                    ),
                ),
                sftp=SFTPConfig(
                    enabled=bool(_get(sftp, False, "enabled")),
                    host=str(_get(sftp, "", "host")),
                    port=int(_get(sftp, 22, "port")),
                    username=str(_get(sftp, "", "username")),
                    remote_path=str(_get(sftp, "/", "remote_path", "remotePath")),
                ),
                gdrive=DriveConfig(
                    enabled=bool(_get(gdrive, False, "enabled")),
                    folder=str(_get(gdrive, "", "folder")),
                ),
            ),
            sync=KindsConfig(
                roms=bool(_get(kinds, False, "roms")),
                saves=bool(_get(kinds, True, "saves")),
                states=bool(_get(kinds, True, "states")),
                other=bool(_get(kinds, False, "other")),
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


def _section(data: dict[str, Any], *keys: str) -> dict[str, Any]:
    value = _get(data, None, *keys)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Expected '{keys[0]}' to be a mapping, got {type(value).__name__}")
    return value


def _get(data: dict[str, Any], default: Any, *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def validate_username(username: str) -> None:
    """Check the owner name used as key prefix and identity namespace.

    :raises InvalidUsername: If the name is the placeholder, empty, of invalid
        length, or contains characters other than letters, digits, ``-``, ``_``, ``.``.
    """
    if username == DEFAULT_USERNAME:
        raise InvalidUsername("must not use default username")
    if not username:
        raise InvalidUsername("invalid username: username is empty")
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise InvalidUsername(
            f"invalid username: username has invalid length; "
            f"Must be {USERNAME_MIN_LENGTH} <= length <= {USERNAME_MAX_LENGTH}"
        )
    for char in username:
        if char.isalnum() or char in _USERNAME_EXTRA_CHARS:
            continue
        raise InvalidUsername(f"invalid username: username contains illegal character {char!r}; Must be alphanumeric")


def load_config(path: PathLike) -> SyncConfig:
    """Read and validate a YAML config file.

    :raises ConfigError: If the file is unreadable, malformed, or invalid.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise ConfigError(f"Failed to read config file: {exc}", path=str(path)) from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config file: {exc}", path=str(path)) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping", path=str(path))
    config = SyncConfig.from_dict(data)
    config.validate()
    return config


def example_config() -> SyncConfig:
    """An S3-backed example with saves and states enabled."""
    return SyncConfig(
        username=DEFAULT_USERNAME,
        roms_folder=str(Path.home() / "RetroPie" / "roms"),
        storage=StorageConfig(s3=S3Config(bucket="retropie-sync", enabled=True)),
        sync=KindsConfig(roms=False, saves=True, states=True),
    )


def write_example_config(output_dir: PathLike) -> Path:
    """Write ``config.example.yaml`` into ``output_dir`` and return its path."""
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    filename = out / EXAMPLE_FILENAME
    with open(filename, "w", encoding="utf-8") as fh:
        yaml.safe_dump(example_config().to_dict(), fh, sort_keys=False)
    log.info("Created %s", filename)
    return filename
