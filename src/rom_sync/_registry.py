"""Backend registry — maps storage config sections to backend factories."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rom_sync._errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Callable

    from rom_sync._backend import StorageBackend
    from rom_sync._config import SyncConfig

    BackendFactory = Callable[[SyncConfig], StorageBackend]

# Global backend factory registry: maps type strings to factories.
_BACKEND_FACTORIES: dict[str, BackendFactory] = {}

# Probe order when picking the enabled backend.
BACKEND_TYPES = ("s3", "local", "sftp", "gdrive")


def register_backend(type_name: str, factory: BackendFactory) -> None:
    """Register a backend factory for a given type string.

    :param type_name: The type identifier, matching a ``StorageConfig`` field.
    :param factory: Callable building the backend from the full config.
    """
    _BACKEND_FACTORIES[type_name] = factory


def _s3_factory(config: SyncConfig) -> StorageBackend:
    from rom_sync.backends._dynamodb import DynamoDBMetadataIndex
    from rom_sync.backends._s3 import S3Backend

    s3 = config.storage.s3
    index = None
    if s3.metadata_index.enabled:
        index = DynamoDBMetadataIndex.from_config(
            s3.metadata_index,
            config.username,
            endpoint_url=s3.resolved_endpoint(),
            region_name=s3.region_name,
        )
    return S3Backend.from_config(s3, config.username, index=index)


def _local_factory(config: SyncConfig) -> StorageBackend:
    from rom_sync.backends._local import LocalBackend

    return LocalBackend.from_config(config.storage.local, config.username)


def _sftp_factory(config: SyncConfig) -> StorageBackend:
    from rom_sync.backends._stubs import SFTPBackend

    return SFTPBackend.from_config(config.storage.sftp, config.username)


def _gdrive_factory(config: SyncConfig) -> StorageBackend:
    from rom_sync.backends._stubs import DriveBackend

    return DriveBackend.from_config(config.storage.gdrive, config.username)


def _register_builtin_backends() -> None:
    """Register the built-in backends."""
    builtins: dict[str, BackendFactory] = {
        "s3": _s3_factory,
        "local": _local_factory,
        "sftp": _sftp_factory,
        "gdrive": _gdrive_factory,
    }
    for type_name, factory in builtins.items():
        if type_name not in _BACKEND_FACTORIES:
            register_backend(type_name, factory)


def enabled_backend_type(config: SyncConfig) -> str:
    """Type name of the first enabled storage backend.

    :raises ConfigError: If no backend is enabled.
    """
    for type_name in BACKEND_TYPES:
        section = getattr(config.storage, type_name)
        if section.enabled:
            return type_name
    raise ConfigError("no storage clients enabled")


def create_backend(config: SyncConfig) -> StorageBackend:
    """Instantiate the enabled backend (without initializing it).

    :raises ConfigError: If no backend is enabled or its type is unregistered.
    :raises ValueError: If the backend rejects its options.
    """
    _register_builtin_backends()
    type_name = enabled_backend_type(config)
    if type_name not in _BACKEND_FACTORIES:
        raise ConfigError(
            f"Unknown backend type '{type_name}'. Registered types: {sorted(_BACKEND_FACTORIES.keys())}"
        )
    return _BACKEND_FACTORIES[type_name](config)
