"""Two-way synchronization of emulator ROM, save and state files with remote storage."""

from rom_sync._backend import ObjectBackend, StorageBackend
from rom_sync._catalog import FileCatalog
from rom_sync._config import (
    DriveConfig,
    KindsConfig,
    LocalStoreConfig,
    MetadataIndexConfig,
    S3Config,
    SFTPConfig,
    StorageConfig,
    SyncConfig,
    load_config,
    validate_username,
    write_example_config,
)
from rom_sync._engine import SyncAction, Syncer, SyncReport, decide
from rom_sync._errors import (
    BackendFailure,
    BackendNotImplemented,
    ConfigError,
    InvalidPath,
    InvalidUsername,
    MetadataWriteFailure,
    NotFound,
    PermissionDenied,
    ScanFailure,
    SyncError,
)
from rom_sync._identity import file_identity, normalize_name
from rom_sync._index import InMemoryMetadataIndex, MetadataIndex
from rom_sync._job import JobStatus, SyncJob
from rom_sync._keys import object_key, time_bucket
from rom_sync._models import FileKind, LocalFile, MetadataRecord, RetrieveRequest
from rom_sync._registry import create_backend, register_backend

__version__ = "0.1.0"

__all__ = [
    # Core
    "Syncer",
    "SyncJob",
    "SyncAction",
    "SyncReport",
    "JobStatus",
    "decide",
    "FileCatalog",
    # Backends
    "StorageBackend",
    "ObjectBackend",
    "MetadataIndex",
    "InMemoryMetadataIndex",
    "create_backend",
    "register_backend",
    # Models & keys
    "FileKind",
    "LocalFile",
    "RetrieveRequest",
    "MetadataRecord",
    "file_identity",
    "normalize_name",
    "object_key",
    "time_bucket",
    # Config
    "SyncConfig",
    "StorageConfig",
    "S3Config",
    "MetadataIndexConfig",
    "LocalStoreConfig",
    "SFTPConfig",
    "DriveConfig",
    "KindsConfig",
    "load_config",
    "validate_username",
    "write_example_config",
    # Errors
    "SyncError",
    "BackendNotImplemented",
    "NotFound",
    "InvalidPath",
    "BackendFailure",
    "PermissionDenied",
    "MetadataWriteFailure",
    "ScanFailure",
    "ConfigError",
    "InvalidUsername",
    # Version
    "__version__",
]
