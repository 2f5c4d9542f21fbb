"""Normalized error hierarchy for rom_sync."""

from __future__ import annotations

from typing import Optional


class SyncError(Exception):
    """Base class for all rom_sync errors.

    :param message: Human-readable error description.
    :param path: The local path or object key involved, if any.
    :param backend: The backend name involved, if any.
    """

    def __init__(self, message: str = "", *, path: Optional[str] = None, backend: Optional[str] = None) -> None:
        self.path = path
        self.backend = backend
        super().__init__(message)

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.path is not None:
            parts.append(f"path={self.path!r}")
        if self.backend is not None:
            parts.append(f"backend={self.backend!r}")
        return " | ".join(parts) if len(parts) > 1 else parts[0]

    def __repr__(self) -> str:
        cls = type(self).__name__
        args = [repr(super().__str__())]
        if self.path is not None:
            args.append(f"path={self.path!r}")
        if self.backend is not None:
            args.append(f"backend={self.backend!r}")
        return f"{cls}({', '.join(args)})"


class BackendNotImplemented(SyncError, NotImplementedError):
    """Raised when a disabled or stub backend is asked to perform real I/O.

    This is a configuration error, not a transient fault.
    """


class NotFound(SyncError):
    """Raised when a remote object or record does not exist."""


class InvalidPath(SyncError):
    """Raised for keys that escape a local container root."""


class BackendFailure(SyncError):
    """Raised for I/O, network or serialization failures against a backend."""


class PermissionDenied(BackendFailure):
    """Raised when access is denied by the storage backend."""


class MetadataWriteFailure(BackendFailure):
    """Raised when the metadata index cannot record a completed upload."""


class ScanFailure(SyncError):
    """Raised when a local directory tree cannot be scanned."""


class ConfigError(SyncError, ValueError):
    """Raised for invalid or incomplete configuration."""


class InvalidUsername(ConfigError):
    """Raised when the configured owner name is not acceptable."""
