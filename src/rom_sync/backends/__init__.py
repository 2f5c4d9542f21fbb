"""Backend implementations.

s3fs and boto3 are imported lazily on first use, so importing this package
does not touch the network or require credentials.
"""

from rom_sync.backends._dynamodb import DynamoDBMetadataIndex
from rom_sync.backends._local import LocalBackend
from rom_sync.backends._s3 import S3Backend
from rom_sync.backends._stubs import DriveBackend, SFTPBackend

__all__ = ["DriveBackend", "DynamoDBMetadataIndex", "LocalBackend", "S3Backend", "SFTPBackend"]
