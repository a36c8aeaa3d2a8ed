"""gdrivesync public API."""

from __future__ import annotations

from gdrivesync.auth import AuthInfo, OAuthClient
from gdrivesync.config import AppConfig
from gdrivesync.drive import (
    Backoff,
    BackoffConfig,
    ChunkSize,
    GoogleDriveService,
    IdPool,
    TransferDelegate,
    TransferDelegateConfig,
)
from gdrivesync.errors import (
    ApiError,
    AuthError,
    ConflictError,
    DigestMismatchError,
    GDriveSyncError,
    HttpErrorInfo,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    PermissionError,
    QuotaExceededError,
    RateLimitError,
    SymlinkUnsupportedError,
    TreeBuildError,
    format_error_chain,
    map_http_error,
)
from gdrivesync.manager import GoogleDriveSync
from gdrivesync.models import (
    DirectoryTransferResult,
    DriveFile,
    FileTransferResult,
    TreeInfo,
)
from gdrivesync.tree import LocalFileTree, RemoteFileTree

__all__ = [
    # High-level
    "GoogleDriveSync",
    "AppConfig",
    # Auth
    "AuthInfo",
    "OAuthClient",
    # Drive
    "GoogleDriveService",
    "IdPool",
    "TransferDelegate",
    "TransferDelegateConfig",
    "ChunkSize",
    "Backoff",
    "BackoffConfig",
    # Trees / Models
    "LocalFileTree",
    "RemoteFileTree",
    "DriveFile",
    "TreeInfo",
    "FileTransferResult",
    "DirectoryTransferResult",
    # Errors
    "GDriveSyncError",
    "TreeBuildError",
    "SymlinkUnsupportedError",
    "DigestMismatchError",
    "AuthError",
    "PermissionError",
    "InvalidArgumentError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "QuotaExceededError",
    "NetworkError",
    "ApiError",
    "HttpErrorInfo",
    "map_http_error",
    "format_error_chain",
]
