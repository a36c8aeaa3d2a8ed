"""Public error exports for gdrivesync."""

from __future__ import annotations

from .exceptions import (
    ApiError,
    AuthError,
    CanonicalizeError,
    ConflictError,
    CreateDirectoryError,
    CreateFileError,
    DestinationExistsError,
    DigestMismatchError,
    DownloadError,
    FileEvaluationError,
    FileTreeBuildError,
    GDriveSyncError,
    HttpErrorInfo,
    IdGenerationError,
    IdPoolError,
    InvalidArgumentError,
    InvalidChunkSizeError,
    InvalidFileSizeError,
    InvalidPathError,
    ListFilesError,
    MissingFileIdError,
    MissingFileNameError,
    MissingFileSizeError,
    NestedBuildError,
    NetworkError,
    NotAFolderError,
    NotFoundError,
    OpenFileError,
    OutOfIdentifiersError,
    PermissionError,
    PoolRefillError,
    QuotaExceededError,
    RateLimitError,
    ReadChunkError,
    ReadDirectoryError,
    RenameFileError,
    SymlinkUnsupportedError,
    TransferError,
    TreeBuildError,
    UnknownEntryTypeError,
    UnsafeFileNameError,
    UploadError,
    WriteChunkError,
    format_error_chain,
    map_http_error,
)

__all__ = [
    "GDriveSyncError",
    # Remote service
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
    # Identifier pool
    "IdPoolError",
    "OutOfIdentifiersError",
    "PoolRefillError",
    # Tree building
    "TreeBuildError",
    "FileTreeBuildError",
    "CanonicalizeError",
    "InvalidPathError",
    "ReadDirectoryError",
    "IdGenerationError",
    "SymlinkUnsupportedError",
    "UnknownEntryTypeError",
    "NestedBuildError",
    "FileEvaluationError",
    "NotAFolderError",
    "ListFilesError",
    "MissingFileNameError",
    "MissingFileIdError",
    "MissingFileSizeError",
    "InvalidFileSizeError",
    "UnsafeFileNameError",
    # Transfer
    "InvalidChunkSizeError",
    "TransferError",
    "CreateFileError",
    "ReadChunkError",
    "WriteChunkError",
    "RenameFileError",
    "DigestMismatchError",
    "OpenFileError",
    "CreateDirectoryError",
    "UploadError",
    "DownloadError",
    "DestinationExistsError",
    "format_error_chain",
]
