"""Public model exports for gdrivesync."""

from __future__ import annotations

from .file_info import DriveFile, UploadMetadata
from .results import (
    DirectoryTransferResult,
    FileTransferResult,
    FolderResult,
    TransferStatus,
    TreeInfo,
)

__all__ = [
    "DriveFile",
    "UploadMetadata",
    "TreeInfo",
    "TransferStatus",
    "FolderResult",
    "FileTransferResult",
    "DirectoryTransferResult",
]
