"""Drive service, transfer delegate and id pool exports."""

from __future__ import annotations

from .delegate import (
    Backoff,
    BackoffConfig,
    ChunkSize,
    ContentRange,
    TransferDelegate,
    TransferDelegateConfig,
)
from .id_pool import IdPool
from .service import GoogleDriveService

__all__ = [
    "Backoff",
    "BackoffConfig",
    "ChunkSize",
    "ContentRange",
    "TransferDelegate",
    "TransferDelegateConfig",
    "IdPool",
    "GoogleDriveService",
]
