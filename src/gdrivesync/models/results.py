"""Result models for transfer commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional


TransferStatus = Literal["transferred", "skipped"]


@dataclass(slots=True)
class TreeInfo:
    """Aggregate counts of a tree."""

    file_count: int = 0
    folder_count: int = 0
    total_file_size: int = 0


@dataclass(slots=True)
class FolderResult:
    """A folder created on Drive or on disk."""

    relative_path: str
    drive_id: str


@dataclass(slots=True)
class FileTransferResult:
    """Result for a single file."""

    relative_path: str
    drive_id: Optional[str]
    status: TransferStatus
    size: int = 0


@dataclass(slots=True)
class DirectoryTransferResult:
    """Aggregate result of a directory upload or download."""

    tree_info: TreeInfo
    folders: list[FolderResult] = field(default_factory=list)
    files: list[FileTransferResult] = field(default_factory=list)

    @property
    def transferred_count(self) -> int:
        return sum(1 for f in self.files if f.status == "transferred")

    @property
    def skipped_count(self) -> int:
        return sum(1 for f in self.files if f.status == "skipped")
