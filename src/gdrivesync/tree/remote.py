"""Tree of a Drive folder, listed recursively."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Union

from gdrivesync.drive.service import GoogleDriveService
from gdrivesync.errors import (
    FileEvaluationError,
    FileTreeBuildError,
    GDriveSyncError,
    InvalidFileSizeError,
    ListFilesError,
    MissingFileIdError,
    MissingFileNameError,
    MissingFileSizeError,
    NestedBuildError,
    NotAFolderError,
    TreeBuildError,
    UnsafeFileNameError,
)
from gdrivesync.models import DriveFile
from gdrivesync.util.digest import parse_md5_digest
from gdrivesync.util.mime import is_binary, is_folder

from .base import FileLike, FileTreeLike, FolderInfoLike, FolderLike

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class RemoteFolderInfo(FolderInfoLike):
    name: str
    drive_id: str
    parent: Optional["RemoteFolderInfo"] = None


@dataclass(slots=True, frozen=True)
class RemoteFile(FileLike):
    name: str
    size: int
    parent: RemoteFolderInfo
    drive_id: str
    md5: Optional[bytes] = None

    @classmethod
    def from_file(cls, file: DriveFile, parent: RemoteFolderInfo) -> "RemoteFile":
        if file.name is None:
            raise MissingFileNameError()
        ensure_safe_name(file.name)
        if file.size is None:
            raise MissingFileSizeError()
        size = _parse_size(file.size)
        if file.id is None:
            raise MissingFileIdError()

        return cls(
            name=file.name,
            size=size,
            parent=parent,
            drive_id=file.id,
            md5=parse_md5_digest(file.md5_checksum),
        )


RemoteNode = Union["RemoteFolder", RemoteFile]


@dataclass(slots=True, frozen=True)
class RemoteFolder(FolderLike):
    info: RemoteFolderInfo
    children: tuple[RemoteNode, ...] = ()

    @classmethod
    def from_file(
        cls,
        service: GoogleDriveService,
        file: DriveFile,
        parent: Optional[RemoteFolderInfo] = None,
    ) -> "RemoteFolder":
        """
        List `file` and its descendants.

        Folders recurse, binary files become leaves, and native documents and
        shortcuts are left out since they have no content to transfer.
        """
        if not is_folder(file.mime_type):
            raise NotAFolderError(file.identifier())
        if file.name is None:
            raise MissingFileNameError()
        ensure_safe_name(file.name)
        if file.id is None:
            raise MissingFileIdError()

        info = RemoteFolderInfo(name=file.name, drive_id=file.id, parent=parent)

        try:
            entries = service.list_children(file.id)
        except GDriveSyncError as exc:
            raise ListFilesError(file.identifier(), cause=exc) from exc

        children: list[RemoteNode] = []
        for entry in entries:
            if is_folder(entry.mime_type):
                try:
                    children.append(cls.from_file(service, entry, info))
                except TreeBuildError as exc:
                    raise NestedBuildError(entry.identifier(), cause=exc) from exc
            elif is_binary(entry.mime_type):
                try:
                    children.append(RemoteFile.from_file(entry, info))
                except TreeBuildError as exc:
                    raise FileEvaluationError(entry.identifier(), cause=exc) from exc
            else:
                logger.debug(
                    "Skipping %s (%s): no binary content",
                    entry.identifier(),
                    entry.mime_type,
                )

        return cls(info=info, children=tuple(children))


@dataclass(slots=True, frozen=True)
class RemoteFileTree(FileTreeLike):
    root: RemoteFolder

    @classmethod
    def from_file(cls, service: GoogleDriveService, file: DriveFile) -> "RemoteFileTree":
        try:
            root = RemoteFolder.from_file(service, file)
        except TreeBuildError as exc:
            raise FileTreeBuildError(
                f"unable to create a folder tree from file {file.identifier()}",
                details={"file_id": file.id},
                cause=exc,
            ) from exc
        return cls(root=root)


def ensure_safe_name(name: str) -> str:
    """Reject Drive names that would not map to one entry of the destination directory."""
    separators = {"/", "\0"} | {s for s in (os.sep, os.altsep) if s}
    if name in ("", ".", "..") or any(s in name for s in separators):
        raise UnsafeFileNameError(name)
    return name


def _parse_size(value: str | int) -> int:
    if isinstance(value, int):
        size = value
    else:
        try:
            size = int(value)
        except ValueError as exc:
            raise InvalidFileSizeError(value) from exc
    if size < 0:
        raise InvalidFileSizeError(value)
    return size
