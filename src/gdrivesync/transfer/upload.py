"""Uploads: single files, stdin, and whole directory trees."""

from __future__ import annotations

import logging
import shutil
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Sequence

from gdrivesync.drive.delegate import (
    BackoffConfig,
    TransferDelegate,
    TransferDelegateConfig,
)
from gdrivesync.drive.id_pool import IdPool
from gdrivesync.drive.service import GoogleDriveService
from gdrivesync.errors import (
    ApiError,
    GDriveSyncError,
    InvalidArgumentError,
    OpenFileError,
    UploadError,
)
from gdrivesync.models import (
    DirectoryTransferResult,
    DriveFile,
    FileTransferResult,
    FolderResult,
    UploadMetadata,
)
from gdrivesync.tree.local import LocalFileTree
from gdrivesync.util.mime import guess_mime_type
from gdrivesync.util.size import format_size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadConfig:
    """
    Options of one upload command.

    mime_type: overrides the guessed type of a single file upload.
    parents: Drive folder ids the top-level file or folder is placed in.
    on_item_uploaded: called with the relative path and Drive id of every
        folder and file of a directory upload, right after it is created.
    """

    file_path: Optional[Path] = None
    mime_type: Optional[str] = None
    parents: Optional[Sequence[str]] = None
    upload_directories: bool = False
    delegate_config: TransferDelegateConfig = field(
        default_factory=lambda: TransferDelegateConfig(
            backoff_config=BackoffConfig(max_retries=100_000)
        )
    )
    on_item_uploaded: Optional[Callable[[Path, str], None]] = None


def upload(
    service: GoogleDriveService,
    config: UploadConfig,
) -> DriveFile | DirectoryTransferResult:
    """
    Upload `config.file_path`, or stdin when no path is given.

    Directories require `upload_directories`.
    """
    if config.file_path is None:
        return upload_stdin(service, config)

    path = config.file_path
    if path.is_dir():
        if not config.upload_directories:
            raise InvalidArgumentError(
                f"'{path}' is a directory, use --recursive to upload directories",
                details={"path": str(path)},
            )
        return upload_directory(service, path, config)

    return upload_regular(service, path, config)


def upload_regular(
    service: GoogleDriveService,
    path: Path,
    config: UploadConfig,
) -> DriveFile:
    try:
        f = open(path, "rb")
    except OSError as exc:
        raise OpenFileError(
            f"failed to open file '{path}'",
            details={"path": str(path)},
            cause=exc,
        ) from exc

    with f:
        size = path.stat().st_size
        metadata = UploadMetadata(
            name=path.name,
            mime_type=config.mime_type or guess_mime_type(path),
            size=size,
            parents=list(config.parents) if config.parents else None,
        )

        logger.info("Uploading %s (%s)", path, format_size(size))
        try:
            file = _upload_stream(service, f, metadata, config)
        except GDriveSyncError as exc:
            raise UploadError(
                f"failed to upload file '{path}'",
                details={"path": str(path)},
                cause=exc,
            ) from exc

    logger.info("File successfully uploaded with id %s", file.id)
    return file


def upload_stdin(service: GoogleDriveService, config: UploadConfig, *, name: str = "stdin") -> DriveFile:
    """
    Upload data piped on stdin.

    The input is spooled to a temporary file first; a resumable upload needs
    the total size before the first chunk is sent.
    """
    with spool_stdin_to_file() as f:
        size = f.seek(0, 2)
        f.seek(0)
        metadata = UploadMetadata(
            name=name,
            mime_type=config.mime_type or "application/octet-stream",
            size=size,
            parents=list(config.parents) if config.parents else None,
        )
        try:
            file = _upload_stream(service, f, metadata, config)
        except GDriveSyncError as exc:
            raise UploadError("failed to upload stdin", cause=exc) from exc

    logger.info("File successfully uploaded with id %s", file.id)
    return file


def spool_stdin_to_file(stream: Optional[BinaryIO] = None) -> BinaryIO:
    src = stream if stream is not None else sys.stdin.buffer
    tmp = tempfile.TemporaryFile()
    shutil.copyfileobj(src, tmp)
    tmp.seek(0)
    return tmp


def upload_directory(
    service: GoogleDriveService,
    path: Path,
    config: UploadConfig,
) -> DirectoryTransferResult:
    """
    Recreate the directory at `path` on Drive.

    Every node gets a pre-reserved id while the local tree is built. Folders
    are then created parent first, each followed by its files, so a failure
    leaves a consistent prefix of the tree on Drive.
    """
    ids = IdPool(service, config.delegate_config)
    tree = LocalFileTree.from_path(path, ids)
    tree_info = tree.info()
    logger.info(
        "Found %d files in %d directories with a total size of %s",
        tree_info.file_count,
        tree_info.folder_count,
        format_size(tree_info.total_file_size),
    )

    result = DirectoryTransferResult(tree_info=tree_info)

    for folder in tree.folders():
        folder_path = folder.relative_path()
        if folder.info.parent is not None:
            parents: Optional[list[str]] = [folder.info.parent.drive_id]
        else:
            parents = list(config.parents) if config.parents else None

        logger.info("Creating directory %s with id %s", folder_path, folder.drive_id)
        try:
            created = service.create_folder(
                folder.name,
                parents,
                folder_id=folder.drive_id,
                delegate=TransferDelegate(config.delegate_config),
            )
        except GDriveSyncError as exc:
            raise UploadError(
                f"failed to create directory '{folder_path}'",
                details={"path": str(folder_path), "drive_id": folder.drive_id},
                cause=exc,
            ) from exc
        if not created.id:
            raise ApiError(
                f"created folder '{folder_path}' has no id",
                details={"path": str(folder_path)},
            )
        result.folders.append(FolderResult(str(folder_path), created.id))
        if config.on_item_uploaded is not None:
            config.on_item_uploaded(folder_path, folder.drive_id)

        for local_file in folder.files():
            file_path = local_file.relative_path()
            logger.info("Uploading file %s with id %s", file_path, local_file.drive_id)

            try:
                f = open(local_file.path, "rb")
            except OSError as exc:
                raise OpenFileError(
                    f"failed to open file '{local_file.path}'",
                    details={"path": str(local_file.path)},
                    cause=exc,
                ) from exc

            with f:
                try:
                    uploaded = _upload_stream(
                        service,
                        f,
                        local_file.upload_metadata([created.id]),
                        config,
                    )
                except GDriveSyncError as exc:
                    raise UploadError(
                        f"failed to upload file '{local_file.path}'",
                        details={"path": str(local_file.path)},
                        cause=exc,
                    ) from exc

            result.files.append(
                FileTransferResult(str(file_path), uploaded.id, "transferred", local_file.size)
            )
            if config.on_item_uploaded is not None:
                config.on_item_uploaded(file_path, local_file.drive_id)

    logger.info(
        "Uploaded %d files in %d directories with a total size of %s",
        tree_info.file_count,
        tree_info.folder_count,
        format_size(tree_info.total_file_size),
    )
    return result


def _upload_stream(
    service: GoogleDriveService,
    stream: BinaryIO,
    metadata: UploadMetadata,
    config: UploadConfig,
) -> DriveFile:
    delegate = TransferDelegate(config.delegate_config)
    return service.upload_file(stream, metadata, delegate)
