"""Downloads: single files, whole folders, and the integrity-checked save."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Iterable, Optional

from gdrivesync.drive.delegate import (
    BackoffConfig,
    TransferDelegate,
    TransferDelegateConfig,
)
from gdrivesync.drive.service import GoogleDriveService
from gdrivesync.errors import (
    CreateDirectoryError,
    CreateFileError,
    DestinationExistsError,
    DigestMismatchError,
    DownloadError,
    GDriveSyncError,
    InvalidArgumentError,
    ReadChunkError,
    RenameFileError,
    WriteChunkError,
)
from gdrivesync.models import (
    DirectoryTransferResult,
    DriveFile,
    FileTransferResult,
    FolderResult,
)
from gdrivesync.tree.remote import RemoteFile, RemoteFileTree, ensure_safe_name
from gdrivesync.util.digest import Md5Writer, compute_md5_from_path, parse_md5_digest
from gdrivesync.util.mime import is_folder, is_google_app, is_shortcut
from gdrivesync.util.size import format_size

logger = logging.getLogger(__name__)

INCOMPLETE_SUFFIX: str = ".incomplete"


class ExistingFileAction(str, Enum):
    ABORT = "abort"
    OVERWRITE = "overwrite"


@dataclass(frozen=True)
class DownloadConfig:
    """
    Options of one download command.

    destination: directory to download into; None means the current directory.
    to_stdout: write the content of a regular file to stdout instead.
    """

    file_id: str
    existing_file_action: ExistingFileAction = ExistingFileAction.ABORT
    follow_shortcuts: bool = False
    download_directories: bool = False
    destination: Optional[Path] = None
    to_stdout: bool = False
    delegate_config: TransferDelegateConfig = field(
        default_factory=lambda: TransferDelegateConfig(
            backoff_config=BackoffConfig(max_retries=100)
        )
    )

    def canonical_destination_root(self) -> Path:
        if self.to_stdout:
            raise InvalidArgumentError("stdout is not a valid destination for directories")

        path = self.destination if self.destination is not None else Path(".")
        if not path.exists():
            raise InvalidArgumentError(
                f"destination path '{path}' does not exist",
                details={"destination": str(path)},
            )
        if not path.is_dir():
            raise InvalidArgumentError(
                f"destination path '{path}' is not a directory",
                details={"destination": str(path)},
            )
        return path.resolve()


def incomplete_path(file_path: Path) -> Path:
    """Temporary sibling used while a download is in progress."""
    return file_path.with_name(file_path.name + INCOMPLETE_SUFFIX)


def save_body_to_file(
    chunks: Iterable[bytes],
    file_path: Path,
    expected_md5: Optional[bytes] = None,
) -> bytes:
    """
    Stream `chunks` into `file_path`, publishing it only when the MD5 matches.

    The content goes to `<file_path>.incomplete` first and is renamed over
    `file_path` once complete and verified, so `file_path` never holds partial
    or corrupt data. On any failure the temporary file is left on disk.

    Returns:
        The MD5 digest of the written content.

    Raises:
        CreateFileError, ReadChunkError, WriteChunkError, RenameFileError,
        DigestMismatchError.
    """
    tmp_path = incomplete_path(file_path)

    try:
        f = open(tmp_path, "wb")
    except OSError as exc:
        raise CreateFileError(
            f"unable to create temporary file '{tmp_path}'",
            details={"path": str(tmp_path)},
            cause=exc,
        ) from exc

    with f:
        writer = Md5Writer(f)
        it = iter(chunks)
        while True:
            try:
                chunk = next(it)
            except StopIteration:
                break
            except (GDriveSyncError, OSError) as exc:
                raise ReadChunkError(
                    "unable to read chunk from download stream",
                    details={"path": str(file_path)},
                    cause=exc,
                ) from exc

            try:
                writer.write_all(chunk)
            except OSError as exc:
                raise WriteChunkError(
                    f"unable to write chunk to '{tmp_path}'",
                    details={"path": str(tmp_path)},
                    cause=exc,
                ) from exc

    actual = writer.md5()
    if expected_md5 is not None and expected_md5 != actual:
        raise DigestMismatchError(expected=expected_md5, actual=actual)

    try:
        os.replace(tmp_path, file_path)
    except OSError as exc:
        raise RenameFileError(
            f"unable to rename '{tmp_path}' to '{file_path}'",
            details={"path": str(file_path)},
            cause=exc,
        ) from exc

    return actual


def save_body_to_stdout(chunks: Iterable[bytes], stream: Optional[BinaryIO] = None) -> None:
    out = stream if stream is not None else sys.stdout.buffer
    it = iter(chunks)
    while True:
        try:
            chunk = next(it)
        except StopIteration:
            break
        except (GDriveSyncError, OSError) as exc:
            raise ReadChunkError("unable to read chunk from download stream", cause=exc) from exc

        try:
            out.write(chunk)
        except OSError as exc:
            raise WriteChunkError("unable to write chunk to stdout", cause=exc) from exc
    out.flush()


def local_file_is_identical(path: Path, file: RemoteFile) -> bool:
    """True if `path` exists and its MD5 equals the remote file's MD5."""
    if file.md5 is None or not path.exists():
        return False

    try:
        local_md5 = compute_md5_from_path(path)
    except OSError as exc:
        logger.warning("Error while computing md5 of '%s': %s", path, exc)
        return False

    return local_md5 == file.md5


def download(service: GoogleDriveService, config: DownloadConfig) -> FileTransferResult | DirectoryTransferResult:
    """
    Download the file or folder `config.file_id`.

    Shortcuts are followed to their target when allowed. Folders require
    `download_directories`.
    """
    try:
        file = service.get_file(config.file_id)
    except GDriveSyncError as exc:
        raise DownloadError(
            f"failed to get file '{config.file_id}'",
            details={"file_id": config.file_id},
            cause=exc,
        ) from exc
    _err_if_file_exists(file, config)

    if is_shortcut(file.mime_type):
        if not config.follow_shortcuts:
            raise InvalidArgumentError(
                f"file {file.identifier()} is a shortcut, use --follow-shortcuts to download the target",
                details={"file_id": file.id},
            )
        if not file.shortcut_target_id:
            raise InvalidArgumentError(
                f"shortcut {file.identifier()} has no target",
                details={"file_id": file.id},
            )
        logger.debug("Following shortcut %s to %s", file.id, file.shortcut_target_id)
        return download(service, replace(config, file_id=file.shortcut_target_id))

    if is_folder(file.mime_type):
        if not config.download_directories:
            raise InvalidArgumentError(
                f"file {file.identifier()} is a directory, use --recursive to download directories",
                details={"file_id": file.id},
            )
        return download_directory(service, file, config)

    if is_google_app(file.mime_type):
        raise InvalidArgumentError(
            f"file {file.identifier()} is a Google document and has no binary content",
            details={"file_id": file.id, "mime_type": file.mime_type},
        )

    return download_regular(service, file, config)


def download_regular(
    service: GoogleDriveService,
    file: DriveFile,
    config: DownloadConfig,
) -> FileTransferResult:
    file_id = file.id or config.file_id
    delegate = TransferDelegate(config.delegate_config)
    body = service.iter_content(file_id, delegate)

    if config.to_stdout:
        save_body_to_stdout(body)
        return FileTransferResult(relative_path="-", drive_id=file_id, status="transferred")

    if file.name is None:
        raise InvalidArgumentError(f"file {file.identifier()} has no name")

    abs_file_path = config.canonical_destination_root() / ensure_safe_name(file.name)
    logger.info("Downloading %s", file.name)
    try:
        save_body_to_file(body, abs_file_path, parse_md5_digest(file.md5_checksum))
    except GDriveSyncError as exc:
        raise DownloadError(
            f"failed to download file to '{abs_file_path}'",
            details={"path": str(abs_file_path), "file_id": file_id},
            cause=exc,
        ) from exc

    logger.info("Successfully downloaded %s", file.name)
    size = abs_file_path.stat().st_size
    return FileTransferResult(
        relative_path=file.name,
        drive_id=file_id,
        status="transferred",
        size=size,
    )


def download_directory(
    service: GoogleDriveService,
    file: DriveFile,
    config: DownloadConfig,
) -> DirectoryTransferResult:
    """
    Mirror a Drive folder under the destination directory.

    Folders are created parent first. Files whose local copy already has the
    remote MD5 are skipped, so re-running after a failure only fetches what is
    missing or different.
    """
    tree = RemoteFileTree.from_file(service, file)
    tree_info = tree.info()
    logger.info(
        "Found %d files in %d directories with a total size of %s",
        tree_info.file_count,
        tree_info.folder_count,
        format_size(tree_info.total_file_size),
    )

    root_path = config.canonical_destination_root()
    result = DirectoryTransferResult(tree_info=tree_info)

    for folder in tree.folders():
        folder_path = folder.relative_path()
        abs_folder_path = root_path / folder_path

        logger.info("Creating directory %s", folder_path)
        try:
            abs_folder_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CreateDirectoryError(
                f"unable to create directory '{abs_folder_path}'",
                details={"path": str(abs_folder_path)},
                cause=exc,
            ) from exc
        result.folders.append(FolderResult(str(folder_path), folder.drive_id))

        for remote_file in folder.files():
            file_path = remote_file.relative_path()
            abs_file_path = root_path / file_path

            if local_file_is_identical(abs_file_path, remote_file):
                logger.debug("Skipping identical file '%s'", file_path)
                result.files.append(
                    FileTransferResult(str(file_path), remote_file.drive_id, "skipped", remote_file.size)
                )
                continue

            logger.info("Downloading file '%s'", file_path)
            body = service.iter_content(
                remote_file.drive_id,
                TransferDelegate(config.delegate_config),
            )
            try:
                save_body_to_file(body, abs_file_path, remote_file.md5)
            except GDriveSyncError as exc:
                raise DownloadError(
                    f"failed to download file to '{abs_file_path}'",
                    details={"path": str(abs_file_path), "file_id": remote_file.drive_id},
                    cause=exc,
                ) from exc

            result.files.append(
                FileTransferResult(str(file_path), remote_file.drive_id, "transferred", remote_file.size)
            )

    logger.info(
        "Downloaded %d files in %d directories with a total size of %s",
        tree_info.file_count,
        tree_info.folder_count,
        format_size(tree_info.total_file_size),
    )
    return result


def _err_if_file_exists(file: DriveFile, config: DownloadConfig) -> None:
    if config.to_stdout or config.existing_file_action is ExistingFileAction.OVERWRITE:
        return
    if file.name is None:
        raise InvalidArgumentError(f"file {file.identifier()} has no name")

    root = config.destination if config.destination is not None else Path(".")
    path = root / ensure_safe_name(file.name)
    if path.exists():
        raise DestinationExistsError(
            f"file '{path}' already exists, use --overwrite to overwrite it",
            details={"path": str(path)},
        )
