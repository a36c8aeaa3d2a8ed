"""GoogleDriveSync: high-level entry point for uploads and downloads."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Sequence

from gdrivesync.auth import AuthInfo
from gdrivesync.drive import GoogleDriveService, TransferDelegateConfig
from gdrivesync.models import DirectoryTransferResult, DriveFile, FileTransferResult
from gdrivesync.transfer import (
    DownloadConfig,
    ExistingFileAction,
    UploadConfig,
    download,
    upload,
)


class GoogleDriveSync:
    """Upload local files and folders to Drive, and download them back."""

    def __init__(
        self,
        auth_info: AuthInfo,
        *,
        scopes: Optional[Sequence[str]] = None,
        supports_all_drives: bool = True,
    ) -> None:
        self._service = GoogleDriveService(
            auth_info,
            scopes=scopes,
            supports_all_drives=supports_all_drives,
        )

    @classmethod
    def from_service(cls, service: GoogleDriveService) -> "GoogleDriveSync":
        """Create with an injected service (useful for tests)."""
        obj = cls.__new__(cls)
        obj._service = service
        return obj

    @property
    def service(self) -> GoogleDriveService:
        return self._service

    def upload(
        self,
        file_path: Optional[str | Path],
        *,
        parents: Optional[Sequence[str]] = None,
        mime_type: Optional[str] = None,
        recursive: bool = False,
        delegate_config: Optional[TransferDelegateConfig] = None,
        on_item_uploaded: Optional[Callable[[Path, str], None]] = None,
    ) -> DriveFile | DirectoryTransferResult:
        """
        Upload a file, a directory (recursive=True), or stdin (file_path=None).

        Returns the created file for single uploads, an aggregate result for
        directories. `on_item_uploaded` receives the relative path and
        id of each folder and file of a directory upload as it is created.
        """
        kwargs = {}
        if delegate_config is not None:
            kwargs["delegate_config"] = delegate_config

        config = UploadConfig(
            file_path=Path(file_path) if file_path is not None else None,
            mime_type=mime_type,
            parents=list(parents) if parents else None,
            upload_directories=recursive,
            on_item_uploaded=on_item_uploaded,
            **kwargs,
        )
        return upload(self._service, config)

    def download(
        self,
        file_id: str,
        *,
        destination: Optional[str | Path] = None,
        overwrite: bool = False,
        follow_shortcuts: bool = False,
        recursive: bool = False,
        to_stdout: bool = False,
        delegate_config: Optional[TransferDelegateConfig] = None,
    ) -> FileTransferResult | DirectoryTransferResult:
        """
        Download a file or (recursive=True) a folder.

        Raises:
            DestinationExistsError: the target exists and overwrite is False.
            InvalidArgumentError: shortcut/folder/document without the
                matching option.
        """
        kwargs = {}
        if delegate_config is not None:
            kwargs["delegate_config"] = delegate_config

        config = DownloadConfig(
            file_id=file_id,
            existing_file_action=(
                ExistingFileAction.OVERWRITE if overwrite else ExistingFileAction.ABORT
            ),
            follow_shortcuts=follow_shortcuts,
            download_directories=recursive,
            destination=Path(destination) if destination is not None else None,
            to_stdout=to_stdout,
            **kwargs,
        )
        return download(self._service, config)
