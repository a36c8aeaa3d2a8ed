"""Upload and download orchestration."""

from __future__ import annotations

from .download import (
    INCOMPLETE_SUFFIX,
    DownloadConfig,
    ExistingFileAction,
    download,
    download_directory,
    download_regular,
    incomplete_path,
    local_file_is_identical,
    save_body_to_file,
    save_body_to_stdout,
)
from .upload import (
    UploadConfig,
    spool_stdin_to_file,
    upload,
    upload_directory,
    upload_regular,
    upload_stdin,
)

__all__ = [
    "INCOMPLETE_SUFFIX",
    "DownloadConfig",
    "ExistingFileAction",
    "download",
    "download_directory",
    "download_regular",
    "incomplete_path",
    "local_file_is_identical",
    "save_body_to_file",
    "save_body_to_stdout",
    "UploadConfig",
    "spool_stdin_to_file",
    "upload",
    "upload_directory",
    "upload_regular",
    "upload_stdin",
]
