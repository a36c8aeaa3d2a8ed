"""In-memory folder trees for local directories and Drive folders."""

from __future__ import annotations

from .base import FileLike, FileTreeLike, FolderInfoLike, FolderLike
from .local import LocalFile, LocalFileTree, LocalFolder, LocalFolderInfo
from .remote import RemoteFile, RemoteFileTree, RemoteFolder, RemoteFolderInfo

__all__ = [
    "FileLike",
    "FileTreeLike",
    "FolderInfoLike",
    "FolderLike",
    "LocalFile",
    "LocalFileTree",
    "LocalFolder",
    "LocalFolderInfo",
    "RemoteFile",
    "RemoteFileTree",
    "RemoteFolder",
    "RemoteFolderInfo",
]
