"""Tree of a local directory, with Drive ids reserved for every node."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from gdrivesync.drive.id_pool import IdPool
from gdrivesync.errors import (
    CanonicalizeError,
    FileEvaluationError,
    FileTreeBuildError,
    IdGenerationError,
    IdPoolError,
    InvalidPathError,
    NestedBuildError,
    ReadDirectoryError,
    SymlinkUnsupportedError,
    TreeBuildError,
    UnknownEntryTypeError,
)
from gdrivesync.models import UploadMetadata
from gdrivesync.util.mime import guess_mime_type

from .base import FileLike, FileTreeLike, FolderInfoLike, FolderLike

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class LocalFolderInfo(FolderInfoLike):
    name: str
    path: Path
    drive_id: str
    parent: Optional["LocalFolderInfo"] = None


@dataclass(slots=True, frozen=True)
class LocalFile(FileLike):
    name: str
    path: Path
    size: int
    mime_type: str
    parent: LocalFolderInfo
    drive_id: str

    @classmethod
    def from_path(cls, path: Path, parent: LocalFolderInfo, ids: IdPool) -> "LocalFile":
        name = path.name
        if not name:
            raise InvalidPathError(path)

        try:
            with open(path, "rb") as f:
                size = os.fstat(f.fileno()).st_size
        except OSError as exc:
            raise FileEvaluationError(f"'{path}'", cause=exc) from exc

        drive_id = _next_id(ids, path)
        return cls(
            name=name,
            path=path,
            size=size,
            mime_type=guess_mime_type(path),
            parent=parent,
            drive_id=drive_id,
        )

    def upload_metadata(self, parents: Optional[Sequence[str]] = None) -> UploadMetadata:
        return UploadMetadata(
            name=self.name,
            mime_type=self.mime_type,
            size=self.size,
            parents=list(parents) if parents else None,
            file_id=self.drive_id,
        )


LocalNode = Union["LocalFolder", LocalFile]


@dataclass(slots=True, frozen=True)
class LocalFolder(FolderLike):
    info: LocalFolderInfo
    children: tuple[LocalNode, ...] = ()

    @property
    def path(self) -> Path:
        return self.info.path

    @classmethod
    def from_path(
        cls,
        path: Path,
        parent: Optional[LocalFolderInfo],
        ids: IdPool,
    ) -> "LocalFolder":
        """
        Build the folder at `path` and everything below it, depth first.

        Entries are visited in name order. Symlinks are rejected, even when
        they point at a directory.
        """
        name = path.name
        if not name:
            raise InvalidPathError(path)

        info = LocalFolderInfo(
            name=name,
            path=path,
            drive_id=_next_id(ids, path),
            parent=parent,
        )

        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            raise ReadDirectoryError(path, cause=exc) from exc

        children: list[LocalNode] = []
        for entry in entries:
            entry_path = Path(entry.path)

            if entry.is_symlink():
                raise SymlinkUnsupportedError(entry_path)

            if entry.is_dir(follow_symlinks=False):
                try:
                    children.append(cls.from_path(entry_path, info, ids))
                except TreeBuildError as exc:
                    raise NestedBuildError(f"'{entry_path}'", cause=exc) from exc
            elif entry.is_file(follow_symlinks=False):
                children.append(LocalFile.from_path(entry_path, info, ids))
            else:
                raise UnknownEntryTypeError(entry_path)

        return cls(info=info, children=tuple(children))


@dataclass(slots=True, frozen=True)
class LocalFileTree(FileTreeLike):
    root: LocalFolder

    @classmethod
    def from_path(cls, path: str | Path, ids: IdPool) -> "LocalFileTree":
        """
        Canonicalize `path` and build its tree.

        Raises:
            CanonicalizeError: the path cannot be resolved.
            FileTreeBuildError: building failed; `cause` holds the reason.
        """
        raw = Path(path)
        try:
            canonical = raw.resolve(strict=True)
        except (OSError, RuntimeError) as exc:
            raise CanonicalizeError(raw, cause=exc) from exc

        logger.debug("Building local tree from %s", canonical)
        try:
            root = LocalFolder.from_path(canonical, None, ids)
        except TreeBuildError as exc:
            raise FileTreeBuildError(
                f"unable to create folder tree from '{canonical}'",
                details={"path": str(canonical)},
                cause=exc,
            ) from exc

        return cls(root=root)


def _next_id(ids: IdPool, path: Path) -> str:
    try:
        return ids.next()
    except IdPoolError as exc:
        raise IdGenerationError(path, cause=exc) from exc
