"""
Behavior shared by the local and remote tree variants.

The variants are frozen dataclasses that inherit these mixins. The mixins only
declare the attributes they rely on; they hold no state of their own.

Ownership runs downward only: a folder owns its `children`, while `parent`
links on FolderInfo and File are read-only back references used to rebuild
paths. A FolderInfo can only point at a FolderInfo created before it, so the
parent chain is finite and acyclic.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from gdrivesync.models import TreeInfo


class FolderInfoLike:
    name: str
    drive_id: str
    parent: Optional[Any]

    def ancestors(self) -> list[Any]:
        """Return the parent chain ordered from the root down to the direct parent."""
        chain: list[Any] = []
        cur = self.parent
        while cur is not None:
            chain.append(cur)
            cur = cur.parent
        chain.reverse()
        return chain

    def ancestor_count(self) -> int:
        """Number of parent links between this folder and the root."""
        count = 0
        cur = self.parent
        while cur is not None:
            count += 1
            cur = cur.parent
        return count

    def relative_path(self) -> Path:
        """Path from the root folder (included) down to this folder."""
        return Path(*(a.name for a in self.ancestors()), self.name)


class FileLike:
    name: str
    size: int
    drive_id: str
    parent: Any

    def relative_path(self) -> Path:
        return self.parent.relative_path() / self.name


class FolderLike:
    info: Any
    children: Sequence[Any]

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def drive_id(self) -> str:
        return self.info.drive_id

    def ancestor_count(self) -> int:
        return self.info.ancestor_count()

    def relative_path(self) -> Path:
        return self.info.relative_path()

    def files(self) -> list[Any]:
        """Direct child files, sorted by name."""
        files = [c for c in self.children if isinstance(c, FileLike)]
        files.sort(key=lambda f: f.name)
        return files

    def subfolders(self) -> list[Any]:
        """Direct child folders, in children order."""
        return [c for c in self.children if isinstance(c, FolderLike)]

    def folders_recursive(self) -> list[Any]:
        """All descendant folders (self excluded), depth-first pre-order."""
        return list(self._iter_folders_recursive())

    def _iter_folders_recursive(self) -> Iterator[Any]:
        stack = list(reversed(self.subfolders()))
        while stack:
            folder = stack.pop()
            yield folder
            stack.extend(reversed(folder.subfolders()))


class FileTreeLike:
    root: Any

    def folders(self) -> list[Any]:
        """
        All folders, root included, sorted by (ancestor count, name).

        Every folder comes before its descendants, and siblings are in a
        stable, name-based order.
        """
        folders = [self.root]
        folders.extend(self.root.folders_recursive())
        folders.sort(key=lambda f: (f.ancestor_count(), f.name))
        return folders

    def files(self) -> Iterator[Any]:
        """Every file, following folders() and then name order within a folder."""
        for folder in self.folders():
            yield from folder.files()

    def info(self) -> TreeInfo:
        info = TreeInfo()
        for folder in self.folders():
            info.folder_count += 1
            for f in folder.files():
                info.file_count += 1
                info.total_file_size += f.size
        return info
