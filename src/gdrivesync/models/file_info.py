"""Data model for Drive items."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(slots=True)
class DriveFile:
    """
    Drive metadata as returned by the API.

    Every field is optional: the API omits fields it was not asked for, and
    tree building reports missing required fields instead of defaulting them.
    """

    id: Optional[str] = None
    name: Optional[str] = None
    mime_type: Optional[str] = None
    parents: list[str] = field(default_factory=list)
    size: Optional[str | int] = None
    md5_checksum: Optional[str] = None
    shortcut_target_id: Optional[str] = None

    def identifier(self) -> str:
        """Describe the item for error messages: name if known, else id."""
        if self.name is not None:
            return f"with name '{self.name}'"
        if self.id is not None:
            return f"with id '{self.id}'"
        return "(unknown)"


@dataclass(slots=True, frozen=True)
class UploadMetadata:
    """Metadata for a file about to be created on Drive."""

    name: str
    mime_type: str
    size: int
    parents: Optional[list[str]] = None
    file_id: Optional[str] = None
