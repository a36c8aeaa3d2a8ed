"""Field definitions for Google Drive API responses."""

from __future__ import annotations

FILE_FIELDS: str = (
    "id,"
    "name,"
    "mimeType,"
    "parents,"
    "size,"
    "md5Checksum,"
    "shortcutDetails(targetId)"
)

LIST_FIELDS: str = f"nextPageToken,files({FILE_FIELDS})"

GENERATE_IDS_FIELDS: str = "ids"
