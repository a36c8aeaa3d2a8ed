from __future__ import annotations

import mimetypes
from pathlib import PurePath

FOLDER_MIME: str = "application/vnd.google-apps.folder"
SHORTCUT_MIME: str = "application/vnd.google-apps.shortcut"
DEFAULT_MIME: str = "application/octet-stream"

GOOGLE_APPS_PREFIX: str = "application/vnd.google-apps."

# Native documents; they carry no binary content and can only be exported.
GOOGLE_DOCUMENT_MIMES: set[str] = {
    "application/vnd.google-apps.document",
    "application/vnd.google-apps.spreadsheet",
    "application/vnd.google-apps.presentation",
    "application/vnd.google-apps.drawing",
    "application/vnd.google-apps.form",
    "application/vnd.google-apps.script",
    "application/vnd.google-apps.site",
}


def is_folder(mime_type: str | None) -> bool:
    return mime_type == FOLDER_MIME


def is_shortcut(mime_type: str | None) -> bool:
    return mime_type == SHORTCUT_MIME


def is_google_app(mime_type: str | None) -> bool:
    """
    Returns True if the MIME type is a Google 'apps' type.

    Note: Google apps types not listed in GOOGLE_DOCUMENT_MIMES still start
    with 'application/vnd.google-apps.'.
    """
    if not mime_type:
        return False
    if mime_type in GOOGLE_DOCUMENT_MIMES:
        return True
    return mime_type.startswith(GOOGLE_APPS_PREFIX)


def is_binary(mime_type: str | None) -> bool:
    """
    Returns True if the item has downloadable binary content.

    Folders, shortcuts and native documents are not binary. An item without a
    MIME type is treated as binary.
    """
    return not is_google_app(mime_type)


def guess_mime_type(path: str | PurePath) -> str:
    """Guess a MIME type from the file name, falling back to octet-stream."""
    mime_type, _ = mimetypes.guess_type(str(path), strict=False)
    return mime_type or DEFAULT_MIME
