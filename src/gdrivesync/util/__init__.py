from .digest import (
    Md5Writer,
    compute_md5_from_path,
    compute_md5_from_reader,
    parse_md5_digest,
)
from .mime import (
    DEFAULT_MIME,
    FOLDER_MIME,
    GOOGLE_DOCUMENT_MIMES,
    SHORTCUT_MIME,
    guess_mime_type,
    is_binary,
    is_folder,
    is_google_app,
    is_shortcut,
)
from .size import format_size

__all__ = [
    "Md5Writer",
    "compute_md5_from_path",
    "compute_md5_from_reader",
    "parse_md5_digest",
    "DEFAULT_MIME",
    "FOLDER_MIME",
    "SHORTCUT_MIME",
    "GOOGLE_DOCUMENT_MIMES",
    "guess_mime_type",
    "is_binary",
    "is_folder",
    "is_google_app",
    "is_shortcut",
    "format_size",
]
