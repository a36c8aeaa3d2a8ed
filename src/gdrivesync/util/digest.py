"""MD5 helpers for integrity checks."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import BinaryIO, Optional

MD5_LEN: int = 16
READ_BUFFER_SIZE: int = 64 * 1024


class Md5Writer:
    """
    File-like writer that forwards bytes to `writer` and digests what was written.

    Only the bytes the underlying writer accepted are fed to the digest.
    """

    def __init__(self, writer: BinaryIO) -> None:
        self._writer = writer
        self._context = hashlib.md5()

    def write(self, data: bytes) -> int:
        written = self._writer.write(data)
        if written is None:
            written = len(data)
        self._context.update(data[:written])
        return written

    def write_all(self, data: bytes) -> None:
        view = memoryview(data)
        while view:
            written = self.write(bytes(view))
            if written <= 0:
                raise OSError("writer accepted no bytes")
            view = view[written:]

    def flush(self) -> None:
        self._writer.flush()

    def md5(self) -> bytes:
        return self._context.digest()


def parse_md5_digest(value: Optional[str]) -> Optional[bytes]:
    """Parse a 32-character hex MD5 string. Returns None if invalid."""
    if not isinstance(value, str) or len(value) != MD5_LEN * 2:
        return None
    try:
        return bytes.fromhex(value)
    except ValueError:
        return None


def compute_md5_from_reader(reader: BinaryIO) -> bytes:
    context = hashlib.md5()
    while True:
        buf = reader.read(READ_BUFFER_SIZE)
        if not buf:
            break
        context.update(buf)
    return context.digest()


def compute_md5_from_path(path: Path) -> bytes:
    with open(path, "rb") as f:
        return compute_md5_from_reader(f)
