"""Application configuration: config directory and transfer tuning defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from gdrivesync.auth import AuthInfo
from gdrivesync.drive.delegate import BackoffConfig, ChunkSize, TransferDelegateConfig

CONFIG_DIR_ENV: str = "GDRIVESYNC_CONFIG_DIR"
DEFAULT_CONFIG_DIR: Path = Path("~/.config/gdrivesync")

UPLOAD_MAX_RETRIES: int = 100_000
DOWNLOAD_MAX_RETRIES: int = 100
MIN_DELAY_SEC: float = 1.0
MAX_DELAY_SEC: float = 60.0


@dataclass(frozen=True)
class AppConfig:
    config_dir: Path

    @classmethod
    def load(cls, config_dir: Optional[str | Path] = None) -> "AppConfig":
        """
        Resolve the config directory.

        Precedence: explicit argument, then $GDRIVESYNC_CONFIG_DIR, then
        ~/.config/gdrivesync.
        """
        if config_dir is None:
            env_value = os.environ.get(CONFIG_DIR_ENV, "").strip()
            config_dir = env_value or DEFAULT_CONFIG_DIR
        return cls(config_dir=Path(config_dir).expanduser())

    @property
    def auth_info(self) -> AuthInfo:
        return AuthInfo.from_config_dir(self.config_dir)


def build_delegate_config(
    *,
    chunk_size: ChunkSize = ChunkSize.APPROX_32,
    max_retries: int = UPLOAD_MAX_RETRIES,
    min_delay: float = MIN_DELAY_SEC,
    max_delay: float = MAX_DELAY_SEC,
    print_chunk_errors: bool = False,
    print_chunk_info: bool = False,
) -> TransferDelegateConfig:
    return TransferDelegateConfig(
        chunk_size=chunk_size,
        backoff_config=BackoffConfig(
            max_retries=max_retries,
            min_delay=min_delay,
            max_delay=max_delay,
        ),
        print_chunk_errors=print_chunk_errors,
        print_chunk_info=print_chunk_info,
    )
