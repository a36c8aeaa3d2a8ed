import os
import unittest
from pathlib import Path
from unittest.mock import patch

from gdrivesync.config import (
    CONFIG_DIR_ENV,
    AppConfig,
    build_delegate_config,
)
from gdrivesync.drive.delegate import ChunkSize


class TestAppConfig(unittest.TestCase):
    def test_explicit_dir_wins(self) -> None:
        with patch.dict(os.environ, {CONFIG_DIR_ENV: "/from/env"}):
            config = AppConfig.load("/explicit")
        self.assertEqual(config.config_dir, Path("/explicit"))

    def test_env_var_used_when_no_argument(self) -> None:
        with patch.dict(os.environ, {CONFIG_DIR_ENV: "/from/env"}):
            config = AppConfig.load()
        self.assertEqual(config.config_dir, Path("/from/env"))

    def test_default_dir(self) -> None:
        with patch.dict(os.environ, {CONFIG_DIR_ENV: ""}):
            config = AppConfig.load()
        self.assertEqual(config.config_dir, Path("~/.config/gdrivesync").expanduser())

    def test_auth_info_points_into_config_dir(self) -> None:
        info = AppConfig(config_dir=Path("/cfg")).auth_info
        self.assertEqual(info.client_secrets_file, Path("/cfg/client_secrets.json"))
        self.assertEqual(info.token_file, Path("/cfg/token.json"))


class TestBuildDelegateConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = build_delegate_config()
        self.assertIs(cfg.chunk_size, ChunkSize.APPROX_32)
        self.assertEqual(cfg.backoff_config.max_retries, 100_000)
        self.assertEqual(cfg.backoff_config.min_delay, 1.0)
        self.assertEqual(cfg.backoff_config.max_delay, 60.0)
        self.assertFalse(cfg.print_chunk_errors)

    def test_overrides(self) -> None:
        cfg = build_delegate_config(
            chunk_size=ChunkSize.APPROX_8,
            max_retries=5,
            min_delay=0.5,
            max_delay=2.0,
            print_chunk_info=True,
        )
        self.assertEqual(cfg.chunk_size.in_bytes(), 8 * 1024 * 1024)
        self.assertEqual(cfg.backoff_config.max_retries, 5)
        self.assertTrue(cfg.print_chunk_info)


if __name__ == "__main__":
    unittest.main()
