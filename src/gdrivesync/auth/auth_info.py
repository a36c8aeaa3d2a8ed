"""Credential file locations used to authorize Drive requests."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

CLIENT_SECRETS_FILENAME: str = "client_secrets.json"
TOKEN_FILENAME: str = "token.json"


@dataclass(slots=True, frozen=True)
class AuthInfo:
    """
    OAuth credential files.

    client_secrets_file: OAuth client secrets JSON (installed app).
    token_file: authorized-user token JSON; created on first authorization.
    """

    client_secrets_file: Path
    token_file: Path

    def __post_init__(self) -> None:
        for key in ("client_secrets_file", "token_file"):
            value = getattr(self, key)
            if not isinstance(value, Path) or not str(value).strip():
                raise ValueError(f"AuthInfo.{key} must be a non-empty Path")

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> "AuthInfo":
        """Locate both credential files inside one config directory."""
        return cls(
            client_secrets_file=config_dir / CLIENT_SECRETS_FILENAME,
            token_file=config_dir / TOKEN_FILENAME,
        )
