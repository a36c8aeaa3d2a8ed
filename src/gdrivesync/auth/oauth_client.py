"""OAuth client utilities for gdrivesync."""

from __future__ import annotations

import logging
from typing import Sequence

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from gdrivesync.errors import AuthError, InvalidArgumentError

from .auth_info import AuthInfo

logger = logging.getLogger(__name__)


class OAuthClient:
    """Load, refresh and persist OAuth credentials and build the Drive service."""

    def __init__(self, auth_info: AuthInfo) -> None:
        self._auth_info = auth_info

    def get_credentials(self, scopes: Sequence[str], ensure_valid: bool = True) -> Credentials:
        """
        Return OAuth credentials for the given scopes.

        Args:
            scopes: OAuth scopes.
            ensure_valid: If True, refresh credentials when possible and run the
                installed-app flow when no usable token exists.

        Raises:
            AuthError: on load/refresh/flow failures.
            InvalidArgumentError: if scopes is invalid.
        """
        if not scopes or not all(isinstance(s, str) and s.strip() for s in scopes):
            raise InvalidArgumentError("scopes must be a non-empty sequence of strings")

        token_file = self._auth_info.token_file

        if token_file.exists():
            try:
                creds = Credentials.from_authorized_user_file(str(token_file), scopes=list(scopes))
            except (OSError, ValueError) as exc:
                raise AuthError(
                    "Failed to load token file",
                    details={"token_file": str(token_file)},
                    cause=exc,
                ) from exc

            if not ensure_valid:
                return creds

            if not creds.valid and creds.refresh_token:
                logger.debug("Refreshing OAuth credentials from %s", token_file)
                try:
                    creds.refresh(Request())
                except GoogleAuthError as exc:
                    raise AuthError(
                        "Failed to refresh OAuth credentials",
                        details={"token_file": str(token_file)},
                        cause=exc,
                    ) from exc
                self._save_credentials(creds)

            if creds.valid:
                return creds

        client_secrets = self._auth_info.client_secrets_file
        if not client_secrets.exists():
            raise AuthError(
                "OAuth client secrets file not found",
                details={"client_secrets_file": str(client_secrets)},
            )

        logger.info("Starting OAuth authorization flow")
        try:
            flow = InstalledAppFlow.from_client_secrets_file(str(client_secrets), scopes=list(scopes))
            creds = flow.run_local_server(port=0)
        except (OSError, ValueError, GoogleAuthError) as exc:
            raise AuthError(
                "OAuth authorization flow failed",
                details={
                    "client_secrets_file": str(client_secrets),
                    "token_file": str(token_file),
                },
                cause=exc,
            ) from exc

        self._save_credentials(creds)
        return creds

    def build_drive_service(self, scopes: Sequence[str], ensure_valid: bool = True):
        """
        Build a Drive v3 API service resource.

        Returns:
            googleapiclient.discovery.Resource
        """
        creds = self.get_credentials(scopes=scopes, ensure_valid=ensure_valid)
        return build("drive", "v3", credentials=creds, cache_discovery=False)

    def _save_credentials(self, creds: Credentials) -> None:
        token_file = self._auth_info.token_file
        try:
            token_file.parent.mkdir(parents=True, exist_ok=True)
            token_file.write_text(creds.to_json(), encoding="utf-8")
        except OSError as exc:
            raise AuthError(
                "Failed to save OAuth token file",
                details={"token_file": str(token_file)},
                cause=exc,
            ) from exc
