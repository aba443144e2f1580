from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Protocol

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from .config import GOOGLE_TOKEN_URI

logger = logging.getLogger(__name__)


class CredentialProvider(Protocol):
    def set_credentials(self, *, refresh_token: str) -> None: ...

    async def get_access_token(self) -> str: ...


class OAuth2Client:
    """OAuth2 client holding app credentials and a user's refresh token.

    ``redirect_uri`` is only carried along with the client credentials; token
    refresh never visits it. The refresh itself is done by google-auth.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        *,
        token_uri: str = GOOGLE_TOKEN_URI,
        request_factory: Callable[[], Any] = Request,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._token_uri = token_uri
        self._request_factory = request_factory
        self._credentials: Credentials | None = None

    def set_credentials(self, *, refresh_token: str) -> None:
        self._credentials = Credentials(
            token=None,
            refresh_token=refresh_token,
            client_id=self.client_id,
            client_secret=self.client_secret,
            token_uri=self._token_uri,
        )

    async def get_access_token(self) -> str:
        if self._credentials is None or not self._credentials.refresh_token:
            raise ValueError("No refresh token set on the OAuth2 client.")
        # google-auth refreshes over blocking HTTP.
        await asyncio.to_thread(self._credentials.refresh, self._request_factory())
        logger.debug("Refreshed access token (expiry=%s)", self._credentials.expiry)
        return self._credentials.token
