from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from .config import OAUTH_REDIRECT_URI, Settings
from .credentials import CredentialProvider, OAuth2Client
from .models import EmailPayload
from .transport import MailTransport, OAuth2Auth, create_transport

logger = logging.getLogger(__name__)

CredentialFactory = Callable[[str, str, str], CredentialProvider]
TransportFactory = Callable[..., MailTransport]


class Mailer:
    """Sends one email per call through a freshly authenticated transport.

    Nothing is cached between calls: every send builds its own OAuth2 client
    and its own transport. Errors raised by either are left untouched.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        credential_factory: CredentialFactory = OAuth2Client,
        transport_factory: TransportFactory = create_transport,
    ):
        self._settings = settings
        self._credential_factory = credential_factory
        self._transport_factory = transport_factory

    async def send(self, payload: EmailPayload | Mapping[str, Any]) -> None:
        email = payload if isinstance(payload, EmailPayload) else EmailPayload.from_dict(payload)
        email.validate()

        transport = await self._create_transport()
        await transport.send(email)
        logger.info("Mail sent via %s to %s recipient(s)", transport.service, len(email.recipients()))

    async def _create_transport(self) -> MailTransport:
        s = self._settings
        oauth2_client = self._credential_factory(s.client_id, s.client_secret, OAUTH_REDIRECT_URI)
        oauth2_client.set_credentials(refresh_token=s.refresh_token)

        access_token = s.access_token
        if s.refresh_access_token:
            access_token = await oauth2_client.get_access_token()

        auth = OAuth2Auth(
            user=s.email,
            access_token=access_token or "",
            client_id=s.client_id,
            client_secret=s.client_secret,
            refresh_token=s.refresh_token,
        )
        return self._transport_factory(service=s.mail_service, auth=auth)


async def send_email(
    payload: EmailPayload | Mapping[str, Any],
    settings: Optional[Settings] = None,
) -> None:
    """Send one email, reading settings from the environment when none are given."""
    if settings is None:
        settings = Settings.from_env()
    await Mailer(settings).send(payload)
