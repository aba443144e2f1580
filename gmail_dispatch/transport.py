from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Protocol

import aiosmtplib

from .errors import MailError
from .message import build_message
from .models import EmailPayload

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    service: str

    async def send(self, payload: EmailPayload) -> None: ...


@dataclass(frozen=True)
class OAuth2Auth:
    user: str
    access_token: str
    client_id: str
    client_secret: str
    refresh_token: str
    type: str = "OAuth2"

    def __repr__(self) -> str:
        return f"OAuth2Auth(user={self.user!r}, client_id={self.client_id!r})"


@dataclass(frozen=True)
class SmtpService:
    host: str
    port: int
    secure: bool


WELL_KNOWN_SERVICES: Dict[str, SmtpService] = {
    "gmail": SmtpService(host="smtp.gmail.com", port=465, secure=True),
    "googlemail": SmtpService(host="smtp.gmail.com", port=465, secure=True),
    "outlook365": SmtpService(host="smtp.office365.com", port=587, secure=False),
    "hotmail": SmtpService(host="smtp-mail.outlook.com", port=587, secure=False),
}


class SmtpTransport:
    def __init__(
        self,
        service: str,
        endpoint: SmtpService,
        auth: OAuth2Auth,
        smtp_factory: Callable[..., Any] = aiosmtplib.SMTP,
    ):
        self.service = service
        self.endpoint = endpoint
        self.auth = auth
        self._smtp_factory = smtp_factory

    async def send(self, payload: EmailPayload) -> None:
        message = build_message(payload, self.auth.user)
        smtp = self._smtp_factory(
            hostname=self.endpoint.host,
            port=self.endpoint.port,
            use_tls=self.endpoint.secure,
            start_tls=not self.endpoint.secure,
        )
        async with smtp:
            await smtp.auth_xoauth2(self.auth.user, self.auth.access_token)
            await smtp.send_message(message)
        logger.debug("SMTP session to %s:%s closed", self.endpoint.host, self.endpoint.port)


def create_transport(
    *,
    service: str,
    auth: OAuth2Auth,
    smtp_factory: Callable[..., Any] = aiosmtplib.SMTP,
) -> SmtpTransport:
    endpoint = WELL_KNOWN_SERVICES.get(service.strip().lower())
    if endpoint is None:
        raise MailError(f"Unknown mail service: {service}")
    logger.debug("Creating %s transport for %s via %s:%s", auth.type, auth.user, endpoint.host, endpoint.port)
    return SmtpTransport(service.strip().lower(), endpoint, auth, smtp_factory)

