"""Send OAuth2-authenticated email through a well-known mail service."""

from .config import Settings
from .errors import MailError, PayloadError
from .mailer import Mailer, send_email
from .models import Attachment, EmailPayload

__all__ = [
    "Attachment",
    "EmailPayload",
    "MailError",
    "Mailer",
    "PayloadError",
    "Settings",
    "send_email",
]
