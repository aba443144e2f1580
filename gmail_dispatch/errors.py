from __future__ import annotations


class MailError(Exception):
    """Raised when mail sending fails before reaching the mail service."""


class PayloadError(MailError):
    """Raised when an email payload is malformed."""
