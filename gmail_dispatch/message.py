from __future__ import annotations

from email.message import EmailMessage
from email.utils import formatdate, make_msgid, parseaddr

from .models import EmailPayload


def build_message(payload: EmailPayload, default_sender: str) -> EmailMessage:
    """Render a payload as a MIME message ready for SMTP submission.

    Bcc is kept on the message; the SMTP client drops it when sending.
    """
    sender = payload.sender or default_sender
    message = EmailMessage()
    message["From"] = sender
    if payload.to:
        message["To"] = ", ".join(payload.to)
    if payload.cc:
        message["Cc"] = ", ".join(payload.cc)
    if payload.bcc:
        message["Bcc"] = ", ".join(payload.bcc)
    if payload.reply_to:
        message["Reply-To"] = payload.reply_to
    message["Subject"] = payload.subject
    message["Date"] = formatdate(localtime=True)
    message["Message-ID"] = make_msgid(domain=_domain_of(sender))

    if payload.text is not None and payload.html is not None:
        message.set_content(payload.text)
        message.add_alternative(payload.html, subtype="html")
    elif payload.html is not None:
        message.set_content(payload.html, subtype="html")
    else:
        message.set_content(payload.text or "")

    for attachment in payload.attachments:
        maintype, _, subtype = (attachment.content_type or "application/octet-stream").partition("/")
        message.add_attachment(
            attachment.content,
            maintype=maintype,
            subtype=subtype or "octet-stream",
            filename=attachment.filename,
        )

    for name, value in payload.headers.items():
        del message[name]
        message[name] = str(value)
    return message


def _domain_of(address: str) -> str | None:
    _, addr = parseaddr(address)
    _, sep, domain = addr.rpartition("@")
    return domain if sep and domain else None
