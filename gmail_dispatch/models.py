from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from email.utils import formataddr, getaddresses
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .errors import PayloadError

PAYLOAD_KEYS = {
    "to",
    "cc",
    "bcc",
    "from",
    "sender",
    "replyTo",
    "reply_to",
    "subject",
    "text",
    "html",
    "attachments",
    "headers",
}

# Owned by the MIME builder; custom headers may not override them.
STRUCTURAL_HEADERS = {"content-type", "content-transfer-encoding", "mime-version"}


@dataclass
class Attachment:
    filename: str
    content: bytes
    content_type: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.content, str):
            self.content = self.content.encode("utf-8")
        if not self.content_type:
            guessed, _ = mimetypes.guess_type(self.filename)
            self.content_type = guessed or "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path, content_type: Optional[str] = None) -> "Attachment":
        p = Path(path)
        return cls(filename=p.name, content=p.read_bytes(), content_type=content_type)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Attachment":
        content_type = raw.get("contentType") or raw.get("content_type")
        if raw.get("path"):
            attachment = cls.from_path(raw["path"], content_type)
            if raw.get("filename"):
                attachment.filename = raw["filename"]
            return attachment
        if "content" not in raw or not raw.get("filename"):
            raise PayloadError("Attachment needs a filename and either content or path.")
        return cls(filename=raw["filename"], content=raw["content"], content_type=content_type)


@dataclass
class EmailPayload:
    to: List[str]
    subject: str = ""
    text: Optional[str] = None
    html: Optional[str] = None
    cc: List[str] = field(default_factory=list)
    bcc: List[str] = field(default_factory=list)
    reply_to: Optional[str] = None
    sender: Optional[str] = None
    attachments: List[Attachment] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "EmailPayload":
        """Build a payload from a loosely shaped mapping.

        Address fields take a comma separated string or a list; ``from`` and
        ``replyTo`` are accepted alongside ``sender`` and ``reply_to``.
        """
        unknown = set(raw) - PAYLOAD_KEYS
        if unknown:
            raise PayloadError(f"Unknown payload fields: {', '.join(sorted(unknown))}")

        attachments = [
            item if isinstance(item, Attachment) else Attachment.from_dict(item)
            for item in raw.get("attachments") or []
        ]
        return cls(
            to=_as_address_list(raw.get("to")),
            cc=_as_address_list(raw.get("cc")),
            bcc=_as_address_list(raw.get("bcc")),
            subject=raw.get("subject") or "",
            text=raw.get("text"),
            html=raw.get("html"),
            reply_to=raw.get("replyTo") or raw.get("reply_to"),
            sender=raw.get("from") or raw.get("sender"),
            attachments=attachments,
            headers=dict(raw.get("headers") or {}),
        )

    def recipients(self) -> List[str]:
        return [*self.to, *self.cc, *self.bcc]

    def validate(self) -> None:
        if not self.recipients():
            raise PayloadError("Email needs at least one recipient (to, cc or bcc).")
        addresses = self.recipients()
        if self.sender:
            addresses.append(self.sender)
        if self.reply_to:
            addresses.append(self.reply_to)
        for address in addresses:
            if not is_valid_address(address):
                raise PayloadError(f"Invalid email address: {address!r}")
        if _has_line_break(self.subject):
            raise PayloadError("Subject must not contain line breaks.")
        for name, value in self.headers.items():
            if not name or _has_line_break(name) or ":" in name:
                raise PayloadError(f"Invalid header name: {name!r}")
            if name.strip().lower() in STRUCTURAL_HEADERS:
                raise PayloadError(f"Header {name} is set by the message builder.")
            if _has_line_break(str(value)):
                raise PayloadError(f"Header {name} must not contain line breaks.")


def is_valid_address(address: str) -> bool:
    if _has_line_break(address):
        return False
    parsed = getaddresses([address])
    if len(parsed) != 1:
        return False
    _, addr = parsed[0]
    local, sep, domain = addr.rpartition("@")
    return bool(sep and local and domain and " " not in addr)


def _as_address_list(value: str | Sequence[str] | None) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [formataddr(pair) for pair in getaddresses([value]) if any(pair)]
    return [str(part).strip() for part in value if str(part).strip()]


def _has_line_break(value: str) -> bool:
    return "\r" in value or "\n" in value
