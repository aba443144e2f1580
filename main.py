from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from gmail_dispatch import config
from gmail_dispatch.errors import PayloadError
from gmail_dispatch.mailer import send_email
from gmail_dispatch.models import Attachment, EmailPayload


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send one email through an OAuth2-authenticated mail service.")
    parser.add_argument("--to", action="append", default=[], help="recipient; repeat for more")
    parser.add_argument("--cc", action="append", default=[])
    parser.add_argument("--bcc", action="append", default=[])
    parser.add_argument("--subject", default="")
    body = parser.add_mutually_exclusive_group()
    body.add_argument("--text", default=None)
    body.add_argument("--text-file", default=None)
    parser.add_argument("--html-file", default=None)
    parser.add_argument("--reply-to", default=None)
    parser.add_argument("--attach", action="append", default=[], help="file path; repeat for more")
    parser.add_argument("--env-file", default=None, help="dotenv file to load before reading settings")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    load_dotenv(args.env_file)

    try:
        settings = config.Settings.from_env()
    except ValueError as exc:
        logging.error("Missing configuration: %s", exc)
        return 1

    text = args.text
    if args.text_file:
        text = Path(args.text_file).read_text(encoding="utf-8")
    html = Path(args.html_file).read_text(encoding="utf-8") if args.html_file else None

    payload = EmailPayload(
        to=args.to,
        cc=args.cc,
        bcc=args.bcc,
        subject=args.subject,
        text=text,
        html=html,
        reply_to=args.reply_to,
        attachments=[Attachment.from_path(path) for path in args.attach],
    )

    try:
        asyncio.run(send_email(payload, settings))
    except PayloadError as exc:
        logging.error("Invalid email: %s", exc)
        return 1
    except Exception as exc:  # noqa: BLE001
        logging.exception("Sending failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
