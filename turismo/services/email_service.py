"""Outbound mail over SMTP.

smtplib is blocking, so every send runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from pathlib import Path
from typing import Iterable, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.config import Settings, get_settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_template(name: str, **context) -> str:
    return _env.get_template(name).render(**context)


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes
    mime_type: str = "application/octet-stream"


class EmailService:
    """Thin SMTP sender; a missing SMTP configuration turns sends into logged no-ops."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def from_address(self) -> str:
        return self.settings.SMTP_FROM or f"{self.settings.BRAND_NAME} <no-reply@turismo.pe>"

    def build_message(
        self,
        *,
        to: Iterable[str],
        subject: str,
        text: str,
        html: Optional[str] = None,
        reply_to: Optional[str] = None,
        bcc: Optional[Iterable[str]] = None,
        attachments: Optional[List[Attachment]] = None,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.from_address
        msg["To"] = ", ".join(to)
        msg["Subject"] = subject
        msg["Message-ID"] = make_msgid()
        if reply_to:
            msg["Reply-To"] = reply_to
        bcc = [b for b in (bcc or []) if b]
        if bcc:
            msg["Bcc"] = ", ".join(bcc)

        msg.set_content(text)
        if html:
            msg.add_alternative(html, subtype="html")
        for att in attachments or []:
            maintype, _, subtype = att.mime_type.partition("/")
            msg.add_attachment(
                att.content, maintype=maintype, subtype=subtype or "octet-stream",
                filename=att.filename,
            )
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        s = self.settings
        if s.SMTP_PORT == 465:
            server = smtplib.SMTP_SSL(s.SMTP_HOST, s.SMTP_PORT, timeout=30)
        else:
            server = smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=30)
        with server:
            if s.SMTP_PORT != 465:
                server.starttls()
            server.login(s.SMTP_USER, s.SMTP_PASS)
            server.send_message(msg)

    async def send(self, **kwargs) -> str:
        """Send one message; returns its Message-ID or ``"skipped"``"""
        msg = self.build_message(**kwargs)
        if not self.settings.smtp_configured:
            logger.info("SMTP not configured; skipping email to %s (%s)", msg["To"], msg["Subject"])
            return "skipped"
        await asyncio.to_thread(self._deliver, msg)
        return msg["Message-ID"]
