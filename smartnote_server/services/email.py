# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Email sending over SMTP. Missing configuration fails fast instead of sending."""

import asyncio
import logging
import smtplib
from typing import Protocol
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from smartnote_server.config import settings

logger = logging.getLogger(__name__)


class MailerNotConfiguredError(Exception):
    """No SMTP transport configured; nothing was attempted."""


class EmailDeliveryError(Exception):
    """The SMTP exchange failed or timed out."""


def wrap_body_html(plain_body: str) -> str:
    """Wrap plain text body in minimal HTML."""
    body_escaped = plain_body.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace("\n", "<br>\n")
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: system-ui, sans-serif; color: #333; max-width: 560px;">
<div style="white-space: pre-wrap;">{body_escaped}</div>
</body>
</html>"""


class Mailer(Protocol):
    """What the auth service needs from a mail transport."""

    @property
    def configured(self) -> bool: ...

    async def send(self, to: str, subject: str, text_body: str, html_body: str | None = None) -> None: ...


class SmtpMailer:
    """Sends plain + HTML mail. Construct one per request or share it; it keeps no connection."""

    def __init__(
        self,
        host: str | None,
        port: int = 587,
        user: str | None = None,
        password: str | None = None,
        sender: str = "noreply@smartnote.local",
        starttls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.starttls = starttls
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "SmtpMailer":
        return cls(
            settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            sender=settings.smtp_from,
            starttls=settings.smtp_starttls,
            timeout=settings.smtp_timeout,
        )

    @property
    def configured(self) -> bool:
        return bool(self.host and self.user)

    def _build_message(self, to: str, subject: str, text_body: str, html_body: str | None) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body or wrap_body_html(text_body), "html"))
        return msg

    def _deliver(self, to: str, message: str) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.starttls:
                server.starttls()
            server.login(self.user, self.password or "")
            server.sendmail(self.sender, [to], message)

    async def send(self, to: str, subject: str, text_body: str, html_body: str | None = None) -> None:
        """Send one message. The blocking SMTP exchange runs in a worker thread."""
        if not self.configured:
            raise MailerNotConfiguredError("Email not configured")
        msg = self._build_message(to, subject, text_body, html_body)
        try:
            await asyncio.to_thread(self._deliver, to, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.exception("Failed to send email to %s", to)
            raise EmailDeliveryError(str(e)) from e
