"""
SMTP Email Adapter.

Sends drip and transactional email over SMTP with STARTTLS.

Configuration (environment):
    SMTP_HOST: server hostname (unset = not configured)
    SMTP_PORT: server port (default: 587)
    SMTP_USER / SMTP_PASS: login credentials (optional)
    SMTP_FROM: sender, e.g. "Autolytiq <hello@autolytiqs.com>"
"""

from __future__ import annotations

import logging
import os
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid, parseaddr

from src.core.ports.email import EmailMessage, EmailResult

logger = logging.getLogger(__name__)

DEFAULT_FROM = "Autolytiq <hello@autolytiqs.com>"


class SMTPEmailAdapter:
    """
    SMTP implementation of EmailPort.

    One connection per message; drip batches are small and hourly.
    Never raises on send: every failure comes back as a FAILED result.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        from_addr: str | None = None,
        use_tls: bool = True,
        timeout: float = 30.0,
    ):
        self.host = host or os.environ.get("SMTP_HOST", "")
        self.port = port or int(os.environ.get("SMTP_PORT", "587"))
        self.username = username or os.environ.get("SMTP_USER", "")
        self.password = password or os.environ.get("SMTP_PASS", "")
        self.from_addr = from_addr or os.environ.get("SMTP_FROM", DEFAULT_FROM)
        self.use_tls = use_tls
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.host)

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> EmailResult:
        if not self.is_configured():
            return EmailResult.failed(recipient, "SMTP not configured (missing SMTP_HOST)")

        name, sender = parseaddr(self.from_addr)
        msg = MIMEMultipart("alternative")
        msg["From"] = formataddr((name, sender))
        msg["To"] = recipient
        msg["Subject"] = subject
        message_id = make_msgid(domain=sender.partition("@")[2] or None)
        msg["Message-ID"] = message_id

        for key, value in (headers or {}).items():
            if any(c in f"{key}{value}" for c in ("\r", "\n")):
                logger.warning("Rejected email header with CRLF: %r", key)
                continue
            msg[key] = value

        if body_text:
            msg.attach(MIMEText(body_text, "plain", "utf-8"))
        msg.attach(MIMEText(body_html, "html", "utf-8"))

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls(context=ssl.create_default_context())
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.sendmail(sender, [recipient], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP send to %s failed: %s", recipient, e)
            return EmailResult.failed(recipient, str(e))

        logger.info("SMTP: email sent to %s", recipient)
        return EmailResult.success(recipient, message_id)

    def send(self, message: EmailMessage) -> EmailResult:
        return self.send_email(
            str(message.recipient),
            message.subject,
            message.body_html,
            message.body_text or None,
            dict(message.headers),
        )
