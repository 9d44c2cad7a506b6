"""
Dev Email Adapter.

Logs emails instead of sending. Used when SMTP is not configured and in
tests.

Key behaviors:
- Returns SKIPPED status (not SENT); the drip scheduler still records the step
- Stores emails in memory for test assertions
- Body preview in the log line is truncated
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from src.core.ports.email import (
    EmailMessage,
    EmailResult,
    EmailStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    sender: str | None
    headers: dict[str, str]
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    """Email adapter that logs instead of sending. Implements EmailPort."""

    sent_emails: list[SentEmail] = field(default_factory=list)

    log_level: int = logging.INFO
    log_body: bool = False
    body_preview_length: int = 100

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> EmailResult:
        return self._record(
            recipient=recipient,
            subject=subject,
            body_html=body_html,
            body_text=body_text or "",
            sender=None,
            headers=dict(headers or {}),
        )

    def send(self, message: EmailMessage) -> EmailResult:
        return self._record(
            recipient=str(message.recipient),
            subject=message.subject,
            body_html=message.body_html,
            body_text=message.body_text,
            sender=str(message.sender) if message.sender else None,
            headers=dict(message.headers),
        )

    def _record(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
        sender: str | None,
        headers: dict[str, str],
    ) -> EmailResult:
        message_id = f"dev-{uuid4().hex[:12]}"
        self.sent_emails.append(
            SentEmail(
                id=message_id,
                recipient=recipient,
                subject=subject,
                body_html=body_html,
                body_text=body_text,
                sender=sender,
                headers=headers,
                logged_at=datetime.now(UTC),
            )
        )

        parts = [f"EMAIL (dev): To={recipient}", f"Subject={subject}"]
        if sender:
            parts.append(f"From={sender}")
        if self.log_body and body_html:
            preview = body_html[: self.body_preview_length]
            if len(body_html) > self.body_preview_length:
                preview += "..."
            parts.append(f"Body={preview}")
        parts.append(f"MessageID={message_id}")
        logger.log(self.log_level, ", ".join(parts))

        return EmailResult(
            status=EmailStatus.SKIPPED,
            message_id=message_id,
            recipient=recipient,
            error="Dev mode - email logged, not sent",
        )

    # --- Test Helper Methods ---

    def get_last_email(self) -> SentEmail | None:
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        self.sent_emails.clear()

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)
