"""
Email port.

Outbound mail for the drip sequence. Adapters:
- DevEmailAdapter: logs and keeps messages in memory, delivers nothing
- SMTPEmailAdapter: STARTTLS SMTP

Adapters report every outcome through EmailResult; send never raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class EmailStatus(Enum):
    SENT = "sent"
    SKIPPED = "skipped"  # dev adapter: logged, not delivered
    FAILED = "failed"

    @property
    def attempted(self) -> bool:
        """SENT and SKIPPED both let the drip sequence advance."""
        return self is not EmailStatus.FAILED


@dataclass(frozen=True)
class EmailAddress:
    email: str
    name: str | None = None

    def __str__(self) -> str:
        if not self.name:
            return self.email
        quoted = self.name.replace('"', '\\"')
        return f'"{quoted}" <{self.email}>'


@dataclass(frozen=True)
class EmailMessage:
    """A single outbound message. headers holds extras like List-Unsubscribe."""

    recipient: EmailAddress
    subject: str
    body_html: str
    body_text: str = ""
    sender: EmailAddress | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.recipient.email:
            raise ValueError("Recipient email is required")
        if not self.subject:
            raise ValueError("Subject is required")
        if not (self.body_html or self.body_text):
            raise ValueError("Message needs an HTML or text body")


@dataclass
class EmailResult:
    status: EmailStatus
    recipient: str = ""
    message_id: str | None = None
    error: str | None = None
    sent_at: datetime | None = None

    @classmethod
    def success(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        return cls(EmailStatus.SENT, recipient, message_id, sent_at=datetime.now(UTC))

    @classmethod
    def skipped(cls, recipient: str, reason: str = "Dev mode") -> EmailResult:
        return cls(EmailStatus.SKIPPED, recipient, error=reason)

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        return cls(EmailStatus.FAILED, recipient, error=error)


class EmailPort(Protocol):
    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> EmailResult:
        """
        Send one email to one address.

        Args:
            recipient: Address to deliver to
            subject: Subject line
            body_html: HTML body
            body_text: Plain-text alternative (Optional)
            headers: Extra headers such as List-Unsubscribe (Optional)

        Returns:
            EmailResult; failures are returned, not raised
        """
        ...

    def send(self, message: EmailMessage) -> EmailResult:
        ...
