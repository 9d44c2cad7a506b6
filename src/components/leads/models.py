"""
Leads component models.

Data models for lead capture, unsubscribe and the admin lead views.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime

# --- Entity ---


@dataclass
class Lead:
    """
    Captured lead.

    Email is unique and stored lower-cased. last_email_sent is the drip step
    counter (0 = just signed up, 8 = sequence complete).
    """

    id: int
    email: str
    unsubscribe_token: str
    name: str | None = None
    income_range: str | None = None
    source: str = "calculator"
    subscribed: bool = True
    last_email_sent: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


# --- Read Models ---


@dataclass(frozen=True)
class LeadStats:
    total: int
    subscribed: int
    unsubscribed: int
    today: int
    this_week: int
    this_month: int
    by_source: list[tuple[str, int]] = field(default_factory=list)
    by_income: list[tuple[str, int]] = field(default_factory=list)


@dataclass(frozen=True)
class LeadPage:
    """One page of an admin lead search, newest first."""

    leads: list[Lead]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0


# --- Input Models ---


@dataclass(frozen=True)
class CaptureLeadInput:
    """Lead capture from a calculator form or the newsletter box."""

    email: str
    name: str | None = None
    income_range: str | None = None
    source: str | None = None  # e.g., "calculator", "newsletter", "exit_intent"


@dataclass(frozen=True)
class UnsubscribeInput:
    token: str


@dataclass(frozen=True)
class ListLeadsInput:
    search: str = ""
    page: int = 1
    page_size: int | None = None


@dataclass(frozen=True)
class ToggleSubscriptionInput:
    lead_id: int


@dataclass(frozen=True)
class DeleteLeadInput:
    lead_id: int


@dataclass(frozen=True)
class ExportLeadsInput:
    pass


# --- Output Models ---


@dataclass(frozen=True)
class LeadValidationError:
    """Validation error detail."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class CaptureLeadOutput:
    success: bool
    lead_id: int | None = None
    is_new: bool = False
    errors: list[LeadValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class UnsubscribeOutput:
    success: bool
    email: str | None = None
    already_unsubscribed: bool = False  # Idempotent success
    errors: list[LeadValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class ListLeadsOutput:
    success: bool
    page: LeadPage | None = None
    errors: list[LeadValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class ToggleSubscriptionOutput:
    success: bool
    subscribed: bool | None = None
    errors: list[LeadValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class DeleteLeadOutput:
    success: bool
    errors: list[LeadValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class ExportLeadsOutput:
    success: bool
    csv_text: str = ""
    row_count: int = 0
    errors: list[LeadValidationError] = field(default_factory=list)


# --- Configuration ---


@dataclass(frozen=True)
class LeadsConfig:
    """Lead capture configuration."""

    default_source: str = "calculator"
    page_size: int = 20
    max_page_size: int = 100
    token_bytes: int = 32  # hex-encoded -> 64 chars
    recent_limit: int = 10
    base_url: str = "https://autolytiqs.com"
    unsubscribe_path: str = "/unsubscribe"


# --- Error Types ---


class LeadError(Exception):
    """Base lead error."""

    pass


class LeadNotFoundError(LeadError):
    def __init__(self, lead_id: int) -> None:
        self.lead_id = lead_id
        super().__init__(f"Lead {lead_id} not found")
