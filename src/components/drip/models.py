"""
Drip component models.

Data models for the drip email sequence and its scheduler ticks.

State machine per lead: step counter 0..N (N = sequence length).
- 0: just signed up
- 1..N-1: mid-sequence
- N: sequence complete
Transition n -> n+1 when subscribed, n < N and now >= signup + delay[n+1].
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

DEFAULT_DELAY_DAYS: tuple[int, ...] = (0, 3, 7, 14, 21, 28, 42, 56)


# --- Sequence ---


@dataclass(frozen=True)
class DripStep:
    """
    One email in the sequence.

    body_html may contain {{name}}; it is replaced with the HTML-escaped
    lead name.
    """

    step: int
    subject: str
    body_html: str


# --- Scan Rows ---


@dataclass(frozen=True)
class DripCandidate:
    """Subscribed lead that has not finished the sequence."""

    lead_id: int
    email: str
    name: str | None
    unsubscribe_token: str
    last_email_sent: int
    created_at: datetime


@dataclass(frozen=True)
class DueLead:
    """Candidate whose next step is due now."""

    lead_id: int
    email: str
    name: str | None
    unsubscribe_token: str
    next_step: int


# --- Results ---


class SendOutcome(Enum):
    SENT = "sent"  # mail accepted and recorded
    SKIPPED = "skipped"  # dev adapter; recorded as attempted
    SEND_FAILED = "send_failed"  # lead stays at its step
    RECORD_FAILED = "record_failed"  # mail attempted but commit failed; retried next tick


@dataclass(frozen=True)
class DripSendResult:
    lead_id: int
    step: int
    outcome: SendOutcome
    error: str | None = None


@dataclass
class DripBatchResult:
    """Outcome of one scheduler tick."""

    started_at: datetime
    scanned: int = 0
    results: list[DripSendResult] = field(default_factory=list)
    error: str | None = None  # set when the scan itself failed

    def count(self, outcome: SendOutcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def sent(self) -> int:
        """Sends that advanced a lead."""
        return self.count(SendOutcome.SENT) + self.count(SendOutcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(SendOutcome.SEND_FAILED) + self.count(SendOutcome.RECORD_FAILED)


@dataclass(frozen=True)
class DripStats:
    total_sends: int
    first_step_sends: int
    completed: int  # sends of the final step
    pending: int  # subscribed leads still in the sequence


# --- Input / Output ---


@dataclass(frozen=True)
class ProcessDripInput:
    """Run one scheduler tick."""

    pass


@dataclass(frozen=True)
class DripStatsInput:
    pass


@dataclass(frozen=True)
class ProcessDripOutput:
    success: bool
    batch: DripBatchResult | None = None
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DripStatsOutput:
    success: bool
    stats: DripStats | None = None
    errors: list[str] = field(default_factory=list)


# --- Configuration ---


@dataclass(frozen=True)
class DripConfig:
    """Drip scheduler configuration from rules."""

    delay_days: tuple[int, ...] = DEFAULT_DELAY_DAYS
    batch_limit: int = 50
    site_name: str = "Autolytiq"
    base_url: str = "https://autolytiqs.com"
    unsubscribe_path: str = "/unsubscribe"
    name_fallback: str = "there"

    @property
    def total_steps(self) -> int:
        return len(self.delay_days)

    def __post_init__(self) -> None:
        if not self.delay_days:
            raise ValueError("delay_days must not be empty")
        if self.batch_limit <= 0:
            raise ValueError("batch_limit must be positive")


# --- Error Types ---


class DripError(Exception):
    """Base drip error."""

    pass


class SequenceMismatchError(DripError):
    """Delay table and sequence content disagree on the number of steps."""

    def __init__(self, delays: int, steps: int) -> None:
        self.delays = delays
        self.steps = steps
        super().__init__(f"{delays} delays configured for a {steps}-step sequence")
