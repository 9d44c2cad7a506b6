"""
Drip component ports.

Protocol interfaces for the lead store side of the drip scheduler.
The mail sender is the shared EmailPort (src.core.ports.email).
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from src.components.drip.models import DripCandidate, DripStats


class DripRepoPort(Protocol):
    """
    Drip persistence interface.

    State lives entirely in the lead store; the scheduler keeps none
    between ticks.
    """

    def list_drip_candidates(
        self,
        delay_days: Sequence[int],
        now: datetime,
        limit: int,
    ) -> list[DripCandidate]:
        """
        Subscribed leads whose next step is due at now.

        A lead at last_email_sent = k is due when step k+1 exists and
        created_at + delay_days[k] <= now. The due filter applies before
        the limit. Ordered by created_at ascending, at most limit rows.
        """
        ...

    def record_drip_send(self, lead_id: int, step: int, now: datetime) -> None:
        """
        Record a completed send and advance the lead's step counter.

        Must run as one transaction: insert (lead_id, step) if absent, then
        set last_email_sent = max(last_email_sent, step). Repeating the call
        is a no-op. Raises on storage failure.
        """
        ...

    def drip_stats(self, total_steps: int) -> DripStats:
        ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
