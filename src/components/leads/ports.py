"""
Leads component ports.

Protocol interfaces for the lead store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.components.leads.models import Lead, LeadStats


class LeadRepoPort(Protocol):
    """
    Lead repository interface.

    Email is the natural key; every write is a single-row operation.
    """

    def upsert_lead(
        self,
        email: str,
        name: str | None,
        income_range: str | None,
        source: str | None,
        unsubscribe_token: str,
        now: datetime,
        default_source: str = "calculator",
    ) -> tuple[int, bool]:
        """
        Insert a lead or merge non-empty fields into the existing row.

        The token and default_source are only used when a new row is created.

        Returns:
            Tuple of (lead_id, is_new)
        """
        ...

    def get_by_id(self, lead_id: int) -> Lead | None:
        ...

    def get_by_email(self, email: str) -> Lead | None:
        ...

    def unsubscribe(self, token: str, now: datetime) -> tuple[str, bool] | None:
        """
        Clear the subscribed flag for the lead owning token.

        Returns:
            (email, was_subscribed), or None if no lead has this token
        """
        ...

    def search(self, search: str, limit: int, offset: int) -> tuple[list[Lead], int]:
        """Leads whose email or name contains search, newest first, plus total count."""
        ...

    def set_subscribed(self, lead_id: int, subscribed: bool, now: datetime) -> bool:
        """Returns False if the lead does not exist."""
        ...

    def delete(self, lead_id: int) -> bool:
        """Hard delete (admin only). Returns False if the lead does not exist."""
        ...

    def list_all(self) -> list[Lead]:
        """Every lead, newest first."""
        ...

    def recent(self, limit: int) -> list[Lead]:
        ...

    def stats(self, now: datetime) -> LeadStats:
        ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
