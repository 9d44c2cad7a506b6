"""
Analytics component ports.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.components.analytics.models import (
    AffiliateClick,
    AffiliateStats,
    PageView,
    PageViewStats,
)


class AnalyticsRepoPort(Protocol):
    """Storage for analytics events and their aggregates."""

    def record_page_view(self, view: PageView) -> None:
        ...

    def record_affiliate_click(self, click: AffiliateClick) -> None:
        ...

    def page_view_stats(
        self,
        now: datetime,
        top_limit: int,
        top_days: int,
        daily_days: int,
    ) -> PageViewStats:
        """
        Counts for all time, since midnight UTC, the last 7 and 30 days.

        top_pages covers the last top_days days, most viewed first.
        daily covers the last daily_days days, oldest first.
        """
        ...

    def affiliate_stats(self, now: datetime, page_limit: int) -> AffiliateStats:
        """Click counts plus breakdowns by affiliate and by non-empty page."""
        ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
