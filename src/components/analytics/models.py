"""
Analytics component input/output models.

Page-view and affiliate-click events plus the aggregate stats the admin
dashboard reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

# --- Events ---


@dataclass(frozen=True)
class PageView:
    """A single tracked GET of a public page."""

    path: str
    referrer: str
    user_agent: str
    ip: str
    created_at: datetime


@dataclass(frozen=True)
class AffiliateClick:
    """An outbound click on an affiliate link."""

    affiliate: str
    page: str
    ip: str
    created_at: datetime


# --- Stats ---


@dataclass(frozen=True)
class PageViewStats:
    total: int
    today: int
    week: int
    month: int
    top_pages: list[tuple[str, int]] = field(default_factory=list)
    daily: list[tuple[date, int]] = field(default_factory=list)


@dataclass(frozen=True)
class AffiliateStats:
    total: int
    today: int
    week: int
    by_affiliate: list[tuple[str, int]] = field(default_factory=list)
    by_page: list[tuple[str, int]] = field(default_factory=list)


# --- Inputs ---


@dataclass(frozen=True)
class TrackPageViewInput:
    """Input for recording a page view."""

    path: str
    method: str = "GET"
    referrer: str = ""
    user_agent: str = ""
    ip: str = ""


@dataclass(frozen=True)
class TrackAffiliateClickInput:
    """Input for recording an affiliate click."""

    affiliate: str
    page: str = ""
    ip: str = ""


@dataclass(frozen=True)
class AnalyticsStatsInput:
    """Input for reading dashboard stats."""

    pass


# --- Outputs ---


@dataclass(frozen=True)
class AnalyticsValidationError:
    """Validation error for analytics."""

    code: str
    message: str
    field_name: str | None = None


@dataclass(frozen=True)
class TrackOutput:
    """Output from either track operation."""

    success: bool
    recorded: bool = False
    errors: list[AnalyticsValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class AnalyticsStatsOutput:
    success: bool
    page_views: PageViewStats | None = None
    affiliates: AffiliateStats | None = None
    errors: list[AnalyticsValidationError] = field(default_factory=list)


# --- Configuration ---


@dataclass(frozen=True)
class AnalyticsConfig:
    """Tracking filters and stats windows."""

    excluded_prefixes: tuple[str, ...] = ("/static/", "/api/", "/admin")
    excluded_paths: tuple[str, ...] = ("/health", "/robots.txt", "/sitemap.xml")
    tracked_methods: tuple[str, ...] = ("GET",)
    max_field_length: int = 500
    max_affiliate_length: int = 100
    top_pages_limit: int = 20
    top_pages_days: int = 30
    daily_days: int = 14
    affiliate_page_limit: int = 10
