"""
Analytics component.

Records page views and affiliate clicks and reads the dashboard aggregates.

Key behaviors:
- Only GET requests to public pages are tracked
- Static assets, API calls, admin pages, health, robots and sitemap are skipped
- Free-text fields are truncated rather than rejected

Invariants:
- Tracking never changes response behavior; callers may ignore the output
- Affiliate clicks require a non-empty affiliate name
"""

from __future__ import annotations

import re
from datetime import UTC, datetime

from src.components.analytics.models import (
    AffiliateClick,
    AnalyticsConfig,
    AnalyticsStatsInput,
    AnalyticsStatsOutput,
    AnalyticsValidationError,
    PageView,
    TrackAffiliateClickInput,
    TrackOutput,
    TrackPageViewInput,
)
from src.components.analytics.ports import AnalyticsRepoPort, TimePort

AFFILIATE_REGEX = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.\-]*$")


def _now_utc(time_port: TimePort | None) -> datetime:
    if time_port:
        return time_port.now_utc()
    return datetime.now(UTC)


# --- Pure Functions ---


def should_track(method: str, path: str, config: AnalyticsConfig | None = None) -> bool:
    """True if a request to path should be recorded as a page view."""
    config = config or AnalyticsConfig()
    if method.upper() not in config.tracked_methods:
        return False
    if path in config.excluded_paths:
        return False
    return not any(path.startswith(p) for p in config.excluded_prefixes)


def truncate(value: str | None, limit: int) -> str:
    return (value or "")[:limit]


def validate_affiliate(affiliate: str, max_length: int = 100) -> list[AnalyticsValidationError]:
    name = affiliate.strip()
    if not name:
        return [
            AnalyticsValidationError(
                code="AFFILIATE_REQUIRED",
                message="Affiliate name is required",
                field_name="affiliate",
            )
        ]
    if len(name) > max_length or not AFFILIATE_REGEX.match(name):
        return [
            AnalyticsValidationError(
                code="INVALID_AFFILIATE",
                message="Invalid affiliate name",
                field_name="affiliate",
            )
        ]
    return []


# --- Run Handlers ---


def run_track_page_view(
    inp: TrackPageViewInput,
    repo: AnalyticsRepoPort,
    config: AnalyticsConfig,
    time_port: TimePort | None = None,
) -> TrackOutput:
    if not should_track(inp.method, inp.path, config):
        return TrackOutput(success=True, recorded=False)

    limit = config.max_field_length
    repo.record_page_view(
        PageView(
            path=truncate(inp.path, limit),
            referrer=truncate(inp.referrer, limit),
            user_agent=truncate(inp.user_agent, limit),
            ip=truncate(inp.ip, 64),
            created_at=_now_utc(time_port),
        )
    )
    return TrackOutput(success=True, recorded=True)


def run_track_click(
    inp: TrackAffiliateClickInput,
    repo: AnalyticsRepoPort,
    config: AnalyticsConfig,
    time_port: TimePort | None = None,
) -> TrackOutput:
    errors = validate_affiliate(inp.affiliate, config.max_affiliate_length)
    if errors:
        return TrackOutput(success=False, errors=errors)

    repo.record_affiliate_click(
        AffiliateClick(
            affiliate=inp.affiliate.strip(),
            page=truncate(inp.page, config.max_field_length),
            ip=truncate(inp.ip, 64),
            created_at=_now_utc(time_port),
        )
    )
    return TrackOutput(success=True, recorded=True)


def run_stats(
    inp: AnalyticsStatsInput,
    repo: AnalyticsRepoPort,
    config: AnalyticsConfig,
    time_port: TimePort | None = None,
) -> AnalyticsStatsOutput:
    now = _now_utc(time_port)
    page_views = repo.page_view_stats(
        now,
        top_limit=config.top_pages_limit,
        top_days=config.top_pages_days,
        daily_days=config.daily_days,
    )
    affiliates = repo.affiliate_stats(now, page_limit=config.affiliate_page_limit)
    return AnalyticsStatsOutput(success=True, page_views=page_views, affiliates=affiliates)


def run(
    inp: TrackPageViewInput | TrackAffiliateClickInput | AnalyticsStatsInput,
    *,
    repo: AnalyticsRepoPort,
    config: AnalyticsConfig | None = None,
    time_port: TimePort | None = None,
) -> TrackOutput | AnalyticsStatsOutput:
    """
    Main component entry point (Atomic Component Pattern).

    Args:
        inp: Input command
        repo: Analytics repository (Required)
        config: Tracking filters and stats windows
        time_port: Clock override for tests

    Returns:
        Operation result
    """
    config = config or AnalyticsConfig()
    if isinstance(inp, TrackPageViewInput):
        return run_track_page_view(inp, repo, config, time_port)
    elif isinstance(inp, TrackAffiliateClickInput):
        return run_track_click(inp, repo, config, time_port)
    elif isinstance(inp, AnalyticsStatsInput):
        return run_stats(inp, repo, config, time_port)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
