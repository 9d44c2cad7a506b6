"""
Analytics component.

Page-view and affiliate-click tracking.
"""

from src.components.analytics.component import (
    run,
    run_stats,
    run_track_click,
    run_track_page_view,
    should_track,
    truncate,
    validate_affiliate,
)
from src.components.analytics.models import (
    AffiliateClick,
    AffiliateStats,
    AnalyticsConfig,
    AnalyticsStatsInput,
    AnalyticsStatsOutput,
    AnalyticsValidationError,
    PageView,
    PageViewStats,
    TrackAffiliateClickInput,
    TrackOutput,
    TrackPageViewInput,
)
from src.components.analytics.ports import AnalyticsRepoPort, TimePort

__all__ = [
    # Component
    "run",
    "run_track_page_view",
    "run_track_click",
    "run_stats",
    "should_track",
    "truncate",
    "validate_affiliate",
    # Models
    "PageView",
    "AffiliateClick",
    "PageViewStats",
    "AffiliateStats",
    "AnalyticsConfig",
    "TrackPageViewInput",
    "TrackAffiliateClickInput",
    "AnalyticsStatsInput",
    "TrackOutput",
    "AnalyticsStatsOutput",
    "AnalyticsValidationError",
    # Ports
    "AnalyticsRepoPort",
    "TimePort",
]
