"""
Decoded row shapes for the raw aggregates returned by storage.

Storage hands back loosely-typed mappings. The decoders in
marketing_analytics.services.normalization turn each mapping into one of the
frozen dataclasses below; past that boundary no component sees an untyped
row. Every numeric attribute here is already finite and non-negative, and
shares are already clamped to [0, 1].
"""

from dataclasses import dataclass


# =============================================================================
# KPI aggregates
# =============================================================================


@dataclass(frozen=True)
class EngagementAggregate:
    """Session-weighted web engagement totals for one window."""
    sessions: float = 0.0
    page_views: float = 0.0
    bounce_rate: float = 0.0
    avg_time_on_page_seconds: float = 0.0


@dataclass(frozen=True)
class ConversionAggregate:
    """Form submissions and the pipeline value they carry."""
    total_submissions: float = 0.0
    total_pipeline_value_usd: float = 0.0


@dataclass(frozen=True)
class SearchAggregate:
    """Lifetime organic search totals; avg_position is impression-weighted."""
    organic_clicks: float = 0.0
    impressions: float = 0.0
    avg_position: float = 0.0


@dataclass(frozen=True)
class FunnelAggregate:
    """Web-event funnel totals, the fallback when engagement is empty."""
    page_views: float = 0.0
    submissions: float = 0.0
    pipeline_value_usd: float = 0.0


# =============================================================================
# Series
# =============================================================================


@dataclass(frozen=True)
class SeriesSummary:
    """
    Summary statistics of a daily series restricted to the active window.

    Attributes:
        sample_count: Number of days with at least one row.
        mean: Arithmetic mean of the daily values.
        stddev: Population standard deviation (ddof=0).
        latest: Value of the most recent day in the series.
    """
    sample_count: int = 0
    mean: float = 0.0
    stddev: float = 0.0
    latest: float = 0.0


@dataclass(frozen=True)
class DailyValue:
    """One day of a metric; ``date`` is YYYY-MM-DD."""
    date: str
    value: float


# =============================================================================
# Page joins
# =============================================================================


@dataclass(frozen=True)
class PageEngagementRow:
    page_url: str
    sessions: float = 0.0
    page_views: float = 0.0
    bounce_rate: float = 0.0
    avg_time_on_page_seconds: float = 0.0


@dataclass(frozen=True)
class PageSearchRow:
    page_url: str
    clicks: float = 0.0
    impressions: float = 0.0
    ctr: float = 0.0


@dataclass(frozen=True)
class PageConversionRow:
    page_url: str
    submissions: float = 0.0
    pipeline_value_usd: float = 0.0


@dataclass(frozen=True)
class SourceRow:
    submission_source: str
    submissions: float = 0.0
    pipeline_value_usd: float = 0.0
