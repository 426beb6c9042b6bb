"""
Pydantic response models for the Marketing Analytics backend.

This module defines the wire contract of the marketing overview report: the
KPI set, period comparisons, page/source/SEO listings, timeseries, anomaly
flags, supplementary breakdowns and response metadata.

Every model is frozen (no mutation after construction) and rejects NaN and
Infinity, so a report can only be assembled from already-normalized numbers.
Field constraints (ge=0, le=1) restate the value domains the KPI builder
guarantees; a violation here is a bug in the engine, not bad upstream data.

All models use Pydantic v2 syntax. Field names are snake_case because that is
the serialized format the dashboard consumes.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from marketing_analytics.models.enums import (
    CanonicalSource,
    Granularity,
    MoverDirection,
    PipelineStatus,
)


class _ReportModel(BaseModel):
    """Common configuration: immutable, finite numbers only."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)


# =============================================================================
# Period
# =============================================================================


class PeriodBlock(_ReportModel):
    """
    Resolved reporting window as serialized in the response.

    ``granularity`` is always "day".
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {"start": "2026-01-01", "end": "2026-01-31", "granularity": "day"}
        },
    )

    start: str = Field(..., description="First day of the window, YYYY-MM-DD")
    end: str = Field(..., description="Last day of the window, YYYY-MM-DD")
    granularity: Granularity = Field(default=Granularity.DAY)


# =============================================================================
# KPIs and comparisons
# =============================================================================


class KPISet(_ReportModel):
    """
    Headline KPIs for one period.

    Every field is finite and non-negative; ``bounce_rate`` is a share in
    [0, 1]. Ratios are rounded to 4 decimal places.
    """
    model_config = ConfigDict(
        frozen=True,
        allow_inf_nan=False,
        json_schema_extra={
            "example": {
                "sessions": 1200,
                "page_views": 3400,
                "bounce_rate": 0.45,
                "avg_time_on_page_seconds": 62.5,
                "total_submissions": 85,
                "total_pipeline_value_usd": 125000,
                "organic_clicks": 4500,
                "impressions": 98000,
                "avg_position": 12.3,
                "revenue_per_session": 104.1667,
                "revenue_per_click": 27.7778,
                "submissions_per_session": 0.0708,
                "submissions_per_click": 0.0189,
            }
        },
    )

    sessions: float = Field(0.0, ge=0)
    page_views: float = Field(0.0, ge=0)
    bounce_rate: float = Field(0.0, ge=0, le=1)
    avg_time_on_page_seconds: float = Field(0.0, ge=0)
    total_submissions: float = Field(0.0, ge=0)
    total_pipeline_value_usd: float = Field(0.0, ge=0)
    organic_clicks: float = Field(0.0, ge=0)
    impressions: float = Field(0.0, ge=0)
    avg_position: float = Field(0.0, ge=0)
    revenue_per_session: float = Field(0.0, ge=0)
    revenue_per_click: float = Field(0.0, ge=0)
    submissions_per_session: float = Field(0.0, ge=0)
    submissions_per_click: float = Field(0.0, ge=0)


class ComparisonEntry(_ReportModel):
    """
    Current vs previous value of one KPI.

    ``delta_pct`` is a fraction (0.25 == +25%) and is 0 when previous is 0.
    """
    current: float = Field(..., ge=0)
    previous: float = Field(..., ge=0)
    delta_pct: float


class KPIComparisons(_ReportModel):
    """Period-over-period comparison for the volume KPIs."""
    sessions: ComparisonEntry
    page_views: ComparisonEntry
    total_submissions: ComparisonEntry
    total_pipeline_value_usd: ComparisonEntry
    organic_clicks: ComparisonEntry
    impressions: ComparisonEntry


# =============================================================================
# Listings
# =============================================================================


class PageRecord(_ReportModel):
    """Per-URL rollup merged across engagement, search and conversion views."""
    page_url: str
    sessions: float = Field(0.0, ge=0)
    page_views: float = Field(0.0, ge=0)
    bounce_rate: float = Field(0.0, ge=0, le=1)
    avg_time_on_page_seconds: float = Field(0.0, ge=0)
    clicks: float = Field(0.0, ge=0)
    impressions: float = Field(0.0, ge=0)
    ctr: float = Field(0.0, ge=0, le=1)
    submissions: float = Field(0.0, ge=0)
    pipeline_value_usd: float = Field(0.0, ge=0)


class SourceRecord(_ReportModel):
    """Per-acquisition-source rollup with its canonical channel."""
    submission_source: str
    canonical_source: CanonicalSource
    submissions: float = Field(0.0, ge=0)
    pipeline_value_usd: float = Field(0.0, ge=0)


class SEOQueryRecord(_ReportModel):
    """Per-search-query rollup; ``revenue_per_click`` = pipeline / clicks."""
    query: str
    clicks: float = Field(0.0, ge=0)
    impressions: float = Field(0.0, ge=0)
    ctr: float = Field(0.0, ge=0, le=1)
    avg_position: float = Field(0.0, ge=0)
    submissions: float = Field(0.0, ge=0)
    pipeline_value_usd: float = Field(0.0, ge=0)
    revenue_per_click: float = Field(0.0, ge=0)


class SEOQueryMover(_ReportModel):
    """Search query whose impressions moved between the two window halves."""
    query: str
    impressions_first_half: float = Field(0.0, ge=0)
    impressions_second_half: float = Field(0.0, ge=0)
    delta_pct: float
    direction: MoverDirection


class DeviceBreakdown(_ReportModel):
    device: str
    impressions: float = Field(0.0, ge=0)
    clicks: float = Field(0.0, ge=0)
    ctr: float = Field(0.0, ge=0, le=1)


class CountryBreakdown(_ReportModel):
    country: str
    impressions: float = Field(0.0, ge=0)
    clicks: float = Field(0.0, ge=0)
    ctr: float = Field(0.0, ge=0, le=1)


class PipelineCategory(_ReportModel):
    product_category: str
    submissions: float = Field(0.0, ge=0)
    pipeline_value_usd: float = Field(0.0, ge=0)


class ConversionEvent(_ReportModel):
    created_at: str
    product_category: str
    preliminary_price_usd: float = Field(0.0, ge=0)
    submission_source: str


class FunnelStep(_ReportModel):
    """One day of the page view → submission funnel."""
    date: str
    page_views: float = Field(0.0, ge=0)
    submissions: float = Field(0.0, ge=0)
    conversion_rate: float = Field(0.0, ge=0, le=1)
    pipeline_value_usd: float = Field(0.0, ge=0)


class PipelineHealth(_ReportModel):
    """Ingestion status of one raw data source."""
    source: str
    last_success: Optional[str] = None
    failure_rate_24h: float = Field(0.0, ge=0, le=1)
    status: PipelineStatus


# =============================================================================
# Timeseries and anomalies
# =============================================================================


class TimeseriesPoint(_ReportModel):
    date: str
    value: float = Field(0.0, ge=0)


class Timeseries(_ReportModel):
    """
    Dense daily series over the whole window.

    Days without data carry value 0, so every list has exactly
    (end - start) + 1 points.
    """
    sessions: List[TimeseriesPoint]
    submissions: List[TimeseriesPoint]
    pipeline_value_usd: List[TimeseriesPoint]
    impressions: List[TimeseriesPoint]
    clicks: List[TimeseriesPoint]


class AnomalyFlags(_ReportModel):
    """Spike flags, each computed independently from its own series."""
    sessions_spike: bool = False
    submissions_spike: bool = False
    pipeline_spike: bool = False


# =============================================================================
# Metadata
# =============================================================================


class DataFreshness(_ReportModel):
    """
    Most recent observed date per raw source.

    None means the source has no rows at all, which is not an error.
    """
    engagement_last_date: Optional[str] = None
    search_console_last_date: Optional[str] = None
    conversion_last_date: Optional[str] = None


class RowCounts(_ReportModel):
    pages: int = Field(0, ge=0)
    sources: int = Field(0, ge=0)


class ReportMetadata(_ReportModel):
    """Generated once per request, never persisted."""
    query_execution_ms: int = Field(0, ge=0)
    row_counts: RowCounts = Field(default_factory=RowCounts)
    data_freshness: DataFreshness = Field(default_factory=DataFreshness)


# =============================================================================
# Report and envelope
# =============================================================================


class MarketingOverview(_ReportModel):
    """The complete, immutable marketing overview report."""
    period: PeriodBlock
    generated_at: str
    kpis: KPISet
    comparisons: KPIComparisons
    pages: List[PageRecord] = Field(default_factory=list)
    sources: List[SourceRecord] = Field(default_factory=list)
    seo_queries: List[SEOQueryRecord] = Field(default_factory=list)
    timeseries: Optional[Timeseries] = None
    anomalies: AnomalyFlags = Field(default_factory=AnomalyFlags)
    meta: ReportMetadata = Field(default_factory=ReportMetadata)
    device_breakdown: List[DeviceBreakdown] = Field(default_factory=list)
    country_breakdown: List[CountryBreakdown] = Field(default_factory=list)
    pipeline_categories: List[PipelineCategory] = Field(default_factory=list)
    recent_conversions: List[ConversionEvent] = Field(default_factory=list)
    seo_movers: List[SEOQueryMover] = Field(default_factory=list)
    funnel: List[FunnelStep] = Field(default_factory=list)
    pipeline_health: List[PipelineHealth] = Field(default_factory=list)


class ActivitySpineResponse(_ReportModel):
    """Response envelope shared by the activity-spine endpoints."""
    data: MarketingOverview
    timestamp: str
    orgId: str


class ErrorResponse(BaseModel):
    """Body of 400/500 responses."""
    error: str
