"""
Report Listings.

Builders for every list-shaped section of the marketing overview. Each
builder takes already-fetched rows, normalizes them and returns frozen
response models; none of them performs I/O.

Sections:
    - pages:               outer merge of engagement, search and conversion
                           rows keyed by URL, sessions desc, capped
    - sources:             per-source rollup with canonical channel,
                           pipeline value desc
    - seo_queries:         per-query rollup with revenue per click
    - timeseries:          dense, zero-filled daily series over the window
    - device/country:      search breakdowns with a clamped CTR
    - pipeline_categories: submissions and pipeline value per product
    - recent_conversions:  latest form submissions
    - seo_movers:          queries whose impressions moved between the two
                           halves of the window
    - funnel:              daily page view to submission conversion
    - pipeline_health:     ingestion status per raw source
    - data_freshness:      most recent date per raw source
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from marketing_analytics.models.enums import MoverDirection, PipelineStatus
from marketing_analytics.models.rows import (
    DailyValue,
    PageConversionRow,
    PageEngagementRow,
    PageSearchRow,
    SourceRow,
)
from marketing_analytics.models.schemas import (
    ConversionEvent,
    CountryBreakdown,
    DataFreshness,
    DeviceBreakdown,
    FunnelStep,
    PageRecord,
    PipelineCategory,
    PipelineHealth,
    SEOQueryMover,
    SEOQueryRecord,
    SourceRecord,
    Timeseries,
    TimeseriesPoint,
)
from marketing_analytics.services.normalization import (
    clamp,
    field_of,
    first_row,
    safe_divide,
    to_count,
    to_iso_date,
    to_share,
    to_text,
)
from marketing_analytics.services.period import TimeWindow
from marketing_analytics.services.taxonomy import SourceClassifier, default_classifier

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_PAGES_LIMIT: int = 100
DEFAULT_SEO_QUERY_LIMIT: int = 50
DEFAULT_RECENT_CONVERSIONS_LIMIT: int = 20
DEFAULT_SEO_MOVERS_LIMIT: int = 10

# Pipeline health thresholds
STALE_AFTER = timedelta(hours=48)
WARNING_AFTER = timedelta(hours=24)
WARNING_FAILURE_RATE: float = 0.3

UNKNOWN_LABEL = 'unknown'


# =============================================================================
# Pages and sources
# =============================================================================


def merge_pages(
    engagement: Sequence[PageEngagementRow],
    search: Sequence[PageSearchRow],
    conversions: Sequence[PageConversionRow],
    limit: int = DEFAULT_PAGES_LIMIT,
) -> List[PageRecord]:
    """
    Full outer merge of the three per-URL views.

    One map per view is keyed by URL; the union of keys is walked and each
    view is looked up independently, so a URL present in only one view still
    yields a record with the other fields at zero. Records are ordered by
    sessions descending (ties keep first-seen order) and capped at ``limit``.
    """
    by_engagement: Dict[str, PageEngagementRow] = {r.page_url: r for r in engagement}
    by_search: Dict[str, PageSearchRow] = {r.page_url: r for r in search}
    by_conversion: Dict[str, PageConversionRow] = {r.page_url: r for r in conversions}

    urls: Dict[str, None] = {}
    for source in (by_engagement, by_search, by_conversion):
        for url in source:
            urls.setdefault(url, None)

    records = []
    for url in urls:
        eng = by_engagement.get(url) or PageEngagementRow(page_url=url)
        sc = by_search.get(url) or PageSearchRow(page_url=url)
        conv = by_conversion.get(url) or PageConversionRow(page_url=url)
        records.append(PageRecord(
            page_url=url,
            sessions=eng.sessions,
            page_views=eng.page_views,
            bounce_rate=eng.bounce_rate,
            avg_time_on_page_seconds=eng.avg_time_on_page_seconds,
            clicks=sc.clicks,
            impressions=sc.impressions,
            ctr=sc.ctr,
            submissions=conv.submissions,
            pipeline_value_usd=conv.pipeline_value_usd,
        ))

    records.sort(key=lambda r: r.sessions, reverse=True)
    return records[:max(limit, 0)]


def build_sources(
    rows: Sequence[SourceRow],
    classifier: Optional[SourceClassifier] = None,
) -> List[SourceRecord]:
    """Source rollup, each tagged with its canonical channel."""
    classifier = classifier or default_classifier
    records = [
        SourceRecord(
            submission_source=row.submission_source,
            canonical_source=classifier.classify(row.submission_source),
            submissions=row.submissions,
            pipeline_value_usd=row.pipeline_value_usd,
        )
        for row in rows
    ]
    records.sort(key=lambda r: r.pipeline_value_usd, reverse=True)
    return records


def build_seo_queries(
    rows: Optional[Iterable[Any]],
    limit: int = DEFAULT_SEO_QUERY_LIMIT,
) -> List[SEOQueryRecord]:
    records = []
    for row in rows or []:
        query = to_text(field_of(row, 'query'))
        if query is None:
            continue
        clicks = to_count(field_of(row, 'clicks'))
        pipeline = to_count(field_of(row, 'pipeline_value_usd'))
        records.append(SEOQueryRecord(
            query=query,
            clicks=clicks,
            impressions=to_count(field_of(row, 'impressions')),
            ctr=to_share(field_of(row, 'ctr')),
            avg_position=to_count(field_of(row, 'avg_position')),
            submissions=to_count(field_of(row, 'submissions')),
            pipeline_value_usd=pipeline,
            revenue_per_click=safe_divide(pipeline, clicks),
        ))
    return records[:max(limit, 0)]


# =============================================================================
# Timeseries
# =============================================================================


def densify(values: Sequence[DailyValue], window: TimeWindow) -> List[TimeseriesPoint]:
    """
    Reindex a sparse daily series onto every day of ``window``.

    Missing days become 0, duplicate days are summed and days outside the
    window are dropped, so the result always has ``window.days`` points.
    """
    index = pd.date_range(start=window.start, end=window.end, freq='D')
    series = pd.Series(
        [v.value for v in values],
        index=pd.to_datetime([v.date for v in values], errors='coerce'),
        dtype=float,
    )
    series = series[series.index.notna()]
    dense = series.groupby(level=0).sum().reindex(index, fill_value=0.0)
    return [
        TimeseriesPoint(date=ts.strftime('%Y-%m-%d'), value=float(value))
        for ts, value in dense.items()
    ]


def build_timeseries(
    window: TimeWindow,
    sessions: Sequence[DailyValue],
    submissions: Sequence[DailyValue],
    pipeline_value_usd: Sequence[DailyValue],
    impressions: Sequence[DailyValue],
    clicks: Sequence[DailyValue],
) -> Timeseries:
    return Timeseries(
        sessions=densify(sessions, window),
        submissions=densify(submissions, window),
        pipeline_value_usd=densify(pipeline_value_usd, window),
        impressions=densify(impressions, window),
        clicks=densify(clicks, window),
    )


# =============================================================================
# Breakdowns
# =============================================================================


def _ctr(clicks: float, impressions: float) -> float:
    return clamp(safe_divide(clicks, impressions), 0, 1)


def build_device_breakdown(rows: Optional[Iterable[Any]]) -> List[DeviceBreakdown]:
    records = []
    for row in rows or []:
        device = to_text(field_of(row, 'device'))
        if device is None:
            continue
        impressions = to_count(field_of(row, 'impressions'))
        clicks = to_count(field_of(row, 'clicks'))
        records.append(DeviceBreakdown(
            device=device,
            impressions=impressions,
            clicks=clicks,
            ctr=_ctr(clicks, impressions),
        ))
    return records


def build_country_breakdown(rows: Optional[Iterable[Any]]) -> List[CountryBreakdown]:
    records = []
    for row in rows or []:
        country = to_text(field_of(row, 'country'))
        if country is None:
            continue
        impressions = to_count(field_of(row, 'impressions'))
        clicks = to_count(field_of(row, 'clicks'))
        records.append(CountryBreakdown(
            country=country,
            impressions=impressions,
            clicks=clicks,
            ctr=_ctr(clicks, impressions),
        ))
    return records


def build_pipeline_categories(rows: Optional[Iterable[Any]]) -> List[PipelineCategory]:
    """Pipeline by product category, highest value first."""
    records = [
        PipelineCategory(
            product_category=to_text(field_of(row, 'product_category')) or UNKNOWN_LABEL,
            submissions=to_count(field_of(row, 'submissions')),
            pipeline_value_usd=to_count(field_of(row, 'pipeline_value_usd')),
        )
        for row in rows or []
    ]
    records.sort(key=lambda r: r.pipeline_value_usd, reverse=True)
    return records


def build_recent_conversions(
    rows: Optional[Iterable[Any]],
    limit: int = DEFAULT_RECENT_CONVERSIONS_LIMIT,
) -> List[ConversionEvent]:
    """Most recent submissions, in the order storage returned them."""
    events = []
    for row in rows or []:
        created_at = to_text(field_of(row, 'created_at'))
        if created_at is None:
            continue
        events.append(ConversionEvent(
            created_at=created_at,
            product_category=to_text(field_of(row, 'product_category')) or UNKNOWN_LABEL,
            preliminary_price_usd=to_count(field_of(row, 'preliminary_price_usd')),
            submission_source=to_text(field_of(row, 'submission_source')) or UNKNOWN_LABEL,
        ))
    return events[:max(limit, 0)]


# =============================================================================
# SEO movers and funnel
# =============================================================================


def build_seo_movers(
    rows: Optional[Iterable[Any]],
    limit: int = DEFAULT_SEO_MOVERS_LIMIT,
) -> List[SEOQueryMover]:
    """
    Queries whose impressions changed between the first and second half of
    the window.

    delta_pct = (second - first) / first, 0 when the first half had none.
    Unchanged queries are left out. The biggest relative moves come first;
    ties are broken by second-half impressions.
    """
    movers = []
    for row in rows or []:
        query = to_text(field_of(row, 'query'))
        if query is None:
            continue
        first = to_count(field_of(row, 'impressions_first_half'))
        second = to_count(field_of(row, 'impressions_second_half'))
        if first == second:
            continue
        movers.append(SEOQueryMover(
            query=query,
            impressions_first_half=first,
            impressions_second_half=second,
            delta_pct=safe_divide(second - first, first),
            direction=MoverDirection.RISING if second > first else MoverDirection.FALLING,
        ))

    movers.sort(key=lambda m: (abs(m.delta_pct), m.impressions_second_half), reverse=True)
    return movers[:max(limit, 0)]


def build_funnel(rows: Optional[Iterable[Any]]) -> List[FunnelStep]:
    steps = []
    for row in rows or []:
        day = to_iso_date(field_of(row, 'date'))
        if day is None:
            continue
        page_views = to_count(field_of(row, 'page_views'))
        submissions = to_count(field_of(row, 'submissions'))
        steps.append(FunnelStep(
            date=day,
            page_views=page_views,
            submissions=submissions,
            conversion_rate=clamp(safe_divide(submissions, page_views), 0, 1),
            pipeline_value_usd=to_count(field_of(row, 'pipeline_value_usd')),
        ))
    steps.sort(key=lambda s: s.date)
    return steps


# =============================================================================
# Pipeline health and freshness
# =============================================================================


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    parsed = pd.to_datetime(value, utc=True, errors='coerce')
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def pipeline_status(
    last_success: Optional[datetime],
    failure_rate: float,
    now: datetime,
) -> PipelineStatus:
    """
    Classify one ingestion source.

    stale:   never succeeded, or last success older than 48h
    warning: failure rate above 0.3, or last success older than 24h
    healthy: otherwise
    """
    if last_success is None:
        return PipelineStatus.STALE
    age = now - last_success
    if age > STALE_AFTER:
        return PipelineStatus.STALE
    if failure_rate > WARNING_FAILURE_RATE or age > WARNING_AFTER:
        return PipelineStatus.WARNING
    return PipelineStatus.HEALTHY


def build_pipeline_health(
    rows: Optional[Iterable[Any]],
    now: Optional[datetime] = None,
) -> List[PipelineHealth]:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    records = []
    for row in rows or []:
        source = to_text(field_of(row, 'source'))
        if source is None:
            continue
        last_success = to_text(field_of(row, 'last_success'))
        parsed = _parse_timestamp(last_success)
        failure_rate = to_share(field_of(row, 'failure_rate_24h'))
        status = pipeline_status(parsed, failure_rate, now)
        if status is not PipelineStatus.HEALTHY:
            logger.warning(f"Pipeline {source} is {status.value} (last success: {last_success})")
        records.append(PipelineHealth(
            source=source,
            last_success=last_success if parsed is not None else None,
            failure_rate_24h=failure_rate,
            status=status,
        ))
    return records


def build_freshness(rows: Optional[Sequence[Any]]) -> DataFreshness:
    """Latest observed date per source; None when a source has no rows."""
    row = first_row(rows)
    return DataFreshness(
        engagement_last_date=to_iso_date(field_of(row, 'engagement_last_date')),
        search_console_last_date=to_iso_date(field_of(row, 'search_console_last_date')),
        conversion_last_date=to_iso_date(field_of(row, 'conversion_last_date')),
    )
