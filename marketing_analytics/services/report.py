"""
Report Assembler.

Builds the complete MarketingOverview for one request:

    1. Resolve the current window and its comparison window. Validation
       errors are raised here, before any read is issued.
    2. Issue every read concurrently through a single asyncio.gather.
    3. Join barrier. If any read fails, the remaining reads are cancelled and
       one InfrastructureError is raised; no partial report is assembled.
    4. Decode rows, build current and previous KPI sets, compare them.
    5. Build listings, timeseries, breakdowns and pipeline health.
    6. Evaluate anomaly flags, each from its own series. When the daily
       series were read they are summarized in memory; otherwise the SQL
       summaries are read instead.
    7. Attach metadata: milliseconds spent on the whole build, row counts
       and freshness.

Reads (all independent, recombined positionally after the barrier):
    current window:   engagement, conversion, funnel fallback, page
                      engagement, device, country, categories, recent
                      conversions, SEO movers, daily funnel, and either
                      5 daily series (when requested) or 3 anomaly summaries
    previous window:  engagement, conversion, funnel fallback
    lifetime:         search, page search, page conversions, sources,
                      SEO queries, freshness, pipeline health

Lifetime views have no date column, so both windows see the same search
totals and their comparison deltas are always 0.

The storage collaborator is anything implementing QueryExecutor; production
uses marketing_analytics.core.database.PostgresQueryExecutor, tests pass a
fake that records calls.
"""

import asyncio
import logging
import time
from datetime import date, datetime, timezone
from typing import (
    Any,
    Awaitable,
    Dict,
    Mapping,
    Optional,
    Protocol,
    Sequence,
)

from marketing_analytics.core.config import Settings, get_settings
from marketing_analytics.core.errors import InfrastructureError
from marketing_analytics.models.schemas import (
    AnomalyFlags,
    DataFreshness,
    KPISet,
    MarketingOverview,
    ReportMetadata,
    RowCounts,
)
from marketing_analytics.services import listings
from marketing_analytics.services.anomaly import (
    detect_anomalies,
    summary_from_daily,
    summary_from_row,
)
from marketing_analytics.services.kpi import build_comparisons, build_kpis
from marketing_analytics.services.normalization import (
    decode_conversion,
    decode_daily_values,
    decode_engagement,
    decode_funnel,
    decode_page_conversions,
    decode_page_engagement,
    decode_page_search,
    decode_search,
    decode_sources,
)
from marketing_analytics.services.period import (
    TimeSelection,
    TimeWindow,
    resolve_period,
)
from marketing_analytics.services.taxonomy import SourceClassifier
from marketing_analytics.sql import marketing_queries as q

logger = logging.getLogger(__name__)


Rows = Sequence[Mapping[str, Any]]


class QueryExecutor(Protocol):
    """Read-only storage collaborator."""

    async def execute(
        self,
        query_id: str,
        params: Optional[Sequence[str]] = None,
    ) -> Rows:
        """
        Run a catalogued query.

        Args:
            query_id: One of the Q_* identifiers.
            params: Exactly [start, end] as YYYY-MM-DD for date-filtered
                queries, None for lifetime views.

        Returns:
            Rows as mappings; an empty sequence when nothing matches.
        """
        ...


# =============================================================================
# Fan-out / fan-in
# =============================================================================


async def _read(
    executor: QueryExecutor,
    query_id: str,
    params: Optional[Sequence[str]],
) -> Rows:
    try:
        rows = await executor.execute(query_id, params)
    except InfrastructureError:
        raise
    except Exception as exc:
        raise InfrastructureError(
            f"Query {query_id} failed: {exc}", query_id=query_id
        ) from exc
    return rows if rows is not None else []


async def _gather_all(reads: Dict[str, Awaitable[Rows]]) -> Dict[str, Rows]:
    """
    Await every read behind one barrier.

    On the first failure the sibling reads are cancelled and awaited before
    the error propagates, so no read outlives the request.
    """
    names = list(reads)
    tasks = [asyncio.ensure_future(reads[name]) for name in names]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return dict(zip(names, results))


def _plan_reads(
    executor: QueryExecutor,
    current: TimeWindow,
    comparison: TimeWindow,
    include_timeseries: bool,
) -> Dict[str, Awaitable[Rows]]:
    cur = current.params()
    prev = comparison.params()

    plan = {
        'engagement': (q.Q_ENGAGEMENT_KPIS, cur),
        'conversion': (q.Q_CONVERSION_KPIS, cur),
        'funnel': (q.Q_FUNNEL_KPIS, cur),
        'prev_engagement': (q.Q_ENGAGEMENT_KPIS, prev),
        'prev_conversion': (q.Q_CONVERSION_KPIS, prev),
        'prev_funnel': (q.Q_FUNNEL_KPIS, prev),
        'search': (q.Q_SEARCH_KPIS, None),
        'page_engagement': (q.Q_PAGE_ENGAGEMENT, cur),
        'page_search': (q.Q_PAGE_SEARCH, None),
        'page_conversions': (q.Q_PAGE_CONVERSIONS, None),
        'sources': (q.Q_SOURCES, None),
        'freshness': (q.Q_FRESHNESS, None),
        'seo_queries': (q.Q_SEO_QUERIES, None),
        'device_breakdown': (q.Q_DEVICE_BREAKDOWN, cur),
        'country_breakdown': (q.Q_COUNTRY_BREAKDOWN, cur),
        'pipeline_categories': (q.Q_PIPELINE_CATEGORIES, cur),
        'recent_conversions': (q.Q_RECENT_CONVERSIONS, cur),
        'seo_movers': (q.Q_SEO_MOVERS, cur),
        'funnel_daily': (q.Q_FUNNEL_DAILY, cur),
        'pipeline_health': (q.Q_PIPELINE_HEALTH, None),
    }
    if include_timeseries:
        # Anomaly summaries are computed from these series in memory
        plan.update({
            'ts_sessions': (q.Q_TS_SESSIONS, cur),
            'ts_submissions': (q.Q_TS_SUBMISSIONS, cur),
            'ts_pipeline': (q.Q_TS_PIPELINE, cur),
            'ts_impressions': (q.Q_TS_IMPRESSIONS, cur),
            'ts_clicks': (q.Q_TS_CLICKS, cur),
        })
    else:
        plan.update({
            'anomaly_sessions': (q.Q_ANOMALY_SESSIONS, cur),
            'anomaly_submissions': (q.Q_ANOMALY_SUBMISSIONS, cur),
            'anomaly_pipeline': (q.Q_ANOMALY_PIPELINE, cur),
        })

    return {
        name: _read(executor, query_id, params)
        for name, (query_id, params) in plan.items()
    }


# =============================================================================
# Assembly
# =============================================================================


def _utc_now(now: Optional[datetime]) -> datetime:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now


async def build_report(
    selection: TimeSelection,
    include_timeseries: bool,
    executor: QueryExecutor,
    *,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
    classifier: Optional[SourceClassifier] = None,
    settings: Optional[Settings] = None,
) -> MarketingOverview:
    """
    Build the marketing overview for one time selection.

    Args:
        selection: Parsed time selection.
        include_timeseries: Also read and densify the five daily series.
        executor: Storage collaborator.
        today: Reference UTC date for presets; defaults to ``now``'s date.
        now: Reference UTC instant for generated_at and pipeline health.
        classifier: Source taxonomy; defaults to the built-in table.
        settings: Limits and range bounds; defaults to get_settings().

    Returns:
        Frozen MarketingOverview.

    Raises:
        ValidationError: The selection is invalid. Nothing was read.
        InfrastructureError: A read failed. No report is produced.
    """
    settings = settings or get_settings()
    now = _utc_now(now)
    today = today or now.date()

    period = resolve_period(selection, today=today, max_range_days=settings.max_range_days)
    window = period.current

    started = time.perf_counter()
    try:
        rows = await _gather_all(
            _plan_reads(executor, window, period.comparison, include_timeseries)
        )
    except InfrastructureError as exc:
        logger.error(
            f"Marketing overview read failed for {window.start}..{window.end}: {exc}",
            exc_info=True,
        )
        raise

    # KPIs
    search = decode_search(rows['search'])
    kpis = build_kpis(
        decode_engagement(rows['engagement']),
        decode_conversion(rows['conversion']),
        search,
        decode_funnel(rows['funnel']),
    )
    previous_kpis = build_kpis(
        decode_engagement(rows['prev_engagement']),
        decode_conversion(rows['prev_conversion']),
        search,
        decode_funnel(rows['prev_funnel']),
    )

    # Listings
    pages = listings.merge_pages(
        decode_page_engagement(rows['page_engagement']),
        decode_page_search(rows['page_search']),
        decode_page_conversions(rows['page_conversions']),
        limit=settings.pages_limit,
    )
    sources = listings.build_sources(decode_sources(rows['sources']), classifier)

    # Timeseries and anomalies
    timeseries = None
    if include_timeseries:
        sessions = decode_daily_values(rows['ts_sessions'])
        submissions = decode_daily_values(rows['ts_submissions'])
        pipeline = decode_daily_values(rows['ts_pipeline'])
        timeseries = listings.build_timeseries(
            window,
            sessions=sessions,
            submissions=submissions,
            pipeline_value_usd=pipeline,
            impressions=decode_daily_values(rows['ts_impressions']),
            clicks=decode_daily_values(rows['ts_clicks']),
        )
        anomalies = detect_anomalies(
            summary_from_daily(sessions),
            summary_from_daily(submissions),
            summary_from_daily(pipeline),
        )
    else:
        anomalies = detect_anomalies(
            summary_from_row(rows['anomaly_sessions']),
            summary_from_row(rows['anomaly_submissions']),
            summary_from_row(rows['anomaly_pipeline']),
        )

    comparisons = build_comparisons(kpis, previous_kpis)
    seo_queries = listings.build_seo_queries(rows['seo_queries'], limit=settings.seo_query_limit)
    freshness = listings.build_freshness(rows['freshness'])
    device_breakdown = listings.build_device_breakdown(rows['device_breakdown'])
    country_breakdown = listings.build_country_breakdown(rows['country_breakdown'])
    pipeline_categories = listings.build_pipeline_categories(rows['pipeline_categories'])
    recent_conversions = listings.build_recent_conversions(
        rows['recent_conversions'], limit=settings.recent_conversions_limit
    )
    seo_movers = listings.build_seo_movers(rows['seo_movers'], limit=settings.seo_movers_limit)
    funnel = listings.build_funnel(rows['funnel_daily'])
    pipeline_health = listings.build_pipeline_health(rows['pipeline_health'], now=now)

    elapsed_ms = int(round((time.perf_counter() - started) * 1000))
    report = MarketingOverview(
        period=window.to_period_block(),
        generated_at=now.isoformat(),
        kpis=kpis,
        comparisons=comparisons,
        pages=pages,
        sources=sources,
        seo_queries=seo_queries,
        timeseries=timeseries,
        anomalies=anomalies,
        meta=ReportMetadata(
            query_execution_ms=elapsed_ms,
            row_counts=RowCounts(pages=len(pages), sources=len(sources)),
            data_freshness=freshness,
        ),
        device_breakdown=device_breakdown,
        country_breakdown=country_breakdown,
        pipeline_categories=pipeline_categories,
        recent_conversions=recent_conversions,
        seo_movers=seo_movers,
        funnel=funnel,
        pipeline_health=pipeline_health,
    )

    logger.info(
        f"Marketing overview {window.start}..{window.end} built in {elapsed_ms}ms "
        f"({len(pages)} pages, {len(sources)} sources)"
    )
    return report


def empty_report(
    window: TimeWindow,
    include_timeseries: bool = False,
    now: Optional[datetime] = None,
) -> MarketingOverview:
    """
    All-zero report for ``window``, served when no database is configured.
    """
    kpis = KPISet()
    timeseries = None
    if include_timeseries:
        timeseries = listings.build_timeseries(window, [], [], [], [], [])
    return MarketingOverview(
        period=window.to_period_block(),
        generated_at=_utc_now(now).isoformat(),
        kpis=kpis,
        comparisons=build_comparisons(kpis, kpis),
        timeseries=timeseries,
        anomalies=AnomalyFlags(),
        meta=ReportMetadata(
            query_execution_ms=0,
            row_counts=RowCounts(),
            data_freshness=DataFreshness(),
        ),
    )
