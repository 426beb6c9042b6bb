"""
Marketing Queries Module for the Marketing Analytics Backend.

Catalogue of every read-only PostgreSQL query the report assembler issues.
Queries target the canonical analytics views only, never raw tables.

Parameter conventions:
- Period-filtered queries take exactly two positional parameters,
  ``$1 = start date`` and ``$2 = end date`` (inclusive, UTC, 'YYYY-MM-DD'),
  and filter with ``BETWEEN $1 AND $2``.
- Lifetime queries take no parameters. Their source views carry no usable
  date column, so the current and comparison periods see identical data.

Each query is addressed by a stable identifier (the ``Q_*`` constants) so the
storage collaborator can be swapped or faked without touching SQL text.
"""

from dataclasses import dataclass
from typing import Dict, List


# =============================================================================
# QUERY IDENTIFIERS
# =============================================================================

# KPI aggregates
Q_ENGAGEMENT_KPIS = 'engagement_kpis'
Q_CONVERSION_KPIS = 'conversion_kpis'
Q_FUNNEL_KPIS = 'funnel_kpis'
Q_SEARCH_KPIS = 'search_kpis'

# Listings
Q_PAGE_ENGAGEMENT = 'page_engagement'
Q_PAGE_SEARCH = 'page_search'
Q_PAGE_CONVERSIONS = 'page_conversions'
Q_SOURCES = 'sources'
Q_SEO_QUERIES = 'seo_queries'
Q_SEO_MOVERS = 'seo_movers'
Q_DEVICE_BREAKDOWN = 'device_breakdown'
Q_COUNTRY_BREAKDOWN = 'country_breakdown'
Q_PIPELINE_CATEGORIES = 'pipeline_categories'
Q_RECENT_CONVERSIONS = 'recent_conversions'
Q_FUNNEL_DAILY = 'funnel_daily'

# Metadata
Q_FRESHNESS = 'freshness'
Q_PIPELINE_HEALTH = 'pipeline_health'

# Anomaly summaries
Q_ANOMALY_SESSIONS = 'anomaly_sessions'
Q_ANOMALY_SUBMISSIONS = 'anomaly_submissions'
Q_ANOMALY_PIPELINE = 'anomaly_pipeline'

# Daily timeseries
Q_TS_SESSIONS = 'timeseries_sessions'
Q_TS_SUBMISSIONS = 'timeseries_submissions'
Q_TS_PIPELINE = 'timeseries_pipeline_value'
Q_TS_IMPRESSIONS = 'timeseries_impressions'
Q_TS_CLICKS = 'timeseries_clicks'


@dataclass(frozen=True)
class MarketingQuery:
    """
    A catalogued read-only query.

    Attributes:
        query_id: Stable identifier used by the storage collaborator.
        sql: PostgreSQL text using $1/$2 positional placeholders.
        date_filtered: True when the query expects [start, end] parameters.
    """
    query_id: str
    sql: str
    date_filtered: bool


# =============================================================================
# KPI AGGREGATES
# =============================================================================

# Session-weighted averages for bounce rate and time on page.
ENGAGEMENT_KPIS_SQL = """
    SELECT
        COALESCE(SUM(sessions), 0)    AS sessions,
        COALESCE(SUM(page_views), 0)  AS page_views,
        CASE WHEN SUM(sessions) > 0
            THEN SUM(bounce_rate * sessions) / SUM(sessions)
            ELSE 0 END                AS bounce_rate,
        CASE WHEN SUM(sessions) > 0
            THEN SUM(avg_time_on_page_seconds * sessions) / SUM(sessions)
            ELSE 0 END                AS avg_time_on_page_seconds
    FROM analytics.metrics_page_engagement_daily
    WHERE metric_date BETWEEN $1 AND $2
"""

CONVERSION_KPIS_SQL = """
    SELECT
        COALESCE(SUM(total_submissions), 0)        AS total_submissions,
        COALESCE(SUM(total_pipeline_value_usd), 0) AS total_pipeline_value_usd
    FROM analytics.conversion_metrics_daily
    WHERE conversion_date BETWEEN $1 AND $2
"""

# Web-event funnel totals, used only when the engagement view is empty.
FUNNEL_KPIS_SQL = """
    SELECT
        COALESCE(SUM(page_views), 0)         AS page_views,
        COALESCE(SUM(submissions), 0)        AS submissions,
        COALESCE(SUM(pipeline_value_usd), 0) AS pipeline_value_usd
    FROM analytics.marketing_funnel_daily
    WHERE metric_date BETWEEN $1 AND $2
"""

# Lifetime: the search console page view has no per-day grain.
SEARCH_KPIS_SQL = """
    SELECT
        COALESCE(SUM(clicks), 0)      AS organic_clicks,
        COALESCE(SUM(impressions), 0) AS impressions,
        CASE WHEN SUM(impressions) > 0
            THEN SUM(avg_position * impressions) / SUM(impressions)
            ELSE 0 END                AS avg_position
    FROM analytics.metrics_search_console_page
"""


# =============================================================================
# PAGE ROLLUPS (merged by URL in the listings builder)
# =============================================================================

PAGE_ENGAGEMENT_SQL = """
    SELECT
        page_path                     AS page_url,
        SUM(sessions)                 AS sessions,
        SUM(page_views)               AS page_views,
        CASE WHEN SUM(sessions) > 0
            THEN SUM(bounce_rate * sessions) / SUM(sessions)
            ELSE 0 END                AS bounce_rate,
        CASE WHEN SUM(sessions) > 0
            THEN SUM(avg_time_on_page_seconds * sessions) / SUM(sessions)
            ELSE 0 END                AS avg_time_on_page_seconds
    FROM analytics.metrics_page_engagement_daily
    WHERE metric_date BETWEEN $1 AND $2
    GROUP BY page_path
"""

PAGE_SEARCH_SQL = """
    SELECT
        page_url,
        SUM(clicks)      AS clicks,
        SUM(impressions) AS impressions,
        CASE WHEN SUM(impressions) > 0
            THEN SUM(clicks)::DECIMAL / SUM(impressions)
            ELSE 0 END   AS ctr
    FROM analytics.metrics_search_console_page
    GROUP BY page_url
"""

PAGE_CONVERSIONS_SQL = """
    SELECT
        page_url,
        submissions,
        pipeline_value_usd
    FROM analytics.dashboard_pages
"""


# =============================================================================
# SOURCES AND SEO
# =============================================================================

SOURCES_SQL = """
    SELECT
        submission_source,
        COALESCE(submissions, 0)        AS submissions,
        COALESCE(pipeline_value_usd, 0) AS pipeline_value_usd
    FROM analytics.dashboard_sources
    ORDER BY COALESCE(pipeline_value_usd, 0) DESC
"""

SEO_QUERIES_SQL = """
    SELECT
        query,
        COALESCE(clicks, 0)             AS clicks,
        COALESCE(impressions, 0)        AS impressions,
        COALESCE(ctr, 0)                AS ctr,
        COALESCE(avg_position, 0)       AS avg_position,
        COALESCE(submissions, 0)        AS submissions,
        COALESCE(pipeline_value_usd, 0) AS pipeline_value_usd
    FROM analytics.dashboard_seo_queries
    ORDER BY COALESCE(clicks, 0) DESC
"""

# Impressions per query in each half of the window. The midpoint day belongs
# to the first half.
SEO_MOVERS_SQL = """
    SELECT
        query,
        COALESCE(SUM(impressions) FILTER (
            WHERE metric_date <= $1::date + ($2::date - $1::date) / 2
        ), 0) AS impressions_first_half,
        COALESCE(SUM(impressions) FILTER (
            WHERE metric_date > $1::date + ($2::date - $1::date) / 2
        ), 0) AS impressions_second_half
    FROM analytics.metrics_search_console_query
    WHERE metric_date BETWEEN $1 AND $2
    GROUP BY query
"""

DEVICE_BREAKDOWN_SQL = """
    SELECT
        device,
        SUM(impressions) AS impressions,
        SUM(clicks)      AS clicks
    FROM analytics.metrics_search_console_device
    WHERE metric_date BETWEEN $1 AND $2
    GROUP BY device
    ORDER BY SUM(impressions) DESC
"""

COUNTRY_BREAKDOWN_SQL = """
    SELECT
        country,
        SUM(impressions) AS impressions,
        SUM(clicks)      AS clicks
    FROM analytics.metrics_search_console_country
    WHERE metric_date BETWEEN $1 AND $2
    GROUP BY country
    ORDER BY SUM(impressions) DESC
"""


# =============================================================================
# CONVERSIONS AND FUNNEL
# =============================================================================

PIPELINE_CATEGORIES_SQL = """
    SELECT
        product_category,
        COUNT(*)                                AS submissions,
        COALESCE(SUM(preliminary_price_usd), 0) AS pipeline_value_usd
    FROM analytics.conversion_events
    WHERE created_at::date BETWEEN $1 AND $2
    GROUP BY product_category
    ORDER BY COALESCE(SUM(preliminary_price_usd), 0) DESC
"""

RECENT_CONVERSIONS_SQL = """
    SELECT
        created_at::text AS created_at,
        product_category,
        preliminary_price_usd,
        submission_source
    FROM analytics.conversion_events
    WHERE created_at::date BETWEEN $1 AND $2
    ORDER BY created_at DESC
    LIMIT 100
"""

FUNNEL_DAILY_SQL = """
    SELECT
        metric_date::text   AS date,
        SUM(page_views)         AS page_views,
        SUM(submissions)        AS submissions,
        SUM(pipeline_value_usd) AS pipeline_value_usd
    FROM analytics.marketing_funnel_daily
    WHERE metric_date BETWEEN $1 AND $2
    GROUP BY metric_date
    ORDER BY metric_date ASC
"""


# =============================================================================
# METADATA
# =============================================================================

FRESHNESS_SQL = """
    SELECT
        (SELECT MAX(metric_date)::text     FROM analytics.metrics_page_engagement_daily) AS engagement_last_date,
        (SELECT MAX(metric_date)::text     FROM analytics.metrics_search_console_page)   AS search_console_last_date,
        (SELECT MAX(conversion_date)::text FROM analytics.conversion_metrics_daily)      AS conversion_last_date
"""

PIPELINE_HEALTH_SQL = """
    SELECT
        source,
        MAX(finished_at) FILTER (WHERE status = 'success')::text AS last_success,
        CASE WHEN COUNT(*) FILTER (WHERE started_at >= NOW() - INTERVAL '24 hours') > 0
            THEN COUNT(*) FILTER (
                     WHERE status = 'failed' AND started_at >= NOW() - INTERVAL '24 hours'
                 )::DECIMAL
                 / COUNT(*) FILTER (WHERE started_at >= NOW() - INTERVAL '24 hours')
            ELSE 0 END AS failure_rate_24h
    FROM analytics.ingestion_runs
    GROUP BY source
    ORDER BY source
"""


# =============================================================================
# ANOMALY SUMMARIES AND DAILY SERIES
# =============================================================================

def _daily_series_sql(table: str, date_column: str, value_expr: str) -> str:
    """Daily-bucketed series of one metric inside [$1, $2]."""
    return f"""
    SELECT
        {date_column}::text  AS date,
        SUM({value_expr})    AS value
    FROM {table}
    WHERE {date_column} BETWEEN $1 AND $2
    GROUP BY {date_column}
    ORDER BY {date_column} ASC
"""


def _series_summary_sql(table: str, date_column: str, value_expr: str) -> str:
    """Sample count, mean, population stddev and latest value of a daily series."""
    return f"""
    WITH daily AS (
        SELECT
            {date_column}     AS day,
            SUM({value_expr}) AS value
        FROM {table}
        WHERE {date_column} BETWEEN $1 AND $2
        GROUP BY {date_column}
    )
    SELECT
        COUNT(*)                                               AS sample_count,
        COALESCE(AVG(value), 0)                                AS mean,
        COALESCE(STDDEV_POP(value), 0)                         AS stddev,
        (SELECT value FROM daily ORDER BY day DESC LIMIT 1)    AS latest
    FROM daily
"""


_ENGAGEMENT = ('analytics.metrics_page_engagement_daily', 'metric_date')
_CONVERSION = ('analytics.conversion_metrics_daily', 'conversion_date')
_SEARCH_DAILY = ('analytics.metrics_search_console_daily', 'metric_date')


# =============================================================================
# CATALOGUE
# =============================================================================

_CATALOGUE: List[MarketingQuery] = [
    MarketingQuery(Q_ENGAGEMENT_KPIS, ENGAGEMENT_KPIS_SQL, True),
    MarketingQuery(Q_CONVERSION_KPIS, CONVERSION_KPIS_SQL, True),
    MarketingQuery(Q_FUNNEL_KPIS, FUNNEL_KPIS_SQL, True),
    MarketingQuery(Q_SEARCH_KPIS, SEARCH_KPIS_SQL, False),
    MarketingQuery(Q_PAGE_ENGAGEMENT, PAGE_ENGAGEMENT_SQL, True),
    MarketingQuery(Q_PAGE_SEARCH, PAGE_SEARCH_SQL, False),
    MarketingQuery(Q_PAGE_CONVERSIONS, PAGE_CONVERSIONS_SQL, False),
    MarketingQuery(Q_SOURCES, SOURCES_SQL, False),
    MarketingQuery(Q_SEO_QUERIES, SEO_QUERIES_SQL, False),
    MarketingQuery(Q_SEO_MOVERS, SEO_MOVERS_SQL, True),
    MarketingQuery(Q_DEVICE_BREAKDOWN, DEVICE_BREAKDOWN_SQL, True),
    MarketingQuery(Q_COUNTRY_BREAKDOWN, COUNTRY_BREAKDOWN_SQL, True),
    MarketingQuery(Q_PIPELINE_CATEGORIES, PIPELINE_CATEGORIES_SQL, True),
    MarketingQuery(Q_RECENT_CONVERSIONS, RECENT_CONVERSIONS_SQL, True),
    MarketingQuery(Q_FUNNEL_DAILY, FUNNEL_DAILY_SQL, True),
    MarketingQuery(Q_FRESHNESS, FRESHNESS_SQL, False),
    MarketingQuery(Q_PIPELINE_HEALTH, PIPELINE_HEALTH_SQL, False),
    MarketingQuery(Q_ANOMALY_SESSIONS, _series_summary_sql(*_ENGAGEMENT, 'sessions'), True),
    MarketingQuery(Q_ANOMALY_SUBMISSIONS, _series_summary_sql(*_CONVERSION, 'total_submissions'), True),
    MarketingQuery(Q_ANOMALY_PIPELINE, _series_summary_sql(*_CONVERSION, 'total_pipeline_value_usd'), True),
    MarketingQuery(Q_TS_SESSIONS, _daily_series_sql(*_ENGAGEMENT, 'sessions'), True),
    MarketingQuery(Q_TS_SUBMISSIONS, _daily_series_sql(*_CONVERSION, 'total_submissions'), True),
    MarketingQuery(Q_TS_PIPELINE, _daily_series_sql(*_CONVERSION, 'total_pipeline_value_usd'), True),
    MarketingQuery(Q_TS_IMPRESSIONS, _daily_series_sql(*_SEARCH_DAILY, 'impressions'), True),
    MarketingQuery(Q_TS_CLICKS, _daily_series_sql(*_SEARCH_DAILY, 'clicks'), True),
]

QUERIES: Dict[str, MarketingQuery] = {q.query_id: q for q in _CATALOGUE}


def get_query(query_id: str) -> MarketingQuery:
    """
    Look up a catalogued query.

    Raises:
        KeyError: If ``query_id`` is not in the catalogue.
    """
    return QUERIES[query_id]
