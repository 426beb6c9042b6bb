"""
SQL Query Module for the Marketing Analytics Backend.

Provides the catalogue of parameterized, read-only SQL queries behind the
marketing overview report. Follows the Repository Pattern: the report
assembler refers to queries by identifier only and the storage adapter in
marketing_analytics.core.database resolves identifiers to SQL text.

Example usage:
    from marketing_analytics.sql import get_query, Q_ENGAGEMENT_KPIS

    query = get_query(Q_ENGAGEMENT_KPIS)
    rows = await conn.fetch(query.sql, date(2026, 2, 1), date(2026, 2, 28))
"""

from marketing_analytics.sql.marketing_queries import (
    MarketingQuery,
    QUERIES,
    get_query,
    Q_ENGAGEMENT_KPIS,
    Q_CONVERSION_KPIS,
    Q_FUNNEL_KPIS,
    Q_SEARCH_KPIS,
    Q_PAGE_ENGAGEMENT,
    Q_PAGE_SEARCH,
    Q_PAGE_CONVERSIONS,
    Q_SOURCES,
    Q_SEO_QUERIES,
    Q_SEO_MOVERS,
    Q_DEVICE_BREAKDOWN,
    Q_COUNTRY_BREAKDOWN,
    Q_PIPELINE_CATEGORIES,
    Q_RECENT_CONVERSIONS,
    Q_FUNNEL_DAILY,
    Q_FRESHNESS,
    Q_PIPELINE_HEALTH,
    Q_ANOMALY_SESSIONS,
    Q_ANOMALY_SUBMISSIONS,
    Q_ANOMALY_PIPELINE,
    Q_TS_SESSIONS,
    Q_TS_SUBMISSIONS,
    Q_TS_PIPELINE,
    Q_TS_IMPRESSIONS,
    Q_TS_CLICKS,
)

__all__ = [
    'MarketingQuery',
    'QUERIES',
    'get_query',
    'Q_ENGAGEMENT_KPIS',
    'Q_CONVERSION_KPIS',
    'Q_FUNNEL_KPIS',
    'Q_SEARCH_KPIS',
    'Q_PAGE_ENGAGEMENT',
    'Q_PAGE_SEARCH',
    'Q_PAGE_CONVERSIONS',
    'Q_SOURCES',
    'Q_SEO_QUERIES',
    'Q_SEO_MOVERS',
    'Q_DEVICE_BREAKDOWN',
    'Q_COUNTRY_BREAKDOWN',
    'Q_PIPELINE_CATEGORIES',
    'Q_RECENT_CONVERSIONS',
    'Q_FUNNEL_DAILY',
    'Q_FRESHNESS',
    'Q_PIPELINE_HEALTH',
    'Q_ANOMALY_SESSIONS',
    'Q_ANOMALY_SUBMISSIONS',
    'Q_ANOMALY_PIPELINE',
    'Q_TS_SESSIONS',
    'Q_TS_SUBMISSIONS',
    'Q_TS_PIPELINE',
    'Q_TS_IMPRESSIONS',
    'Q_TS_CLICKS',
]
