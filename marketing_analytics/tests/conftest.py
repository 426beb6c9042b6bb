"""
Pytest Configuration and Shared Fixtures for Marketing Analytics Tests.

This module provides fixtures and configuration for all tests, supporting:
- Async test execution with pytest-asyncio
- A fake storage collaborator that records every read it receives
- Mock asyncpg pool fixtures for the Postgres adapter
- Fixed reference dates so window resolution is deterministic
- Sample rows for every catalogued query, in the shapes the SQL returns

Dependency References:
- marketing_analytics/services/report.py: QueryExecutor protocol
- marketing_analytics/core/database.py: PostgresQueryExecutor
- marketing_analytics/core/config.py: Settings
"""

import asyncio
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple
from unittest.mock import AsyncMock, Mock

import pytest

from marketing_analytics.core.config import Settings
from marketing_analytics.sql import marketing_queries as q


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Configure custom pytest markers for test organization.

    Custom markers defined:
    - slow: Marks tests as slow (deselect with -m "not slow")
    - parity: Marks tests pinning behaviour the dashboard already relies on
    """
    config.addinivalue_line(
        'markers',
        'slow: marks tests as slow (deselect with -m "not slow")'
    )
    config.addinivalue_line(
        'markers',
        'parity: marks tests pinning behaviour the dashboard already relies on'
    )


# ============================================================
# REFERENCE DATES
# ============================================================

FIXED_TODAY = date(2026, 3, 15)
FIXED_NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def today() -> date:
    """Reference UTC date used for preset resolution."""
    return FIXED_TODAY


@pytest.fixture
def now() -> datetime:
    """Reference UTC instant used for generated_at and pipeline health."""
    return FIXED_NOW


# ============================================================
# SETTINGS
# ============================================================

@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file, with no database."""
    return Settings(_env_file=None, database_url=None)


# ============================================================
# FAKE STORAGE COLLABORATOR
# ============================================================

class FakeExecutor:
    """
    In-memory QueryExecutor.

    Attributes:
        responses: query_id -> rows, or a callable taking params and
            returning rows.
        failures: query_id -> exception raised by that read.
        slow: query_ids whose read blocks until cancelled.
        calls: (query_id, params) for every read, in issue order.
        cancelled: query_ids whose read was cancelled.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Any]] = None,
        failures: Optional[Dict[str, BaseException]] = None,
        slow: Sequence[str] = (),
    ) -> None:
        self.responses = responses or {}
        self.failures = failures or {}
        self.slow = set(slow)
        self.calls: List[Tuple[str, Optional[List[str]]]] = []
        self.cancelled: List[str] = []

    async def execute(
        self,
        query_id: str,
        params: Optional[Sequence[str]] = None,
    ) -> Sequence[Mapping[str, Any]]:
        self.calls.append((query_id, list(params) if params is not None else None))
        try:
            if query_id in self.slow:
                await asyncio.sleep(30)
            else:
                await asyncio.sleep(0)
        except asyncio.CancelledError:
            self.cancelled.append(query_id)
            raise

        if query_id in self.failures:
            raise self.failures[query_id]

        response = self.responses.get(query_id, [])
        if callable(response):
            return response(params)
        return response

    def params_for(self, query_id: str) -> List[Optional[List[str]]]:
        return [params for qid, params in self.calls if qid == query_id]


@pytest.fixture
def make_executor() -> Callable[..., FakeExecutor]:
    """
    Factory for FakeExecutor instances.

    Usage:
        async def test_x(make_executor):
            executor = make_executor(responses={'sources': [...]})
    """
    return FakeExecutor


@pytest.fixture
def empty_executor() -> FakeExecutor:
    """Executor answering every read with no rows."""
    return FakeExecutor()


# ============================================================
# SAMPLE ROWS
# ============================================================

CURRENT_FEB = ['2026-02-01', '2026-02-28']
PREVIOUS_FEB = ['2026-01-04', '2026-01-31']


def _by_window(current: List[Dict[str, Any]], previous: List[Dict[str, Any]]):
    """Respond with ``current`` for the February window, ``previous`` otherwise."""
    def respond(params):
        return current if list(params or []) == CURRENT_FEB else previous
    return respond


@pytest.fixture
def sample_responses() -> Dict[str, Any]:
    """
    Rows for every catalogued query, shaped like the SQL output.

    KPI reads distinguish the February 2026 window from its comparison
    window (2026-01-04..2026-01-31); values are strings and Decimals where
    asyncpg would return them.
    """
    return {
        q.Q_ENGAGEMENT_KPIS: _by_window(
            [{'sessions': 1200, 'page_views': 3400, 'bounce_rate': Decimal('0.45'),
              'avg_time_on_page_seconds': Decimal('62.5')}],
            [{'sessions': 1000, 'page_views': 3000, 'bounce_rate': Decimal('0.5'),
              'avg_time_on_page_seconds': Decimal('60')}],
        ),
        q.Q_CONVERSION_KPIS: _by_window(
            [{'total_submissions': 85, 'total_pipeline_value_usd': Decimal('125000')}],
            [{'total_submissions': 100, 'total_pipeline_value_usd': Decimal('100000')}],
        ),
        q.Q_FUNNEL_KPIS: _by_window(
            [{'page_views': 3600, 'submissions': 85, 'pipeline_value_usd': Decimal('125000')}],
            [{'page_views': 3100, 'submissions': 100, 'pipeline_value_usd': Decimal('100000')}],
        ),
        q.Q_SEARCH_KPIS: [
            {'organic_clicks': 4500, 'impressions': 98000, 'avg_position': Decimal('12.3')},
        ],
        q.Q_PAGE_ENGAGEMENT: [
            {'page_url': '/pricing', 'sessions': 400, 'page_views': 900,
             'bounce_rate': Decimal('0.3'), 'avg_time_on_page_seconds': 75},
            {'page_url': '/blog/launch', 'sessions': 650, 'page_views': 1100,
             'bounce_rate': Decimal('0.6'), 'avg_time_on_page_seconds': 40},
            {'page_url': None, 'sessions': 999, 'page_views': 999,
             'bounce_rate': 0, 'avg_time_on_page_seconds': 0},
        ],
        q.Q_PAGE_SEARCH: [
            {'page_url': '/pricing', 'clicks': 120, 'impressions': 3000, 'ctr': Decimal('0.04')},
            {'page_url': '/docs', 'clicks': 80, 'impressions': 2000, 'ctr': Decimal('0.04')},
        ],
        q.Q_PAGE_CONVERSIONS: [
            {'page_url': '/pricing', 'submissions': 30, 'pipeline_value_usd': Decimal('60000')},
            {'page_url': '/contact', 'submissions': 12, 'pipeline_value_usd': Decimal('18000')},
        ],
        q.Q_SOURCES: [
            {'submission_source': 'newsletter', 'submissions': 10, 'pipeline_value_usd': 15000},
            {'submission_source': 'Google', 'submissions': 40, 'pipeline_value_usd': 70000},
            {'submission_source': 'partner-site', 'submissions': 5, 'pipeline_value_usd': 4000},
        ],
        q.Q_SEO_QUERIES: [
            {'query': 'marketing analytics', 'clicks': 200, 'impressions': 5000,
             'ctr': Decimal('0.04'), 'avg_position': Decimal('4.2'),
             'submissions': 8, 'pipeline_value_usd': 16000},
            {'query': 'kpi dashboard', 'clicks': 0, 'impressions': 900,
             'ctr': 0, 'avg_position': Decimal('18.0'),
             'submissions': 0, 'pipeline_value_usd': 0},
        ],
        q.Q_SEO_MOVERS: [
            {'query': 'marketing analytics', 'impressions_first_half': 100,
             'impressions_second_half': 150},
        ],
        q.Q_DEVICE_BREAKDOWN: [
            {'device': 'DESKTOP', 'impressions': 60000, 'clicks': 3000},
            {'device': 'MOBILE', 'impressions': 38000, 'clicks': 1500},
        ],
        q.Q_COUNTRY_BREAKDOWN: [
            {'country': 'usa', 'impressions': 70000, 'clicks': 3500},
        ],
        q.Q_PIPELINE_CATEGORIES: [
            {'product_category': 'solar', 'submissions': 30, 'pipeline_value_usd': 45000},
            {'product_category': 'hvac', 'submissions': 55, 'pipeline_value_usd': 80000},
        ],
        q.Q_RECENT_CONVERSIONS: [
            {'created_at': '2026-02-27 18:04:00+00', 'product_category': 'hvac',
             'preliminary_price_usd': Decimal('1500'), 'submission_source': 'Google'},
        ],
        q.Q_FUNNEL_DAILY: [
            {'date': '2026-02-02', 'page_views': 120, 'submissions': 3, 'pipeline_value_usd': 4500},
            {'date': '2026-02-01', 'page_views': 100, 'submissions': 2, 'pipeline_value_usd': 3000},
        ],
        q.Q_FRESHNESS: [
            {'engagement_last_date': '2026-02-28', 'search_console_last_date': '2026-02-26',
             'conversion_last_date': None},
        ],
        q.Q_PIPELINE_HEALTH: [
            {'source': 'ga4', 'last_success': '2026-03-15 09:00:00+00:00', 'failure_rate_24h': 0},
        ],
        q.Q_ANOMALY_SESSIONS: [
            {'sample_count': 28, 'mean': Decimal('40'), 'stddev': Decimal('5'), 'latest': 80},
        ],
        q.Q_ANOMALY_SUBMISSIONS: [
            {'sample_count': 28, 'mean': Decimal('3'), 'stddev': Decimal('1'), 'latest': 4},
        ],
        q.Q_ANOMALY_PIPELINE: [
            {'sample_count': 5, 'mean': Decimal('4000'), 'stddev': Decimal('100'), 'latest': 90000},
        ],
        q.Q_TS_SESSIONS: [
            {'date': '2026-02-28', 'value': 80},
            {'date': '2026-02-15', 'value': 55},
            {'date': '2026-02-21', 'value': 40},
            {'date': '2026-02-22', 'value': 41},
            {'date': '2026-02-23', 'value': 39},
            {'date': '2026-02-24', 'value': 40},
            {'date': '2026-02-25', 'value': 42},
            {'date': '2026-02-26', 'value': 38},
            {'date': '2026-02-27', 'value': 40},
        ],
        q.Q_TS_SUBMISSIONS: [{'date': '2026-02-10', 'value': 4}],
        q.Q_TS_PIPELINE: [{'date': '2026-02-10', 'value': Decimal('6000')}],
        q.Q_TS_IMPRESSIONS: [],
        q.Q_TS_CLICKS: [{'date': '2026-02-28', 'value': 150}],
    }


# ============================================================
# DATABASE MOCK FIXTURES
# ============================================================

@pytest.fixture
def mock_db_pool() -> AsyncMock:
    """
    Mock asyncpg pool whose acquire() yields a mock connection.

    Usage:
        mock_db_pool.acquire.return_value.__aenter__.return_value.fetch.return_value = [...]
    """
    pool = AsyncMock()

    conn = AsyncMock()
    conn.fetch = AsyncMock(return_value=[])

    acquire_context = AsyncMock()
    acquire_context.__aenter__ = AsyncMock(return_value=conn)
    acquire_context.__aexit__ = AsyncMock(return_value=None)
    pool.acquire = Mock(return_value=acquire_context)

    pool.close = AsyncMock(return_value=None)

    return pool
