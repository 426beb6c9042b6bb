"""
Core infrastructure package for the Marketing Analytics backend.

Provides:
- Configuration management via pydantic-settings
- Error taxonomy (validation vs infrastructure failures)
- Async PostgreSQL connectivity via asyncpg and the query executor
- FastAPI dependency injection utilities

Re-exports key components so other modules can write:

    from marketing_analytics.core import get_settings, ValidationError
"""

from marketing_analytics.core.config import Settings, get_settings

from marketing_analytics.core.errors import (
    MarketingAnalyticsError,
    ValidationError,
    InfrastructureError,
)

from marketing_analytics.core.database import (
    init_db,
    close_db,
    get_db_pool,
    PostgresQueryExecutor,
)

from marketing_analytics.core.dependencies import (
    get_settings_dependency,
    get_query_executor,
    SettingsDep,
    QueryExecutorDep,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Errors (from errors.py)
    'MarketingAnalyticsError',
    'ValidationError',
    'InfrastructureError',
    # Database pool lifecycle and storage adapter (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    'PostgresQueryExecutor',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'get_query_executor',
    'SettingsDep',
    'QueryExecutorDep',
]
