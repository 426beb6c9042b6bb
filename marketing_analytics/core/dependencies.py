"""
FastAPI dependency injection module for the Marketing Analytics backend.

Provides reusable dependencies for configuration access and the storage
collaborator, so endpoint handlers never build infrastructure themselves and
tests can swap either one through ``app.dependency_overrides``.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_query_executor: Returns a PostgresQueryExecutor, or None when no
  database is configured
- SettingsDep / QueryExecutorDep: Annotated aliases for endpoint signatures

Usage Examples:
    @router.get("/overview")
    async def overview(
        settings: SettingsDep,
        executor: QueryExecutorDep,
    ):
        ...
"""

from typing import Annotated, Optional

from fastapi import Depends

from marketing_analytics.core.config import Settings, get_settings
from marketing_analytics.core.database import PostgresQueryExecutor


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can override it:

        app.dependency_overrides[get_settings_dependency] = lambda: mock_settings
    """
    return get_settings()


# =============================================================================
# Storage Dependency
# =============================================================================

def get_query_executor(
    settings: Annotated[Settings, Depends(get_settings_dependency)],
) -> Optional[PostgresQueryExecutor]:
    """
    Return the storage collaborator for the current request.

    Returns None when DATABASE_URL is not configured; the endpoint then serves
    an empty report instead of failing. No connection is made here: the
    executor fetches the shared pool on its first read, after the request
    has been validated.
    """
    if not settings.database_configured:
        return None
    return PostgresQueryExecutor()


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

QueryExecutorDep = Annotated[Optional[PostgresQueryExecutor], Depends(get_query_executor)]
