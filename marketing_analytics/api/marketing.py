"""
FastAPI router module for the marketing overview endpoint.

GET /activity-spine/marketing/overview

Query parameters (one selection mode per request):
    preset              last_7d | last_30d | last_90d | mtd | qtd | ytd
    start, end          explicit YYYY-MM-DD range, at most 1095 days
    period              legacy 7d | 30d | 90d
    include_timeseries  also return the five dense daily series

Responses:
    200  {"data": MarketingOverview, "timestamp": ISO-8601, "orgId": "analytics"}
    400  {"error": "<validation reason>"}
    500  {"error": "Failed to fetch marketing overview"}

When no database is configured the endpoint still answers 200 with an
all-zero report and orgId "unconfigured", so the dashboard can render.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from marketing_analytics.core.dependencies import QueryExecutorDep, SettingsDep
from marketing_analytics.core.errors import InfrastructureError, ValidationError
from marketing_analytics.models.schemas import ActivitySpineResponse, ErrorResponse
from marketing_analytics.services.period import resolve_window, selection_from_params
from marketing_analytics.services.report import build_report, empty_report

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/activity-spine/marketing", tags=["marketing"])

GENERIC_FAILURE_MESSAGE = "Failed to fetch marketing overview"
UNCONFIGURED_ORG_ID = "unconfigured"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


@router.get(
    "/overview",
    response_model=ActivitySpineResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_marketing_overview(
    settings: SettingsDep,
    executor: QueryExecutorDep,
    preset: Optional[str] = Query(None, description="Named relative window"),
    start: Optional[str] = Query(None, description="Range start, YYYY-MM-DD"),
    end: Optional[str] = Query(None, description="Range end, YYYY-MM-DD"),
    period: Optional[str] = Query(None, description="Legacy period code (7d, 30d, 90d)"),
    include_timeseries: bool = Query(False, description="Include dense daily series"),
):
    """
    Marketing overview for the selected window.

    The selection is validated before any storage access. Validation
    failures return 400 with the reason; any storage failure, including an
    unreachable database, returns 500 with a generic message.
    """
    try:
        selection = selection_from_params(preset=preset, start=start, end=end, period=period)
        window = resolve_window(selection, max_range_days=settings.max_range_days)

        if executor is None:
            report = empty_report(window, include_timeseries=include_timeseries)
            org_id = UNCONFIGURED_ORG_ID
        else:
            report = await build_report(
                selection,
                include_timeseries,
                executor,
                settings=settings,
            )
            org_id = settings.org_id
    except ValidationError as e:
        logger.info(f"Rejected marketing overview request: {e.reason}")
        return _error(400, e.reason)
    except InfrastructureError as e:
        logger.error(f"Marketing overview failed (query {e.query_id}): {e}")
        return _error(500, GENERIC_FAILURE_MESSAGE)

    return ActivitySpineResponse(
        data=report,
        timestamp=datetime.now(timezone.utc).isoformat(),
        orgId=org_id,
    )
