"""
KPI Builder.

Turns decoded aggregates into the headline KPISet and period comparisons.

Counts are floored at zero, the bounce rate is clamped into [0, 1] and every
ratio goes through safe_divide, so the resulting KPISet never holds a NaN,
an Infinity, a negative value or a share outside [0, 1], whatever the
upstream rows contained.

Derived ratios:
    revenue_per_session     = total_pipeline_value_usd / sessions
    revenue_per_click       = total_pipeline_value_usd / organic_clicks
    submissions_per_session = total_submissions / sessions
    submissions_per_click   = total_submissions / organic_clicks

Funnel fallback:
    When the engagement aggregate reports no sessions and no page views but a
    funnel aggregate is available, page views come from the funnel and
    sessions are approximated as equal to page views. This overstates
    sessions for multi-page visits; the approximation is kept for parity with
    the dashboard's historical numbers and logged at DEBUG.
"""

import logging
from typing import Optional

from marketing_analytics.models.rows import (
    ConversionAggregate,
    EngagementAggregate,
    FunnelAggregate,
    SearchAggregate,
)
from marketing_analytics.models.schemas import (
    ComparisonEntry,
    KPIComparisons,
    KPISet,
)
from marketing_analytics.services.normalization import (
    clamp,
    non_negative,
    safe_divide,
)

logger = logging.getLogger(__name__)


COMPARED_FIELDS = (
    'sessions',
    'page_views',
    'total_submissions',
    'total_pipeline_value_usd',
    'organic_clicks',
    'impressions',
)


def build_kpis(
    engagement: EngagementAggregate,
    conversion: ConversionAggregate,
    search: SearchAggregate,
    funnel: Optional[FunnelAggregate] = None,
) -> KPISet:
    """
    Build the KPISet for one period.

    Args:
        engagement: Session-weighted engagement totals.
        conversion: Submission and pipeline totals.
        search: Lifetime organic search totals.
        funnel: Optional web-event funnel totals used when engagement is empty.

    Returns:
        KPISet with every field finite and within its domain.
    """
    sessions = non_negative(engagement.sessions)
    page_views = non_negative(engagement.page_views)

    if funnel is not None and sessions == 0 and page_views == 0:
        page_views = non_negative(funnel.page_views)
        sessions = page_views
        if page_views > 0:
            logger.debug(
                f"Engagement empty, approximating sessions from {page_views:.0f} funnel page views"
            )

    total_submissions = non_negative(conversion.total_submissions)
    total_pipeline = non_negative(conversion.total_pipeline_value_usd)
    organic_clicks = non_negative(search.organic_clicks)

    return KPISet(
        sessions=sessions,
        page_views=page_views,
        bounce_rate=clamp(engagement.bounce_rate, 0, 1),
        avg_time_on_page_seconds=non_negative(engagement.avg_time_on_page_seconds),
        total_submissions=total_submissions,
        total_pipeline_value_usd=total_pipeline,
        organic_clicks=organic_clicks,
        impressions=non_negative(search.impressions),
        avg_position=non_negative(search.avg_position),
        revenue_per_session=non_negative(safe_divide(total_pipeline, sessions)),
        revenue_per_click=non_negative(safe_divide(total_pipeline, organic_clicks)),
        submissions_per_session=non_negative(safe_divide(total_submissions, sessions)),
        submissions_per_click=non_negative(safe_divide(total_submissions, organic_clicks)),
    )


def compare(current: float, previous: float) -> ComparisonEntry:
    """Single comparison; delta_pct is 0 when there is nothing to compare to."""
    current = non_negative(current)
    previous = non_negative(previous)
    return ComparisonEntry(
        current=current,
        previous=previous,
        delta_pct=safe_divide(current - previous, previous),
    )


def build_comparisons(current: KPISet, previous: KPISet) -> KPIComparisons:
    """Period-over-period entries for the volume KPIs."""
    return KPIComparisons(**{
        name: compare(getattr(current, name), getattr(previous, name))
        for name in COMPARED_FIELDS
    })
