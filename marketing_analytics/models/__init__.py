"""
Package initialization file for marketing analytics models.

Exports the enums, Pydantic response schemas and decoded row shapes so other
modules can import them from marketing_analytics.models directly.

Usage:
    from marketing_analytics.models import (
        Preset,
        KPISet,
        MarketingOverview,
        EngagementAggregate,
    )
"""

# =============================================================================
# Enums
# =============================================================================

from marketing_analytics.models.enums import (
    Preset,
    LegacyPeriod,
    LEGACY_PERIOD_PRESETS,
    Granularity,
    CanonicalSource,
    MoverDirection,
    PipelineStatus,
)

# =============================================================================
# Schemas
# =============================================================================

from marketing_analytics.models.schemas import (
    PeriodBlock,
    KPISet,
    ComparisonEntry,
    KPIComparisons,
    PageRecord,
    SourceRecord,
    SEOQueryRecord,
    SEOQueryMover,
    DeviceBreakdown,
    CountryBreakdown,
    PipelineCategory,
    ConversionEvent,
    FunnelStep,
    PipelineHealth,
    TimeseriesPoint,
    Timeseries,
    AnomalyFlags,
    DataFreshness,
    RowCounts,
    ReportMetadata,
    MarketingOverview,
    ActivitySpineResponse,
    ErrorResponse,
)

# =============================================================================
# Decoded rows
# =============================================================================

from marketing_analytics.models.rows import (
    EngagementAggregate,
    ConversionAggregate,
    SearchAggregate,
    FunnelAggregate,
    SeriesSummary,
    DailyValue,
    PageEngagementRow,
    PageSearchRow,
    PageConversionRow,
    SourceRow,
)

__all__ = [
    # Enums
    'Preset',
    'LegacyPeriod',
    'LEGACY_PERIOD_PRESETS',
    'Granularity',
    'CanonicalSource',
    'MoverDirection',
    'PipelineStatus',
    # Schemas
    'PeriodBlock',
    'KPISet',
    'ComparisonEntry',
    'KPIComparisons',
    'PageRecord',
    'SourceRecord',
    'SEOQueryRecord',
    'SEOQueryMover',
    'DeviceBreakdown',
    'CountryBreakdown',
    'PipelineCategory',
    'ConversionEvent',
    'FunnelStep',
    'PipelineHealth',
    'TimeseriesPoint',
    'Timeseries',
    'AnomalyFlags',
    'DataFreshness',
    'RowCounts',
    'ReportMetadata',
    'MarketingOverview',
    'ActivitySpineResponse',
    'ErrorResponse',
    # Decoded rows
    'EngagementAggregate',
    'ConversionAggregate',
    'SearchAggregate',
    'FunnelAggregate',
    'SeriesSummary',
    'DailyValue',
    'PageEngagementRow',
    'PageSearchRow',
    'PageConversionRow',
    'SourceRow',
]
