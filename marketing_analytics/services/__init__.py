"""
Marketing Analytics Services Module

Business logic of the marketing overview engine. Everything here is
synchronous and side-effect-free except report.build_report, whose only
suspension points are the storage reads.

Services:
- normalization: Safe numeric coercion and row decoders
- period: Time-selection parsing, window and comparison-window resolution
- taxonomy: Free-text source label to canonical channel
- anomaly: Mean + 2 sigma spike detection
- kpi: Headline KPIs and period-over-period comparisons
- listings: Pages, sources, SEO queries, timeseries and breakdowns
- report: Concurrent read fan-out and report assembly

All services are consumed by the API layer (marketing_analytics/api/).
"""

# =============================================================================
# Normalization Exports
# =============================================================================

from marketing_analytics.services.normalization import (
    to_number,
    safe_divide,
    weighted_average,
    clamp,
    non_negative,
)

# =============================================================================
# Period Exports
# =============================================================================

from marketing_analytics.services.period import (
    MAX_RANGE_DAYS,
    TimeWindow,
    ResolvedPeriod,
    TimeSelection,
    PresetSelection,
    ExplicitRange,
    LegacyPeriodSelection,
    DefaultSelection,
    selection_from_params,
    resolve_window,
    resolve_period,
)

# =============================================================================
# Taxonomy Exports
# =============================================================================

from marketing_analytics.services.taxonomy import (
    DEFAULT_SOURCE_TAXONOMY,
    SourceClassifier,
    canonical_source,
)

# =============================================================================
# Anomaly Exports
# =============================================================================

from marketing_analytics.services.anomaly import (
    MIN_SAMPLES,
    STDDEV_MULTIPLIER,
    is_spike,
    summarize_series,
    summary_from_daily,
    summary_from_row,
    detect_anomalies,
)

# =============================================================================
# KPI Exports
# =============================================================================

from marketing_analytics.services.kpi import (
    build_kpis,
    build_comparisons,
)

# =============================================================================
# Report Exports
# =============================================================================

from marketing_analytics.services.report import (
    QueryExecutor,
    build_report,
    empty_report,
)

__all__ = [
    # Normalization
    'to_number',
    'safe_divide',
    'weighted_average',
    'clamp',
    'non_negative',
    # Period
    'MAX_RANGE_DAYS',
    'TimeWindow',
    'ResolvedPeriod',
    'TimeSelection',
    'PresetSelection',
    'ExplicitRange',
    'LegacyPeriodSelection',
    'DefaultSelection',
    'selection_from_params',
    'resolve_window',
    'resolve_period',
    # Taxonomy
    'DEFAULT_SOURCE_TAXONOMY',
    'SourceClassifier',
    'canonical_source',
    # Anomaly
    'MIN_SAMPLES',
    'STDDEV_MULTIPLIER',
    'is_spike',
    'summarize_series',
    'summary_from_daily',
    'summary_from_row',
    'detect_anomalies',
    # KPI
    'build_kpis',
    'build_comparisons',
    # Report
    'QueryExecutor',
    'build_report',
    'empty_report',
]
