"""
Enumeration definitions for the Marketing Analytics backend.

All enums inherit from both `str` and `Enum` so they serialize as plain
strings in Pydantic models and JSON responses.
"""

from enum import Enum


class Preset(str, Enum):
    """
    Named relative time windows accepted by the overview endpoint.

    - last_7d / last_30d / last_90d: N days ending today, inclusive
    - mtd: first day of the current month through today
    - qtd: first day of the current calendar quarter through today
    - ytd: January 1st of the current year through today
    """
    LAST_7D = "last_7d"
    LAST_30D = "last_30d"
    LAST_90D = "last_90d"
    MTD = "mtd"
    QTD = "qtd"
    YTD = "ytd"


class LegacyPeriod(str, Enum):
    """
    Older period codes kept for backward compatibility.

    Each maps 1:1 onto a Preset (see LEGACY_PERIOD_PRESETS).
    """
    DAYS_7 = "7d"
    DAYS_30 = "30d"
    DAYS_90 = "90d"


LEGACY_PERIOD_PRESETS = {
    LegacyPeriod.DAYS_7: Preset.LAST_7D,
    LegacyPeriod.DAYS_30: Preset.LAST_30D,
    LegacyPeriod.DAYS_90: Preset.LAST_90D,
}


class Granularity(str, Enum):
    """Bucket size of the report. Only daily bucketing exists."""
    DAY = "day"


class CanonicalSource(str, Enum):
    """
    Normalized acquisition-channel bucket derived from a free-text label.

    Anything the taxonomy does not recognise lands in OTHER.
    """
    ORGANIC = "organic"
    PAID = "paid"
    DIRECT = "direct"
    EMAIL = "email"
    REFERRAL = "referral"
    OTHER = "other"


class MoverDirection(str, Enum):
    """Direction of an SEO query's impressions between window halves."""
    RISING = "rising"
    FALLING = "falling"


class PipelineStatus(str, Enum):
    """
    Ingestion health of a raw data source.

    - healthy: recent success and low failure rate
    - warning: failure rate above 30% or last success older than 24h
    - stale: never succeeded or last success older than 48h
    """
    HEALTHY = "healthy"
    WARNING = "warning"
    STALE = "stale"
