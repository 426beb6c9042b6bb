"""
Numeric Normalization Utilities.

Pure functions that coerce untrusted scalar input into safe numbers, plus the
row decoders built on them. This module is the only place allowed to read raw
storage rows: everything downstream consumes the frozen dataclasses from
marketing_analytics.models.rows.

Guarantees:
    - No function here raises on malformed input. None, non-numeric strings,
      NaN and +/-Infinity all collapse to 0.
    - No function here returns NaN or Infinity.

Scalar helpers:
    to_number(v)                    -> finite float, 0 for garbage
    safe_divide(n, d, precision=4)  -> n / d rounded half-up, 0 when d <= 0
    weighted_average(total, weight) -> safe_divide(total, weight)
    clamp(v, lo, hi)                -> v bounded to [lo, hi], garbage as 0
    non_negative(v)                 -> max(v, 0), garbage as 0

Example:
    >>> to_number("Infinity")
    0.0
    >>> safe_divide(10, 3, 3)
    3.333
    >>> clamp(float("nan"), 0, 1)
    0.0
"""

import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from marketing_analytics.models.rows import (
    ConversionAggregate,
    DailyValue,
    EngagementAggregate,
    FunnelAggregate,
    PageConversionRow,
    PageEngagementRow,
    PageSearchRow,
    SearchAggregate,
    SeriesSummary,
    SourceRow,
)


_ISO_DATE_PREFIX_RE = re.compile(r'^\d{4}-\d{2}-\d{2}')

DEFAULT_PRECISION: int = 4


# =============================================================================
# Scalar helpers
# =============================================================================


def to_number(value: Any) -> float:
    """
    Coerce any storage value to a finite float.

    Accepts ints, floats, Decimals (asyncpg NUMERIC) and numeric strings,
    including large ones. Returns 0.0 for None, non-numeric strings, NaN,
    +/-Infinity and values that overflow a float.
    """
    if value is None:
        return 0.0

    try:
        if isinstance(value, str):
            text = value.strip()
            # float() accepts digit separators that no upstream system emits
            if not text or '_' in text:
                return 0.0
            number = float(text)
        elif isinstance(value, Decimal):
            number = float(value)
        else:
            number = float(value)
    except (TypeError, ValueError, OverflowError, InvalidOperation):
        return 0.0

    return number if math.isfinite(number) else 0.0


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool) \
        and math.isfinite(float(value))


def safe_divide(
    numerator: float,
    denominator: float,
    precision: int = DEFAULT_PRECISION,
) -> float:
    """
    Divide, returning 0 instead of failing or producing a non-finite value.

    Returns 0.0 when the denominator is zero, negative, NaN or infinite, or
    when the numerator is not finite. Otherwise the quotient is rounded half
    up to ``precision`` decimal places.

    Args:
        numerator: Dividend; may be negative (period deltas are).
        denominator: Divisor; must be a positive finite number.
        precision: Decimal places to keep.

    Returns:
        Rounded quotient or 0.0.
    """
    if not _is_finite_number(numerator) or not _is_finite_number(denominator):
        return 0.0
    if denominator <= 0:
        return 0.0

    raw = float(numerator) / float(denominator)
    factor = 10 ** precision
    scaled = raw * factor
    if not math.isfinite(scaled):
        return raw if math.isfinite(raw) else 0.0
    return math.floor(scaled + 0.5) / factor


def weighted_average(total: float, weight: float) -> float:
    """Weighted average from a pre-multiplied sum; 0 when weight is 0."""
    return safe_divide(total, weight)


def clamp(value: Any, lo: float, hi: float) -> float:
    """Bound ``value`` into [lo, hi]; garbage and NaN count as 0 first."""
    number = to_number(value)
    if number < lo:
        return float(lo)
    if number > hi:
        return float(hi)
    return number


def non_negative(value: Any) -> float:
    """Floor ``value`` at 0; garbage and NaN count as 0."""
    number = to_number(value)
    return number if number > 0 else 0.0


def to_count(value: Any) -> float:
    return non_negative(value)


def to_share(value: Any) -> float:
    return clamp(value, 0, 1)


def to_text(value: Any) -> Optional[str]:
    """
    Coerce a label or date to a string, or None when absent.

    Dates become YYYY-MM-DD; empty strings become None so "never observed" is
    always serialized as null.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def to_iso_date(value: Any) -> Optional[str]:
    """YYYY-MM-DD prefix of a date-like value, or None if it has none."""
    text = to_text(value)
    if text is None:
        return None
    match = _ISO_DATE_PREFIX_RE.match(text)
    return match.group(0) if match else None


# =============================================================================
# Row access
# =============================================================================


def field_of(row: Any, key: str) -> Any:
    """Read one column, treating a null or non-mapping row as empty."""
    if isinstance(row, Mapping):
        return row.get(key)
    return None


def first_row(rows: Optional[Sequence[Any]]) -> Mapping[str, Any]:
    """
    First row of a single-row aggregate result, or an empty mapping.

    Aggregate queries return one row, but a missing result set or a null row
    must read as "all zeros".
    """
    if not rows:
        return {}
    row = rows[0]
    return row if isinstance(row, Mapping) else {}


# =============================================================================
# KPI aggregate decoders
# =============================================================================


def decode_engagement(rows: Optional[Sequence[Any]]) -> EngagementAggregate:
    row = first_row(rows)
    return EngagementAggregate(
        sessions=to_count(field_of(row, 'sessions')),
        page_views=to_count(field_of(row, 'page_views')),
        bounce_rate=to_share(field_of(row, 'bounce_rate')),
        avg_time_on_page_seconds=to_count(field_of(row, 'avg_time_on_page_seconds')),
    )


def decode_conversion(rows: Optional[Sequence[Any]]) -> ConversionAggregate:
    row = first_row(rows)
    return ConversionAggregate(
        total_submissions=to_count(field_of(row, 'total_submissions')),
        total_pipeline_value_usd=to_count(field_of(row, 'total_pipeline_value_usd')),
    )


def decode_search(rows: Optional[Sequence[Any]]) -> SearchAggregate:
    row = first_row(rows)
    return SearchAggregate(
        organic_clicks=to_count(field_of(row, 'organic_clicks')),
        impressions=to_count(field_of(row, 'impressions')),
        avg_position=to_count(field_of(row, 'avg_position')),
    )


def decode_funnel(rows: Optional[Sequence[Any]]) -> FunnelAggregate:
    row = first_row(rows)
    return FunnelAggregate(
        page_views=to_count(field_of(row, 'page_views')),
        submissions=to_count(field_of(row, 'submissions')),
        pipeline_value_usd=to_count(field_of(row, 'pipeline_value_usd')),
    )


def decode_series_summary(rows: Optional[Sequence[Any]]) -> SeriesSummary:
    """
    Decode the SQL-side summary of a daily series.

    The mean and latest value are kept signed; the sample count and standard
    deviation cannot be negative.
    """
    row = first_row(rows)
    return SeriesSummary(
        sample_count=int(non_negative(field_of(row, 'sample_count'))),
        mean=to_number(field_of(row, 'mean')),
        stddev=non_negative(field_of(row, 'stddev')),
        latest=to_number(field_of(row, 'latest')),
    )


# =============================================================================
# Listing decoders
# =============================================================================


def decode_daily_values(rows: Optional[Iterable[Any]]) -> List[DailyValue]:
    """Daily (date, value) pairs; rows without a usable date are dropped."""
    values: List[DailyValue] = []
    for row in rows or []:
        day = to_iso_date(field_of(row, 'date'))
        if day is None:
            continue
        values.append(DailyValue(date=day, value=to_count(field_of(row, 'value'))))
    return values


def decode_page_engagement(rows: Optional[Iterable[Any]]) -> List[PageEngagementRow]:
    decoded = []
    for row in rows or []:
        url = to_text(field_of(row, 'page_url'))
        if url is None:
            continue
        decoded.append(PageEngagementRow(
            page_url=url,
            sessions=to_count(field_of(row, 'sessions')),
            page_views=to_count(field_of(row, 'page_views')),
            bounce_rate=to_share(field_of(row, 'bounce_rate')),
            avg_time_on_page_seconds=to_count(field_of(row, 'avg_time_on_page_seconds')),
        ))
    return decoded


def decode_page_search(rows: Optional[Iterable[Any]]) -> List[PageSearchRow]:
    decoded = []
    for row in rows or []:
        url = to_text(field_of(row, 'page_url'))
        if url is None:
            continue
        decoded.append(PageSearchRow(
            page_url=url,
            clicks=to_count(field_of(row, 'clicks')),
            impressions=to_count(field_of(row, 'impressions')),
            ctr=to_share(field_of(row, 'ctr')),
        ))
    return decoded


def decode_page_conversions(rows: Optional[Iterable[Any]]) -> List[PageConversionRow]:
    decoded = []
    for row in rows or []:
        url = to_text(field_of(row, 'page_url'))
        if url is None:
            continue
        decoded.append(PageConversionRow(
            page_url=url,
            submissions=to_count(field_of(row, 'submissions')),
            pipeline_value_usd=to_count(field_of(row, 'pipeline_value_usd')),
        ))
    return decoded


def decode_sources(rows: Optional[Iterable[Any]]) -> List[SourceRow]:
    decoded = []
    for row in rows or []:
        label = to_text(field_of(row, 'submission_source'))
        if label is None:
            continue
        decoded.append(SourceRow(
            submission_source=label,
            submissions=to_count(field_of(row, 'submissions')),
            pipeline_value_usd=to_count(field_of(row, 'pipeline_value_usd')),
        ))
    return decoded
