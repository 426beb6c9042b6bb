"""
Anomaly Detector.

Flags a metric spike when the most recent daily value sits well above the
window's own distribution:

    spike  <=>  sample_count >= MIN_SAMPLES
                and stddev > 0
                and latest > mean + STDDEV_MULTIPLIER * stddev

The standard deviation is the population one (ddof=0), matching
STDDEV_POP on the SQL side. Fewer than seven observations never flag,
whatever the variance, and a perfectly flat series never flags.

The thresholds are module constants, not settings.
"""

import logging
from typing import Any, Iterable, Optional, Sequence

import numpy as np

from marketing_analytics.models.rows import DailyValue, SeriesSummary
from marketing_analytics.models.schemas import AnomalyFlags
from marketing_analytics.services.normalization import (
    decode_series_summary,
    to_number,
)

logger = logging.getLogger(__name__)


MIN_SAMPLES: int = 7
STDDEV_MULTIPLIER: float = 2.0


def is_spike(summary: SeriesSummary) -> bool:
    """True when ``summary.latest`` breaks the mean + 2 sigma threshold."""
    if summary.sample_count < MIN_SAMPLES:
        return False
    if summary.stddev <= 0:
        return False
    return summary.latest > summary.mean + STDDEV_MULTIPLIER * summary.stddev


def summarize_series(values: Iterable[Any]) -> SeriesSummary:
    """
    Build a SeriesSummary from an in-memory daily series.

    Values are normalized first, so NaN or garbage entries count as 0. The
    last element is treated as the most recent day.
    """
    data = np.asarray([to_number(v) for v in values], dtype=float)
    if data.size == 0:
        return SeriesSummary()
    return SeriesSummary(
        sample_count=int(data.size),
        mean=float(np.mean(data)),
        stddev=float(np.std(data, ddof=0)),
        latest=float(data[-1]),
    )


def summary_from_daily(points: Iterable[DailyValue]) -> SeriesSummary:
    """
    Summarize observed daily points, oldest first.

    Only days present in storage count as samples, the same days the SQL
    summary groups over, so both paths flag the same spikes.
    """
    ordered = sorted(points, key=lambda point: point.date)
    return summarize_series(point.value for point in ordered)


def summary_from_row(rows: Optional[Sequence[Any]]) -> SeriesSummary:
    """Decode the SQL-aggregated summary of one series."""
    return decode_series_summary(rows)


def detect_anomalies(
    sessions: SeriesSummary,
    submissions: SeriesSummary,
    pipeline: SeriesSummary,
) -> AnomalyFlags:
    """Evaluate each series independently."""
    flags = AnomalyFlags(
        sessions_spike=is_spike(sessions),
        submissions_spike=is_spike(submissions),
        pipeline_spike=is_spike(pipeline),
    )
    if flags.sessions_spike or flags.submissions_spike or flags.pipeline_spike:
        logger.info(f"Anomalies detected: {flags.model_dump()}")
    return flags
