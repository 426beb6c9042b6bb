"""
Test suite for the mean + 2 sigma anomaly detector.

Covers:
1. Fewer than MIN_SAMPLES observations never flag, whatever the variance
2. Zero variance never flags
3. The threshold is strict (latest must exceed mean + 2 * stddev)
4. summarize_series uses the population standard deviation, and
   summary_from_daily orders observed days before summarizing
5. Flags are evaluated independently per series
"""

from typing import List

import numpy as np
import pytest

from marketing_analytics.models.rows import DailyValue, SeriesSummary
from marketing_analytics.services.anomaly import (
    MIN_SAMPLES,
    STDDEV_MULTIPLIER,
    detect_anomalies,
    is_spike,
    summarize_series,
    summary_from_daily,
    summary_from_row,
)


def spike_series(days: int) -> List[float]:
    """Flat baseline of 10 with a final day of 100."""
    return [10.0] * (days - 1) + [100.0]


class TestConstants:

    def test_values(self) -> None:
        assert MIN_SAMPLES == 7
        assert STDDEV_MULTIPLIER == 2.0


class TestIsSpike:

    @pytest.mark.parametrize('count', [0, 1, 6])
    def test_too_few_samples_never_flag(self, count: int) -> None:
        summary = SeriesSummary(sample_count=count, mean=1.0, stddev=1.0, latest=1_000_000.0)
        assert is_spike(summary) is False

    def test_zero_stddev_never_flags(self) -> None:
        summary = SeriesSummary(sample_count=30, mean=10.0, stddev=0.0, latest=500.0)
        assert is_spike(summary) is False

    def test_threshold_is_strict(self) -> None:
        at_threshold = SeriesSummary(sample_count=7, mean=10.0, stddev=5.0, latest=20.0)
        above = SeriesSummary(sample_count=7, mean=10.0, stddev=5.0, latest=20.01)
        assert is_spike(at_threshold) is False
        assert is_spike(above) is True

    def test_drop_is_not_a_spike(self) -> None:
        summary = SeriesSummary(sample_count=30, mean=100.0, stddev=5.0, latest=0.0)
        assert is_spike(summary) is False


class TestSummarizeSeries:

    def test_population_stddev(self) -> None:
        values = [2, 4, 4, 4, 5, 5, 7, 9]
        summary = summarize_series(values)
        assert summary.sample_count == 8
        assert summary.mean == pytest.approx(5.0)
        assert summary.stddev == pytest.approx(2.0)
        assert summary.stddev == pytest.approx(float(np.std(values, ddof=0)))
        assert summary.latest == 9

    def test_empty_series(self) -> None:
        assert summarize_series([]) == SeriesSummary()

    def test_garbage_values_count_as_zero(self) -> None:
        summary = summarize_series([1, None, 'NaN', float('inf')])
        assert summary.sample_count == 4
        assert summary.mean == pytest.approx(0.25)

    def test_seven_day_spike_flags(self) -> None:
        assert is_spike(summarize_series(spike_series(7))) is True

    def test_six_day_spike_does_not_flag(self) -> None:
        assert is_spike(summarize_series(spike_series(6))) is False

    def test_flat_series_does_not_flag(self) -> None:
        assert is_spike(summarize_series([10.0] * 30)) is False


class TestSummaryFromDaily:

    def test_orders_points_by_date(self) -> None:
        points = [DailyValue(f'2026-02-{day:02d}', 10.0) for day in range(2, 9)]
        points.insert(0, DailyValue('2026-02-09', 100.0))

        summary = summary_from_daily(points)

        assert summary.sample_count == 8
        assert summary.latest == 100.0
        assert is_spike(summary) is True

    def test_matches_sql_summary_of_same_days(self) -> None:
        points = [DailyValue('2026-02-01', 4.0), DailyValue('2026-02-02', 8.0)]
        from_sql = summary_from_row([{'sample_count': 2, 'mean': 6, 'stddev': 2, 'latest': 8}])
        assert summary_from_daily(points) == from_sql

    def test_no_points(self) -> None:
        assert summary_from_daily([]) == SeriesSummary()


class TestDetectAnomalies:

    def test_flags_are_independent(self) -> None:
        flags = detect_anomalies(
            sessions=summarize_series(spike_series(14)),
            submissions=summarize_series([3.0] * 14),
            pipeline=summarize_series(spike_series(5)),
        )
        assert flags.sessions_spike is True
        assert flags.submissions_spike is False
        assert flags.pipeline_spike is False

    def test_summary_from_sql_row(self) -> None:
        summary = summary_from_row([{'sample_count': 28, 'mean': '40', 'stddev': '5', 'latest': 80}])
        assert summary == SeriesSummary(sample_count=28, mean=40.0, stddev=5.0, latest=80.0)
        assert is_spike(summary) is True

    def test_missing_summary_row(self) -> None:
        assert is_spike(summary_from_row([])) is False
