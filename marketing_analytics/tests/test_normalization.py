"""
Test suite for the numeric normalization utilities and row decoders.

Covers:
1. to_number collapses every malformed scalar to 0
2. safe_divide returns 0 for non-positive or non-finite denominators and
   rounds half up
3. clamp and non_negative treat NaN as 0
4. Row decoders tolerate null rows, missing columns and garbage values
"""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import pytest

from marketing_analytics.models.rows import EngagementAggregate, SeriesSummary
from marketing_analytics.services.normalization import (
    clamp,
    decode_conversion,
    decode_daily_values,
    decode_engagement,
    decode_page_engagement,
    decode_series_summary,
    decode_sources,
    non_negative,
    safe_divide,
    to_iso_date,
    to_number,
    to_text,
    weighted_average,
)


# =============================================================================
# to_number
# =============================================================================


class TestToNumber:
    """Malformed scalars never escape as NaN, Infinity or an exception."""

    @pytest.mark.parametrize('value', [
        None,
        'abc',
        '',
        '   ',
        float('nan'),
        float('inf'),
        float('-inf'),
        'NaN',
        'Infinity',
        '-Infinity',
        '1_000',
        object(),
        [],
    ])
    def test_malformed_values_return_zero(self, value: Any) -> None:
        assert to_number(value) == 0.0

    def test_numeric_strings_parse(self) -> None:
        assert to_number('42') == 42.0
        assert to_number(' 3.5 ') == 3.5
        assert to_number('-7') == -7.0

    def test_decimal_and_int(self) -> None:
        assert to_number(Decimal('125000.50')) == 125000.5
        assert to_number(12) == 12.0

    def test_decimal_nan_returns_zero(self) -> None:
        assert to_number(Decimal('NaN')) == 0.0

    def test_large_numeric_string(self) -> None:
        assert to_number('12345678901234567890') == pytest.approx(1.2345678901234567e19)


# =============================================================================
# safe_divide / weighted_average
# =============================================================================


class TestSafeDivide:

    @pytest.mark.parametrize('denominator', [0, -1, -0.5, float('nan'), float('inf'), float('-inf')])
    def test_bad_denominator_returns_zero(self, denominator: float) -> None:
        assert safe_divide(10, denominator) == 0.0

    def test_non_finite_numerator_returns_zero(self) -> None:
        assert safe_divide(float('nan'), 3) == 0.0
        assert safe_divide(float('inf'), 3) == 0.0

    def test_precision(self) -> None:
        assert safe_divide(10, 3, 3) == pytest.approx(3.333)
        assert safe_divide(1, 3) == 0.3333

    def test_rounds_half_up(self) -> None:
        assert safe_divide(1, 8, 2) == 0.13
        assert safe_divide(-1, 8, 2) == -0.12

    def test_negative_numerator_allowed(self) -> None:
        assert safe_divide(-50, 100) == -0.5

    def test_weighted_average(self) -> None:
        assert weighted_average(62.5 * 1200, 1200) == 62.5
        assert weighted_average(100, 0) == 0.0


# =============================================================================
# clamp / non_negative
# =============================================================================


class TestClamp:

    def test_nan_clamps_to_zero(self) -> None:
        assert clamp(float('nan'), 0, 1) == 0.0

    def test_below_and_above(self) -> None:
        assert clamp(-5, 0, 1) == 0.0
        assert clamp(1.5, 0, 1) == 1.0

    def test_inside_range_unchanged(self) -> None:
        assert clamp(0.45, 0, 1) == 0.45

    def test_non_negative(self) -> None:
        assert non_negative(-5) == 0.0
        assert non_negative(float('nan')) == 0.0
        assert non_negative('12') == 12.0


# =============================================================================
# Text and dates
# =============================================================================


class TestTextHelpers:

    def test_to_text(self) -> None:
        assert to_text(None) is None
        assert to_text('  ') is None
        assert to_text(' /pricing ') == '/pricing'
        assert to_text(date(2026, 2, 1)) == '2026-02-01'

    def test_to_iso_date(self) -> None:
        assert to_iso_date(date(2026, 2, 1)) == '2026-02-01'
        assert to_iso_date(datetime(2026, 2, 1, 13, 30)) == '2026-02-01'
        assert to_iso_date('2026-02-01T00:00:00') == '2026-02-01'
        assert to_iso_date('yesterday') is None
        assert to_iso_date(None) is None


# =============================================================================
# Decoders
# =============================================================================


class TestDecoders:

    @pytest.mark.parametrize('rows', [None, [], [None], ['not a row'], [{}]])
    def test_missing_engagement_reads_as_zero(self, rows: Any) -> None:
        assert decode_engagement(rows) == EngagementAggregate()

    def test_engagement_garbage_is_normalized(self) -> None:
        aggregate = decode_engagement([{
            'sessions': -5,
            'page_views': 'NaN',
            'bounce_rate': 1.5,
            'avg_time_on_page_seconds': '-10',
        }])
        assert aggregate.sessions == 0
        assert aggregate.page_views == 0
        assert aggregate.bounce_rate == 1.0
        assert aggregate.avg_time_on_page_seconds == 0

    def test_conversion_infinity(self) -> None:
        aggregate = decode_conversion([{'total_submissions': 'Infinity',
                                        'total_pipeline_value_usd': Decimal('99.5')}])
        assert aggregate.total_submissions == 0
        assert aggregate.total_pipeline_value_usd == 99.5

    def test_series_summary_keeps_signed_mean(self) -> None:
        summary = decode_series_summary([{'sample_count': '9', 'mean': '-2.5',
                                          'stddev': -1, 'latest': None}])
        assert summary == SeriesSummary(sample_count=9, mean=-2.5, stddev=0.0, latest=0.0)

    def test_daily_values_skip_rows_without_date(self) -> None:
        values = decode_daily_values([
            {'date': date(2026, 2, 1), 'value': Decimal('3')},
            {'date': None, 'value': 5},
            {'date': '2026-02-02', 'value': 'NaN'},
        ])
        assert [(v.date, v.value) for v in values] == [('2026-02-01', 3.0), ('2026-02-02', 0.0)]

    def test_page_rows_without_url_are_dropped(self) -> None:
        rows = decode_page_engagement([
            {'page_url': '/a', 'sessions': 3},
            {'page_url': None, 'sessions': 100},
            {'page_url': '', 'sessions': 100},
        ])
        assert [r.page_url for r in rows] == ['/a']
        assert all(math.isfinite(r.bounce_rate) for r in rows)

    def test_sources_without_label_are_dropped(self) -> None:
        rows = decode_sources([
            {'submission_source': 'google', 'submissions': 2, 'pipeline_value_usd': -1},
            {'submission_source': None, 'submissions': 9},
        ])
        assert len(rows) == 1
        assert rows[0].pipeline_value_usd == 0
