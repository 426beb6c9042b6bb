"""
Period Resolver.

Turns a request's time-selection parameters into a validated reporting
window plus the comparison window that immediately precedes it.

Selection modes (exactly one applies per request):
    - Preset:        ?preset=last_7d|last_30d|last_90d|mtd|qtd|ytd
    - ExplicitRange: ?start=YYYY-MM-DD&end=YYYY-MM-DD
    - LegacyPeriod:  ?period=7d|30d|90d, mapped onto last_Nd presets
    - Default:       no parameters, a trailing 30-day window

Rules:
    - preset together with start/end is rejected, whatever their values
    - a legacy period is only looked at when neither preset nor start/end
      is supplied
    - explicit dates must match YYYY-MM-DD, be real calendar days, satisfy
      start <= end and span at most MAX_RANGE_DAYS days
    - "today" is the current UTC date; every window ends on it except an
      explicit range

Comparison window:
    prev_end   = start - 1 day
    prev_start = prev_end - (end - start)

so the two windows never share a day and have identical length, which keeps
period deltas fair.

Usage:
    selection = selection_from_params(preset='mtd')
    period = resolve_period(selection)
    period.current.params()     # ['2026-10-01', '2026-10-19']
    period.comparison.params()  # ['2026-09-12', '2026-09-30']
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Union

from marketing_analytics.core.errors import ValidationError
from marketing_analytics.models.enums import (
    LEGACY_PERIOD_PRESETS,
    Granularity,
    LegacyPeriod,
    Preset,
)
from marketing_analytics.models.schemas import PeriodBlock


# =============================================================================
# Constants
# =============================================================================

ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

# Three years, expressed the same way the dashboard states the limit
MAX_RANGE_DAYS: int = 3 * 365

DEFAULT_PRESET: Preset = Preset.LAST_30D

VALID_PRESETS: List[str] = [p.value for p in Preset]
VALID_LEGACY_PERIODS: List[str] = [p.value for p in LegacyPeriod]

_TRAILING_DAYS = {
    Preset.LAST_7D: 7,
    Preset.LAST_30D: 30,
    Preset.LAST_90D: 90,
}


# =============================================================================
# Windows
# =============================================================================


@dataclass(frozen=True)
class TimeWindow:
    """
    Inclusive range of UTC calendar days.

    Attributes:
        start: First day of the window.
        end: Last day of the window; never before ``start``.
    """
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"TimeWindow start {self.start} is after end {self.end}")

    @property
    def days(self) -> int:
        """Number of calendar days covered, both ends included."""
        return (self.end - self.start).days + 1

    def params(self) -> List[str]:
        """Positional query parameters: exactly [start, end] as YYYY-MM-DD."""
        return [self.start.isoformat(), self.end.isoformat()]

    def comparison_window(self) -> 'TimeWindow':
        """The immediately preceding window of identical length."""
        prev_end = self.start - timedelta(days=1)
        prev_start = prev_end - (self.end - self.start)
        return TimeWindow(start=prev_start, end=prev_end)

    def to_period_block(self) -> PeriodBlock:
        return PeriodBlock(
            start=self.start.isoformat(),
            end=self.end.isoformat(),
            granularity=Granularity.DAY,
        )


@dataclass(frozen=True)
class ResolvedPeriod:
    """Current window and its comparison window."""
    current: TimeWindow
    comparison: TimeWindow


# =============================================================================
# Time selections
# =============================================================================


@dataclass(frozen=True)
class PresetSelection:
    name: str


@dataclass(frozen=True)
class ExplicitRange:
    start: Optional[str]
    end: Optional[str]


@dataclass(frozen=True)
class LegacyPeriodSelection:
    code: str


@dataclass(frozen=True)
class DefaultSelection:
    pass


TimeSelection = Union[PresetSelection, ExplicitRange, LegacyPeriodSelection, DefaultSelection]


def selection_from_params(
    preset: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    period: Optional[str] = None,
) -> TimeSelection:
    """
    Build a TimeSelection from raw query-string values.

    A parameter counts as supplied when it is not None, so ``start=""`` is an
    (invalid) explicit range rather than no range at all.

    Raises:
        ValidationError: If both a preset and start/end are supplied.
    """
    has_preset = preset is not None
    has_range = start is not None or end is not None

    if has_preset and has_range:
        raise ValidationError(
            'Cannot provide both preset and start/end. Use one or the other.'
        )
    if has_preset:
        return PresetSelection(name=preset)
    if has_range:
        return ExplicitRange(start=start, end=end)
    if period is not None:
        return LegacyPeriodSelection(code=period)
    return DefaultSelection()


# =============================================================================
# Resolution
# =============================================================================


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def resolve_preset(preset: Preset, today: date) -> TimeWindow:
    """Window for a named preset, ending on ``today``."""
    if preset in _TRAILING_DAYS:
        return TimeWindow(start=today - timedelta(days=_TRAILING_DAYS[preset] - 1), end=today)
    if preset is Preset.MTD:
        return TimeWindow(start=today.replace(day=1), end=today)
    if preset is Preset.QTD:
        quarter_month = ((today.month - 1) // 3) * 3 + 1
        return TimeWindow(start=today.replace(month=quarter_month, day=1), end=today)
    if preset is Preset.YTD:
        return TimeWindow(start=today.replace(month=1, day=1), end=today)
    raise ValidationError(
        f'Invalid preset "{preset}". Must be one of: {", ".join(VALID_PRESETS)}'
    )


def _parse_preset(name: str) -> Preset:
    try:
        return Preset(name)
    except ValueError:
        raise ValidationError(
            f'Invalid preset "{name}". Must be one of: {", ".join(VALID_PRESETS)}'
        ) from None


def _parse_iso_date(value: str) -> date:
    if not ISO_DATE_RE.match(value):
        raise ValidationError('Dates must be in YYYY-MM-DD format.')
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f'"{value}" is not a valid calendar date.') from None


def resolve_explicit_range(
    start: Optional[str],
    end: Optional[str],
    max_range_days: int = MAX_RANGE_DAYS,
) -> TimeWindow:
    """
    Validate an explicit start/end pair.

    Raises:
        ValidationError: Missing bound, malformed date, start after end, or a
            span longer than ``max_range_days``.
    """
    if not start or not end:
        raise ValidationError('Both start and end are required for explicit date range.')

    start_date = _parse_iso_date(start)
    end_date = _parse_iso_date(end)

    if start_date > end_date:
        raise ValidationError('start must not be after end.')
    if (end_date - start_date).days > max_range_days:
        raise ValidationError(f'Date range exceeds maximum of {max_range_days} days.')

    return TimeWindow(start=start_date, end=end_date)


def resolve_window(
    selection: TimeSelection,
    today: Optional[date] = None,
    max_range_days: int = MAX_RANGE_DAYS,
) -> TimeWindow:
    """
    Resolve a TimeSelection into the current reporting window.

    Args:
        selection: One of the TimeSelection variants.
        today: Reference UTC date; defaults to the current UTC date.
        max_range_days: Longest explicit range accepted.

    Raises:
        ValidationError: If the selection is invalid.
    """
    today = today or utc_today()

    if isinstance(selection, PresetSelection):
        return resolve_preset(_parse_preset(selection.name), today)

    if isinstance(selection, ExplicitRange):
        return resolve_explicit_range(selection.start, selection.end, max_range_days)

    if isinstance(selection, LegacyPeriodSelection):
        try:
            legacy = LegacyPeriod(selection.code)
        except ValueError:
            raise ValidationError(
                f'Invalid period "{selection.code}". Must be one of: '
                f'{", ".join(VALID_LEGACY_PERIODS)}'
            ) from None
        return resolve_preset(LEGACY_PERIOD_PRESETS[legacy], today)

    return resolve_preset(DEFAULT_PRESET, today)


def resolve_period(
    selection: TimeSelection,
    today: Optional[date] = None,
    max_range_days: int = MAX_RANGE_DAYS,
) -> ResolvedPeriod:
    """Resolve the current window and derive its comparison window."""
    current = resolve_window(selection, today=today, max_range_days=max_range_days)
    return ResolvedPeriod(current=current, comparison=current.comparison_window())
