"""Timing evaluator — expected vs. actual timestamps for loads.

Pure functions; the lifecycle service persists what they return so a
load keeps the classification that applied when it was confirmed, even
if the configured defaults change later.

    overtime_minutes(expected_time, actual, reference_date) → int ≥ 0
    on_time_status(window_start, window_end, actual)        → on_time | delayed | early
    punctuality(expected, actual, tolerance_minutes)         → on_time | delayed | early

All datetimes are compared as naive UTC: aware values are converted
first, naive values are taken as already UTC.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from app.config import Settings, settings as default_settings

ON_TIME = "on_time"
DELAYED = "delayed"
EARLY = "early"


@dataclass(frozen=True)
class TimingDefaults:
    """Site-class expected times used when a load carries no override."""
    farm_arrival: time = time(14, 0)
    farm_departure: time = time(17, 0)
    tolerance_minutes: int = 5

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "TimingDefaults":
        config = config or default_settings
        return cls(
            farm_arrival=config.farm_arrival_time,
            farm_departure=config.farm_departure_time,
            tolerance_minutes=config.on_time_tolerance_minutes,
        )

    def farm_arrival_for(self, override: time | None) -> time:
        return override or self.farm_arrival

    def farm_departure_for(self, override: time | None) -> time:
        return override or self.farm_departure


def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _minutes_between(expected: datetime, actual: datetime) -> float:
    return (as_naive_utc(actual) - as_naive_utc(expected)).total_seconds() / 60


def overtime_minutes(expected_time: time, actual: datetime, reference_date: date) -> int:
    """Minutes `actual` is past `reference_date` + `expected_time`, clamped at 0.

    Arriving early is not overtime.
    """
    expected = datetime.combine(reference_date, expected_time)
    diff = round(_minutes_between(expected, actual))
    return max(0, diff)


def on_time_status(window_start: datetime, window_end: datetime, actual: datetime) -> str:
    """Classify `actual` against an expected window (bounds inclusive)."""
    actual = as_naive_utc(actual)
    if actual > as_naive_utc(window_end):
        return DELAYED
    if actual < as_naive_utc(window_start):
        return EARLY
    return ON_TIME


def punctuality(expected: datetime, actual: datetime, tolerance_minutes: int = 5) -> str:
    """Dispatch / arrival comparison with a tolerance band.

    |diff| < tolerance is on time; a diff of exactly the tolerance already
    counts as early or delayed.
    """
    diff = _minutes_between(expected, actual)
    if diff <= -tolerance_minutes:
        return EARLY
    if diff >= tolerance_minutes:
        return DELAYED
    return ON_TIME


def departure_status(
    dispatch_date: date,
    scheduled_departure_time: time | None,
    actual: datetime,
    tolerance_minutes: int = 5,
) -> str | None:
    """Punctuality of a dispatch, or None when no departure was scheduled."""
    if scheduled_departure_time is None:
        return None
    expected = datetime.combine(dispatch_date, scheduled_departure_time)
    return punctuality(expected, actual, tolerance_minutes)


def arrival_status(
    expected_arrival_date: date | None,
    estimated_arrival_time: time | None,
    dispatch_date: date,
    actual: datetime,
    tolerance_minutes: int = 5,
) -> str | None:
    """Punctuality of a receipt.

    With an estimated arrival time the tolerance band applies around
    (expected_arrival_date or dispatch_date) + estimated time.  With only an
    expected arrival date the whole day is the window.  Neither → None.
    """
    if estimated_arrival_time is not None:
        expected = datetime.combine(expected_arrival_date or dispatch_date, estimated_arrival_time)
        return punctuality(expected, actual, tolerance_minutes)
    if expected_arrival_date is not None:
        start = datetime.combine(expected_arrival_date, time.min)
        end = start + timedelta(days=1) - timedelta(microseconds=1)
        return on_time_status(start, end, actual)
    return None
