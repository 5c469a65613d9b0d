"""Timing evaluator tests — overtime and punctuality classification."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from app.config import Settings
from app.services.timing import (
    DELAYED,
    EARLY,
    ON_TIME,
    TimingDefaults,
    arrival_status,
    departure_status,
    on_time_status,
    overtime_minutes,
    punctuality,
)

D = date(2025, 6, 1)


@pytest.mark.unit
class TestOvertime:

    def test_late_arrival_counts_minutes(self):
        assert overtime_minutes(time(14, 0), datetime(2025, 6, 1, 14, 37), D) == 37

    def test_early_arrival_is_not_overtime(self):
        assert overtime_minutes(time(14, 0), datetime(2025, 6, 1, 13, 50), D) == 0

    def test_rounds_to_nearest_minute(self):
        assert overtime_minutes(time(14, 0), datetime(2025, 6, 1, 14, 10, 40), D) == 11
        assert overtime_minutes(time(14, 0), datetime(2025, 6, 1, 14, 10, 20), D) == 10

    def test_aware_timestamp_is_converted_to_utc(self):
        sast = timezone(timedelta(hours=2))
        actual = datetime(2025, 6, 1, 16, 30, tzinfo=sast)  # 14:30 UTC
        assert overtime_minutes(time(14, 0), actual, D) == 30

    def test_next_day_arrival(self):
        assert overtime_minutes(time(17, 0), datetime(2025, 6, 2, 1, 0), D) == 8 * 60


@pytest.mark.unit
class TestOnTimeWindow:

    def test_inside_window(self):
        start = datetime(2025, 6, 1, 8, 0)
        end = datetime(2025, 6, 1, 12, 0)
        assert on_time_status(start, end, datetime(2025, 6, 1, 9, 0)) == ON_TIME
        assert on_time_status(start, end, end) == ON_TIME

    def test_before_and_after_window(self):
        start = datetime(2025, 6, 1, 8, 0)
        end = datetime(2025, 6, 1, 12, 0)
        assert on_time_status(start, end, datetime(2025, 6, 1, 7, 59)) == EARLY
        assert on_time_status(start, end, datetime(2025, 6, 1, 12, 1)) == DELAYED


@pytest.mark.unit
class TestPunctuality:

    expected = datetime(2025, 6, 1, 10, 0)

    def test_within_tolerance_is_on_time(self):
        assert punctuality(self.expected, datetime(2025, 6, 1, 10, 4)) == ON_TIME
        assert punctuality(self.expected, datetime(2025, 6, 1, 9, 56)) == ON_TIME

    def test_tolerance_boundary_is_not_on_time(self):
        assert punctuality(self.expected, datetime(2025, 6, 1, 10, 5)) == DELAYED
        assert punctuality(self.expected, datetime(2025, 6, 1, 9, 55)) == EARLY

    def test_departure_without_schedule_has_no_status(self):
        assert departure_status(D, None, datetime(2025, 6, 1, 10, 0)) is None

    def test_departure_against_schedule(self):
        assert departure_status(D, time(6, 0), datetime(2025, 6, 1, 6, 20)) == DELAYED

    def test_arrival_uses_estimated_time_on_expected_date(self):
        status = arrival_status(
            date(2025, 6, 2), time(9, 0), D, datetime(2025, 6, 2, 8, 30),
        )
        assert status == EARLY

    def test_arrival_estimated_time_falls_back_to_dispatch_date(self):
        status = arrival_status(None, time(15, 0), D, datetime(2025, 6, 1, 15, 2))
        assert status == ON_TIME

    def test_arrival_with_only_expected_date_uses_whole_day(self):
        expected = date(2025, 6, 2)
        assert arrival_status(expected, None, D, datetime(2025, 6, 2, 23, 0)) == ON_TIME
        assert arrival_status(expected, None, D, datetime(2025, 6, 1, 23, 0)) == EARLY
        assert arrival_status(expected, None, D, datetime(2025, 6, 3, 0, 1)) == DELAYED

    def test_arrival_without_expectation_has_no_status(self):
        assert arrival_status(None, None, D, datetime(2025, 6, 1, 12, 0)) is None


@pytest.mark.unit
class TestTimingDefaults:

    def test_per_load_override_wins(self):
        defaults = TimingDefaults()
        assert defaults.farm_arrival_for(None) == time(14, 0)
        assert defaults.farm_arrival_for(time(6, 30)) == time(6, 30)
        assert defaults.farm_departure_for(None) == time(17, 0)

    def test_from_settings(self):
        config = Settings(
            farm_arrival_time=time(7, 0),
            farm_departure_time=time(9, 0),
            on_time_tolerance_minutes=10,
        )
        defaults = TimingDefaults.from_settings(config)
        assert defaults == TimingDefaults(time(7, 0), time(9, 0), 10)
