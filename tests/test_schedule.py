"""Tests for the timezone-aware schedule evaluator."""

from datetime import datetime, timezone

import pytest

from enforcer.policy.models import ActiveHours, ScheduleSpec
from enforcer.policy.schedule import (
    ACTIVE_WHEN_NO_WINDOWS,
    ACTIVE_WHEN_TIMEZONE_INVALID,
    is_within_schedule,
    resolve_timezone,
    window_matches,
)

# Monday 2024-01-15 14:00 UTC == 09:00 in New York (EST, UTC-5)
MONDAY_1400_UTC = datetime(2024, 1, 15, 14, 0, tzinfo=timezone.utc)

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri"]


def _schedule(tz="UTC", windows=None) -> ScheduleSpec:
    windows = [] if windows is None else windows
    return ScheduleSpec(
        timezone=tz,
        active_hours=[ActiveHours(days=d, hours=h) for d, h in windows],
    )


class TestTimezone:
    @pytest.mark.parametrize(
        "tz",
        ["Invalid/Zone", "", "Not A Zone", "../etc/passwd", "America", "Etc", "x" * 300],
    )
    def test_invalid_timezone_fails_open(self, tz):
        assert ACTIVE_WHEN_TIMEZONE_INVALID is True
        # window would never match; invalid timezone still passes
        sched = _schedule(tz, [(["Sun"], [3, 3])])
        assert is_within_schedule(sched, MONDAY_1400_UTC) is True

    def test_invalid_timezone_with_no_windows_still_passes(self):
        assert is_within_schedule(_schedule("Invalid/Zone"), MONDAY_1400_UTC) is True

    def test_resolve_known_zone(self):
        assert resolve_timezone("America/New_York") is not None
        assert resolve_timezone("Invalid/Zone") is None

    def test_hour_is_taken_in_schedule_timezone(self):
        ny = _schedule("America/New_York", [(WEEKDAYS, [9, 9])])
        utc = _schedule("UTC", [(WEEKDAYS, [9, 9])])
        assert is_within_schedule(ny, MONDAY_1400_UTC) is True
        assert is_within_schedule(utc, MONDAY_1400_UTC) is False

    def test_weekday_is_taken_in_schedule_timezone(self):
        # Tuesday 02:00 UTC is still Monday evening in Los Angeles
        moment = datetime(2024, 1, 16, 2, 0, tzinfo=timezone.utc)
        la = _schedule("America/Los_Angeles", [(["Mon"], [18, 18])])
        assert is_within_schedule(la, moment) is True

    def test_naive_now_is_treated_as_utc(self):
        sched = _schedule("UTC", [(["Mon"], [14, 14])])
        assert is_within_schedule(sched, datetime(2024, 1, 15, 14, 30)) is True


class TestWindows:
    def test_empty_windows_fail_closed(self):
        assert ACTIVE_WHEN_NO_WINDOWS is False
        assert is_within_schedule(_schedule("UTC"), MONDAY_1400_UTC) is False

    def test_day_must_match(self):
        assert is_within_schedule(_schedule("UTC", [(["Tue"], [0, 23])]), MONDAY_1400_UTC) is False
        assert is_within_schedule(_schedule("UTC", [(["Mon"], [0, 23])]), MONDAY_1400_UTC) is True

    @pytest.mark.parametrize(
        "hours,expected",
        [([14, 17], True), ([9, 14], True), ([14, 14], True), ([15, 17], False), ([9, 13], False)],
    )
    def test_hour_range_is_inclusive(self, hours, expected):
        sched = _schedule("UTC", [(["Mon"], hours)])
        assert is_within_schedule(sched, MONDAY_1400_UTC) is expected

    def test_minutes_are_ignored(self):
        sched = _schedule("UTC", [(["Mon"], [9, 14])])
        assert is_within_schedule(sched, datetime(2024, 1, 15, 14, 59, tzinfo=timezone.utc)) is True

    @pytest.mark.parametrize("hours", [[], [14], [10, 14, 18]])
    def test_malformed_hour_range_skips_window(self, hours):
        sched = _schedule("UTC", [(["Mon"], hours)])
        assert is_within_schedule(sched, MONDAY_1400_UTC) is False

    def test_malformed_window_does_not_hide_valid_one(self):
        sched = _schedule("UTC", [(["Mon"], [14]), (["Mon"], [12, 15])])
        assert is_within_schedule(sched, MONDAY_1400_UTC) is True

    def test_overnight_window_never_matches(self):
        # start > end is not wrapped around midnight
        late = datetime(2024, 1, 15, 23, 0, tzinfo=timezone.utc)
        early = datetime(2024, 1, 15, 3, 0, tzinfo=timezone.utc)
        sched = _schedule("UTC", [(["Mon"], [22, 6])])
        assert is_within_schedule(sched, late) is False
        assert is_within_schedule(sched, early) is False

    def test_any_window_suffices(self):
        sched = _schedule("UTC", [(["Sat", "Sun"], [0, 23]), (["Mon"], [13, 15])])
        assert is_within_schedule(sched, MONDAY_1400_UTC) is True

    def test_window_matches_helper(self):
        w = ActiveHours(days=["Mon"], hours=[1, 2])
        assert window_matches(w, "Mon", 1) is True
        assert window_matches(w, "mon", 1) is False
