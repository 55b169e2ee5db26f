from datetime import datetime, timedelta

import pytest

from core.exceptions import BusinessWindowException, ConfigurationException
from sla_insights.domain import BusinessCalendar, BusinessDurationCalculator

from conftest import MONDAY_9AM, local


def test_same_day_inside_window(calculator):
    assert calculator.business_minutes(local(2026, 10, 5, 9), local(2026, 10, 5, 10, 30)) == 90


def test_equal_instants_are_zero(calculator):
    assert calculator.business_minutes(MONDAY_9AM, MONDAY_9AM) == 0


def test_end_before_start_is_none(calculator):
    assert calculator.business_minutes(local(2026, 10, 6, 9), local(2026, 10, 5, 9)) is None


def test_missing_bound_is_none(calculator):
    assert calculator.business_minutes(None, MONDAY_9AM) is None
    assert calculator.business_minutes(MONDAY_9AM, None) is None


def test_overnight_is_clipped_to_window(calculator):
    assert calculator.business_minutes(local(2026, 10, 5, 16), local(2026, 10, 6, 9)) == 120


def test_outside_window_same_day_is_zero(calculator):
    assert calculator.business_minutes(local(2026, 10, 5, 6), local(2026, 10, 5, 7, 30)) == 0
    assert calculator.business_minutes(local(2026, 10, 5, 18), local(2026, 10, 5, 23)) == 0


def test_non_working_day_is_zero(calculator):
    # Saturday and the Columbus Day holiday
    assert calculator.business_minutes(local(2026, 10, 10, 10), local(2026, 10, 10, 15)) == 0
    assert calculator.business_minutes(local(2026, 10, 12, 8), local(2026, 10, 12, 17)) == 0


def test_weekend_and_holiday_are_skipped(calculator):
    # Friday 16:00 to Tuesday 09:00 across a weekend and Columbus Day
    assert calculator.business_minutes(local(2026, 10, 9, 16), local(2026, 10, 13, 9)) == 120


def test_full_week(calculator):
    # Monday 08:00 to the next Monday 08:00; five full days
    assert calculator.business_minutes(local(2026, 10, 19, 8), local(2026, 10, 26, 8)) == 5 * 9 * 60


def test_naive_datetimes_are_utc(calculator):
    # 15:00 UTC is 09:00 Mountain Daylight Time
    start = datetime(2026, 10, 5, 15, 0)
    assert calculator.business_minutes(start, start + timedelta(hours=1)) == 60


def test_across_daylight_saving_change(calculator):
    # Friday 16:00 MDT to Monday 09:00 MST
    assert calculator.business_minutes(local(2026, 10, 30, 16), local(2026, 11, 2, 9)) == 120


def test_partial_minutes_are_truncated(calculator):
    start = local(2026, 10, 5, 9)
    assert calculator.business_minutes(start, start + timedelta(seconds=119)) == 1


def test_minutes_never_decrease_as_end_moves_later(calculator):
    start = local(2026, 10, 8, 14, 15)
    previous = 0
    for step in range(0, 24 * 12 * 6):
        end = start + timedelta(minutes=5 * step)
        minutes = calculator.business_minutes(start, end)
        assert minutes >= previous
        previous = minutes


def test_custom_window():
    calculator = BusinessDurationCalculator(BusinessCalendar(), start_hour=9, end_hour=12)
    assert calculator.business_minutes(local(2026, 10, 5, 8), local(2026, 10, 6, 10)) == 240


@pytest.mark.parametrize("start_hour,end_hour", [(17, 8), (9, 9), (-1, 5), (8, 25)])
def test_invalid_window_is_rejected(start_hour, end_hour):
    with pytest.raises(BusinessWindowException) as excinfo:
        BusinessDurationCalculator(BusinessCalendar(), start_hour=start_hour, end_hour=end_hour)
    assert isinstance(excinfo.value, ConfigurationException)
    assert excinfo.value.details == {"start_hour": start_hour, "end_hour": end_hour}


def test_interval_ending_on_last_representable_day(calculator):
    assert calculator.business_minutes(local(9999, 12, 30, 9), local(9999, 12, 31, 10)) == 600


def test_window_closing_at_midnight():
    calculator = BusinessDurationCalculator(BusinessCalendar(), start_hour=20, end_hour=24)
    assert calculator.business_minutes(local(2026, 10, 5, 21), local(2026, 10, 6, 21)) == 4 * 60
