from datetime import date, timedelta

import pytest

from hrdesk.services.leave_calculator import count_leave_days

MONDAY = date(2024, 3, 4)
SATURDAY = date(2024, 3, 9)
SUNDAY = date(2024, 3, 10)


@pytest.mark.parametrize("offset", range(5))
def test_single_weekday_counts_one(offset):
    day = MONDAY + timedelta(days=offset)
    assert count_leave_days(day, day) == 1


@pytest.mark.parametrize("day", [SATURDAY, SUNDAY])
def test_single_weekend_day_counts_zero(day):
    assert count_leave_days(day, day) == 0


def test_full_working_week():
    assert count_leave_days(MONDAY, MONDAY + timedelta(days=4)) == 5


def test_weekend_inside_range_is_free():
    # Thursday to next Tuesday: Thu, Fri, Mon, Tue
    assert count_leave_days(date(2024, 3, 7), date(2024, 3, 12)) == 4


def test_two_full_weeks():
    assert count_leave_days(MONDAY, MONDAY + timedelta(days=13)) == 10


def test_weekend_only_range_is_zero():
    assert count_leave_days(SATURDAY, SUNDAY) == 0


@pytest.mark.parametrize("start,end", [
    (MONDAY, MONDAY),
    (SATURDAY, SATURDAY),
    (MONDAY, MONDAY + timedelta(days=9)),
])
def test_half_day_is_always_half(start, end):
    assert count_leave_days(start, end, half_day=True) == 0.5


def test_range_ending_on_last_representable_date():
    # 9999-12-30 is a Thursday, 9999-12-31 a Friday
    assert count_leave_days(date(9999, 12, 27), date.max) == 5
    assert count_leave_days(date.max, date.max) == 1
