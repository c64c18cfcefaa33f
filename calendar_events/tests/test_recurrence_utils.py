import datetime

import pytest
from dateutil.rrule import SU, WE

from calendar_events.constants import RecurrenceFrequency
from calendar_events.exceptions import InvalidDateRangeError, RecurrenceTooLongError
from calendar_events.recurrence_utils import (
    RecurrenceExpander,
    RecurrenceRule,
    to_dateutil_weekday,
)


def _d(year, month, day):
    return datetime.date(year, month, day)


@pytest.fixture
def expander():
    return RecurrenceExpander(max_span_days=365)


def test_daily_with_interval(expander):
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.DAILY,
        start_date=_d(2024, 1, 1),
        until_date=_d(2024, 1, 7),
        interval=2,
    )

    assert expander.expand(rule) == [
        _d(2024, 1, 1),
        _d(2024, 1, 3),
        _d(2024, 1, 5),
        _d(2024, 1, 7),
    ]


@pytest.mark.parametrize(
    ("interval", "span_days"),
    [
        (1, 0),
        (1, 30),
        (2, 31),
        (3, 10),
        (7, 100),
        (10, 365),
        (1, 365),
        (366, 365),
    ],
)
def test_daily_count_and_spacing_follow_interval(expander, interval, span_days):
    start = _d(2023, 3, 15)
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.DAILY,
        start_date=start,
        until_date=start + datetime.timedelta(days=span_days),
        interval=interval,
    )

    dates = expander.expand(rule)

    assert len(dates) == span_days // interval + 1
    assert dates[0] == start
    assert all(
        (later - earlier).days == interval for earlier, later in zip(dates, dates[1:])
    )
    assert dates[-1] <= rule.until_date


def test_start_equal_to_until_yields_single_date(expander):
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.DAILY,
        start_date=_d(2024, 3, 10),
        until_date=_d(2024, 3, 10),
    )

    assert expander.expand(rule) == [_d(2024, 3, 10)]


def test_weekly_monday_wednesday_friday_over_january(expander):
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.WEEKLY,
        start_date=_d(2024, 1, 1),
        until_date=_d(2024, 1, 31),
        days_of_week=(1, 3, 5),
    )

    dates = expander.expand(rule)

    # 5 Mondays, 5 Wednesdays and 4 Fridays, both ends inclusive
    assert len(dates) == 14
    assert dates[0] == _d(2024, 1, 1)
    assert dates[-1] == _d(2024, 1, 31)
    assert {date.isoweekday() for date in dates} == {1, 3, 5}
    assert dates == sorted(dates)


def test_weekly_without_days_uses_start_weekday(expander):
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.WEEKLY,
        start_date=_d(2024, 1, 3),
        until_date=_d(2024, 1, 24),
    )

    assert expander.expand(rule) == [
        _d(2024, 1, 3),
        _d(2024, 1, 10),
        _d(2024, 1, 17),
        _d(2024, 1, 24),
    ]


def test_weekly_interval_counts_weeks_starting_on_sunday(expander):
    # Week of the start date begins on Sunday 2023-12-31, which is before the start date
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.WEEKLY,
        start_date=_d(2024, 1, 3),
        until_date=_d(2024, 1, 31),
        interval=2,
        days_of_week=(0, 3),
    )

    assert expander.expand(rule) == [
        _d(2024, 1, 3),
        _d(2024, 1, 14),
        _d(2024, 1, 17),
        _d(2024, 1, 28),
        _d(2024, 1, 31),
    ]


def test_weekly_duplicate_days_are_not_repeated(expander):
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.WEEKLY,
        start_date=_d(2024, 1, 1),
        until_date=_d(2024, 1, 14),
        days_of_week=(1, 1),
    )

    assert expander.expand(rule) == [_d(2024, 1, 1), _d(2024, 1, 8)]


def test_monthly_clamps_to_last_day_without_drifting(expander):
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.MONTHLY,
        start_date=_d(2024, 1, 31),
        until_date=_d(2024, 5, 31),
    )

    assert expander.expand(rule) == [
        _d(2024, 1, 31),
        _d(2024, 2, 29),
        _d(2024, 3, 31),
        _d(2024, 4, 30),
        _d(2024, 5, 31),
    ]


def test_monthly_with_interval(expander):
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.MONTHLY,
        start_date=_d(2024, 1, 15),
        until_date=_d(2024, 7, 1),
        interval=3,
    )

    assert expander.expand(rule) == [_d(2024, 1, 15), _d(2024, 4, 15)]


def test_yearly_leap_day_clamps_to_february_28(expander):
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.YEARLY,
        start_date=_d(2024, 2, 29),
        until_date=_d(2025, 2, 28),
    )

    assert expander.expand(rule) == [_d(2024, 2, 29), _d(2025, 2, 28)]


def test_until_before_start_raises(expander):
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.DAILY,
        start_date=_d(2024, 1, 10),
        until_date=_d(2024, 1, 9),
    )

    with pytest.raises(InvalidDateRangeError):
        expander.expand(rule)


def test_span_of_exactly_365_days_is_accepted(expander):
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.DAILY,
        start_date=_d(2024, 1, 1),
        until_date=_d(2024, 12, 31),
    )

    dates = expander.expand(rule)

    assert len(dates) == 366
    assert dates[-1] == _d(2024, 12, 31)


def test_span_longer_than_365_days_raises(expander):
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.MONTHLY,
        start_date=_d(2024, 1, 1),
        until_date=_d(2025, 1, 1),
    )

    with pytest.raises(RecurrenceTooLongError):
        expander.expand(rule)


def test_max_span_defaults_to_setting(settings):
    settings.CALENDAR_RECURRENCE_MAX_SPAN_DAYS = 30
    rule = RecurrenceRule(
        frequency=RecurrenceFrequency.DAILY,
        start_date=_d(2024, 1, 1),
        until_date=_d(2024, 2, 15),
    )

    with pytest.raises(RecurrenceTooLongError):
        RecurrenceExpander().expand(rule)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"frequency": "hourly"},
        {"interval": 0},
        {"days_of_week": (7,)},
    ],
)
def test_malformed_rule_is_rejected(kwargs):
    params = {
        "frequency": RecurrenceFrequency.DAILY,
        "start_date": _d(2024, 1, 1),
        "until_date": _d(2024, 1, 2),
        **kwargs,
    }

    with pytest.raises(ValueError):
        RecurrenceRule(**params)


def test_to_dateutil_weekday_maps_sunday_first_days():
    assert to_dateutil_weekday(0) == SU
    assert to_dateutil_weekday(3) == WE
