from datetime import date

import pytest

from examgrid.core.exceptions import SchedulerError
from examgrid.services.exam_calendar import (
    is_weekday,
    next_scheduling_day,
    validate_horizon,
    weekdays_between,
)


def test_weekdays_between_skips_weekends():
    # Friday 2026-03-06 through Tuesday 2026-03-10
    days = weekdays_between(date(2026, 3, 6), date(2026, 3, 10))
    assert days == [date(2026, 3, 6), date(2026, 3, 9), date(2026, 3, 10)]


def test_weekdays_between_single_day_and_weekend_only():
    assert weekdays_between(date(2026, 3, 2), date(2026, 3, 2)) == [date(2026, 3, 2)]
    assert weekdays_between(date(2026, 3, 7), date(2026, 3, 8)) == []


def test_weekdays_between_rejects_reversed_range():
    with pytest.raises(SchedulerError) as exc:
        weekdays_between(date(2026, 3, 10), date(2026, 3, 2))
    assert exc.value.details["start_date"] == "2026-03-10"


def test_is_weekday():
    assert is_weekday(date(2026, 3, 2))
    assert not is_weekday(date(2026, 3, 7))
    assert not is_weekday(date(2026, 3, 8))


def test_next_scheduling_day_crosses_weekend():
    days = weekdays_between(date(2026, 3, 2), date(2026, 3, 9))
    assert next_scheduling_day(days, date(2026, 3, 6)) == date(2026, 3, 9)
    assert next_scheduling_day(days, date(2026, 3, 9)) is None
    assert next_scheduling_day(days, date(2026, 3, 7)) is None


def test_validate_horizon_errors():
    with pytest.raises(SchedulerError, match="No weekdays available"):
        validate_horizon([])
    with pytest.raises(SchedulerError, match="strictly increasing"):
        validate_horizon([date(2026, 3, 3), date(2026, 3, 2)])
    with pytest.raises(SchedulerError, match="must be weekdays"):
        validate_horizon([date(2026, 3, 6), date(2026, 3, 7)])
    validate_horizon([date(2026, 3, 2), date(2026, 3, 3)])
