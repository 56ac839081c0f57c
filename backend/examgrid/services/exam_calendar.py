from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta

from examgrid.core.exceptions import SchedulerError


def is_weekday(day: date) -> bool:
    return day.weekday() < 5


def weekdays_between(start_date: date, end_date: date) -> list[date]:
    """Return every Monday-Friday date in ``[start_date, end_date]``, ascending."""
    if start_date > end_date:
        raise SchedulerError(
            message="Start date must not be after end date",
            details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )
    days: list[date] = []
    current = start_date
    while current <= end_date:
        if is_weekday(current):
            days.append(current)
        current += timedelta(days=1)
    return days


def next_scheduling_day(days: Sequence[date], day: date) -> date | None:
    try:
        index = days.index(day)
    except ValueError:
        return None
    if index + 1 < len(days):
        return days[index + 1]
    return None


def validate_horizon(days: Sequence[date]) -> None:
    if not days:
        raise SchedulerError(message="No weekdays available in the timetable date range")
    for previous, current in zip(days, days[1:]):
        if current <= previous:
            raise SchedulerError(
                message="Scheduling days must be strictly increasing",
                details={"previous": previous.isoformat(), "current": current.isoformat()},
            )
    weekend = [day.isoformat() for day in days if not is_weekday(day)]
    if weekend:
        raise SchedulerError(message="Scheduling days must be weekdays", details={"dates": weekend})
