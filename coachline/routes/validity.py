"""
Temporal validity of recurring schedules.

A schedule is calendar-valid on a day when the day falls inside its
inclusive [valid_from, valid_to] window and is not one of its exception
days. Every stage of the search pipeline asks this question through
`is_calendar_valid` so route matching and row projection can never disagree.
"""

from datetime import date, datetime
from enum import Enum
from typing import AbstractSet, Union

from coachline.models import Schedule, ScheduleTime


class DayCategory(str, Enum):
    WEEKDAY = "weekday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"
    HOLIDAY = "holiday"


def _as_date(day: Union[date, datetime]) -> date:
    return day.date() if isinstance(day, datetime) else day


def is_calendar_valid(schedule: Schedule, day: Union[date, datetime]) -> bool:
    day = _as_date(day)
    if not (schedule.valid_from <= day <= schedule.valid_to):
        return False
    return not any(exception.date == day for exception in schedule.exception_days)


def day_category(day: Union[date, datetime], holidays: AbstractSet[date] = frozenset()) -> DayCategory:
    """Classify a travel day; public holidays take precedence over the weekday"""
    day = _as_date(day)
    if day in holidays:
        return DayCategory.HOLIDAY
    weekday = day.weekday()
    if weekday == 5:
        return DayCategory.SATURDAY
    if weekday == 6:
        return DayCategory.SUNDAY
    return DayCategory.WEEKDAY


def is_active_on(schedule_time: ScheduleTime, category: DayCategory) -> bool:
    """Check the departure's day-pattern flag for the given day category"""
    if category == DayCategory.HOLIDAY:
        return bool(schedule_time.is_holiday_active)
    if category == DayCategory.SATURDAY:
        return bool(schedule_time.is_saturday_active)
    if category == DayCategory.SUNDAY:
        return bool(schedule_time.is_sunday_active)
    return bool(schedule_time.is_weekday_active)
