"""
Monday-anchored week arithmetic for training periods.

Weeks run Monday to Sunday. Every period date in the planner is a calendar
date, so these helpers accept either a ``date`` or a ``datetime`` and always
hand back plain ``date`` values: a week "starts" at the beginning of its
Monday and "ends" at the end of its Sunday, both inclusive.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Union

from .errors import InvalidRangeError

DateLike = Union[date, datetime, str]

DAYS_PER_WEEK = 7


def as_date(value: Union[date, datetime]) -> date:
    """Drop the time component of a datetime; pass dates through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_date(value: DateLike, field_name: str = "date") -> date:
    """
    Coerce an ISO ``YYYY-MM-DD`` string, date or datetime into a date.

    Raises InvalidRangeError when the value cannot be read as a calendar
    date, which is how an unparsable boundary surfaces to callers.
    """
    if isinstance(value, (date, datetime)):
        return as_date(value)

    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip().split("T", 1)[0])
        except ValueError:
            pass

    raise InvalidRangeError(f"Unparsable {field_name}: {value!r}")


def week_start(value: Union[date, datetime]) -> date:
    """The Monday at or before ``value``."""
    day = as_date(value)
    # isoweekday: Monday=1 .. Sunday=7, so Sunday steps back six days
    offset = (day.isoweekday() + 6) % DAYS_PER_WEEK
    return day - timedelta(days=offset)


def week_end(value: Union[date, datetime]) -> date:
    """The Sunday closing the week that contains ``value`` (inclusive)."""
    return week_start(value) + timedelta(days=DAYS_PER_WEEK - 1)


def weeks_between(start: Union[date, datetime], end: Union[date, datetime]) -> int:
    """Number of calendar weeks spanned by an inclusive range, rounded up."""
    days = (as_date(end) - as_date(start)).days + 1
    if days <= 0:
        return 0
    return math.ceil(days / DAYS_PER_WEEK)


@dataclass(frozen=True)
class Week:
    """One Monday-aligned week, possibly clipped at the end of a range."""
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("Week end must not precede week start")

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, value: Union[date, datetime]) -> bool:
        return self.start <= as_date(value) <= self.end


class WeekRange:
    """
    Consecutive weeks covering ``range_start``'s week through ``range_end``.

    The sequence is lazy and restartable: each ``iter()`` walks the weeks
    again from the first Monday. The first week starts on the Monday at or
    before ``range_start``; the final week's end is clipped to ``range_end``.
    """

    def __init__(self, range_start: Union[date, datetime], range_end: Union[date, datetime]) -> None:
        self.range_start = as_date(range_start)
        self.range_end = as_date(range_end)
        self.aligned_start = week_start(self.range_start)

    def __len__(self) -> int:
        if self.range_end < self.range_start:
            return 0
        total_aligned_days = (self.range_end - self.aligned_start).days + 1
        if total_aligned_days <= 0:
            return 0
        return math.ceil(total_aligned_days / DAYS_PER_WEEK)

    def __iter__(self) -> Iterator[Week]:
        for index in range(len(self)):
            start = self.aligned_start + timedelta(weeks=index)
            end = min(start + timedelta(days=DAYS_PER_WEEK - 1), self.range_end)
            yield Week(start=start, end=end)

    def __repr__(self) -> str:
        return f"WeekRange({self.range_start.isoformat()}, {self.range_end.isoformat()}, weeks={len(self)})"


def decompose_into_weeks(
    range_start: Union[date, datetime],
    range_end: Union[date, datetime],
) -> WeekRange:
    """Split an inclusive date range into Monday-aligned weeks."""
    return WeekRange(range_start, range_end)
