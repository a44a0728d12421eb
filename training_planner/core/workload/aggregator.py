"""
Turns logged sessions into a daily load series and rolling window sums.

Acute load is the sum of the last 7 days, chronic load the sum of the last
28, both counted inclusively back from the reference day.

Weekly totals here are grouped by Sunday-started weeks, unlike the
Monday-started weeks used for period planning. Chart consumers rely on the
Sunday grouping, so the two anchors are kept independent.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Union

from .models import DEFAULT_EXERTION, TrainingSession, WeeklyLoad, WorkloadSample

ACUTE_WINDOW_DAYS = 7
CHRONIC_WINDOW_DAYS = 28


def local_day(value: Union[date, datetime]) -> date:
    """Calendar day in local time; aware datetimes are converted first."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def to_daily_samples(
    sessions: Iterable[TrainingSession],
    default_exertion: int = DEFAULT_EXERTION,
) -> list[WorkloadSample]:
    """
    One sample per day that has sessions, ascending by date.

    Same-day sessions are summed. Sessions without an exertion rating use
    ``default_exertion`` and flag the day's sample as imputed.
    """
    loads: dict[date, float] = defaultdict(float)
    counts: dict[date, int] = defaultdict(int)
    imputed: set[date] = set()

    for session in sessions:
        day = local_day(session.date)
        loads[day] += session.load(default_exertion)
        counts[day] += 1
        if not session.has_exertion:
            imputed.add(day)

    return [
        WorkloadSample(
            date=day,
            load=loads[day],
            session_count=counts[day],
            imputed=day in imputed,
        )
        for day in sorted(loads)
    ]


def samples_in_window(
    samples: Iterable[WorkloadSample],
    as_of: Union[date, datetime],
    days: int,
) -> list[WorkloadSample]:
    """Samples dated within ``[as_of - (days - 1), as_of]``, ascending."""
    end = local_day(as_of)
    start = end - timedelta(days=days - 1)
    return sorted(
        (s for s in samples if start <= s.date <= end),
        key=lambda s: s.date,
    )


def window_sum(
    samples: Iterable[WorkloadSample],
    as_of: Union[date, datetime],
    days: int,
) -> float:
    if days <= 0:
        return 0.0
    return float(sum(s.load for s in samples_in_window(samples, as_of, days)))


def acute_load(samples: Iterable[WorkloadSample], as_of: Union[date, datetime]) -> float:
    return window_sum(samples, as_of, ACUTE_WINDOW_DAYS)


def chronic_load(samples: Iterable[WorkloadSample], as_of: Union[date, datetime]) -> float:
    return window_sum(samples, as_of, CHRONIC_WINDOW_DAYS)


def sunday_week_start(value: Union[date, datetime]) -> date:
    """The Sunday at or before ``value``."""
    day = local_day(value)
    return day - timedelta(days=day.isoweekday() % 7)


def weekly_totals(samples: Iterable[WorkloadSample]) -> list[WeeklyLoad]:
    """Load and session count per Sunday-started week, ascending."""
    totals: dict[date, float] = defaultdict(float)
    counts: dict[date, int] = defaultdict(int)

    for sample in samples:
        start = sunday_week_start(sample.date)
        totals[start] += sample.load
        counts[start] += sample.session_count

    return [
        WeeklyLoad(week_start=start, total_load=totals[start], session_count=counts[start])
        for start in sorted(totals)
    ]


def daily_series(
    samples: Iterable[WorkloadSample],
    start: Union[date, datetime],
    end: Union[date, datetime],
) -> list[WorkloadSample]:
    """
    Every day from ``start`` to ``end`` inclusive, zero-filled.

    Rest days appear with ``load=0`` and ``session_count=0`` so charts get
    a continuous axis.
    """
    first = local_day(start)
    last = local_day(end)
    by_day = {s.date: s for s in samples}

    series: list[WorkloadSample] = []
    day = first
    while day <= last:
        series.append(by_day.get(day) or WorkloadSample(date=day, load=0.0, session_count=0))
        day += timedelta(days=1)
    return series
