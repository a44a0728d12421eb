"""
Training periodization: macrocycles, mesocycles and microcycles.

Contains the Monday-anchored week helpers, the period models and the
hierarchy service that enforces the plan's invariants.
"""

from .errors import (
    InvalidParentError,
    InvalidRangeError,
    InvalidTagError,
    OutOfParentRangeError,
    OverlapError,
    PeriodError,
    PeriodNotFoundError,
)
from .hierarchy import PeriodHierarchy
from .models import (
    CurrentCycle,
    MacrocycleTag,
    MesocycleTag,
    MicrocycleTag,
    Period,
    PeriodLevel,
    allowed_tags,
)
from .repository import PeriodRepository
from .weeks import Week, WeekRange, decompose_into_weeks, parse_date, week_end, week_start

__all__ = [
    "InvalidParentError",
    "InvalidRangeError",
    "InvalidTagError",
    "OutOfParentRangeError",
    "OverlapError",
    "PeriodError",
    "PeriodNotFoundError",
    "PeriodHierarchy",
    "CurrentCycle",
    "MacrocycleTag",
    "MesocycleTag",
    "MicrocycleTag",
    "Period",
    "PeriodLevel",
    "allowed_tags",
    "PeriodRepository",
    "Week",
    "WeekRange",
    "decompose_into_weeks",
    "parse_date",
    "week_end",
    "week_start",
]
