"""
Domain models for training-load monitoring.

Sessions come from the training diary and are read-only here. Everything
else in this module is derived on demand and never stored by the core.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union


DEFAULT_EXERTION = 5


class RiskZone(Enum):
    """ACWR bands, lowest to highest injury risk."""
    DETRAINING = "detraining"
    SAFETY = "safety"
    RISK = "risk"
    HIGH_RISK = "high-risk"


class Trend(Enum):
    """Direction of load over the last two weeks."""
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


@dataclass(frozen=True)
class TrainingSession:
    """
    One logged workout, as far as load is concerned.

    ``perceived_exertion`` is the athlete's 1-10 effort rating (PSE). It is
    optional because older diary entries often lack it.
    """
    date: Union[date, datetime]
    duration_minutes: float
    perceived_exertion: Optional[int] = None

    def __post_init__(self) -> None:
        if self.duration_minutes < 0:
            raise ValueError("Session duration cannot be negative")
        if self.perceived_exertion is not None and not 1 <= self.perceived_exertion <= 10:
            raise ValueError("Perceived exertion must be between 1 and 10")

    @property
    def has_exertion(self) -> bool:
        return self.perceived_exertion is not None

    def load(self, default_exertion: int = DEFAULT_EXERTION) -> float:
        """duration x exertion, with the default standing in for a missing rating."""
        exertion = self.perceived_exertion if self.has_exertion else default_exertion
        return self.duration_minutes * exertion


@dataclass(frozen=True)
class WorkloadSample:
    """
    Total load for one calendar day.

    ``imputed`` marks days where at least one session had no exertion
    rating and the default was used, so consumers can tell estimated load
    from measured load.
    """
    date: date
    load: float
    session_count: int = 1
    imputed: bool = False

    def __post_init__(self) -> None:
        if self.load < 0:
            raise ValueError("Load cannot be negative")


@dataclass(frozen=True)
class WeeklyLoad:
    """Load summed over a Sunday-anchored week."""
    week_start: date
    total_load: float
    session_count: int


@dataclass(frozen=True)
class AcwrPoint:
    """Acute/chronic state as of one day, for charting."""
    date: date
    acute_load: float
    chronic_load: float
    acwr: float
    risk_zone: RiskZone


@dataclass(frozen=True)
class WorkloadMetrics:
    """
    Injury-risk snapshot derived from recent load.

    ``acwr`` is the ratio of the raw 7-day and 28-day sums. It sits roughly
    four times lower than the average-based textbook ratio and the zone
    thresholds are tuned to this scale.
    """
    acute_load: float = 0.0
    chronic_load: float = 0.0
    acwr: float = 0.0
    risk_zone: RiskZone = RiskZone.DETRAINING
    risk_percentage: int = 0
    trend: Trend = Trend.STABLE
    recommendations: tuple[str, ...] = field(default_factory=tuple)
    imputed_days: int = 0

    @property
    def has_load(self) -> bool:
        return self.chronic_load > 0
