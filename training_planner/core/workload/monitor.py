"""
Training-load monitoring service.

Glues a session source to the aggregator and risk engine. The source is a
protocol, so the monitor does not care whether sessions come from
Snowflake, memory, or a test fixture.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Protocol, Union

from . import aggregator, risk
from .aggregator import CHRONIC_WINDOW_DAYS
from .models import DEFAULT_EXERTION, AcwrPoint, TrainingSession, WeeklyLoad, WorkloadMetrics, WorkloadSample

logger = logging.getLogger(__name__)


class SessionSource(Protocol):
    """Anything that can hand over an athlete's recent sessions."""

    def fetch_sessions(
        self,
        owner_id: str,
        as_of: date,
        window_days: int = CHRONIC_WINDOW_DAYS,
    ) -> list[TrainingSession]:
        """Sessions dated within ``[as_of - (window_days - 1), as_of]``."""
        ...


class LoadMonitor:
    """
    Computes load metrics for an athlete on request.

    Stateless apart from its configuration; every call fetches a fresh
    snapshot and runs the pure pipeline over it.
    """

    def __init__(
        self,
        session_source: SessionSource,
        default_exertion: int = DEFAULT_EXERTION,
        clamp_percentage: bool = False,
        window_days: int = CHRONIC_WINDOW_DAYS,
    ) -> None:
        if not 1 <= default_exertion <= 10:
            raise ValueError("default_exertion must be between 1 and 10")
        self._source = session_source
        self._default_exertion = default_exertion
        self._clamp_percentage = clamp_percentage
        self._window_days = max(window_days, CHRONIC_WINDOW_DAYS)

    def samples(self, owner_id: str, as_of: Union[date, datetime], window_days: int) -> list[WorkloadSample]:
        day = aggregator.local_day(as_of)
        sessions = self._source.fetch_sessions(owner_id, day, window_days)
        return aggregator.to_daily_samples(sessions, self._default_exertion)

    def metrics(self, owner_id: str, as_of: Union[date, datetime]) -> WorkloadMetrics:
        """Risk snapshot for one athlete as of a day."""
        samples = self.samples(owner_id, as_of, self._window_days)
        metrics = risk.compute_metrics(samples, as_of, clamp_percentage=self._clamp_percentage)

        logger.info(
            "Workload metrics computed",
            extra={
                "owner_id": owner_id,
                "as_of": aggregator.local_day(as_of).isoformat(),
                "acwr": round(metrics.acwr, 3),
                "risk_zone": metrics.risk_zone.value,
                "trend": metrics.trend.value,
                "sample_days": len(samples),
            }
        )
        return metrics

    def daily(self, owner_id: str, as_of: Union[date, datetime], days: int = 7) -> list[WorkloadSample]:
        """Zero-filled per-day load for the last ``days`` days."""
        end = aggregator.local_day(as_of)
        samples = self.samples(owner_id, end, days)
        return aggregator.daily_series(samples, end - timedelta(days=days - 1), end)

    def weekly(self, owner_id: str, as_of: Union[date, datetime], weeks: int = 4) -> list[WeeklyLoad]:
        """Sunday-anchored weekly totals covering the last ``weeks`` weeks."""
        end = aggregator.local_day(as_of)
        first_week = aggregator.sunday_week_start(end) - timedelta(weeks=weeks - 1)
        samples = self.samples(owner_id, end, (end - first_week).days + 1)
        return aggregator.weekly_totals(samples)

    def history(self, owner_id: str, as_of: Union[date, datetime], days: int = 28) -> list[AcwrPoint]:
        """Daily ACWR points for the last ``days`` days."""
        end = aggregator.local_day(as_of)
        start = end - timedelta(days=days - 1)
        # each point looks back a full chronic window from its own day
        samples = self.samples(owner_id, end, days + CHRONIC_WINDOW_DAYS - 1)
        return risk.acwr_history(samples, start, end)
