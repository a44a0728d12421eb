"""
Dictionary-backed period and session repositories.

Not suitable for production (no durability, no locking), but perfect for:
- Local development
- Unit tests
- CI environments
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional
from uuid import UUID

from ...core.periodization.models import Period
from ...core.workload.aggregator import CHRONIC_WINDOW_DAYS, local_day
from ...core.workload.models import TrainingSession

logger = logging.getLogger(__name__)


class InMemoryPeriodRepository:
    """PeriodRepository over a dict keyed by period id."""

    def __init__(self, periods: Iterable[Period] = ()) -> None:
        self._periods: dict[UUID, Period] = {p.id: p for p in periods}
        logger.info("Initialized in-memory period repository")

    def get(self, period_id: UUID) -> Optional[Period]:
        return self._periods.get(period_id)

    def list_for_owner(self, owner_id: str) -> list[Period]:
        return [p for p in self._periods.values() if p.owner_id == owner_id]

    def add(self, period: Period) -> None:
        if period.id in self._periods:
            raise KeyError(f"Period {period.id} already exists")
        self._periods[period.id] = period

    def add_many(self, periods: Iterable[Period]) -> None:
        periods = list(periods)
        duplicates = [p.id for p in periods if p.id in self._periods]
        if duplicates:
            raise KeyError(f"Periods already exist: {duplicates}")
        for period in periods:
            self._periods[period.id] = period

    def replace(self, period: Period) -> None:
        if period.id not in self._periods:
            raise KeyError(f"Period {period.id} does not exist")
        self._periods[period.id] = period

    def replace_many(self, periods: Iterable[Period]) -> None:
        periods = list(periods)
        missing = [p.id for p in periods if p.id not in self._periods]
        if missing:
            raise KeyError(f"Periods do not exist: {missing}")
        for period in periods:
            self._periods[period.id] = period

    def delete_many(self, period_ids: Iterable[UUID]) -> None:
        for period_id in list(period_ids):
            self._periods.pop(period_id, None)
        logger.debug("In-memory delete", extra={"remaining": len(self._periods)})

    def __len__(self) -> int:
        return len(self._periods)

    def _clear(self) -> None:
        """Clear all stored periods (for test cleanup)."""
        self._periods.clear()


class InMemorySessionRepository:
    """SessionSource over per-owner lists of sessions."""

    def __init__(self) -> None:
        self._sessions: dict[str, list[TrainingSession]] = defaultdict(list)

    def add_session(self, owner_id: str, session: TrainingSession) -> None:
        self._sessions[owner_id].append(session)

    def add_sessions(self, owner_id: str, sessions: Iterable[TrainingSession]) -> None:
        self._sessions[owner_id].extend(sessions)

    def fetch_sessions(
        self,
        owner_id: str,
        as_of: date,
        window_days: int = CHRONIC_WINDOW_DAYS,
    ) -> list[TrainingSession]:
        end = local_day(as_of)
        start = end - timedelta(days=window_days - 1)
        return [
            s for s in self._sessions.get(owner_id, [])
            if start <= local_day(s.date) <= end
        ]

    def _clear(self) -> None:
        self._sessions.clear()
