"""
Snowflake repository for logged training sessions.

The training diary owns this table; the planner only reads completed
sessions from it to feed the load monitor. Rows are translated into
``TrainingSession`` values and nothing is ever written back.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Protocol

from training_planner.core.workload.aggregator import CHRONIC_WINDOW_DAYS
from training_planner.core.workload.models import TrainingSession


logger = logging.getLogger(__name__)


class SnowflakeConnection(Protocol):
    """
    Protocol for Snowflake connections.

    Using a protocol means tests can provide a fake without
    importing the actual snowflake-connector-python.
    """

    def cursor(self): ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


@dataclass
class SnowflakeConfig:
    """Configuration for Snowflake connection."""
    account: str
    user: str
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    private_key_base64: Optional[str] = None
    database: str = "TRAINING"
    schema: str = "PLANNING"
    warehouse: str = "COMPUTE_WH"
    role: Optional[str] = None


class TrainingSessionRepository:
    """
    Read-only access to the diary's training sessions.

    Implements the load monitor's SessionSource protocol.
    """

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def fetch_sessions(
        self,
        owner_id: str,
        as_of: date,
        window_days: int = CHRONIC_WINDOW_DAYS,
    ) -> list[TrainingSession]:
        """
        Completed sessions dated within the trailing window.

        Rows with a missing duration are skipped; a missing effort rating is
        kept as None so the aggregator can flag the imputed load.
        """
        start = as_of - timedelta(days=window_days - 1)
        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                SELECT training_date, duration_minutes, perceived_effort
                FROM training_sessions
                WHERE user_id = %s
                  AND status = 'completed'
                  AND training_date BETWEEN %s AND %s
                ORDER BY training_date
            """, (owner_id, start, as_of))

            rows = cursor.fetchall()
        finally:
            cursor.close()

        sessions = []
        skipped = 0
        for row in rows:
            session = self._build_session(row)
            if session is None:
                skipped += 1
                continue
            sessions.append(session)

        logger.debug(
            "Fetched training sessions",
            extra={
                "owner_id": owner_id,
                "window_days": window_days,
                "count": len(sessions),
                "skipped": skipped,
            }
        )
        return sessions

    def _build_session(self, row) -> Optional[TrainingSession]:
        training_date, duration, effort = row[0], row[1], row[2]
        if duration is None or duration < 0:
            return None

        if effort is not None:
            effort = int(effort)
            if not 1 <= effort <= 10:
                logger.warning(
                    "Discarding out-of-range effort rating",
                    extra={"training_date": str(training_date), "effort": effort}
                )
                effort = None

        return TrainingSession(
            date=training_date,
            duration_minutes=float(duration),
            perceived_exertion=effort,
        )
