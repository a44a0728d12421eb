"""
Snowflake repository for training periods.

This module implements the PeriodRepository protocol over a single
TRAINING_PERIODS table. All three levels share the table; the LEVEL column
tells them apart and PARENT_ID links the tree.

Batch operations run on one cursor inside an explicit BEGIN ... COMMIT, so a
cascading delete either removes the whole subtree or nothing.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Iterable, Optional
from uuid import UUID

from training_planner.core.periodization.models import Period, PeriodLevel

from .sessions import SnowflakeConnection


logger = logging.getLogger(__name__)


_COLUMNS = """
    period_id,
    owner_id,
    parent_id,
    level,
    name,
    start_date,
    end_date,
    tag,
    description,
    goal,
    notes,
    week_number,
    created_at,
    updated_at
"""


class SnowflakePeriodRepository:
    """
    Repository for period persistence.

    Translates between ``Period`` values and flat rows. The hierarchy
    service never writes SQL; it asks the repository in domain terms.
    """

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def get(self, period_id: UUID) -> Optional[Period]:
        cursor = self._conn.cursor()
        try:
            cursor.execute(f"""
                SELECT {_COLUMNS}
                FROM training_periods
                WHERE period_id = %s
            """, (str(period_id),))
            row = cursor.fetchone()
        finally:
            cursor.close()

        return self._build_period(row) if row else None

    def list_for_owner(self, owner_id: str) -> list[Period]:
        cursor = self._conn.cursor()
        try:
            cursor.execute(f"""
                SELECT {_COLUMNS}
                FROM training_periods
                WHERE owner_id = %s
                ORDER BY start_date
            """, (owner_id,))
            rows = cursor.fetchall()
        finally:
            cursor.close()

        return [self._build_period(row) for row in rows]

    def add(self, period: Period) -> None:
        self.add_many([period])

    def add_many(self, periods: Iterable[Period]) -> None:
        periods = list(periods)
        with self._transaction("insert", len(periods)) as cursor:
            for period in periods:
                self._insert(cursor, period)

    def replace(self, period: Period) -> None:
        self.replace_many([period])

    def replace_many(self, periods: Iterable[Period]) -> None:
        periods = list(periods)
        with self._transaction("update", len(periods)) as cursor:
            for period in periods:
                self._update(cursor, period)

    def delete_many(self, period_ids: Iterable[UUID]) -> None:
        ids = [str(period_id) for period_id in period_ids]
        if not ids:
            return
        with self._transaction("delete", len(ids)) as cursor:
            for period_id in ids:
                cursor.execute(
                    "DELETE FROM training_periods WHERE period_id = %s",
                    (period_id,),
                )

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    @contextmanager
    def _transaction(self, operation: str, count: int) -> Generator:
        """Yield a cursor inside an explicit transaction, rolled back on any failure."""
        cursor = self._conn.cursor()
        try:
            cursor.execute("BEGIN")
            yield cursor
            self._conn.commit()
            logger.debug(
                "Period batch committed",
                extra={"operation": operation, "count": count}
            )
        except Exception as e:
            self._conn.rollback()
            logger.error(
                "Failed to write periods",
                extra={"operation": operation, "count": count, "error": str(e)}
            )
            raise
        finally:
            cursor.close()

    def _insert(self, cursor, period: Period) -> None:
        cursor.execute(f"""
            INSERT INTO training_periods ({_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        """, (
            str(period.id),
            period.owner_id,
            str(period.parent_id) if period.parent_id else None,
            period.level.value,
            period.name,
            period.start_date,
            period.end_date,
            period.tag,
            period.description,
            period.goal,
            period.notes,
            period.week_number,
            period.created_at,
            period.updated_at,
        ))

    def _update(self, cursor, period: Period) -> None:
        cursor.execute("""
            UPDATE training_periods SET
                name = %s,
                start_date = %s,
                end_date = %s,
                tag = %s,
                description = %s,
                goal = %s,
                notes = %s,
                updated_at = %s
            WHERE period_id = %s
        """, (
            period.name,
            period.start_date,
            period.end_date,
            period.tag,
            period.description,
            period.goal,
            period.notes,
            period.updated_at,
            str(period.id),
        ))

    def _build_period(self, row) -> Period:
        """Construct a Period from a row in ``_COLUMNS`` order."""
        return Period(
            id=UUID(row[0]),
            owner_id=row[1],
            parent_id=UUID(row[2]) if row[2] else None,
            level=PeriodLevel(row[3]),
            name=row[4],
            start_date=row[5],
            end_date=row[6],
            tag=row[7],
            description=row[8] or "",
            goal=row[9] or "",
            notes=row[10] or "",
            week_number=row[11],
            created_at=row[12],
            updated_at=row[13],
        )


SCHEMA_DDL = """
CREATE TABLE IF NOT EXISTS training_periods (
    period_id     VARCHAR(36)  NOT NULL PRIMARY KEY,
    owner_id      VARCHAR(255) NOT NULL,
    parent_id     VARCHAR(36),
    level         VARCHAR(16)  NOT NULL,
    name          VARCHAR(255) NOT NULL,
    start_date    DATE         NOT NULL,
    end_date      DATE         NOT NULL,
    tag           VARCHAR(32),
    description   VARCHAR,
    goal          VARCHAR,
    notes         VARCHAR,
    week_number   INTEGER,
    created_at    TIMESTAMP_NTZ NOT NULL,
    updated_at    TIMESTAMP_NTZ NOT NULL
)
"""
