"""
Storage interface for periods.

The hierarchy service depends on this protocol only. The in-memory
implementation lives in ``infrastructure.memory`` and the SQL one in
``infrastructure.snowflake``.
"""

from typing import Iterable, Optional, Protocol
from uuid import UUID

from .models import Period


class PeriodRepository(Protocol):
    """
    Persistence collaborator for the periodization hierarchy.

    Implementations must make ``delete_many`` atomic: either every id is
    removed or none is.
    """

    def get(self, period_id: UUID) -> Optional[Period]:
        """Return the stored period, or None."""
        ...

    def list_for_owner(self, owner_id: str) -> list[Period]:
        """All periods of one owner, any level."""
        ...

    def add(self, period: Period) -> None:
        ...

    def add_many(self, periods: Iterable[Period]) -> None:
        """Insert a batch in a single unit of work."""
        ...

    def replace(self, period: Period) -> None:
        """Overwrite the stored period that has the same id."""
        ...

    def replace_many(self, periods: Iterable[Period]) -> None:
        ...

    def delete_many(self, period_ids: Iterable[UUID]) -> None:
        ...
