"""
Periodization hierarchy service.

Owns the rules that keep an athlete's plan tree consistent:
- start strictly before end for every period
- no overlap between siblings (same owner, same parent, same level)
- parents of the right level, belonging to the same owner
- top-down cascading deletes
- weekly decomposition of a period into draft sub-periods

The service is bound to one owner and one repository. It holds no state of
its own beyond those two references, so callers create one per request.
Every mutation validates first and writes last; a rejected call leaves the
repository untouched.
"""

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Iterable, Optional, Union
from uuid import UUID

from .errors import (
    InvalidParentError,
    OutOfParentRangeError,
    OverlapError,
    PeriodNotFoundError,
)
from .models import CurrentCycle, Period, PeriodLevel, normalize_tag
from .repository import PeriodRepository
from .weeks import DateLike, decompose_into_weeks, parse_date

logger = logging.getLogger(__name__)


class PeriodHierarchy:
    """
    Planning operations over one owner's macro/meso/microcycles.

    Assumes a single writer per owner: the overlap check reads siblings and
    then writes, so concurrent writers for the same owner must be serialized
    by the integrating layer.
    """

    MUTABLE_FIELDS = frozenset({
        "name",
        "start_date",
        "end_date",
        "tag",
        "description",
        "goal",
        "notes",
    })

    def __init__(
        self,
        repository: PeriodRepository,
        owner_id: str,
        enforce_containment: bool = False,
    ) -> None:
        if not owner_id:
            raise ValueError("owner_id is required")
        self._repository = repository
        self._owner_id = owner_id
        self._enforce_containment = enforce_containment

    @property
    def owner_id(self) -> str:
        return self._owner_id

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def find(self, period_id: UUID) -> Optional[Period]:
        """Owner-scoped lookup; periods of other owners are invisible."""
        period = self._repository.get(period_id)
        if period is None or period.owner_id != self._owner_id:
            return None
        return period

    def get(self, period_id: UUID) -> Period:
        period = self.find(period_id)
        if period is None:
            raise PeriodNotFoundError(f"Period {period_id} not found")
        return period

    def list_periods(
        self,
        level: Optional[PeriodLevel] = None,
        parent_id: Optional[UUID] = None,
    ) -> list[Period]:
        """Periods ordered by start date, optionally filtered."""
        periods = self._owned()
        if level is not None:
            periods = [p for p in periods if p.level == PeriodLevel(level)]
        if parent_id is not None:
            periods = [p for p in periods if p.parent_id == parent_id]
        return sorted(periods, key=lambda p: (p.start_date, p.end_date))

    def children(self, period_id: UUID) -> list[Period]:
        parent = self.get(period_id)
        return self.list_periods(parent_id=parent.id)

    def current_cycle(self, on: Optional[Union[date, datetime, str]] = None) -> CurrentCycle:
        """Find the macro/meso/microcycle running on a given day (today by default)."""
        day = parse_date(on, "on") if on is not None else date.today()
        periods = self.list_periods()

        def first_at(level: PeriodLevel) -> Optional[Period]:
            return next(
                (p for p in periods if p.level == level and p.contains(day)),
                None,
            )

        return CurrentCycle(
            on=day,
            macrocycle=first_at(PeriodLevel.MACROCYCLE),
            mesocycle=first_at(PeriodLevel.MESOCYCLE),
            microcycle=first_at(PeriodLevel.MICROCYCLE),
        )

    # -----------------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------------

    def create(
        self,
        level: Union[PeriodLevel, str],
        name: str,
        start_date: DateLike,
        end_date: DateLike,
        tag: Any = None,
        parent_id: Optional[UUID] = None,
        description: str = "",
        goal: str = "",
        notes: str = "",
        week_number: Optional[int] = None,
    ) -> Period:
        """
        Create and persist a period.

        Raises InvalidRangeError, OverlapError, InvalidParentError,
        InvalidTagError or PeriodNotFoundError (unknown parent).
        """
        level = PeriodLevel(level)
        if not name or not name.strip():
            raise ValueError("Period name cannot be empty")

        period = Period(
            owner_id=self._owner_id,
            level=level,
            name=name.strip(),
            start_date=parse_date(start_date, "start_date"),
            end_date=parse_date(end_date, "end_date"),
            parent_id=parent_id,
            tag=normalize_tag(level, tag),
            description=description,
            goal=goal,
            notes=notes,
            week_number=week_number,
        )

        periods = self._owned()
        parent = self._resolve_parent(period, periods)
        self._check_placement(period, periods, parent)

        self._repository.add(period)

        logger.info(
            "Period created",
            extra={
                "owner_id": self._owner_id,
                "period_id": str(period.id),
                "level": level.value,
                "start_date": period.start_date.isoformat(),
                "end_date": period.end_date.isoformat(),
            }
        )
        return period

    def update(self, period_id: UUID, **fields: Any) -> Period:
        """
        Replace mutable fields of a stored period.

        Re-runs the create validations, excluding the period itself from the
        overlap check. Unknown ids raise PeriodNotFoundError.
        """
        unknown = set(fields) - self.MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        current = self.get(period_id)

        changes: dict[str, Any] = dict(fields)
        if "start_date" in changes:
            changes["start_date"] = parse_date(changes["start_date"], "start_date")
        if "end_date" in changes:
            changes["end_date"] = parse_date(changes["end_date"], "end_date")
        if "tag" in changes:
            changes["tag"] = normalize_tag(current.level, changes["tag"])
        if "name" in changes:
            if not changes["name"] or not str(changes["name"]).strip():
                raise ValueError("Period name cannot be empty")
            changes["name"] = str(changes["name"]).strip()

        # replace() re-runs Period.__post_init__, which enforces start < end
        updated = replace(current, updated_at=datetime.utcnow(), **changes)

        periods = self._owned()
        parent = self._resolve_parent(updated, periods)
        self._check_placement(updated, periods, parent)
        if self._enforce_containment:
            self._check_children_fit(updated, periods)

        self._repository.replace(updated)

        logger.info(
            "Period updated",
            extra={
                "owner_id": self._owner_id,
                "period_id": str(period_id),
                "fields": sorted(fields),
            }
        )
        return updated

    def delete(self, period_id: UUID) -> int:
        """
        Delete a period and everything beneath it.

        Children are removed before their parents, all in one repository
        batch. Deleting an unknown id is a no-op. Returns the number of
        periods removed.
        """
        period = self.find(period_id)
        if period is None:
            logger.debug(
                "Delete of unknown period ignored",
                extra={"owner_id": self._owner_id, "period_id": str(period_id)}
            )
            return 0

        doomed = self._subtree_post_order(period, self._owned())
        self._repository.delete_many([p.id for p in doomed])

        logger.info(
            "Period deleted",
            extra={
                "owner_id": self._owner_id,
                "period_id": str(period_id),
                "level": period.level.value,
                "removed": len(doomed),
            }
        )
        return len(doomed)

    # -----------------------------------------------------------------------
    # Weekly decomposition
    # -----------------------------------------------------------------------

    def generate_sub_periods(self, parent_id: UUID, tag: Any = None) -> list[Period]:
        """
        Draft one child period per Monday-aligned week of the parent.

        A macrocycle yields mesocycle drafts, a mesocycle yields microcycle
        drafts. Nothing is persisted; pass the drafts to ``commit`` once the
        caller has confirmed (and usually tagged) them.

        The first week is clipped up to the parent's start and the last to
        its end. Weeks that end up outside the parent, or shrink to a single
        day, are left out because they could never be created.
        """
        parent = self.get(parent_id)
        child_level = parent.level.child_level
        if child_level is None:
            raise InvalidParentError(f"A {parent.level.value} cannot be subdivided")

        child_tag = normalize_tag(child_level, tag)

        drafts: list[Period] = []
        for week in decompose_into_weeks(parent.start_date, parent.end_date):
            start = max(week.start, parent.start_date)
            end = min(week.end, parent.end_date)
            if start >= end:
                continue

            number = len(drafts) + 1
            drafts.append(Period(
                owner_id=self._owner_id,
                level=child_level,
                name=f"Week {number}",
                start_date=start,
                end_date=end,
                parent_id=parent.id,
                tag=child_tag,
                week_number=number,
            ))

        logger.info(
            "Generated weekly drafts",
            extra={
                "owner_id": self._owner_id,
                "parent_id": str(parent.id),
                "level": child_level.value,
                "count": len(drafts),
            }
        )
        return drafts

    def assign_tag(self, periods: Iterable[Period], tag: Any) -> list[Period]:
        """
        Label a batch of periods with one classification.

        Works on drafts and on stored periods alike. Stored periods are
        rewritten in a single repository batch; drafts are only relabelled.
        All tags are validated before anything is written.
        """
        periods = list(periods)
        for period in periods:
            if period.owner_id != self._owner_id:
                raise PeriodNotFoundError(f"Period {period.id} not found")

        tags = [normalize_tag(period.level, tag) for period in periods]

        now = datetime.utcnow()
        tagged: list[Period] = []
        persisted: list[Period] = []
        for period, new_tag in zip(periods, tags):
            stored = self.find(period.id)
            if stored is not None:
                updated = replace(stored, tag=new_tag, updated_at=now)
                persisted.append(updated)
            else:
                updated = replace(period, tag=new_tag)
            tagged.append(updated)

        if persisted:
            self._repository.replace_many(persisted)

        logger.info(
            "Tag assigned",
            extra={
                "owner_id": self._owner_id,
                "tag": tags[0] if tags else None,
                "count": len(tagged),
                "persisted": len(persisted),
            }
        )
        return tagged

    def commit(self, drafts: Iterable[Period]) -> list[Period]:
        """
        Persist confirmed drafts, all or nothing.

        Each draft is checked against stored periods and against the drafts
        accepted before it in the same batch.
        """
        drafts = list(drafts)
        periods = self._owned()
        stored_ids = {p.id for p in periods}
        accepted: list[Period] = []

        for draft in drafts:
            if draft.owner_id != self._owner_id:
                raise ValueError(f"Draft {draft.id} belongs to another owner")
            if draft.id in stored_ids or any(a.id == draft.id for a in accepted):
                raise OverlapError(
                    f"Period {draft.id} has already been committed",
                    conflicting_id=draft.id,
                )

            draft = replace(draft, tag=normalize_tag(draft.level, draft.tag))
            known = periods + accepted
            parent = self._resolve_parent(draft, known)
            self._check_placement(draft, known, parent)
            accepted.append(draft)

        if accepted:
            self._repository.add_many(accepted)

        logger.info(
            "Drafts committed",
            extra={"owner_id": self._owner_id, "count": len(accepted)}
        )
        return accepted

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _owned(self) -> list[Period]:
        return list(self._repository.list_for_owner(self._owner_id))

    def _resolve_parent(self, period: Period, periods: list[Period]) -> Optional[Period]:
        expected = period.level.parent_level

        if expected is None:
            if period.parent_id is not None:
                raise InvalidParentError("A macrocycle cannot have a parent")
            return None

        if period.parent_id is None:
            raise InvalidParentError(
                f"A {period.level.value} requires a {expected.value} parent"
            )

        parent = next((p for p in periods if p.id == period.parent_id), None)
        if parent is None:
            raise PeriodNotFoundError(f"Parent period {period.parent_id} not found")
        if parent.level != expected:
            raise InvalidParentError(
                f"A {period.level.value} must belong to a {expected.value}, "
                f"not a {parent.level.value}"
            )
        return parent

    def _check_placement(
        self,
        period: Period,
        periods: list[Period],
        parent: Optional[Period],
    ) -> None:
        if self._enforce_containment and parent is not None:
            if not parent.encloses(period.start_date, period.end_date):
                raise OutOfParentRangeError(
                    f"{period.level.value.capitalize()} must lie within its "
                    f"{parent.level.value} ({parent.start_date.isoformat()} to "
                    f"{parent.end_date.isoformat()})"
                )

        for sibling in periods:
            if sibling.id == period.id:
                continue
            if sibling.level != period.level or sibling.parent_id != period.parent_id:
                continue
            if sibling.overlaps(period.start_date, period.end_date):
                logger.warning(
                    "Period overlaps a sibling",
                    extra={
                        "owner_id": self._owner_id,
                        "period_id": str(period.id),
                        "conflicting_id": str(sibling.id),
                    }
                )
                raise OverlapError(
                    f"Dates overlap {sibling.level.value} '{sibling.name}' "
                    f"({sibling.start_date.isoformat()} to {sibling.end_date.isoformat()})",
                    conflicting_id=sibling.id,
                )

    def _check_children_fit(self, period: Period, periods: list[Period]) -> None:
        for child in periods:
            if child.parent_id != period.id:
                continue
            if not period.encloses(child.start_date, child.end_date):
                raise OutOfParentRangeError(
                    f"{child.level.value.capitalize()} '{child.name}' would fall "
                    f"outside the new range"
                )

    def _subtree_post_order(self, root: Period, periods: list[Period]) -> list[Period]:
        ordered: list[Period] = []
        for child in periods:
            if child.parent_id == root.id:
                ordered.extend(self._subtree_post_order(child, periods))
        ordered.append(root)
        return ordered
