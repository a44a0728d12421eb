"""
Unit tests for the periodization hierarchy service.

These tests run the real service against the in-memory repository. No
database, no HTTP.

Testing philosophy:
- Test behavior, not implementation
- Each test should have a clear "given/when/then" structure
- Prefer real objects over mocks where practical
"""

from datetime import date
from uuid import uuid4

import pytest

from training_planner.core.periodization import (
    InvalidParentError,
    InvalidRangeError,
    InvalidTagError,
    MesocycleTag,
    OutOfParentRangeError,
    OverlapError,
    PeriodHierarchy,
    PeriodLevel,
    PeriodNotFoundError,
)
from training_planner.infrastructure.memory import InMemoryPeriodRepository


OWNER = "athlete-1"


@pytest.fixture
def repository():
    return InMemoryPeriodRepository()


@pytest.fixture
def hierarchy(repository):
    return PeriodHierarchy(repository, OWNER)


@pytest.fixture
def season(hierarchy):
    """A first-quarter macrocycle."""
    return hierarchy.create(
        PeriodLevel.MACROCYCLE,
        "Season 2024",
        "2024-01-01",
        "2024-03-31",
        tag="trimestral",
    )


def _mesocycle(hierarchy, parent, start, end, name="Block"):
    return hierarchy.create(PeriodLevel.MESOCYCLE, name, start, end, parent_id=parent.id)


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

class TestCreate:
    """Tests for creating periods."""

    def test_creates_macrocycle(self, hierarchy, repository, season):
        assert season.level == PeriodLevel.MACROCYCLE
        assert season.start_date == date(2024, 1, 1)
        assert season.end_date == date(2024, 3, 31)
        assert season.tag == "trimestral"
        assert season.parent_id is None
        assert repository.get(season.id) == season

    def test_rejects_start_equal_to_end(self, hierarchy, repository):
        """A period must span at least two days; state is left unchanged."""
        with pytest.raises(InvalidRangeError):
            hierarchy.create(PeriodLevel.MACROCYCLE, "Day", "2024-01-01", "2024-01-01")
        assert len(repository) == 0

    def test_rejects_inverted_range(self, hierarchy):
        with pytest.raises(InvalidRangeError):
            hierarchy.create(PeriodLevel.MACROCYCLE, "Backwards", "2024-02-01", "2024-01-01")

    def test_rejects_unparsable_date(self, hierarchy):
        with pytest.raises(InvalidRangeError, match="end_date"):
            hierarchy.create(PeriodLevel.MACROCYCLE, "Bad", "2024-01-01", "soon")

    def test_rejects_empty_name(self, hierarchy):
        with pytest.raises(ValueError, match="name"):
            hierarchy.create(PeriodLevel.MACROCYCLE, "   ", "2024-01-01", "2024-02-01")

    def test_accepts_level_as_string(self, hierarchy):
        period = hierarchy.create("macrocycle", "Season", "2024-01-01", "2024-06-30")
        assert period.level == PeriodLevel.MACROCYCLE

    def test_stores_details(self, hierarchy):
        period = hierarchy.create(
            PeriodLevel.MACROCYCLE,
            "Season",
            "2024-01-01",
            "2024-06-30",
            description="Road to nationals",
            goal="Sub 2:00 in the 200 free",
            notes="Altitude camp in March",
        )
        assert period.goal == "Sub 2:00 in the 200 free"
        assert period.notes == "Altitude camp in March"


class TestOverlap:
    """Sibling periods may never share a day."""

    def test_rejects_overlapping_macrocycle(self, hierarchy, season):
        with pytest.raises(OverlapError) as exc_info:
            hierarchy.create(PeriodLevel.MACROCYCLE, "Next", "2024-03-15", "2024-06-30")
        assert exc_info.value.conflicting_id == season.id
        assert exc_info.value.code == "OVERLAP"

    def test_shared_boundary_day_is_an_overlap(self, hierarchy, season):
        """Ranges are inclusive, so ending on the day another starts collides."""
        with pytest.raises(OverlapError):
            hierarchy.create(PeriodLevel.MACROCYCLE, "Next", "2024-03-31", "2024-06-30")

    def test_adjacent_periods_are_allowed(self, hierarchy, season):
        nxt = hierarchy.create(PeriodLevel.MACROCYCLE, "Next", "2024-04-01", "2024-06-30")
        assert nxt.start_date == date(2024, 4, 1)

    def test_other_owners_do_not_conflict(self, repository, season):
        other = PeriodHierarchy(repository, "athlete-2")
        period = other.create(PeriodLevel.MACROCYCLE, "Season", "2024-01-01", "2024-03-31")
        assert period.owner_id == "athlete-2"

    def test_mesocycles_under_different_parents_do_not_conflict(self, hierarchy, season):
        """Siblings share a parent; cousins may overlap."""
        other_season = hierarchy.create(
            PeriodLevel.MACROCYCLE, "Other", "2024-04-01", "2024-06-30"
        )
        _mesocycle(hierarchy, season, "2024-01-01", "2024-01-14")
        meso = _mesocycle(hierarchy, other_season, "2024-01-01", "2024-01-14")
        assert meso.parent_id == other_season.id

    def test_rejects_overlapping_mesocycle(self, hierarchy, season):
        _mesocycle(hierarchy, season, "2024-01-01", "2024-01-14")
        with pytest.raises(OverlapError):
            _mesocycle(hierarchy, season, "2024-01-10", "2024-01-21")


class TestParents:
    """Each level hangs from the level above it."""

    def test_mesocycle_requires_parent(self, hierarchy):
        with pytest.raises(InvalidParentError, match="requires a macrocycle"):
            hierarchy.create(PeriodLevel.MESOCYCLE, "Block", "2024-01-01", "2024-01-14")

    def test_macrocycle_cannot_have_parent(self, hierarchy, season):
        with pytest.raises(InvalidParentError):
            hierarchy.create(
                PeriodLevel.MACROCYCLE, "Nested", "2024-04-01", "2024-05-01",
                parent_id=season.id,
            )

    def test_microcycle_parent_must_be_mesocycle(self, hierarchy, season):
        with pytest.raises(InvalidParentError, match="must belong to a mesocycle"):
            hierarchy.create(
                PeriodLevel.MICROCYCLE, "Week", "2024-01-01", "2024-01-07",
                parent_id=season.id,
            )

    def test_unknown_parent_is_not_found(self, hierarchy):
        with pytest.raises(PeriodNotFoundError):
            hierarchy.create(
                PeriodLevel.MESOCYCLE, "Block", "2024-01-01", "2024-01-14",
                parent_id=uuid4(),
            )

    def test_parent_of_another_owner_is_not_found(self, repository, season):
        other = PeriodHierarchy(repository, "athlete-2")
        with pytest.raises(PeriodNotFoundError):
            other.create(
                PeriodLevel.MESOCYCLE, "Block", "2024-01-01", "2024-01-14",
                parent_id=season.id,
            )


class TestContainment:
    """Children outside the parent's range are only rejected when enforced."""

    def test_not_enforced_by_default(self, hierarchy, season):
        meso = _mesocycle(hierarchy, season, "2024-03-25", "2024-04-14")
        assert meso.end_date > season.end_date

    def test_enforced_when_enabled(self, repository, season):
        strict = PeriodHierarchy(repository, OWNER, enforce_containment=True)
        with pytest.raises(OutOfParentRangeError) as exc_info:
            strict.create(
                PeriodLevel.MESOCYCLE, "Spill", "2024-03-25", "2024-04-14",
                parent_id=season.id,
            )
        assert isinstance(exc_info.value, InvalidRangeError)

    def test_enforced_parent_cannot_shrink_below_children(self, repository, season):
        strict = PeriodHierarchy(repository, OWNER, enforce_containment=True)
        _mesocycle(strict, season, "2024-03-01", "2024-03-20")

        with pytest.raises(OutOfParentRangeError):
            strict.update(season.id, end_date="2024-03-10")


class TestTags:
    """Tags come from a fixed set per level."""

    def test_rejects_tag_of_another_level(self, hierarchy, season):
        """'polimento' is a mesocycle block type, not a season type."""
        with pytest.raises(InvalidTagError):
            hierarchy.create(
                PeriodLevel.MACROCYCLE, "Taper", "2024-04-01", "2024-04-30", tag="polimento"
            )

    def test_accepts_enum_member(self, hierarchy, season):
        meso = hierarchy.create(
            PeriodLevel.MESOCYCLE, "Taper", "2024-03-18", "2024-03-31",
            parent_id=season.id, tag=MesocycleTag.POLIMENTO,
        )
        assert meso.tag == "polimento"

    def test_blank_tag_is_none(self, hierarchy):
        period = hierarchy.create(
            PeriodLevel.MACROCYCLE, "Season", "2024-01-01", "2024-02-01", tag="  "
        )
        assert period.tag is None


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class TestQueries:

    def test_list_is_ordered_by_start_date(self, hierarchy, season):
        later = hierarchy.create(PeriodLevel.MACROCYCLE, "Later", "2024-07-01", "2024-09-30")
        earlier = hierarchy.create(PeriodLevel.MACROCYCLE, "Earlier", "2023-10-01", "2023-12-31")

        names = [p.name for p in hierarchy.list_periods()]
        assert names == [earlier.name, season.name, later.name]

    def test_list_filters_by_level_and_parent(self, hierarchy, season):
        meso = _mesocycle(hierarchy, season, "2024-01-01", "2024-01-14")

        assert hierarchy.list_periods(level=PeriodLevel.MESOCYCLE) == [meso]
        assert hierarchy.list_periods(parent_id=season.id) == [meso]
        assert hierarchy.children(season.id) == [meso]

    def test_get_hides_other_owners(self, repository, season):
        other = PeriodHierarchy(repository, "athlete-2")
        assert other.find(season.id) is None
        with pytest.raises(PeriodNotFoundError):
            other.get(season.id)

    def test_current_cycle_finds_each_level(self, hierarchy, season):
        meso = _mesocycle(hierarchy, season, "2024-01-08", "2024-01-21")
        micro = hierarchy.create(
            PeriodLevel.MICROCYCLE, "Week", "2024-01-08", "2024-01-14", parent_id=meso.id
        )

        cycle = hierarchy.current_cycle("2024-01-10")

        assert cycle.on == date(2024, 1, 10)
        assert cycle.macrocycle == season
        assert cycle.mesocycle == meso
        assert cycle.microcycle == micro

    def test_current_cycle_leaves_uncovered_levels_empty(self, hierarchy, season):
        cycle = hierarchy.current_cycle(date(2024, 2, 1))

        assert cycle.macrocycle == season
        assert cycle.mesocycle is None
        assert cycle.microcycle is None


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

class TestUpdate:
    """Tests for editing stored periods."""

    def test_updates_fields(self, hierarchy, season):
        updated = hierarchy.update(season.id, name="Spring season", goal="Peak in March")

        assert updated.name == "Spring season"
        assert updated.goal == "Peak in March"
        assert hierarchy.get(season.id).name == "Spring season"

    def test_record_does_not_overlap_itself(self, hierarchy, season):
        updated = hierarchy.update(season.id, end_date="2024-04-15")
        assert updated.end_date == date(2024, 4, 15)

    def test_rejects_overlap_and_keeps_state(self, hierarchy, season):
        nxt = hierarchy.create(PeriodLevel.MACROCYCLE, "Next", "2024-04-01", "2024-06-30")

        with pytest.raises(OverlapError):
            hierarchy.update(nxt.id, start_date="2024-03-20")

        assert hierarchy.get(nxt.id).start_date == date(2024, 4, 1)

    def test_rejects_inverted_range(self, hierarchy, season):
        with pytest.raises(InvalidRangeError):
            hierarchy.update(season.id, end_date="2023-12-01")
        assert hierarchy.get(season.id).end_date == date(2024, 3, 31)

    def test_unknown_id_is_not_found(self, hierarchy):
        with pytest.raises(PeriodNotFoundError):
            hierarchy.update(uuid4(), name="Ghost")

    def test_rejects_immutable_fields(self, hierarchy, season):
        with pytest.raises(ValueError, match="parent_id"):
            hierarchy.update(season.id, parent_id=uuid4())

    def test_clears_tag(self, hierarchy, season):
        assert hierarchy.update(season.id, tag=None).tag is None


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

class TestDelete:
    """Deletes cascade top-down."""

    def test_deleting_macrocycle_removes_whole_subtree(self, hierarchy, repository, season):
        first = _mesocycle(hierarchy, season, "2024-01-01", "2024-01-14", "First")
        second = _mesocycle(hierarchy, season, "2024-01-15", "2024-01-28", "Second")
        for meso in (first, second):
            hierarchy.create(
                PeriodLevel.MICROCYCLE, "Week", meso.start_date, meso.end_date,
                parent_id=meso.id,
            )

        removed = hierarchy.delete(season.id)

        assert removed == 5
        assert repository.list_for_owner(OWNER) == []

    def test_deleting_mesocycle_keeps_siblings(self, hierarchy, season):
        first = _mesocycle(hierarchy, season, "2024-01-01", "2024-01-14", "First")
        second = _mesocycle(hierarchy, season, "2024-01-15", "2024-01-28", "Second")
        hierarchy.create(
            PeriodLevel.MICROCYCLE, "Week", "2024-01-01", "2024-01-07", parent_id=first.id
        )

        assert hierarchy.delete(first.id) == 2
        assert hierarchy.children(season.id) == [second]

    def test_unknown_id_is_a_no_op(self, hierarchy, season):
        assert hierarchy.delete(uuid4()) == 0
        assert hierarchy.get(season.id) == season

    def test_cannot_delete_another_owners_period(self, repository, season):
        other = PeriodHierarchy(repository, "athlete-2")
        assert other.delete(season.id) == 0
        assert repository.get(season.id) is not None


# ---------------------------------------------------------------------------
# Weekly decomposition
# ---------------------------------------------------------------------------

class TestGenerateSubPeriods:
    """Tests for drafting one child per week."""

    @pytest.fixture
    def block(self, hierarchy):
        """Wednesday Jan 3 through Saturday Jan 20."""
        return hierarchy.create(PeriodLevel.MACROCYCLE, "Block", "2024-01-03", "2024-01-20")

    def test_one_mesocycle_draft_per_week(self, hierarchy, block):
        drafts = hierarchy.generate_sub_periods(block.id)

        assert [(d.start_date, d.end_date) for d in drafts] == [
            (date(2024, 1, 3), date(2024, 1, 7)),
            (date(2024, 1, 8), date(2024, 1, 14)),
            (date(2024, 1, 15), date(2024, 1, 20)),
        ]
        assert all(d.level == PeriodLevel.MESOCYCLE for d in drafts)
        assert all(d.parent_id == block.id for d in drafts)

    def test_drafts_are_numbered(self, hierarchy, block):
        drafts = hierarchy.generate_sub_periods(block.id)

        assert [d.name for d in drafts] == ["Week 1", "Week 2", "Week 3"]
        assert [d.week_number for d in drafts] == [1, 2, 3]

    def test_drafts_are_not_persisted(self, hierarchy, block):
        hierarchy.generate_sub_periods(block.id)
        assert hierarchy.children(block.id) == []

    def test_tag_left_blank_by_default(self, hierarchy, block):
        assert all(d.tag is None for d in hierarchy.generate_sub_periods(block.id))

    def test_applies_requested_tag(self, hierarchy, block):
        drafts = hierarchy.generate_sub_periods(block.id, tag="base")
        assert {d.tag for d in drafts} == {"base"}

    def test_single_day_final_week_is_omitted(self, hierarchy):
        """Monday to the following Monday leaves a one-day week that can't exist."""
        period = hierarchy.create(PeriodLevel.MACROCYCLE, "Short", "2024-01-01", "2024-01-08")

        drafts = hierarchy.generate_sub_periods(period.id)

        assert len(drafts) == 1
        assert drafts[0].end_date == date(2024, 1, 7)

    def test_mesocycle_yields_microcycles(self, hierarchy, season):
        meso = _mesocycle(hierarchy, season, "2024-01-08", "2024-01-21")

        drafts = hierarchy.generate_sub_periods(meso.id, tag="ordinario")

        assert len(drafts) == 2
        assert all(d.level == PeriodLevel.MICROCYCLE for d in drafts)

    def test_microcycle_cannot_be_subdivided(self, hierarchy, season):
        meso = _mesocycle(hierarchy, season, "2024-01-08", "2024-01-21")
        micro = hierarchy.create(
            PeriodLevel.MICROCYCLE, "Week", "2024-01-08", "2024-01-14", parent_id=meso.id
        )
        with pytest.raises(InvalidParentError):
            hierarchy.generate_sub_periods(micro.id)

    def test_rejects_tag_foreign_to_child_level(self, hierarchy, block):
        with pytest.raises(InvalidTagError):
            hierarchy.generate_sub_periods(block.id, tag="choque")


class TestAssignTag:

    def test_relabels_drafts_without_persisting(self, hierarchy, season):
        drafts = hierarchy.generate_sub_periods(season.id)

        tagged = hierarchy.assign_tag(drafts[:2], "desenvolvimento")

        assert [d.tag for d in tagged] == ["desenvolvimento", "desenvolvimento"]
        assert hierarchy.children(season.id) == []

    def test_updates_stored_periods(self, hierarchy, season):
        first = _mesocycle(hierarchy, season, "2024-01-01", "2024-01-14", "First")
        second = _mesocycle(hierarchy, season, "2024-01-15", "2024-01-28", "Second")

        hierarchy.assign_tag([first, second], "especifico")

        assert {p.tag for p in hierarchy.children(season.id)} == {"especifico"}

    def test_invalid_tag_changes_nothing(self, hierarchy, season):
        meso = _mesocycle(hierarchy, season, "2024-01-01", "2024-01-14")

        with pytest.raises(InvalidTagError):
            hierarchy.assign_tag([meso], "anual")

        assert hierarchy.get(meso.id).tag is None


class TestCommit:
    """Committing drafts is all or nothing."""

    def test_commits_generated_weeks(self, hierarchy, season):
        drafts = hierarchy.generate_sub_periods(season.id, tag="base")

        committed = hierarchy.commit(drafts)

        assert len(committed) == len(drafts) == 13
        assert len(hierarchy.children(season.id)) == 13

    def test_overlapping_draft_rejects_the_batch(self, hierarchy, repository, season):
        from dataclasses import replace

        drafts = hierarchy.generate_sub_periods(season.id)
        drafts[1] = replace(drafts[1], start_date=drafts[0].end_date)
        before = len(repository)

        with pytest.raises(OverlapError):
            hierarchy.commit(drafts)

        assert len(repository) == before

    def test_draft_overlapping_stored_sibling_is_rejected(self, hierarchy, season):
        _mesocycle(hierarchy, season, "2024-01-01", "2024-01-10")
        drafts = hierarchy.generate_sub_periods(season.id)

        with pytest.raises(OverlapError):
            hierarchy.commit(drafts)

    def test_committing_twice_is_rejected(self, hierarchy, season):
        drafts = hierarchy.generate_sub_periods(season.id)
        hierarchy.commit(drafts)

        with pytest.raises(OverlapError, match="already been committed"):
            hierarchy.commit(drafts[:1])

    def test_empty_batch_is_a_no_op(self, hierarchy):
        assert hierarchy.commit([]) == []
