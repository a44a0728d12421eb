"""
Training period API endpoints.

Exposes the periodization hierarchy: create, browse, edit and delete
macro/meso/microcycles, and the two-step weekly breakdown where the
client first asks for draft weeks and then commits the ones it keeps.

Every request names the athlete through ``owner_id``; the hierarchy only
ever sees that owner's periods.
"""

import logging
from datetime import date, datetime
from typing import Annotated, NoReturn, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Response, status
from pydantic import BaseModel, Field

from ...core.periodization import (
    CurrentCycle,
    OverlapError,
    Period,
    PeriodError,
    PeriodHierarchy,
    PeriodLevel,
    PeriodNotFoundError,
    PeriodRepository,
)
from ...config.settings import Settings
from ..dependencies import AuthenticatedUser, PeriodRepositoryDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()

OwnerId = Annotated[str, Query(min_length=1, description="Athlete the periods belong to")]


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class PeriodResponse(BaseModel):
    """A stored (or drafted) period."""
    id: UUID
    owner_id: str
    parent_id: Optional[UUID] = None
    level: PeriodLevel
    name: str
    start_date: date
    end_date: date
    tag: Optional[str] = None
    description: str = ""
    goal: str = ""
    notes: str = ""
    week_number: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_period(cls, period: Period) -> "PeriodResponse":
        return cls(
            id=period.id,
            owner_id=period.owner_id,
            parent_id=period.parent_id,
            level=period.level,
            name=period.name,
            start_date=period.start_date,
            end_date=period.end_date,
            tag=period.tag,
            description=period.description,
            goal=period.goal,
            notes=period.notes,
            week_number=period.week_number,
            created_at=period.created_at,
            updated_at=period.updated_at,
        )


class CreatePeriodRequest(BaseModel):
    """Request to create a period."""
    owner_id: str = Field(min_length=1, description="Athlete the period belongs to")
    level: PeriodLevel = Field(description="macrocycle, mesocycle or microcycle")
    name: str = Field(min_length=1, max_length=255)
    start_date: date = Field(description="First day (inclusive)")
    end_date: date = Field(description="Last day (inclusive)")
    parent_id: Optional[UUID] = Field(None, description="Required for meso and microcycles")
    tag: Optional[str] = Field(None, description="Classification valid for the level")
    description: str = ""
    goal: str = ""
    notes: str = ""


class UpdatePeriodRequest(BaseModel):
    """
    Partial update. Only the fields present in the body are changed;
    send ``"tag": null`` to clear a tag.
    """
    name: Optional[str] = Field(None, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tag: Optional[str] = None
    description: Optional[str] = None
    goal: Optional[str] = None
    notes: Optional[str] = None


class GenerateWeeksRequest(BaseModel):
    """Optional tag applied to every generated week."""
    tag: Optional[str] = None


class DraftPeriod(BaseModel):
    """A draft as returned by generate-weeks, possibly edited by the client."""
    id: UUID
    parent_id: UUID
    level: PeriodLevel
    name: str = Field(min_length=1, max_length=255)
    start_date: date
    end_date: date
    tag: Optional[str] = None
    week_number: Optional[int] = None
    description: str = ""
    goal: str = ""
    notes: str = ""


class CommitRequest(BaseModel):
    """Drafts the athlete confirmed."""
    owner_id: str = Field(min_length=1)
    drafts: list[DraftPeriod]


class CurrentCycleResponse(BaseModel):
    """The periods running on a given day, one per level."""
    on: date
    macrocycle: Optional[PeriodResponse] = None
    mesocycle: Optional[PeriodResponse] = None
    microcycle: Optional[PeriodResponse] = None

    @classmethod
    def from_cycle(cls, cycle: CurrentCycle) -> "CurrentCycleResponse":
        def wrap(period: Optional[Period]) -> Optional[PeriodResponse]:
            return PeriodResponse.from_period(period) if period else None

        return cls(
            on=cycle.on,
            macrocycle=wrap(cycle.macrocycle),
            mesocycle=wrap(cycle.mesocycle),
            microcycle=wrap(cycle.microcycle),
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _hierarchy(repository: PeriodRepository, settings: Settings, owner_id: str) -> PeriodHierarchy:
    return PeriodHierarchy(
        repository,
        owner_id,
        enforce_containment=settings.enforce_parent_containment,
    )


def _raise_http(error: Exception) -> NoReturn:
    """Translate a rejected planning operation into an HTTP error."""
    if isinstance(error, PeriodNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, OverlapError):
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = status.HTTP_400_BAD_REQUEST

    code = error.code if isinstance(error, PeriodError) else "VALIDATION_ERROR"
    logger.warning(
        "Period request rejected",
        extra={"code": code, "error": str(error)}
    )
    raise HTTPException(
        status_code=status_code,
        detail={"code": code, "message": str(error)},
    ) from error


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=PeriodResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a period",
    responses={
        400: {"description": "Invalid range, parent or tag"},
        404: {"description": "Parent period not found"},
        409: {"description": "Dates overlap a sibling period"},
    },
)
async def create_period(
    request: CreatePeriodRequest,
    api_key: AuthenticatedUser,
    repository: PeriodRepositoryDep,
    settings: SettingsDep,
) -> PeriodResponse:
    """
    Create a macrocycle, or a meso/microcycle under an existing parent.
    """
    hierarchy = _hierarchy(repository, settings, request.owner_id)
    try:
        period = hierarchy.create(
            level=request.level,
            name=request.name,
            start_date=request.start_date,
            end_date=request.end_date,
            tag=request.tag,
            parent_id=request.parent_id,
            description=request.description,
            goal=request.goal,
            notes=request.notes,
        )
    except (PeriodError, ValueError) as e:
        _raise_http(e)

    return PeriodResponse.from_period(period)


@router.get(
    "",
    response_model=list[PeriodResponse],
    summary="List periods",
)
async def list_periods(
    owner_id: OwnerId,
    api_key: AuthenticatedUser,
    repository: PeriodRepositoryDep,
    settings: SettingsDep,
    level: Optional[PeriodLevel] = None,
    parent_id: Optional[UUID] = None,
) -> list[PeriodResponse]:
    """Periods ordered by start date, optionally filtered by level or parent."""
    hierarchy = _hierarchy(repository, settings, owner_id)
    periods = hierarchy.list_periods(level=level, parent_id=parent_id)
    return [PeriodResponse.from_period(p) for p in periods]


@router.get(
    "/current",
    response_model=CurrentCycleResponse,
    summary="Get the current cycle",
)
async def get_current_cycle(
    owner_id: OwnerId,
    api_key: AuthenticatedUser,
    repository: PeriodRepositoryDep,
    settings: SettingsDep,
    on: Optional[date] = Query(None, description="Day to look up (defaults to today)"),
) -> CurrentCycleResponse:
    """
    The macrocycle, mesocycle and microcycle running on a day.

    Any level with no period covering the day comes back as null.
    """
    hierarchy = _hierarchy(repository, settings, owner_id)
    cycle = hierarchy.current_cycle(on)
    return CurrentCycleResponse.from_cycle(cycle)


@router.post(
    "/commit",
    response_model=list[PeriodResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Commit draft periods",
    responses={
        400: {"description": "A draft is invalid"},
        404: {"description": "A draft's parent was not found"},
        409: {"description": "A draft overlaps a stored period or another draft"},
    },
)
async def commit_drafts(
    request: CommitRequest,
    api_key: AuthenticatedUser,
    repository: PeriodRepositoryDep,
    settings: SettingsDep,
) -> list[PeriodResponse]:
    """
    Persist drafts from generate-weeks.

    All drafts are validated before any is written; one bad draft rejects
    the whole batch.
    """
    hierarchy = _hierarchy(repository, settings, request.owner_id)
    try:
        drafts = [
            Period(
                id=draft.id,
                owner_id=request.owner_id,
                parent_id=draft.parent_id,
                level=draft.level,
                name=draft.name,
                start_date=draft.start_date,
                end_date=draft.end_date,
                tag=draft.tag,
                week_number=draft.week_number,
                description=draft.description,
                goal=draft.goal,
                notes=draft.notes,
            )
            for draft in request.drafts
        ]
        committed = hierarchy.commit(drafts)
    except (PeriodError, ValueError) as e:
        _raise_http(e)

    return [PeriodResponse.from_period(p) for p in committed]


@router.get(
    "/{period_id}",
    response_model=PeriodResponse,
    summary="Get a period",
    responses={404: {"description": "Period not found"}},
)
async def get_period(
    period_id: UUID,
    owner_id: OwnerId,
    api_key: AuthenticatedUser,
    repository: PeriodRepositoryDep,
    settings: SettingsDep,
) -> PeriodResponse:
    hierarchy = _hierarchy(repository, settings, owner_id)
    try:
        period = hierarchy.get(period_id)
    except PeriodError as e:
        _raise_http(e)

    return PeriodResponse.from_period(period)


@router.patch(
    "/{period_id}",
    response_model=PeriodResponse,
    summary="Update a period",
    responses={
        400: {"description": "Invalid range or tag"},
        404: {"description": "Period not found"},
        409: {"description": "New dates overlap a sibling period"},
    },
)
async def update_period(
    period_id: UUID,
    request: UpdatePeriodRequest,
    owner_id: OwnerId,
    api_key: AuthenticatedUser,
    repository: PeriodRepositoryDep,
    settings: SettingsDep,
) -> PeriodResponse:
    """Change any of name, dates, tag, description, goal and notes."""
    changes = {
        key: value
        for key, value in request.model_dump(exclude_unset=True).items()
        if value is not None or key == "tag"
    }
    hierarchy = _hierarchy(repository, settings, owner_id)
    try:
        period = hierarchy.update(period_id, **changes)
    except (PeriodError, ValueError) as e:
        _raise_http(e)

    return PeriodResponse.from_period(period)


@router.delete(
    "/{period_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a period and its children",
)
async def delete_period(
    period_id: UUID,
    owner_id: OwnerId,
    api_key: AuthenticatedUser,
    repository: PeriodRepositoryDep,
    settings: SettingsDep,
) -> Response:
    """
    Delete a period together with every period beneath it.

    Deleting a period that does not exist succeeds without effect.
    """
    hierarchy = _hierarchy(repository, settings, owner_id)
    removed = hierarchy.delete(period_id)

    logger.info(
        "Delete request handled",
        extra={"period_id": str(period_id), "removed": removed}
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{period_id}/generate-weeks",
    response_model=list[PeriodResponse],
    summary="Draft one child period per week",
    responses={
        400: {"description": "Period cannot be subdivided, or tag invalid"},
        404: {"description": "Period not found"},
    },
)
async def generate_weeks(
    period_id: UUID,
    owner_id: OwnerId,
    api_key: AuthenticatedUser,
    repository: PeriodRepositoryDep,
    settings: SettingsDep,
    request: Optional[GenerateWeeksRequest] = None,
) -> list[PeriodResponse]:
    """
    Break a macrocycle or mesocycle into Monday-aligned weekly drafts.

    Nothing is stored. Send the drafts the athlete keeps to
    ``POST /periods/commit``.
    """
    tag = request.tag if request else None
    hierarchy = _hierarchy(repository, settings, owner_id)
    try:
        drafts = hierarchy.generate_sub_periods(period_id, tag=tag)
    except (PeriodError, ValueError) as e:
        _raise_http(e)

    return [PeriodResponse.from_period(p) for p in drafts]
