"""
Training-load API endpoints.

Read-only views over the athlete's logged sessions: the ACWR risk
snapshot, plus the daily, weekly and history series the dashboard charts.
"""

import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from ..dependencies import AuthenticatedUser, LoadMonitorDep

logger = logging.getLogger(__name__)

router = APIRouter()

OwnerId = Annotated[str, Query(min_length=1, description="Athlete whose sessions are analysed")]
AsOf = Annotated[Optional[date], Query(description="Reference day (defaults to today)")]


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class WorkloadMetricsResponse(BaseModel):
    """ACWR risk snapshot."""
    owner_id: str
    as_of: date
    acute_load: float = Field(description="Sum of daily load over the last 7 days")
    chronic_load: float = Field(description="Sum of daily load over the last 28 days")
    acwr: float = Field(description="acute_load / chronic_load, 0 when there is no chronic load")
    risk_zone: str = Field(description="detraining, safety, risk or high-risk")
    risk_percentage: int
    trend: str = Field(description="increasing, decreasing or stable")
    recommendations: list[str]
    imputed_days: int = Field(description="Days in the chronic window with an estimated effort rating")


class DailyLoadItem(BaseModel):
    date: date
    load: float
    session_count: int
    imputed: bool


class WeeklyLoadItem(BaseModel):
    week_start: date = Field(description="Sunday the week starts on")
    total_load: float
    session_count: int


class AcwrPointItem(BaseModel):
    date: date
    acute_load: float
    chronic_load: float
    acwr: float
    risk_zone: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=WorkloadMetricsResponse,
    summary="Get training-load metrics",
)
async def get_metrics(
    owner_id: OwnerId,
    api_key: AuthenticatedUser,
    monitor: LoadMonitorDep,
    as_of: AsOf = None,
) -> WorkloadMetricsResponse:
    """
    Acute and chronic load, ACWR, risk zone and recommendations.

    An athlete with no sessions gets zeroed metrics in the detraining zone.
    """
    day = as_of or date.today()
    metrics = monitor.metrics(owner_id, day)

    return WorkloadMetricsResponse(
        owner_id=owner_id,
        as_of=day,
        acute_load=metrics.acute_load,
        chronic_load=metrics.chronic_load,
        acwr=metrics.acwr,
        risk_zone=metrics.risk_zone.value,
        risk_percentage=metrics.risk_percentage,
        trend=metrics.trend.value,
        recommendations=list(metrics.recommendations),
        imputed_days=metrics.imputed_days,
    )


@router.get(
    "/daily",
    response_model=list[DailyLoadItem],
    summary="Get daily load",
)
async def get_daily_load(
    owner_id: OwnerId,
    api_key: AuthenticatedUser,
    monitor: LoadMonitorDep,
    as_of: AsOf = None,
    days: int = Query(7, ge=1, le=365),
) -> list[DailyLoadItem]:
    """One entry per day, rest days included with zero load."""
    samples = monitor.daily(owner_id, as_of or date.today(), days=days)
    return [
        DailyLoadItem(
            date=s.date,
            load=s.load,
            session_count=s.session_count,
            imputed=s.imputed,
        )
        for s in samples
    ]


@router.get(
    "/weekly",
    response_model=list[WeeklyLoadItem],
    summary="Get weekly load totals",
)
async def get_weekly_load(
    owner_id: OwnerId,
    api_key: AuthenticatedUser,
    monitor: LoadMonitorDep,
    as_of: AsOf = None,
    weeks: int = Query(4, ge=1, le=52),
) -> list[WeeklyLoadItem]:
    """Totals per Sunday-anchored week; weeks without sessions are omitted."""
    totals = monitor.weekly(owner_id, as_of or date.today(), weeks=weeks)
    return [
        WeeklyLoadItem(
            week_start=w.week_start,
            total_load=w.total_load,
            session_count=w.session_count,
        )
        for w in totals
    ]


@router.get(
    "/history",
    response_model=list[AcwrPointItem],
    summary="Get ACWR history",
)
async def get_acwr_history(
    owner_id: OwnerId,
    api_key: AuthenticatedUser,
    monitor: LoadMonitorDep,
    as_of: AsOf = None,
    days: int = Query(28, ge=1, le=365),
) -> list[AcwrPointItem]:
    """Acute load, chronic load and ACWR for each of the last ``days`` days."""
    points = monitor.history(owner_id, as_of or date.today(), days=days)
    return [
        AcwrPointItem(
            date=p.date,
            acute_load=p.acute_load,
            chronic_load=p.chronic_load,
            acwr=p.acwr,
            risk_zone=p.risk_zone.value,
        )
        for p in points
    ]
