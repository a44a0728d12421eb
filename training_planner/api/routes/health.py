"""
Health check endpoints.

Health checks are essential for:
- Load balancers to know if the service is alive
- Deployment systems to verify rollouts

We provide two endpoints:
- /health: Basic liveness check (is the process running?)
- /health/ready: Readiness check (can we serve traffic?)
"""

import logging
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ... import __version__
from ...config.settings import Settings
from ...infrastructure.snowflake import SnowflakePeriodRepository, get_snowflake_connection
from ..dependencies import SettingsDep, snowflake_config

logger = logging.getLogger(__name__)

router = APIRouter()

READINESS_OWNER = "__readiness_probe__"


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    """Individual readiness check result."""
    name: str
    status: str  # "ok" or "error"
    error: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response with details."""
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


def _check_database(settings: Settings) -> ReadinessCheck:
    """
    Open a connection and run a trivial query through the period repository.

    A connection failure is reported as a failed check.
    """
    if settings.snowflake_mock_mode:
        return ReadinessCheck(name="database", status="ok", error="mock mode")

    try:
        with get_snowflake_connection(snowflake_config(settings)) as conn:
            SnowflakePeriodRepository(conn).list_for_owner(READINESS_OWNER)
    except Exception as e:
        logger.error("Database health check failed", extra={"error": str(e)})
        return ReadinessCheck(name="database", status="error", error=str(e))

    return ReadinessCheck(name="database", status="ok")


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the service is running. Does not check dependencies.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """
    Liveness check - is the process alive?

    Must stay fast and never touch the database.
    """
    return HealthResponse(
        status="ok",
        version=__version__,
        details={"mock_mode": settings.snowflake_mock_mode},
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Returns 200 if the service can handle traffic. Checks configuration and the database.",
    responses={
        503: {
            "description": "Service not ready",
            "model": ReadinessResponse,
        }
    },
)
async def readiness_check(
    response: Response,
    settings: SettingsDep,
) -> ReadinessResponse:
    """
    Readiness check - can we serve traffic?

    Verifies the configuration is complete and that the database answers.
    Returns 503 if any check fails.
    """
    checks: list[ReadinessCheck] = []

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        checks.append(ReadinessCheck(
            name="configuration",
            status="error",
            error=f"Missing required fields: {', '.join(missing_fields)}"
        ))
    else:
        checks.append(ReadinessCheck(name="configuration", status="ok"))

    checks.append(_check_database(settings))

    all_ok = all(check.status == "ok" for check in checks)
    if not all_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "Readiness check failed",
            extra={
                "checks": [
                    {"name": c.name, "status": c.status, "error": c.error}
                    for c in checks
                ]
            }
        )

    return ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        version=__version__,
        checks=checks,
    )
