"""
FastAPI dependency injection.

Dependencies provide repositories, services, and configuration to route
handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Tests swap repositories through ``app.dependency_overrides``
- Resource lifecycle (Snowflake connections) is managed per request

Each dependency is a function that FastAPI calls when needed.
"""

import logging
from typing import Annotated, Generator

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.periodization import PeriodRepository
from ..core.workload import LoadMonitor, SessionSource
from ..infrastructure.memory import InMemoryPeriodRepository, InMemorySessionRepository
from ..infrastructure.snowflake import (
    SnowflakeConfig,
    SnowflakePeriodRepository,
    TrainingSessionRepository,
    get_snowflake_connection,
)

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Shared in-memory stores for mock mode (persist across requests)
_mock_period_repository = None
_mock_session_repository = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8]}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Repository Dependencies
# ---------------------------------------------------------------------------

def snowflake_config(settings: Settings) -> SnowflakeConfig:
    """Connection settings for the Snowflake repositories."""
    return SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        private_key_base64=settings.snowflake_private_key_base64,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )


def get_period_repository(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[PeriodRepository, None, None]:
    """
    Provide the period repository.

    This is a generator so the Snowflake connection is closed once the
    request is done. In mock mode every request shares one in-memory
    repository, so a plan built through the API survives between calls.
    """
    global _mock_period_repository

    if settings.snowflake_mock_mode:
        if _mock_period_repository is None:
            _mock_period_repository = InMemoryPeriodRepository()
            logger.info("Created shared in-memory period repository")
        yield _mock_period_repository
    else:
        with get_snowflake_connection(snowflake_config(settings)) as conn:
            logger.debug("Created SnowflakePeriodRepository")
            yield SnowflakePeriodRepository(conn)


def get_session_source(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[SessionSource, None, None]:
    """
    Provide the read-only source of logged training sessions.

    Same connection strategy as the period repository.
    """
    global _mock_session_repository

    if settings.snowflake_mock_mode:
        if _mock_session_repository is None:
            _mock_session_repository = InMemorySessionRepository()
            logger.info("Created shared in-memory session repository")
        yield _mock_session_repository
    else:
        with get_snowflake_connection(snowflake_config(settings)) as conn:
            logger.debug("Created TrainingSessionRepository")
            yield TrainingSessionRepository(conn)


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_load_monitor(
    settings: Annotated[Settings, Depends(get_settings)],
    sessions: Annotated[SessionSource, Depends(get_session_source)],
) -> LoadMonitor:
    """
    Provide a LoadMonitor configured from settings.

    The monitor is stateless, so a new one per request is fine.
    """
    return LoadMonitor(
        sessions,
        default_exertion=settings.default_exertion,
        clamp_percentage=settings.clamp_risk_percentage,
        window_days=settings.workload_window_days,
    )


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
PeriodRepositoryDep = Annotated[PeriodRepository, Depends(get_period_repository)]
LoadMonitorDep = Annotated[LoadMonitor, Depends(get_load_monitor)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
