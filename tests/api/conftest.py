"""
Shared fixtures for API tests.

Each test gets a fresh app wired to fresh in-memory repositories through
``app.dependency_overrides``, so nothing leaks between tests.
"""

import pytest
from fastapi.testclient import TestClient

from training_planner.api.dependencies import get_period_repository, get_session_source
from training_planner.config.settings import Settings, get_settings
from training_planner.infrastructure.memory import InMemoryPeriodRepository, InMemorySessionRepository
from training_planner.main import create_app

API_KEY = "test-key"


@pytest.fixture
def settings():
    return Settings(api_keys=API_KEY, snowflake_mock_mode=True)


@pytest.fixture
def period_repository():
    return InMemoryPeriodRepository()


@pytest.fixture
def session_repository():
    return InMemorySessionRepository()


@pytest.fixture
def client(settings, period_repository, session_repository):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_period_repository] = lambda: period_repository
    app.dependency_overrides[get_session_source] = lambda: session_repository

    with TestClient(app, headers={"X-API-Key": API_KEY}) as test_client:
        yield test_client
