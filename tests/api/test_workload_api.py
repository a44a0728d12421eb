"""
API tests for the workload and health endpoints.
"""

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from training_planner.api.routes import health
from training_planner.config.settings import Settings, get_settings
from training_planner.core.workload import TrainingSession
from training_planner.infrastructure.snowflake import SnowflakeConnectionError
from training_planner.main import create_app


OWNER = "athlete-1"
AS_OF = date(2024, 1, 28)


@pytest.fixture
def steady_month(session_repository):
    """60 minutes at effort 5 every day for the 28 days up to AS_OF."""
    first = AS_OF - timedelta(days=27)
    session_repository.add_sessions(OWNER, [
        TrainingSession(first + timedelta(days=i), 60, 5) for i in range(28)
    ])


class TestWorkloadMetrics:

    def test_metrics_for_steady_month(self, client, steady_month):
        response = client.get(
            "/api/v1/workload", params={"owner_id": OWNER, "as_of": AS_OF.isoformat()}
        )

        body = response.json()
        assert response.status_code == 200
        assert body["as_of"] == "2024-01-28"
        assert body["acute_load"] == 2100
        assert body["chronic_load"] == 8400
        assert body["acwr"] == pytest.approx(0.25)
        assert body["risk_zone"] == "detraining"
        assert body["risk_percentage"] == 0
        assert body["trend"] == "stable"
        assert body["recommendations"]
        assert body["imputed_days"] == 0

    def test_athlete_without_sessions_gets_zeroed_metrics(self, client):
        response = client.get("/api/v1/workload", params={"owner_id": "nobody"})

        body = response.json()
        assert response.status_code == 200
        assert body["acwr"] == 0
        assert body["risk_zone"] == "detraining"

    def test_owner_is_required(self, client):
        assert client.get("/api/v1/workload").status_code == 422


class TestWorkloadSeries:

    def test_daily(self, client, steady_month):
        response = client.get(
            "/api/v1/workload/daily",
            params={"owner_id": OWNER, "as_of": AS_OF.isoformat(), "days": 3},
        )

        assert response.status_code == 200
        assert [d["date"] for d in response.json()] == ["2024-01-26", "2024-01-27", "2024-01-28"]
        assert {d["load"] for d in response.json()} == {300}

    def test_weekly(self, client, steady_month):
        """Jan 28 2024 is a Sunday, so the newest week holds one day."""
        response = client.get(
            "/api/v1/workload/weekly",
            params={"owner_id": OWNER, "as_of": AS_OF.isoformat(), "weeks": 2},
        )

        assert response.status_code == 200
        assert response.json() == [
            {"week_start": "2024-01-21", "total_load": 2100, "session_count": 7},
            {"week_start": "2024-01-28", "total_load": 300, "session_count": 1},
        ]

    def test_history(self, client, steady_month):
        response = client.get(
            "/api/v1/workload/history",
            params={"owner_id": OWNER, "as_of": AS_OF.isoformat(), "days": 7},
        )

        points = response.json()
        assert response.status_code == 200
        assert len(points) == 7
        assert points[-1]["chronic_load"] == 8400
        assert points[-1]["risk_zone"] == "detraining"

    def test_rejects_out_of_range_days(self, client):
        response = client.get("/api/v1/workload/daily", params={"owner_id": OWNER, "days": 0})
        assert response.status_code == 422


class TestHealth:

    def test_liveness(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_readiness_in_mock_mode(self, client):
        response = client.get("/health/ready")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "ready"
        assert {c["name"] for c in body["checks"]} == {"configuration", "database"}


def _client_for(settings):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    return TestClient(app)


class TestReadinessAgainstSnowflake:
    """Readiness outside mock mode reports connection problems as 503."""

    def test_missing_credentials_is_not_ready(self):
        settings = Settings(
            api_keys="test-key",
            snowflake_mock_mode=False,
            snowflake_account="acct",
            snowflake_user="u",
        )

        with _client_for(settings) as client:
            response = client.get("/health/ready")

        body = response.json()
        checks = {c["name"]: c for c in body["checks"]}
        assert response.status_code == 503
        assert body["status"] == "not_ready"
        assert checks["configuration"]["status"] == "error"
        assert checks["database"]["status"] == "error"
        assert "private key" in checks["database"]["error"]

    def test_unreachable_database_is_not_ready(self, monkeypatch):
        def refuse(config):
            raise SnowflakeConnectionError("Database connection failed: timeout")

        monkeypatch.setattr(health, "get_snowflake_connection", refuse)
        settings = Settings(
            api_keys="test-key",
            snowflake_mock_mode=False,
            snowflake_account="acct",
            snowflake_user="u",
            snowflake_password="secret",
        )

        with _client_for(settings) as client:
            response = client.get("/health/ready")

        checks = {c["name"]: c for c in response.json()["checks"]}
        assert response.status_code == 503
        assert checks["configuration"]["status"] == "ok"
        assert checks["database"]["error"] == "Database connection failed: timeout"
