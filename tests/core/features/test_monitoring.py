# (c) Copyright Datacraft, 2026
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from tenantry.app import create_app
from tenantry.core.migrations import MigrationReport, MigrationResult, MigrationState


@pytest.fixture
def app(make_settings):
	return create_app(make_settings())


@patch("tenantry.core.features.monitoring.router.check_db_status", new_callable=AsyncMock)
def test_health_check_ok(mock_db, app):
	mock_db.return_value = True
	app.state.migration_report = MigrationReport([
		MigrationResult(schema="company_x", state=MigrationState.MIGRATED),
		MigrationResult(schema="company_y", state=MigrationState.MIGRATED),
	])

	# no tenant header needed
	response = TestClient(app).get("/monitoring/health")

	assert response.status_code == 200
	assert response.json() == {
		"status": "ok",
		"details": {
			"database": "up",
			"schemas": {"company_x": "migrated", "company_y": "migrated"},
		}
	}


@patch("tenantry.core.features.monitoring.router.check_db_status", new_callable=AsyncMock)
def test_health_check_reports_failed_schema(mock_db, app):
	mock_db.return_value = True
	app.state.migration_report = MigrationReport([
		MigrationResult(schema="company_x", state=MigrationState.FAILED, error="boom"),
		MigrationResult(schema="company_y", state=MigrationState.MIGRATED),
	])

	response = TestClient(app).get("/monitoring/health")

	assert response.json()["status"] == "error"
	assert response.json()["details"]["schemas"]["company_x"] == "failed"


@patch("tenantry.core.features.monitoring.router.check_db_status", new_callable=AsyncMock)
def test_health_check_database_down(mock_db, app):
	mock_db.return_value = False

	response = TestClient(app).get("/monitoring/health")

	assert response.json() == {
		"status": "error",
		"details": {"database": "down", "schemas": {}},
	}


def test_metrics_endpoint(app):
	response = TestClient(app).get("/monitoring/metrics")

	assert response.status_code == 200
	assert "tenantry_schemas_failed" in response.text
