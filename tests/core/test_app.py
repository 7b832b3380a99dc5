# (c) Copyright Datacraft, 2026
"""Application factory and startup tests."""
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from tenantry.app import configure_logging, create_app
from tenantry.core.config import settings as settings_module
from tenantry.core.exceptions import MigrationError
from tenantry.core.migrations import MigrationReport, MigrationResult, MigrationState


@pytest.fixture
def engine():
	engine = MagicMock()
	engine.dispose = AsyncMock()
	return engine


@pytest.fixture
def failed_report():
	return MigrationReport([
		MigrationResult(
			schema="company_x",
			state=MigrationState.FAILED,
			failed_version="1",
			error='relation "product" already exists',
		),
		MigrationResult(schema="company_y", state=MigrationState.MIGRATED),
	])


@patch("tenantry.core.migrations.runner.MigrationRunner.run", new_callable=AsyncMock)
def test_startup_fails_when_a_tenant_failed(mock_run, make_settings, engine, failed_report):
	mock_run.return_value = failed_report
	app = create_app(make_settings(migrate_on_startup=True), engine=engine)

	with pytest.raises(MigrationError) as e:
		with TestClient(app):
			pass

	assert [r.schema for r in e.value.failures] == ["company_x"]
	mock_run.assert_awaited_once()
	engine.dispose.assert_awaited_once()


@patch("tenantry.core.migrations.runner.MigrationRunner.run", new_callable=AsyncMock)
def test_startup_continues_when_failures_are_allowed(
	mock_run, make_settings, engine, failed_report
):
	mock_run.return_value = failed_report
	settings = make_settings(migrate_on_startup=True, fail_on_migration_error=False)
	app = create_app(settings, engine=engine)

	with TestClient(app) as client:
		assert app.state.migration_report is failed_report
		assert client.get("/monitoring/metrics").status_code == 200

	engine.dispose.assert_awaited_once()


@patch("tenantry.core.migrations.runner.MigrationRunner.run", new_callable=AsyncMock)
def test_startup_without_migrations(mock_run, make_settings, engine):
	app = create_app(make_settings(migrate_on_startup=False), engine=engine)

	with TestClient(app):
		assert app.state.migration_report is None

	mock_run.assert_not_awaited()


def test_settings_default_to_environment(monkeypatch, engine):
	monkeypatch.setattr(settings_module, "_settings", None)
	monkeypatch.setenv("TENANTRY_DB_URL", "postgresql://tenantry@localhost/tenantry")
	monkeypatch.setenv("TENANTRY_TENANTS", "company_a, company_b")

	app = create_app(engine=engine)

	assert app.state.registry.tenants == ("company_a", "company_b")
	assert app.state.settings is settings_module.get_settings()


def test_only_mounted_routes_skip_tenant_resolution(make_settings, engine):
	client = TestClient(create_app(make_settings(), engine=engine))

	response = client.get("/health")

	assert response.status_code == 400
	assert response.json()["title"] == "Missing database tenant"


def test_log_config_from_environment(monkeypatch, tmp_path, make_settings):
	log_config = tmp_path / "logging.yaml"
	log_config.write_text(
		"version: 1\n"
		"disable_existing_loggers: false\n"
		"loggers:\n"
		"  tenantry.custom:\n"
		"    level: DEBUG\n"
	)
	monkeypatch.setenv("TENANTRY_LOG_CONFIG", str(log_config))

	configure_logging(make_settings())

	assert logging.getLogger("tenantry.custom").level == logging.DEBUG
