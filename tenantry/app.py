# (c) Copyright Datacraft, 2026
import logging
from contextlib import asynccontextmanager
from logging.config import dictConfig
from pathlib import Path

import yaml
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from tenantry.core.config import Settings, get_settings
from tenantry.core.db.engine import create_engine
from tenantry.core.features.monitoring.router import router as monitoring_router
from tenantry.core.features.products.router import router as products_router
from tenantry.core.migrations import MigrationSource, migrate_all
from tenantry.core.problems import register_exception_handlers
from tenantry.core.tenancy import (
	TenantConnectionProvider,
	TenantIdentifierResolver,
	TenantSessionFactory,
)
from tenantry.core.tenancy.middleware import TenantMiddleware
from tenantry.core.version import __version__

logger = logging.getLogger(__name__)

DEFAULT_LOGGING_CFG = Path(__file__).parent / "logging.yaml"


def configure_logging(settings: Settings) -> None:
	# TENANTRY_LOG_CONFIG arrives through settings.log_config
	logging_config_path = Path(settings.log_config or DEFAULT_LOGGING_CFG)

	if logging_config_path.exists() and logging_config_path.is_file():
		with open(logging_config_path, "r") as stream:
			config = yaml.safe_load(stream)

		dictConfig(config)


@asynccontextmanager
async def lifespan(app: FastAPI):
	"""Migrate every tenant schema before the application accepts requests."""
	settings: Settings = app.state.settings
	engine: AsyncEngine = app.state.engine

	logger.info(f"Starting tenantry API server (tenants={len(app.state.registry)})...")
	try:
		if settings.migrate_on_startup:
			source = MigrationSource.from_locations(settings.migration_locations)
			app.state.migration_report = await migrate_all(
				app.state.connection_provider,
				app.state.registry,
				source,
				fail_fast=settings.fail_on_migration_error,
			)
		yield
	finally:
		logger.info("Shutting down tenantry API server...")
		await engine.dispose()


def create_app(settings: Settings | None = None, engine: AsyncEngine | None = None) -> FastAPI:
	"""
	Build the application.

	Run with ``uvicorn --factory tenantry.app:create_app``.
	"""
	settings = settings or get_settings()
	configure_logging(settings)

	registry = settings.tenant_registry()
	engine = engine or create_engine(settings)
	provider = TenantConnectionProvider(engine, default_schema=settings.default_schema)
	resolver = TenantIdentifierResolver(default_schema=settings.default_schema)

	app = FastAPI(
		title="Tenantry REST API",
		version=__version__,
		lifespan=lifespan,
	)
	app.state.settings = settings
	app.state.engine = engine
	app.state.registry = registry
	app.state.connection_provider = provider
	app.state.session_factory = TenantSessionFactory(provider, resolver)
	app.state.migration_report = None

	prefix = settings.api_prefix
	app.add_middleware(
		TenantMiddleware,
		registry=registry,
		header=settings.tenant_header,
		excluded_paths=[
			f"{prefix}/monitoring",
			"/openapi.json",
			"/docs",
			"/redoc",
		],
	)
	register_exception_handlers(app)

	app.include_router(products_router, prefix=prefix)
	app.include_router(monitoring_router, prefix=prefix)

	return app
