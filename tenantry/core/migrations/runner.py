# (c) Copyright Datacraft, 2026
"""
Startup migration of every tenant schema.

Tenants are migrated one after another in registry order. Each unit is
applied in its own transaction together with its history row, so a
crash can never record a unit that did not run. A failing tenant is
recorded and the remaining tenants are still migrated.
"""
import logging
import time

from sqlalchemy import Connection, exc, text

from tenantry.core.exceptions import (
	ConnectionAcquisitionError,
	MigrationFailure,
	MigrationSourceError,
)
from tenantry.core.tenancy.connection import SET_SEARCH_PATH, TenantConnectionProvider
from tenantry.core.tenancy.registry import TenantRegistry
from . import history, metrics
from .models import MigrationReport, MigrationResult, MigrationState
from .source import MigrationSource, MigrationVersion

logger = logging.getLogger(__name__)


class MigrationRunner:
	"""Bring every registered tenant schema up to the latest migration version."""

	def __init__(
		self,
		provider: TenantConnectionProvider,
		registry: TenantRegistry,
		source: MigrationSource,
		create_schemas: bool = True,
	):
		self.provider = provider
		self.registry = registry
		self.source = source
		self.create_schemas = create_schemas

	async def run(self) -> MigrationReport:
		report = MigrationReport([MigrationResult(schema=tenant) for tenant in self.registry])

		for result in report.results:
			await self.migrate_schema(result)

		metrics.schemas_failed.set(len(report.failed))
		logger.info(
			f"Tenant migrations finished (schemas={len(report.results)}, "
			f"migrated={len(report.succeeded)}, failed={len(report.failed)}, "
			f"applied={report.migrations_applied})"
		)
		return report

	async def migrate_schema(self, result: MigrationResult) -> MigrationResult:
		schema = result.schema
		result.state = MigrationState.MIGRATING
		logger.info(f"Migrating tenant schema (schema={schema})")

		try:
			connection = await self.provider.get_any_connection()
		except ConnectionAcquisitionError as e:
			return self._fail(result, None, str(e))

		try:
			await connection.run_sync(self._migrate, result)
		except MigrationFailure as e:
			self._fail(result, e.version, e.detail)
		except (exc.SQLAlchemyError, MigrationSourceError) as e:
			self._fail(result, None, str(e))
		else:
			result.state = MigrationState.MIGRATED
			logger.info(
				f"Tenant schema migrated successfully (schema={schema}, "
				f"success={result.success}, applied={result.migrations_applied}, "
				f"version={result.target_version})"
			)
		finally:
			# the admin connection now points at the tenant schema
			await self.provider.release_connection(schema, connection)

		return result

	def _migrate(self, connection: Connection, result: MigrationResult) -> None:
		schema = result.schema
		quoted = connection.dialect.identifier_preparer.quote_identifier(schema)

		if self.create_schemas:
			connection.execute(text(f"CREATE SCHEMA IF NOT EXISTS {quoted}"))
		connection.execute(SET_SEARCH_PATH, {"search_path": quoted})
		history.ensure_history_table(connection, schema)
		connection.commit()

		records = history.applied_records(connection, schema)
		connection.commit()

		high_water_mark: MigrationVersion | None = None
		applied: set[MigrationVersion] = set()
		for record in records:
			version = MigrationVersion.parse(record.version)
			if not record.success:
				raise MigrationFailure(
					schema, record.version, "schema history contains a failed migration"
				)
			unit = self.source.get(version)
			if unit is None:
				message = f"Applied migration {record.version} not found in migration source"
				logger.warning(f"{message} (schema={schema})")
				result.warnings.append(message)
			elif unit.checksum != record.checksum:
				raise MigrationFailure(
					schema,
					record.version,
					f"checksum mismatch (applied={record.checksum}, resolved={unit.checksum})",
				)
			applied.add(version)
			if high_water_mark is None or version > high_water_mark:
				high_water_mark = version

		result.initial_version = str(high_water_mark) if high_water_mark else None
		result.target_version = result.initial_version

		for unit in self.source:
			if high_water_mark is not None and unit.version < high_water_mark and unit.version not in applied:
				message = f"Ignoring migration {unit.version} older than schema version {high_water_mark}"
				logger.warning(f"{message} (schema={schema})")
				result.warnings.append(message)

		rank = max((r.installed_rank for r in records), default=0)
		for unit in self.source.pending(high_water_mark):
			rank += 1
			logger.info(
				f"Applying migration (schema={schema}, version={unit.version}, "
				f"description={unit.description})"
			)
			started = time.monotonic()
			try:
				with connection.begin():
					unit.apply(connection)
					elapsed = int((time.monotonic() - started) * 1000)
					history.record_applied(connection, schema, unit, rank, elapsed)
			except Exception as e:
				raise MigrationFailure(schema, str(unit.version), str(e)) from e

			result.migrations_applied += 1
			result.applied_versions.append(str(unit.version))
			result.target_version = str(unit.version)
			metrics.migrations_applied.labels(schema=schema).inc()

	def _fail(self, result: MigrationResult, version: str | None, detail: str) -> MigrationResult:
		result.state = MigrationState.FAILED
		result.failed_version = version
		result.error = detail
		logger.error(
			f"Tenant schema migration failed (schema={result.schema}, "
			f"version={version}, applied={result.migrations_applied}): {detail}"
		)
		return result


async def migrate_all(
	provider: TenantConnectionProvider,
	registry: TenantRegistry,
	source: MigrationSource,
	fail_fast: bool = True,
) -> MigrationReport:
	"""
	Run the migration runner once and apply the startup failure policy.

	With ``fail_fast`` any failed schema raises one aggregated
	``MigrationError`` after every tenant has been attempted.
	"""
	report = await MigrationRunner(provider, registry, source).run()
	if fail_fast:
		report.raise_for_failures()
	elif report.failed:
		failed = ", ".join(r.schema for r in report.failed)
		logger.error(f"Starting with unmigrated tenant schemas (schemas={failed})")
	return report
