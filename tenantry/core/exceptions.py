# (c) Copyright Datacraft, 2026
"""
Error taxonomy for tenant routing and schema migrations.

Connection and schema-switch errors propagate unchanged to callers.
Migration failures are collected per schema and raised once as an
aggregated ``MigrationError``.
"""
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
	from tenantry.core.migrations.models import MigrationResult


class TenancyError(Exception):
	"""Base class for all tenancy errors."""


class ConfigurationError(TenancyError):
	"""Invalid startup configuration."""


class InvalidTenantError(ConfigurationError):
	"""A configured tenant identifier is not a usable schema name."""

	def __init__(self, tenant_id: str, reason: str):
		self.tenant_id = tenant_id
		self.reason = reason
		super().__init__(f"Invalid tenant identifier {tenant_id!r}: {reason}")


class UnknownTenantError(TenancyError):
	"""A presented tenant identifier is not in the tenant registry."""

	def __init__(self, tenant_id: str):
		self.tenant_id = tenant_id
		super().__init__(f"Unknown database tenant: {tenant_id!r}")


class ConnectionAcquisitionError(TenancyError):
	"""No connection could be obtained from the pool."""


class PoolExhaustionError(ConnectionAcquisitionError):
	"""The pool had no free connection within its timeout."""


class SchemaSwitchError(TenancyError):
	"""A connection was acquired but could not be bound to the tenant schema."""

	def __init__(self, tenant_id: str, detail: str | None = None):
		self.tenant_id = tenant_id
		self.detail = detail
		message = f"Could not switch connection to schema {tenant_id!r}"
		if detail:
			message = f"{message}: {detail}"
		super().__init__(message)


class MigrationSourceError(TenancyError):
	"""The migration source could not be loaded."""


class MigrationFailure(TenancyError):
	"""A migration unit failed on one tenant schema."""

	def __init__(self, schema: str, version: str | None, detail: str):
		self.schema = schema
		self.version = version
		self.detail = detail
		where = f"version {version}" if version else "validation"
		super().__init__(f"Migration of schema {schema!r} failed at {where}: {detail}")


class MigrationError(TenancyError):
	"""One or more tenant schemas failed to migrate."""

	def __init__(self, failures: Sequence["MigrationResult"]):
		self.failures = list(failures)
		schemas = ", ".join(result.schema for result in self.failures)
		super().__init__(
			f"{len(self.failures)} tenant schema(s) failed to migrate: {schemas}"
		)
