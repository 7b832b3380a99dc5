# (c) Copyright Datacraft, 2026
"""
Tenant-aware connection provider.

Hands out pooled connections whose PostgreSQL ``search_path`` is bound
to a single tenant schema. The pool is SQLAlchemy's own; this module
only decides which schema a connection points at.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import exc, text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from tenantry.core.exceptions import (
	ConnectionAcquisitionError,
	PoolExhaustionError,
	SchemaSwitchError,
)
from .registry import DEFAULT_SCHEMA

logger = logging.getLogger(__name__)

SET_SEARCH_PATH = text("SELECT set_config('search_path', :search_path, false)")
CURRENT_SCHEMA = text("SELECT current_schema()")


def quote_schema(connection: AsyncConnection, schema: str) -> str:
	return connection.dialect.identifier_preparer.quote_identifier(schema)


async def set_search_path(connection: AsyncConnection, schema: str) -> str | None:
	"""
	Point ``connection`` at ``schema`` and return the schema now in effect.

	PostgreSQL accepts a search path naming a missing schema, in which
	case ``current_schema()`` is NULL. The implicit transaction is
	committed so that an ORM session bound afterwards owns its own.
	"""
	await connection.execute(
		SET_SEARCH_PATH, {"search_path": quote_schema(connection, schema)}
	)
	current = await connection.scalar(CURRENT_SCHEMA)
	await connection.commit()
	return current


class TenantConnectionProvider:
	"""
	Acquire and release connections pinned to a tenant schema.

	The schema switch runs on every ``get_connection``, before the
	connection is handed out, and never trusts whatever state a pooled
	connection was left in.
	"""

	# Callers hold one connection for the whole unit of work
	supports_aggressive_release = False

	def __init__(self, engine: AsyncEngine, default_schema: str = DEFAULT_SCHEMA):
		self.engine = engine
		self.default_schema = default_schema

	async def get_any_connection(self) -> AsyncConnection:
		connection = self.engine.connect()
		try:
			await connection.start()
		except exc.TimeoutError as e:
			logger.warning(f"Connection pool exhausted: {e}")
			raise PoolExhaustionError(str(e)) from e
		except (exc.DBAPIError, OSError) as e:
			logger.error(f"Could not acquire database connection: {e}")
			raise ConnectionAcquisitionError(str(e)) from e
		return connection

	async def release_any_connection(self, connection: AsyncConnection) -> None:
		await connection.close()

	async def get_connection(self, tenant_id: str) -> AsyncConnection:
		logger.debug(f"Getting connection for a tenant (tenantIdentifier={tenant_id})")

		connection = await self.get_any_connection()
		try:
			current = await set_search_path(connection, tenant_id)
		except exc.SQLAlchemyError as e:
			await self._discard(connection)
			detail = e.orig if isinstance(e, exc.DBAPIError) and e.orig else e
			raise SchemaSwitchError(tenant_id, str(detail)) from e
		except BaseException:
			await self._discard(connection)
			raise

		if current != tenant_id:
			await self.release_connection(tenant_id, connection)
			raise SchemaSwitchError(tenant_id, "schema does not exist")
		return connection

	async def release_connection(self, tenant_id: str, connection: AsyncConnection) -> None:
		logger.debug(f"Releasing connection for a tenant (tenantIdentifier={tenant_id})")
		try:
			if connection.in_transaction():
				await connection.rollback()
			await set_search_path(connection, self.default_schema)
		except exc.DBAPIError as e:
			logger.warning(
				f"Could not reset search path, discarding connection "
				f"(tenantIdentifier={tenant_id}): {e}"
			)
			await self._discard(connection)
			return
		await self.release_any_connection(connection)

	@asynccontextmanager
	async def connection(self, tenant_id: str | None = None) -> AsyncIterator[AsyncConnection]:
		"""
		Acquire a connection for the length of a block.

		``tenant_id=None`` yields an unbound administrative connection.
		"""
		if tenant_id is None:
			conn = await self.get_any_connection()
			try:
				yield conn
			finally:
				await self.release_any_connection(conn)
		else:
			conn = await self.get_connection(tenant_id)
			try:
				yield conn
			finally:
				await self.release_connection(tenant_id, conn)

	async def _discard(self, connection: AsyncConnection) -> None:
		"""Drop a connection whose session state is unknown instead of pooling it."""
		try:
			await connection.invalidate()
		finally:
			await connection.close()
