# (c) Copyright Datacraft, 2026
"""ORM sessions bound to the tenant of the current unit of work."""
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from .connection import TenantConnectionProvider
from .resolver import TenantIdentifierResolver


class TenantSessionFactory:
	"""
	Open one ``AsyncSession`` per unit of work.

	The tenant is resolved when the session opens and the session lives
	on a single schema-bound connection until it closes. Sessions are
	never cached, so a tenant switch always gets a fresh connection.
	"""

	def __init__(
		self,
		provider: TenantConnectionProvider,
		resolver: TenantIdentifierResolver,
	):
		self.provider = provider
		self.resolver = resolver

	@asynccontextmanager
	async def session(self, tenant_id: str | None = None) -> AsyncIterator[AsyncSession]:
		tenant = tenant_id or self.resolver.resolve_current()
		connection = await self.provider.get_connection(tenant)
		try:
			async with AsyncSession(bind=connection, expire_on_commit=False) as session:
				try:
					yield session
					await session.commit()
				except BaseException:
					await session.rollback()
					raise
		finally:
			await self.provider.release_connection(tenant, connection)


async def get_tenant_session(request: Request) -> AsyncIterator[AsyncSession]:
	"""FastAPI dependency yielding a session for the request's tenant."""
	factory: TenantSessionFactory = request.app.state.session_factory
	async with factory.session() as session:
		yield session
