# (c) Copyright Datacraft, 2026
import ssl

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from tenantry.core.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
	connect_args = {}
	if settings.db_ssl:
		# asyncpg requires an SSL context, not sslmode
		ssl_context = ssl.create_default_context()
		ssl_context.check_hostname = False
		ssl_context.verify_mode = ssl.CERT_NONE
		connect_args["ssl"] = ssl_context

	return create_async_engine(
		settings.async_db_url,
		pool_size=settings.db_pool_size,
		max_overflow=settings.db_max_overflow,
		pool_timeout=settings.db_pool_timeout,
		pool_pre_ping=True,
		connect_args=connect_args,
	)
