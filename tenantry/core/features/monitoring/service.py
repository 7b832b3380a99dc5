# (c) Copyright Datacraft, 2026
import logging

from sqlalchemy import exc, text

from tenantry.core.exceptions import ConnectionAcquisitionError
from tenantry.core.migrations import MigrationReport
from tenantry.core.tenancy import TenantConnectionProvider

logger = logging.getLogger(__name__)


async def check_db_status(provider: TenantConnectionProvider) -> bool:
	try:
		async with provider.connection() as conn:
			await conn.execute(text("SELECT 1"))
		return True
	except (ConnectionAcquisitionError, exc.SQLAlchemyError) as e:
		logger.error(f"Database health check failed: {e}")
		return False


def migration_status(report: MigrationReport | None) -> dict[str, str]:
	"""Per-schema migration state from the last startup run."""
	if report is None:
		return {}
	return {result.schema: result.state.value for result in report.results}
