from fastapi import APIRouter, Request, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from tenantry.core.features.monitoring.service import check_db_status, migration_status

router = APIRouter(
	prefix="/monitoring",
	tags=["monitoring"]
)


@router.get("/health")
async def health_check(request: Request):
	db_status = await check_db_status(request.app.state.connection_provider)
	report = getattr(request.app.state, "migration_report", None)
	schemas = migration_status(report)

	healthy = db_status and (report is None or report.success)
	return {
		"status": "ok" if healthy else "error",
		"details": {
			"database": "up" if db_status else "down",
			"schemas": schemas,
		}
	}


@router.get("/metrics")
def metrics():
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
