# (c) Copyright Datacraft, 2026
"""RFC 7807 problem responses and the exception handlers that emit them."""
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tenantry.core.exceptions import (
	ConnectionAcquisitionError,
	PoolExhaustionError,
	SchemaSwitchError,
)

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"
RETRY_AFTER_SECONDS = 1


def problem_response(
	status_code: int,
	title: str,
	detail: str | None = None,
	headers: dict[str, str] | None = None,
	**extra: Any,
) -> JSONResponse:
	content: dict[str, Any] = {
		"type": "about:blank",
		"title": title,
		"status": status_code,
	}
	if detail is not None:
		content["detail"] = detail
	content.update(extra)
	return JSONResponse(
		status_code=status_code,
		content=content,
		headers=headers,
		media_type=PROBLEM_MEDIA_TYPE,
	)


def unknown_tenant_problem(header: str, tenant_id: str) -> JSONResponse:
	return problem_response(
		status_code=400,
		title="Unknown database tenant",
		detail=f"Value of header {header} does not match a known database tenant",
		tenantId=tenant_id,
	)


async def schema_switch_handler(request: Request, e: SchemaSwitchError) -> JSONResponse:
	logger.error(f"Schema switch failed (tenantIdentifier={e.tenant_id}): {e.detail}")
	return problem_response(
		status_code=500,
		title="Tenant schema unavailable",
		detail=f"Could not bind a connection to tenant {e.tenant_id}",
	)


async def connection_acquisition_handler(
	request: Request, e: ConnectionAcquisitionError
) -> JSONResponse:
	if isinstance(e, PoolExhaustionError):
		return problem_response(
			status_code=503,
			title="Service overloaded",
			detail="No database connection available",
			headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
		)
	return problem_response(
		status_code=503,
		title="Database unavailable",
		detail="Could not connect to the database",
	)


async def validation_error_handler(
	request: Request, e: RequestValidationError
) -> JSONResponse:
	return problem_response(
		status_code=400,
		title="Bad Request",
		detail="Request validation failed",
		errors=[
			{"loc": list(error.get("loc", ())), "msg": error.get("msg")}
			for error in e.errors()
		],
	)


def register_exception_handlers(app: FastAPI) -> None:
	app.add_exception_handler(SchemaSwitchError, schema_switch_handler)
	app.add_exception_handler(ConnectionAcquisitionError, connection_acquisition_handler)
	app.add_exception_handler(RequestValidationError, validation_error_handler)
