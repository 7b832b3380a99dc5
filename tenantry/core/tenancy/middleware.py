# (c) Copyright Datacraft, 2026
"""
Tenant middleware for FastAPI.

Reads the tenant header, validates it against the tenant registry and
binds the tenant for the lifetime of the request.
"""
import logging
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from tenantry.core.exceptions import UnknownTenantError
from tenantry.core.problems import problem_response, unknown_tenant_problem
from .context import begin_tenant_unit, end_tenant_unit
from .registry import TenantRegistry

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_PATHS = (
	"/monitoring",
	"/openapi.json",
	"/docs",
	"/redoc",
)


class TenantMiddleware(BaseHTTPMiddleware):
	"""
	Bracket every request with a tenant unit of work.

	Unknown or missing tenants are rejected with a 400 problem response
	before any database connection is acquired.
	"""

	def __init__(
		self,
		app: ASGIApp,
		registry: TenantRegistry,
		header: str = "X-Tenant-Id",
		excluded_paths: list[str] | None = None,
	):
		super().__init__(app)
		self.registry = registry
		self.header = header
		self.excluded_paths = tuple(excluded_paths or DEFAULT_EXCLUDED_PATHS)

	async def dispatch(
		self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
	) -> Response:
		if self._is_excluded_path(request.url.path):
			return await call_next(request)

		tenant_id = request.headers.get(self.header)
		if not tenant_id:
			return problem_response(
				status_code=400,
				title="Missing database tenant",
				detail=f"Header {self.header} is required",
			)

		try:
			self.registry.require(tenant_id)
		except UnknownTenantError as e:
			logger.info(f"Rejecting request for unknown tenant (tenantId={e.tenant_id})")
			return unknown_tenant_problem(self.header, e.tenant_id)

		token = begin_tenant_unit(tenant_id)
		try:
			return await call_next(request)
		finally:
			end_tenant_unit(token)

	def _is_excluded_path(self, path: str) -> bool:
		return path.startswith(self.excluded_paths)
