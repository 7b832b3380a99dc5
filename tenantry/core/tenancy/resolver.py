# (c) Copyright Datacraft, 2026
"""Decides which schema a unit of work binds to."""
import logging

from .context import get_current_tenant
from .registry import DEFAULT_SCHEMA

logger = logging.getLogger(__name__)


class TenantIdentifierResolver:
	"""
	Resolve the schema for the current unit of work.

	Falls back to the default schema when no tenant is bound, which is
	the normal state for administrative and background work.
	"""

	# Sessions opened for one tenant are never reused for another
	validate_existing_current_sessions = False

	def __init__(self, default_schema: str = DEFAULT_SCHEMA):
		self.default_schema = default_schema

	def resolve_current(self) -> str:
		tenant = get_current_tenant() or self.default_schema
		logger.debug(f"Resolving tenant identifier (tenant={tenant})")
		return tenant
