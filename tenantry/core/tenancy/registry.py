# (c) Copyright Datacraft, 2026
"""The fixed set of tenants known to this process."""
import logging
import re
from typing import Iterable, Iterator

from tenantry.core.exceptions import InvalidTenantError, UnknownTenantError

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA = "public"

# Unquoted PostgreSQL identifier, NAMEDATALEN - 1 bytes at most
SCHEMA_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


def is_valid_schema_name(name: str) -> bool:
	return bool(SCHEMA_NAME_RE.match(name))


class TenantRegistry:
	"""
	Immutable, ordered set of tenant identifiers.

	Built once at startup from configuration. Each identifier doubles as
	the name of the tenant's schema. Iteration follows configuration
	order so migration logs line up with what operators configured.
	"""

	__slots__ = ("_tenants", "_default_schema")

	def __init__(self, tenants: Iterable[str], default_schema: str = DEFAULT_SCHEMA):
		ordered: dict[str, None] = {}
		for tenant_id in tenants:
			if not isinstance(tenant_id, str) or not is_valid_schema_name(tenant_id):
				raise InvalidTenantError(str(tenant_id), "not a valid schema name")
			if tenant_id == default_schema:
				raise InvalidTenantError(
					tenant_id, "reserved for the default schema"
				)
			if tenant_id in ordered:
				logger.warning(f"Duplicate tenant ignored (tenant={tenant_id})")
				continue
			ordered[tenant_id] = None

		if not ordered:
			raise InvalidTenantError("", "at least one tenant must be configured")

		# _tenants last: once set, the instance is frozen
		self._default_schema = default_schema
		self._tenants: tuple[str, ...] = tuple(ordered)

	@property
	def default_schema(self) -> str:
		return self._default_schema

	@property
	def tenants(self) -> tuple[str, ...]:
		return self._tenants

	def is_known(self, tenant_id: str) -> bool:
		return tenant_id in self._tenants

	def require(self, tenant_id: str) -> str:
		"""Return ``tenant_id`` if registered, raise ``UnknownTenantError`` otherwise."""
		if not self.is_known(tenant_id):
			raise UnknownTenantError(tenant_id)
		return tenant_id

	def __contains__(self, tenant_id: object) -> bool:
		return tenant_id in self._tenants

	def __iter__(self) -> Iterator[str]:
		return iter(self._tenants)

	def __len__(self) -> int:
		return len(self._tenants)

	def __setattr__(self, name: str, value: object) -> None:
		if hasattr(self, "_tenants"):
			raise AttributeError("TenantRegistry is immutable")
		object.__setattr__(self, name, value)

	def __repr__(self) -> str:
		return f"TenantRegistry(tenants={list(self._tenants)!r})"
