# (c) Copyright Datacraft, 2026
"""Tenant context management using contextvars for async safety."""
import contextvars
from typing import Any

# Context variable for current tenant
_current_tenant: contextvars.ContextVar[str | None] = contextvars.ContextVar(
	"current_tenant", default=None
)


def get_current_tenant() -> str | None:
	"""
	Get the tenant bound to the current unit of work.

	Returns None if no tenant is set (e.g., during startup,
	or for administrative and background operations).
	"""
	return _current_tenant.get()


def set_current_tenant(tenant_id: str | None) -> contextvars.Token:
	"""
	Set the tenant for the current thread or async chain.

	No validation happens here. Returns a token that can be used
	to restore the previous value.
	"""
	return _current_tenant.set(tenant_id)


def clear_current_tenant(token: contextvars.Token | None = None) -> None:
	"""
	Remove the tenant from the current unit of work.

	With a token from ``set_current_tenant`` the value that was current
	before that call is restored; without one the slot is emptied.
	"""
	if token is not None:
		_current_tenant.reset(token)
	else:
		_current_tenant.set(None)


def begin_tenant_unit(tenant_id: str) -> contextvars.Token:
	"""
	Start a unit of work for ``tenant_id``.

	The caller must have validated ``tenant_id`` against the tenant
	registry, and must pass the returned token to ``end_tenant_unit``.
	"""
	return set_current_tenant(tenant_id)


def end_tenant_unit(token: contextvars.Token) -> None:
	clear_current_tenant(token)


class tenant_unit:
	"""
	Bind a tenant for the duration of a ``with`` / ``async with`` block.

	The previous value is always restored on exit, so a pooled thread or
	task never carries a tenant into its next unit of work.

	Example:
		async with tenant_unit("company_x"):
			await create_product(...)
	"""

	def __init__(self, tenant_id: str | None):
		self.tenant_id = tenant_id
		self.token: contextvars.Token | None = None

	def __enter__(self) -> str | None:
		self.token = set_current_tenant(self.tenant_id)
		return self.tenant_id

	def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
		if self.token is not None:
			_current_tenant.reset(self.token)
			self.token = None

	async def __aenter__(self) -> str | None:
		return self.__enter__()

	async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
		self.__exit__(exc_type, exc_val, exc_tb)
