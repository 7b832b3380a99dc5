# (c) Copyright Datacraft, 2026
"""
Schema-per-tenant routing.

Provides the tenant context holder, the tenant registry, schema
resolution and tenant-bound connections and sessions.
"""
from .connection import TenantConnectionProvider
from .context import (
	begin_tenant_unit,
	clear_current_tenant,
	end_tenant_unit,
	get_current_tenant,
	set_current_tenant,
	tenant_unit,
)
from .registry import DEFAULT_SCHEMA, TenantRegistry
from .resolver import TenantIdentifierResolver
from .session import TenantSessionFactory, get_tenant_session

__all__ = [
	'DEFAULT_SCHEMA',
	'TenantConnectionProvider',
	'TenantIdentifierResolver',
	'TenantRegistry',
	'TenantSessionFactory',
	'begin_tenant_unit',
	'clear_current_tenant',
	'end_tenant_unit',
	'get_current_tenant',
	'get_tenant_session',
	'set_current_tenant',
	'tenant_unit',
]
