# (c) Copyright Datacraft, 2026
from prometheus_client import Counter, Gauge

migrations_applied = Counter(
	"tenantry_migrations_applied_total",
	"Migration units applied, by tenant schema",
	["schema"],
)

schemas_failed = Gauge(
	"tenantry_schemas_failed",
	"Tenant schemas that failed to migrate in the last run",
)
