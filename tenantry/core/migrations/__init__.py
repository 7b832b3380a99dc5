# (c) Copyright Datacraft, 2026
"""Versioned, per-schema migrations for tenant schemas."""
from .models import MigrationRecord, MigrationReport, MigrationResult, MigrationState
from .runner import MigrationRunner, migrate_all
from .source import MigrationSource, MigrationUnit, MigrationVersion, split_statements

__all__ = [
	'MigrationRecord',
	'MigrationReport',
	'MigrationResult',
	'MigrationRunner',
	'MigrationSource',
	'MigrationState',
	'MigrationUnit',
	'MigrationVersion',
	'migrate_all',
	'split_statements',
]
