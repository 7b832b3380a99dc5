# (c) Copyright Datacraft, 2026
"""Configuration module for tenantry."""
from .settings import MIGRATION_DIR, Settings, get_settings

__all__ = [
	'MIGRATION_DIR',
	'Settings',
	'get_settings',
]
