# (c) Copyright Datacraft, 2026
"""Application settings configuration."""
from pathlib import Path
from typing import Annotated, Any

from pydantic import PostgresDsn, Field, computed_field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from tenantry.core.tenancy.registry import DEFAULT_SCHEMA, TenantRegistry

MIGRATION_DIR = Path(__file__).parent.parent / "db" / "migration"


def _split_csv(value: Any) -> Any:
	if isinstance(value, str):
		return [item.strip() for item in value.split(",") if item.strip()]
	return value


class Settings(BaseSettings):
	db_url: PostgresDsn
	db_ssl: bool = False
	db_pool_size: int = Field(gt=0, default=5)
	db_max_overflow: int = Field(ge=0, default=10)
	# Seconds to wait for a free pooled connection
	db_pool_timeout: float = Field(gt=0, default=30.0)

	# Tenancy
	tenants: Annotated[list[str], NoDecode] = Field(default_factory=list)
	default_schema: str = DEFAULT_SCHEMA
	tenant_header: str = "X-Tenant-Id"

	# Migrations
	migration_locations: Annotated[list[Path], NoDecode] = Field(
		default_factory=lambda: [MIGRATION_DIR]
	)
	migrate_on_startup: bool = True
	fail_on_migration_error: bool = True

	log_config: Path | None = None
	api_prefix: str = ''

	@field_validator("tenants", "migration_locations", mode="before")
	@classmethod
	def split_comma_separated(cls, value: Any) -> Any:
		return _split_csv(value)

	@computed_field
	@property
	def async_db_url(self) -> str:
		url = str(self.db_url)
		# Handle various PostgreSQL URL formats
		if "postgresql+psycopg://" in url:
			return url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)
		elif "postgresql://" in url:
			return url.replace("postgresql://", "postgresql+asyncpg://", 1)
		return url

	def tenant_registry(self) -> TenantRegistry:
		return TenantRegistry(self.tenants, default_schema=self.default_schema)

	model_config = SettingsConfigDict(
		env_prefix='tenantry_',
		env_file='.env',
		env_file_encoding='utf-8',
		extra='ignore',
	)


_settings: Settings | None = None


def get_settings() -> Settings:
	global _settings
	if _settings is None:
		_settings = Settings()
	return _settings
