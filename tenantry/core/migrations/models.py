# (c) Copyright Datacraft, 2026
"""Migration state and result types."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from tenantry.core.exceptions import MigrationError


class MigrationState(str, Enum):
	PENDING = "pending"
	MIGRATING = "migrating"
	MIGRATED = "migrated"
	FAILED = "failed"


@dataclass(frozen=True, slots=True)
class MigrationRecord:
	"""One row of a schema's migration history."""
	installed_rank: int
	version: str
	description: str
	type: str
	script: str
	checksum: int | None
	installed_on: datetime | None
	execution_time: int
	success: bool


@dataclass(slots=True)
class MigrationResult:
	"""Outcome of one migration run against one schema."""
	schema: str
	state: MigrationState = MigrationState.PENDING
	migrations_applied: int = 0
	initial_version: str | None = None
	target_version: str | None = None
	applied_versions: list[str] = field(default_factory=list)
	warnings: list[str] = field(default_factory=list)
	error: str | None = None
	failed_version: str | None = None

	@property
	def success(self) -> bool:
		return self.state is MigrationState.MIGRATED


@dataclass(slots=True)
class MigrationReport:
	"""Per-schema results of one runner invocation, in registry order."""
	results: list[MigrationResult] = field(default_factory=list)

	@property
	def succeeded(self) -> list[MigrationResult]:
		return [r for r in self.results if r.state is MigrationState.MIGRATED]

	@property
	def failed(self) -> list[MigrationResult]:
		return [r for r in self.results if r.state is MigrationState.FAILED]

	@property
	def success(self) -> bool:
		return not self.failed

	@property
	def migrations_applied(self) -> int:
		return sum(r.migrations_applied for r in self.results)

	def get(self, schema: str) -> MigrationResult | None:
		for result in self.results:
			if result.schema == schema:
				return result
		return None

	def raise_for_failures(self) -> None:
		if self.failed:
			raise MigrationError(self.failed)
