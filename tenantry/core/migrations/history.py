# (c) Copyright Datacraft, 2026
"""
Per-schema migration history.

Every tenant schema owns a ``tenantry_schema_history`` table; nothing
about migration state is shared between tenants. The table is declared
without a schema and routed with ``schema_translate_map``.
"""
from sqlalchemy import (
	Boolean,
	Column,
	Connection,
	Integer,
	MetaData,
	String,
	Table,
	func,
	inspect,
	select,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP

from .models import MigrationRecord
from .source import MigrationUnit

HISTORY_TABLE = "tenantry_schema_history"

metadata = MetaData()

schema_history = Table(
	HISTORY_TABLE,
	metadata,
	Column("installed_rank", Integer, primary_key=True, autoincrement=False),
	Column("version", String(50), nullable=False, unique=True),
	Column("description", String(200), nullable=False),
	Column("type", String(20), nullable=False),
	Column("script", String(1000), nullable=False),
	Column("checksum", Integer, nullable=True),
	Column("installed_by", String(100), nullable=False, server_default=func.current_user()),
	Column(
		"installed_on",
		TIMESTAMP(timezone=True),
		nullable=False,
		server_default=func.now(),
	),
	Column("execution_time", Integer, nullable=False),
	Column("success", Boolean, nullable=False),
)


def _in_schema(connection: Connection, schema: str) -> Connection:
	return connection.execution_options(schema_translate_map={None: schema})


def history_exists(connection: Connection, schema: str) -> bool:
	return inspect(connection).has_table(HISTORY_TABLE, schema=schema)


def ensure_history_table(connection: Connection, schema: str) -> bool:
	"""Create the history table in ``schema``. Returns True if it was created."""
	if history_exists(connection, schema):
		return False
	schema_history.create(_in_schema(connection, schema))
	return True


def applied_records(connection: Connection, schema: str) -> list[MigrationRecord]:
	"""History rows of ``schema`` in application order."""
	stmt = select(schema_history).order_by(schema_history.c.installed_rank)
	rows = _in_schema(connection, schema).execute(stmt).mappings()
	return [
		MigrationRecord(
			installed_rank=row["installed_rank"],
			version=row["version"],
			description=row["description"],
			type=row["type"],
			script=row["script"],
			checksum=row["checksum"],
			installed_on=row["installed_on"],
			execution_time=row["execution_time"],
			success=row["success"],
		)
		for row in rows
	]


def record_applied(
	connection: Connection,
	schema: str,
	unit: MigrationUnit,
	installed_rank: int,
	execution_time: int,
) -> None:
	_in_schema(connection, schema).execute(
		schema_history.insert().values(
			installed_rank=installed_rank,
			version=str(unit.version),
			description=unit.description,
			type=unit.type,
			script=unit.script,
			checksum=unit.checksum,
			execution_time=execution_time,
			success=True,
		)
	)
