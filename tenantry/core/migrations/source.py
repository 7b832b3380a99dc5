# (c) Copyright Datacraft, 2026
"""
Versioned migration units shared by every tenant schema.

A location is a directory of files named ``V<version>__<description>``
with a ``.sql`` or ``.py`` extension, e.g. ``V1__create_product_table.sql``
or ``V1_2__add_sku.py``. SQL units are plain scripts; Python units define
``upgrade()`` and use ``alembic.op`` operations.
"""
import importlib.util
import logging
import re
import zlib
from dataclasses import dataclass, field
from functools import total_ordering
from pathlib import Path
from typing import Callable, Iterable, Iterator

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import Connection

from tenantry.core.exceptions import MigrationSourceError

logger = logging.getLogger(__name__)

UNIT_NAME_RE = re.compile(
	r"^V(?P<version>\d+(?:[._]\d+)*)__(?P<description>[^.]+)\.(?P<ext>sql|py)$"
)
DOLLAR_TAG_RE = re.compile(r"\$(?:[A-Za-z_][A-Za-z0-9_]*)?\$")

SQL = "SQL"
PYTHON = "PYTHON"


@total_ordering
@dataclass(frozen=True, slots=True)
class MigrationVersion:
	"""Dotted integer version compared numerically: ``1.10 > 1.9``."""
	parts: tuple[int, ...]

	@classmethod
	def parse(cls, value: str) -> "MigrationVersion":
		pieces = re.split(r"[._]", value)
		if not value or not all(p.isdigit() for p in pieces):
			raise MigrationSourceError(f"Invalid migration version: {value!r}")
		parts = [int(p) for p in pieces]
		# 1.0 and 1 are the same version
		while len(parts) > 1 and parts[-1] == 0:
			parts.pop()
		return cls(tuple(parts))

	def __lt__(self, other: "MigrationVersion") -> bool:
		return self.parts < other.parts

	def __str__(self) -> str:
		return ".".join(str(p) for p in self.parts)


def checksum(content: str) -> int:
	"""CRC32 of normalised content, as a signed 32-bit integer."""
	normalised = content.lstrip("\ufeff").replace("\r\n", "\n")
	crc = zlib.crc32(normalised.encode("utf-8"))
	return crc - (1 << 32) if crc >= (1 << 31) else crc


def _is_escape_string_prefix(script: str, quote_at: int) -> bool:
	"""True if the quote at ``quote_at`` opens an ``E'...'`` literal."""
	if quote_at < 1 or script[quote_at - 1] not in "Ee":
		return False
	if quote_at < 2:
		return True
	before = script[quote_at - 2]
	return not (before.isalnum() or before == "_")


def split_statements(script: str) -> list[str]:
	"""
	Split a SQL script into statements on top-level semicolons.

	Semicolons inside comments, quoted strings, quoted identifiers and
	dollar-quoted bodies do not end a statement. In ``E'...'`` strings a
	backslash escapes the next character. Comment-only fragments are
	dropped.
	"""
	statements: list[str] = []
	buf: list[str] = []
	has_code = False
	i = 0
	n = len(script)

	while i < n:
		ch = script[i]

		if ch == "-" and script.startswith("--", i):
			end = script.find("\n", i)
			end = n if end == -1 else end
			buf.append(script[i:end])
			i = end
			continue

		if ch == "/" and script.startswith("/*", i):
			depth = 0
			j = i
			while j < n:
				if script.startswith("/*", j):
					depth += 1
					j += 2
				elif script.startswith("*/", j):
					depth -= 1
					j += 2
					if depth == 0:
						break
				else:
					j += 1
			buf.append(script[i:j])
			i = j
			continue

		if ch in ("'", '"'):
			backslash_escapes = ch == "'" and _is_escape_string_prefix(script, i)
			j = i + 1
			while j < n:
				if backslash_escapes and script[j] == "\\":
					j += 2
					continue
				if script[j] == ch:
					# doubled quote is an escaped quote
					if j + 1 < n and script[j + 1] == ch:
						j += 2
						continue
					break
				j += 1
			buf.append(script[i:j + 1])
			has_code = True
			i = j + 1
			continue

		if ch == "$":
			match = DOLLAR_TAG_RE.match(script, i)
			if match:
				tag = match.group(0)
				end = script.find(tag, match.end())
				end = n if end == -1 else end + len(tag)
				buf.append(script[i:end])
				has_code = True
				i = end
				continue

		if ch == ";":
			if has_code:
				statements.append("".join(buf).strip())
			buf = []
			has_code = False
			i += 1
			continue

		if not ch.isspace():
			has_code = True
		buf.append(ch)
		i += 1

	if has_code:
		statements.append("".join(buf).strip())
	return statements


@dataclass(frozen=True)
class MigrationUnit:
	"""One versioned change applied to a schema exactly once."""
	version: MigrationVersion
	description: str
	type: str
	path: Path
	checksum: int
	content: str = field(repr=False)

	@property
	def script(self) -> str:
		return self.path.name

	def statements(self) -> list[str]:
		return split_statements(self.content)

	def load_upgrade(self) -> Callable[[], None]:
		module_name = f"tenantry_migration_v{str(self.version).replace('.', '_')}"
		spec = importlib.util.spec_from_file_location(module_name, self.path)
		if spec is None or spec.loader is None:
			raise MigrationSourceError(f"Cannot load migration {self.script}")
		module = importlib.util.module_from_spec(spec)
		spec.loader.exec_module(module)
		upgrade = getattr(module, "upgrade", None)
		if not callable(upgrade):
			raise MigrationSourceError(f"Migration {self.script} defines no upgrade()")
		return upgrade

	def apply(self, connection: Connection) -> None:
		"""Execute the unit on ``connection`` inside the caller's transaction."""
		if self.type == SQL:
			for statement in self.statements():
				connection.exec_driver_sql(statement)
		else:
			upgrade = self.load_upgrade()
			context = MigrationContext.configure(connection=connection)
			with Operations.context(context):
				upgrade()


def load_unit(path: Path) -> MigrationUnit | None:
	"""Parse a migration file, returning None for files that are not units."""
	match = UNIT_NAME_RE.match(path.name)
	if match is None:
		if path.name.startswith("V") and path.suffix in (".sql", ".py"):
			raise MigrationSourceError(f"Malformed migration file name: {path.name}")
		return None

	content = path.read_text(encoding="utf-8")
	return MigrationUnit(
		version=MigrationVersion.parse(match.group("version")),
		description=match.group("description").replace("_", " "),
		type=SQL if match.group("ext") == "sql" else PYTHON,
		path=path,
		checksum=checksum(content),
		content=content,
	)


class MigrationSource:
	"""The ordered collection of migration units read from one or more locations."""

	def __init__(self, units: Iterable[MigrationUnit]):
		by_version: dict[MigrationVersion, MigrationUnit] = {}
		for unit in units:
			existing = by_version.get(unit.version)
			if existing is not None:
				raise MigrationSourceError(
					f"Found more than one migration with version {unit.version}: "
					f"{existing.path} and {unit.path}"
				)
			by_version[unit.version] = unit
		self.units: tuple[MigrationUnit, ...] = tuple(
			by_version[v] for v in sorted(by_version)
		)

	@classmethod
	def from_locations(cls, locations: Iterable[Path | str]) -> "MigrationSource":
		units = []
		for location in locations:
			directory = Path(location)
			if not directory.is_dir():
				raise MigrationSourceError(f"Migration location not found: {directory}")
			for path in sorted(directory.iterdir()):
				if not path.is_file():
					continue
				unit = load_unit(path)
				if unit is not None:
					units.append(unit)
		source = cls(units)
		logger.info(
			f"Loaded migration source (units={len(source)}, "
			f"latest={source.latest_version})"
		)
		return source

	@property
	def latest_version(self) -> MigrationVersion | None:
		return self.units[-1].version if self.units else None

	def get(self, version: MigrationVersion) -> MigrationUnit | None:
		for unit in self.units:
			if unit.version == version:
				return unit
		return None

	def pending(self, high_water_mark: MigrationVersion | None) -> list[MigrationUnit]:
		if high_water_mark is None:
			return list(self.units)
		return [u for u in self.units if u.version > high_water_mark]

	def __iter__(self) -> Iterator[MigrationUnit]:
		return iter(self.units)

	def __len__(self) -> int:
		return len(self.units)
