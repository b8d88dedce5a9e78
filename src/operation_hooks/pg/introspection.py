"""PostgreSQL catalog introspection.

Uses psycopg v3 (AsyncConnection with dict_row cursors) to read the parts
of pg_catalog the operation hooks need: types, tables with their columns
and unique constraints, and functions with their argument modes.

The catalog is read once per schema build and treated as immutable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from psycopg.rows import dict_row

JSON_TYPE_ID = 114
JSONB_TYPE_ID = 3802

# Argument modes that are passed by the caller ('i' = IN, 'b' = INOUT)
INPUT_ARG_MODES = ("i", "b")

TABLE_KINDS = ("r", "v", "m", "f", "p")


@dataclass
class PgType:
    id: int
    name: str
    namespace_name: str
    category: str = ""

    @property
    def is_pg_array(self) -> bool:
        return self.category == "A"

    @property
    def is_json(self) -> bool:
        return self.id in (JSON_TYPE_ID, JSONB_TYPE_ID)


@dataclass
class PgAttribute:
    class_id: int
    num: int
    name: str
    type_id: int
    type_modifier: int | None = None
    type: PgType | None = None


@dataclass
class PgConstraint:
    """A primary key ('p') or unique ('u') constraint."""

    id: int
    name: str
    type: str
    class_id: int
    key_attribute_nums: list[int] = field(default_factory=list)
    key_attributes: list[PgAttribute] = field(default_factory=list)
    table: PgClass | None = field(default=None, repr=False, compare=False)

    @property
    def is_primary_key(self) -> bool:
        return self.type == "p"


@dataclass
class PgClass:
    id: int
    name: str
    namespace_name: str
    kind: str = "r"
    type_id: int | None = None
    attributes: list[PgAttribute] = field(default_factory=list)
    constraints: list[PgConstraint] = field(default_factory=list)

    @property
    def primary_key_constraint(self) -> PgConstraint | None:
        for constraint in self.constraints:
            if constraint.is_primary_key:
                return constraint
        return None

    def attribute(self, num: int) -> PgAttribute | None:
        for attribute in self.attributes:
            if attribute.num == num:
                return attribute
        return None


@dataclass
class PgProc:
    id: int
    name: str
    namespace_name: str
    arg_type_ids: list[int] = field(default_factory=list)
    arg_modes: list[str] = field(default_factory=list)
    return_type_id: int | None = None

    @property
    def input_arg_type_ids(self) -> list[int]:
        # An empty mode list means every argument is IN
        return [
            type_id
            for idx, type_id in enumerate(self.arg_type_ids)
            if not self.arg_modes or self.arg_modes[idx] in INPUT_ARG_MODES
        ]

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace_name}.{self.name}"


class PgCatalog:
    """Introspected view of the database used while building hooks."""

    def __init__(
        self,
        types: list[PgType] | None = None,
        classes: list[PgClass] | None = None,
        procedures: list[PgProc] | None = None,
    ):
        self.types_by_id: dict[int, PgType] = {t.id: t for t in types or []}
        self.classes_by_id: dict[int, PgClass] = {c.id: c for c in classes or []}
        self.procedures: list[PgProc] = list(procedures or [])

    @classmethod
    def from_rows(
        cls,
        types: list[dict[str, Any]] = (),
        classes: list[dict[str, Any]] = (),
        attributes: list[dict[str, Any]] = (),
        constraints: list[dict[str, Any]] = (),
        procedures: list[dict[str, Any]] = (),
    ) -> PgCatalog:
        """Build a catalog from rows shaped like the introspection queries'."""
        pg_types = [PgType(**row) for row in types]
        pg_classes = [PgClass(**row) for row in classes]
        catalog = cls(
            types=pg_types,
            classes=pg_classes,
            procedures=[
                PgProc(
                    **{
                        **row,
                        "arg_type_ids": list(row.get("arg_type_ids") or []),
                        "arg_modes": list(row.get("arg_modes") or []),
                    }
                )
                for row in procedures
            ],
        )

        for row in attributes:
            attribute = PgAttribute(**row)
            attribute.type = catalog.type_by_id(attribute.type_id)
            table = catalog.classes_by_id.get(attribute.class_id)
            if table is not None:
                table.attributes.append(attribute)

        for row in constraints:
            constraint = PgConstraint(
                **{**row, "key_attribute_nums": list(row.get("key_attribute_nums") or [])}
            )
            table = catalog.classes_by_id.get(constraint.class_id)
            if table is None:
                continue
            constraint.table = table
            constraint.key_attributes = [
                attribute
                for attribute in (table.attribute(num) for num in constraint.key_attribute_nums)
                if attribute is not None
            ]
            table.constraints.append(constraint)

        return catalog

    def type_by_id(self, type_id: int | None) -> PgType | None:
        if type_id is None:
            return None
        return self.types_by_id.get(type_id)

    def class_by_id(self, class_id: int) -> PgClass | None:
        return self.classes_by_id.get(class_id)

    def table_named(self, name: str, namespace_name: str | None = None) -> PgClass | None:
        for table in self.classes_by_id.values():
            if table.name == name and (
                namespace_name is None or table.namespace_name == namespace_name
            ):
                return table
        return None

    def procedure_named(self, name: str) -> PgProc | None:
        """Return the first introspected function with this name."""
        for proc in self.procedures:
            if proc.name == name:
                return proc
        return None

    @property
    def tables(self) -> list[PgClass]:
        return list(self.classes_by_id.values())


# ---------------------------------------------------------------------------
# Introspection queries
# ---------------------------------------------------------------------------

TYPES_SQL = """
select t.oid as id, t.typname as name, n.nspname as namespace_name,
       t.typcategory::text as category
from pg_catalog.pg_type t
join pg_catalog.pg_namespace n on n.oid = t.typnamespace
"""

CLASSES_SQL = """
select c.oid as id, c.relname as name, n.nspname as namespace_name,
       c.relkind::text as kind, c.reltype as type_id
from pg_catalog.pg_class c
join pg_catalog.pg_namespace n on n.oid = c.relnamespace
where n.nspname = any(%(schemas)s)
  and c.relkind::text = any(%(kinds)s)
"""

ATTRIBUTES_SQL = """
select a.attrelid as class_id, a.attnum::int as num, a.attname as name,
       a.atttypid as type_id, a.atttypmod as type_modifier
from pg_catalog.pg_attribute a
join pg_catalog.pg_class c on c.oid = a.attrelid
join pg_catalog.pg_namespace n on n.oid = c.relnamespace
where n.nspname = any(%(schemas)s)
  and a.attnum > 0
  and not a.attisdropped
order by a.attrelid, a.attnum
"""

CONSTRAINTS_SQL = """
select con.oid as id, con.conname as name, con.contype::text as type,
       con.conrelid as class_id, con.conkey::int[] as key_attribute_nums
from pg_catalog.pg_constraint con
join pg_catalog.pg_namespace n on n.oid = con.connamespace
where n.nspname = any(%(schemas)s)
  and con.contype in ('p', 'u')
"""

PROCEDURES_SQL = """
select p.oid as id, p.proname as name, n.nspname as namespace_name,
       coalesce(p.proallargtypes, p.proargtypes::oid[]) as arg_type_ids,
       coalesce(p.proargmodes::text[], '{}'::text[]) as arg_modes,
       p.prorettype as return_type_id
from pg_catalog.pg_proc p
join pg_catalog.pg_namespace n on n.oid = p.pronamespace
where n.nspname = any(%(schemas)s)
  and p.prokind = 'f'
order by n.nspname, p.proname
"""


async def introspect(conn: Any, schemas: list[str]) -> PgCatalog:
    """Read the catalog for the given schemas.

    Args:
        conn: A psycopg AsyncConnection
        schemas: Schema (namespace) names whose tables and functions to load
    """
    params = {"schemas": list(schemas), "kinds": list(TABLE_KINDS)}
    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(TYPES_SQL)
        types = await cur.fetchall()
        await cur.execute(CLASSES_SQL, params)
        classes = await cur.fetchall()
        await cur.execute(ATTRIBUTES_SQL, params)
        attributes = await cur.fetchall()
        await cur.execute(CONSTRAINTS_SQL, params)
        constraints = await cur.fetchall()
        await cur.execute(PROCEDURES_SQL, params)
        procedures = await cur.fetchall()

    return PgCatalog.from_rows(
        types=types,
        classes=classes,
        attributes=attributes,
        constraints=constraints,
        procedures=procedures,
    )
