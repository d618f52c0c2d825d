# src/wowhead/sql_builder.py
"""
Batch SQL builder: collects (key, values) rows for one table and renders
them as UPDATE statements or a single INSERT / INSERT IGNORE / REPLACE
statement.

Values are wrapped in single quotes as they are; escaping display text is
the caller's job (see wowhead.text.escape_text).
"""
import logging
import threading
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence

from .errors import ArgumentError, BuilderClosedError
from .schemas import QueryType, Record, TableSchema, parse_query_type

logger = logging.getLogger(__name__)

VERBS = {
    QueryType.Insert:       "INSERT INTO",
    QueryType.InsertIgnore: "INSERT IGNORE INTO",
    QueryType.Replace:      "REPLACE INTO",
}


class BuilderPhase(str, Enum):
    Accumulating = "accumulating"
    Rendered     = "rendered"


def format_value(value: Any) -> str:
    """Locale-invariant text for a key or field value."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    return str(value)


class SqlBuilder:
    def __init__(
        self,
        table_name: str,
        key_name: str = "entry",
        query_type: Any = QueryType.Insert,
        allow_empty_values: bool = False,
        append_delete_query: bool = False,
    ):
        # Resolve first so a bad query type leaves nothing half-built
        qtype = parse_query_type(query_type)
        if not table_name or not key_name:
            raise ArgumentError("table_name and key_name are required")

        self.table_name = table_name
        self.key_name = key_name
        self.query_type = qtype
        self.allow_empty_values = bool(allow_empty_values)
        self.append_delete_query = bool(append_delete_query)

        self._fields: List[str] = []
        self._items: List[Record] = []
        self._queries: List[str] = []
        self._phase = BuilderPhase.Accumulating
        self._lock = threading.Lock()

    @classmethod
    def from_schema(cls, schema: TableSchema, settings) -> "SqlBuilder":
        """Builder for `schema` with write options taken from a Settings object."""
        builder = cls(
            schema.table_name,
            schema.key_name,
            query_type=settings.query_type,
            allow_empty_values=settings.allow_empty_values,
            append_delete_query=settings.append_delete_query,
        )
        builder.declare_fields(schema.fields)
        return builder

    # ── Accumulation ─────────────────────────────────────────────────────────
    @property
    def fields(self) -> List[str]:
        return list(self._fields)

    @property
    def phase(self) -> BuilderPhase:
        return self._phase

    def _check_open(self):
        if self._phase is not BuilderPhase.Accumulating:
            raise BuilderClosedError(
                f"SqlBuilder for `{self.table_name}` was already rendered"
            )

    def declare_fields(self, column_names: Optional[Iterable[str]]):
        if column_names is None or isinstance(column_names, str):
            raise ArgumentError("column_names must be a sequence of column names")
        names = list(column_names)
        if not names:
            raise ArgumentError("at least one field name is required")
        if any(not name for name in names):
            raise ArgumentError(f"empty field name in {names!r}")

        with self._lock:
            self._check_open()
            if self._items:
                raise ArgumentError("fields must be declared before appending values")
            if self._fields:
                raise ArgumentError(f"fields already declared: {self._fields!r}")
            self._fields.extend(names)

    def set_fields_names(self, *names: str):
        self.declare_fields(names)

    def append(self, key: Any, values: Optional[Sequence[Any]]):
        if key is None or values is None:
            raise ArgumentError("key and values are required")
        if isinstance(values, str):
            raise ArgumentError("values must be a sequence, not a single string")
        values = tuple(values)
        if any(v is None for v in values):
            raise ArgumentError(f"None value for key {key!r}")

        if isinstance(key, bool) or not isinstance(key, (int, str)):
            key = format_value(key)
        row = tuple(format_value(v) for v in values)
        with self._lock:
            self._check_open()
            if not self._fields:
                raise ArgumentError("declare fields before appending values")
            if len(row) != len(self._fields):
                raise ArgumentError(
                    f"key {key!r}: got {len(row)} values for {len(self._fields)} fields"
                )
            self._items.append(Record(key=key, values=row))

    def append_fields_value(self, key: Any, *values: Any):
        self.append(key, values)

    def append_query(self, query: str):
        """Add a literal statement, emitted ahead of the generated ones."""
        if query is None or not query.strip():
            raise ArgumentError("query must not be blank")
        with self._lock:
            self._check_open()
            self._queries.append(query.rstrip("\n") + "\n")

    def is_empty(self) -> bool:
        return len(self._items) == 0

    def __len__(self):
        return len(self._items)

    # ── Rendering ────────────────────────────────────────────────────────────
    def render(self) -> str:
        with self._lock:
            self._phase = BuilderPhase.Rendered
        if self.is_empty():
            return ""

        if self.query_type is QueryType.Update:
            body = self._build_update()
        else:
            body = self._build_replace_insert()

        logger.debug(
            f"Rendered {len(self._items)} rows for `{self.table_name}` ({self.query_type.value})"
        )
        return "".join(self._queries) + body

    def __str__(self):
        return (
            f"SqlBuilder(`{self.table_name}`, {self.query_type.value}, "
            f"{len(self._items)} rows, {self._phase.value})"
        )

    def _build_update(self) -> str:
        lines = []
        for item in self._items:
            pairs = [
                f"`{field}` = '{value}'"
                for field, value in zip(self._fields, item.values)
                if self.allow_empty_values or value.strip()
            ]
            # nothing left to set
            if not pairs:
                continue
            lines.append(
                f"UPDATE `{self.table_name}` SET {', '.join(pairs)} "
                f"WHERE `{self.key_name}` = {format_value(item.key)};\n"
            )
        return "".join(lines)

    def _build_replace_insert(self) -> str:
        lines = []
        if self.append_delete_query:
            # One DELETE per batch, keyed on the first row only
            first_key = format_value(self._items[0].key)
            lines.append(
                f"DELETE FROM `{self.table_name}` WHERE `{self.key_name}` = '{first_key}';\n"
            )

        columns = ", ".join(f"`{name}`" for name in [self.key_name] + self._fields)
        lines.append(f"{VERBS[self.query_type]} `{self.table_name}` ({columns}) VALUES\n")

        last = len(self._items) - 1
        for i, item in enumerate(self._items):
            cells = [format_value(item.key)] + list(item.values)
            tuple_sql = ", ".join(f"'{cell}'" for cell in cells)
            lines.append(f"({tuple_sql}){',' if i < last else ';'}\n")
        return "".join(lines)
