import logging
from functools import partial
from typing import Any, Dict, List, Optional

from ..core.enums import FieldType, TimestampFormat
from ..core.schema_models import Generated, ResolvedField, ResolvedSchema
from ..core.table_models import ColumnDefinition, TableDefinition
from ..utils.table_generator import build_table_definition
from . import transforms
from .base_adapter import DatabaseAdapter, column_from_field
from .sql_utils import (
    create_table_statement, foreign_key_clause, format_number, primary_key_clause,
    quote_identifier, quote_identifiers, quote_literal
)


class SQLiteAdapter(DatabaseAdapter):
    """SQLite dialect: TEXT/INTEGER/REAL storage classes, 0/1 booleans"""

    name = "sqlite"
    quote = '"'

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._encode = partial(transforms.encode_value, native_boolean=False)

    def map_type(self, field: ResolvedField) -> str:
        hints = field.hints
        if hints.sqlite and hints.sqlite.type:
            return hints.sqlite.type

        field_type = field.field_type
        if field_type == FieldType.INCREMENTAL_ID:
            return "INTEGER"
        if field_type == FieldType.NUMBER:
            if hints.integer or hints.precision == 0 or self._is_auto_increment(field):
                return "INTEGER"
            return "REAL"
        if field_type == FieldType.BOOLEAN:
            return "INTEGER"
        if field_type == FieldType.DATE:
            return "TEXT" if field.format == TimestampFormat.ISO else "INTEGER"
        # string, uuid, json, array, object
        return "TEXT"

    def _is_auto_increment(self, field: ResolvedField) -> bool:
        if field.field_type == FieldType.INCREMENTAL_ID:
            return True
        return bool(field.hints.sqlite and field.hints.sqlite.auto_increment)

    def map_field_to_column(self, field: ResolvedField) -> ColumnDefinition:
        return column_from_field(
            field,
            self.map_type(field),
            self.render_default(field),
            auto_increment=self._is_auto_increment(field),
        )

    def render_default(self, field: ResolvedField) -> Optional[str]:
        default = field.default
        if default is None or self._is_auto_increment(field):
            return None

        if isinstance(default, Generated):
            if not default.builtin or field.field_type != FieldType.DATE:
                return None
            if field.format == TimestampFormat.UNIX:
                return "(CAST(strftime('%s', 'now') AS INTEGER))"
            if field.format == TimestampFormat.UNIX_MS:
                return "(CAST((julianday('now') - 2440587.5) * 86400000 AS INTEGER))"
            return "CURRENT_TIMESTAMP"

        if default.value is None:
            return "NULL"
        stored = self.to_database(default.value, field)
        if stored is None:
            return "NULL"
        if isinstance(stored, (bool, int, float)):
            return format_number(stored)
        return quote_literal(stored)

    def generate_table_definition(self, schema: ResolvedSchema,
                                  catalog: Optional[Dict[str, ResolvedSchema]] = None) -> TableDefinition:
        return build_table_definition(self, schema, catalog, logger=self.logger)

    @staticmethod
    def _is_autoincrement(col: ColumnDefinition) -> bool:
        # AUTOINCREMENT is only valid on an INTEGER PRIMARY KEY
        return col.primary_key and col.auto_increment and col.type.upper() == "INTEGER"

    def _column_sql(self, col: ColumnDefinition, unique_indexed: set) -> str:
        parts = [quote_identifier(col.name, self.quote), col.type]
        if col.primary_key:
            parts.append("PRIMARY KEY")
            if self._is_autoincrement(col):
                parts.append("AUTOINCREMENT")
        elif not col.nullable:
            parts.append("NOT NULL")
        if col.unique and not col.primary_key and col.name not in unique_indexed:
            parts.append("UNIQUE")
        if col.default_value is not None:
            parts.append(f"DEFAULT {col.default_value}")
        return ' '.join(parts)

    def generate_create_table_sql(self, table: TableDefinition) -> str:
        """
        CREATE TABLE followed by CREATE INDEX statements and, when an
        AUTOINCREMENT start is set, a sqlite_sequence seed.
        """
        unique_indexed = {idx.columns[0] for idx in table.indexes if idx.unique and len(idx.columns) == 1}

        body: List[str] = [self._column_sql(col, unique_indexed) for col in table.columns]
        pk_clause = primary_key_clause(table.primary_key, self.quote)
        if pk_clause:
            body.append(pk_clause)
        body.extend(foreign_key_clause(fk, self.quote) for fk in table.foreign_keys)

        statements = [create_table_statement(table.name, body, self.quote)]
        table_ident = quote_identifier(table.name, self.quote)
        for idx in table.indexes:
            unique = "UNIQUE " if idx.unique else ""
            statements.append(
                f"CREATE {unique}INDEX IF NOT EXISTS {quote_identifier(idx.name, self.quote)} "
                f"ON {table_ident} ({quote_identifiers(idx.columns, self.quote)});"
            )

        for col in table.columns:
            if not self._is_autoincrement(col) or col.auto_increment_start is None:
                continue
            # sqlite_sequence holds the last used value
            seq = col.auto_increment_start - 1
            name = quote_literal(table.name)
            statements.append(
                f"INSERT INTO sqlite_sequence (name, seq) SELECT {name}, {seq} "
                f"WHERE NOT EXISTS (SELECT 1 FROM sqlite_sequence WHERE name = {name});"
            )
        return '\n'.join(statements)

    def to_database(self, value: Any, field: ResolvedField) -> Any:
        return transforms.to_database(value, field, self._encode)

    def from_database(self, value: Any, field: ResolvedField) -> Any:
        return transforms.from_database(value, field, transforms.decode_value)
