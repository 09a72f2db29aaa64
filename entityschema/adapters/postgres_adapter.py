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

SERIAL_MAX_PRECISION = 9
SERIAL_TYPES = ("SERIAL", "BIGSERIAL", "SMALLSERIAL")


class PostgresAdapter(DatabaseAdapter):
    """PostgreSQL dialect: native BOOLEAN, UUID and JSONB"""

    name = "postgres"
    quote = '"'

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._encode = partial(transforms.encode_value, native_boolean=True)

    def map_type(self, field: ResolvedField) -> str:
        hints = field.hints
        if hints.postgres and hints.postgres.type:
            return hints.postgres.type

        field_type = field.field_type
        if field_type == FieldType.STRING:
            return f"VARCHAR({hints.max_size})" if hints.max_size else "TEXT"
        if field_type == FieldType.INCREMENTAL_ID or self._uses_serial(field):
            return self._serial_type(field)
        if field_type == FieldType.NUMBER:
            precision = hints.precision
            if hints.integer or precision == 0:
                return "BIGINT" if precision and precision > 9 else "INTEGER"
            if precision:
                return f"NUMERIC({precision},{hints.scale or 0})"
            return "DOUBLE PRECISION"
        if field_type == FieldType.BOOLEAN:
            return "BOOLEAN"
        if field_type == FieldType.DATE:
            if field.format != TimestampFormat.ISO:
                return "BIGINT"
            return "TIMESTAMPTZ" if hints.has_timezone else "TIMESTAMP"
        if field_type == FieldType.UUID:
            return "UUID"
        # json, array, object
        return "JSONB"

    def _uses_serial(self, field: ResolvedField) -> bool:
        return bool(field.hints.postgres and field.hints.postgres.use_serial)

    def _serial_type(self, field: ResolvedField) -> str:
        precision = field.hints.precision
        if precision and precision <= SERIAL_MAX_PRECISION:
            return "SERIAL"
        return "BIGSERIAL"

    def _is_auto_increment(self, field: ResolvedField) -> bool:
        return field.field_type == FieldType.INCREMENTAL_ID or self._uses_serial(field)

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
            if not default.builtin:
                return None
            if field.field_type == FieldType.UUID:
                return "gen_random_uuid()"
            if field.field_type != FieldType.DATE:
                return None
            if field.format == TimestampFormat.UNIX:
                return "(EXTRACT(EPOCH FROM NOW())::BIGINT)"
            if field.format == TimestampFormat.UNIX_MS:
                return "((EXTRACT(EPOCH FROM NOW()) * 1000)::BIGINT)"
            return "NOW()"

        if default.value is None:
            return "NULL"
        stored = self.to_database(default.value, field)
        if stored is None:
            return "NULL"

        if isinstance(stored, bool):
            return "TRUE" if stored else "FALSE"
        if isinstance(stored, (int, float)):
            return format_number(stored)
        literal = quote_literal(stored)
        if field.field_type.is_json_like:
            return f"{literal}::jsonb"
        if field.field_type == FieldType.DATE and field.format == TimestampFormat.ISO:
            cast = "timestamptz" if field.hints.has_timezone else "timestamp"
            return f"{literal}::{cast}"
        if field.field_type == FieldType.UUID:
            return f"{literal}::uuid"
        return literal

    def generate_table_definition(self, schema: ResolvedSchema,
                                  catalog: Optional[Dict[str, ResolvedSchema]] = None) -> TableDefinition:
        return build_table_definition(self, schema, catalog, logger=self.logger)

    def _column_sql(self, col: ColumnDefinition, unique_indexed: set) -> str:
        parts = [quote_identifier(col.name, self.quote), col.type]
        if col.primary_key:
            parts.append("PRIMARY KEY")
        elif not col.nullable:
            parts.append("NOT NULL")
        if col.unique and not col.primary_key and col.name not in unique_indexed:
            parts.append("UNIQUE")
        if col.default_value is not None:
            parts.append(f"DEFAULT {col.default_value}")
        return ' '.join(parts)

    def generate_create_table_sql(self, table: TableDefinition) -> str:
        """
        CREATE TABLE followed by CREATE INDEX, COMMENT ON and, for a serial
        column with a start value, a setval() call.
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

        if table.comment:
            statements.append(f"COMMENT ON TABLE {table_ident} IS {quote_literal(table.comment)};")
        for col in table.columns:
            if col.comment:
                statements.append(
                    f"COMMENT ON COLUMN {table_ident}.{quote_identifier(col.name, self.quote)} "
                    f"IS {quote_literal(col.comment)};"
                )

        for col in table.columns:
            if col.auto_increment_start is not None and col.type.upper() in SERIAL_TYPES:
                statements.append(
                    f"SELECT setval(pg_get_serial_sequence({quote_literal(table_ident)}, "
                    f"{quote_literal(col.name)}), {col.auto_increment_start}, false) "
                    f"WHERE NOT EXISTS (SELECT 1 FROM {table_ident});"
                )
        return '\n'.join(statements)

    def to_database(self, value: Any, field: ResolvedField) -> Any:
        return transforms.to_database(value, field, self._encode)

    def from_database(self, value: Any, field: ResolvedField) -> Any:
        return transforms.from_database(value, field, transforms.decode_value)
