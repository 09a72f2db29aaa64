import logging
from datetime import datetime, timezone
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

# Longest VARCHAR that fits a utf8mb4 row (65535 bytes / 4)
MAX_VARCHAR_LENGTH = 16383
TEXT_MAX_LENGTH = 65535
MEDIUMTEXT_MAX_LENGTH = 16777215
# Unsized strings that must be indexable
INDEXABLE_VARCHAR_LENGTH = 255

# Types that only accept parenthesised expression defaults (MySQL 8.0.13+)
EXPRESSION_DEFAULT_TYPES = ('TEXT', 'TINYTEXT', 'MEDIUMTEXT', 'LONGTEXT', 'JSON', 'BLOB')


class MySQLAdapter(DatabaseAdapter):
    """MySQL / MariaDB dialect"""

    name = "mysql"
    quote = '`'

    def __init__(self, engine: str = "InnoDB", charset: str = "utf8mb4",
                 logger: Optional[logging.Logger] = None):
        self.engine = engine
        self.charset = charset
        self.logger = logger or logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._encode = partial(transforms.encode_value, native_boolean=False)

    def map_type(self, field: ResolvedField) -> str:
        hints = field.hints
        if hints.mysql and hints.mysql.type:
            return hints.mysql.type

        field_type = field.field_type
        if field_type == FieldType.STRING:
            return self._string_type(field)
        if field_type == FieldType.INCREMENTAL_ID:
            return "BIGINT"
        if field_type == FieldType.NUMBER:
            return self._number_type(field)
        if field_type == FieldType.BOOLEAN:
            return "TINYINT(1)"
        if field_type == FieldType.DATE:
            if field.format != TimestampFormat.ISO:
                return "BIGINT"
            return "DATETIME" if hints.has_timezone else "TIMESTAMP"
        if field_type == FieldType.UUID:
            return "CHAR(36)"
        # json, array, object
        return "JSON"

    def _string_type(self, field: ResolvedField) -> str:
        size = field.hints.max_size
        if size is not None:
            if size <= MAX_VARCHAR_LENGTH:
                return f"VARCHAR({size})"
            if size <= TEXT_MAX_LENGTH:
                return "TEXT"
            if size <= MEDIUMTEXT_MAX_LENGTH:
                return "MEDIUMTEXT"
            return "LONGTEXT"
        if field.hints.indexed or field.hints.unique or field.primary_key:
            # TEXT cannot be indexed without a prefix length
            return f"VARCHAR({INDEXABLE_VARCHAR_LENGTH})"
        return "TEXT"

    def _number_type(self, field: ResolvedField) -> str:
        hints = field.hints
        precision = hints.precision
        if hints.integer or precision == 0 or self._is_auto_increment(field):
            if not precision:
                return "INT"
            if precision > 9:
                return "BIGINT"
            if precision > 4:
                return "INT"
            if precision > 2:
                return "SMALLINT"
            return "TINYINT"
        if precision is not None:
            return f"DECIMAL({precision},{hints.scale or 0})"
        return "DOUBLE"

    def _is_auto_increment(self, field: ResolvedField) -> bool:
        if field.field_type == FieldType.INCREMENTAL_ID:
            return True
        return bool(field.hints.mysql and field.hints.mysql.auto_increment)

    def map_field_to_column(self, field: ResolvedField) -> ColumnDefinition:
        mysql_hints = field.hints.mysql
        return column_from_field(
            field,
            self.map_type(field),
            self.render_default(field),
            auto_increment=self._is_auto_increment(field),
            unsigned=bool(mysql_hints and mysql_hints.unsigned),
            charset=mysql_hints.charset if mysql_hints else None,
            collation=mysql_hints.collation if mysql_hints else None,
        )

    def render_default(self, field: ResolvedField) -> Optional[str]:
        default = field.default
        if default is None or self._is_auto_increment(field):
            return None

        if isinstance(default, Generated):
            if not default.builtin or field.field_type != FieldType.DATE:
                return None
            if field.format == TimestampFormat.UNIX:
                return "(UNIX_TIMESTAMP())"
            if field.format == TimestampFormat.UNIX_MS:
                return "(FLOOR(UNIX_TIMESTAMP(NOW(3)) * 1000))"
            return "CURRENT_TIMESTAMP"

        if default.value is None:
            return "NULL"
        stored = self.to_database(default.value, field)
        if stored is None:
            return "NULL"

        if isinstance(stored, (bool, int, float)):
            literal = format_number(stored)
        elif field.field_type == FieldType.DATE and field.format == TimestampFormat.ISO:
            literal = quote_literal(self._datetime_literal(stored), escape_backslashes=True)
        else:
            literal = quote_literal(stored, escape_backslashes=True)

        if self.map_type(field).upper().startswith(EXPRESSION_DEFAULT_TYPES):
            return f"({literal})"
        return literal

    def _datetime_literal(self, stored: Any) -> str:
        """ISO text -> 'YYYY-MM-DD HH:MM:SS' in UTC; other text is kept as given"""
        try:
            moment = transforms.parse_datetime(stored)
        except ValueError:
            return str(stored)
        if not isinstance(moment, datetime):
            return str(stored)
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
        return moment.strftime('%Y-%m-%d %H:%M:%S')

    def generate_table_definition(self, schema: ResolvedSchema,
                                  catalog: Optional[Dict[str, ResolvedSchema]] = None) -> TableDefinition:
        return build_table_definition(self, schema, catalog, logger=self.logger)

    def _column_sql(self, col: ColumnDefinition, unique_indexed: set) -> str:
        parts = [quote_identifier(col.name, self.quote), col.type]
        if col.unsigned:
            parts.append("UNSIGNED")
        if col.charset:
            parts.append(f"CHARACTER SET {col.charset}")
        if col.collation:
            parts.append(f"COLLATE {col.collation}")
        if not col.nullable:
            parts.append("NOT NULL")
        if col.default_value is not None:
            parts.append(f"DEFAULT {col.default_value}")
        if col.auto_increment:
            parts.append("AUTO_INCREMENT")
        if col.primary_key:
            parts.append("PRIMARY KEY")
        elif col.unique and col.name not in unique_indexed:
            parts.append("UNIQUE")
        if col.comment:
            parts.append(f"COMMENT {quote_literal(col.comment, escape_backslashes=True)}")
        return ' '.join(parts)

    def _table_options(self, table: TableDefinition) -> str:
        options = []
        if self.engine:
            options.append(f"ENGINE={self.engine}")
        if self.charset:
            options.append(f"DEFAULT CHARSET={self.charset}")
        for col in table.columns:
            if col.auto_increment and col.auto_increment_start is not None:
                options.append(f"AUTO_INCREMENT={col.auto_increment_start}")
                break
        if table.comment:
            options.append(f"COMMENT={quote_literal(table.comment, escape_backslashes=True)}")
        return ' '.join(options)

    def generate_create_table_sql(self, table: TableDefinition) -> str:
        """Single CREATE TABLE statement; indexes are declared inline as KEY clauses"""
        unique_indexed = {idx.columns[0] for idx in table.indexes if idx.unique and len(idx.columns) == 1}

        body: List[str] = [self._column_sql(col, unique_indexed) for col in table.columns]
        pk_clause = primary_key_clause(table.primary_key, self.quote)
        if pk_clause:
            body.append(pk_clause)
        for idx in table.indexes:
            kind = "UNIQUE KEY" if idx.unique else "KEY"
            body.append(f"{kind} {quote_identifier(idx.name, self.quote)} ({quote_identifiers(idx.columns, self.quote)})")
        body.extend(foreign_key_clause(fk, self.quote) for fk in table.foreign_keys)

        return create_table_statement(table.name, body, self.quote, self._table_options(table))

    def to_database(self, value: Any, field: ResolvedField) -> Any:
        return transforms.to_database(value, field, self._encode)

    def from_database(self, value: Any, field: ResolvedField) -> Any:
        return transforms.from_database(value, field, self._decode)

    def _decode(self, value: Any, field: ResolvedField) -> Any:
        # text protocol results come back as strings
        if field.field_type in (FieldType.NUMBER, FieldType.INCREMENTAL_ID):
            return transforms.parse_numeric_string(value)
        return transforms.decode_value(value, field)
