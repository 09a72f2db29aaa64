"""
Test cases for the SQLite adapter.
"""
from datetime import datetime, timezone
import pytest

from entityschema.config.resolver import resolve
from entityschema.core.enums import FieldType, TimestampFormat
from entityschema.core.fields import (
    array_field, boolean_field, created_at_field, incremental_id_field, json_field, number_field, string_field,
    timestamp_field
)
from entityschema.core.schema_models import (
    DialectHints, EntitySchema, FieldDescriptor, Generated, ResolvedField, SQLiteHints, Static
)


def rf(descriptor, name='value'):
    return ResolvedField.from_descriptor(name, descriptor)


class TestSQLiteTypeMapping:
    """Test field -> SQLite column types"""

    @pytest.mark.parametrize('descriptor,expected', [
        (string_field(max_size=50), 'TEXT'),
        (string_field(), 'TEXT'),
        (number_field(integer=True), 'INTEGER'),
        (number_field(precision=0), 'INTEGER'),
        (number_field(precision=10, scale=2), 'REAL'),
        (number_field(), 'REAL'),
        (boolean_field(), 'INTEGER'),
        (timestamp_field(), 'TEXT'),
        (timestamp_field(format=TimestampFormat.UNIX), 'INTEGER'),
        (timestamp_field(format=TimestampFormat.UNIX_MS), 'INTEGER'),
        (FieldDescriptor(field_type=FieldType.UUID), 'TEXT'),
        (json_field(), 'TEXT'),
        (array_field(), 'TEXT'),
        (FieldDescriptor(field_type=FieldType.OBJECT), 'TEXT'),
        (FieldDescriptor(field_type=FieldType.INCREMENTAL_ID), 'INTEGER'),
    ])
    def test_type_table(self, sqlite_adapter, descriptor, expected):
        """Test the generic type table"""
        assert sqlite_adapter.map_field_to_column(rf(descriptor)).type == expected

    def test_explicit_hint_type_wins(self, sqlite_adapter):
        """Test sqlite.type overrides inference"""
        descriptor = FieldDescriptor(field_type=FieldType.STRING, hints=DialectHints(sqlite=SQLiteHints(type='BLOB')))
        assert sqlite_adapter.map_field_to_column(rf(descriptor)).type == 'BLOB'

    def test_auto_increment_hint(self, sqlite_adapter):
        """Test sqlite.auto_increment makes a number column an INTEGER identity"""
        descriptor = FieldDescriptor(field_type=FieldType.NUMBER, primary_key=True,
                                     hints=DialectHints(sqlite=SQLiteHints(auto_increment=True)))
        column = sqlite_adapter.map_field_to_column(rf(descriptor, 'id'))
        assert column.type == 'INTEGER'
        assert column.auto_increment is True

    def test_column_flags(self, sqlite_adapter):
        """Test nullable, unique and comment come from the field"""
        descriptor = string_field(required=True, unique=True, description='Login name')
        column = sqlite_adapter.map_field_to_column(rf(descriptor, 'login'))
        assert column.name == 'login'
        assert column.nullable is False
        assert column.unique is True
        assert column.comment == 'Login name'


class TestSQLiteDefaults:
    """Test default rendering"""

    def test_boolean_default(self, sqlite_adapter):
        """Test booleans render as 1/0"""
        assert sqlite_adapter.render_default(rf(boolean_field(default=True))) == '1'
        assert sqlite_adapter.render_default(rf(boolean_field(default=False))) == '0'

    def test_string_default_escaped(self, sqlite_adapter):
        """Test single quotes are doubled"""
        assert sqlite_adapter.render_default(rf(string_field(default="it's"))) == "'it''s'"

    def test_number_default(self, sqlite_adapter):
        """Test numbers render unquoted"""
        assert sqlite_adapter.render_default(rf(number_field(default=3.5))) == '3.5'
        assert sqlite_adapter.render_default(rf(number_field(integer=True, default=7))) == '7'

    def test_json_default(self, sqlite_adapter):
        """Test JSON defaults are stringified"""
        assert sqlite_adapter.render_default(rf(json_field(default={'a': 1}))) == '\'{"a": 1}\''

    def test_date_defaults(self, sqlite_adapter):
        """Test ISO dates render as quoted ISO text"""
        moment = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert sqlite_adapter.render_default(rf(timestamp_field(default=moment))) == "'2024-01-15T10:30:00+00:00'"
        unix = timestamp_field(format=TimestampFormat.UNIX, default=moment)
        assert sqlite_adapter.render_default(rf(unix)) == '1705314600'

    def test_generated_date_default(self, sqlite_adapter):
        """Test generated timestamps map to CURRENT_TIMESTAMP"""
        assert sqlite_adapter.render_default(rf(created_at_field())) == 'CURRENT_TIMESTAMP'
        unix = created_at_field(format=TimestampFormat.UNIX)
        assert 'strftime' in sqlite_adapter.render_default(rf(unix))

    def test_unrepresentable_generator(self, sqlite_adapter):
        """Test generated uuids have no SQLite default"""
        descriptor = FieldDescriptor(field_type=FieldType.UUID, default=Generated(lambda: 'x'))
        assert sqlite_adapter.render_default(rf(descriptor)) is None

    def test_explicit_null_default(self, sqlite_adapter):
        """Test Static(None) renders NULL"""
        assert sqlite_adapter.render_default(rf(string_field(default=Static(None)))) == 'NULL'


class TestSQLiteCreateTable:
    """Test CREATE TABLE rendering"""

    def test_scenario_user(self, sqlite_adapter, user_schema):
        """Test the user entity on SQLite"""
        table = sqlite_adapter.generate_table_definition(user_schema)
        assert table.column('id').type == 'TEXT'
        assert table.column('username').type == 'TEXT'
        assert table.column('active').type == 'INTEGER'

        sql = sqlite_adapter.generate_create_table_sql(table)
        assert 'CREATE TABLE IF NOT EXISTS "user"' in sql
        assert 'UNIQUE' in sql
        assert '"id" TEXT PRIMARY KEY' in sql
        assert '"username" TEXT NOT NULL' in sql
        assert '"active" INTEGER DEFAULT 1' in sql
        assert 'CREATE UNIQUE INDEX IF NOT EXISTS "idx_user_username" ON "user" ("username");' in sql

    def test_autoincrement_with_start(self, sqlite_adapter, product_schema):
        """Test incremental ids and the sqlite_sequence seed"""
        sql = sqlite_adapter.generate_create_table_sql(sqlite_adapter.generate_table_definition(product_schema))
        assert '"id" INTEGER PRIMARY KEY AUTOINCREMENT' in sql
        assert "INSERT INTO sqlite_sequence (name, seq) SELECT 'product', 999" in sql

    def test_composite_primary_key(self, sqlite_adapter):
        """Test multi-column keys render a table-level clause"""
        schema = resolve(EntitySchema(
            name='membership',
            fields={
                'user_id': FieldDescriptor(field_type=FieldType.UUID, primary_key=True),
                'org_id': FieldDescriptor(field_type=FieldType.UUID, primary_key=True),
            },
        ))
        sql = sqlite_adapter.generate_create_table_sql(sqlite_adapter.generate_table_definition(schema))
        assert 'PRIMARY KEY ("user_id", "org_id")' in sql
        assert '"user_id" TEXT NOT NULL' in sql

    def test_composite_key_start_value_not_seeded(self, sqlite_adapter):
        """Test no sqlite_sequence seed without an inline AUTOINCREMENT column"""
        schema = resolve(EntitySchema(
            name='line_item',
            fields={
                'code': string_field(required=True, max_size=10),
                'seq': incremental_id_field(start_from=5),
            },
            primary_key=['code', 'seq'],
        ))
        sql = sqlite_adapter.generate_create_table_sql(sqlite_adapter.generate_table_definition(schema))
        assert 'AUTOINCREMENT' not in sql
        assert 'sqlite_sequence' not in sql

    def test_foreign_keys(self, sqlite_adapter, post_entity):
        """Test foreign key clauses"""
        sql = sqlite_adapter.generate_create_table_sql(
            sqlite_adapter.generate_table_definition(resolve(post_entity)))
        assert ('CONSTRAINT "fk_blog_post_authorId" FOREIGN KEY ("authorId") '
                'REFERENCES "user" ("id") ON DELETE CASCADE') in sql
        assert '"createdAt" TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP' in sql

    def test_identifier_quoting(self, sqlite_adapter):
        """Test embedded double quotes are doubled"""
        schema = resolve(EntitySchema(name='odd"name', fields={'id': FieldDescriptor(field_type='uuid')}))
        sql = sqlite_adapter.generate_create_table_sql(sqlite_adapter.generate_table_definition(schema))
        assert 'CREATE TABLE IF NOT EXISTS "odd""name"' in sql
