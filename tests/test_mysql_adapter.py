"""
Test cases for the MySQL adapter.
"""
from datetime import datetime, timezone
import pytest

from entityschema.config.resolver import resolve
from entityschema.core.enums import FieldType, TimestampFormat
from entityschema.core.fields import (
    boolean_field, created_at_field, json_field, number_field, string_field, timestamp_field, uuid_field
)
from entityschema.core.schema_models import (
    DialectHints, EntitySchema, FieldDescriptor, MySQLHints, ResolvedField, Transform
)


def rf(descriptor, name='value'):
    return ResolvedField.from_descriptor(name, descriptor)


class TestMySQLTypeMapping:
    """Test field -> MySQL column types"""

    @pytest.mark.parametrize('descriptor,expected', [
        (string_field(max_size=50), 'VARCHAR(50)'),
        (string_field(max_size=16383), 'VARCHAR(16383)'),
        (string_field(max_size=20000), 'TEXT'),
        (string_field(max_size=70000), 'MEDIUMTEXT'),
        (string_field(max_size=20_000_000), 'LONGTEXT'),
        (string_field(), 'TEXT'),
        (string_field(indexed=True), 'VARCHAR(255)'),
        (number_field(integer=True), 'INT'),
        (number_field(integer=True, precision=2), 'TINYINT'),
        (number_field(integer=True, precision=4), 'SMALLINT'),
        (number_field(integer=True, precision=9), 'INT'),
        (number_field(integer=True, precision=12), 'BIGINT'),
        (number_field(precision=10, scale=2), 'DECIMAL(10,2)'),
        (number_field(), 'DOUBLE'),
        (boolean_field(), 'TINYINT(1)'),
        (timestamp_field(), 'TIMESTAMP'),
        (timestamp_field(has_timezone=True), 'DATETIME'),
        (timestamp_field(format=TimestampFormat.UNIX), 'BIGINT'),
        (FieldDescriptor(field_type=FieldType.UUID), 'CHAR(36)'),
        (json_field(), 'JSON'),
        (FieldDescriptor(field_type=FieldType.ARRAY), 'JSON'),
        (FieldDescriptor(field_type=FieldType.INCREMENTAL_ID), 'BIGINT'),
    ])
    def test_type_table(self, mysql_adapter, descriptor, expected):
        """Test the generic type table"""
        assert mysql_adapter.map_field_to_column(rf(descriptor)).type == expected

    def test_explicit_hint_type_wins(self, mysql_adapter):
        """Test mysql.type overrides inference"""
        descriptor = FieldDescriptor(field_type=FieldType.STRING,
                                     hints=DialectHints(max_size=10, mysql=MySQLHints(type="ENUM('a','b')")))
        assert mysql_adapter.map_field_to_column(rf(descriptor)).type == "ENUM('a','b')"

    def test_charset_and_unsigned(self, mysql_adapter):
        """Test mysql column extras"""
        descriptor = FieldDescriptor(
            field_type=FieldType.STRING,
            hints=DialectHints(max_size=40, mysql=MySQLHints(charset='utf8mb4', collation='utf8mb4_bin')),
        )
        column = mysql_adapter.map_field_to_column(rf(descriptor, 'code'))
        assert column.charset == 'utf8mb4'
        assert column.collation == 'utf8mb4_bin'

        counter = FieldDescriptor(field_type=FieldType.NUMBER,
                                  hints=DialectHints(integer=True, mysql=MySQLHints(unsigned=True)))
        assert mysql_adapter.map_field_to_column(rf(counter)).unsigned is True


class TestMySQLDefaults:
    """Test default rendering"""

    def test_boolean_default(self, mysql_adapter):
        """Test booleans render as 1/0"""
        assert mysql_adapter.render_default(rf(boolean_field(default=True))) == '1'

    def test_backslashes_escaped(self, mysql_adapter):
        """Test MySQL string literals double backslashes and quotes"""
        descriptor = string_field(max_size=100, default="C:\\it's")
        assert mysql_adapter.render_default(rf(descriptor)) == "'C:\\\\it''s'"

    def test_text_default_is_expression(self, mysql_adapter):
        """Test TEXT columns get a parenthesised default"""
        assert mysql_adapter.render_default(rf(string_field(default='hello'))) == "('hello')"

    def test_json_default(self, mysql_adapter):
        """Test JSON defaults are parenthesised expressions"""
        assert mysql_adapter.render_default(rf(json_field(default={'theme': 'dark'}))) == '(\'{"theme": "dark"}\')'

    def test_date_literal(self, mysql_adapter):
        """Test ISO dates render as MySQL datetime literals in UTC"""
        moment = datetime(2024, 1, 15, 10, 30, 5, tzinfo=timezone.utc)
        assert mysql_adapter.render_default(rf(timestamp_field(default=moment))) == "'2024-01-15 10:30:05'"

    def test_transformed_date_default_kept_verbatim(self, mysql_adapter):
        """Test non-ISO text from a custom transform is quoted as given"""
        field = rf(timestamp_field(default=datetime(2024, 1, 15), transform=Transform(input=lambda v: 'next monday')))
        assert mysql_adapter.render_default(field) == "'next monday'"

    def test_generated_defaults(self, mysql_adapter):
        """Test generated timestamps map to built-ins, uuids do not"""
        assert mysql_adapter.render_default(rf(created_at_field())) == 'CURRENT_TIMESTAMP'
        assert mysql_adapter.render_default(rf(created_at_field(format=TimestampFormat.UNIX))) == '(UNIX_TIMESTAMP())'
        assert mysql_adapter.render_default(rf(uuid_field())) is None


class TestMySQLCreateTable:
    """Test CREATE TABLE rendering"""

    def test_scenario_product(self, mysql_adapter, product_schema):
        """Test incremental ids on MySQL"""
        table = mysql_adapter.generate_table_definition(product_schema)
        id_column = table.column('id')
        assert id_column.type == 'BIGINT'
        assert id_column.auto_increment is True

        sql = mysql_adapter.generate_create_table_sql(table)
        assert 'AUTO_INCREMENT' in sql
        assert '`id` BIGINT NOT NULL AUTO_INCREMENT PRIMARY KEY' in sql
        assert 'AUTO_INCREMENT=1000' in sql
        assert sql.startswith('CREATE TABLE IF NOT EXISTS `product`')
        assert sql.endswith(') ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 AUTO_INCREMENT=1000;')

    def test_unsigned_incremental_id(self, mysql_adapter):
        """Test UNSIGNED is rendered after the type"""
        schema = resolve(EntitySchema(name='counter', fields={
            'id': FieldDescriptor(field_type=FieldType.INCREMENTAL_ID, primary_key=True,
                                  hints=DialectHints(mysql=MySQLHints(unsigned=True))),
        }))
        sql = mysql_adapter.generate_create_table_sql(mysql_adapter.generate_table_definition(schema))
        assert '`id` BIGINT UNSIGNED NOT NULL AUTO_INCREMENT PRIMARY KEY' in sql

    def test_scenario_user(self, mysql_adapter, user_schema):
        """Test inline keys and backtick quoting"""
        sql = mysql_adapter.generate_create_table_sql(mysql_adapter.generate_table_definition(user_schema))
        assert '`id` CHAR(36) NOT NULL PRIMARY KEY' in sql
        assert '`username` VARCHAR(50) NOT NULL' in sql
        assert '`active` TINYINT(1) DEFAULT 1' in sql
        assert 'UNIQUE KEY `idx_user_username` (`username`)' in sql
        assert 'CREATE INDEX' not in sql

    def test_comments_and_foreign_keys(self, mysql_adapter, post_entity):
        """Test column/table comments and foreign keys"""
        sql = mysql_adapter.generate_create_table_sql(
            mysql_adapter.generate_table_definition(resolve(post_entity)))
        assert "`title` VARCHAR(200) NOT NULL COMMENT 'Post title'" in sql
        assert "COMMENT='Blog posts'" in sql
        assert ('CONSTRAINT `fk_blog_post_authorId` FOREIGN KEY (`authorId`) '
                'REFERENCES `user` (`id`) ON DELETE CASCADE') in sql
        assert '`createdAt` TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP' in sql

    def test_engine_options(self, user_schema):
        """Test engine and charset are configurable"""
        from entityschema.adapters.mysql_adapter import MySQLAdapter
        adapter = MySQLAdapter(engine='MyISAM', charset='latin1')
        sql = adapter.generate_create_table_sql(adapter.generate_table_definition(user_schema))
        assert sql.endswith(') ENGINE=MyISAM DEFAULT CHARSET=latin1;')


class TestMySQLValues:
    """Test MySQL-specific value conversion"""

    def test_numeric_strings_parsed(self, mysql_adapter):
        """Test numeric strings from the text protocol are parsed"""
        assert mysql_adapter.from_database('42', rf(number_field(integer=True))) == 42
        assert mysql_adapter.from_database('4.5', rf(number_field())) == 4.5
        assert mysql_adapter.from_database('1000', rf(FieldDescriptor(field_type='incremental_id'))) == 1000

    def test_boolean_from_tinyint(self, mysql_adapter):
        """Test TINYINT(1) values read back as booleans"""
        field = rf(boolean_field())
        assert mysql_adapter.to_database(True, field) == 1
        assert mysql_adapter.from_database(1, field) is True
        assert mysql_adapter.from_database(0, field) is False
