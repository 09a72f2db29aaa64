"""
entityschema - dialect-independent entity schemas rendered for SQLite, MySQL and PostgreSQL

Main modules:
- core: Field, schema and table models, field factories
- config: Override models, YAML loading and schema resolution
- adapters: Dialect adapters and the adapter registry
- utils: Table definition generation and runtime row mapping
"""

from .core.enums import FieldType, TimestampFormat, RelationshipKind, ReferentialAction, Dialect
from .core.exceptions import EntitySchemaError, AdapterNotFoundError, InvalidSchemaError, RegistryFrozenError
from .core.schema_models import (
    Static, Generated, Transform, DialectHints, RelationshipRef, FieldDescriptor,
    EntitySchema, ResolvedField, ResolvedSchema
)
from .core.table_models import ColumnDefinition, IndexDefinition, ForeignKeyDefinition, TableDefinition
from .config.config_models import DatabaseConfig, TableConfig, FieldOverride
from .config.config_loader import ConfigLoader
from .config.resolver import resolve, merge_schema_with_config
from .adapters.registry import AdapterRegistry, create_default_registry, get_adapter, register_adapter, get_adapters
from .utils.table_generator import (
    TableDefinitionGenerator, build_table_definition, generate_table_definition,
    generate_sql_for_entity, to_database_value, from_database_value
)
from .utils.field_mapper import RuntimeFieldMapper, EntityTable, generate_table

__version__ = "1.0.0"
__all__ = [
    'FieldType',
    'TimestampFormat',
    'RelationshipKind',
    'ReferentialAction',
    'Dialect',
    'EntitySchemaError',
    'AdapterNotFoundError',
    'InvalidSchemaError',
    'RegistryFrozenError',
    'Static',
    'Generated',
    'Transform',
    'DialectHints',
    'RelationshipRef',
    'FieldDescriptor',
    'EntitySchema',
    'ResolvedField',
    'ResolvedSchema',
    'ColumnDefinition',
    'IndexDefinition',
    'ForeignKeyDefinition',
    'TableDefinition',
    'DatabaseConfig',
    'TableConfig',
    'FieldOverride',
    'ConfigLoader',
    'resolve',
    'merge_schema_with_config',
    'AdapterRegistry',
    'create_default_registry',
    'get_adapter',
    'register_adapter',
    'get_adapters',
    'TableDefinitionGenerator',
    'build_table_definition',
    'generate_table_definition',
    'generate_sql_for_entity',
    'to_database_value',
    'from_database_value',
    'RuntimeFieldMapper',
    'EntityTable',
    'generate_table',
]
