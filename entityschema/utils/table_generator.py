"""
Table definition assembly for resolved entity schemas.
"""
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from ..core.exceptions import InvalidSchemaError
from ..core.schema_models import EntitySchema, Generated, ResolvedField, ResolvedSchema
from ..core.table_models import (
    ColumnDefinition, ColumnReference, ForeignKeyDefinition, IndexDefinition, TableDefinition
)


def _primary_key_fields(schema: ResolvedSchema) -> List[str]:
    """Logical names of the primary key fields, in declaration order"""
    if schema.primary_key is not None:
        missing = [name for name in schema.primary_key if name not in schema.fields]
        if missing:
            raise InvalidSchemaError(schema.entity_name, f"primary key field(s) not found: {', '.join(missing)}")
        return list(schema.primary_key)

    flagged = [name for name, f in schema.fields.items() if f.primary_key]
    if flagged:
        return flagged
    # implicit key: a field literally named id
    if 'id' in schema.fields:
        return ['id']
    return []


def _lookup_field(schema: ResolvedSchema, name: str) -> Optional[ResolvedField]:
    """Find a field by logical name, falling back to physical name"""
    if name in schema.fields:
        return schema.fields[name]
    for f in schema.fields.values():
        if f.physical_name == name:
            return f
    return None


def _build_foreign_keys(schema: ResolvedSchema, catalog: Optional[Dict[str, ResolvedSchema]],
                        columns: List[ColumnDefinition]) -> List[ForeignKeyDefinition]:
    foreign_keys = []
    table_name = schema.table_name
    by_name = {col.name: col for col in columns}

    for logical_name, f in schema.fields.items():
        relationship = f.relationship
        if relationship is None or not relationship.kind.owns_foreign_key:
            continue

        local = f
        if relationship.foreign_key and relationship.foreign_key != logical_name:
            local = _lookup_field(schema, relationship.foreign_key)
            if local is None:
                raise InvalidSchemaError(
                    schema.entity_name,
                    f"foreign key column '{relationship.foreign_key}' of field '{logical_name}' is not a field"
                )

        referenced_table = relationship.target_entity
        referenced_column = relationship.target_field
        if catalog is not None:
            target = catalog.get(relationship.target_entity)
            if target is None:
                raise InvalidSchemaError(
                    schema.entity_name,
                    f"relationship '{logical_name}' targets unknown entity '{relationship.target_entity}'"
                )
            target_field = _lookup_field(target, relationship.target_field)
            if target_field is None:
                raise InvalidSchemaError(
                    schema.entity_name,
                    f"relationship '{logical_name}' targets missing field "
                    f"'{relationship.target_entity}.{relationship.target_field}'"
                )
            referenced_table = target.table_name
            referenced_column = target_field.physical_name

        column_name = local.physical_name
        by_name[column_name].references = ColumnReference(table=referenced_table, column=referenced_column)
        foreign_keys.append(ForeignKeyDefinition(
            name=f"fk_{table_name}_{column_name}",
            columns=[column_name],
            referenced_table=referenced_table,
            referenced_columns=[referenced_column],
            on_delete=relationship.on_delete,
            on_update=relationship.on_update,
        ))
    return foreign_keys


def _build_indexes(schema: ResolvedSchema, primary_key: List[str]) -> List[IndexDefinition]:
    indexes: List[IndexDefinition] = []
    seen = set()
    table_name = schema.table_name
    sole_pk = primary_key[0] if len(primary_key) == 1 else None

    for f in schema.fields.values():
        if not (f.hints.indexed or f.hints.unique):
            continue
        if f.physical_name == sole_pk:
            continue
        indexes.append(IndexDefinition(
            name=f"idx_{table_name}_{f.physical_name}",
            columns=[f.physical_name],
            unique=f.hints.unique,
        ))
        seen.add((f.physical_name,))

    for config in schema.indexes:
        physical = []
        for name in config.columns:
            f = _lookup_field(schema, name)
            if f is None:
                raise InvalidSchemaError(schema.entity_name, f"index column '{name}' is not a field")
            physical.append(f.physical_name)
        if tuple(physical) in seen:
            continue
        seen.add(tuple(physical))
        indexes.append(IndexDefinition(
            name=config.name or f"idx_{table_name}_{'_'.join(physical)}",
            columns=physical,
            unique=config.unique,
        ))
    return indexes


def build_table_definition(adapter, schema: ResolvedSchema,
                           catalog: Optional[Dict[str, ResolvedSchema]] = None,
                           logger: Optional[logging.Logger] = None) -> TableDefinition:
    """
    Turn a resolved schema into a TableDefinition using an adapter's column mapping.

    Args:
        adapter: DatabaseAdapter providing map_field_to_column
        schema: Resolved entity schema
        catalog: Optional resolved schemas of related entities keyed by base entity name
        logger: Optional logger for deferred-default warnings

    Returns:
        TableDefinition with columns, primary key, indexes and foreign keys

    Raises:
        InvalidSchemaError: when a primary key, index or foreign key does not resolve
    """
    log = logger or logging.getLogger(__name__)
    table_name = schema.table_name

    columns: List[ColumnDefinition] = []
    deferred: List[str] = []
    for logical_name, f in schema.fields.items():
        column = adapter.map_field_to_column(f)
        if isinstance(f.default, Generated) and column.default_value is None and not column.auto_increment:
            log.warning(
                f"Default of column '{column.name}' in table '{table_name}' is generated by the "
                f"application; {adapter.name} DDL has no DEFAULT for it"
            )
            deferred.append(column.name)
        columns.append(column)

    pk_physical = [schema.fields[name].physical_name for name in _primary_key_fields(schema)]
    pk_set = set(pk_physical)
    for i, column in enumerate(columns):
        in_pk = column.name in pk_set
        columns[i] = replace(
            column,
            primary_key=in_pk and len(pk_physical) == 1,
            nullable=column.nullable and not in_pk,
        )

    foreign_keys = _build_foreign_keys(schema, catalog, columns)
    indexes = _build_indexes(schema, pk_physical)

    return TableDefinition(
        name=table_name,
        columns=columns,
        primary_key=pk_physical,
        indexes=indexes,
        foreign_keys=foreign_keys,
        comment=schema.description,
        deferred_defaults=deferred,
    )


class TableDefinitionGenerator:
    """Generate table definitions and SQL for one dialect"""

    def __init__(self, adapter, logger=None):
        self.adapter = adapter
        self.logger = logger or logging.getLogger(__name__)

    def generate(self, schema: ResolvedSchema,
                 catalog: Optional[Dict[str, ResolvedSchema]] = None) -> TableDefinition:
        return build_table_definition(self.adapter, schema, catalog, logger=self.logger)

    def generate_sql(self, schema: ResolvedSchema,
                     catalog: Optional[Dict[str, ResolvedSchema]] = None) -> str:
        table = self.generate(schema, catalog)
        self.logger.debug(f"Generated {self.adapter.name} table definition for {table.name}")
        return self.adapter.generate_create_table_sql(table)

    def generate_all(self, schemas: Dict[str, ResolvedSchema]) -> str:
        """SQL for several related entities; each validates its foreign keys against the others"""
        return '\n\n'.join(self.generate_sql(schema, catalog=schemas) for schema in schemas.values())


def _as_resolved(schema) -> ResolvedSchema:
    if isinstance(schema, EntitySchema):
        from ..config.resolver import resolve
        return resolve(schema)
    return schema


def generate_table_definition(schema, dialect: str, registry=None) -> TableDefinition:
    """Table definition for a schema (resolved or not) in the named dialect"""
    from ..adapters.registry import get_default_registry
    adapter = (registry or get_default_registry()).get(dialect)
    return adapter.generate_table_definition(_as_resolved(schema))


def generate_sql_for_entity(schema, dialect: str, registry=None) -> str:
    from ..adapters.registry import get_default_registry
    adapter = (registry or get_default_registry()).get(dialect)
    table = adapter.generate_table_definition(_as_resolved(schema))
    return adapter.generate_create_table_sql(table)


def to_database_value(value: Any, field: ResolvedField, dialect: str, registry=None) -> Any:
    from ..adapters.registry import get_default_registry
    return (registry or get_default_registry()).get(dialect).to_database(value, field)


def from_database_value(value: Any, field: ResolvedField, dialect: str, registry=None) -> Any:
    from ..adapters.registry import get_default_registry
    return (registry or get_default_registry()).get(dialect).from_database(value, field)
