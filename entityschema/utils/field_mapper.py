"""
Logical <-> physical row mapping for resolved entity schemas.
"""
import logging
from typing import Any, Dict, Optional

from ..core.schema_models import ResolvedField, ResolvedSchema
from ..core.table_models import TableDefinition


class RuntimeFieldMapper:
    """
    Rename and convert rows between the application and the database.

    Without an adapter only custom field transforms are applied. With an
    adapter every value goes through its full to_database/from_database
    conversion, including filled defaults.
    """

    def __init__(self, schema: ResolvedSchema, adapter=None, logger: Optional[logging.Logger] = None):
        self.schema = schema
        self.adapter = adapter
        self.logger = logger or logging.getLogger(__name__)
        self._logical_by_physical = {f.physical_name: name for name, f in schema.fields.items()}

    def _encode(self, value: Any, field: ResolvedField) -> Any:
        if self.adapter is not None:
            return self.adapter.to_database(value, field)
        if field.transform is not None and field.transform.input is not None:
            return field.transform.input(value)
        return value

    def _decode(self, value: Any, field: ResolvedField) -> Any:
        if self.adapter is not None:
            return self.adapter.from_database(value, field)
        if field.transform is not None and field.transform.output is not None:
            return field.transform.output(value)
        return value

    def map_to_db(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Logical row -> physical row.

        Present keys are converted and renamed. Absent keys are filled from
        their default, invoking generated defaults. Absent keys without a
        default are omitted.
        """
        result: Dict[str, Any] = {}
        for logical_name, field in self.schema.fields.items():
            if logical_name in data:
                result[field.physical_name] = self._encode(data[logical_name], field)
            elif field.default is not None:
                value = field.default.resolve()
                if self.adapter is not None:
                    value = self.adapter.to_database(value, field)
                result[field.physical_name] = value
        return result

    def map_from_db(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Physical row -> logical row; unmapped columns pass through under their own name"""
        result: Dict[str, Any] = {}
        for physical_name, value in row.items():
            logical_name = self._logical_by_physical.get(physical_name)
            if logical_name is None:
                result[physical_name] = value
                continue
            result[logical_name] = self._decode(value, self.schema.fields[logical_name])
        return result


class EntityTable:
    """Resolved entity bundled with its SQL generation and row mapping"""

    def __init__(self, schema: ResolvedSchema, registry=None, adapter=None):
        from ..adapters.registry import get_default_registry
        self.schema = schema
        self.registry = registry or get_default_registry()
        self.mapper = RuntimeFieldMapper(schema, adapter=adapter)

    @property
    def name(self) -> str:
        return self.schema.entity_name

    @property
    def prefix(self) -> str:
        return self.schema.entity_prefix

    @property
    def table_name(self) -> str:
        return self.schema.table_name

    def table_definition(self, dialect: str = "postgres") -> TableDefinition:
        return self.registry.get(dialect).generate_table_definition(self.schema)

    def get_sql_schema(self, dialect: str = "postgres") -> str:
        adapter = self.registry.get(dialect)
        return adapter.generate_create_table_sql(adapter.generate_table_definition(self.schema))

    def map_to_db(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.mapper.map_to_db(data)

    def map_from_db(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return self.mapper.map_from_db(row)


def generate_table(schema, registry=None, dialect: Optional[str] = None) -> EntityTable:
    """
    Build an EntityTable for a schema.

    Args:
        schema: ResolvedSchema, or an EntitySchema resolved without overrides
        registry: Adapter registry for SQL generation; the default registry if omitted
        dialect: When given, the mappers apply that adapter's value conversion
    """
    from ..config.resolver import resolve
    from ..core.schema_models import EntitySchema
    if isinstance(schema, EntitySchema):
        schema = resolve(schema)
    adapter = None
    if dialect is not None:
        from ..adapters.registry import get_default_registry
        adapter = (registry or get_default_registry()).get(dialect)
    return EntityTable(schema, registry=registry, adapter=adapter)
