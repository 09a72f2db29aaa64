import re
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional

from ..core.enums import FieldType
from ..core.fields import generate_nanoid, generate_uuid, now_utc
from ..core.schema_models import (
    Default, DialectHints, EntitySchema, FieldDescriptor, Generated, RelationshipRef, Static, as_default
)


# Named generators usable from YAML: `default: {generate: now}`
NAMED_GENERATORS = {
    'now': now_utc,
    'uuid': generate_uuid,
    'nanoid': generate_nanoid,
}


def snake_case(key: str) -> str:
    """entityPrefix -> entity_prefix; snake_case keys are returned unchanged"""
    return re.sub(r'(?<!^)(?=[A-Z])', '_', key).lower()


def normalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {snake_case(k): v for k, v in data.items()}


def _known_kwargs(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only keys that are dataclass fields of cls"""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in normalize_keys(data).items() if k in names}


def parse_default(value: Any) -> Optional[Default]:
    """Raw config value -> Default. `{generate: <name>}` selects a named generator."""
    if isinstance(value, dict) and set(value) == {'generate'}:
        name = value['generate']
        if name not in NAMED_GENERATORS:
            raise ValueError(f"Unknown default generator '{name}'. "
                             f"Expected one of: {', '.join(NAMED_GENERATORS)}")
        return Generated(NAMED_GENERATORS[name], label=name)
    return as_default(value)


def parse_hints(data: Optional[Dict[str, Any]]) -> DialectHints:
    if not data:
        return DialectHints()
    hints = _known_kwargs(DialectHints, data)
    for dialect in ('sqlite', 'mysql', 'postgres'):
        if isinstance(hints.get(dialect), dict):
            hints[dialect] = normalize_keys(hints[dialect])
    return DialectHints(**hints)


def parse_relationship(data: Optional[Dict[str, Any]]) -> Optional[RelationshipRef]:
    if not data:
        return None
    rel = normalize_keys(data)
    # `model`/`field` are accepted as in override configs
    rel.setdefault('target_entity', rel.pop('model', None))
    rel.setdefault('target_field', rel.pop('field', None) or 'id')
    if not rel['target_entity']:
        raise ValueError("relationship requires target_entity")
    kind = rel.get('kind')
    if isinstance(kind, str) and '_' in kind:
        # many_to_one -> manyToOne
        head, *rest = kind.split('_')
        rel['kind'] = head + ''.join(part.capitalize() for part in rest)
    if isinstance(rel.get('join_table'), dict):
        rel['join_table'] = normalize_keys(rel['join_table'])
    return RelationshipRef(**_known_kwargs(RelationshipRef, rel))


def parse_field_descriptor(data: Dict[str, Any]) -> FieldDescriptor:
    """Build a FieldDescriptor from its YAML / dict form"""
    if isinstance(data, FieldDescriptor):
        return data
    if isinstance(data, str):
        return FieldDescriptor(field_type=FieldType(data))

    values = normalize_keys(data)
    field_type = values.get('type', values.get('field_type'))
    if field_type is None:
        raise ValueError(f"Field definition is missing 'type': {data}")

    return FieldDescriptor(
        field_type=FieldType(field_type),
        required=bool(values.get('required', False)),
        default=parse_default(values.get('default', values.get('default_value'))),
        relationship=parse_relationship(values.get('relationship')),
        primary_key=bool(values.get('primary_key', False)),
        hints=parse_hints(values.get('hints')),
        description=values.get('description'),
        format=values.get('format') or 'iso',
    )


@dataclass
class RelationshipOverride:
    model: Optional[str] = None
    field: Optional[str] = None


@dataclass
class FieldOverride:
    """Per-field override; None means "not supplied" for every attribute"""
    field_name: Optional[str] = None
    required: Optional[bool] = None
    default_value: Optional[Default] = None
    relationship: Optional[RelationshipOverride] = None

    @classmethod
    def from_value(cls, value: Any) -> 'FieldOverride':
        """Accept a bare rename string, a dict, or an existing override"""
        if isinstance(value, FieldOverride):
            return value
        if isinstance(value, str):
            return cls(field_name=value)
        if not isinstance(value, dict):
            raise ValueError(f"Field override must be a string or mapping, got {type(value).__name__}")

        values = normalize_keys(value)
        relationship = values.get('relationship')
        if isinstance(relationship, dict):
            relationship = RelationshipOverride(model=relationship.get('model'), field=relationship.get('field'))
        elif not isinstance(relationship, RelationshipOverride):
            relationship = None

        default_value = None
        if 'default_value' in values:
            # an explicit `defaultValue: null` in config means a NULL default
            raw = values['default_value']
            default_value = parse_default(raw) if raw is not None else Static(None)

        return cls(
            field_name=values.get('field_name'),
            required=values.get('required'),
            default_value=default_value,
            relationship=relationship,
        )


@dataclass
class TableConfig:
    """Override configuration for one entity"""
    entity_name: Optional[str] = None
    entity_prefix: Optional[str] = None
    fields: Dict[str, FieldOverride] = field(default_factory=dict)
    additional_fields: Dict[str, FieldDescriptor] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TableConfig':
        if isinstance(data, TableConfig):
            return data
        values = normalize_keys(data or {})
        return cls(
            entity_name=values.get('entity_name'),
            entity_prefix=values.get('entity_prefix'),
            fields={
                name: FieldOverride.from_value(override)
                for name, override in (values.get('fields') or {}).items()
            },
            additional_fields={
                name: parse_field_descriptor(definition)
                for name, definition in (values.get('additional_fields') or {}).items()
            },
        )


@dataclass
class DatabaseConfig:
    """Runtime overrides keyed by base entity name"""
    tables: Dict[str, TableConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DatabaseConfig':
        tables = (data or {}).get('tables') or {}
        return cls(tables={name: TableConfig.from_dict(table) for name, table in tables.items()})


@dataclass
class SchemaConfig:
    """Entities plus the overrides to resolve them with, as loaded from one file"""
    entities: Dict[str, EntitySchema] = field(default_factory=dict)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    dialect: Optional[str] = None
