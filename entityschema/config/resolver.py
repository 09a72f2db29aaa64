"""
Merge a base entity schema with runtime overrides.

Resolution is lenient: overrides that cannot be applied are logged and
skipped, so resolve() never raises for bad config.
"""
import logging
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Union

from ..core.schema_models import EntitySchema, FieldDescriptor, ResolvedField, ResolvedSchema
from .config_models import DatabaseConfig, FieldOverride, TableConfig

OverrideSource = Union[DatabaseConfig, Mapping[str, Any], None]


def _table_config_for(entity: str, overrides: OverrideSource,
                      log: logging.Logger) -> Optional[TableConfig]:
    if overrides is None:
        return None
    if isinstance(overrides, DatabaseConfig):
        return overrides.tables.get(entity)

    raw = (overrides.get('tables') or {}).get(entity)
    if raw is None:
        return None
    try:
        return TableConfig.from_dict(raw)
    except (ValueError, TypeError) as e:
        log.warning(f"Ignoring overrides for entity '{entity}': {e}")
        return None


def _apply_override(name: str, descriptor: FieldDescriptor, override: Optional[FieldOverride]) -> ResolvedField:
    if override is None:
        return ResolvedField.from_descriptor(name, descriptor)

    changes: Dict[str, Any] = {}
    if override.required is not None:
        changes['required'] = override.required
    if override.default_value is not None:
        changes['default'] = override.default_value
    if descriptor.relationship is not None and override.relationship is not None:
        changes['relationship'] = replace(
            descriptor.relationship,
            target_entity=override.relationship.model or descriptor.relationship.target_entity,
            target_field=override.relationship.field or descriptor.relationship.target_field,
        )

    return ResolvedField.from_descriptor(name, descriptor, physical_name=override.field_name or name, **changes)


def resolve(base: EntitySchema, overrides: OverrideSource = None,
            logger: Optional[logging.Logger] = None) -> ResolvedSchema:
    """
    Resolve an entity schema against optional overrides.

    Args:
        base: The entity schema as declared
        overrides: DatabaseConfig, or its dict form ({tables: {...}})
        logger: Optional logger for skipped overrides

    Returns:
        ResolvedSchema with physical names and overridden attributes
    """
    log = logger or logging.getLogger(__name__)
    table_config = _table_config_for(base.name, overrides, log)

    entity_name = base.name
    entity_prefix = base.prefix or ""
    field_overrides: Dict[str, FieldOverride] = {}
    additional: Dict[str, FieldDescriptor] = {}
    if table_config is not None:
        entity_name = table_config.entity_name or entity_name
        entity_prefix = table_config.entity_prefix or entity_prefix
        field_overrides = table_config.fields
        additional = table_config.additional_fields

    resolved: Dict[str, ResolvedField] = {}
    for name, descriptor in base.fields.items():
        resolved[name] = _apply_override(name, descriptor, field_overrides.get(name))

    for name in field_overrides:
        if name not in base.fields:
            log.debug(f"Override for unknown field '{name}' on entity '{base.name}' ignored")

    for name, descriptor in additional.items():
        if name in resolved:
            log.warning(f"Additional field '{name}' replaces declared field on entity '{base.name}'")
        resolved[name] = ResolvedField.from_descriptor(name, descriptor, physical_name=name)

    return ResolvedSchema(
        entity_name=entity_name,
        entity_prefix=entity_prefix,
        fields=resolved,
        description=base.description,
        indexes=list(base.indexes),
        primary_key=list(base.primary_key) if base.primary_key is not None else None,
    )


merge_schema_with_config = resolve


def resolve_all(entities: Mapping[str, EntitySchema], overrides: OverrideSource = None,
                logger: Optional[logging.Logger] = None) -> Dict[str, ResolvedSchema]:
    """Resolve several entities against the same overrides, keyed by base entity name"""
    return {name: resolve(schema, overrides, logger=logger) for name, schema in entities.items()}
