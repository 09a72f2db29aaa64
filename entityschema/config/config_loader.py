import os
from typing import Any, Dict

import yaml

from ..core.schema_models import EntitySchema, IndexConfig
from .config_models import DatabaseConfig, SchemaConfig, normalize_keys, parse_field_descriptor


class ConfigLoader:
    """Load entity definitions and override configs from YAML"""

    @staticmethod
    def load_from_yaml(file_path: str) -> SchemaConfig:
        """Load entities, overrides and the default dialect from one YAML file"""
        with open(file_path, 'r') as file:
            config_dict = yaml.safe_load(file)

        if config_dict is None:
            raise ValueError(f"Empty or invalid YAML file: {file_path}")

        return ConfigLoader.load_from_dict(config_dict)

    @staticmethod
    def load_from_dict(config_dict: Dict[str, Any]) -> SchemaConfig:
        """Load configuration from dictionary"""
        if not isinstance(config_dict, dict):
            raise ValueError(f"Configuration must be a mapping, got {type(config_dict).__name__}")

        resolved = ConfigLoader.resolve_env_vars(config_dict)
        return SchemaConfig(
            entities=ConfigLoader.load_entities_from_dict(resolved),
            database=ConfigLoader.load_overrides_from_dict(resolved),
            dialect=resolved.get('dialect'),
        )

    @staticmethod
    def load_overrides_from_yaml(file_path: str) -> DatabaseConfig:
        """Load only the `tables` override section from a YAML file"""
        with open(file_path, 'r') as file:
            config_dict = yaml.safe_load(file)

        if config_dict is None:
            raise ValueError(f"Empty or invalid overrides YAML file: {file_path}")

        return ConfigLoader.load_overrides_from_dict(ConfigLoader.resolve_env_vars(config_dict))

    @staticmethod
    def load_overrides_from_dict(config_dict: Dict[str, Any]) -> DatabaseConfig:
        return DatabaseConfig.from_dict(config_dict)

    @staticmethod
    def load_entities_from_dict(config_dict: Dict[str, Any]) -> Dict[str, EntitySchema]:
        """Build EntitySchema objects from the `entities` section"""
        entities = {}
        for entity_name, entity_config in (config_dict.get('entities') or {}).items():
            values = normalize_keys(entity_config or {})
            if not values.get('fields'):
                raise ValueError(f"Fields are required for entity {entity_name}")

            try:
                fields = {
                    field_name: parse_field_descriptor(definition)
                    for field_name, definition in values['fields'].items()
                }
            except ValueError as e:
                raise ValueError(f"Invalid field in entity {entity_name}: {e}") from e

            indexes = [
                IndexConfig(**normalize_keys(idx)) if isinstance(idx, dict) else IndexConfig(columns=idx)
                for idx in values.get('indexes') or []
            ]
            primary_key = values.get('primary_key')
            if isinstance(primary_key, str):
                primary_key = [primary_key]

            entities[entity_name] = EntitySchema(
                name=entity_name,
                fields=fields,
                prefix=values.get('prefix'),
                description=values.get('description'),
                indexes=indexes,
                primary_key=primary_key,
            )
        return entities

    @staticmethod
    def resolve_env_vars(value: Any) -> Any:
        """Substitute ${VAR} and ${VAR:default} string values from the environment"""
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            env_var = value[2:-1]  # Remove ${ and }
            default_value = ""
            if ":" in env_var:
                env_var, default_value = env_var.split(":", 1)
            return os.getenv(env_var, default_value)
        elif isinstance(value, dict):
            return {k: ConfigLoader.resolve_env_vars(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [ConfigLoader.resolve_env_vars(item) for item in value]
        return value
