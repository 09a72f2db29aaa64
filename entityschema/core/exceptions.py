"""
Exceptions raised by schema resolution and SQL generation.
"""


class EntitySchemaError(Exception):
    """Base class for all entityschema errors"""


class AdapterNotFoundError(EntitySchemaError, KeyError):
    """Raised when no adapter is registered for a dialect"""

    def __init__(self, dialect: str):
        self.dialect = dialect
        super().__init__(f"Database adapter '{dialect}' not found")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class InvalidSchemaError(EntitySchemaError, ValueError):
    """Raised when a resolved schema cannot be turned into a table definition"""

    def __init__(self, entity: str, message: str):
        self.entity = entity
        super().__init__(f"Invalid schema for entity '{entity}': {message}")


class RegistryFrozenError(EntitySchemaError, RuntimeError):
    """Raised when registering an adapter after the registry was finalized"""
