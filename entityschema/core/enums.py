from enum import Enum


class FieldType(str, Enum):
    """Semantic field types understood by every adapter"""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    UUID = "uuid"
    JSON = "json"
    ARRAY = "array"
    OBJECT = "object"
    INCREMENTAL_ID = "incremental_id"

    @property
    def is_json_like(self) -> bool:
        return self in (FieldType.JSON, FieldType.ARRAY, FieldType.OBJECT)


class TimestampFormat(str, Enum):
    ISO = "iso"
    UNIX = "unix"
    UNIX_MS = "unix_ms"


class StorageType(str, Enum):
    TEXT = "text"
    NUMERIC = "numeric"
    BINARY = "binary"
    TEMPORAL = "temporal"
    BOOLEAN = "boolean"
    JSON = "json"
    UUID = "uuid"


class RelationshipKind(str, Enum):
    ONE_TO_ONE = "oneToOne"
    ONE_TO_MANY = "oneToMany"
    MANY_TO_ONE = "manyToOne"
    MANY_TO_MANY = "manyToMany"

    @property
    def owns_foreign_key(self) -> bool:
        """Whether this side of the relationship stores a foreign key column"""
        return self != RelationshipKind.MANY_TO_MANY


class ReferentialAction(str, Enum):
    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    RESTRICT = "RESTRICT"
    NO_ACTION = "NO ACTION"


class Dialect(str, Enum):
    SQLITE = "sqlite"
    MYSQL = "mysql"
    POSTGRES = "postgres"


# Alternate spellings accepted wherever a dialect name is looked up
DIALECT_ALIASES = {
    "sqlite3": Dialect.SQLITE.value,
    "mariadb": Dialect.MYSQL.value,
    "postgresql": Dialect.POSTGRES.value,
    "pg": Dialect.POSTGRES.value,
}


def normalize_dialect(name: str) -> str:
    """Lower-case a dialect name and resolve known aliases"""
    key = str(name.value if isinstance(name, Enum) else name).lower().strip()
    return DIALECT_ALIASES.get(key, key)
