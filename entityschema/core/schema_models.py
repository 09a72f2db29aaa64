import copy
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Optional, Union

from .enums import FieldType, TimestampFormat, StorageType, RelationshipKind, ReferentialAction, normalize_dialect


@dataclass(frozen=True)
class Static:
    """A literal default value"""
    value: Any

    def resolve(self) -> Any:
        # Hand out a copy so {} / [] defaults are never shared between rows
        return copy.deepcopy(self.value)


@dataclass(frozen=True)
class Generated:
    """A default produced by a zero-argument factory at write time"""
    factory: Callable[[], Any]
    label: Optional[str] = None
    # False when the value must not be swapped for a database built-in such as CURRENT_TIMESTAMP
    builtin: bool = True

    def resolve(self) -> Any:
        return self.factory()


Default = Union[Static, Generated]


def as_default(value: Any) -> Optional[Default]:
    """
    Wrap a raw default into the Default variant.

    None means "no default"; use Static(None) for an explicit NULL default.
    """
    if value is None or isinstance(value, (Static, Generated)):
        return value
    if callable(value):
        return Generated(value, label=getattr(value, "__name__", None))
    return Static(value)


@dataclass(frozen=True)
class Transform:
    """Custom application <-> storage conversion functions"""
    input: Optional[Callable[[Any], Any]] = None
    output: Optional[Callable[[Any], Any]] = None


@dataclass(frozen=True)
class SQLiteHints:
    type: Optional[str] = None
    auto_increment: bool = False


@dataclass(frozen=True)
class MySQLHints:
    type: Optional[str] = None
    charset: Optional[str] = None
    collation: Optional[str] = None
    unsigned: bool = False
    auto_increment: bool = False


@dataclass(frozen=True)
class PostgresHints:
    type: Optional[str] = None
    use_serial: bool = False


@dataclass(frozen=True)
class DialectHints:
    """Advisory storage hints; an explicit per-dialect type always wins"""
    storage_type: Optional[StorageType] = None
    max_size: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    integer: bool = False
    indexed: bool = False
    unique: bool = False
    has_timezone: bool = False
    increment_start: Optional[int] = None
    sqlite: Optional[SQLiteHints] = None
    mysql: Optional[MySQLHints] = None
    postgres: Optional[PostgresHints] = None

    def __post_init__(self):
        if isinstance(self.storage_type, str) and not isinstance(self.storage_type, StorageType):
            object.__setattr__(self, 'storage_type', StorageType(self.storage_type))
        for attr, hint_cls in (('sqlite', SQLiteHints), ('mysql', MySQLHints), ('postgres', PostgresHints)):
            value = getattr(self, attr)
            if isinstance(value, dict):
                object.__setattr__(self, attr, hint_cls(**value))

    def for_dialect(self, dialect: str):
        """Return the nested hints for a dialect, or None"""
        return getattr(self, normalize_dialect(dialect), None)


@dataclass(frozen=True)
class JoinTableConfig:
    """Join table used by a many-to-many relationship"""
    name: str
    source_column: Optional[str] = None
    target_column: Optional[str] = None
    extra_columns: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RelationshipRef:
    """Pointer from a field to a field of another entity"""
    target_entity: str
    target_field: str = "id"
    kind: RelationshipKind = RelationshipKind.MANY_TO_ONE
    foreign_key: Optional[str] = None
    join_table: Optional[JoinTableConfig] = None
    on_delete: Optional[ReferentialAction] = None
    on_update: Optional[ReferentialAction] = None

    def __post_init__(self):
        if not isinstance(self.kind, RelationshipKind):
            object.__setattr__(self, 'kind', RelationshipKind(self.kind))
        for attr in ('on_delete', 'on_update'):
            value = getattr(self, attr)
            if value is not None and not isinstance(value, ReferentialAction):
                object.__setattr__(self, attr, ReferentialAction(str(value).upper()))
        if isinstance(self.join_table, dict):
            object.__setattr__(self, 'join_table', JoinTableConfig(**self.join_table))


@dataclass(frozen=True)
class FieldDescriptor:
    """Definition of a single entity field"""
    field_type: FieldType
    required: bool = False
    default: Optional[Default] = None
    relationship: Optional[RelationshipRef] = None
    validator: Any = None
    transform: Optional[Transform] = None
    primary_key: bool = False
    hints: DialectHints = field(default_factory=DialectHints)
    description: Optional[str] = None
    format: TimestampFormat = TimestampFormat.ISO

    def __post_init__(self):
        if not isinstance(self.field_type, FieldType):
            object.__setattr__(self, 'field_type', FieldType(self.field_type))
        if not isinstance(self.format, TimestampFormat):
            object.__setattr__(self, 'format', TimestampFormat(self.format))
        if self.hints is None:
            object.__setattr__(self, 'hints', DialectHints())
        object.__setattr__(self, 'default', as_default(self.default))

    @property
    def has_default(self) -> bool:
        return self.default is not None


@dataclass(frozen=True)
class IndexConfig:
    """Schema-level index over one or more logical field names"""
    columns: List[str]
    name: Optional[str] = None
    unique: bool = False

    def __post_init__(self):
        if isinstance(self.columns, str):
            object.__setattr__(self, 'columns', [self.columns])


@dataclass(frozen=True)
class EntitySchema:
    """Dialect-independent entity definition"""
    name: str
    fields: Dict[str, FieldDescriptor]
    prefix: Optional[str] = None
    description: Optional[str] = None
    indexes: List[IndexConfig] = field(default_factory=list)
    # Explicit (possibly composite) key by logical field name; overrides field flags
    primary_key: Optional[List[str]] = None

    def __post_init__(self):
        object.__setattr__(self, 'indexes', [
            IndexConfig(**idx) if isinstance(idx, dict) else idx for idx in self.indexes
        ])


@dataclass(frozen=True)
class ResolvedField(FieldDescriptor):
    """A field after config overrides, carrying its physical column name"""
    logical_name: str = ""
    physical_name: str = ""

    @classmethod
    def from_descriptor(cls, logical_name: str, descriptor: FieldDescriptor,
                        physical_name: Optional[str] = None, **changes) -> 'ResolvedField':
        values = {f.name: getattr(descriptor, f.name) for f in fields(FieldDescriptor)}
        values.update(changes)
        return cls(logical_name=logical_name, physical_name=physical_name or logical_name, **values)


@dataclass(frozen=True)
class ResolvedSchema:
    """Entity schema with config overrides merged in"""
    entity_name: str
    entity_prefix: str
    fields: Dict[str, ResolvedField]
    description: Optional[str] = None
    indexes: List[IndexConfig] = field(default_factory=list)
    primary_key: Optional[List[str]] = None

    @property
    def table_name(self) -> str:
        return f"{self.entity_prefix}{self.entity_name}"

    def physical_name(self, logical_name: str) -> str:
        return self.fields[logical_name].physical_name

    def physical_index(self) -> Dict[str, str]:
        """Map physical column name -> logical field name"""
        return {f.physical_name: name for name, f in self.fields.items()}
