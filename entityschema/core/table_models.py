from dataclasses import dataclass, field
from typing import List, Optional

from .enums import ReferentialAction


@dataclass
class ColumnReference:
    table: str
    column: str


@dataclass
class ColumnDefinition:
    """Dialect-specific column definition"""
    name: str
    type: str
    nullable: bool = True
    primary_key: bool = False
    unique: bool = False
    auto_increment: bool = False
    # Already rendered SQL expression, e.g. "'dark'", "TRUE", "NOW()"
    default_value: Optional[str] = None
    references: Optional[ColumnReference] = None
    unsigned: bool = False
    charset: Optional[str] = None
    collation: Optional[str] = None
    comment: Optional[str] = None
    auto_increment_start: Optional[int] = None


@dataclass
class IndexDefinition:
    name: str
    columns: List[str]
    unique: bool = False


@dataclass
class ForeignKeyDefinition:
    name: str
    columns: List[str]
    referenced_table: str
    referenced_columns: List[str]
    on_delete: Optional[ReferentialAction] = None
    on_update: Optional[ReferentialAction] = None


@dataclass
class TableDefinition:
    """Complete table definition for one entity and one dialect"""
    name: str
    columns: List[ColumnDefinition]
    primary_key: List[str] = field(default_factory=list)
    indexes: List[IndexDefinition] = field(default_factory=list)
    foreign_keys: List[ForeignKeyDefinition] = field(default_factory=list)
    comment: Optional[str] = None
    # Columns whose generated default is filled by the application, not the DDL
    deferred_defaults: List[str] = field(default_factory=list)

    def column(self, name: str) -> Optional[ColumnDefinition]:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    @property
    def column_names(self) -> List[str]:
        return [col.name for col in self.columns]
