from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..core.schema_models import ResolvedField, ResolvedSchema
from ..core.table_models import ColumnDefinition, ColumnReference, TableDefinition


class DatabaseAdapter(ABC):
    """
    Contract every SQL dialect implements.

    Adapters share behavior by calling the helpers in transforms and
    sql_utils rather than through a common base implementation.
    """

    #: Registry key, e.g. "sqlite"
    name: str = ""

    @abstractmethod
    def map_field_to_column(self, field: ResolvedField) -> ColumnDefinition:
        """Map one resolved field to a dialect column"""
        pass

    @abstractmethod
    def generate_table_definition(
        self,
        schema: ResolvedSchema,
        catalog: Optional[Dict[str, ResolvedSchema]] = None
    ) -> TableDefinition:
        """
        Build the full table definition for a resolved schema.

        Args:
            schema: Resolved entity schema
            catalog: Optional resolved schemas of related entities, keyed by
                base entity name, used to validate and name foreign key targets
        """
        pass

    @abstractmethod
    def generate_create_table_sql(self, table: TableDefinition) -> str:
        """Render CREATE TABLE plus any follow-up statements"""
        pass

    @abstractmethod
    def render_default(self, field: ResolvedField) -> Optional[str]:
        """SQL default expression for a field, or None when no DDL default applies"""
        pass

    @abstractmethod
    def to_database(self, value: Any, field: ResolvedField) -> Any:
        pass

    @abstractmethod
    def from_database(self, value: Any, field: ResolvedField) -> Any:
        pass


def column_from_field(field: ResolvedField, column_type: str, default_value: Optional[str],
                      auto_increment: bool = False, **extras) -> ColumnDefinition:
    """Dialect-independent column attributes; adapters supply the type and default"""
    references = None
    relationship = field.relationship
    if (relationship is not None and relationship.kind.owns_foreign_key
            and relationship.foreign_key in (None, field.logical_name)):
        references = ColumnReference(table=relationship.target_entity, column=relationship.target_field)

    return ColumnDefinition(
        name=field.physical_name,
        type=column_type,
        nullable=not (field.required or auto_increment),
        primary_key=field.primary_key,
        unique=field.hints.unique,
        auto_increment=auto_increment,
        default_value=default_value,
        references=references,
        comment=field.description,
        auto_increment_start=field.hints.increment_start if auto_increment else None,
        **extras
    )
