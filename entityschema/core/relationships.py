from dataclasses import replace
from typing import Optional, Union

from .enums import FieldType, RelationshipKind, ReferentialAction
from .schema_models import DialectHints, FieldDescriptor, JoinTableConfig, RelationshipRef


def ref(target_entity: str, target_field: str = "id",
        kind: Union[RelationshipKind, str] = RelationshipKind.MANY_TO_ONE,
        foreign_key: Optional[str] = None,
        on_delete: Optional[ReferentialAction] = None,
        on_update: Optional[ReferentialAction] = None,
        field_type: FieldType = FieldType.UUID,
        required: bool = False,
        indexed: bool = False,
        description: Optional[str] = None) -> FieldDescriptor:
    """
    Field that points at a field of another entity.

    The field itself is the foreign key column unless foreign_key names
    another field of the same entity.
    """
    relationship = RelationshipRef(
        target_entity=target_entity,
        target_field=target_field,
        kind=kind,
        foreign_key=foreign_key,
        on_delete=on_delete,
        on_update=on_update,
    )
    return FieldDescriptor(
        field_type=field_type,
        required=required,
        relationship=relationship,
        hints=DialectHints(indexed=indexed),
        description=description,
    )


def many_to_one(target_entity: str, **kwargs) -> FieldDescriptor:
    return ref(target_entity, kind=RelationshipKind.MANY_TO_ONE, **kwargs)


def one_to_one(target_entity: str, unique: bool = True, **kwargs) -> FieldDescriptor:
    descriptor = ref(target_entity, kind=RelationshipKind.ONE_TO_ONE, **kwargs)
    if not unique:
        return descriptor
    # one row on each side: the owning column is unique
    return replace(descriptor, hints=replace(descriptor.hints, unique=True))


def one_to_many(target_entity: str, **kwargs) -> FieldDescriptor:
    return ref(target_entity, kind=RelationshipKind.ONE_TO_MANY, **kwargs)


def many_to_many(target_entity: str, join_table: Union[str, JoinTableConfig],
                 target_field: str = "id", description: Optional[str] = None) -> FieldDescriptor:
    """Join-table relationship; produces no foreign key on the owning table"""
    if isinstance(join_table, str):
        join_table = JoinTableConfig(name=join_table)
    relationship = RelationshipRef(
        target_entity=target_entity,
        target_field=target_field,
        kind=RelationshipKind.MANY_TO_MANY,
        join_table=join_table,
    )
    return FieldDescriptor(field_type=FieldType.ARRAY, relationship=relationship, description=description)
