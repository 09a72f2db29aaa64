"""Pytest configuration and fixtures for entityschema tests."""

import sys
from pathlib import Path
import logging
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from entityschema.adapters.mysql_adapter import MySQLAdapter
from entityschema.adapters.postgres_adapter import PostgresAdapter
from entityschema.adapters.registry import create_default_registry
from entityschema.adapters.sqlite_adapter import SQLiteAdapter
from entityschema.config.resolver import resolve
from entityschema.core.enums import FieldType, ReferentialAction
from entityschema.core.fields import (
    boolean_field, created_at_field, incremental_id_field, json_field, string_field, uuid_field
)
from entityschema.core.relationships import many_to_one
from entityschema.core.schema_models import EntitySchema, FieldDescriptor

# Configure logging
logging.basicConfig(level=logging.INFO)


@pytest.fixture
def sqlite_adapter():
    return SQLiteAdapter()


@pytest.fixture
def mysql_adapter():
    return MySQLAdapter()


@pytest.fixture
def postgres_adapter():
    return PostgresAdapter()


@pytest.fixture(params=['sqlite', 'mysql', 'postgres'])
def any_adapter(request):
    """Each registered adapter in turn"""
    return create_default_registry().get(request.param)


@pytest.fixture
def user_entity():
    """user{id: uuid pk, username: unique indexed string(50), active: boolean default true}"""
    return EntitySchema(
        name='user',
        fields={
            'id': FieldDescriptor(field_type=FieldType.UUID, primary_key=True, required=True),
            'username': string_field(required=True, max_size=50, unique=True, indexed=True),
            'active': boolean_field(default=True),
        },
    )


@pytest.fixture
def user_schema(user_entity):
    return resolve(user_entity)


@pytest.fixture
def product_schema():
    """product{id: incremental id starting at 1000}"""
    return resolve(EntitySchema(
        name='product',
        fields={
            'id': incremental_id_field(start_from=1000),
            'name': string_field(required=True, max_size=120),
        },
    ))


@pytest.fixture
def post_entity():
    return EntitySchema(
        name='post',
        prefix='blog_',
        description='Blog posts',
        fields={
            'id': uuid_field(),
            'title': string_field(required=True, max_size=200, description='Post title'),
            'authorId': many_to_one('user', on_delete=ReferentialAction.CASCADE, required=True),
            'metadata': json_field(default={'draft': True}),
            'createdAt': created_at_field(),
        },
    )


@pytest.fixture
def json_field_schema():
    return resolve(EntitySchema(
        name='prefs',
        fields={'settings': json_field()},
    ))
