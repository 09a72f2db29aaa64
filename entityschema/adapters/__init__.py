from .base_adapter import DatabaseAdapter
from .mysql_adapter import MySQLAdapter
from .postgres_adapter import PostgresAdapter
from .sqlite_adapter import SQLiteAdapter
from .registry import (
    AdapterRegistry, create_default_registry, get_adapter, get_adapters, get_default_registry, register_adapter
)

__all__ = [
    'DatabaseAdapter',
    'SQLiteAdapter',
    'MySQLAdapter',
    'PostgresAdapter',
    'AdapterRegistry',
    'create_default_registry',
    'get_default_registry',
    'get_adapter',
    'get_adapters',
    'register_adapter',
]
