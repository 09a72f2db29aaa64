"""
Dialect name -> adapter lookup.

A registry is populated at startup and may be frozen; after freeze() it
is read-only and safe to share between threads without further locking.
"""
import logging
import threading
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from ..core.enums import normalize_dialect
from ..core.exceptions import AdapterNotFoundError, RegistryFrozenError
from .base_adapter import DatabaseAdapter


class AdapterRegistry:
    """Thread-safe registry of database adapters"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._adapters: Dict[str, DatabaseAdapter] = {}
        self._lock = threading.RLock()
        self._frozen = False
        self.logger = logger or logging.getLogger(__name__)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, adapter: DatabaseAdapter, name: Optional[str] = None) -> None:
        """Register an adapter under its own name, or under `name`"""
        key = normalize_dialect(name or adapter.name)
        if not key:
            raise ValueError(f"Adapter {adapter.__class__.__name__} has no dialect name")
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(f"Cannot register adapter '{key}': registry is frozen")
            if key in self._adapters:
                self.logger.info(f"Replacing adapter for dialect '{key}'")
            self._adapters[key] = adapter
            self.logger.debug(f"Registered adapter {adapter.__class__.__name__} as '{key}'")

    def get(self, dialect: str) -> DatabaseAdapter:
        key = normalize_dialect(dialect)
        with self._lock:
            adapter = self._adapters.get(key)
        if adapter is None:
            raise AdapterNotFoundError(str(dialect))
        return adapter

    def list(self) -> Mapping[str, DatabaseAdapter]:
        """Read-only snapshot of registered adapters"""
        with self._lock:
            return MappingProxyType(dict(self._adapters))

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    def __contains__(self, dialect: str) -> bool:
        with self._lock:
            return normalize_dialect(dialect) in self._adapters


def create_default_registry(freeze: bool = False) -> AdapterRegistry:
    """Registry pre-populated with the SQLite, MySQL and PostgreSQL adapters"""
    from .mysql_adapter import MySQLAdapter
    from .postgres_adapter import PostgresAdapter
    from .sqlite_adapter import SQLiteAdapter

    registry = AdapterRegistry()
    registry.register(SQLiteAdapter())
    registry.register(MySQLAdapter())
    registry.register(PostgresAdapter())
    if freeze:
        registry.freeze()
    return registry


_default_registry = create_default_registry()


def get_default_registry() -> AdapterRegistry:
    return _default_registry


def get_adapter(dialect: str) -> DatabaseAdapter:
    return _default_registry.get(dialect)


def register_adapter(adapter: DatabaseAdapter, name: Optional[str] = None) -> None:
    _default_registry.register(adapter, name)


def get_adapters() -> Mapping[str, DatabaseAdapter]:
    return _default_registry.list()
