"""Embedded SQLAlchemy store adapter."""

from __future__ import annotations

from .mappings import (
    create_all_tables,
    entity_facet_table,
    entity_identifier_table,
    entity_table,
    metadata,
)
from .repositories import EntityNotFoundError, SqlAlchemyEntityRepository
from .unit_of_work import (
    SqlAlchemyStoreContext,
    SqlAlchemyStoreContextFactory,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "EntityNotFoundError",
    "SqlAlchemyEntityRepository",
    "SqlAlchemyStoreContext",
    "SqlAlchemyStoreContextFactory",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "entity_facet_table",
    "entity_identifier_table",
    "entity_table",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
]
