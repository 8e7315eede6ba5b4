"""SQLAlchemy-backed store contexts for the embedded profile store."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal
from uuid import uuid4

from sqlalchemy import create_engine
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from profilesync.adapters.sqlalchemy.mappings import create_all_tables
from profilesync.adapters.sqlalchemy.repositories import SqlAlchemyEntityRepository
from profilesync.config import get_database_config
from profilesync.domain.errors import StoreUnavailableError
from profilesync.domain.model import EntityHandle, IdentifierMapping, IdentifierType

if TYPE_CHECKING:
    from collections.abc import Iterator
    from collections.abc import Set as AbstractSet
    from types import TracebackType
    from uuid import UUID

    from sqlalchemy.engine import Engine

    from profilesync.domain.model import (
        Classification,
        EntityIdentifier,
        FacetTarget,
        RemoteEntity,
    )

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the embedded store is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "Embedded store not initialised. Call profilesync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a store context."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the engine, schema and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError("Embedded store already initialised. Pass force=True to reconfigure.")

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True
    )
    create_all_tables(resolved_engine)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        raise StoreUnavailableError(f"Embedded store failed during {operation}: {exc}") from exc


class SqlAlchemyStoreContext:
    """One session against the embedded store.

    Writes stay inside the session transaction until ``commit``. The read
    ``timeout`` is accepted for interface compatibility and not enforced.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory: sessionmaker[Session] = session_factory or _STATE.session_factory
        self._session: Session | None = None
        self._entities: SqlAlchemyEntityRepository | None = None

    def __enter__(self) -> SqlAlchemyStoreContext:
        self.session = self.session_factory()
        self._entities = SqlAlchemyEntityRepository(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            with _translate_errors("release"):
                if exc_type is not None:
                    self.rollback()
                self.session.close()
        finally:
            self._session = None
            self._entities = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Store context session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Store context session already initialised")
        self._session = session

    @property
    def entities(self) -> SqlAlchemyEntityRepository:
        if self._entities is None:
            raise StartupError("Store context session not initialised")
        return self._entities

    def get_by_identifier(
        self,
        source: str,
        identifier: str,
        *,
        facets: AbstractSet[str],
        timeout: float | None,
    ) -> RemoteEntity | None:
        _ = timeout
        with _translate_errors("read"):
            return self.entities.get_by_identifier(IdentifierMapping(source, identifier), facets)

    def get_by_id(
        self,
        entity_id: UUID,
        *,
        facets: AbstractSet[str],
        timeout: float | None,
    ) -> RemoteEntity | None:
        _ = timeout
        with _translate_errors("read"):
            return self.entities.get_by_id(entity_id, facets)

    def create_entity(self, identifier: EntityIdentifier) -> EntityHandle:
        handle = EntityHandle(id=uuid4(), identifier=identifier)
        with _translate_errors("write"):
            self.entities.add(handle)
        return handle

    def set_facet(self, target: FacetTarget, facet_name: str, value: Classification) -> None:
        with _translate_errors("write"):
            entity_id = (
                target.id
                if isinstance(target, EntityHandle)
                else self.entities.resolve_target(target)
            )
            self.entities.set_facet(entity_id, facet_name, value)

    def add_identifier(
        self,
        entity_id: UUID,
        mapping: IdentifierMapping,
        identifier_type: IdentifierType = IdentifierType.KNOWN,
    ) -> None:
        """Attach a further identifier to an existing entity."""

        with _translate_errors("write"):
            self.entities.add_identifier(entity_id, mapping, identifier_type)

    def mark_obsolete(self, entity_id: UUID, successor_id: UUID) -> None:
        """Record that ``entity_id`` was merged into ``successor_id``."""

        with _translate_errors("write"):
            self.entities.mark_obsolete(entity_id, successor_id)

    def commit(self) -> None:
        with _translate_errors("commit"):
            self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SqlAlchemyStoreContextFactory:
    """Hands out contexts bound to the engine configured through ``startup``."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory

    def create(self) -> SqlAlchemyStoreContext:
        return SqlAlchemyStoreContext(self._session_factory)


if TYPE_CHECKING:
    from profilesync.domain.ports import StoreContext, StoreContextFactory

    _context_check: StoreContext = SqlAlchemyStoreContext()
    _factory_check: StoreContextFactory = SqlAlchemyStoreContextFactory()
