from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from profilesync.adapters.sqlalchemy import (
    SqlAlchemyStoreContextFactory,
    create_all_tables,
    shutdown,
    startup,
)
from profilesync.domain.facets import FacetRegistry
from tests.helpers.profile_store import InMemoryProfileStore, RecordingStoreContextFactory

os.environ.setdefault("PROFILESYNC_DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "PROFILESYNC_FACETS",
        "PROFILESYNC_FACETS_FILE",
        "PROFILESYNC_OPERATION_TIMEOUT",
        "PROFILESYNC_STORE_URL",
        "PROFILESYNC_STORE_TIMEOUT",
        "PROFILESYNC_STORE_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # one shared connection so every session sees the same in-memory database
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def embedded_store(sqlite_engine: Engine) -> Iterator[SqlAlchemyStoreContextFactory]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield SqlAlchemyStoreContextFactory()
    finally:
        shutdown()


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def recording_factory(profile_store: InMemoryProfileStore) -> RecordingStoreContextFactory:
    return RecordingStoreContextFactory(profile_store)


@pytest.fixture
def facet_registry() -> FacetRegistry:
    return FacetRegistry()
