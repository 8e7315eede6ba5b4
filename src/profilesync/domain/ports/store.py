"""Ports for reading and writing the remote profile store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Set as AbstractSet
    from types import TracebackType
    from uuid import UUID

    from profilesync.domain.model import (
        Classification,
        EntityHandle,
        EntityIdentifier,
        FacetTarget,
        RemoteEntity,
    )


@runtime_checkable
class StoreContext(Protocol):
    """One scoped conversation with the store.

    Reads happen immediately; writes are pending until ``commit``. Leaving the
    ``with`` block always releases the context, and discards pending writes when an
    exception escapes. Adapters raise ``StoreUnavailableError`` whenever the store
    cannot be reached.
    """

    def __enter__(self) -> StoreContext: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def get_by_identifier(
        self,
        source: str,
        identifier: str,
        *,
        facets: AbstractSet[str],
        timeout: float | None,
    ) -> RemoteEntity | None: ...

    def get_by_id(
        self,
        entity_id: UUID,
        *,
        facets: AbstractSet[str],
        timeout: float | None,
    ) -> RemoteEntity | None: ...

    def create_entity(self, identifier: EntityIdentifier) -> EntityHandle: ...

    def set_facet(self, target: FacetTarget, facet_name: str, value: Classification) -> None: ...

    def commit(self) -> None: ...


@runtime_checkable
class StoreContextFactory(Protocol):
    """Creates store contexts; creation itself may raise ``StoreUnavailableError``."""

    def create(self) -> StoreContext: ...
