"""Map local visitor ids onto canonical remote entities."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from profilesync.domain.model import tracker_mapping
from profilesync.domain.store_access import execute_with_exception_handling

if TYPE_CHECKING:
    from uuid import UUID

    from profilesync.domain.facets import FacetRegistry
    from profilesync.domain.model import IdentifierMapping, RemoteEntity
    from profilesync.domain.ports import StoreContext, StoreContextFactory

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Resolution:
    """What a lookup returned, and whether it went through a merge to get there."""

    entity: RemoteEntity | None
    followed_successor: bool = False


class IdentifierResolver:
    """Look up the remote entity tracking a local visitor.

    Lookups go through the ``local-tracker`` identifier and request the facets
    registered at the time of the call. An entity marked obsolete is replaced by
    its successor. Only one hop is followed: a successor that is itself obsolete is
    returned as is, with a warning.
    """

    def __init__(
        self,
        context_factory: StoreContextFactory,
        facets: FacetRegistry,
        *,
        operation_timeout: float | None = None,
    ) -> None:
        self._context_factory = context_factory
        self._facets = facets
        self._operation_timeout = operation_timeout

    @property
    def facets(self) -> FacetRegistry:
        return self._facets

    def resolve(self, visitor_id: UUID) -> RemoteEntity | None:
        """Resolve ``visitor_id`` in a context of its own."""

        return self.resolve_with_trace(visitor_id).entity

    def resolve_with_trace(self, visitor_id: UUID) -> Resolution:
        mapping = tracker_mapping(visitor_id)
        return execute_with_exception_handling(
            self._context_factory,
            lambda context: self._lookup(context, mapping),
        )

    def resolve_in(self, context: StoreContext, visitor_id: UUID) -> RemoteEntity | None:
        """Resolve ``visitor_id`` using an already acquired context."""

        return self.get_by_identifier(context, tracker_mapping(visitor_id))

    def get_by_identifier(
        self, context: StoreContext, mapping: IdentifierMapping
    ) -> RemoteEntity | None:
        return self._lookup(context, mapping).entity

    def _lookup(self, context: StoreContext, mapping: IdentifierMapping) -> Resolution:
        facets = self._facets.snapshot()
        entity = context.get_by_identifier(
            mapping.source,
            mapping.identifier,
            facets=facets,
            timeout=self._operation_timeout,
        )
        if entity is None:
            log.debug("No remote entity for %s:%s", mapping.source, mapping.identifier)
            return Resolution(None)
        if not entity.obsolete or entity.successor_id is None:
            return Resolution(entity)

        log.debug("Entity %s is obsolete, following successor %s", entity.id, entity.successor_id)
        successor = context.get_by_id(
            entity.successor_id,
            facets=facets,
            timeout=self._operation_timeout,
        )
        if successor is None:
            log.warning(
                "Successor %s of obsolete entity %s was not found", entity.successor_id, entity.id
            )
        elif successor.obsolete:
            # TODO decide whether to walk longer merge chains once the store confirms they exist
            log.warning(
                "Successor %s of %s is itself obsolete; only one merge hop is followed",
                successor.id,
                entity.id,
            )
        return Resolution(successor, followed_successor=True)
