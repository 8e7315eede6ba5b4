"""Create-or-update of a visitor's classification in the remote store."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from profilesync.domain.errors import InvalidArgumentError
from profilesync.domain.model import (
    CLASSIFICATION_FACET,
    Classification,
    tracker_identifier,
    tracker_mapping,
)
from profilesync.domain.store_access import execute_with_exception_handling

if TYPE_CHECKING:
    from profilesync.domain.model import LocalVisitor, RemoteEntity, SaveOptions, SystemInfo
    from profilesync.domain.ports import StoreContext, StoreContextFactory
    from profilesync.domain.resolution import IdentifierResolver

log = logging.getLogger(__name__)


def copy_system_data(system: SystemInfo, classification: Classification) -> None:
    if system is None:
        raise InvalidArgumentError("system info is required")
    if classification is None:
        raise InvalidArgumentError("classification is required")
    classification.classification_level = system.classification_level
    classification.override_classification_level = system.override_classification_level


def cached_classification(visitor: LocalVisitor) -> Classification | None:
    """Classification cached on the visitor from its last remote read, if any."""

    if not visitor.remote_facets:
        return None
    value = visitor.remote_facets.get(CLASSIFICATION_FACET)
    return value if isinstance(value, Classification) else None


class SaveCoordinator:
    """Push a visitor's classification to the remote store.

    Each ``save`` runs in exactly one store context, acquired from the injected
    factory and released on every exit path. Store outages surface as
    ``RemoteUnavailableError``; nothing is retried here.

    Concurrent saves of the same visitor are not serialised: the store's own
    commit semantics decide the outcome.
    """

    def __init__(
        self,
        context_factory: StoreContextFactory,
        resolver: IdentifierResolver,
    ) -> None:
        self._context_factory = context_factory
        self._resolver = resolver
        # the fallback read needs the live classification
        resolver.facets.register(CLASSIFICATION_FACET)

    def save(self, visitor: LocalVisitor, options: SaveOptions) -> bool:
        if visitor is None:
            raise InvalidArgumentError("visitor is required")
        if options is None:
            raise InvalidArgumentError("save options are required")
        if visitor.system is None:
            raise InvalidArgumentError(f"visitor {visitor.id} has no system info")
        tracker_mapping(visitor.id)  # rejects malformed ids before touching the store

        return execute_with_exception_handling(
            self._context_factory,
            lambda context: self._save_in(context, visitor, options),
        )

    def _save_in(self, context: StoreContext, visitor: LocalVisitor, options: SaveOptions) -> bool:
        is_new = options.is_new
        resolved: RemoteEntity | None = None
        if is_new is None:
            resolved = self._resolver.resolve_in(context, visitor.id)
            is_new = resolved is None

        if is_new:
            self._create(context, visitor)
        else:
            self._update(context, visitor, resolved)
        return True

    def _create(self, context: StoreContext, visitor: LocalVisitor) -> None:
        handle = context.create_entity(tracker_identifier(visitor.id))

        classification = Classification()
        copy_system_data(visitor.system, classification)
        context.set_facet(handle, CLASSIFICATION_FACET, classification)

        context.commit()
        log.info(
            "Created entity %s for visitor %s (classification=%s, override=%s)",
            handle.id,
            visitor.id,
            classification.classification_level,
            classification.override_classification_level,
        )

    def _update(
        self, context: StoreContext, visitor: LocalVisitor, resolved: RemoteEntity | None
    ) -> None:
        system = visitor.system
        levels = (system.classification_level, system.override_classification_level)

        classification = cached_classification(visitor)
        if classification is not None and classification.matches(*levels):
            log.debug("Cached classification of visitor %s is current", visitor.id)
            return

        if classification is None:
            classification = self._fetch_classification(context, visitor, resolved)
            if classification is not None and classification.matches(*levels):
                log.debug("Remote classification of visitor %s is current", visitor.id)
                return

        # never mutate the caller's cached facet
        classification = (
            replace(classification) if classification is not None else Classification()
        )
        copy_system_data(system, classification)
        context.set_facet(tracker_mapping(visitor.id), CLASSIFICATION_FACET, classification)

        context.commit()
        log.info(
            "Updated classification of visitor %s (classification=%s, override=%s)",
            visitor.id,
            classification.classification_level,
            classification.override_classification_level,
        )

    def _fetch_classification(
        self, context: StoreContext, visitor: LocalVisitor, resolved: RemoteEntity | None
    ) -> Classification | None:
        entity = resolved
        if entity is None:
            entity = self._resolver.resolve_in(context, visitor.id)
        if entity is None:
            log.debug("Visitor %s has no remote entity to read from", visitor.id)
            return None
        return entity.get_facet(CLASSIFICATION_FACET, Classification)
