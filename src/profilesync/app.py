"""Application orchestration entry points."""

from __future__ import annotations

from functools import cache
from logging import getLogger
from typing import TYPE_CHECKING

from profilesync.adapters.http import HttpStoreContextFactory
from profilesync.adapters.sqlalchemy import SqlAlchemyStoreContextFactory, is_started, startup
from profilesync.config import (
    get_facet_config,
    get_remote_store_config,
    get_save_config,
    get_store_backend,
)
from profilesync.domain.facets import FacetRegistry
from profilesync.domain.model import CLASSIFICATION_FACET, LocalVisitor, SaveOptions, SystemInfo
from profilesync.domain.resolution import IdentifierResolver
from profilesync.domain.saving import SaveCoordinator

if TYPE_CHECKING:
    from uuid import UUID

    from profilesync.config import SaveConfig, StoreBackend
    from profilesync.domain.model import RemoteEntity
    from profilesync.domain.ports import StoreContextFactory
    from profilesync.domain.resolution import Resolution

log = getLogger(__name__)


@cache
def get_facet_registry() -> FacetRegistry:
    """Process-wide facet registry, seeded once from configuration.

    The classification facet is always present so plain lookups report it too.
    """

    registry = FacetRegistry((CLASSIFICATION_FACET,))
    registry.register_from_config(get_facet_config())
    return registry


def build_context_factory(backend: StoreBackend | None = None) -> StoreContextFactory:
    effective_backend = backend or get_store_backend()
    if effective_backend == "http":
        config = get_remote_store_config()
        log.info("Using HTTP profile store at %s", config.base_url)
        return HttpStoreContextFactory(config=config)

    if not is_started():
        startup()
    log.info("Using embedded profile store")
    return SqlAlchemyStoreContextFactory()


def build_resolver(
    *,
    context_factory: StoreContextFactory | None = None,
    facet_registry: FacetRegistry | None = None,
    save_config: SaveConfig | None = None,
) -> IdentifierResolver:
    config = save_config or get_save_config()
    return IdentifierResolver(
        context_factory or build_context_factory(),
        facet_registry or get_facet_registry(),
        operation_timeout=config.operation_timeout_seconds,
    )


def build_save_coordinator(
    *,
    context_factory: StoreContextFactory | None = None,
    facet_registry: FacetRegistry | None = None,
    save_config: SaveConfig | None = None,
) -> SaveCoordinator:
    effective_factory = context_factory or build_context_factory()
    resolver = build_resolver(
        context_factory=effective_factory,
        facet_registry=facet_registry,
        save_config=save_config,
    )
    return SaveCoordinator(effective_factory, resolver)


def save_visitor(
    visitor: LocalVisitor,
    *,
    is_new: bool | None = None,
    coordinator: SaveCoordinator | None = None,
) -> bool:
    """Synchronise a visitor's classification with the profile store."""

    effective_coordinator = coordinator or build_save_coordinator()
    log.info("Saving visitor %s (is_new=%s)", visitor.id, is_new)
    return effective_coordinator.save(visitor, SaveOptions(is_new=is_new))


def save_classification(
    visitor_id: UUID,
    *,
    classification_level: int,
    override_classification_level: int,
    is_new: bool | None = None,
    coordinator: SaveCoordinator | None = None,
) -> bool:
    """Save a visitor known only by id and classification levels."""

    visitor = LocalVisitor(
        id=visitor_id,
        system=SystemInfo(
            classification_level=classification_level,
            override_classification_level=override_classification_level,
        ),
    )
    return save_visitor(visitor, is_new=is_new, coordinator=coordinator)


def resolve_visitor(
    visitor_id: UUID,
    *,
    resolver: IdentifierResolver | None = None,
) -> RemoteEntity | None:
    effective_resolver = resolver or build_resolver()
    return effective_resolver.resolve(visitor_id)


def trace_visitor(
    visitor_id: UUID,
    *,
    resolver: IdentifierResolver | None = None,
) -> Resolution:
    """Like ``resolve_visitor`` but also reports whether a merge was followed."""

    effective_resolver = resolver or build_resolver()
    return effective_resolver.resolve_with_trace(visitor_id)
