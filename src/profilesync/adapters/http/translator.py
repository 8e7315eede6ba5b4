"""Translate between profile store payloads and domain objects."""

from __future__ import annotations

from typing import TYPE_CHECKING

from profilesync.adapters.facet_payloads import decode_facet, encode_facet
from profilesync.domain.model import (
    EntityHandle,
    EntityIdentifier,
    MergeInfo,
    RemoteEntity,
)

from .schema import (
    CreateEntityOperation,
    EntityIdTarget,
    IdentifierPayload,
    IdentifierTarget,
    SetFacetOperation,
)

if TYPE_CHECKING:
    from collections.abc import Set as AbstractSet

    from profilesync.domain.model import FacetTarget

    from .schema import EntityPayload


def entity_from_payload(payload: EntityPayload, facets: AbstractSet[str]) -> RemoteEntity:
    """Build the domain entity, keeping only the facets that were asked for."""

    return RemoteEntity(
        id=payload.id,
        identifiers=tuple(
            EntityIdentifier(
                source=item.source,
                identifier=item.identifier,
                identifier_type=item.identifier_type,
            )
            for item in payload.identifiers
        ),
        facets={
            name: decode_facet(name, value)
            for name, value in payload.facets.items()
            if name in facets
        },
        merge_info=MergeInfo(
            obsolete=payload.merge_info.obsolete,
            successor_id=payload.merge_info.successor_id,
        ),
    )


def create_entity_operation(handle: EntityHandle) -> CreateEntityOperation:
    identifier = handle.identifier
    return CreateEntityOperation(
        id=handle.id,
        identifier=IdentifierPayload(
            source=identifier.source,
            identifier=identifier.identifier,
            identifierType=identifier.identifier_type,
        ),
    )


def set_facet_operation(target: FacetTarget, facet_name: str, value: object) -> SetFacetOperation:
    target_payload = (
        EntityIdTarget(id=target.id)
        if isinstance(target, EntityHandle)
        else IdentifierTarget(source=target.source, identifier=target.identifier)
    )
    return SetFacetOperation(target=target_payload, facet=facet_name, value=encode_facet(value))
