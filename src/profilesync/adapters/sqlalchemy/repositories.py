"""Entity persistence for the embedded store."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from sqlalchemy import insert, select, update

from profilesync.adapters.facet_payloads import decode_facet, encode_facet
from profilesync.adapters.sqlalchemy.mappings import (
    entity_facet_table,
    entity_identifier_table,
    entity_table,
)
from profilesync.domain.model import EntityIdentifier, MergeInfo, RemoteEntity

if TYPE_CHECKING:
    from collections.abc import Set as AbstractSet
    from uuid import UUID

    from sqlalchemy.orm import Session

    from profilesync.domain.model import EntityHandle, IdentifierMapping, IdentifierType

log = logging.getLogger(__name__)

MAX_SUCCESSOR_HOPS: Final[int] = 16


class EntityNotFoundError(LookupError):
    """Raised when a write targets an entity the store does not know."""


class SqlAlchemyEntityRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_identifier(
        self, mapping: IdentifierMapping, facets: AbstractSet[str]
    ) -> RemoteEntity | None:
        entity_id = self._owner_of(mapping)
        if entity_id is None:
            return None
        return self.get_by_id(entity_id, facets)

    def get_by_id(self, entity_id: UUID, facets: AbstractSet[str]) -> RemoteEntity | None:
        row = self.session.execute(
            select(entity_table.c.id, entity_table.c.obsolete, entity_table.c.successor_id).where(
                entity_table.c.id == entity_id
            )
        ).one_or_none()
        if row is None:
            return None
        return RemoteEntity(
            id=row.id,
            identifiers=self._identifiers_of(row.id),
            facets=self._facets_of(row.id, facets),
            merge_info=MergeInfo(obsolete=row.obsolete, successor_id=row.successor_id),
        )

    def add(self, handle: EntityHandle) -> None:
        self.session.execute(insert(entity_table).values(id=handle.id, obsolete=False))
        identifier = handle.identifier
        self.session.execute(
            insert(entity_identifier_table).values(
                source=identifier.source,
                identifier=identifier.identifier,
                identifier_type=identifier.identifier_type,
                entity_id=handle.id,
            )
        )

    def add_identifier(
        self,
        entity_id: UUID,
        mapping: IdentifierMapping,
        identifier_type: IdentifierType,
    ) -> None:
        if not self.exists(entity_id):
            raise EntityNotFoundError(f"Entity {entity_id} not found")
        self.session.execute(
            insert(entity_identifier_table).values(
                source=mapping.source,
                identifier=mapping.identifier,
                identifier_type=identifier_type,
                entity_id=entity_id,
            )
        )

    def set_facet(self, entity_id: UUID, name: str, value: object) -> None:
        payload = encode_facet(value)
        now = datetime.now(tz=UTC)
        existing = self.session.execute(
            select(entity_facet_table.c.name)
            .where(entity_facet_table.c.entity_id == entity_id)
            .where(entity_facet_table.c.name == name)
        ).scalar_one_or_none()
        if existing is None:
            stmt = insert(entity_facet_table).values(
                entity_id=entity_id, name=name, payload=payload, updated_at=now
            )
        else:
            stmt = (
                update(entity_facet_table)
                .where(entity_facet_table.c.entity_id == entity_id)
                .where(entity_facet_table.c.name == name)
                .values(payload=payload, updated_at=now)
            )
        self.session.execute(stmt)

    def resolve_target(self, mapping: IdentifierMapping) -> UUID:
        """Return the live entity owning ``mapping``, following merges."""

        entity_id = self._owner_of(mapping)
        if entity_id is None:
            raise EntityNotFoundError(f"No entity for {mapping.source}:{mapping.identifier}")
        for _ in range(MAX_SUCCESSOR_HOPS):
            row = self.session.execute(
                select(entity_table.c.obsolete, entity_table.c.successor_id).where(
                    entity_table.c.id == entity_id
                )
            ).one()
            if not row.obsolete:
                return entity_id
            entity_id = row.successor_id
        raise EntityNotFoundError(
            f"Merge chain of {mapping.source}:{mapping.identifier} exceeds {MAX_SUCCESSOR_HOPS} hops"
        )

    def exists(self, entity_id: UUID) -> bool:
        stmt = select(entity_table.c.id).where(entity_table.c.id == entity_id)
        return self.session.execute(stmt).scalar_one_or_none() is not None

    def mark_obsolete(self, entity_id: UUID, successor_id: UUID) -> None:
        if entity_id == successor_id:
            raise ValueError("an entity cannot succeed itself")
        for required in (entity_id, successor_id):
            if not self.exists(required):
                raise EntityNotFoundError(f"Entity {required} not found")
        self.session.execute(
            update(entity_table)
            .where(entity_table.c.id == entity_id)
            .values(obsolete=True, successor_id=successor_id)
        )
        log.info("Marked entity %s obsolete, successor %s", entity_id, successor_id)

    def _owner_of(self, mapping: IdentifierMapping) -> UUID | None:
        stmt = (
            select(entity_identifier_table.c.entity_id)
            .where(entity_identifier_table.c.source == mapping.source)
            .where(entity_identifier_table.c.identifier == mapping.identifier)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def _identifiers_of(self, entity_id: UUID) -> tuple[EntityIdentifier, ...]:
        stmt = (
            select(
                entity_identifier_table.c.source,
                entity_identifier_table.c.identifier,
                entity_identifier_table.c.identifier_type,
            )
            .where(entity_identifier_table.c.entity_id == entity_id)
            .order_by(entity_identifier_table.c.source, entity_identifier_table.c.identifier)
        )
        return tuple(
            EntityIdentifier(source=source, identifier=identifier, identifier_type=identifier_type)
            for source, identifier, identifier_type in self.session.execute(stmt)
        )

    def _facets_of(self, entity_id: UUID, names: AbstractSet[str]) -> dict[str, object]:
        if not names:
            return {}
        stmt = (
            select(entity_facet_table.c.name, entity_facet_table.c.payload)
            .where(entity_facet_table.c.entity_id == entity_id)
            .where(entity_facet_table.c.name.in_(sorted(names)))
        )
        return {name: decode_facet(name, payload) for name, payload in self.session.execute(stmt)}
