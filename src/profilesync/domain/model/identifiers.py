"""Canonical encoding of local visitor ids into external keys."""

from __future__ import annotations

from uuid import UUID

from profilesync.domain.errors import InvalidArgumentError

from .enums import TRACKER_SOURCE, IdentifierType
from .remote import EntityIdentifier, IdentifierMapping


def to_canonical_identifier(visitor_id: UUID) -> str:
    """Lowercase hex of the raw id bytes, no separators."""

    if not isinstance(visitor_id, UUID):
        raise InvalidArgumentError(f"visitor id must be a UUID, got {visitor_id!r}")
    return visitor_id.hex


def tracker_mapping(visitor_id: UUID) -> IdentifierMapping:
    return IdentifierMapping(TRACKER_SOURCE, to_canonical_identifier(visitor_id))


def tracker_identifier(visitor_id: UUID) -> EntityIdentifier:
    return EntityIdentifier(
        source=TRACKER_SOURCE,
        identifier=to_canonical_identifier(visitor_id),
        identifier_type=IdentifierType.ANONYMOUS,
    )
