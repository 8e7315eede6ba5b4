"""Public domain model surface."""

from __future__ import annotations

from profilesync.domain.model.enums import CLASSIFICATION_FACET, TRACKER_SOURCE, IdentifierType
from profilesync.domain.model.identifiers import (
    to_canonical_identifier,
    tracker_identifier,
    tracker_mapping,
)
from profilesync.domain.model.remote import (
    Classification,
    EntityHandle,
    EntityIdentifier,
    FacetTarget,
    IdentifierMapping,
    MergeInfo,
    RemoteEntity,
)
from profilesync.domain.model.visitor import LocalVisitor, SaveOptions, SystemInfo

__all__ = [  # noqa: RUF022
    # constants
    "CLASSIFICATION_FACET",
    "TRACKER_SOURCE",
    "IdentifierType",
    # identifiers
    "to_canonical_identifier",
    "tracker_identifier",
    "tracker_mapping",
    # remote
    "Classification",
    "EntityHandle",
    "EntityIdentifier",
    "FacetTarget",
    "IdentifierMapping",
    "MergeInfo",
    "RemoteEntity",
    # local
    "LocalVisitor",
    "SaveOptions",
    "SystemInfo",
]
