"""Remote profile graph entities as seen through the store boundary."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import IdentifierType

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(slots=True)
class Classification:
    """Classification facet. Mutable: updated in place before being written back."""

    classification_level: int = 0
    override_classification_level: int = 0

    def matches(self, classification_level: int, override_classification_level: int) -> bool:
        return (
            self.classification_level == classification_level
            and self.override_classification_level == override_classification_level
        )


@dataclass(frozen=True, slots=True)
class IdentifierMapping:
    """External key ``(source, identifier)`` used to look an entity up."""

    source: str
    identifier: str


@dataclass(frozen=True, slots=True)
class EntityIdentifier:
    source: str
    identifier: str
    identifier_type: IdentifierType = IdentifierType.ANONYMOUS

    @property
    def mapping(self) -> IdentifierMapping:
        return IdentifierMapping(self.source, self.identifier)


@dataclass(frozen=True, slots=True)
class MergeInfo:
    obsolete: bool = False
    successor_id: UUID | None = None

    def __post_init__(self) -> None:
        if self.obsolete and self.successor_id is None:
            raise ValueError("obsolete entities must carry a successor id")


@dataclass(eq=False, kw_only=True)
class RemoteEntity:
    id: UUID
    identifiers: tuple[EntityIdentifier, ...] = ()
    facets: dict[str, object] = field(default_factory=dict[str, object])
    merge_info: MergeInfo = field(default_factory=MergeInfo)

    @property
    def obsolete(self) -> bool:
        return self.merge_info.obsolete

    @property
    def successor_id(self) -> UUID | None:
        return self.merge_info.successor_id

    def get_facet[TFacet](self, name: str, facet_type: type[TFacet]) -> TFacet | None:
        """Return the named facet if it was loaded and has the expected type."""

        value = self.facets.get(name)
        return value if isinstance(value, facet_type) else None


@dataclass(frozen=True, slots=True)
class EntityHandle:
    """Reference to an entity created in the current store context."""

    id: UUID
    identifier: EntityIdentifier


type FacetTarget = EntityHandle | IdentifierMapping
