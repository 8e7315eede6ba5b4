"""Profile store wire schemas."""

from __future__ import annotations

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from profilesync.adapters.facet_payloads import StorePayloadModel
from profilesync.domain.model import IdentifierType


class IdentifierPayload(StorePayloadModel):
    source: str
    identifier: str
    identifier_type: IdentifierType = Field(
        default=IdentifierType.ANONYMOUS, alias="identifierType"
    )


class MergeInfoPayload(StorePayloadModel):
    obsolete: bool = False
    successor_id: UUID | None = Field(default=None, alias="successorId")

    @model_validator(mode="after")
    def _require_successor(self) -> MergeInfoPayload:
        if self.obsolete and self.successor_id is None:
            raise ValueError("obsolete entities must carry a successorId")
        return self


class EntityPayload(StorePayloadModel):
    id: UUID
    identifiers: list[IdentifierPayload] = Field(default_factory=list[IdentifierPayload])
    facets: dict[str, Any] = Field(default_factory=dict[str, Any])
    merge_info: MergeInfoPayload = Field(default_factory=MergeInfoPayload, alias="mergeInfo")


class _RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class EntityIdTarget(_RequestModel):
    id: UUID


class IdentifierTarget(_RequestModel):
    source: str
    identifier: str


class CreateEntityOperation(_RequestModel):
    op: Literal["createEntity"] = "createEntity"
    id: UUID
    identifier: IdentifierPayload


class SetFacetOperation(_RequestModel):
    op: Literal["setFacet"] = "setFacet"
    target: EntityIdTarget | IdentifierTarget
    facet: str
    value: dict[str, Any]


class BatchRequest(_RequestModel):
    operations: list[CreateEntityOperation | SetFacetOperation]
