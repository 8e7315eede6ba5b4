"""JSON payload shapes of the facets this package reads and writes.

Only the classification facet is modelled. Every other facet is carried as the
raw JSON object the store returned.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, cast

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from profilesync.domain.model import CLASSIFICATION_FACET, Classification

log = logging.getLogger(__name__)


class StorePayloadModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "Profile store %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class ClassificationPayload(StorePayloadModel):
    classification_level: int = Field(alias="classificationLevel")
    override_classification_level: int = Field(alias="overrideClassificationLevel")

    @classmethod
    def from_domain(cls, classification: Classification) -> ClassificationPayload:
        return cls(
            classificationLevel=classification.classification_level,
            overrideClassificationLevel=classification.override_classification_level,
        )

    def to_domain(self) -> Classification:
        return Classification(
            classification_level=self.classification_level,
            override_classification_level=self.override_classification_level,
        )


class FacetPayloadError(ValueError):
    """Raised when a stored facet payload cannot be decoded."""


def encode_facet(value: object) -> dict[str, Any]:
    if isinstance(value, Classification):
        return ClassificationPayload.from_domain(value).model_dump(by_alias=True)
    if isinstance(value, dict):
        return cast(dict[str, Any], value)
    raise TypeError(f"Unsupported facet value: {type(value).__name__}")


def decode_facet(name: str, payload: object) -> object:
    if name != CLASSIFICATION_FACET:
        return payload
    try:
        return ClassificationPayload.model_validate(payload).to_domain()
    except ValidationError as exc:
        raise FacetPayloadError(f"Invalid {name} facet payload: {exc}") from exc
