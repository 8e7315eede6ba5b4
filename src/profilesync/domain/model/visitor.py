"""Locally tracked visitor records, as handed over by the calling layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(slots=True)
class SystemInfo:
    classification_level: int = 0
    override_classification_level: int = 0


@dataclass(eq=False, kw_only=True)
class LocalVisitor:
    """A tracked visitor.

    ``remote_facets`` holds the facets cached from the last remote read of this
    visitor, keyed by facet name. ``None`` means the visitor was never loaded from
    the store, which is different from "loaded, but without that facet".
    """

    id: UUID
    system: SystemInfo
    remote_facets: dict[str, object] | None = None


@dataclass(frozen=True, slots=True)
class SaveOptions:
    """Save intent. ``is_new=None`` means the caller does not know."""

    is_new: bool | None = None
