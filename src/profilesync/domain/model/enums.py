"""Domain enums and well-known names."""

from __future__ import annotations

from enum import StrEnum
from typing import Final

TRACKER_SOURCE: Final[str] = "local-tracker"
CLASSIFICATION_FACET: Final[str] = "Classification"


class IdentifierType(StrEnum):
    ANONYMOUS = "anonymous"
    KNOWN = "known"
